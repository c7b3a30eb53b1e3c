"""Domain-specific exceptions"""

from typing import Iterable


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidDateFormat(DomainException, ValueError):
    """Date text is not a valid dd/mm/yyyy or ISO calendar date"""

    pass


class InvalidAmount(DomainException, ValueError):
    """Amount is non-positive or non-numeric"""

    pass


class InvalidInstallmentCount(DomainException, ValueError):
    """Installment count is outside the allowed range"""

    pass


class IncompleteSchedule(DomainException):
    """Custom schedule has entries without due date or with a non-positive amount"""

    def __init__(self, message: str, installment_numbers: Iterable[int] = ()):
        super().__init__(message)
        self.installment_numbers = list(installment_numbers)


class AmountMismatch(DomainException):
    """Custom schedule amounts do not add up to the service total"""

    def __init__(self, expected_cents: int, actual_cents: int):
        super().__init__(
            f"Installments total {actual_cents} cents but the service amount is {expected_cents} cents"
        )
        self.expected_cents = expected_cents
        self.actual_cents = actual_cents


class NotFound(DomainException):
    """Client, service or installment is absent from the store"""

    pass


class InstallmentNotFound(NotFound):
    """Installment id is not part of the loaded data"""

    pass


class InstallmentAlreadyPaid(DomainException):
    """Installment already carries a payment timestamp"""

    pass


class StoreAPIError(DomainException):
    """Billing store returned an error or is unavailable"""

    pass
