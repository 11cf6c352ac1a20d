"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidTermsError(DomainException):
    """Loan terms are malformed (non-positive principal/term, rate out of range)"""

    pass


class InvalidFactorsError(DomainException):
    """Risk inputs are malformed (negative farm size, amount or revenue)"""

    pass


class InstallmentNotFoundError(DomainException):
    """No installment with the requested sequence exists in the schedule"""

    pass


class InvalidStatusTransitionError(DomainException):
    """Requested status change is not allowed (paid is terminal)"""

    pass


class ScheduleExistsError(DomainException):
    """A repayment schedule is already stored for this loan"""

    pass


class ScheduleNotFoundError(DomainException):
    """No repayment schedule is stored for this loan"""

    pass


class NotificationDeliveryError(DomainException):
    """Notification webhook failed after all retries"""

    pass
