"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidTenderAmountError(DomainException):
    """Tender amount is non-positive or exceeds the remaining balance"""

    pass


class AlreadyPaidError(DomainException):
    """Nothing left to pay on this checkout"""

    pass


class TenderNotFoundError(DomainException):
    """No tender entry with the given identifier"""

    pass


class OutstandingBalanceError(DomainException):
    """Sale submitted while part of the total is still unpaid"""

    pass


class InsufficientLoyaltyPointsError(DomainException):
    """Customer is redeeming more points than their balance"""

    pass


class EmptyCartError(DomainException):
    pass


class OutOfStockError(DomainException):
    """Product has no stock at all"""

    pass


class InsufficientStockError(DomainException):
    """Requested quantity exceeds available stock"""

    pass


class NotFoundError(DomainException):
    """Referenced company, customer, product or sale does not exist"""

    pass
