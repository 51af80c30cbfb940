"""Custom exceptions for AutoSplit."""


class AutoSplitError(Exception):
    """Base exception for all AutoSplit errors."""

    pass


class ConfigurationError(AutoSplitError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidAmountError(AutoSplitError):
    """Raised when a monetary amount is negative or otherwise unusable."""

    pass


class BalanceIntegrityError(AutoSplitError):
    """Raised when balances handed to the transfer planner don't sum to zero."""

    def __init__(self, stranded: int, message: str | None = None):
        self.stranded = stranded
        super().__init__(
            message
            or f"Balances do not sum to zero: {stranded} minor units left unmatched"
        )


class SplitValidationError(AutoSplitError):
    """Raised when a split configuration can't be turned into split lines."""

    pass


class NotFoundError(AutoSplitError):
    """Base class for missing-record errors."""

    pass


class TripNotFoundError(NotFoundError):
    """Raised when a trip doesn't exist."""

    pass


class MemberNotFoundError(NotFoundError):
    """Raised when a user is not a member of the trip."""

    pass


class TransactionNotFoundError(NotFoundError):
    """Raised when a transaction doesn't exist or was deleted."""

    pass


class SettlementNotFoundError(NotFoundError):
    """Raised when a recorded settlement doesn't exist."""

    pass


class SettlementAlreadyCompletedError(AutoSplitError):
    """Raised when confirming a settlement that was already completed."""

    def __init__(self, settlement_id: int, message: str | None = None):
        self.settlement_id = settlement_id
        super().__init__(
            message or f"Settlement {settlement_id} has already been completed"
        )


class PermissionDeniedError(AutoSplitError):
    """Raised when a user acts on a settlement they are not party to."""

    pass
