"""Exception types raised by the asset staker and its asset ledger."""


class AssetStakerError(Exception):
    """Base class. An operation that raises leaves every state unchanged."""


class AuthorizationError(AssetStakerError):
    """An administrator-only call was made by another sender."""


class InvalidStateError(AssetStakerError):
    """The application is not in a state that allows the call."""


class InsufficientFundsError(AssetStakerError):
    """The requested amount is not available."""


class InvalidParameterError(AssetStakerError):
    """An argument or an accompanying transaction is malformed."""


class AssetTransferError(AssetStakerError):
    """The asset ledger rejected a transfer."""


class ClockError(AssetStakerError):
    """The block clock was moved backwards."""
