"""Error types raised by the game engine and services.

Every business-rule failure carries a stable ``code`` for the client and the
HTTP status the API layer should answer with.
"""


class TerraMineError(Exception):
    """Base exception for TerraMine."""

    code = "error"
    status_code = 400
    message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class InvalidCoordinates(TerraMineError, ValueError):
    """Raised when a latitude/longitude pair is non-finite or off the globe."""

    code = "invalid_coordinates"
    status_code = 422
    message = "Invalid coordinates"


class InvalidCellId(TerraMineError, ValueError):
    """Raised when a cell key cannot be parsed."""

    code = "invalid_cell_id"
    status_code = 422
    message = "Invalid cell id"


class GameError(TerraMineError):
    """A business rule rejected the request."""


class AccountNotFound(GameError):
    code = "account_not_found"
    status_code = 404
    message = "Account not found"


class AccountExists(GameError):
    code = "account_exists"
    status_code = 409
    message = "Account already exists"


class CellNotFound(GameError):
    code = "cell_not_found"
    status_code = 404
    message = "Property not found"


class AlreadyOwned(GameError):
    code = "already_owned"
    status_code = 409
    message = "This property is already owned"


class TooFar(GameError):
    code = "too_far"
    status_code = 403
    message = "You are too far from this property"


class InsufficientBalance(GameError):
    code = "insufficient_balance"
    status_code = 402
    message = "Not enough TB"


class NotOwnedByOther(GameError):
    code = "not_owned"
    status_code = 409
    message = "This property is not owned yet"


class SelfOwned(GameError):
    code = "self_owned"
    status_code = 409
    message = "You cannot check in to your own property"


class NotPropertyOwner(GameError):
    code = "not_property_owner"
    status_code = 403
    message = "Only the owner can change this property"


class AlreadyCheckedInToday(GameError):
    code = "already_checked_in_today"
    status_code = 409
    message = "You can only check in once per day"


class NoFreeGrantsAvailable(GameError):
    code = "no_free_boosts"
    status_code = 409
    message = "No free boosts remaining. Watch an ad or wait for reset."


class PaidGrantQuotaExhausted(GameError):
    code = "paid_boosts_exhausted"
    status_code = 409
    message = "No ad boosts remaining today"


class BoostCeilingReached(GameError):
    code = "boost_ceiling_reached"
    status_code = 409
    message = "Maximum boost time reached"


class LocationUnavailable(GameError):
    code = "location_unavailable"
    status_code = 409
    message = "Unable to get your current location"


class PhotoRejected(GameError):
    code = "photo_rejected"
    status_code = 413
    message = "Photo could not be stored"
