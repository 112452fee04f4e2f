class GatewayError(Exception):
    """Base class for failures talking to the question/player store."""


class FetchError(GatewayError):
    pass


class NotFoundError(GatewayError):
    pass


class UpdateError(GatewayError):
    pass


class InvalidTransition(ValueError):
    """The requested action is not available in the current phase."""
