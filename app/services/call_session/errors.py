"""Call lifecycle errors."""


class CallLifecycleError(Exception):
    """Base class for call lifecycle failures."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CallLifecycleError):
    """A required field is missing or malformed."""

    kind = "validation"


class NotFoundError(CallLifecycleError):
    """The referenced conversation does not exist."""

    kind = "not_found"


class StateError(CallLifecycleError):
    """The session is not in the state the operation requires."""

    kind = "state"
