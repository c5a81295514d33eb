"""
Error taxonomy for Geography 3-Mark Buddy.

Everything the UI may show to a student derives from GeoBuddyError, so a
single except clause at the UI boundary is enough to keep the session alive.
"""


class GeoBuddyError(Exception):
    """Base class for all application errors."""


class ConfigurationError(GeoBuddyError):
    """Missing or malformed credential / configuration. The user must fix the environment."""


class GenerationError(GeoBuddyError):
    """A practice question could not be generated or validated."""


class GradingError(GeoBuddyError):
    """A student answer could not be graded or the feedback failed validation."""


class ValidationError(GeoBuddyError):
    """User input rejected before any API call (e.g. an empty answer)."""


class SessionStateError(GeoBuddyError):
    """An operation was attempted in a phase that does not allow it."""


class ProviderError(GeoBuddyError):
    """Transport or provider failure. Wrapped into GenerationError / GradingError."""


class MalformedResponseError(GeoBuddyError):
    """Model output could not be parsed into the expected JSON shape."""
