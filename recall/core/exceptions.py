"""Custom exceptions for Recall.

All bookmark-related exceptions inherit from RecallError, which lets the
store handle encoding and analysis failures in one place.
"""


class RecallError(Exception):
    """Base class for Recall errors.

    None of these are fatal: the store turns them into a ``failed`` status
    or a fallback recap.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EncodingError(RecallError):
    """A media file could not be read or encoded.

    The bookmark is still saved, only without an inline preview.
    """


class AnalysisError(RecallError):
    """The generative model call failed.

    Covers transport errors, an empty reply, and replies that are not JSON
    of the expected shape. Subtypes are deliberately not distinguished.
    """


class InvalidTransitionError(RecallError):
    """An analysis status change that the lifecycle does not allow.

    Indicates a bug in the caller, never a runtime condition.
    """


class ConfigurationError(Exception):
    """Invalid configuration.

    This is NOT a RecallError - configuration issues must be fixed before
    the app runs, they are not degraded into a status flag.
    """

    pass
