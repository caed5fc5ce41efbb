"""Exceptions raised by the Notewright pipeline."""


class NotewrightError(Exception):
    """Base class for all Notewright errors."""


class ConfigurationError(NotewrightError):
    """Raised when a credential is missing or the configuration is invalid."""


class RemoteCallError(NotewrightError):
    """Raised when a provider call fails or returns an empty or malformed payload."""


class FilesystemError(NotewrightError):
    """Raised when reading, writing, listing or moving an artifact fails."""


class ClassificationError(NotewrightError):
    """Raised when a classification does not have the expected shape."""
