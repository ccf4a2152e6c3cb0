class CleanupError(Exception):
    """Base class for errors that stop a cleanup run before it starts."""


class ConfigError(CleanupError):
    """Exception raised when the configuration is missing or invalid."""


class LogDirectoryError(CleanupError):
    """Exception raised when the log directory cannot be created."""
