"""Exceptions for the configuration layer.

Public API (the "studs"):
    ConfigurationError: Base exception for configuration errors
    ConfigurationUpdateError: An update was rejected; carries every collected error
    ObserverUpdateError: A registered observer rejected a new configuration
    ConfigurationPersistError: The configuration could not be written to disk
"""


class ConfigurationError(Exception):
    """Base exception for all configuration errors."""

    pass


class ObserverUpdateError(ConfigurationError):
    """A registered observer rejected a new configuration."""

    def __init__(self, observer: object, cause: BaseException) -> None:
        self.observer = observer
        self.cause = cause
        super().__init__(f"cannot update observer {type(observer).__name__}: {cause}")


class ConfigurationPersistError(ConfigurationError):
    """The device configuration file could not be written."""

    pass


class ConfigurationUpdateError(ConfigurationError):
    """A configuration update failed.

    ``errors`` holds every failure collected during the update. With the
    fail-fast policy it has exactly one entry.
    """

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = list(errors)
        message = "; ".join(str(e) for e in self.errors) or "configuration update failed"
        super().__init__(message)


__all__ = [
    "ConfigurationError",
    "ConfigurationUpdateError",
    "ObserverUpdateError",
    "ConfigurationPersistError",
]
