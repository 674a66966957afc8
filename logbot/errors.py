"""Error reporting shared by the storage-facing classes.

Fallible storage operations do not raise. They clear the stored message
before doing any work, and on failure store a human-readable message and
return a failure value (``None`` or ``False``). Callers read the message
back through ``errstr``.
"""


class ConfigError(Exception):
    """Raised when the configuration file is unreadable or incomplete."""


class ErrorState:
    """Holds the message describing the most recent failure, if any."""

    def __init__(self):
        self._errstr: str | None = None

    @property
    def errstr(self) -> str | None:
        return self._errstr

    def clear_error(self) -> None:
        self._errstr = None

    def self_error(self, message: str | None) -> None:
        """Record `message` and return None, so callers can `return self.self_error(...)`."""
        self._errstr = message
        return None
