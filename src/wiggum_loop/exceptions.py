"""Exceptions raised by the Wiggum Loop harness."""


class WiggumError(Exception):
    """Base class for harness errors surfaced to the CLI."""

    pass


class ConfigError(WiggumError):
    """Raised when the configuration file or environment is invalid."""

    pass


class StartupError(WiggumError):
    """Raised when a startup precondition fails before any session runs."""

    pass
