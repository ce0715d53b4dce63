class TumbleError(Exception):
    """Base class for errors raised at the replay engine's outer boundaries."""


class ConfigError(TumbleError, ValueError):
    """Configuration value missing or out of range."""


class OutcomeFormatError(TumbleError, ValueError):
    """Transport payload that cannot be interpreted as an outcome at all."""
