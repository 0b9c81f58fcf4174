"""Exceptions raised by the Six Nations scheduler."""


class SixNationsError(Exception):
    """Base exception for all scheduler errors.

    Every error is fatal to the current generation call; no partial
    schedule is ever returned alongside one.
    """


class ValidationError(SixNationsError):
    """Raised when the inputs to a generation run are invalid."""


class SchedulingError(SixNationsError):
    """Raised when no feasible date/kickoff assignment exists."""


class DataLookupError(SixNationsError):
    """Raised when a team, stadium or history lookup fails."""


class ConfigError(SixNationsError):
    """Raised when the YAML configuration is malformed."""
