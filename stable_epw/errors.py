"""
Warnings and exceptions raised by stable_epw.
"""


class AccuracyWarning(UserWarning):
    """A numerical tolerance was not met; the best estimate is still returned."""


class SupportNotFoundError(RuntimeError):
    """The epsilon-support search did not terminate within its step budget."""


class NormalizationError(ValueError):
    """A normalization integral diverged."""
