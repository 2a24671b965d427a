"""
Errors raised by the discrete PID controller.
"""

from __future__ import annotations

__all__ = [
    "DPIDError",
    "InvalidLimits",
    "InvalidTuning",
    "InvalidInterval",
    "ModeError",
]


class DPIDError(ValueError):
    """
    Base class for configuration errors.
    """


class InvalidLimits(DPIDError):
    "A limit pair with min >= max"

    pass


class InvalidTuning(DPIDError):
    "Kc is zero, or an integral/derivative time is negative"

    pass


class InvalidInterval(DPIDError):
    "The sample interval is not positive"

    pass


class ModeError(RuntimeError):
    """
    A mode handle was used after control has been handed over.
    """

    pass
