"""
This library contains a discrete-time
[PID controller](https://en.wikipedia.org/wiki/Proportional%E2%80%93integral%E2%80%93derivative_controller)
for loops that run at a fixed sample interval.

The `Controller` class works on real-world values. Internally it
scales its input and output to 0…1 of their respective ranges.

It implements
- a fixed time base, with tunings converted when the interval changes
- derivative action on the measurement, so setpoint changes don't kick
- wind-up protection by conditional integration
- feed-forward bias
- bumpless transfer on manual/auto switching, and when changing
  tunings, limits or interval while running

`ManualController` and `AutomaticController` are views on a controller
that only allow calling `compute` in automatic mode.

Configuration setters never raise. They return an `Outcome` which is
false if the change was rejected; call ``.check()`` on it to raise
instead.
"""

from __future__ import annotations

from ._exc import DPIDError as DPIDError
from ._exc import InvalidInterval as InvalidInterval
from ._exc import InvalidLimits as InvalidLimits
from ._exc import InvalidTuning as InvalidTuning
from ._exc import ModeError as ModeError
from ._impl import AUTO as AUTO
from ._impl import MANUAL as MANUAL
from ._impl import Controller as Controller
from ._impl import Limits as Limits
from ._impl import Outcome as Outcome
from ._impl import Tunings as Tunings
from ._mode import AutomaticController as AutomaticController
from ._mode import ManualController as ManualController
from ._mode import engage as engage

__all__ = [
    "AUTO",
    "MANUAL",
    "AutomaticController",
    "Controller",
    "DPIDError",
    "InvalidInterval",
    "InvalidLimits",
    "InvalidTuning",
    "Limits",
    "ManualController",
    "ModeError",
    "Outcome",
    "Tunings",
    "engage",
]
