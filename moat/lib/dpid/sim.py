"""
A simple plant model, for trying out a controller without hardware.

The plant is a first-order lag with optional dead time::

    tau * dy/dt = start + gain * u - y

The driver plays the part of the external scheduler: it feeds the
plant's value to the controller, calls `compute` and applies the result,
once per sample interval. While the controller is in manual mode it
holds the operator's output instead.
"""

from __future__ import annotations

import logging
from collections import deque
from math import exp

from attrs import define

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ._impl import Controller

logger = logging.getLogger(__name__)

__all__ = ["FirstOrderProcess", "Sample", "simulate"]


class FirstOrderProcess:
    """
    A first-order process with dead time.

    Args:
        gain: steady-state change of the output per unit of input.
        tau: time constant, seconds.
        dead: transport delay, in steps.
        start: the value with zero input.
    """

    def __init__(self, gain: float = 1.0, tau: float = 10.0, dead: int = 0, start: float = 0.0):
        if tau <= 0:
            raise ValueError(f"The time constant must be positive, not {tau!r}")
        if dead < 0:
            raise ValueError(f"The dead time can't be negative, not {dead!r}")
        self.gain = gain
        self.tau = tau
        self.start = start
        self.value = start
        self._delay: deque[float] = deque([0.0] * dead)

    def step(self, u: float, dt: float) -> float:
        """
        Apply the input ``u`` for ``dt`` seconds. Returns the new value.
        """
        if self._delay:
            self._delay.append(u)
            u = self._delay.popleft()
        target = self.start + self.gain * u
        self.value += (target - self.value) * (1 - exp(-dt / self.tau))
        return self.value


@define
class Sample:
    "One step of a simulation run"

    t: float
    sp: float
    pv: float
    out: float
    auto: bool


def simulate(
    ctl: Controller,
    plant: FirstOrderProcess,
    steps: int,
    setpoint: Callable[[float], float | None] | None = None,
) -> Iterator[Sample]:
    """
    Run a closed loop.

    Args:
        ctl: the controller.
        plant: the process to control.
        steps: the number of sample intervals to run.
        setpoint: called with the current time; if it returns a value,
            that's the new setpoint.
    """
    t = 0.0
    for _ in range(steps):
        if setpoint is not None and (sp := setpoint(t)) is not None:
            ctl.set_setpoint(sp)

        pv = plant.value
        ctl.set_process_value(pv)
        out = ctl.compute() if ctl.in_auto else ctl.real_output
        yield Sample(t=t, sp=ctl.get_setpoint(), pv=pv, out=out, auto=ctl.in_auto)

        plant.step(out, ctl.t_sample)
        t += ctl.t_sample
