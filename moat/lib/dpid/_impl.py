#
# Discrete PID controller working in percent-of-span units,
# with bumpless transfer and conditional integration.
#

from __future__ import annotations

import logging
from enum import Enum
from math import isfinite

from attrs import define

from ._exc import InvalidInterval, InvalidLimits, InvalidTuning, ModeError

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any

logger = logging.getLogger(__name__)

__all__ = ["AUTO", "MANUAL", "Controller", "Limits", "Outcome", "Tunings"]

MANUAL = 0
AUTO = 1

# Default I/O range, volts.
DEFAULT_LO = 0.0
DEFAULT_HI = 3.3


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return lo if value < lo else hi if value > hi else value


class Outcome(Enum):
    """
    The result of a configuration call.

    Only `OK` is true in a boolean context, so ``if not
    ctl.set_tunings(…)`` catches every rejection.
    """

    OK = "ok"
    INVALID_LIMITS = "limits must satisfy min < max"
    INVALID_TUNING = "Kc must be non-zero, tauI and tauD not negative"
    INVALID_INTERVAL = "the interval must be positive"
    WRONG_MODE = "not possible in the current mode"

    def __bool__(self):
        return self is Outcome.OK

    def check(self) -> None:
        """
        Raise the matching exception unless this is `OK`.
        """
        if self is Outcome.OK:
            return
        raise _errors[self](self.value)


_errors = {
    Outcome.INVALID_LIMITS: InvalidLimits,
    Outcome.INVALID_TUNING: InvalidTuning,
    Outcome.INVALID_INTERVAL: InvalidInterval,
    Outcome.WRONG_MODE: ModeError,
}


@define(frozen=True)
class Limits:
    """
    A real-world range which is mapped to 0…1.
    """

    lo: float
    hi: float

    @property
    def span(self) -> float:  # noqa: D102
        return self.hi - self.lo

    def scale(self, value: float, clamp: bool = True) -> float:
        "real world to fraction of span"
        res = (value - self.lo) / self.span
        return _clamp(res) if clamp else res

    def unscale(self, value: float) -> float:
        "fraction of span to real world"
        return value * self.span + self.lo


@define(frozen=True)
class Tunings:
    """
    Raw tuning parameters, as supplied by the user.

    Attributes:
        Kc: controller gain
        tauI: integral (reset) time, seconds. Zero turns off integral action.
        tauD: derivative time, seconds
    """

    Kc: float
    tauI: float
    tauD: float

    def is_valid(self) -> bool:  # noqa: D102
        return (
            self.Kc != 0
            and all(isfinite(x) for x in (self.Kc, self.tauI, self.tauD))
            and self.tauI >= 0
            and self.tauD >= 0
        )


class Controller:
    """
    A discrete-time PID controller.

    Inputs and outputs are real-world values. Internally everything is
    scaled to 0…1 of the input resp. output span.

    Usage, once per sample interval::

        ctl.set_process_value(pv)
        ctl.set_setpoint(sp)  # optional
        out = ctl.compute()

    The controller is not reentrant. If more than one thread talks to it,
    the caller needs to serialize access, e.g. with a lock.

    `compute` does not look at the mode. The caller is expected to not
    call it while in manual mode; see `moat.lib.dpid.ManualController`
    for a variant that cannot be called.
    """

    # effective tuning parameters
    Kc: float
    tauR: float  # reset rate, per sample
    tauD_eff: float  # derivative time, in samples

    tunings: Tunings
    in_limits: Limits
    out_limits: Limits
    t_sample: float

    # the Manual- or AutomaticController currently in charge, if any
    view = None

    def __init__(self, Kc: float, tauI: float, tauD: float, interval: float):
        """
        Args:
            Kc: controller gain
            tauI: integral time, seconds
            tauD: derivative time, seconds
            interval: `compute` is called every ``interval`` seconds.

        The limits default to 0…3.3 (volts) for both input and output.
        The controller starts in manual mode without bias.

        Raises:
            InvalidTuning: bad gains.
            InvalidInterval: ``interval`` is not positive and finite.
        """
        if not (interval > 0 and isfinite(interval)):
            raise InvalidInterval(interval)

        self.use_bias = False
        self.in_auto = False

        self.in_limits = Limits(DEFAULT_LO, DEFAULT_HI)
        self.out_limits = Limits(DEFAULT_LO, DEFAULT_HI)
        self.t_sample = interval

        self.Kc = 0.0
        self.tauR = 0.0
        self.tauD_eff = 0.0
        self.set_tunings(Kc, tauI, tauD).check()

        self.setpoint = 0.0
        self.pv = 0.0
        self.prev_pv = 0.0
        self.output = 0.0
        self.prev_output = 0.0

        self.acc_error = 0.0
        self.bias = 0.0
        self.real_output = 0.0

    @classmethod
    def from_cfg(cls, cfg: Mapping[str, Any]) -> Controller:
        """
        Build a controller from a configuration mapping.

        See `moat.lib.dpid.config.from_cfg`.
        """
        from .config import from_cfg  # noqa: PLC0415

        return from_cfg(cfg, cls=cls)

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} {'auto' if self.in_auto else 'manual'}"
            f" Kc={self.Kc} tauR={self.tauR} tauD={self.tauD_eff} T={self.t_sample}>"
        )

    def set_input_limits(self, lo: float, hi: float) -> Outcome:
        """
        Set the real-world values which correspond to 0% and 100% input.

        The working variables are rescaled to the new span.
        """
        if not lo < hi:
            logger.debug("Input limits rejected: %r %r", lo, hi)
            return Outcome.INVALID_LIMITS

        ratio = (hi - lo) / self.in_limits.span
        self.prev_pv = _clamp(self.prev_pv * ratio)
        self.acc_error *= ratio

        self.in_limits = Limits(lo, hi)
        return Outcome.OK

    def set_output_limits(self, lo: float, hi: float) -> Outcome:
        """
        Set the real-world values which correspond to 0% and 100% output.
        """
        if not lo < hi:
            logger.debug("Output limits rejected: %r %r", lo, hi)
            return Outcome.INVALID_LIMITS

        self.prev_output = _clamp(self.prev_output * (hi - lo) / self.out_limits.span)

        self.out_limits = Limits(lo, hi)
        return Outcome.OK

    def set_tunings(self, Kc: float, tauI: float, tauD: float) -> Outcome:
        """
        Change the tuning parameters.

        This may be done while the loop is running. In automatic mode the
        accumulated error is rescaled so that the integral's contribution
        to the output does not jump.

        Args:
            Kc: controller gain, must not be zero.
            tauI: integral time. Zero disables integral action.
            tauD: derivative time.
        """
        tunings = Tunings(Kc, tauI, tauD)
        if not tunings.is_valid():
            logger.debug("Tunings rejected: %r", tunings)
            return Outcome.INVALID_TUNING

        tauR = (1.0 / tauI) * self.t_sample if tauI > 0 else 0.0

        if self.in_auto:
            if tauR == 0:
                self.acc_error = 0.0
            else:
                self.acc_error *= (self.Kc * self.tauR) / (Kc * tauR)

        self.tunings = tunings
        self.Kc = Kc
        self.tauR = tauR
        self.tauD_eff = tauD / self.t_sample
        return Outcome.OK

    def reset(self) -> None:
        """
        Re-initialize the working variables from the current bias (or the
        last output, without feed-forward) and process value, and clear the
        integral.

        Called on every change from manual to automatic mode.
        """
        out = self.bias if self.use_bias else self.real_output
        self.prev_output = self.out_limits.scale(out)
        self.prev_pv = self.in_limits.scale(self.pv)
        self.acc_error = 0.0

    def set_mode(self, mode: int) -> None:
        """
        Switch between manual (zero) and automatic (non-zero) mode.

        Going from manual to automatic resets the controller, so that the
        output continues from where the operator left it.
        """
        auto = mode != MANUAL
        if auto and not self.in_auto:
            self.reset()
            logger.debug("Auto: pv=%r out=%r", self.prev_pv, self.prev_output)
        elif self.in_auto and not auto:
            logger.debug("Manual")
        self.in_auto = auto

    def get_mode(self) -> int:  # noqa: D102
        return AUTO if self.in_auto else MANUAL

    def set_interval(self, interval: float) -> Outcome:
        """
        Change how often `compute` is called.

        The time-based tunings and the accumulated error are converted to
        the new interval.
        """
        if not (interval > 0 and isfinite(interval)):
            logger.debug("Interval rejected: %r", interval)
            return Outcome.INVALID_INTERVAL

        ratio = interval / self.t_sample
        self.tauR *= ratio
        self.acc_error *= self.t_sample / interval
        self.tauD_eff *= ratio
        self.t_sample = interval
        return Outcome.OK

    def get_interval(self) -> float:  # noqa: D102
        return self.t_sample

    def set_setpoint(self, sp: float) -> None:  # noqa: D102
        self.setpoint = sp

    def get_setpoint(self) -> float:  # noqa: D102
        return self.setpoint

    def set_process_value(self, pv: float) -> None:  # noqa: D102
        self.pv = pv

    def set_bias(self, bias: float) -> None:
        """
        Set a feed-forward bias, in real-world output units.

        Once set, the bias is used for the lifetime of the controller.
        """
        self.bias = bias
        self.use_bias = True

    def set_manual_output(self, value: float) -> Outcome:
        """
        Record the output the operator applies while in manual mode.

        Without feed-forward, switching to automatic continues from this
        value. The value is limited to the output range.
        """
        if self.in_auto:
            return Outcome.WRONG_MODE
        self.real_output = _clamp(value, self.out_limits.lo, self.out_limits.hi)
        return Outcome.OK

    def get_tunings(self) -> Tunings:  # noqa: D102
        return self.tunings

    def get_input_limits(self) -> Limits:  # noqa: D102
        return self.in_limits

    def get_output_limits(self) -> Limits:  # noqa: D102
        return self.out_limits

    def get_state(self) -> dict[str, Any]:
        """
        Returns a snapshot of the running state.
        """
        return dict(
            auto=self.in_auto,
            setpoint=self.setpoint,
            pv=self.pv,
            prev_pv=self.prev_pv,
            output=self.output,
            prev_output=self.prev_output,
            real_output=self.real_output,
            acc_error=self.acc_error,
            bias=self.bias if self.use_bias else None,
        )

    def compute(self) -> float:
        """
        Run one controller step.

        Returns:
            the new output, between the output limits.
        """
        pv = self.in_limits.scale(self.pv)
        sp = self.in_limits.scale(self.setpoint)

        error = sp - pv

        # Only integrate if that doesn't drive an already-pegged output
        # further into saturation.
        if not (self.prev_output >= 1 and error > 0) and not (self.prev_output <= 0 and error < 0):
            self.acc_error += error

        # derivative on measurement, not on error
        d_meas = (pv - self.prev_pv) / self.t_sample

        bias = self.out_limits.scale(self.bias, clamp=False) if self.use_bias else 0.0

        out = bias + self.Kc * (error + self.tauR * self.acc_error - self.tauD_eff * d_meas)
        out = _clamp(out)

        self.output = self.prev_output = out
        self.prev_pv = pv

        # unscaling may round past the limits
        lim = self.out_limits
        self.real_output = _clamp(lim.unscale(out), lim.lo, lim.hi)
        return self.real_output
