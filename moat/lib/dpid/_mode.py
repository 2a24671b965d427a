"""
Manual and automatic views of a controller.

A `ManualController` cannot compute anything; an `AutomaticController`
can. Switching hands the controller over to a new view and invalidates
the old one, so a scheduler that still holds a manual view cannot
accidentally drive the loop. Wrapping a controller in a new view
also invalidates the view that had it before::

    man = ManualController(Controller(2, 5, 1, 0.1))
    man.set_process_value(pv)
    man.set_manual_output(1.2)

    auto = man.engage()  # bumpless
    out = auto.compute()

    man = auto.release()
"""

from __future__ import annotations

from ._exc import ModeError
from ._impl import AUTO, MANUAL, Controller

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._impl import Limits, Outcome, Tunings

__all__ = ["AutomaticController", "ManualController", "engage"]


class _View:
    _mode: int

    def __init__(self, ctl: Controller):
        if not isinstance(ctl, Controller):
            raise TypeError(f"Need a Controller, not {ctl!r}")
        if (old := ctl.view) is not None:
            old._ctl = None
        ctl.set_mode(self._mode)
        self._ctl: Controller | None = ctl
        ctl.view = self

    @property
    def ctl(self) -> Controller:
        "The underlying controller"
        if self._ctl is None:
            raise ModeError(f"{self.__class__.__name__}: control has been handed over")
        return self._ctl

    def _hand_over(self) -> Controller:
        ctl, self._ctl = self.ctl, None
        return ctl

    @property
    def spent(self) -> bool:
        "Flag whether this view has been handed over"
        return self._ctl is None

    def __repr__(self):
        return f"<{self.__class__.__name__} {'spent' if self._ctl is None else self._ctl!r}>"

    # configuration, valid in both modes

    def set_input_limits(self, lo: float, hi: float) -> Outcome:  # noqa: D102
        return self.ctl.set_input_limits(lo, hi)

    def set_output_limits(self, lo: float, hi: float) -> Outcome:  # noqa: D102
        return self.ctl.set_output_limits(lo, hi)

    def set_tunings(self, Kc: float, tauI: float, tauD: float) -> Outcome:  # noqa: D102
        return self.ctl.set_tunings(Kc, tauI, tauD)

    def set_interval(self, interval: float) -> Outcome:  # noqa: D102
        return self.ctl.set_interval(interval)

    def set_setpoint(self, sp: float) -> None:  # noqa: D102
        self.ctl.set_setpoint(sp)

    def get_setpoint(self) -> float:  # noqa: D102
        return self.ctl.get_setpoint()

    def set_process_value(self, pv: float) -> None:  # noqa: D102
        self.ctl.set_process_value(pv)

    def set_bias(self, bias: float) -> None:  # noqa: D102
        self.ctl.set_bias(bias)

    def get_tunings(self) -> Tunings:  # noqa: D102
        return self.ctl.get_tunings()

    def get_input_limits(self) -> Limits:  # noqa: D102
        return self.ctl.get_input_limits()

    def get_output_limits(self) -> Limits:  # noqa: D102
        return self.ctl.get_output_limits()


class ManualController(_View):
    """
    A controller in manual mode. The operator sets the output.
    """

    _mode = MANUAL

    def set_manual_output(self, value: float) -> Outcome:
        "Record the output the operator applies."
        return self.ctl.set_manual_output(value)

    def engage(self) -> AutomaticController:
        """
        Switch to automatic mode, without bumping the output.

        This view is unusable afterwards.
        """
        return AutomaticController(self._hand_over())


class AutomaticController(_View):
    """
    A controller in automatic mode.
    """

    _mode = AUTO

    def compute(self) -> float:
        "Run one controller step. Returns the new output."
        return self.ctl.compute()

    def release(self) -> ManualController:
        """
        Switch to manual mode.

        This view is unusable afterwards.
        """
        return ManualController(self._hand_over())


def engage(manual: ManualController) -> AutomaticController:
    """
    Hand control over from the operator to the controller.
    """
    return manual.engage()
