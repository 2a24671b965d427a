"""
Test the manual/automatic controller views.
"""

from __future__ import annotations

import pytest

from moat.lib.dpid import (
    AUTO,
    MANUAL,
    AutomaticController,
    Controller,
    ManualController,
    ModeError,
    Outcome,
    engage,
)


def test_manual_cannot_compute():  # noqa:D103
    ctl = Controller(2.0, 5.0, 1.0, 1.0)
    ctl.set_mode(AUTO)
    man = ManualController(ctl)
    assert ctl.get_mode() == MANUAL
    assert not hasattr(man, "compute")
    assert man.ctl is ctl
    assert not man.spent


def test_engage():  # noqa:D103
    man = ManualController(Controller(2.0, 5.0, 1.0, 1.0))
    man.set_process_value(1.1)
    man.set_bias(2.2)
    man.set_setpoint(1.1)
    assert man.get_setpoint() == 1.1

    auto = engage(man)
    assert isinstance(auto, AutomaticController)
    assert auto.ctl.in_auto
    assert man.spent
    assert auto.compute() == pytest.approx(2.2)

    with pytest.raises(ModeError):
        man.set_setpoint(3)
    with pytest.raises(ModeError):
        man.engage()


def test_release():  # noqa:D103
    auto = AutomaticController(Controller(1.0, 1.0, 0.0, 1.0))
    auto.set_setpoint(3.3)
    auto.compute()
    acc = auto.ctl.acc_error

    man = auto.release()
    assert auto.spent
    with pytest.raises(ModeError):
        auto.compute()
    assert not man.ctl.in_auto
    assert man.ctl.acc_error == acc
    assert man.set_manual_output(1.2) is Outcome.OK

    auto = man.engage()
    assert auto.ctl.acc_error == 0
    assert auto.ctl.prev_output == pytest.approx(1.2 / 3.3)


def test_config_via_view():  # noqa:D103
    man = ManualController(Controller(2.0, 5.0, 1.0, 1.0))
    assert man.set_input_limits(0, 10)
    assert man.set_output_limits(-5, 5)
    assert not man.set_output_limits(5, 5)
    assert man.set_tunings(1.0, 2.0, 0.0)
    assert man.set_interval(0.5)
    assert not man.set_interval(0)
    assert man.get_input_limits().span == 10
    assert man.get_output_limits().lo == -5
    assert man.get_tunings().tauI == 2.0
    assert man.ctl.get_interval() == 0.5


def test_bad_view():  # noqa:D103
    with pytest.raises(TypeError):
        ManualController(None)


def test_new_view_takes_over():  # noqa:D103
    ctl = Controller(2.0, 5.0, 1.0, 1.0)
    auto = AutomaticController(ctl)
    assert ctl.view is auto

    man = ManualController(ctl)
    assert ctl.view is man
    assert auto.spent
    assert not man.spent
    assert ctl.get_mode() == MANUAL
    with pytest.raises(ModeError):
        auto.compute()

    auto2 = man.engage()
    assert man.spent
    assert ctl.view is auto2
