"""
Configuration for the discrete PID controller.

The defaults live in ``_cfg.yaml`` next to this module. A user's YAML
file is merged on top of them::

    dpid:
      kc: 2.0
      ti: 5.0
      td: 1.0
      t: 0.5
      input:
        min: 0
        max: 100
      output:
        min: 0
        max: 10
      setpoint: 42
      bias: 5   # optional feed-forward
      mode: auto
"""

from __future__ import annotations

import logging
from copy import deepcopy
from pathlib import Path as FSPath

from moat.util import attrdict, merge, to_attrdict, yload

from ._exc import DPIDError
from ._impl import AUTO, MANUAL, Controller

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any

logger = logging.getLogger(__name__)

__all__ = ["CFG_PATH", "default_cfg", "from_cfg", "load_cfg"]

CFG_PATH = FSPath(__file__).with_name("_cfg.yaml")

_modes = {
    "manual": MANUAL,
    "auto": AUTO,
    "automatic": AUTO,
}

_keys = {"kc", "ti", "td", "t", "input", "output", "setpoint", "bias", "mode"}
_limit_keys = {"min", "max"}

_defaults: dict | None = None


def default_cfg() -> attrdict:
    """
    Returns a fresh copy of the package defaults.
    """
    global _defaults  # noqa: PLW0603
    if _defaults is None:
        with CFG_PATH.open("r") as f:
            _defaults = yload(f)
    return to_attrdict(deepcopy(_defaults))


def load_cfg(path: str | FSPath | None = None) -> attrdict:
    """
    Read a config file and merge it over the defaults.

    Without a path, the defaults are returned.
    """
    cfg = default_cfg()
    if path is None:
        return cfg
    with FSPath(path).open("r") as f:
        data = yload(f, attr=True)
    if data is None:
        logger.debug("Empty config file: %s", path)
        return cfg
    if not isinstance(data, dict):
        raise DPIDError(f"{path}: need a mapping, not {type(data).__name__}")
    logger.debug("Config file: %s", path)
    return merge(cfg, data)


def _float(cfg: Mapping, name: str, key: str | None = None) -> float:
    val = cfg[name] if key is None else cfg[name][key]
    try:
        return float(val)
    except (TypeError, ValueError):
        if key is not None:
            name = f"{name}.{key}"
        raise DPIDError(f"{name}: not a number: {val!r}") from None


def _mode(mode: Any) -> int:
    if isinstance(mode, str):
        try:
            return _modes[mode.lower()]
        except KeyError:
            raise DPIDError(f"Unknown mode: {mode!r}") from None
    if isinstance(mode, (bool, int)):
        return AUTO if mode else MANUAL
    raise DPIDError(f"Unknown mode: {mode!r}")


def _limits(cfg: Mapping, name: str) -> tuple[float, float]:
    lim = cfg[name]
    if not isinstance(lim, dict):
        raise DPIDError(f"{name}: need a mapping with min and max")
    if bad := set(lim) - _limit_keys:
        raise DPIDError(f"{name}: unknown keys {sorted(bad)}")
    return _float(cfg, name, "min"), _float(cfg, name, "max")


def from_cfg(cfg: Mapping[str, Any], cls: type[Controller] | None = None) -> Controller:
    """
    Create a controller from the ``dpid`` section of a configuration.

    Missing values are taken from the defaults. Invalid values raise a
    `DPIDError` subclass; unlike the controller's setters, nothing is
    silently ignored here.
    """
    if not isinstance(cfg, dict):
        raise DPIDError(f"need a mapping, not {type(cfg).__name__}")
    if bad := set(cfg) - _keys:
        raise DPIDError(f"Unknown keys: {sorted(bad)}")
    c = merge(default_cfg().dpid, cfg)

    ctl = (cls or Controller)(_float(c, "kc"), _float(c, "ti"), _float(c, "td"), _float(c, "t"))
    ctl.set_input_limits(*_limits(c, "input")).check()
    ctl.set_output_limits(*_limits(c, "output")).check()
    ctl.set_setpoint(_float(c, "setpoint"))
    if c.bias is not None:
        ctl.set_bias(_float(c, "bias"))
    ctl.set_mode(_mode(c.mode))

    logger.debug("Configured: %r", ctl)
    return ctl
