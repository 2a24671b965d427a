"""
Command line for the discrete PID controller: inspect a configuration,
or try it out against a simulated process.
"""

from __future__ import annotations

import logging

import anyio
import asyncclick as click

from moat.util import wrap_main, yprint

from ._exc import DPIDError
from ._impl import AUTO, MANUAL
from .config import from_cfg, load_cfg
from .sim import FirstOrderProcess, simulate

logger = logging.getLogger(__name__)


def _controller(obj):
    try:
        return from_cfg(obj.cfg.get("dpid") or {})
    except DPIDError as exc:
        raise click.ClickException(f"Configuration: {exc!r}") from exc


def _log_levels(log):
    res = []
    for k in log:
        if k.count("=") != 1:
            raise click.BadParameter(f"{k!r}: need NAME=LEVEL", param_hint="--log")
        k, v = k.split("=")
        res.append(f"{k}={v.upper()}")
    return tuple(res)


@click.group()
@click.option(
    "-c",
    "--cfg",
    "cfg_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file (YAML)",
)
@click.option("-V", "--verbose", count=True, help="Be more verbose. Can be used multiple times.")
@click.option("-Q", "--quiet", count=True, help="Be less verbose. Opposite of '--verbose'.")
@click.option(
    "-l", "--log", multiple=True, help="Adjust log level. Example: '--log moat.lib.dpid=DEBUG'."
)
@click.pass_context
async def cli(ctx, cfg_file, verbose, quiet, log):
    """
    Discrete PID controller tools
    """
    try:
        CFG = load_cfg(cfg_file)
    except DPIDError as exc:
        raise click.ClickException(str(exc)) from exc
    wrap_main(
        main=None,
        ctx=ctx,
        name="dpid",
        cfg=cfg_file,
        CFG=CFG,
        verbose=max(0, 1 + verbose - quiet),
        log=_log_levels(log),
    )


@cli.command()
@click.pass_obj
async def show(obj):
    """
    Print the controller's configuration and derived parameters.
    """
    ctl = _controller(obj)
    tun = ctl.get_tunings()
    inp = ctl.get_input_limits()
    out = ctl.get_output_limits()
    res = dict(
        tunings=dict(kc=tun.Kc, ti=tun.tauI, td=tun.tauD),
        derived=dict(kc=ctl.Kc, reset_rate=ctl.tauR, deriv=ctl.tauD_eff),
        interval=ctl.get_interval(),
        input=dict(min=inp.lo, max=inp.hi),
        output=dict(min=out.lo, max=out.hi),
        setpoint=ctl.get_setpoint(),
        bias=ctl.bias if ctl.use_bias else None,
        mode="auto" if ctl.get_mode() == AUTO else "manual",
    )
    yprint(res, stream=obj.stdout)


@cli.command()
@click.option("-n", "--steps", type=int, default=100, help="Number of sample intervals")
@click.option("-s", "--setpoint", type=float, help="Setpoint (default: from config)")
@click.option("-g", "--gain", type=float, default=1.0, help="Process gain")
@click.option("-t", "--tau", type=float, default=10.0, help="Process time constant (seconds)")
@click.option("-d", "--dead", type=int, default=0, help="Process dead time (steps)")
@click.option("-S", "--start", type=float, default=0.0, help="Process value with zero input")
@click.option("-H", "--hold", type=int, default=0, help="Stay in manual mode for this many steps")
@click.option("-o", "--out", "man_out", type=float, help="Manual output while holding")
@click.option("-p", "--pace", type=float, default=0, help="Delay between steps (seconds)")
@click.option("--summary", is_flag=True, help="Only print the final state")
@click.pass_obj
async def sim(obj, steps, setpoint, gain, tau, dead, start, hold, man_out, pace, summary):
    """
    Run the controller against a simulated first-order process.

    Each line shows time, setpoint, process value and output.
    The controller is switched to automatic mode after --hold steps,
    which tests bumpless transfer if you also use --out.
    """
    ctl = _controller(obj)
    if setpoint is not None:
        ctl.set_setpoint(setpoint)
    try:
        plant = FirstOrderProcess(gain=gain, tau=tau, dead=dead, start=start)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    ctl.set_mode(MANUAL)
    if man_out is not None:
        ctl.set_manual_output(man_out).check()
    if not hold:
        ctl.set_mode(AUTO)

    last = None
    n_sat = 0
    for n, res in enumerate(simulate(ctl, plant, steps)):
        if n + 1 == hold:
            ctl.set_mode(AUTO)
        if res.auto and ctl.output in (0.0, 1.0):
            n_sat += 1
        if not summary:
            line = f"{res.t:.3f} {res.sp:g} {res.pv:.4f} {res.out:.4f}{'' if res.auto else ' M'}"
            print(line, file=obj.stdout)
        last = res
        if pace:
            await anyio.sleep(pace)

    if last is None:
        logger.warning("No steps")
        return
    logger.info("Done: %r", ctl.get_state())
    if summary:
        res = dict(
            steps=steps,
            setpoint=last.sp,
            pv=plant.value,
            out=last.out,
            saturated=n_sat,
        )
        if obj.debug > 1:
            res["state"] = ctl.get_state()
        yprint(res, stream=obj.stdout)
