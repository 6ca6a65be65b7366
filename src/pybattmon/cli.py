"""Command-line entry point.

Usage
-----
::

    pybattmon sample            # one foreground cycle
    pybattmon sample --json
    pybattmon history --count 24
    pybattmon uptime
    pybattmon run               # start every trigger until interrupted

Configuration comes from ``BATTMON_*`` environment variables; ``--state-dir``
overrides ``BATTMON_STATE_DIR``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from pybattmon.config import MonitorConfig
from pybattmon.exceptions import BattMonError
from pybattmon.monitor import BatteryMonitor
from pybattmon.stats import DEFAULT_RECENT_COUNT, classify_battery, classify_temperature, format_entry, recent
from pybattmon.triggers import TriggerSource


def _section(title: str) -> str:
    line = "=" * 40
    return f"{line}\n  {title}\n{line}"


async def _cmd_sample(monitor: BatteryMonitor, args: argparse.Namespace) -> int:
    result = await monitor.run_cycle(TriggerSource.FOREGROUND)
    if result is None:
        print("No sample could be read.", file=sys.stderr)
        return 1
    info = monitor.latest_info
    if args.json_mode:
        payload: dict[str, Any] = {
            "info": info.model_dump(mode="json") if info is not None else None,
            "estimated": result.estimated.model_dump(mode="json"),
            "notifications": [intent.model_dump(mode="json") for intent in result.notifications],
            "failed_steps": result.failed_steps,
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    out = [_section("DEVICE")]
    if info is not None:
        out.extend(
            [
                f"  name:        {info.device_name}",
                f"  battery:     {info.battery_level:.0f}% ({'charging' if info.battery_charging else 'on battery'})",
                f"  temperature: {info.temperature_c:.1f}°C ({classify_temperature(info.temperature_c).value})",
                f"  cpu:         {info.cpu_usage:.1f}%",
                f"  memory:      {info.memory_usage_mb:.0f} / {info.total_memory_mb:.0f} MB",
                f"  storage:     {info.storage_used_gb:.1f} / {info.total_storage_gb:.1f} GB",
                f"  uptime:      {info.uptime_display}",
                f"  carrier:     {info.carrier or '-'}",
                f"  ip:          {info.ip_address}",
            ]
        )
    for intent in result.notifications:
        out.append(f"  >> {intent.title}: {intent.body}")
    if result.failed_steps:
        out.append(f"  !! failed steps: {', '.join(result.failed_steps)}")
    print("\n".join(out))
    return 0


async def _cmd_history(monitor: BatteryMonitor, args: argparse.Namespace) -> int:
    entries = recent(await monitor.history(), args.count)
    if args.json_mode:
        print(json.dumps([entry.to_payload() for entry in entries], indent=2, ensure_ascii=False))
        return 0
    if not entries:
        print("No history yet.")
        return 0
    tz = ZoneInfo(monitor.config.time_zone) if monitor.config.time_zone else None
    for entry in entries:
        tags = [classify_battery(entry.battery_pct).value]
        if entry.variant is not None:
            tags.append(entry.variant.value)
        print(f"{format_entry(entry, tz)}  [{', '.join(tags)}]")
    return 0


async def _cmd_uptime(monitor: BatteryMonitor, args: argparse.Namespace) -> int:
    hours = await monitor.accumulated_hours()
    print(f"{hours:.2f} h today")
    return 0


async def _cmd_run(monitor: BatteryMonitor, args: argparse.Namespace) -> int:
    await monitor.start_triggers(background=not args.no_background)
    try:
        await asyncio.Event().wait()
    finally:
        await monitor.stop_triggers()
    return 0


_COMMANDS = {
    "sample": _cmd_sample,
    "history": _cmd_history,
    "uptime": _cmd_uptime,
    "run": _cmd_run,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pybattmon", description="Battery and temperature monitor.")
    parser.add_argument("--state-dir", type=Path, help="Directory for persisted state")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sample = sub.add_parser("sample", help="Run one foreground cycle and print the snapshot")
    sample.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")

    history = sub.add_parser("history", help="Print recent history entries")
    history.add_argument("--count", "-n", type=int, default=DEFAULT_RECENT_COUNT, help="Entries to show")
    history.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")

    sub.add_parser("uptime", help="Print today's accumulated uptime")

    run = sub.add_parser("run", help="Start the triggers until interrupted")
    run.add_argument("--no-background", action="store_true", help="Only run the foreground poller")
    return parser


async def _main(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.state_dir is not None:
        overrides["state_dir"] = args.state_dir
    if args.command in ("history", "uptime"):
        overrides["ip_lookup_enabled"] = False
    config = MonitorConfig.from_env(**overrides)
    async with BatteryMonitor(config) as monitor:
        return await _COMMANDS[args.command](monitor, args)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        return asyncio.run(_main(args))
    except BattMonError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
