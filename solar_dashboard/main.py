"""Solar Cleaner Dashboard: main entry point.

Wires the pieces together:

* **DashboardWindow** – tkinter window with the three dashboard regions
* **RestClient** – talks to the cleaner's HTTP API
* **DemoBackend** – in-memory stand-in for the cleaner

Supports multiple run modes:

1. **Window** (default) – ``solar-dashboard``
2. **Demo** – ``solar-dashboard --demo`` (no cleaner required)
3. **Demo backend only** – ``solar-dashboard --serve-demo``
4. **Snapshot** – ``solar-dashboard --snapshot`` (print and exit)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from .batch_viewer import EMPTY_MESSAGE as NO_BATCHES
from .batch_viewer import BatchViewer
from .communication import RestClient
from .config import DashboardConfig
from .control_panel import ControlPanel, format_event_time
from .demo_server import DemoBackend
from .schedule_editor import EMPTY_MESSAGE as NO_SCHEDULE
from .schedule_editor import ScheduleEditor

log = logging.getLogger("solar_dashboard")


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=fmt)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the solar cleaner dashboard."""
    parser = argparse.ArgumentParser(description="Solar Cleaner Dashboard")
    parser.add_argument(
        "--server-url",
        help="Backend address for this run (overrides the saved config).",
    )
    parser.add_argument(
        "--demo", action="store_true",
        help="Start the in-memory demo backend and open the window against it.",
    )
    parser.add_argument(
        "--serve-demo", action="store_true",
        help="Run only the demo backend until interrupted.",
    )
    parser.add_argument(
        "--demo-port", type=int, default=None,
        help="Port for the demo backend (default: from config, 5050).",
    )
    parser.add_argument(
        "--snapshot", action="store_true",
        help="Print the dashboard, first batch page and schedule, then exit.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging.",
    )
    args = parser.parse_args(argv)

    _setup_logging(verbose=args.verbose)

    config = DashboardConfig.load()
    if args.server_url:
        config.server_url = args.server_url
    if args.demo_port is not None:
        config.demo_port = args.demo_port

    if args.serve_demo:
        _run_demo_backend(config.demo_port)
    elif args.snapshot:
        sys.exit(asyncio.run(_print_snapshot(config)))
    else:
        _run_window(config, demo=args.demo)


def _run_window(config: DashboardConfig, demo: bool = False) -> None:
    """Open the dashboard window, optionally backed by the demo server."""
    from .window import AsyncRunner, DashboardWindow

    runner = AsyncRunner()
    runner.start()

    backend = None
    if demo:
        from .demo import create_demo_config

        config = create_demo_config(config.demo_port)
        backend = DemoBackend(port=config.demo_port, host="127.0.0.1")
        runner.submit(backend.start()).result(timeout=10.0)

    log.info("Solar Cleaner Dashboard starting against %s", config.api_base)
    try:
        DashboardWindow(config, runner).run()
    finally:
        if backend is not None:
            runner.submit(backend.stop()).result(timeout=5.0)
        runner.stop()
        log.info("Solar Cleaner Dashboard stopped.")


def _run_demo_backend(port: int) -> None:
    """Serve the demo backend in the foreground until Ctrl-C."""
    loop = asyncio.new_event_loop()
    stop_event = asyncio.Event()
    backend = DemoBackend(port=port)

    # Handle Ctrl-C gracefully
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler for all signals
            signal.signal(sig, lambda s, f: loop.call_soon_threadsafe(stop_event.set))

    try:
        loop.run_until_complete(backend.run(stop_event))
    except KeyboardInterrupt:
        loop.run_until_complete(backend.stop())
    finally:
        loop.close()


async def _print_snapshot(config: DashboardConfig) -> int:
    """Load every region once and print it as plain text.

    Returns the process exit code: 1 if any region failed to load.
    """
    client = RestClient(config)
    panel = ControlPanel(client, config)
    viewer = BatchViewer(client, config)
    editor = ScheduleEditor(client)
    try:
        await asyncio.gather(panel.load(), viewer.load(), editor.load())
    finally:
        await client.close()

    lines = ["Cleaner Control"]
    if panel.error:
        lines.append(f"  {panel.error}")
    else:
        status = panel.status
        lines.append(f"  Status: {panel.power_label}")
        lines.append(f"  Active Status: {panel.active_label}")
        lines.append(
            "  Recent Activity: "
            + " ".join(
                f"{'on' if e.state else 'off'}@{format_event_time(e)}"
                for e in status.on_off_history
            )
        )
        lines.append(f"  Last Cleaning: {status.last_cleaning_time}")
        lines.append(f"  Images Captured: {status.images_captured}")

    lines.append("ML Output Viewer")
    if viewer.error:
        lines.append(f"  {viewer.error}")
    elif not viewer.batches:
        lines.append(f"  {NO_BATCHES}")
    else:
        for batch in viewer.batches:
            lines.append(f"  {batch.name:<20} {batch.date:<12} damages={batch.damage_count}")
        first, last, total = viewer.showing_range()
        lines.append(f"  Showing {first} to {last} of {total} results")

    lines.append("Cleaning Schedule")
    if editor.error:
        lines.append(f"  {editor.error}")
    elif not editor.entries:
        lines.append(f"  {NO_SCHEDULE}")
    else:
        for entry in editor.entries:
            lines.append(f"  {entry.day.value:<10} {entry.time}")

    print("\n".join(lines))
    return 1 if (panel.error or viewer.error or editor.error) else 0


if __name__ == "__main__":
    main()
