"""Command-line panel: polls the AFC status API and Moonraker, shows the status."""

from __future__ import annotations

import argparse
import logging
import time

import requests

from turtlepanel.afc_state import AfcState, ApiParseError
from turtlepanel.display import StatusView
from turtlepanel.moonraker import Moonraker, PostQueueFull

logger = logging.getLogger(__name__)

FETCH_INTERVAL = 0.9
FETCH_TIMEOUT = 60.0


def fetch_cycle(
    session: requests.Session, api_url: str, state: AfcState, moonraker: Moonraker
) -> bool:
    """Fetch the AFC status and printer info once; return whether AFC state was updated."""
    if not api_url:
        logger.warning("API URL not set")
        return False

    updated = False
    try:
        response = session.get(api_url, timeout=FETCH_TIMEOUT)
    except requests.RequestException as error:
        logger.warning("HTTP error: %s", error)
    else:
        if response.status_code == 200:
            try:
                state.apply_response(response.text)
                updated = True
            except ApiParseError as error:
                logger.warning("%s", error)
        else:
            logger.warning("HTTP error: %d", response.status_code)

    moonraker.get_printer_ready()
    if not moonraker.unready:
        moonraker.get_printer_info()
    return updated


def _render(view: StatusView) -> str:
    lines = [
        f"Tool: {view.tool_status}",
        f"Hub: {view.hub_status}",
        f"Nozzle: {view.nozzle}",
        f"Bed: {view.bed}",
    ]
    lines.extend(
        f"{label.replace(chr(10), ' ')} #{color:06x}"
        for label, color in zip(view.slot_labels, view.slot_colors)
    )
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="turtlepanel", description="Show the status of an AFC filament changer."
    )
    parser.add_argument("--host", required=True, help="Moonraker host name or address")
    parser.add_argument("--api-url", default="", help="URL of the AFC status API")
    parser.add_argument(
        "--interval", type=float, default=FETCH_INTERVAL, help="seconds between updates"
    )
    parser.add_argument(
        "--cycles", type=int, default=0, help="stop after this many updates (0: run forever)"
    )
    parser.add_argument(
        "--gcode", action="append", default=[], help="G-code to send (repeatable)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    session = requests.Session()
    moonraker = Moonraker(args.host, session)
    try:
        for gcode in args.gcode:
            moonraker.post_gcode_to_queue(gcode)
    except PostQueueFull:
        parser.error("too many G-code commands")

    state = AfcState()
    view = StatusView()
    cycle = 0
    try:
        while True:
            fetch_cycle(session, args.api_url, state, moonraker)
            moonraker.http_post_loop()
            view.refresh(state, moonraker.data)
            print(_render(view), flush=True)
            cycle += 1
            if args.cycles and cycle >= args.cycles:
                break
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass
    return 0