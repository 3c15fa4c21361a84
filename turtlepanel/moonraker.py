"""HTTP client for a Moonraker printer host with a bounded POST queue."""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)

QUEUE_LEN = 5
REQUEST_TIMEOUT = 60.0
GCODE_SCRIPT_PATH = "/printer/gcode/script?script="
_ERROR_HEADER_LEN = 41
_ERROR_TAIL_LEN = 2


@dataclass
class PrinterData:
    """Printer status as last reported by Moonraker."""

    bed_actual: int = 0
    bed_target: int = 0
    nozzle_actual: int = 0
    nozzle_target: int = 0
    progress: int = 0
    file_path: str = ""
    pause: bool = False
    printing: bool = False
    homing: bool = False
    probing: bool = False
    qgling: bool = False
    heating_nozzle: bool = False
    heating_bed: bool = False
    changing_lanes: bool = False


class PostQueueFull(Exception):
    """Raised when a request is queued while the POST queue is full."""


class PostQueue:
    """First-in first-out queue of request paths with a fixed capacity."""

    def __init__(self, capacity: int = QUEUE_LEN) -> None:
        self.capacity = capacity
        self._items: deque[str] = deque()

    def push(self, path: str) -> None:
        if len(self._items) >= self.capacity:
            raise PostQueueFull("moonraker post queue overflow")
        self._items.append(path)

    def pop(self) -> str:
        if not self._items:
            raise IndexError("pop from an empty post queue")
        return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)


def _dig(document: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(document, dict):
            return None
        document = document.get(key)
    return document


def _as_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return True


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _as_string(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _rounded(value: Any) -> int:
    return int(_as_float(value) + 0.5)


class Moonraker:
    """Talks to Moonraker: status queries and queued G-code posts."""

    def __init__(self, host: str, session: requests.Session | None = None) -> None:
        self.host = host
        self.session = session if session is not None else requests.Session()
        self.unconnected = False
        self.unready = False
        self.data_unlock = False
        self.data = PrinterData()
        self.post_queue = PostQueue()
        self.last_error = ""

    def send_request(self, method: str, path: str) -> str:
        """Send a request to the host on port 80 and return the body text."""
        url = f"http://{self.host}:80{path}".replace(" ", "%20")
        try:
            response = self.session.request(method, url, timeout=REQUEST_TIMEOUT)
        except requests.RequestException:
            # Long-running G-code can time out on POST; only GET marks us offline.
            if method == "GET":
                self.unconnected = True
            logger.warning("moonraker http %s error.", method)
            return ""
        self.unconnected = False
        body = response.text
        if response.status_code == 400 and body:
            self.last_error = self._error_message(body)
            logger.debug("moonraker error: %s", self.last_error)
        return body

    @staticmethod
    def _error_message(body: str) -> str:
        try:
            document = json.loads(body)
        except ValueError:
            document = None
        message = _as_string(_dig(document, "error", "message"))
        message = message[_ERROR_HEADER_LEN:]
        if len(message) >= _ERROR_TAIL_LEN:
            message = message[:-_ERROR_TAIL_LEN]
        return message.replace("\\n", "\n")

    def post_to_queue(self, path: str) -> None:
        """Queue a POST path; raises PostQueueFull when the queue is full."""
        try:
            self.post_queue.push(path)
        except PostQueueFull:
            logger.warning("moonraker post queue overflow!")
            raise
        logger.debug("queued %s (%d pending)", path, len(self.post_queue))

    def post_gcode_to_queue(self, gcode: str) -> None:
        self.post_to_queue(GCODE_SCRIPT_PATH + gcode)

    def http_post_loop(self) -> str | None:
        """Send the oldest queued POST, if any, and return its response body."""
        if not len(self.post_queue):
            return None
        path = self.post_queue.pop()
        logger.debug("request: %s", path)
        return self.send_request("POST", path)

    def get_printer_ready(self) -> None:
        """Update ``unready`` from the Klipper webhooks state."""
        url = f"http://{self.host}/printer/objects/query?webhooks"
        try:
            response = self.session.get(url, timeout=REQUEST_TIMEOUT)
        except requests.RequestException:
            return
        if response.status_code != 200:
            return
        body = response.text
        if not body:
            self.unready = True
            logger.warning("Empty: moonraker: get_printer_ready")
            return
        try:
            document = json.loads(body)
        except ValueError as error:
            logger.warning("Failed to parse JSON: %s", error)
            return
        state = _as_string(_dig(document, "result", "status", "webhooks", "state"))
        self.unready = state != "ready"

    def get_printer_info(self) -> None:
        """Update temperatures and print flags in ``data``."""
        url = f"http://{self.host}/api/printer"
        try:
            response = self.session.get(url, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as error:
            logger.warning("HTTP Error: %s", error)
            return
        body = response.text
        if not body:
            logger.warning("Empty: moonraker: get_printer_info")
            return
        try:
            document = json.loads(body)
        except ValueError as error:
            logger.warning("Deserialization failed: %s", error)
            return

        def flag(name: str) -> bool:
            return _as_bool(_dig(document, "state", "flags", name))

        data = self.data
        data.pause = flag("pausing") or flag("paused")
        data.printing = flag("printing") or flag("cancelling") or data.pause
        data.bed_actual = _rounded(_dig(document, "temperature", "bed", "actual"))
        data.bed_target = _rounded(_dig(document, "temperature", "bed", "target"))
        data.nozzle_actual = _rounded(_dig(document, "temperature", "tool0", "actual"))
        data.nozzle_target = _rounded(_dig(document, "temperature", "tool0", "target"))

    def http_get_loop(self) -> None:
        """Refresh readiness and, when ready, printer information."""
        self.data_unlock = False
        self.get_printer_ready()
        if not self.unready:
            self.get_printer_info()
        self.data_unlock = True