"""Status texts and colours that the panel shows for the AFC unit and printer."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from turtlepanel.afc_state import AfcState
from turtlepanel.moonraker import PrinterData

SLOT_COUNT = 4
_LANE_NAME_LEN = 5
_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def boolean_text(value: bool) -> str:
    """Return the label text for a boolean flag."""
    return "True" if value else "False"


def rgb565_to_hex(value: int) -> int:
    """Pack the raw 5/6/5-bit channels of an RGB565 colour as 0xRRGGBB."""
    red = (value >> 11) & 0x1F
    green = (value >> 5) & 0x3F
    blue = value & 0x1F
    return (red << 16) | (green << 8) | blue


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def active_lane_from_load(current_load: str | None) -> int:
    """Return the lane number of a loaded lane name such as ``lane3``, else -1."""
    if current_load is None or len(current_load) != _LANE_NAME_LEN:
        return -1
    return _atoi(current_load[_LANE_NAME_LEN - 1 :])


def lane_label(lane: int, tool: int) -> str:
    """Return the two-line text of a lane button."""
    return f"Lane{lane}\nT{tool}"


@dataclass
class StatusView:
    """Texts and colours of the status screen's widgets."""

    tool_status: str = ""
    hub_status: str = ""
    slot_labels: list[str] = field(default_factory=lambda: [""] * SLOT_COUNT)
    slot_colors: list[int] = field(default_factory=lambda: [0] * SLOT_COUNT)
    nozzle: str = ""
    bed: str = ""
    active_lane: int = -1

    def refresh(self, afc: AfcState, printer: PrinterData) -> None:
        """Bring every widget up to date with the AFC and printer state."""
        self.active_lane = active_lane_from_load(afc.current_load_text)
        self.tool_status = afc.extruder_lane_loaded
        self.hub_status = boolean_text(afc.loaded_to_hub)

        for index, lane in enumerate(afc.lanes[:SLOT_COUNT]):
            self.slot_labels[index] = lane_label(lane.lane, lane.map_tool)
            self.slot_colors[index] = lane.led_color & 0xFFFFFF

        if printer.nozzle_actual != _atoi(self.nozzle):
            self.nozzle = str(printer.nozzle_actual)
        # The bed label is refreshed whenever it differs from the nozzle reading.
        if printer.nozzle_actual != _atoi(self.bed):
            self.bed = str(printer.bed_actual)