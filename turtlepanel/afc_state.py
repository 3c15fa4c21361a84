"""State of the filament changer as parsed from the AFC status API."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

NUM_LEGS = 12
PARSED_LANES = 4
CURRENT_LOAD_MAX = 31
NO_LANE = "-none-"
STATUS_KEY = "status:"

_LONG_MIN = -(2**31)
_LONG_MAX = 2**31 - 1
_HEX_PREFIX = re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]*)")


class ApiParseError(ValueError):
    """Raised when an API response cannot be used."""


@dataclass
class Lane:
    """One filament lane of a unit."""

    load: bool = False
    prep: bool = False
    loaded_to_hub: bool = False
    material: str = ""
    spool_id: str = ""
    color: str = ""
    weight: float = 0.0
    lane: int = 0
    led_color: int = 0
    map_tool: int = 0


def _obj(value: Any) -> dict | None:
    return value if isinstance(value, dict) else None


def _get(document: dict | None, key: str) -> Any:
    return document.get(key) if document is not None else None


def _as_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return True


def _as_float(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _as_int(value: Any) -> int:
    return int(_as_float(value))


def _as_string(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _parse_hex(text: str) -> int:
    """Parse a leading hexadecimal number the way strtol(..., 16) does."""
    match = _HEX_PREFIX.match(text)
    sign, digits = match.group(1), match.group(2)
    if not digits:
        return 0
    value = int(digits, 16)
    if sign == "-":
        value = -value
    return max(_LONG_MIN, min(_LONG_MAX, value))


def _map_tool(mapping: str) -> int:
    if len(mapping) == 2 and mapping[0] == "T":
        return ord(mapping[1]) - ord("0")
    return -1


@dataclass
class AfcState:
    """Everything the panel shows about the AFC unit."""

    event_time: float = 0.0
    lanes: list[Lane] = field(default_factory=lambda: [Lane() for _ in range(NUM_LEGS)])
    unit_name: str = ""
    current_load: str | None = None
    current_load_text: str = ""
    current_load_changed: bool = False
    tool_loaded: bool = False
    extruder_lane_loaded: str = NO_LANE
    loaded_to_hub: bool = False
    num_units: int = 0
    num_lanes: int = 0

    def apply_response(self, payload: str) -> None:
        """Update the state from a JSON status response."""
        try:
            document = json.loads(payload)
        except ValueError as error:
            raise ApiParseError(f"Failed to parse JSON: {error}") from error
        result = _obj(_get(_obj(document), "result"))
        if result is None:
            raise ApiParseError("Result key not found in JSON.")

        self.event_time = _as_float(result.get("eventtime"))
        status = _obj(result.get(STATUS_KEY))
        afc = _obj(_get(status, "AFC"))

        unit = None
        if afc:
            self.unit_name, first = next(iter(afc.items()))
            unit = _obj(first)
        if unit is not None:
            self._apply_unit(unit)
        else:
            logger.warning("Unit key not found in AFC.")

        system = _obj(_get(afc, "system"))
        if system is not None:
            self._apply_system(system)
        else:
            logger.warning("System key not found in AFC.")

    def _apply_unit(self, unit: dict) -> None:
        for index, lane in enumerate(self.lanes[:PARSED_LANES]):
            key = f"lane{index + 1}"
            if key not in unit:
                logger.debug("Checking key: %s - Key not found.", key)
                continue
            data = _obj(unit[key])
            lane.load = _as_bool(_get(data, "load"))
            lane.prep = _as_bool(_get(data, "prep"))
            lane.loaded_to_hub = _as_bool(_get(data, "loaded_to_hub"))
            lane.material = _as_string(_get(data, "material"))
            lane.spool_id = _as_string(_get(data, "spool_id"))
            lane.color = _as_string(_get(data, "color"))
            lane.weight = _as_float(_get(data, "weight"))
            lane.lane = _as_int(_get(data, "lane"))
            led = _as_string(_get(data, "filament_status_led")).replace("#", "0x")
            lane.led_color = _parse_hex(led)
            lane.map_tool = _map_tool(_as_string(_get(data, "map")))

        unit_system = _obj(unit.get("system"))
        if unit_system is not None:
            self.loaded_to_hub = _as_bool(unit_system.get("hub_loaded"))

    def _apply_system(self, system: dict) -> None:
        self.current_load_changed = False
        load = system.get("current_load")
        self.current_load = load if isinstance(load, str) else None
        if self.current_load is None:
            if self.current_load_text:
                self.current_load_text = ""
                self.current_load_changed = True
        elif self.current_load_text != self.current_load:
            self.current_load_text = self.current_load[:CURRENT_LOAD_MAX]
            self.current_load_changed = True

        extruder = _obj(_get(_obj(system.get("extruders")), "extruder"))
        if extruder is not None:
            self.tool_loaded = _as_bool(extruder.get("tool_start_sensor"))
            lane_loaded = extruder.get("lane_loaded")
            self.extruder_lane_loaded = lane_loaded if isinstance(lane_loaded, str) else NO_LANE


def parse_api_response(payload: str, state: AfcState) -> AfcState:
    """Apply a status response to ``state`` and return it."""
    state.apply_response(payload)
    return state