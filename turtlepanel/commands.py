"""G-code shortcuts queued from the panel's buttons."""

from __future__ import annotations

from turtlepanel.moonraker import Moonraker

_TOOL_COMMAND_MAX = 9
_LANE_COMMAND_MAX = 39


def afc_brush(client: Moonraker) -> None:
    client.post_gcode_to_queue("AFC_BRUSH")


def afc_cut(client: Moonraker) -> None:
    client.post_gcode_to_queue("AFC_CUT")


def afc_kick(client: Moonraker) -> None:
    client.post_gcode_to_queue("AFC_KICK")


def afc_park(client: Moonraker) -> None:
    client.post_gcode_to_queue("AFC_PARK")


def afc_poop(client: Moonraker) -> None:
    client.post_gcode_to_queue("AFC_POOP")


def bt_prep(client: Moonraker) -> None:
    client.post_gcode_to_queue("BT_PREP")


def g32(client: Moonraker) -> None:
    client.post_gcode_to_queue("G32")


def unload_tool(client: Moonraker) -> None:
    client.post_gcode_to_queue("BT_TOOL_UNLOAD")


def load_tool(client: Moonraker, tool: int) -> None:
    """Queue a tool change, ``T<tool>``."""
    client.post_gcode_to_queue(f"T{tool}"[:_TOOL_COMMAND_MAX])


def eject_lane(client: Moonraker, lane: int) -> None:
    """Queue ejecting the filament of one lane."""
    client.post_gcode_to_queue(f"BT_LANE_EJECT LANE={lane}"[:_LANE_COMMAND_MAX])