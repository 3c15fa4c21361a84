"""Pulse-dimmed backlight driver for an AW9346-style single-wire LED controller."""

from __future__ import annotations

import time
from typing import Protocol

MAX_LEVEL = 16
_SHUTDOWN_SECONDS = 0.003
_POWER_ON_SECONDS = 0.000025
_PULSE_SECONDS = 0.000001


class OutputPin(Protocol):
    """A digital output line."""

    def write(self, value: bool) -> None: ...


class Backlight:
    """Backlight whose brightness steps down by one with every low pulse, wrapping
    from level 1 back to the maximum."""

    def __init__(self, pin: OutputPin) -> None:
        self.pin = pin
        self.pin.write(False)
        time.sleep(_SHUTDOWN_SECONDS)
        self.level = 0

    def set_level(self, level: int) -> int:
        """Set the brightness (clamped to 0..16) and return the pulses sent."""
        target = max(0, min(MAX_LEVEL, level))
        if target == self.level:
            return 0

        if target == 0:
            self.pin.write(False)
            time.sleep(_SHUTDOWN_SECONDS)
            self.level = 0
            return 0

        current = self.level
        if current <= 0:
            self.pin.write(True)
            time.sleep(_POWER_ON_SECONDS)
            current = MAX_LEVEL
        if current < target:
            current += MAX_LEVEL

        pulses = current - target
        for _ in range(pulses):
            self.pin.write(False)
            time.sleep(_PULSE_SECONDS)
            self.pin.write(True)
            time.sleep(_PULSE_SECONDS)

        self.level = target
        return pulses