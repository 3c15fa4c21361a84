"""Touch controllers: the CST816S over I2C and the AXS15231B touch report."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

from turtlepanel.backlight import OutputPin

CST816S_DEFAULT_ADDRESS = 0x15

REG_GESTURE_ID = 0x01
REG_FINGER_NUM = 0x02
REG_STATUS = 0x03
REG_XPOS_H4 = 0x03
REG_XPOS_L8 = 0x04
REG_YPOS_H4 = 0x05
REG_YPOS_L8 = 0x06
REG_SLEEP = 0xE5
REG_DEVICE_ID = 0xA7
REG_PROJECT_ID = 0xA8
REG_FIRMWARE_VER = 0xA9
REG_MOTION_MASK = 0xEC
REG_REPORT_RATE = 0xEE
REG_REPORT_MODE = 0xFA
REG_AUTO_RST_SEC = 0xFB
REG_LONG_RST_SEC = 0xFC
REG_DISABLE_AUTO_SLEEP = 0xFE

DEVICE_ID_CST716 = 0x20
DEVICE_ID_CST816S = 0xB4
DEVICE_ID_CST816T = 0xB5
DEVICE_ID_CST816D = 0xB6

_TOUCH_REPORT_LEN = 6
_RESET_LOW_SECONDS = 0.010
_RESET_SETTLE_SECONDS = 0.050

AXS_TOUCH_ADDRESS = 0x3B
AXS_READ_TOUCHPAD_CMD = bytes([0xB5, 0xAB, 0xA5, 0x5A, 0x00, 0x00, 0x00, 0x08])
AXS_TOUCH_REPORT_LEN = 8
AXS_TOUCH_ONE_POINT_LEN = 6
AXS_TOUCH_GESTURE_POS = 0
AXS_TOUCH_POINT_NUM = 1
AXS_TOUCH_X_H_POS = 2
AXS_TOUCH_X_L_POS = 3
AXS_TOUCH_Y_H_POS = 4
AXS_TOUCH_Y_L_POS = 5
PANEL_LONG_SIDE = 640
PANEL_SHORT_SIDE = 180


class I2cBus(Protocol):
    """An I2C master; failures are raised as OSError."""

    def write(self, address: int, data: bytes) -> None: ...

    def read(self, address: int, length: int) -> bytes: ...


class Gesture(IntEnum):
    NONE = 0x00
    SCROLL_UP = 0x01
    SCROLL_DOWN = 0x02
    SCROLL_LEFT = 0x03
    SCROLL_RIGHT = 0x04
    CLICK = 0x05
    DOUBLE_CLICK = 0x0B
    LONG_PRESS = 0x0C


class TouchStatus(IntEnum):
    FIRST_PRESS = 0x00
    PRESSED = 0x08
    RELEASED = 0x04


@dataclass(frozen=True)
class TouchEvent:
    """One CST816S touch report; gesture and status are raw register values."""

    gesture: int
    finger: int
    status: int
    x: int
    y: int


@dataclass(frozen=True)
class TouchPoint:
    """Pointer state in screen coordinates."""

    pressed: bool
    x: int = 0
    y: int = 0


def decode_touch(raw: bytes) -> TouchEvent:
    """Decode the six report bytes read from the gesture register onwards."""
    if len(raw) < _TOUCH_REPORT_LEN:
        raise ValueError(f"touch report needs {_TOUCH_REPORT_LEN} bytes, got {len(raw)}")
    return TouchEvent(
        gesture=raw[0],
        finger=raw[1],
        status=(raw[2] >> 4) & 0x0F,
        x=((raw[2] & 0x0F) << 8) | raw[3],
        y=((raw[4] & 0x0F) << 8) | raw[5],
    )


def decode_axs_touch(buf: bytes) -> TouchPoint:
    """Turn an AXS15231B touch report into a pointer state for the rotated screen."""
    if len(buf) < AXS_TOUCH_ONE_POINT_LEN:
        raise ValueError(
            f"touch report needs {AXS_TOUCH_ONE_POINT_LEN} bytes, got {len(buf)}"
        )
    gesture = buf[AXS_TOUCH_GESTURE_POS]
    point_x = ((buf[AXS_TOUCH_X_H_POS] & 0x0F) << 8) + buf[AXS_TOUCH_X_L_POS]
    point_y = ((buf[AXS_TOUCH_Y_H_POS] & 0x0F) << 8) + buf[AXS_TOUCH_Y_L_POS]
    if gesture or not (point_x or point_y):
        return TouchPoint(pressed=False)
    # The panel is mounted rotated: flip the long axis (16-bit wrap) and swap.
    flipped = min((PANEL_LONG_SIDE - point_x) & 0xFFFF, PANEL_LONG_SIDE)
    return TouchPoint(pressed=True, x=min(point_y, PANEL_SHORT_SIDE), y=flipped)


def _byte(value: int, name: str) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must fit in one byte, got {value}")
    return value


class Cst816s:
    """CST816S capacitive touch controller on an I2C bus."""

    def __init__(
        self,
        bus: I2cBus,
        reset_pin: OutputPin,
        address: int = CST816S_DEFAULT_ADDRESS,
    ) -> None:
        self.bus = bus
        self.reset_pin = reset_pin
        self.address = address
        self._ready = False

    def _reset(self) -> None:
        self.reset_pin.write(False)
        time.sleep(_RESET_LOW_SECONDS)
        self.reset_pin.write(True)
        time.sleep(_RESET_SETTLE_SECONDS)

    def _read(self, register: int, length: int) -> bytes:
        self.bus.write(self.address, bytes([register]))
        data = bytes(self.bus.read(self.address, length))
        if len(data) < length:
            raise OSError(
                f"short read from register 0x{register:02X}: {len(data)} of {length} bytes"
            )
        return data

    def _write(self, register: int, value: int, name: str) -> None:
        self.bus.write(self.address, bytes([register, _byte(value, name)]))

    def begin(self) -> None:
        """Reset the controller so it starts reporting."""
        self._ready = False
        self._reset()

    def set_ready(self) -> None:
        """Interrupt handler: mark that a touch report is waiting."""
        self._ready = True

    def ready(self) -> bool:
        """Return whether a touch was signalled since the last call, clearing it."""
        if self._ready:
            self._ready = False
            return True
        return False

    def wakeup(self) -> None:
        self._reset()

    def device_id(self) -> int:
        return self._read(REG_DEVICE_ID, 1)[0]

    def firmware_version(self) -> int:
        return self._read(REG_FIRMWARE_VER, 1)[0]

    def set_motion_mask(self, mask: int) -> None:
        """Bit 2: continuous left/right, bit 1: continuous up/down, bit 0: double click."""
        self._write(REG_MOTION_MASK, mask, "mask")

    def set_report_rate(self, period: int) -> None:
        """Set the report interrupt period in units of 10 ms."""
        self._write(REG_REPORT_RATE, period, "period")

    def set_report_mode(self, mode: int) -> None:
        """0x60: touch interrupts, 0x11: gesture interrupts, 0x71: both."""
        self._write(REG_REPORT_MODE, mode, "mode")

    def set_auto_reset(self, seconds: int) -> None:
        """Reset after this many seconds of touch without a valid gesture."""
        self._write(REG_AUTO_RST_SEC, seconds, "seconds")

    def set_long_reset(self, seconds: int) -> None:
        """Reset after a touch held for this many seconds."""
        self._write(REG_LONG_RST_SEC, seconds, "seconds")

    def set_disable_auto_sleep(self, value: int) -> None:
        """0 enables automatic sleep; any other value disables it."""
        self._write(REG_DISABLE_AUTO_SLEEP, value, "value")

    def get_touch(self) -> TouchEvent:
        return decode_touch(self._read(REG_GESTURE_ID, _TOUCH_REPORT_LEN))