"""Driver for the AXS15231B LCD controller over a quad-SPI bus."""

from __future__ import annotations

import struct
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Protocol, Sequence

TFT_MADCTL = 0x36
TFT_MAD_MY = 0x80
TFT_MAD_MX = 0x40
TFT_MAD_MV = 0x20
TFT_MAD_ML = 0x10
TFT_MAD_BGR = 0x08
TFT_MAD_MH = 0x04
TFT_MAD_RGB = 0x00

TFT_INVOFF = 0x20
TFT_INVON = 0x21

CMD_COLUMN_ADDRESS = 0x2A
CMD_ROW_ADDRESS = 0x2B
CMD_SLEEP_IN = 0x10

TFT_WIDTH = 180
TFT_HEIGHT = 640
SEND_BUF_SIZE = 28800 // 2

WRITE_COMMAND = 0x02
PIXEL_COMMAND = 0x32
PIXEL_ADDRESS = 0x002C00

DATA_CAPACITY = 36
LENGTH_MASK = 0x3F
FLAG_LONG_DELAY = 0x80
FLAG_SHORT_DELAY = 0x40
LONG_DELAY = 0.200
SHORT_DELAY = 0.020
RESET_DELAYS = (0.130, 0.130, 0.300)


class QspiBus(Protocol):
    """A half-duplex quad-SPI master with chip-select and reset lines.

    ``command`` and ``address`` are ``None`` for a transfer that carries only data.
    """

    def select(self, active: bool) -> None: ...

    def reset(self, level: bool) -> None: ...

    def transmit(
        self, command: int | None, address: int | None, data: bytes, quad: bool
    ) -> None: ...


@dataclass(frozen=True)
class LcdCommand:
    """One entry of a command table: the low six bits of ``flags`` give the
    payload length, bits 6 and 7 ask for a delay after sending."""

    cmd: int
    data: bytes = b""
    flags: int = 0

    def __post_init__(self) -> None:
        if len(self.data) > DATA_CAPACITY:
            raise ValueError(f"command data holds at most {DATA_CAPACITY} bytes")

    @property
    def payload(self) -> bytes:
        """The bytes sent with the command, zero padded as the table stores them."""
        return self.data.ljust(DATA_CAPACITY, b"\x00")[: self.flags & LENGTH_MASK]

    @property
    def delay(self) -> float:
        """Seconds to wait after the command."""
        seconds = 0.0
        if self.flags & FLAG_LONG_DELAY:
            seconds += LONG_DELAY
        if self.flags & FLAG_SHORT_DELAY:
            seconds += SHORT_DELAY
        return seconds


INIT_SEQUENCE: tuple[LcdCommand, ...] = (
    LcdCommand(0x28, b"\x00", 0x40),
    LcdCommand(0x10, b"\x00", 0x20),
    LcdCommand(0x11, b"\x00", 0x80),
    LcdCommand(0x29, b"\x00", 0x00),
)


class Rotation(IntEnum):
    PORTRAIT = 0
    LANDSCAPE = 1
    INVERTED_PORTRAIT = 2
    INVERTED_LANDSCAPE = 3


_MADCTL = {
    Rotation.PORTRAIT: TFT_MAD_RGB,
    Rotation.LANDSCAPE: TFT_MAD_MX | TFT_MAD_MV | TFT_MAD_RGB,
    Rotation.INVERTED_PORTRAIT: TFT_MAD_MX | TFT_MAD_MY | TFT_MAD_RGB,
    Rotation.INVERTED_LANDSCAPE: TFT_MAD_MV | TFT_MAD_MY | TFT_MAD_RGB,
}


def madctl_for_rotation(rotation: int) -> int:
    """Return the memory access control byte for a rotation 0..3."""
    try:
        return _MADCTL[Rotation(rotation)]
    except ValueError:
        raise ValueError(f"rotation must be 0..3, got {rotation}") from None


def _coordinate(value: int, name: str) -> int:
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"{name} must fit in 16 bits, got {value}")
    return value


def address_set_commands(x1: int, y1: int, x2: int, y2: int) -> list[LcdCommand]:
    """Return the column and row address commands for a drawing window."""
    x1, y1 = _coordinate(x1, "x1"), _coordinate(y1, "y1")
    x2, y2 = _coordinate(x2, "x2"), _coordinate(y2, "y2")
    return [
        LcdCommand(CMD_COLUMN_ADDRESS, struct.pack(">HH", x1, x2), 4),
        LcdCommand(CMD_ROW_ADDRESS, struct.pack(">HH", y1, y2), 4),
    ]


def chunk_pixels(pixels: Sequence[int], chunk_size: int) -> Iterator[Sequence[int]]:
    """Yield consecutive slices of at most ``chunk_size`` pixels."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    for start in range(0, len(pixels), chunk_size):
        yield pixels[start : start + chunk_size]


def _pack_pixels(pixels: Sequence[int]) -> bytes:
    try:
        return struct.pack(f"<{len(pixels)}H", *pixels)
    except struct.error as error:
        raise ValueError(f"pixels must be 16-bit values: {error}") from None


class Axs15231b:
    """AXS15231B display controller."""

    def __init__(self, bus: QspiBus) -> None:
        self.bus = bus

    def _send_command(self, cmd: int, data: bytes = b"") -> None:
        if cmd == 0xFF and len(data) == 0x1F:
            command, address, data = WRITE_COMMAND, 0xFFFF, b""
        elif cmd == 0x00:
            command, address, data = 0x00, 0x0000, data[:4].ljust(4, b"\x00")
        else:
            command, address = WRITE_COMMAND, cmd << 8
        self.bus.select(True)
        self.bus.transmit(command, address, bytes(data), False)
        self.bus.select(False)

    def _write_pixels(self, pixels: Sequence[int]) -> None:
        self.bus.select(True)
        for index, chunk in enumerate(chunk_pixels(pixels, SEND_BUF_SIZE)):
            data = _pack_pixels(chunk)
            if index == 0:
                self.bus.transmit(PIXEL_COMMAND, PIXEL_ADDRESS, data, True)
            else:
                self.bus.transmit(None, None, data, True)
        self.bus.select(False)

    def init(self) -> None:
        """Reset the panel and send the power-up command sequence."""
        for level, delay in zip((True, False, True), RESET_DELAYS):
            self.bus.reset(level)
            time.sleep(delay)
        for command in INIT_SEQUENCE:
            self._send_command(command.cmd, command.payload)
            if command.delay:
                time.sleep(command.delay)

    def set_rotation(self, rotation: int) -> None:
        self._send_command(TFT_MADCTL, bytes([madctl_for_rotation(rotation)]))

    def set_address(self, x1: int, y1: int, x2: int, y2: int) -> None:
        """Set the drawing window, both corners inclusive."""
        for command in address_set_commands(x1, y1, x2, y2):
            self._send_command(command.cmd, command.payload)

    def push_colors(
        self, x: int, y: int, width: int, height: int, pixels: Sequence[int]
    ) -> None:
        """Write a ``width`` by ``height`` block of RGB565 pixels at (x, y)."""
        if width <= 0 or height <= 0:
            return
        if len(pixels) != width * height:
            raise ValueError(
                f"expected {width * height} pixels for {width}x{height}, got {len(pixels)}"
            )
        self.set_address(x, y, x + width - 1, y + height - 1)
        self._write_pixels(pixels)

    def fill(self, x_start: int, y_start: int, x_end: int, y_end: int, color: int) -> None:
        """Fill the area from the start corner up to, not including, the end corner."""
        if x_end < x_start or y_end < y_start:
            raise ValueError("end corner lies before start corner")
        width = x_end - x_start
        height = y_end - y_start
        self.push_colors(x_start, y_start, width, height, [color] * (width * height))

    def draw_point(self, x: int, y: int, color: int) -> None:
        self.set_address(x, y, x + 1, y + 1)
        self._write_pixels([color])

    def sleep(self) -> None:
        """Put the panel into sleep mode."""
        self._send_command(CMD_SLEEP_IN)