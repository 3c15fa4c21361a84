from unittest import mock

import pytest

from turtlepanel.panel import (
    CMD_COLUMN_ADDRESS,
    CMD_ROW_ADDRESS,
    INIT_SEQUENCE,
    PIXEL_ADDRESS,
    PIXEL_COMMAND,
    RESET_DELAYS,
    SEND_BUF_SIZE,
    TFT_MAD_MV,
    TFT_MAD_MX,
    TFT_MAD_MY,
    TFT_MAD_RGB,
    TFT_MADCTL,
    WRITE_COMMAND,
    Axs15231b,
    LcdCommand,
    Rotation,
    address_set_commands,
    chunk_pixels,
    madctl_for_rotation,
)


class FakeBus:
    def __init__(self):
        self.events = []

    def select(self, active):
        self.events.append(("select", active))

    def reset(self, level):
        self.events.append(("reset", level))

    def transmit(self, command, address, data, quad):
        self.events.append(("tx", command, address, bytes(data), quad))

    @property
    def transfers(self):
        return [event[1:] for event in self.events if event[0] == "tx"]


@pytest.fixture
def bus():
    return FakeBus()


@pytest.mark.parametrize(
    "rotation, expected",
    [
        (Rotation.PORTRAIT, TFT_MAD_RGB),
        (Rotation.LANDSCAPE, TFT_MAD_MX | TFT_MAD_MV),
        (Rotation.INVERTED_PORTRAIT, TFT_MAD_MX | TFT_MAD_MY),
        (Rotation.INVERTED_LANDSCAPE, TFT_MAD_MV | TFT_MAD_MY),
    ],
)
def test_madctl_for_rotation(rotation, expected):
    assert madctl_for_rotation(rotation) == expected


def test_madctl_rejects_unknown_rotation():
    with pytest.raises(ValueError):
        madctl_for_rotation(4)


def test_address_set_commands_big_endian():
    commands = address_set_commands(0x0102, 0x0003, 0x0405, 0x0006)
    assert [c.cmd for c in commands] == [CMD_COLUMN_ADDRESS, CMD_ROW_ADDRESS]
    assert commands[0].payload == bytes([0x01, 0x02, 0x04, 0x05])
    assert commands[1].payload == bytes([0x00, 0x03, 0x00, 0x06])


def test_address_set_rejects_out_of_range():
    with pytest.raises(ValueError):
        address_set_commands(0, 0, 0x10000, 0)


def test_chunk_pixels_round_trip():
    pixels = list(range(25))
    chunks = list(chunk_pixels(pixels, 7))
    assert [p for chunk in chunks for p in chunk] == pixels
    assert all(len(chunk) <= 7 for chunk in chunks)
    assert len(chunks[-1]) == 25 % 7


def test_chunk_pixels_rejects_zero_size():
    with pytest.raises(ValueError):
        list(chunk_pixels([1, 2], 0))


def test_lcd_command_payload_and_delay():
    command = LcdCommand(0x10, b"\x00", 0x20)
    assert command.payload == bytes(0x20)
    assert LcdCommand(0x28, b"\x00", 0x40).payload == b""
    assert LcdCommand(0x11, b"\x00", 0x80).delay > LcdCommand(0x28, b"\x00", 0x40).delay
    assert LcdCommand(0x29, b"\x00", 0x00).delay == 0.0


def test_lcd_command_rejects_oversized_data():
    with pytest.raises(ValueError):
        LcdCommand(0x01, bytes(37), 0)


def test_init_resets_and_sends_sequence(bus):
    panel = Axs15231b(bus)
    with mock.patch("turtlepanel.panel.time.sleep") as sleep:
        panel.init()
    resets = [event[1] for event in bus.events if event[0] == "reset"]
    assert resets == [True, False, True]
    assert [call.args[0] for call in sleep.call_args_list[:3]] == list(RESET_DELAYS)
    transfers = bus.transfers
    assert [t[1] for t in transfers] == [c.cmd << 8 for c in INIT_SEQUENCE]
    assert all(t[0] == WRITE_COMMAND and t[3] is False for t in transfers)
    assert transfers[1][2] == bytes(0x20)


def test_set_rotation_sends_madctl(bus):
    Axs15231b(bus).set_rotation(Rotation.LANDSCAPE)
    assert bus.transfers == [
        (WRITE_COMMAND, TFT_MADCTL << 8, bytes([TFT_MAD_MX | TFT_MAD_MV]), False)
    ]


def test_set_rotation_invalid(bus):
    with pytest.raises(ValueError):
        Axs15231b(bus).set_rotation(7)


def test_push_colors_small_block(bus):
    Axs15231b(bus).push_colors(2, 3, 2, 1, [0x1234, 0xABCD])
    transfers = bus.transfers
    assert transfers[0] == (WRITE_COMMAND, CMD_COLUMN_ADDRESS << 8, bytes([0, 2, 0, 3]), False)
    assert transfers[1] == (WRITE_COMMAND, CMD_ROW_ADDRESS << 8, bytes([0, 3, 0, 3]), False)
    assert transfers[2] == (PIXEL_COMMAND, PIXEL_ADDRESS, b"\x34\x12\xcd\xab", True)
    assert len(transfers) == 3


def test_push_colors_chunks_large_block(bus):
    width, height = 180, 100
    pixels = [0x0F0F] * (width * height)
    Axs15231b(bus).push_colors(0, 0, width, height, pixels)
    pixel_transfers = bus.transfers[2:]
    assert pixel_transfers[0][:2] == (PIXEL_COMMAND, PIXEL_ADDRESS)
    assert all(t[:2] == (None, None) for t in pixel_transfers[1:])
    assert all(len(t[2]) <= SEND_BUF_SIZE * 2 for t in pixel_transfers)
    assert sum(len(t[2]) for t in pixel_transfers) == 2 * len(pixels)


def test_push_colors_select_brackets(bus):
    Axs15231b(bus).push_colors(0, 0, 1, 1, [1])
    selects = [event[1] for event in bus.events if event[0] == "select"]
    assert selects == [True, False] * 3


def test_push_colors_length_mismatch(bus):
    with pytest.raises(ValueError):
        Axs15231b(bus).push_colors(0, 0, 2, 2, [1, 2, 3])


def test_push_colors_rejects_wide_pixel(bus):
    with pytest.raises(ValueError):
        Axs15231b(bus).push_colors(0, 0, 1, 1, [0x10000])


def test_fill_writes_color_over_area(bus):
    Axs15231b(bus).fill(10, 20, 13, 22, 0xF800)
    transfers = bus.transfers
    assert transfers[0][2] == bytes([0, 10, 0, 12])
    assert transfers[1][2] == bytes([0, 20, 0, 21])
    assert transfers[2][2] == b"\x00\xf8" * 6


def test_fill_rejects_reversed_corners(bus):
    with pytest.raises(ValueError):
        Axs15231b(bus).fill(5, 5, 4, 6, 0)


def test_draw_point(bus):
    Axs15231b(bus).draw_point(7, 9, 0x07E0)
    transfers = bus.transfers
    assert transfers[0][2] == bytes([0, 7, 0, 8])
    assert transfers[1][2] == bytes([0, 9, 0, 10])
    assert transfers[2] == (PIXEL_COMMAND, PIXEL_ADDRESS, b"\xe0\x07", True)


def test_sleep_sends_sleep_in(bus):
    Axs15231b(bus).sleep()
    assert bus.transfers == [(WRITE_COMMAND, 0x10 << 8, b"", False)]