import pytest

from turtlepanel.touch import (
    CST816S_DEFAULT_ADDRESS,
    REG_DEVICE_ID,
    REG_DISABLE_AUTO_SLEEP,
    REG_FIRMWARE_VER,
    REG_GESTURE_ID,
    REG_MOTION_MASK,
    REG_REPORT_MODE,
    REG_REPORT_RATE,
    REG_AUTO_RST_SEC,
    REG_LONG_RST_SEC,
    Cst816s,
    Gesture,
    TouchEvent,
    TouchPoint,
    TouchStatus,
    decode_axs_touch,
    decode_touch,
)


class FakePin:
    def __init__(self):
        self.writes = []

    def write(self, value):
        self.writes.append(bool(value))


class FakeBus:
    def __init__(self, registers=None, short=False):
        self.registers = registers or {}
        self.writes = []
        self.short = short
        self._selected = None

    def write(self, address, data):
        self.writes.append((address, bytes(data)))
        self._selected = data[0]

    def read(self, address, length):
        data = self.registers.get(self._selected, b"")
        if self.short:
            return data[: length - 1]
        return data[:length]


def make_controller(registers=None, short=False):
    bus = FakeBus(registers, short)
    pin = FakePin()
    return Cst816s(bus, pin, CST816S_DEFAULT_ADDRESS), bus, pin


def test_decode_touch_example():
    event = decode_touch(bytes([0x05, 0x01, 0x81, 0x2C, 0x02, 0x58]))
    assert event == TouchEvent(
        gesture=Gesture.CLICK, finger=1, status=TouchStatus.PRESSED, x=0x12C, y=0x258
    )


def test_decode_touch_ignores_high_nibble_of_y():
    event = decode_touch(bytes([0x00, 0x00, 0x40, 0x00, 0xF0, 0x00]))
    assert event.y == 0
    assert event.status == TouchStatus.RELEASED


def test_decode_touch_short_raises():
    with pytest.raises(ValueError):
        decode_touch(bytes([1, 2, 3]))


def test_decode_axs_pressed_swaps_and_flips():
    point = decode_axs_touch(bytes([0, 1, 0x00, 0x64, 0x00, 0x32, 0, 0]))
    assert point.pressed is True
    assert point.x == 0x32
    assert point.y == 540


def test_decode_axs_clamps_to_panel():
    point = decode_axs_touch(bytes([0, 1, 0x0F, 0xFF, 0x0F, 0xFF, 0, 0]))
    assert point == TouchPoint(pressed=True, x=180, y=640)


@pytest.mark.parametrize(
    "buf",
    [
        bytes([0, 0, 0, 0, 0, 0, 0, 0]),
        bytes([3, 1, 0x00, 0x64, 0x00, 0x32, 0, 0]),
    ],
)
def test_decode_axs_released(buf):
    assert decode_axs_touch(buf) == TouchPoint(pressed=False)


def test_decode_axs_short_raises():
    with pytest.raises(ValueError):
        decode_axs_touch(bytes([0, 0]))


def test_begin_pulses_reset_low_then_high():
    controller, _, pin = make_controller()
    controller.begin()
    assert pin.writes == [False, True]


def test_wakeup_resets():
    controller, _, pin = make_controller()
    controller.wakeup()
    assert pin.writes == [False, True]


def test_ready_flag_is_consumed():
    controller, _, _ = make_controller()
    assert controller.ready() is False
    controller.set_ready()
    assert controller.ready() is True
    assert controller.ready() is False


def test_device_id_reads_register():
    controller, bus, _ = make_controller({REG_DEVICE_ID: bytes([0xB4])})
    assert controller.device_id() == 0xB4
    assert bus.writes == [(CST816S_DEFAULT_ADDRESS, bytes([REG_DEVICE_ID]))]


def test_firmware_version():
    controller, _, _ = make_controller({REG_FIRMWARE_VER: bytes([0x07])})
    assert controller.firmware_version() == 0x07


def test_short_read_raises():
    controller, _, _ = make_controller({REG_DEVICE_ID: bytes([0xB4])}, short=True)
    with pytest.raises(OSError):
        controller.device_id()


@pytest.mark.parametrize(
    "method, register",
    [
        ("set_motion_mask", REG_MOTION_MASK),
        ("set_report_rate", REG_REPORT_RATE),
        ("set_report_mode", REG_REPORT_MODE),
        ("set_auto_reset", REG_AUTO_RST_SEC),
        ("set_long_reset", REG_LONG_RST_SEC),
        ("set_disable_auto_sleep", REG_DISABLE_AUTO_SLEEP),
    ],
)
def test_setters_write_register_and_value(method, register):
    controller, bus, _ = make_controller()
    getattr(controller, method)(0x11)
    assert bus.writes == [(CST816S_DEFAULT_ADDRESS, bytes([register, 0x11]))]


def test_setter_rejects_out_of_range():
    controller, bus, _ = make_controller()
    with pytest.raises(ValueError):
        controller.set_report_mode(256)
    assert bus.writes == []


def test_get_touch_reads_report():
    raw = bytes([0x0B, 0x01, 0x01, 0x2C, 0x02, 0x58])
    controller, bus, _ = make_controller({REG_GESTURE_ID: raw})
    event = controller.get_touch()
    assert event == decode_touch(raw)
    assert event.gesture == Gesture.DOUBLE_CLICK
    assert bus.writes[0] == (CST816S_DEFAULT_ADDRESS, bytes([REG_GESTURE_ID]))