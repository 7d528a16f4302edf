import pytest

from hidg.layout import Button, Buttons
from hidg.mouse import ChangeKind, Mouse, MouseInput, MouseInputChange, MouseOutput, diff
from hidg.protocol import InvalidValue, ReportLengthError, StateChange, ValueChange


@pytest.fixture
def old():
    report = MouseInput()
    report.press_button(Button.PRIMARY)
    report.press_button(Button.TERTIARY)
    report.set_pointer((120, 450))
    report.set_wheel(7)
    return report


@pytest.fixture
def new():
    report = MouseInput()
    report.press_button(Button.TERTIARY)
    report.press_button(Button.SECONDARY)
    report.set_pointer((120, 150))
    report.set_wheel(-1)
    return report


def test_mouse_input_diff(new, old):
    assert list(new - old) == [
        MouseInputChange.button(StateChange.release(Button.PRIMARY)),
        MouseInputChange.button(StateChange.press(Button.SECONDARY)),
        MouseInputChange.pointer((120, 150)),
        MouseInputChange.wheel(-1),
    ]


def test_mouse_input_relative_diff(new, old):
    new.release_button(Button.SECONDARY)
    new.set_wheel(7)
    assert list(new.diff(old, True, True)) == [
        MouseInputChange.button(StateChange.release(Button.PRIMARY)),
        MouseInputChange.pointer((0, -300)),
    ]


def test_diff_is_lazy_and_not_rewindable(new, old):
    changes = diff(new, old)
    first = next(changes)
    assert first.kind is ChangeKind.BUTTON
    assert len(list(changes)) == 3
    assert list(changes) == []


def test_diff_of_equal_reports_is_empty(old):
    assert list(old - old.copy()) == []


def test_diff_reports_unknown_button_bits():
    changes = list(MouseInput(buttons=0x09) - MouseInput())
    assert changes == [
        MouseInputChange.button(StateChange.press(Button.PRIMARY)),
        MouseInputChange.button(StateChange.press(Button.NONE)),
    ]


def test_relative_diff_wraps():
    new = MouseInput(pointer=(32767, 0), wheel=127)
    old = MouseInput(pointer=(-32768, 0), wheel=-128)
    assert list(new.diff(old, relative_pointer=True, relative_wheel=True)) == [
        MouseInputChange.pointer((-1, 0)),
        MouseInputChange.wheel(-1),
    ]


def test_relative_changes_wrap_around():
    report = MouseInput(pointer=(32767, -32768), wheel=127)
    report.change_pointer((1, -1), relative=True)
    report.change_wheel(1, relative=True)
    assert report.pointer() == (-32768, 32767)
    assert report.wheel() == -128


def test_absolute_values_are_range_checked():
    report = MouseInput()
    with pytest.raises(ValueError):
        report.set_pointer((40000, 0))
    with pytest.raises(ValueError):
        report.change_wheel(200, relative=False)


def test_buttons():
    report = MouseInput()
    report.press_buttons(Buttons.PRIMARY | Buttons.TERTIARY)
    assert report.count_pressed() == 2
    assert list(report.pressed()) == [Button.PRIMARY, Button.TERTIARY]
    report.release_button(Button.PRIMARY)
    assert report.buttons() == Buttons.TERTIARY


def test_release_keeps_unknown_bits():
    report = MouseInput.from_bytes(bytes([0x09, 0, 0, 0, 0, 0]))
    report.release_button(Button.PRIMARY)
    assert bytes(report)[0] == 0x08


def test_wire_layout():
    report = MouseInput(Buttons.PRIMARY, (1, -2), -1)
    assert bytes(report) == bytes([0x01, 0x01, 0x00, 0xFE, 0xFF, 0xFF])
    assert MouseInput.from_bytes(bytes(report)) == report


def test_report_sizes():
    assert MouseInput.SIZE == 6
    assert MouseOutput.SIZE == 0
    assert bytes(MouseOutput()) == b""
    with pytest.raises(ReportLengthError):
        MouseInput.from_bytes(bytes(5))
    with pytest.raises(ReportLengthError):
        MouseOutput.from_bytes(b"\x00")


def test_extend():
    report = MouseInput()
    report.extend([
        StateChange.press(Button.PRIMARY),
        StateChange.press(Buttons.SECONDARY | Buttons.TERTIARY),
        StateChange.release(Buttons.TERTIARY),
        ValueChange.absolute((10, 20)),
        ValueChange.delta((5, -5)),
        ValueChange.absolute(3),
        ValueChange.delta(-4),
    ])
    assert report.buttons() == Buttons.PRIMARY | Buttons.SECONDARY
    assert report.pointer() == (15, 15)
    assert report.wheel() == -1

    report.extend([(100, 200), MouseInput(wheel=2)])
    assert report == MouseInput(wheel=2)


def test_dict_round_trip(old):
    data = old.to_dict()
    assert data == {"b": 0x05, "p": [120, 450], "w": 7}
    assert MouseInput.from_dict(data) == old
    with pytest.raises(InvalidValue):
        MouseInput.from_dict({"b": 0x08, "p": [0, 0], "w": 0})


@pytest.mark.parametrize("data", [
    {"b": 0, "p": [0, 0], "w": 300},
    {"b": 0, "p": [0, 0], "w": -129},
    {"b": 0, "p": [40000, 0], "w": 0},
    {"b": 0, "p": [1.9, 0], "w": 0},
    {"b": 0, "p": [0, 0], "w": True},
    {"b": 0, "p": [1, 2, 3], "w": 0},
])
def test_from_dict_rejects_bad_pointer_and_wheel(data):
    with pytest.raises(InvalidValue):
        MouseInput.from_dict(data)


def test_from_dict_accepts_range_limits():
    report = MouseInput.from_dict({"b": 0, "p": [-32768, 32767], "w": -128})
    assert report.pointer() == (-32768, 32767)
    assert report.wheel() == -128


def test_change_str():
    assert str(MouseInputChange.button(StateChange.press(Button.SECONDARY))) == "press secondary"
    assert str(MouseInputChange.pointer((0, -300))) == "pointer 0 -300"
    assert str(MouseInputChange.wheel(-1)) == "wheel -1"


def test_mouse_class():
    mouse = Mouse()
    assert str(mouse) == "mouse"
    assert mouse.input() == MouseInput()
    assert mouse.output() == MouseOutput()
