import pytest

from hidg.layout import Key
from hidg.protocol import (ReportLengthError, StateChange, Unknown, ValueChange,
                           check_read, check_write)


def test_check_write():
    check_write(8, 8)
    with pytest.raises(ReportLengthError, match="writing"):
        check_write(7, 8)


def test_check_read():
    check_read(1, 1)
    with pytest.raises(ReportLengthError, match="reading"):
        check_read(0, 1)


def test_length_error_is_os_error():
    with pytest.raises(OSError):
        check_read(3, 6)


def test_state_change():
    change = StateChange.press(Key.A)
    assert change.is_press() and change.is_on()
    assert not change.is_release()
    assert StateChange.off(Key.A).is_off()
    assert StateChange.release(Key.A) == StateChange(Key.A, False)
    data, state = change
    assert (data, state) == (Key.A, True)
    assert StateChange.from_tuple((Key.B, 1)) == StateChange.press(Key.B)


def test_value_change():
    change = ValueChange.delta((1, -1))
    assert change.is_relative()
    assert ValueChange.absolute(3).is_absolute()
    assert tuple(change) == ((1, -1), True)
    assert ValueChange.from_tuple((5, False)) == ValueChange.absolute(5)


def test_unknown_message():
    assert str(Unknown("hyper")) == "Unknown: 'hyper'"
    assert str(Unknown()) == "Unknown"
    assert isinstance(Unknown("x"), ValueError)
