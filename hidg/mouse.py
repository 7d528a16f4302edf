"""
hidg — mouse input/output reports and the input report diff.

Input report (6 bytes):  button-mask | x:i16 | y:i16 | wheel:i8
Output report:           empty

Relative pointer/wheel arithmetic wraps around in two's complement, the
same as native signed 16-bit / 8-bit integers. Absolute values must
already be in range.
"""

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any

from hidg.layout import Button, Buttons
from hidg.protocol import (MOUSE_INPUT_SIZE, MOUSE_OUTPUT_SIZE, InvalidValue,
                           StateChange, ValueChange, _check_i8, _check_i16, _check_size,
                           _check_u8, _wrap_i8, _wrap_i16)

_INPUT_FMT = "<Bhhb"


class Mouse:
    """Mouse HID class."""

    name = "mouse"

    def input(self):
        return MouseInput()

    def output(self):
        return MouseOutput()

    def __str__(self):
        return self.name


# ── Change events produced by diff() ────────────────────────────────────
class ChangeKind(Enum):
    BUTTON = "button"
    POINTER = "pointer"
    WHEEL = "wheel"


@dataclass(frozen=True)
class MouseInputChange:
    """One field transition between two mouse input reports.

    data is a StateChange[Button] for BUTTON, an (x, y) tuple for POINTER
    and an int for WHEEL.
    """

    kind: ChangeKind
    data: Any

    @classmethod
    def button(cls, change):
        return cls(ChangeKind.BUTTON, change)

    @classmethod
    def pointer(cls, xy):
        return cls(ChangeKind.POINTER, tuple(xy))

    @classmethod
    def wheel(cls, value):
        return cls(ChangeKind.WHEEL, value)

    def __str__(self):
        if self.kind is ChangeKind.BUTTON:
            action = "press" if self.data.state else "release"
            return f"{action} {self.data.data}"
        if self.kind is ChangeKind.POINTER:
            return f"pointer {self.data[0]} {self.data[1]}"
        return f"wheel {self.data}"


def diff(new, old, relative_pointer=False, relative_wheel=False):
    """Yield the changes that turn `old` into `new`.

    Order is fixed: one event per changed button bit (ascending bit
    index), then a single pointer event, then a single wheel event. With
    relative_pointer / relative_wheel the values are new - old deltas,
    otherwise the new absolute values.
    """
    changed = new._buttons ^ old._buttons
    for bit in range(8):
        mask = 1 << bit
        if changed & mask:
            yield MouseInputChange.button(
                StateChange(Button.from_buttons(mask), bool(new._buttons & mask)))

    if new._pointer != old._pointer:
        if relative_pointer:
            yield MouseInputChange.pointer(
                (_wrap_i16(new._pointer[0] - old._pointer[0]),
                 _wrap_i16(new._pointer[1] - old._pointer[1])))
        else:
            yield MouseInputChange.pointer(new._pointer)

    if new._wheel != old._wheel:
        if relative_wheel:
            yield MouseInputChange.wheel(_wrap_i8(new._wheel - old._wheel))
        else:
            yield MouseInputChange.wheel(new._wheel)


def _deserialize_signed(value, bits):
    lo, hi = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    if isinstance(value, bool) or not isinstance(value, int) or not lo <= value <= hi:
        raise InvalidValue(value, f"a signed {bits}-bit integer")
    return value


# ── Input report ─────────────────────────────────────────────────────────
class MouseInput:
    """Mouse input report."""

    SIZE = MOUSE_INPUT_SIZE

    __slots__ = ("_buttons", "_pointer", "_wheel")

    def __init__(self, buttons=0, pointer=(0, 0), wheel=0):
        self._buttons = _check_u8(buttons, "button mask")
        self._pointer = (_check_i16(pointer[0], "pointer x"),
                         _check_i16(pointer[1], "pointer y"))
        self._wheel = _check_i8(wheel, "wheel")

    @classmethod
    def from_bytes(cls, data):
        _check_size(data, cls.SIZE, "mouse input")
        buttons, x, y, wheel = struct.unpack(_INPUT_FMT, bytes(data))
        return cls(buttons, (x, y), wheel)

    def __bytes__(self):
        return struct.pack(_INPUT_FMT, self._buttons,
                           self._pointer[0], self._pointer[1], self._wheel)

    def to_bytes(self):
        return bytes(self)

    def to_dict(self):
        return {"b": self._buttons, "p": list(self._pointer), "w": self._wheel}

    @classmethod
    def from_dict(cls, data):
        """Build from to_dict() output; every integer is range-checked.

        Raises:
            InvalidValue: the button mask has bits outside the known buttons,
                or pointer or wheel is not an integer in its signed range.
        """
        buttons = Buttons.deserialize(data.get("b", 0))
        pointer = data.get("p", (0, 0))
        if not isinstance(pointer, (list, tuple)) or len(pointer) != 2:
            raise InvalidValue(pointer, "a pair of pointer coordinates")
        x, y = (_deserialize_signed(v, 16) for v in pointer)
        wheel = _deserialize_signed(data.get("w", 0), 8)
        return cls(int(buttons), (x, y), wheel)

    def copy(self):
        return type(self)(self._buttons, self._pointer, self._wheel)

    def __eq__(self, other):
        if not isinstance(other, MouseInput):
            return NotImplemented
        return bytes(self) == bytes(other)

    __hash__ = None

    def __repr__(self):
        return (f"MouseInput(b={self.buttons()}, p={self._pointer}, "
                f"w={self._wheel})")

    def __sub__(self, other):
        if not isinstance(other, MouseInput):
            return NotImplemented
        return diff(self, other)

    def diff(self, other, relative_pointer=False, relative_wheel=False):
        """Changes from `other` (old) to this report (new); see diff()."""
        return diff(self, other, relative_pointer, relative_wheel)

    # -- buttons ------------------------------------------------------
    def buttons(self):
        return Buttons(self._buttons)

    def count_pressed(self):
        return bin(self._buttons).count("1")

    def pressed(self):
        """Iterate over pressed buttons in ascending bit order."""
        for bit in range(8):
            if self._buttons & (1 << bit):
                yield Button.from_buttons(1 << bit)

    def change_buttons(self, mask, state):
        if state:
            self._buttons |= int(mask) & 0xFF
        else:
            self._buttons &= ~int(mask) & 0xFF

    def press_buttons(self, mask):
        self.change_buttons(mask, True)

    def release_buttons(self, mask):
        self.change_buttons(mask, False)

    def change_button(self, button, state):
        self.change_buttons(Buttons.from_button(button), state)

    def press_button(self, button):
        self.change_button(button, True)

    def release_button(self, button):
        self.change_button(button, False)

    # -- pointer ------------------------------------------------------
    def pointer(self):
        """(x, y) coordinates."""
        return self._pointer

    def set_pointer(self, pointer):
        self._pointer = (_check_i16(pointer[0], "pointer x"),
                         _check_i16(pointer[1], "pointer y"))

    def change_pointer(self, pointer, relative):
        if relative:
            self._pointer = (_wrap_i16(self._pointer[0] + pointer[0]),
                             _wrap_i16(self._pointer[1] + pointer[1]))
        else:
            self.set_pointer(pointer)

    # -- wheel --------------------------------------------------------
    def wheel(self):
        return self._wheel

    def set_wheel(self, wheel):
        self._wheel = _check_i8(wheel, "wheel")

    def change_wheel(self, wheel, relative):
        if relative:
            self._wheel = _wrap_i8(self._wheel + wheel)
        else:
            self.set_wheel(wheel)

    def extend(self, changes):
        """Apply a sequence of changes in order.

        Accepts StateChange[Button], StateChange[Buttons],
        ValueChange[(x, y)] (pointer), ValueChange[int] (wheel), a bare
        (x, y) tuple (absolute pointer) or a whole MouseInput.
        """
        for change in changes:
            if isinstance(change, MouseInput):
                self._buttons = change._buttons
                self._pointer = change._pointer
                self._wheel = change._wheel
            elif isinstance(change, StateChange):
                if isinstance(change.data, Buttons):
                    self.change_buttons(change.data, change.state)
                else:
                    self.change_button(change.data, change.state)
            elif isinstance(change, ValueChange):
                if isinstance(change.data, tuple):
                    self.change_pointer(change.data, change.relative)
                else:
                    self.change_wheel(change.data, change.relative)
            elif isinstance(change, tuple):
                self.set_pointer(change)
            else:
                raise TypeError(f"cannot apply {type(change).__name__} to a mouse input report")


# ── Output report ────────────────────────────────────────────────────────
class MouseOutput:
    """Mouse output report; the boot mouse defines none, so it is empty."""

    SIZE = MOUSE_OUTPUT_SIZE

    __slots__ = ()

    @classmethod
    def from_bytes(cls, data):
        _check_size(data, cls.SIZE, "mouse output")
        return cls()

    def __bytes__(self):
        return b""

    def to_bytes(self):
        return b""

    def to_dict(self):
        return {}

    @classmethod
    def from_dict(cls, data):
        return cls()

    def copy(self):
        return type(self)()

    def __eq__(self, other):
        if not isinstance(other, MouseOutput):
            return NotImplemented
        return True

    __hash__ = None

    def __repr__(self):
        return "MouseOutput()"

    def extend(self, changes):
        for change in changes:
            if not isinstance(change, MouseOutput):
                raise TypeError(f"cannot apply {type(change).__name__} to a mouse output report")
