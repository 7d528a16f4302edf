"""
hidg — report sizes, error kinds, length checks, and change events.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

# ── Report sizes (bytes on the wire) ─────────────────────────────────────
KEYBOARD_INPUT_SIZE  = 8
KEYBOARD_OUTPUT_SIZE = 1
MOUSE_INPUT_SIZE     = 6
MOUSE_OUTPUT_SIZE    = 0

# Number of ordinary key slots in a keyboard input report
KEY_SLOTS = 6

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s(%(funcName)s): %(message)s"


# ── Errors ───────────────────────────────────────────────────────────────
class HidgError(Exception):
    """Base class for codec errors."""


class ReportLengthError(HidgError, OSError):
    """A report buffer or transfer had the wrong number of bytes."""


class Unknown(HidgError, ValueError):
    """A human-facing token did not match any code name or alias."""

    def __init__(self, token=None):
        super().__init__(token)
        self.token = token

    def __str__(self):
        if self.token is None:
            return "Unknown"
        return f"Unknown: {self.token!r}"


class InvalidValue(HidgError, ValueError):
    """A raw integer is outside the legal range of a code or mask."""

    def __init__(self, value, expecting):
        super().__init__(value, expecting)
        self.value = value
        self.expecting = expecting

    def __str__(self):
        return f"invalid value: integer `{self.value}`, expected {self.expecting}"


# ── Length checks ────────────────────────────────────────────────────────
def check_write(actual, expected):
    """Raise ReportLengthError unless a write moved exactly `expected` bytes."""
    if actual != expected:
        raise ReportLengthError("Error when writing report")


def check_read(actual, expected):
    """Raise ReportLengthError unless a read returned exactly `expected` bytes."""
    if actual != expected:
        raise ReportLengthError("Error when reading report")


def _check_size(data, size, what):
    if len(data) != size:
        raise ReportLengthError(f"{what} report must be {size} bytes, got {len(data)}")


# ── Fixed-width integer helpers ──────────────────────────────────────────
def _wrap_i16(v):
    """Two's complement wrap into -32768..32767."""
    return ((int(v) + 0x8000) & 0xFFFF) - 0x8000


def _wrap_i8(v):
    """Two's complement wrap into -128..127."""
    return ((int(v) + 0x80) & 0xFF) - 0x80


def _check_i16(v, what):
    v = int(v)
    if not -0x8000 <= v <= 0x7FFF:
        raise ValueError(f"{what} {v} out of signed 16-bit range")
    return v


def _check_i8(v, what):
    v = int(v)
    if not -0x80 <= v <= 0x7F:
        raise ValueError(f"{what} {v} out of signed 8-bit range")
    return v


def _check_u8(v, what):
    v = int(v)
    if not 0 <= v <= 0xFF:
        raise ValueError(f"{what} {v} out of 8-bit range")
    return v


# ── Change events ────────────────────────────────────────────────────────
@dataclass(frozen=True)
class StateChange(Generic[T]):
    """Key/button/LED state change event.

    `state` True means press (keys, buttons) or on (LEDs).
    """

    data: T
    state: bool

    @classmethod
    def press(cls, data):
        return cls(data, True)

    @classmethod
    def on(cls, data):
        return cls(data, True)

    @classmethod
    def release(cls, data):
        return cls(data, False)

    @classmethod
    def off(cls, data):
        return cls(data, False)

    @classmethod
    def from_tuple(cls, pair):
        data, state = pair
        return cls(data, bool(state))

    def is_press(self):
        return self.state

    def is_on(self):
        return self.state

    def is_release(self):
        return not self.state

    def is_off(self):
        return not self.state

    def __iter__(self):
        return iter((self.data, self.state))


@dataclass(frozen=True)
class ValueChange(Generic[T]):
    """Pointer/wheel value change event.

    `relative` True means `data` is a delta to add, else a replacement.
    """

    data: T
    relative: bool

    @classmethod
    def absolute(cls, data):
        return cls(data, False)

    @classmethod
    def delta(cls, data):
        return cls(data, True)

    @classmethod
    def from_tuple(cls, pair):
        data, relative = pair
        return cls(data, bool(relative))

    def is_relative(self):
        return self.relative

    def is_absolute(self):
        return not self.relative

    def __iter__(self):
        return iter((self.data, self.relative))
