"""
hidg — keyboard input/output reports.

Input report (8 bytes):  modifier | reserved | key[6]
Output report (1 byte):  led-mask
"""

import logging
import struct

from hidg.layout import Key, Led, Leds, Modifiers
from hidg.protocol import (KEY_SLOTS, KEYBOARD_INPUT_SIZE, KEYBOARD_OUTPUT_SIZE,
                           InvalidValue, StateChange, _check_size, _check_u8)

logger = logging.getLogger(__name__)

_INPUT_FMT = "<BB6s"
_OUTPUT_FMT = "<B"


class Keyboard:
    """Keyboard HID class."""

    name = "keyboard"

    def input(self):
        return KeyboardInput()

    def output(self):
        return KeyboardOutput()

    def __str__(self):
        return self.name


# ── Input report ─────────────────────────────────────────────────────────
class KeyboardInput:
    """Keyboard input report.

    Ordinary keys occupy a left-packed prefix of the 6 slots in press
    order; the rest hold Key.NONE. Modifier keys live in the modifier byte.
    """

    SIZE = KEYBOARD_INPUT_SIZE

    __slots__ = ("_modifier", "_reserved", "_keycodes")

    def __init__(self, modifier=0, keycodes=()):
        self._modifier = _check_u8(modifier, "modifier")
        self._reserved = 0
        self._keycodes = [0] * KEY_SLOTS
        for i, key in enumerate(keycodes):
            if i >= KEY_SLOTS:
                raise ValueError(f"at most {KEY_SLOTS} key slots")
            self._keycodes[i] = _check_u8(key, "key code")

    # -- wire format --------------------------------------------------
    @classmethod
    def from_bytes(cls, data):
        """Decode an 8-byte report. Slot contents are kept as raw bytes."""
        _check_size(data, cls.SIZE, "keyboard input")
        modifier, reserved, keys = struct.unpack(_INPUT_FMT, bytes(data))
        report = cls(modifier, keys)
        report._reserved = reserved
        return report

    def __bytes__(self):
        return struct.pack(_INPUT_FMT, self._modifier, self._reserved,
                           bytes(self._keycodes))

    def to_bytes(self):
        return bytes(self)

    # -- structured form ----------------------------------------------
    def to_dict(self):
        return {"mod": self._modifier, "key": list(self._keycodes)}

    @classmethod
    def from_dict(cls, data):
        """Build from to_dict() output; every integer is range-checked.

        Raises:
            InvalidValue: a modifier mask or key code is out of range, or the
                pressed keys are not a left-packed run without repeats.
        """
        mods = Modifiers.deserialize(data.get("mod", 0))
        keys = [Key.deserialize(k) for k in data.get("key", ())]
        if len(keys) > KEY_SLOTS:
            raise InvalidValue(len(keys), f"at most {KEY_SLOTS} key codes")
        held = [k for k in keys if k != Key.NONE]
        if keys[:len(held)] != held or len(set(held)) != len(held):
            raise InvalidValue(data.get("key"), "pressed keys packed from the first slot, each once")
        return cls(int(mods), [int(k) for k in keys])

    # -- value semantics ----------------------------------------------
    def copy(self):
        return type(self).from_bytes(bytes(self))

    def __eq__(self, other):
        if not isinstance(other, KeyboardInput):
            return NotImplemented
        return bytes(self) == bytes(other)

    __hash__ = None

    def __repr__(self):
        keys = ", ".join(str(k) for k in self.pressed_keys())
        return f"KeyboardInput(mod={self.mods()}, keys=[{keys}])"

    # -- queries ------------------------------------------------------
    def mods(self):
        """Modifier mask."""
        return Modifiers(self._modifier)

    def count_pressed(self):
        """Number of pressed keys including modifiers."""
        return self.count_pressed_mods() + self.count_pressed_keys()

    def count_pressed_mods(self):
        return bin(self._modifier).count("1")

    def count_pressed_keys(self):
        """Number of pressed ordinary keys (index of the first empty slot)."""
        for i, code in enumerate(self._keycodes):
            if code == Key.NONE:
                return i
        return KEY_SLOTS

    def pressed_keys(self):
        """Pressed ordinary keys in press order."""
        return [Key.from_raw(code)
                for code in self._keycodes[:self.count_pressed_keys()]]

    def pressed(self):
        """Iterate over all pressed keys.

        Modifiers come first in ascending bit order, then ordinary keys in
        slot (press) order.
        """
        for bit in range(8):
            if self._modifier & (1 << bit):
                yield Key.from_modifiers(1 << bit)
        for code in self._keycodes:
            if code != Key.NONE:
                yield Key.from_raw(code)

    # -- mutation -----------------------------------------------------
    def change_mods(self, mask, state):
        """Press (state=True) or release modifiers only."""
        if state:
            self._modifier |= int(mask) & 0xFF
        else:
            self._modifier &= ~int(mask) & 0xFF

    def press_mods(self, mask):
        self.change_mods(mask, True)

    def release_mods(self, mask):
        self.change_mods(mask, False)

    def change_key(self, key, state):
        """Press or release a key.

        Modifier keys toggle their bit in the modifier byte. An ordinary
        key is appended to the first free slot on press (ignored if already
        pressed or if all slots are taken) and removed on release, with the
        later slots shifted left to close the gap.
        """
        code = int(key)
        if code == Key.NONE:
            return
        modifier = Modifiers.from_key(code)
        if modifier:
            self.change_mods(modifier, state)
            return

        slots = self._keycodes
        count = self.count_pressed_keys()
        if state:
            if code in slots[:count]:
                return
            if count < KEY_SLOTS:
                slots[count] = code
            else:
                logger.debug("All %d key slots in use, dropping press of %s",
                             KEY_SLOTS, Key.from_raw(code))
        else:
            i = 0
            while i < count:
                if slots[i] == code:
                    count -= 1
                    slots[i:count] = slots[i + 1:count + 1]
                    slots[count] = Key.NONE
                else:
                    i += 1

    def press_key(self, key):
        self.change_key(key, True)

    def release_key(self, key):
        self.change_key(key, False)

    def extend(self, changes):
        """Apply a sequence of changes in order.

        Items may be StateChange[Key], StateChange[Modifiers] or a whole
        KeyboardInput, which replaces this report's content.
        """
        for change in changes:
            if isinstance(change, KeyboardInput):
                self._modifier = change._modifier
                self._reserved = change._reserved
                self._keycodes = list(change._keycodes)
            elif isinstance(change, StateChange):
                if isinstance(change.data, Modifiers):
                    self.change_mods(change.data, change.state)
                else:
                    self.change_key(change.data, change.state)
            else:
                raise TypeError(f"cannot apply {type(change).__name__} to a keyboard input report")


# ── Output report ────────────────────────────────────────────────────────
class KeyboardOutput:
    """Keyboard output report (LED state set by the host)."""

    SIZE = KEYBOARD_OUTPUT_SIZE

    __slots__ = ("_leds",)

    def __init__(self, leds=0):
        self._leds = _check_u8(leds, "LED mask")

    @classmethod
    def from_bytes(cls, data):
        _check_size(data, cls.SIZE, "keyboard output")
        (leds,) = struct.unpack(_OUTPUT_FMT, bytes(data))
        return cls(leds)

    def __bytes__(self):
        return struct.pack(_OUTPUT_FMT, self._leds)

    def to_bytes(self):
        return bytes(self)

    def to_dict(self):
        return {"led": self._leds}

    @classmethod
    def from_dict(cls, data):
        return cls(int(Leds.deserialize(data.get("led", 0))))

    def copy(self):
        return type(self)(self._leds)

    def __eq__(self, other):
        if not isinstance(other, KeyboardOutput):
            return NotImplemented
        return self._leds == other._leds

    __hash__ = None

    def __repr__(self):
        return f"KeyboardOutput(led={self.leds()})"

    def leds(self):
        """LED mask."""
        return Leds(self._leds)

    def count_lit(self):
        return bin(self._leds).count("1")

    def lit(self):
        """Iterate over lit LEDs in ascending bit order."""
        for bit in range(8):
            if self._leds & (1 << bit):
                yield Led.from_leds(1 << bit)

    def change_leds(self, leds, state):
        if state:
            self._leds |= int(leds) & 0xFF
        else:
            self._leds &= ~int(leds) & 0xFF

    def on_leds(self, leds):
        self.change_leds(leds, True)

    def off_leds(self, leds):
        self.change_leds(leds, False)

    def change_led(self, led, state):
        self.change_leds(Leds.from_led(led), state)

    def on_led(self, led):
        self.change_led(led, True)

    def off_led(self, led):
        self.change_led(led, False)

    def extend(self, changes):
        """Apply StateChange[Led], StateChange[Leds] or whole reports in order."""
        for change in changes:
            if isinstance(change, KeyboardOutput):
                self._leds = change._leds
            elif isinstance(change, StateChange):
                if isinstance(change.data, Leds):
                    self.change_leds(change.data, change.state)
                else:
                    self.change_led(change.data, change.state)
            else:
                raise TypeError(f"cannot apply {type(change).__name__} to a keyboard output report")
