"""
hidg — code tables (Key, Led, Button), bit masks (Modifiers, Leds, Buttons),
and the conversions between a mask and a single code.

Each code table is generated from one list of rows:

    (IDENT, code, primary-name, *aliases)

The primary name is the lower-kebab form printed by str(); aliases are
accepted by parse() only.
"""

from enum import IntEnum, IntFlag
from functools import reduce
from operator import or_

from hidg.protocol import InvalidValue, Unknown

# ── Key codes (USB HID usage page 0x07) ──────────────────────────────────
KEY_TABLE = [
    ("NONE", 0x00, "none"),

    # Error codes
    ("OVERFLOW", 0x01, "overflow"),           # Error Roll Over ("phantom key")
    ("POST_FAIL", 0x02, "post-fail", "postfail"),
    ("UNDEFINED", 0x03, "undefined"),

    # Letters
    ("A", 0x04, "a"), ("B", 0x05, "b"), ("C", 0x06, "c"), ("D", 0x07, "d"),
    ("E", 0x08, "e"), ("F", 0x09, "f"), ("G", 0x0A, "g"), ("H", 0x0B, "h"),
    ("I", 0x0C, "i"), ("J", 0x0D, "j"), ("K", 0x0E, "k"), ("L", 0x0F, "l"),
    ("M", 0x10, "m"), ("N", 0x11, "n"), ("O", 0x12, "o"), ("P", 0x13, "p"),
    ("Q", 0x14, "q"), ("R", 0x15, "r"), ("S", 0x16, "s"), ("T", 0x17, "t"),
    ("U", 0x18, "u"), ("V", 0x19, "v"), ("W", 0x1A, "w"), ("X", 0x1B, "x"),
    ("Y", 0x1C, "y"), ("Z", 0x1D, "z"),

    # Number row
    ("NUM_1", 0x1E, "1"), ("NUM_2", 0x1F, "2"), ("NUM_3", 0x20, "3"),
    ("NUM_4", 0x21, "4"), ("NUM_5", 0x22, "5"), ("NUM_6", 0x23, "6"),
    ("NUM_7", 0x24, "7"), ("NUM_8", 0x25, "8"), ("NUM_9", 0x26, "9"),
    ("NUM_0", 0x27, "0"),

    ("ENTER", 0x28, "enter"),
    ("ESC", 0x29, "esc", "escape"),
    ("BACKSPACE", 0x2A, "backspace", "back-space"),
    ("TAB", 0x2B, "tab"),
    ("SPACE", 0x2C, "space"),
    ("MINUS", 0x2D, "minus", "-"),
    ("EQUAL", 0x2E, "equal", "="),
    ("LEFT_BRACE", 0x2F, "left-brace", "{", "["),
    ("RIGHT_BRACE", 0x30, "right-brace", "}", "]"),
    ("BACKSLASH", 0x31, "back-slash", "\\", "|"),
    ("HASH_TILDE", 0x32, "hash-tilde", "hash", "tilde", "#", "~"),  # non-US
    ("SEMICOLON", 0x33, "semicolon", ";"),
    ("APOSTROPHE", 0x34, "apostrophe", "'", "\""),
    ("GRAVE", 0x35, "grave", "`"),
    ("COMMA", 0x36, "comma", ","),
    ("DOT", 0x37, "dot", "."),
    ("SLASH", 0x38, "slash", "/"),
    ("CAPS_LOCK", 0x39, "caps-lock", "capslock"),

    # Function row
    ("F1", 0x3A, "f1"), ("F2", 0x3B, "f2"), ("F3", 0x3C, "f3"),
    ("F4", 0x3D, "f4"), ("F5", 0x3E, "f5"), ("F6", 0x3F, "f6"),
    ("F7", 0x40, "f7"), ("F8", 0x41, "f8"), ("F9", 0x42, "f9"),
    ("F10", 0x43, "f10"), ("F11", 0x44, "f11"), ("F12", 0x45, "f12"),

    # Navigation
    ("SYSRQ", 0x46, "sysrq", "print-screen"),
    ("SCROLL_LOCK", 0x47, "scroll-lock", "scrolllock"),
    ("PAUSE", 0x48, "pause"),
    ("INSERT", 0x49, "insert"),
    ("HOME", 0x4A, "home"),
    ("PAGE_UP", 0x4B, "page-up", "pageup"),
    ("DELETE", 0x4C, "delete"),
    ("END", 0x4D, "end"),
    ("PAGE_DOWN", 0x4E, "page-down", "pagedown"),
    ("RIGHT", 0x4F, "right"),
    ("LEFT", 0x50, "left"),
    ("DOWN", 0x51, "down"),
    ("UP", 0x52, "up"),

    # Keypad
    ("NUM_LOCK", 0x53, "num-lock", "numlock"),
    ("KEYPAD_SLASH", 0x54, "keypad-slash"),
    ("KEYPAD_ASTERISK", 0x55, "keypad-asterisk"),
    ("KEYPAD_MINUS", 0x56, "keypad-minus"),
    ("KEYPAD_PLUS", 0x57, "keypad-plus"),
    ("KEYPAD_ENTER", 0x58, "keypad-enter"),
    ("KEYPAD_1", 0x59, "keypad-1"), ("KEYPAD_2", 0x5A, "keypad-2"),
    ("KEYPAD_3", 0x5B, "keypad-3"), ("KEYPAD_4", 0x5C, "keypad-4"),
    ("KEYPAD_5", 0x5D, "keypad-5"), ("KEYPAD_6", 0x5E, "keypad-6"),
    ("KEYPAD_7", 0x5F, "keypad-7"), ("KEYPAD_8", 0x60, "keypad-8"),
    ("KEYPAD_9", 0x61, "keypad-9"), ("KEYPAD_0", 0x62, "keypad-0"),
    ("KEYPAD_DOT", 0x63, "keypad-dot"),

    ("NON_US_BACKSLASH", 0x64, "nonus-backslash"),
    ("COMPOSE", 0x65, "compose"),             # Application
    ("POWER", 0x66, "power"),
    ("KEYPAD_EQUAL", 0x67, "keypad-equal"),

    ("F13", 0x68, "f13"), ("F14", 0x69, "f14"), ("F15", 0x6A, "f15"),
    ("F16", 0x6B, "f16"), ("F17", 0x6C, "f17"), ("F18", 0x6D, "f18"),
    ("F19", 0x6E, "f19"), ("F20", 0x6F, "f20"), ("F21", 0x70, "f21"),
    ("F22", 0x71, "f22"), ("F23", 0x72, "f23"), ("F24", 0x73, "f24"),

    ("OPEN", 0x74, "open"),                   # Execute
    ("HELP", 0x75, "help"),
    ("PROPS", 0x76, "props"),                 # Menu
    ("FRONT", 0x77, "front"),                 # Select
    ("STOP", 0x78, "stop"),
    ("AGAIN", 0x79, "again"),
    ("UNDO", 0x7A, "undo"),
    ("CUT", 0x7B, "cut"),
    ("COPY", 0x7C, "copy"),
    ("PASTE", 0x7D, "paste"),
    ("FIND", 0x7E, "find"),
    ("MUTE", 0x7F, "mute"),
    ("VOLUME_UP", 0x80, "volume-up", "volumeup"),
    ("VOLUME_DOWN", 0x81, "volume-down", "volumedown"),
    ("LOCKING_CAPS_LOCK", 0x82, "locking-caps-lock", "locking-capslock"),
    ("LOCKING_NUM_LOCK", 0x83, "locking-num-lock", "locking-numlock"),
    ("LOCKING_SCROLL_LOCK", 0x84, "locking-scroll-lock", "locking-scrolllock"),
    ("KEYPAD_COMMA", 0x85, "keypad-comma"),
    ("KEYPAD_EQUAL_SIGN", 0x86, "keypad-equal-sign"),

    # International / LANG
    ("RO", 0x87, "ro"),
    ("KATAKANA_HIRAGANA", 0x88, "katakana-hiragana"),
    ("YEN", 0x89, "yen"),
    ("HENKAN", 0x8A, "henkan"),
    ("MUHENKAN", 0x8B, "munenkan", "muhenkan"),
    ("KEYPAD_JP_COMMA", 0x8C, "keypad-jp-comma"),
    ("HANGEUL", 0x90, "hangeul"),
    ("HANJA", 0x91, "hanja"),
    ("KATAKANA", 0x92, "katakana"),
    ("HIRAGANA", 0x93, "hiragana"),
    ("ZENKAKU_HANKAKU", 0x94, "zenkaku-hankaku"),

    ("KEYPAD_LEFT_PAREN", 0xB6, "keypad-left-paren"),
    ("KEYPAD_RIGHT_PAREN", 0xB7, "keypad-right-paren"),

    # Modifiers, bit (code - 0xE0) of the modifier byte
    ("LEFT_CTRL", 0xE0, "left-ctrl", "ctrl"),
    ("LEFT_SHIFT", 0xE1, "left-shift", "shift"),
    ("LEFT_ALT", 0xE2, "left-alt", "alt"),
    ("LEFT_META", 0xE3, "left-meta", "meta"),
    ("RIGHT_CTRL", 0xE4, "right-ctrl"),
    ("RIGHT_SHIFT", 0xE5, "right-shift"),
    ("RIGHT_ALT", 0xE6, "right-alt"),
    ("RIGHT_META", 0xE7, "right-meta"),
]

MODIFIER_KEY_FIRST = 0xE0
MODIFIER_KEY_LAST  = 0xE7

# ── LED codes (USB HID usage page 0x08) ──────────────────────────────────
LED_TABLE = [
    ("NONE", 0x00, "none"),
    ("NUM_LOCK", 0x01, "num-lock", "numlock"),
    ("CAPS_LOCK", 0x02, "caps-lock", "capslock"),
    ("SCROLL_LOCK", 0x03, "scroll-lock", "scrolllock", "scrollock"),
    ("COMPOSE", 0x04, "compose"),
    ("KANA", 0x05, "kana"),
]

# ── Button codes ─────────────────────────────────────────────────────────
BUTTON_TABLE = [
    ("NONE", 0x00, "none", "0"),
    ("PRIMARY", 0x01, "primary", "first", "1"),      # usually left
    ("SECONDARY", 0x02, "secondary", "second", "2"),  # usually right
    ("TERTIARY", 0x03, "tertiary", "third", "3"),     # usually middle
]


def _single_bit(value):
    """Bit index of a value with exactly one bit set, else None."""
    if value > 0 and not value & (value - 1):
        return value.bit_length() - 1
    return None


def _split_tokens(text):
    for sep in "|,":
        text = text.replace(sep, "+")
    return [t.strip() for t in text.split("+") if t.strip()]


# ── Code table base ──────────────────────────────────────────────────────
class _CodeEnum(IntEnum):
    """Behaviour shared by the generated code tables.

    Per-table data (names, lookup, fallback, legal range) is attached by
    _make_code_enum() once the members exist.
    """

    def __str__(self):
        return self._names[self.value][0]

    def __format__(self, format_spec):
        return format(str(self), format_spec)

    @classmethod
    def names(cls, code):
        """Primary name followed by aliases."""
        return cls._names[int(code)]

    @classmethod
    def from_raw(cls, raw):
        """Total conversion from a wire byte.

        Undefined codes decode to the table's fallback member.
        """
        raw = int(raw)
        if not 0 <= raw <= 0xFF:
            raise ValueError(f"{cls.__name__} code {raw} out of 8-bit range")
        try:
            return cls(raw)
        except ValueError:
            return cls._fallback

    @classmethod
    def safe_from(cls, raw):
        """Range-checked conversion; None for bytes outside the legal range."""
        raw = int(raw)
        if raw not in cls._legal:
            return None
        try:
            return cls(raw)
        except ValueError:
            return None

    @classmethod
    def parse(cls, text):
        """Look up a primary name or alias (case-insensitive).

        Raises:
            Unknown: no name matches.
        """
        try:
            return cls._lookup[text.strip().lower()]
        except (KeyError, AttributeError):
            raise Unknown(text) from None

    @classmethod
    def deserialize(cls, value):
        """Structured-data conversion; rejects anything safe_from rejects."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidValue(value, cls._expecting)
        code = cls.safe_from(value)
        if code is None:
            raise InvalidValue(value, cls._expecting)
        return code

    def serialize(self):
        return int(self)


class _KeyBase(_CodeEnum):

    @classmethod
    def from_modifiers(cls, mods):
        """The modifier key for a one-bit Modifiers mask, else NONE."""
        bit = _single_bit(int(mods) & 0xFF)
        if bit is None:
            return cls(0)
        return cls(MODIFIER_KEY_FIRST + bit)

    def is_modifier(self):
        return MODIFIER_KEY_FIRST <= self.value <= MODIFIER_KEY_LAST


class _LedBase(_CodeEnum):

    @classmethod
    def from_leds(cls, leds):
        """The LED for a one-bit Leds mask (bit = code - 1), else NONE."""
        bit = _single_bit(int(leds) & 0xFF)
        if bit is None or bit >= len(cls) - 1:
            return cls(0)
        return cls(bit + 1)


class _ButtonBase(_CodeEnum):

    @classmethod
    def from_buttons(cls, buttons):
        """The button for a one-bit Buttons mask (bit = code - 1), else NONE."""
        bit = _single_bit(int(buttons) & 0xFF)
        if bit is None or bit >= len(cls) - 1:
            return cls(0)
        return cls(bit + 1)


def _make_code_enum(base, name, rows, fallback, legal, expecting):
    cls = base(name, [(row[0], row[1]) for row in rows],
               module=__name__, qualname=name)
    cls._names = {row[1]: row[2:] for row in rows}
    cls._lookup = {alias.lower(): cls(row[1]) for row in rows for alias in row[2:]}
    cls._fallback = cls(fallback)
    cls._legal = legal
    cls._expecting = expecting
    cls.VARIANTS = tuple(cls)
    return cls


Key = _make_code_enum(_KeyBase, "Key", KEY_TABLE, fallback=0x03,
                      legal=range(0x00, MODIFIER_KEY_LAST + 1),
                      expecting="a numeric key code")
Led = _make_code_enum(_LedBase, "Led", LED_TABLE, fallback=0x00,
                      legal=range(0x01, 0x06),
                      expecting="a numeric LED code")
Button = _make_code_enum(_ButtonBase, "Button", BUTTON_TABLE, fallback=0x00,
                         legal=range(0x00, 0x04),
                         expecting="a numeric button code")


# ── Bit masks ────────────────────────────────────────────────────────────
class _Mask(IntFlag):
    """Behaviour shared by the one-byte masks."""

    @classmethod
    def none(cls):
        return cls(0)

    @classmethod
    def all_bits(cls):
        return reduce(or_, (m.value for m in cls), 0)

    @classmethod
    def safe_from(cls, raw):
        """Range-checked conversion; None if any bit is outside the mask."""
        raw = int(raw)
        if not 0 <= raw <= 0xFF or raw & ~cls.all_bits():
            return None
        return cls(raw)

    @classmethod
    def deserialize(cls, value):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidValue(value, cls._expecting())
        mask = cls.safe_from(value)
        if mask is None:
            raise InvalidValue(value, cls._expecting())
        return mask

    def serialize(self):
        return int(self)

    def bits(self):
        """One-bit masks for each set bit, ascending."""
        for i in range(8):
            if int(self) & (1 << i):
                yield type(self)(1 << i)

    def codes(self):
        return [self._to_code(bit) for bit in self.bits()]

    @classmethod
    def parse(cls, text):
        """Parse '+', '|' or ',' separated code names into a mask.

        Raises:
            Unknown: a token is not a code name, or names a code with no bit.
        """
        mask = cls(0)
        for token in _split_tokens(text):
            code = cls._code_type().parse(token)
            bit = cls._from_code(code)
            if not bit and code != 0:
                raise Unknown(token)
            mask |= bit
        return mask

    def __str__(self):
        names = [str(code) for code in self.codes()]
        return "+".join(names) if names else "none"

    def __format__(self, format_spec):
        return format(str(self), format_spec)


class Modifiers(_Mask):
    """Modifier key mask; bit index = key code - 0xE0."""

    LEFT_CTRL   = 0x01
    LEFT_SHIFT  = 0x02
    LEFT_ALT    = 0x04
    LEFT_META   = 0x08
    RIGHT_CTRL  = 0x10
    RIGHT_SHIFT = 0x20
    RIGHT_ALT   = 0x40
    RIGHT_META  = 0x80

    @classmethod
    def from_key(cls, key):
        code = int(key)
        if MODIFIER_KEY_FIRST <= code <= MODIFIER_KEY_LAST:
            return cls(1 << (code - MODIFIER_KEY_FIRST))
        return cls(0)

    @classmethod
    def _from_code(cls, code):
        return cls.from_key(code)

    @staticmethod
    def _to_code(mask):
        return Key.from_modifiers(mask)

    @staticmethod
    def _code_type():
        return Key

    @staticmethod
    def _expecting():
        return "a modifier mask"


class Leds(_Mask):
    """Keyboard LED mask; bit index = LED code - 1."""

    NUM_LOCK    = 0x01
    CAPS_LOCK   = 0x02
    SCROLL_LOCK = 0x04
    COMPOSE     = 0x08
    KANA        = 0x10

    @classmethod
    def from_led(cls, led):
        code = int(led)
        if code == 0:
            return cls(0)
        return cls(1 << (code - 1))

    @classmethod
    def _from_code(cls, code):
        return cls.from_led(code)

    @staticmethod
    def _to_code(mask):
        return Led.from_leds(mask)

    @staticmethod
    def _code_type():
        return Led

    @staticmethod
    def _expecting():
        return "a LED mask"


class Buttons(_Mask):
    """Mouse button mask; bit index = button code - 1."""

    PRIMARY   = 0x01
    SECONDARY = 0x02
    TERTIARY  = 0x04

    @classmethod
    def from_button(cls, button):
        code = int(button)
        if code == 0:
            return cls(0)
        return cls(1 << (code - 1))

    @classmethod
    def _from_code(cls, code):
        return cls.from_button(code)

    @staticmethod
    def _to_code(mask):
        return Button.from_buttons(mask)

    @staticmethod
    def _code_type():
        return Button

    @staticmethod
    def _expecting():
        return "a button mask"
