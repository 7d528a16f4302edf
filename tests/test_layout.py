import pytest

from hidg.layout import Button, Buttons, Key, Led, Leds, Modifiers
from hidg.protocol import InvalidValue, Unknown


@pytest.mark.parametrize("bit", range(8))
def test_modifier_key_bijection(bit):
    key = Key.from_raw(0xE0 + bit)
    assert Modifiers.from_key(key) == 1 << bit
    assert Key.from_modifiers(Modifiers(1 << bit)) == Key(0xE0 + bit)


def test_mod_mask_to_key_code():
    assert Key.from_modifiers(Modifiers.none()) == Key.NONE
    assert Key.from_modifiers(Modifiers.LEFT_CTRL) == Key.LEFT_CTRL
    assert Key.from_modifiers(Modifiers.RIGHT_ALT) == Key.RIGHT_ALT
    assert Key.from_modifiers(Modifiers.RIGHT_META) == Key.RIGHT_META


def test_several_modifier_bits_give_no_key():
    assert Key.from_modifiers(Modifiers.LEFT_CTRL | Modifiers.LEFT_SHIFT) == Key.NONE


def test_key_code_to_mod_mask():
    assert Modifiers.from_key(Key.A) == Modifiers.none()
    assert Modifiers.from_key(Key.LEFT_CTRL) == Modifiers.LEFT_CTRL
    assert Modifiers.from_key(Key.RIGHT_SHIFT) == Modifiers.RIGHT_SHIFT
    assert Modifiers.from_key(Key.RIGHT_META) == Modifiers.RIGHT_META


@pytest.mark.parametrize("code", range(1, 6))
def test_led_mask_round_trip(code):
    led = Led(code)
    assert Led.from_leds(Leds.from_led(led)) == led


def test_led_none_is_empty_mask():
    assert Leds.from_led(Led.NONE) == Leds.none()
    assert Led.from_leds(Leds.none()) == Led.NONE
    assert Led.from_leds(Leds(0x20)) == Led.NONE


def test_button_mask_conversions():
    assert Button.from_buttons(Buttons.none()) == Button.NONE
    assert Button.from_buttons(Buttons.PRIMARY) == Button.PRIMARY
    assert Button.from_buttons(Buttons.SECONDARY) == Button.SECONDARY
    assert Button.from_buttons(Buttons.TERTIARY) == Button.TERTIARY
    assert Button.from_buttons(Buttons(0x08)) == Button.NONE
    assert Buttons.from_button(Button.NONE) == Buttons.none()
    assert Buttons.from_button(Button.TERTIARY) == Buttons.TERTIARY


def test_from_raw_is_total():
    assert Key.from_raw(0x04) is Key.A
    assert Key.from_raw(0x8D) is Key.UNDEFINED
    assert Key.from_raw(0xFF) is Key.UNDEFINED
    assert Led.from_raw(0x09) is Led.NONE
    assert Button.from_raw(0x07) is Button.NONE
    with pytest.raises(ValueError):
        Key.from_raw(0x100)


def test_safe_from_checks_range():
    assert Key.safe_from(0xE7) == Key.RIGHT_META
    assert Key.safe_from(0x00) == Key.NONE
    assert Key.safe_from(0xE8) is None
    assert Key.safe_from(0x8D) is None
    assert Led.safe_from(0x00) is None
    assert Led.safe_from(0x05) == Led.KANA
    assert Led.safe_from(0x06) is None
    assert Button.safe_from(0x03) == Button.TERTIARY
    assert Button.safe_from(0x04) is None


def test_mask_safe_from():
    assert Modifiers.safe_from(0xFF) == Modifiers(0xFF)
    assert Leds.safe_from(0x1F) == Leds(0x1F)
    assert Leds.safe_from(0x20) is None
    assert Leds.safe_from(0x81) is None
    assert Buttons.safe_from(0x07) == Buttons(0x07)
    assert Buttons.safe_from(0x08) is None
    assert Modifiers.safe_from(0x100) is None


def test_mask_set_algebra():
    leds = Leds.NUM_LOCK | Leds.KANA
    assert Leds.NUM_LOCK in leds
    assert Leds.CAPS_LOCK not in leds
    assert leds & Leds.KANA == Leds.KANA
    assert leds & ~Leds.NUM_LOCK == Leds.KANA


@pytest.mark.parametrize("text, expected", [
    ("backspace", Key.BACKSPACE),
    ("back-space", Key.BACKSPACE),
    ("BackSpace", Key.BACKSPACE),
    ("escape", Key.ESC),
    ("[", Key.LEFT_BRACE),
    ("ctrl", Key.LEFT_CTRL),
    ("right-meta", Key.RIGHT_META),
])
def test_parse_key(text, expected):
    assert Key.parse(text) == expected


def test_parse_button_aliases():
    assert Button.parse("primary") == Button.PRIMARY
    assert Button.parse("first") == Button.PRIMARY
    assert Button.parse("1") == Button.PRIMARY
    assert Button.parse("Third") == Button.TERTIARY


def test_parse_unknown():
    with pytest.raises(Unknown):
        Key.parse("hyper")
    with pytest.raises(Unknown):
        Led.parse("shift")


def test_display_uses_primary_name():
    assert str(Key.LEFT_BRACE) == "left-brace"
    assert f"{Key.A}" == "a"
    assert str(Led.SCROLL_LOCK) == "scroll-lock"
    assert Key.names(Key.BACKSPACE) == ("backspace", "back-space")


def test_variants_in_code_order():
    assert Key.VARIANTS[0] is Key.NONE
    assert Key.VARIANTS[-1] is Key.RIGHT_META
    assert [int(b) for b in Button.VARIANTS] == [0, 1, 2, 3]


def test_mask_parse_and_str():
    assert Modifiers.parse("ctrl+shift") == Modifiers.LEFT_CTRL | Modifiers.LEFT_SHIFT
    assert Leds.parse("num-lock,kana") == Leds.NUM_LOCK | Leds.KANA
    assert Buttons.parse("") == Buttons.none()
    assert str(Modifiers.LEFT_CTRL | Modifiers.RIGHT_ALT) == "left-ctrl+right-alt"
    assert str(Leds.none()) == "none"
    with pytest.raises(Unknown):
        Modifiers.parse("ctrl+a")


def test_deserialize_rejects_out_of_range():
    assert Key.deserialize(0x04) == Key.A
    assert Leds.deserialize(0x03) == Leds.NUM_LOCK | Leds.CAPS_LOCK
    with pytest.raises(InvalidValue):
        Key.deserialize(0xE8)
    with pytest.raises(InvalidValue):
        Leds.deserialize(0x20)
    with pytest.raises(InvalidValue):
        Button.deserialize(True)
    with pytest.raises(InvalidValue):
        Modifiers.deserialize("1")
