import json
import logging

from hidg.device import GadgetDevice, HostDevice
from hidg.keyboard import Keyboard, KeyboardInput, KeyboardOutput
from hidg.layout import Button, Key, Led
from hidg.mouse import Mouse, MouseInput
from hidg.protocol import HidgError, StateChange, ValueChange

logger = logging.getLogger(__name__)

CLASSES = {"keyboard": Keyboard(), "mouse": Mouse()}
CODE_TABLES = {"key": Key, "led": Led, "button": Button}


def _parse_hex(hex_str):
    return bytes.fromhex(hex_str.replace(" ", "").replace(":", ""))


def _emit(report, as_json):
    if as_json:
        print(json.dumps(report.to_dict()))
    else:
        print(bytes(report).hex())


def cmd_names(table):
    codes = CODE_TABLES[table]
    print(f"{'Code':<6} {'Name':<22} Aliases")
    print("-" * 60)
    for code in codes.VARIANTS:
        name, *aliases = codes.names(code)
        print(f"0x{int(code):02X}   {name:<22} {' '.join(aliases)}")
    return 0


def cmd_encode_keyboard(tokens, output=False, as_json=False):
    """Print a keyboard report with the named keys pressed (or LEDs lit)."""
    try:
        if output:
            report = KeyboardOutput()
            report.extend(StateChange.on(Led.parse(t)) for t in tokens)
        else:
            keys = [Key.parse(t) for t in tokens]
            report = KeyboardInput()
            report.extend(StateChange.press(k) for k in keys)
    except HidgError as e:
        print(f"{e}. See 'names {'led' if output else 'key'}'.")
        return 1
    if not output:
        wanted = {k for k in keys if k != Key.NONE and not k.is_modifier()}
        if len(wanted) > report.count_pressed_keys():
            logger.warning("Only %d ordinary keys fit in one report, %d dropped",
                           report.count_pressed_keys(),
                           len(wanted) - report.count_pressed_keys())
    _emit(report, as_json)
    return 0


def cmd_encode_mouse(buttons=(), pointer=None, wheel=None, as_json=False):
    report = MouseInput()
    try:
        report.extend(StateChange.press(Button.parse(b)) for b in buttons)
        if pointer is not None:
            report.extend([ValueChange.absolute(tuple(pointer))])
        if wheel is not None:
            report.extend([ValueChange.absolute(wheel)])
    except HidgError as e:
        print(f"{e}. See 'names button'.")
        return 1
    except ValueError as e:
        print(f"Bad value: {e}")
        return 1
    _emit(report, as_json)
    return 0


def _describe_keyboard_input(report):
    keys = " ".join(str(k) for k in report.pressed())
    return f"Keys pressed: {keys or '-'}"


def _describe_keyboard_output(report):
    leds = " ".join(str(led) for led in report.lit())
    return f"Leds lit: {leds or '-'}"


def _describe_mouse_input(report):
    buttons = " ".join(str(b) for b in report.pressed())
    x, y = report.pointer()
    return f"Buttons pressed: {buttons or '-'}, pointer: ({x}, {y}), wheel: {report.wheel()}"


def cmd_decode(cls_name, hex_str, output=False):
    try:
        raw = _parse_hex(hex_str)
    except ValueError as e:
        print(f"Bad hex: {e}")
        return 1
    try:
        if cls_name == "keyboard" and output:
            print(_describe_keyboard_output(KeyboardOutput.from_bytes(raw)))
        elif cls_name == "keyboard":
            print(_describe_keyboard_input(KeyboardInput.from_bytes(raw)))
        elif output:
            print("Mouse has no output report.")
            return 1
        else:
            print(_describe_mouse_input(MouseInput.from_bytes(raw)))
    except HidgError as e:
        print(e)
        return 1
    return 0


def cmd_diff(old_hex, new_hex, relative_pointer=False, relative_wheel=False):
    try:
        old = MouseInput.from_bytes(_parse_hex(old_hex))
        new = MouseInput.from_bytes(_parse_hex(new_hex))
    except (HidgError, ValueError) as e:
        print(e)
        return 1
    changes = list(new.diff(old, relative_pointer, relative_wheel))
    if not changes:
        print("No changes.")
    for change in changes:
        print(change)
    return 0


# ── Interactive mode ─────────────────────────────────────────────────────
REPL_COMMANDS = {
    "keyboard": ["state", "press", "release"],
    "mouse": ["state", "press", "release", "move", "wheel"],
}


def _completer(cls_name):
    codes = Key if cls_name == "keyboard" else Button
    names = [str(code) for code in codes.VARIANTS]
    commands = REPL_COMMANDS[cls_name]

    def complete(text, state):
        import readline

        line = readline.get_line_buffer()
        if " " in line.lstrip():
            cmd = line.split()[0]
            options = names if cmd in ("press", "release") else []
        else:
            options = commands
        matches = [o for o in options if o.startswith(text)]
        return matches[state] if state < len(matches) else None

    return complete


def _describe_state(report, cls_name, leds=None):
    if cls_name != "keyboard":
        return _describe_mouse_input(report)
    state = _describe_keyboard_input(report)
    if leds is not None:
        state += f", {_describe_keyboard_output(leds)}"
    return state


def _repl_line(report, cls_name, line, leds=None):
    """Apply one REPL line to `report`; returns True if it changed."""
    words = line.split()
    if not words or words[0] == "state":
        print(_describe_state(report, cls_name, leds))
        return False

    cmd, args = words[0], words[1:]
    codes = Key if cls_name == "keyboard" else Button
    if cmd in ("press", "release"):
        if not args:
            print(f"Usage: {cmd} NAME...")
            return False
        make = StateChange.press if cmd == "press" else StateChange.release
        report.extend([make(codes.parse(a)) for a in args])
    elif cmd == "move" and cls_name == "mouse":
        if len(args) != 2:
            print("Usage: move X Y")
            return False
        x, y = (int(a) for a in args)
        report.extend([ValueChange.delta((x, y))])
    elif cmd == "wheel" and cls_name == "mouse":
        if len(args) != 1:
            print("Usage: wheel W")
            return False
        report.extend([ValueChange.delta(int(args[0]))])
    else:
        print(f"Unknown command: {cmd}")
        return False
    return True


def cmd_repl(cls_name, path):
    import readline

    try:
        dev = GadgetDevice(CLASSES[cls_name], path)
    except RuntimeError as e:
        print(e)
        return 1

    readline.set_completer(_completer(cls_name))
    readline.parse_and_bind("tab: complete")

    report = CLASSES[cls_name].input()
    leds = CLASSES[cls_name].output() if cls_name == "keyboard" else None
    with dev:
        while True:
            try:
                line = input(">> ")
            except KeyboardInterrupt:
                print("CTRL-C")
                break
            except EOFError:
                print("CTRL-D")
                break
            try:
                if leds is not None:
                    latest = dev.poll()
                    if latest is not None:
                        leds = latest
                if _repl_line(report, cls_name, line, leds):
                    dev.send(report)
            except (HidgError, ValueError) as e:
                print(f"Error: {e}")
            except OSError as e:
                print(f"Error: {e}")
                logger.debug("Gadget I/O failed", exc_info=True)
                return 1
    return 0


# ── Host-side monitor ────────────────────────────────────────────────────
def _keyboard_changes(new, old):
    before = list(old.pressed())
    after = list(new.pressed())
    for key in before:
        if key not in after:
            yield f"release {key}"
    for key in after:
        if key not in before:
            yield f"press {key}"


def cmd_watch(cls_name, path, relative_pointer=False, relative_wheel=False, count=None):
    try:
        dev = HostDevice(CLASSES[cls_name], path)
    except RuntimeError as e:
        print(e)
        return 1

    print(f"Watching {cls_name} at {path} (Ctrl-C to stop)")
    old = CLASSES[cls_name].input()
    seen = 0
    with dev:
        try:
            while count is None or seen < count:
                new = dev.receive()
                if new is None:
                    continue
                seen += 1
                if cls_name == "keyboard":
                    changes = _keyboard_changes(new, old)
                else:
                    changes = new.diff(old, relative_pointer, relative_wheel)
                for change in changes:
                    print(f"  {change}")
                old = new
        except KeyboardInterrupt:
            pass
        except (HidgError, RuntimeError) as e:
            print(f"Error: {e}")
            return 1
    return 0
