"""
hidg — CLI entry point (argparse).
"""

import argparse
import logging

from hidg.protocol import LOG_FORMAT


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="hidg",
        description="USB HID gadget keyboard/mouse report tool",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # names
    p_names = sub.add_parser("names", help="List code names and aliases")
    p_names.add_argument("table", choices=["key", "led", "button"])

    # encode
    p_enc = sub.add_parser("encode", help="Build a report and print it as hex")
    enc = p_enc.add_subparsers(dest="cls")
    p_ek = enc.add_parser("keyboard", aliases=["kbd", "k"],
                          help="Keys to press (or LEDs with --output)")
    p_ek.add_argument("tokens", nargs="*", help="Key names, e.g. ctrl a")
    p_ek.add_argument("--output", action="store_true",
                      help="Build the LED output report instead")
    p_ek.add_argument("--json", action="store_true", help="Print structured form")
    p_em = enc.add_parser("mouse", aliases=["m"], help="Mouse input report")
    p_em.add_argument("-b", "--button", action="append", default=[],
                      help="Button to press (repeatable)")
    p_em.add_argument("-p", "--pointer", nargs=2, type=int, metavar=("X", "Y"))
    p_em.add_argument("-w", "--wheel", type=int)
    p_em.add_argument("--json", action="store_true", help="Print structured form")

    # decode
    p_dec = sub.add_parser("decode", help="Decode a hex report")
    p_dec.add_argument("cls", choices=["keyboard", "mouse"])
    p_dec.add_argument("hex", help="Report bytes as hex")
    p_dec.add_argument("--output", action="store_true",
                       help="Decode as output report")

    # diff
    p_diff = sub.add_parser("diff", help="Changes between two mouse input reports")
    p_diff.add_argument("old", help="Old report (hex)")
    p_diff.add_argument("new", help="New report (hex)")
    p_diff.add_argument("--relative-pointer", action="store_true")
    p_diff.add_argument("--relative-wheel", action="store_true")

    # repl
    p_repl = sub.add_parser("repl", help="Read-write reports in interactive mode")
    p_repl.add_argument("-c", "--class", dest="cls", default="keyboard",
                        choices=["keyboard", "mouse"])
    p_repl.add_argument("path", nargs="?", default="hidg0",
                        help="Gadget node: N, name under /dev, or absolute path")

    # watch
    p_watch = sub.add_parser("watch", help="Print changes read from a host HID path")
    p_watch.add_argument("path", help="hidapi device path")
    p_watch.add_argument("-c", "--class", dest="cls", default="mouse",
                         choices=["keyboard", "mouse"])
    p_watch.add_argument("--relative-pointer", action="store_true")
    p_watch.add_argument("--relative-wheel", action="store_true")
    p_watch.add_argument("-n", "--count", type=int,
                         help="Stop after this many reports")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format=LOG_FORMAT)

    if not args.command or (args.command == "encode" and not args.cls):
        parser.print_help()
        return 1

    from hidg.commands import (cmd_decode, cmd_diff, cmd_encode_keyboard,
                               cmd_encode_mouse, cmd_names, cmd_repl, cmd_watch)

    if args.command == "names":
        return cmd_names(args.table)
    elif args.command == "encode":
        if args.cls in ("mouse", "m"):
            return cmd_encode_mouse(args.button, pointer=args.pointer,
                                    wheel=args.wheel, as_json=args.json)
        return cmd_encode_keyboard(args.tokens, output=args.output, as_json=args.json)
    elif args.command == "decode":
        return cmd_decode(args.cls, args.hex, output=args.output)
    elif args.command == "diff":
        return cmd_diff(args.old, args.new,
                        relative_pointer=args.relative_pointer,
                        relative_wheel=args.relative_wheel)
    elif args.command == "repl":
        return cmd_repl(args.cls, args.path)
    elif args.command == "watch":
        return cmd_watch(args.cls, args.path,
                         relative_pointer=args.relative_pointer,
                         relative_wheel=args.relative_wheel,
                         count=args.count)

    return 0
