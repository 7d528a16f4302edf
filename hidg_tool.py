#!/usr/bin/env python3
# /// script
# dependencies = ["hid>=1.0.6"]
# ///
"""
hidg - USB HID gadget report tool

Encode, decode and diff keyboard/mouse boot-protocol reports, drive a
/dev/hidgN gadget node interactively, or watch reports from the host side.

Usage:
    python hidg_tool.py <command>

Commands:
    names {key,led,button}        List code names and aliases
    encode keyboard <keys...>     Keyboard input report (--output for LEDs)
    encode mouse [-b B] [-p X Y]  Mouse input report
    decode {keyboard,mouse} <hex> Show pressed keys / buttons / LEDs
    diff <old-hex> <new-hex>      Ordered mouse changes between two reports
    repl [-c CLASS] [PATH]        Interactive mode on a gadget node
    watch <path> [-c CLASS]       Print changes read through hidapi
"""

import sys
from hidg.cli import main

if __name__ == "__main__":
    sys.exit(main())
