#!/usr/bin/env python3
"""Presses Ctrl+V once and exits.

Launched through pkexec so the keystroke can reach windows owned by a more
privileged process than the launcher. Keep this file free of project imports:
it runs under a different user with a minimal environment.
"""
import sys


def send_paste_keystroke():
    from pynput.keyboard import Controller, Key

    controller = Controller()
    with controller.pressed(Key.ctrl):
        controller.press('v')
        controller.release('v')


def main():
    # The launcher has already waited out the paste delay before starting us
    try:
        send_paste_keystroke()
    except Exception as e:
        print(f"Paste failed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
