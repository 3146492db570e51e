#!/usr/bin/env python3
"""
Debug helper for inspecting how arguments are quoted.

Usage:
    python bin/cmdline-dump.py program.exe 'arg one' 'arg"two' 'trailing\\'

Prints the plan for each piece (quoted or verbatim, emitted length) and the
resulting command line with its code-unit count.
"""

import sys

from winargv import CommandLineError, build_command_line, measure_argument


def dump_plan(label, argument):
    plan = measure_argument(argument)
    how = "quoted" if plan.needs_quoting else "verbatim"
    print(f"{label}: {argument!r}")
    print(f"  {how}, {plan.length} code units")


def main():
    if len(sys.argv) < 2:
        print("Usage: cmdline-dump.py program [args...]")
        print("Example: cmdline-dump.py app.exe 'a b' 'a\"b'")
        sys.exit(1)

    command, arguments = sys.argv[1], sys.argv[2:]
    dump_plan("command", command)
    for i, argument in enumerate(arguments):
        dump_plan(f"arg {i}", argument)
    print("-" * 40)

    try:
        with build_command_line(command, arguments) as line:
            print(line)
            print(f"{len(line)} code units, {line.nbytes} bytes with NUL")
    except CommandLineError as e:
        print(f"Build error (0x{e.status:08X}): {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
