#!/usr/bin/env python3
"""Check for banned Python constructions in winargv source.

Banned constructions:

    Construction              Reason                            Use instead
    ------------------------  --------------------------------  --------------------------
    import shlex              POSIX quoting, wrong convention   winargv.core.quoting
    from shlex import
    subprocess.list2cmdline   winargv is the quoting authority  winargv.build_command_line
    from subprocess import list2cmdline
"""

import ast
import os
import sys

BANNED_MODULES = frozenset({"shlex"})
BANNED_NAMES = frozenset({"list2cmdline"})


def find_python_files(directory):
    """Find all .py files recursively."""
    result = []
    for root, dirs, files in os.walk(directory):
        if "__pycache__" in dirs:
            dirs.remove("__pycache__")
        for f in files:
            if f.endswith(".py"):
                result.append(os.path.join(root, f))
    result.sort()
    return result


def check_source(source, filename="<string>"):
    tree = ast.parse(source, filename)
    errors = []

    for node in ast.walk(tree):
        lineno = getattr(node, "lineno", 0)

        # import shlex
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.name in BANNED_MODULES:
                    errors.append(
                        (lineno, f"import {alias.name}: banned, use winargv.core.quoting")
                    )

        # from shlex import ... / from subprocess import list2cmdline
        if isinstance(node, ast.ImportFrom):
            if node.module in BANNED_MODULES:
                errors.append(
                    (lineno, f"from {node.module} import: banned, use winargv.core.quoting")
                )
            for alias in node.names:
                if alias.name in BANNED_NAMES:
                    errors.append(
                        (lineno, f"import {alias.name}: banned, use build_command_line")
                    )

        # subprocess.list2cmdline(...)
        if isinstance(node, ast.Attribute) and node.attr in BANNED_NAMES:
            errors.append((lineno, f"{node.attr}: banned, use build_command_line"))

    return errors


def check_file(filepath):
    with open(filepath) as f:
        source = f.read()
    return check_source(source, filepath)


def main():
    src_dir = "src"
    if len(sys.argv) > 1:
        src_dir = sys.argv[1]

    if not os.path.isdir(src_dir):
        print(f"Directory not found: {src_dir}")
        sys.exit(1)

    files = find_python_files(src_dir)
    if not files:
        print(f"No Python files found in: {src_dir}")
        sys.exit(1)

    all_errors = []
    for filepath in files:
        try:
            errors = check_file(filepath)
            for lineno, description in errors:
                all_errors.append((filepath, lineno, description))
        except SyntaxError as e:
            print(f"Syntax error in {filepath}: {e}")
            sys.exit(1)

    if not all_errors:
        sys.exit(0)

    print(f"Found {len(all_errors)} banned construction(s):")
    for filepath, lineno, description in sorted(all_errors):
        print(f"  {filepath}:{lineno}: {description}")
    sys.exit(1)


if __name__ == "__main__":
    main()
