"""
Coloured diagnostics on stderr; stdout is reserved for the yanked output.
"""

from __future__ import annotations

import sys

from colorama import Fore, Style, just_fix_windows_console

just_fix_windows_console()

PREFIX = "[yank]"


def echo(msg: str, color: str = "") -> None:
    line = f"{PREFIX} {msg}"
    if color:
        line = color + line + Style.RESET_ALL
    print(line, file=sys.stderr)


def debug(msg: str) -> None:
    echo(msg, Fore.CYAN)


def warn(msg: str) -> None:
    echo(msg, Fore.YELLOW)


def success(msg: str) -> None:
    echo(msg, Fore.GREEN)


def error(msg: str) -> None:
    print(Fore.RED + f"Error: {msg}" + Style.RESET_ALL, file=sys.stderr)
