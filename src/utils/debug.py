from __future__ import annotations

import sys

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    return _verbose


def log(message: str, *, scope: str | None = None) -> None:
    if not _verbose:
        return
    if scope:
        message = f"[{scope}] {message}"
    print(message, file=sys.stderr)
