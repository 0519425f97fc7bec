"""Timestamped, tag-normalized console logging."""

from __future__ import annotations

import builtins
import sys
import time
from typing import Any


_LEVELS = {"DEEP", "DEBUG", "INFO", "WARN", "ERROR"}
_STDERR_LEVELS = {"WARN", "ERROR"}


def _split_tags(message: str) -> tuple[list[str], str]:
    tags: list[str] = []
    remaining = message.lstrip()
    while remaining.startswith("["):
        end = remaining.find("]")
        if end == -1:
            break
        tag = remaining[1:end].strip()
        if not tag:
            break
        tags.append(tag)
        remaining = remaining[end + 1 :].lstrip()
    return tags, remaining


def _normalize(message: str) -> tuple[str, str | None]:
    """Return the formatted line and its level (if one was tagged).

    Both ``[ERROR][SCORE] msg`` and ``[SCORE][ERROR] msg`` become
    ``[SCORE][ERROR] msg``.
    """
    tags, remaining = _split_tags(message)
    system = "GEARCHECK"
    level = None
    extra_tags: list[str] = []
    if tags:
        first = tags[0].upper()
        if first in _LEVELS:
            level = first
            system = tags[1] if len(tags) > 1 else system
            extra_tags = tags[2:]
        else:
            system = tags[0]
            if len(tags) > 1:
                level = tags[1].upper()
            extra_tags = tags[2:]
    extra = f" [{' '.join(extra_tags)}]" if extra_tags else ""
    suffix = f" {remaining}" if remaining else ""
    if level:
        return f"[{system}][{level}]{extra}{suffix}", level
    return f"[{system}]{extra}{suffix}", None


def tprint(*args: Any, **kwargs: Any) -> None:
    """Print with a timestamp prefix; WARN and ERROR lines go to stderr."""
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
    message = " ".join(str(arg) for arg in args)
    line, level = _normalize(message)
    if level in _STDERR_LEVELS and "file" not in kwargs:
        kwargs["file"] = sys.stderr
    builtins.print(f"[{timestamp}]{line}", **kwargs)

