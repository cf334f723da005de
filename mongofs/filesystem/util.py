"""
Path helpers shared by filesystem adapters.
"""

import re
from typing import Iterable, Mapping


def normalize_path(path: str) -> str:
    """
    Normalize a relative path: strip surrounding whitespace and slashes, collapse repeated slashes and
    resolve "." and ".." segments. Raises ValueError if the path would end up outside the root.
    """
    parts: list[str] = []
    for part in re.split(r"[\\/]+", path.strip()):
        if part in ("", "."):
            continue
        if part == "..":
            if not parts:
                raise ValueError(f"Path is outside of the root: {path!r}")
            parts.pop()
        else:
            parts.append(part)
    return "/".join(parts)


def normalize_prefix(prefix: str, separator: str = "/") -> str:
    prefix = prefix.rstrip(separator)
    return f"{prefix}{separator}" if prefix else ""


def dirname(path: str) -> str:
    """The parent directory of a normalized path, or "" for a top level path"""
    head, sep, _ = path.rpartition("/")
    return head if sep else ""


def emulate_directories(listing: Iterable[Mapping]) -> list[dict]:
    """
    Stores without real directories only list files. Add a {"type": "dir"} entry
    for every parent directory implied by the listed paths.
    """
    listing = [dict(entry) for entry in listing]
    existing = {entry["path"] for entry in listing if entry.get("type") == "dir"}
    directories: list[str] = []
    for entry in listing:
        for directory in _parents(entry.get("dirname", "")):
            if directory not in existing:
                existing.add(directory)
                directories.append(directory)
    return listing + [dict(type="dir", path=d, dirname=dirname(d)) for d in directories]


def _parents(directory: str) -> list[str]:
    """All directories from the top down to (and including) directory"""
    if not directory:
        return []
    segments = directory.split("/")
    return ["/".join(segments[: i + 1]) for i in range(len(segments))]
