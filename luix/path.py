"""Absolute file system paths."""

from __future__ import annotations

from collections.abc import Iterator

PATH_SEPARATOR = "/"


class Path:
    """An absolute path whose components can be iterated."""

    def __init__(self, path: str) -> None:
        if not path.startswith(PATH_SEPARATOR):
            raise ValueError(f"path must be absolute: {path!r}")
        self.path = path

    def __iter__(self) -> Iterator[str]:
        return (part for part in self.path.split(PATH_SEPARATOR) if part)

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return f"Path({self.path!r})"