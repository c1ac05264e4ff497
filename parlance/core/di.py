"""Wiring helpers: commands mark injected parameters with `di.Provide["section.name"]`."""

from __future__ import annotations

__all__ = [
    "NotReady",
    "Provide",
    "inject",
]

import typing as t

from dependency_injector.wiring import inject, Provide


class NotReady(object):
    """Stands in for container values, like the repository root, that exist only after boot."""

    _instance: t.ClassVar[NotReady | None] = None

    def __new__(cls) -> NotReady:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self):
        return "<NotReady>"
