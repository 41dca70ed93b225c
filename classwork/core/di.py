from __future__ import annotations

__all__ = [
    "Closing",
    "Manage",
    "NotReady",
    "Provide",
    "as_",
    "inject",
]

import typing as t

from dependency_injector.containers import Container
from dependency_injector.providers import Provider
from dependency_injector.wiring import Closing, inject, Provide, TypeModifier

TAs = t.TypeVar("TAs")
T = t.TypeVar("T")


class Manage(object):
    """`Closing[Provide[...]]`: the provided resource is closed after the call"""

    def __new__(cls, provider: Provider[T] | Container | str):
        return Closing[Provide[provider]]

    @classmethod
    def __class_getitem__(cls, item: Provider[T] | Container | str):
        return cls(item)


def as_(type_: t.Type[TAs]) -> TypeModifier:
    """Return custom type modifier."""
    # replace wiring.as_ because that one has typing issues
    return TypeModifier(type_)


class NotReady(object):
    _instance: t.ClassVar[NotReady | None] = None

    def __new__(cls) -> NotReady:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<NotReady>"
