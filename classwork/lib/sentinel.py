from __future__ import annotations

import typing as t


class NotSet(object):
    """Marks a keyword argument the caller did not pass, where None is a legitimate value"""

    _instance: t.ClassVar[NotSet | None] = None

    def __new__(cls) -> NotSet:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<NotSet>"
