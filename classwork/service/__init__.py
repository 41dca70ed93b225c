import importlib
import sys
import types
import typing as t

__all__ = [
    "access",
    "assignment",
    "attachment",
    "submission",
]

if t.TYPE_CHECKING:
    from . import access, assignment, attachment, submission


def __getattr__(name: str) -> types.ModuleType:
    if name in __all__:
        module = importlib.import_module(f"{__name__}.{name}")
        setattr(sys.modules[__name__], name, module)
        return module
    raise AttributeError(f"module {__name__} has no attribute {name}")
