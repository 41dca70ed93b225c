import typing as t
from collections.abc import Mapping

KT = t.TypeVar("KT")
VT = t.TypeVar("VT")
RecursiveMapping = VT | Mapping[KT, "RecursiveMapping[KT, VT]"]


def deep_update(
    d1: dict[KT, RecursiveMapping[KT, VT]], d2: Mapping[KT, RecursiveMapping[KT, VT]]
) -> dict[KT, RecursiveMapping[KT, VT]]:
    result = d1.copy()
    for k, v in d2.items():
        if isinstance(v, Mapping) and k in result and isinstance(result[k], Mapping):
            result[k] = deep_update(result[k], v)  # type: ignore
        else:
            result[k] = v
    return result


def parse_override(s: str) -> dict[str, t.Any]:
    """Turn a dotted `key.path=value` override into a nested mapping"""
    if "=" not in s:
        raise ValueError(f"override must have the form key=value: {s!r}")

    path, value = s.split("=", 1)
    keys = [k for k in path.strip().split(".") if k]
    if not keys:
        raise ValueError(f"override has an empty key: {s!r}")

    d: dict[str, t.Any] = {keys[-1]: value}
    for k in reversed(keys[:-1]):
        d = {k: d}
    return d
