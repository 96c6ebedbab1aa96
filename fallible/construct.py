from __future__ import annotations
from dataclasses import is_dataclass
from pathlib import Path
import json
import tomllib
import types
import typing
from typing import Any, Optional, Type, TypeGuard, TypeVar, Union, cast

from .errors import HelpfulUserError, InputError


T = TypeVar("T")


def isgeneric(annot):
    return typing.get_origin(annot) is not None and hasattr(annot, "__args__")


def is_optional_type(dtype: Any) -> TypeGuard[Type[Optional[Any]]]:
    return (
        isgeneric(dtype)
        and typing.get_origin(dtype) in (Union, types.UnionType)
        and types.NoneType in typing.get_args(dtype)
    )


def construct(annot: Any, data: Any) -> Any:
    try:
        return _construct(annot, data)
    except (AssertionError, ValueError, TypeError) as e:
        raise InputError(annot, data) from e


def _construct(annot: Type[T], data: Any) -> T:
    """Construct an object of type `annot` from decoded TOML or JSON `data`.

    Supported are `str`, `int`, `bool`, `Optional[T]` and dataclasses built from
    these. Keys missing from `data` keep the dataclass defaults.
    """
    if annot is bool:
        assert isinstance(data, bool)
        return cast(T, data)
    if annot is int:
        assert isinstance(data, int) and not isinstance(data, bool)
        return cast(T, data)
    if annot is str:
        assert isinstance(data, str)
        return cast(T, data)
    if is_optional_type(annot):
        if data is None:
            return cast(T, None)
        inner = [a for a in typing.get_args(annot) if a is not types.NoneType]
        return cast(T, _construct(inner[0], data))
    if is_dataclass(annot):
        assert isinstance(data, dict)
        hints = typing.get_type_hints(annot)
        unknown = set(data) - set(hints)
        if unknown:
            raise ValueError(f"unknown fields: {', '.join(sorted(unknown))}")
        return cast(T, annot(**{k: _construct(hints[k], v) for k, v in data.items()}))
    raise ValueError(f"Couldn't construct {annot} from {data!r}")


def read_from_file(data_type: Type[T], path: Path, section: Optional[str] = None) -> T:
    """Read an object of `data_type` from a TOML or JSON file. If `section` is
    given, only that section is decoded; periods in `section` indicate deeper
    nesting, e.g. `tool.fallible`.
    """
    if not path.exists():
        raise HelpfulUserError(f"File not found: {path}")
    with open(path, "rb") as f:
        if path.suffix == ".toml":
            data: Any = tomllib.load(f)
        elif path.suffix == ".json":
            data = json.load(f)
        else:
            raise HelpfulUserError(f"Unrecognized file format: {path}")

    try:
        if section is not None:
            for s in section.split("."):
                data = data[s]
    except KeyError as e:
        raise HelpfulUserError(
            f"Data file `{path}` should contain section `{section}`."
        ) from e

    return construct(data_type, data)
