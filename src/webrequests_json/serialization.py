"""JSON settings and the deserializer/encoder pair used for web responses.

Parsing is done by the standard ``json`` module and binding to the target type
by pydantic, so the two failure kinds stay distinguishable:
``json.JSONDecodeError`` for malformed text and ``pydantic.ValidationError``
for well-formed JSON that does not fit the requested type.
"""
from __future__ import annotations

import json
import types
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any, Callable, Dict, Literal, Mapping, Optional, TextIO, Union, get_args, get_origin

from pydantic import TypeAdapter


@dataclass(frozen=True, slots=True)
class JsonSettings:
    """Options forwarded unchanged to the JSON parser and pydantic.

    ``strict=None`` leaves strictness to the target type's own configuration.
    """

    strict: Optional[bool] = None
    by_alias: bool = True
    parse_float: Optional[Callable[[str], Any]] = None
    parse_int: Optional[Callable[[str], Any]] = None
    parse_constant: Optional[Callable[[str], Any]] = None
    context: Optional[Mapping[str, Any]] = None
    indent: Optional[int] = None

    def parser_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if self.parse_float is not None:
            options["parse_float"] = self.parse_float
        if self.parse_int is not None:
            options["parse_int"] = self.parse_int
        if self.parse_constant is not None:
            options["parse_constant"] = self.parse_constant
        return options


DEFAULT_SETTINGS = JsonSettings()


@lru_cache(maxsize=256)
def _cached_type_adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


def _type_adapter(target_type: Any) -> TypeAdapter:
    try:
        hash(target_type)
    except TypeError:
        # unhashable type forms cannot be cached
        return TypeAdapter(target_type)
    return _cached_type_adapter(target_type)


def from_json_text_reader(reader: TextIO, target_type: Any, settings: Optional[JsonSettings] = None) -> Any:
    """Parse the JSON text from ``reader`` into a value of ``target_type``.

    Raises:
        json.JSONDecodeError: The text is not valid JSON.
        pydantic.ValidationError: The JSON does not fit ``target_type``.
    """

    settings = settings or DEFAULT_SETTINGS
    data = json.load(reader, **settings.parser_options())
    context = dict(settings.context) if settings.context is not None else None
    return _type_adapter(target_type).validate_python(data, strict=settings.strict, context=context)


def to_json(value: Any, settings: Optional[JsonSettings] = None, target_type: Any = None) -> str:
    """Encode ``value`` as JSON text that :func:`from_json_text_reader` reads back."""

    settings = settings or DEFAULT_SETTINGS
    adapter = _type_adapter(target_type if target_type is not None else type(value))
    return adapter.dump_json(value, indent=settings.indent, by_alias=settings.by_alias).decode("utf-8")


def describe_type(target_type: Any) -> str:
    """Render a type as it is declared, e.g. ``Item`` or ``dict[str, list[Item]]``."""

    if target_type is None or target_type is type(None):
        return "None"
    if target_type is Any:
        return "Any"
    if target_type is Ellipsis:
        return "..."

    origin = get_origin(target_type)
    args = get_args(target_type)
    if origin is Annotated:
        return describe_type(args[0])
    if origin is Union or origin is types.UnionType:
        return " | ".join(describe_type(arg) for arg in args)
    if origin is Literal:
        return f"Literal[{', '.join(repr(arg) for arg in args)}]"
    if origin is not None:
        name = describe_type(origin)
        if not args:
            return name
        return f"{name}[{', '.join(describe_type(arg) for arg in args)}]"

    name = getattr(target_type, "__name__", None)
    return name if isinstance(name, str) else str(target_type)
