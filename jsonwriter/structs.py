"""Encoding of dataclass instances as JSON objects.

Fields are described by dataclass field metadata:

* ``json``: a tag such as ``"name,omitempty,string"``. The name ``-`` (with
  no comma) leaves the field out. An empty name keeps the attribute name.
* ``embedded``: when true and the field holds a dataclass, the fields of that
  dataclass are written as if they belonged to the outer object, unless the
  tag gives the field a name of its own.

Attributes whose names start with an underscore are never written, except
embedded ones, whose fields are promoted.
"""

from __future__ import annotations

import dataclasses
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from .stream import Stream, StreamError

ValueEncoder = Callable[[Any, Stream], None]

_MISSING = object()


@dataclass
class FieldBinding:
    """One JSON member of a struct and the attribute path that feeds it."""

    path: tuple[str, ...]
    to_name: str
    tagged: bool = False
    omitempty: bool = False
    string_mode: bool = False

    @property
    def levels(self) -> tuple[str, ...]:
        """The attribute path; its length is the embedding depth plus one."""
        return self.path

    @property
    def name(self) -> str:
        return self.path[-1]

    def get(self, obj: Any) -> Any:
        """Return the field's value, or a sentinel if an embedded parent is None."""
        for attr in self.path:
            if obj is None:
                return _MISSING
            obj = getattr(obj, attr)
        return obj

    def is_embedded_nil(self, obj: Any) -> bool:
        return self.get(obj) is _MISSING


def resolve_conflict_binding(
    old: FieldBinding, new: FieldBinding
) -> tuple[bool, bool]:
    """Decide which of two bindings with the same JSON name to drop.

    Returns ``(ignore_old, ignore_new)``. A tagged field beats an untagged
    one; otherwise the shallower field wins, and equal depth drops both.
    """
    if new.tagged and not old.tagged:
        return True, False
    if old.tagged and not new.tagged:
        return True, False
    if len(old.levels) > len(new.levels):
        return True, False
    if len(new.levels) > len(old.levels):
        return False, True
    return True, True


def _parse_tag(tag: str) -> tuple[str, set[str]]:
    name, _, rest = tag.partition(",")
    options = {opt for opt in rest.split(",") if opt} if rest else set()
    return name, options


def _unwrap_optional(tp: Any) -> Any:
    origin = typing.get_origin(tp)
    union_types: tuple[Any, ...] = (typing.Union,)
    if hasattr(types, "UnionType"):
        union_types = (typing.Union, types.UnionType)
    if origin in union_types:
        args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _resolve_annotation(cls: type, annotation: Any) -> Any:
    """Turn a field annotation into the class it names, where possible."""
    if not isinstance(annotation, str):
        return _unwrap_optional(annotation)
    text = annotation.strip()
    for wrapper in ("typing.Optional[", "Optional["):
        if text.startswith(wrapper) and text.endswith("]"):
            text = text[len(wrapper):-1]
            break
    parts = [part.strip() for part in text.split("|")]
    parts = [part for part in parts if part and part != "None"]
    if len(parts) != 1:
        return annotation
    names = parts[0].split(".")
    module = inspect.getmodule(cls)
    namespace = vars(module) if module is not None else {}
    target = namespace.get(names[0], _MISSING)
    for attr in names[1:]:
        if target is _MISSING:
            break
        target = getattr(target, attr, _MISSING)
    return annotation if target is _MISSING else target


def _describe(
    cls: type, prefix: tuple[str, ...], chain: tuple[type, ...]
) -> Iterator[FieldBinding]:
    for field in dataclasses.fields(cls):
        tag = field.metadata.get("json", "")
        name, options = _parse_tag(tag)
        if tag == "-":
            continue
        path = prefix + (field.name,)
        if field.metadata.get("embedded") and not name:
            embedded = _resolve_annotation(cls, field.type)
            if not (isinstance(embedded, type) and dataclasses.is_dataclass(embedded)):
                raise TypeError(
                    f"embedded field {cls.__name__}.{field.name} must hold a dataclass"
                )
            if embedded in chain:
                continue
            yield from _describe(embedded, path, chain + (embedded,))
            continue
        if field.name.startswith("_"):
            continue
        yield FieldBinding(
            path=path,
            to_name=name or field.name,
            tagged=bool(tag),
            omitempty="omitempty" in options,
            string_mode="string" in options,
        )


def field_bindings(cls: type) -> list[FieldBinding]:
    """List the JSON members of dataclass ``cls`` in declaration order.

    Embedded dataclasses are expanded in place. Conflicts between names are
    not resolved here.
    """
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise TypeError(f"unsupported type: {cls!r}")
    return list(_describe(cls, (), (cls,)))


def _is_empty_value(value: Any) -> bool:
    if value is None or value is _MISSING:
        return True
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return False
    if isinstance(value, (bool, int, float, complex)):
        return not value
    try:
        return len(value) == 0
    except TypeError:
        return False


class StructEncoder:
    """Writes instances of one dataclass as JSON objects.

    ``value_encoder(value, stream)`` writes each member's value.
    """

    def __init__(self, cls: type, value_encoder: ValueEncoder) -> None:
        self.cls = cls
        self.value_encoder = value_encoder
        described = field_bindings(cls)
        self._has_bindings = bool(described)
        ordered: list[list[Any]] = []
        for binding in described:
            entry = [binding, False]
            for old in ordered:
                if old[0].to_name != binding.to_name:
                    continue
                old[1], entry[1] = resolve_conflict_binding(old[0], binding)
            ordered.append(entry)
        self.fields: list[FieldBinding] = [b for b, ignored in ordered if not ignored]

    def _encode_field(self, binding: FieldBinding, value: Any, stream: Stream) -> None:
        if not binding.string_mode:
            self.value_encoder(value, stream)
        elif isinstance(value, str):
            inner = Stream(stream.config)
            self.value_encoder(value, inner)
            stream.write_string(inner.buffer().decode("utf-8", "surrogatepass"))
        elif isinstance(value, (bool, int, float)):
            stream.write_raw('"')
            self.value_encoder(value, stream)
            stream.write_raw('"')
        else:
            self.value_encoder(value, stream)

    def encode(self, obj: Any, stream: Stream) -> None:
        """Write ``obj`` to ``stream`` as a JSON object."""
        if not self._has_bindings:
            stream.write_empty_object()
            return
        stream.write_object_start()
        first = True
        for binding in self.fields:
            value = binding.get(obj)
            if value is _MISSING:
                continue
            if binding.omitempty and _is_empty_value(value):
                continue
            if not first:
                stream.write_more()
            stream.write_object_field(binding.to_name)
            try:
                self._encode_field(binding, value, stream)
            except StreamError as exc:
                raise StreamError(
                    f"{self.cls.__name__}.{binding.name}: {exc}"
                ) from exc
            first = False
        stream.write_object_end()

    def is_empty(self, obj: Any) -> bool:
        """A struct value is never empty."""
        return False