"""Encoding of Python values as JSON text.

Values are dispatched on their type:

* objects with ``marshal_json()`` write the JSON text it returns;
* objects with ``marshal_text()`` are written as a JSON string of that text;
* ``None``, booleans, integers, floats and strings map to the JSON literals;
* ``bytes``, ``bytearray`` and ``memoryview`` become base64 strings;
* ``datetime`` values become RFC 3339 strings;
* lists and tuples become arrays, mappings become objects;
* dataclass instances become objects (see :mod:`jsonwriter.structs`).
"""

from __future__ import annotations

import base64
import dataclasses
from collections.abc import Mapping
from datetime import datetime
from functools import lru_cache
from typing import Any, Optional, Protocol, Union, runtime_checkable

from .floats import format_float64
from .stream import Stream, StreamConfig, StreamError
from .structs import StructEncoder


@runtime_checkable
class JSONMarshaler(Protocol):
    """An object that produces its own JSON text."""

    def marshal_json(self) -> Union[bytes, str]:
        ...


@runtime_checkable
class TextMarshaler(Protocol):
    """An object that produces text to be written as a JSON string."""

    def marshal_text(self) -> Union[bytes, str]:
        ...


def _as_bytes(data: Union[bytes, str]) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8", "surrogatepass")
    return bytes(data)


def _as_text(data: Union[bytes, str]) -> str:
    if isinstance(data, str):
        return data
    return bytes(data).decode("utf-8", "replace")


def _call_marshaler(method: Any) -> Union[bytes, str]:
    try:
        return method()
    except StreamError:
        raise
    except Exception as exc:
        raise StreamError(str(exc)) from exc


def _write_json_marshaler(value: JSONMarshaler, stream: Stream) -> None:
    data = _as_bytes(_call_marshaler(value.marshal_json))
    if data.endswith(b"\n"):
        data = data[:-1]
    stream.write(data)


def _write_text_marshaler(value: TextMarshaler, stream: Stream) -> None:
    stream.write_string(_as_text(_call_marshaler(value.marshal_text)))


def _write_bytes(value: Union[bytes, bytearray, memoryview], stream: Stream) -> None:
    encoded = base64.b64encode(bytes(value)).decode("ascii")
    stream.write_raw(f'"{encoded}"')


def _encode_sequence(value: Union[list, tuple], stream: Stream) -> None:
    if not value:
        stream.write_empty_array()
        return
    try:
        stream.write_array_start()
        for position, item in enumerate(value):
            if position:
                stream.write_more()
            encode_value(item, stream)
        stream.write_array_end()
    except StreamError as exc:
        raise StreamError(f"{type(value).__name__}: {exc}") from exc


def _map_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, TextMarshaler):
        return _as_text(_call_marshaler(key.marshal_text))
    if isinstance(key, bool):
        raise StreamError(f"unsupported map key type: {type(key).__name__}")
    if isinstance(key, int):
        return str(key)
    if isinstance(key, float):
        try:
            return format_float64(key)
        except ValueError as exc:
            raise StreamError(str(exc)) from exc
    raise StreamError(f"unsupported map key type: {type(key).__name__}")


def _encode_mapping(value: Mapping, stream: Stream) -> None:
    if not value:
        stream.write_empty_object()
        return
    try:
        stream.write_object_start()
        for position, (key, item) in enumerate(value.items()):
            if position:
                stream.write_more()
            stream.write_object_field(_map_key(key))
            encode_value(item, stream)
        stream.write_object_end()
    except StreamError as exc:
        raise StreamError(f"{type(value).__name__}: {exc}") from exc


@lru_cache(maxsize=None)
def _struct_encoder(cls: type) -> StructEncoder:
    return StructEncoder(cls, encode_value)


def is_empty(value: Any) -> bool:
    """Tell whether ``value`` counts as empty for ``omitempty``.

    ``None``, zero numbers, ``False`` and zero-length containers are empty;
    dataclass instances never are.
    """
    if value is None:
        return True
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return False
    if isinstance(value, (bool, int, float)):
        return not value
    try:
        return len(value) == 0
    except TypeError:
        return False


def encode_value(value: Any, stream: Stream) -> None:
    """Write ``value`` to ``stream`` as JSON.

    Raises StreamError for values that cannot be written.
    """
    if value is None:
        stream.write_nil()
    elif isinstance(value, JSONMarshaler):
        _write_json_marshaler(value, stream)
    elif isinstance(value, TextMarshaler):
        _write_text_marshaler(value, stream)
    elif isinstance(value, bool):
        stream.write_bool(value)
    elif isinstance(value, int):
        stream.write_int(value)
    elif isinstance(value, float):
        stream.write_float64(value)
    elif isinstance(value, str):
        stream.write_string(value)
    elif isinstance(value, (bytes, bytearray, memoryview)):
        _write_bytes(value, stream)
    elif isinstance(value, datetime):
        stream.write_time(value)
    elif isinstance(value, (list, tuple)):
        _encode_sequence(value, stream)
    elif isinstance(value, Mapping):
        _encode_mapping(value, stream)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        _struct_encoder(type(value)).encode(value, stream)
    else:
        raise StreamError(f"unsupported type: {type(value).__name__}")


def marshal(value: Any, config: Optional[StreamConfig] = None) -> bytes:
    """Return ``value`` encoded as JSON bytes."""
    stream = Stream(config)
    encode_value(value, stream)
    return stream.buffer()


def marshal_to_string(value: Any, config: Optional[StreamConfig] = None) -> str:
    """Return ``value`` encoded as a JSON string."""
    return marshal(value, config).decode("utf-8", "surrogatepass")