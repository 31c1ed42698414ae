import io
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest

from jsonwriter.encoders import (
    JSONMarshaler,
    TextMarshaler,
    encode_value,
    is_empty,
    marshal,
    marshal_to_string,
)
from jsonwriter.stream import Stream, StreamConfig, StreamError


@dataclass
class ColorGroup:
    ID: int
    Name: str
    Colors: list


@dataclass(frozen=True)
class MyKey:
    text: str

    def marshal_text(self) -> bytes:
        return self.text.replace("h", "H").encode()


class Raw:
    def __init__(self, data: bytes) -> None:
        self.data = data

    def marshal_json(self) -> bytes:
        return self.data


class Broken:
    def marshal_json(self) -> bytes:
        raise ValueError("cannot marshal")


class Label:
    def marshal_text(self) -> str:
        return 'say "hi"'


@dataclass
class TestObject:
    Field: list
    Field2: str


@dataclass
class Tagged:
    name: str = field(default="", metadata={"json": "name,omitempty"})
    count: int = field(default=0, metadata={"json": "count"})


def test_marshal_example_struct():
    group = ColorGroup(ID=1, Name="Reds", Colors=["Crimson", "Red", "Ruby", "Maroon"])
    assert (
        marshal(group)
        == b'{"ID":1,"Name":"Reds","Colors":["Crimson","Red","Ruby","Maroon"]}'
    )


def test_encode_value_to_stream_example():
    group = ColorGroup(ID=1, Name="Reds", Colors=["Crimson", "Red", "Ruby", "Maroon"])
    stream = Stream()
    encode_value(group, stream)
    assert (
        stream.buffer()
        == b'{"ID":1,"Name":"Reds","Colors":["Crimson","Red","Ruby","Maroon"]}'
    )


def test_text_marshaler_map_key():
    assert marshal_to_string({MyKey("hello"): "world"}) == '{"Hello":"world"}'


def test_text_marshaler_number_key():
    class One:
        def marshal_text(self):
            return b"1"

    assert marshal_to_string({One(): "2"}) == '{"1":"2"}'


def test_write_val_array():
    assert marshal_to_string([1, 2, 3]) == "[1,2,3]"


def test_write_val_empty_array():
    assert marshal_to_string([]) == "[]"


def test_write_array_of_interface_in_struct():
    text = marshal_to_string(TestObject([1, 2], ""))
    assert '"Field":[1,2]' in text
    assert '"Field2":""' in text


def test_encode_byte_array():
    assert marshal(bytes([1, 2, 3])) == b'"AQID"'


def test_encode_empty_byte_array():
    assert marshal(b"") == b'""'


def test_encode_nil_byte_array():
    assert marshal(None) == b"null"


def test_encode_inf_raises():
    with pytest.raises(StreamError):
        marshal(math.inf)
    with pytest.raises(StreamError):
        marshal(-math.inf)


def test_encode_nan_raises():
    with pytest.raises(StreamError):
        marshal(math.nan)


def test_invalid_float_to_nil():
    config = StreamConfig(invalid_float_to_nil=True)
    assert marshal(math.nan, config) == b"null"


def test_float_value():
    assert marshal_to_string(12.3) == "12.3"


def test_map_with_mixed_keys():
    assert marshal_to_string({"1": 2, 3: "4"}) == '{"1":2,"3":"4"}'


def test_encode_nil_map():
    assert marshal_to_string(None) == "null"


def test_empty_map():
    assert marshal_to_string({}) == "{}"


def test_unsupported_map_key():
    with pytest.raises(StreamError):
        marshal({(1, 2): 1})


def test_indented_array():
    stream = Stream(StreamConfig(indention_step=2))
    encode_value([1, 2, 3], stream)
    assert stream.buffer() == b"[\n  1,\n  2,\n  3\n]"


def test_indented_object():
    text = marshal_to_string({"hello": 1, "world": 2}, StreamConfig(indention_step=2))
    assert text == '{\n  "hello": 1,\n  "world": 2\n}'


def test_write_val_bool_with_output():
    out = io.BytesIO()
    stream = Stream(None, out)
    encode_value(True, stream)
    assert stream.buffered() == 4
    stream.flush()
    assert stream.buffered() == 0
    assert out.getvalue() == b"true"


def test_write_val_int_with_output():
    out = io.BytesIO()
    stream = Stream(None, out)
    encode_value(1001, stream)
    stream.flush()
    assert out.getvalue() == b"1001"


def test_json_marshaler_trailing_newline_trimmed():
    assert marshal(Raw(b"[1,2]\n")) == b"[1,2]"


def test_map_of_raw_messages():
    assert marshal_to_string({"hello": Raw(b"[]")}) == '{"hello":[]}'


def test_json_marshaler_error():
    with pytest.raises(StreamError, match="cannot marshal"):
        marshal(Broken())


def test_text_marshaler_value_is_quoted():
    assert marshal_to_string(Label()) == '"say \\"hi\\""'


def test_protocols_recognise_marshalers():
    raw = Raw(b"1")
    key = MyKey("ah")
    assert isinstance(raw, JSONMarshaler)
    assert isinstance(key, TextMarshaler)
    assert not isinstance("text", JSONMarshaler)
    assert marshal(raw) == b"1"
    assert marshal_to_string(key) == '"aH"'


def test_datetime_value():
    moment = datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert marshal_to_string(moment) == '"2020-01-02T03:04:05Z"'


def test_tuple_and_nested():
    assert marshal_to_string((1, [True, None], {"a": "b"})) == '[1,[true,null],{"a":"b"}]'


def test_error_in_list_is_prefixed():
    with pytest.raises(StreamError, match=r"^list: "):
        marshal([1.0, math.nan])


def test_unsupported_type():
    with pytest.raises(StreamError, match="unsupported type"):
        marshal(object())


def test_struct_omitempty():
    assert marshal_to_string(Tagged()) == '{"count":0}'
    assert marshal_to_string(Tagged(name="x", count=2)) == '{"name":"x","count":2}'


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, True),
        (0, True),
        (0.0, True),
        (False, True),
        ("", True),
        (b"", True),
        ([], True),
        ({}, True),
        (1, False),
        ("a", False),
        ([0], False),
        (True, False),
        (Tagged(), False),
        (object(), False),
    ],
)
def test_is_empty(value, expected):
    assert is_empty(value) is expected