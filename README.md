# jsonwriter

A small library for producing JSON output. It has four parts:

- `jsonwriter.stream`: a buffered `Stream` with typed writers for literals,
  integers, 32- and 64-bit floats, strings (plain or HTML-escaped), RFC 3339
  timestamps and object/array punctuation with optional indentation.
- `jsonwriter.encoders`: `marshal` / `marshal_to_string` and `encode_value`,
  which turn Python values into JSON.
- `jsonwriter.structs`: the encoder used for dataclass instances, driven by
  field metadata.
- `jsonwriter.floats` and `jsonwriter.strings`: the number and string
  formatting helpers the stream uses.

## Installing

```
pip install .
```

Tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Writing with a stream

```python
from jsonwriter.stream import Stream, StreamConfig

stream = Stream(StreamConfig(indention_step=2), None)
stream.write_array_start()
stream.write_int(1)
stream.write_more()
stream.write_int(2)
stream.write_array_end()
print(stream.buffer().decode())
# [
#   1,
#   2
# ]
```

`StreamConfig` has two settings: `indention_step` (spaces per nesting level;
0 writes compact output) and `invalid_float_to_nil` (write NaN and
infinities as `null` instead of raising).

The text collects in an internal buffer, read back with `buffer()` and
measured with `buffered()`. When a writable binary object is given as `out`,
`write(data)` appends and passes the buffer on straight away, and `flush()`
sends whatever is buffered and empties the buffer. `reset(out)` reuses the
stream with a new output.

Values that cannot be written raise `StreamError`: a NaN or infinite float
(unless `invalid_float_to_nil` is set), a `datetime` whose year is outside
0–9999, or a failure of the output. `write_uint` raises `ValueError` for a
negative number.

`write_time` writes a quoted RFC 3339 timestamp; naive datetimes are taken
as local time, trailing zeros of the fraction are dropped and a zero offset
is written as `Z`.

## Encoding values

```python
from dataclasses import dataclass
from jsonwriter.encoders import marshal_to_string

@dataclass
class ColorGroup:
    ID: int
    Name: str
    Colors: list[str]

print(marshal_to_string(ColorGroup(1, "Reds", ["Crimson", "Red"]), None))
# {"ID":1,"Name":"Reds","Colors":["Crimson","Red"]}
```

`encode_value(value, stream)` dispatches on type:

- objects with `marshal_json()` (the `JSONMarshaler` protocol) write the JSON
  text it returns, less one trailing newline;
- objects with `marshal_text()` (the `TextMarshaler` protocol) are written as
  a JSON string of that text;
- `None`, `bool`, `int`, `float` and `str` become the JSON literals;
- `bytes`, `bytearray` and `memoryview` become base64 strings;
- `datetime` becomes an RFC 3339 string;
- lists and tuples become arrays, mappings become objects (keys may be
  strings, text marshalers, integers or floats);
- dataclass instances become objects.

Anything else raises `StreamError`. `marshal(value, config)` returns bytes;
`marshal_to_string` returns a `str`. `is_empty(value)` tells whether a value
counts as empty for `omitempty`.

## Dataclass fields

Field metadata shapes how a dataclass is written:

```python
from dataclasses import dataclass, field
from jsonwriter.encoders import marshal_to_string

@dataclass
class Account:
    name: str = field(metadata={"json": "name"})
    email: str = field(default="", metadata={"json": "email,omitempty"})
    count: int = field(default=0, metadata={"json": "count,string"})
    note: str = field(default="", metadata={"json": "-"})

print(marshal_to_string(Account("ann"), None))
# {"name":"ann","count":"0"}
```

- `json`: a tag `"name,option,..."`. `-` leaves the field out, an empty name
  keeps the attribute name, `omitempty` skips empty values and `string`
  writes numbers and booleans inside quotes.
- `embedded`: when true and the field holds a dataclass, its fields are
  written as members of the outer object, unless the tag names the field.
  When names clash, a tagged field beats an untagged one, then the shallower
  one wins; equally deep clashes drop both.

Attributes starting with an underscore are not written (embedded ones still
have their fields promoted). `field_bindings(cls)` lists the members of a
dataclass, and `StructEncoder(cls, value_encoder)` writes its instances.

## Formatting helpers

`jsonwriter.floats` offers `format_float32` and `format_float64`, which give
the shortest text that round-trips and switch to exponent form below 1e-6
and from 1e21 up, and the six-digit `format_float32_lossy` /
`format_float64_lossy`:

```python
from jsonwriter.floats import format_float64, format_float64_lossy

format_float64(1e21)              # '1e+21'
format_float64_lossy(0.1234567)   # '0.123457'
```

`jsonwriter.strings` offers `quote`, which escapes only what JSON needs, and
`quote_html`, which also escapes `<`, `>`, `&`, U+2028 and U+2029 and
replaces lone surrogates with U+FFFD.

## What it does not do

This package only writes JSON. It has no parser or decoder: reading JSON
text back into Python values, iterating over a document or unmarshalling into
dataclasses is not provided.