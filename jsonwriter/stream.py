"""A buffered writer with JSON specific write operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import BinaryIO, Callable, Optional

from .floats import (
    format_float32,
    format_float32_lossy,
    format_float64,
    format_float64_lossy,
)
from .strings import quote, quote_html


class StreamError(Exception):
    """Raised when a value cannot be written or the output fails."""


@dataclass(frozen=True)
class StreamConfig:
    """Settings that shape the text a stream produces."""

    indention_step: int = 0
    invalid_float_to_nil: bool = False


_DEFAULT_CONFIG = StreamConfig()


class Stream:
    """Collects JSON text in a buffer, optionally passing it on to ``out``.

    ``out`` is any object with a ``write(bytes)`` method. When it is None the
    text stays in the buffer and is read back with :meth:`buffer`.
    """

    def __init__(
        self,
        config: Optional[StreamConfig] = None,
        out: Optional[BinaryIO] = None,
    ) -> None:
        self.config = config if config is not None else _DEFAULT_CONFIG
        self.out = out
        self._buf = bytearray()
        self._indention = 0

    # -- buffer management -------------------------------------------------

    def reset(self, out: Optional[BinaryIO]) -> None:
        """Reuse the stream with a new output, discarding buffered text."""
        self.out = out
        self._buf.clear()

    def buffer(self) -> bytes:
        """Return the text currently held in the buffer."""
        return bytes(self._buf)

    def buffered(self) -> int:
        """Return the number of bytes held in the buffer."""
        return len(self._buf)

    def set_buffer(self, data: bytes) -> None:
        """Replace the buffer contents with ``data``."""
        self._buf = bytearray(data)

    def _send(self) -> int:
        try:
            written = self.out.write(bytes(self._buf))
        except OSError as exc:
            raise StreamError(str(exc)) from exc
        return len(self._buf) if written is None else written

    def write(self, data: bytes) -> int:
        """Append ``data`` and pass the buffer on to the output, if any.

        Returns the number of bytes the output accepted, or ``len(data)``
        when there is no output.
        """
        self._buf += data
        if self.out is None:
            return len(data)
        written = self._send()
        del self._buf[:written]
        return written

    def write_raw(self, text: str) -> None:
        """Append ``text`` as it is, without quoting."""
        self._buf += text.encode("utf-8", "surrogatepass")

    def flush(self) -> None:
        """Write all buffered text to the output and empty the buffer."""
        if self.out is None:
            return
        self._send()
        self._buf.clear()

    # -- literals ----------------------------------------------------------

    def write_nil(self) -> None:
        self._buf += b"null"

    def write_true(self) -> None:
        self._buf += b"true"

    def write_false(self) -> None:
        self._buf += b"false"

    def write_bool(self, value: bool) -> None:
        if value:
            self.write_true()
        else:
            self.write_false()

    # -- numbers -----------------------------------------------------------

    def write_int(self, value: int) -> None:
        self._buf += str(int(value)).encode("ascii")

    def write_uint(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"unsigned value expected, got {value}")
        self._buf += str(int(value)).encode("ascii")

    def _write_float(self, value: float, formatter: Callable[[float], str]) -> None:
        try:
            text = formatter(value)
        except ValueError as exc:
            if self.config.invalid_float_to_nil:
                self.write_nil()
                return
            raise StreamError(str(exc)) from exc
        self._buf += text.encode("ascii")

    def write_float32(self, value: float) -> None:
        self._write_float(value, format_float32)

    def write_float64(self, value: float) -> None:
        self._write_float(value, format_float64)

    def write_float32_lossy(self, value: float) -> None:
        self._write_float(value, format_float32_lossy)

    def write_float64_lossy(self, value: float) -> None:
        self._write_float(value, format_float64_lossy)

    # -- strings and times -------------------------------------------------

    def write_string(self, text: str) -> None:
        self.write_raw(quote(text))

    def write_string_html_escaped(self, text: str) -> None:
        self.write_raw(quote_html(text))

    def write_time(self, value: datetime) -> None:
        """Write ``value`` as a quoted RFC 3339 timestamp.

        Naive datetimes are taken as local time. Trailing zeros of the
        fractional second are dropped, and a zero offset is written as ``Z``.
        """
        if value.tzinfo is None:
            value = value.astimezone()
        if not 0 <= value.year < 10000:
            raise StreamError("stream.write_time: year outside of range [0,9999]")
        text = value.strftime("%Y-%m-%dT%H:%M:%S")
        if value.microsecond:
            text += "." + f"{value.microsecond:06d}".rstrip("0")
        offset = value.utcoffset() or timedelta(0)
        if offset == timedelta(0):
            text += "Z"
        else:
            minutes = int(offset.total_seconds()) // 60
            sign = "+" if minutes >= 0 else "-"
            hours, mins = divmod(abs(minutes), 60)
            text += f"{sign}{hours:02d}:{mins:02d}"
        self._buf += f'"{text}"'.encode("ascii")

    # -- structure ---------------------------------------------------------

    def _write_indention(self, delta: int) -> None:
        if self._indention == 0:
            return
        self._buf += b"\n"
        self._buf += b" " * max(self._indention - delta, 0)

    def write_object_start(self) -> None:
        self._indention += self.config.indention_step
        self._buf += b"{"
        self._write_indention(0)

    def write_object_field(self, name: str) -> None:
        self.write_string(name)
        self._buf += b": " if self._indention > 0 else b":"

    def write_object_end(self) -> None:
        self._write_indention(self.config.indention_step)
        self._indention -= self.config.indention_step
        self._buf += b"}"

    def write_empty_object(self) -> None:
        self._buf += b"{}"

    def write_more(self) -> None:
        self._buf += b","
        self._write_indention(0)

    def write_array_start(self) -> None:
        self._indention += self.config.indention_step
        self._buf += b"["
        self._write_indention(0)

    def write_empty_array(self) -> None:
        self._buf += b"[]"

    def write_array_end(self) -> None:
        self._write_indention(self.config.indention_step)
        self._indention -= self.config.indention_step
        self._buf += b"]"