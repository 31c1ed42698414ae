"""Quoting of text as JSON string literals."""

from __future__ import annotations

_HEX = "0123456789abcdef"


def _unicode_escape(code: int) -> str:
    return "\\u00" + _HEX[code >> 4] + _HEX[code & 0xF]


def _base_table() -> dict[int, str]:
    table = {code: _unicode_escape(code) for code in range(0x20)}
    table[ord("\n")] = "\\n"
    table[ord("\r")] = "\\r"
    table[ord("\t")] = "\\t"
    table[ord('"')] = '\\"'
    table[ord("\\")] = "\\\\"
    return table


_PLAIN = _base_table()

_HTML = dict(_PLAIN)
for _char in "<>&":
    _HTML[ord(_char)] = _unicode_escape(ord(_char))
_HTML[0x2028] = "\\u2028"
_HTML[0x2029] = "\\u2029"
# Lone surrogates cannot be encoded; they stand in for invalid input.
_HTML.update({code: "\\ufffd" for code in range(0xD800, 0xE000)})


def quote(text: str) -> str:
    """Return ``text`` as a JSON string literal, escaping only what JSON needs."""
    return '"' + text.translate(_PLAIN) + '"'


def quote_html(text: str) -> str:
    """Return ``text`` as a JSON string literal that is safe inside HTML.

    Also escapes ``<``, ``>``, ``&``, U+2028 and U+2029, and replaces lone
    surrogates with U+FFFD.
    """
    return '"' + text.translate(_HTML) + '"'