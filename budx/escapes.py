"""Unescaping of quoted-string bodies and quoting of single characters."""

from __future__ import annotations

import string

_REPLACEMENT = "\ufffd"
_HEX = frozenset(string.hexdigits.encode("ascii"))

_SIMPLE_ESCAPES = {
    ord('"'): '"',
    ord("\\"): "\\",
    ord("/"): "/",
    ord("'"): "'",
    ord("b"): "\b",
    ord("f"): "\f",
    ord("n"): "\n",
    ord("r"): "\r",
    ord("t"): "\t",
}

_QUOTE_ESCAPES = {
    0x07: "\\a",
    0x08: "\\b",
    0x0C: "\\f",
    0x0A: "\\n",
    0x0D: "\\r",
    0x09: "\\t",
    0x0B: "\\v",
    ord("\\"): "\\\\",
}


def _getu4(data: bytes, pos: int) -> int:
    """Decode ``\\uXXXX`` at ``pos``; return -1 if there is none."""
    chunk = data[pos:pos + 6]
    if len(chunk) < 6 or chunk[0] != ord("\\") or chunk[1] != ord("u"):
        return -1
    digits = chunk[2:6]
    if not all(b in _HEX for b in digits):
        return -1
    return int(digits, 16)


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 0


def _decode_rune(data: bytes, pos: int) -> tuple[str, int]:
    """Decode one UTF-8 character; invalid input yields U+FFFD of width 1."""
    size = _utf8_length(data[pos])
    if size:
        try:
            text = data[pos:pos + size].decode("utf-8")
        except UnicodeDecodeError:
            pass
        else:
            if len(text) == 1:
                return text, size
    return _REPLACEMENT, 1


def unescape(data: bytes | str) -> str:
    """Resolve backslash escapes in a string body.

    Invalid UTF-8 and unpaired surrogates become U+FFFD.  Raises
    ``ValueError`` on an unknown or truncated escape, a bare double quote
    or a control character.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    out: list[str] = []
    pos = 0
    end = len(data)
    while pos < end:
        c = data[pos]
        if c == ord("\\"):
            if pos + 1 >= end:
                raise ValueError("unterminated escape sequence")
            code = data[pos + 1]
            if code in _SIMPLE_ESCAPES:
                out.append(_SIMPLE_ESCAPES[code])
                pos += 2
                continue
            if code != ord("u"):
                raise ValueError(f"invalid escape code {chr(code)!r}")
            rune = _getu4(data, pos)
            if rune < 0:
                raise ValueError("invalid \\u escape")
            pos += 6
            if 0xD800 <= rune <= 0xDFFF:
                low = _getu4(data, pos)
                if 0xD800 <= rune < 0xDC00 and 0xDC00 <= low <= 0xDFFF:
                    pos += 6
                    out.append(chr(0x10000 + ((rune - 0xD800) << 10) + (low - 0xDC00)))
                    continue
                out.append(_REPLACEMENT)
                continue
            out.append(chr(rune))
        elif c == ord('"') or c < 0x20:
            raise ValueError(f"invalid character {quote_char(c)} in string")
        elif c < 0x80:
            out.append(chr(c))
            pos += 1
        else:
            ch, size = _decode_rune(data, pos)
            out.append(ch)
            pos += size
    return "".join(out)


def quote_char(c: int) -> str:
    """Format the character with code ``c`` as a single-quoted literal."""
    if c == ord("'"):
        return "'\\''"
    if c == ord('"'):
        return "'\"'"
    if c in _QUOTE_ESCAPES:
        return "'" + _QUOTE_ESCAPES[c] + "'"
    if not (0 <= c <= 0x10FFFF) or 0xD800 <= c <= 0xDFFF:
        c = 0xFFFD
    ch = chr(c)
    if ch.isprintable():
        body = ch
    elif c < 0x20 or c == 0x7F:
        body = f"\\x{c:02x}"
    elif c < 0x10000:
        body = f"\\u{c:04x}"
    else:
        body = f"\\U{c:08x}"
    return "'" + body + "'"