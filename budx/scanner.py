"""Byte-at-a-time scanner for HOCON-style configuration text.

The scanner walks its input with a small state machine, collecting the
``(key path, value)`` pairs it meets.  :meth:`FileScanner.apply` then writes
those pairs into a nested mapping.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from enum import IntEnum
from typing import IO, Any, Callable, MutableMapping

from budx.escapes import quote_char, unescape

INCLUDE_KEYWORD = b"include"
_INCLUDE_LEN = len(INCLUDE_KEYWORD)

_KEYWORDS = {b"true": "true", b"false": "false", b"null": "null"}
_MAX_KEYWORD_LEN = max(len(word) for word in _KEYWORDS)

_SPACE = ord(" ")
_TAB = ord("\t")
_CR = ord("\r")
_LF = ord("\n")
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")
_DIGITS = frozenset(b"0123456789")
_SIMPLE_ESCAPE_CODES = frozenset(b'bfnrt\\/"')


class _Op(IntEnum):
    CONTINUE = 0
    SKIP_SPACE = 1
    APPEND_BUF = 2
    END = 3
    ERROR = 4


class _Parse(IntEnum):
    KEY = 0
    VALUE = 1
    ARRAY_VALUE = 2


class _Buf(IntEnum):
    NULL = 0
    STRING = 1
    NO_QUOTE_STRING = 2
    NUMBER = 3
    BOOL_TRUE = 4
    BOOL_FALSE = 5


_KEYWORD_TYPES = {b"true": _Buf.BOOL_TRUE, b"false": _Buf.BOOL_FALSE, b"null": _Buf.NULL}


def _go_quote(data: bytes) -> str:
    text = data.decode("utf-8", "replace")
    parts = []
    for ch in text:
        if ch == '"':
            parts.append('\\"')
        elif ch == "'":
            parts.append("'")
        else:
            parts.append(quote_char(ord(ch))[1:-1])
    return '"' + "".join(parts) + '"'


def _is_space(c: int) -> bool:
    return c in (_SPACE, _TAB, _CR, _LF)


def _is_letter(c: int) -> bool:
    return chr(c).isalpha()


class ConfigSyntaxError(Exception):
    """A syntax error found while scanning configuration text."""

    def __init__(self, msg: str, buf: bytes, offset: int) -> None:
        self.msg = msg
        self.buf = bytes(buf)
        self.offset = offset
        super().__init__(f"{msg}{_go_quote(self.buf)} Offset {offset}")


@dataclass
class KeyValue:
    """One scanned value together with the full path of keys leading to it."""

    keys: list[str]
    value: Any


class FileScanner:
    """State machine that turns configuration text into key/value pairs."""

    def __init__(self) -> None:
        self.file = ""
        self.dir = ""
        self.pairs: list[KeyValue] = []
        self._base_keys: list[str] = []
        self._key_stack: list[int] = []
        self._parse_buf = bytearray()
        self._buf_type = _Buf.NULL
        self._err: ConfigSyntaxError | None = None
        self._reset()

    def _reset(self) -> None:
        self._step: Callable[[int], int] = self._begin_key
        self._err = None
        self._offset = 0
        self._current = _Parse.KEY
        self._buf_in_quote = False

    # public entry points

    def scan_file(self, file_name: str) -> "FileScanner":
        """Scan the file at the absolute path ``file_name``."""
        if not os.path.isabs(file_name):
            raise self._syntax_error(f"file '{file_name}' is not absolute path")
        self.file = os.path.basename(file_name)
        self.dir = os.path.dirname(file_name)
        with open(file_name, "rb") as reader:
            return self.scan_stream(reader)

    def scan_stream(self, reader: IO[Any]) -> "FileScanner":
        """Scan everything that can be read from ``reader``."""
        self._reset()
        try:
            data = reader.read()
        except OSError as exc:
            raise self._syntax_error(str(exc)) from exc
        if isinstance(data, str):
            data = data.encode("utf-8")

        for c in data:
            self._offset += 1
            if self._step(c) == _Op.APPEND_BUF:
                self._parse_buf.append(c)
        self._step(_LF)
        return self

    def apply(self, config: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Write the scanned pairs into ``config`` as nested mappings."""
        for pair in self.pairs:
            if not pair.keys:
                continue
            ops = config
            for index, key in enumerate(pair.keys[:-1]):
                if key in ops:
                    sub = ops[key]
                    if not isinstance(sub, MutableMapping):
                        raise ConfigSyntaxError(
                            f"set config value error, key {key} is not a mapping", b"", index
                        )
                    ops = sub
                else:
                    ops[key] = {}
                    ops = ops[key]
            ops[pair.keys[-1]] = pair.value
        return config

    # errors

    def _syntax_error(self, context: str) -> ConfigSyntaxError:
        return ConfigSyntaxError(context, bytes(self._parse_buf), self._offset)

    def _error(self, c: int, context: str) -> int:
        self._step = self._state_error
        self._err = ConfigSyntaxError(
            f"invalid character {quote_char(c)} {context}", bytes(self._parse_buf), self._offset
        )
        raise self._err

    def _state_error(self, c: int) -> int:
        if self._err is not None:
            raise self._err
        return _Op.ERROR

    # key and value bookkeeping

    def _pop_base_keys(self) -> None:
        if self._key_stack:
            del self._base_keys[self._key_stack[-1]:]
        else:
            self._base_keys.clear()

    def _push_key_stack(self) -> None:
        self._key_stack.append(len(self._base_keys))

    def _pop_key_stack(self) -> None:
        depth = len(self._key_stack)
        if depth > 1:
            del self._base_keys[self._key_stack[depth - 2]:]
            self._key_stack.pop()
        elif depth == 1:
            self._base_keys.clear()
            self._key_stack.clear()
        else:
            raise self._syntax_error("error pop key stack operate")

    def _push_key(self) -> None:
        if self._check_include_and_load() == _Op.CONTINUE:
            self._base_keys.append(bytes(self._parse_buf).decode("utf-8", "replace"))
        self._parse_buf.clear()
        self._buf_in_quote = False

    def _push_value(self) -> None:
        if not self._base_keys:
            return
        if self._check_include_and_load() == _Op.CONTINUE:
            value = self._parse_buf_value() if self._parse_buf else None
            self.pairs.append(KeyValue(list(self._base_keys), value))
        self._pop_base_keys()
        self._parse_buf.clear()
        self._buf_type = _Buf.NULL
        self._buf_in_quote = False

    def _check_include_and_load(self) -> int:
        buf = self._parse_buf
        if (
            self._buf_type == _Buf.NO_QUOTE_STRING
            and len(buf) > _INCLUDE_LEN + 3
            and buf.startswith(INCLUDE_KEYWORD)
            and buf[_INCLUDE_LEN] in (_SPACE, _TAB)
        ):
            name = bytes(buf[_INCLUDE_LEN + 1:]).decode("utf-8", "replace")
            name = name.strip(" ").strip("\t").strip('"')
            if not os.path.isabs(name):
                name = os.path.join(self.dir, name)
            included = FileScanner()
            try:
                included.scan_file(name)
            except (ConfigSyntaxError, OSError) as exc:
                self._step = self._state_error
                self._err = self._syntax_error(
                    "error in load include: " + bytes(buf).decode("utf-8", "replace")
                )
                raise self._err from exc
            self.pairs.extend(
                KeyValue(self._base_keys + pair.keys, pair.value) for pair in included.pairs
            )
            return _Op.SKIP_SPACE
        return _Op.CONTINUE

    def _push_array_key(self) -> None:
        self.pairs.append(KeyValue(list(self._base_keys), []))
        self._pop_base_keys()

    def _push_array_value(self) -> None:
        self.pairs[-1].value.append(self._parse_buf_value())
        self._parse_buf.clear()
        self._buf_type = _Buf.NULL

    def _parse_buf_value(self) -> Any:
        buf = bytes(self._parse_buf)
        if self._buf_type == _Buf.NO_QUOTE_STRING and len(buf) <= _MAX_KEYWORD_LEN:
            self._buf_type = _KEYWORD_TYPES.get(buf, self._buf_type)

        if self._buf_type in (_Buf.STRING, _Buf.NO_QUOTE_STRING):
            try:
                return unescape(buf)
            except ValueError:
                return None
        if self._buf_type == _Buf.NUMBER:
            text = buf.decode("ascii", "replace")
            try:
                number = float(text)
            except ValueError:
                raise self._syntax_error(
                    f'number {text} parse error: strconv.ParseFloat: parsing "{text}": invalid syntax'
                ) from None
            if math.isinf(number):
                raise self._syntax_error(
                    f'number {text} parse error: strconv.ParseFloat: parsing "{text}": value out of range'
                )
            return number
        if self._buf_type in (_Buf.BOOL_TRUE, _Buf.BOOL_FALSE):
            return self._buf_type == _Buf.BOOL_TRUE
        return None

    def _trim_parse_buf(self) -> None:
        self._parse_buf = bytearray(self._parse_buf.rstrip(b" "))

    # states

    def _begin_key(self, c: int) -> int:
        if c <= _SPACE and _is_space(c):
            return _Op.SKIP_SPACE
        if c == ord("{"):
            self._push_key_stack()
            self._step = self._begin_key
            return _Op.CONTINUE
        if c == ord('"'):
            self._step = self._in_string
            self._buf_type = _Buf.STRING
            return _Op.CONTINUE
        if c == ord("#"):
            self._step = self._comment
            return _Op.CONTINUE
        if c == ord("}"):
            self._pop_key_stack()
            self._step = self._begin_key
            return _Op.CONTINUE
        if _is_letter(c):
            self._step = self._in_string
            self._buf_type = _Buf.NO_QUOTE_STRING
            return self._in_string(c)
        if self._key_stack and c == ord(","):
            self._step = self._begin_key
            return _Op.CONTINUE
        return self._error(c, "looking for beginning")

    def _begin_value(self, c: int) -> int:
        if c <= _SPACE:
            if self._current == _Parse.ARRAY_VALUE:
                if _is_space(c):
                    return _Op.SKIP_SPACE
            elif c in (_SPACE, _TAB):
                return _Op.SKIP_SPACE

        if c == ord("{"):
            self._push_key_stack()
            self._step = self._begin_key
            self._current = _Parse.KEY
            return _Op.CONTINUE
        if c == ord("["):
            self._push_array_key()
            self._step = self._begin_value
            self._current = _Parse.ARRAY_VALUE
            return _Op.CONTINUE
        if c == ord('"'):
            self._step = self._in_string
            self._buf_type = _Buf.STRING
            return _Op.CONTINUE
        if c == ord("-"):
            self._step = self._neg
            self._buf_type = _Buf.NUMBER
            return _Op.APPEND_BUF
        if c == ord("0"):
            self._step = self._state0
            self._buf_type = _Buf.NUMBER
            return _Op.APPEND_BUF
        if c == ord("#"):
            self._step = self._comment
            return self._end_value(c)
        if c in (_CR, _LF):
            self._step = self._end_value
            return self._end_value(c)
        if ord("1") <= c <= ord("9"):
            self._step = self._state1
            self._buf_type = _Buf.NUMBER
            return _Op.APPEND_BUF
        if _is_letter(c) or c == ord("\\"):
            self._step = self._in_string
            self._buf_type = _Buf.NO_QUOTE_STRING
            return self._in_string(c)
        return self._error(c, "looking for beginning of value")

    def _end_value(self, c: int) -> int:
        if c in (_SPACE, _TAB):
            self._step = self._end_value
            return _Op.SKIP_SPACE

        if self._current == _Parse.KEY:
            self._push_key()
            if c in (ord(":"), ord("=")):
                self._current = _Parse.VALUE
                self._step = self._begin_value
                return _Op.CONTINUE
            if c == ord("."):
                self._step = self._begin_key
                return _Op.CONTINUE
            if c == ord("{"):
                self._push_key_stack()
                self._step = self._begin_key
                return _Op.CONTINUE
            if c in (_CR, _LF, ord("#")):
                self._current = _Parse.VALUE
                self._step = self._end_value
                return self._end_value(c)
            return self._error(c, "after object key")

        if self._current == _Parse.VALUE:
            self._push_value()
            self._current = _Parse.KEY
            if c in (ord(","), _CR, _LF):
                self._step = self._begin_key
                return _Op.CONTINUE
            if c == ord("}"):
                self._pop_key_stack()
                self._step = self._begin_key
                return _Op.CONTINUE
            if c == ord("#"):
                self._step = self._comment
                return _Op.CONTINUE
            return self._error(c, "after object key:value pair")

        self._push_array_value()
        if c in (ord(","), _CR, _LF):
            self._step = self._begin_value
            return _Op.CONTINUE
        if c == ord("]"):
            self._step = self._begin_key
            self._current = _Parse.KEY
            return _Op.CONTINUE
        if c == ord("#"):
            self._step = self._comment
            return _Op.CONTINUE
        return self._error(c, "after array element")

    def _in_string(self, c: int) -> int:
        if self._buf_type == _Buf.NO_QUOTE_STRING:
            if self._current == _Parse.KEY:
                if c == ord('"'):
                    self._buf_in_quote = not self._buf_in_quote
                    return _Op.APPEND_BUF
                if c in (ord("."), ord(":")):
                    if not self._buf_in_quote:
                        self._trim_parse_buf()
                        return self._end_value(c)
                    return _Op.APPEND_BUF
                if c in (ord("="), ord("{"), _CR, _LF, ord("#")):
                    self._trim_parse_buf()
                    return self._end_value(c)
            if self._current == _Parse.VALUE and c in (ord(","), _CR, _LF, ord("}"), ord("#")):
                self._trim_parse_buf()
                return self._end_value(c)
            if self._current == _Parse.ARRAY_VALUE and c in (ord(","), _CR, _LF, ord("]"), ord("#")):
                self._trim_parse_buf()
                return self._end_value(c)
        elif c == ord('"'):
            self._step = self._end_value
            return _Op.CONTINUE

        if c == ord("\\"):
            self._step = self._in_string_esc
            return _Op.APPEND_BUF
        if c < 0x20:
            return self._error(c, "in string literal")
        return _Op.APPEND_BUF

    def _comment(self, c: int) -> int:
        if c in (_LF, _CR):
            if self._current == _Parse.ARRAY_VALUE:
                self._step = self._begin_value
            else:
                self._step = self._begin_key
        return _Op.CONTINUE

    def _in_string_esc(self, c: int) -> int:
        if c in _SIMPLE_ESCAPE_CODES:
            self._step = self._in_string
            return _Op.APPEND_BUF
        if c == ord("u"):
            self._step = self._make_hex_state(3)
            return _Op.APPEND_BUF
        return self._error(c, "in string escape code")

    def _make_hex_state(self, remaining: int) -> Callable[[int], int]:
        def state(c: int) -> int:
            if c in _HEX_DIGITS:
                self._step = self._make_hex_state(remaining - 1) if remaining else self._in_string
                return _Op.APPEND_BUF
            return self._error(c, "in \\u hexadecimal character escape")

        return state

    def _neg(self, c: int) -> int:
        if c == ord("0"):
            self._step = self._state0
            return _Op.APPEND_BUF
        if ord("1") <= c <= ord("9"):
            self._step = self._state1
            return _Op.APPEND_BUF
        return self._error(c, "in numeric literal")

    def _state1(self, c: int) -> int:
        if c in _DIGITS:
            self._step = self._state1
            return _Op.APPEND_BUF
        return self._state0(c)

    def _state0(self, c: int) -> int:
        if c == ord("."):
            self._step = self._dot
            return _Op.APPEND_BUF
        if c in (ord("e"), ord("E")):
            self._step = self._exp
            return _Op.APPEND_BUF
        return self._end_value(c)

    def _dot(self, c: int) -> int:
        if c in _DIGITS:
            self._step = self._dot0
            return _Op.APPEND_BUF
        return self._error(c, "after decimal point in numeric literal")

    def _dot0(self, c: int) -> int:
        if c in _DIGITS:
            self._step = self._dot0
            return _Op.APPEND_BUF
        if c in (ord("e"), ord("E")):
            self._step = self._exp
            return _Op.APPEND_BUF
        return self._end_value(c)

    def _exp(self, c: int) -> int:
        if c in (ord("+"), ord("-")):
            self._step = self._exp_sign
            return _Op.APPEND_BUF
        return self._exp_sign(c)

    def _exp_sign(self, c: int) -> int:
        if c in _DIGITS:
            self._step = self._exp0
            return _Op.APPEND_BUF
        return self._error(c, "in exponent of numeric literal")

    def _exp0(self, c: int) -> int:
        if c in _DIGITS:
            self._step = self._exp0
            return _Op.APPEND_BUF
        return self._end_value(c)