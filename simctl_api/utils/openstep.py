"""Parser for OpenStep (old-style, NeXTSTEP) text property lists.

``simctl listapps`` prints this format::

    {
        "com.example.Notes" =     {
            ApplicationType = User;
            CFBundleIdentifier = "com.example.Notes";
            SBAppTags =         (
            );
        };
    }

``plistlib`` only reads XML and binary plists.  Every scalar here is a
string (there are no numbers, booleans or dates); ``<hex>`` is data.
"""

from __future__ import annotations

import re
from typing import Any


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

_UNQUOTED = re.compile(r"[A-Za-z0-9_$+/:.\-]+")
_PLAIN = re.compile(r'[^"\\]+')
_OCTAL = re.compile(r"[0-7]{1,3}")
_UNICODE = re.compile(r"[Uu]([0-9A-Fa-f]{4})")

_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}


class OpenStepError(ValueError):
    """Input is not a well-formed OpenStep property list."""

    def __init__(self, message: str, pos: int) -> None:
        super().__init__(f"{message} at offset {pos}")
        self.pos = pos


def loads(text: str) -> Any:
    """Parse one OpenStep value; anything after it but whitespace is an error."""
    parser = _Parser(text)
    value = parser.value()
    parser.skip()
    if parser.pos != len(text):
        raise OpenStepError("trailing data", parser.pos)
    return value


# ---------------------------------------------------------------------------
# Recursive descent
# ---------------------------------------------------------------------------


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def skip(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end < 0:
                    raise OpenStepError("unterminated comment", self.pos)
                self.pos = end + 2
            else:
                break

    def peek(self) -> str:
        self.skip()
        if self.pos >= len(self.text):
            raise OpenStepError("unexpected end of input", self.pos)
        return self.text[self.pos]

    def expect(self, ch: str) -> None:
        if self.peek() != ch:
            raise OpenStepError(f"expected {ch!r}", self.pos)
        self.pos += 1

    def value(self) -> Any:
        ch = self.peek()
        if ch == "{":
            return self.dictionary()
        if ch == "(":
            return self.array()
        if ch == "<":
            return self.data()
        return self.string()

    def dictionary(self) -> dict[str, Any]:
        self.expect("{")
        result: dict[str, Any] = {}
        while self.peek() != "}":
            key = self.string()
            self.expect("=")
            result[key] = self.value()
            self.expect(";")
        self.pos += 1
        return result

    def array(self) -> list[Any]:
        self.expect("(")
        result: list[Any] = []
        while self.peek() != ")":
            result.append(self.value())
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != ")":
                raise OpenStepError("expected ',' or ')'", self.pos)
        self.pos += 1
        return result

    def data(self) -> bytes:
        self.expect("<")
        end = self.text.find(">", self.pos)
        if end < 0:
            raise OpenStepError("unterminated data", self.pos)
        digits = "".join(self.text[self.pos:end].split())
        try:
            value = bytes.fromhex(digits)
        except ValueError:
            raise OpenStepError("invalid hex data", self.pos) from None
        self.pos = end + 1
        return value

    def string(self) -> str:
        if self.peek() == '"':
            return self.quoted()
        m = _UNQUOTED.match(self.text, self.pos)
        if not m:
            raise OpenStepError(f"unexpected {self.text[self.pos]!r}", self.pos)
        self.pos = m.end()
        return m.group()

    def quoted(self) -> str:
        text = self.text
        start = self.pos
        self.pos += 1
        parts: list[str] = []
        while True:
            m = _PLAIN.match(text, self.pos)
            if m:
                parts.append(m.group())
                self.pos = m.end()
            if self.pos >= len(text):
                raise OpenStepError("unterminated string", start)
            if text[self.pos] == '"':
                self.pos += 1
                return "".join(parts)
            # backslash escape
            self.pos += 1
            if self.pos >= len(text):
                raise OpenStepError("unterminated string", start)
            m = _OCTAL.match(text, self.pos) or _UNICODE.match(text, self.pos)
            if m and m.re is _OCTAL:
                parts.append(chr(int(m.group(), 8)))
                self.pos = m.end()
            elif m:
                parts.append(chr(int(m.group(1), 16)))
                self.pos = m.end()
            else:
                ch = text[self.pos]
                parts.append(_ESCAPES.get(ch, ch))
                self.pos += 1
