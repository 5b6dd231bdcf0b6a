"""Argument tokenizer for direct-executable mode.

Splits a single command line into argv without a shell:

- whitespace separates arguments, except inside double quotes;
- a double-quoted span is one argument with the quotes removed;
- ``$name`` and ``${name}`` are replaced by their value in the environment.
  References to names that are not in the environment are kept verbatim,
  ``$`` and braces included. Most shells substitute an empty string here;
  this tokenizer keeps the reference for compatibility with existing
  scripts.

There is no escaping, no single-quote handling and no word splitting of
substituted values.
"""

from __future__ import annotations

from collections.abc import Mapping

from .errors import TokenizeError


def _is_name_char(c: str) -> bool:
    return c.isalnum() or c == "_"


class Tokenizer:
    """Single-pass scanner over one command line."""

    def __init__(self, command_line: str, environment: Mapping[str, str]):
        self.text = command_line
        self.env = environment
        self.pos = 0
        self.args: list[str] = []
        self._current: list[str] = []
        self._in_word = False

    def peek(self, offset: int = 0) -> str:
        """Character at current position + offset, or '' past the end."""
        idx = self.pos + offset
        if idx < len(self.text):
            return self.text[idx]
        return ""

    def _end_word(self) -> None:
        if self._in_word:
            self.args.append("".join(self._current))
        self._current = []
        self._in_word = False

    def tokenize(self) -> list[str]:
        quote_start = -1
        while self.pos < len(self.text):
            c = self.text[self.pos]
            if c == '"':
                if quote_start < 0:
                    quote_start = self.pos
                else:
                    quote_start = -1
                # "" still yields an (empty) argument
                self._in_word = True
                self.pos += 1
            elif c.isspace() and quote_start < 0:
                self._end_word()
                self.pos += 1
            elif c == "$":
                self._in_word = True
                self._current.append(self._read_reference())
            else:
                self._in_word = True
                self._current.append(c)
                self.pos += 1

        if quote_start >= 0:
            raise TokenizeError("unterminated double quote", quote_start)
        self._end_word()
        if not self.args:
            raise TokenizeError("empty command", 0)
        return self.args

    def _read_reference(self) -> str:
        """Consume a $ reference and return its replacement text."""
        start = self.pos
        if self.peek(1) == "{":
            close = self.text.find("}", start + 2)
            if close < 0:
                raise TokenizeError("unterminated ${", start)
            name = self.text[start + 2:close]
            self.pos = close + 1
        else:
            end = start + 1
            while end < len(self.text) and _is_name_char(self.text[end]):
                end += 1
            name = self.text[start + 1:end]
            self.pos = end
            if not name:
                # lone $
                return "$"

        if name in self.env:
            return self.env[name]
        return self.text[start:self.pos]


def tokenize(command_line: str, environment: Mapping[str, str]) -> list[str]:
    """Split a command line into argv, substituting references from environment.

    Raises:
        TokenizeError: on an unterminated quote or brace, or an empty command.
    """
    return Tokenizer(command_line, environment).tokenize()
