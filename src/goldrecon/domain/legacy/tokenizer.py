"""Tokenizer for rows of the legacy flat export.

Rows are split on runs of spaces/tabs outside quotes. A double quote toggles
quoted mode and is never part of the token. Inside quotes, ``\\"`` is a literal
quote. A quoted token with no characters is still emitted as ``""`` so that
column alignment is preserved.
"""

from __future__ import annotations

from enum import StrEnum

_SEPARATORS = frozenset(" \t")
_QUOTE = '"'
_BACKSLASH = "\\"


class TokenizerState(StrEnum):
    UNQUOTED = "unquoted"
    QUOTED = "quoted"
    QUOTED_AFTER_ESCAPE = "quoted_after_escape"


class UnterminatedQuoteError(ValueError):
    """Raised when a row ends while still inside a quoted token."""

    def __init__(self, column: int) -> None:
        self.column = column
        super().__init__(f"unterminated quote opened at column {column}")


class _Tokenizer:
    def __init__(self, *, strict: bool) -> None:
        self.strict = strict
        self.state = TokenizerState.UNQUOTED
        self.tokens: list[str] = []
        self.buffer: list[str] = []
        self.had_quotes = False
        self.quote_column = 0

    def feed(self, char: str, column: int) -> None:
        match self.state:
            case TokenizerState.UNQUOTED:
                self._unquoted(char, column)
            case TokenizerState.QUOTED:
                self._quoted(char)
            case TokenizerState.QUOTED_AFTER_ESCAPE:
                self._after_escape(char)

    def finish(self) -> list[str]:
        if self.state is TokenizerState.QUOTED_AFTER_ESCAPE:
            self.buffer.append(_BACKSLASH)
            self.state = TokenizerState.QUOTED
        if self.state is TokenizerState.QUOTED and self.strict:
            raise UnterminatedQuoteError(self.quote_column)
        self._emit()
        return self.tokens

    def _unquoted(self, char: str, column: int) -> None:
        if char in _SEPARATORS:
            self._emit()
        elif char == _QUOTE:
            self.state = TokenizerState.QUOTED
            self.had_quotes = True
            self.quote_column = column
        else:
            self.buffer.append(char)

    def _quoted(self, char: str) -> None:
        if char == _QUOTE:
            self.state = TokenizerState.UNQUOTED
        elif char == _BACKSLASH:
            self.state = TokenizerState.QUOTED_AFTER_ESCAPE
        else:
            self.buffer.append(char)

    def _after_escape(self, char: str) -> None:
        if char == _QUOTE:
            self.buffer.append(_QUOTE)
            self.state = TokenizerState.QUOTED
            return
        # a lone backslash is literal; the following char is read as quoted text
        self.buffer.append(_BACKSLASH)
        self.state = TokenizerState.QUOTED
        self._quoted(char)

    def _emit(self) -> None:
        if self.buffer or self.had_quotes:
            self.tokens.append("".join(self.buffer))
        self.buffer.clear()
        self.had_quotes = False


def tokenize(line: str, *, strict: bool = True) -> list[str]:
    """Split one export line into tokens.

    When the line ends inside quotes, raises ``UnterminatedQuoteError`` if
    ``strict``; otherwise the text after the open quote is the last token.
    """

    tokenizer = _Tokenizer(strict=strict)
    for column, char in enumerate(line, start=1):
        tokenizer.feed(char, column)
    return tokenizer.finish()
