"""Hand-written lexer for macrowire directive sources.

Tokenizes registration sources into a stream of Token objects.
Pure Python character scanning, no external dependencies.
"""

from __future__ import annotations

from macrowire.core.errors import GrammarError
from macrowire.dsl.tokens import KEYWORDS, Token, TokenKind


class LexerError(GrammarError):
    """Raised when the lexer encounters an invalid character sequence."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Lexer error: {message}", line=line, column=column)


_PUNCT: dict[str, TokenKind] = {
    "@": TokenKind.AT,
    "!": TokenKind.BANG,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    "/": TokenKind.SLASH,
    "=": TokenKind.EQUALS,
}

_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}


class Lexer:
    """Tokenize macrowire directive text.

    Usage:
        lexer = Lexer(source_text)
        tokens = lexer.tokenize()
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def tokenize(self) -> list[Token]:
        """Scan the entire source and return all tokens including EOF."""
        while not self._at_end():
            self._skip_whitespace()
            if self._at_end():
                break
            self._scan_token()

        self._tokens.append(Token(TokenKind.EOF, "", self._line, self._col))
        return self._tokens

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        ch = self._peek()

        # Line comments
        if ch == "/" and self._peek_next() == "/":
            self._skip_comment()
            return

        if ch == '"':
            self._scan_string()
            return

        if ch.isalpha() or ch == "_":
            self._scan_identifier()
            return

        # Two-character punctuation
        pair = ch + self._peek_next()
        if pair == "::":
            self._emit_fixed(TokenKind.PATH_SEP, pair)
            return
        if pair == "->":
            self._emit_fixed(TokenKind.ARROW, pair)
            return

        if ch in _PUNCT:
            self._emit_fixed(_PUNCT[ch], ch)
            return

        if ch == ":":
            raise LexerError("Single ':' is not valid, did you mean '::'?", self._line, self._col)

        raise LexerError(f"Unexpected character: {ch!r}", self._line, self._col)

    def _emit_fixed(self, kind: TokenKind, text: str) -> None:
        self._tokens.append(Token(kind, text, self._line, self._col))
        for _ in text:
            self._advance()

    def _skip_comment(self) -> None:
        """Consume a // comment until end of line."""
        while not self._at_end() and self._peek() != "\n":
            self._advance()

    def _scan_string(self) -> None:
        """Scan a double-quoted path literal; newlines are not allowed inside."""
        line, column = self._line, self._col
        self._advance()
        chars: list[str] = []

        while not self._at_end():
            ch = self._advance()
            if ch == '"':
                self._tokens.append(Token(TokenKind.STRING, "".join(chars), line, column))
                return
            if ch == "\n":
                raise LexerError("Unterminated string (newline before closing quote)", line, column)
            if ch != "\\":
                chars.append(ch)
                continue
            if self._at_end():
                break
            escape_col = self._col
            escaped = self._advance()
            if escaped not in _ESCAPES:
                raise LexerError(f"Unknown escape sequence: \\{escaped}", self._line, escape_col)
            chars.append(_ESCAPES[escaped])

        raise LexerError("Unterminated string (hit EOF)", line, column)

    def _scan_identifier(self) -> None:
        """Scan an identifier; reserved words map to their keyword kinds."""
        start, column = self._pos, self._col
        while self._peek().isalnum() or self._peek() == "_":
            self._advance()

        text = self._source[start : self._pos]
        self._tokens.append(Token(KEYWORDS.get(text, TokenKind.IDENTIFIER), text, self._line, column))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _at_end(self) -> bool:
        return self._pos >= len(self._source)

    def _peek(self) -> str:
        if self._at_end():
            return "\0"
        return self._source[self._pos]

    def _peek_next(self) -> str:
        if self._pos + 1 >= len(self._source):
            return "\0"
        return self._source[self._pos + 1]

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek() in (" ", "\t", "\r", "\n"):
            self._advance()
