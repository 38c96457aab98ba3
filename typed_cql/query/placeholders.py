"""Token-level helpers: keywords, literal values and `?` placeholders."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlglot.tokens import Token, Tokenizer, TokenType

# Quoted text never reads as a keyword
_QUOTED = {TokenType.STRING, TokenType.IDENTIFIER}

# Tokens that end a value written after a keyword
_VALUE_END = {
    TokenType.SEMICOLON,
    TokenType.COMMA,
    TokenType.L_PAREN,
    TokenType.R_PAREN,
    TokenType.PLACEHOLDER,
}


@dataclass(frozen=True)
class Placeholder:
    """A `?` token and the keywords written right before it."""

    position: int
    preceding: Tuple[str, ...]

    @property
    def keyword(self) -> str:
        """Upper-cased text of the token before the placeholder."""
        if not self.preceding:
            return ""
        return self.preceding[-1]


def tokenize(query: str) -> List[Token]:
    """Tokenize query text.

    Raises:
        sqlglot.errors.TokenError: On unterminated strings or comments
    """
    return Tokenizer().tokenize(query)


def token_word(token: Token) -> str:
    """Upper-cased token text, or "" for string literals and quoted names."""
    if token.token_type in _QUOTED:
        return ""
    return token.text.upper()


def read_value(query: str, tokens: List[Token], index: int) -> Tuple[Optional[str], int]:
    """Read the value written at `tokens[index]`.

    A value is `?` or a run of tokens with no whitespace between them, so
    `5ms` and `-5` come back as written even though the tokenizer splits
    them.

    Args:
        query: Query text the tokens came from
        tokens: Tokens of the query
        index: Index of the first value token

    Returns:
        The value text (None if there is none) and the index after it
    """
    if index >= len(tokens):
        return None, index
    first = tokens[index]
    if first.token_type == TokenType.PLACEHOLDER:
        return query[first.start : first.end + 1], index + 1
    if first.token_type in _VALUE_END:
        return None, index

    last = first
    index += 1
    while index < len(tokens):
        token = tokens[index]
        if token.token_type in _VALUE_END or token.start != last.end + 1:
            break
        last = token
        index += 1
    return query[first.start : last.end + 1], index


def find_placeholders(query: str) -> List[Placeholder]:
    """Find every placeholder in order of appearance.

    String literals and comments are skipped by the tokenizer, so a `?`
    inside a quoted value is not a placeholder.
    """
    tokens = tokenize(query)
    placeholders: List[Placeholder] = []
    for index, token in enumerate(tokens):
        if token.token_type != TokenType.PLACEHOLDER:
            continue
        preceding = tuple(token_word(t) for t in tokens[max(0, index - 2) : index])
        placeholders.append(Placeholder(position=token.start, preceding=preceding))
    return placeholders


def count_placeholders(query: str) -> int:
    """Count the placeholders of a query."""
    return len(find_placeholders(query))
