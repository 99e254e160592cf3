from __future__ import annotations

from typing import TYPE_CHECKING, Sequence, Tuple

if TYPE_CHECKING:
    from .grammar import Grammar

EPS_SYMBOLS = {"", "ε", "λ", "eps", "epsilon"}


class TokenizationError(ValueError):
    def __init__(self, text: str, position: int):
        self.text = text
        self.position = position
        super().__init__(f"unknown symbol at position {position} in {text!r} (remaining: {text[position:]!r})")


def is_epsilon(text: str) -> bool:
    return text.strip() in EPS_SYMBOLS


def split_symbols(text: str, grammar: "Grammar") -> Tuple[str, ...]:
    """
    Segment ``text`` into the grammar's atomic symbols.

    At every position the longest declared symbol (terminal or non-terminal)
    that matches wins, so with terminals ``1`` and ``10`` the text ``101``
    becomes ``("10", "1")``. Raises TokenizationError when no declared
    symbol matches the remaining text.
    """
    if is_epsilon(text):
        return tuple()
    candidates = grammar.symbols()
    tokens = []
    i = 0
    while i < len(text):
        match = next((s for s in candidates if text.startswith(s, i)), None)
        if match is None:
            raise TokenizationError(text, i)
        tokens.append(match)
        i += len(match)
    return tuple(tokens)


def join_symbols(tokens: Sequence[str]) -> str:
    return "".join(tokens)


def render_symbols(tokens: Sequence[str]) -> str:
    return join_symbols(tokens) or "ε"
