from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Tuple

from .tokenizer import TokenizationError, is_epsilon, split_symbols

EPSILON = "ε"


class GrammarError(ValueError):
    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid grammar")


class GrammarClass(str, Enum):
    CONTEXT_FREE = "Tipo 2"
    REGULAR = "Tipo 3"

    @classmethod
    def parse(cls, value: str) -> "GrammarClass":
        key = value.strip().lower().replace("_", " ")
        aliases = {
            "tipo 2": cls.CONTEXT_FREE,
            "type 2": cls.CONTEXT_FREE,
            "2": cls.CONTEXT_FREE,
            "cfg": cls.CONTEXT_FREE,
            "context free": cls.CONTEXT_FREE,
            "context-free": cls.CONTEXT_FREE,
            "tipo 3": cls.REGULAR,
            "type 3": cls.REGULAR,
            "3": cls.REGULAR,
            "regular": cls.REGULAR,
        }
        if key not in aliases:
            raise ValueError(f"Unknown grammar type: {value!r} (expected 'Tipo 2' or 'Tipo 3')")
        return aliases[key]


@dataclass(frozen=True)
class Production:
    left: str
    right: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "left", self.left.strip())
        object.__setattr__(self, "right", self.right.strip())

    @property
    def is_empty(self) -> bool:
        return is_epsilon(self.right)

    def display(self) -> str:
        return f"{self.left} → {EPSILON if self.is_empty else self.right}"


def _unique(symbols: Iterable[str]) -> Tuple[str, ...]:
    seen = dict.fromkeys(s.strip() for s in symbols)
    return tuple(s for s in seen if s)


@dataclass(frozen=True)
class Grammar:
    non_terminals: Tuple[str, ...]
    terminals: Tuple[str, ...]
    productions: Tuple[Production, ...]
    start: str
    kind: GrammarClass = GrammarClass.CONTEXT_FREE
    name: str = ""
    _symbols: Tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "non_terminals", _unique(self.non_terminals))
        object.__setattr__(self, "terminals", _unique(self.terminals))
        object.__setattr__(self, "productions", tuple(self.productions))
        object.__setattr__(self, "start", self.start.strip())
        vocabulary = set(self.non_terminals) | set(self.terminals)
        object.__setattr__(self, "_symbols", tuple(sorted(vocabulary, key=lambda s: (-len(s), s))))

    def is_nonterminal(self, symbol: str) -> bool:
        return symbol in self.non_terminals

    def is_terminal(self, symbol: str) -> bool:
        return symbol in self.terminals

    def symbols(self) -> Tuple[str, ...]:
        return self._symbols

    def productions_for(self, non_terminal: str) -> List[Production]:
        return [p for p in self.productions if p.left == non_terminal]

    def has_empty_production(self, non_terminal: str) -> bool:
        return any(p.is_empty for p in self.productions_for(non_terminal))

    def rhs_symbols(self, production: Production) -> Tuple[str, ...]:
        """
        Split a right side into symbols.

        Space-separated right sides (``a S b``) keep each declared piece as
        one symbol; a piece that is not declared, and a right side written
        without spaces (``aSb``), are split longest match first.
        """
        pieces = production.right.split()
        if len(pieces) <= 1:
            return split_symbols(production.right, self)
        symbols: List[str] = []
        for piece in pieces:
            if piece in self.non_terminals or piece in self.terminals:
                symbols.append(piece)
            else:
                symbols.extend(split_symbols(piece, self))
        return tuple(symbols)

    def describe(self) -> str:
        lines = [
            f"{self.name or 'grammar'} ({self.kind.value})",
            f"N = {{{', '.join(self.non_terminals)}}}",
            f"T = {{{', '.join(self.terminals)}}}",
            f"S = {self.start}",
        ]
        lines.extend(f"  {p.display()}" for p in self.productions)
        return "\n".join(lines)


def _regular_shape_error(grammar: Grammar, production: Production, rhs: Tuple[str, ...]) -> str | None:
    if not rhs:
        return None
    if len(rhs) > 2:
        return f"Production {production.display()}: too long for a Tipo 3 grammar"
    if len(rhs) == 1:
        if not grammar.is_terminal(rhs[0]):
            return f"Production {production.display()}: a single symbol must be a terminal"
        return None
    first, second = rhs
    right_linear = grammar.is_terminal(first) and grammar.is_nonterminal(second)
    left_linear = grammar.is_nonterminal(first) and grammar.is_terminal(second)
    if not (right_linear or left_linear):
        return (
            f"Production {production.display()}: must be (terminal)(non-terminal) "
            "or (non-terminal)(terminal)"
        )
    return None


def validate_grammar(grammar: Grammar) -> List[str]:
    errors: List[str] = []
    if not grammar.non_terminals:
        errors.append("At least one non-terminal must be defined")
    if not grammar.terminals:
        errors.append("At least one terminal must be defined")
    if not grammar.start:
        errors.append("The start symbol must be specified")
    elif not grammar.is_nonterminal(grammar.start):
        errors.append(f"The start symbol {grammar.start!r} must be a non-terminal")
    if not grammar.productions:
        errors.append("At least one production must be defined")

    shared = sorted(set(grammar.non_terminals) & set(grammar.terminals))
    if shared:
        errors.append(f"Symbols declared both terminal and non-terminal: {', '.join(shared)}")

    for production in grammar.productions:
        if not grammar.is_nonterminal(production.left):
            errors.append(f"Production {production.display()}: left side must be a single non-terminal")
            continue
        try:
            rhs = grammar.rhs_symbols(production)
        except TokenizationError as exc:
            errors.append(f"Production {production.display()}: {exc}")
            continue
        if grammar.kind is GrammarClass.REGULAR:
            problem = _regular_shape_error(grammar, production, rhs)
            if problem:
                errors.append(problem)
    return errors


def check_grammar(grammar: Grammar) -> Grammar:
    errors = validate_grammar(grammar)
    if errors:
        raise GrammarError(errors)
    return grammar

