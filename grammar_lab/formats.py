"""
Grammar persistence.

Two formats are understood:

JSON record (the exchange format)::

    {
      "name": "a^n b^n",
      "type": "Tipo 2",
      "nonTerminals": ["S"],
      "terminals": ["a", "b"],
      "productions": [{"left": "S", "right": "aSb"}, {"left": "S", "right": "ε"}],
      "startSymbol": "S"
    }

Text format (UTF-8)::

    # L = { a^n b^n : n >= 0 }
    NAME = a^n b^n
    TYPE = Tipo 2
    N = S
    T = a b
    S = S
    P:
    S -> a S b | ε

Header lines are optional: non-terminals default to every left side,
terminals to every right-side symbol that is never a left side (added
to a T line, if one is given), the start symbol to the left side of the first
production. Right sides may separate symbols with spaces; ``λ``, ``eps``
and ``epsilon`` are accepted for ε.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .grammar import EPSILON, Grammar, GrammarClass, Production
from .tokenizer import EPS_SYMBOLS, TokenizationError, join_symbols, split_symbols

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "type", "nonTerminals", "terminals", "productions", "startSymbol")


class GrammarFormatError(ValueError):
    pass


def grammar_from_dict(data: Dict[str, Any]) -> Grammar:
    if not isinstance(data, dict):
        raise GrammarFormatError("Error importing grammar: expected a JSON object")
    missing = [key for key in REQUIRED_FIELDS if data.get(key) in (None, "")]
    if missing:
        raise GrammarFormatError(f"Error importing grammar: invalid structure, missing {', '.join(missing)}")
    try:
        kind = GrammarClass(data["type"])
    except ValueError:
        raise GrammarFormatError('Error importing grammar: type must be "Tipo 2" or "Tipo 3"') from None

    non_terminals = [str(s) for s in data["nonTerminals"]]
    if data["startSymbol"] not in non_terminals:
        raise GrammarFormatError("Error importing grammar: the start symbol must be one of the non-terminals")

    productions: List[Production] = []
    for entry in data["productions"]:
        if not isinstance(entry, dict) or not entry.get("left") or entry.get("right") is None:
            raise GrammarFormatError('Error importing grammar: every production needs "left" and "right"')
        if entry["left"] not in non_terminals:
            raise GrammarFormatError(f'Error importing grammar: left side "{entry["left"]}" is not a non-terminal')
        productions.append(Production(str(entry["left"]), str(entry["right"])))

    return Grammar(
        non_terminals=tuple(non_terminals),
        terminals=tuple(str(s) for s in data["terminals"]),
        productions=tuple(productions),
        start=str(data["startSymbol"]),
        kind=kind,
        name=str(data["name"]),
    )


def _record_right(grammar: Grammar, production: Production) -> str:
    # the record reads right sides symbol by symbol, without separators
    if production.is_empty:
        return EPSILON
    try:
        symbols = grammar.rhs_symbols(production)
    except TokenizationError:
        return production.right
    joined = join_symbols(symbols)
    if split_symbols(joined, grammar) != symbols:
        logger.warning("keeping spaces in %s: the joined form would split differently", production.display())
        return production.right
    return joined


def grammar_to_dict(grammar: Grammar) -> Dict[str, Any]:
    return {
        "name": grammar.name,
        "type": grammar.kind.value,
        "nonTerminals": list(grammar.non_terminals),
        "terminals": list(grammar.terminals),
        "productions": [{"left": p.left, "right": _record_right(grammar, p)} for p in grammar.productions],
        "startSymbol": grammar.start,
    }


def loads_grammar(text: str) -> Grammar:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GrammarFormatError(f"Error importing grammar: {exc}") from exc
    return grammar_from_dict(data)


def dumps_grammar(grammar: Grammar) -> str:
    return json.dumps(grammar_to_dict(grammar), indent=2, ensure_ascii=False)


def _splits_into(piece: str, non_terminals: List[str], terminals: List[str]) -> bool:
    vocabulary = Grammar(tuple(non_terminals), tuple(terminals), (), non_terminals[0])
    try:
        split_symbols(piece, vocabulary)
    except TokenizationError:
        return False
    return True


def parse_grammar_text(text: str, name: str = "") -> Grammar:
    declared_nonterminals: List[str] = []
    declared_terminals: List[str] = []
    start_symbol: Optional[str] = None
    kind = GrammarClass.CONTEXT_FREE
    productions: List[Production] = []
    seen_productions = False

    for number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()

        if not line or line.startswith("#"):
            continue
        if line.lower().startswith("p:"):
            seen_productions = True
            continue

        if not seen_productions and "->" not in line:
            key, sep, value = line.partition("=")
            if not sep:
                continue
            key = key.strip().upper()
            value = value.strip()
            if key == "N":
                declared_nonterminals.extend(value.split())
            elif key == "T":
                declared_terminals.extend(value.split())
            elif key == "S" and value:
                start_symbol = value.split()[0]
            elif key == "TYPE" and value:
                try:
                    kind = GrammarClass.parse(value)
                except ValueError as exc:
                    raise GrammarFormatError(f"line {number}: {exc}") from None
            elif key == "NAME":
                name = value
            continue

        seen_productions = True
        lhs, sep, rhs_block = line.partition("->")
        if not sep:
            raise GrammarFormatError(f"line {number}: invalid production (missing '->'): {line}")
        lhs = lhs.strip()
        if not lhs:
            raise GrammarFormatError(f"line {number}: missing left side: {line}")
        if start_symbol is None:
            start_symbol = lhs

        for alt in rhs_block.split("|"):
            alt = alt.strip()
            if alt in EPS_SYMBOLS:
                productions.append(Production(lhs, EPSILON))
            else:
                productions.append(Production(lhs, " ".join(alt.split())))

    if not productions:
        raise GrammarFormatError("The grammar has no productions.")
    if start_symbol is None:
        raise GrammarFormatError("No start symbol given and none could be inferred.")

    left_sides = [p.left for p in productions]
    non_terminals = list(dict.fromkeys(declared_nonterminals + [start_symbol] + left_sides))

    terminals = list(declared_terminals)
    for production in productions:
        if production.is_empty:
            continue
        for piece in production.right.split():
            if piece in non_terminals or piece in terminals:
                continue
            if _splits_into(piece, non_terminals, terminals):
                continue
            terminals.append(piece)

    logger.debug("parsed grammar %r: %d productions", name, len(productions))
    return Grammar(
        non_terminals=tuple(non_terminals),
        terminals=tuple(terminals),
        productions=tuple(productions),
        start=start_symbol,
        kind=kind,
        name=name,
    )


def read_grammar(path: Union[str, Path]) -> Grammar:
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return loads_grammar(text)
    return parse_grammar_text(text, name=path.stem)


def write_grammar(grammar: Grammar, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(dumps_grammar(grammar) + "\n", encoding="utf-8")
    return path
