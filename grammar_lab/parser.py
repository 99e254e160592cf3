from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from .grammar import EPSILON, Grammar, GrammarClass, Production
from .search import (
    DEFAULT_MAX_ITERATIONS,
    CandidateOrder,
    DerivationNode,
    Form,
    SearchLimits,
    SearchReport,
    SearchState,
    explore,
    is_terminal_form,
    leftmost_nonterminal,
    nullable_nonterminals,
)
from .tokenizer import TokenizationError, join_symbols, split_symbols

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 200
CFG_LENGTH_FACTOR = 2

MSG_ACCEPTED = "String accepted"
MSG_EMPTY_ACCEPTED = "Empty string accepted"
MSG_EMPTY_REJECTED = "Empty string not accepted by this grammar"
MSG_NOT_IN_LANGUAGE = "String does not belong to the language"


class ParseOutcome(Enum):
    ACCEPTED = "accepted"
    NOT_IN_LANGUAGE = "not-in-language"
    LIMIT_REACHED = "limit-reached"
    TOKENIZATION_FAILED = "tokenization-failed"


@dataclass(frozen=True)
class ParserConfig:
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH

    def limits(self) -> SearchLimits:
        return SearchLimits(max_iterations=self.max_iterations, max_depth=self.max_depth)


@dataclass(frozen=True)
class ParseResult:
    accepted: bool
    message: str
    outcome: ParseOutcome
    derivation_tree: Optional[DerivationNode] = None
    steps: Optional[Tuple[str, ...]] = None
    productions: Optional[Tuple[Production, ...]] = None

    @classmethod
    def rejected(cls, outcome: ParseOutcome, message: str) -> "ParseResult":
        return cls(accepted=False, message=message, outcome=outcome)

    @classmethod
    def from_state(cls, state: SearchState, message: str = MSG_ACCEPTED) -> "ParseResult":
        return cls(
            accepted=True,
            message=message,
            outcome=ParseOutcome.ACCEPTED,
            derivation_tree=state.tree,
            steps=state.steps,
            productions=state.productions,
        )


class GrammarParser:
    """Membership test by bounded leftmost BFS, productions tried in declaration order."""

    def __init__(self, grammar: Grammar, config: Optional[ParserConfig] = None):
        self.grammar = grammar
        self.config = config or ParserConfig()

    def parse(self, text: str) -> ParseResult:
        text = text.strip()
        try:
            target = split_symbols(text, self.grammar)
        except TokenizationError as exc:
            logger.debug("tokenization failed for %r: %s", text, exc)
            return ParseResult.rejected(ParseOutcome.TOKENIZATION_FAILED, f"Could not tokenize input: {exc}")

        if not target:
            return self._parse_empty()
        return self._search(target)

    def _parse_empty(self) -> ParseResult:
        start = self.grammar.start
        empty = next((p for p in self.grammar.productions_for(start) if p.is_empty), None)
        if empty is None:
            return ParseResult.rejected(ParseOutcome.NOT_IN_LANGUAGE, MSG_EMPTY_REJECTED)
        tree = DerivationNode(start, (DerivationNode(EPSILON, (), True),), False)
        state = SearchState(form=(), tree=tree, steps=(start, empty.display()), productions=(empty,), depth=1)
        return ParseResult.from_state(state, MSG_EMPTY_ACCEPTED)

    def _search(self, target: Form) -> ParseResult:
        grammar = self.grammar
        target_text = join_symbols(target)
        nullable = nullable_nonterminals(grammar)

        def weight(form: Form) -> int:
            # symbols that must still produce at least one terminal
            return sum(1 for symbol in form if symbol not in nullable)

        def goal(state: SearchState) -> bool:
            return is_terminal_form(state.form, grammar) and join_symbols(state.form) == target_text

        def prune(form: Form) -> bool:
            terminal_text = join_symbols([s for s in form if grammar.is_terminal(s)])
            if len(terminal_text) > len(target_text):
                return True
            index = leftmost_nonterminal(form, grammar)
            if index is not None and not target_text.startswith(join_symbols(form[:index])):
                return True
            if index is None and terminal_text != target_text:
                return True
            return weight(form) > len(target_text)

        limits = self.config.limits()
        if grammar.kind is GrammarClass.CONTEXT_FREE:
            limits = replace(limits, max_form_length=CFG_LENGTH_FACTOR * len(target), form_size=weight)

        report = SearchReport()
        found = next(
            explore(
                grammar,
                goal=goal,
                prune=prune,
                limits=limits,
                order=CandidateOrder.DECLARATION,
                report=report,
            ),
            None,
        )
        if found is not None:
            logger.debug("accepted %r after %d iterations", target_text, report.iterations)
            return ParseResult.from_state(found)
        if report.limit_reached:
            return ParseResult.rejected(
                ParseOutcome.LIMIT_REACHED,
                f"Search limit reached ({report.iterations} iterations, {', '.join(report.limit_hits)}) "
                "without a derivation",
            )
        return ParseResult.rejected(ParseOutcome.NOT_IN_LANGUAGE, MSG_NOT_IN_LANGUAGE)


def parse(grammar: Grammar, text: str, config: Optional[ParserConfig] = None) -> ParseResult:
    return GrammarParser(grammar, config).parse(text)


def accepts(grammar: Grammar, text: str, config: Optional[ParserConfig] = None) -> bool:
    return parse(grammar, text, config).accepted
