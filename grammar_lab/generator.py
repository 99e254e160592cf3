from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

from .grammar import EPSILON, Grammar
from .search import CandidateOrder, Form, SearchLimits, SearchReport, SearchState, explore, is_terminal_form
from .tokenizer import join_symbols

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 10
DEFAULT_MAX_ITERATIONS = 50_000
DEFAULT_MAX_DEPTH = 20
DEFAULT_LENGTH_MULTIPLIER = 2


@dataclass(frozen=True)
class GeneratedString:
    value: str
    length: int

    @classmethod
    def from_word(cls, word: str) -> "GeneratedString":
        return cls(value=word or EPSILON, length=len(word))

    @property
    def word(self) -> str:
        return "" if self.length == 0 else self.value

    def sort_key(self):
        return (self.length, self.value)


@dataclass(frozen=True)
class GeneratorConfig:
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH
    length_multiplier: int = DEFAULT_LENGTH_MULTIPLIER


def _shortest_first(found: Iterable[GeneratedString]) -> List[GeneratedString]:
    return sorted(found, key=GeneratedString.sort_key)


class StringGenerator:
    """Enumerate the shortest strings of a grammar's language."""

    def __init__(self, grammar: Grammar, config: Optional[GeneratorConfig] = None):
        self.grammar = grammar
        self.config = config or GeneratorConfig()

    def _is_word(self, state: SearchState) -> bool:
        return is_terminal_form(state.form, self.grammar)

    def _collect(self, states: Iterable[SearchState], limit: Optional[int] = None) -> List[GeneratedString]:
        results: List[GeneratedString] = []
        emitted: Set[str] = set()
        for state in states:
            word = join_symbols(state.form)
            if word in emitted:
                continue
            emitted.add(word)
            results.append(GeneratedString.from_word(word))
            if limit is not None and len(results) >= limit:
                break
        return results

    def generate_strings(self, count: int = DEFAULT_COUNT) -> List[GeneratedString]:
        """
        Return up to ``count`` distinct strings, shortest first.

        Candidates are expanded with the shortest right sides first so the
        breadth-first walk reaches short words early; the final list is still
        sorted by (length, value) since derivation depth only approximates
        string length.
        """
        if count <= 0:
            return []
        report = SearchReport()
        states = explore(
            self.grammar,
            goal=self._is_word,
            limits=SearchLimits(max_iterations=self.config.max_iterations, max_depth=self.config.max_depth),
            order=CandidateOrder.SHORTEST_FIRST,
            report=report,
        )
        results = self._collect(states, limit=count)
        if len(results) < count:
            logger.info(
                "generated %d of %d requested strings (%s)",
                len(results),
                count,
                "limit reached" if report.limit_reached else "language exhausted",
            )
        return _shortest_first(results)[:count]

    def generate_up_to_length(self, max_length: int) -> List[GeneratedString]:
        if max_length < 0:
            return []
        grammar = self.grammar
        max_form_length = max(1, max_length * self.config.length_multiplier)

        def is_short_word(state: SearchState) -> bool:
            return self._is_word(state) and len(join_symbols(state.form)) <= max_length

        def prune(form: Form) -> bool:
            terminal_text = join_symbols([s for s in form if grammar.is_terminal(s)])
            return len(terminal_text) > max_length

        report = SearchReport()
        states = explore(
            grammar,
            goal=is_short_word,
            prune=prune,
            limits=SearchLimits(max_iterations=self.config.max_iterations, max_form_length=max_form_length),
            order=CandidateOrder.SHORTEST_FIRST,
            report=report,
        )
        results = self._collect(states)
        logger.debug("found %d strings up to length %d in %d iterations", len(results), max_length, report.iterations)
        return _shortest_first(results)


def generate_strings(grammar: Grammar, count: int = DEFAULT_COUNT, config: Optional[GeneratorConfig] = None) -> List[GeneratedString]:
    return StringGenerator(grammar, config).generate_strings(count)


def generate_up_to_length(grammar: Grammar, max_length: int, config: Optional[GeneratorConfig] = None) -> List[GeneratedString]:
    return StringGenerator(grammar, config).generate_up_to_length(max_length)
