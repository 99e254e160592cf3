"""
Bounded breadth-first search over sentential forms.

Both the parser and the generator walk the same space: starting from the
start symbol, the leftmost non-terminal of each form is rewritten with every
production for it, one child state per production. States carry the form,
the derivation tree built so far and the production log. Identical forms are
expanded once. The search stops when the caller stops consuming goal states,
when the queue empties, or when one of the SearchLimits bounds is hit.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, Dict, FrozenSet, Iterator, List, Optional, Sequence, Set, Tuple

from .grammar import EPSILON, Grammar, GrammarError, Production
from .tokenizer import TokenizationError, render_symbols

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 10_000

Form = Tuple[str, ...]


@dataclass(frozen=True)
class DerivationNode:
    symbol: str
    children: Tuple["DerivationNode", ...] = ()
    is_terminal: bool = False

    @property
    def is_open(self) -> bool:
        return not self.is_terminal and not self.children

    @property
    def is_epsilon(self) -> bool:
        return self.is_terminal and self.symbol == EPSILON

    def expand_leftmost(self, symbol: str, children: Sequence["DerivationNode"]) -> "DerivationNode":
        """
        Return a new tree where the leftmost unexpanded non-terminal gets ``children``.

        Only the nodes on the path to that leaf are rebuilt, every other subtree
        is shared with ``self``, which is left untouched.
        """
        expanded = self._expand(symbol, tuple(children))
        if expanded is None:
            raise ValueError(f"No unexpanded non-terminal left in tree rooted at {self.symbol!r}")
        return expanded

    def _expand(self, symbol: str, children: Tuple["DerivationNode", ...]) -> Optional["DerivationNode"]:
        if self.is_open:
            if self.symbol != symbol:
                raise ValueError(f"Leftmost open node is {self.symbol!r}, cannot expand {symbol!r}")
            return DerivationNode(self.symbol, children, False)
        for index, child in enumerate(self.children):
            replaced = child._expand(symbol, children)
            if replaced is not None:
                rebuilt = self.children[:index] + (replaced,) + self.children[index + 1 :]
                return DerivationNode(self.symbol, rebuilt, self.is_terminal)
        return None

    def leaves(self) -> Iterator["DerivationNode"]:
        if not self.children:
            yield self
            return
        for child in self.children:
            yield from child.leaves()

    def yield_text(self) -> str:
        return "".join(leaf.symbol for leaf in self.leaves() if not leaf.is_epsilon)

    def depth(self) -> int:
        if not self.children:
            return 0
        return 1 + max(child.depth() for child in self.children)

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "children": [child.to_dict() for child in self.children],
            "isTerminal": self.is_terminal,
        }


class CandidateOrder(Enum):
    DECLARATION = "declaration"
    SHORTEST_FIRST = "shortest-first"


@dataclass(frozen=True)
class SearchLimits:
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    max_depth: Optional[int] = None
    max_form_length: Optional[int] = None
    form_size: Callable[[Form], int] = len


@dataclass(frozen=True)
class SearchState:
    form: Form
    tree: DerivationNode
    steps: Tuple[str, ...]
    productions: Tuple[Production, ...] = ()
    depth: int = 0


@dataclass
class SearchReport:
    iterations: int = 0
    seen: int = 0
    limit_reached: bool = False
    exhausted: bool = False
    limit_hits: List[str] = field(default_factory=list)

    def hit(self, reason: str) -> None:
        self.limit_reached = True
        if reason not in self.limit_hits:
            self.limit_hits.append(reason)
            logger.debug("search bound hit: %s", reason)


Goal = Callable[[SearchState], bool]
Prune = Callable[[Form], bool]


def initial_state(grammar: Grammar) -> SearchState:
    return SearchState(
        form=(grammar.start,),
        tree=DerivationNode(grammar.start),
        steps=(grammar.start,),
    )


def leftmost_nonterminal(form: Form, grammar: Grammar) -> Optional[int]:
    return next((i for i, symbol in enumerate(form) if grammar.is_nonterminal(symbol)), None)


def is_terminal_form(form: Form, grammar: Grammar) -> bool:
    return all(grammar.is_terminal(symbol) for symbol in form)


def alternatives(grammar: Grammar, order: CandidateOrder) -> Dict[str, List[Tuple[Production, Form]]]:
    table: Dict[str, List[Tuple[Production, Form]]] = {}
    for production in grammar.productions:
        try:
            rhs = grammar.rhs_symbols(production)
        except TokenizationError as exc:
            raise GrammarError([f"Production {production.display()}: {exc}"]) from exc
        table.setdefault(production.left, []).append((production, rhs))
    if order is CandidateOrder.SHORTEST_FIRST:
        for options in table.values():
            options.sort(key=lambda option: len(option[1]))
    return table


def nullable_nonterminals(grammar: Grammar) -> FrozenSet[str]:
    """Non-terminals that derive ε, by fixpoint over the productions."""
    table = alternatives(grammar, CandidateOrder.DECLARATION)
    nullable: Set[str] = set()
    changed = True
    while changed:
        changed = False
        for left, options in table.items():
            if left in nullable:
                continue
            if any(all(symbol in nullable for symbol in rhs) for _, rhs in options):
                nullable.add(left)
                changed = True
    return frozenset(nullable)


def _children_for(rhs: Form, grammar: Grammar) -> Tuple[DerivationNode, ...]:
    if not rhs:
        return (DerivationNode(EPSILON, (), True),)
    return tuple(DerivationNode(symbol, (), grammar.is_terminal(symbol)) for symbol in rhs)


def explore(
    grammar: Grammar,
    *,
    goal: Goal,
    prune: Optional[Prune] = None,
    limits: Optional[SearchLimits] = None,
    order: CandidateOrder = CandidateOrder.DECLARATION,
    report: Optional[SearchReport] = None,
) -> Iterator[SearchState]:
    """
    Yield every dequeued state that satisfies ``goal``, shallowest first.

    Goal states are not expanded further. ``prune`` receives each new form
    before it is queued and drops it when it returns True; that is a sound
    cut and does not count as hitting a limit. ``report`` (if given) is
    filled in as the search runs.
    """
    limits = limits or SearchLimits()
    report = report if report is not None else SearchReport()
    table = alternatives(grammar, order)

    start = initial_state(grammar)
    queue: Deque[SearchState] = deque([start])
    seen: Set[Form] = {start.form}

    try:
        yield from _bfs(grammar, table, queue, seen, goal, prune, limits, report)
    finally:
        report.seen = len(seen)
        logger.debug(
            "search finished: %d iterations, %d forms seen, limit_reached=%s",
            report.iterations,
            report.seen,
            report.limit_reached,
        )


def _bfs(
    grammar: Grammar,
    table: Dict[str, List[Tuple[Production, Form]]],
    queue: Deque[SearchState],
    seen: Set[Form],
    goal: Goal,
    prune: Optional[Prune],
    limits: SearchLimits,
    report: SearchReport,
) -> Iterator[SearchState]:
    while queue:
        if report.iterations >= limits.max_iterations:
            report.hit(f"max_iterations={limits.max_iterations}")
            break
        state = queue.popleft()
        report.iterations += 1

        if goal(state):
            yield state
            continue

        index = leftmost_nonterminal(state.form, grammar)
        if index is None:
            continue
        if limits.max_depth is not None and state.depth >= limits.max_depth:
            report.hit(f"max_depth={limits.max_depth}")
            continue

        target = state.form[index]
        for production, rhs in table.get(target, []):
            next_form = state.form[:index] + rhs + state.form[index + 1 :]
            if next_form in seen:
                continue
            if prune is not None and prune(next_form):
                continue
            if limits.max_form_length is not None and limits.form_size(next_form) > limits.max_form_length:
                report.hit(f"max_form_length={limits.max_form_length}")
                continue
            seen.add(next_form)
            queue.append(
                SearchState(
                    form=next_form,
                    tree=state.tree.expand_leftmost(target, _children_for(rhs, grammar)),
                    steps=state.steps + (production.display(),),
                    productions=state.productions + (production,),
                    depth=state.depth + 1,
                )
            )
    else:
        report.exhausted = not report.limit_reached


def replay(grammar: Grammar, productions: Sequence[Production]) -> List[Form]:
    """Apply ``productions`` by leftmost rewriting and return every sentential form."""
    table = {
        production: rhs
        for options in alternatives(grammar, CandidateOrder.DECLARATION).values()
        for production, rhs in options
    }
    form: Form = (grammar.start,)
    forms = [form]
    for production in productions:
        index = leftmost_nonterminal(form, grammar)
        if index is None or form[index] != production.left or production not in table:
            raise ValueError(f"Production {production.display()} does not apply to {render_symbols(form)}")
        form = form[:index] + table[production] + form[index + 1 :]
        forms.append(form)
    return forms


def format_derivation(forms: Sequence[Form]) -> str:
    return " ⇒ ".join(render_symbols(form) for form in forms)
