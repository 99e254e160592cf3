import pytest

from grammar_lab.grammar import Grammar, GrammarClass, Production


def make_grammar(non_terminals, terminals, rules, start, kind=GrammarClass.CONTEXT_FREE, name=""):
    productions = [Production(left, right) for left, right in rules]
    return Grammar(tuple(non_terminals), tuple(terminals), tuple(productions), start, kind, name)


@pytest.fixture
def binary():
    return make_grammar(
        ["S", "A"],
        ["0", "1"],
        [("S", "0A"), ("S", "1A"), ("A", "0A"), ("A", "1A"), ("A", "ε")],
        "S",
        GrammarClass.REGULAR,
        "Binary numbers",
    )


@pytest.fixture
def palindromes():
    return make_grammar(
        ["S"],
        ["a", "b"],
        [("S", "aSa"), ("S", "bSb"), ("S", "a"), ("S", "b"), ("S", "ε")],
        "S",
        name="Palindromes",
    )


@pytest.fixture
def expressions():
    return make_grammar(
        ["E", "T", "F"],
        ["id", "+", "*", "(", ")"],
        [("E", "E+T"), ("E", "T"), ("T", "T*F"), ("T", "F"), ("F", "(E)"), ("F", "id")],
        "E",
        name="Arithmetic expressions",
    )


@pytest.fixture
def anbn():
    return make_grammar(["S"], ["a", "b"], [("S", "aSb"), ("S", "ε")], "S", name="a^n b^n")


@pytest.fixture
def overlapping():
    # "1" is a prefix of "10"
    return make_grammar(["S"], ["1", "10"], [("S", "10S"), ("S", "1")], "S", name="overlap")


@pytest.fixture
def erasable():
    # a* b*, every non-terminal derives ε
    return make_grammar(
        ["S", "A", "B"],
        ["a", "b"],
        [("S", "AB"), ("A", "aA"), ("A", "ε"), ("B", "bB"), ("B", "ε")],
        "S",
        name="a* b*",
    )
