import pytest

from conftest import make_grammar
from grammar_lab.grammar import GrammarClass, GrammarError, Production, check_grammar, validate_grammar


def test_presets_are_valid(binary, palindromes, expressions, anbn):
    for grammar in (binary, palindromes, expressions, anbn):
        assert validate_grammar(grammar) == []
        assert check_grammar(grammar) is grammar


def test_symbols_are_deduplicated_and_ordered():
    grammar = make_grammar(["S", "A", "S"], ["a", " a ", "b"], [("S", "a")], "S")
    assert grammar.non_terminals == ("S", "A")
    assert grammar.terminals == ("a", "b")


def test_symbols_longest_first(expressions):
    assert expressions.symbols()[0] == "id"


def test_production_helpers(anbn):
    empty = Production("S", "ε")
    assert empty.is_empty
    assert empty.display() == "S → ε"
    assert Production(" S ", "").display() == "S → ε"
    assert Production("S", "aSb").display() == "S → aSb"
    assert anbn.has_empty_production("S")
    assert [p.right for p in anbn.productions_for("S")] == ["aSb", "ε"]


def test_rhs_symbols_ignores_spacing(expressions):
    assert expressions.rhs_symbols(Production("E", "E + T")) == ("E", "+", "T")
    assert expressions.rhs_symbols(Production("F", "id")) == ("id",)


def test_rhs_symbols_keeps_spaced_pieces_apart():
    grammar = make_grammar(["S"], ["a", "b", "ab"], [("S", "a b"), ("S", "ab")], "S")
    assert grammar.rhs_symbols(Production("S", "a b")) == ("a", "b")
    assert grammar.rhs_symbols(Production("S", "ab")) == ("ab",)
    assert grammar.rhs_symbols(Production("S", "ab S")) == ("ab", "S")
    assert grammar.rhs_symbols(Production("S", "aS b")) == ("a", "S", "b")


def test_start_symbol_must_be_non_terminal():
    grammar = make_grammar(["S"], ["a"], [("S", "a")], "X")
    errors = validate_grammar(grammar)
    assert any("start symbol" in error for error in errors)
    with pytest.raises(GrammarError) as excinfo:
        check_grammar(grammar)
    assert excinfo.value.errors == errors


def test_left_side_must_be_single_non_terminal():
    grammar = make_grammar(["S", "A"], ["a"], [("S", "a"), ("SA", "a"), ("a", "S")], "S")
    errors = validate_grammar(grammar)
    assert len(errors) == 2
    assert all("left side" in error for error in errors)


def test_overlapping_vocabularies_are_rejected():
    grammar = make_grammar(["S", "a"], ["a"], [("S", "a")], "S")
    assert any("both terminal and non-terminal" in error for error in validate_grammar(grammar))


def test_unknown_right_side_symbol():
    grammar = make_grammar(["S"], ["a"], [("S", "aXa")], "S")
    errors = validate_grammar(grammar)
    assert len(errors) == 1
    assert "unknown symbol" in errors[0]


def test_empty_definitions():
    grammar = make_grammar([], [], [], "")
    errors = validate_grammar(grammar)
    assert len(errors) == 4


@pytest.mark.parametrize(
    "right, ok",
    [
        ("ε", True),
        ("a", True),
        ("aA", True),
        ("Aa", True),
        ("A", False),
        ("ab", False),
        ("AA", False),
        ("aAb", False),
    ],
)
def test_regular_production_shapes(right, ok):
    grammar = make_grammar(["S", "A"], ["a", "b"], [("S", right), ("A", "a")], "S", GrammarClass.REGULAR)
    assert (validate_grammar(grammar) == []) is ok


def test_context_free_allows_any_right_side():
    grammar = make_grammar(["S", "A"], ["a", "b"], [("S", "aAbSA"), ("A", "ε")], "S")
    assert validate_grammar(grammar) == []


@pytest.mark.parametrize(
    "text, kind",
    [
        ("Tipo 2", GrammarClass.CONTEXT_FREE),
        ("type 2", GrammarClass.CONTEXT_FREE),
        ("cfg", GrammarClass.CONTEXT_FREE),
        ("Tipo 3", GrammarClass.REGULAR),
        ("3", GrammarClass.REGULAR),
        ("Regular", GrammarClass.REGULAR),
    ],
)
def test_grammar_class_parse(text, kind):
    assert GrammarClass.parse(text) is kind


def test_grammar_class_parse_unknown():
    with pytest.raises(ValueError):
        GrammarClass.parse("Tipo 0")
