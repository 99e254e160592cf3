import pytest

from grammar_lab.tokenizer import TokenizationError, is_epsilon, join_symbols, render_symbols, split_symbols


def test_multi_character_terminal_is_one_symbol(expressions):
    assert split_symbols("id+id", expressions) == ("id", "+", "id")
    assert split_symbols("(id)*id", expressions) == ("(", "id", ")", "*", "id")


def test_non_terminals_are_recognised(expressions):
    assert split_symbols("E+T", expressions) == ("E", "+", "T")


def test_longest_match_wins(overlapping):
    assert split_symbols("101", overlapping) == ("10", "1")
    assert split_symbols("110", overlapping) == ("1", "10")
    assert split_symbols("1", overlapping) == ("1",)


@pytest.mark.parametrize("text", ["", "ε", "λ", "eps", "epsilon", "  "])
def test_epsilon_markers_give_empty_sequence(binary, text):
    assert is_epsilon(text)
    assert split_symbols(text, binary) == ()


def test_unknown_symbol_reports_position(binary):
    with pytest.raises(TokenizationError) as excinfo:
        split_symbols("1021", binary)
    assert excinfo.value.position == 2
    assert excinfo.value.text == "1021"
    assert "position 2" in str(excinfo.value)


def test_partial_multi_character_terminal_fails(expressions):
    with pytest.raises(TokenizationError):
        split_symbols("i+id", expressions)


def test_join_and_render():
    assert join_symbols(("id", "+", "id")) == "id+id"
    assert join_symbols(()) == ""
    assert render_symbols(()) == "ε"
    assert render_symbols(("a", "S", "b")) == "aSb"
