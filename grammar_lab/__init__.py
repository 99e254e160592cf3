from .formats import GrammarFormatError, dumps_grammar, grammar_from_dict, grammar_to_dict, loads_grammar, read_grammar
from .generator import GeneratedString, GeneratorConfig, StringGenerator, generate_strings, generate_up_to_length
from .grammar import EPSILON, Grammar, GrammarClass, GrammarError, Production, check_grammar, validate_grammar
from .parser import GrammarParser, ParseOutcome, ParserConfig, ParseResult, parse
from .search import DerivationNode, SearchLimits
from .tokenizer import TokenizationError, join_symbols, split_symbols

__version__ = "0.1.0"
