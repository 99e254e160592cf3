"""
grammar-lab command line.

Usage:
    grammar-lab parse -g anbn.txt aabb aab --show-deriv
    grammar-lab generate -g binary.json --count 10
    grammar-lab generate -g binary.json --max-len 3
    grammar-lab check -g expr.txt
    grammar-lab convert -g expr.txt -o expr.json
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence

from . import generator, parser as grammar_parser
from .formats import read_grammar, write_grammar
from .grammar import check_grammar, validate_grammar
from .logging_config import setup_logger
from .search import format_derivation, replay


def _add_grammar_arg(command: argparse.ArgumentParser) -> None:
    command.add_argument("-g", "--grammar", required=True, help="Grammar file (.json record or text format).")


def _add_limit_args(command: argparse.ArgumentParser, max_iterations: int, max_depth: int) -> None:
    command.add_argument("--max-iterations", type=int, default=max_iterations, help="Safety cap on BFS steps.")
    command.add_argument("--max-depth", type=int, default=max_depth, help="Maximum derivation depth explored.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="grammar-lab", description="Test and enumerate Tipo 2 / Tipo 3 grammars.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log search details (DEBUG).")
    commands = parser.add_subparsers(dest="command", required=True)

    parse_cmd = commands.add_parser("parse", help="Decide membership of one or more strings.")
    _add_grammar_arg(parse_cmd)
    parse_cmd.add_argument("strings", nargs="+", help="Strings to test (use ε or '' for the empty string).")
    parse_cmd.add_argument("--show-deriv", action="store_true", help="Show the sentential forms of the derivation.")
    _add_limit_args(parse_cmd, grammar_parser.DEFAULT_MAX_ITERATIONS, grammar_parser.DEFAULT_MAX_DEPTH)

    gen_cmd = commands.add_parser("generate", help="List the shortest strings of the language.")
    _add_grammar_arg(gen_cmd)
    size = gen_cmd.add_mutually_exclusive_group()
    size.add_argument("--count", type=int, default=generator.DEFAULT_COUNT, help="Number of distinct strings.")
    size.add_argument("--max-len", type=int, default=None, help="List every string up to this length instead.")
    _add_limit_args(gen_cmd, generator.DEFAULT_MAX_ITERATIONS, generator.DEFAULT_MAX_DEPTH)

    check_cmd = commands.add_parser("check", help="Validate the grammar structure.")
    _add_grammar_arg(check_cmd)

    convert_cmd = commands.add_parser("convert", help="Write the grammar as a JSON record.")
    _add_grammar_arg(convert_cmd)
    convert_cmd.add_argument("-o", "--output", required=True, help="Destination .json file.")
    return parser


def run_parse(args: argparse.Namespace) -> int:
    grammar = check_grammar(read_grammar(args.grammar))
    config = grammar_parser.ParserConfig(max_iterations=args.max_iterations, max_depth=args.max_depth)
    engine = grammar_parser.GrammarParser(grammar, config)
    all_accepted = True
    for text in args.strings:
        result = engine.parse(text)
        all_accepted = all_accepted and result.accepted
        print(f"{text or 'ε'}: {'accepted' if result.accepted else 'rejected'} ({result.message})")
        if not result.accepted:
            continue
        for index, step in enumerate(result.steps or ()):
            print(f"  {index}. {step}")
        if args.show_deriv:
            print(f"  [{format_derivation(replay(grammar, result.productions or ()))}]")
    return 0 if all_accepted else 2


def run_generate(args: argparse.Namespace) -> int:
    grammar = check_grammar(read_grammar(args.grammar))
    config = generator.GeneratorConfig(max_iterations=args.max_iterations, max_depth=args.max_depth)
    engine = generator.StringGenerator(grammar, config)
    if args.max_len is not None:
        words = engine.generate_up_to_length(args.max_len)
    else:
        words = engine.generate_strings(args.count)
    for word in words:
        print(word.value)
    return 0


def run_check(args: argparse.Namespace) -> int:
    grammar = read_grammar(args.grammar)
    errors: List[str] = validate_grammar(grammar)
    if not errors:
        print(grammar.describe())
        print("OK")
        return 0
    for error in errors:
        print(f"- {error}")
    return 1


def run_convert(args: argparse.Namespace) -> int:
    grammar = check_grammar(read_grammar(args.grammar))
    print(write_grammar(grammar, args.output))
    return 0


COMMANDS = {
    "parse": run_parse,
    "generate": run_generate,
    "check": run_check,
    "convert": run_convert,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger("grammar_lab", level="DEBUG" if args.verbose else None)
    try:
        return COMMANDS[args.command](args)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
