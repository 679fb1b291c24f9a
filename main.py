"""
TinyProg Programming Language - Main Entry Point
A minimal imperative language: declarations, assignment, print and integer arithmetic
"""

import sys
import argparse
from typing import Optional

from error_handling import TinyProgSyntaxError, format_error_report
from interpreter import SUCCESS_MESSAGE, ArithmeticConfig, execute_source
from parsing import create_parser, pretty_print_tree
from utilities import INTEGER_WIDTHS, OVERFLOW_POLICIES


DEFAULT_SCRIPT = "program.txt"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='tinyprog',
      description='TinyProg interpreter - integer programs with print and assignment',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s                          # Run program.txt from the current directory
  %(prog)s script.txt               # Run a TinyProg script
  %(prog)s --parse script.txt       # Parse only and show the program tree
  %(prog)s --debug script.txt       # Run with parser/interpreter tracing on stderr
  %(prog)s --int-width 64 --overflow error script.txt

The whole script is parsed before any statement runs: a syntax error
anywhere means nothing is printed. Semantic and runtime errors stop at
the failing statement and keep the output printed before it.
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      default=DEFAULT_SCRIPT,
      help=f'TinyProg script file to execute (default: {DEFAULT_SCRIPT})'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the program tree without running it'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable trace output for all stages'
  )

  parser.add_argument(
      '--int-width',
      type=int,
      choices=INTEGER_WIDTHS,
      default=32,
      help='Bit width of integer values (default: 32)'
  )

  parser.add_argument(
      '--overflow',
      choices=OVERFLOW_POLICIES,
      default='wrap',
      help='What happens when a result does not fit (default: wrap)'
  )

  parser.add_argument(
      '--version',
      action='version',
      version='TinyProg v1.0.0'
  )

  return parser


def read_source(script_path: str) -> Optional[str]:
  """Read a script, reporting to stderr and returning None when it cannot be read"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      return f.read()
  except (OSError, UnicodeDecodeError) as e:
    print(f"Error opening file: {script_path}", file=sys.stderr)
    print(f"  Hint: {e}", file=sys.stderr)
    return None


def parse_file(script_path: str, debug: bool = False) -> int:
  """Parse a TinyProg script file and show the program tree"""
  source = read_source(script_path)
  if source is None:
    return 1

  parser = create_parser(debug=debug)
  try:
    program = parser.parse_string(source, script_path)
  except TinyProgSyntaxError as e:
    print(format_error_report(e, source, with_context=debug), file=sys.stderr)
    return 1

  print(pretty_print_tree(program), end='')
  return 0


def run_script_file(script_path: str, config: ArithmeticConfig, debug: bool = False) -> int:
  """Run a TinyProg script file; returns the process exit status"""
  source = read_source(script_path)
  if source is None:
    return 1

  result = execute_source(source, script_path, output=print, config=config, debug=debug)

  if not result.ok:
    sys.stdout.flush()
    print(format_error_report(result.error, source, with_context=debug), file=sys.stderr)
    return result.exit_code

  print(SUCCESS_MESSAGE)
  return result.exit_code


def main(argv=None) -> None:
  """Main entry point for TinyProg"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.parse:
    sys.exit(parse_file(args.script, debug=args.debug))

  config = ArithmeticConfig(width=args.int_width, overflow=args.overflow)
  sys.exit(run_script_file(args.script, config, debug=args.debug))


if __name__ == "__main__":
  main()
