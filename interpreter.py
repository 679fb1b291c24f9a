"""
TinyProg Interpreter
Tree-walking evaluator over the parsed program tree
Side effects (printed lines) go through an output callback supplied by the caller
"""

from dataclasses import dataclass
from typing import Callable, Optional
import sys

from error_handling import (
  SourceSpan,
  TinyProgRuntimeError,
  TinyProgSemanticsError,
  TinyProgSyntaxError,
)
from parsing import (
  Assignment,
  BinaryOp,
  BinaryOperator,
  Expression,
  Identifier,
  Number,
  Print,
  Program,
  Statement,
  create_parser,
)
from semantics import SymbolTable, VariableKind
from utilities import INTEGER_WIDTHS, OVERFLOW_POLICIES, lookup_arithmetic_op, narrow_integer


SUCCESS_MESSAGE = "'end' found, program executed successfully."


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass(frozen=True)
class ArithmeticConfig:
  """
  Integer model used by every operation.

  width: two's-complement bit width of all values
  overflow: "wrap", "saturate" or "error"; applied to every literal and
    every operation result, including the exactly computed power
  """
  width: int = 32
  overflow: str = "wrap"

  def __post_init__(self):
    if self.width not in INTEGER_WIDTHS:
      raise ValueError(f"Unsupported integer width {self.width}; choose one of {INTEGER_WIDTHS}")
    if self.overflow not in OVERFLOW_POLICIES:
      raise ValueError(f"Unknown overflow policy '{self.overflow}'; choose one of {OVERFLOW_POLICIES}")


DEFAULT_CONFIG = ArithmeticConfig()


# ============================================================================
# EXPRESSION EVALUATION
# ============================================================================

def _attach_span(error: TinyProgRuntimeError, span: SourceSpan) -> TinyProgRuntimeError:
  if error.span is None:
    error.span = span
  return error


def eval_expression(node: Expression, symbols: SymbolTable, config: ArithmeticConfig = DEFAULT_CONFIG) -> int:
  """Evaluate an expression tree to an integer"""
  if isinstance(node, Number):
    return eval_number(node, config)
  elif isinstance(node, Identifier):
    return symbols.read(node.name, node.span)
  elif isinstance(node, BinaryOp):
    return eval_binary_op(node, symbols, config)
  raise TypeError(f"Not an expression node: {node!r}")


def eval_number(node: Number, config: ArithmeticConfig) -> int:
  try:
    return narrow_integer(node.value, config.width, config.overflow, "literal")
  except TinyProgRuntimeError as e:
    raise _attach_span(e, node.span)


def eval_binary_op(node: BinaryOp, symbols: SymbolTable, config: ArithmeticConfig) -> int:
  """
  Evaluate an operator chain without recursing along it.

  + - * / chains are left-deep: fold left to right, evaluating each right
  operand just before its operator is applied. ^ chains are right-deep:
  evaluate every operand left to right, then apply from the right.
  """
  if node.operator is BinaryOperator.POWER:
    return _eval_power_chain(node, symbols, config)
  return _eval_left_chain(node, symbols, config)


def _eval_left_chain(node: BinaryOp, symbols: SymbolTable, config: ArithmeticConfig) -> int:
  chain = []
  while isinstance(node, BinaryOp) and node.operator is not BinaryOperator.POWER:
    chain.append(node)
    node = node.left

  value = eval_expression(node, symbols, config)
  for link in reversed(chain):
    right = eval_expression(link.right, symbols, config)
    value = _apply(link, value, right, config)
  return value


def _eval_power_chain(node: BinaryOp, symbols: SymbolTable, config: ArithmeticConfig) -> int:
  chain = []
  while isinstance(node, BinaryOp) and node.operator is BinaryOperator.POWER:
    chain.append(node)
    node = node.right

  bases = [eval_expression(link.left, symbols, config) for link in chain]
  value = eval_expression(node, symbols, config)
  for link, base in zip(reversed(chain), reversed(bases)):
    value = _apply(link, base, value, config)
  return value


def _apply(node: BinaryOp, left: int, right: int, config: ArithmeticConfig) -> int:
  operation = lookup_arithmetic_op(node.operator.value)
  try:
    return operation(left, right, config.width, config.overflow)
  except TinyProgRuntimeError as e:
    raise _attach_span(e, node.span)


# ============================================================================
# STATEMENT EXECUTION
# ============================================================================

def execute_statement(node: Statement, symbols: SymbolTable, output: Callable[[str], None],
                      config: ArithmeticConfig = DEFAULT_CONFIG) -> None:
  """Run one statement; its effect is visible before this returns"""
  if isinstance(node, Assignment):
    value = eval_expression(node.expression, symbols, config)
    symbols.write(node.target, value, node.span)
  elif isinstance(node, Print):
    value = eval_expression(node.expression, symbols, config)
    output(str(value))
  else:
    raise TypeError(f"Not a statement node: {node!r}")


class Interpreter:
  """
  Executes parsed programs.

  Every run starts from an empty symbol table, so the same Program can be
  executed any number of times with identical results.
  """

  def __init__(self, output: Optional[Callable[[str], None]] = None,
               config: Optional[ArithmeticConfig] = None, debug: bool = False):
    self.output = output if output is not None else print
    self.config = config or DEFAULT_CONFIG
    self.debug = debug
    self.symbols: Optional[SymbolTable] = None

  def run(self, program: Program) -> SymbolTable:
    """Declare every variable, then execute the statements in order"""
    self.symbols = SymbolTable(debug=self.debug)

    for declaration in program.declarations:
      kind = VariableKind(declaration.kind)
      for name in declaration.names:
        self.symbols.declare(name, kind)

    for statement in program.statements:
      if self.debug:
        print(f"Executing {type(statement).__name__} at {statement.span}", file=sys.stderr)
      execute_statement(statement, self.symbols, self.output, self.config)

    if self.debug:
      print(f"Final symbol table ({len(self.symbols)} entries):", file=sys.stderr)
      for name, kind, value in self.symbols.snapshot():
        print(f"  {kind} {name} = {value}", file=sys.stderr)

    return self.symbols


# ============================================================================
# TOP-LEVEL DRIVER
# ============================================================================

@dataclass(frozen=True)
class RunResult:
  """
  Outcome of one run.

  status is "ok", "syntax_error", "semantic_error" or "runtime_error";
  error holds the exception for every status but "ok".
  """
  status: str
  error: Optional[Exception] = None
  symbols: Optional[SymbolTable] = None

  @property
  def ok(self) -> bool:
    return self.status == "ok"

  @property
  def exit_code(self) -> int:
    return 0 if self.ok else 1


def execute_source(text: str, filename: str = "<input>",
                   output: Optional[Callable[[str], None]] = None,
                   config: Optional[ArithmeticConfig] = None,
                   debug: bool = False) -> RunResult:
  """
  Parse and run a TinyProg program.

  The whole text is parsed before anything executes: a syntax error means
  no output at all. Semantic and runtime errors stop execution at the
  failing statement; lines printed before it stay printed.
  """
  parser = create_parser(debug=debug)
  interpreter = create_interpreter(debug=debug, config=config, output=output)

  try:
    program = parser.parse_string(text, filename)
  except TinyProgSyntaxError as e:
    return RunResult("syntax_error", e)

  try:
    symbols = interpreter.run(program)
  except TinyProgSemanticsError as e:
    return RunResult("semantic_error", e, interpreter.symbols)
  except TinyProgRuntimeError as e:
    return RunResult("runtime_error", e, interpreter.symbols)

  return RunResult("ok", None, symbols)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False, config: Optional[ArithmeticConfig] = None,
                       output: Optional[Callable[[str], None]] = None) -> Interpreter:
  """Factory function returning an interpreter"""
  return Interpreter(output=output, config=config, debug=debug)
