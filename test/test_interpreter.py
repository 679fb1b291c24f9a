"""
Interpreter tests for TinyProg
Evaluation semantics, error channels, and the fixed-width integer model
"""

import pytest

from error_handling import TinyProgRuntimeError, TinyProgSyntaxError
from interpreter import ArithmeticConfig, RunResult, execute_source
from semantics import UndeclaredVariableError


def run(source, config=None):
  """Run source, returning (result, printed lines)"""
  printed = []
  result = execute_source(source, output=printed.append, config=config)
  return result, printed


def value_of(expression, config=None):
  """Value printed by `print <expression>;`"""
  result, printed = run(f"program begin print {expression}; end", config)
  assert result.ok, result.error
  return int(printed[0])


class TestEvaluation:
  """Test arithmetic and statement semantics"""

  def test_precedence(self):
    result, printed = run("program int a; begin a=2+3*4; print a; end")
    assert result.ok
    assert printed == ["14"]

  def test_right_associative_power(self):
    result, printed = run("program int a; begin a=2^3^2; print a; end")
    assert printed == ["512"]

  def test_truncating_division(self):
    result, printed = run("program int a; begin a=7/2; print a; end")
    assert printed == ["3"]

  def test_division_truncates_toward_zero(self):
    assert value_of("(0-7)/2") == -3
    assert value_of("7/(0-2)") == -3
    assert value_of("(0-7)/(0-2)") == 3

  def test_parentheses(self):
    result, printed = run("program int a; begin a=(2+3)*4; print a; end")
    assert printed == ["20"]

  def test_left_to_right_fold(self):
    assert value_of("10-4-3") == 3
    assert value_of("100/10/5") == 2
    assert value_of("2*3+4*5-6/2") == 23

  def test_zero_to_the_zero(self):
    assert value_of("0^0") == 1

  def test_negative_exponents_truncate(self):
    assert value_of("2^(0-1)") == 0
    assert value_of("1^(0-5)") == 1
    assert value_of("(0-1)^(0-3)") == -1
    assert value_of("(0-1)^(0-2)") == 1

  def test_assignment_reads_old_value(self):
    result, printed = run("program int a; begin a = 1; a = a + 1; a = a * 10; print a; end")
    assert printed == ["20"]

  def test_double_evaluates_as_integer(self):
    result, printed = run("program double d; begin d = 7/2; print d; end")
    assert printed == ["3"]

  def test_prints_in_statement_order(self):
    result, printed = run("program int a, b; begin a = 1; print a; b = a + 1; print b; print a + b; end")
    assert printed == ["1", "2", "3"]

  def test_whitespace_insensitive(self):
    result, printed = run("pro\ngram int a;be gin a =1 0; pri nt a;e nd")
    assert printed == ["10"]

  def test_result_carries_final_symbols(self):
    result, printed = run("program int a, b; begin a = 3; b = a ^ 2; end")
    assert isinstance(result, RunResult)
    assert result.exit_code == 0
    assert result.symbols.snapshot() == [("a", "int", 3), ("b", "int", 9)]

  def test_first_declaration_wins(self):
    # Redeclaration is kept as-is: the second 'a' exists but is never reached
    result, printed = run("program int a; int a; begin a=5; print a; end")
    assert printed == ["5"]
    assert result.symbols.snapshot() == [("a", "int", 5), ("a", "int", 0)]


class TestReexecution:
  """Running the same program tree twice gives the same output"""

  def test_same_tree_runs_identically(self, parser, interpreter, printed):
    program = parser.parse_string("program int a; begin a = a + 2; print a; end")
    first = interpreter.run(program).snapshot()
    second = interpreter.run(program).snapshot()
    assert printed == ["2", "2"]
    assert first == second

  def test_execute_source_is_idempotent(self):
    source = "program int a; begin a = 6 * 7; print a; print x; end"
    assert run(source)[1] == run(source)[1] == ["42"]
    assert run(source)[0].exit_code == run(source)[0].exit_code == 1


class TestErrors:
  """Syntax, semantic and runtime failures"""

  def test_undeclared_variable_read(self):
    result, printed = run("program begin print x; end")
    assert result.status == "semantic_error"
    assert isinstance(result.error, UndeclaredVariableError)
    assert result.error.name == "x"
    assert result.exit_code != 0
    assert printed == []

  def test_undeclared_variable_write(self):
    result, printed = run("program int a; begin a = 1; x = a; print a; end")
    assert result.status == "semantic_error"
    assert result.error.name == "x"
    assert printed == []

  def test_semantic_error_keeps_earlier_output(self):
    result, printed = run("program int a; begin print 1; print b; print 2; end")
    assert result.status == "semantic_error"
    assert printed == ["1"]
    assert result.error.span.start_col == len("program int a; begin print 1; print ") + 1

  def test_syntax_error_runs_nothing(self):
    result, printed = run("program begin print 1; print 2 end")
    assert result.status == "syntax_error"
    assert isinstance(result.error, TinyProgSyntaxError)
    assert printed == []

  def test_missing_declaration_terminator(self):
    result, printed = run("program int a begin a=1; end")
    assert result.status == "syntax_error"
    assert "';'" in result.error.message
    assert result.exit_code == 1

  def test_division_by_zero(self):
    result, printed = run("program int a; begin print 1; a = 1 / (a - a); print 2; end")
    assert result.status == "runtime_error"
    assert result.error.message == "Division by zero"
    assert result.error.span is not None
    assert printed == ["1"]

  def test_zero_to_negative_power(self):
    result, printed = run("program begin print 0^(0-1); end")
    assert result.status == "runtime_error"
    assert isinstance(result.error, TinyProgRuntimeError)


class TestLongInputs:
  """Operator chains and literals of any length"""

  def test_thousand_term_sum(self):
    result, printed = run("program int a; begin a=" + "+".join(["1"] * 1000) + "; print a; end")
    assert result.ok, result.error
    assert printed == ["1000"]

  def test_long_mixed_chain_folds_left(self):
    assert value_of("-".join(["1"] * 1000)) == -998
    assert value_of("*".join(["1"] * 999) + "/2") == 0

  def test_long_power_chain(self):
    assert value_of("^".join(["1"] * 1000)) == 1
    assert value_of("^".join(["2"] + ["1"] * 999)) == 2

  def test_operator_applied_before_later_operand_is_read(self):
    result, printed = run("program begin print 1/0 + x; end")
    assert result.status == "runtime_error"
    assert result.error.message == "Division by zero"

  def test_power_operands_read_left_to_right(self):
    result, printed = run("program begin print x^y^0; end")
    assert result.status == "semantic_error"
    assert result.error.name == "x"

  def test_nested_parentheses(self):
    assert value_of("(1+" * 100 + "1" + ")" * 100) == 101

  def test_huge_literal_wraps(self):
    sevens = 7 * (10 ** 5000 - 1) // 9
    expected = sevens % (1 << 32)
    if expected >= 1 << 31:
      expected -= 1 << 32
    assert value_of("7" * 5000) == expected

  def test_huge_literal_saturates(self):
    config = ArithmeticConfig(overflow="saturate")
    assert value_of("1" + "0" * 5000, config) == 2147483647

  def test_huge_literal_overflow_error(self):
    result, printed = run("program begin print 1" + "0" * 5000 + "; end", ArithmeticConfig(overflow="error"))
    assert result.status == "runtime_error"
    assert result.error.message == "Integer overflow: literal <16610-bit value> does not fit in 32 bits"

  def test_too_deep_nesting_is_syntax_error(self):
    result, printed = run("program begin print " + "(" * 500 + "1" + ")" * 500 + "; end")
    assert result.status == "syntax_error"
    assert result.error.message == "expression nested too deeply."


class TestArithmeticConfig:
  """Width and overflow policy"""

  def test_default_is_32_bit_wrap(self):
    config = ArithmeticConfig()
    assert (config.width, config.overflow) == (32, "wrap")
    assert value_of("2147483647 + 1") == -2147483648

  def test_wrap_power(self):
    assert value_of("2^31") == -2147483648
    assert value_of("2^32") == 0
    assert value_of("2^64", ArithmeticConfig(width=64)) == 0

  def test_huge_exponent_tower_wraps_quickly(self):
    assert value_of("2^3^3^3") == 0

  def test_saturate(self):
    config = ArithmeticConfig(overflow="saturate")
    assert value_of("2147483647 + 1", config) == 2147483647
    assert value_of("(0-2)^33", config) == -2147483648
    assert value_of("2^100", config) == 2147483647
    assert value_of("(0-2)^100", config) == 2147483647

  def test_error_policy(self):
    config = ArithmeticConfig(overflow="error")
    result, printed = run("program begin print 2^31; end", config)
    assert result.status == "runtime_error"
    assert "Integer overflow" in result.error.message
    assert value_of("2^30", config) == 1073741824

  def test_literals_are_narrowed(self):
    assert value_of("200", ArithmeticConfig(width=8)) == -56
    assert value_of("200", ArithmeticConfig(width=8, overflow="saturate")) == 127

  def test_minimum_divided_by_minus_one(self):
    config = ArithmeticConfig(width=8)
    assert value_of("(0-128)/(0-1)", config) == -128

  def test_rejects_unknown_settings(self):
    with pytest.raises(ValueError):
      ArithmeticConfig(width=12)
    with pytest.raises(ValueError):
      ArithmeticConfig(overflow="ignore")
