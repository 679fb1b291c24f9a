"""
Utilities module for the TinyProg interpreter
Source preprocessing and fixed-width integer arithmetic helpers
"""

from typing import Callable, List, Optional, Tuple
import operator

from error_handling import TinyProgRuntimeError


OVERFLOW_POLICIES = ("wrap", "saturate", "error")
INTEGER_WIDTHS = (8, 16, 32, 64)


# ==================== SOURCE PREPROCESSING ====================

def strip_whitespace(text: str) -> Tuple[str, List[int]]:
  """
  Remove every whitespace character from program text

  Args:
    text: Original program text

  Returns:
    (stripped text, offsets) where offsets[i] is the index in the
    original text of stripped character i

  Examples:
    strip_whitespace("a = 1") -> ("a=1", [0, 2, 4])
  """
  kept = []
  offsets = []
  for index, char in enumerate(text):
    if not char.isspace():
      kept.append(char)
      offsets.append(index)
  return ''.join(kept), offsets


# Python refuses int(str) beyond a few thousand digits; stay well below it
DECIMAL_CHUNK_DIGITS = 1000
MAX_SHOWN_BITS = 1024


def parse_decimal(digits: str) -> int:
  """
  Exact value of a decimal digit string of any length

  Examples:
    parse_decimal("0042") -> 42
  """
  value = 0
  for start in range(0, len(digits), DECIMAL_CHUNK_DIGITS):
    chunk = digits[start:start + DECIMAL_CHUNK_DIGITS]
    value = value * 10 ** len(chunk) + int(chunk)
  return value


def describe_integer(value: int) -> str:
  """Decimal text of value, or its size when it is too large to print"""
  if value.bit_length() > MAX_SHOWN_BITS:
    return f"<{value.bit_length()}-bit value>"
  return str(value)


# ==================== INTEGER RANGE ====================

def integer_bounds(width: int) -> Tuple[int, int]:
  """Smallest and largest two's-complement value of the given width"""
  return -(1 << (width - 1)), (1 << (width - 1)) - 1


def wrap_integer(value: int, width: int) -> int:
  """Two's-complement wraparound of value into width bits"""
  modulus = 1 << width
  value %= modulus
  if value >= modulus >> 1:
    value -= modulus
  return value


def narrow_integer(value: int, width: int, overflow: str, what: str = "value") -> int:
  """
  Fit an exact integer into the configured width

  Args:
    value: Exact result of an operation
    width: Bit width of the value type
    overflow: One of OVERFLOW_POLICIES
    what: Description used in the overflow error message

  Returns:
    The narrowed value

  Raises:
    TinyProgRuntimeError when the policy is "error" and value does not fit
  """
  low, high = integer_bounds(width)
  if low <= value <= high:
    return value
  if overflow == "wrap":
    return wrap_integer(value, width)
  if overflow == "saturate":
    return low if value < low else high
  raise TinyProgRuntimeError(
    f"Integer overflow: {what} {describe_integer(value)} does not fit in {width} bits"
  )


# ==================== ARITHMETIC ====================

def truncating_divide(dividend: int, divisor: int) -> int:
  """
  Integer division rounding toward zero

  Raises:
    TinyProgRuntimeError on division by zero
  """
  if divisor == 0:
    raise TinyProgRuntimeError("Division by zero")
  quotient = abs(dividend) // abs(divisor)
  return -quotient if (dividend < 0) != (divisor < 0) else quotient


def integer_power(base: int, exponent: int, width: int, overflow: str) -> int:
  """
  Raise base to exponent and narrow the result

  The exact result is never materialized when it cannot fit: wraparound
  uses modular exponentiation, the other policies detect overflow from
  the operand sizes.

  Raises:
    TinyProgRuntimeError for 0 to a negative power, or on overflow with
    the "error" policy
  """
  if exponent < 0:
    if base == 0:
      raise TinyProgRuntimeError("Zero cannot be raised to a negative power")
    if base == 1:
      return 1
    if base == -1:
      return -1 if exponent % 2 else 1
    return 0

  if overflow == "wrap":
    return wrap_integer(pow(base, exponent, 1 << width), width)

  if abs(base) >= 2 and exponent >= width:
    # |base| ** exponent >= 2 ** width, beyond either bound
    if overflow == "error":
      raise TinyProgRuntimeError(
        f"Integer overflow: power {base}^{exponent} does not fit in {width} bits"
      )
    low, high = integer_bounds(width)
    return low if base < 0 and exponent % 2 == 1 else high

  return narrow_integer(base ** exponent, width, overflow, "power")


def binary_arithmetic_op(
  op: Callable[[int, int], int],
  op_name: str
) -> Callable[[int, int, int, str], int]:
  """
  Factory for fixed-width binary arithmetic operations

  Args:
    op: Exact integer operation (e.g., operator.add)
    op_name: Name for error messages

  Returns:
    Function (x, y, width, overflow) -> narrowed result

  Examples:
    add = binary_arithmetic_op(operator.add, "sum")
    add(2147483647, 1, 32, "wrap") -> -2147483648
  """
  def arithmetic(x: int, y: int, width: int, overflow: str) -> int:
    return narrow_integer(op(x, y), width, overflow, op_name)

  return arithmetic


ARITHMETIC_OPS = {
  '+': binary_arithmetic_op(operator.add, "sum"),
  '-': binary_arithmetic_op(operator.sub, "difference"),
  '*': binary_arithmetic_op(operator.mul, "product"),
  '/': binary_arithmetic_op(truncating_divide, "quotient"),
  '^': integer_power,
}


def lookup_arithmetic_op(symbol: str) -> Optional[Callable[[int, int, int, str], int]]:
  """Return the fixed-width implementation of an operator symbol"""
  return ARITHMETIC_OPS.get(symbol)
