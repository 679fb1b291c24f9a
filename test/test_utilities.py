"""
Tests for the source and integer helpers
"""

import pytest

from error_handling import TinyProgRuntimeError
from utilities import (
  describe_integer,
  integer_bounds,
  integer_power,
  lookup_arithmetic_op,
  narrow_integer,
  parse_decimal,
  strip_whitespace,
  truncating_divide,
  wrap_integer,
)


class TestStripWhitespace:

  def test_offsets_track_original_positions(self):
    assert strip_whitespace("a = 1") == ("a=1", [0, 2, 4])

  def test_all_whitespace_kinds(self):
    text, offsets = strip_whitespace(" \tx\r\n y\f")
    assert text == "xy"
    assert offsets == [2, 6]

  def test_empty(self):
    assert strip_whitespace("   ") == ("", [])


class TestDecimal:

  def test_leading_zeros(self):
    assert parse_decimal("0042") == 42

  def test_longer_than_int_string_limit(self):
    assert parse_decimal("7" * 5000) == 7 * (10 ** 5000 - 1) // 9
    assert parse_decimal("1" + "0" * 9999) == 10 ** 9999

  def test_describe_small_and_huge(self):
    assert describe_integer(-300) == "-300"
    assert describe_integer(1 << 2000) == "<2001-bit value>"

  def test_narrow_error_message_for_huge_value(self):
    with pytest.raises(TinyProgRuntimeError) as exc_info:
      narrow_integer(10 ** 5000, 32, "error", "literal")
    assert exc_info.value.message == "Integer overflow: literal <16610-bit value> does not fit in 32 bits"


class TestIntegers:

  def test_bounds(self):
    assert integer_bounds(8) == (-128, 127)
    assert integer_bounds(64) == (-(2 ** 63), 2 ** 63 - 1)

  @pytest.mark.parametrize("value, expected", [
    (127, 127), (128, -128), (255, -1), (256, 0), (-129, 127),
  ])
  def test_wrap(self, value, expected):
    assert wrap_integer(value, 8) == expected

  def test_narrow_error_message(self):
    with pytest.raises(TinyProgRuntimeError) as exc_info:
      narrow_integer(300, 8, "error", "sum")
    assert exc_info.value.message == "Integer overflow: sum 300 does not fit in 8 bits"

  @pytest.mark.parametrize("dividend, divisor, expected", [
    (7, 2, 3), (-7, 2, -3), (7, -2, -3), (-7, -2, 3), (0, 5, 0), (6, 3, 2),
  ])
  def test_truncating_divide(self, dividend, divisor, expected):
    assert truncating_divide(dividend, divisor) == expected

  def test_divide_by_zero(self):
    with pytest.raises(TinyProgRuntimeError):
      truncating_divide(1, 0)

  def test_power_error_policy_large_exponent(self):
    with pytest.raises(TinyProgRuntimeError) as exc_info:
      integer_power(3, 1000000, 32, "error")
    assert "power 3^1000000" in exc_info.value.message

  def test_power_of_small_bases_never_overflows(self):
    assert integer_power(1, 10 ** 9, 32, "error") == 1
    assert integer_power(-1, 10 ** 9 + 1, 32, "saturate") == -1
    assert integer_power(0, 10 ** 9, 32, "error") == 0

  def test_operator_table(self):
    assert lookup_arithmetic_op('*')(6, 7, 32, "wrap") == 42
    assert lookup_arithmetic_op('^')(2, 10, 16, "wrap") == 1024
    assert lookup_arithmetic_op('%') is None
