"""
TinyProg Semantics - Symbol Table
Declared variables, their kinds and current integer values
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple
import sys

from error_handling import SourceSpan, TinyProgSemanticsError


# ============================================================================
# DATA STRUCTURES
# ============================================================================

class VariableKind(Enum):
  """Declared type of a variable. Evaluation is integral for both kinds."""
  INT = "int"
  DOUBLE = "double"


@dataclass
class Variable:
  name: str
  kind: VariableKind
  value: int = 0


class UndeclaredVariableError(TinyProgSemanticsError):
  """Read or write of a name that was never declared"""

  def __init__(self, name: str, span: Optional[SourceSpan] = None):
    self.name = name
    super().__init__(f"Undeclared variable '{name}'", span)


# ============================================================================
# SYMBOL TABLE
# ============================================================================

class SymbolTable:
  """
  Append-only registry of declared variables.

  Lookups scan in declaration order and stop at the first entry with a
  matching name. Declaring a name twice appends a second entry that no
  lookup can ever reach; reads and writes keep going to the first one.
  """

  def __init__(self, debug: bool = False):
    self._variables: List[Variable] = []
    self.debug = debug

  def declare(self, name: str, kind: VariableKind) -> Variable:
    """Append a new variable with value 0 (duplicates are not rejected)"""
    variable = Variable(name, kind)
    if self.debug and self.lookup(name) is not None:
      print(f"Note: '{name}' declared again; the new entry is shadowed by the first",
            file=sys.stderr)
    self._variables.append(variable)
    return variable

  def lookup(self, name: str) -> Optional[Variable]:
    """First variable declared under name, or None"""
    for variable in self._variables:
      if variable.name == name:
        return variable
    return None

  def read(self, name: str, span: Optional[SourceSpan] = None) -> int:
    variable = self.lookup(name)
    if variable is None:
      raise UndeclaredVariableError(name, span)
    return variable.value

  def write(self, name: str, value: int, span: Optional[SourceSpan] = None) -> None:
    variable = self.lookup(name)
    if variable is None:
      raise UndeclaredVariableError(name, span)
    variable.value = value

  def snapshot(self) -> List[Tuple[str, str, int]]:
    """(name, kind, value) for every entry, in declaration order"""
    return [(v.name, v.kind.value, v.value) for v in self._variables]

  def __len__(self) -> int:
    return len(self._variables)

  def __iter__(self) -> Iterator[Variable]:
    return iter(self._variables)
