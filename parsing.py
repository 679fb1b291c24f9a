"""
TinyProg Programming Language Parser
Recursive-descent parser producing an immutable program tree with source spans
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union
import sys

from pyparsing import alphas, alphanums, nums

from error_handling import SourceSpan, TinyProgSyntaxError, make_span
from utilities import describe_integer, parse_decimal, strip_whitespace


IDENTIFIER_START = frozenset(alphas)
IDENTIFIER_CHARS = frozenset(alphanums)
DIGITS = frozenset(nums)

TYPE_KEYWORDS = ("int", "double")

# Parentheses recurse through expr/term/power/factor; operator chains do not
MAX_NESTING_DEPTH = 150


# ============================================================================
# PROGRAM TREE
# ============================================================================

class BinaryOperator(Enum):
    """Arithmetic operators, by the character that spells them"""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"


@dataclass(frozen=True)
class Number:
    """Decimal integer literal"""
    value: int
    span: SourceSpan


@dataclass(frozen=True)
class Identifier:
    """Variable read"""
    name: str
    span: SourceSpan


@dataclass(frozen=True)
class BinaryOp:
    """
    Binary arithmetic operation.

    Chains of + - * / are folded left (a-b-c is (a-b)-c); chains of ^
    nest to the right (a^b^c is a^(b^c)).
    """
    operator: BinaryOperator
    left: "Expression"
    right: "Expression"
    span: SourceSpan


Expression = Union[Number, Identifier, BinaryOp]


@dataclass(frozen=True)
class Declaration:
    """`int a, b;` or `double c;`"""
    kind: str
    names: Tuple[str, ...]
    span: SourceSpan


@dataclass(frozen=True)
class Assignment:
    target: str
    expression: Expression
    span: SourceSpan


@dataclass(frozen=True)
class Print:
    expression: Expression
    span: SourceSpan


Statement = Union[Assignment, Print]


@dataclass(frozen=True)
class Program:
    declarations: Tuple[Declaration, ...]
    statements: Tuple[Statement, ...]
    span: SourceSpan


# ============================================================================
# CURSOR
# ============================================================================

class Cursor:
    """
    Read position over whitespace-stripped program text.

    Keeps the offset of every stripped character in the original text so
    errors and spans can be reported where the user wrote them.
    """

    def __init__(self, source_text: str):
        self.source_text = source_text
        self.text, self.offsets = strip_whitespace(source_text)
        self.position = 0

    def matches(self, literal: str) -> bool:
        """True when the text at the current position starts with literal"""
        return self.text.startswith(literal, self.position)

    def advance(self, count: int = 1) -> None:
        self.position += count

    def accept(self, literal: str) -> bool:
        """Consume literal if it is next"""
        if self.matches(literal):
            self.advance(len(literal))
            return True
        return False

    def peek_char(self) -> str:
        """Current character, or '' at end of text"""
        if self.position < len(self.text):
            return self.text[self.position]
        return ""

    def consume_char(self) -> str:
        char = self.peek_char()
        self.position += 1
        return char

    def at_end(self) -> bool:
        return self.position >= len(self.text)

    def location(self, position: Optional[int] = None) -> int:
        """Index in the original text of a stripped position (default: current)"""
        if position is None:
            position = self.position
        if position < len(self.offsets):
            return self.offsets[position]
        return len(self.source_text)


# ============================================================================
# PARSER
# ============================================================================

class Parser:
    """
    Recursive-descent parser for one program text.

    One method per nonterminal:

        program      := "program" declarations "begin" statements "end"
        declaration  := ("int" | "double") identifier ("," identifier)* ";"
        statement    := "print" expr ";" | identifier "=" expr ";"
        expr         := term (("+" | "-") term)*
        term         := power (("*" | "/") power)*
        power        := factor ("^" factor)*      (grouped to the right)
        factor       := "(" expr ")" | integer | identifier

    Keywords are matched as plain prefixes of the stripped text, exactly
    like every other terminal.
    """

    def __init__(self, source_text: str, filename: str = "<input>", debug: bool = False):
        self.cursor = Cursor(source_text)
        self.filename = filename
        self.debug = debug
        self.nesting = 0

    # -- helpers ----------------------------------------------------------

    def _fail(self, message: str) -> None:
        raise TinyProgSyntaxError(
            self.cursor.source_text, self.cursor.location(), message, self.filename
        )

    def _trace(self, rule: str) -> None:
        if self.debug:
            span = self._span_from(self.cursor.position)
            print(f"Parsing {rule} at line {span.start_line}, column {span.start_col}",
                  file=sys.stderr)

    def _span_from(self, start_position: int) -> SourceSpan:
        start = self.cursor.location(start_position)
        if self.cursor.position > start_position:
            end = self.cursor.location(self.cursor.position - 1) + 1
        else:
            end = start
        return make_span(self.cursor.source_text, start, end, self.filename)

    # -- program structure -------------------------------------------------

    def parse_program(self) -> Program:
        self._trace("program")
        start = self.cursor.position
        if not self.cursor.accept("program"):
            self._fail("'program' expected at start.")

        declarations = self._declarations()

        if not self.cursor.accept("begin"):
            self._fail("'begin' expected.")

        statements = self._statements()

        if not self.cursor.accept("end"):
            self._fail("'end' expected.")

        return Program(tuple(declarations), tuple(statements), self._span_from(start))

    def parse_expression(self) -> Expression:
        """Parse an expression that must cover the rest of the text"""
        expression = self._expression()
        if not self.cursor.at_end():
            self._fail("unexpected character in expression.")
        return expression

    def _declarations(self) -> List[Declaration]:
        declarations = []
        while any(self.cursor.matches(keyword) for keyword in TYPE_KEYWORDS):
            declarations.append(self._declaration())
        return declarations

    def _declaration(self) -> Declaration:
        self._trace("declaration")
        start = self.cursor.position
        kind = self._type()
        names = self._id_list()
        if not self.cursor.accept(";"):
            self._fail("';' expected after declaration.")
        return Declaration(kind, tuple(names), self._span_from(start))

    def _type(self) -> str:
        for keyword in TYPE_KEYWORDS:
            if self.cursor.accept(keyword):
                return keyword
        self._fail("type expected (int or double).")

    def _id_list(self) -> List[str]:
        names = [self._identifier()]
        while self.cursor.accept(","):
            names.append(self._identifier())
        return names

    def _identifier(self) -> str:
        if self.cursor.peek_char() not in IDENTIFIER_START:
            self._fail("identifier expected.")
        chars = [self.cursor.consume_char()]
        while self.cursor.peek_char() in IDENTIFIER_CHARS:
            chars.append(self.cursor.consume_char())
        return ''.join(chars)

    def _statements(self) -> List[Statement]:
        statements = []
        while not self.cursor.matches("end") and not self.cursor.at_end():
            statements.append(self._statement())
        return statements

    def _statement(self) -> Statement:
        if self.cursor.matches("print"):
            return self._print_statement()
        return self._assignment()

    def _assignment(self) -> Assignment:
        self._trace("assignment")
        start = self.cursor.position
        target = self._identifier()
        if not self.cursor.accept("="):
            self._fail("'=' expected in assignment statement.")
        expression = self._expression()
        if not self.cursor.accept(";"):
            self._fail("';' expected after assignment.")
        return Assignment(target, expression, self._span_from(start))

    def _print_statement(self) -> Print:
        self._trace("print statement")
        start = self.cursor.position
        self.cursor.advance(len("print"))
        expression = self._expression()
        if not self.cursor.accept(";"):
            self._fail("';' expected after print statement.")
        return Print(expression, self._span_from(start))

    # -- expressions -------------------------------------------------------

    def _expression(self) -> Expression:
        start = self.cursor.position
        node = self._term()
        while self.cursor.peek_char() in ("+", "-"):
            operator = BinaryOperator(self.cursor.consume_char())
            node = BinaryOp(operator, node, self._term(), self._span_from(start))
        return node

    def _term(self) -> Expression:
        start = self.cursor.position
        node = self._power()
        while self.cursor.peek_char() in ("*", "/"):
            operator = BinaryOperator(self.cursor.consume_char())
            node = BinaryOp(operator, node, self._power(), self._span_from(start))
        return node

    def _power(self) -> Expression:
        # a^b^c groups as a^(b^c): collect the chain, then nest from the right
        starts = [self.cursor.position]
        operands = [self._factor()]
        while self.cursor.peek_char() == "^":
            self.cursor.advance()
            starts.append(self.cursor.position)
            operands.append(self._factor())

        node = operands.pop()
        starts.pop()
        while operands:
            node = BinaryOp(BinaryOperator.POWER, operands.pop(), node, self._span_from(starts.pop()))
        return node

    def _factor(self) -> Expression:
        start = self.cursor.position
        char = self.cursor.peek_char()

        if char == "(":
            if self.nesting >= MAX_NESTING_DEPTH:
                self._fail("expression nested too deeply.")
            self.cursor.advance()
            self.nesting += 1
            inner = self._expression()
            self.nesting -= 1
            if not self.cursor.accept(")"):
                self._fail("')' expected.")
            return inner

        if char in DIGITS:
            digits = []
            while self.cursor.peek_char() in DIGITS:
                digits.append(self.cursor.consume_char())
            return Number(parse_decimal(''.join(digits)), self._span_from(start))

        if char in IDENTIFIER_START:
            name = self._identifier()
            return Identifier(name, self._span_from(start))

        self._fail("unexpected character in expression.")


class TinyProgParser:
    """Parser front end; every call gets its own cursor"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse_string(self, text: str, filename: str = "<input>") -> Program:
        """Parse a complete TinyProg program"""
        return Parser(text, filename, self.debug).parse_program()

    def parse_expression(self, text: str, filename: str = "<input>") -> Expression:
        """Parse a single expression that must span the whole text"""
        return Parser(text, filename, self.debug).parse_expression()


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> TinyProgParser:
    """Create a TinyProg parser"""
    return TinyProgParser(debug=debug)


# Utility functions for working with the tree
def pretty_print_tree(node, indent: int = 0) -> str:
    """Pretty print a program tree for debugging"""
    lines = []
    pending = [(node, indent)]
    while pending:
        node, depth = pending.pop()
        pad = "  " * depth
        children = ()

        if isinstance(node, Program):
            lines.append(f"{pad}Program")
            children = node.declarations + node.statements
        elif isinstance(node, Declaration):
            lines.append(f"{pad}Declaration({node.kind}: {', '.join(node.names)})")
        elif isinstance(node, Assignment):
            lines.append(f"{pad}Assignment({node.target!r})")
            children = (node.expression,)
        elif isinstance(node, Print):
            lines.append(f"{pad}Print")
            children = (node.expression,)
        elif isinstance(node, BinaryOp):
            lines.append(f"{pad}BinaryOp({node.operator.value!r})")
            children = (node.left, node.right)
        elif isinstance(node, Number):
            lines.append(f"{pad}Number({describe_integer(node.value)})")
        elif isinstance(node, Identifier):
            lines.append(f"{pad}Identifier({node.name!r})")
        else:
            raise TypeError(f"Not a program tree node: {node!r}")

        # Stack order: first child on top
        pending.extend((child, depth + 1) for child in reversed(children))

    return "".join(line + "\n" for line in lines)
