"""
Error handling for the TinyProg interpreter with detailed error messages
Source spans, the error classes shared by every phase, and diagnostic formatting
"""

from dataclasses import dataclass
from typing import Optional
from pyparsing import ParseFatalException, col, lineno


# ============================================================================
# SOURCE LOCATIONS
# ============================================================================

@dataclass(frozen=True)
class SourceSpan:
    """Location of a construct in the original (unstripped) program text"""
    filename: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    text: str = ""

    def __str__(self) -> str:
        if self.start_line == self.end_line:
            return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_col}"
        return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


def make_span(source_text: str, start: int, end: int, filename: str = "<input>") -> SourceSpan:
    """Build a span covering source_text[start:end] using pyparsing's line/column rules"""
    end = max(start, end)
    last = max(start, end - 1)
    return SourceSpan(
        filename,
        lineno(start, source_text), col(start, source_text),
        lineno(last, source_text), col(last, source_text) + 1,
        source_text[start:end]
    )


def format_location(line: int, column: int) -> str:
    return f"(line {line}, column {column})"


# ============================================================================
# ERROR CLASSES
# ============================================================================

class TinyProgSyntaxError(ParseFatalException):
    """
    Grammar violation; stops parsing immediately.

    The location is an index into the original program text, so pyparsing's
    lineno/col/line attributes point at what the user wrote.
    """

    def __init__(self, source_text: str, location: int, message: str, filename: str = "<input>"):
        super().__init__(source_text, location, message)
        self.filename = filename

    @property
    def message(self) -> str:
        return self.msg

    def format_diagnostic(self) -> str:
        """Single-line report: message and location in the original text"""
        return f"Error: {self.msg} {format_location(self.lineno, self.col)}"

    def __str__(self) -> str:
        return self.format_diagnostic()


class TinyProgSemanticsError(Exception):
    """TinyProg semantic error raised while executing a program"""

    def __init__(self, message: str, span: Optional[SourceSpan] = None):
        self.message = message
        self.span = span
        super().__init__(message)

    def format_diagnostic(self) -> str:
        if self.span:
            return f"Semantic error: {self.message} {format_location(self.span.start_line, self.span.start_col)}"
        return f"Semantic error: {self.message}"

    def __str__(self) -> str:
        return self.format_diagnostic()


class TinyProgRuntimeError(Exception):
    """Arithmetic fault (overflow under the error policy, division by zero)"""

    def __init__(self, message: str, span: Optional[SourceSpan] = None):
        self.message = message
        self.span = span
        super().__init__(message)

    def format_diagnostic(self) -> str:
        if self.span:
            return f"Runtime error: {self.message} {format_location(self.span.start_line, self.span.start_col)}"
        return f"Runtime error: {self.message}"

    def __str__(self) -> str:
        return self.format_diagnostic()


# ============================================================================
# REPORTING
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def error_position(error: Exception) -> Optional[tuple]:
    """(line, column) of a TinyProg error, or None when it has no location"""
    if isinstance(error, TinyProgSyntaxError):
        return error.lineno, error.col
    span = getattr(error, 'span', None)
    if span:
        return span.start_line, span.start_col
    return None


def format_error_report(error: Exception, source_text: str, with_context: bool = False) -> str:
    """
    Format a TinyProg error for the error stream.

    The first line is always the single-line diagnostic; the source
    excerpt with a caret is added only when with_context is set.
    """
    report = error.format_diagnostic()
    position = error_position(error)
    if with_context and position:
        report += "\n" + get_context_lines(source_text, position[0], position[1])
    return report
