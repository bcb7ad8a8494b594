"""
Error handling for the bftree parser and interpreter with detailed error messages
Errors are described by immutable dicts and raised through thin exception classes
"""

from typing import List, Optional, Dict

from pyparsing import col, lineno


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None,
    filename: str = "<input>"
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'got': got,
        'context': context,
        'suggestions': suggestions or [],
        'filename': filename
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Syntax error in {error['filename']} at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
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
        if i == line_num - 1:  # Error line
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def generate_suggestions(open_loops_seen: int) -> List[str]:
    """Generate helpful suggestions for an unmatched closing bracket"""
    suggestions = ["Remove the extra ']' or add a matching '[' before it"]
    if open_loops_seen == 0:
        suggestions.append("No loop was opened before this point")
    else:
        suggestions.append(f"All {open_loops_seen} loop(s) opened before this point are already closed")
    return suggestions


def unexpected_bracket_error_dict(source_text: str, location: int, open_loops_seen: int,
                                  filename: str = "<input>") -> Dict:
    """Describe an unmatched ']' at an offset of the source text"""
    line_num = lineno(location, source_text)
    col_num = col(location, source_text)

    return make_parse_error(
        message="unexpected closing bracket ']'",
        location=location,
        line=line_num,
        column=col_num,
        got="']'",
        context=get_context_lines(source_text, line_num, col_num),
        suggestions=generate_suggestions(open_loops_seen),
        filename=filename
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class BFParseError(Exception):
    """Syntax error raised while building the program tree"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 got: Optional[str] = None, context: Optional[str] = None,
                 suggestions: Optional[List[str]] = None, filename: str = "<input>"):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        self.filename = filename
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.got, self.context, self.suggestions, self.filename
        )
        return format_parse_error(error_dict)


class BFRuntimeError(Exception):
    """Runtime error raised while executing a program"""
    def __init__(self, message: str, span=None):
        self.message = message
        self.span = span
        super().__init__(message)

    def __str__(self) -> str:
        if self.span:
            return f"{self.message} (at {self.span})"
        return self.message


class BFOutOfBoundsError(BFRuntimeError):
    """The data pointer was moved left of cell 0"""
    def __init__(self, message: str = "segmentation fault", span=None):
        super().__init__(message, span)


class BFInputError(BFRuntimeError):
    """Input was exhausted under the error EOF policy, or was not a single byte"""
    def __init__(self, message: str = "unexpected end of input", span=None):
        super().__init__(message, span)


class BFNestingError(BFRuntimeError):
    """Loops are nested deeper than the Python call stack allows"""
    def __init__(self, message: str = "nesting too deep", span=None):
        super().__init__(message, span)


class BFErrorHandler:
    """Builds enriched errors for one source text"""
    def __init__(self, source_text: str, filename: str = "<input>"):
        self.source_text = source_text
        self.filename = filename

    def unexpected_closing_bracket(self, location: int, open_loops_seen: int = 0) -> BFParseError:
        """Convert the offset of a stray ']' into a BFParseError"""
        error_dict = unexpected_bracket_error_dict(
            self.source_text, location, open_loops_seen, self.filename)
        return BFParseError(
            message=error_dict['message'],
            location=error_dict['location'],
            line=error_dict['line'],
            column=error_dict['column'],
            got=error_dict['got'],
            context=error_dict['context'],
            suggestions=error_dict['suggestions'],
            filename=error_dict['filename']
        )
