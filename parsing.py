"""
bftree Parser
Turns source text into a program tree of Op and Loop nodes with source spans
"""

from typing import List, Dict, Any, Union, Tuple, Optional
from dataclasses import dataclass, field
from collections import Counter

from pyparsing import Char, col, lineno

from error_handling import BFErrorHandler, BFParseError
from utilities import SOURCE_ALPHABET, debug_print


@dataclass(frozen=True)
class SourceSpan:
    """Source location of a single instruction character"""
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


TOKEN_TYPES = {
    '>': 'MOVE_RIGHT',
    '<': 'MOVE_LEFT',
    '+': 'INCREMENT',
    '-': 'DECREMENT',
    '.': 'OUTPUT',
    ',': 'INPUT',
    '[': 'LOOP_OPEN',
    ']': 'LOOP_CLOSE',
}


@dataclass(frozen=True)
class Token:
    """Instruction token with source information"""
    type: str
    value: str
    location: int
    span: SourceSpan

    def __str__(self) -> str:
        return f"{self.type}({self.value})"


@dataclass(frozen=True)
class Op:
    """Primitive instruction node"""
    char: str
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return self.char


@dataclass(frozen=True)
class Loop:
    """Loop node; the body runs while the current cell is nonzero"""
    body: Tuple['Node', ...] = ()
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return "[" + "".join(str(node) for node in self.body) + "]"


Node = Union[Op, Loop]
Program = Tuple[Node, ...]


class BFTokenizer:
    """Scans source text for instruction characters, skipping everything else"""

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        # Keep tabs so match offsets line up with the source text
        self.instruction = Char(SOURCE_ALPHABET).parse_with_tabs()

    def tokenize(self, text: str) -> List[Token]:
        """Return the instruction tokens of text in source order"""
        tokens = []
        for result, start, end in self.instruction.scan_string(text):
            ch = result[0]
            line_num = lineno(start, text)
            col_num = col(start, text)
            span = SourceSpan(self.filename, line_num, col_num, line_num, col_num + 1, ch)
            tokens.append(Token(TOKEN_TYPES[ch], ch, start, span))
        return tokens


def build_program(tokens: List[Token], text: str, filename: str = "<input>",
                  debug: bool = False) -> Program:
    """
    Assemble tokens into a program tree.

    Each '[' pushes the current branch and opens a new one; each ']' pops back
    to the enclosing branch and wires the finished loop into it. A ']' with no
    open loop is a syntax error. Loops still open at end of input are closed
    there, so a dangling loop holds every instruction after its '['.
    """
    current: List[Node] = []
    branch_stack: List[Tuple[List[Node], Token]] = []
    loops_opened = 0

    def close_branch() -> List[Node]:
        parent, open_token = branch_stack.pop()
        parent.append(Loop(tuple(current), open_token.span))
        return parent

    for token in tokens:
        if token.value == '[':
            loops_opened += 1
            branch_stack.append((current, token))
            current = []
        elif token.value == ']':
            if not branch_stack:
                handler = BFErrorHandler(text, filename)
                raise handler.unexpected_closing_bracket(token.location, loops_opened)
            current = close_branch()
        else:
            current.append(Op(token.value, token.span))

    if branch_stack and debug:
        for _, open_token in branch_stack:
            debug_print(f"note: '[' at {open_token.span} is never closed; "
                        f"its loop runs to end of input")

    while branch_stack:
        current = close_branch()

    return tuple(current)


class BFParser:
    """Main parser combining tokenizer and tree builder"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse_file(self, filepath: str) -> Program:
        """Parse a source file; any byte sequence is accepted"""
        try:
            with open(filepath, 'r', encoding='latin-1') as f:
                content = f.read()
        except FileNotFoundError:
            raise BFParseError(f"File not found: {filepath}", filename=filepath)
        return self.parse_string(content, filepath)

    def parse_string(self, text: str, filename: str = "<input>") -> Program:
        """Parse source code from a string"""
        tokens = self.tokenize(text, filename)
        if self.debug:
            debug_print(f"Scanned {len(tokens)} instruction tokens from {filename}")
        program = build_program(tokens, text, filename, self.debug)
        if self.debug:
            debug_print(f"Built program: {count_nodes(program)} nodes, "
                        f"nesting depth {max_depth(program)}")
        return program

    def tokenize(self, text: str, filename: str = "<input>") -> List[Token]:
        """Tokenize source code"""
        tokenizer = BFTokenizer(filename)
        return tokenizer.tokenize(text)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> BFParser:
    """Create a parser"""
    return BFParser(debug=debug)


def create_debug_parser() -> BFParser:
    """Create a parser with debug enabled"""
    return BFParser(debug=True)


def parse(text: str, filename: str = "<input>") -> Program:
    """Parse source text with a default parser"""
    return create_parser().parse_string(text, filename)


# Utility functions for working with programs
def count_nodes(program: Program) -> int:
    """Count every node in the tree, loops included"""
    total = 0
    pending = [program]
    while pending:
        nodes = pending.pop()
        total += len(nodes)
        pending.extend(node.body for node in nodes if isinstance(node, Loop))
    return total


def count_ops(program: Program) -> Dict[str, int]:
    """Count primitive instructions by character; loops are counted under '[]'"""
    counts: Counter = Counter()
    pending = [program]
    while pending:
        for node in pending.pop():
            if isinstance(node, Loop):
                counts['[]'] += 1
                pending.append(node.body)
            else:
                counts[node.char] += 1
    return dict(counts)


def max_depth(program: Program) -> int:
    """Deepest loop nesting in the program"""
    deepest = 0
    pending = [(program, 0)]
    while pending:
        nodes, depth = pending.pop()
        deepest = max(deepest, depth)
        pending.extend((node.body, depth + 1) for node in nodes if isinstance(node, Loop))
    return deepest


def program_to_source(program: Program) -> str:
    """Render a program back to canonical source text"""
    return "".join(str(node) for node in program)


def pretty_print_program(program: Program, indent: int = 0) -> str:
    """Pretty print a program tree for debugging"""
    lines = []
    stack = [(iter(program), indent)]
    while stack:
        nodes, depth = stack[-1]
        node = next(nodes, None)
        if node is None:
            stack.pop()
        elif isinstance(node, Loop):
            line = "  " * depth + "LOOP"
            if node.span is not None:
                line += f" @ {node.span.start_line}:{node.span.start_col}"
            lines.append(line)
            stack.append((iter(node.body), depth + 1))
        else:
            lines.append("  " * depth + f"OP({node.char!r})")
    return "".join(line + "\n" for line in lines)


def program_to_dict(program: Program) -> List[Dict[str, Any]]:
    """Convert a program to a list of plain dictionaries"""
    def node_to_dict(node: Node) -> Dict[str, Any]:
        span = {
            "filename": node.span.filename,
            "line": node.span.start_line,
            "col": node.span.start_col,
        } if node.span else None
        if isinstance(node, Loop):
            return {"type": "LOOP", "span": span,
                    "body": [node_to_dict(child) for child in node.body]}
        return {"type": "OP", "value": node.char, "span": span}

    return [node_to_dict(node) for node in program]
