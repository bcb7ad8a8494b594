"""
Utilities module for the bftree interpreter
Contains common helper functions shared by the tape, parser and REPL
"""

import sys
from typing import List, Sequence, Tuple


CELL_MODULUS = 256

INSTRUCTION_CHARS = "><+-.,"
BRACKET_CHARS = "[]"
SOURCE_ALPHABET = INSTRUCTION_CHARS + BRACKET_CHARS


# ==================== CELL ARITHMETIC ====================

def wrap_byte(value: int) -> int:
  """
  Reduce any integer into the cell range [0, 255]

  Examples:
    wrap_byte(256) -> 0
    wrap_byte(-1) -> 255
  """
  return value % CELL_MODULUS


# ==================== SOURCE TEXT UTILITIES ====================

def bracket_balance(text: str) -> Tuple[int, int]:
  """Return (opening, closing) bracket counts for a chunk of source"""
  return text.count('['), text.count(']')


def is_complete_input(text: str) -> bool:
  """
  Decide whether buffered interactive input is ready to run

  Input is complete once it does not open more loops than it closes.
  A surplus of closing brackets counts as complete so the parser can
  report it.
  """
  opening, closing = bracket_balance(text)
  return opening <= closing


def source_line(text: str, line_num: int) -> str:
  """Return the 1-based source line, or an empty string if out of range"""
  lines = text.split('\n')
  if 1 <= line_num <= len(lines):
    return lines[line_num - 1]
  return ""


# ==================== TAPE RENDERING ====================

def format_cells(cells: Sequence[int], pointer: int) -> str:
  """
  Render tape cells with the current cell highlighted

  Examples:
    format_cells([3, 0], 0) -> "[*3*] [0]"
  """
  parts: List[str] = []
  for index, value in enumerate(cells):
    if index == pointer:
      parts.append(f"[*{value}*]")
    else:
      parts.append(f"[{value}]")
  return ' '.join(parts)


# ==================== DEBUG OUTPUT ====================

def debug_print(message: str) -> None:
  """Emit a trace line on stderr, away from program output"""
  print(message, file=sys.stderr)
