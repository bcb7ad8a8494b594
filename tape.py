"""
bftree Tape - the linear memory of the machine
A growable row of byte cells plus a data pointer
"""

from typing import Dict, List

from error_handling import BFOutOfBoundsError
from utilities import wrap_byte, format_cells


class Tape:
  """
  Memory tape with lazy growth to the right.

  The pointer always addresses an existing cell. Moving right past the last
  cell appends exactly one zero cell; moving left of cell 0 is fatal. Every
  write is reduced modulo 256.
  """

  def __init__(self):
    self.cells = bytearray(1)
    self.pointer = 0

  def __len__(self) -> int:
    return len(self.cells)

  def move_right(self) -> None:
    """Advance the pointer, growing the tape by one cell when needed"""
    self.pointer += 1
    if self.pointer == len(self.cells):
      self.cells.append(0)

  def move_left(self) -> None:
    """Step the pointer back, failing at the left edge"""
    if self.pointer == 0:
      raise BFOutOfBoundsError()
    self.pointer -= 1

  def increment(self) -> None:
    self.cells[self.pointer] = wrap_byte(self.cells[self.pointer] + 1)

  def decrement(self) -> None:
    self.cells[self.pointer] = wrap_byte(self.cells[self.pointer] - 1)

  def read(self) -> int:
    return self.cells[self.pointer]

  def write(self, value: int) -> None:
    self.cells[self.pointer] = wrap_byte(value)

  def reset(self) -> None:
    """Reallocate to a single zero cell with the pointer at 0"""
    self.cells = bytearray(1)
    self.pointer = 0

  def snapshot(self) -> Dict:
    """Return an immutable view of the tape state"""
    return {
        'cells': tuple(self.cells),
        'pointer': self.pointer
    }

  def to_list(self) -> List[int]:
    return list(self.cells)

  def __str__(self) -> str:
    return format_cells(self.cells, self.pointer)


def create_tape() -> Tape:
  """Factory function returning a fresh tape"""
  return Tape()
