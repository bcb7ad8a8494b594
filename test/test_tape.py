"""
Tests for the tape memory model
"""

import pytest
from tape import Tape, create_tape
from error_handling import BFOutOfBoundsError, BFRuntimeError


class TestTapeGrowth:
  """Pointer movement and lazy growth"""

  @pytest.fixture
  def tape(self):
    """Provide a fresh tape for each test"""
    return create_tape()

  def test_fresh_tape(self, tape):
    """Test a new tape holds a single zero cell"""
    assert len(tape) == 1
    assert tape.pointer == 0
    assert tape.read() == 0

  def test_move_right_grows_by_exactly_one(self, tape):
    """Test stepping past the end appends one zero cell"""
    tape.move_right()
    assert len(tape) == 2
    assert tape.pointer == 1
    assert tape.read() == 0

    tape.move_right()
    tape.move_right()
    assert len(tape) == 4

  def test_move_right_within_tape_does_not_grow(self, tape):
    """Test moving over existing cells leaves the length alone"""
    tape.move_right()
    tape.move_right()
    tape.move_left()
    tape.move_left()
    tape.move_right()
    assert len(tape) == 3
    assert tape.pointer == 1

  def test_tape_never_shrinks(self, tape):
    """Test walking back to cell 0 keeps every grown cell"""
    for _ in range(5):
      tape.move_right()
    for _ in range(5):
      tape.move_left()
    assert len(tape) == 6
    assert tape.pointer == 0

  def test_move_left_from_zero_fails(self, tape):
    """Test moving left of cell 0 is a segmentation fault"""
    with pytest.raises(BFOutOfBoundsError) as exc_info:
      tape.move_left()
    assert "segmentation fault" in str(exc_info.value)
    assert isinstance(exc_info.value, BFRuntimeError)

  def test_failed_move_left_keeps_pointer_valid(self, tape):
    """Test the pointer still addresses a cell after the failure"""
    with pytest.raises(BFOutOfBoundsError):
      tape.move_left()
    assert tape.pointer == 0
    assert tape.pointer < len(tape)

  def test_growth_preserves_cells(self, tape):
    """Test growing the tape does not disturb earlier values"""
    tape.write(42)
    tape.move_right()
    tape.write(7)
    tape.move_right()
    assert tape.to_list() == [42, 7, 0]


class TestTapeArithmetic:
  """Wraparound on every write"""

  @pytest.fixture
  def tape(self):
    """Provide a fresh tape for each test"""
    return Tape()

  def test_increment_wraps_255_to_0(self, tape):
    """Test incrementing 255 gives 0"""
    tape.write(255)
    tape.increment()
    assert tape.read() == 0

  def test_decrement_wraps_0_to_255(self, tape):
    """Test decrementing 0 gives 255"""
    tape.decrement()
    assert tape.read() == 255

  @pytest.mark.parametrize("value", [0, 1, 127, 128, 254, 255])
  def test_wraparound_law(self, tape, value):
    """Test increment and decrement are modulo 256"""
    tape.write(value)
    tape.increment()
    assert tape.read() == (value + 1) % 256
    tape.write(value)
    tape.decrement()
    assert tape.read() == (value - 1) % 256

  @pytest.mark.parametrize("value,expected", [(256, 0), (300, 44), (-1, 255), (-257, 255)])
  def test_write_reduces_modulo_256(self, tape, value, expected):
    """Test out-of-range writes are normalized, not rejected"""
    tape.write(value)
    assert tape.read() == expected


class TestTapeReset:
  """Explicit reset and inspection"""

  def test_reset_reallocates(self):
    """Test reset returns to one zero cell with the pointer at 0"""
    tape = create_tape()
    tape.write(9)
    tape.move_right()
    tape.move_right()
    tape.reset()
    assert len(tape) == 1
    assert tape.pointer == 0
    assert tape.read() == 0

  def test_snapshot_is_immutable_copy(self):
    """Test a snapshot does not follow later writes"""
    tape = create_tape()
    tape.write(5)
    snap = tape.snapshot()
    tape.increment()
    assert snap == {'cells': (5,), 'pointer': 0}

  def test_str_marks_current_cell(self):
    """Test the rendering highlights the current cell"""
    tape = create_tape()
    tape.write(3)
    tape.move_right()
    assert str(tape) == "[3] [*0*]"
