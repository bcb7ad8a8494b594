"""
bftree I/O streams
Byte-oriented input source and output sink used by the ',' and '.' instructions
"""

import os
import sys
from typing import Any, BinaryIO, Dict, Optional

from error_handling import BFInputError

# Raw terminal support for unbuffered, unechoed single-key reads
try:
  import termios
  import tty
  TERMIOS_AVAILABLE = True
except ImportError:
  TERMIOS_AVAILABLE = False


EOF_POLICIES = ('zero', 'unchanged', 'error')
DEFAULT_EOF_POLICY = 'zero'


# ============================================================================
# TERMINAL INPUT
# ============================================================================

class TerminalReader:
  """Reads single keystrokes from a terminal without line editing or echo"""

  def __init__(self, stream: Any):
    self.stream = stream
    self.fd = stream.fileno()

  def read(self, size: int = 1) -> bytes:
    old_settings = termios.tcgetattr(self.fd)
    try:
      tty.setraw(self.fd)
      return os.read(self.fd, size)
    finally:
      termios.tcsetattr(self.fd, termios.TCSADRAIN, old_settings)


def default_input_stream() -> Any:
  """Raw reader on a terminal stdin, the binary stdin buffer otherwise"""
  if TERMIOS_AVAILABLE and sys.stdin.isatty():
    return TerminalReader(sys.stdin)
  return sys.stdin.buffer


def default_output_stream() -> BinaryIO:
  return sys.stdout.buffer


# ============================================================================
# STREAM PAIR (Immutable Dictionary)
# ============================================================================

def make_io(input_stream: Optional[Any] = None,
            output_stream: Optional[BinaryIO] = None,
            eof_policy: str = DEFAULT_EOF_POLICY) -> Dict:
  """Create an immutable description of the program's input and output"""
  if eof_policy not in EOF_POLICIES:
    raise ValueError(f"Unknown EOF policy '{eof_policy}', expected one of {', '.join(EOF_POLICIES)}")
  return {
      'input': input_stream if input_stream is not None else default_input_stream(),
      'output': output_stream if output_stream is not None else default_output_stream(),
      'eof_policy': eof_policy
  }


# ============================================================================
# PRIMITIVES
# ============================================================================

def write_byte(io: Dict, value: int) -> None:
  """Emit one raw byte to the output sink"""
  io['output'].write(bytes((value,)))


def read_byte(io: Dict) -> Optional[int]:
  """
  Read one raw byte from the input source, None at end of input.

  Text streams are accepted when every character is latin-1; anything
  wider cannot be stored in a cell and raises BFInputError.
  """
  data = io['input'].read(1)
  if not data:
    return None
  if isinstance(data, str):
    try:
      data = data.encode('latin-1')
    except UnicodeEncodeError:
      raise BFInputError(f"input character {data!r} does not fit in one byte") from None
  return data[0]


def flush_output(io: Dict) -> None:
  output = io['output']
  if hasattr(output, 'flush'):
    output.flush()
