"""
bftree Interpreter
Tree-walking executor over the program produced by the parser
Side effects (tape mutation, byte I/O) happen only in the primitive operations
"""

import sys
from typing import Any, BinaryIO, Callable, Dict, Optional

from error_handling import BFInputError, BFNestingError, BFRuntimeError
from parsing import Loop, Op, Program, create_parser
from streams import DEFAULT_EOF_POLICY, flush_output, make_io, read_byte, write_byte
from tape import Tape, create_tape
from utilities import debug_print


# ============================================================================
# PRIMITIVE OPERATIONS
# ============================================================================

def op_move_right(tape: Tape, io: Dict) -> None:
  tape.move_right()


def op_move_left(tape: Tape, io: Dict) -> None:
  tape.move_left()


def op_increment(tape: Tape, io: Dict) -> None:
  tape.increment()


def op_decrement(tape: Tape, io: Dict) -> None:
  tape.decrement()


def op_output(tape: Tape, io: Dict) -> None:
  """Emit the current cell as a raw byte"""
  write_byte(io, tape.read())


def op_input(tape: Tape, io: Dict) -> None:
  """
  Read one byte into the current cell.

  At end of input the EOF policy decides: 'zero' stores 0, 'unchanged'
  leaves the cell alone, 'error' aborts the run.
  """
  # Anything already printed must be visible before we block
  flush_output(io)
  value = read_byte(io)
  if value is None:
    policy = io['eof_policy']
    if policy == 'zero':
      tape.write(0)
    elif policy == 'error':
      raise BFInputError()
    return
  tape.write(value)


OPERATIONS: Dict[str, Callable[[Tape, Dict], None]] = {
    '>': op_move_right,
    '<': op_move_left,
    '+': op_increment,
    '-': op_decrement,
    '.': op_output,
    ',': op_input,
}


# ============================================================================
# EXECUTION FUNCTIONS
# ============================================================================

def execute_op(node: Op, tape: Tape, io: Dict, debug: bool = False) -> None:
  """Run one primitive instruction, tagging runtime errors with its location"""
  if debug:
    debug_print(f"Executing: {node.char} ptr={tape.pointer} cell={tape.read()}")
  try:
    OPERATIONS[node.char](tape, io)
  except BFRuntimeError as e:
    if e.span is None:
      e.span = node.span
    raise


def execute_program(program: Program, tape: Tape, io: Dict, debug: bool = False) -> None:
  """
  Execute every node of a program in order.

  A loop whose guard cell is 0 is skipped. Otherwise its body is run in
  full, then the guard is checked again; this repeats until the current
  cell is 0 after a pass. Recursion depth follows loop nesting only.
  """
  for node in program:
    if isinstance(node, Loop):
      if tape.read() == 0:
        if debug:
          debug_print(f"Skipping loop at {node.span}")
        continue
      if debug:
        debug_print(f"Entering loop at {node.span}")
      while True:
        execute_program(node.body, tape, io, debug)
        if tape.read() == 0:
          break
      if debug:
        debug_print(f"Leaving loop at {node.span}")
    else:
      execute_op(node, tape, io, debug)


# ============================================================================
# INTERPRETER SESSION
# ============================================================================

class BFInterpreter:
  """One interpreter session: a persistent tape shared by every run"""

  def __init__(self, debug: bool = False, input_stream: Optional[Any] = None,
               output_stream: Optional[BinaryIO] = None,
               eof_policy: str = DEFAULT_EOF_POLICY):
    self.debug = debug
    self.parser = create_parser(debug)
    self.tape = create_tape()
    self.io = make_io(input_stream, output_stream, eof_policy)

  def run(self, source: str, filename: str = "<input>") -> None:
    """Parse and execute source text against the session tape"""
    program = self.parser.parse_string(source, filename)
    self.execute(program)

  def execute(self, program: Program) -> None:
    """Execute an already parsed program; output is flushed even on failure"""
    try:
      execute_program(program, self.tape, self.io, self.debug)
    except RecursionError:
      raise BFNestingError(
          f"nesting too deep: the interpreter stack allows about {sys.getrecursionlimit()} loop levels"
      ) from None
    finally:
      flush_output(self.io)

  def reset(self) -> None:
    """Reallocate the tape to a single zero cell"""
    self.tape.reset()
    if self.debug:
      debug_print("Tape reset")

  def dump_tape(self) -> str:
    return str(self.tape)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False, **options) -> BFInterpreter:
  """Factory function returning an interpreter session"""
  return BFInterpreter(debug=debug, **options)


def create_debug_interpreter(**options) -> BFInterpreter:
  """Factory function returning a debug interpreter session"""
  return create_interpreter(debug=True, **options)


def run_source(source: str, input_stream: Optional[Any] = None,
               output_stream: Optional[BinaryIO] = None,
               eof_policy: str = DEFAULT_EOF_POLICY) -> Tape:
  """Run source text on a fresh tape and return the final tape"""
  interpreter = create_interpreter(
      input_stream=input_stream, output_stream=output_stream, eof_policy=eof_policy)
  interpreter.run(source)
  return interpreter.tape
