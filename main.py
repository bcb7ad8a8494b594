"""
bftree - Main Entry Point
A tree-walking interpreter for the eight-instruction tape language
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional
import os

# Readline support for history
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import count_ops, create_debug_parser, create_parser, pretty_print_program
from interpreter import BFInterpreter, create_interpreter
from error_handling import BFParseError, BFRuntimeError
from streams import EOF_POLICIES, DEFAULT_EOF_POLICY
from utilities import is_complete_input, source_line


VERSION = 'bftree v1.0.0'
PROMPT = "bf> "
CONTINUATION_PROMPT = "... "
HISTORY_FILE = "~/.bftree_history"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='bftree - tree-walking interpreter for a tape-based esoteric language',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s hello.bf                # Run a script
  %(prog)s lib.bf main.bf          # Run scripts concatenated in order
  %(prog)s < hello.bf              # Read the program from stdin
  %(prog)s -i                      # Interactive mode
  %(prog)s --parse hello.bf        # Parse file and show the program tree
  %(prog)s --eof error cat.bf      # Fail when ',' hits end of input
        """
  )

  parser.add_argument(
      'scripts',
      nargs='*',
      help="script files to execute ('-' reads standard input)"
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse source and show the program tree (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Trace parsing and execution on stderr'
  )

  parser.add_argument(
      '--eof',
      choices=EOF_POLICIES,
      default=DEFAULT_EOF_POLICY,
      help="what ',' does at end of input (default: %(default)s)"
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_sources(paths: List[str]) -> str:
  """Concatenate script contents in order; '-' is standard input"""
  chunks = []
  for path in paths:
    if path == '-':
      chunks.append(sys.stdin.buffer.read().decode('latin-1'))
    else:
      with open(path, 'r', encoding='latin-1') as f:
        chunks.append(f.read())
  return ''.join(chunks)


def source_name(paths: List[str]) -> str:
  if len(paths) == 1:
    return '<stdin>' if paths[0] == '-' else paths[0]
  return '<scripts>'


def parse_file(paths: List[str], debug: bool = False) -> None:
  """Parse scripts and show the program tree"""
  name = source_name(paths)
  try:
    parser = create_debug_parser() if debug else create_parser()
    if len(paths) == 1 and paths[0] != '-':
      program = parser.parse_file(paths[0])
    else:
      program = parser.parse_string(read_sources(paths), name)
    print(f"Parsed {len(program)} top-level nodes from {name}:")
    print("=" * 50)
    print(pretty_print_program(program), end='')
    print("=" * 50)
    counts = ", ".join(f"{op}={n}" for op, n in sorted(count_ops(program).items()))
    print(f"Instruction counts: {counts or '(none)'}")

  except FileNotFoundError as e:
    print(f"Error: Script file '{e.filename}' not found", file=sys.stderr)
    print(f"  Hint: Check the file path and make sure the file exists", file=sys.stderr)
    sys.exit(1)
  except PermissionError as e:
    print(f"Error: Permission denied reading '{e.filename}'", file=sys.stderr)
    sys.exit(1)
  except BFParseError as e:
    print(f"Parse error in '{name}':\n{e}", file=sys.stderr)
    sys.exit(1)


def run_script_files(paths: List[str], debug: bool = False,
                     eof_policy: str = DEFAULT_EOF_POLICY) -> None:
  """Run scripts as one program on a fresh tape"""
  name = source_name(paths)
  try:
    source = read_sources(paths)
    interpreter = create_interpreter(debug=debug, eof_policy=eof_policy)
    interpreter.run(source, name)

  except FileNotFoundError as e:
    print(f"Error: Script file '{e.filename}' not found", file=sys.stderr)
    print(f"  Hint: Check the file path and make sure the file exists", file=sys.stderr)
    sys.exit(1)
  except PermissionError as e:
    print(f"Error: Permission denied reading '{e.filename}'", file=sys.stderr)
    print(f"  Hint: Make sure you have read permissions for this file", file=sys.stderr)
    sys.exit(1)
  except BFParseError as e:
    print(f"Parse error in '{name}':\n{e}", file=sys.stderr)
    sys.exit(1)
  except BFRuntimeError as e:
    print(f"\n{'='*70}", file=sys.stderr)
    print(f"Runtime Error in '{name}'", file=sys.stderr)
    print(f"{'='*70}", file=sys.stderr)
    print(f"\nError: {e.message}", file=sys.stderr)
    if e.span:
      print(f"\nLocation: {e.span}", file=sys.stderr)
      line = source_line(source, e.span.start_line)
      print(f"\nSource:", file=sys.stderr)
      print(f"  {line}", file=sys.stderr)
      print(f"  {' ' * (e.span.start_col - 1)}^", file=sys.stderr)
    if debug:
      print(f"\nTape at error:\n  {interpreter.dump_tape()}", file=sys.stderr)
    print(f"\n{'='*70}\n", file=sys.stderr)
    sys.exit(1)


def setup_readline():
  """Setup readline with persistent history"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  import atexit
  atexit.register(save_history, history_file)


def save_history(history_file: str) -> None:
  try:
    readline.write_history_file(history_file)
  except OSError:
    pass


def print_help() -> None:
  print("REPL Commands:")
  print("  r               - Reset tape and pointer")
  print("  d               - Show the tape, current cell marked [*n*]")
  print("  q               - Exit REPL")
  print("  :parse <code>   - Show the program tree for <code>")
  print("  :help           - Show this help")
  print()
  print("Input that opens more loops than it closes continues on the next line.")


def handle_line(interpreter: BFInterpreter, buffer: str, line: str) -> Optional[str]:
  """
  Process one line of interactive input.

  Returns the new buffer contents, or None when the session should end.
  """
  if not buffer:
    command = line.strip()
    if command == 'q':
      return None
    if command == 'r':
      interpreter.reset()
      return ""
    if command == 'd':
      print(interpreter.dump_tape())
      return ""
    if command == ':help':
      print_help()
      return ""
    if command.startswith(':parse '):
      try:
        program = interpreter.parser.parse_string(command[len(':parse '):])
        print(pretty_print_program(program), end='')
      except BFParseError as e:
        print(f"Parse error: {e}")
      return ""

  buffer += line
  if not is_complete_input(buffer):
    return buffer

  try:
    interpreter.run(buffer, "<repl>")
  except BFParseError as e:
    print(f"Parse error: {e}")
  except BFRuntimeError as e:
    print(f"\nRuntime Error:")
    print(f"  {e.message}")
    if e.span:
      print(f"  Location: {e.span}")
  return ""


def run_interactive_mode(debug: bool = False, eof_policy: str = DEFAULT_EOF_POLICY) -> None:
  """Run the interpreter in interactive mode with one persistent tape"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'q' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  interpreter = create_interpreter(debug=debug, eof_policy=eof_policy)
  buffer = ""

  while True:
    try:
      line = input(CONTINUATION_PROMPT if buffer else PROMPT)
      buffer = handle_line(interpreter, buffer, line)
      if buffer is None:
        break
      sys.stdout.flush()

    except KeyboardInterrupt:
      # Ctrl-C drops whatever was buffered
      buffer = ""
      print()
    except EOFError:
      print("\nGoodbye!")
      break


def main() -> None:
  """Main entry point for bftree"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  for path in args.scripts:
    if path != '-' and not Path(path).exists():
      print(f"Error: Script file '{path}' does not exist", file=sys.stderr)
      sys.exit(1)

  if args.interactive:
    run_interactive_mode(debug=args.debug, eof_policy=args.eof)
    return

  paths = args.scripts
  if not paths:
    if sys.stdin.isatty():
      run_interactive_mode(debug=args.debug, eof_policy=args.eof)
      return
    paths = ['-']

  if args.parse:
    parse_file(paths, debug=args.debug)
  else:
    run_script_files(paths, debug=args.debug, eof_policy=args.eof)


if __name__ == "__main__":
  main()
