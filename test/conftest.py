"""
Test configuration for bftree tests
"""

import io
import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter


@pytest.fixture
def output():
  """In-memory byte sink for program output"""
  return io.BytesIO()


@pytest.fixture
def make_interpreter(output):
  """Build an interpreter session reading the given bytes as input"""
  def factory(stdin: bytes = b"", **options):
    return create_interpreter(input_stream=io.BytesIO(stdin), output_stream=output, **options)
  return factory
