"""ccwrap package root."""

from ccwrap.exceptions import CompilationCommandError, NeverThrown
from ccwrap.invariants import never

__all__ = ["__version__", "CompilationCommandError", "NeverThrown", "never"]

__version__ = "0.1.0"
