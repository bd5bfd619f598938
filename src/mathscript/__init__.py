"""MathScript: a small calculator language with matrices and user functions."""

from mathscript.builtins import global_scope
from mathscript.interpreter import Result, ResultKind, evaluate, interpret, run
from mathscript.lexer import tokenize
from mathscript.parser import parse
from mathscript.symbols import Scope

__version__ = "0.1.0"

__all__ = [
    "Result",
    "ResultKind",
    "Scope",
    "__version__",
    "evaluate",
    "global_scope",
    "interpret",
    "parse",
    "run",
    "tokenize",
]
