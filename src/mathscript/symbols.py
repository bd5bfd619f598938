"""Symbol table with lexical scoping for the MathScript evaluator."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Union

from mathscript.ast_nodes import Compound
from mathscript.errors import (
    ArityMismatchError,
    UndeclaredVariableError,
    UndefinedFunctionError,
)
from mathscript.source import Span
from mathscript.values import Value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FunctionDef:
    """A user-defined function: parameter names and a body, nothing else.

    The defining scope is not stored here; it is the scope the definition
    is found in when the function is called.
    """

    name: str
    params: tuple[str, ...]
    body: Compound
    span: Span | None = None

    @property
    def arity(self) -> int:
        return len(self.params)


@dataclass(frozen=True)
class Builtin:
    """A native function taking already-evaluated arguments."""

    name: str
    arity: int
    fn: Callable[[Sequence[Value]], Value]


Function = Union[FunctionDef, Builtin]

# evaluate(body, frame) -> value of the call
BodyEvaluator = Callable[[Compound, "Scope"], Value]


class Scope:
    """A single lexical scope level holding variables and functions."""

    def __init__(self, parent: Scope | None = None, name: str = "") -> None:
        self.parent = parent
        self.name = name
        self.depth = 0 if parent is None else parent.depth + 1
        self._variables: dict[str, Value] = {}
        self._functions: dict[str, Function] = {}

    def child(self, name: str = "") -> Scope:
        scope = Scope(parent=self, name=name)
        logger.debug("new scope %r at depth %d", name, scope.depth)
        return scope

    # ── Variables ────────────────────────────────────────────────

    def assign_variable(self, name: str, value: Value) -> None:
        """Bind ``name`` in this scope only, shadowing any outer binding."""
        self._variables[name] = value

    def lookup_local(self, name: str) -> Value | None:
        return self._variables.get(name)

    def find_variable(self, name: str, span: Span | None = None) -> Value:
        """Resolve a variable through this scope and its ancestors."""
        scope: Scope | None = self
        while scope is not None:
            value = scope._variables.get(name)
            if value is not None:
                return value
            scope = scope.parent
        raise UndeclaredVariableError(name, span)

    def variables(self) -> dict[str, Value]:
        """Variables defined in this scope (not parents)."""
        return dict(self._variables)

    # ── Functions ────────────────────────────────────────────────

    def define_function(self, function: Function) -> None:
        """Define or redefine a function in this scope."""
        logger.debug("define %s/%d in scope %r", function.name,
                     function.arity, self.name)
        self._functions[function.name] = function

    def find_function(self, name: str, span: Span | None = None) -> tuple[Function, Scope]:
        """Resolve a function, returning it with the scope that defines it."""
        scope: Scope | None = self
        while scope is not None:
            function = scope._functions.get(name)
            if function is not None:
                return function, scope
            scope = scope.parent
        raise UndefinedFunctionError(name, span)

    def call_function(self, name: str, args: Sequence[Value],
                      evaluate: BodyEvaluator, span: Span | None = None) -> Value:
        """Call ``name`` with evaluated arguments.

        A user function runs in a fresh frame whose parent is the scope the
        function was defined in; the frame is dropped when the call returns.
        """
        function, home = self.find_function(name, span)
        if len(args) != function.arity:
            raise ArityMismatchError(name, function.arity, len(args), span)

        if isinstance(function, Builtin):
            logger.debug("call builtin %s", name)
            return function.fn(args)

        frame = home.child(name)
        logger.debug("call %s/%d at depth %d", name, function.arity, frame.depth)
        for param, value in zip(function.params, args):
            frame.assign_variable(param, value)
        return evaluate(function.body, frame)

    def functions(self) -> dict[str, Function]:
        """Functions defined in this scope (not parents)."""
        return dict(self._functions)
