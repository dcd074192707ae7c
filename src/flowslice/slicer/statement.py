"""
Statements: the nodes the slicer walks.

A statement is one addressable program point in one procedure context.
Besides the ordinary instruction occurrences there are synthetic
statements at procedure boundaries that carry values across call edges:

    caller                                   callee
    ------                                   ------
    PARAM_CALLER(c, i, k)   ------------->   PARAM_CALLEE(t, k)
    NORMAL_RET_CALLER(c, i) <-------------   METHOD_EXIT(t)
                                             METHOD_ENTRY(t)

- NORMAL(c, i): instruction ``i`` of context ``c``
- NORMAL_RET_CALLER(c, i): the value available to the caller right after
  the call at ``i`` returns; this is where the call's result is defined
- PARAM_CALLER(c, i, k): argument ``k`` passed by the call at ``i``
- PARAM_CALLEE(c, k): parameter ``k`` bound on entry (defines value k+1)
- METHOD_ENTRY(c) / METHOD_EXIT(c): the procedure's boundaries. Return
  instructions are represented by METHOD_EXIT.

Statements are immutable and compared by (kind, context, index, argument).
"""

import enum
from typing import Optional

from flowslice.application.errors import OutOfRangeStatement
from flowslice.model import ir
from flowslice.util.canonical import CanonicalObject


class StatementKind(enum.Enum):
    NORMAL = "NORMAL"
    NORMAL_RET_CALLER = "NORMAL_RET_CALLER"
    PARAM_CALLER = "PARAM_CALLER"
    PARAM_CALLEE = "PARAM_CALLEE"
    METHOD_ENTRY = "METHOD_ENTRY"
    METHOD_EXIT = "METHOD_EXIT"


_INSTRUCTION_KINDS = frozenset([
    StatementKind.NORMAL,
    StatementKind.NORMAL_RET_CALLER,
    StatementKind.PARAM_CALLER,
])


class Statement(CanonicalObject):
    """
    A program point in a procedure context.

    Use the factory classmethods rather than the constructor; they check
    that indices are in range for the context.

    Attributes:
        kind: StatementKind
        context: Owning ProcedureContext
        index: Instruction index (NORMAL, NORMAL_RET_CALLER, PARAM_CALLER),
            parameter index (PARAM_CALLEE), or -1
        argument: Argument position for PARAM_CALLER, else -1
    """
    __slots__ = "kind", "context", "index", "argument"

    def __init__(self, kind: StatementKind, context, index: int = -1, argument: int = -1):
        self.kind = kind
        self.context = context
        self.index = index
        self.argument = argument
        self.setCanonical(kind, context, index, argument)

    # ------------------------------------------------------------- factories
    @staticmethod
    def _instructionAt(context, index):
        instructions = context.instructions
        if not isinstance(index, int) or not 0 <= index < len(instructions):
            raise OutOfRangeStatement(context, index)
        return instructions[index]

    @staticmethod
    def _invokeAt(context, index):
        instruction = Statement._instructionAt(context, index)
        if not isinstance(instruction, ir.Invoke):
            raise OutOfRangeStatement(
                context, index, "instruction %d of %r is not a call" % (index, context)
            )
        return instruction

    @classmethod
    def normal(cls, context, index: int) -> "Statement":
        cls._instructionAt(context, index)
        return cls(StatementKind.NORMAL, context, index)

    @classmethod
    def return_caller(cls, context, index: int) -> "Statement":
        cls._invokeAt(context, index)
        return cls(StatementKind.NORMAL_RET_CALLER, context, index)

    @classmethod
    def param_caller(cls, context, index: int, argument: int) -> "Statement":
        invoke = cls._invokeAt(context, index)
        if not 0 <= argument < len(invoke.args):
            raise OutOfRangeStatement(
                context, argument, "call %d of %r has no argument %r" % (index, context, argument)
            )
        return cls(StatementKind.PARAM_CALLER, context, index, argument)

    @classmethod
    def param_callee(cls, context, param: int) -> "Statement":
        if not 0 <= param < context.procedure.params:
            raise OutOfRangeStatement(
                context, param, "%r has no parameter %r" % (context, param)
            )
        return cls(StatementKind.PARAM_CALLEE, context, param)

    @classmethod
    def method_entry(cls, context) -> "Statement":
        return cls(StatementKind.METHOD_ENTRY, context)

    @classmethod
    def method_exit(cls, context) -> "Statement":
        return cls(StatementKind.METHOD_EXIT, context)

    # ------------------------------------------------------------- accessors
    @property
    def procedure(self):
        return self.context.procedure

    @property
    def instruction(self) -> Optional[ir.Instruction]:
        """The underlying instruction, or None for boundary statements."""
        if self.kind in _INSTRUCTION_KINDS:
            return self.context.instructions[self.index]
        return None

    @property
    def is_call(self) -> bool:
        return self.kind is StatementKind.NORMAL and isinstance(self.instruction, ir.Invoke)

    def sort_key(self):
        """Stable ordering for printing; slices themselves are unordered."""
        return (
            self.context.method.signature,
            self.context.context,
            self.index,
            self.kind.value,
            self.argument,
        )

    def __str__(self):
        where = "%s @ %s" % (self.context.method, self.context.context)
        kind = self.kind
        if kind is StatementKind.NORMAL:
            return "%s %s[%d] %r" % (kind.name, where, self.index, self.instruction)
        if kind is StatementKind.NORMAL_RET_CALLER:
            return "%s %s[%d] %r" % (kind.name, where, self.index, self.instruction)
        if kind is StatementKind.PARAM_CALLER:
            return "%s %s[%d] arg %d" % (kind.name, where, self.index, self.argument)
        if kind is StatementKind.PARAM_CALLEE:
            return "%s %s param %d" % (kind.name, where, self.index)
        return "%s %s" % (kind.name, where)

    def __repr__(self):
        return "Statement(%s)" % self
