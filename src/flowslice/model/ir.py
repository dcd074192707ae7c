"""
Register-based intermediate representation of procedure bodies.

Each procedure body is an immutable tuple of instructions. Values are
positive integers local to a procedure; a procedure with ``n`` parameters
receives them in values ``1..n``. Every other value is defined by exactly
one instruction.

**Instruction Overview:**
- Assign / Phi: compute a value from operand values
- New: allocate an object
- GetField / PutField: read / write a heap location (``ref=None`` for a
  static field)
- Invoke: call a declared target; its result is defined at the post-call
  statement, not at the call itself
- Branch / Goto: intraprocedural control transfer by instruction index
- Return: leave the procedure, optionally with a value

The slicer only needs three facts from an instruction: the value it
defines, the values it uses, and the heap location it reads or writes.
"""

from typing import Optional, Sequence, Tuple

from flowslice.model.types import MethodReference


class Instruction(object):
    """Base class for IR instructions."""
    __slots__ = ()

    opname = "?"

    def defs(self) -> Tuple[int, ...]:
        """Values defined by this instruction."""
        return ()

    def uses(self) -> Tuple[int, ...]:
        """Values used by this instruction, in operand order."""
        return ()

    def jumpTargets(self) -> Tuple[int, ...]:
        """Instruction indices this instruction may jump to."""
        return ()

    @property
    def fallsThrough(self) -> bool:
        """True if control may continue with the next instruction."""
        return True


def _values(values) -> str:
    return ", ".join("v%d" % v for v in values)


class Assign(Instruction):
    """``result = op(operands)``; covers constants, arithmetic and copies."""
    __slots__ = "result", "operands", "op"

    opname = "assign"

    def __init__(self, result: int, operands: Sequence[int] = (), op: str = ""):
        self.result = result
        self.operands = tuple(operands)
        self.op = op

    def defs(self):
        return (self.result,)

    def uses(self):
        return self.operands

    def __repr__(self):
        return "v%d = %s(%s)" % (self.result, self.op or "copy", _values(self.operands))


class Phi(Assign):
    """SSA merge of values flowing in from different predecessors."""
    __slots__ = ()

    opname = "phi"

    def __init__(self, result: int, operands: Sequence[int]):
        Assign.__init__(self, result, operands, "phi")


class New(Instruction):
    __slots__ = "result", "type_name"

    opname = "new"

    def __init__(self, result: int, type_name: str):
        self.result = result
        self.type_name = type_name

    def defs(self):
        return (self.result,)

    def __repr__(self):
        return "v%d = new %s" % (self.result, self.type_name)


class GetField(Instruction):
    """``result = ref.field``, or a static field read when ref is None."""
    __slots__ = "result", "ref", "field"

    opname = "getfield"

    def __init__(self, result: int, ref: Optional[int], field: str):
        self.result = result
        self.ref = ref
        self.field = field

    def defs(self):
        return (self.result,)

    def uses(self):
        return () if self.ref is None else (self.ref,)

    def __repr__(self):
        base = "static" if self.ref is None else "v%d" % self.ref
        return "v%d = getfield %s.%s" % (self.result, base, self.field)


class PutField(Instruction):
    """``ref.field = value``, or a static field write when ref is None."""
    __slots__ = "ref", "field", "value"

    opname = "putfield"

    def __init__(self, ref: Optional[int], field: str, value: int):
        self.ref = ref
        self.field = field
        self.value = value

    def uses(self):
        if self.ref is None:
            return (self.value,)
        return (self.ref, self.value)

    def __repr__(self):
        base = "static" if self.ref is None else "v%d" % self.ref
        return "putfield %s.%s = v%d" % (base, self.field, self.value)


class Invoke(Instruction):
    """
    A call through a declared target.

    Attributes:
        target: Declared target method reference
        args: Argument values, receiver first for instance calls
        result: Value receiving the return value, or None
        site: Identifier of the source call expression
    """
    __slots__ = "target", "args", "result", "site"

    opname = "invoke"

    def __init__(self, target: MethodReference, args: Sequence[int] = (),
                 result: Optional[int] = None, site=None):
        self.target = target
        self.args = tuple(args)
        self.result = result
        self.site = site

    def defs(self):
        return () if self.result is None else (self.result,)

    def uses(self):
        return self.args

    def __repr__(self):
        call = "invoke %s(%s)" % (self.target.signature, _values(self.args))
        if self.result is None:
            return call
        return "v%d = %s" % (self.result, call)


class Branch(Instruction):
    """Conditional jump to ``target``; falls through otherwise."""
    __slots__ = "operands", "target"

    opname = "branch"

    def __init__(self, operands: Sequence[int], target: int):
        self.operands = tuple(operands)
        self.target = target

    def uses(self):
        return self.operands

    def jumpTargets(self):
        return (self.target,)

    def __repr__(self):
        return "if (%s) goto %d" % (_values(self.operands), self.target)


class Goto(Instruction):
    __slots__ = "target",

    opname = "goto"

    def __init__(self, target: int):
        self.target = target

    def jumpTargets(self):
        return (self.target,)

    @property
    def fallsThrough(self):
        return False

    def __repr__(self):
        return "goto %d" % self.target


class Return(Instruction):
    __slots__ = "value",

    opname = "return"

    def __init__(self, value: Optional[int] = None):
        self.value = value

    def uses(self):
        return () if self.value is None else (self.value,)

    @property
    def fallsThrough(self):
        return False

    def __repr__(self):
        if self.value is None:
            return "return"
        return "return v%d" % self.value
