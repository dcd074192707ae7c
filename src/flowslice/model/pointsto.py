"""
Heap locations and the alias oracle.

The slicer never computes points-to information. It is handed an
``AliasOracle`` built by whatever pointer analysis produced the call graph
and only asks one question of it: may these two heap locations overlap?

A heap location is named by the context and value holding the base
reference plus the field being accessed; static fields have no base.
"""

import abc
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from flowslice.model import ir
from flowslice.util.canonical import CanonicalObject


class HeapLocation(CanonicalObject):
    """
    An abstract memory location accessed by a GetField or PutField.

    Attributes:
        context: Procedure context of the access (None for static fields)
        ref: Value holding the base reference (None for static fields)
        field: Field name
    """
    __slots__ = "context", "ref", "field"

    def __init__(self, context, ref: Optional[int], field: str):
        if ref is None:
            context = None
        self.context = context
        self.ref = ref
        self.field = field
        self.setCanonical(context, ref, field)

    @property
    def is_static(self) -> bool:
        return self.ref is None

    @classmethod
    def of(cls, context, instruction) -> "HeapLocation":
        """The location read or written by a GetField/PutField in ``context``."""
        return cls(context, instruction.ref, instruction.field)

    def __repr__(self):
        if self.is_static:
            return "HeapLocation(static %s)" % self.field
        return "HeapLocation(%r v%d.%s)" % (self.context, self.ref, self.field)


def heap_read(context, instruction) -> Optional[HeapLocation]:
    if isinstance(instruction, ir.GetField):
        return HeapLocation.of(context, instruction)
    return None


def heap_write(context, instruction) -> Optional[HeapLocation]:
    if isinstance(instruction, ir.PutField):
        return HeapLocation.of(context, instruction)
    return None


class AliasOracle(abc.ABC):
    """May-alias query interface consumed by the dependence graph."""

    @abc.abstractmethod
    def may_alias(self, a: HeapLocation, b: HeapLocation) -> bool:
        """True if ``a`` and ``b`` may denote overlapping storage."""


class PointsToOracle(AliasOracle):
    """
    Alias oracle backed by a points-to table.

    The table maps ``(context, value)`` to the set of abstract objects the
    value may reference. Two instance locations may alias when they name
    the same field and their base points-to sets intersect; two static
    locations alias when they name the same field. A value missing from
    the table points to nothing.
    """

    def __init__(self, table: Optional[Mapping[Tuple[object, int], Iterable[str]]] = None):
        self._table: Dict[Tuple[object, int], FrozenSet[str]] = {}
        for key, objects in (table or {}).items():
            self._table[key] = frozenset(objects)

    def points_to(self, context, value: int) -> FrozenSet[str]:
        return self._table.get((context, value), frozenset())

    def may_alias(self, a: HeapLocation, b: HeapLocation) -> bool:
        if a.field != b.field:
            return False
        if a.is_static or b.is_static:
            return a.is_static and b.is_static
        return not self.points_to(a.context, a.ref).isdisjoint(
            self.points_to(b.context, b.ref)
        )

    def __len__(self):
        return len(self._table)
