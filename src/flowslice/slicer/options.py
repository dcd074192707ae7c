"""
Dependence configuration.

Data and control dependence are configured independently. Each switch
orders its values by the edges it admits, so enabling a stronger option
never removes an edge:

    NONE < NO_HEAP < FULL

Data dependence:
- NONE: no data edges
- NO_HEAP: def-use chains plus parameter passing and return values
- FULL: additionally, writes to heap locations reach aliased reads

Control dependence:
- NONE: no control edges
- NO_HEAP: intraprocedural control dependence only
- FULL: additionally, a call controls the entry of each of its callees
"""

import enum


class _Options(enum.Enum):

    @classmethod
    def parse(cls, name):
        """Look up an option by name, case-insensitively; '-' may stand for '_'."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            choices = ", ".join(member.name for member in cls)
            raise ValueError("unknown %s %r (expected one of %s)" % (cls.__name__, name, choices)) from None

    def includes(self, other) -> bool:
        """True if this option admits every edge ``other`` admits."""
        return self.value >= other.value

    @property
    def enabled(self) -> bool:
        return self.value > 0

    @property
    def heap(self) -> bool:
        return self.value >= 2


class DataDependenceOptions(_Options):
    NONE = 0
    NO_HEAP = 1
    FULL = 2


class ControlDependenceOptions(_Options):
    NONE = 0
    NO_HEAP = 1
    FULL = 2

    @property
    def interprocedural(self) -> bool:
        return self.value >= 2
