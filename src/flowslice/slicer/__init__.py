"""
Forward slicing over an interprocedural dependence graph.

**Module Structure:**
- options.py: Data and control dependence options (NONE < NO_HEAP < FULL)
- statement.py: Statements, the nodes of the dependence graph
- dependence.py: Lazily evaluated dependence edges
- engine.py: Worklist closure, parallel per-seed slicing, the Slicer facade
- criteria.py: Turning method signatures into seed statements
- dump.py: Text, DOT and JSON renderings of a slice

The engine is not imported here; it depends on the application layer's
configuration, which itself depends on the options defined here.
"""

from .options import DataDependenceOptions, ControlDependenceOptions
from .statement import Statement, StatementKind
from .dependence import DependenceGraph, DependenceKind
from .criteria import (
    find_all_callers_of,
    find_call_site,
    find_callers,
    find_calls_to,
    find_method,
    resolve_return_value_statement,
)
