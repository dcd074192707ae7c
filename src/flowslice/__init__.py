"""flowslice - forward program slicing over a context-sensitive call graph.
"""

__version__ = "0.1.0"

# Import main components for easy access
from .slicer.engine import Slicer, compute_forward_slice, compute_forward_slices
from .slicer import (
    ControlDependenceOptions,
    DataDependenceOptions,
    DependenceGraph,
    Statement,
    StatementKind,
)
from .application.config import SliceConfig
from .application.errors import SliceError

__all__ = [
    "Slicer",
    "compute_forward_slice",
    "compute_forward_slices",
    "ControlDependenceOptions",
    "DataDependenceOptions",
    "DependenceGraph",
    "Statement",
    "StatementKind",
    "SliceConfig",
    "SliceError",
    "__version__",
]
