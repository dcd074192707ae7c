"""
Program model consumed by the slicer.

**Module Structure:**
- types.py: Method references and JVM descriptor parsing
- ir.py: Register-based instructions
- cfg.py: Per-procedure control-flow graphs and control dependence
- callgraph.py: Procedures, procedure contexts and the call graph
- pointsto.py: Heap locations and the alias oracle
- loader.py: JSON program models, one snapshot per analysis precision
"""

from .types import MethodReference
from .callgraph import EVERYWHERE, CallGraph, Procedure, ProcedureContext
from .pointsto import AliasOracle, HeapLocation, PointsToOracle
from .loader import PRECISIONS, JsonModelProvider, ModelProvider, ProgramModel, load_model
