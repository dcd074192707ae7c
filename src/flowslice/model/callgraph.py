"""
Context-sensitive call graph.

Nodes are procedure contexts: a procedure paired with the calling context
the analysis distinguished it under. Edges are keyed by the call site (the
instruction index of the ``Invoke`` in the caller), so the slicer can ask
which contexts one particular call may reach and, conversely, which call
sites reach a context.

The graph is frozen once loaded; every query is a read, so any number of
slicing threads may share one instance.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Sequence, Set, Tuple

import networkx as nx

from flowslice.application.errors import InvalidModel, UnknownContext
from flowslice.model import ir
from flowslice.model.cfg import ControlFlowGraph
from flowslice.model.types import MethodReference
from flowslice.util.canonical import CanonicalObject

EVERYWHERE = "Everywhere"


class Procedure(CanonicalObject):
    """
    A method body: reference, parameter count and instruction tuple.

    Parameters arrive in values ``1..params``. Identity is the method
    reference; one procedure may appear in many contexts.
    """
    __slots__ = "method", "params", "instructions", "_cfg"

    def __init__(self, method: MethodReference, params: int, instructions: Sequence[ir.Instruction]):
        self.method = method
        self.params = params
        self.instructions = tuple(instructions)
        self._cfg = None
        self.setCanonical(method)

    @property
    def cfg(self) -> ControlFlowGraph:
        if self._cfg is None:
            self._cfg = ControlFlowGraph(self)
        return self._cfg

    def __repr__(self):
        return "Procedure(%s)" % self.method


class ProcedureContext(CanonicalObject):
    """
    One analysis-distinguished instantiation of a procedure.

    Attributes:
        procedure: The procedure
        context: Name of the calling context (``Everywhere`` for 0-CFA)
    """
    __slots__ = "procedure", "context"

    def __init__(self, procedure: Procedure, context: str = EVERYWHERE):
        self.procedure = procedure
        self.context = context
        self.setCanonical(procedure.method, context)

    @property
    def method(self) -> MethodReference:
        return self.procedure.method

    @property
    def instructions(self) -> Tuple[ir.Instruction, ...]:
        return self.procedure.instructions

    def __repr__(self):
        return "<%s @ %s>" % (self.procedure.method, self.context)


class CallGraph(object):
    """
    Directed multigraph of procedure contexts.

    Each edge ``caller -> callee`` has the call-site index as its key, so
    one caller may reach the same callee from several sites and one site
    may reach several callees (dynamic dispatch, context cloning).

    Attributes:
        entrypoints: Contexts the analysis started from
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self._byMethod: Dict[MethodReference, List[ProcedureContext]] = {}
        self.entrypoints: List[ProcedureContext] = []

    # ------------------------------------------------------------------ build
    def add_node(self, node: ProcedureContext) -> None:
        if node not in self._graph:
            self._graph.add_node(node)
            self._byMethod.setdefault(node.method, []).append(node)

    def add_entrypoint(self, node: ProcedureContext) -> None:
        self.add_node(node)
        if node not in self.entrypoints:
            self.entrypoints.append(node)

    def add_edge(self, caller: ProcedureContext, site: int, callee: ProcedureContext) -> None:
        """
        Record that the call at instruction ``site`` of ``caller`` may
        invoke ``callee``.

        Raises:
            InvalidModel: If ``site`` is not an Invoke of the caller
        """
        instructions = caller.instructions
        if not 0 <= site < len(instructions) or not isinstance(instructions[site], ir.Invoke):
            raise InvalidModel("%r: instruction %r is not a call site" % (caller, site))
        self.add_node(caller)
        self.add_node(callee)
        self._graph.add_edge(caller, callee, key=site)

    # ---------------------------------------------------------------- queries
    def __contains__(self, node) -> bool:
        return node in self._graph

    def __iter__(self) -> Iterator[ProcedureContext]:
        return iter(self._graph.nodes)

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def check(self, node: ProcedureContext) -> ProcedureContext:
        """
        Return ``node`` unchanged, or fail if it is not part of this graph.

        Raises:
            UnknownContext: If the context is foreign to this call graph
        """
        if node not in self._graph:
            raise UnknownContext(node)
        return node

    def instructions(self, node: ProcedureContext) -> Tuple[ir.Instruction, ...]:
        return self.check(node).instructions

    def successors(self, node: ProcedureContext) -> Set[ProcedureContext]:
        return set(self._graph.successors(self.check(node)))

    def predecessors(self, node: ProcedureContext) -> Set[ProcedureContext]:
        return set(self._graph.predecessors(self.check(node)))

    def targets(self, node: ProcedureContext, site: int) -> Set[ProcedureContext]:
        """Contexts the call at instruction ``site`` of ``node`` may reach."""
        return {
            callee
            for _, callee, key in self._graph.out_edges(self.check(node), keys=True)
            if key == site
        }

    def call_sites_to(self, node: ProcedureContext) -> Iterable[Tuple[ProcedureContext, int]]:
        """(caller, site) pairs of every call edge reaching ``node``."""
        for caller, _, site in self._graph.in_edges(self.check(node), keys=True):
            yield caller, site

    def nodes_for(self, method: MethodReference) -> List[ProcedureContext]:
        """Every context of ``method``, in insertion order."""
        return list(self._byMethod.get(method, ()))

    def edges(self) -> Iterable[Tuple[ProcedureContext, int, ProcedureContext]]:
        """Iterate over edges as (caller, site, callee) tuples."""
        for caller, callee, site in self._graph.edges(keys=True):
            yield caller, site, callee

    def stats(self):
        return {
            "contexts": self._graph.number_of_nodes(),
            "edges": self._graph.number_of_edges(),
            "methods": len(self._byMethod),
            "entrypoints": len(self.entrypoints),
        }

    def __repr__(self):
        return "CallGraph(contexts=%d, edges=%d)" % (
            self._graph.number_of_nodes(),
            self._graph.number_of_edges(),
        )
