"""
Per-procedure control flow graphs and control dependence.

A procedure's CFG has one node per instruction index plus the ENTRY and
EXIT sentinels. It is stored as a networkx DiGraph whose edges carry a
``label`` attribute naming the exit taken ("true"/"false" for a branch,
"normal" otherwise).

**Augmentation:**
ENTRY has an extra edge straight to EXIT (label "start"). This makes ENTRY a
predicate, so every statement that is not governed by a branch becomes
control dependent on ENTRY, and the procedure's entry statement anchors the
control-dependence closure.

**Control Dependence Definition:**
A node B is control dependent on node A if:
1. There exists a CFG edge A -> S and a path from S to B
2. B post-dominates every node on that path after A
3. B does not strictly post-dominate A

**Construction Algorithm:**
Post-dominators are computed as dominators of the reversed graph rooted at
EXIT. For each edge (A, S) where S is not the immediate post-dominator of
A, walk the post-dominator tree from S up to ipdom(A); every node visited
on the way is control dependent on A.
"""

import logging
from typing import Dict, Optional, Set

import networkx as nx

from flowslice.application.errors import InvalidModel
from flowslice.model import ir
from flowslice.util.canonical import Sentinel

logger = logging.getLogger(__name__)

ENTRY = Sentinel("ENTRY")
EXIT = Sentinel("EXIT")


class ControlFlowGraph(object):
    """
    Instruction-level control flow graph of one procedure.

    Attributes:
        procedure: The procedure this CFG was built for
        graph: networkx DiGraph over instruction indices and ENTRY/EXIT
    """

    def __init__(self, procedure):
        self.procedure = procedure
        self.graph = nx.DiGraph()
        self._ipdom: Optional[Dict[object, object]] = None
        self._control: Optional[Dict[object, Set[object]]] = None
        self._build()

    def _build(self):
        instructions = self.procedure.instructions
        count = len(instructions)

        self.graph.add_node(ENTRY)
        self.graph.add_node(EXIT)
        self.graph.add_nodes_from(range(count))

        self.graph.add_edge(ENTRY, 0 if count else EXIT, label="normal")
        if count:
            self.graph.add_edge(ENTRY, EXIT, label="start")

        for index, instruction in enumerate(instructions):
            for target in instruction.jumpTargets():
                if not 0 <= target < count:
                    raise InvalidModel(
                        "%s: instruction %d jumps to %d outside the body"
                        % (self.procedure.method, index, target)
                    )
                label = "true" if isinstance(instruction, ir.Branch) else "normal"
                self.graph.add_edge(index, target, label=label)

            if isinstance(instruction, ir.Return):
                self.graph.add_edge(index, EXIT, label="normal")
            elif instruction.fallsThrough:
                nxt = index + 1 if index + 1 < count else EXIT
                label = "false" if isinstance(instruction, ir.Branch) else "normal"
                if not self.graph.has_edge(index, nxt):
                    self.graph.add_edge(index, nxt, label=label)

    def successors(self, node):
        return self.graph.successors(node)

    def predecessors(self, node):
        return self.graph.predecessors(node)

    def immediate_post_dominators(self) -> Dict[object, object]:
        """
        Immediate post-dominator of every node that can reach EXIT.

        Nodes that cannot reach EXIT (bodies of loops with no way out) have
        no entry. EXIT maps to itself.
        """
        if self._ipdom is None:
            self._ipdom = nx.immediate_dominators(self.graph.reverse(copy=False), EXIT)
        return self._ipdom

    def control_dependence(self) -> Dict[object, Set[object]]:
        """
        Map each controlling node to the set of nodes control dependent on it.

        Only nodes with at least one dependent appear as keys. EXIT never
        appears as a dependent.
        """
        if self._control is None:
            ipdom = self.immediate_post_dominators()
            control: Dict[object, Set[object]] = {}

            for a, s in self.graph.edges():
                stop = ipdom.get(a)
                if s == stop:
                    continue

                runner = s
                while runner is not None and runner != stop and runner is not EXIT:
                    control.setdefault(a, set()).add(runner)
                    # A node that cannot reach EXIT has no entry and ends the walk.
                    runner = ipdom.get(runner)

            self._control = control
            logger.debug(
                "%s: %d controlling nodes", self.procedure.method, len(control)
            )
        return self._control

    def control_dependents(self, node) -> Set[object]:
        return self.control_dependence().get(node, set())

    def __repr__(self):
        return "ControlFlowGraph(%s, nodes=%d, edges=%d)" % (
            self.procedure.method,
            self.graph.number_of_nodes(),
            self.graph.number_of_edges(),
        )
