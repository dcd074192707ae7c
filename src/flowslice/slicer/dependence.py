"""
Interprocedural dependence graph.

The dependence graph is never materialized. ``DependenceGraph`` answers one
question on demand: which statements directly depend on statement S? The
answer is assembled from four sources.

**Data dependence** (``S -> T``: T may use a value S produced):
1. Def-use: the statement defining a local value reaches every use of it
   in the same context. Uses by call arguments are PARAM_CALLER
   statements, uses by a return are the METHOD_EXIT statement.
2. Heap (FULL only): a PutField reaches every GetField, in any context of
   the call graph, whose location the alias oracle says may alias the
   written one. No kill analysis is done; precision comes entirely from
   the oracle.
3. Calls: PARAM_CALLER reaches the matching PARAM_CALLEE of every target;
   METHOD_EXIT reaches the NORMAL_RET_CALLER of every call site that
   receives a result; NORMAL_RET_CALLER reaches the PARAM_CALLEE
   statements of its targets, because the post-call value is computed by
   the callee from its bound parameters. Contexts are not matched along
   these edges: when several sites share one callee context (as under
   0-CFA), a slice from one site's return value also reaches the return
   values of the other sites.

**Control dependence** (``S -> T``: S decides whether T executes):
4. Intraprocedural, from the post-dominator tree of each procedure's CFG.
   METHOD_ENTRY stands for the CFG's ENTRY node and also controls the
   parameter bindings. With FULL, a call additionally controls the
   METHOD_ENTRY of each callee.

Per-procedure tables (value uses, control dependence) and the global index
of heap reads are built lazily and cached; construction is serialized by a
lock so concurrent slicing threads can share one graph.
"""

import enum
import logging
import threading
from typing import Dict, List, Optional, Set, Tuple

from flowslice.model import ir
from flowslice.model.cfg import ENTRY
from flowslice.model.pointsto import AliasOracle, HeapLocation, heap_read, heap_write
from flowslice.slicer.options import ControlDependenceOptions, DataDependenceOptions
from flowslice.slicer.statement import Statement, StatementKind
from flowslice.util.xcollections import lazydict

logger = logging.getLogger(__name__)


class DependenceKind(enum.Enum):
    DATA = "data"
    CONTROL = "control"


class ProcedureIndex(object):
    """
    Def-use and control-dependence tables of one procedure.

    Shared by every context of the procedure, since neither depends on the
    calling context.

    Attributes:
        uses: value -> list of (instruction index, argument position or None)
        cfg: ControlFlowGraph answering control dependence queries
    """
    __slots__ = "procedure", "uses", "cfg"

    def __init__(self, procedure):
        self.procedure = procedure
        self.uses: Dict[int, List[Tuple[int, Optional[int]]]] = {}

        for index, instruction in enumerate(procedure.instructions):
            if isinstance(instruction, ir.Invoke):
                for position, value in enumerate(instruction.args):
                    self.uses.setdefault(value, []).append((index, position))
            else:
                for value in instruction.uses():
                    self.uses.setdefault(value, []).append((index, None))

        self.cfg = procedure.cfg


class DependenceGraph(object):
    """
    Lazily evaluated dependence edges over a frozen call graph.

    Attributes:
        call_graph: The CallGraph being sliced
        alias_oracle: AliasOracle consulted for heap dependence
    """

    def __init__(self, call_graph, alias_oracle: AliasOracle):
        self.call_graph = call_graph
        self.alias_oracle = alias_oracle
        self._lock = threading.RLock()
        self._indexes = lazydict(ProcedureIndex)
        self._heapReads: Optional[Dict[str, List[Tuple[HeapLocation, Statement]]]] = None

    # ---------------------------------------------------------------- indexes
    def _index(self, procedure) -> ProcedureIndex:
        index = self._indexes.get(procedure)
        if index is None:
            with self._lock:
                index = self._indexes[procedure]
        return index

    def _readsByField(self) -> Dict[str, List[Tuple[HeapLocation, Statement]]]:
        """Every GetField in the call graph, grouped by field name."""
        if self._heapReads is None:
            with self._lock:
                if self._heapReads is None:
                    reads: Dict[str, List[Tuple[HeapLocation, Statement]]] = {}
                    for context in self.call_graph:
                        for index, instruction in enumerate(context.instructions):
                            location = heap_read(context, instruction)
                            if location is not None:
                                reads.setdefault(location.field, []).append(
                                    (location, Statement(StatementKind.NORMAL, context, index))
                                )
                    logger.debug("indexed heap reads of %d fields", len(reads))
                    self._heapReads = reads
        return self._heapReads

    # ---------------------------------------------------------------- helpers
    def _nodeStatement(self, context, node) -> Statement:
        """Statement for a CFG node; return instructions map to METHOD_EXIT."""
        if isinstance(context.instructions[node], ir.Return):
            return Statement(StatementKind.METHOD_EXIT, context)
        return Statement(StatementKind.NORMAL, context, node)

    def _addUses(self, context, value: int, result: Set[Statement]) -> None:
        for index, position in self._index(context.procedure).uses.get(value, ()):
            if position is not None:
                result.add(Statement(StatementKind.PARAM_CALLER, context, index, position))
            else:
                result.add(self._nodeStatement(context, index))

    def _addCalleeParams(self, context, site: int, count: int, result: Set[Statement]) -> None:
        for target in self.call_graph.targets(context, site):
            for param in range(min(count, target.procedure.params)):
                result.add(Statement(StatementKind.PARAM_CALLEE, target, param))

    # ------------------------------------------------------------------- data
    def data_successors(self, statement: Statement, options: DataDependenceOptions) -> Set[Statement]:
        """Statements that data-depend directly on ``statement``."""
        options = DataDependenceOptions.parse(options)
        context = self.call_graph.check(statement.context)
        result: Set[Statement] = set()
        if not options.enabled:
            return result

        kind = statement.kind
        if kind is StatementKind.NORMAL:
            instruction = statement.instruction
            if not isinstance(instruction, ir.Invoke):
                for value in instruction.defs():
                    self._addUses(context, value, result)
            if options.heap:
                written = heap_write(context, instruction)
                if written is not None:
                    for location, reader in self._readsByField().get(written.field, ()):
                        if self.alias_oracle.may_alias(written, location):
                            result.add(reader)

        elif kind is StatementKind.NORMAL_RET_CALLER:
            invoke = statement.instruction
            if invoke.result is not None:
                self._addUses(context, invoke.result, result)
            self._addCalleeParams(context, statement.index, len(invoke.args), result)

        elif kind is StatementKind.PARAM_CALLER:
            for target in self.call_graph.targets(context, statement.index):
                if statement.argument < target.procedure.params:
                    result.add(Statement(StatementKind.PARAM_CALLEE, target, statement.argument))

        elif kind is StatementKind.PARAM_CALLEE:
            self._addUses(context, statement.index + 1, result)

        elif kind is StatementKind.METHOD_EXIT:
            for caller, site in self.call_graph.call_sites_to(context):
                if caller.instructions[site].result is not None:
                    result.add(Statement(StatementKind.NORMAL_RET_CALLER, caller, site))

        return result

    # ---------------------------------------------------------------- control
    def control_successors(self, statement: Statement, options: ControlDependenceOptions) -> Set[Statement]:
        """Statements that control-depend directly on ``statement``."""
        options = ControlDependenceOptions.parse(options)
        context = self.call_graph.check(statement.context)
        result: Set[Statement] = set()
        if not options.enabled:
            return result

        cfg = self._index(context.procedure).cfg
        kind = statement.kind
        if kind is StatementKind.METHOD_ENTRY:
            nodes = cfg.control_dependents(ENTRY)
            for param in range(context.procedure.params):
                result.add(Statement(StatementKind.PARAM_CALLEE, context, param))
        elif kind is StatementKind.NORMAL:
            nodes = cfg.control_dependents(statement.index)
            if options.interprocedural and statement.is_call:
                for target in self.call_graph.targets(context, statement.index):
                    result.add(Statement(StatementKind.METHOD_ENTRY, target))
        else:
            nodes = ()

        for node in nodes:
            result.add(self._nodeStatement(context, node))
            instruction = context.instructions[node]
            if isinstance(instruction, ir.Invoke):
                # The call's boundary statements execute exactly when it does.
                if instruction.result is not None:
                    result.add(Statement(StatementKind.NORMAL_RET_CALLER, context, node))
                for position in range(len(instruction.args)):
                    result.add(Statement(StatementKind.PARAM_CALLER, context, node, position))
        return result

    # ---------------------------------------------------------------- queries
    def successors(self, statement: Statement,
                   data: DataDependenceOptions = DataDependenceOptions.FULL,
                   control: ControlDependenceOptions = ControlDependenceOptions.FULL) -> Set[Statement]:
        """
        Every statement that depends directly on ``statement``.

        Raises:
            UnknownContext: If the statement's context is not in the call graph
        """
        result = self.data_successors(statement, data)
        result |= self.control_successors(statement, control)
        return result

    def successor_edges(self, statement: Statement,
                        data: DataDependenceOptions = DataDependenceOptions.FULL,
                        control: ControlDependenceOptions = ControlDependenceOptions.FULL):
        """Outgoing edges of ``statement`` as (target, DependenceKind) pairs."""
        edges = [(t, DependenceKind.DATA) for t in self.data_successors(statement, data)]
        edges.extend((t, DependenceKind.CONTROL) for t in self.control_successors(statement, control))
        return edges

    def __repr__(self):
        return "DependenceGraph(%r, indexed=%d)" % (self.call_graph, len(self._indexes))
