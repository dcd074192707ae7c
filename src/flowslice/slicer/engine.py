"""
Forward slice computation.

A forward slice is the closure of the seed statements under the
"depends directly on" relation answered by ``DependenceGraph``. The
closure is a plain worklist reachability:

1. visited = worklist = seeds
2. pop S, query its successors, push every successor not yet visited
3. when the worklist is empty, visited is the slice

Every statement is expanded at most once, so recursion in the call graph
needs no special handling and the work is linear in the number of reached
statements and edges. Several seeds passed together share one worklist,
which gives the union of their individual slices.

**Budgets:**
A caller wanting bounded-time slicing passes ``max_statements``. A slice
that would grow past it raises ``SliceTruncated``; no partial slice is
ever returned.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, FrozenSet, Iterable, Optional

from flowslice.application.config import SliceConfig
from flowslice.application.errors import SliceTruncated
from flowslice.slicer.dependence import DependenceGraph
from flowslice.slicer.options import ControlDependenceOptions, DataDependenceOptions
from flowslice.slicer.statement import Statement

logger = logging.getLogger(__name__)


def _checkBudget(visited, max_statements):
    if max_statements is not None and len(visited) > max_statements:
        raise SliceTruncated(max_statements)


def compute_forward_slice(seeds: Iterable[Statement], graph: DependenceGraph,
                          data: DataDependenceOptions = DataDependenceOptions.FULL,
                          control: ControlDependenceOptions = ControlDependenceOptions.FULL,
                          max_statements: Optional[int] = None) -> FrozenSet[Statement]:
    """
    Compute the forward slice of ``seeds``.

    Args:
        seeds: Statements to slice from
        graph: Dependence graph answering successor queries
        data: Data dependence option
        control: Control dependence option
        max_statements: Optional bound on the size of the slice

    Returns:
        Frozen set of every statement reachable from the seeds, seeds included

    Raises:
        UnknownContext: If a seed belongs to a context outside the call graph
        SliceTruncated: If the slice would exceed ``max_statements``
    """
    data = DataDependenceOptions.parse(data)
    control = ControlDependenceOptions.parse(control)

    seeds = list(seeds)
    for seed in seeds:
        graph.call_graph.check(seed.context)

    visited = set(seeds)
    _checkBudget(visited, max_statements)
    worklist = list(visited)

    while worklist:
        current = worklist.pop()
        for succ in graph.successors(current, data, control):
            if succ not in visited:
                visited.add(succ)
                _checkBudget(visited, max_statements)
                worklist.append(succ)

    logger.debug("slice of %d seed(s): %d statements", len(seeds), len(visited))
    return frozenset(visited)


def compute_forward_slices(seeds: Iterable[Statement], graph: DependenceGraph,
                           data: DataDependenceOptions = DataDependenceOptions.FULL,
                           control: ControlDependenceOptions = ControlDependenceOptions.FULL,
                           max_statements: Optional[int] = None,
                           workers: int = 1) -> Dict[Statement, FrozenSet[Statement]]:
    """
    Compute one independent slice per seed.

    With ``workers > 1`` the seeds are sliced concurrently on a thread pool;
    the dependence graph is shared between the threads.

    Returns:
        Mapping from each seed to its slice
    """
    seeds = list(dict.fromkeys(seeds))
    for seed in seeds:
        graph.call_graph.check(seed.context)

    def sliceOne(seed):
        return compute_forward_slice((seed,), graph, data, control, max_statements)

    if workers <= 1 or len(seeds) <= 1:
        return {seed: sliceOne(seed) for seed in seeds}

    logger.info("slicing %d seeds on %d workers", len(seeds), workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        slices = list(pool.map(sliceOne, seeds))
    return dict(zip(seeds, slices))


class Slicer(object):
    """
    Slices one frozen program model under one configuration.

    Attributes:
        call_graph: CallGraph being sliced
        alias_oracle: AliasOracle for heap dependence
        config: SliceConfig
        graph: The shared DependenceGraph
    """

    def __init__(self, call_graph, alias_oracle, config: Optional[SliceConfig] = None):
        self.call_graph = call_graph
        self.alias_oracle = alias_oracle
        self.config = config if config is not None else SliceConfig()
        self.graph = DependenceGraph(call_graph, alias_oracle)

    def forward_slice(self, seeds: Iterable[Statement]) -> FrozenSet[Statement]:
        """The union slice of ``seeds``."""
        return compute_forward_slice(
            seeds, self.graph,
            self.config.data, self.config.control,
            self.config.max_statements,
        )

    def forward_slices(self, seeds: Iterable[Statement]) -> Dict[Statement, FrozenSet[Statement]]:
        """One slice per seed, using ``config.workers`` threads."""
        return compute_forward_slices(
            seeds, self.graph,
            self.config.data, self.config.control,
            self.config.max_statements,
            workers=self.config.workers,
        )
