"""
Locating slicing criteria.

A criterion is named on the command line by a method signature: "the first
call to ``Example.bye(...)`` inside ``Example.main(...)``" or "every call
to ``Example.bye(...)`` anywhere". These helpers turn such names into seed
statements.

Forward slices are computed from a produced value, so a call statement is
turned into its NORMAL_RET_CALLER statement before slicing; a call to a
void method is rejected.
"""

import logging
from typing import List, Set, Union

from flowslice.application.errors import (
    AmbiguousCallSite,
    CallSiteNotFound,
    MethodNotFound,
    NoCallersFound,
    VoidReturnCriterion,
)
from flowslice.model import ir
from flowslice.model.callgraph import ProcedureContext
from flowslice.model.types import MethodReference
from flowslice.slicer.statement import Statement, StatementKind

logger = logging.getLogger(__name__)


def _method(signature: Union[str, MethodReference]) -> MethodReference:
    if isinstance(signature, MethodReference):
        return signature
    return MethodReference.from_signature(signature)


def resolve_return_value_statement(statement: Statement) -> Statement:
    """
    Map a call statement to the statement holding its return value.

    Statements other than NORMAL calls are already valid seeds and are
    returned unchanged.

    Raises:
        VoidReturnCriterion: If the call's declared target returns void
    """
    if not statement.is_call:
        return statement
    target = statement.instruction.target
    if target.returns_void:
        raise VoidReturnCriterion(target)
    return Statement.return_caller(statement.context, statement.index)


def find_method(call_graph, signature) -> ProcedureContext:
    """
    First context, in call graph order, implementing ``signature``.

    Raises:
        MethodNotFound
    """
    method = _method(signature)
    for node in call_graph:
        if node.method == method:
            return node
    raise MethodNotFound(method)


def find_calls_to(context, signature) -> List[Statement]:
    """
    Every call in ``context`` whose declared target is ``signature``, in
    instruction order.

    Raises:
        CallSiteNotFound: If the context makes no such call
        AmbiguousCallSite: If two instructions claim the same call site
    """
    method = _method(signature)
    calls = []
    sites = {}
    for index, instruction in enumerate(context.instructions):
        if isinstance(instruction, ir.Invoke) and instruction.target == method:
            site = instruction.site if instruction.site is not None else index
            sites.setdefault(site, []).append(index)
            calls.append(Statement.normal(context, index))

    if not calls:
        raise CallSiteNotFound(context, method)
    for site, indices in sites.items():
        if len(indices) > 1:
            raise AmbiguousCallSite(context, site, indices)
    return calls


def find_call_site(context, signature) -> Statement:
    """The first call to ``signature`` in ``context``."""
    return find_calls_to(context, signature)[0]


def find_callers(call_graph, signature) -> Set[ProcedureContext]:
    """
    Contexts with a call edge into any context of ``signature``.

    Raises:
        NoCallersFound
    """
    method = _method(signature)
    callers = set()
    for node in call_graph.nodes_for(method):
        callers.update(call_graph.predecessors(node))
    if not callers:
        raise NoCallersFound(method)
    return callers


def find_all_callers_of(call_graph, signature, best_effort: bool = False) -> Set[Statement]:
    """
    Return-value statements of every call site reaching ``signature``.

    Call sites are taken from the call graph's edges, so a call is found
    wherever the analysis resolved it, including through dispatch.

    Args:
        call_graph: CallGraph to search
        signature: Target method
        best_effort: Skip void calls with a warning instead of failing

    Raises:
        NoCallersFound: If no call edge reaches the method
        VoidReturnCriterion: For a void call when not in best-effort mode
    """
    method = _method(signature)
    seeds = set()
    found = False
    for node in call_graph.nodes_for(method):
        for caller, site in call_graph.call_sites_to(node):
            found = True
            call = Statement(StatementKind.NORMAL, caller, site)
            try:
                seeds.add(resolve_return_value_statement(call))
            except VoidReturnCriterion as e:
                if not best_effort:
                    raise
                logger.warning("skipping call in %r: %s", caller, e)

    if not found:
        raise NoCallersFound(method)
    return seeds
