"""
Slice output format generators.

This module renders a computed slice as text, DOT (Graphviz) or JSON.
Slices are unordered sets; every generator sorts statements with
``Statement.sort_key`` so the output is stable across runs.
"""

import json
from typing import Dict, Iterable, List

from flowslice.slicer.dependence import DependenceKind
from flowslice.slicer.options import ControlDependenceOptions, DataDependenceOptions
from flowslice.slicer.statement import Statement


def _sorted(statements: Iterable[Statement]) -> List[Statement]:
    return sorted(statements, key=Statement.sort_key)


def _byContext(statements: Iterable[Statement]) -> Dict[object, List[Statement]]:
    grouped: Dict[object, List[Statement]] = {}
    for stmt in _sorted(statements):
        grouped.setdefault(stmt.context, []).append(stmt)
    return grouped


def statement_label(stmt: Statement) -> str:
    """Short description of a statement within its context."""
    kind = stmt.kind.name
    if stmt.index < 0:
        return kind
    if stmt.argument >= 0:
        return "%s [%d] arg %d" % (kind, stmt.index, stmt.argument)
    if stmt.instruction is None:
        return "%s param %d" % (kind, stmt.index)
    return "%s [%d] %r" % (kind, stmt.index, stmt.instruction)


def generate_text_output(slice_, title="Forward Slice") -> str:
    """Generate text output for a slice, grouped by procedure context."""
    output = []
    output.append(title)
    output.append("=" * 50)
    output.append("")

    grouped = _byContext(slice_)
    output.append(f"Statements ({len(slice_)}) in {len(grouped)} context(s):")
    for context, statements in grouped.items():
        output.append(f"  {context.method} @ {context.context}")
        for stmt in statements:
            output.append(f"    - {statement_label(stmt)}")

    return "\n".join(output)


def _dotId(ids, stmt):
    if stmt not in ids:
        ids[stmt] = "s%d" % len(ids)
    return ids[stmt]


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def generate_dot_output(slice_, graph, data=DataDependenceOptions.FULL,
                        control=ControlDependenceOptions.FULL) -> str:
    """
    Generate DOT format output for a slice.

    One cluster per procedure context; edges are the dependence edges
    between slice members, solid for data and dashed for control.
    """
    lines = []
    lines.append("digraph Slice {")
    lines.append("    rankdir=TB;")
    lines.append("    node [shape=box, style=filled, fillcolor=lightblue];")
    lines.append("")

    ids: Dict[Statement, str] = {}
    for n, (context, statements) in enumerate(_byContext(slice_).items()):
        lines.append(f"    subgraph cluster_{n} {{")
        lines.append(f'        label="{_escape(str(context))}";')
        for stmt in statements:
            lines.append(f'        {_dotId(ids, stmt)} [label="{_escape(statement_label(stmt))}"];')
        lines.append("    }")

    lines.append("")

    members = frozenset(slice_)
    for stmt in _sorted(slice_):
        edges = graph.successor_edges(stmt, data, control)
        for target, kind in sorted(edges, key=lambda edge: (edge[0].sort_key(), edge[1].value)):
            if target not in members:
                continue
            style = "dashed" if kind is DependenceKind.CONTROL else "solid"
            lines.append(f"    {ids[stmt]} -> {ids[target]} [style={style}];")

    lines.append("}")
    return "\n".join(lines)


def slice_to_data(slice_) -> List[dict]:
    """Serializable description of every statement in a slice."""
    data = []
    for stmt in _sorted(slice_):
        entry = {
            "kind": stmt.kind.name,
            "method": stmt.context.method.signature,
            "context": stmt.context.context,
        }
        if stmt.index >= 0:
            entry["index"] = stmt.index
        if stmt.argument >= 0:
            entry["argument"] = stmt.argument
        if stmt.instruction is not None:
            entry["instruction"] = repr(stmt.instruction)
        data.append(entry)
    return data


def generate_json_output(slice_, **extra) -> str:
    """Generate JSON output for a slice; ``extra`` keys are added verbatim."""
    data = dict(extra)
    data["size"] = len(slice_)
    data["statements"] = slice_to_data(slice_)
    return json.dumps(data, indent=2)
