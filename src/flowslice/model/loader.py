"""
Loading program models.

A program model document holds the procedures of a program once and one
snapshot per analysis precision: the contexts the analysis created, its
call edges and its points-to facts. Choosing a precision is choosing a
snapshot; the slicer never knows how the snapshot was computed.

**Document format (JSON):**

    {
      "procedures": [
        {"signature": "Example.helper(I)I", "params": 1,
         "instructions": [{"op": "assign", "result": 2, "operands": [1]},
                          {"op": "return", "value": 2}]}
      ],
      "analyses": {
        "0cfa": {
          "contexts": [{"id": "helper", "procedure": "Example.helper(I)I"}],
          "entrypoints": ["main"],
          "edges": [{"caller": "main", "site": 0, "callee": "helper"}],
          "points_to": [{"context": "main", "value": 1, "objects": ["o1"]}]
        }
      }
    }

Procedures of excluded classes are dropped, together with their contexts
and every call edge and points-to fact touching those contexts.
"""

import abc
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from flowslice.application.errors import InvalidModel, InvalidSignature, UnknownAnalysis
from flowslice.model import ir
from flowslice.model.callgraph import EVERYWHERE, CallGraph, Procedure, ProcedureContext
from flowslice.model.pointsto import PointsToOracle
from flowslice.model.types import MethodReference

logger = logging.getLogger(__name__)

# Analysis precisions the drivers know how to describe
PRECISIONS = {
    "0cfa": "context-insensitive",
    "vanilla-1cfa": "1-call-site-sensitive",
    "container-1cfa": "1-call-site-sensitive for container classes",
}


def _object(entry, where: str) -> Mapping[str, Any]:
    if not isinstance(entry, Mapping):
        raise InvalidModel("%s: expected an object, got %s" % (where, type(entry).__name__))
    return entry


def _list(value, where: str) -> list:
    if not isinstance(value, list):
        raise InvalidModel("%s: expected a list, got %s" % (where, type(value).__name__))
    return value


def _int(value, where: str) -> int:
    # bool is an int subclass but never a valid index
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise InvalidModel("%s: expected an integer, got %r" % (where, value))
    try:
        return int(value)
    except ValueError:
        raise InvalidModel("%s: expected an integer, got %r" % (where, value)) from None


def _name(value, where: str) -> str:
    if not isinstance(value, str):
        raise InvalidModel("%s: expected a string, got %r" % (where, value))
    return value


def _field(entry: Mapping[str, Any], key: str, where: str):
    try:
        return entry[key]
    except (KeyError, TypeError):
        raise InvalidModel("%s: missing %r" % (where, key)) from None


def _values(entry, key, where) -> Tuple[int, ...]:
    return tuple(int(v) for v in entry.get(key, ()))


def _buildAssign(entry, where):
    return ir.Assign(int(_field(entry, "result", where)), _values(entry, "operands", where), entry.get("label", ""))


def _buildPhi(entry, where):
    return ir.Phi(int(_field(entry, "result", where)), _values(entry, "operands", where))


def _buildNew(entry, where):
    return ir.New(int(_field(entry, "result", where)), entry.get("type", "java.lang.Object"))


def _buildGetField(entry, where):
    ref = entry.get("ref")
    return ir.GetField(int(_field(entry, "result", where)), None if ref is None else int(ref), _name(_field(entry, "field", where), where))


def _buildPutField(entry, where):
    ref = entry.get("ref")
    return ir.PutField(None if ref is None else int(ref), _name(_field(entry, "field", where), where), int(_field(entry, "value", where)))


def _buildInvoke(entry, where):
    target = MethodReference.from_signature(_field(entry, "target", where))
    result = entry.get("result")
    site = entry.get("site")
    if site is not None and (isinstance(site, bool) or not isinstance(site, (int, str))):
        raise InvalidModel("%s: call site must be a string or an integer, got %r" % (where, site))
    return ir.Invoke(target, _values(entry, "args", where), None if result is None else int(result), site)


def _buildBranch(entry, where):
    return ir.Branch(_values(entry, "operands", where), int(_field(entry, "target", where)))


def _buildGoto(entry, where):
    return ir.Goto(int(_field(entry, "target", where)))


def _buildReturn(entry, where):
    value = entry.get("value")
    return ir.Return(None if value is None else int(value))


_BUILDERS = {
    "assign": _buildAssign,
    "phi": _buildPhi,
    "new": _buildNew,
    "getfield": _buildGetField,
    "putfield": _buildPutField,
    "invoke": _buildInvoke,
    "branch": _buildBranch,
    "goto": _buildGoto,
    "return": _buildReturn,
}


def parse_instruction(entry: Mapping[str, Any], where: str = "instruction") -> ir.Instruction:
    """
    Build one instruction from its JSON form.

    Raises:
        InvalidModel: For an unknown op or a missing operand
    """
    op = _field(_object(entry, where), "op", where)
    builder = _BUILDERS.get(op) if isinstance(op, str) else None
    if builder is None:
        raise InvalidModel("%s: unknown op %r" % (where, op))
    try:
        return builder(entry, where)
    except (TypeError, ValueError) as e:
        if isinstance(e, InvalidModel):
            raise
        raise InvalidModel("%s: %s" % (where, e)) from e


def parse_procedure(entry: Mapping[str, Any]) -> Procedure:
    """
    Build one procedure and its CFG from its JSON form.

    Raises:
        InvalidModel: For a malformed entry, signature or instruction
    """
    signature = _field(_object(entry, "procedure"), "signature", "procedure")
    try:
        method = MethodReference.from_signature(signature)
    except InvalidSignature as e:
        raise InvalidModel(str(e)) from e
    params = _int(entry.get("params", len(method.parameter_types)), "%s: params" % signature)
    if params < 0:
        raise InvalidModel("%s: negative parameter count" % signature)
    instructions = [
        parse_instruction(instruction, "%s[%d]" % (signature, i))
        for i, instruction in enumerate(_list(entry.get("instructions", []), "%s: instructions" % signature))
    ]
    procedure = Procedure(method, params, instructions)
    # Building the CFG rejects jumps outside the body
    procedure.cfg
    return procedure


class ProgramModel(object):
    """
    One analysis snapshot, ready to slice.

    Attributes:
        name: Analysis precision name
        call_graph: Frozen CallGraph
        alias_oracle: PointsToOracle for the same analysis
        contexts: Context ids of the document mapped to procedure contexts
    """

    def __init__(self, name: str, call_graph: CallGraph, alias_oracle: PointsToOracle,
                 contexts: Dict[str, ProcedureContext]):
        self.name = name
        self.call_graph = call_graph
        self.alias_oracle = alias_oracle
        self.contexts = contexts

    def __repr__(self):
        return "ProgramModel(%s, %r)" % (self.name, self.call_graph)


class ModelProvider(abc.ABC):
    """Source of program model snapshots, one per analysis precision."""

    @abc.abstractmethod
    def analyses(self) -> List[str]:
        """Names of the snapshots this provider can load."""

    @abc.abstractmethod
    def load(self, name: str) -> ProgramModel:
        """
        Load the snapshot for analysis ``name``.

        Raises:
            UnknownAnalysis
        """


class JsonModelProvider(ModelProvider):
    """
    Provider reading the JSON document format.

    Args:
        document: Parsed JSON document
        exclusions: ExclusionSet applied to procedures, or None
    """

    def __init__(self, document: Mapping[str, Any], exclusions=None):
        if not isinstance(document, Mapping):
            raise InvalidModel("model document must be a JSON object")
        self.document = document
        self.exclusions = exclusions
        self.procedures: Dict[MethodReference, Procedure] = {}
        self.excluded = set()

        if not isinstance(document.get("analyses", {}), Mapping):
            raise InvalidModel("analyses: expected an object")

        for entry in _list(document.get("procedures", []), "procedures"):
            procedure = parse_procedure(entry)
            method = procedure.method
            if exclusions is not None and exclusions.excludes(method.class_path):
                self.excluded.add(method)
                continue
            if method in self.procedures:
                raise InvalidModel("duplicate procedure %s" % method)
            self.procedures[method] = procedure

        if self.excluded:
            logger.info("excluded %d procedure(s)", len(self.excluded))

    @classmethod
    def from_file(cls, path, exclusions=None) -> "JsonModelProvider":
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidModel("%s: %s" % (path, e)) from e
        return cls(document, exclusions)

    def analyses(self) -> List[str]:
        return list(self.document.get("analyses", {}))

    def load(self, name: str) -> ProgramModel:
        snapshots = self.document.get("analyses", {})
        if name not in snapshots:
            raise UnknownAnalysis(name, self.analyses())
        snapshot = _object(snapshots[name], "analysis %r" % name)
        logger.info("loading %s analysis (%s)", name, PRECISIONS.get(name, "custom precision"))

        graph = CallGraph()
        contexts: Dict[str, ProcedureContext] = {}
        dropped = set()

        for entry in _list(snapshot.get("contexts", []), "contexts"):
            cid = _name(_field(_object(entry, "context"), "id", "context"), "context id")
            if cid in contexts or cid in dropped:
                raise InvalidModel("duplicate context id %r" % cid)
            method = self._method(_field(entry, "procedure", "context %r" % cid))
            if method in self.excluded or self._isExcluded(method):
                dropped.add(cid)
                continue
            procedure = self.procedures.get(method)
            if procedure is None:
                raise InvalidModel("context %r: unknown procedure %s" % (cid, method))
            node = ProcedureContext(procedure, _name(entry.get("context", EVERYWHERE), "context %r" % cid))
            contexts[cid] = node
            graph.add_node(node)

        def lookup(cid, where):
            _name(cid, where)
            if cid in dropped:
                return None
            if cid not in contexts:
                raise InvalidModel("%s: unknown context %r" % (where, cid))
            return contexts[cid]

        for cid in _list(snapshot.get("entrypoints", []), "entrypoints"):
            node = lookup(cid, "entrypoint")
            if node is not None:
                graph.add_entrypoint(node)

        for entry in _list(snapshot.get("edges", []), "edges"):
            caller = lookup(_field(_object(entry, "edge"), "caller", "edge"), "edge")
            callee = lookup(_field(entry, "callee", "edge"), "edge")
            if caller is None or callee is None:
                continue
            graph.add_edge(caller, _int(_field(entry, "site", "edge"), "edge site"), callee)

        table = {}
        for entry in _list(snapshot.get("points_to", []), "points_to"):
            node = lookup(_field(_object(entry, "points_to"), "context", "points_to"), "points_to")
            if node is None:
                continue
            key = (node, _int(_field(entry, "value", "points_to"), "points_to value"))
            objects = [_name(o, "points_to object") for o in _list(entry.get("objects", []), "points_to objects")]
            table.setdefault(key, set()).update(objects)

        stats = graph.stats()
        logger.info("%s: %d contexts, %d call edges, %d entrypoints", name,
                    stats["contexts"], stats["edges"], stats["entrypoints"])
        return ProgramModel(name, graph, PointsToOracle(table), contexts)

    def _isExcluded(self, method: MethodReference) -> bool:
        return self.exclusions is not None and self.exclusions.excludes(method.class_path)

    @staticmethod
    def _method(signature: str) -> MethodReference:
        try:
            return MethodReference.from_signature(signature)
        except InvalidSignature as e:
            raise InvalidModel(str(e)) from e


def load_model(document: Mapping[str, Any], analysis: str, exclusions=None) -> ProgramModel:
    """Load one analysis snapshot from a parsed document."""
    return JsonModelProvider(document, exclusions).load(analysis)
