"""
Tests for loading JSON program models.
"""

import copy
import json
import os
import tempfile
import unittest

from flowslice.application.errors import InvalidModel, UnknownAnalysis
from flowslice.application.resources import ExclusionSet
from flowslice.model import ir
from flowslice.model.loader import JsonModelProvider, load_model, parse_instruction
from flowslice.model.types import MethodReference

MODEL_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "helper_model.json")

HELPER = MethodReference.from_signature("Example.helper(I)I")
BEEP = MethodReference.from_signature("java/awt/Toolkit.beep(I)I")


def document():
    with open(MODEL_PATH) as f:
        return json.load(f)


class TestParseInstruction(unittest.TestCase):
    def testOps(self):
        self.assertIsInstance(parse_instruction({"op": "phi", "result": 3, "operands": [1, 2]}), ir.Phi)
        self.assertIsInstance(parse_instruction({"op": "new", "result": 1, "type": "Box"}), ir.New)
        self.assertIsInstance(parse_instruction({"op": "goto", "target": 0}), ir.Goto)

        get = parse_instruction({"op": "getfield", "result": 2, "field": "count"})
        self.assertIsNone(get.ref)
        put = parse_instruction({"op": "putfield", "ref": 1, "field": "val", "value": 2})
        self.assertEqual(put.uses(), (1, 2))

        call = parse_instruction({"op": "invoke", "target": "A.b(I)V", "args": [1], "site": "A.java:3"})
        self.assertIsNone(call.result)
        self.assertEqual(call.site, "A.java:3")

        branch = parse_instruction({"op": "branch", "operands": [1], "target": 4})
        self.assertEqual(branch.jumpTargets(), (4,))

    def testUnknownOp(self):
        self.assertRaises(InvalidModel, parse_instruction, {"op": "jump", "target": 1})

    def testMissingOperand(self):
        self.assertRaises(InvalidModel, parse_instruction, {"op": "assign"})
        self.assertRaises(InvalidModel, parse_instruction, {"result": 1})

    def testBadValues(self):
        self.assertRaises(InvalidModel, parse_instruction, {"op": "assign", "result": "x"})
        self.assertRaises(InvalidModel, parse_instruction, {"op": "invoke", "target": "nope"})

    def testMalformedEntries(self):
        self.assertRaises(InvalidModel, parse_instruction, ["op", "return"])
        self.assertRaises(InvalidModel, parse_instruction, "return")
        self.assertRaises(InvalidModel, parse_instruction, {"op": ["return"]})
        self.assertRaises(InvalidModel, parse_instruction, {"op": "invoke", "target": 7})
        self.assertRaises(InvalidModel, parse_instruction, {"op": "invoke", "target": "A.b()V", "site": [1]})
        self.assertRaises(InvalidModel, parse_instruction, {"op": "getfield", "result": 1, "field": {"name": "f"}})


class TestJsonModelProvider(unittest.TestCase):
    def testAnalyses(self):
        provider = JsonModelProvider(document())
        self.assertEqual(provider.analyses(), ["0cfa", "vanilla-1cfa"])

    def testLoad(self):
        model = JsonModelProvider(document()).load("0cfa")
        cg = model.call_graph
        self.assertEqual(len(cg), 4)
        self.assertEqual(cg.stats()["edges"], 3)
        self.assertEqual(cg.entrypoints, [model.contexts["main"]])

        main = model.contexts["main"]
        self.assertEqual(cg.targets(main, 1), {model.contexts["helper"]})
        self.assertIsInstance(main.instructions[1], ir.Invoke)
        self.assertEqual(main.instructions[1].target, HELPER)
        self.assertEqual(model.alias_oracle.points_to(main, 2), frozenset(["o1"]))

    def testLoadLogsStats(self):
        with self.assertLogs("flowslice.model.loader", "INFO") as cm:
            JsonModelProvider(document()).load("0cfa")
        self.assertIn("0cfa: 4 contexts, 3 call edges, 1 entrypoints", "\n".join(cm.output))

    def testContextNames(self):
        model = load_model(document(), "vanilla-1cfa")
        self.assertEqual(model.contexts["helper@1"].context, "main@1")
        self.assertEqual(model.contexts["main"].context, "Everywhere")

    def testExclusionsDropProcedures(self):
        provider = JsonModelProvider(document(), ExclusionSet.load())
        self.assertEqual(provider.excluded, {BEEP})

        model = provider.load("0cfa")
        self.assertEqual(len(model.call_graph), 3)
        self.assertEqual(model.call_graph.stats()["edges"], 2)
        self.assertNotIn("beep", model.contexts)
        self.assertEqual(len(model.alias_oracle), 1)

    def testUnknownAnalysis(self):
        with self.assertRaises(UnknownAnalysis) as cm:
            JsonModelProvider(document()).load("2obj")
        self.assertEqual(cm.exception.available, ("0cfa", "vanilla-1cfa"))

    def testFromFile(self):
        provider = JsonModelProvider.from_file(MODEL_PATH)
        self.assertEqual(len(provider.procedures), 4)

    def testBrokenJson(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "broken.json")
            with open(path, "w") as f:
                f.write("{not json")
            self.assertRaises(InvalidModel, JsonModelProvider.from_file, path)


class TestInvalidModels(unittest.TestCase):
    def mutate(self, change):
        doc = copy.deepcopy(document())
        change(doc)
        return doc

    def testNotAnObject(self):
        self.assertRaises(InvalidModel, JsonModelProvider, [])

    def testEdgeSiteMustBeCall(self):
        doc = self.mutate(lambda d: d["analyses"]["0cfa"]["edges"][0].update(site=0))
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")

    def testDanglingContext(self):
        doc = self.mutate(lambda d: d["analyses"]["0cfa"]["edges"][0].update(callee="ghost"))
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")

    def testUnknownProcedure(self):
        doc = self.mutate(lambda d: d["analyses"]["0cfa"]["contexts"][1].update(procedure="Example.gone()V"))
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")

    def testDuplicateProcedure(self):
        doc = self.mutate(lambda d: d["procedures"].append(d["procedures"][1]))
        self.assertRaises(InvalidModel, JsonModelProvider, doc)

    def testDuplicateContextId(self):
        doc = self.mutate(lambda d: d["analyses"]["0cfa"]["contexts"].append({"id": "main", "procedure": "Example.log(I)V"}))
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")

    def testBadSignature(self):
        doc = self.mutate(lambda d: d["procedures"][2].update(signature="Example.log"))
        self.assertRaises(InvalidModel, JsonModelProvider, doc)

    def testJumpOutsideBody(self):
        doc = self.mutate(lambda d: d["procedures"][2]["instructions"].insert(0, {"op": "goto", "target": 7}))
        self.assertRaises(InvalidModel, JsonModelProvider, doc)

    def testInstructionNotAnObject(self):
        doc = {"procedures": [{"signature": "A.f()V", "instructions": [["op", "return"]]}]}
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")

    def testProcedureNotAnObject(self):
        self.assertRaises(InvalidModel, JsonModelProvider, {"procedures": ["A.f()V"]})
        self.assertRaises(InvalidModel, JsonModelProvider, {"procedures": {"A.f()V": {}}})

    def testSignatureNotAString(self):
        doc = self.mutate(lambda d: d["procedures"][2].update(signature=["Example.log(I)V"]))
        self.assertRaises(InvalidModel, JsonModelProvider, doc)

    def testBadParamCount(self):
        doc = self.mutate(lambda d: d["procedures"][2].update(params="one"))
        self.assertRaises(InvalidModel, JsonModelProvider, doc)

    def testInstructionsNotAList(self):
        doc = self.mutate(lambda d: d["procedures"][2].update(instructions={"op": "return"}))
        self.assertRaises(InvalidModel, JsonModelProvider, doc)

    def testAnalysesNotAnObject(self):
        doc = self.mutate(lambda d: d.update(analyses=["0cfa"]))
        self.assertRaises(InvalidModel, JsonModelProvider, doc)

    def testSnapshotNotAnObject(self):
        doc = self.mutate(lambda d: d["analyses"].update({"0cfa": []}))
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")

    def testContextNotAnObject(self):
        doc = self.mutate(lambda d: d["analyses"]["0cfa"]["contexts"].append("main"))
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")

    def testContextIdNotAString(self):
        doc = self.mutate(lambda d: d["analyses"]["0cfa"]["contexts"][0].update(id=["main"]))
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")

    def testEdgeNotAnObject(self):
        doc = self.mutate(lambda d: d["analyses"]["0cfa"]["edges"].append(["main", 1, "helper"]))
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")

    def testEdgeSiteNotAnInteger(self):
        doc = self.mutate(lambda d: d["analyses"]["0cfa"]["edges"][0].update(site=[1]))
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")

    def testPointsToObjectsNotAList(self):
        doc = self.mutate(lambda d: d["analyses"]["0cfa"]["points_to"][0].update(objects="o1"))
        self.assertRaises(InvalidModel, load_model, doc, "0cfa")


if __name__ == "__main__":
    unittest.main()
