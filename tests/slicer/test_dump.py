import json
import unittest

from flowslice.slicer import dump
from flowslice.slicer.engine import compute_forward_slice
from flowslice.slicer.statement import Statement

from programs import branch_program, helper_program


class TestDump(unittest.TestCase):
    def setUp(self):
        self.program = helper_program()
        self.graph = self.program.graph()
        self.seed = Statement.return_caller(self.program.ctx["main"], 1)
        self.slice = compute_forward_slice([self.seed], self.graph)

    def testText(self):
        text = dump.generate_text_output(self.slice)
        self.assertIn("Statements (4) in 2 context(s):", text)
        self.assertIn("Example.helper(I)I @ Everywhere", text)
        self.assertIn("PARAM_CALLEE param 0", text)
        self.assertIn("METHOD_EXIT", text)

    def testTextIsStable(self):
        self.assertEqual(
            dump.generate_text_output(self.slice),
            dump.generate_text_output(frozenset(sorted(self.slice, key=str))),
        )

    def testJson(self):
        data = json.loads(dump.generate_json_output(self.slice, analysis="0cfa"))
        self.assertEqual(data["analysis"], "0cfa")
        self.assertEqual(data["size"], 4)
        kinds = sorted(entry["kind"] for entry in data["statements"])
        self.assertEqual(
            kinds, ["METHOD_EXIT", "NORMAL", "NORMAL_RET_CALLER", "PARAM_CALLEE"]
        )
        exit = [e for e in data["statements"] if e["kind"] == "METHOD_EXIT"][0]
        self.assertNotIn("index", exit)
        self.assertEqual(exit["method"], "Example.helper(I)I")

    def testDot(self):
        text = dump.generate_dot_output(self.slice, self.graph)
        self.assertTrue(text.startswith("digraph Slice {"))
        self.assertEqual(text.count("subgraph cluster_"), 2)
        # seed -> param, param -> add, add -> exit, exit -> seed
        self.assertEqual(text.count("[style=solid]"), 4)
        self.assertNotIn("dashed", text)

    def testDotControlEdges(self):
        program = branch_program()
        graph = program.graph()
        seed = Statement.method_entry(program.ctx["choose"])
        slice_ = compute_forward_slice([seed], graph)
        text = dump.generate_dot_output(slice_, graph)
        self.assertIn("[style=dashed]", text)


if __name__ == "__main__":
    unittest.main()
