import unittest

from flowslice.application.errors import InvalidModel, UnknownContext
from flowslice.model import ir
from flowslice.model.callgraph import EVERYWHERE, CallGraph, Procedure, ProcedureContext
from flowslice.model.types import MethodReference

CALLER = MethodReference.from_signature("Example.caller()V")
CALLEE = MethodReference.from_signature("Example.callee(I)I")


def build():
    caller = Procedure(CALLER, 0, [
        ir.Assign(1, (), "const"),
        ir.Invoke(CALLEE, (1,), 2),
        ir.Invoke(CALLEE, (2,), 3),
        ir.Return(),
    ])
    callee = Procedure(CALLEE, 1, [ir.Return(1)])

    cg = CallGraph()
    main = ProcedureContext(caller)
    first = ProcedureContext(callee, "caller@1")
    second = ProcedureContext(callee, "caller@2")
    cg.add_entrypoint(main)
    cg.add_edge(main, 1, first)
    cg.add_edge(main, 2, second)
    cg.add_edge(main, 2, first)
    return cg, main, first, second


class TestProcedureContext(unittest.TestCase):
    def testIdentity(self):
        proc = Procedure(CALLEE, 1, [ir.Return(1)])
        same = Procedure(CALLEE, 1, [ir.Return(1)])
        self.assertEqual(ProcedureContext(proc), ProcedureContext(same, EVERYWHERE))
        self.assertNotEqual(ProcedureContext(proc, "a"), ProcedureContext(proc, "b"))
        self.assertEqual(ProcedureContext(proc).method, CALLEE)


class TestCallGraph(unittest.TestCase):
    def setUp(self):
        self.cg, self.main, self.first, self.second = build()

    def testNodes(self):
        self.assertEqual(len(self.cg), 3)
        self.assertEqual(list(self.cg), [self.main, self.first, self.second])
        self.assertIn(self.first, self.cg)
        self.assertEqual(self.cg.entrypoints, [self.main])

    def testTargets(self):
        self.assertEqual(self.cg.targets(self.main, 1), {self.first})
        self.assertEqual(self.cg.targets(self.main, 2), {self.first, self.second})
        self.assertEqual(self.cg.targets(self.main, 0), set())

    def testCallSitesTo(self):
        self.assertEqual(sorted(s for _, s in self.cg.call_sites_to(self.first)), [1, 2])
        self.assertEqual(list(self.cg.call_sites_to(self.second)), [(self.main, 2)])

    def testNeighbours(self):
        self.assertEqual(self.cg.successors(self.main), {self.first, self.second})
        self.assertEqual(self.cg.predecessors(self.second), {self.main})
        self.assertEqual(self.cg.nodes_for(CALLEE), [self.first, self.second])
        self.assertEqual(len(list(self.cg.edges())), 3)

    def testStats(self):
        self.assertEqual(
            self.cg.stats(), {"contexts": 3, "edges": 3, "methods": 2, "entrypoints": 1}
        )

    def testEdgeMustStartAtCall(self):
        self.assertRaises(InvalidModel, self.cg.add_edge, self.main, 0, self.first)
        self.assertRaises(InvalidModel, self.cg.add_edge, self.main, 9, self.first)

    def testUnknownContext(self):
        stranger = ProcedureContext(Procedure(CALLEE, 1, [ir.Return(1)]), "nowhere")
        self.assertRaises(UnknownContext, self.cg.check, stranger)
        self.assertRaises(UnknownContext, self.cg.targets, stranger, 0)
        self.assertIs(self.cg.check(self.main), self.main)


if __name__ == "__main__":
    unittest.main()
