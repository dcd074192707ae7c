"""
Tests for statements: factory range checks, equality and accessors.
"""

import unittest

from flowslice.application.errors import OutOfRangeStatement, SliceError
from flowslice.model import ir
from flowslice.slicer.statement import Statement, StatementKind

from programs import helper_program


class TestStatementFactories(unittest.TestCase):
    def setUp(self):
        self.program = helper_program()
        self.main = self.program.ctx["main"]
        self.helper = self.program.ctx["helper"]

    def testNormal(self):
        stmt = Statement.normal(self.main, 0)
        self.assertEqual(stmt.kind, StatementKind.NORMAL)
        self.assertIsInstance(stmt.instruction, ir.Assign)
        self.assertFalse(stmt.is_call)

    def testNormalOutOfRange(self):
        with self.assertRaises(OutOfRangeStatement) as cm:
            Statement.normal(self.main, 4)
        self.assertEqual(cm.exception.index, 4)
        self.assertIs(cm.exception.context, self.main)

        self.assertRaises(OutOfRangeStatement, Statement.normal, self.main, -1)

    def testOutOfRangeIsAnIndexError(self):
        self.assertRaises(IndexError, Statement.normal, self.main, 99)
        self.assertRaises(SliceError, Statement.normal, self.main, 99)

    def testReturnCallerRequiresCall(self):
        stmt = Statement.return_caller(self.main, 1)
        self.assertEqual(stmt.kind, StatementKind.NORMAL_RET_CALLER)
        self.assertIsInstance(stmt.instruction, ir.Invoke)
        self.assertRaises(OutOfRangeStatement, Statement.return_caller, self.main, 0)

    def testParamCaller(self):
        stmt = Statement.param_caller(self.main, 1, 0)
        self.assertEqual(stmt.argument, 0)
        self.assertRaises(OutOfRangeStatement, Statement.param_caller, self.main, 1, 1)
        self.assertRaises(OutOfRangeStatement, Statement.param_caller, self.main, 0, 0)

    def testParamCallee(self):
        stmt = Statement.param_callee(self.helper, 0)
        self.assertIsNone(stmt.instruction)
        self.assertRaises(OutOfRangeStatement, Statement.param_callee, self.helper, 1)

    def testBoundaries(self):
        entry = Statement.method_entry(self.helper)
        exit = Statement.method_exit(self.helper)
        self.assertNotEqual(entry, exit)
        self.assertIsNone(entry.instruction)
        self.assertIs(exit.procedure, self.helper.procedure)


class TestStatementIdentity(unittest.TestCase):
    def setUp(self):
        self.program = helper_program()
        self.main = self.program.ctx["main"]

    def testEquality(self):
        a = Statement.normal(self.main, 1)
        b = Statement(StatementKind.NORMAL, self.main, 1)
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertEqual(len({a, b}), 1)

    def testKindDistinguishes(self):
        self.assertNotEqual(
            Statement.normal(self.main, 1), Statement.return_caller(self.main, 1)
        )

    def testIsCall(self):
        self.assertTrue(Statement.normal(self.main, 1).is_call)
        self.assertFalse(Statement.return_caller(self.main, 1).is_call)

    def testStr(self):
        text = str(Statement.param_caller(self.main, 1, 0))
        self.assertIn("PARAM_CALLER", text)
        self.assertIn("Example.main", text)
        self.assertIn("arg 0", text)


if __name__ == "__main__":
    unittest.main()
