import os
import tempfile
import unittest

from flowslice.application.errors import InvalidModel
from flowslice.application.resources import ExclusionSet, exclusions_file


class TestExclusions(unittest.TestCase):
    def testPackagedFile(self):
        with exclusions_file() as path:
            self.assertTrue(os.path.exists(path))
            self.assertEqual(os.path.basename(str(path)), "exclusions.txt")

    def testPackagedPatterns(self):
        exclusions = ExclusionSet.load()
        self.assertGreater(len(exclusions), 0)
        self.assertTrue(exclusions.excludes("java/awt/Frame"))
        self.assertTrue(exclusions.excludes("sun/misc/Unsafe"))
        self.assertFalse(exclusions.excludes("Example"))
        self.assertFalse(exclusions.excludes("java/lang/String"))

    def testFullMatchOnly(self):
        exclusions = ExclusionSet([r"com\/acme\/Internal"])
        self.assertTrue(exclusions.excludes("com/acme/Internal"))
        self.assertFalse(exclusions.excludes("com/acme/InternalHelper"))

    def testCommentsAndBlankLines(self):
        exclusions = ExclusionSet(["# toolkit", "", "  ", r"javax\/swing\/.*"])
        self.assertEqual(exclusions.patterns, [r"javax\/swing\/.*"])

    def testExplicitFile(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "exclusions.txt")
            with open(path, "w") as f:
                f.write("Example\n")
            exclusions = ExclusionSet.load(path)
        self.assertTrue(exclusions.excludes("Example"))
        self.assertFalse(exclusions.excludes("java/awt/Frame"))

    def testBadPattern(self):
        self.assertRaises(InvalidModel, ExclusionSet, ["java/(awt"])


if __name__ == "__main__":
    unittest.main()
