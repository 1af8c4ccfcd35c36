# python
"""
Utility behavioral tests (Unset sentinel, coalesce, rename, mirror, case conversions).
"""

import copy
import pickle
import unittest
from unittest import TestCase

from argshape.utils import Unset, UnsetType, coalesce, envize, kebab, mirror, rename


class TestUnset(TestCase):
    def testUnsetIsFalsy(self):
        self.assertFalse(Unset)

    def testUnsetIsSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnsetRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetIsSealed(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: F-841
                pass

    def testUnsetInUnions(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)


class TestCoalesce(TestCase):
    def testCoalesceReplacesUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testCoalesceKeepsFalseyValues(self):
        for value in (None, 0, "", []):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class TestRename(TestCase):
    def testRenameFunctionForm(self):
        def original():
            pass

        self.assertEqual(rename(original, "renamed").__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

    def testRenameDecoratorForm(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")

    def testRenameRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)
        with self.assertRaises(TypeError):
            rename()


class TestMirror(TestCase):
    def testMirrorCopiesContainers(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a"]

        holder = Holder()
        self.assertEqual(holder.items, ("a",))
        with self.assertRaises(AttributeError):
            holder.items = ()


class TestCaseConversions(TestCase):
    def testKebab(self):
        self.assertEqual(kebab("dry_run"), "dry-run")
        self.assertEqual(kebab("setUpstream"), "set-upstream")
        self.assertEqual(kebab("IDs"), "ids")
        self.assertEqual(kebab("_private_"), "private")

    def testEnvize(self):
        self.assertEqual(envize("dry_run"), "DRY_RUN")
        self.assertEqual(envize("dry-run", "TOOL_"), "TOOL_DRY_RUN")
        self.assertEqual(envize("setUpstream"), "SET_UPSTREAM")

    def testConversionsRejectNonStrings(self):
        with self.assertRaises(TypeError):
            kebab(1)
        with self.assertRaises(TypeError):
            envize(1)


if __name__ == "__main__":
    unittest.main()
