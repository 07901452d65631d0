"""
Utility tests (Unset sentinel, coalesce, rename, mirror, slugify).

Conventions
- Test method names follow CamelCase per project convention.
"""

import copy
import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase

from argospec.utils import Unset, UnsetType, coalesce, rename, mirror, slugify


class TestUnset(TestCase):

    def testSingletonAndFalsey(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testCopiesKeepIdentity(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionsWithTypes(self):
        self.assertIsInstance("x", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})


class TestHelpers(TestCase):

    def testCoalesceOnlyReplacesUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce((), "fallback"), ())

    def testRename(self):
        @rename("renamed")
        def generated():
            pass

        self.assertEqual(generated.__name__, "renamed")
        self.assertEqual(generated.__qualname__, "renamed")
        with self.assertRaises(TypeError):
            rename(42, "name")

    def testMirrorFreezesContainers(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")
            marks = mirror("marks")
            label = mirror("label")

            def __init__(self):
                self._items = ["a"]
                self._table = {"k": "v"}
                self._marks = {"x"}
                self._label = "text"

        holder = Holder()
        self.assertEqual(holder.items, ("a",))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.marks, frozenset({"x"}))
        self.assertEqual(holder.label, "text")
        with self.assertRaises(AttributeError):
            holder.items = []

    def testSlugify(self):
        self.assertEqual(slugify("receiver_files"), "receiver-files")
        self.assertEqual(slugify("_private__name_"), "private-name")
        self.assertEqual(slugify("plain"), "plain")


if __name__ == "__main__":
    unittest.main()
