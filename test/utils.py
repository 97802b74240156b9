"""
Utils module behavioral tests (Unset sentinel, coalesce, rename, freeze, mirror).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from types import MappingProxyType
from unittest import TestCase

from argfield.utils import *


class TestUnset(TestCase):
    """Sentinel guarantees."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)

    def testFalsyAndRepr(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertNotEqual(Unset, None)

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(3, str | Unset))

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})


class TestHelpers(TestCase):
    """coalesce, rename, freeze and mirror."""

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)

    def testRenameFunctionForm(self):
        def f():
            pass

        self.assertIs(rename(f, "work"), f)
        self.assertEqual((f.__name__, f.__qualname__), ("work", "work"))

    def testRenameDecoratorForm(self):
        @rename("work")
        def f():
            pass

        self.assertEqual(f.__name__, "work")

    def testRenameArity(self):
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(len, "x")

    def testFreeze(self):
        self.assertEqual(freeze(["a"]), ("a",))
        self.assertEqual(freeze("abc"), "abc")
        self.assertEqual(freeze({1}), frozenset({1}))
        self.assertIsInstance(freeze({"a": 1}), MappingProxyType)

    def testMirror(self):
        class Box:
            items = mirror("items")

            def __init__(self):
                self._items = ["a"]

        box = Box()
        self.assertEqual(box.items, ("a",))
        with self.assertRaises(AttributeError):
            box.items = ()
        with self.assertRaises(TypeError):
            mirror(1)


if __name__ == "__main__":
    unittest.main()
