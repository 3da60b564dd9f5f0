"""
Tests for the shared utilities (Unset sentinel, coalesce, rename, mirror, IntrospectableType).

Conventions
- Test method names follow CamelCase per project convention.
"""
import importlib.util
import unittest
import warnings
from types import MappingProxyType
from unittest import TestCase

import commandflags
from commandflags.utils import *


class UnsetTest(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)


class HelpersTest(TestCase):

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))

    def testRename(self):
        def function():
            pass

        renamed = rename("decorated")(function)
        self.assertIs(renamed, function)
        self.assertEqual(renamed.__name__, "decorated")
        self.assertEqual(renamed.__qualname__, "decorated")
        with self.assertRaises(TypeError):
            rename(42)
        with self.assertRaises(TypeError):
            rename("name")(42)

    def testMirrorReturnsReadOnlyViews(self):
        class Holder:
            _items = [1, 2]
            _table = {"a": 1}
            _tags = {"x"}
            _name = "holder"
            items = mirror("items")
            table = mirror("table")
            tags = mirror("tags")
            name = mirror("name")

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.tags, frozenset({"x"}))
        self.assertEqual(holder.name, "holder")
        with self.assertRaises(AttributeError):
            holder.items = ()


class IntrospectableTypeTest(TestCase):

    def testTypenameAndRepr(self):
        class SampleThing(metaclass=IntrospectableType):
            __introspectable__ = ("name", "size")
            __displayable__ = ("name",)

            def __init__(self):
                self._name = "x"
                self._size = 3

        thing = SampleThing()
        self.assertEqual(SampleThing.__typename__, "sample-thing")
        self.assertEqual(thing.size, 3)
        self.assertEqual(repr(thing), "sample-thing(name='x')")
        self.assertEqual(list(thing.__rich_repr__()), [("name", "x")])


class PackageTest(TestCase):

    def testMetadata(self):
        self.assertEqual(commandflags.__title__, "commandflags")
        self.assertEqual(commandflags.__author__, "The commandflags developers")
        self.assertEqual(
            "%d.%d.%d" % commandflags.version_info[:3],
            commandflags.__version__,
        )

    def testSourcesCompileWithoutWarnings(self):
        for module in ("utils", "faults", "flags", "helps", "commands"):
            with self.subTest(module=module):
                origin = importlib.util.find_spec("commandflags." + module).origin
                with open(origin, encoding="utf-8") as file:
                    source = file.read()
                with warnings.catch_warnings():
                    warnings.simplefilter("error")
                    compile(source, origin, "exec")


if __name__ == "__main__":
    unittest.main()
