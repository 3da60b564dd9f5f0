"""
Flag primitive tests (registration, prefix parsing, conversions, faults).

Scope
- Validate construction-time checks on Flag metadata.
- Validate FlagSet registration, introspection and reset.
- Validate prefix parsing: terminators, lone dash, boolean forms, value forms.
- Validate every parse failure code.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from decimal import Decimal, InvalidOperation
from unittest import TestCase

from commandflags import Flag, FlagKind, FlagSet, FaultCode, FlagSetError, HelpRequested


def _flagset():
    flags = FlagSet("deploy")
    flags.boolean("verbose", False, "enable verbose output")
    flags.float("c", 1.0, "cpu share")
    flags.integer("m", 32, "memory share (MB)")
    flags.string("region", "eu")
    return flags


class TestFlag(TestCase):
    """Construction-time validation of single flags."""

    def testDefaultsToZeroValues(self):
        self.assertIs(Flag("a", FlagKind.BOOLEAN).default, False)
        self.assertEqual(Flag("a", FlagKind.INTEGER).default, 0)
        self.assertEqual(Flag("a", FlagKind.FLOAT).default, 0.0)
        self.assertEqual(Flag("a", FlagKind.STRING).default, "")
        self.assertIsNone(Flag("a", FlagKind.OTHER, type=list).default)

    def testFloatDefaultIsStoredAsFloat(self):
        flag = Flag("c", FlagKind.FLOAT, 2)
        self.assertIsInstance(flag.default, float)
        self.assertIsInstance(flag.value, float)

    def testRejectsMismatchedDefaults(self):
        with self.assertRaises(TypeError):
            Flag("a", FlagKind.BOOLEAN, 1)
        with self.assertRaises(TypeError):
            Flag("a", FlagKind.INTEGER, True)
        with self.assertRaises(TypeError):
            Flag("a", FlagKind.FLOAT, "1.0")
        with self.assertRaises(TypeError):
            Flag("a", FlagKind.STRING, 3)

    def testRejectsMalformedNames(self):
        for name in ("", "   ", "-verbose", "1st", "two words", "a=b"):
            with self.subTest(name=name):
                with self.assertRaises(ValueError):
                    Flag(name)
        with self.assertRaises(TypeError):
            Flag(42)

    def testTypeOnlyForOtherKind(self):
        with self.assertRaises(TypeError):
            Flag("a", FlagKind.STRING, type=str)
        with self.assertRaises(TypeError):
            Flag("a", FlagKind.OTHER)

    def testUsageIsOptionalButNeverEmpty(self):
        self.assertIsNone(Flag("a").usage)
        self.assertEqual(Flag("a", usage="  some text ").usage, "some text")
        with self.assertRaises(ValueError):
            Flag("a", usage="   ")

    def testLabelsFollowKind(self):
        self.assertEqual(
            [kind.label for kind in FlagKind],
            ["", "INT", "FLOAT", "STRING", "VALUE"],
        )

    def testPropertiesAreReadOnly(self):
        flag = Flag("a")
        with self.assertRaises(AttributeError):
            flag.value = "x"  # type: ignore[misc]

    def testReprListsMetadata(self):
        self.assertTrue(repr(Flag("verbose", FlagKind.BOOLEAN)).startswith("flag(name='verbose'"))


class TestFlagSetRegistration(TestCase):
    """Registration and introspection on FlagSet."""

    def testRegistrationOrderIsKept(self):
        flags = _flagset()
        self.assertEqual([flag.name for flag in flags], ["verbose", "c", "m", "region"])
        self.assertEqual(len(flags), 4)

    def testRedefinitionRaises(self):
        flags = _flagset()
        with self.assertRaises(ValueError):
            flags.integer("verbose", 1)

    def testLookupAndMembership(self):
        flags = _flagset()
        self.assertIn("c", flags)
        self.assertIn(flags["c"], flags)
        self.assertNotIn("x", flags)
        self.assertIsNone(flags.lookup("x"))
        with self.assertRaises(KeyError):
            flags["x"]  # NOQA: B-018

    def testValuesSnapshot(self):
        self.assertEqual(
            _flagset().values(),
            {"verbose": False, "c": 1.0, "m": 32, "region": "eu"},
        )

    def testFlagsMappingIsReadOnly(self):
        flags = _flagset()
        with self.assertRaises(TypeError):
            flags.flags["x"] = Flag("x")  # type: ignore[index]


class TestFlagSetParsing(TestCase):
    """Prefix parsing behavior of FlagSet.parse()."""

    def testEmptyInput(self):
        flags = _flagset()
        flags.parse([])
        self.assertTrue(flags.parsed)
        self.assertEqual(flags.args, ())

    def testSingleAndDoubleDashAreEquivalent(self):
        flags = _flagset()
        flags.parse(["-verbose", "--m", "64", "--region=us"])
        self.assertEqual(flags.values(), {"verbose": True, "c": 1.0, "m": 64, "region": "us"})

    def testStopsAtFirstPositional(self):
        flags = _flagset()
        flags.parse(["-verbose", "app", "-m", "64"])
        self.assertEqual(flags.args, ("app", "-m", "64"))
        self.assertEqual(flags["m"].value, 32)

    def testLoneDashIsPositional(self):
        flags = _flagset()
        flags.parse(["-", "-verbose"])
        self.assertEqual(flags.args, ("-", "-verbose"))
        self.assertFalse(flags["verbose"].value)

    def testDoubleDashTerminatesAndIsConsumed(self):
        flags = _flagset()
        flags.parse(["-verbose", "--", "-m", "64"])
        self.assertEqual(flags.args, ("-m", "64"))
        self.assertTrue(flags["verbose"].value)

    def testBooleanNeverConsumesNextToken(self):
        flags = _flagset()
        flags.parse(["-verbose", "false"])
        self.assertTrue(flags["verbose"].value)
        self.assertEqual(flags.args, ("false",))

    def testBooleanInlineValues(self):
        for text, expected in (("1", True), ("T", True), ("True", True), ("0", False), ("f", False), ("FALSE", False)):
            with self.subTest(text=text):
                flags = _flagset()
                flags.parse(["-verbose=" + text])
                self.assertIs(flags["verbose"].value, expected)

    def testIntegerAcceptsBasePrefixes(self):
        flags = _flagset()
        flags.parse(["-m", "0x10"])
        self.assertEqual(flags["m"].value, 16)

    def testIntegerLeadingZeroIsOctal(self):
        for text, expected in (("010", 8), ("-010", -8), ("0", 0), ("0_17", 15), ("0o10", 8)):
            with self.subTest(text=text):
                flags = _flagset()
                flags.parse(["-m", text])
                self.assertEqual(flags["m"].value, expected)

    def testValueMayStartWithDash(self):
        flags = _flagset()
        flags.parse(["-m", "-5"])
        self.assertEqual(flags["m"].value, -5)

    def testCustomConverter(self):
        flags = FlagSet("tags")
        flags.value("tags", lambda text: frozenset(text.split(",")), frozenset({"all"}), "comma separated tags")
        flags.parse(["-tags=a,b"])
        self.assertEqual(flags["tags"].value, {"a", "b"})
        self.assertEqual(flags["tags"].kind.label, "VALUE")

    def testSpecifiedTracksLastParse(self):
        flags = _flagset()
        flags.parse(["-c", "2.5"])
        self.assertTrue(flags["c"].specified)
        self.assertFalse(flags["m"].specified)
        flags.parse([])
        self.assertFalse(flags["c"].specified)
        self.assertEqual(flags["c"].value, 2.5)

    def testReset(self):
        flags = _flagset()
        flags.parse(["-c", "2.5", "rest"])
        flags.reset()
        self.assertEqual(flags["c"].value, 1.0)
        self.assertFalse(flags.parsed)
        self.assertEqual(flags.args, ())

    def testRejectsNonStringTokens(self):
        with self.assertRaises(TypeError):
            _flagset().parse(["-m", 64])


class TestFlagSetFaults(TestCase):
    """Every parse failure reports its dedicated code."""

    def assertFault(self, tokens, code):
        with self.assertRaises(FlagSetError) as context:
            _flagset().parse(tokens)
        self.assertIs(context.exception.code, code)
        return context.exception

    def testBadSyntax(self):
        self.assertFault(["---verbose"], FaultCode.BAD_FLAG_SYNTAX)
        fault = self.assertFault(["-=x"], FaultCode.BAD_FLAG_SYNTAX)
        self.assertEqual(fault.message, "bad flag syntax: -=x")

    def testUndefinedFlag(self):
        fault = self.assertFault(["-nope"], FaultCode.UNKNOWN_FLAG)
        self.assertEqual(str(fault), "flag provided but not defined: -nope")
        self.assertEqual(fault.token, "-nope")

    def testHelpRequested(self):
        for token in ("-h", "-help", "--help"):
            with self.subTest(token=token):
                fault = self.assertFault([token], FaultCode.HELP_REQUESTED)
                self.assertIsInstance(fault, HelpRequested)

    def testRegisteredHelpFlagIsNotAFault(self):
        flags = FlagSet("tool")
        flags.boolean("h", False)
        flags.parse(["-h"])
        self.assertTrue(flags["h"].value)

    def testMissingValue(self):
        fault = self.assertFault(["-m"], FaultCode.MISSING_FLAG_VALUE)
        self.assertEqual(fault.message, "flag needs an argument: -m")
        self.assertEqual(fault.flag.name, "m")

    def testInvalidValue(self):
        self.assertFault(["-m", "lots"], FaultCode.INVALID_FLAG_VALUE)
        self.assertFault(["-c=fast"], FaultCode.INVALID_FLAG_VALUE)
        fault = self.assertFault(["-verbose=maybe"], FaultCode.INVALID_FLAG_VALUE)
        self.assertIsInstance(fault.__cause__, ValueError)

    def testOctalRejectsNonOctalDigits(self):
        self.assertFault(["-m", "09"], FaultCode.INVALID_FLAG_VALUE)

    def testAnyConverterFailureIsAFault(self):
        flags = FlagSet("buy")
        flags.value("price", Decimal, None, "price limit")
        flags.value("size", {"s": 1, "m": 2}.__getitem__, None, "size code")
        for tokens, cause in (
                (["-price", "abc"], InvalidOperation),
                (["-size", "xl"], KeyError),
        ):
            with self.subTest(tokens=tokens):
                with self.assertRaises(FlagSetError) as context:
                    flags.parse(tokens)
                self.assertIs(context.exception.code, FaultCode.INVALID_FLAG_VALUE)
                self.assertIsInstance(context.exception.__cause__, cause)

    def testEarlierFlagsKeepTheirValues(self):
        flags = _flagset()
        with self.assertRaises(FlagSetError):
            flags.parse(["-verbose", "-nope"])
        self.assertTrue(flags["verbose"].value)
        self.assertFalse(flags.parsed)


if __name__ == "__main__":
    unittest.main()
