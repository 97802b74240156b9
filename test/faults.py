"""
Faults module behavioral tests (duplicate policy, rendering, trigger contract).

Scope
- Validate strict duplicate rejection and non-strict shadowing with a warning.
- Validate shell-mode rendering (rich) and exit behavior.
- Validate trigger()/getdoc() contracts and host overrides from __main__.

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is checked through a color-less rich console capture.
"""

from __future__ import annotations

import io
import sys
import unittest
import warnings
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from argfield import (
    Parser,
    Subcommand,
    Flag,
    DuplicateNameError,
    ShadowedNameWarning,
    FieldException,
    FieldWarning,
    FaultCode,
    trigger,
    getdoc,
)
from argfield import faults


def _capture():
    return Console(file=io.StringIO(), color_system=None, force_terminal=False, width=200)


class TestDuplicatePolicy(TestCase):
    """Registration faults raised by the parser."""

    def testDuplicateSubcommandRejected(self):
        parser = Parser(name="field")
        parser.add_subcommand("say", takes=3)
        with self.assertRaises(DuplicateNameError) as context:
            parser.add_subcommand("say", takes=1)
        fault = context.exception
        self.assertEqual(fault.options["code"], FaultCode.DUPLICATE_SUBCOMMAND)
        self.assertEqual(fault.options["name"], "say")
        self.assertIs(fault.options["tool"], parser)
        self.assertEqual(len(parser.subcommands), 1)

    def testDuplicateFlagRejected(self):
        parser = Parser()
        parser.add_flag("-kill")
        with self.assertRaises(DuplicateNameError) as context:
            parser.add_flag("-kill")
        self.assertEqual(context.exception.options["code"], FaultCode.DUPLICATE_FLAG)

    def testSameNameAcrossKindsAllowed(self):
        parser = Parser()
        parser.add_subcommand("x")
        parser.add_flag("x")
        self.assertEqual(len(parser.subcommands), 1)
        self.assertEqual(len(parser.flags), 1)

    def testNonStrictShadowsWithWarning(self):
        parser = Parser(strict=False)
        first = parser.add_subcommand("say", takes=1)
        with self.assertWarns(ShadowedNameWarning):
            second = parser.add_subcommand("say", takes=2)
        self.assertEqual(parser.subcommands, (first, second))
        self.assertIs(parser.find_subcommand("say"), first)
        parser.parse(["say", "a", "b"])
        self.assertTrue(first.passed)
        self.assertFalse(second.passed)
        self.assertEqual(first.values, ("a",))
        self.assertEqual(parser.context.overflow, ("b",))

    def testShadowWarningNamesWinner(self):
        parser = Parser(strict=False)
        first = parser.add_flag("-v")
        parser.add_flag("-q")
        with self.assertWarns(ShadowedNameWarning) as context:
            second = parser.add_flag("-v")
        options = context.warning.options
        self.assertIs(options["existing"], first)
        self.assertIs(options["definition"], second)
        self.assertEqual(options["position"], 2)
        self.assertEqual(options["code"], FaultCode.SHADOWED_FLAG)

    def testDistinctNamesDoNotWarn(self):
        parser = Parser(strict=False)
        with warnings.catch_warnings():
            warnings.simplefilter("error", ShadowedNameWarning)
            parser.add_flag("-v")
            parser.add_flag("-q")
        self.assertEqual(len(parser.flags), 2)

    def testShadowedFlagNeverRuns(self):
        calls = []
        parser = Parser(strict=False)
        parser.add_flag("-v", lambda context: calls.append("first"))
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ShadowedNameWarning)
            parser.add_flag("-v", lambda context: calls.append("second"))
        parser.parse(["-v", "-v"])
        self.assertEqual(calls, ["first"])
        self.assertEqual(len(parser.context.flags), 1)

    def testDefinitionOwnedByAnotherParserRejected(self):
        say = Subcommand("say")
        Parser(say)
        with self.assertRaises(ValueError):
            Parser(say)

    def testDefinitionRegisteredTwiceRejected(self):
        kill = Flag("-kill")
        parser = Parser(kill)
        with self.assertRaises(ValueError):
            parser.add_flag(kill)


class TestShellMode(TestCase):
    """Faults rendered with rich instead of raised."""

    def testShellErrorPrintsAndExits(self):
        console = _capture()
        parser = Parser(name="field", shell=True, colorful=False)
        parser.add_flag("-kill")
        with patch.object(faults, "console", console):
            with self.assertRaises(SystemExit) as context:
                parser.add_flag("-kill")
        self.assertEqual(context.exception.code, 1)
        output = console.file.getvalue()
        self.assertIn("field", output)
        self.assertIn("11152", output)
        self.assertIn("Duplicate Flag", output)
        self.assertIn("'-kill'", output)

    def testShellWarningPrintsWithoutWarning(self):
        console = _capture()
        parser = Parser(name="field", strict=False, shell=True, fancy=True, colorful=False)
        parser.add_subcommand("say")
        with patch.object(faults, "console", console):
            with warnings.catch_warnings():
                warnings.simplefilter("error")
                parser.add_subcommand("say")
        output = console.file.getvalue()
        self.assertIn("12151", output)
        self.assertIn("Shadowed Subcommand", output)
        self.assertEqual(len(parser.subcommands), 2)


class TestRendering(TestCase):
    """Direct rendering and trigger contract."""

    def testPlainRendering(self):
        console = _capture()
        fault = DuplicateNameError(
            "subcommand name 'say' is already in use",
            title="duplicate subcommand",
            code=FaultCode.DUPLICATE_SUBCOMMAND,
            hint="pick another name",
            colorful=False,
        )
        console.print(fault)
        lines = console.file.getvalue().splitlines()
        self.assertEqual(lines[0], "[ argfield — 11151 | Duplicate Subcommand ]")
        self.assertEqual(lines[1], "subcommand name 'say' is already in use")
        self.assertEqual(lines[2], " → pick another name")

    def testHostCodesOverride(self):
        main = sys.modules["__main__"]
        with patch.object(main, "__codes__", {FaultCode.DUPLICATE_FLAG: "DUP-FLAG"}, create=True):
            self.assertEqual(FaultCode.DUPLICATE_FLAG.normalize(), "DUP-FLAG")
        self.assertEqual(FaultCode.DUPLICATE_FLAG.normalize(), "11152")

    def testHostProgOverride(self):
        console = _capture()
        main = sys.modules["__main__"]
        with patch.object(main, "__prog__", "hosted", create=True):
            console.print(FieldException("boom", colorful=False))
        self.assertTrue(console.file.getvalue().startswith("[ hosted"))

    def testGetdoc(self):
        main = sys.modules["__main__"]
        self.assertIsNone(getdoc(FaultCode.SHADOWED_FLAG))
        with patch.object(main, "__docs__", {FaultCode.SHADOWED_FLAG: "docs"}, create=True):
            self.assertEqual(getdoc(FaultCode.SHADOWED_FLAG), "docs")
        with self.assertRaises(TypeError):
            getdoc(12152)

    def testTriggerRaisesCopyWithOptions(self):
        with self.assertRaises(FieldException) as context:
            trigger(FieldException("boom"), hint="try again")
        self.assertEqual(context.exception.options["hint"], "try again")
        self.assertEqual(context.exception.message, "boom")

    def testTriggerWarns(self):
        with self.assertWarns(FieldWarning):
            trigger(FieldWarning("careful"))

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


if __name__ == "__main__":
    unittest.main()
