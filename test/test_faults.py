"""
Faults module behavioral tests (codes, triggering, rendering, host hooks).

Scope
- Validate FaultCode normalization and the __codes__/__docs__ host hooks.
- Validate trigger(): raise/warn outside shell mode, print (and exit) in shell mode.
- Validate __replace__ option merging and class-level title/code defaults.
- Validate Rich rendering of headers, messages and hints.

Conventions
- Test method names follow CamelCase per project convention.
- Host hooks are patched onto the running __main__ module and removed afterwards.
"""

from __future__ import annotations

import io
import os.path
import sys
import unittest
import warnings
from contextlib import redirect_stderr
from unittest import TestCase, mock

from rich.console import Console

from switchyard import faults
from switchyard import (
    Dispatcher,
    FaultCode,
    CommandException,
    CommandError,
    UnknownCommandError,
    CommandWarning,
    UnknownSwitchWarning,
    FallbackValueWarning,
    trigger,
    getdoc,
)


class TestFaultCode(TestCase):
    """Behavioral tests for FaultCode and getdoc()."""

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "11101")

    def testNormalizeHonoursHostCodes(self):
        with mock.patch.object(sys.modules["__main__"], "__codes__", {FaultCode.UNKNOWN_COMMAND: "E-ROUTE"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "E-ROUTE")
            self.assertEqual(FaultCode.UNKNOWN_SWITCH.normalize(), "12111")

    def testGetdocWithoutHostDocs(self):
        self.assertIsNone(getdoc(FaultCode.FALLBACK_VALUE))

    def testGetdocHonoursHostDocs(self):
        with mock.patch.object(sys.modules["__main__"], "__docs__", {FaultCode.FALLBACK_VALUE: "value fell back"}, create=True):
            self.assertEqual(getdoc(FaultCode.FALLBACK_VALUE), "value fell back")

    def testGetdocRejectsNonCodes(self):
        with self.assertRaises(TypeError):
            getdoc(11101)


class TestFaults(TestCase):
    """Behavioral tests for exceptions and warnings."""

    def testClassDefaults(self):
        self.assertEqual(UnknownCommandError("x").code, FaultCode.UNKNOWN_COMMAND)
        self.assertEqual(CommandError("x").code, FaultCode.DELEGATED_ERROR)
        self.assertEqual(UnknownSwitchWarning("x").code, FaultCode.UNKNOWN_SWITCH)
        self.assertEqual(FallbackValueWarning("x").code, FaultCode.FALLBACK_VALUE)
        self.assertEqual(CommandError("x").title, "command failed")

    def testOptionsOverrideDefaults(self):
        error = CommandError("x", title="disk full", code=FaultCode.UNKNOWN_COMMAND)
        self.assertEqual(error.title, "disk full")
        self.assertEqual(error.code, FaultCode.UNKNOWN_COMMAND)

    def testHierarchy(self):
        self.assertTrue(issubclass(UnknownCommandError, CommandException))
        self.assertTrue(issubclass(CommandError, CommandException))
        self.assertTrue(issubclass(UnknownSwitchWarning, CommandWarning))
        self.assertTrue(issubclass(FallbackValueWarning, Warning))

    def testStrIsTheMessage(self):
        self.assertEqual(str(CommandError("cannot read 'a'")), "cannot read 'a'")
        self.assertEqual(str(CommandError()), "")

    def testOptionsAreReadOnly(self):
        error = CommandError("x", hint="y")
        with self.assertRaises(TypeError):
            error.options["hint"] = "z"

    def testReplaceMergesOptions(self):
        error = CommandError("x", hint="y")
        replaced = error.__replace__(shell=False, hint="z")
        self.assertIsInstance(replaced, CommandError)
        self.assertIsNot(replaced, error)
        self.assertEqual(replaced.message, "x")
        self.assertEqual(dict(replaced.options), {"hint": "z", "shell": False})
        self.assertEqual(dict(error.options), {"hint": "y"})


class TestTrigger(TestCase):
    """Behavioral tests for trigger()."""

    def testRaisesOutsideShell(self):
        with self.assertRaises(UnknownCommandError) as context:
            trigger(UnknownCommandError("nothing matched"), hint="try --help")
        self.assertEqual(context.exception.options["hint"], "try --help")

    def testWarnsOutsideShell(self):
        with self.assertWarns(UnknownSwitchWarning) as context:
            trigger(UnknownSwitchWarning("unknown option '--x'"), token="--x")
        self.assertEqual(str(context.warning), "unknown option '--x'")

    def testExitsInShell(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            trigger(CommandError("boom", hint="retry"), shell=True)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("boom", stderr.getvalue())
        self.assertIn("retry", stderr.getvalue())

    def testPrintsWarningsInShell(self):
        stderr = io.StringIO()
        with warnings.catch_warnings(record=True) as caught, redirect_stderr(stderr):
            warnings.simplefilter("always")
            trigger(FallbackValueWarning("using 3"), shell=True)
        self.assertEqual(caught, [])
        self.assertIn("using 3", stderr.getvalue())

    def testWarningsPointOutsideThePackage(self):
        dispatcher = Dispatcher(name="tool")
        with self.assertWarns(UnknownSwitchWarning) as context:
            dispatcher.parse_options(["run", "--bogus"], ())
        package = os.path.dirname(os.path.abspath(faults.__file__))
        self.assertNotEqual(os.path.dirname(os.path.abspath(context.filename)), package)

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


class TestRendering(TestCase):
    """Behavioral tests for Rich rendering."""

    def render(self, fault, **options):
        buffer = io.StringIO()
        Console(file=buffer, width=120).print(fault.__replace__(**options))
        return buffer.getvalue()

    def testPlainLayout(self):
        output = self.render(
            UnknownCommandError("no command matches 'x'", hint="try 'tool --help'"),
            tool=Dispatcher(name="tool"),
        )
        self.assertEqual(output.splitlines(), [
            "[ tool — 11101 | Unknown Command ]",
            "no command matches 'x'",
            " → try 'tool --help'",
        ])

    def testHintIsOptional(self):
        output = self.render(FallbackValueWarning("using 3"), tool=Dispatcher(name="tool"))
        self.assertEqual(output.splitlines(), [
            "[ tool — 12112 | Default Value Used ]",
            "using 3",
        ])

    def testFancyUsesPanel(self):
        output = self.render(CommandError("boom"), tool=Dispatcher(name="tool"), fancy=True)
        self.assertIn("Command Failed", output)
        self.assertIn("╭", output)

    def testHostProgramName(self):
        with mock.patch.object(sys.modules["__main__"], "__prog__", "toolbox", create=True):
            output = self.render(CommandError("boom"), tool=Dispatcher(name="tool"))
        self.assertTrue(output.startswith("[ toolbox — 11131 | Command Failed ]"))


if __name__ == "__main__":
    unittest.main()
