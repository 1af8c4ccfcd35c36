# python
"""
Fault taxonomy behavioral tests.

Scope
- Stable fault codes and host label remapping.
- Options merging through copy.replace / trigger, library vs shell surfacing.
- Rendering: usage line plus "error: <message>", exit signals render their text.
"""

import copy
import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console
from rich.text import Text

from argshape import (
    AmbiguousSubcommandError,
    ConversionError,
    FaultCode,
    HelpRequested,
    MissingRequiredError,
    MissingValueError,
    ParseError,
    ParseExit,
    ParseFault,
    ShapeError,
    UnknownFlagError,
    VersionRequested,
    trigger,
)


def render(renderable):
    console = Console(file=io.StringIO(), width=200)
    console.print(renderable, soft_wrap=True, highlight=False, markup=False)
    return console.file.getvalue()


class TestFaultCode(TestCase):
    def testCodesAreStable(self):
        self.assertEqual(FaultCode.UNKNOWN_FLAG, 21101)
        self.assertEqual(FaultCode.MISSING_VALUE, 21102)
        self.assertEqual(FaultCode.AMBIGUOUS_SUBCOMMAND, 21111)
        self.assertEqual(FaultCode.CONVERSION, 21201)
        self.assertEqual(FaultCode.MISSING_REQUIRED, 21301)
        self.assertEqual(FaultCode.HELP, 22001)
        self.assertEqual(FaultCode.VERSION, 22002)

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.CONVERSION.normalize(), "21201")

    def testNormalizeUsesHostLabels(self):
        with mock.patch.object(sys.modules["__main__"], "__codes__", {FaultCode.CONVERSION: "E-CONV"}, create=True):
            self.assertEqual(FaultCode.CONVERSION.normalize(), "E-CONV")
            self.assertEqual(FaultCode.HELP.normalize(), "22001")


class TestTaxonomy(TestCase):
    def testHierarchy(self):
        for error in (UnknownFlagError, MissingValueError, ConversionError, MissingRequiredError,
                      AmbiguousSubcommandError):
            with self.subTest(error=error.__name__):
                self.assertTrue(issubclass(error, ParseError))
                self.assertEqual(error.status, 1)
        for signal in (HelpRequested, VersionRequested):
            with self.subTest(signal=signal.__name__):
                self.assertTrue(issubclass(signal, ParseExit))
                self.assertFalse(issubclass(signal, ParseError))
                self.assertEqual(signal.status, 0)
        self.assertTrue(issubclass(ParseError, ParseFault))
        self.assertTrue(issubclass(ShapeError, TypeError))

    def testOptionsAreReadOnly(self):
        fault = UnknownFlagError("unknown argument --x", input="--x")
        with self.assertRaises(TypeError):
            fault.options["input"] = "--y"
        self.assertEqual(fault.input, "--x")
        self.assertEqual(fault.chain, ())
        self.assertIsNone(fault.code)

    def testConversionProperties(self):
        fault = ConversionError("bad", input="--n", literal="x", typename="int")
        self.assertEqual((fault.input, fault.literal, fault.typename), ("--n", "x", "int"))

    def testReplaceMergesOptions(self):
        fault = MissingRequiredError("--token is required", input="--token")
        replaced = copy.replace(fault, chain=("get",))
        self.assertIsInstance(replaced, MissingRequiredError)
        self.assertEqual(replaced.message, fault.message)
        self.assertEqual(replaced.input, "--token")
        self.assertEqual(replaced.chain, ("get",))
        self.assertEqual(fault.chain, ())


class TestRendering(TestCase):
    def testErrorWithUsage(self):
        fault = UnknownFlagError("unknown argument --x", usage=Text("Usage: tool [--y]"))
        self.assertEqual(render(fault), "Usage: tool [--y]\nerror: unknown argument --x\n")

    def testErrorWithoutUsage(self):
        self.assertEqual(render(UnknownFlagError("unknown argument --x")), "error: unknown argument --x\n")

    def testExitRendersText(self):
        self.assertEqual(render(VersionRequested(text="tool 1.0")), "tool 1.0\n")

    def testBaseFaultIsAbstract(self):
        with self.assertRaises(NotImplementedError):
            ParseFault("x").__rich__()


class TestTrigger(TestCase):
    def testLibraryFormRaisesEnrichedCopy(self):
        fault = UnknownFlagError("unknown argument --x")
        with self.assertRaises(UnknownFlagError) as context:
            trigger(fault, usage="Usage: tool")
        self.assertIsNot(context.exception, fault)
        self.assertEqual(context.exception.options["usage"], "Usage: tool")

    def testShellFormPrintsAndExits(self):
        console = Console(file=io.StringIO(), width=200)
        statuses = []
        trigger(
            MissingValueError("missing value for --n"),
            shell=True,
            console=console,
            exit=statuses.append,
            usage="Usage: tool [--n N]",
        )
        self.assertEqual(console.file.getvalue(), "Usage: tool [--n N]\nerror: missing value for --n\n")
        self.assertEqual(statuses, [1])

    def testShellFormExitStatusForSignals(self):
        console = Console(file=io.StringIO(), width=200)
        statuses = []
        trigger(HelpRequested(), shell=True, console=console, exit=statuses.append, text="help text")
        self.assertEqual(console.file.getvalue(), "help text\n")
        self.assertEqual(statuses, [0])

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))


if __name__ == "__main__":
    unittest.main()
