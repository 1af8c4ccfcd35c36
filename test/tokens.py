# python
"""
Token classification behavioral tests.
"""

import unittest
from unittest import TestCase

from argshape.tokens import LongFlag, Positional, ShortFlag, Terminator, TokenStream, classify


class TestClassify(TestCase):
    def testLongFlags(self):
        self.assertEqual(list(classify(["--verbose", "--name=value", "--empty="])), [
            LongFlag("verbose", None, 1),
            LongFlag("name", "value", 2),
            LongFlag("empty", "", 3),
        ])

    def testShortFlags(self):
        self.assertEqual(list(classify(["-v", "-n=value"])), [
            ShortFlag("v", None, 1),
            ShortFlag("n", "value", 2),
        ])

    def testShortBundle(self):
        self.assertEqual(list(classify(["-abc"])), [
            ShortFlag("a", None, 1, bundled=True),
            ShortFlag("b", None, 1, bundled=True),
            ShortFlag("c", None, 1),
        ])

    def testShortBundleInlineValueGoesToLastFlag(self):
        self.assertEqual(list(classify(["-vO=3"])), [
            ShortFlag("v", None, 1, bundled=True),
            ShortFlag("O", "3", 1),
        ])

    def testTerminatorEscapesEverythingAfter(self):
        self.assertEqual(list(classify(["a", "--", "--verbose", "-x", "--"])), [
            Positional("a", 1),
            Terminator(2),
            Positional("--verbose", 3, escaped=True),
            Positional("-x", 4, escaped=True),
            Positional("--", 5, escaped=True),
        ])

    def testDashAndNegativeNumbersArePositional(self):
        for text in ("-", "-5", "-1.5", "-1.5e3", "-.5", "-2E-3"):
            with self.subTest(text=text):
                self.assertEqual(list(classify([text])), [Positional(text, 1)])

    def testDashedWordsAreFlags(self):
        self.assertIsInstance(next(classify(["-5x"])), ShortFlag)

    def testLazy(self):
        tokens = classify(iter(["--a", 3]))
        self.assertEqual(next(tokens), LongFlag("a", None, 1))
        with self.assertRaises(TypeError):
            next(tokens)

    def testStringRendering(self):
        self.assertEqual(str(LongFlag("name", "x")), "--name")
        self.assertEqual(str(ShortFlag("n")), "-n")
        self.assertEqual(str(Terminator()), "--")
        self.assertEqual(str(Positional("file")), "file")


class TestTokenStream(TestCase):
    def testPeekDoesNotConsume(self):
        stream = TokenStream(["-v", "file"])
        self.assertEqual(stream.peek(), ShortFlag("v", None, 1))
        self.assertEqual(next(stream), ShortFlag("v", None, 1))
        self.assertEqual(stream.peek(), Positional("file", 2))
        self.assertEqual(list(stream), [Positional("file", 2)])

    def testPeekAtEnd(self):
        stream = TokenStream([])
        self.assertIsNone(stream.peek())
        self.assertEqual(stream.peek("end"), "end")
        self.assertEqual(list(stream), [])


if __name__ == "__main__":
    unittest.main()
