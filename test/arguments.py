"""
Arguments module behavioral tests (switch tokenizer and parsed results).

Scope
- Validate the three tokenizer states: switch tags, switch values, trailing tokens.
- Validate the state changes: bare invocation, '--' terminator, long bare words,
  switch-shaped tokens in value position.
- Validate tokenizer faults: malformed, unknown and duplicate switches, with
  ordinal positions.
- Validate the Arguments accessors (case-insensitive lookup, read-only views).

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (parse, Arguments, Command, Switch).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from switchyard import (
    Arguments,
    Command,
    Switch,
    parse,
    FaultCode,
    MalformedSwitchError,
    UnknownSwitchError,
    DuplicateSwitchError,
    UnexpectedValueError,
)


def _command():
    return Command(
        lambda arguments: 0,
        "copy",
        [
            Switch("a", "alpha"),
            Switch("b", "beta", required=True),
            Switch("f", "force", boolean=True),
        ],
    )


class TestTokenizer(TestCase):
    """Behavioral tests for parse()."""

    def setUp(self):
        self.command = _command()

    def testEmptyInputParsesCleanly(self):
        result = parse([], self.command)
        self.assertTrue(result.ok)
        self.assertEqual(len(result.arguments), 0)
        self.assertEqual(result.arguments.trailing, ())

    def testValueSwitchesTakeTheNextToken(self):
        arguments, fault = parse(["-a", "1", "-b", "2"], self.command)
        self.assertIsNone(fault)
        self.assertEqual(dict(arguments.values), {"a": "1", "b": "2"})
        self.assertEqual(arguments.trailing, ())

    def testTagsAreCaseInsensitive(self):
        arguments, fault = parse(["-A", "x"], self.command)
        self.assertIsNone(fault)
        self.assertEqual(arguments["a"], "x")
        self.assertEqual(arguments["A"], "x")
        self.assertEqual(arguments.tags, ("a",))

    def testBooleanSwitchNeverConsumesValue(self):
        arguments, fault = parse(["-f", "bar"], self.command)
        self.assertIsNone(fault)
        self.assertEqual(arguments["f"], "true")
        self.assertEqual(arguments.trailing, ("bar",))

    def testBareInvocationIsAllTrailing(self):
        arguments, fault = parse(["file.txt", "-a", "1"], self.command)
        self.assertIsNone(fault)
        self.assertEqual(len(arguments), 0)
        self.assertEqual(arguments.trailing, ("file.txt", "-a", "1"))

    def testTerminatorForcesTrailing(self):
        arguments, fault = parse(["--", "-a"], self.command)
        self.assertIsNone(fault)
        self.assertNotIn("a", arguments)
        self.assertEqual(arguments.trailing, ("-a",))

    def testTerminatorAfterSwitches(self):
        arguments, fault = parse(["-f", "--", "-b", "x"], self.command)
        self.assertIsNone(fault)
        self.assertEqual(dict(arguments.values), {"f": "true"})
        self.assertEqual(arguments.trailing, ("-b", "x"))

    def testLongBareWordStartsTrailing(self):
        arguments, fault = parse(["-a", "1", "file.txt", "-b"], self.command)
        self.assertIsNone(fault)
        self.assertEqual(dict(arguments.values), {"a": "1"})
        self.assertEqual(arguments.trailing, ("file.txt", "-b"))

    def testValueMissingAtEndStaysNone(self):
        arguments, fault = parse(["-a"], self.command)
        self.assertIsNone(fault)
        self.assertIn("a", arguments)
        self.assertIsNone(arguments["a"])

    def testSwitchInValuePositionStartsNewTag(self):
        arguments, fault = parse(["-a", "-f"], self.command)
        self.assertIsNone(fault)
        self.assertIsNone(arguments["a"])
        self.assertEqual(arguments["f"], "true")

    def testUnknownSwitchAsFirstToken(self):
        for tag in "zxyq9":
            with self.subTest(tag=tag):
                result = parse(["-" + tag, "value"], self.command)
                self.assertFalse(result.ok)
                self.assertIsInstance(result.fault, UnknownSwitchError)
                self.assertIs(result.fault.code, FaultCode.UNKNOWN_SWITCH)
                self.assertEqual(result.fault.options["index"], 1)

    def testFaultPositionHonoursStartIndex(self):
        _, fault = parse(["-a", "1", "-z"], self.command, index=2)
        self.assertIsInstance(fault, UnknownSwitchError)
        self.assertEqual(fault.options["index"], 4)
        self.assertIn("fourth position", fault.message)

    def testMalformedSwitch(self):
        for tokens in (["-a", "1", "-ab"], ["-f", "xy"], ["-f", "x"]):
            with self.subTest(tokens=tokens):
                _, fault = parse(tokens, self.command)
                self.assertIsInstance(fault, MalformedSwitchError)
                self.assertIs(fault.code, FaultCode.MALFORMED_SWITCH)

    def testDuplicateSwitch(self):
        for tokens in (["-a", "1", "-a", "2"], ["-f", "-f"], ["-a", "1", "-A", "2"], ["-b", "2", "-f", "-b", "3"]):
            with self.subTest(tokens=tokens):
                _, fault = parse(tokens, self.command)
                self.assertIsInstance(fault, DuplicateSwitchError)
                self.assertIs(fault.code, FaultCode.DUPLICATE_SWITCH)

    def testFailureStopsImmediately(self):
        arguments, fault = parse(["-a", "1", "-z", "-b", "2"], self.command)
        self.assertIsInstance(fault, UnknownSwitchError)
        self.assertEqual(dict(arguments.values), {"a": "1"})

    def testHelpTagIsAlwaysAccepted(self):
        arguments, fault = parse(["-a", "1", "-H"], self.command)
        self.assertIsNone(fault)
        self.assertEqual(arguments["h"], "true")

    def testParsingIsRepeatable(self):
        tokens = ["-a", "1", "-f", "rest.txt"]
        self.assertEqual(parse(tokens, self.command), parse(tokens, self.command))

    def testValueForPresenceOnlySwitchIsRejected(self):
        class Fickle:
            """Switch double that reports boolean only after its first read."""

            def __init__(self):
                self.reads = 0

            @property
            def boolean(self):
                self.reads += 1
                return self.reads > 1

        class Target:
            verb = "fickle"
            switches = {"x": Fickle()}

        _, fault = parse(["-x", "value"], Target())
        self.assertIsInstance(fault, UnexpectedValueError)
        self.assertIs(fault.code, FaultCode.UNEXPECTED_VALUE)
        self.assertEqual(fault.options["index"], 2)

    def testFaultNamesTheCommandVerb(self):
        _, fault = parse(["-z"], self.command)
        self.assertEqual(fault.options["verb"], "copy")


class TestArguments(TestCase):
    """Behavioral tests for the Arguments result type."""

    def testLookupIsCaseInsensitive(self):
        arguments = Arguments({"A": "1"}, ["x"])
        self.assertEqual(arguments["a"], "1")
        self.assertEqual(arguments.get("A"), "1")
        self.assertIn("A", arguments)
        self.assertEqual(arguments.tags, ("a",))

    def testAbsentSwitchReadsAsNone(self):
        arguments = Arguments({"a": "1"})
        self.assertIsNone(arguments["b"])
        self.assertEqual(arguments.get("b", "fallback"), "fallback")
        self.assertNotIn("b", arguments)
        self.assertNotIn(1, arguments)

    def testNonStringTagsAreRejected(self):
        arguments = Arguments({"a": "1"})
        with self.assertRaises(TypeError):
            arguments[1]
        with self.assertRaises(TypeError):
            arguments.get(None)

    def testViewsAreReadOnly(self):
        arguments = Arguments({"a": "1"}, ["x"])
        with self.assertRaises(TypeError):
            arguments.values["a"] = "2"  # type: ignore[index]
        self.assertIsInstance(arguments.trailing, tuple)

    def testEquality(self):
        self.assertEqual(Arguments({"a": "1"}, ["x"]), Arguments({"A": "1"}, ("x",)))
        self.assertNotEqual(Arguments({"a": "1"}), Arguments({"a": "2"}))
        self.assertNotEqual(Arguments({"a": "1"}, ["x"]), Arguments({"a": "1"}))


if __name__ == "__main__":
    unittest.main()
