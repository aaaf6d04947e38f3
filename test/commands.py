"""
Commands module behavioral tests.

Scope
- Validate Command declaration: verb/descr defaults from the handler, sanitization,
  reserved and duplicate switch tags, read-only views.
- Validate the command() factory in direct and decorator modes.
- Validate the execution pipeline: tokenizer faults, help precedence, validation
  order, handler status handling.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Command, command, Switch, Outcome, Result).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from switchyard import (
    Arguments,
    Command,
    Outcome,
    Result,
    Switch,
    command,
    FaultCode,
    UnknownSwitchError,
    MissingRequiredSwitchError,
    MissingSwitchValueError,
)


class Recorder:
    """Handler double that records every Arguments it receives."""

    def __init__(self, status=0):
        self.status = status
        self.calls = []

    def __call__(self, arguments):
        self.calls.append(arguments)
        return self.status


class TestCommandDeclaration(TestCase):
    """Behavioral tests for Command construction."""

    def testVerbAndDescriptionDefaultToHandler(self):
        def add(arguments):
            """Adds two numbers"""
            return 0

        cmd = Command(add)
        self.assertEqual(cmd.verb, "add")
        self.assertEqual(cmd.descr, "Adds two numbers")
        self.assertIsNone(cmd.notes)
        self.assertIs(cmd.handler, add)

    def testVerbIsLowerCased(self):
        self.assertEqual(Command(Recorder(), "ADD").verb, "add")
        self.assertEqual(Command(Recorder(), "").verb, "")
        self.assertEqual(Command(Recorder(), "  Add  ").verb, "add")

    def testInvalidVerbsAreRejected(self):
        with self.assertRaises(ValueError):
            Command(Recorder(), "two words")
        with self.assertRaises(TypeError):
            Command(Recorder(), 3)

    def testHandlerMustBeCallable(self):
        with self.assertRaises(TypeError):
            Command("add", "add")

    def testSwitchesKeepDeclarationOrder(self):
        cmd = Command(Recorder(), "add", [Switch("b"), Switch("a")])
        self.assertEqual(list(cmd.switches), ["b", "a"])

    def testReservedTagsAreRejected(self):
        for tag in ("h", "H", "?"):
            with self.subTest(tag=tag):
                with self.assertRaises(ValueError):
                    Command(Recorder(), "add", [Switch(tag)])

    def testDuplicateTagsAreRejected(self):
        with self.assertRaises(ValueError):
            Command(Recorder(), "add", [Switch("a"), Switch("A")])

    def testSwitchesMustBeSwitches(self):
        with self.assertRaises(TypeError):
            Command(Recorder(), "add", ["-a"])

    def testSwitchesAreReadOnly(self):
        cmd = Command(Recorder(), "add", [Switch("a")])
        with self.assertRaises(TypeError):
            cmd.switches["b"] = Switch("b")  # type: ignore[index]
        with self.assertRaises(AttributeError):
            cmd.verb = "sub"

    def testEmptyDescriptionIsRejected(self):
        with self.assertRaises(ValueError):
            Command(Recorder(), "add", descr="  ")
        with self.assertRaises(ValueError):
            Command(Recorder(), "add", notes="")

    def testFactoryDirectMode(self):
        handler = Recorder()
        cmd = command(handler, verb="add", descr="adds")
        self.assertIsInstance(cmd, Command)
        self.assertEqual(cmd.verb, "add")

    def testFactoryDecoratorMode(self):
        @command(verb="add", switches=[Switch("a")])
        def add(arguments):
            return 0

        self.assertIsInstance(add, Command)
        self.assertIn("a", add.switches)

    def testFactoryRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            command(verb="add")(5)

    def testCallingRunsHandlerDirectly(self):
        handler = Recorder(3)
        cmd = Command(handler, "add", [Switch("a", required=True)])
        self.assertEqual(cmd(Arguments()), 3)
        self.assertEqual(handler.calls, [Arguments()])


class TestCommandExecution(TestCase):
    """Behavioral tests for Command.execute()."""

    def setUp(self):
        self.handler = Recorder()
        self.command = Command(
            self.handler,
            "add",
            [
                Switch("a", "first number", required=True),
                Switch("b", "second number", required=True),
                Switch("c", "carry"),
                Switch("v", "verbose", boolean=True),
            ],
        )

    def testCompletedRunPassesArgumentsToHandler(self):
        result = self.command.execute(["-a", "3", "-b", "4"])
        self.assertEqual(result, Result.completed(0))
        self.assertIs(result.outcome, Outcome.COMPLETED)
        self.assertEqual(self.handler.calls, [Arguments({"a": "3", "b": "4"})])

    def testHandlerStatusIsReturned(self):
        cmd = Command(lambda arguments: int(arguments["a"]) + int(arguments["b"]), "sum",
                      [Switch("a"), Switch("b")])
        self.assertEqual(cmd.execute(["-a", "3", "-b", "4"]).status, 7)

    def testMissingRequiredSwitchRejects(self):
        result = self.command.execute(["-a", "3"])
        self.assertIs(result.outcome, Outcome.REJECTED)
        self.assertIsInstance(result.fault, MissingRequiredSwitchError)
        self.assertIs(result.fault.code, FaultCode.MISSING_REQUIRED_SWITCH)
        self.assertEqual(result.fault.options["tag"], "b")
        self.assertEqual(self.handler.calls, [])

    def testMissingValueRejects(self):
        result = self.command.execute(["-a", "1", "-b", "2", "-c"])
        self.assertIs(result.outcome, Outcome.REJECTED)
        self.assertIsInstance(result.fault, MissingSwitchValueError)
        self.assertEqual(result.fault.options["tag"], "c")
        self.assertEqual(self.handler.calls, [])

    def testRequiredCheckComesBeforeValueCheck(self):
        result = self.command.execute(["-a"])
        self.assertIsInstance(result.fault, MissingRequiredSwitchError)
        self.assertEqual(result.fault.options["tag"], "b")

    def testReportedSwitchIsDeterministic(self):
        cmd = Command(Recorder(), "pair", [Switch("z", required=True), Switch("a", required=True)])
        for _ in range(3):
            self.assertEqual(cmd.execute([]).fault.options["tag"], "a")

    def testHelpWinsOverValidation(self):
        for tokens in (["-h"], ["-a", "-h"], ["-H", "-c"]):
            with self.subTest(tokens=tokens):
                self.assertEqual(self.command.execute(tokens), Result.helped())
        self.assertEqual(self.handler.calls, [])

    def testTokenizerFaultRejects(self):
        result = self.command.execute(["-z"], index=2)
        self.assertIs(result.outcome, Outcome.REJECTED)
        self.assertIsInstance(result.fault, UnknownSwitchError)
        self.assertEqual(result.fault.options["index"], 2)

    def testBooleanAndTrailingReachHandler(self):
        self.command.execute(["-a", "1", "-b", "2", "-v", "notes.txt"])
        arguments, = self.handler.calls
        self.assertEqual(arguments["v"], "true")
        self.assertEqual(arguments.trailing, ("notes.txt",))

    def testNoneStatusMeansSuccess(self):
        cmd = Command(lambda arguments: None, "noop")
        self.assertEqual(cmd.execute([]), Result.completed(0))

    def testNonIntegerStatusRaises(self):
        for status in ("0", 1.0, True):
            with self.subTest(status=status):
                cmd = Command(Recorder(status), "bad")
                with self.assertRaises(TypeError):
                    cmd.execute([])

    def testHandlerExceptionsPropagate(self):
        cmd = Command(lambda arguments: 1 // 0, "boom")
        with self.assertRaises(ZeroDivisionError):
            cmd.execute([])


if __name__ == "__main__":
    unittest.main()
