import sys

from switchyard import *

dispatcher = Dispatcher(
    "sample",
    "demonstrates how a dispatcher abstracts a console application's command line parsing",
    "sample [COMMAND] [SWITCHES]",
    "0.1.0",
    {1: "parameter was not a valid integer"},
)


@dispatcher.command(verb="", switches=[Switch("n", "your name")], default=True)
def greet(arguments):
    """Prints out a nice welcome"""
    dispatcher.logger.line("hello %s" % (arguments["n"] or "there"))
    return 0


@dispatcher.command(
    verb="add",
    switches=[
        Switch("a", "first number", required=True),
        Switch("b", "second number", required=True),
    ],
)
def add(arguments):
    """Adds two numbers"""
    try:
        a, b = int(arguments["a"]), int(arguments["b"])
    except ValueError:
        return 1
    dispatcher.logger.line("%d + %d = %d" % (a, b, a + b))
    return 0


if __name__ == '__main__':
    # with arguments, run them once; otherwise read commands until an empty line
    sys.exit(dispatcher.execute() if sys.argv[1:] else repl(dispatcher))
