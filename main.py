import logging
import sys

from rich import print
from rich.logging import RichHandler

from commandflags import *

options = {
    "verbose": False,
    "debug": False,
    "cpu": 1.0,
    "mem": 32,
    "instances": 1,
}


def flagset(name):
    # Every command with flags gets the same shape; each node still owns its own set.
    flags = FlagSet(name)
    flags.boolean("verbose", options["verbose"], "Enable verbose output")
    flags.boolean("debug", options["debug"], "Enable debug output")
    flags.float("c", options["cpu"], "cpu share")
    flags.integer("m", options["mem"], "memory share (MB)")
    flags.integer("i", options["instances"], "instance count")
    return flags


example = CommandNode(
    "example",
    flagset("example"),
    short="This example demonstrates commandflags.",
    long="""This example demonstrates commandflags. The commandflags
    library is a minimal add-on for typed flag sets that adds sub-commands.
    Each sub-command owns its own flag set. The heaviest part of the
    commandflags library is really the help system which is improved over
    plain flag listings.""",
)
example.command(
    "help",
    short="Show help for a command",
    long="Help usage:  help COMMAND",
    help="Valid commands are deploy, create, update, show, list_artifacts, and deployments",
)
example.command("deploy", flagset("deploy"), short="deploy an app completely", long="usage: deploy NAME REV")
example.command("create", flagset("create"), short="initial create/deploy of an app", long="usage: create NAME REV")
example.command("update", flagset("update"), short="update definition of an app, really!", long="usage: update NAME REV")
example.command("show", short="show the description of an app")
example.command(
    "deployments",
    subcommands=(
        CommandNode("status", short="get the status of deployments for an app"),
        CommandNode("destroy", short="destroy hung deployment for an app"),
    ),
    short="either status or destroy the deployments for an app",
)
example.command("list_artifacts", short="list_artifacts the definition of an app")


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.DEBUG if {"-debug", "--debug"} & set(sys.argv[1:]) else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler()],
    )
    words = invoke(example, shell=True, colorful=True)
    print("all the nonflags are:", words)
