from __future__ import annotations

import argparse
import logging
import sys
import traceback
from collections.abc import Sequence
from pathlib import Path

from bpm_sdk.api import META_COMMAND, run_command
from bpm_sdk.contracts import Plugin

COMMAND_HELP: dict[str, str] = {
    "validate-parameters": "Validates the parameters in the node file",
    "create-identity": "Creates the node's identity (e.g. private keys, certificates)",
    "create-configurations": "Creates the configurations for a node",
    "start": "Starts the node",
    "stop": "Stops the node",
    "status": "Gives information about the current node status (running, stopped or incomplete)",
    "remove-config": "Removes the node configuration",
    "remove-data": "Removes the node data (i.e. already synced blockchain)",
    "remove-runtime": "Removes everything related to the node itself but no data, identity or configs",
    "remove-identity": "Removes the node identity",
    "upgrade": "Upgrades the node to a newer version of the plugin",
    "test": "Runs a test suite against the running node",
}


def build_parser(plugin: Plugin) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=plugin.name, description=plugin.description)
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", metavar="command", required=True)
    for command, help_text in COMMAND_HELP.items():
        subparser = subparsers.add_parser(command, help=help_text, description=help_text)
        subparser.add_argument("node_file", type=Path, help="Path to the node descriptor (node.json)")

    subparsers.add_parser(
        META_COMMAND,
        help="Shows meta information for this package",
        description="Shows meta information for this package",
    )
    return parser


def configure_logging(*, debug: bool = False) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("bpm_sdk")
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(logging.DEBUG if debug else logging.INFO)


def main(plugin: Plugin, argv: Sequence[str] | None = None) -> int:
    """Run the plugin process CLI and return the exit code."""
    args = build_parser(plugin).parse_args(argv)
    configure_logging(debug=args.debug)

    try:
        result = run_command(plugin, args.command, getattr(args, "node_file", None))
    except Exception as exc:
        if args.debug:
            traceback.print_exc(file=sys.stderr)
        print(_error_message(exc), file=sys.stderr)
        return 1

    if result.output is not None:
        sys.stdout.write(result.output if result.output.endswith("\n") else result.output + "\n")

    if not result.passed:
        print(f"{result.command} failed", file=sys.stderr)
        return 1
    return 0


def _error_message(exc: BaseException) -> str:
    """Return the error text, ending with the root cause's description."""
    message = str(exc) or type(exc).__name__
    root = exc
    while root.__cause__ is not None:
        root = root.__cause__

    root_message = str(root)
    if root is not exc and root_message and root_message not in message:
        message = f"{message}: {root_message}"
    return message
