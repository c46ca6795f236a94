"""
Show command implementation.

Evaluates the descriptor and lists its outputs per system.
"""

import logging

from devflake.cli.utils import create_resolver, load_descriptor, load_registry
from devflake.core.platform import detect_system
from devflake.outputs import DEV_SHELLS, evaluate

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the show command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    descriptor = load_descriptor(args)
    registry = load_registry(args, descriptor)
    outputs = evaluate(descriptor, create_resolver(args), registry=registry)

    try:
        current = str(detect_system())
    except RuntimeError:
        current = None

    if descriptor.description:
        print(descriptor.description)
    print(DEV_SHELLS)
    systems = outputs.systems()
    for index, system in enumerate(systems):
        last_system = index == len(systems) - 1
        marker = " (current system)" if system == current else ""
        print(f"{'└───' if last_system else '├───'}{system}{marker}")
        names = outputs.names(system)
        for position, name in enumerate(names):
            spec = outputs.get(system, name)
            branch = "└───" if position == len(names) - 1 else "├───"
            indent = "    " if last_system else "│   "
            print(
                f"{indent}{branch}{name}: development shell "
                f"({len(spec.native_build_inputs)} tools, "
                f"{len(spec.build_inputs)} dependencies)"
            )

    return 0
