"""
Print-env command implementation.

Renders an activation script for a development shell.
"""

import logging

from devflake.cli.utils import (
    create_resolver,
    get_system,
    load_descriptor,
    load_registry,
)
from devflake.outputs import evaluate
from devflake.shell import ActivationRenderer

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the print-env command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    descriptor = load_descriptor(args)
    registry = load_registry(args, descriptor)

    system = get_system(args)
    if system not in descriptor.systems:
        logger.error(f"No outputs for {system}")
        return 1

    outputs = evaluate(
        descriptor, create_resolver(args), registry=registry, systems=[system]
    )
    script = ActivationRenderer().render(outputs.get(system, args.shell), args.format)

    if args.output:
        args.output.write_text(script, encoding="utf-8")
        logger.info(f"Wrote activation script: {args.output}")
    else:
        print(script, end="")
    return 0
