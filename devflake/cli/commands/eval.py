"""
Eval command implementation.

Prints an evaluated development shell as JSON.
"""

import json
import logging

from devflake.cli.utils import (
    create_resolver,
    get_system,
    load_descriptor,
    load_registry,
)
from devflake.outputs import evaluate

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the eval command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    descriptor = load_descriptor(args)
    registry = load_registry(args, descriptor)
    resolver = create_resolver(args)

    if args.all_systems:
        outputs = evaluate(descriptor, resolver, registry=registry)
        print(json.dumps(outputs.to_dict(), indent=2, sort_keys=True))
        return 0

    system = get_system(args)
    if system not in descriptor.systems:
        logger.error(
            f"No outputs for {system}; descriptor systems: "
            f"{', '.join(str(s) for s in descriptor.systems)}"
        )
        return 1

    outputs = evaluate(descriptor, resolver, registry=registry, systems=[system])
    spec = outputs.get(system, args.shell)
    print(json.dumps(spec.to_dict(), indent=2, sort_keys=True))
    return 0
