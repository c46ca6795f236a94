"""
Metadata command implementation.

Shows the description, declared inputs and locked revisions.
"""

import logging

from devflake.cli.utils import get_project_root, load_descriptor
from devflake.config.lockfile import LockFileManager

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the metadata command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    descriptor = load_descriptor(args)
    lock = LockFileManager(get_project_root(args)).load()

    print(f"Descriptor:   {descriptor.path}")
    if descriptor.description:
        print(f"Description:  {descriptor.description}")
    print(f"Packages:     {descriptor.packages}")
    if descriptor.overlays:
        print(f"Overlays:     {', '.join(descriptor.overlays)}")
    print(f"Systems:      {', '.join(str(s) for s in descriptor.systems)}")
    print("Inputs:")

    for name, reference in descriptor.registry.items():
        if reference.pinned:
            pin = reference.revision
        elif lock is not None and name in lock.sources:
            pin = f"{lock.sources[name].revision} (locked)"
        else:
            pin = "unlocked"
        print(f"  {name}: {reference.locator} [{pin}]")
        for nested_name, target in reference.follows.items():
            print(f"    {nested_name} follows {target}")

    return 0
