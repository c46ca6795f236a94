"""
Lock command implementation.

Records the exact revision of every input in devflake.lock.
"""

import logging

from devflake.cli.utils import create_resolver, get_project_root, load_descriptor
from devflake.config.lockfile import LockFile, LockFileManager

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the lock command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    descriptor = load_descriptor(args)
    registry = descriptor.registry
    resolver = create_resolver(args)

    unknown = [name for name in args.update if name not in registry]
    if unknown:
        logger.error(f"Unknown input(s): {', '.join(unknown)}")
        return 1

    manager = LockFileManager(get_project_root(args))
    old_lock = manager.load()

    # Keep existing pins unless the input is being updated or was edited
    current = registry
    if old_lock is not None:
        kept = {
            name: source
            for name, source in old_lock.sources.items()
            if name not in args.update
        }
        current = manager.apply(
            LockFile(version=old_lock.version, sources=kept), registry
        )

    revisions = {
        name: resolver.lock_revision(reference) for name, reference in current.items()
    }
    new_lock = manager.generate(registry, revisions)

    if old_lock is not None:
        changes = manager.diff(old_lock, new_lock)
        for name in changes["added"]:
            print(f"• Added input '{name}': {revisions[name]}")
        for name in changes["removed"]:
            print(f"• Removed input '{name}'")
        for change in changes["modified"]:
            print(
                f"• Updated input '{change['name']}': "
                f"{change['old_revision']} → {change['new_revision']}"
            )
    else:
        for name, revision in revisions.items():
            print(f"• Locked input '{name}': {revision}")

    if args.dry_run:
        logger.info("Dry run, lock file not written")
        return 0

    manager.save(new_lock)
    return 0
