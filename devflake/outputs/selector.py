"""Per-platform fan-out.

Evaluates a function once for every platform of a static enumeration. Each
call receives only its own platform and its result is stored under that
platform's key; nothing is carried from one iteration to the next.
"""

import logging
from typing import Callable, Dict, Iterable, TypeVar

from devflake.core.exceptions import DescriptorError
from devflake.core.platform import PlatformIdentifier

logger = logging.getLogger(__name__)

T = TypeVar("T")


def for_each_system(
    systems: Iterable[PlatformIdentifier],
    fn: Callable[[PlatformIdentifier], T],
) -> Dict[str, T]:
    """
    Call ``fn`` once per platform.

    Args:
        systems: Platform enumeration
        fn: Function producing the outputs of one platform

    Returns:
        Platform string -> result of ``fn``

    Raises:
        DescriptorError: If a platform appears twice in the enumeration
    """
    results: Dict[str, T] = {}
    for system in systems:
        key = str(system)
        if key in results:
            raise DescriptorError(f"Duplicate system in enumeration: {key}")
        logger.debug(f"Evaluating outputs for {key}")
        results[key] = fn(system)
    return results
