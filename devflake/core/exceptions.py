"""
Centralized exception hierarchy for devflake.

Every error raised by devflake itself derives from DevFlakeError. Errors raised
by a resolver implementation are propagated unchanged and are not wrapped.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class DevFlakeError(Exception):
    """Base exception for all devflake errors."""

    pass


# ============================================================================
# Source Exceptions
# ============================================================================


class SourceError(DevFlakeError):
    """Base exception for source registry errors."""

    pass


class DuplicateSourceError(SourceError):
    """Raised when two sources share the same identifier."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Duplicate source identifier: {identifier}")


class UnresolvableSourceError(SourceError):
    """Raised by a resolver when a source cannot be located or pinned."""

    def __init__(self, identifier: str, reason: str = ""):
        self.identifier = identifier
        self.reason = reason
        msg = f"Cannot resolve source: {identifier}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


# ============================================================================
# Resolver Exceptions
# ============================================================================


class ResolverError(DevFlakeError):
    """Base exception for package resolution errors."""

    pass


class PackageNotFoundError(ResolverError):
    """Raised when an attribute path does not name a package in the set."""

    def __init__(self, attribute: str, platform: str = ""):
        self.attribute = attribute
        self.platform = platform
        msg = f"Package not found: {attribute}"
        if platform:
            msg += f" on {platform}"
        super().__init__(msg)


# ============================================================================
# Descriptor and Output Exceptions
# ============================================================================


class DescriptorError(DevFlakeError):
    """Raised when a descriptor is structurally inconsistent."""

    pass


class OutputNotFoundError(DevFlakeError):
    """Raised when an output is requested for an unknown platform or name."""

    def __init__(self, platform: str, kind: str, name: str):
        self.platform = platform
        self.kind = kind
        self.name = name
        super().__init__(f"No such output: {kind}.{platform}.{name}")


# ============================================================================
# Lock File Exceptions
# ============================================================================


class LockFileError(DevFlakeError):
    """Base exception for lock file errors."""

    pass
