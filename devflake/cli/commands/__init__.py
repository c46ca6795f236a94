"""CLI command implementations. Each module exports ``run(args) -> int``."""
