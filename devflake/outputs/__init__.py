"""
Per-platform evaluation and output aggregation.
"""

from devflake.outputs.aggregator import DEV_SHELLS, FlakeOutputs, aggregate
from devflake.outputs.evaluator import evaluate
from devflake.outputs.selector import for_each_system

__all__ = [
    "DEV_SHELLS",
    "FlakeOutputs",
    "aggregate",
    "evaluate",
    "for_each_system",
]
