"""Merge pipeline package.

This package contains the orchestration facade and its stage telemetry helpers.
"""

from .orchestrator import MergePipeline

__all__ = ["MergePipeline"]
