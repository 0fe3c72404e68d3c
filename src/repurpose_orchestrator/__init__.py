"""Bulk repurpose orchestrator.

Turns a selection of content items × target platforms into one generated post
per pair, with per-task progress, partial-failure tolerance, immediate
persistence of each result, and CSV export.
"""

__version__ = "0.1.0"

from repurpose_orchestrator.core.config import RepurposeConfig
from repurpose_orchestrator.core.orchestrator import RepurposeOrchestrator

__all__ = ["__version__", "RepurposeConfig", "RepurposeOrchestrator"]
