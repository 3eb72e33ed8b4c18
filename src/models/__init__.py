"""
Models package for orgblocks

Contains data structures and type definitions for the export pipeline.
"""

from .state import ProgramState, pipeline
from .blocks import Backend, Block, Link, ExtractedDirectives
from .handlers import HandlerSpec, HandlerKind, HandlerCategory
from .dispatch import ExportResult, ExportStatus

__all__ = [
    "ProgramState",
    "pipeline",
    "Backend",
    "Block",
    "Link",
    "ExtractedDirectives",
    "HandlerSpec",
    "HandlerKind",
    "HandlerCategory",
    "ExportResult",
    "ExportStatus",
]
