"""
orgblocks - Custom block and link exports for Org documents

Colour, column, details, editor-comment, anchor and badge markup for HTML
and LaTeX exports.
"""

__version__ = "1.0.0"

from .directives import directives_extract
from .handlers import HandlerRegistry
from .dispatch import Dispatcher
from .exporter import Exporter
from .log import LOG, state_connectToLogger

__all__ = [
    "directives_extract",
    "HandlerRegistry",
    "Dispatcher",
    "Exporter",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
