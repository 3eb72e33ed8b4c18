"""
Handler specification and metadata models

Defines the structure and categories of block and link handlers for
registry management and documentation.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional


class HandlerKind(Enum):
    """Where a type name appears in a document"""
    BLOCK = "block"    # #+begin_TYPE ... #+end_TYPE
    LINK = "link"      # [[TYPE:label][description]]


class HandlerCategory(Enum):
    """
    Categories of handlers

    Used for organization and listing.
    """
    COLOUR = "colour"          # red, blue, color
    LAYOUT = "layout"          # parallel2, parallel3NB, details
    ANNOTATION = "annotation"  # edcomm
    ANCHOR = "anchor"          # link-here
    BADGE = "badge"            # badge, github-stars, social


@dataclass
class HandlerSpec:
    """
    Specification for a block or link handler

    Defines metadata and the formatting function for one type name.
    Used by HandlerRegistry to manage available types.

    Attributes:
        name: Type name as written in the document
        kind: Block or link
        category: Category for organization
        description: Human-readable description
        handler: Export function (Block|Link, AppSettings) -> str
        follow: Interactive follow action (label, AppSettings) -> str, links only
        examples: Example usage strings
        aliases: Alternative names for the type
    """
    name: str
    kind: HandlerKind
    category: HandlerCategory
    description: str
    handler: Callable
    follow: Optional[Callable] = None
    examples: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)

