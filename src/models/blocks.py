"""
Export input models

Type-safe structures for the text handed to handlers by the exporter and for
the result of directive extraction.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Optional


class Backend(str, Enum):
    """
    Export backends with dedicated templates

    Backend tags travel as plain strings; any tag not listed here (e.g.,
    "ascii", "md") falls through to each formatter's generic branch.
    Being a str subclass, members compare equal to their tag:
    ``"html" == Backend.HTML``.
    """
    HTML = "html"
    LATEX = "latex"


@dataclass
class Block:
    """
    A custom block encountered during export

    Attributes:
        type: Block type as written after #+begin_ (e.g., "details", "parallel2NB")
        contents: Raw text between the begin and end lines
        backend: Active export backend tag

    Example:
        For source "#+begin_red\\nhello\\n#+end_red" exported to HTML:
        Block(type="red", contents="hello\\n", backend="html")
    """
    type: str
    contents: str
    backend: str


@dataclass
class Link:
    """
    A custom link encountered during export

    Attributes:
        type: Link type, the part before the first colon (e.g., "badge")
        label: Link path, the part after the first colon
        description: Optional bracketed description, None when not given
        backend: Active export backend tag

    Example:
        For source "[[badge:license|MIT|blue]]":
        Link(type="badge", label="license|MIT|blue", description=None, backend="html")
    """
    type: str
    label: str
    description: Optional[str]
    backend: str


@dataclass
class ExtractedDirectives:
    """
    Result of extracting :name:value directives from block contents

    Returned by directives_extract().

    Attributes:
        contents: Contents with every requested directive occurrence removed
        values: Requested directive names mapped to their first captured value.
                A directive written without a value maps to "", a directive
                never written maps to None.

    Example:
        Input: ":title: Hi\\nbody\\n", names ('title', 'ed')
        Result: ExtractedDirectives(
            contents="\\nbody\\n",
            values={"title": " Hi", "ed": None}
        )
    """
    contents: str
    values: Dict[str, Optional[str]]
