"""
Exceptions raised by block and link handlers

These are the user-facing failures: they carry a message meant to be shown
during export. The dispatcher wraps them (and any other handler exception)
in a FAILED ExportResult.
"""

from typing import Iterable


class OrgBlocksError(Exception):
    """Base class for handler errors surfaced to the user"""
    pass


class UnsupportedColourError(OrgBlocksError):
    """Raised when a colour block or link names a colour that is not available"""

    def __init__(self, colour: str, supported: Iterable[str]) -> None:
        self.colour = colour
        super().__init__(
            f"unsupported colour “{colour}”; use one of: {', '.join(supported)}"
        )


class BadgeError(OrgBlocksError):
    """Raised when a badge label lacks its key or value field"""
    pass


class UnsupportedSocialError(OrgBlocksError):
    """Raised when a social badge names an unknown platform"""

    def __init__(self, platform: str, supported: Iterable[str]) -> None:
        self.platform = platform
        super().__init__(
            f"unsupported social platform “{platform}”; use one of: {', '.join(supported)}"
        )


class LayoutError(OrgBlocksError):
    """Raised when a parallel block asks for an impossible column layout"""
    pass
