"""
Dispatch result model

A typed outcome for every block or link export so callers decide whether
a failure propagates or the original text is kept.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class ExportStatus(Enum):
    """Outcome of dispatching one block or link"""
    RENDERED = "rendered"        # handler produced markup
    PASSTHROUGH = "passthrough"  # no handler (or extension disabled); text unchanged
    FAILED = "failed"            # handler raised; text unchanged, error attached


@dataclass
class ExportResult:
    """
    Result of Dispatcher.block_export() / Dispatcher.link_export()

    Attributes:
        status: What happened
        text: Handler markup when RENDERED, otherwise the original text
        error: Exception raised by the handler when FAILED

    Example:
        >>> ExportResult.passthrough("raw").text
        'raw'
    """
    status: ExportStatus
    text: str
    error: Optional[Exception] = None

    @classmethod
    def rendered(cls, markup: str) -> "ExportResult":
        return cls(status=ExportStatus.RENDERED, text=markup)

    @classmethod
    def passthrough(cls, original: str) -> "ExportResult":
        return cls(status=ExportStatus.PASSTHROUGH, text=original)

    @classmethod
    def failed(cls, original: str, error: Exception) -> "ExportResult":
        return cls(status=ExportStatus.FAILED, text=original, error=error)

    @property
    def ok(self) -> bool:
        """True unless the handler failed"""
        return self.status is not ExportStatus.FAILED

    def unwrap(self) -> str:
        """
        Return the text, re-raising the handler's error on failure

        Raises:
            Exception: The error carried by a FAILED result
        """
        if self.error is not None:
            raise self.error
        return self.text
