"""
Dispatch of custom blocks and links to their handlers

The Dispatcher sits between the exporter and the HandlerRegistry. For each
block or link it resolves the handler, invokes it with the explicit
settings, and reports the outcome as an ExportResult:

    RENDERED     handler markup
    PASSTHROUGH  unknown type or extension disabled; text unchanged
    FAILED       handler raised; text unchanged, error attached

Unknown types are never errors. Whether a failure aborts the export is the
caller's decision (see ExportResult.unwrap()).
"""

from typing import Any, Optional

from ..models.blocks import Block, Link
from ..models.handlers import HandlerKind
from ..models.dispatch import ExportResult
from .handlers import HandlerRegistry
from .log import LOG


class Dispatcher:
    """
    Routes block and link exports (and link follows) to registered handlers

    Settings given to a call take precedence over the settings the
    dispatcher was built with, so toggles such as hide_editor_comments are
    read at format time.
    """

    def __init__(self, settings: Optional[Any] = None, registry: Optional[HandlerRegistry] = None) -> None:
        """
        Initialize dispatcher

        Args:
            settings: AppSettings used when a call does not pass its own
                      (defaults to the appsettings singleton)
            registry: HandlerRegistry to dispatch through (built if omitted)
        """
        if settings is None:
            from ..config import appsettings
            settings = appsettings
        self.settings = settings
        self.registry = registry if registry is not None else HandlerRegistry(settings)

    def block_export(
        self,
        block_type: str,
        contents: Optional[str],
        backend: str,
        settings: Optional[Any] = None,
    ) -> ExportResult:
        """
        Export one custom block

        Args:
            block_type: Type written after #+begin_
            contents: Raw block contents; None is treated as ""
            backend: Export backend tag
            settings: Per-call AppSettings override

        Returns:
            ExportResult; on PASSTHROUGH/FAILED its text is the contents unchanged
        """
        settings = settings if settings is not None else self.settings
        original = contents if contents is not None else ""

        if not settings.enabled:
            return ExportResult.passthrough(original)

        handler = self.registry.get(block_type, HandlerKind.BLOCK)
        if handler is None:
            LOG(f"No handler for block '{block_type}', leaving contents unchanged", level=3)
            return ExportResult.passthrough(original)

        block = Block(type=block_type, contents=original, backend=backend)
        try:
            markup = handler(block, settings)
        except Exception as e:
            LOG(f"Block '{block_type}' failed for backend '{backend}': {e}", level=2)
            return ExportResult.failed(original, e)

        return ExportResult.rendered(markup)

    def link_export(
        self,
        link_type: str,
        label: str,
        description: Optional[str],
        backend: str,
        settings: Optional[Any] = None,
    ) -> ExportResult:
        """
        Export one custom link

        Args:
            link_type: Part of the link before the first colon
            label: Part of the link after the first colon
            description: Bracketed description or None; handlers that do
                         not support descriptions ignore it
            backend: Export backend tag
            settings: Per-call AppSettings override

        Returns:
            ExportResult; on PASSTHROUGH/FAILED its text is the label unchanged
        """
        settings = settings if settings is not None else self.settings

        if not settings.enabled:
            return ExportResult.passthrough(label)

        handler = self.registry.get(link_type, HandlerKind.LINK)
        if handler is None:
            LOG(f"No handler for link '{link_type}', leaving it unchanged", level=3)
            return ExportResult.passthrough(label)

        link = Link(type=link_type, label=label, description=description, backend=backend)
        try:
            markup = handler(link, settings)
        except Exception as e:
            LOG(f"Link '{link_type}:{label}' failed for backend '{backend}': {e}", level=2)
            return ExportResult.failed(label, e)

        return ExportResult.rendered(markup)

    def link_follow(self, link_type: str, label: str, settings: Optional[Any] = None) -> Optional[str]:
        """
        Run the interactive follow action of a link type

        Follow is separate from export: it reports a message or opens a URL.
        Errors propagate, since the user asked for this action directly.

        Returns:
            The follow action's result (message or URL), None when the type
            is unknown or has no follow action
        """
        settings = settings if settings is not None else self.settings
        spec = self.registry.spec_get(link_type, HandlerKind.LINK)
        if spec is None or spec.follow is None:
            return None
        return spec.follow(label, settings)
