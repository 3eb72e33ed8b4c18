"""
Exporter for Org documents with custom blocks and links

Plays the host's part: scans Org source for special blocks
(#+begin_TYPE ... #+end_TYPE) and bracket links ([[TYPE:label][desc]]),
hands each to the Dispatcher, and substitutes the markup it returns.
Everything else in the document is copied through untouched.

Export works inside-out, like a compiler over nested directives:
1. Find the next block and its matching end line (depth tracking for
   blocks of the same type)
2. Export the block's contents first (nested blocks and links)
3. Dispatch the block with the exported contents

Verbatim blocks (src, example, ...) are copied as-is and never scanned.

Example:
    >>> exporter = Exporter(backend="html")
    >>> exporter.text_export("#+begin_red\\nhi\\n#+end_red")
    '<span style="color:red;">hi\\n</span>'
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.dispatch import ExportResult, ExportStatus
from ..models.handlers import HandlerKind
from .dispatch import Dispatcher
from .log import LOG


BLOCK_BEGIN = re.compile(
    r'^[ \t]*#\+begin_(?P<type>\S+)(?P<args>[^\n]*)$',
    re.IGNORECASE | re.MULTILINE,
)

BLOCK_MARKER = re.compile(
    r'^[ \t]*#\+(?P<which>begin|end)_(?P<type>\S+)[^\n]*$',
    re.IGNORECASE | re.MULTILINE,
)

LINK = re.compile(
    r'\[\[(?P<type>[A-Za-z][\w-]*):(?P<label>[^\[\]]*)\](?:\[(?P<description>[^\[\]]*)\])?\]'
)

OUTPUT_SUFFIXES: Dict[str, str] = {
    'html': '.html',
    'latex': '.tex',
}


class Exporter:
    """
    Exports Org source, replacing custom blocks and links with backend markup

    Responsibilities:
    - Locate blocks (with nesting) and links
    - Route them through the Dispatcher
    - Apply the failure policy (strict: raise; otherwise warn and keep text)
    - Write the exported document
    """

    def __init__(
        self,
        backend: str = "html",
        settings: Optional[Any] = None,
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        """
        Initialize exporter

        Args:
            backend: Export backend tag (html, latex, ...)
            settings: AppSettings for this export (defaults to appsettings)
            dispatcher: Dispatcher to route through (built from settings if omitted)
        """
        if settings is None:
            from ..config import appsettings
            settings = appsettings
        self.backend = backend
        self.settings = settings
        self.dispatcher = dispatcher if dispatcher is not None else Dispatcher(settings)

        self.block_count = 0
        self.link_count = 0
        self.failures: List[Dict[str, Any]] = []

    def export(self, input_file: Path, output_dir: Path, source: Optional[str] = None) -> Dict[str, Any]:
        """
        Export an Org file and write the result

        Args:
            input_file: Org source file
            output_dir: Directory receiving <stem><suffix>
            source: Already-read contents of input_file (read from disk if None)

        Returns:
            dict with export results and statistics
        """
        LOG(f"Exporting {input_file} to {self.backend}...", level=2)
        self.block_count = 0
        self.link_count = 0
        self.failures = []
        if source is None:
            source = Path(input_file).read_text(encoding='utf-8')

        exported = self.text_export(source)

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        suffix = OUTPUT_SUFFIXES.get(self.backend, f".{self.backend}")
        output_file = output_dir / f"{Path(input_file).stem}{suffix}"
        output_file.write_text(exported, encoding='utf-8')
        LOG(f"Wrote {output_file}", level=2)

        return {
            'status': True,
            'output_file': str(output_file),
            'block_count': self.block_count,
            'link_count': self.link_count,
            'failures': list(self.failures),
        }

    def text_export(self, text: str, line_offset: int = 0) -> str:
        """
        Export a span of Org text

        Text between blocks has its links exported; each block is exported
        through block_export().

        Args:
            text: Org source span
            line_offset: Line number of the span's first line minus one,
                         for error reporting in nested spans

        Returns:
            Exported text

        Raises:
            SyntaxError: If a #+begin_TYPE has no matching #+end_TYPE
        """
        parts: List[str] = []
        position = 0

        while True:
            begin = BLOCK_BEGIN.search(text, position)
            if begin is None:
                break

            block_type = begin.group('type')
            line_number = line_offset + text.count('\n', 0, begin.start()) + 1

            end = self.blockEnd_find(text, begin.end(), block_type)
            if end is None:
                raise SyntaxError(
                    f"Unterminated block '#+begin_{block_type}' at line {line_number}"
                )

            parts.append(self.links_export(
                text[position:begin.start()],
                line_offset + text.count('\n', 0, position),
            ))

            inner_start = min(begin.end() + 1, end.start())
            parts.append(self.block_export(
                block_type=block_type,
                head=text[begin.start():inner_start],
                inner=text[inner_start:end.start()],
                tail=text[end.start():end.end()],
                line_number=line_number,
            ))
            position = end.end()

        parts.append(self.links_export(text[position:], line_offset + text.count('\n', 0, position)))
        return ''.join(parts)

    def blockEnd_find(self, text: str, start: int, block_type: str) -> Optional[re.Match[str]]:
        """
        Find the #+end_TYPE line closing a block opened just before start

        Tracks nesting depth for blocks of the same type. Verbatim blocks
        end at the first end line, and verbatim blocks nested inside are
        skipped whole, so marker lines they show are not counted.

        Returns:
            Match of the closing line, None if the block is unterminated
        """
        if self.settings.verbatim_is(block_type):
            return self.markerLine_find(text, start, 'end', block_type)

        depth = 1
        position = start
        while True:
            match = BLOCK_MARKER.search(text, position)
            if match is None:
                return None
            position = match.end()
            which = match.group('which').lower()
            marker_type = match.group('type')

            if which == 'begin' and self.settings.verbatim_is(marker_type):
                verbatim_end = self.markerLine_find(text, position, 'end', marker_type)
                if verbatim_end is None:
                    return None
                position = verbatim_end.end()
                continue

            if marker_type.lower() != block_type.lower():
                continue
            depth += 1 if which == 'begin' else -1
            if depth == 0:
                return match

    def markerLine_find(self, text: str, start: int, which: str, block_type: str) -> Optional[re.Match[str]]:
        """Find the first #+begin_TYPE or #+end_TYPE line at or after start"""
        marker = re.compile(
            rf'^[ \t]*#\+{which}_{re.escape(block_type)}(?=\s|$)[^\n]*$',
            re.IGNORECASE | re.MULTILINE,
        )
        return marker.search(text, start)

    def block_export(self, block_type: str, head: str, inner: str, tail: str, line_number: int) -> str:
        """
        Export one block whose begin/end lines are head/tail

        Returns:
            Handler markup, or the block with its contents exported when the
            handler passes through or fails
        """
        if self.settings.verbatim_is(block_type):
            return head + inner + tail

        inner_exported = self.text_export(inner, line_offset=line_number)

        if self.dispatcher.registry.spec_get(block_type, HandlerKind.BLOCK) is None:
            LOG(f"Line {line_number}: block '{block_type}' is not custom, keeping it", level=3)
            return head + inner_exported + tail

        LOG(f"Line {line_number}: exporting block '{block_type}'", level=3)
        result = self.dispatcher.block_export(block_type, inner_exported, self.backend, self.settings)

        if result.status is ExportStatus.RENDERED:
            self.block_count += 1
            return result.text

        if result.status is ExportStatus.FAILED:
            self.failure_record(f"#+begin_{block_type}", line_number, result)
        return head + result.text + tail

    def links_export(self, text: str, line_offset: int = 0) -> str:
        """Export every custom link in a span of text outside blocks"""

        def link_replace(match: re.Match[str]) -> str:
            """Replace one [[type:label][description]] with its markup"""
            link_type = match.group('type')
            if self.dispatcher.registry.spec_get(link_type, HandlerKind.LINK) is None:
                return match.group(0)

            result = self.dispatcher.link_export(
                link_type,
                match.group('label'),
                match.group('description'),
                self.backend,
                self.settings,
            )

            if result.status is ExportStatus.RENDERED:
                self.link_count += 1
                return result.text

            if result.status is ExportStatus.FAILED:
                line_number = line_offset + text.count('\n', 0, match.start()) + 1
                self.failure_record(match.group(0), line_number, result)
            return match.group(0)

        return LINK.sub(link_replace, text)

    def failure_record(self, where: str, line_number: int, result: ExportResult) -> None:
        """
        Apply the failure policy to a FAILED result

        Raises:
            Exception: The handler's error when strict_mode is set
        """
        if self.settings.strict_mode:
            result.unwrap()

        LOG(f"Warning: {where} (line {line_number}) left unchanged: {result.error}", level=1)
        self.failures.append({
            'where': where,
            'line': line_number,
            'error': str(result.error),
        })
