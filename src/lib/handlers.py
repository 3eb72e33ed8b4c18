"""
Block and link handler implementations for orgblocks

Each handler turns one custom block or link into backend-specific markup.
Uses HandlerSpec for metadata; HandlerRegistry holds every spec, keyed by
type name, and is populated once at construction.

Handler signatures:
    block handler:  (block: Block, settings: AppSettings) -> str
    link handler:   (link: Link, settings: AppSettings) -> str
    follow action:  (label: str, settings: AppSettings) -> str
"""

import html
import webbrowser
from typing import Callable, Dict, List, Optional, Any

from ..models.blocks import Backend, Block, Link
from ..models.handlers import HandlerSpec, HandlerKind, HandlerCategory
from .directives import directives_extract
from .errors import UnsupportedColourError, LayoutError
from .badges import SOCIAL_BADGES, badge_export, badge_parse, social_export
from .log import LOG


# Colours that xcolor provides without extra options and every browser knows
COLOURS: List[str] = [
    'black', 'blue', 'brown', 'cyan', 'darkgray', 'gray', 'green',
    'lightgray', 'lime', 'magenta', 'olive', 'orange', 'pink', 'purple',
    'red', 'teal', 'violet', 'white', 'yellow',
]

COLOUR_ALIASES: Dict[str, List[str]] = {
    'gray': ['grey'],
    'darkgray': ['darkgrey'],
    'lightgray': ['lightgrey'],
}

COLUMN_COUNTS = range(1, 6)
COLUMN_RULES = ('solid', 'none')

EDITOR_DEFAULT = "Editor Comment"
EDITOR_COLOUR = "red"
REPLACE_MARKER = ":replacewith:"


def colour_resolve(name: str) -> Optional[str]:
    """Map a colour name or alias to its canonical colour, None if unsupported"""
    if name in COLOURS:
        return name
    for colour, aliases in COLOUR_ALIASES.items():
        if name in aliases:
            return colour
    return None


def colour_format(colour: str, contents: str, backend: str) -> str:
    """
    Wrap contents in colour markup

    HTML gets a styled span; every other backend gets the LaTeX group.
    """
    if backend == Backend.HTML:
        return f'<span style="color:{colour};">{contents}</span>'
    return f"\\begingroup\\color{{{colour}}}{contents}\\endgroup\\,"


def parallel_format(columns: int, rule: str, contents: str, backend: str) -> str:
    """
    Lay contents out in side-by-side columns

    Args:
        columns: Number of columns, 1-5
        rule: "solid" draws a rule between columns, "none" does not
        contents: Block contents; ":columnbreak:" forces a column break
        backend: Export backend tag

    Raises:
        LayoutError: If columns or rule is out of range
    """
    if columns not in COLUMN_COUNTS:
        raise LayoutError(
            f"parallel blocks support {COLUMN_COUNTS.start}-{COLUMN_COUNTS.stop - 1} columns, got {columns}"
        )
    if rule not in COLUMN_RULES:
        raise LayoutError(f"parallel rule must be one of {', '.join(COLUMN_RULES)}, got “{rule}”")

    if backend == Backend.LATEX:
        body = contents.replace(":columnbreak:", "\\columnbreak")
        width = "2" if rule == "solid" else "0"
        return (
            f"\\par \\setlength{{\\columnseprule}}{{{width}pt}}"
            f"\\begin{{minipage}}[t]{{\\linewidth}}"
            f"\\begin{{multicols}}{{{columns}}}\n"
            f"{body}\n"
            f"\\end{{multicols}}\\end{{minipage}}"
        )

    body = contents.replace(":columnbreak:", "")
    if backend == Backend.HTML:
        return f'<div style="column-rule-style:{rule};column-count:{columns};">{body}</div>'
    return body


class HandlerRegistry:
    """
    Registry of block and link handler specifications

    Block types and link types live in separate tables since one name may be
    both (e.g., ``#+begin_red`` and ``[[red:text]]``). Lookup is
    case-sensitive and also accepts the qualified name
    (``<handler_prefix><type>``) configured in AppSettings.
    """

    def __init__(self, settings: Optional[Any] = None) -> None:
        """Initialize the registry and register all built-in handlers"""
        if settings is None:
            from ..config import appsettings
            settings = appsettings
        self.settings = settings
        self.blocks: Dict[str, HandlerSpec] = {}
        self.links: Dict[str, HandlerSpec] = {}
        self.colourHandlers_register()
        self.layoutHandlers_register()
        self.annotationHandlers_register()
        self.anchorLinks_register()
        self.badgeLinks_register()

    def table_get(self, kind: HandlerKind) -> Dict[str, HandlerSpec]:
        """Return the table holding specs of the given kind"""
        return self.blocks if kind is HandlerKind.BLOCK else self.links

    def register(self, spec: HandlerSpec) -> None:
        """Register a handler specification under its name and aliases"""
        table = self.table_get(spec.kind)
        table[spec.name] = spec
        for alias in spec.aliases:
            table[alias] = spec

    def spec_get(self, name: str, kind: HandlerKind = HandlerKind.BLOCK) -> Optional[HandlerSpec]:
        """
        Get full handler specification by type name or qualified name

        Args:
            name: Type name ("details") or qualified name ("orgblocks--details")
            kind: Which table to search

        Returns:
            HandlerSpec or None if not registered
        """
        table = self.table_get(kind)
        if name in table:
            return table[name]

        type_name = self.settings.typeName_extract(name)
        if type_name is not None and type_name in table:
            return table[type_name]

        return None

    def get(self, name: str, kind: HandlerKind = HandlerKind.BLOCK) -> Optional[Callable[[Any, Any], str]]:
        """Get handler function by name, None if not registered"""
        spec = self.spec_get(name, kind)
        return spec.handler if spec else None

    def names_list(self, kind: HandlerKind = HandlerKind.BLOCK) -> List[str]:
        """Canonical names of every registered type of a kind, sorted"""
        return sorted({spec.name for spec in self.table_get(kind).values()})

    def handlers_listByCategory(self, category: HandlerCategory) -> List[HandlerSpec]:
        """Get all distinct specs (blocks and links) in a category"""
        seen: List[HandlerSpec] = []
        for table in (self.blocks, self.links):
            for spec in table.values():
                if spec.category == category and spec not in seen:
                    seen.append(spec)
        return seen

    def colourHandlers_register(self) -> None:
        """Register one block and one link per colour, plus the generic colour types"""

        def make_colour_block(colour: str) -> Callable[[Block, Any], str]:
            """Factory for a fixed-colour block handler"""
            def handler(block: Block, settings: Any) -> str:
                return colour_format(colour, block.contents, block.backend)
            return handler

        def make_colour_link(colour: str) -> Callable[[Link, Any], str]:
            """Factory for a fixed-colour link handler (description wins over label)"""
            def handler(link: Link, settings: Any) -> str:
                text = link.description if link.description is not None else link.label
                return colour_format(colour, text, link.backend)
            return handler

        def make_colour_follow(colour: str) -> Callable[[str, Any], str]:
            def follow(label: str, settings: Any) -> str:
                return f"“{label}” is coloured {colour} when exported"
            return follow

        for colour in COLOURS:
            aliases = COLOUR_ALIASES.get(colour, [])
            self.register(HandlerSpec(
                name=colour,
                kind=HandlerKind.BLOCK,
                category=HandlerCategory.COLOUR,
                description=f'Colour block contents {colour}',
                handler=make_colour_block(colour),
                examples=[f'#+begin_{colour}\nText\n#+end_{colour}'],
                aliases=aliases,
            ))
            self.register(HandlerSpec(
                name=colour,
                kind=HandlerKind.LINK,
                category=HandlerCategory.COLOUR,
                description=f'Colour link text {colour}',
                handler=make_colour_link(colour),
                follow=make_colour_follow(colour),
                examples=[f'[[{colour}:text]]', f'[[{colour}:id][text]]'],
                aliases=aliases,
            ))

        def color_block_handler(block: Block, settings: Any) -> str:
            """Handle #+begin_color - colour named by the :color: directive"""
            extracted = directives_extract(block.contents, 'color')
            requested = (extracted.values['color'] or '').strip()
            colour = colour_resolve(requested)
            if colour is None:
                raise UnsupportedColourError(requested, COLOURS)
            return colour_format(colour, extracted.contents, block.backend)

        def color_link_handler(link: Link, settings: Any) -> str:
            """Handle [[color:NAME][text]] - label names the colour"""
            requested = link.label.strip()
            colour = colour_resolve(requested)
            if colour is None:
                raise UnsupportedColourError(requested, COLOURS)
            text = link.description if link.description is not None else link.label
            return colour_format(colour, text, link.backend)

        self.register(HandlerSpec(
            name='color',
            kind=HandlerKind.BLOCK,
            category=HandlerCategory.COLOUR,
            description='Colour block contents by the :color: directive',
            handler=color_block_handler,
            examples=['#+begin_color\n:color: teal\nText\n#+end_color'],
        ))

        self.register(HandlerSpec(
            name='color',
            kind=HandlerKind.LINK,
            category=HandlerCategory.COLOUR,
            description='Colour the description by the colour named in the label',
            handler=color_link_handler,
            examples=['[[color:teal][some text]]'],
        ))

    def layoutHandlers_register(self) -> None:
        """Register multi-column and collapsible layout blocks"""

        def make_parallel(columns: int, rule: str) -> Callable[[Block, Any], str]:
            """Factory for a fixed-layout parallel block handler"""
            def handler(block: Block, settings: Any) -> str:
                return parallel_format(columns, rule, block.contents, block.backend)
            return handler

        for columns in COLUMN_COUNTS:
            for rule in COLUMN_RULES:
                name = f"parallel{columns}" + ("" if rule == "solid" else "NB")
                self.register(HandlerSpec(
                    name=name,
                    kind=HandlerKind.BLOCK,
                    category=HandlerCategory.LAYOUT,
                    description=f'{columns} columns, {"with" if rule == "solid" else "without"} a rule between them',
                    handler=make_parallel(columns, rule),
                    examples=[f'#+begin_{name}\nLeft\n:columnbreak:\nRight\n#+end_{name}'],
                ))

        def parallel_handler(block: Block, settings: Any) -> str:
            """Handle #+begin_parallel - layout from :columns: and :rule:"""
            extracted = directives_extract(block.contents, 'columns', 'rule')
            columns_text = (extracted.values['columns'] or '').strip() or "2"
            rule = (extracted.values['rule'] or '').strip() or "solid"
            try:
                columns = int(columns_text)
            except ValueError:
                raise LayoutError(f"parallel :columns: must be a number, got “{columns_text}”")
            return parallel_format(columns, rule, extracted.contents, block.backend)

        self.register(HandlerSpec(
            name='parallel',
            kind=HandlerKind.BLOCK,
            category=HandlerCategory.LAYOUT,
            description='Columns configured by :columns: (1-5) and :rule: (solid|none)',
            handler=parallel_handler,
            examples=['#+begin_parallel\n:columns: 3\n:rule: none\nA :columnbreak: B :columnbreak: C\n#+end_parallel'],
        ))

        def details_handler(block: Block, settings: Any) -> str:
            """Handle #+begin_details - collapsible section titled by :title:"""
            extracted = directives_extract(block.contents, 'title')
            title = (extracted.values['title'] or '').strip() or "Details"
            contents = extracted.contents

            if block.backend == Backend.HTML:
                return (
                    '<details class="details" style="padding: 1em; border-radius: 15px; '
                    'background-color: #e5f5e5; color: hsl(157 75% 20%);">'
                    f'<summary><strong>{html.escape(title)}</strong></summary>'
                    f'{contents}</details>'
                )
            if block.backend == Backend.LATEX:
                return (
                    "\\begin{quote}\\begin{tcolorbox}[colback=white,sharp corners,boxrule=0.4pt]"
                    f"\\textbf{{{title}:}}\n{contents}"
                    "\\end{tcolorbox}\\end{quote}"
                )
            return contents

        self.register(HandlerSpec(
            name='details',
            kind=HandlerKind.BLOCK,
            category=HandlerCategory.LAYOUT,
            description='Collapsible section; heading from :title:, default "Details"',
            handler=details_handler,
            examples=['#+begin_details\n:title: Proof\nTrivial.\n#+end_details'],
        ))

    def annotationHandlers_register(self) -> None:
        """Register editor-comment blocks"""

        def edcomm_handler(block: Block, settings: Any) -> str:
            """
            Handle #+begin_edcomm - first-class editor comment

            :ed: names the editor. A ":replacewith:" marker turns the comment
            into a replacement instruction: text before it is replaced by the
            text after it.
            """
            if settings.hide_editor_comments:
                return ""

            extracted = directives_extract(block.contents, 'ed')
            editor = (extracted.values['ed'] or '').strip() or EDITOR_DEFAULT
            before, marker, after = extracted.contents.partition(REPLACE_MARKER)
            backend = block.backend

            if backend == Backend.HTML:
                if marker:
                    body = f"<strong>Replace:</strong> {before.strip()} <strong>With:</strong> {after.strip()}"
                else:
                    body = before.strip()
                return (
                    f'<span style="color:{EDITOR_COLOUR};"><strong>[{html.escape(editor)}:</strong> '
                    f'{body} <strong>]</strong></span>'
                )
            if backend == Backend.LATEX:
                if marker:
                    body = f"\\textbf{{Replace:}} {before.strip()} \\textbf{{With:}} {after.strip()}"
                else:
                    body = before.strip()
                return f"{{\\color{{{EDITOR_COLOUR}}}\\textbf{{[{editor}:}} {body} \\textbf{{]}}}}"

            if marker:
                return f"[{editor}: Replace: {before.strip()} With: {after.strip()}]"
            return f"[{editor}: {before.strip()}]"

        self.register(HandlerSpec(
            name='edcomm',
            kind=HandlerKind.BLOCK,
            category=HandlerCategory.ANNOTATION,
            description='Editor comment; hidden entirely when hide_editor_comments is set',
            handler=edcomm_handler,
            examples=[
                '#+begin_edcomm\n:ed: Jasim\nCite this.\n#+end_edcomm',
                '#+begin_edcomm\nthe old wording\n:replacewith:\nthe new wording\n#+end_edcomm',
            ],
        ))

    def anchorLinks_register(self) -> None:
        """Register the link-here anchor link"""

        def link_here_handler(link: Link, settings: Any) -> str:
            """Handle [[link-here:name]] - anchor in HTML, nothing elsewhere"""
            if link.backend != Backend.HTML:
                return ""
            anchor = html.escape(link.label)
            return f'<a class="anchor" aria-hidden="true" id="{anchor}" href="#{anchor}">&para;</a>'

        def link_here_follow(label: str, settings: Any) -> str:
            message = f"This is a local anchor link named “{label}”"
            LOG(message, level=1)
            return message

        self.register(HandlerSpec(
            name='link-here',
            kind=HandlerKind.LINK,
            category=HandlerCategory.ANCHOR,
            description='Addressable anchor (HTML only); the description is not used',
            handler=link_here_handler,
            follow=link_here_follow,
            examples=['[[link-here:installation]]'],
        ))

    def badgeLinks_register(self) -> None:
        """Register badge and social-badge links"""

        def badge_handler(link: Link, settings: Any) -> str:
            """Handle [[badge:key|value|color|url|logo]]; the description is not used"""
            return badge_export(link.label, link.backend)

        def badge_follow(label: str, settings: Any) -> str:
            """Open the badge's url, or its label when it has none"""
            badge = badge_parse(label)
            target = badge.url or label
            LOG(f"Opening {target}", level=2)
            webbrowser.open(target)
            return target

        self.register(HandlerSpec(
            name='badge',
            kind=HandlerKind.LINK,
            category=HandlerCategory.BADGE,
            description='Shield-style SVG badge from key|value|color|url|logo',
            handler=badge_handler,
            follow=badge_follow,
            examples=[
                '[[badge:license|GNU_3|informational|https://www.gnu.org/licenses/gpl-3.0.en.html|read-the-docs]]',
                '[[badge:build|passing|green]]',
            ],
        ))

        def make_social_link(platform: str) -> Callable[[Link, Any], str]:
            """Factory for a fixed-platform social badge (label is the target)"""
            def handler(link: Link, settings: Any) -> str:
                return social_export(platform, link.label, link.backend)
            return handler

        def make_social_follow(platform: str) -> Callable[[str, Any], str]:
            def follow(label: str, settings: Any) -> str:
                landing = SOCIAL_BADGES[platform][1].format(label)
                webbrowser.open(landing)
                return landing
            return follow

        for platform in SOCIAL_BADGES:
            self.register(HandlerSpec(
                name=platform,
                kind=HandlerKind.LINK,
                category=HandlerCategory.BADGE,
                description=f'Social badge ({platform}); the description is not used',
                handler=make_social_link(platform),
                follow=make_social_follow(platform),
                examples=[f'[[{platform}:TARGET]]'],
            ))

        def social_handler(link: Link, settings: Any) -> str:
            """Handle [[social:platform|target]]"""
            platform, _, target = link.label.partition('|')
            return social_export(platform.strip(), target.strip(), link.backend)

        self.register(HandlerSpec(
            name='social',
            kind=HandlerKind.LINK,
            category=HandlerCategory.BADGE,
            description='Social badge naming its platform: platform|target',
            handler=social_handler,
            examples=['[[social:github-stars|octocat/hello-world]]'],
        ))
