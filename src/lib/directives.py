"""
Extraction of :name:value directives from block contents

A directive is an inline annotation such as ``:title: My Title`` or
``:ed: Musa`` written inside a block. Handlers ask for the names they
understand; each is pulled out of the contents before formatting.

Matching rules:
- The pattern for a name is the literal ``:name:`` followed by the rest of
  the line. The captured value is never trimmed.
- Only the first occurrence supplies the value; every occurrence is removed.
- Removal stops at the end of the line: the newline stays, so a directive on
  a line of its own leaves an empty line behind. Removing a directive line
  means a regex substitution of its ``:name:<rest-of-line>`` match with
  nothing, never a deletion of the whole line.
- The value runs to end of line, colons included (``:title:a:b`` -> ``a:b``).
- A name written without a value (``:title:``) yields "", a name never
  written yields None.

Example:
    >>> found = directives_extract(":title: Notes\\nBody\\n", "title", "ed")
    >>> found.values
    {'title': ' Notes', 'ed': None}
    >>> found.contents
    '\\nBody\\n'
"""

import re
from typing import Dict, Optional

from ..models.blocks import ExtractedDirectives


def directive_pattern(name: str) -> "re.Pattern[str]":
    """Compile the :name:<rest-of-line> pattern for one directive name"""
    return re.compile(rf":{re.escape(name)}:(.*)")


def directive_find(contents: str, name: str) -> Optional[str]:
    """
    Find the value of the first :name: directive in contents

    Args:
        contents: Raw block contents
        name: Directive name without colons

    Returns:
        Captured rest-of-line ("" when written without a value),
        or None when the directive does not occur
    """
    match = directive_pattern(name).search(contents)
    return match.group(1) if match else None


def directives_extract(contents: str, *names: str) -> ExtractedDirectives:
    """
    Strip the requested directives out of contents and collect their values

    Values are looked up in the original contents, so stripping one
    directive never changes what another directive's pattern sees.

    Args:
        contents: Raw block contents
        *names: Directive names to extract, in lookup order

    Returns:
        ExtractedDirectives with the stripped contents and a value
        (or None) for every requested name
    """
    values: Dict[str, Optional[str]] = {}
    for name in names:
        values[name] = directive_find(contents, name)

    stripped = contents
    for name in names:
        stripped = directive_pattern(name).sub("", stripped)

    return ExtractedDirectives(contents=stripped, values=values)
