"""
Shield-style badges built on img.shields.io

A badge link carries a pipe-delimited label:

    [[badge:key|value|color|url|logo]]

- key and value are required; they become the grey left half and the
  coloured right half of the badge. Underscores render as spaces on
  shields.io, "__" as an underscore, and "-" is doubled so it survives
  the path syntax.
- color is the right half's background (shields.io picks one when omitted).
- url, when given, turns the badge into a hyperlink.
- logo names a simple-icons logo shown on the left.

Social badges track a live count on a known platform; each platform maps a
target (user, repo, subreddit) to a canned shields.io path and a landing
page.
"""

import html
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from urllib.parse import quote

from ..models.blocks import Backend
from .errors import BadgeError, UnsupportedSocialError


SHIELDS_URL = "https://img.shields.io"

# platform -> (shields.io path template, landing page template)
SOCIAL_BADGES: Dict[str, Tuple[str, str]] = {
    'reddit-subscribe-to': (
        'reddit/subreddit-subscribers/{0}',
        'https://www.reddit.com/r/{0}',
    ),
    'github-stars': (
        'github/stars/{0}',
        'https://github.com/{0}/stargazers',
    ),
    'github-watchers': (
        'github/watchers/{0}',
        'https://github.com/{0}/watchers',
    ),
    'github-forks': (
        'github/forks/{0}',
        'https://github.com/{0}/fork',
    ),
    'github-followers': (
        'github/followers/{0}',
        'https://github.com/{0}?tab=followers',
    ),
    'twitter-follow': (
        'twitter/follow/{0}',
        'https://twitter.com/intent/follow?screen_name={0}',
    ),
}


@dataclass
class Badge:
    """
    Fields of a parsed badge label

    Attributes:
        key: Left-hand text
        value: Right-hand text
        color: Right-hand background colour, None for the shields.io default
        url: Link target, None for a plain image
        logo: simple-icons logo name, None for no logo
    """
    key: str
    value: str
    color: Optional[str] = None
    url: Optional[str] = None
    logo: Optional[str] = None


LATEX_SPECIALS: Dict[str, str] = {
    '\\': r'\textbackslash{}',
    '#': r'\#',
    '$': r'\$',
    '%': r'\%',
    '&': r'\&',
    '_': r'\_',
    '{': r'\{',
    '}': r'\}',
    '~': r'\textasciitilde{}',
    '^': r'\textasciicircum{}',
}

# \href reads its url verbatim apart from these
LATEX_URL_SPECIALS: Dict[str, str] = {
    '#': r'\#',
    '%': r'\%',
    '&': r'\&',
    '{': r'\{',
    '}': r'\}',
}


def shields_escape(text: str) -> str:
    """Escape one badge path segment: double dashes, then percent-encode"""
    return quote(text.replace('-', '--'), safe='')


def shields_text(text: str) -> str:
    """Badge text as shields.io shows it: "_" is a space, "__" an underscore"""
    return re.sub(r'__|_', lambda match: '_' if match.group(0) == '__' else ' ', text)


def latex_escape(text: str, specials: Dict[str, str] = LATEX_SPECIALS) -> str:
    """Escape LaTeX special characters in a single pass"""
    pattern = '[' + re.escape(''.join(specials)) + ']'
    return re.sub(pattern, lambda match: specials[match.group(0)], text)


def badge_parse(label: str) -> Badge:
    """
    Split a badge label into its fields

    Args:
        label: "key|value[|color[|url[|logo]]]"

    Returns:
        Badge with blank optional fields normalised to None

    Raises:
        BadgeError: If key or value is missing or blank
    """
    fields = label.split('|')
    key = fields[0] if fields else ''
    value = fields[1] if len(fields) > 1 else ''
    if not key.strip() or not value.strip():
        raise BadgeError("badges require at least key|value")

    def optional(index: int) -> Optional[str]:
        if index < len(fields) and fields[index].strip():
            return fields[index].strip()
        return None

    return Badge(key=key, value=value, color=optional(2), url=optional(3), logo=optional(4))


def badge_url(badge: Badge) -> str:
    """
    Build the shields.io image URL for a badge

    Example:
        >>> badge_url(Badge(key='key', value='value'))
        'https://img.shields.io/badge/key-value'
        >>> badge_url(Badge(key='build', value='passing', color='green', logo='github'))
        'https://img.shields.io/badge/build-passing-green?logo=github'
    """
    url = f"{SHIELDS_URL}/badge/{shields_escape(badge.key)}-{shields_escape(badge.value)}"
    if badge.color:
        url += f"-{quote(badge.color, safe='')}"
    if badge.logo:
        url += f"?logo={quote(badge.logo, safe='')}"
    return url


def badge_render(image_url: str, alt: str, href: Optional[str], backend: str) -> str:
    """
    Render a badge image for a backend

    HTML gets an <img> (inside <a> when href is set). LaTeX cannot embed a
    remote SVG, so it gets the alt text in a box (inside \\href when set).
    Other backends get the alt text.
    """
    if backend == Backend.HTML:
        image = f'<img src="{html.escape(image_url)}" alt="{html.escape(alt)}">'
        if href:
            return f'<a href="{html.escape(href)}">{image}</a>'
        return image
    if backend == Backend.LATEX:
        boxed = f"\\fbox{{{latex_escape(alt)}}}"
        if href:
            return f"\\href{{{latex_escape(href, LATEX_URL_SPECIALS)}}}{{{boxed}}}"
        return boxed
    return alt


def badge_export(label: str, backend: str) -> str:
    """
    Export a [[badge:...]] link

    Raises:
        BadgeError: If the label lacks key|value
    """
    badge = badge_parse(label)
    alt = f"{shields_text(badge.key)}: {shields_text(badge.value)}"
    return badge_render(badge_url(badge), alt, badge.url, backend)


def social_urls(platform: str, target: str) -> Tuple[str, str]:
    """
    Resolve a social platform and target to (image URL, landing page)

    Raises:
        UnsupportedSocialError: If the platform is unknown
    """
    if platform not in SOCIAL_BADGES:
        raise UnsupportedSocialError(platform, SOCIAL_BADGES)

    path, landing = SOCIAL_BADGES[platform]
    image_url = f"{SHIELDS_URL}/{path.format(target)}?style=social"
    return image_url, landing.format(target)


def social_export(platform: str, target: str, backend: str) -> str:
    """
    Export a social badge for platform/target

    Raises:
        UnsupportedSocialError: If the platform is unknown
    """
    image_url, landing = social_urls(platform, target)
    return badge_render(image_url, f"{platform}: {target}", landing, backend)
