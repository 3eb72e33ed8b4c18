"""
Badge tests

Tests badge label parsing, shields.io URLs, and social badges.
"""

import pytest

from orgblocks.config import AppSettings
from orgblocks.lib.badges import (
    Badge,
    badge_parse,
    badge_url,
    badge_export,
    shields_escape,
    social_export,
    social_urls,
)
from orgblocks.lib.dispatch import Dispatcher
from orgblocks.lib.errors import BadgeError, UnsupportedSocialError
from orgblocks.models import ExportStatus


@pytest.fixture
def dispatcher():
    return Dispatcher(AppSettings())


class TestBadgeParse:
    """Test splitting of key|value|color|url|logo"""

    def test_key_value_only(self):
        """Optional fields default to None"""
        assert badge_parse("key|value") == Badge(key="key", value="value")

    def test_all_fields(self):
        """All five fields"""
        badge = badge_parse("license|MIT|blue|https://x.org|github")

        assert badge.color == "blue"
        assert badge.url == "https://x.org"
        assert badge.logo == "github"

    def test_blank_optional_fields(self):
        """Blank optional fields are treated as absent"""
        badge = badge_parse("a|b||https://x.org")

        assert badge.color is None
        assert badge.url == "https://x.org"

    @pytest.mark.parametrize("label", ["key", "", "key|", "|value", " | "])
    def test_missing_key_or_value(self, label):
        """key|value are required"""
        with pytest.raises(BadgeError, match="badges require at least key\\|value"):
            badge_parse(label)


class TestBadgeUrl:
    """Test shields.io URL construction"""

    def test_key_value_url(self):
        """key|value gives exactly key-value and no query"""
        url = badge_url(badge_parse("key|value"))

        assert url == "https://img.shields.io/badge/key-value"
        assert "?" not in url

    def test_colour_and_logo(self):
        """Colour is appended to the path, logo as a query"""
        url = badge_url(badge_parse("build|passing|green||github"))
        assert url == "https://img.shields.io/badge/build-passing-green?logo=github"

    def test_escaping(self):
        """Dashes are doubled and the rest percent-encoded"""
        assert shields_escape("a-b") == "a--b"
        assert shields_escape("x y/z") == "x%20y%2Fz"
        assert shields_escape("snake_case") == "snake_case"

    def test_escaped_url(self):
        """Escaping applies to both halves"""
        url = badge_url(Badge(key="co-op", value="50%"))
        assert url == "https://img.shields.io/badge/co--op-50%25"


class TestBadgeExport:
    """Test badge markup per backend"""

    def test_html_plain_image(self):
        """No url: bare image"""
        assert badge_export("key|value", "html") == (
            '<img src="https://img.shields.io/badge/key-value" alt="key: value">'
        )

    def test_html_link(self):
        """url wraps the image in an anchor"""
        text = badge_export("docs|latest|blue|https://docs.example.org", "html")

        assert text.startswith('<a href="https://docs.example.org"><img ')
        assert text.endswith("</a>")

    def test_latex(self):
        """LaTeX gets a boxed label inside \\href"""
        text = badge_export("docs|latest|blue|https://docs.example.org", "latex")
        assert text == "\\href{https://docs.example.org}{\\fbox{docs: latest}}"

    def test_latex_escapes_text_and_url(self):
        """Underscores read as spaces; LaTeX specials are escaped"""
        text = badge_export(
            "license|GNU_3|informational|https://www.gnu.org/licenses/gpl-3.0.en.html#x",
            "latex",
        )
        assert text == (
            "\\href{https://www.gnu.org/licenses/gpl-3.0.en.html\\#x}{\\fbox{license: GNU 3}}"
        )

    def test_latex_special_characters(self):
        """Double underscore is a literal underscore, escaped for LaTeX"""
        assert badge_export("snake__case|50%|||", "latex") == "\\fbox{snake\\_case: 50\\%}"

    def test_underscores_in_html_alt(self):
        """Alt text shows underscores the way shields.io does"""
        text = badge_export("code_style|black", "html")
        assert 'alt="code style: black"' in text
        assert "badge/code_style-black" in text

    def test_latex_social_target_kept(self):
        """Social targets are not badge text; underscores only get escaped"""
        text = social_export("twitter-follow", "some_user", "latex")
        assert "\\fbox{twitter-follow: some\\_user}" in text

    def test_other_backend(self):
        """Other backends get the plain label"""
        assert badge_export("k|v", "ascii") == "k: v"

    def test_description_ignored(self, dispatcher):
        """The link description plays no part in a badge"""
        with_desc = dispatcher.link_export("badge", "k|v", "ignored", "html")
        without = dispatcher.link_export("badge", "k|v", None, "html")

        assert with_desc.text == without.text
        assert "ignored" not in with_desc.text

    def test_missing_value_fails_dispatch(self, dispatcher):
        """Badge error surfaces as a FAILED result"""
        result = dispatcher.link_export("badge", "key", None, "html")

        assert result.status is ExportStatus.FAILED
        assert isinstance(result.error, BadgeError)
        assert result.text == "key"

    def test_follow_opens_url(self, dispatcher, monkeypatch):
        """Following a badge opens its url"""
        opened = []
        monkeypatch.setattr("webbrowser.open", lambda url: opened.append(url))

        assert dispatcher.link_follow("badge", "k|v|red|https://example.org") == "https://example.org"
        assert opened == ["https://example.org"]


class TestSocialBadges:
    """Test social platform badges"""

    def test_github_stars(self):
        """Known platform maps to canned urls"""
        image, landing = social_urls("github-stars", "octocat/hello-world")

        assert image == "https://img.shields.io/github/stars/octocat/hello-world?style=social"
        assert landing == "https://github.com/octocat/hello-world/stargazers"

    def test_unknown_platform(self):
        """Unknown platform raises naming it"""
        with pytest.raises(UnsupportedSocialError, match="myspace"):
            social_urls("myspace", "tom")

    def test_platform_link_type(self, dispatcher):
        """Each platform is also a link type"""
        text = dispatcher.link_export("twitter-follow", "someone", None, "html").text

        assert "https://img.shields.io/twitter/follow/someone?style=social" in text
        assert 'href="https://twitter.com/intent/follow?screen_name=someone"' in text

    def test_generic_social_link(self, dispatcher):
        """[[social:platform|target]]"""
        text = dispatcher.link_export("social", "reddit-subscribe-to|emacs", None, "html").text
        assert "reddit/subreddit-subscribers/emacs" in text

    def test_generic_social_unknown(self, dispatcher):
        """Unknown platform through the generic link fails"""
        result = dispatcher.link_export("social", "myspace|tom", None, "html")
        assert isinstance(result.error, UnsupportedSocialError)
