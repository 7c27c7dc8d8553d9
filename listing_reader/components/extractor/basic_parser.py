"""
Basic HTML parsing utility using BeautifulSoup.

This module provides the `BasicParser` class, which wraps BeautifulSoup to
clean a rendered listing page of its chrome (scripts, navigation, consent
banners, modals...) and to read the few document-level values the
extraction rules need: title, meta description and visible body text.
"""
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from listing_reader.core.exceptions import ExtractorError

# Tags that never carry listing content.
NOISE_TAGS = ("script", "style", "noscript", "template", "nav", "footer", "header", "iframe", "svg")

# class / id tokens that mark page chrome rather than content. Whole words
# between separators only: "unavailable-dates" or "modalites-paiement" are content.
NOISE_ATTRIBUTE_PATTERN = re.compile(
    r"(?:^|[\s_-])(?:nav(?:bar|igation)?|cookies?|consent|popups?|modals?|banners?|overlays?)(?=$|[\s_-])",
    re.IGNORECASE,
)
NOISE_ROLES = {"navigation", "banner", "dialog", "alertdialog"}
HIDDEN_STYLE_PATTERN = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)

# Never removed by attribute matching, e.g. <body class="modal-open">.
PROTECTED_TAGS = {"html", "head", "body", "main"}


def clean_text(text: Optional[str]) -> str:
    """
    Collapses runs of whitespace (newlines, tabs included) into single spaces
    and strips the ends.
    """
    if not text:
        return ""
    return " ".join(text.split())


def attribute_blob(tag: Tag) -> str:
    """Joins a tag's class, id and itemprop values into one searchable string."""
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    parts = list(classes)
    for attr in ("id", "itemprop"):
        value = tag.get(attr)
        if value:
            parts.append(value if isinstance(value, str) else " ".join(value))
    return " ".join(parts)


def _is_noise(tag: Tag) -> bool:
    if tag.name in PROTECTED_TAGS:
        return False
    if tag.has_attr("hidden") or tag.get("aria-hidden") == "true":
        return True
    if HIDDEN_STYLE_PATTERN.search(tag.get("style") or ""):
        return True
    if (tag.get("role") or "").lower() in NOISE_ROLES:
        return True
    return bool(NOISE_ATTRIBUTE_PATTERN.search(attribute_blob(tag)))


class BasicParser:
    """
    A thin BeautifulSoup wrapper around one rendered page.

    Attributes:
        soup (BeautifulSoup): The parsed document. `strip_noise()` mutates it in place.
    """
    def __init__(self, html_content: str):
        """
        Args:
            html_content (str): The serialized DOM of the rendered page.

        Raises:
            ExtractorError: If `html_content` is None or cannot be parsed.
        """
        if html_content is None:
            raise ExtractorError("HTML content cannot be None for BasicParser.")
        try:
            # 'html.parser' is the stdlib parser, no lxml needed.
            self.soup = BeautifulSoup(html_content, 'html.parser')
        except Exception as e:
            raise ExtractorError(f"Failed to initialize BeautifulSoup parser: {e}")

    def get_title(self) -> Optional[str]:
        """Returns the whitespace-normalized <title> text, or None if absent or empty."""
        if self.soup.title is None:
            return None
        return clean_text(self.soup.title.get_text()) or None

    def get_meta_description(self) -> Optional[str]:
        """Returns the meta description (or og:description) content, or None."""
        for attrs in ({"name": "description"}, {"property": "og:description"}):
            meta = self.soup.find("meta", attrs=attrs)
            if meta is not None:
                content = clean_text(meta.get("content"))
                if content:
                    return content
        return None

    def strip_noise(self) -> int:
        """
        Removes structural and chrome elements from the document.

        The <title> and <meta> tags live in <head> and are left alone so the
        document-level rules still see them.

        Returns:
            int: Number of elements removed.
        """
        doomed: List[Tag] = list(self.soup.find_all(list(NOISE_TAGS)))
        doomed.extend(tag for tag in self.soup.find_all(True) if _is_noise(tag))

        removed = 0
        for tag in doomed:
            # Descendants of an already removed element are gone with it.
            if tag.decomposed:
                continue
            tag.decompose()
            removed += 1
        return removed

    def visible_text(self) -> str:
        """
        Returns the body text, one non-empty line per block, whitespace-normalized.
        Falls back to the whole document when there is no <body>.
        """
        root = self.soup.body or self.soup
        lines = (clean_text(line) for line in root.get_text(separator="\n").splitlines())
        return "\n".join(line for line in lines if line)
