"""
Heuristic extraction rules for listing pages.

Each rule is a pure function taking a cleaned BeautifulSoup document and
returning zero or more labeled `Fragment`s. Rules are independent and run in
the order of `DEFAULT_RULES`; their output is deliberately redundant, the
downstream reasoning step is expected to cope with duplicates and noise.
"""
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Pattern, Sequence

from bs4 import BeautifulSoup, Tag

from listing_reader.components.extractor.basic_parser import attribute_blob, clean_text


@dataclass(frozen=True)
class Fragment:
    """One labeled unit of extracted text."""
    label: str
    text: str

    def render(self) -> str:
        return f"{self.label}: {self.text}" if self.label else self.text


ExtractionRule = Callable[[BeautifulSoup], List[Fragment]]

PRICE_PATTERN = re.compile(r"price|prix", re.IGNORECASE)
TITLE_LIKE_PATTERN = re.compile(r"title|titre", re.IGNORECASE)
DESCRIPTION_PATTERN = re.compile(r"description|desc", re.IGNORECASE)
FEATURE_PATTERN = re.compile(r"feature|spec|attribute|characteristic|criteria|detail", re.IGNORECASE)

PRICE_MAX_LENGTH = 50
HEADING_MIN_LENGTH, HEADING_MAX_LENGTH = 3, 200
DESCRIPTION_MIN_LENGTH = 20
FEATURES_MIN_LENGTH, FEATURES_MAX_LENGTH = 10, 1000


def _elements_matching(soup: BeautifulSoup, pattern: Pattern) -> List[Tag]:
    return soup.find_all(lambda tag: bool(pattern.search(attribute_blob(tag))))


def _merge(first: Iterable[Tag], second: Iterable[Tag]) -> List[Tag]:
    # Tag equality is structural, so duplicates are tracked by identity.
    merged = list(first)
    seen = {id(tag) for tag in merged}
    merged.extend(tag for tag in second if id(tag) not in seen)
    return merged


def _fragments(label: str, elements: Iterable[Tag], min_length: int = 1,
               max_length: Optional[int] = None) -> List[Fragment]:
    fragments = []
    for element in elements:
        text = clean_text(element.get_text(separator=" "))
        if len(text) < min_length:
            continue
        if max_length is not None and len(text) > max_length:
            continue
        fragments.append(Fragment(label, text))
    return fragments


def title_rule(soup: BeautifulSoup) -> List[Fragment]:
    title = clean_text(soup.title.get_text()) if soup.title else ""
    return [Fragment("TITLE", title)] if title else []


def meta_description_rule(soup: BeautifulSoup) -> List[Fragment]:
    for attrs in ({"name": "description"}, {"property": "og:description"}):
        meta = soup.find("meta", attrs=attrs)
        content = clean_text(meta.get("content")) if meta else ""
        if content:
            return [Fragment("META", content)]
    return []


def price_rule(soup: BeautifulSoup) -> List[Fragment]:
    # Long matches are containers that merely mention a price.
    return _fragments("PRICE", _elements_matching(soup, PRICE_PATTERN), max_length=PRICE_MAX_LENGTH)


def heading_rule(soup: BeautifulSoup) -> List[Fragment]:
    title_like = [tag for tag in _elements_matching(soup, TITLE_LIKE_PATTERN) if tag.name != "title"]
    elements = _merge(soup.find_all(["h1", "h2"]), title_like)
    return _fragments("HEADING", elements, HEADING_MIN_LENGTH, HEADING_MAX_LENGTH)


def description_rule(soup: BeautifulSoup) -> List[Fragment]:
    # Plain paragraphs count as description-like; short ones are captions or labels.
    elements = _merge(_elements_matching(soup, DESCRIPTION_PATTERN), soup.find_all("p"))
    return _fragments("DESCRIPTION", elements, min_length=DESCRIPTION_MIN_LENGTH + 1)


def features_rule(soup: BeautifulSoup) -> List[Fragment]:
    elements = _merge(_elements_matching(soup, FEATURE_PATTERN), soup.find_all(["dl", "table"]))
    return _fragments("FEATURES", elements, FEATURES_MIN_LENGTH, FEATURES_MAX_LENGTH)


DEFAULT_RULES: Sequence[ExtractionRule] = (
    title_rule,
    meta_description_rule,
    price_rule,
    heading_rule,
    description_rule,
    features_rule,
)


def run_rules(soup: BeautifulSoup, rules: Sequence[ExtractionRule] = DEFAULT_RULES) -> List[Fragment]:
    """Runs every rule in order and concatenates their fragments."""
    fragments: List[Fragment] = []
    for rule in rules:
        fragments.extend(rule(soup))
    return fragments
