from typing import Dict, List, Optional, Sequence, TYPE_CHECKING

from listing_reader.components.extractor.basic_parser import BasicParser
from listing_reader.components.extractor.rules import DEFAULT_RULES, ExtractionRule, Fragment, run_rules
from listing_reader.core.logger import get_logger

if TYPE_CHECKING:
    from listing_reader.core.config import ConfigurationManager

logger = get_logger(__name__)

TRUNCATION_MARKER = "\n...[truncated]"


def distinct_length(fragments: List[Fragment]) -> int:
    """
    Length of the summary once repeated texts are dropped, each text kept
    under the first label that found it.

    The same short string caught by several rules (title, h1, body fallback)
    must not add up to a usable page.
    """
    first_seen: Dict[str, Fragment] = {}
    for fragment in fragments:
        first_seen.setdefault(fragment.text, fragment)
    return len("\n".join(fragment.render() for fragment in first_seen.values()).strip())


class ExtractorManager:
    """
    Turns the serialized DOM of a rendered listing page into a bounded,
    labeled plain-text summary.

    The pipeline is: noise cleanup, ordered heuristic rules, body-text
    fallback when the rules found almost nothing, join, truncation, and a
    minimum-length check that rejects boilerplate-only pages.
    """
    DEFAULT_MAX_CONTENT_LENGTH = 5000
    DEFAULT_MIN_CONTENT_LENGTH = 50
    # At or below this many fragments the rules are considered to have failed.
    FALLBACK_FRAGMENT_THRESHOLD = 2

    def __init__(self, config: Optional['ConfigurationManager'] = None,
                 rules: Sequence[ExtractionRule] = DEFAULT_RULES):
        """
        Args:
            config (Optional[ConfigurationManager]): Source of
                `components.page_extractor.max_content_length` and `min_content_length`.
            rules (Sequence[ExtractionRule]): Rules to run, in order.
        """
        self.rules = rules
        if config:
            self.max_content_length = int(config.get('components.page_extractor.max_content_length', self.DEFAULT_MAX_CONTENT_LENGTH))
            self.min_content_length = int(config.get('components.page_extractor.min_content_length', self.DEFAULT_MIN_CONTENT_LENGTH))
        else:
            self.max_content_length = self.DEFAULT_MAX_CONTENT_LENGTH
            self.min_content_length = self.DEFAULT_MIN_CONTENT_LENGTH

    def collect_fragments(self, html_content: str) -> List[Fragment]:
        """
        Cleans the document and runs the rules, appending the visible body
        text as a `CONTENT` fragment when the rules matched too little.

        Raises:
            ExtractorError: If `html_content` is None.
        """
        parser = BasicParser(html_content=html_content)
        removed = parser.strip_noise()
        fragments = run_rules(parser.soup, self.rules)
        logger.debug(f"Removed {removed} noise elements; rules produced {len(fragments)} fragments.")

        if len(fragments) <= self.FALLBACK_FRAGMENT_THRESHOLD:
            body_text = parser.visible_text()
            if body_text:
                logger.debug("Too few rule matches, falling back to visible body text.")
                fragments.append(Fragment("CONTENT", body_text))
        return fragments

    def summarize(self, html_content: str) -> Optional[str]:
        """
        Builds the bounded text summary of a page.

        Args:
            html_content (str): The serialized DOM of the rendered page.

        Returns:
            Optional[str]: At most `max_content_length` characters plus the
            truncation marker, or None when the content, counted without
            repeated texts, is shorter than `min_content_length`.
        """
        fragments = self.collect_fragments(html_content)

        usable_length = distinct_length(fragments)
        if usable_length < self.min_content_length:
            logger.info(f"Extracted content too short ({usable_length} distinct chars), discarding.")
            return None

        content = "\n".join(fragment.render() for fragment in fragments).strip()
        if len(content) > self.max_content_length:
            content = content[:self.max_content_length] + TRUNCATION_MARKER
        return content
