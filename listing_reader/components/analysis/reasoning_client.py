"""
Client for the external reasoning service (Anthropic Messages API).

Sends the analysis request and turns the model's answer into a dict. The
model is asked for bare JSON but sometimes wraps it in prose, so the
outermost JSON object is recovered when direct parsing fails.
"""
import json
import re
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import anthropic

from listing_reader.components.analysis.prompt_builder import SYSTEM_PROMPT
from listing_reader.core.exceptions import ReasoningError
from listing_reader.core.logger import get_logger

if TYPE_CHECKING:
    from listing_reader.core.config import ConfigurationManager

logger = get_logger(__name__)

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def parse_analysis(text: str) -> Dict[str, Any]:
    """
    Parses the model's answer into a JSON object.

    Raises:
        ReasoningError: If no JSON object can be recovered.
    """
    try:
        result = json.loads(text)
    except json.JSONDecodeError:
        match = JSON_OBJECT_PATTERN.search(text or "")
        if not match:
            raise ReasoningError("Invalid response from the reasoning service: no JSON object found.")
        try:
            result = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ReasoningError("Invalid response from the reasoning service.", original_exception=e)

    if not isinstance(result, dict):
        raise ReasoningError("Invalid response from the reasoning service: expected a JSON object.")
    return result


class ReasoningClient:
    """
    Thin async wrapper around `anthropic.AsyncAnthropic`.

    The API key is read by the SDK from ANTHROPIC_API_KEY; the underlying
    client is created on first use so the app can start without one.
    """
    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    DEFAULT_MAX_TOKENS = 2000
    DEFAULT_MAX_IMAGES = 10

    def __init__(self, config: Optional['ConfigurationManager'] = None,
                 client: Optional[anthropic.AsyncAnthropic] = None):
        settings: Dict[str, Any] = {}
        if config:
            settings = config.get('components.reasoning', {}) or {}
        self.model: str = settings.get('model', self.DEFAULT_MODEL)
        self.max_tokens: int = int(settings.get('max_tokens', self.DEFAULT_MAX_TOKENS))
        self.max_images: int = int(settings.get('max_images', self.DEFAULT_MAX_IMAGES))
        self._client = client

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic()
        return self._client

    async def analyze(self, content_blocks: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Sends one user turn and returns the parsed JSON answer.

        Raises:
            ReasoningError: On API failure or an unparseable answer.
        """
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": content_blocks}],
            )
        except anthropic.AnthropicError as e:
            logger.error(f"Reasoning service call failed: {e}", exc_info=True)
            raise ReasoningError("Reasoning service call failed.", original_exception=e)

        text = "".join(block.text for block in response.content if getattr(block, "type", None) == "text")
        logger.debug(f"Reasoning service answered with {len(text)} characters.")
        return parse_analysis(text)
