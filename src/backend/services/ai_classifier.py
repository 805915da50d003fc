"""
AI Problem Classifier.

Asks a hosted language model to map a user's described difficulty onto the
closed problem taxonomy and to write one empathetic guidance sentence.

The model output is untrusted: a JSON object is extracted from whatever text
comes back, and every category is checked against the taxonomy before use.
Any failure surfaces as ClassificationError so the caller can fall back to
keyword matching.
"""

import json
import logging
import re
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from config import settings
from database.seeds.problem_taxonomy import PROBLEM_TAXONOMY, is_known_slug
from services.llm_client import LLMClient, LLMClientError

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


class ClassificationError(Exception):
    """Raised when AI classification is unavailable or its output unusable."""
    pass


class ClassificationResult(BaseModel):
    """Categories chosen by the model plus its guidance sentence."""

    categories: List[str] = Field(default_factory=list)
    guidance: str = ""


def extract_json_object(raw_content: str) -> str:
    """
    Extract the first well-formed JSON object from LLM output.

    Handles markdown code fences and prose before or after the object.

    Raises:
        ValueError: If no JSON object can be decoded from the content
    """
    content = (raw_content or "").strip()

    fenced = _CODE_FENCE.search(content)
    candidates = [fenced.group(1).strip(), content] if fenced else [content]

    decoder = json.JSONDecoder()
    for candidate in candidates:
        for match in re.finditer(r"\{", candidate):
            try:
                obj, end = decoder.raw_decode(candidate, match.start())
            except json.JSONDecodeError:
                continue
            if isinstance(obj, dict):
                return candidate[match.start():end]

    raise ValueError("No JSON object found in model response")


def _normalise_categories(value: Any, max_categories: int) -> List[str]:
    if not isinstance(value, list):
        return []

    categories: List[str] = []
    for item in value:
        if not isinstance(item, str):
            continue
        slug = item.strip().lower()
        if not is_known_slug(slug):
            logger.info("Discarding unknown category from model: %r", item)
            continue
        if slug not in categories:
            categories.append(slug)

    # Extra categories are dropped rather than rejecting the whole answer
    return categories[:max_categories]


def parse_classification(raw_content: str, max_categories: Optional[int] = None) -> ClassificationResult:
    """
    Validate raw model text into a ClassificationResult.

    Raises:
        ClassificationError: No JSON object, or neither expected key present
    """
    if max_categories is None:
        max_categories = settings.CLASSIFIER_MAX_CATEGORIES

    try:
        data = json.loads(extract_json_object(raw_content))
    except ValueError as e:
        raise ClassificationError(f"Unparseable classifier response: {str(e)}")

    if "categories" not in data and "guidance" not in data:
        raise ClassificationError("Classifier response missing 'categories' and 'guidance'")

    guidance = data.get("guidance")
    return ClassificationResult(
        categories=_normalise_categories(data.get("categories"), max_categories),
        guidance=guidance.strip() if isinstance(guidance, str) else "",
    )


class ProblemClassifier:
    """
    Classifies free text into taxonomy slugs using an LLM.

    Example:
        Input: "My manager keeps yelling and I can't sleep"
        Output: ClassificationResult(categories=["anxiety", "anger"], guidance="...")
    """

    SYSTEM_PROMPT = (
        "You are a helpful assistant that analyzes emotional queries. "
        "Always respond with valid JSON only."
    )

    def __init__(self, llm_client: LLMClient):
        """
        Initialize classifier.

        Args:
            llm_client: LLM client instance for making API calls
        """
        self.llm_client = llm_client
        self.provider = settings.AI_PROVIDER
        self.model_name = settings.AI_MODEL
        self.max_categories = settings.CLASSIFIER_MAX_CATEGORIES

    async def classify(self, text: str) -> ClassificationResult:
        """
        Classify a user's described problem.

        Raises:
            ClassificationError: Provider unavailable, failed, or returned
                                 output that cannot be validated
        """
        user_message = self._build_user_message(text)

        try:
            response = await self.llm_client.call(
                provider=self.provider,
                model_name=self.model_name,
                system_prompt=self.SYSTEM_PROMPT,
                user_message=user_message,
                temperature=settings.CLASSIFIER_TEMPERATURE,
                max_tokens=settings.CLASSIFIER_MAX_TOKENS,
                timeout=settings.CLASSIFIER_TIMEOUT,
            )
        except LLMClientError as e:
            raise ClassificationError(f"AI classification unavailable: {str(e)}")

        return parse_classification(response.get("content", ""), self.max_categories)

    def _build_user_message(self, text: str) -> str:
        """Embed the query, the closed taxonomy and the output rules."""
        query = text[:settings.MAX_QUERY_LENGTH]
        category_lines = "\n".join(
            f"- {category['slug']} ({category['description']})"
            for category in PROBLEM_TAXONOMY
        )

        return (
            "You are an expert at understanding human emotions and life problems. "
            "Analyze this user query and identify the relevant problem categories.\n\n"
            f"User Query: {json.dumps(query, ensure_ascii=False)}\n\n"
            "Available problem categories (return ONLY from this list):\n"
            f"{category_lines}\n\n"
            "Respond with ONLY a JSON object in this exact format:\n"
            "{\n"
            '  "categories": ["category1", "category2"],\n'
            '  "guidance": "A brief, empathetic one-sentence acknowledgment of the '
            'user\'s struggle and what kind of wisdom might help"\n'
            "}\n\n"
            f"Be concise. Select 1-{self.max_categories} most relevant categories."
        )
