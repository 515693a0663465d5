import json
import logging
import re
from typing import Any, List

from .errors import EmptyGenerationResult
from .models import Concept

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```[ \t]*[A-Za-z0-9_+-]*[ \t]*(?:\r?\n)?")
_FENCE_CLOSE = re.compile(r"(?:\r?\n)?[ \t]*```\s*$")
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

FALLBACK_APPROACHES = ["modern", "classic", "innovative"]


# ============================================================
# FENCE STRIPPING
# ============================================================

def unwrap_json_fence(text: str) -> str:
    """
    Remove markdown code fences around model output.

    Handles plain text, ``` fences, fences labelled ```json (any case) and
    an opening fence with no closing fence. Applying it twice gives the
    same result as applying it once.
    """
    if not text or not isinstance(text, str):
        return ""

    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def load_json_payload(text: str) -> Any:
    """
    Parse unwrapped model output.

    Tries the whole text first, then the outermost {...} block for replies
    that put prose around the object. Raises ValueError when neither parses.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        match = _JSON_OBJECT.search(text)
        if not match or match.group(0) == text:
            raise exc
    return json.loads(match.group(0))


# ============================================================
# CONCEPT PARSER
# ============================================================

def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_highlights(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [_as_text(h) for h in value if _as_text(h)]


def _to_concept(item: dict) -> Concept:
    title = _as_text(item.get("title"))
    summary = _as_text(item.get("summary"))
    image_prompt = _as_text(item.get("imagePrompt") or item.get("image_prompt"))
    if not image_prompt:
        image_prompt = ". ".join(part for part in (title, summary) if part)

    return Concept(
        title=title,
        summary=summary,
        highlights=_as_highlights(item.get("highlights")),
        image_prompt=image_prompt,
    )


def parse_concepts(raw_text: str, use_case, user_prompt: str) -> List[Concept]:
    """Turn Gemini output into concepts.

    Unparseable output falls back to placeholder concepts. Valid JSON with
    no concepts raises EmptyGenerationResult.
    """
    cleaned = unwrap_json_fence(raw_text)
    try:
        data = load_json_payload(cleaned)
    except ValueError as exc:
        logger.warning(
            "Gemini returned unparseable output (%s); using fallback concepts. Raw text: %r",
            exc,
            raw_text,
        )
        return fallback_concepts(use_case, user_prompt)

    items = data.get("concepts") if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise EmptyGenerationResult("response JSON has no 'concepts' list")

    concepts = [_to_concept(item) for item in items if isinstance(item, dict)]
    if not concepts:
        raise EmptyGenerationResult("response JSON has an empty 'concepts' list")

    if len(concepts) != 3:
        logger.info("Gemini returned %d concepts instead of 3", len(concepts))
    return concepts


def fallback_concepts(use_case, user_prompt: str) -> List[Concept]:
    """Deterministic placeholder set used when the model output is unusable."""
    use_case = getattr(use_case, "value", use_case)
    return [
        Concept(
            title=f"Design Concept {index}",
            summary=f"A {approach} {use_case} design concept based on your request: {user_prompt}",
            highlights=[
                "Tailored to your request",
                f"{approach.capitalize()} design approach",
                "Functional layout",
                "Professional finish",
            ],
            image_prompt=f"{approach} {use_case} design concept, {user_prompt}",
        )
        for index, approach in enumerate(FALLBACK_APPROACHES, start=1)
    ]
