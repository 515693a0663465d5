"""Generate design concepts with Gemini."""
import logging
from typing import List

from google.genai import types

from .config import Settings
from .errors import UpstreamTextFailure
from .models import Concept
from .parsing import parse_concepts
from .prompts import build_design_instruction

logger = logging.getLogger(__name__)


async def call_gemini_for_concepts(client, instruction: str, model: str) -> str:
    """Send the instruction to Gemini once and return the raw reply text.

    Any SDK or transport error is raised as UpstreamTextFailure.
    """
    try:
        response = await client.aio.models.generate_content(
            model=model,
            contents=instruction,
            config=types.GenerateContentConfig(temperature=0.8),
        )
    except Exception as e:
        logger.error("Gemini request failed: %s", e)
        raise UpstreamTextFailure(f"Gemini request failed: {e}") from e

    return getattr(response, "text", None) or ""


async def generate_concepts(
    client,
    settings: Settings,
    use_case,
    user_prompt: str,
) -> List[Concept]:
    """Template the request, call Gemini and parse the concepts.

    Malformed output is replaced by fallback concepts; an unreachable
    backend or an empty concept list fails the request.
    """
    instruction = build_design_instruction(use_case, user_prompt)
    logger.info("Requesting concepts from %s for use case %s", settings.gemini_model, use_case)

    raw_text = await call_gemini_for_concepts(client, instruction, settings.gemini_model)
    logger.debug("Gemini raw reply: %r", raw_text)

    return parse_concepts(raw_text, use_case, user_prompt)
