"""Build Gemini instructions for each design use case."""
import logging
from typing import Dict

from .errors import InvalidRequest
from .models import UseCase, UseCaseInfo

logger = logging.getLogger(__name__)

# Upper bound on the user's text forwarded to Gemini
MAX_PROMPT_LENGTH = 2000

USE_CASE_INFO: Dict[UseCase, UseCaseInfo] = {
    UseCase.INTERIOR: UseCaseInfo(
        id=UseCase.INTERIOR,
        label="Interior Design",
        description="Layout, style, materials",
    ),
    UseCase.ARCHITECTURE: UseCaseInfo(
        id=UseCase.ARCHITECTURE,
        label="Architecture",
        description="Building form, massing, sustainability",
    ),
    UseCase.CONSTRUCTION: UseCaseInfo(
        id=UseCase.CONSTRUCTION,
        label="Construction",
        description="Structural systems, phasing",
    ),
    UseCase.EVENT: UseCaseInfo(
        id=UseCase.EVENT,
        label="Event Design",
        description="Seating, lighting, themes",
    ),
}

USE_CASE_TEMPLATES: Dict[UseCase, str] = {
    UseCase.INTERIOR: (
        "You are an experienced interior designer. "
        "Create 3 distinct interior design concepts for the request below.\n"
        "Focus on:\n"
        "   - Space planning and furniture layout\n"
        "   - Color palette and lighting mood\n"
        "   - Materials, finishes and textiles\n"
        "   - Decor style and functional storage\n"
    ),
    UseCase.ARCHITECTURE: (
        "You are a senior architect. "
        "Create 3 distinct architectural concepts for the request below.\n"
        "Focus on:\n"
        "   - Building form and massing\n"
        "   - Facade treatment and materials\n"
        "   - Sustainability and passive design strategies\n"
        "   - Site context, orientation and circulation\n"
    ),
    UseCase.CONSTRUCTION: (
        "You are a construction engineer and project planner. "
        "Create 3 distinct construction approaches for the request below.\n"
        "Focus on:\n"
        "   - Structural systems and load paths\n"
        "   - Construction phasing and sequencing\n"
        "   - Material selection and cost efficiency\n"
        "   - Site safety and buildability\n"
    ),
    UseCase.EVENT: (
        "You are a creative event designer. "
        "Create 3 distinct event design concepts for the request below.\n"
        "Focus on:\n"
        "   - Seating arrangement and guest flow\n"
        "   - Lighting design and atmosphere\n"
        "   - Theme, decor and color story\n"
        "   - Stage, focal points and guest experience\n"
    ),
}

OUTPUT_SCHEMA_BLOCK = """
Respond ONLY with a JSON object in exactly this format:
{
  "concepts": [
    {
      "title": "Short concept name",
      "summary": "Two or three sentences describing the concept",
      "highlights": ["Key feature 1", "Key feature 2", "Key feature 3", "Key feature 4"],
      "imagePrompt": "Detailed visual description for generating an image of this concept"
    }
  ]
}
Return exactly 3 concepts. All 3 concepts must be clearly different from each other in style and approach.
"""


def bound_prompt(user_prompt: str) -> str:
    """Strip the user's text and cut it to MAX_PROMPT_LENGTH characters."""
    request_text = user_prompt.strip()
    if len(request_text) > MAX_PROMPT_LENGTH:
        logger.warning(
            "Prompt truncated from %d to %d characters", len(request_text), MAX_PROMPT_LENGTH
        )
        request_text = request_text[:MAX_PROMPT_LENGTH]
    return request_text


def build_design_instruction(use_case, user_prompt: str) -> str:
    """Construct the Gemini instruction for a use case and user request.

    The domain persona and focus areas vary per use case; the JSON output
    block is the same for all of them.
    """
    try:
        template = USE_CASE_TEMPLATES[UseCase(use_case)]
    except ValueError:
        raise InvalidRequest(f"unknown use case {use_case!r}", "Unsupported use case")

    return f"{template}\nUser request: {bound_prompt(user_prompt)}\n{OUTPUT_SCHEMA_BLOCK}"
