"""Request orchestration: concepts first, then images, then merge."""
import logging
from datetime import datetime, timezone
from typing import List, Sequence

import httpx

from .config import Settings
from .errors import DesignStudioError, InternalFailure, InvalidRequest
from .generator import generate_concepts
from .image_generator import ImageResult, Rendered, generate_concept_images
from .models import Concept, DesignRequest, DesignResponse, RenderedConcept, UseCase
from .prompts import bound_prompt

logger = logging.getLogger(__name__)


def validate_request(request: DesignRequest) -> UseCase:
    """Check the request before any upstream call and return its use case."""
    prompt = (request.prompt or "").strip()
    use_case = (request.use_case or "").strip()
    if not prompt or not use_case:
        raise InvalidRequest("prompt or useCase missing")

    try:
        return UseCase(use_case.lower())
    except ValueError:
        raise InvalidRequest(f"unknown use case {use_case!r}", "Unsupported use case")


def merge_concepts(
    concepts: Sequence[Concept],
    images: Sequence[ImageResult],
) -> List[RenderedConcept]:
    """Pair concept i with image result i, keeping the original order."""
    if len(concepts) != len(images):
        raise ValueError(f"{len(concepts)} concepts but {len(images)} image results")

    merged = []
    for concept, image in zip(concepts, images):
        if isinstance(image, Rendered):
            image_url = image.uri
        else:
            image_url = None
        merged.append(RenderedConcept(**concept.model_dump(), image_url=image_url))
    return merged


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DesignOrchestrator:
    def __init__(self, settings: Settings, text_client, http_client: httpx.AsyncClient):
        self.settings = settings
        self.text_client = text_client
        self.http_client = http_client

    async def generate(self, request: DesignRequest) -> DesignResponse:
        """
        Main flow for one design request.

        - Validates prompt and use case (400 on failure, no upstream calls)
        - Asks Gemini for the concepts (fatal on failure)
        - Renders one image per concept concurrently (failures stay per concept)
        - Merges in order and timestamps the response
        """
        use_case = validate_request(request)
        user_prompt = bound_prompt(request.prompt)

        try:
            concepts = await generate_concepts(
                self.text_client, self.settings, use_case.value, user_prompt
            )

            images = await generate_concept_images(
                self.http_client,
                self.settings,
                [concept.image_prompt for concept in concepts],
            )
            failed = sum(1 for image in images if not isinstance(image, Rendered))
            if failed:
                logger.warning("%d of %d concept images failed", failed, len(images))

            return DesignResponse(
                concepts=merge_concepts(concepts, images),
                timestamp=utc_timestamp(),
            )
        except DesignStudioError:
            raise
        except Exception as e:
            logger.exception("Unexpected error while generating designs")
            raise InternalFailure(f"{type(e).__name__}: {e}") from e
