"""
Image generation for design concepts through the Hugging Face inference API.

Takes:
- the imagePrompt of each concept
- the shared HTTP client and settings

Outputs:
- one ImageResult per concept: Rendered(data URI) or Failed(reason)

A failed image never raises. It only marks its own concept as having no image.
"""

import asyncio
import base64
import io
import logging
from dataclasses import dataclass
from typing import List, Sequence, Union

import httpx
from PIL import Image

from .config import Settings

logger = logging.getLogger(__name__)

IMAGE_STYLE_SUFFIX = (
    "architectural sketch style, professional rendering, clean lines, detailed illustration"
)


@dataclass(frozen=True)
class Rendered:
    uri: str


@dataclass(frozen=True)
class Failed:
    reason: str


ImageResult = Union[Rendered, Failed]


def build_image_prompt(image_prompt: str) -> str:
    """Append the fixed rendering style to a concept's image prompt."""
    return f"{image_prompt.strip()}, {IMAGE_STYLE_SUFFIX}"


def encode_image_data_uri(payload: bytes) -> str:
    """
    Check that payload is a decodable image and wrap it in a data URI.

    Raises OSError / SyntaxError / ValueError / DecompressionBombError (from
    Pillow) for bad payloads.
    """
    if not payload:
        raise ValueError("empty image payload")

    with Image.open(io.BytesIO(payload)) as image:
        image_format = image.format
        image.verify()

    mime_type = Image.MIME.get(image_format, "image/png")
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:300]
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return str(body)[:300]


async def generate_concept_image(
    http_client: httpx.AsyncClient,
    settings: Settings,
    image_prompt: str,
) -> ImageResult:
    """
    Request one image for one concept.

    Args:
        http_client: Shared async HTTP client
        settings: Image backend URL, token and per-call timeout
        image_prompt: The concept's imagePrompt (style suffix is added here)

    Returns:
        Rendered with a data URI, or Failed with the reason. Never raises.
    """
    prompt = build_image_prompt(image_prompt)
    headers = {
        "Authorization": f"Bearer {settings.huggingface_token}",
        "Accept": "image/png",
    }

    try:
        response = await http_client.post(
            settings.image_api_url,
            json={"inputs": prompt},
            headers=headers,
            timeout=settings.image_timeout,
        )
    except httpx.HTTPError as e:
        logger.warning("Image request failed: %s: %s", type(e).__name__, e)
        return Failed(f"request error: {type(e).__name__}")

    if not response.is_success:
        detail = _error_detail(response)
        logger.warning("Image backend returned HTTP %d: %s", response.status_code, detail)
        return Failed(f"HTTP {response.status_code}: {detail}")

    try:
        return Rendered(encode_image_data_uri(response.content))
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        logger.warning("Image backend returned an undecodable payload: %s", e)
        return Failed(f"invalid image payload: {e}")


async def _settle(coro) -> ImageResult:
    try:
        return await coro
    except Exception as e:
        logger.exception("Unexpected error while generating an image")
        return Failed(f"unexpected error: {type(e).__name__}")


async def generate_concept_images(
    http_client: httpx.AsyncClient,
    settings: Settings,
    image_prompts: Sequence[str],
) -> List[ImageResult]:
    """
    Generate one image per prompt concurrently and wait for all of them.

    Results come back in the same order as image_prompts. Requests still
    running after settings.image_batch_timeout are cancelled and reported
    as Failed.
    """
    if not image_prompts:
        return []

    tasks = [
        asyncio.create_task(_settle(generate_concept_image(http_client, settings, prompt)))
        for prompt in image_prompts
    ]

    try:
        _, pending = await asyncio.wait(tasks, timeout=settings.image_batch_timeout)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()

    if pending:
        logger.warning(
            "%d of %d image requests still running after %.0fs; marking them as failed",
            len(pending),
            len(tasks),
            settings.image_batch_timeout,
        )
        await asyncio.gather(*pending, return_exceptions=True)

    results: List[ImageResult] = []
    for task in tasks:
        if task in pending or task.cancelled():
            results.append(Failed("timed out"))
        else:
            results.append(task.result())
    return results
