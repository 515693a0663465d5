from google import genai
from google.genai import types

from .config import Settings


def get_genai_client(settings: Settings) -> genai.Client:
    """Create the Gemini client used for concept generation."""
    return genai.Client(
        api_key=settings.gemini_api_key,
        # HttpOptions timeout is in milliseconds
        http_options=types.HttpOptions(timeout=int(settings.text_timeout * 1000)),
    )
