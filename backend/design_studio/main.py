from contextlib import asynccontextmanager
import logging
from typing import List, Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings, configure_logging
from .errors import DesignStudioError, MISSING_FIELDS_MESSAGE
from .llm_client import get_genai_client
from .models import DesignRequest, DesignResponse, ErrorResponse, HealthResponse, UseCaseInfo
from .orchestrator import DesignOrchestrator, utc_timestamp
from .prompts import USE_CASE_INFO

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    text_client=None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the API.

    Clients passed in are used as-is (tests inject fakes); otherwise they are
    created at startup. Startup refuses to run without both API keys.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings.require_secrets()

        owned_http_client = None
        if http_client is None:
            owned_http_client = httpx.AsyncClient(timeout=settings.image_timeout)
        owned_text_client = None
        if text_client is None:
            owned_text_client = get_genai_client(settings)
        app.state.orchestrator = DesignOrchestrator(
            settings=settings,
            text_client=text_client if text_client is not None else owned_text_client,
            http_client=http_client or owned_http_client,
        )
        logger.info("Design API ready (text model %s)", settings.gemini_model)
        try:
            yield
        finally:
            if owned_http_client is not None:
                await owned_http_client.aclose()
            if owned_text_client is not None:
                # older google-genai releases have no aclose on the async client
                aclose = getattr(owned_text_client.aio, "aclose", None)
                if aclose is not None:
                    await aclose()

    app = FastAPI(
        title="AI Design Studio API",
        description="Turns a design prompt into three AI-generated concepts with renderings.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DesignStudioError)
    async def design_error_handler(request: Request, exc: DesignStudioError):
        if exc.status_code >= 500:
            logger.error("Design generation failed: %s", exc.detail or exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": MISSING_FIELDS_MESSAGE})

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "API is running..."

    @app.post(
        "/api/generate-design",
        response_model=DesignResponse,
        response_model_exclude_none=True,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def generate_design(
        body: DesignRequest,
        orchestrator: DesignOrchestrator = Depends(get_orchestrator),
    ):
        """
        Main endpoint: receives a prompt and a use case.

        Returns three concepts, each with an imageUrl data URI when its
        rendering succeeded.
        """
        return await orchestrator.generate(body)

    @app.get("/api/use-cases", response_model=List[UseCaseInfo])
    async def get_use_cases():
        """Return available use cases for the frontend picker."""
        return list(USE_CASE_INFO.values())

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint."""
        current = request.app.state.settings
        return HealthResponse(
            status="OK",
            timestamp=utc_timestamp(),
            env={
                "gemini": current.gemini_configured,
                "huggingface": current.huggingface_configured,
            },
        )

    return app


def get_orchestrator(request: Request) -> DesignOrchestrator:
    return request.app.state.orchestrator


settings = Settings.from_env()
configure_logging(settings.log_level)
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("design_studio.main:app", host=settings.host, port=settings.port)
