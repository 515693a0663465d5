from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UseCase(str, Enum):
    INTERIOR = "interior"
    ARCHITECTURE = "architecture"
    CONSTRUCTION = "construction"
    EVENT = "event"


class DesignRequest(BaseModel):
    """Raw request body. Fields are optional here so that missing values
    produce the service's own 400 response instead of a schema error."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = None
    use_case: Optional[str] = Field(default=None, alias="useCase")


class Concept(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    summary: str = ""
    highlights: List[str] = []
    image_prompt: str = Field(default="", alias="imagePrompt")


class RenderedConcept(Concept):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class DesignResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    concepts: List[RenderedConcept]
    timestamp: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    env: Dict[str, bool]


class UseCaseInfo(BaseModel):
    id: UseCase
    label: str
    description: str


class ErrorResponse(BaseModel):
    error: str
