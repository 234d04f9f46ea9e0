"""
Shared schema primitives used across the API.
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    model_config = ConfigDict(from_attributes=True)

    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class LinkOut(BaseModel):
    """One bidirectional link made while saving: forward a→b plus inverse b→a."""
    model_config = ConfigDict(from_attributes=True)

    source_type: str
    source_id: str
    target_type: str
    target_id: str
    forward: str
    inverse: str
    forward_created: bool
    inverse_created: bool


class SaveSummary(BaseModel):
    """
    Outcome of a save. `errors` lists references that could not be resolved
    or linked; the entity itself was saved regardless.
    """
    model_config = ConfigDict(from_attributes=True)

    kind: str
    entity_id: str
    created: bool
    links: list[LinkOut] = []
    errors: list[str] = []
