"""Pydantic models for Hoodie SDK configuration and requests."""

from __future__ import annotations

from typing import Any
from typing import Dict
from typing import Literal
from typing import Optional
from typing import Union

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

DEFAULT_BASE_URL = "/_api"
HEALTHY_INTERVAL = 30.0
DEGRADED_INTERVAL = 3.0

ResponseType = Literal["json", "text", "bytes", "response"]


class HoodieBaseModel(BaseModel):
    """Base model with common configuration."""

    model_config = ConfigDict(
        # Validate field assignment
        validate_assignment=True,
        # Allow population by field name and alias
        populate_by_name=True,
        # Forbid extra fields unless explicitly allowed
        extra="forbid",
    )


class HoodieConfig(HoodieBaseModel):
    """Client configuration."""
    base_url: str = Field(DEFAULT_BASE_URL, description="Base URL of the Hoodie server")
    timeout: float = Field(30.0, description="Request timeout in seconds")
    healthy_interval: float = Field(
        HEALTHY_INTERVAL, description="Seconds between connection checks while online"
    )
    degraded_interval: float = Field(
        DEGRADED_INTERVAL, description="Seconds between connection checks while offline"
    )
    user_agent: str = Field("hoodie-python-sdk/1.0.0", description="User agent string")
    log_level: Optional[str] = Field(None, description="Log level for the hoodie logger")

    @field_validator("base_url", mode="before")
    @classmethod
    def _strip_trailing_slashes(cls, value: Any) -> Any:
        if value is None or value == "":
            return DEFAULT_BASE_URL
        if isinstance(value, str):
            return value.rstrip("/") or DEFAULT_BASE_URL
        return value

    @field_validator("timeout", "healthy_interval", "degraded_interval")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value


class RequestOptions(HoodieBaseModel):
    """Options accepted by ``HoodieHTTPClient.request``."""
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers")
    body: Optional[Union[str, bytes]] = Field(None, description="Raw request body")
    json_body: Optional[Any] = Field(None, alias="json", description="JSON request body")
    params: Optional[Dict[str, Any]] = Field(None, description="Query parameters")
    timeout: Optional[float] = Field(None, description="Per-request timeout in seconds")
    with_credentials: bool = Field(True, description="Send the client's cookies")
    cross_origin: bool = Field(True, description="Treat the request as cross-origin")
    response_type: ResponseType = Field("json", description="How to decode the response body")
