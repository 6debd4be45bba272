"""Pydantic schemas for order records, stage results and responses."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrackingInfo(BaseModel):
    """One tracking entry attached to a fulfillment."""

    number: Optional[str] = None
    url: Optional[str] = None

    @property
    def has_tracking(self) -> bool:
        return bool(self.number or self.url)


class Fulfillment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tracking_info: List[TrackingInfo] = Field(default_factory=list, alias="trackingInfo")

    @field_validator("tracking_info", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [t for t in (value or []) if t is not None]


class OrderRecord(BaseModel):
    """An order as returned by the commerce API lookup.

    `created_at` keeps the upstream string verbatim so it can be echoed back
    unchanged; `created` gives the parsed instant.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    created_at: str = Field(alias="createdAt")
    fulfillment_status: Optional[str] = Field(default=None, alias="displayFulfillmentStatus")
    fulfillments: List[Fulfillment] = Field(default_factory=list)

    @field_validator("created_at")
    @classmethod
    def _must_parse(cls, value: str) -> str:
        datetime.fromisoformat(value)
        return value

    @field_validator("fulfillments", mode="before")
    @classmethod
    def _fulfillments_none_as_empty(cls, value):
        return value or []

    @property
    def created(self) -> datetime:
        parsed = datetime.fromisoformat(self.created_at)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


class Stage(str, Enum):
    PROCESSING = "processing"
    PACKING = "packing"
    SHIPPED = "shipped"


class StageResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    stage: Stage
    message: str
    days_since: int = Field(alias="daysSince", ge=0)


class OrderStatusPayload(BaseModel):
    """Successful response body: `{orderName, createdAt, daysSince, stage, message}`."""

    model_config = ConfigDict(populate_by_name=True)

    order_name: Optional[str] = Field(default=None, alias="orderName")
    created_at: str = Field(alias="createdAt")
    days_since: int = Field(alias="daysSince")
    stage: Stage
    message: str

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    error: str
    hint: Optional[str] = None
    reason: Optional[str] = None
    message: Optional[str] = None
