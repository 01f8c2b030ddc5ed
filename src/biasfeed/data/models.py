"""Core data models for biasfeed."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


class BiasTag(StrEnum):
    """Editorial bias label assigned by the classifier."""

    LEFT_LEANING = "left-leaning"
    RIGHT_LEANING = "right-leaning"
    NEUTRAL = "neutral"


class NewsSource(BaseModel):
    """Provenance and bias metadata of a news item."""

    url: str
    name: str = ""
    bias: str = BiasTag.NEUTRAL.value
    bias_explanation: str = Field(default="", alias="biasExplanation")

    model_config = {"frozen": True, "populate_by_name": True}


class NewsItem(BaseModel):
    """A processed news record as stored in the blob store.

    Stored JSON uses camelCase keys; use ``to_json_dict()`` to get them back.
    """

    heading: str
    summary: str = ""
    source: NewsSource
    last_updated: datetime = Field(alias="lastUpdated")
    model_used: str | None = Field(default=None, alias="modelUsed")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("last_updated")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Naive and aware datetimes cannot be compared
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def to_json_dict(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class BlobObject:
    """A listed object in the blob store.

    ``handle`` is the exact locator returned by the store and is the only
    value ever passed to ``delete``. ``pathname`` is the key inside the store.
    """

    handle: str
    pathname: str
    size: int | None = None
    uploaded_at: str | None = None


@dataclass(frozen=True)
class StoredNewsItem:
    """A news item paired with the storage location it was loaded from."""

    item: NewsItem
    handle: str
    pathname: str = ""

    @property
    def heading(self) -> str:
        return self.item.heading

    @property
    def last_updated(self) -> datetime:
        return self.item.last_updated

    @property
    def source_url(self) -> str:
        return self.item.source.url
