"""Business listing records."""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PRICE_LEVEL_RE = re.compile(r"^(?:\${1,4}|€{1,4}|£{1,4}|¥{1,4}|₩{1,4}|₹{1,4})$")


class RawDocument(BaseModel):
    """The sole input to one pipeline invocation. Never persisted."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    content_length: Optional[int] = None

    @property
    def declared_length(self) -> int:
        if self.content_length is not None:
            return self.content_length
        return len(self.text)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


class Coordinates(BaseModel):
    """Decimal-degree position."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class BusinessRecord(BaseModel):
    """One business listing.

    Numeric fields are either absent or inside their valid range; the field
    extractors check ranges before a record is built, the constraints here
    only guard against callers constructing records by hand.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    hours: Optional[dict[str, str]] = None
    rating: Optional[float] = Field(default=None, ge=1, le=5)
    review_count: Optional[int] = Field(default=None, ge=0, alias="reviewCount")
    categories: list[str] = Field(default_factory=list)
    coordinates: Optional[Coordinates] = None
    place_id: Optional[str] = Field(default=None, alias="placeId")
    price_level: Optional[str] = Field(default=None, alias="priceLevel")
    permanently_closed: bool = Field(default=False, alias="permanentlyClosed")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("categories")
    @classmethod
    def _dedupe_categories(cls, value: list[str]) -> list[str]:
        # Ordered, case-insensitive de-duplication
        seen: set[str] = set()
        out = []
        for item in value:
            key = item.strip().casefold()
            if key and key not in seen:
                seen.add(key)
                out.append(item.strip())
        return out

    @field_validator("price_level")
    @classmethod
    def _check_price_level(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not PRICE_LEVEL_RE.match(value):
            raise ValueError(f"invalid price level: {value!r}")
        return value

    def to_record(self) -> dict:
        """Serialize with the wire field names."""
        return self.model_dump(by_alias=True)


class BusinessSearchResult(BaseModel):
    """Business listings found in one document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    businesses: list[BusinessRecord] = Field(default_factory=list)
    total_found: int = Field(default=0, alias="totalFound")
    next_page_token: Optional[str] = Field(default=None, alias="nextPageToken")
    search_query: str = Field(default="", alias="searchQuery")
    location: str = ""

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True)
