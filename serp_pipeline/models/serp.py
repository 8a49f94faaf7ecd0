"""Search-result feature records."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Sitelink(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str


class OrganicResult(BaseModel):
    """One organic (unpaid) result."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    position: int = Field(ge=1)
    title: str
    url: str
    display_url: str = Field(alias="displayUrl")
    snippet: str = ""
    sitelinks: list[Sitelink] = Field(default_factory=list)
    date: Optional[str] = None
    cached: bool = False


class AdResult(BaseModel):
    """One paid result."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    position: int = Field(ge=1)
    title: str
    url: str
    display_url: str = Field(alias="displayUrl")
    description: str = ""
    is_top: bool = Field(default=True, alias="isTop")


class QuestionAnswer(BaseModel):
    """A "People also ask" entry."""

    model_config = ConfigDict(frozen=True)

    question: str
    snippet: Optional[str] = None
    url: Optional[str] = None


class FeaturedPassage(BaseModel):
    """The featured snippet shown above organic results."""

    model_config = ConfigDict(frozen=True)

    text: str
    url: str = ""
    title: str = ""
    type: Literal["paragraph", "list", "table", "unknown"] = "paragraph"


class SummarySource(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str


class SummaryPanel(BaseModel):
    """A generated summary (AI overview) with its cited sources."""

    model_config = ConfigDict(frozen=True)

    text: str
    sources: list[SummarySource] = Field(default_factory=list)


class MapPackEntry(BaseModel):
    """A local result card from the embedded map pack."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    address: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=1, le=5)
    review_count: Optional[int] = Field(default=None, ge=0, alias="reviewCount")
    category: Optional[str] = None
    phone: Optional[str] = None


class InfoPanel(BaseModel):
    """Knowledge panel: an entity summary with free-form attributes."""

    model_config = ConfigDict(frozen=True)

    title: str
    type: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    attributes: dict[str, str] = Field(default_factory=dict)


class SerpResponse(BaseModel):
    """Every feature extracted from one search results page."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    query: str
    country: str = "us"
    language: str = "en"
    location: Optional[str] = None
    total_results: Optional[str] = Field(default=None, alias="totalResults")
    organic: list[OrganicResult] = Field(default_factory=list)
    ads: list[AdResult] = Field(default_factory=list)
    people_also_ask: list[QuestionAnswer] = Field(default_factory=list, alias="peopleAlsoAsk")
    featured_snippet: Optional[FeaturedPassage] = Field(default=None, alias="featuredSnippet")
    ai_overview: Optional[SummaryPanel] = Field(default=None, alias="aiOverview")
    map_pack: list[MapPackEntry] = Field(default_factory=list, alias="mapPack")
    knowledge_panel: Optional[InfoPanel] = Field(default=None, alias="knowledgePanel")
    related_searches: list[str] = Field(default_factory=list, alias="relatedSearches")

    def to_record(self) -> dict:
        """Serialize with the wire field names."""
        return self.model_dump(by_alias=True)
