"""Models for the external trips API (query params)."""
from pydantic import BaseModel, Field, field_serializer


class MarketplaceParams(BaseModel):
    """Params for /api/v1/trips/marketplace. ``countries`` is omitted when unset."""

    page: int = Field(default=1, ge=1)
    step: int = Field(default=10, ge=1, le=100)
    sample: bool = True
    countries: str | None = None

    @field_serializer("sample")
    def _serialize_sample(self, value: bool) -> str:
        return "true" if value else "false"

    def to_query(self) -> dict[str, str | int]:
        return self.model_dump(exclude_none=True)
