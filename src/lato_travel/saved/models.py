"""Snapshot records kept alongside the saved-identifier index."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SavedItemRecord(BaseModel):
    """Denormalized display fields for a saved tour or company.

    Unknown fields are kept, so a snapshot can carry whatever the card needs
    (company, duration, location...). The snapshot may go stale relative to
    the catalog entity it was copied from.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    identifier: str
    title: str | None = None
    name: str | None = None
    price: float | None = None
    original_price: float | None = Field(default=None, alias="originalPrice")
    rating: float | None = None
    review_count: int | None = Field(default=None, alias="reviewCount")
    images: list[str] = Field(default_factory=list)
    saved_date: str | None = Field(default=None, alias="savedDate")

    @classmethod
    def from_snapshot(cls, identifier: str, snapshot: dict[str, Any] | None) -> "SavedItemRecord":
        """Build a record for identifier; the snapshot's own id fields are ignored."""
        data = {k: v for k, v in (snapshot or {}).items() if k not in ("identifier", "id", "uuid")}
        return cls.model_validate({**data, "identifier": identifier})

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
