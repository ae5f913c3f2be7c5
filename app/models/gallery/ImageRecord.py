import math
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class ImageRecord(BaseModel):
    """One photo as known to the media host. Never mutated by the gallery."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    source_url: str
    created_at: datetime

    def to_json(self) -> dict:
        return {
            "identifier": self.identifier,
            "sourceUrl": self.source_url,
            "createdAt": self.created_at.isoformat(),
        }


class ImagePage(BaseModel):
    records: List[ImageRecord]
    next_cursor: Optional[str] = None
    total_count: int = 0

    def total_pages(self, page_size: int) -> int:
        return math.ceil(self.total_count / page_size)

    @property
    def identifiers(self) -> List[str]:
        return [record.identifier for record in self.records]
