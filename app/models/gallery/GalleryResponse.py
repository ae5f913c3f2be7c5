from pydantic import BaseModel
from typing import List, Optional

from app.models.gallery.ImagesResponse import ImageItem


class SelectionToggleRequest(BaseModel):
    identifier: str


class SelectionResponse(BaseModel):
    selected: List[str]
    count: int


class GalleryStateResponse(BaseModel):
    state: str
    showWelcome: bool
    currentPage: int
    totalPages: int
    total: int
    hasNext: bool
    hasPrev: bool
    nextCursor: Optional[str] = None
    images: List[ImageItem]
    selected: List[str]
