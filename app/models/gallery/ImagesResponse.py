from pydantic import BaseModel
from typing import List, Optional


class ImageItem(BaseModel):
    identifier: str
    sourceUrl: str
    createdAt: str


class ImagesResponse(BaseModel):
    images: List[ImageItem]
    totalPages: int
    currentPage: int
    total: int
    nextCursor: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
