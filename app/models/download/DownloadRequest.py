from pydantic import BaseModel
from typing import List


class DownloadRequest(BaseModel):
    images: List[str]
