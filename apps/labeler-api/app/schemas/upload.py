"""
Upload report returned after ingestion.
"""

from typing import Optional

from pydantic import BaseModel, Field


class UploadReportOut(BaseModel):
    substation_id: Optional[str] = None
    image_url: Optional[str] = None
    inserted: int = 0
    failed: int = 0
    log: list[str] = Field(default_factory=list)
