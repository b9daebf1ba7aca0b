"""
Own account identity, needed to decrypt fetched channel messages.
"""

from typing import Optional
from pydantic import BaseModel


class Identity(BaseModel):
    id: str
    lid: Optional[str] = None  # alternate (LID) addressing form
