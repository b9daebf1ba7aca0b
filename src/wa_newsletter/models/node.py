"""
Binary node tree: the tag / attrs / content structure every stanza uses.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field

S_WHATSAPP_NET = "s.whatsapp.net"


class BinaryNode(BaseModel):
    tag: str
    attrs: dict[str, str] = Field(default_factory=dict)
    content: Optional[Union[list[BinaryNode], bytes, str]] = None

    def __repr__(self) -> str:
        return f"BinaryNode(tag={self.tag!r}, attrs={self.attrs!r})"
