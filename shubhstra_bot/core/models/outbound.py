"""
Outbound WhatsApp message payloads.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, ConfigDict


class ListRow(BaseModel):
    """One selectable row of an interactive list."""

    model_config = ConfigDict(extra="forbid")

    id: str
    title: str
    description: Optional[str] = None


class ListSection(BaseModel):
    """A titled group of list rows."""

    model_config = ConfigDict(extra="forbid")

    title: str
    rows: List[ListRow]


class TextMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    body: str


class InteractiveListMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    header: str
    body: str
    button: str = "View Options"
    sections: List[ListSection]


class LocationMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    latitude: float
    longitude: float
    name: str
    address: str


class TemplateMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    template_name: str
    language_code: str = "en_US"
    components: List[Dict[str, Any]] = Field(default_factory=list)


class DocumentMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_bytes: bytes
    filename: str
    caption: str = ""


OutboundMessage = Union[
    TextMessage,
    InteractiveListMessage,
    LocationMessage,
    TemplateMessage,
    DocumentMessage,
]
