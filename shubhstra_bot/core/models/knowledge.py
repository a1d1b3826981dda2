"""
Knowledge-base models.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from ..enums import KnowledgeCategory


class KnowledgeEntry(BaseModel):
    """A doctor-authored canned answer."""

    model_config = ConfigDict(extra="ignore")

    id: str
    doctor_id: str
    category: KnowledgeCategory
    symptom_name: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    medical_advice: Optional[str] = None
    question: Optional[str] = None
    answer: Optional[str] = None
    priority: int = 0
    is_active: bool = True
