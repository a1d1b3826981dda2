"""
Knowledge-base resolver for doctor-authored answers.
"""

from typing import List, Optional

from ...core.enums import KnowledgeCategory
from ...core.models import KnowledgeEntry
from ...utils.logging import get_logger
from ...utils.text import TextProcessor
from ..store import DataStore

logger = get_logger("shubhstra.knowledge")


class KnowledgeResolver:
    """Match patient text against a doctor's knowledge base.

    Entries are evaluated in descending priority and the first match wins.
    Store failures are logged and treated as "no match".
    """

    def __init__(self, store: DataStore, threshold: float = 0.5):
        self.store = store
        self.threshold = threshold

    async def resolve_medical(self, text: str, doctor_id: str) -> Optional[KnowledgeEntry]:
        """Return the highest-priority medical entry with a keyword in the text."""
        normalized = TextProcessor.normalize_for_matching(text)
        if not normalized:
            return None

        for entry in await self._entries(doctor_id, KnowledgeCategory.MEDICAL):
            keywords = [k.strip().lower() for k in entry.keywords if k and k.strip()]
            if TextProcessor.contains_any(normalized, keywords):
                logger.info({"event": "kb_medical_match", "entry_id": entry.id, "symptom": entry.symptom_name})
                return entry
        return None

    async def resolve_administrative(self, text: str, doctor_id: str) -> Optional[KnowledgeEntry]:
        """Return the highest-priority FAQ whose question words mostly appear in the text."""
        normalized = TextProcessor.normalize_for_matching(text)
        if not normalized:
            return None

        for entry in await self._entries(doctor_id, KnowledgeCategory.ADMINISTRATIVE):
            if self.question_matches(entry.question or "", normalized):
                logger.info({"event": "kb_faq_match", "entry_id": entry.id})
                return entry
        return None

    def question_matches(self, question: str, normalized_text: str) -> bool:
        """Check the word-overlap rule; words of three letters or fewer are ignored."""
        words = [w.lower() for w in question.split() if len(w) > 3]
        if not words:
            return False
        matched = sum(1 for w in words if w in normalized_text)
        return matched > len(words) * self.threshold

    async def _entries(self, doctor_id: str, category: KnowledgeCategory) -> List[KnowledgeEntry]:
        try:
            entries = await self.store.get_knowledge_entries(doctor_id, category)
        except Exception:
            logger.exception(f"Knowledge lookup failed for doctor {doctor_id} ({category.value})")
            return []
        return sorted((e for e in entries if e.is_active), key=lambda e: e.priority, reverse=True)
