"""
Intent classification for inbound patient and doctor messages.
"""

from typing import Callable, List, NamedTuple, Optional, Union

from ...core.enums import ConversationState, IntentKind
from ...core.models import Intent
from ...utils.text import TextProcessor
from .keywords import KEYWORDS, KeywordTable, keywords_for


class MessageContext(NamedTuple):
    raw: str
    text: str
    is_from_doctor: bool
    state: ConversationState


Rule = Callable[[MessageContext], Optional[Intent]]


class IntentClassifier:
    """Map message text to exactly one ``Intent``.

    Rules are tried in order and the first match wins:

    1. doctor slash-command
    2. booking reply, whenever the patient is mid-dialog
    3. greeting
    4. queue status
    5. social links
    6. referral code
    7. 1-5 rating
    8. health question
    9. otherwise ``unclassified``
    """

    ADMIN_COMMANDS = {
        "/search": IntentKind.ADMIN_SEARCH,
        "/queue": IntentKind.ADMIN_QUEUE,
        "/report": IntentKind.ADMIN_REPORT,
        "/network": IntentKind.ADMIN_NETWORK,
    }

    SELECTIONS = {
        "book": IntentKind.BOOK_APPOINTMENT,
        "book_appt": IntentKind.BOOK_APPOINTMENT,
        "address": IntentKind.CLINIC_ADDRESS,
        "clinic_address": IntentKind.CLINIC_ADDRESS,
        "queue": IntentKind.QUEUE_STATUS,
        "social": IntentKind.SOCIAL_LINKS,
        "referral": IntentKind.REFERRAL_REQUEST,
        "review": IntentKind.REVIEW_REQUEST,
        "review_request": IntentKind.REVIEW_REQUEST,
    }

    def __init__(self, keywords: KeywordTable = KEYWORDS):
        self._rules: List[Rule] = [
            self._admin_command,
            self._booking_response,
            self._keyword_rule(IntentKind.GREETING, keywords),
            self._keyword_rule(IntentKind.QUEUE_STATUS, keywords),
            self._keyword_rule(IntentKind.SOCIAL_LINKS, keywords),
            self._keyword_rule(IntentKind.REFERRAL_REQUEST, keywords),
            self._rating,
            self._keyword_rule(IntentKind.HEALTH_QUERY, keywords),
        ]

    def classify(
        self,
        raw_text: str,
        is_from_doctor: bool = False,
        conversation_state: Union[ConversationState, str] = ConversationState.IDLE,
    ) -> Intent:
        """
        Classify one text message.

        Args:
            raw_text: Message body as received
            is_from_doctor: Sender is the clinic's own number
            conversation_state: The patient's current dialog state

        Returns:
            The first matching Intent, or ``unclassified``
        """
        if not isinstance(conversation_state, ConversationState):
            conversation_state = ConversationState.from_string(conversation_state)

        raw = raw_text or ""
        context = MessageContext(
            raw=raw,
            text=TextProcessor.normalize_for_matching(raw),
            is_from_doctor=is_from_doctor,
            state=conversation_state,
        )
        for rule in self._rules:
            intent = rule(context)
            if intent is not None:
                return intent
        return Intent(IntentKind.UNCLASSIFIED)

    def classify_selection(self, selection_id: Optional[str]) -> Intent:
        """Map an interactive-list row id to an intent."""
        kind = self.SELECTIONS.get((selection_id or "").strip(), IntentKind.UNKNOWN_SELECTION)
        return Intent(kind)

    # Rules

    def _admin_command(self, context: MessageContext) -> Optional[Intent]:
        if not context.is_from_doctor:
            return None
        parts = context.raw.strip().split(maxsplit=1)
        if not parts:
            return None
        kind = self.ADMIN_COMMANDS.get(parts[0].lower())
        if kind is None:
            return None
        argument = parts[1].strip() if len(parts) > 1 else ""
        return Intent(kind, argument=argument)

    @staticmethod
    def _booking_response(context: MessageContext) -> Optional[Intent]:
        if context.state != ConversationState.IDLE:
            return Intent(IntentKind.BOOKING_RESPONSE)
        return None

    @staticmethod
    def _keyword_rule(kind: IntentKind, table: KeywordTable) -> Rule:
        words = keywords_for(kind, table)

        def rule(context: MessageContext) -> Optional[Intent]:
            if TextProcessor.contains_any(context.text, words):
                return Intent(kind)
            return None

        return rule

    @staticmethod
    def _rating(context: MessageContext) -> Optional[Intent]:
        text = context.text
        if text and text.isascii() and text.isdigit():
            value = int(text)
            if 1 <= value <= 5:
                return Intent(IntentKind.RATING, rating=value)
        return None
