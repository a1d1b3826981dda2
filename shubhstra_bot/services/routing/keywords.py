"""
Locale-keyed keyword tables for intent classification.

Every locale is consulted for every message; matching is substring on
lowercased text.
"""

from typing import Dict, Tuple

from ...core.enums import IntentKind, Language

EN = Language.ENGLISH
MR = Language.MARATHI
HI = Language.HINDI

KeywordTable = Dict[IntentKind, Dict[Language, Tuple[str, ...]]]

KEYWORDS: KeywordTable = {
    IntentKind.GREETING: {
        EN: ("hi", "hello", "hey", "menu", "start", "help"),
        MR: ("नमस्कार", "हॅलो"),
    },
    IntentKind.QUEUE_STATUS: {
        EN: ("queue", "token", "wait", "waiting"),
        MR: ("रांग", "टोकन", "प्रतीक्षा"),
    },
    IntentKind.SOCIAL_LINKS: {
        EN: ("social", "follow", "instagram", "youtube", "website", "facebook"),
    },
    IntentKind.REFERRAL_REQUEST: {
        EN: ("refer", "referral", "code", "share"),
        MR: ("रेफर", "कोड"),
    },
    IntentKind.HEALTH_QUERY: {
        EN: (
            # Symptoms
            "pain", "ache", "hurt", "sore", "burning", "itching", "swelling",
            "fever", "temperature", "cold", "cough", "sneeze", "flu",
            "headache", "migraine", "dizzy", "vertigo",
            "stomach", "belly", "abdomen", "nausea", "vomit", "diarrhea", "constipation",
            "chest", "heart", "breathing", "breath", "asthma",
            "throat", "tonsil", "voice", "hoarse",
            "nose", "sinus", "congestion", "runny",
            "ear", "hearing", "tinnitus",
            "eye", "vision", "blurry", "red eyes",
            "skin", "rash", "acne", "pimple", "allergy", "hives",
            "back", "neck", "shoulder", "joint", "muscle", "sprain",
            "leg", "foot", "ankle", "knee", "arm", "hand", "wrist",
            # Conditions
            "sick", "ill", "unwell", "disease", "infection", "virus", "bacteria",
            "diabetes", "sugar", "blood pressure", "bp", "hypertension",
            "thyroid", "pcod", "pcos", "hormonal",
            "pregnancy", "pregnant", "conception", "fertility",
            "period", "menstruation", "cramps", "pms",
            "weight", "obesity", "overweight", "underweight",
            "sleep", "insomnia", "tired", "fatigue", "weakness", "energy",
            "stress", "anxiety", "depression", "mental health",
            "injury", "wound", "cut", "bruise", "fracture",
            # Medical terms
            "symptom", "medicine", "medication", "treatment", "cure", "remedy",
            "doctor", "health", "medical", "clinic", "hospital",
            "test", "report", "diagnosis", "prescription",
            "vitamin", "supplement", "nutrition", "diet",
            # Question phrases
            "what is", "how to", "why do i", "should i", "can i",
            "is it normal", "is it safe", "home remedy", "natural cure",
        ),
        HI: (
            "dard", "bukhar", "pet", "sir", "khasi", "jukam",
            "दर्द", "बुखार", "पेट", "सिर", "खांसी", "जुकाम",
        ),
    },
}


def keywords_for(kind: IntentKind, table: KeywordTable = KEYWORDS) -> Tuple[str, ...]:
    """All keywords for an intent across every locale, lowercased."""
    merged = []
    for language in Language:
        merged.extend(k.lower() for k in table.get(kind, {}).get(language, ()))
    return tuple(merged)
