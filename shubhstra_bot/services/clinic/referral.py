"""
Referral codes.
"""

import re
from typing import Optional

from ...core.exceptions import DataStoreError
from ...core.models import Patient
from ...utils.logging import get_logger
from ...utils.phone import PhoneNumberParser
from ..store import DataStore

logger = get_logger("shubhstra.referral")


class ReferralService:
    """Issue a stable referral code per patient."""

    def __init__(self, store: DataStore):
        self.store = store

    @staticmethod
    def base_code(patient: Patient) -> str:
        """Three letters of the name plus the last four digits of the phone, e.g. ``RAH3210``."""
        letters = re.sub(r"[^A-Za-z]", "", patient.name or "")[:3].upper()
        prefix = letters.ljust(3, "X") if letters else "PAT"
        return f"{prefix}{PhoneNumberParser.normalize(patient.phone_number)[-4:]}"

    async def get_or_create_code(self, patient: Patient) -> Optional[str]:
        """Return the patient's code, creating and persisting one if needed."""
        if patient.referral_code:
            return patient.referral_code

        base = self.base_code(patient)
        candidate = base
        suffix = 0
        try:
            while True:
                owner = await self.store.get_patient_by_referral_code(candidate)
                if owner is None or owner.id == patient.id:
                    break
                suffix += 1
                candidate = f"{base}{suffix}"
            await self.store.set_referral_code(patient.id, candidate)
        except DataStoreError:
            logger.exception(f"Could not create referral code for patient {patient.id}")
            return None

        logger.info({"event": "referral_code_created", "patient_id": patient.id, "code": candidate})
        return candidate
