"""
Patient report generation for the /report admin command.
"""

import tempfile
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, runtime_checkable

import pytz

from ...core.models import Appointment, Doctor, Patient
from ...utils.date import format_clock, format_short_date
from ...utils.logging import get_logger
from ...utils.text import TextProcessor

logger = get_logger("shubhstra.reports")


@runtime_checkable
class ReportGenerator(Protocol):
    """Render a patient summary to a file and return its path."""

    def generate(self, patient: Patient, appointments: List[Appointment], doctor: Doctor) -> Path: ...


class TextReportGenerator:
    """Write a UTF-8 plain-text patient report.

    Files go to ``report_dir`` or one shared temporary directory; the caller
    deletes them once sent.
    """

    SEPARATOR = "=" * 48

    def __init__(self, report_dir: Optional[str] = None, timezone: str = "Asia/Kolkata"):
        self.report_dir = Path(report_dir) if report_dir else None
        self.tz = pytz.timezone(timezone)

    def _output_dir(self) -> Path:
        if self.report_dir is None:
            shared = Path(tempfile.gettempdir()) / "shubhstra-reports"
            shared.mkdir(parents=True, exist_ok=True)
            return shared
        self.report_dir.mkdir(parents=True, exist_ok=True)
        return self.report_dir

    def _local(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = pytz.utc.localize(value)
        return value.astimezone(self.tz)

    def render(self, patient: Patient, appointments: List[Appointment], doctor: Doctor) -> str:
        lines = [
            doctor.display_clinic_name,
            f"Phone: {doctor.phone_number}",
            self.SEPARATOR,
            "Patient Medical Report",
            self.SEPARATOR,
            "",
            "Patient Information",
            f"  Name:       {patient.name or 'N/A'}",
            f"  Phone:      {patient.phone_number or 'N/A'}",
            f"  Patient ID: {patient.id[:13]}...",
        ]
        last_seen = self._local(patient.last_seen_at)
        lines.append(f"  Last Visit: {format_short_date(last_seen) if last_seen else 'N/A'}")
        lines += ["", "Recent Appointments"]

        if not appointments:
            lines.append("  No appointments found.")
        for index, appointment in enumerate(appointments, start=1):
            when = self._local(appointment.appointment_time)
            lines.append(
                f"  {index}. {format_short_date(when)}  {format_clock(when)}  {appointment.status.value.upper()}"
            )

        generated = datetime.now(self.tz)
        lines += [
            "",
            self.SEPARATOR,
            f"Report generated on: {format_short_date(generated)} {format_clock(generated)}",
            "This is a computer-generated report.",
        ]
        return "\n".join(lines) + "\n"

    def generate(self, patient: Patient, appointments: List[Appointment], doctor: Doctor) -> Path:
        filename = f"{TextProcessor.underscore_name(patient.name or '')}_{uuid.uuid4().hex[:8]}.txt"
        path = self._output_dir() / filename
        path.write_text(self.render(patient, appointments, doctor), encoding="utf-8")
        logger.info({"event": "report_generated", "patient_id": patient.id, "path": str(path)})
        return path
