"""
Doctor slash-commands: /search, /queue, /report and /network.
"""

from datetime import datetime, timedelta
from typing import Optional

import pytz

from ...config.settings import Settings
from ...core.enums import AppointmentStatus, IntentKind
from ...core.models import Doctor, Intent, WhatsAppCredentials
from ...utils.date import format_clock, format_short_date
from ...utils.logging import get_logger
from ...utils.phone import PhoneNumberParser
from ...utils.text import TextProcessor
from ..messaging import MessagingGateway
from ..reports import ReportGenerator
from ..store import DataStore

logger = get_logger("shubhstra.admin")

SEARCH_LIMIT = 10
REPORT_SEARCH_LIMIT = 5


class AdminCommandProcessor:
    """Execute admin commands sent from the doctor's own number.

    Each command returns the reply text, or ``None`` when it has already
    sent its own messages.
    """

    def __init__(
        self,
        store: DataStore,
        gateway: MessagingGateway,
        report_generator: ReportGenerator,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.gateway = gateway
        self.report_generator = report_generator
        self.settings = settings or Settings()
        self.tz = pytz.timezone(self.settings.timezone)

        self._commands = {
            IntentKind.ADMIN_SEARCH: self.search,
            IntentKind.ADMIN_QUEUE: self.queue,
            IntentKind.ADMIN_REPORT: self.report,
            IntentKind.ADMIN_NETWORK: self.network,
        }

    async def execute(self, intent: Intent, doctor: Doctor, reply_to: Optional[str] = None) -> Optional[str]:
        """
        Run the command named by an ``admin_*`` intent.

        Args:
            intent: Classified admin intent; ``argument`` holds the command text
            doctor: The doctor issuing the command
            reply_to: Number to send follow-up messages to, defaults to the doctor's

        Returns:
            Reply text, or None if nothing more needs sending
        """
        command = self._commands.get(intent.kind)
        if command is None:
            raise ValueError(f"Not an admin intent: {intent.kind.value}")

        logger.info({"event": "admin_command", "doctor_id": doctor.id, "command": intent.kind.value})
        return await command((intent.argument or "").strip(), doctor, reply_to or doctor.phone_number)

    def _local(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = pytz.utc.localize(value)
        return value.astimezone(self.tz)

    async def search(self, query: str, doctor: Doctor, reply_to: str) -> str:
        if not query:
            return "❌ Please provide a name to search.\n\nUsage: /search <name>"

        try:
            patients = await self.store.search_patients(doctor.id, query, limit=SEARCH_LIMIT)
        except Exception:
            logger.exception(f"Patient search failed for doctor {doctor.id}")
            return "❌ Error searching patients. Please try again."

        if not patients:
            return f"🔍 No patients found matching \"{query}\""

        message = f"🔍 *Found {len(patients)} Patient(s):*\n\n"
        for index, patient in enumerate(patients, start=1):
            last_visit = format_short_date(self._local(patient.last_seen_at)) if patient.last_seen_at else "N/A"
            message += f"{index}. *{patient.display_name}*\n"
            message += f"   📱 {PhoneNumberParser.mask(patient.phone_number)}\n"
            message += f"   📅 Last Visit: {last_visit}\n\n"
        return message

    async def queue(self, argument: str, doctor: Doctor, reply_to: str) -> str:
        now = datetime.now(self.tz)
        start = self.tz.localize(datetime(now.year, now.month, now.day))
        end = self.tz.localize(datetime.combine(start.date() + timedelta(days=1), datetime.min.time()))

        try:
            appointments = await self.store.list_appointments(
                doctor.id, start, end, AppointmentStatus.queue_statuses()
            )
        except Exception:
            logger.exception(f"Queue lookup failed for doctor {doctor.id}")
            return "❌ Error fetching queue. Please try again."

        if not appointments:
            return "📋 *Today's Queue*\n\nNo appointments scheduled for today."

        message = f"📋 *Today's Queue ({len(appointments)} patients)*\n\n"
        for index, appointment in enumerate(appointments, start=1):
            message += f"{index}. *{appointment.patient_name or 'Unknown'}*\n"
            message += f"   ⏰ {format_clock(self._local(appointment.appointment_time))}\n"
            message += f"   📊 {appointment.status.value.capitalize()}\n\n"
        return message

    async def report(self, name: str, doctor: Doctor, reply_to: str) -> Optional[str]:
        if not name:
            return "❌ Please provide a patient name.\n\nUsage: /report <patient name>"

        try:
            patients = await self.store.search_patients(doctor.id, name, limit=REPORT_SEARCH_LIMIT)
        except Exception:
            logger.exception(f"Report lookup failed for doctor {doctor.id}")
            return "❌ Error generating report. Please try again."

        if not patients:
            return f"❌ No patient found matching \"{name}\""

        if len(patients) > 1:
            message = f"🔍 Found {len(patients)} patients:\n\n"
            for index, patient in enumerate(patients, start=1):
                message += f"{index}. {patient.display_name} ({PhoneNumberParser.mask(patient.phone_number)})\n"
            message += "\nPlease be more specific with the name."
            return message

        patient = patients[0]
        credentials = WhatsAppCredentials.resolve(doctor, self.settings)
        path = None
        try:
            await self.gateway.send_text(
                reply_to, f"📄 Generating report for {patient.display_name}... Please wait.", credentials
            )
            appointments = await self.store.list_patient_appointments(patient.id)
            path = self.report_generator.generate(patient, appointments, doctor)
            filename = f"{TextProcessor.underscore_name(patient.name or '')}_Report{path.suffix}"
            await self.gateway.send_document(
                reply_to,
                path.read_bytes(),
                filename,
                f"Medical report for {patient.display_name}",
                credentials,
            )
        except Exception:
            logger.exception(f"Report generation failed for patient {patient.id}")
            return "❌ Error generating report. Please try again."
        finally:
            if path is not None:
                path.unlink(missing_ok=True)

        logger.info({"event": "report_sent", "patient_id": patient.id})
        return None

    async def network(self, argument: str, doctor: Doctor, reply_to: str) -> str:
        try:
            network = await self.store.get_external_doctor_network(doctor.id)
        except Exception:
            logger.exception(f"Network lookup failed for doctor {doctor.id}")
            return "❌ Error fetching network. Please try again."

        if not network:
            return "📋 *Referral Network*\n\nNo external doctors in your network yet."

        message = "🌐 *Referral Network*\n\n"
        message += f"Total External Doctors: {len(network)}\n\n"
        total = 0.0
        for index, external in enumerate(network, start=1):
            message += f"{index}. *{external.name}*\n"
            message += f"   Specialization: {external.specialization or 'N/A'}\n"
            message += f"   Referrals: {external.total_referrals}\n"
            message += f"   Commission: {external.commission_percentage:g}%\n"
            message += f"   Due: ₹{external.total_commission_due:g}\n\n"
            total += external.total_commission_due or 0.0

        message += "━━━━━━━━━━━━━━━━━━━━\n"
        message += f"💰 *Total Commission Due: ₹{total:.2f}*"
        return message
