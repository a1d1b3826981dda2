"""
Localized patient-facing copy.
"""

from typing import Dict, List, Tuple

from ...core.enums import Language

EN = Language.ENGLISH
MR = Language.MARATHI

MESSAGES: Dict[str, Dict[Language, str]] = {
    "welcome": {
        EN: "Welcome! 👋\n\nHow can we help you today?",
        MR: "नमस्कार! 👋\n\nआम्ही आपली कशी मदत करू शकतो?",
    },
    "menu_section": {
        EN: "Main Menu",
        MR: "मुख्य मेनू",
    },
    "menu_button": {
        EN: "View Options",
    },
    "menu_tip": {
        EN: (
            "\n💡 *Tip:* You can ask me health questions directly!\n\n"
            "Examples:\n"
            "• \"I have a headache\"\n"
            "• \"How to reduce fever?\"\n"
            "• Send medical report photo 📸\n\n"
            "I use AI to help you! 🤖"
        ),
        MR: (
            "\n💡 *टीप:* तुम्ही मला थेट प्रश्न विचारू शकता!\n\n"
            "उदाहरण:\n"
            "• \"मला डोकेदुखी आहे\"\n"
            "• \"ताप कसा कमी करावा?\"\n"
            "• मेडिकल रिपोर्टचा फोटो पाठवा 📸\n\n"
            "मी तुम्हाला मदत करण्यासाठी AI वापरतो! 🤖"
        ),
    },
    "clinic_closed": {
        EN: (
            "🔒 *Clinic is Currently Closed*\n\n"
            "We open at {opening_time}.\n\n"
            "However, you can still book an appointment! 👇"
        ),
        MR: (
            "🔒 *क्लिनिक बंद आहे*\n\n"
            "आम्ही {opening_time} वाजता उघडतो.\n\n"
            "तरीही तुम्ही अपॉइंटमेंट बुक करू शकता! 👇"
        ),
    },
    "knowledge_answer": {
        EN: "🩺 *{symptom}*\n\n{advice}\n\n_This advice is personalized by Dr. {doctor_name}_",
    },
    "rating_review_link": {
        EN: (
            "🌟 *Thank you so much!*\n\n"
            "We're thrilled you had a great experience! 😊\n\n"
            "Would you mind sharing your experience on Google? It helps us serve more patients like you.\n\n"
            "Leave a review here:\n{review_link}\n\n"
            "Thank you for your support! 🙏"
        ),
        MR: (
            "🌟 *खूप खूप धन्यवाद!*\n\n"
            "आम्हाला खूप आनंद झाला! 😊\n\n"
            "कृपया Google वर तुमचा अनुभव शेअर करा. यामुळे आम्हाला अधिक रुग्णांना मदत करता येईल.\n\n"
            "येथे रिव्ह्यू द्या:\n{review_link}\n\n"
            "तुमच्या सहकार्याबद्दल धन्यवाद! 🙏"
        ),
    },
    "rating_thanks": {
        EN: (
            "🌟 *Thank you so much!*\n\n"
            "We're thrilled you had a great experience! 😊\n\n"
            "Thank you for your wonderful feedback! 🙏"
        ),
        MR: (
            "🌟 *खूप खूप धन्यवाद!*\n\n"
            "आम्हाला खूप आनंद झाला! 😊\n\n"
            "तुमचा अनुभव शेअर करण्यासाठी कृपया आमच्याशी संपर्क साधा.\n\n"
            "तुमच्या सहकार्याबद्दल धन्यवाद! 🙏"
        ),
    },
    "rating_feedback": {
        EN: (
            "😔 *We're sorry to hear that*\n\n"
            "We truly value your feedback and want to improve.\n\n"
            "Could you please tell us what went wrong? Your input helps us serve you better.\n\n"
            "Please reply with your feedback, and we'll make sure to address your concerns. 🙏"
        ),
        MR: (
            "😔 *आम्हाला वाईट वाटले*\n\n"
            "आम्ही तुमचा अभिप्राय खूप महत्त्वाचा मानतो आणि सुधारणा करू इच्छितो.\n\n"
            "कृपया आम्हाला सांगा काय चूक झाली? तुमचा अभिप्राय आम्हाला तुम्हाला चांगली सेवा देण्यास मदत करेल.\n\n"
            "कृपया तुमचा अभिप्राय लिहा, आणि आम्ही तुमच्या समस्यांचे निराकरण करू. 🙏"
        ),
    },
    "review_prompt": {
        EN: (
            "⭐ *How was your experience?*\n\n"
            "Please rate your visit on a scale of 1-5:\n\n"
            "5 - Excellent ⭐⭐⭐⭐⭐\n"
            "4 - Good ⭐⭐⭐⭐\n"
            "3 - Average ⭐⭐⭐\n"
            "2 - Below Average ⭐⭐\n"
            "1 - Poor ⭐\n\n"
            "Just reply with a number (1-5)"
        ),
    },
    "queue_status": {
        EN: (
            "🎫 *Your Token Number: #{token}*\n\n"
            "👥 People ahead of you: {ahead}\n"
            "⏱️ Approximate wait time: {wait} minutes\n\n"
            "Please try to arrive on time. Thank you! 🙏"
        ),
        MR: (
            "🎫 *तुमचा टोकन क्रमांक: #{token}*\n\n"
            "👥 तुमच्या आधी: {ahead} लोक\n"
            "⏱️ अंदाजे प्रतीक्षा: {wait} मिनिटे\n\n"
            "कृपया वेळेवर येण्याचा प्रयत्न करा. धन्यवाद! 🙏"
        ),
    },
    "queue_none": {
        EN: "You don't have any upcoming appointment.",
        MR: "तुमची कोणतीही येणारी भेट नाही.",
    },
    "social_header": {
        EN: "📱 *Stay Connected with Us!*\n\nFollow us on:",
        MR: "📱 *आमच्याशी जुळून रहा!*\n\nआम्हाला फॉलो करा:",
    },
    "social_footer": {
        EN: "Follow us for health tips and updates! 💚",
        MR: "आम्हाला फॉलो करा आणि आरोग्य टिप्स मिळवा! 💚",
    },
    "social_none": {
        EN: "Sorry, social media links are not available at the moment.",
        MR: "माफ करा, सध्या सोशल मीडिया लिंक उपलब्ध नाहीत.",
    },
    "referral_code": {
        EN: (
            "🎁 *Your Referral Code*\n\n"
            "Code: *{code}*\n\n"
            "Share this code with your friends and family!\n\n"
            "When they register using your code, both of you will get special benefits! 🎉\n\n"
            "You've referred {count} friends so far. Thank you! 🙏"
        ),
        MR: (
            "🎁 *तुमचा रेफरल कोड*\n\n"
            "कोड: *{code}*\n\n"
            "हा कोड तुमच्या मित्रांना शेअर करा!\n\n"
            "जेव्हा ते या कोडचा वापर करून नोंदणी करतील, तेव्हा तुम्हाला आणि त्यांना विशेष फायदे मिळतील! 🎉\n\n"
            "तुम्ही {count} मित्रांना रेफर केले आहे. धन्यवाद! 🙏"
        ),
    },
    "referral_failed": {
        EN: "Sorry, couldn't generate referral code. Please try again.",
        MR: "माफ करा, रेफरल कोड तयार करता आला नाही. कृपया पुन्हा प्रयत्न करा.",
    },
    "booking_prompt": {
        EN: (
            "📅 *Book Your Appointment*\n\n"
            "When would you like to visit? Reply with a date and time.\n\n"
            "Examples:\n"
            "• Tomorrow 3pm\n"
            "• Next Monday 10am\n"
            "• Feb 15 at 2:30pm\n\n"
            "(Type 'cancel' to go back)"
        ),
        MR: (
            "📅 *अपॉइंटमेंट बुक करा*\n\n"
            "तुम्हाला कधी यायचे आहे? तारीख आणि वेळ लिहा.\n\n"
            "उदाहरण:\n"
            "• Tomorrow 3pm\n"
            "• Next Monday 10am\n"
            "• Feb 15 at 2:30pm\n\n"
            "(परत जाण्यासाठी 'cancel' लिहा)"
        ),
    },
    "clinic_directions": {
        EN: "📍 *{clinic_name}*\n\n{clinic_address}\n\nTap on the location above to get directions via Google Maps! 🗺️",
    },
    "image_ack": {
        EN: "📸 Analyzing your medical report... Please wait a moment.",
    },
    "image_download_failed": {
        EN: "❌ Sorry, I couldn't download the image. Please try again.",
    },
    "image_report": {
        EN: (
            "📋 *Medical Report Analysis*\n\n{analysis}\n\n"
            "Need clarification? Type 'Hi' to book an appointment with {doctor_name}."
        ),
    },
    "image_error": {
        EN: "❌ Sorry, I encountered an error analyzing the image. Please try again or type 'Hi' to see the menu.",
    },
    "unknown_selection": {
        EN: "Sorry, I didn't understand that option. Type *Menu* to see available options.",
    },
    "router_error": {
        EN: "Sorry, we encountered an error. Please try again later or contact us directly.",
    },
}

# (row id, {language: (title, description)})
MENU_ROWS: List[Tuple[str, Dict[Language, Tuple[str, str]]]] = [
    ("book", {
        EN: ("📅 Book Appointment", "Schedule a visit with the doctor"),
        MR: ("📅 अपॉइंटमेंट बुक करा", "डॉक्टरांची भेट घ्या"),
    }),
    ("address", {
        EN: ("📍 Clinic Address", "Get clinic location and directions"),
        MR: ("📍 क्लिनिक पत्ता", "क्लिनिकचे स्थान मिळवा"),
    }),
    ("queue", {
        EN: ("📊 Queue Status", "Check your waiting status"),
        MR: ("📊 रांग स्थिती", "तुमची प्रतीक्षा स्थिती पहा"),
    }),
    ("social", {
        EN: ("🔗 Social Media", "Follow us for health tips"),
        MR: ("🔗 सोशल मीडिया", "आम्हाला फॉलो करा"),
    }),
    ("referral", {
        EN: ("🎁 Referral Code", "Share with friends & earn"),
        MR: ("🎁 रेफरल कोड", "मित्रांना शेअर करा"),
    }),
    ("review", {
        EN: ("⭐ Rate Us", "Share your experience"),
        MR: ("⭐ रिव्ह्यू द्या", "तुमचा अनुभव शेअर करा"),
    }),
]

SOCIAL_PLATFORMS: List[Tuple[str, str]] = [
    ("instagram", "📸 Instagram"),
    ("youtube", "🎥 YouTube"),
    ("facebook", "👍 Facebook"),
    ("website", "🌐 Website"),
    ("twitter", "🐦 Twitter"),
]

DEFAULT_CLINIC_ADDRESS = "Pune, Maharashtra, India"


def render(key: str, language: Language = EN, **values) -> str:
    """Render a message in the patient's language, falling back to English."""
    variants = MESSAGES[key]
    template = variants.get(language) or variants[EN]
    return template.format(**values) if values else template


def menu_rows(language: Language = EN) -> List[Tuple[str, str, str]]:
    """Return ``(id, title, description)`` for each main-menu row."""
    rows = []
    for row_id, variants in MENU_ROWS:
        title, description = variants.get(language) or variants[EN]
        rows.append((row_id, title, description))
    return rows
