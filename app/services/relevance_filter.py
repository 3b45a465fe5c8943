"""
Keyword filter keeping the AI assistant on event-planning topics
"""

EVENT_KEYWORDS = (
    "wedding", "birthday", "debut", "party", "event", "celebration", "corporate",
    "anniversary", "christening", "baptism", "reception", "gathering",
    "plan", "organize", "book", "reserve", "schedule", "arrange", "coordinate",
    "budget", "guest", "venue", "location", "date", "timeline", "checklist",
    "photographer", "videographer", "caterer", "catering", "food", "coordinator",
    "host", "emcee", "decorator", "decoration", "flowers", "entertainment",
    "band", "dj", "sound", "lights", "supplier", "vendor", "solennia",
    "booking", "portfolio", "price", "pricing", "package", "recommendation",
    "feedback", "rating", "review", "message", "chat",
    # Filipino event terms
    "kasalan", "kasal", "kaarawan", "despedida", "reunion",
    "ceremony", "program", "invitation", "theme", "motif", "setup",
)

BLOCKED_KEYWORDS = (
    "homework", "assignment", "essay", "thesis", "research paper", "exam", "test",
    "solve", "equation", "formula", "calculate", "proof", "theorem",
    "code", "program", "script", "python", "javascript", "java", "html", "css",
    "debug", "algorithm", "function", "class", "variable", "array",
    "history of", "what is the capital", "who invented", "when was", "define",
    "explain quantum", "explain physics", "explain chemistry",
    "president", "election", "government", "politics", "senate", "congress",
    "translate", "weather", "stock", "cryptocurrency", "bitcoin",
    "medical advice", "legal advice", "tax", "investment",
)

ALLOWED_SHORT_PHRASES = (
    "hello", "hi", "help", "how", "what", "can you", "please",
    "thank", "thanks", "ok", "yes", "no", "maybe",
)

SHORT_MESSAGE_LENGTH = 20
LONG_MESSAGE_LENGTH = 30

OFF_TOPIC_RESPONSE = (
    "I'm Solennia AI, specifically designed to help with event planning on the "
    "Solennia platform. I can only assist with:\n\n"
    "- Event planning (weddings, birthdays, debuts, corporate events, etc.)\n"
    "- Finding and recommending suppliers and venues\n"
    "- Budgets, timelines and checklists\n"
    "- Bookings and platform features\n\n"
    "How can I help you plan your event today?"
)


def is_event_planning_related(message: str) -> bool:
    text = (message or "").lower()

    if any(keyword in text for keyword in EVENT_KEYWORDS):
        return True
    if any(keyword in text for keyword in BLOCKED_KEYWORDS):
        return False
    if len(text) < SHORT_MESSAGE_LENGTH and any(phrase in text for phrase in ALLOWED_SHORT_PHRASES):
        return True
    # Longer messages with no event vocabulary are treated as off-topic
    if len(text) > LONG_MESSAGE_LENGTH:
        return False
    return True
