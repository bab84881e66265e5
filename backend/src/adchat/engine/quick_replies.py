from __future__ import annotations

# Greetings answered without a model call.
QUICK_REPLIES = {
    "hello": "Hey! 👋 How can I help with your ads today?",
    "hi": "Hi there! 👋 What would you like to know about your ads?",
    "hey": "Hey! 👋 Ready to help with your Facebook/Instagram ads!",
    "help": (
        "I can help you with:\n"
        "• Check how your ads are doing\n"
        "• See your spending and results\n"
        "• Create or edit campaigns\n\n"
        "Just ask me anything!"
    ),
}


def quick_reply(message: str) -> str | None:
    return QUICK_REPLIES.get(message.strip().lower())
