"""Prompts and defaults for the receptionist call flow."""

GREETING_PROMPT = "Thanks for calling. Please say or enter your name after the beep."

# Formatted with the captured caller name
REASON_PROMPT = "Hi {name}. Briefly tell me the reason for your call after the beep."

CLOSING_MESSAGE = (
    "Thanks. I will notify the team now. Someone will follow up shortly. Goodbye."
)

# Used when the caller gave no usable input for a step
DEFAULT_CALLER_NAME = "Caller"
DEFAULT_CALL_REASON = "General inquiry"

# Provider call statuses that mean the call is over
TERMINAL_CALL_STATUSES = frozenset(
    {
        "completed",
        "failed",
        "busy",
        "no-answer",
        "canceled",
    }
)

# Plivo reports call end through its Event parameter
TERMINAL_CALL_EVENTS = frozenset({"hangup", "stopstream"})
