"""Conversation step enumeration."""
from enum import Enum


class ConversationStep(str, Enum):
    """Steps of the receptionist call flow."""

    WELCOME = "welcome"  # Greet the caller and ask for a name
    COLLECT_NAME = "collect_name"  # Waiting for the caller's name
    COLLECT_REASON = "collect_reason"  # Waiting for the reason for the call
    CONFIRM = "confirm"  # Details captured, call is being closed

    def __str__(self) -> str:
        """Return the string value of the step."""
        return self.value
