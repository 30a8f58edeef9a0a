"""Serialization of outbound call actions into provider wire formats."""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional
from xml.sax.saxutils import escape

from app.services.telephony.models import GatherInput, OutboundAction

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
GATHER_TIMEOUT_SECONDS = 5


class ProviderMode(str, Enum):
    """Output formats a webhook response can be rendered in."""

    TWILIO = "twilio"
    PLIVO = "plivo"
    SINCH = "sinch"
    JSON = "json"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SerializedResponse:
    content_type: str
    body: str


def escape_xml(text: Optional[str]) -> str:
    """Escape the five XML special characters."""
    return escape(text or "", {'"': "&quot;", "'": "&apos;"})


def resolve_provider(tag: Optional[str]) -> ProviderMode:
    """Map a provider tag to a mode; unknown or missing tags render as JSON."""
    if not tag:
        return ProviderMode.JSON
    try:
        return ProviderMode(tag.strip().lower())
    except ValueError:
        return ProviderMode.JSON


def _num_digits_attr(action: OutboundAction) -> str:
    if action.gather and action.gather.max_digits:
        return f' numDigits="{int(action.gather.max_digits)}"'
    return ""


def _twiml(action: OutboundAction) -> SerializedResponse:
    if action.is_hangup:
        say = f"<Say>{escape_xml(action.text)}</Say>" if action.text else ""
        xml = f"<Response>{say}<Hangup/></Response>"
    elif action.gather:
        xml = (
            f'<Response><Gather input="{escape_xml(str(action.gather.input))}" '
            f'timeout="{GATHER_TIMEOUT_SECONDS}"{_num_digits_attr(action)}>'
            f"<Say>{escape_xml(action.text)}</Say></Gather></Response>"
        )
    else:
        xml = f"<Response><Say>{escape_xml(action.text)}</Say></Response>"
    return SerializedResponse(content_type="text/xml", body=XML_DECLARATION + xml)


def _plivo_xml(action: OutboundAction) -> SerializedResponse:
    if action.is_hangup:
        speak = f"<Speak>{escape_xml(action.text)}</Speak>" if action.text else ""
        xml = f"<Response>{speak}<Hangup/></Response>"
    elif action.gather:
        input_type = "speech" if action.gather.input == GatherInput.SPEECH.value else "dtmf"
        xml = (
            f'<Response><GetInput inputType="{input_type}"{_num_digits_attr(action)}>'
            f"<Speak>{escape_xml(action.text)}</Speak></GetInput></Response>"
        )
    else:
        xml = f"<Response><Speak>{escape_xml(action.text)}</Speak></Response>"
    return SerializedResponse(content_type="application/xml", body=xml)


def _neutral_json(action: OutboundAction) -> SerializedResponse:
    return SerializedResponse(content_type="application/json", body=action.to_json())


# Sinch has no dedicated adapter yet and receives the neutral JSON form.
SERIALIZERS: Dict[ProviderMode, Callable[[OutboundAction], SerializedResponse]] = {
    ProviderMode.TWILIO: _twiml,
    ProviderMode.PLIVO: _plivo_xml,
    ProviderMode.SINCH: _neutral_json,
    ProviderMode.JSON: _neutral_json,
}


def serialize(provider: Optional[str], action: OutboundAction) -> SerializedResponse:
    """Render ``action`` for ``provider`` as ``(content_type, body)``."""
    return SERIALIZERS[resolve_provider(provider)](action)
