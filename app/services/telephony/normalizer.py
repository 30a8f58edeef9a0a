"""Normalization of telephony provider webhooks into a canonical inbound event.

Providers name the same information differently (Twilio posts ``CallSid`` and
``SpeechResult``, Plivo posts ``CallUUID``, generic integrations post ``callId``
and ``transcript``). Each canonical field lists its known aliases in priority
order; the first alias carrying a non-empty value wins. Supporting a new
provider alias is a one-line change to ``FIELD_ALIASES``.
"""
from typing import Any, Dict, Mapping, Optional, Tuple

from app.services.result import Result
from app.services.telephony.models import CanonicalInboundEvent

FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "call_id": ("callId", "CallSid", "CallUUID", "call_id", "call_uuid"),
    "from_number": ("From", "from"),
    "to_number": ("To", "to"),
    "instance_id": ("instanceId", "inst", "bot"),
    "digits": ("Digits", "digits"),
    "transcript": ("SpeechResult", "transcript", "Speech"),
    "status": ("CallStatus", "call_status", "status"),
    "event": ("event", "Event"),
}


def merge_payload(
    body: Optional[Mapping[str, Any]], query: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    """Merge body fields with query parameters; query parameters win on conflict."""
    merged: Dict[str, Any] = {}
    if body:
        merged.update(body)
    if query:
        merged.update(query)
    return merged


def first_present(payload: Mapping[str, Any], aliases: Tuple[str, ...]) -> Optional[str]:
    """Return the first non-empty value among ``aliases`` as a stripped string."""
    for alias in aliases:
        value = payload.get(alias)
        if value is None or isinstance(value, (dict, list)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def normalize_event(payload: Mapping[str, Any]) -> CanonicalInboundEvent:
    """Map an untyped webhook payload onto ``CanonicalInboundEvent``."""
    fields = {
        name: first_present(payload, aliases) for name, aliases in FIELD_ALIASES.items()
    }
    if fields["event"] is None:
        del fields["event"]
    return CanonicalInboundEvent(**fields)


def require_call_id(event: CanonicalInboundEvent) -> Result[str]:
    """A session cannot be addressed without a call identifier."""
    if not event.call_id:
        return Result.failure("callId required", code="missing_call_id")
    return Result.success(event.call_id)
