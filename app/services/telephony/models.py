"""Provider-agnostic shapes for inbound call events and outbound call actions."""
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CanonicalInboundEvent(BaseModel):
    """An inbound telephony webhook with provider-specific field names resolved."""

    model_config = ConfigDict(populate_by_name=True)

    call_id: Optional[str] = Field(default=None, alias="callId")
    from_number: Optional[str] = Field(default=None, alias="from")
    to_number: Optional[str] = Field(default=None, alias="to")
    instance_id: Optional[str] = Field(default=None, alias="instanceId")
    digits: Optional[str] = None  # DTMF keypad input
    transcript: Optional[str] = None  # speech-to-text result
    status: Optional[str] = None  # call status callbacks only
    event: str = "incoming"


class CallInput(BaseModel):
    """What the caller said or keyed in since the last prompt."""

    digits: Optional[str] = None
    transcript: Optional[str] = None

    def resolve(self, default: str) -> str:
        """Prefer speech over keypad digits, falling back to ``default``."""
        return self.transcript or self.digits or default


class GatherInput(str, Enum):
    """Which kinds of caller input a gather collects."""

    DTMF = "dtmf"
    SPEECH = "speech"
    BOTH = "both"

    def __str__(self) -> str:
        return self.value


class GatherSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    input: GatherInput = GatherInput.SPEECH
    max_digits: Optional[int] = Field(default=None, alias="maxDigits", gt=0)


class OutboundAction(BaseModel):
    """The next instruction for the call: speak (optionally gathering input) or hang up."""

    model_config = ConfigDict(populate_by_name=True)

    action: Literal["say", "hangup"]
    text: Optional[str] = None
    gather: Optional[GatherSpec] = None

    @classmethod
    def say(cls, text: str, gather: Optional[GatherSpec] = None) -> "OutboundAction":
        return cls(action="say", text=text, gather=gather)

    @classmethod
    def hangup(cls, text: Optional[str] = None) -> "OutboundAction":
        return cls(action="hangup", text=text)

    @property
    def is_hangup(self) -> bool:
        return self.action == "hangup"

    def to_json(self) -> str:
        """Compact JSON using wire names, omitting unset fields."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
