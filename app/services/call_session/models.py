"""Call session models."""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.agent.stages import ConversationStep


class CallSession(BaseModel):
    """Durable conversation state for one phone call.

    Stored as a flat JSON object using the camelCase wire names. ``step`` is
    kept as a plain string so a record holding an unknown step still loads;
    the engine resets such records to the first step.
    """

    model_config = ConfigDict(populate_by_name=True)

    call_id: str = Field(alias="callId", frozen=True, min_length=1)
    instance_id: Optional[str] = Field(default=None, alias="instanceId")
    step: str = ConversationStep.WELCOME.value
    data: Dict[str, Any] = Field(default_factory=dict)
    started_at: Optional[datetime] = Field(default=None, alias="startedAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("step", mode="before")
    @classmethod
    def missing_step_is_welcome(cls, value: Any) -> Any:
        # A null step only loses the step, not the collected data
        if value is None:
            return ConversationStep.WELCOME.value
        if not isinstance(value, str):
            return str(value)
        return value

    @field_validator("data", mode="before")
    @classmethod
    def missing_data_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_json(self) -> str:
        """Serialize for storage."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
