"""Call session manager."""
import logging
from typing import Optional

from app.services.agent.constants import TERMINAL_CALL_EVENTS, TERMINAL_CALL_STATUSES
from app.services.agent.engine import ReceptionistEngine
from app.services.agent.stages import ConversationStep
from app.services.call_session.models import CallSession
from app.services.call_session.store import SessionStore
from app.services.telephony.models import CallInput, CanonicalInboundEvent, OutboundAction

logger = logging.getLogger(__name__)


class CallSessionManager:
    """Loads call sessions, runs the conversation engine and cleans up ended calls."""

    def __init__(self, store: SessionStore, engine: Optional[ReceptionistEngine] = None):
        self.store = store
        self.engine = engine or ReceptionistEngine(store)

    async def create_session(self, call_id: str, event: CanonicalInboundEvent) -> CallSession:
        """Create and persist a session for a call seen for the first time."""
        data = {
            key: value
            for key, value in (("from", event.from_number), ("to", event.to_number))
            if value is not None
        }
        session = CallSession(
            call_id=call_id,
            instance_id=event.instance_id,
            step=ConversationStep.WELCOME.value,
            data=data,
        )
        await self.store.save(session)
        logger.info(
            f"[SESSION MANAGER] Created session - CallSid: {call_id}, "
            f"Instance: {event.instance_id or 'none'}"
        )
        return session

    async def start_call(self, call_id: str, event: CanonicalInboundEvent) -> OutboundAction:
        """Handle a new or resumed call and return its next action."""
        session = await self.store.load(call_id)
        if session is None:
            session = await self.create_session(call_id, event)
        else:
            logger.info(
                f"[SESSION MANAGER] Resuming session - CallSid: {call_id}, Step: {session.step}"
            )

        _, action = await self.engine.advance(session)
        return action

    async def continue_call(self, call_id: str, event: CanonicalInboundEvent) -> OutboundAction:
        """Apply the caller's latest input and return the next action.

        A call whose session was lost restarts from the first step.
        """
        session = await self.store.load(call_id)
        if session is None:
            logger.warning(
                f"[SESSION MANAGER] No session found, restarting flow - CallSid: {call_id}"
            )
            session = CallSession(call_id=call_id, step=ConversationStep.WELCOME.value)

        call_input = CallInput(digits=event.digits, transcript=event.transcript)
        _, action = await self.engine.advance(session, call_input)
        return action

    async def end_session(self, call_id: str) -> None:
        """Forget the session for an ended call."""
        cleared = await self.store.clear(call_id)
        logger.info(f"[SESSION MANAGER] Session cleared - CallSid: {call_id}, Ok: {cleared}")

    async def handle_status(self, call_id: str, event: CanonicalInboundEvent) -> bool:
        """Clear the session when a status callback reports the call has ended.

        Returns whether the status was terminal.
        """
        status = (event.status or "").lower()
        provider_event = (event.event or "").lower()
        if status in TERMINAL_CALL_STATUSES or provider_event in TERMINAL_CALL_EVENTS:
            await self.end_session(call_id)
            return True

        logger.debug(
            f"[SESSION MANAGER] Status update needs no action - CallSid: {call_id}, "
            f"Status: {event.status}, Event: {event.event}"
        )
        return False
