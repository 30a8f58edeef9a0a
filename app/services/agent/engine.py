"""Receptionist conversation engine.

A finite-state machine over ``ConversationStep``. Each step maps to a handler
that updates the session and returns the next outbound action; adding a step
or a branch means adding a handler to ``STEP_HANDLERS``.

| step           | next step      | action                                |
|----------------|----------------|---------------------------------------|
| welcome        | collect_name   | greeting, gather speech or digits     |
| collect_name   | collect_reason | personalised prompt, gather speech    |
| collect_reason | confirm        | closing message, hang up              |
| confirm        | confirm        | closing message, hang up              |

Unknown steps are handled as ``welcome``.
"""
import logging
from typing import Callable, Dict, Optional, Tuple

from app.services.agent.constants import (
    CLOSING_MESSAGE,
    DEFAULT_CALL_REASON,
    DEFAULT_CALLER_NAME,
    GREETING_PROMPT,
    REASON_PROMPT,
)
from app.services.agent.stages import ConversationStep
from app.services.call_session.models import CallSession
from app.services.call_session.store import SessionStore
from app.services.result import Result
from app.services.telephony.models import CallInput, GatherInput, GatherSpec, OutboundAction

logger = logging.getLogger(__name__)

StepHandler = Callable[[CallSession, CallInput], OutboundAction]


def resolve_step(raw: Optional[str]) -> Result[ConversationStep]:
    """Parse a stored step tag."""
    try:
        return Result.success(ConversationStep(raw))
    except ValueError:
        return Result.failure(f"Unknown conversation step: {raw!r}", code="unknown_step")


def _welcome(session: CallSession, call_input: CallInput) -> OutboundAction:
    session.step = ConversationStep.COLLECT_NAME.value
    return OutboundAction.say(GREETING_PROMPT, gather=GatherSpec(input=GatherInput.BOTH))


def _collect_name(session: CallSession, call_input: CallInput) -> OutboundAction:
    name = call_input.resolve(DEFAULT_CALLER_NAME)
    session.data["name"] = name
    session.step = ConversationStep.COLLECT_REASON.value
    return OutboundAction.say(
        REASON_PROMPT.format(name=name), gather=GatherSpec(input=GatherInput.SPEECH)
    )


def _collect_reason(session: CallSession, call_input: CallInput) -> OutboundAction:
    session.data["reason"] = call_input.resolve(DEFAULT_CALL_REASON)
    session.step = ConversationStep.CONFIRM.value
    return OutboundAction.hangup(CLOSING_MESSAGE)


def _confirm(session: CallSession, call_input: CallInput) -> OutboundAction:
    # Late webhook for a call whose details are already captured.
    return OutboundAction.hangup(CLOSING_MESSAGE)


STEP_HANDLERS: Dict[ConversationStep, StepHandler] = {
    ConversationStep.WELCOME: _welcome,
    ConversationStep.COLLECT_NAME: _collect_name,
    ConversationStep.COLLECT_REASON: _collect_reason,
    ConversationStep.CONFIRM: _confirm,
}


def advance_session(
    session: CallSession,
    call_input: Optional[CallInput] = None,
    handlers: Optional[Dict[ConversationStep, StepHandler]] = None,
) -> Tuple[CallSession, OutboundAction]:
    """Compute the next session state and action without touching storage.

    The input session is left unmodified.
    """
    handlers = handlers or STEP_HANDLERS
    call_input = call_input or CallInput()
    next_session = session.model_copy(deep=True)

    step = resolve_step(session.step)
    if not step.ok:
        logger.warning(
            f"[ENGINE] {step.error}, restarting flow - CallSid: {session.call_id}"
        )
    current = step.unwrap_or(ConversationStep.WELCOME)
    handler = handlers.get(current, handlers[ConversationStep.WELCOME])

    action = handler(next_session, call_input)

    if next_session.step != session.step:
        logger.info(
            f"[ENGINE] Step changed: {session.step} -> {next_session.step} - "
            f"CallSid: {session.call_id}"
        )
    return next_session, action


class ReceptionistEngine:
    """Drives the receptionist flow and persists every transition."""

    def __init__(
        self,
        store: SessionStore,
        handlers: Optional[Dict[ConversationStep, StepHandler]] = None,
    ):
        self.store = store
        self.handlers = handlers or STEP_HANDLERS

    async def advance(
        self, session: CallSession, call_input: Optional[CallInput] = None
    ) -> Tuple[CallSession, OutboundAction]:
        """Advance the call one step.

        The updated session is saved before the action is returned, so a
        follow-up webhook for the same call sees the new step.
        """
        next_session, action = advance_session(session, call_input, self.handlers)
        await self.store.save(next_session)
        return next_session, action
