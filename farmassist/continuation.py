"""Continuation loop: stitches a complete answer out of up to three length-capped provider rounds.

The loop is an explicit state machine. Every transition is a pure function of
(state, input) so each branch can be tested without a provider:

    REQUESTING --receive()--> EVALUATING --evaluate()--> CONTINUING --resume()--> REQUESTING
         |                        |
         +--> FAILED (empty 1st)  +--> DONE (looks complete / rounds exhausted)
         +--> DONE (empty later)

``run_continuation`` drives the machine against an async segment source and
returns the post-processed text.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace

from farmassist.errors import EmptyResponseError
from farmassist.models import GenerationSegment
from farmassist.prompt_builder import build_continuation_prompt

logger = logging.getLogger("farmassist.continuation")

MAX_ROUNDS = 3
SHORT_FRAGMENT_CHARS = 20

CONTINUE_MARKS = (":", ";", ",", "-")
TERMINAL_MARKS = (".", "!", "?", ")")
# Only list lead-ins earn the offer. A dangling "," or ";" closes with a period.
LIST_LEAD_IN_MARKS = (":", "-")

CONTINUE_OFFER = "Reply \"continue\" if you would like me to expand on the remaining points."
EMPTY_RESPONSE_MESSAGE = "Empty response from Gemini API"


class LoopPhase(str, enum.Enum):
    REQUESTING = "requesting"
    EVALUATING = "evaluating"
    CONTINUING = "continuing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class LoopState:
    phase: LoopPhase
    question: str
    prompt: str
    accumulated: str = ""
    rounds: int = 0
    last_segment: GenerationSegment | None = None
    error: str | None = None


def start(question: str, user_prompt: str) -> LoopState:
    return LoopState(phase=LoopPhase.REQUESTING, question=question, prompt=user_prompt)


def receive(state: LoopState, segment: GenerationSegment) -> LoopState:
    """Fold one provider segment into the accumulator."""
    rounds = state.rounds + 1
    if not segment.text.strip():
        if not state.accumulated.strip():
            return replace(state, phase=LoopPhase.FAILED, rounds=rounds, error=EMPTY_RESPONSE_MESSAGE)
        return replace(state, phase=LoopPhase.DONE, rounds=rounds)

    return replace(
        state,
        phase=LoopPhase.EVALUATING,
        rounds=rounds,
        accumulated=append_segment(state.accumulated, segment.text),
        last_segment=segment,
    )


def evaluate(state: LoopState, max_rounds: int = MAX_ROUNDS) -> LoopState:
    segment = state.last_segment
    if segment is None or not needs_continuation(segment) or state.rounds >= max_rounds:
        return replace(state, phase=LoopPhase.DONE)
    return replace(state, phase=LoopPhase.CONTINUING)


def resume(state: LoopState) -> LoopState:
    return replace(
        state,
        phase=LoopPhase.REQUESTING,
        prompt=build_continuation_prompt(state.question, state.accumulated),
    )


def append_segment(accumulated: str, segment: str) -> str:
    if not accumulated or accumulated.endswith("\n"):
        return accumulated + segment
    return f"{accumulated}\n{segment}"


def needs_continuation(segment: GenerationSegment) -> bool:
    """Guess whether a segment was cut off.

    The provider's MAX_TOKENS signal is authoritative. Otherwise trailing
    punctuation decides, and anything else longer than a short fragment is
    assumed unfinished. This is an approximation of output shape, not a
    guarantee.
    """
    if segment.finish_reason == "MAX_TOKENS":
        return True
    text = segment.text.strip()
    if text.endswith(CONTINUE_MARKS):
        return True
    if text.endswith(TERMINAL_MARKS):
        return False
    return len(text) > SHORT_FRAGMENT_CHARS


def finalize_text(accumulated: str) -> str:
    """Trim and make sure the answer never ends mid-thought."""
    text = accumulated.strip()
    if not text:
        raise EmptyResponseError(EMPTY_RESPONSE_MESSAGE)
    if text.endswith(TERMINAL_MARKS):
        return text
    if text.endswith(LIST_LEAD_IN_MARKS):
        return f"{text}\n\n{CONTINUE_OFFER}"
    return f"{text}."


async def run_continuation(
    request_segment: Callable[[str], Awaitable[GenerationSegment]],
    question: str,
    user_prompt: str,
    max_rounds: int = MAX_ROUNDS,
) -> str:
    """Drive the loop: call ``request_segment`` with each round's prompt until done."""
    state = start(question, user_prompt)

    while state.phase not in (LoopPhase.DONE, LoopPhase.FAILED):
        if state.phase is LoopPhase.REQUESTING:
            state = receive(state, await request_segment(state.prompt))
        elif state.phase is LoopPhase.EVALUATING:
            state = evaluate(state, max_rounds)
        else:
            logger.info(f"Answer looks truncated after round {state.rounds}, requesting continuation")
            state = resume(state)

    if state.phase is LoopPhase.FAILED:
        raise EmptyResponseError(state.error or EMPTY_RESPONSE_MESSAGE)
    return finalize_text(state.accumulated)
