"""
Commitment state machine: decides when the displayed gesture is typed into
the output text.

The state is an immutable ``ComposerState``; ``compose_step`` returns the next
state and the list of commits that happened on this tick, so the caller owns
all mutation and every transition can be tested in isolation.
"""
import logging
from typing import Dict, List, NamedTuple, Optional, Tuple

import Tokens
from EngineConfig import DEFAULT_CONFIG

log = logging.getLogger(__name__)


class CommitSettings(NamedTuple):
    type_min_count: Dict[str, int]
    hold_delay_s: Dict[str, float]
    cooldown_margin_s: Dict[str, float]

    @classmethod
    def from_config(cls, cfg=None):
        c = dict(DEFAULT_CONFIG["commit"])
        c.update((cfg or {}).get("commit", {}))
        return cls(
            dict(c["type_min_count"]),
            dict(c["hold_delay_s"]),
            dict(c["cooldown_margin_s"]),
        )


class ComposerState(NamedTuple):
    displayed: str = Tokens.NONE
    active_since: float = 0.0
    last_commit_time: Optional[float] = None
    last_commit_token: Optional[str] = None
    text: str = ""


class CommitIntent(NamedTuple):
    token: str
    kind: str
    text: str  # buffer after the commit
    timestamp: float


def apply_token(text: str, token: str, kind: str) -> str:
    """Buffer contents after typing ``token``."""
    if token == Tokens.SPACE:
        if text and text[-1].isspace():
            return text
        return text + " "
    if token == Tokens.BACKSPACE:
        return text[:-1]
    if kind == Tokens.KIND_WORD:
        head = text.rstrip()
        if head:
            head += " "
        return head + token + " "
    if kind == Tokens.KIND_LETTER:
        return text + token
    return text


def clear_text(state: ComposerState) -> ComposerState:
    return state._replace(text="")


def _may_commit(state: ComposerState, vote, now: float, settings: CommitSettings) -> bool:
    token = state.displayed
    kind = Tokens.kind_of(token)
    if kind == Tokens.KIND_NONE:
        return False

    if vote.count_of(token) < settings.type_min_count[kind]:
        return False

    hold = settings.hold_delay_s[kind]
    if now - state.active_since <= hold:
        return False

    if state.last_commit_time is not None:
        if now - state.last_commit_time <= hold + settings.cooldown_margin_s[kind]:
            return False
    return True


def compose_step(
    state: ComposerState,
    vote,
    now: float,
    settings: CommitSettings,
    hand_present: bool = True,
) -> Tuple[ComposerState, List[CommitIntent]]:
    """
    Advance one tick given the stabilizer's vote. Nothing is typed on a
    hand-absent tick; the displayed gesture only decays.
    """
    if vote.confident and vote.token != state.displayed:
        log.debug("displaying %r (count=%d)", vote.token, vote.count)
        state = state._replace(displayed=vote.token, active_since=now)

    if not hand_present or not _may_commit(state, vote, now, settings):
        return state, []

    token = state.displayed
    kind = Tokens.kind_of(token)
    text = apply_token(state.text, token, kind)
    log.debug("commit %r -> %r", token, text)
    state = state._replace(text=text, last_commit_time=now, last_commit_token=token)
    return state, [CommitIntent(token, kind, text, now)]
