import logging
from typing import List, NamedTuple, Optional, Tuple

log = logging.getLogger(__name__)


class FinalizerSettings(NamedTuple):
    absence_frames: int = 8
    cooldown_s: float = 2.0

    @classmethod
    def from_config(cls, cfg=None):
        f = (cfg or {}).get("finalizer", {})
        default = cls()
        return cls(
            int(f.get("absence_frames", default.absence_frames)),
            float(f.get("cooldown_s", default.cooldown_s)),
        )


class PresenceState(NamedTuple):
    absent_frames: int = 0
    hand_seen: bool = False
    last_finalize_time: Optional[float] = None


class FinalizeIntent(NamedTuple):
    text: str
    timestamp: float


def presence_step(
    state: PresenceState,
    hand_present: bool,
    buffer_text: str,
    now: float,
    settings: FinalizerSettings,
) -> Tuple[PresenceState, List[FinalizeIntent], bool]:
    """
    Track hand absence and decide on end-of-utterance.

    Returns (next state, intents, finalized). ``finalized`` is True whenever a
    finalization cycle ran, even when the buffer was empty and nothing was
    emitted; the caller clears the buffer in that case.
    """
    if hand_present:
        return state._replace(absent_frames=0, hand_seen=True), [], False

    absent = state.absent_frames + 1
    state = state._replace(absent_frames=absent)

    if absent < settings.absence_frames or not state.hand_seen:
        return state, [], False
    if (
        state.last_finalize_time is not None
        and now - state.last_finalize_time <= settings.cooldown_s
    ):
        return state, [], False

    text = buffer_text.strip()
    intents = [FinalizeIntent(text, now)] if text else []
    log.info("hand gone for %d frames, finalizing %r", absent, text)
    return PresenceState(0, False, now), intents, True
