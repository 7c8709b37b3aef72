"""
Per-frame translation engine: landmarks in, displayed gesture and text out.

One call to ``process_frame`` runs the whole chain synchronously:
features -> classifier -> stabilizer -> composer -> finalizer.
"""
import logging
import time
from typing import Callable, List, NamedTuple, Optional

import Tokens
from EngineConfig import build_config
from Emotion import ConstantEmotion
from GestureClassifier import GestureClassifier
from HandFeatures import HandFeatureExtractor
from SessionFinalizer import FinalizerSettings, PresenceState, presence_step
from TextComposer import CommitSettings, ComposerState, clear_text, compose_step
from TokenStabilizer import TokenStabilizer, Vote

log = logging.getLogger(__name__)


class FrameResult(NamedTuple):
    displayed: str
    text: str
    raw_token: str
    vote: Vote
    intents: List  # CommitIntent / FinalizeIntent emitted this tick
    timestamp: float

    def to_dict(self):
        """Serialize to JSON-friendly dict."""
        return {
            "displayed": self.displayed,
            "text": self.text,
            "raw": self.raw_token,
            "best": self.vote.token,
            "best_count": self.vote.count,
            "events": [
                {"type": type(i).__name__, **i._asdict()} for i in self.intents
            ],
            "timestamp": self.timestamp,
        }


class TranslationEngine:
    def __init__(
        self,
        cfg=None,
        on_utterance: Optional[Callable[[str, str], None]] = None,
        emotion_source=None,
        clock=time.monotonic,
    ):
        self.on_utterance = on_utterance
        self.emotion_source = emotion_source or ConstantEmotion()
        self.clock = clock

        self.cfg = build_config(cfg)
        self.extractor = HandFeatureExtractor(self.cfg)
        self.classifier = GestureClassifier(self.cfg)
        self.stabilizer = TokenStabilizer(self.cfg)
        self.commit_settings = CommitSettings.from_config(self.cfg)
        self.finalizer_settings = FinalizerSettings.from_config(self.cfg)

        self.composer = ComposerState()
        self.presence = PresenceState()

    @property
    def text(self) -> str:
        return self.composer.text

    @property
    def displayed(self) -> str:
        return self.composer.displayed

    def update_config(self, cfg) -> None:
        """Apply new thresholds. Raises ConfigError and keeps the old ones if invalid."""
        merged = build_config(cfg)
        self.cfg = merged
        self.extractor.update_config(merged)
        self.classifier.update_config(merged)
        self.stabilizer.update_config(merged)
        self.commit_settings = CommitSettings.from_config(merged)
        self.finalizer_settings = FinalizerSettings.from_config(merged)

    def reset(self) -> None:
        """Drop the text, the token history and the hand-presence tracking."""
        self.extractor.reset()
        self.stabilizer.reset()
        self.composer = ComposerState()
        self.presence = PresenceState()
        log.info("engine reset")

    def process_frame(self, hand, now: Optional[float] = None) -> FrameResult:
        """
        Consume one frame. ``hand`` is a HandData or None when no hand was
        detected. ``now`` defaults to the engine clock; timing gates compare
        against it.
        """
        now = self.clock() if now is None else now

        if hand is not None:
            features = self.extractor.extract(hand)
            raw = self.classifier.classify(features)
        else:
            self.extractor.reset()
            raw = Tokens.NONE

        vote = self.stabilizer.push(raw)
        self.composer, intents = compose_step(
            self.composer, vote, now, self.commit_settings, hand_present=hand is not None
        )

        self.presence, finals, finalized = presence_step(
            self.presence, hand is not None, self.composer.text, now, self.finalizer_settings
        )
        if finalized:
            self.composer = clear_text(self.composer)
        for intent in finals:
            self._emit(intent)
        intents = intents + finals

        return FrameResult(self.composer.displayed, self.composer.text, raw, vote, intents, now)

    def _emit(self, intent) -> None:
        emotion = self.emotion_source.current()
        log.info("utterance %r (%s)", intent.text, emotion.tone)
        if self.on_utterance is not None:
            self.on_utterance(intent.text, emotion.tone)
