from collections import Counter, deque
from typing import Dict, NamedTuple

import Tokens
from EngineConfig import DEFAULT_CONFIG


class Vote(NamedTuple):
    token: str
    kind: str
    count: int
    score: float
    confident: bool  # count reached the kind's display minimum
    counts: Dict[str, int]

    def count_of(self, token: str) -> int:
        return self.counts.get(token, 0)


class TokenStabilizer:
    """
    Weighted voting over the last N raw tokens.

    Each occurrence scores ``kind_weight * recency`` where recency falls
    linearly from 1.0 at the newest slot to ``recency_floor`` at the oldest
    retained one. Highest score wins; ties go to the higher kind rank, then
    to the higher raw count.
    """

    def __init__(self, cfg=None):
        s = DEFAULT_CONFIG["stabilizer"]
        self.history_len = s["history_len"]
        self.recency_floor = s["recency_floor"]
        self.kind_weights = dict(s["kind_weights"])
        self.display_min_count = dict(s["display_min_count"])
        self.history = deque(maxlen=self.history_len)
        if cfg:
            self.update_config(cfg)

    def update_config(self, cfg) -> None:
        s = cfg.get("stabilizer", {})
        history_len = int(s.get("history_len", self.history_len))
        if history_len != self.history_len:
            self.history_len = history_len
            # keep the newest entries
            self.history = deque(list(self.history)[:history_len], maxlen=history_len)
        self.recency_floor = float(s.get("recency_floor", self.recency_floor))
        self.kind_weights.update(s.get("kind_weights", {}))
        self.display_min_count.update(s.get("display_min_count", {}))

    def reset(self) -> None:
        self.history.clear()

    def recency(self, slot: int) -> float:
        n = len(self.history)
        if n <= 1:
            return 1.0
        return 1.0 - (1.0 - self.recency_floor) * slot / (n - 1)

    def push(self, token: str) -> Vote:
        # newest first; the deque drops the oldest from the right
        self.history.appendleft(token)
        return self.vote()

    def vote(self) -> Vote:
        if not self.history:
            return Vote(Tokens.NONE, Tokens.KIND_NONE, 0, 0.0, False, {})

        counts = Counter(self.history)
        scores: Dict[str, float] = {}
        for slot, token in enumerate(self.history):
            weight = self.kind_weights.get(Tokens.kind_of(token), 0.0)
            scores[token] = scores.get(token, 0.0) + weight * self.recency(slot)

        best = max(
            scores,
            key=lambda t: (scores[t], Tokens.KIND_RANK[Tokens.kind_of(t)], counts[t]),
        )
        kind = Tokens.kind_of(best)
        count = counts[best]
        confident = count >= self.display_min_count.get(kind, self.history_len)
        return Vote(best, kind, count, scores[best], confident, dict(counts))
