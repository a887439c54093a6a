from __future__ import annotations


class GravityTimer:
    """Decides when the automatic one-row fall is due.

    Timestamps are plain seconds from whatever clock the game was given.
    """

    def __init__(self, interval: float, start: float) -> None:
        self.interval = float(interval)
        self.last_step = float(start)

    def due(self, now: float) -> bool:
        return now - self.last_step >= self.interval

    def mark(self, now: float) -> None:
        self.last_step = float(now)
