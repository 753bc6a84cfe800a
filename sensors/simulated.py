from __future__ import annotations

import math
import random
from typing import Optional, Tuple


class SimulatedSensor:
    """Random-walk temperature source for running without hardware."""

    def __init__(
        self,
        base_temperature_f: float = 70.0,
        step: float = 0.25,
        failure_rate: float = 0.0,
        seed: Optional[int] = None,
    ) -> None:
        self.base_temperature_f = base_temperature_f
        self.step = step
        self.failure_rate = failure_rate
        self._current = base_temperature_f
        self._random = random.Random(seed)

    def read_temperature(self) -> Tuple[float, bool]:
        if self.failure_rate and self._random.random() < self.failure_rate:
            return math.nan, False
        drift = self._random.uniform(-self.step, self.step)
        # Pull gently back toward the base so the walk stays plausible.
        self._current += drift + (self.base_temperature_f - self._current) * 0.05
        return round(self._current, 4), True
