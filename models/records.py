"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

_FIELD_SEPARATOR = ","


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9.0 / 5.0 + 32.0


@dataclass(frozen=True, slots=True)
class Reading:
    """A single temperature sample taken by the sensor loop."""

    timestamp: datetime
    temperature_f: float

    def serialize(self) -> str:
        """Return the archive line for this reading, newline included."""
        stamp = self.timestamp.isoformat(timespec="seconds")
        return f"{stamp}{_FIELD_SEPARATOR}{self.temperature_f:.2f}\n"

    @classmethod
    def parse(cls, line: str) -> "Reading":
        candidate = line.strip()
        stamp, sep, value = candidate.partition(_FIELD_SEPARATOR)
        if not sep or not stamp or not value:
            raise ValueError(f"Malformed archive line: {line!r}")
        return cls(timestamp=datetime.fromisoformat(stamp), temperature_f=float(value))
