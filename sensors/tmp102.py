"""TMP102 temperature sensor read through the ``i2cget`` utility."""

from __future__ import annotations

import logging
import math
import subprocess
from typing import Callable, Sequence, Tuple

from models.records import celsius_to_fahrenheit

logger = logging.getLogger(__name__)

TEMPERATURE_REGISTER = 0x00
CELSIUS_PER_COUNT = 0.0625

Runner = Callable[[Sequence[str], float], str]


def _run_command(command: Sequence[str], timeout: float) -> str:
    completed = subprocess.run(
        list(command),
        capture_output=True,
        text=True,
        timeout=timeout,
        check=True,
    )
    return completed.stdout


def decode_word(raw: str) -> float:
    """Convert an ``i2cget`` word such as ``0x110b`` into degrees Celsius.

    SMBus returns the register low byte first, so the two bytes are swapped
    before dropping the four unused low bits of the 12-bit reading.
    """
    candidate = raw.strip().lower()
    if not candidate.startswith("0x") or len(candidate) != 6:
        raise ValueError(f"Unexpected i2cget output: {raw!r}")
    swapped = candidate[4:6] + candidate[2:4]
    counts = int(swapped, 16) >> 4
    if counts & 0x800:
        counts -= 1 << 12
    return counts * CELSIUS_PER_COUNT


class Tmp102Sensor:

    def __init__(
        self,
        bus: int = 1,
        address: int = 0x49,
        timeout: float = 2.0,
        runner: Runner = _run_command,
    ) -> None:
        self.bus = bus
        self.address = address
        self.timeout = timeout
        self._runner = runner

    @property
    def command(self) -> list[str]:
        return [
            "i2cget",
            "-y",
            str(self.bus),
            f"0x{self.address:02x}",
            f"0x{TEMPERATURE_REGISTER:02x}",
            "w",
        ]

    def read_temperature(self) -> Tuple[float, bool]:
        try:
            output = self._runner(self.command, self.timeout)
            celsius = decode_word(output)
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            logger.debug("TMP102 read failed", extra={"reason": str(exc)})
            return math.nan, False
        return celsius_to_fahrenheit(celsius), True
