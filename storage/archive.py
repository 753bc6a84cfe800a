from __future__ import annotations

import logging
import os
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Iterable, List, Optional, Sequence, Union

from models.records import Reading
from settings import get_settings

ARCHIVE_SUFFIX = ".dat"

logger = logging.getLogger(__name__)


def archive_path(root: Path, when: Union[date, datetime]) -> Path:
    """Map a calendar day onto ``<root>/<YYYY>/<MM>/<DD>.dat``."""
    return root / f"{when.year:04d}" / f"{when.month:02d}" / f"{when.day:02d}{ARCHIVE_SUFFIX}"


class ArchiveStore:

    def __init__(self, root_path: Path) -> None:
        self.root_path = root_path
        self._lock = Lock()

    def append_lines(self, lines: Sequence[str], when: datetime) -> Optional[Path]:
        """Append serialized readings to the file for ``when``'s day.

        Returns the file written, or ``None`` when there was nothing to write.
        The data is flushed and fsynced before returning.
        """
        if not lines:
            return None

        path = archive_path(self.root_path, when)
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8", newline="") as handle:
                for line in lines:
                    handle.write(line if line.endswith("\n") else f"{line}\n")
                handle.flush()
                os.fsync(handle.fileno())
        return path

    def read_lines(self, day: date) -> List[str]:
        path = archive_path(self.root_path, day)
        if not path.exists():
            raise KeyError(f"No archive recorded for {day.isoformat()}.")
        with path.open("r", encoding="utf-8") as handle:
            return [line for line in handle if line.strip()]

    def read_day(self, day: date) -> List[Reading]:
        readings: List[Reading] = []
        for line_number, line in enumerate(self.read_lines(day), start=1):
            try:
                readings.append(Reading.parse(line))
            except ValueError:
                logger.warning(
                    "Skipping malformed archive line %s",
                    line_number,
                    extra={"archive_path": archive_path(self.root_path, day)},
                )
        return readings

    def list_days(self) -> Iterable[date]:
        days: List[date] = []
        if not self.root_path.exists():
            return days
        for path in self.root_path.glob(f"*/*/*{ARCHIVE_SUFFIX}"):
            if not path.is_file():
                continue
            try:
                days.append(
                    date(int(path.parent.parent.name), int(path.parent.name), int(path.stem))
                )
            except ValueError:
                continue
        return sorted(days)


@lru_cache
def build_default_store(root_path: Optional[str] = None) -> ArchiveStore:
    settings = get_settings()
    root = settings.archive_root if root_path is None else root_path
    return ArchiveStore(root_path=Path(root))
