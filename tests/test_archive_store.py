from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import pytest

from models.records import Reading
from storage.archive import ArchiveStore, archive_path, build_default_store


def _line(hour: int, value: float) -> str:
    return Reading(timestamp=datetime(2024, 2, 9, hour), temperature_f=value).serialize()


def test_archive_path_partitions_by_year_month_day(tmp_path: Path) -> None:
    path = archive_path(tmp_path, datetime(2024, 2, 9, 23, 59))

    assert path == tmp_path / "2024" / "02" / "09.dat"
    assert archive_path(tmp_path, date(2024, 2, 9)) == path
    assert not path.exists()


def test_append_creates_directories_lazily(tmp_path: Path) -> None:
    store = ArchiveStore(root_path=tmp_path / "archive")

    written = store.append_lines([_line(1, 70.0)], datetime(2024, 2, 9, 1))

    assert written == tmp_path / "archive" / "2024" / "02" / "09.dat"
    assert written.read_text() == _line(1, 70.0)


def test_same_day_flushes_accumulate(tmp_path: Path) -> None:
    store = ArchiveStore(root_path=tmp_path)
    first = [_line(1, 70.0), _line(2, 71.0)]
    second = [_line(3, 72.0)]

    store.append_lines(first, datetime(2024, 2, 9, 8))
    store.append_lines(second, datetime(2024, 2, 9, 20))

    assert store.read_lines(date(2024, 2, 9)) == first + second


def test_different_days_use_different_files(tmp_path: Path) -> None:
    store = ArchiveStore(root_path=tmp_path)

    store.append_lines([_line(1, 70.0)], datetime(2024, 2, 9, 23, 59))
    store.append_lines([_line(2, 71.0)], datetime(2024, 2, 10, 0, 1))

    assert store.read_lines(date(2024, 2, 9)) == [_line(1, 70.0)]
    assert store.read_lines(date(2024, 2, 10)) == [_line(2, 71.0)]
    assert list(store.list_days()) == [date(2024, 2, 9), date(2024, 2, 10)]


def test_empty_batch_writes_nothing(tmp_path: Path) -> None:
    store = ArchiveStore(root_path=tmp_path / "archive")

    assert store.append_lines([], datetime(2024, 2, 9)) is None
    assert not (tmp_path / "archive").exists()
    assert list(store.list_days()) == []


def test_read_missing_day_raises_key_error(tmp_path: Path) -> None:
    store = ArchiveStore(root_path=tmp_path)

    with pytest.raises(KeyError) as excinfo:
        store.read_day(date(2024, 2, 9))

    assert "2024-02-09" in str(excinfo.value)


def test_read_day_skips_malformed_lines(tmp_path: Path, caplog) -> None:
    store = ArchiveStore(root_path=tmp_path)
    store.append_lines([_line(1, 70.0), "garbage\n", _line(2, 71.5)], datetime(2024, 2, 9))

    readings = store.read_day(date(2024, 2, 9))

    assert [reading.temperature_f for reading in readings] == [70.0, 71.5]
    assert any("malformed" in record.getMessage() for record in caplog.records)


def test_default_store_uses_settings(monkeypatch, tmp_path: Path) -> None:
    from settings import get_settings

    monkeypatch.setenv("ARCHIVE_ROOT_PATH", str(tmp_path / "env-root"))
    get_settings.cache_clear()
    build_default_store.cache_clear()
    try:
        assert build_default_store().root_path == tmp_path / "env-root"
    finally:
        build_default_store.cache_clear()
        get_settings.cache_clear()
