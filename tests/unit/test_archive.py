"""
Tests for the archive module: layout, freshness guard, merge and writer.
"""

import os
import tempfile
import time
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from txarchive.archive import (
    ArchiveStorage,
    ArchiveWriter,
    DownloadRequest,
    FreshnessGuard,
    ReconciliationWindow,
    merge_csv,
    parse_row_date,
    parse_transactions_filename,
    sanitize_name,
    transactions_filename,
)

HEADER = "Date;Libelle;Montant"


def _set_mtime(path: Path, when: datetime) -> None:
    ts = time.mktime(when.timetuple())
    os.utime(path, (ts, ts))


class TestSanitizeName:
    """Tests for account folder names."""

    def test_spaces_become_underscores(self):
        assert sanitize_name("Compte Courant") == "compte_courant"

    def test_accents_removed(self):
        assert sanitize_name("Livret Épargne Populaire") == "livret_epargne_populaire"

    def test_special_characters_dropped(self):
        assert sanitize_name("PEL (n°2) - Joint!") == "pel_n2_-_joint"

    def test_whitespace_runs_collapse(self):
        assert sanitize_name("Livret   A") == "livret_a"


class TestFilenames:
    """Tests for anchor dates in archive filenames."""

    def test_filename_has_no_separators(self):
        assert transactions_filename(date(2022, 1, 5)) == "history-from-20220105.csv"

    def test_parse_filename(self):
        assert parse_transactions_filename("history-from-20230301.csv") == date(2023, 3, 1)

    def test_parse_rejects_other_names(self):
        assert parse_transactions_filename("history-from-2023-03-01.csv") is None
        assert parse_transactions_filename("notes.csv") is None
        assert parse_transactions_filename("history-from-20231301.csv") is None


class TestReconciliationWindow:
    """Tests for the window model."""

    def test_window_ends_today(self):
        window = ReconciliationWindow.for_today(date(2024, 1, 20), 792)
        assert window.end == date(2024, 1, 20)
        assert window.start == date(2024, 1, 20) - timedelta(days=792)

    def test_request_match_requires_both_bounds(self):
        window = ReconciliationWindow.for_today(date(2024, 1, 20), 10)
        exact = DownloadRequest("1", "r1", window.start_iso, window.end_iso)
        lagging = DownloadRequest("1", "r1", window.start_iso, "2024-01-19")
        assert exact.matches(window)
        assert not lagging.matches(window)


class TestMergeCsv:
    """Tests for merge_csv."""

    def test_no_existing_content_returns_new_verbatim(self):
        new = f"{HEADER}\n01/01/2024;A;1\n"
        assert merge_csv(None, new) == new
        assert merge_csv("", new) == new

    def test_empty_new_content_keeps_existing_verbatim(self):
        existing = f"{HEADER}\n01/01/2024;A;1\n"
        assert merge_csv(existing, "") == existing
        assert merge_csv(existing, "\n  \n") == existing

    def test_header_comes_from_existing(self):
        existing = f"{HEADER}\n01/01/2024;A;1"
        new = "DATE;LIBELLE;MONTANT\n02/01/2024;B;2"
        merged = merge_csv(existing, new)
        assert merged.splitlines()[0] == HEADER
        assert "DATE;LIBELLE;MONTANT" not in merged

    def test_merge_with_itself_keeps_row_set(self):
        content = f"{HEADER}\n05/01/2024;A;1\n05/01/2024;A;1\n03/01/2024;B;2"
        merged = merge_csv(content, content)
        rows = merged.splitlines()[1:]
        assert set(rows) == {"05/01/2024;A;1", "03/01/2024;B;2"}
        assert len(rows) == 2

    def test_overlapping_windows_deduplicate(self):
        existing = f"{HEADER}\n10/01/2024;A;1\n09/01/2024;B;2"
        new = f"{HEADER}\n11/01/2024;C;3\n10/01/2024;A;1"
        merged = merge_csv(existing, new)
        assert merged.splitlines()[1:] == ["11/01/2024;C;3", "10/01/2024;A;1", "09/01/2024;B;2"]

    def test_rows_sorted_newest_first(self):
        existing = f"{HEADER}\n05/01/2024;A;1"
        new = f"{HEADER}\n20/01/2024;B;2\n01/01/2024;C;3"
        merged = merge_csv(existing, new)
        dates = [line.split(";")[0] for line in merged.splitlines()[1:]]
        assert dates == ["20/01/2024", "05/01/2024", "01/01/2024"]

    def test_sort_is_by_date_not_text(self):
        existing = f"{HEADER}\n31/12/2023;A;1"
        new = f"{HEADER}\n01/02/2024;B;2"
        merged = merge_csv(existing, new)
        assert merged.splitlines()[1].startswith("01/02/2024")

    def test_unparsable_dates_go_last(self):
        existing = f"{HEADER}\nTotal;;3\n01/01/2024;A;1"
        new = f"{HEADER}\n02/01/2024;B;2\nn/a;C;4"
        merged = merge_csv(existing, new)
        assert merged.splitlines()[1:] == ["02/01/2024;B;2", "01/01/2024;A;1", "Total;;3", "n/a;C;4"]

    def test_whitespace_difference_is_a_distinct_row(self):
        existing = f"{HEADER}\n01/01/2024;A;1"
        new = f"{HEADER}\n01/01/2024;A; 1"
        merged = merge_csv(existing, new)
        assert len(merged.splitlines()) == 3

    def test_crlf_exports(self):
        existing = f"{HEADER}\r\n01/01/2024;A;1\r\n"
        new = f"{HEADER}\r\n01/01/2024;A;1\r\n02/01/2024;B;2\r\n"
        merged = merge_csv(existing, new)
        assert merged == f"{HEADER}\n02/01/2024;B;2\n01/01/2024;A;1"

    def test_parse_row_date(self):
        assert parse_row_date("20/01/2024;x") == date(2024, 1, 20)
        assert parse_row_date('"20/01/2024";x') == date(2024, 1, 20)
        assert parse_row_date("2024-01-20;x") is None
        assert parse_row_date("20/01/2024,x", delimiter=",") == date(2024, 1, 20)


class TestArchiveWriter:
    """Tests for ArchiveWriter."""

    def test_first_save_writes_verbatim(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            writer = ArchiveWriter(storage)
            content = f"{HEADER}\n01/01/2024;A;1\n"

            path = writer.save_transactions("ce", "Compte Courant", date(2022, 1, 1), content)

            assert path == Path(tmpdir) / "ce" / "compte_courant" / "history-from-20220101.csv"
            assert path.read_text(encoding="utf-8") == content

    def test_existing_anchor_reused(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            writer = ArchiveWriter(storage)
            writer.save_transactions("ce", "Livret A", date(2022, 1, 1), f"{HEADER}\n01/01/2022;A;1")

            path = writer.save_transactions("ce", "Livret A", date(2022, 3, 1), f"{HEADER}\n01/03/2022;B;2")

            assert path.name == "history-from-20220101.csv"
            assert list(path.parent.glob("*.csv")) == [path]
            assert path.read_text(encoding="utf-8").splitlines() == [
                HEADER, "01/03/2022;B;2", "01/01/2022;A;1",
            ]

    def test_earlier_window_moves_anchor_back(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            writer = ArchiveWriter(storage)
            old_path = writer.save_transactions(
                "ce", "Livret A", date(2023, 3, 1), f"{HEADER}\n15/03/2023;A;1\n01/03/2023;B;2"
            )

            path = writer.save_transactions(
                "ce", "Livret A", date(2022, 1, 1), f"{HEADER}\n01/03/2023;B;2\n10/01/2022;C;3"
            )

            assert path.name == "history-from-20220101.csv"
            assert not old_path.exists()
            assert path.read_text(encoding="utf-8").splitlines() == [
                HEADER, "15/03/2023;A;1", "01/03/2023;B;2", "10/01/2022;C;3",
            ]

    def test_merge_never_drops_retained_rows(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            writer = ArchiveWriter(storage)
            writer.save_transactions("ce", "Livret A", date(2020, 1, 1), f"{HEADER}\n02/01/2020;Old;1")

            path = writer.save_transactions("ce", "Livret A", date(2022, 1, 1), f"{HEADER}\n02/01/2022;New;2")

            rows = path.read_text(encoding="utf-8").splitlines()
            assert "02/01/2020;Old;1" in rows
            assert "02/01/2022;New;2" in rows

    def test_failed_write_leaves_no_tmp_file(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            writer = ArchiveWriter(storage)

            def failing_replace(self, target):
                raise OSError("disk full")

            monkeypatch.setattr(Path, "replace", failing_replace)

            with pytest.raises(OSError):
                writer.save_transactions("ce", "Livret A", date(2022, 1, 1), HEADER)

            account_dir = storage.account_dir("ce", "Livret A")
            assert list(account_dir.iterdir()) == []

    def test_stuck_superseded_file_does_not_fail_save(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            writer = ArchiveWriter(storage)
            old_path = writer.save_transactions("ce", "Livret A", date(2023, 3, 1), f"{HEADER}\n15/03/2023;A;1")
            _set_mtime(old_path, datetime.now() - timedelta(days=1))
            original_unlink = Path.unlink

            def guarded_unlink(self, *args, **kwargs):
                if self == old_path:
                    raise PermissionError("read-only")
                return original_unlink(self, *args, **kwargs)

            monkeypatch.setattr(Path, "unlink", guarded_unlink)

            path = writer.save_transactions("ce", "Livret A", date(2022, 1, 1), f"{HEADER}\n10/01/2022;C;3")

            assert path.name == "history-from-20220101.csv"
            assert path.read_text(encoding="utf-8").splitlines() == [HEADER, "15/03/2023;A;1", "10/01/2022;C;3"]
            assert old_path.exists()
            assert storage.latest_file("ce", "Livret A").path == path


class TestArchiveStorage:
    """Tests for locating archive files."""

    def test_missing_account(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            assert storage.latest_file("ce", "Nope") is None

    def test_latest_by_mtime(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            account_dir = storage.account_dir("ce", "Livret A")
            account_dir.mkdir(parents=True)
            recent = account_dir / "history-from-20210101.csv"
            stale = account_dir / "history-from-20220101.csv"
            recent.write_text(HEADER)
            stale.write_text(HEADER)
            _set_mtime(recent, datetime.now() - timedelta(days=1))
            _set_mtime(stale, datetime.now() - timedelta(days=3))

            info = storage.latest_file("ce", "Livret A")

            assert info is not None
            assert info.path == recent
            assert info.anchor_date == date(2021, 1, 1)


class TestFreshnessGuard:
    """Tests for FreshnessGuard."""

    def test_all_written_today_is_fresh(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            writer = ArchiveWriter(storage)
            for name in ("Compte Courant", "Livret A"):
                writer.save_transactions("ce", name, date(2022, 1, 1), f"{HEADER}\n01/01/2022;A;1")

            guard = FreshnessGuard(storage)
            assert guard.is_fresh("ce", ["Compte Courant", "Livret A"], date.today())

    def test_missing_archive_is_stale(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            ArchiveWriter(storage).save_transactions("ce", "Livret A", date(2022, 1, 1), HEADER)

            guard = FreshnessGuard(storage)
            assert not guard.is_fresh("ce", ["Livret A", "Compte Courant"], date.today())

    def test_archive_from_yesterday_is_stale(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            path = ArchiveWriter(storage).save_transactions("ce", "Livret A", date(2022, 1, 1), HEADER)
            _set_mtime(path, datetime.now() - timedelta(days=1))

            guard = FreshnessGuard(storage)
            assert not guard.is_fresh("ce", ["Livret A"], date.today())

    def test_guard_does_not_touch_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = ArchiveStorage(Path(tmpdir))
            path = ArchiveWriter(storage).save_transactions("ce", "Livret A", date(2022, 1, 1), HEADER)
            before = path.stat().st_mtime

            FreshnessGuard(storage).is_fresh("ce", ["Livret A"], date.today())

            assert path.stat().st_mtime == before


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
