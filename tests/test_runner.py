"""Tests for running backups over several stores."""

from datetime import datetime
from pathlib import Path

import pytest
import yaml

from pstbackup.backup import BackupStatus
from pstbackup.client import FolderCopyError
from pstbackup.memory import MemoryClient
from pstbackup.runner import (
    RunConfig,
    archive_path,
    make_run_dir,
    run_backups,
    safe_filename,
    write_summary,
)
from pstbackup.stores import find_store_by_path, list_stores

STARTED = datetime(2024, 5, 1, 9, 30, 42)


@pytest.fixture
def config(tmp_path):
    return RunConfig(output_root=tmp_path / "out", started=STARTED)


class TestSafeFilename:
    def test_plain(self):
        assert safe_filename("Sales") == "Sales"

    def test_illegal_chars(self):
        assert safe_filename('a/b\\c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"

    def test_email_address_kept(self):
        assert safe_filename("jane.doe@example.com") == "jane.doe@example.com"

    def test_control_chars(self):
        assert safe_filename("tab\there") == "tab_here"

    def test_trailing_dots_and_spaces(self):
        assert safe_filename("Archive. ") == "Archive"

    def test_empty(self):
        assert safe_filename("") == "_"
        assert safe_filename("...") == "_"

    def test_placeholder(self):
        assert safe_filename("a:b", placeholder="-") == "a-b"


class TestRunDir:
    def test_minute_resolution(self, config, tmp_path):
        assert config.run_dir == (tmp_path / "out").resolve() / "2024-05-01_09-30"

    def test_same_minute_same_dir(self, tmp_path):
        a = RunConfig(output_root=tmp_path, started=datetime(2024, 5, 1, 9, 30, 1))
        b = RunConfig(output_root=tmp_path, started=datetime(2024, 5, 1, 9, 30, 59))
        assert a.run_dir == b.run_dir

    def test_idempotent(self, config):
        run_dir = make_run_dir(config)
        (run_dir / "keep.txt").write_text("existing")
        assert make_run_dir(config) == run_dir
        assert (run_dir / "keep.txt").read_text() == "existing"

    def test_archive_path(self, tmp_path):
        assert archive_path(tmp_path, "Backup_", "Sales: EU") == tmp_path / "Backup_Sales_ EU.pst"

    def test_archive_path_repeated_name(self, tmp_path):
        taken = set()
        first = archive_path(tmp_path, "Backup_", "a/b", taken)
        second = archive_path(tmp_path, "Backup_", "a:b", taken)
        third = archive_path(tmp_path, "Backup_", "A|B", taken)
        assert first.name == "Backup_a_b.pst"
        assert second.name == "Backup_a_b_2.pst"
        assert third.name == "Backup_A_B_3.pst"

    def test_archive_path_skips_existing_file(self, tmp_path):
        (tmp_path / "Backup_Sales.pst").write_text("from an earlier run")
        assert archive_path(tmp_path, "Backup_", "Sales").name == "Backup_Sales_2.pst"

    def test_relative_output_root(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = RunConfig(output_root=Path("backups"), started=STARTED)
        assert config.output_root.is_absolute()
        assert config.run_dir == (tmp_path / "backups").resolve() / "2024-05-01_09-30"


class TestRunBackups:
    def test_all_stores(self, client, config):
        reports = run_backups(client, list_stores(client), config)
        assert [r.outcome.store for r in reports] == ["Sales", "Support"]
        assert all(r.outcome.status is BackupStatus.SUCCESS for r in reports)
        for report in reports:
            assert report.outcome.path.parent == config.run_dir
            assert report.outcome.path.exists()
            assert report.size == report.outcome.path.stat().st_size
            assert report.size_mb == report.size / (1024 * 1024)
            assert report.elapsed >= 0

    def test_callbacks_in_order(self, client, config):
        events = []
        run_backups(
            client,
            list_stores(client),
            config,
            on_start=lambda store, path: events.append(("start", store.name, path.name)),
            on_finish=lambda report: events.append(("finish", report.outcome.store)),
        )
        assert events == [
            ("start", "Sales", "Backup_Sales.pst"),
            ("finish", "Sales"),
            ("start", "Support", "Backup_Support.pst"),
            ("finish", "Support"),
        ]

    def test_discrepancy_continues(self, client, config):
        client.lose_items = {"Sent": 1}
        reports = run_backups(client, list_stores(client), config)
        statuses = [r.outcome.status for r in reports]
        assert statuses == [BackupStatus.DISCREPANCY, BackupStatus.SUCCESS]

    def test_fail_fast(self, config):
        client = MemoryClient(fail_copy={"Drafts"})
        client.add_store("First", {"Drafts": 1})
        client.add_store("Second", {"Inbox": 1})
        with pytest.raises(FolderCopyError):
            run_backups(client, list_stores(client), config)
        assert not (config.run_dir / "Backup_Second.pst").exists()

    def test_keep_going(self, config):
        config.keep_going = True
        client = MemoryClient(fail_copy={"Drafts"})
        client.add_store("First", {"Drafts": 1})
        client.add_store("Second", {"Inbox": 1})
        reports = run_backups(client, list_stores(client), config)
        first, second = reports
        assert first.outcome.status is BackupStatus.FAILED
        assert "Drafts" in first.outcome.error
        assert first.outcome.describe().startswith("Failed: ")
        assert find_store_by_path(client, first.outcome.path) is None
        assert second.outcome.status is BackupStatus.SUCCESS

    def test_names_that_sanitize_alike(self, config):
        client = MemoryClient()
        client.add_store("a/b", {"Inbox": 10})
        client.add_store("a:b", {"Inbox": 3})
        reports = run_backups(client, list_stores(client), config)
        assert [r.outcome.path.name for r in reports] == ["Backup_a_b.pst", "Backup_a_b_2.pst"]
        assert [r.outcome.status for r in reports] == [BackupStatus.SUCCESS] * 2
        assert [r.outcome.verified_count for r in reports] == [10, 3]

    def test_rerun_same_minute(self, client, config):
        first = run_backups(client, list_stores(client)[:1], config)
        second = run_backups(client, list_stores(client)[:1], config)
        assert first[0].outcome.path.name == "Backup_Sales.pst"
        assert second[0].outcome.path.name == "Backup_Sales_2.pst"
        assert second[0].outcome.status is BackupStatus.SUCCESS
        assert second[0].outcome.verified_count == 15

    def test_custom_prefix(self, client, config):
        config.prefix = "mail-"
        reports = run_backups(client, list_stores(client)[:1], config)
        assert reports[0].outcome.path.name == "mail-Sales.pst"


class TestWriteSummary:
    def test_summary(self, client, config):
        client.lose_items = {"Sent": 1}
        reports = run_backups(client, list_stores(client), config)
        path = write_summary(config.run_dir, reports)
        data = yaml.safe_load(path.read_text())
        sales, support = data["stores"]
        assert sales["store"] == "Sales"
        assert sales["file"] == "Backup_Sales.pst"
        assert sales["status"] == "discrepancy"
        assert (sales["source_items"], sales["archive_items"]) == (15, 14)
        assert sales["folders"]["Sent"] == {"source": 5, "archive": 4}
        assert support["status"] == "success"
        assert "folders" not in support
        assert "error" not in support
