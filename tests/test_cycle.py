"""cycle モジュールのテスト."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from bsr_tracker.cycle import run_cycle
from bsr_tracker.history_store import HistoryStore
from bsr_tracker.metadata_store import MetadataStore
from bsr_tracker.projection import OutputStore
from bsr_tracker.snapshot_store import SnapshotStore
from tests.helpers import NOW, make_book


class TestRunCycle:
    """run_cycle のテスト."""

    def test_writes_all_documents(self, config):
        books = [make_book("A", 200), make_book("B", 0, error="captcha"), make_book("C", 15)]

        view = run_cycle(config, books, now=NOW)

        assert [b.url for b in view.books] == ["C", "A", "B"]
        assert view.failed_books == 1
        assert MetadataStore(config).read() == books
        assert [b.url for b in HistoryStore(config).read()] == ["A", "B", "C"]
        assert [s.date for s in SnapshotStore(config).read().daily_snapshots] == ["2024-01-15"]
        assert OutputStore(config).read() == view

    def test_reads_metadata_when_no_input(self, config):
        MetadataStore(config).write([make_book("A", 5)])

        view = run_cycle(config, now=NOW)

        assert view.total_books == 1

    def test_empty_input_writes_nothing(self, config):
        """入力が空なら何も書き込まず None を返すこと."""
        assert run_cycle(config, [], now=NOW) is None
        assert not config.data_dir.exists()

    def test_consecutive_days(self, config):
        run_cycle(config, [make_book("A", 100, "2024-01-14T12:00:00Z")], now=NOW - timedelta(days=1))
        run_cycle(config, [make_book("A", 80, "2024-01-15T12:00:00Z")], now=NOW)

        [book] = HistoryStore(config).read()
        assert [p.bsr for p in book.history] == [100, 80]
        assert SnapshotStore(config).book_history("A", 14, now=NOW)[-1].bsr == 80

    def test_write_failure_propagates(self, config):
        """スナップショットの書き込みに失敗したらサイクル全体が失敗すること."""
        with patch.object(SnapshotStore, "write", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                run_cycle(config, [make_book("A", 1)], now=NOW)

        assert not config.output_path.exists()
