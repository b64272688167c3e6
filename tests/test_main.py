"""main モジュール (CLI) のテスト."""

import json
from unittest.mock import patch

import pytest

from bsr_tracker.config import StoreConfig
from bsr_tracker.history_store import HistoryStore
from bsr_tracker.main import main
from bsr_tracker.models import BookWithHistory, HistoricalDataPoint
from tests.helpers import make_book


@pytest.fixture(autouse=True)
def no_log_files():
    with patch("bsr_tracker.main.setup_logging"):
        yield


class TestPublish:
    """publish サブコマンドのテスト."""

    def test_publish_from_input(self, tmp_path):
        data_dir = tmp_path / "data"
        input_file = tmp_path / "scraped.json"
        input_file.write_text(json.dumps([make_book("A", 10).to_dict()]), encoding="utf-8")

        code = main(["--data-dir", str(data_dir), "publish", "--input", str(input_file)])

        assert code == 0
        output = json.loads((data_dir / "output.json").read_text(encoding="utf-8"))
        assert output["totalBooks"] == 1

    def test_default_command_is_publish(self, tmp_path):
        assert main(["--data-dir", str(tmp_path)]) == 0

    def test_bad_input_exits_nonzero(self, tmp_path):
        input_file = tmp_path / "scraped.json"
        input_file.write_text("not json", encoding="utf-8")

        assert main(["--data-dir", str(tmp_path), "publish", "--input", str(input_file)]) == 1

    def test_write_failure_exits_nonzero(self, tmp_path):
        input_file = tmp_path / "scraped.json"
        input_file.write_text(json.dumps([make_book("A", 10).to_dict()]), encoding="utf-8")

        with patch("bsr_tracker.jsonfile.os.replace", side_effect=OSError("disk full")):
            code = main(["--data-dir", str(tmp_path / "data"), "publish", "--input", str(input_file)])

        assert code == 1


class TestView:
    """view / history サブコマンドのテスト."""

    def test_view(self, tmp_path, capsys):
        store = HistoryStore(StoreConfig(data_dir=tmp_path))
        store.write([
            BookWithHistory.from_observation(
                make_book("A", 1234, title="Rising Book"),
                [
                    HistoricalDataPoint(date="2024-01-01T00:00:00Z", bsr=5000),
                    HistoricalDataPoint(date="2024-01-02T00:00:00Z", bsr=1234),
                ],
            ),
            BookWithHistory.from_observation(make_book("B", 0, title="Unknown Book"), []),
        ])

        assert main(["--data-dir", str(tmp_path), "view"]) == 0

        out = capsys.readouterr().out
        assert "全 2 冊" in out
        assert "↑" in out
        assert "#1,234" in out
        assert out.index("Rising Book") < out.index("Unknown Book")

    def test_history_for_url(self, tmp_path, capsys):
        input_file = tmp_path / "scraped.json"
        input_file.write_text(json.dumps([make_book("A", 10).to_dict()]), encoding="utf-8")
        main(["--data-dir", str(tmp_path), "publish", "--input", str(input_file)])
        capsys.readouterr()

        assert main(["--data-dir", str(tmp_path), "history", "--url", "A", "--days", "0"]) == 0

        series = json.loads(capsys.readouterr().out)
        assert [p["bsr"] for p in series] == [10]
