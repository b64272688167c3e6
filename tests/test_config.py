"""config モジュールのテスト."""

import importlib
from pathlib import Path

import pytest

from bsr_tracker import config


@pytest.fixture
def reload_config(monkeypatch):
    """環境変数を変えて config を読み直し、終了後に元へ戻す."""
    def _reload():
        return importlib.reload(config)

    yield _reload
    monkeypatch.undo()
    importlib.reload(config)


class TestDefaults:
    """既定の保存先のテスト."""

    def test_defaults_follow_cwd(self, tmp_path, monkeypatch, reload_config):
        """環境変数が無ければカレントディレクトリ配下を使うこと."""
        monkeypatch.delenv("BSR_DATA_DIR", raising=False)
        monkeypatch.delenv("BSR_LOG_DIR", raising=False)
        monkeypatch.chdir(tmp_path)

        reloaded = reload_config()

        assert reloaded.DATA_DIR == Path.cwd() / "data"
        assert reloaded.LOG_DIR == Path.cwd() / "logs"
        assert Path(reloaded.__file__).parent not in reloaded.DATA_DIR.parents

    def test_env_overrides(self, tmp_path, monkeypatch, reload_config):
        monkeypatch.setenv("BSR_DATA_DIR", str(tmp_path / "custom"))

        reloaded = reload_config()

        assert reloaded.StoreConfig.from_env().data_dir == tmp_path / "custom"

    def test_explicit_data_dir(self, tmp_path):
        store_config = config.StoreConfig.from_env(tmp_path)

        assert store_config.history_path == tmp_path / "history.json"
        assert store_config.historical_path == tmp_path / "historical.json"
