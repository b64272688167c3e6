"""共通フィクスチャ."""

import pytest

from bsr_tracker.config import StoreConfig


@pytest.fixture
def config(tmp_path):
    """一時ディレクトリを保存先にした設定."""
    return StoreConfig(data_dir=tmp_path / "data")
