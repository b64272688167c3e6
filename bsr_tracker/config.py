"""設定モジュール — 環境変数・定数定義."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# .env はカレントディレクトリに配置
load_dotenv(Path.cwd() / ".env")

# --- データファイル ---
# 未指定時はカレントディレクトリ配下 (インストール先に書き込まない)
DATA_DIR = Path(os.environ.get("BSR_DATA_DIR", Path.cwd() / "data"))

HISTORY_FILE = "history.json"  # 日次スナップショット
HISTORICAL_FILE = "historical.json"  # 書籍ごとの順位履歴
METADATA_FILE = "metadata.json"  # 最新のスクレイピング結果
OUTPUT_FILE = "output.json"  # 表示用リーダーボード

# --- 保持期間 ---
SNAPSHOT_RETENTION_DAYS = 14
HISTORY_RETENTION_DAYS = 30
DEFAULT_QUERY_DAYS = 14

# --- ログ ---
LOG_DIR = Path(os.environ.get("BSR_LOG_DIR", Path.cwd() / "logs"))


@dataclass(frozen=True)
class StoreConfig:
    """各ストアに渡す保存先の設定.

    テストでは data_dir に一時ディレクトリを渡して分離する。
    """

    data_dir: Path
    history_file: str = HISTORY_FILE
    historical_file: str = HISTORICAL_FILE
    metadata_file: str = METADATA_FILE
    output_file: str = OUTPUT_FILE

    @classmethod
    def from_env(cls, data_dir: str | Path | None = None) -> StoreConfig:
        """環境変数 (BSR_DATA_DIR) またはデフォルトから設定を作る."""
        return cls(data_dir=Path(data_dir) if data_dir else DATA_DIR)

    @property
    def history_path(self) -> Path:
        return self.data_dir / self.history_file

    @property
    def historical_path(self) -> Path:
        return self.data_dir / self.historical_file

    @property
    def metadata_path(self) -> Path:
        return self.data_dir / self.metadata_file

    @property
    def output_path(self) -> Path:
        return self.data_dir / self.output_file
