"""公開サイクル.

処理フロー:
  1. スクレイピング結果を受け取る (省略時は metadata.json から読む)
  2. 既存の履歴とマージ
  3. metadata.json / historical.json を書き込み
  4. 日次スナップショットを記録
  5. リーダーボードを生成して output.json に書き込み

history.json と historical.json は別々に書き込むため、途中で失敗すると
両者が追跡している書籍の集合が一時的に食い違うことがある。
"""

from __future__ import annotations

import logging
from datetime import datetime

from bsr_tracker.config import StoreConfig
from bsr_tracker.history_store import HistoryStore
from bsr_tracker.metadata_store import MetadataStore
from bsr_tracker.models import BookObservation, OutputDataWithHistory, utc_now
from bsr_tracker.projection import OutputStore, current_view
from bsr_tracker.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


def run_cycle(
    config: StoreConfig,
    observations: list[BookObservation] | None = None,
    now: datetime | None = None,
) -> OutputDataWithHistory | None:
    """1 サイクル分の書き込みを行い、生成したリーダーボードを返す.

    書き込みに失敗した場合は例外をそのまま送出する。
    """
    now = now or utc_now()
    metadata_store = MetadataStore(config)
    history_store = HistoryStore(config)
    snapshot_store = SnapshotStore(config)
    output_store = OutputStore(config)

    if observations is None:
        observations = metadata_store.read()
    if not observations:
        logger.warning("取得済みの書籍データがありません。終了します。")
        return None

    logger.info("マージ対象: %d 冊", len(observations))
    books = history_store.merge(observations, now)

    metadata_store.write(observations)
    history_store.write(books)
    snapshot_store.record_daily(observations, now)

    view = current_view(history_store, now)
    output_store.write(view)

    logger.info(
        "リーダーボード生成: 全 %d 冊, 有効 %d 冊, 失敗 %d 冊",
        view.total_books, view.valid_books, view.failed_books,
    )
    return view
