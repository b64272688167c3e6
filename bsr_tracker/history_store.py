"""書籍ごとの順位履歴 (historical.json) の管理モジュール.

新しく取得したメタデータを既存の履歴にマージする。履歴は 30 日分だけ残す。
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from bsr_tracker.config import HISTORY_RETENTION_DAYS, StoreConfig
from bsr_tracker.jsonfile import ReadResult, load_json, write_json_atomic
from bsr_tracker.models import (
    BookObservation,
    BookWithHistory,
    HistoricalDataPoint,
    parse_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)


def _prune(history: list[HistoricalDataPoint], cutoff: datetime) -> list[HistoricalDataPoint]:
    """cutoff より古い履歴点を除外する. 追記順は保つ."""
    kept = []
    for point in history:
        observed = parse_timestamp(point.date)
        if observed is None:
            logger.warning("日時を解釈できない履歴点を除外: date=%r", point.date)
            continue
        if observed >= cutoff:
            kept.append(point)
    return kept


class HistoryStore:
    """historical.json の読み書きとマージ."""

    def __init__(self, config: StoreConfig):
        self.path = config.historical_path

    def load(self) -> ReadResult:
        return load_json(self.path).map(
            lambda rows: [BookWithHistory.from_dict(row) for row in rows]
        )

    def read(self) -> list[BookWithHistory]:
        """履歴を読み込む. 無い・壊れている場合は空リスト."""
        result = self.load()
        return result.data if result.ok else []

    def write(self, books: list[BookWithHistory]) -> None:
        write_json_atomic(self.path, [b.to_dict() for b in books])
        logger.info("historical.json に %d 冊分の履歴を書き込み", len(books))

    def merge(
        self, observations: list[BookObservation], now: datetime | None = None
    ) -> list[BookWithHistory]:
        """新しい取得結果を既存の履歴にマージする (書き込みはしない).

        返り値はスクレイピング順。今回の取得結果に無い URL は結果から外れる。
        now から 30 日より古い履歴点は切り捨てる。
        """
        now = now or utc_now()
        cutoff = now - timedelta(days=HISTORY_RETENTION_DAYS)
        existing = {book.url: book for book in self.read()}
        merged: dict[str, BookWithHistory] = {}

        for book in observations:
            point = HistoricalDataPoint(date=book.scraped_at, bsr=book.best_sellers_rank)
            # 同じ URL が 1 回の取得に重複していても 1 件にまとめる
            previous = merged.get(book.url) or existing.get(book.url)

            if previous is None:
                merged[book.url] = BookWithHistory.from_observation(book, [point])
                continue

            history = _prune([*previous.history, point], cutoff)
            merged[book.url] = BookWithHistory.from_observation(book, history)

        dropped = existing.keys() - merged.keys()
        if dropped:
            logger.info("今回の取得結果に無い %d 冊を履歴から外します", len(dropped))

        return list(merged.values())
