"""表示用リーダーボードの生成と output.json の管理."""

from __future__ import annotations

import logging
from datetime import datetime

from bsr_tracker.config import StoreConfig
from bsr_tracker.history_store import HistoryStore
from bsr_tracker.jsonfile import ReadResult, load_json, write_json_atomic
from bsr_tracker.models import (
    UNRANKED,
    BookWithHistory,
    OutputDataWithHistory,
    parse_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)


def _rank_key(book: BookWithHistory) -> tuple[bool, int]:
    # 順位不明 (0) は数値に関係なく末尾
    return book.best_sellers_rank == UNRANKED, book.best_sellers_rank


def sort_by_rank(books: list[BookWithHistory]) -> list[BookWithHistory]:
    """現在の順位の昇順に並べる. 同順位は元の順序を保つ."""
    return sorted(books, key=_rank_key)


def bsr_trend(book: BookWithHistory) -> str | None:
    """最古と最新の履歴点を比べた順位の傾向.

    Returns:
        "up" (順位が上がった = 数値が下がった)、"down"、"stable"。
        履歴が 2 点未満なら None。
    """
    points: list[tuple[datetime, int]] = []
    for p in book.history:
        observed = parse_timestamp(p.date)
        if observed is not None:
            points.append((observed, p.bsr))
    if len(points) < 2:
        return None

    points.sort(key=lambda x: x[0])
    oldest, newest = points[0][1], points[-1][1]
    if newest < oldest:
        return "up"
    if newest > oldest:
        return "down"
    return "stable"


def current_view(
    history_store: HistoryStore, now: datetime | None = None
) -> OutputDataWithHistory:
    """historical.json から順位順のリーダーボードを組み立てる."""
    books = sort_by_rank(history_store.read())
    failed = sum(1 for b in books if b.error)

    return OutputDataWithHistory(
        books=books,
        generated_at=(now or utc_now()).isoformat(),
        total_books=len(books),
        valid_books=len(books) - failed,
        failed_books=failed,
    )


class OutputStore:
    """output.json の読み書き."""

    def __init__(self, config: StoreConfig):
        self.path = config.output_path

    def load(self) -> ReadResult:
        return load_json(self.path).map(OutputDataWithHistory.from_dict)

    def read(self) -> OutputDataWithHistory:
        result = self.load()
        return result.data if result.ok else OutputDataWithHistory.empty()

    def write(self, output: OutputDataWithHistory) -> None:
        write_json_atomic(self.path, output.to_dict())
        logger.info("output.json に %d 冊分のリーダーボードを書き込み", len(output.books))
