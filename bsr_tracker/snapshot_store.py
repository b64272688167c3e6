"""日次スナップショット (history.json) の管理モジュール.

1 日 1 件のスナップショットを保持し、直近 14 日分だけを残す。
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

from bsr_tracker.config import SNAPSHOT_RETENTION_DAYS, StoreConfig
from bsr_tracker.jsonfile import ReadResult, load_json, write_json_atomic
from bsr_tracker.models import (
    BookIdentity,
    BookObservation,
    DailySnapshot,
    HistoryDocument,
    SeriesPoint,
    SnapshotBook,
    parse_date,
    utc_now,
)

logger = logging.getLogger(__name__)


def _today(now: datetime) -> date:
    return now.astimezone(timezone.utc).date()


def _keep_since(snapshots: list[DailySnapshot], cutoff: date) -> list[DailySnapshot]:
    """cutoff 以降の日付のスナップショットだけを残す."""
    kept = []
    for snapshot in snapshots:
        snapshot_date = parse_date(snapshot.date)
        if snapshot_date is None:
            logger.warning("日付を解釈できないスナップショットを除外: date=%r", snapshot.date)
            continue
        if snapshot_date >= cutoff:
            kept.append(snapshot)
    return kept


class SnapshotStore:
    """history.json の読み書き."""

    def __init__(self, config: StoreConfig):
        self.path = config.history_path

    def load(self) -> ReadResult:
        return load_json(self.path).map(HistoryDocument.from_dict)

    def read(self) -> HistoryDocument:
        """ドキュメントを読み込む. 無い・壊れている場合は空のドキュメント."""
        result = self.load()
        if result.ok:
            return result.data
        return HistoryDocument.empty()

    def write(self, doc: HistoryDocument) -> None:
        write_json_atomic(self.path, doc.to_dict())
        logger.info("history.json に %d 日分のスナップショットを書き込み", len(doc.daily_snapshots))

    def record_daily(
        self, observations: list[BookObservation], now: datetime | None = None
    ) -> HistoryDocument:
        """今日のスナップショットを記録する.

        同じ日に再実行した場合は追記せず丸ごと置き換える。
        """
        now = now or utc_now()
        doc = self.read()
        today = _today(now)
        today_str = today.isoformat()

        snapshot = DailySnapshot(
            date=today_str,
            books=[SnapshotBook.from_observation(b) for b in observations],
        )
        for i, existing in enumerate(doc.daily_snapshots):
            if existing.date == today_str:
                doc.daily_snapshots[i] = snapshot
                logger.info("%s のスナップショットを更新", today_str)
                break
        else:
            doc.daily_snapshots.append(snapshot)
            logger.info("%s のスナップショットを追加", today_str)

        cutoff = today - timedelta(days=SNAPSHOT_RETENTION_DAYS)
        doc.daily_snapshots = _keep_since(doc.daily_snapshots, cutoff)
        doc.daily_snapshots.sort(key=lambda s: s.date)
        doc.last_updated = now.isoformat()

        self.write(doc)
        return doc

    def query(self, days: int, now: datetime | None = None) -> HistoryDocument:
        """直近 days 日分のスナップショットを返す. days <= 0 なら全件."""
        doc = self.read()
        today = _today(now or utc_now())
        # date.min より前に遡る指定は全期間と同じ
        if days <= 0 or days > (today - date.min).days:
            return doc

        cutoff = today - timedelta(days=days)
        return HistoryDocument(
            daily_snapshots=_keep_since(doc.daily_snapshots, cutoff),
            last_updated=doc.last_updated,
        )

    def list_all_books(self) -> list[BookIdentity]:
        """スナップショットに登場した全書籍を URL で重複排除して返す.

        同じ URL が複数回出てきた場合は最初に見つかったものを使う。
        """
        books: dict[str, BookIdentity] = {}
        for snapshot in self.read().daily_snapshots:
            for book in snapshot.books:
                if book.url not in books:
                    books[book.url] = BookIdentity(
                        url=book.url,
                        title=book.title,
                        author=book.author,
                        cover_art_url=book.cover_art_url,
                    )
        return list(books.values())

    def book_history(
        self, url: str, days: int, now: datetime | None = None
    ) -> list[SeriesPoint]:
        """指定書籍の日別順位系列を返す.

        その日のスナップショットに書籍が無ければ bsr=None (0 ではない)。
        """
        series = []
        for snapshot in self.query(days, now).daily_snapshots:
            bsr = next((b.bsr for b in snapshot.books if b.url == url), None)
            series.append(SeriesPoint(date=snapshot.date, bsr=bsr))
        return series
