"""データモデル定義.

JSON 上のキーは camelCase (例: bestSellersRank)、Python 側の属性は snake_case。
変換は各モデルの from_dict / to_dict で行う。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone

UNRANKED = 0  # 順位不明を表す番兵値


def _require_str(data: dict, key: str, default: str | None = None) -> str:
    """文字列項目を取り出す. 型が違えば TypeError (読み込み側で CORRUPT 扱い)."""
    value = data[key] if default is None else data.get(key, default)
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def utc_now() -> datetime:
    """現在時刻 (UTC) を返す."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | None) -> datetime | None:
    """ISO 8601 文字列を aware な datetime に変換する.

    末尾 "Z" とタイムゾーン無し (UTC とみなす) に対応。解釈できなければ None。
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value: str | None) -> date | None:
    """"YYYY-MM-DD" を date に変換する. 解釈できなければ None."""
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value or "")
    except (TypeError, ValueError):
        return None


@dataclass
class BookObservation:
    """スクレイパーが 1 回の取得で返す 1 冊分のメタデータ."""

    url: str  # 識別キー
    title: str
    author: str
    best_sellers_rank: int  # 0 = 順位不明
    cover_art_url: str
    is_valid_paperback: bool
    scraped_at: str  # ISO 8601
    error: str | None = None  # 取得失敗時のエラーメッセージ

    @classmethod
    def from_dict(cls, data: dict) -> BookObservation:
        return cls(
            url=_require_str(data, "url"),
            title=data.get("title", ""),
            author=data.get("author", ""),
            best_sellers_rank=int(data.get("bestSellersRank") or 0),
            cover_art_url=data.get("coverArtUrl", ""),
            is_valid_paperback=bool(data.get("isValidPaperback", False)),
            scraped_at=_require_str(data, "scrapedAt", ""),
            error=data.get("error"),
        )

    def to_dict(self) -> dict:
        data = {
            "url": self.url,
            "title": self.title,
            "author": self.author,
            "bestSellersRank": self.best_sellers_rank,
            "coverArtUrl": self.cover_art_url,
            "isValidPaperback": self.is_valid_paperback,
            "scrapedAt": self.scraped_at,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class HistoricalDataPoint:
    """順位履歴の 1 点."""

    date: str  # 観測時刻 (ISO 8601)
    bsr: int

    @classmethod
    def from_dict(cls, data: dict) -> HistoricalDataPoint:
        return cls(date=_require_str(data, "date"), bsr=int(data["bsr"]))

    def to_dict(self) -> dict:
        return {"date": self.date, "bsr": self.bsr}


@dataclass
class BookWithHistory(BookObservation):
    """最新のメタデータ + 追記順の順位履歴."""

    history: list[HistoricalDataPoint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> BookWithHistory:
        book = BookObservation.from_dict(data)
        return cls.from_observation(
            book, [HistoricalDataPoint.from_dict(p) for p in data.get("history", [])]
        )

    @classmethod
    def from_observation(
        cls, book: BookObservation, history: list[HistoricalDataPoint]
    ) -> BookWithHistory:
        return cls(
            url=book.url,
            title=book.title,
            author=book.author,
            best_sellers_rank=book.best_sellers_rank,
            cover_art_url=book.cover_art_url,
            is_valid_paperback=book.is_valid_paperback,
            scraped_at=book.scraped_at,
            error=book.error,
            history=list(history),
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["history"] = [p.to_dict() for p in self.history]
        return data


@dataclass
class SnapshotBook:
    """日次スナップショット内の 1 冊 (グラフ用の最小項目)."""

    url: str
    title: str
    author: str
    bsr: int
    cover_art_url: str

    @classmethod
    def from_observation(cls, book: BookObservation) -> SnapshotBook:
        return cls(
            url=book.url,
            title=book.title,
            author=book.author,
            bsr=book.best_sellers_rank,
            cover_art_url=book.cover_art_url,
        )

    @classmethod
    def from_dict(cls, data: dict) -> SnapshotBook:
        return cls(
            url=_require_str(data, "url"),
            title=data.get("title", ""),
            author=data.get("author", ""),
            bsr=int(data.get("bsr") or 0),
            cover_art_url=data.get("coverArtUrl", ""),
        )

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "title": self.title,
            "author": self.author,
            "bsr": self.bsr,
            "coverArtUrl": self.cover_art_url,
        }


@dataclass
class DailySnapshot:
    """1 日分のスナップショット. 同じ日付は 1 件のみ."""

    date: str  # YYYY-MM-DD
    books: list[SnapshotBook] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> DailySnapshot:
        return cls(
            date=_require_str(data, "date"),
            books=[SnapshotBook.from_dict(b) for b in data.get("books", [])],
        )

    def to_dict(self) -> dict:
        return {"date": self.date, "books": [b.to_dict() for b in self.books]}


@dataclass
class HistoryDocument:
    """history.json のルート."""

    daily_snapshots: list[DailySnapshot]
    last_updated: str  # ISO 8601

    @classmethod
    def empty(cls, now: datetime | None = None) -> HistoryDocument:
        return cls(daily_snapshots=[], last_updated=(now or utc_now()).isoformat())

    @classmethod
    def from_dict(cls, data: dict) -> HistoryDocument:
        return cls(
            daily_snapshots=[DailySnapshot.from_dict(s) for s in data["dailySnapshots"]],
            last_updated=data.get("lastUpdated", ""),
        )

    def to_dict(self) -> dict:
        return {
            "dailySnapshots": [s.to_dict() for s in self.daily_snapshots],
            "lastUpdated": self.last_updated,
        }


@dataclass
class BookIdentity:
    """スナップショットに登場した書籍の識別情報."""

    url: str
    title: str
    author: str
    cover_art_url: str

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "title": self.title,
            "author": self.author,
            "coverArtUrl": self.cover_art_url,
        }


@dataclass(frozen=True)
class SeriesPoint:
    """日別順位系列の 1 点. bsr=None はその日に記録が無かったことを表す."""

    date: str  # YYYY-MM-DD
    bsr: int | None

    def to_dict(self) -> dict:
        return {"date": self.date, "bsr": self.bsr}


@dataclass
class OutputDataWithHistory:
    """output.json / 表示層に渡すリーダーボード."""

    books: list[BookWithHistory]
    generated_at: str  # 空文字 = 未生成
    total_books: int
    valid_books: int
    failed_books: int

    @classmethod
    def empty(cls) -> OutputDataWithHistory:
        return cls(books=[], generated_at="", total_books=0, valid_books=0, failed_books=0)

    @classmethod
    def from_dict(cls, data: dict) -> OutputDataWithHistory:
        return cls(
            books=[BookWithHistory.from_dict(b) for b in data["books"]],
            generated_at=data.get("generatedAt", ""),
            total_books=int(data.get("totalBooks", 0)),
            valid_books=int(data.get("validBooks", 0)),
            failed_books=int(data.get("failedBooks", 0)),
        )

    def to_dict(self) -> dict:
        return {
            "books": [b.to_dict() for b in self.books],
            "generatedAt": self.generated_at,
            "totalBooks": self.total_books,
            "validBooks": self.valid_books,
            "failedBooks": self.failed_books,
        }
