"""最新のスクレイピング結果 (metadata.json) の管理モジュール."""

from __future__ import annotations

import logging

from bsr_tracker.config import StoreConfig
from bsr_tracker.jsonfile import ReadResult, load_json, write_json_atomic
from bsr_tracker.models import BookObservation

logger = logging.getLogger(__name__)


class MetadataStore:
    """metadata.json の読み書き. 履歴は持たない."""

    def __init__(self, config: StoreConfig):
        self.path = config.metadata_path

    def load(self) -> ReadResult:
        return load_json(self.path).map(
            lambda rows: [BookObservation.from_dict(row) for row in rows]
        )

    def read(self) -> list[BookObservation]:
        result = self.load()
        return result.data if result.ok else []

    def write(self, books: list[BookObservation]) -> None:
        write_json_atomic(self.path, [b.to_dict() for b in books])
        logger.info("metadata.json に %d 件書き込み", len(books))

    def upsert(self, book: BookObservation) -> None:
        """同じ URL のレコードがあれば置き換え、無ければ末尾に追加する."""
        books = self.read()
        for i, existing in enumerate(books):
            if existing.url == book.url:
                books[i] = book
                logger.info("既存レコードを更新: %s", book.title)
                break
        else:
            books.append(book)
            logger.info("レコードを追加: %s", book.title)

        self.write(books)
