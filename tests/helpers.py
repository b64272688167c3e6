"""テスト用のデータ生成ヘルパー."""

from datetime import datetime, timezone

from bsr_tracker.models import BookObservation

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_book(url: str, bsr: int, scraped_at: str = "2024-01-15T12:00:00Z", **kwargs) -> BookObservation:
    fields = {
        "title": f"Title {url}",
        "author": f"Author {url}",
        "cover_art_url": f"https://example.com/{url}.jpg",
        "is_valid_paperback": True,
    }
    fields.update(kwargs)
    return BookObservation(url=url, best_sellers_rank=bsr, scraped_at=scraped_at, **fields)
