"""BSR トラッカー — メインエントリーポイント.

サブコマンド:
  publish  スクレイピング結果をマージしてリーダーボードを公開する
  view     現在のリーダーボードを表示する
  history  日次スナップショットの順位推移を表示する
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

from bsr_tracker.config import DEFAULT_QUERY_DAYS, LOG_DIR, StoreConfig
from bsr_tracker.cycle import run_cycle
from bsr_tracker.history_store import HistoryStore
from bsr_tracker.jsonfile import load_json
from bsr_tracker.models import UNRANKED, BookObservation
from bsr_tracker.projection import bsr_trend, current_view
from bsr_tracker.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

_TREND_MARKS = {"up": "↑", "down": "↓", "stable": "→", None: " "}


def setup_logging() -> None:
    """ロギングの初期設定."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / f"bsr_tracker_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def _load_observations(path: Path) -> list[BookObservation]:
    """--input で指定された JSON ファイルからスクレイピング結果を読む."""
    result = load_json(path).map(
        lambda rows: [BookObservation.from_dict(row) for row in rows]
    )
    if not result.ok:
        raise ValueError(f"入力ファイルを読み込めません: {path} ({result.status.value})")
    return result.data


def cmd_publish(config: StoreConfig, args: argparse.Namespace) -> int:
    logger.info("=== 公開サイクル 開始 ===")
    start_time = time.time()

    try:
        observations = _load_observations(args.input) if args.input else None
        view = run_cycle(config, observations)
    except Exception:
        logger.exception("公開サイクルが失敗しました")
        return 1

    elapsed = time.time() - start_time
    logger.info("=== 公開サイクル 完了 ===")
    if view is not None:
        logger.info("書籍数: %d 冊, 所要時間: %.1f 秒", view.total_books, elapsed)
    return 0


def cmd_view(config: StoreConfig, args: argparse.Namespace) -> int:
    view = current_view(HistoryStore(config))
    print(f"生成日時: {view.generated_at}")
    print(f"全 {view.total_books} 冊 (有効 {view.valid_books}, 失敗 {view.failed_books})")
    for i, book in enumerate(view.books, start=1):
        rank = f"#{book.best_sellers_rank:,}" if book.best_sellers_rank != UNRANKED else "順位不明"
        mark = _TREND_MARKS[bsr_trend(book)]
        print(f"{i:>3}. {mark} {rank:>12}  {book.title} / {book.author}")
    return 0


def cmd_history(config: StoreConfig, args: argparse.Namespace) -> int:
    store = SnapshotStore(config)
    if args.url:
        series = store.book_history(args.url, args.days)
        print(json.dumps([p.to_dict() for p in series], indent=2, ensure_ascii=False))
    else:
        doc = store.query(args.days)
        print(json.dumps(doc.to_dict(), indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bsr-tracker", description=__doc__.splitlines()[0])
    parser.add_argument("--data-dir", help="データディレクトリ (既定: BSR_DATA_DIR)")
    sub = parser.add_subparsers(dest="command")

    publish = sub.add_parser("publish", help="リーダーボードを公開する")
    publish.add_argument("--input", type=Path, help="スクレイピング結果の JSON (既定: metadata.json)")
    publish.set_defaults(func=cmd_publish)

    view = sub.add_parser("view", help="現在のリーダーボードを表示する")
    view.set_defaults(func=cmd_view)

    history = sub.add_parser("history", help="日次スナップショットを表示する")
    history.add_argument("--days", type=int, default=DEFAULT_QUERY_DAYS, help="0 以下で全期間")
    history.add_argument("--url", help="指定した書籍の順位系列のみ表示")
    history.set_defaults(func=cmd_history)

    parser.set_defaults(func=cmd_publish, input=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    """メイン処理."""
    args = build_parser().parse_args(argv)
    setup_logging()
    config = StoreConfig.from_env(args.data_dir)
    return args.func(config, args)


if __name__ == "__main__":
    sys.exit(main())
