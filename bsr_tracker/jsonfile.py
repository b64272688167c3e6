"""JSON ファイルの読み書きモジュール.

書き込みは一時ファイル → rename の順で行い、読み手が書きかけのファイルを
見ることはない。読み込みは失敗しても例外を投げず ReadResult で状態を返す。
"""

from __future__ import annotations

import enum
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ReadStatus(enum.Enum):
    OK = "ok"
    EMPTY = "empty"  # ファイルが存在しない
    CORRUPT = "corrupt"  # 読めない・パースできない・形式が違う


@dataclass(frozen=True)
class ReadResult:
    """読み込み結果. status が OK のときだけ data が有効."""

    status: ReadStatus
    data: Any = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ReadStatus.OK

    def map(self, convert) -> ReadResult:
        """data を変換する. 変換に失敗した場合は CORRUPT を返す."""
        if not self.ok:
            return self
        try:
            return ReadResult(ReadStatus.OK, convert(self.data))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            reason = f"unexpected document shape: {e!r}"
            logger.error("JSON の形式が不正です: %s", reason)
            return ReadResult(ReadStatus.CORRUPT, reason=reason)


def load_json(path: Path) -> ReadResult:
    """JSON ファイルを読み込む.

    Returns:
        ファイルが無ければ EMPTY、読めなければ CORRUPT、それ以外は OK。
    """
    if not path.exists():
        return ReadResult(ReadStatus.EMPTY)

    try:
        with path.open("r", encoding="utf-8") as f:
            return ReadResult(ReadStatus.OK, json.load(f))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("JSON 読み込み失敗: path=%s, error=%s", path, e)
        return ReadResult(ReadStatus.CORRUPT, reason=str(e))


def write_json_atomic(path: Path, payload: Any) -> None:
    """JSON を一時ファイル経由でアトミックに書き込む.

    失敗時は一時ファイルを削除してから例外をそのまま送出する。
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(path.name + ".tmp")

    try:
        with temp_path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.replace(temp_path, path)
    except BaseException as e:
        logger.error("JSON 書き込み失敗: path=%s, error=%r", path, e)
        if temp_path.exists():
            temp_path.unlink()
        raise
