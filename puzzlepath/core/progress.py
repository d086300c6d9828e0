from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from puzzlepath.core.levels import Family
from puzzlepath.core.scoring import MAX_STARS

logger = logging.getLogger(__name__)

STORAGE_KEYS: Dict[Family, str] = {
    Family.BALANCE: "balance_beam_data_v1",
    Family.COLORING: "fraction_coloring_data_v1",
    Family.GARDEN: "fraction_garden_data_v1",
    Family.SMASH: "fraction_smash_data_v2",
}


def storage_key(family: Union[Family, str]) -> str:
    return STORAGE_KEYS[Family(family)]


def default_progress_path() -> Path:
    return Path.home() / ".puzzlepath" / "progress.json"


@dataclass(frozen=True)
class ProgressRecord:
    """Furthest unlocked level and best stars per level for one family."""

    unlocked_level_index: int = 0
    best_stars: Mapping[int, int] = field(default_factory=dict)

    def is_unlocked(self, level_index: int) -> bool:
        return 0 <= level_index <= self.unlocked_level_index

    def stars_for(self, level_index: int) -> int:
        return int(self.best_stars.get(level_index, 0))

    @property
    def total_stars(self) -> int:
        return sum(self.best_stars.values())

    def to_payload(self) -> Dict[str, Any]:
        return {
            "unlockedLevelIndex": self.unlocked_level_index,
            "bestStars": {str(k): v for k, v in sorted(self.best_stars.items())},
        }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_record(entry: Any) -> Optional[ProgressRecord]:
    """Decode a stored record; None when it is not a valid record.

    Records written by the first web versions used ``unlockedIndex``/``scores``
    and are read the same way.
    """
    if not isinstance(entry, dict):
        return None
    unlocked = entry.get("unlockedLevelIndex", entry.get("unlockedIndex", 0))
    raw_stars = entry.get("bestStars", entry.get("scores", {}))
    if not _is_int(unlocked) or unlocked < 0 or not isinstance(raw_stars, dict):
        return None

    best: Dict[int, int] = {}
    for key, value in raw_stars.items():
        try:
            index = int(key)
        except (TypeError, ValueError):
            return None
        if index < 0 or not _is_int(value) or not 1 <= value <= MAX_STARS:
            return None
        best[index] = value
    return ProgressRecord(unlocked_level_index=unlocked, best_stars=best)


class ProgressStore:
    """Per-family progress persisted to disk across app restarts.

    File: ~/.puzzlepath/progress.json, one record per family under its
    namespaced key. A missing or unreadable record loads as the default.
    """

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path or default_progress_path()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

    def load(self, family: Union[Family, str]) -> ProgressRecord:
        key = storage_key(family)
        entry = self._read_document().get(key)
        if entry is None:
            return ProgressRecord()
        record = parse_record(entry)
        if record is None:
            logger.warning("Ignoring unreadable progress record %s", key)
            return ProgressRecord()
        return record

    def record_completion(
        self,
        family: Union[Family, str],
        level_index: int,
        stars_earned: int,
    ) -> ProgressRecord:
        """Merge a passed level into the stored record and return the new record."""
        if level_index < 0:
            raise ValueError(f"level_index must be non-negative, got {level_index}")
        if not 1 <= stars_earned <= MAX_STARS:
            raise ValueError(f"stars_earned must be in 1..{MAX_STARS}, got {stars_earned}")

        key = storage_key(family)
        document = self._read_document()
        entry = document.get(key)
        current = parse_record(entry) or ProgressRecord()

        best = dict(current.best_stars)
        best[level_index] = max(best.get(level_index, 0), stars_earned)
        updated = ProgressRecord(
            unlocked_level_index=max(current.unlocked_level_index, level_index + 1),
            best_stars=best,
        )

        # Keep fields added by newer versions; legacy names are superseded.
        payload = dict(entry) if isinstance(entry, dict) else {}
        payload.pop("unlockedIndex", None)
        payload.pop("scores", None)
        payload.update(updated.to_payload())
        document[key] = payload
        self._write_document(document)
        logger.info(
            "Recorded %s level %d: %d stars, unlocked up to %d",
            key,
            level_index,
            updated.stars_for(level_index),
            updated.unlocked_level_index,
        )
        return updated

    def reset(self, family: Optional[Union[Family, str]] = None) -> None:
        """Clear one family, or every family when *family* is None."""
        if family is None:
            self._write_document({})
            return
        document = self._read_document()
        document.pop(storage_key(family), None)
        self._write_document(document)

    def _read_document(self) -> Dict[str, Any]:
        if not self._file_path.exists():
            return {}
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Could not load progress from %s: not a JSON object", self._file_path)
            return {}
        return payload

    def _write_document(self, document: Dict[str, Any]) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._file_path.parent,
                prefix=".progress-",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                json.dump(document, fh, indent=2)
            os.replace(tmp_name, self._file_path)
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)


class MemoryProgressStore(ProgressStore):
    """Same behaviour as ProgressStore, kept in a dict instead of a file."""

    def __init__(self, document: Optional[Dict[str, Any]] = None) -> None:
        self._document: Dict[str, Any] = copy.deepcopy(document) if document else {}

    @property
    def document(self) -> Dict[str, Any]:
        return copy.deepcopy(self._document)

    def _read_document(self) -> Dict[str, Any]:
        return copy.deepcopy(self._document)

    def _write_document(self, document: Dict[str, Any]) -> None:
        self._document = copy.deepcopy(document)
