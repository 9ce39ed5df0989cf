"""Batch TOC updates across markdown files."""

from __future__ import annotations

import glob
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .logging import get_logger
from .toc import TocOptions, needs_update, update

_logger = get_logger("batch")


class TocStatus(str, Enum):
    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    NO_MARKERS = "no_markers"
    FAILED = "failed"


@dataclass
class FileResult:
    """Outcome of a TOC update for one file."""

    path: Path
    status: TocStatus
    error: Optional[str] = None


@dataclass
class BatchSummary:
    results: List[FileResult] = field(default_factory=list)

    def count(self, status: TocStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    @property
    def failed(self) -> bool:
        return self.count(TocStatus.FAILED) > 0

    def counts(self) -> Dict[TocStatus, int]:
        return {status: self.count(status) for status in TocStatus}


def resolve_files(patterns: Sequence[str], root: Path) -> List[Path]:
    """Expand glob patterns relative to ``root`` into a sorted, unique file list."""
    found: Dict[Path, None] = {}
    for pattern in patterns:
        candidate = Path(pattern)
        base = candidate if candidate.is_absolute() else root / candidate
        if base.is_file():
            found[base] = None
            continue
        for match in glob.glob(str(base), recursive=True):
            path = Path(match)
            if path.is_file():
                found[path] = None
    return sorted(found)


def update_file(path: Path, options: TocOptions, *, dry_run: bool = False) -> FileResult:
    """Regenerate the TOC of a single file, reporting failures as results."""
    try:
        content = path.read_text(encoding="utf-8")
        if not needs_update(content):
            return FileResult(path=path, status=TocStatus.NO_MARKERS)
        updated = update(content, options)
        if updated == content:
            return FileResult(path=path, status=TocStatus.UP_TO_DATE)
        if not dry_run:
            path.write_text(updated, encoding="utf-8")
        return FileResult(path=path, status=TocStatus.UPDATED)
    except (OSError, UnicodeDecodeError) as exc:
        _logger.debug("TOC update failed for %s: %s", path, exc)
        return FileResult(path=path, status=TocStatus.FAILED, error=str(exc))


def update_files(
    paths: Iterable[Path],
    options: TocOptions | None = None,
    *,
    workers: int = 4,
    dry_run: bool = False,
) -> BatchSummary:
    """Update many files on a bounded worker pool; results keep input order."""
    options = options or TocOptions()
    path_list = list(paths)
    if not path_list:
        return BatchSummary()
    _logger.debug("Updating TOC in %d file(s) with %d worker(s)", len(path_list), workers)
    with ThreadPoolExecutor(max_workers=max(1, workers), thread_name_prefix="devtoc-toc") as pool:
        results = list(pool.map(lambda path: update_file(path, options, dry_run=dry_run), path_list))
    return BatchSummary(results=results)


__all__ = [
    "BatchSummary",
    "FileResult",
    "TocStatus",
    "resolve_files",
    "update_file",
    "update_files",
]
