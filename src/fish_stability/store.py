"""Tiered table store with sidecar metadata.

Manages read/write of CSV tables organized into tiers by processing stage:
  - raw/: Upstream extracts archived as received
  - cleaned/: Canonical long tables, one per dataset plus the combined table
  - derived/: Computed outputs, always recomputed (species matrices, diversity,
    variability results, taxon subsets)

Tables stay plain CSV; provenance lives in a sidecar ``.meta.json`` next to
each file (source, write time, and any parameters used to produce it). The
clean flow uses the recorded input modification time to skip extracts that
have not changed since they were last normalized.
"""

from __future__ import annotations

import json
import shutil
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003
from typing import Any

import pandas as pd


def input_mtime(src: Path) -> str:
    """Modification time of ``src`` as an ISO timestamp."""
    return datetime.fromtimestamp(src.stat().st_mtime, tz=UTC).isoformat()


class DataStore:
    """Manages read/write of table files with provenance metadata."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.raw = base_dir / "raw"
        self.cleaned = base_dir / "cleaned"
        self.derived = base_dir / "derived"

    def read_table(self, path: Path, dtype: dict[str, Any] | None = None) -> pd.DataFrame | None:
        """Read a CSV table, or None if the file doesn't exist.

        Pass ``dtype`` to keep identifier columns (site ids like ``"1"``) as strings.
        """
        full = self._resolve(path)
        if not full.exists():
            return None
        return pd.read_csv(full, dtype=dtype)

    def write_table(
        self,
        path: Path,
        table: pd.DataFrame,
        source: str,
        **params: Any,
    ) -> Path:
        """Write a table as CSV with a sidecar metadata file.

        Args:
            path: Relative path under base_dir (e.g. ``derived/diversity.csv``).
            table: DataFrame to write (index is not written).
            source: What produced the table (e.g. ``"normalize_survey"``).
            **params: Extra metadata fields (dataset, window width, value column).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(full, index=False)
        self._write_meta(full, source, rows=len(table), **params)
        return full

    def write_file(
        self,
        path: Path,
        src: Path,
        source: str,
        **params: Any,
    ) -> Path:
        """Store a file as-is with sidecar metadata.

        Copies ``src`` to the store location and writes a ``.meta.json``
        sidecar. Use for archiving upstream extracts.

        Args:
            path: Relative destination path (e.g. ``raw/sbc_fish.csv``).
            src: Source file to copy into the store.
            source: Data source identifier.
            **params: Extra metadata fields.

        Returns:
            Absolute path of the stored file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, full)
        self._write_meta(full, source, **params)
        return full

    def read_meta(self, path: Path) -> dict[str, Any]:
        """Metadata recorded for a stored file ({} if none)."""
        sidecar = self._sidecar(self._resolve(path))
        if not sidecar.exists():
            return {}
        with sidecar.open() as f:
            result: dict[str, Any] = json.load(f)
        return result.get("meta", {})

    def is_current(self, path: Path, src: Path) -> bool:
        """Check if a stored table was produced from ``src`` as it is now.

        Returns False if the table is missing, has no recorded input time,
        or ``src`` has been modified since.
        """
        full = self._resolve(path)
        if not full.exists() or not src.exists():
            return False
        recorded = self.read_meta(path).get("input_mtime")
        return recorded is not None and recorded == input_mtime(src)

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full

    @staticmethod
    def _sidecar(full: Path) -> Path:
        return full.with_suffix(full.suffix + ".meta.json")

    def _write_meta(self, full: Path, source: str, **params: Any) -> None:
        meta: dict[str, Any] = {
            "source": source,
            "written_at": datetime.now(UTC).isoformat(),
        }
        if params:
            meta.update(params)
        with self._sidecar(full).open("w") as f:
            json.dump({"meta": meta}, f, indent=2, default=str)
