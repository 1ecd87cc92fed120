"""
Local storage of stage results.

Each completed stage is written to ``<out_dir>/<input file name>/<stage>``:
text results verbatim, structured results as tab-indented JSON, both with a
single trailing newline.
"""

import json
from pathlib import Path
from typing import Any

from hybsearch.errors import FilesystemError


class ResultPersister:
    """Writes stage results under a destination directory."""

    def prepare_destination(self, out_dir: Path, input_file: Path) -> Path:
        """Create and return the per-run directory ``out_dir/<basename(input_file)>``."""
        dest_dir = Path(out_dir) / Path(input_file).name
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Could not create output directory {dest_dir}: {e}") from e
        return dest_dir

    def persist(self, dest_dir: Path, stage: str, result: Any) -> Path:
        """Write one stage result, replacing any earlier file for the same stage."""
        target = self._stage_path(dest_dir, stage)

        if isinstance(result, str):
            content = result + "\n"
        else:
            try:
                content = json.dumps(result, indent="\t", ensure_ascii=False) + "\n"
            except (TypeError, ValueError) as e:
                raise FilesystemError(f"Result of stage {stage!r} is not serializable: {e}") from e

        try:
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise FilesystemError(f"Could not write result of stage {stage!r} to {target}: {e}") from e
        return target

    def _stage_path(self, dest_dir: Path, stage: str) -> Path:
        # Stage names become file names directly under dest_dir
        if not stage or stage in (".", "..") or Path(stage).name != stage or "\\" in stage:
            raise FilesystemError(f"Stage name cannot be used as a file name: {stage!r}")
        return Path(dest_dir) / stage
