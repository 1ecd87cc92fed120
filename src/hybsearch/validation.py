"""
Sequence file validation utilities.

The server is the authority on what it can parse; these checks only catch
obvious mistakes before a connection is spent on them.
"""

from pathlib import Path
from typing import Optional

from hybsearch.errors import FilesystemError


def validate_sequence_file(file_path: Path) -> None:
    """Validate that the input file is accessible and non-empty.

    Args:
        file_path: Path to the GenBank or FASTA file

    Raises:
        FilesystemError: If the file is missing, not a regular file, or empty
    """
    path = Path(file_path)

    if not path.exists():
        raise FilesystemError(f"Input file not found: {file_path}")

    if not path.is_file():
        raise FilesystemError(f"Path is not a file: {file_path}")

    if path.stat().st_size == 0:
        raise FilesystemError(f"Input file is empty: {file_path}")


def read_sequence_file(file_path: Path) -> str:
    """Read the whole input file as UTF-8 text."""
    validate_sequence_file(file_path)
    try:
        return Path(file_path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise FilesystemError(f"Input file is not UTF-8 text: {file_path}: {e}") from e
    except OSError as e:
        raise FilesystemError(f"Cannot read input file {file_path}: {e}") from e


def detect_sequence_format(text: str) -> Optional[str]:
    """Guess whether ``text`` is GenBank or FASTA from its first non-blank line."""
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("LOCUS"):
            return "genbank"
        if stripped.startswith(">"):
            return "fasta"
        return None
    return None
