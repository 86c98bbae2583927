"""
CSV Export

Turns export rows into the downloadable delimited-text artifact.

pandas handles the quoting: any field containing a comma, a quote or a
line break is wrapped in quotes, with embedded quotes doubled.
"""

import io
from pathlib import Path
from typing import Iterable, Optional, Sequence, TextIO, Union

import pandas as pd

from fintrack.config import get_settings


EXPORT_HEADER = ["Tipo", "Descrição", "Valor", "Categoria", "Data"]

CsvTarget = Union[str, Path, TextIO]


def rows_to_frame(rows: Iterable[Sequence[str]]) -> pd.DataFrame:
    """Collect export rows into a DataFrame with the export header."""
    return pd.DataFrame([list(row) for row in rows], columns=EXPORT_HEADER, dtype=object)


def write_csv(rows: Iterable[Sequence[str]], target: CsvTarget) -> int:
    """
    Write rows as CSV to a path or an open text stream.

    Returns:
        Number of data rows written (header excluded)
    """
    frame = rows_to_frame(rows)
    if isinstance(target, (str, Path)):
        frame.to_csv(target, index=False, lineterminator="\n", encoding="utf-8")
    else:
        frame.to_csv(target, index=False, lineterminator="\n")
    return len(frame)


def export_csv_text(rows: Iterable[Sequence[str]]) -> str:
    """Render rows as one CSV string."""
    buffer = io.StringIO()
    write_csv(rows, buffer)
    return buffer.getvalue()


def export_to_directory(
    rows: Iterable[Sequence[str]],
    directory: Union[str, Path],
    filename: Optional[str] = None,
) -> Path:
    """
    Write the export file into a directory.

    The file name defaults to the configured export filename
    (fintrack_transacoes.csv).
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (filename or get_settings().export.filename)
    write_csv(rows, path)
    return path
