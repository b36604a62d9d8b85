import csv
import io
import os
from pathlib import Path
from typing import List, Optional, Tuple, Union

import pandas as pd

from creche_survey.config.observability import log_debug
from creche_survey.config.settings import settings
from creche_survey.schemas.survey import Cell
from creche_survey.services.validators import enforce_dimensions

Grid = Tuple[List[Optional[str]], List[List[Cell]]]

SPREADSHEET_EXTENSIONS = {".xls", ".xlsx"}
TEXT_EXTENSIONS = {".csv", ".tsv", ".txt", ""}
# Tried in order; Excel "CSV (point-virgule)" exports are cp1252
TEXT_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


class UnsupportedFileType(ValueError):
    pass


def _detect_separator(sample: str) -> str:
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=";,|\t")
        return dialect.delimiter
    except csv.Error:
        return ","


def _read_text(data: bytes, sep: str) -> pd.DataFrame:
    for encoding in TEXT_ENCODINGS:
        try:
            # index_col=False keeps trailing separators from shifting the columns
            return pd.read_csv(
                io.BytesIO(data),
                sep=sep,
                header=None,
                dtype=str,
                keep_default_na=False,
                index_col=False,
                encoding=encoding,
            )
        except UnicodeDecodeError:
            log_debug("csv_encoding_rejected", encoding=encoding)
    raise UnsupportedFileType("Encodage du fichier texte non reconnu")


def read_bytes_to_df(data: bytes, filename: Optional[str]) -> pd.DataFrame:
    """Decode a spreadsheet without interpreting its first row as headers."""
    extension = os.path.splitext(filename or "")[1].lower()
    if extension in SPREADSHEET_EXTENSIONS:
        df = pd.read_excel(io.BytesIO(data), header=None, dtype=object)
    elif extension in TEXT_EXTENSIONS:
        sample = data[:1024].decode(errors="ignore")
        sep = _detect_separator(sample)
        try:
            df = _read_text(data, sep)
        except pd.errors.EmptyDataError:
            df = pd.DataFrame()
    else:
        raise UnsupportedFileType(f"Unsupported file type: {extension or 'unknown'}")
    # The header row is not a data row
    enforce_dimensions(df.iloc[1:], max_rows=settings.max_rows, max_columns=settings.max_columns)
    return df


def _native(value: object) -> Cell:
    if value is None or (isinstance(value, float) and pd.isna(value)) or value is pd.NaT:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    return value


def dataframe_to_grid(df: pd.DataFrame) -> Grid:
    """Split a headerless frame into its header row and data rows of plain cells."""
    if df.empty:
        return [], []
    records = df.astype(object).values.tolist()
    headers = [None if _native(h) is None else str(h).strip() for h in records[0]]
    rows = [[_native(cell) for cell in record] for record in records[1:]]
    return headers, rows


def read_bytes_to_grid(data: bytes, filename: Optional[str]) -> Grid:
    return dataframe_to_grid(read_bytes_to_df(data, filename))


def read_path_to_grid(path: Union[str, Path]) -> Grid:
    path = Path(path)
    return read_bytes_to_grid(path.read_bytes(), path.name)
