from typing import Any, List, Mapping

import pandas as pd

from creche_survey.schemas.datasets import required_export_keys


class DatasetTooLargeError(ValueError):
    pass


def enforce_dimensions(df: pd.DataFrame, max_rows: int, max_columns: int) -> None:
    if len(df.index) > max_rows or len(df.columns) > max_columns:
        raise DatasetTooLargeError(
            f"Dataset too large: rows={len(df.index)}, cols={len(df.columns)}, "
            f"limits rows<={max_rows}, cols<={max_columns}"
        )


def missing_export_keys(payload: Any) -> List[str]:
    """Top-level export keys that are absent or null."""
    if not isinstance(payload, Mapping):
        return required_export_keys()
    return [key for key in required_export_keys() if payload.get(key) is None]
