import os
from pathlib import Path
from typing import Literal


__all__ = ["DATA_DIR_ENV", "get_data_dir", "get_dataset_path"]


DATA_DIR_ENV = "PHONE_TLBX_DATA_DIR"

_DATASET_MAP: dict[str, str] = {
    "phones": "cellphone.csv",
}


def get_data_dir() -> Path:
    """Get the path to the data directory.

    ``$PHONE_TLBX_DATA_DIR`` takes precedence over the ``_data`` directory at
    the repository root.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).resolve()
    return (Path(__file__).parents[2] / "_data").resolve()


def get_dataset_path(filename: Literal["phones"] | str) -> Path:  # noqa: PYI051
    """Get the full path to a dataset file in the data directory.

    Args:
        filename: Key to known dataset or custom filename

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    ds_path = get_data_dir() / _DATASET_MAP.get(filename, filename)
    if not ds_path.exists():
        raise FileNotFoundError(f"Dataset file '{filename}' not found at {ds_path}")
    return ds_path
