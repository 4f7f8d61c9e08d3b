from .paths import get_data_dir, get_dataset_path


__all__ = [
    "get_data_dir",
    "get_dataset_path",
]
