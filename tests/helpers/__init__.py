from .util import DATA_DIR, data_path, parse_stream, read_data

__all__ = [
    "DATA_DIR",
    "data_path",
    "parse_stream",
    "read_data",
]
