from pathlib import Path
from xml.etree import ElementTree as ET

from modinput.io.writer import STREAM_CLOSE
from modinput.io.xmlutil import read_file

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


def data_path(name: str) -> Path:
    return DATA_DIR / name


def read_data(name: str) -> str:
    return read_file(__file__, "..", "data", name)


def parse_stream(raw: bytes, encoding: str = "utf-8") -> ET.Element:
    """Close the open <stream> envelope of a records snapshot and parse it."""
    return ET.fromstring(raw.decode(encoding) + STREAM_CLOSE)
