# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
modinput.core.config
====================

Typed configuration for `EventWriter`.
- No external deps; optional JSON file loading.
- Small env overrides for convenience.

If a config file path is not provided or not found, defaults are used.
"""

import codecs
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .logging import get_logger
from .types import StrPath

log = get_logger("config")


def _try_load_json(path: Path | None) -> dict[str, Any]:
    if not path or not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        # Fail soft: env and explicit overrides still apply.
        log.warning("config file ignored", event="config.load.failed", path=str(path), error=str(e))
        return {}
    if not isinstance(data, dict):
        log.warning("config file ignored", event="config.load.failed", path=str(path), error="not a JSON object")
        return {}
    return data


def _int_env(name: str) -> int | None:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


# ---------------------------------------------------------------------------


@dataclass
class WriterConfig:
    """Capacities and encoding for the two output channels of an EventWriter."""

    # ---- Channels
    out_capacity_bytes: int = 1024 * 1024
    err_capacity_bytes: int = 256 * 1024

    # ---- Text
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        if not isinstance(self.out_capacity_bytes, int) or self.out_capacity_bytes <= 0:
            raise ValueError("out_capacity_bytes must be a positive integer")
        if not isinstance(self.err_capacity_bytes, int) or self.err_capacity_bytes <= 0:
            raise ValueError("err_capacity_bytes must be a positive integer")
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {self.encoding!r}") from e

    @classmethod
    def load(cls, path: StrPath | None = None, *, overrides: dict[str, Any] | None = None) -> WriterConfig:
        """
        Load config from JSON file (if provided), then apply env and overrides.

        Env overrides:
          - MODINPUT_OUT_CAPACITY (bytes)
          - MODINPUT_ERR_CAPACITY (bytes)
          - MODINPUT_ENCODING
        """
        data: dict[str, Any] = {}
        data.update(_try_load_json(Path(path) if path else None))

        out_cap = _int_env("MODINPUT_OUT_CAPACITY")
        if out_cap is not None:
            data["out_capacity_bytes"] = out_cap
        err_cap = _int_env("MODINPUT_ERR_CAPACITY")
        if err_cap is not None:
            data["err_capacity_bytes"] = err_cap
        if os.getenv("MODINPUT_ENCODING"):
            data["encoding"] = os.environ["MODINPUT_ENCODING"]

        if overrides:
            data.update(overrides)

        return cls(**data)
