from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


CATALOG_FILE = "panoramas.json"


def base_data_dir() -> Path:
    env_dir = os.getenv("PANO_DATA_DIR")
    if env_dir:
        d = Path(env_dir)
    else:
        root = Path(__file__).resolve().parent.parent.parent
        d = root / "data" / "panoramas"
    d.mkdir(parents=True, exist_ok=True)
    return d


def job_dir(root: Path, job_id: str) -> Path:
    return root / job_id


def source_path(root: Path, job_id: str, filename: str) -> Path:
    return job_dir(root, job_id) / ("source" + Path(filename).suffix)


def catalog_path(root: Path) -> Path:
    return root / CATALOG_FILE


def krpano_exe() -> Optional[str]:
    return os.getenv("KRPANO_EXE") or None


def write_json(path: Path, obj: Any) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(tmp, path)


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
