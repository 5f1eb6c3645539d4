from __future__ import annotations

import stat
import time
from pathlib import Path

import pytest
from PIL import Image

from pano_tour.work.jobs import IngestionPipeline
from pano_tour.work.krpano import KrpanoTool
from pano_tour.work.runner import JobRunner

FAKE_MAKEPANO = """#!/bin/sh
out=""
for a in "$@"; do
  case "$a" in
    -outputpath=*) out="${a#-outputpath=}" ;;
  esac
done
echo "krpano tools fake"
echo "loading image..."
sleep %(delay)s
echo ""
echo "making cube faces..." >&2
echo "level 1 tiles"
mkdir -p "$out/vtour"
echo "<krpano/>" > "$out/vtour/tour.xml"
exit %(code)d
"""


def make_tool(directory: Path, code: int = 0, delay: float = 0, name: str = "krpanotools") -> Path:
    path = directory / name
    path.write_text(FAKE_MAKEPANO % {"code": code, "delay": delay})
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def make_image(path: Path, width: int, height: int, fmt: str = "JPEG") -> Path:
    Image.new("RGB", (width, height), (40, 90, 160)).save(path, fmt)
    return path


def wait_finished(pipeline: IngestionPipeline, job_id: str, timeout: float = 10.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        job = pipeline.get_status(job_id)
        if job is not None and job.finished:
            return job
        time.sleep(0.02)
    raise AssertionError(f"job {job_id} did not finish")


@pytest.fixture
def root(tmp_path):
    d = tmp_path / "panoramas"
    d.mkdir()
    return d


@pytest.fixture
def tool_path(tmp_path):
    return make_tool(tmp_path)


@pytest.fixture
def pipeline(root, tool_path):
    p = IngestionPipeline(root=root, tool=KrpanoTool(str(tool_path)), runner=JobRunner(max_workers=2))
    yield p
    p.runner.wait(timeout=10)
    p.shutdown()
