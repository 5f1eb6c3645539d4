from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

from pano_tour.work.errors import ToolConfigError
from pano_tour.work.storage import krpano_exe

logger = logging.getLogger(__name__)

# Checked in order against every output line; first hit wins.
# Tool output order is not guaranteed, so progress can move backwards.
PROGRESS_MILESTONES: Tuple[Tuple[str, int], ...] = (
    ("loading", 50),
    ("making", 60),
    ("level", 80),
)


def progress_for_line(line: str, milestones: Sequence[Tuple[str, int]] = PROGRESS_MILESTONES) -> Optional[int]:
    for keyword, percent in milestones:
        if keyword in line:
            return percent
    return None


class KrpanoTool:
    """
    Runs `krpanotools makepano` for one job and reports its output line by line.

    There is no timeout: a hung tool blocks the calling job forever.
    """

    def __init__(self, tool_path: Optional[str] = None) -> None:
        self._tool_path = tool_path

    def resolve(self) -> str:
        path = self._tool_path if self._tool_path is not None else krpano_exe()
        if not path:
            raise ToolConfigError("krpano tools path is not configured, set KRPANO_EXE")
        if not Path(path).exists():
            raise ToolConfigError(f"krpano tools not found: {path}")
        return path

    def command(self, tool: str, input_path: Path, output_dir: Path, max_dimension: int) -> list[str]:
        return [
            tool,
            "makepano",
            f"-outputpath={output_dir}",
            f"-maxsize={max_dimension}",
            f"-maxcubesize={max_dimension}",
            str(input_path),
        ]

    def convert(
        self,
        job_id: str,
        input_path: Path,
        output_dir: Path,
        max_dimension: int,
        on_output: Callable[[str], None],
    ) -> bool:
        cmd = self.command(self.resolve(), input_path, output_dir, max_dimension)
        logger.info("job %s: running %s", job_id, " ".join(cmd))

        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
            errors="replace",
        )
        with proc:
            for raw in proc.stdout:
                line = raw.strip()
                if not line:
                    continue
                logger.info("krpano[%s]: %s", job_id, line)
                on_output(line)
            returncode = proc.wait()

        if returncode != 0:
            logger.error("job %s: krpano exited with code %s", job_id, returncode)
        return returncode == 0
