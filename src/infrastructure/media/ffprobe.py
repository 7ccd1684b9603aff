"""FFprobe-based media duration probe."""

import asyncio
import json
import subprocess
from pathlib import Path

from src.infrastructure.media.base import DurationProbeBase, MediaStoreError


class FFprobeDurationProbe(DurationProbeBase):
    """Reads container duration with ffprobe.

    Requires ffprobe to be installed and available in PATH.
    """

    def __init__(self, ffprobe_path: str = "ffprobe") -> None:
        self._ffprobe = ffprobe_path

    async def probe_duration(self, path: Path) -> float:
        """Return the container duration in seconds."""
        cmd = [
            self._ffprobe,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            str(path),
        ]

        loop = asyncio.get_event_loop()
        try:
            result = await loop.run_in_executor(
                None,
                lambda: subprocess.run(cmd, capture_output=True, check=True),
            )
        except (OSError, subprocess.CalledProcessError) as e:
            raise MediaStoreError("probe", str(path), str(e)) from e

        try:
            format_info = json.loads(result.stdout).get("format", {})
            return float(format_info["duration"])
        except (ValueError, KeyError, TypeError) as e:
            raise MediaStoreError("probe", str(path), "no duration reported") from e
