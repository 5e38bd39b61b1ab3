# backend/upload_server/services/media_pipeline/utils/ffmpeg_utils.py
"""
FFmpeg utilities for video derivatives.

Pure functions for ffmpeg/ffprobe command generation and probe parsing,
plus the async runner every external process goes through.
"""

import asyncio
import json
import math
import os
import signal
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ....enums import LoggerName, LogSource
from ....exceptions import CommandTimeoutError
from ....models import ProbeResult
from ...logger import get_service_logger
from .constants import (
    FALLBACK_DURATION_SECONDS,
    FALLBACK_SCREENSHOT_BATCH_FRAMES,
    FALLBACK_SPEED_FACTOR,
    GIF_COMPRESSION_LEVEL,
    GIF_FPS,
    GIF_WIDTH,
    PALETTE_MAX_COLORS,
    SCREENSHOT_COUNT,
    SCREENSHOT_WIDTH,
    TARGET_PREVIEW_SECONDS,
    TOOL_CHECK_TIMEOUT_SECONDS,
)

logger = get_service_logger(LoggerName.FFMPEG, LogSource.PIPELINE)

# Quiet output, overwrite targets
COMMON_FFMPEG_FLAGS = ["-hide_banner", "-loglevel", "error", "-y"]


@dataclass
class CommandResult:
    """Outcome of one external process"""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


def test_ffmpeg_available(executable: str = "ffmpeg") -> Tuple[bool, str]:
    """
    Test if an ffmpeg-family executable is available on the system.

    Returns:
        Tuple of (is_available, version_or_error_message)
    """
    try:
        result = subprocess.run(
            [executable, "-version"],
            capture_output=True,
            text=True,
            timeout=TOOL_CHECK_TIMEOUT_SECONDS,
        )
        if result.returncode == 0:
            version_line = result.stdout.split("\n")[0]
            return True, version_line
        else:
            return False, f"{executable} returned error code {result.returncode}"
    except FileNotFoundError:
        return False, f"{executable} not found in system PATH"
    except subprocess.TimeoutExpired:
        return False, f"{executable} version check timed out"
    except OSError as e:
        return False, f"Error checking {executable}: {str(e)}"


def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    """Kill the child and anything it spawned."""
    if process.returncode is not None:
        return
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


async def run_command(args: Sequence[str], timeout: float) -> CommandResult:
    """
    Run an external command in its own process group.

    A timeout or a cancellation of the awaiting task kills the whole
    process group and reaps the child before the error propagates.

    Args:
        args: Executable and arguments
        timeout: Seconds before the process group is killed

    Returns:
        CommandResult; a missing executable is reported as a failed result

    Raises:
        CommandTimeoutError: If the command exceeded ``timeout``
    """
    logger.debug(f"Running: {' '.join(args)}")

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as e:
        logger.error(f"Failed to start {args[0]}", exception=e)
        return CommandResult(returncode=-1, stderr=str(e))

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError:
        _kill_process_group(process)
        await process.wait()
        logger.warning(
            f"{args[0]} exceeded {timeout}s and was killed",
            extra_context={"command": list(args)},
        )
        raise CommandTimeoutError()
    except asyncio.CancelledError:
        _kill_process_group(process)
        await asyncio.shield(process.wait())
        raise

    result = CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
    if not result.success:
        logger.debug(
            f"{args[0]} exited with code {result.returncode}",
            extra_context={"stderr": result.stderr},
        )
    return result


# ====================================================================
# PROBE
# ====================================================================


def build_probe_command(ffprobe_path: str, input_path: str) -> List[str]:
    return [
        ffprobe_path,
        "-v",
        "error",
        "-show_entries",
        "format=duration:stream=duration",
        "-of",
        "json",
        input_path,
    ]


def parse_probe_output(stdout: str) -> Optional[str]:
    """
    Extract the duration from ffprobe JSON output.

    ``format.duration`` wins; containers that leave it out (fragmented MP4,
    some WebM muxers) still tend to carry a per-stream duration, so the
    longest positive stream duration is used next.

    Returns:
        The raw duration as reported, or None when neither section has one

    Raises:
        ValueError: If the output is not ffprobe JSON with a format or
            streams section
    """
    try:
        data = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise ValueError(f"Unreadable ffprobe output: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("ffprobe output is not an object")
    format_section = data.get("format")
    streams = data.get("streams")
    if not isinstance(format_section, dict) and not isinstance(streams, list):
        raise ValueError("ffprobe output has no format or streams section")

    if isinstance(format_section, dict) and format_section.get("duration") is not None:
        return str(format_section["duration"])

    return _longest_stream_duration(streams or [])


def _longest_stream_duration(streams: list) -> Optional[str]:
    best = None
    for stream in streams:
        if not isinstance(stream, dict) or stream.get("duration") is None:
            continue
        try:
            value = float(stream["duration"])
        except (TypeError, ValueError):
            continue
        if math.isfinite(value) and value > 0 and (best is None or value > best[0]):
            best = (value, str(stream["duration"]))
    return best[1] if best is not None else None


def resolve_duration(raw_duration: Optional[str]) -> ProbeResult:
    """Use the reported duration when it is a positive number, else the fallback."""
    try:
        duration = float(raw_duration) if raw_duration is not None else 0.0
    except ValueError:
        duration = 0.0

    if not math.isfinite(duration) or duration <= 0:
        return ProbeResult(
            duration_seconds=FALLBACK_DURATION_SECONDS,
            fallback_used=True,
            raw_duration=raw_duration,
        )
    return ProbeResult(duration_seconds=duration, raw_duration=raw_duration)


def calculate_speed_factor(duration_seconds: float) -> float:
    """Retime factor that squeezes the whole clip into the preview length."""
    speed = duration_seconds / TARGET_PREVIEW_SECONDS
    if not math.isfinite(speed) or speed <= 0:
        return FALLBACK_SPEED_FACTOR
    return speed


def calculate_screenshot_timestamps(
    duration_seconds: float, count: int = SCREENSHOT_COUNT
) -> List[float]:
    """Evenly spaced interior points: 25/50/75 % of the duration for three frames."""
    return [duration_seconds * i / (count + 1) for i in range(1, count + 1)]


def format_number(value: float) -> str:
    """Render a float for an ffmpeg argument without trailing zeros."""
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return text or "0"


# ====================================================================
# SCREENSHOTS, PALETTE AND GIF
# ====================================================================


def build_screenshot_command(
    ffmpeg_path: str, input_path: str, timestamp: float, output_path: str
) -> List[str]:
    return [
        ffmpeg_path,
        *COMMON_FFMPEG_FLAGS,
        "-ss",
        format_number(timestamp),
        "-i",
        input_path,
        "-frames:v",
        "1",
        "-vf",
        f"scale={SCREENSHOT_WIDTH}:-1",
        output_path,
    ]


def calculate_fallback_batch_sizes(count: int = SCREENSHOT_COUNT) -> List[int]:
    """Growing frame windows for screenshots taken without a known duration."""
    return [FALLBACK_SCREENSHOT_BATCH_FRAMES * i for i in range(1, count + 1)]


def build_fallback_screenshot_command(
    ffmpeg_path: str, input_path: str, batch_frames: int, output_path: str
) -> List[str]:
    """
    Screenshot without seeking.

    The ``thumbnail`` filter flushes its best frame at end of stream, so a
    clip shorter than the window still produces an image.
    """
    return [
        ffmpeg_path,
        *COMMON_FFMPEG_FLAGS,
        "-i",
        input_path,
        "-frames:v",
        "1",
        "-vf",
        f"thumbnail={batch_frames},scale={SCREENSHOT_WIDTH}:-1",
        output_path,
    ]


def build_retime_filter(speed_factor: float) -> str:
    return (
        f"setpts=(PTS-STARTPTS)/{format_number(speed_factor)},"
        f"fps={GIF_FPS},scale={GIF_WIDTH}:-1:flags=lanczos"
    )


def build_palette_command(
    ffmpeg_path: str, input_path: str, speed_factor: float, palette_path: str
) -> List[str]:
    filter_chain = build_retime_filter(speed_factor)
    return [
        ffmpeg_path,
        *COMMON_FFMPEG_FLAGS,
        "-i",
        input_path,
        "-vf",
        f"{filter_chain},palettegen=max_colors={PALETTE_MAX_COLORS}",
        palette_path,
    ]


def build_gif_command(
    ffmpeg_path: str,
    input_path: str,
    palette_path: str,
    speed_factor: float,
    output_path: str,
) -> List[str]:
    filter_chain = build_retime_filter(speed_factor)
    return [
        ffmpeg_path,
        *COMMON_FFMPEG_FLAGS,
        "-i",
        input_path,
        "-i",
        palette_path,
        "-lavfi",
        f"[0:v]{filter_chain}[x];[x][1:v]paletteuse",
        "-c:v",
        "gif",
        "-compression_level",
        str(GIF_COMPRESSION_LEVEL),
        "-f",
        "gif",
        output_path,
    ]
