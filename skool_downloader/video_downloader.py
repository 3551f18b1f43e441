import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from .file_utils import file_exists_and_non_empty

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = {".mp4", ".m4v", ".mov", ".webm", ".mkv"}
FILENAME_TEMPLATE = "video-{index:02d}"


class DownloadError(Exception):
    """A single download attempt failed."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason} ({url})")


class YtDlpDownloader:
    """Fetches videos by running the yt-dlp command line tool, one URL at a time."""

    def __init__(self, executable: str = "yt-dlp", extra_args: Optional[Sequence[str]] = None):
        self.executable = executable
        self.extra_args = list(extra_args or [])

    def existing_video(self, dest_dir: Path, index: int) -> Optional[Path]:
        """Return an already downloaded, non-empty ``video-NN.*`` file, if any."""
        stem = FILENAME_TEMPLATE.format(index=index)
        for candidate in sorted(dest_dir.glob(f"{stem}.*")):
            if candidate.suffix.lower() in VIDEO_EXTENSIONS and file_exists_and_non_empty(candidate):
                return candidate
        return None

    def build_command(self, url: str, dest_dir: Path, index: int) -> List[str]:
        output_template = dest_dir / (FILENAME_TEMPLATE.format(index=index) + ".%(ext)s")
        return [self.executable, *self.extra_args, "-o", str(output_template), url]

    def download(self, url: str, dest_dir: Path, index: int) -> Path:
        """
        Download ``url`` into ``dest_dir`` as ``video-NN.<ext>``.

        :returns: Path of the video file on disk.
        :raises DownloadError: when yt-dlp is missing, fails, or leaves no file behind.
        """
        dest_dir = Path(dest_dir)
        existing = self.existing_video(dest_dir, index)
        if existing:
            logger.info("Skipping existing file %s", existing.name)
            return existing

        command = self.build_command(url, dest_dir, index)
        logger.debug("Running %s", " ".join(command))
        try:
            # yt-dlp output goes straight to the terminal so its progress bar stays visible
            result = subprocess.run(command, check=False)
        except FileNotFoundError as exc:
            raise DownloadError(url, f"{self.executable} is not installed") from exc
        except OSError as exc:
            raise DownloadError(url, f"cannot run {self.executable}: {exc}") from exc

        if result.returncode != 0:
            raise DownloadError(url, f"{self.executable} exited with code {result.returncode}")

        downloaded = self.existing_video(dest_dir, index)
        if downloaded is None:
            raise DownloadError(url, "download finished but no video file was written")
        return downloaded


__all__ = ["DownloadError", "YtDlpDownloader"]
