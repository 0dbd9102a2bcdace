"""
Network download helpers with existence probing and progress tracking.

This module provides:
- HEAD-style existence probes (status >= 400 means "not found")
- Streaming downloads to a temporary ``.part`` file, renamed on success
- Progress reporting (bytes, percentage, speed, ETA)

There is no resumption and no retry: a failed transfer removes the partial
file and fails the whole run.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

from vksdk.core.exceptions import DownloadError
from vksdk.core.http import DEFAULT_TIMEOUT, create_session

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def probe_url(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> int:
    """
    Probe a URL with a HEAD request and return its status code.

    Redirects are followed, so the status is the one of the final resource.

    Args:
        url: URL to probe
        session: Optional session (a new one is created if None)
        timeout: Request timeout in seconds

    Returns:
        HTTP status code

    Raises:
        DownloadError: If the request itself fails (DNS, connection, timeout)
    """
    session = session or create_session()
    logger.debug(f"HEAD {url}")
    try:
        response = session.head(url, allow_redirects=True, timeout=timeout)
    except RequestException as e:
        raise DownloadError(f"Could not reach {url}: {e}") from e
    return response.status_code


def download_file(
    url: str,
    destination: Path,
    session: Optional[requests.Session] = None,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> Path:
    """
    Stream a URL to a local file.

    The body is written to ``<destination>.part`` and renamed once complete,
    so ``destination`` never holds a truncated file.

    Args:
        url: URL to download from
        destination: Local path to save file
        session: Optional session (a new one is created if None)
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If the transfer fails
        ValueError: If URL or destination is empty

    Example:
        >>> download_file(
        ...     "https://sdk.lunarg.com/sdk/download/1.3.250.1/linux/vulkansdk-linux-x86_64-1.3.250.1.tar.gz",
        ...     Path("downloads/vulkansdk-linux-x86_64-1.3.250.1.tar.gz"),
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(destination.name + ".part")
    session = session or create_session()

    logger.info(f"Downloading from {url}")

    try:
        _stream_to_file(url, partial, session, progress_callback, timeout)
        partial.replace(destination)
    except (RequestException, OSError) as e:
        logger.error(f"Error during download: {e}")
        partial.unlink(missing_ok=True)
        raise DownloadError(f"Download of {url} failed: {e}") from e

    logger.info(f"Download complete: {destination}")
    return destination


def _stream_to_file(
    url: str,
    destination: Path,
    session: requests.Session,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: int,
) -> None:
    """
    Perform the streaming GET and write chunks to ``destination``.

    Raises:
        RequestException: If the HTTP request fails or returns an error status
        OSError: If the file cannot be written
    """
    with session.get(url, stream=True, timeout=timeout, allow_redirects=True) as response:
        response.raise_for_status()

        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)

                # Report progress (max once per 0.5 seconds to avoid spam)
                current_time = time.time()
                if progress_callback and (
                    current_time - last_progress_time >= 0.5 or downloaded == total_size
                ):
                    elapsed = current_time - start_time
                    speed = downloaded / elapsed if elapsed > 0 else 0
                    remaining = total_size - downloaded if total_size > 0 else 0
                    eta = remaining / speed if speed > 0 else 0

                    progress_callback(
                        DownloadProgress(
                            bytes_downloaded=downloaded,
                            total_bytes=total_size if total_size > 0 else downloaded,
                            percentage=(downloaded / total_size * 100)
                            if total_size > 0
                            else 0,
                            speed_bps=speed,
                            eta_seconds=eta,
                        )
                    )
                    last_progress_time = current_time


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0 and progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB " f"at {speed_mbps:.1f} MB/s"
