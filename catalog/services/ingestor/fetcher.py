"""Download broker symbol-master files into the local data directory."""

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Union

import aiohttp

logger = logging.getLogger(__name__)


class DownloadError(Exception):
    """A symbol-master file could not be fetched."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to download {url}: {reason}")


async def download_file(session: aiohttp.ClientSession, url: str, destination: Path) -> int:
    """Write one response body to disk verbatim and return its size in bytes."""
    try:
        async with session.get(url) as response:
            if response.status < 200 or response.status >= 300:
                raise DownloadError(url, f"HTTP {response.status}")
            body = await response.read()
    except aiohttp.ClientError as e:
        raise DownloadError(url, str(e)) from e
    except asyncio.TimeoutError as e:
        raise DownloadError(url, "timed out") from e

    destination.write_bytes(body)
    logger.info(f"Downloaded {url} -> {destination} ({len(body)} bytes)")
    return len(body)


async def download_instruments(
    sources: Dict[str, str],
    data_dir: Union[str, Path],
    timeout: int = 120,
) -> List[Path]:
    """Fetch every configured source concurrently.

    Any single failure fails the whole download; files that did arrive are
    left in place and are picked up by the next ingestion run.
    """
    directory = Path(data_dir)
    directory.mkdir(parents=True, exist_ok=True)

    targets = [(url, directory / filename) for filename, url in sources.items()]
    logger.info(f"Downloading {len(targets)} instrument files into {directory}")

    client_timeout = aiohttp.ClientTimeout(total=timeout)
    async with aiohttp.ClientSession(timeout=client_timeout) as session:
        await asyncio.gather(*(download_file(session, url, path) for url, path in targets))

    logger.info(f"All {len(targets)} instrument files downloaded")
    return [path for _, path in targets]
