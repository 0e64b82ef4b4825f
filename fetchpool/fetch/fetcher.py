"""
Handles the low-level transfer of a single URL to a local file over HTTP and
judges whether the transfer produced a usable file.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import aiofiles.os
import aiohttp
from rich.markup import escape

from fetchpool.models.config import FetchConfig
from fetchpool.utils.formatting import format_size
from fetchpool.utils.path import create_dir, derive_filename

from .integrity import FileIntegrityChecker

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchOutcome:
    """The result value of one fetch. `message` is shown verbatim to pollers."""

    success: bool
    message: str
    path: Path | None = None
    size: int = 0

    @classmethod
    def failure(cls, message: str) -> "FetchOutcome":
        return cls(success=False, message=message)


def describe_error(error: BaseException) -> str:
    """Returns a short description of an exception, never an empty string."""
    return str(error) or type(error).__name__


class Fetcher:
    """
    Downloads one URL at a time into the configured download directory.

    All fetches share one aiohttp ClientSession, created on first use and
    sized to the worker budget. `fetch` never raises for network, HTTP or
    filesystem failures; they are returned as failed outcomes.
    """

    def __init__(self, config: FetchConfig):
        self.config = config
        self.download_dir = Path(config.download_dir)
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Gets or creates the shared ClientSession for this fetcher."""
        async with self._session_lock:
            if self._session and not self._session.closed:
                return self._session

            max_workers = self.config.max_workers
            connector = aiohttp.TCPConnector(
                limit=max_workers * 2,  # Total connections
                limit_per_host=max_workers,
                ttl_dns_cache=600,  # 10 minutes
            )
            timeout = aiohttp.ClientTimeout(
                total=self.config.total_timeout,
                connect=self.config.connect_timeout,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=timeout,
                headers={"Accept-Encoding": "gzip, deflate"},
            )
            log.debug(f"Created fetch pool with limit_per_host={max_workers}")
            return self._session

    async def close(self) -> None:
        """Closes the shared connection pool."""
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
                log.debug("Fetcher connection pool closed.")
            self._session = None

    async def __aenter__(self) -> "Fetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def fetch(self, url: str) -> FetchOutcome:
        """
        Streams `url` to disk and judges the result.

        The body is written chunk by chunk to a temporary sibling file, which is
        moved onto the destination once the stream completes. A fetch succeeds
        only on HTTP 200 with a non-empty file at the destination.
        """
        filename = derive_filename(url, self.config.fallback_extension)
        destination = self.download_dir / filename
        temp_path = self.download_dir / f"{filename}.{uuid.uuid4().hex[:8]}.part"
        log.debug(f"Fetching '{url}' -> '{destination}'")

        try:
            create_dir(self.download_dir)
            session = await self._get_session()
            async with session.get(url, allow_redirects=True) as response:
                if response.status != 200:
                    log.warning(
                        f"[yellow]✗ {escape(url)}: HTTP status {response.status}[/]"
                    )
                    return FetchOutcome.failure(
                        f"Failed: HTTP status {response.status}"
                    )

                async with aiofiles.open(temp_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(
                        self.config.chunk_size
                    ):
                        await f.write(chunk)

            if FileIntegrityChecker.file_size(str(temp_path)) <= 0:
                log.warning(f"[yellow]✗ {escape(url)}: empty response body[/]")
                return FetchOutcome.failure(f"Failed: empty response for {filename}")

            await aiofiles.os.replace(temp_path, destination)
        except aiohttp.ConnectionTimeoutError:
            log.warning(
                f"[yellow]✗ {escape(url)}: connection timed out after "
                f"{self.config.connect_timeout:g}s[/]"
            )
            return FetchOutcome.failure(
                f"Error: connection timed out after {self.config.connect_timeout:g}s"
            )
        except asyncio.TimeoutError:
            log.warning(
                f"[yellow]✗ {escape(url)}: timed out after "
                f"{self.config.total_timeout:g}s[/]"
            )
            return FetchOutcome.failure(
                f"Error: timed out after {self.config.total_timeout:g}s"
            )
        except (aiohttp.ClientError, OSError, ValueError) as e:
            log.warning(f"[yellow]✗ {escape(url)}: {describe_error(e)}[/]")
            return FetchOutcome.failure(f"Error: {describe_error(e)}")
        except Exception as e:
            log.error(
                f"[red]✗ Unexpected error fetching {escape(url)}: "
                f"{describe_error(e)}[/]",
                exc_info=log.getEffectiveLevel() == logging.DEBUG,
            )
            return FetchOutcome.failure(f"Error: {describe_error(e)}")
        finally:
            if await aiofiles.os.path.exists(temp_path):
                try:
                    await aiofiles.os.remove(temp_path)
                except OSError as e:
                    log.debug(f"Could not remove temporary file {temp_path}: {e}")

        if not FileIntegrityChecker.check_nonempty(str(destination)):
            return FetchOutcome.failure(f"Failed: {filename} missing after write")

        size = FileIntegrityChecker.file_size(str(destination))
        log.info(f"[green]✓ Saved[/] {escape(filename)} ({format_size(size)})")
        return FetchOutcome(
            success=True,
            message=f"Saved {filename} ({format_size(size)})",
            path=destination,
            size=size,
        )
