"""Streaming download of remote audio segments into a workspace."""

from __future__ import annotations

import contextlib
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

import httpx

from ..merge.merge_errors import FetchError
from ..merge.merge_models import FetchedAsset

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 180.0
CHUNK_SIZE = 64 * 1024
MAX_BASENAME_BYTES = 200


@dataclass(slots=True)
class Fetcher:
    """Download one segment at a time with a fixed network timeout."""

    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    chunk_size: int = CHUNK_SIZE
    transport: httpx.AsyncBaseTransport | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    async def fetch(self, url: str, destination_dir: Path, *, ordinal: int) -> FetchedAsset:
        """Stream ``url`` to ``destination_dir`` and return the local asset."""
        scheme = urlparse(url).scheme.lower()
        if scheme not in ("http", "https"):
            raise FetchError(f"segment {ordinal}: unsupported locator '{url}'")

        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FetchError(f"segment {ordinal}: download directory unavailable") from exc
        target = destination_dir / derive_filename(url, ordinal)
        partial = target.with_name(target.name + ".part")

        self.log.info(
            "merge.fetch.start",
            extra={"ordinal": ordinal, "url": url, "path": str(target)},
        )
        size = 0
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        raise FetchError(
                            f"segment {ordinal}: GET {url} returned status {response.status_code}"
                        )
                    with partial.open("wb") as sink:
                        async for chunk in response.aiter_bytes(self.chunk_size):
                            sink.write(chunk)
                            size += len(chunk)
            partial.replace(target)
        except FetchError:
            _discard(partial)
            raise
        except httpx.TimeoutException as exc:
            _discard(partial)
            raise FetchError(
                f"segment {ordinal}: GET {url} timed out after {self.timeout_seconds:g}s"
            ) from exc
        except (httpx.HTTPError, OSError) as exc:
            _discard(partial)
            raise FetchError(
                f"segment {ordinal}: GET {url} failed ({type(exc).__name__})"
            ) from exc

        self.log.info(
            "merge.fetch.completed",
            extra={"ordinal": ordinal, "url": url, "size_bytes": size},
        )
        return FetchedAsset(source_url=url, local_path=target, ordinal=ordinal)


def derive_filename(url: str, ordinal: int) -> str:
    """Name the local file after the URL path, prefixed by its ordinal.

    Falls back to a random name when the path has no usable basename, or one
    the filesystem would reject (too long, control characters).
    """
    basename = PurePosixPath(unquote(urlparse(url).path)).name
    if not _usable_basename(basename):
        basename = f"{uuid.uuid4().hex}.bin"
    return f"{ordinal}_{basename}"


def _usable_basename(name: str) -> bool:
    if name in ("", ".", ".."):
        return False
    if len(name.encode("utf-8", errors="surrogatepass")) > MAX_BASENAME_BYTES:
        return False
    return not any(ord(char) < 32 or char == "\x7f" for char in name)


def _discard(partial: Path) -> None:
    with contextlib.suppress(OSError):
        partial.unlink(missing_ok=True)
