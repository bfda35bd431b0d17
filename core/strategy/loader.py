"""Strategy table sources.

A source is any zero-argument callable returning an awaitable mapping (the
parsed JSON document). Transport errors surface as ``StrategyLoadError``.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping

import httpx

from core.errors import StrategyLoadError

logger = logging.getLogger(__name__)

StrategySource = Callable[[], Awaitable[Mapping[str, Any]]]

DEFAULT_STRATEGY_PATH = Path(__file__).parent / "data" / "blackjack_strategy.json"


class FileStrategySource:
    """Read the strategy document from a JSON file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else DEFAULT_STRATEGY_PATH

    async def __call__(self) -> Mapping[str, Any]:
        logger.debug("Reading strategy table from %s", self.path)
        try:
            text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
            return json.loads(text)
        except OSError as exc:
            raise StrategyLoadError(f"Cannot read {self.path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StrategyLoadError(f"Invalid JSON in {self.path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"FileStrategySource({str(self.path)!r})"


class HttpStrategySource:
    """Fetch the strategy document over HTTP."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the HTTP source.

        Args:
            url: Location of the JSON document
            timeout: Request timeout in seconds
            transport: Optional transport, e.g. httpx.MockTransport in tests
        """
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def __call__(self) -> Mapping[str, Any]:
        logger.debug("Fetching strategy table from %s", self.url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as exc:
            raise StrategyLoadError(f"Cannot fetch {self.url}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StrategyLoadError(f"Invalid JSON at {self.url}: {exc}") from exc

    def __repr__(self) -> str:
        return f"HttpStrategySource({self.url!r})"


def default_strategy_source(
    path: str | None = None,
    url: str | None = None,
    timeout: float = 10.0,
) -> StrategySource:
    """Pick the URL source when a URL is configured, else the file source."""
    if url:
        return HttpStrategySource(url, timeout=timeout)
    return FileStrategySource(path)
