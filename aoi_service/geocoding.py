"""
Geocoding Module
================

Free-text place search against a Nominatim endpoint.

Design:
- Blank input never reaches the network
- Request and decode failures degrade to an empty result (logged)
- SearchController debounces keystrokes and drops stale responses
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests

from aoi_service.debounce import Debouncer
from aoi_zone.logging import LogEvent, StructuredLogger, create_logger


@dataclass(frozen=True)
class GeocodeResult:
    """One place returned by a search."""

    id: int
    display_name: str
    category: str
    kind: str
    latitude: float
    longitude: float

    @classmethod
    def from_nominatim(cls, data: Dict[str, Any]) -> "GeocodeResult":
        """
        Raises:
            KeyError, TypeError, ValueError: If the entry is malformed
        """
        return cls(
            id=int(data["place_id"]),
            display_name=str(data["display_name"]),
            category=str(data.get("category", data.get("class", ""))),
            kind=str(data.get("type", "")),
            latitude=float(data["lat"]),
            longitude=float(data["lon"]),
        )


class NominatimClient:
    """
    Minimal Nominatim search client.

    Example:
        >>> client = NominatimClient(user_agent="AOI-Map-App/1.0")
        >>> for result in client.search("Köln Dom"):
        ...     print(result.display_name, result.latitude, result.longitude)
    """

    def __init__(
        self,
        base_url: str = "https://nominatim.openstreetmap.org/search",
        user_agent: str = "AOI-Map-App/1.0",
        limit: int = 10,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.base_url = base_url
        self.user_agent = user_agent
        self.limit = limit
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or create_logger("geocoding")

    def search(self, text: str) -> List[GeocodeResult]:
        """
        Search places matching `text`.

        Returns:
            Results in service order; [] for blank text or on any failure
        """
        if not text or not text.strip():
            return []

        params = {
            "q": text,
            "format": "json",
            "limit": str(self.limit),
            "addressdetails": "1",
        }

        try:
            response = self.session.get(
                self.base_url,
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, list):
                raise ValueError(f"Expected a JSON array, got {type(payload).__name__}")
            results = [GeocodeResult.from_nominatim(entry) for entry in payload]
        except requests.exceptions.RequestException as e:
            self.logger.error(
                event=LogEvent.GEOCODING_FAILED,
                message="Geocoding request failed",
                metadata={'query': text},
                exc_info=e,
            )
            return []
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error(
                event=LogEvent.GEOCODING_FAILED,
                message="Geocoding response could not be decoded",
                metadata={'query': text},
                exc_info=e,
            )
            return []

        self.logger.info(
            event=LogEvent.GEOCODING_SEARCH,
            message="Geocoding search completed",
            metadata={'query': text, 'results': len(results)},
        )
        return results


class SearchController:
    """
    Debounced search-as-you-type.

    Every keystroke goes to `on_input`; the search runs once input has been
    quiet for `debounce_ms`. Responses for superseded input are discarded.

    Usage:
        controller = SearchController(client, on_results=show_results)
        controller.on_input("Düss")
        controller.on_input("Düsseldorf")   # only this one is searched
    """

    def __init__(
        self,
        client: NominatimClient,
        on_results: Callable[[List[GeocodeResult]], None],
        debounce_ms: float = 300,
    ):
        self.client = client
        self.on_results = on_results
        self.query = ""
        self.results: List[GeocodeResult] = []
        self.is_searching = False
        self._debouncer = Debouncer(debounce_ms, self._run)

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._debouncer.task

    def on_input(self, text: str) -> None:
        self.query = text
        self._debouncer(text)

    def clear(self) -> None:
        self._debouncer.cancel()
        self.query = ""
        self._publish([])

    async def _run(self, text: str) -> None:
        if not text.strip():
            self._publish([])
            return

        self.is_searching = True
        loop = asyncio.get_running_loop()
        try:
            results = await loop.run_in_executor(None, self.client.search, text)
        finally:
            self.is_searching = False

        if text != self.query:
            return
        self._publish(results)

    def _publish(self, results: List[GeocodeResult]) -> None:
        self.results = results
        self.on_results(results)
