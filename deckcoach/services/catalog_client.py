"""
Scryfall catalog client.

Resolves exact card names to CatalogRecords, one request per cache miss.
Request pacing across a sequence of lookups belongs to the deck resolver,
not to this client.

API: https://scryfall.com/docs/api/cards/named
"""

import logging
from collections import OrderedDict
from collections.abc import Mapping

import httpx

from deckcoach.models.card import CatalogRecord
from deckcoach.models.failure import FailureKind, KnownError

logger = logging.getLogger(__name__)

SCRYFALL_API = "https://api.scryfall.com"

USER_AGENT = "DeckCoach/1.0"


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class CatalogError(KnownError):
    """Base class for a failed catalog lookup of a single card."""

    def __init__(self, card_name: str, kind: FailureKind, message: str, status_code: int):
        self.card_name = card_name
        super().__init__(kind=kind, message=message, detail=card_name, status_code=status_code)


class CardNotFoundError(CatalogError):
    """The catalog has no card with exactly this name."""

    def __init__(self, card_name: str):
        super().__init__(
            card_name,
            kind=FailureKind.NOT_FOUND,
            message=f'Card "{card_name}" not found on Scryfall',
            status_code=404,
        )


class CatalogUnavailableError(CatalogError):
    """The catalog answered with a non-success status other than 404."""

    def __init__(self, card_name: str, status_code: int, reason: str = ""):
        self.upstream_status = status_code
        super().__init__(
            card_name,
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=f"Scryfall API error: {status_code} {reason}".rstrip(),
            status_code=502,
        )


class CatalogTransportError(CatalogError):
    """The request never produced a response (DNS, connect, timeout...)."""

    def __init__(self, card_name: str, cause: Exception):
        super().__init__(
            card_name,
            kind=FailureKind.TRANSPORT_ERROR,
            message=f"Could not reach Scryfall: {cause}",
            status_code=502,
        )


# =============================================================================
# CACHE
# =============================================================================


class CatalogCache:
    """
    Name -> CatalogRecord cache.

    Unbounded by default. With max_entries set, the least recently used
    record is evicted once the cache is full.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive or None")
        self.max_entries = max_entries
        self._records: OrderedDict[str, CatalogRecord] = OrderedDict()

    def get(self, name: str) -> CatalogRecord | None:
        record = self._records.get(name)
        if record is not None and self.max_entries is not None:
            self._records.move_to_end(name)
        return record

    def put(self, name: str, record: CatalogRecord) -> None:
        self._records[name] = record
        self._records.move_to_end(name)
        if self.max_entries is not None:
            while len(self._records) > self.max_entries:
                evicted, _ = self._records.popitem(last=False)
                logger.debug("Evicted %s from catalog cache", evicted)

    def clear(self) -> None:
        self._records.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)


# =============================================================================
# CLIENT
# =============================================================================


class CatalogClient:
    """Looks cards up by exact name, memoizing successful lookups."""

    def __init__(
        self,
        base_url: str = SCRYFALL_API,
        cache: CatalogCache | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.cache = cache if cache is not None else CatalogCache()
        self.timeout = timeout

    async def resolve(self, name: str) -> CatalogRecord:
        """
        Resolve a card name to its catalog record.

        Args:
            name: Exact card name

        Returns:
            The catalog record, from cache when the name was seen before

        Raises:
            CardNotFoundError: If the catalog reports no exact match
            CatalogUnavailableError: If the catalog returns any other error status
            CatalogTransportError: If the request fails at the network level
        """
        cached = self.cache.get(name)
        if cached is not None:
            logger.debug("Catalog cache hit for %s", name)
            return cached

        record = await self._fetch(name)

        # Keyed by the requested name, not the catalog's spelling
        self.cache.put(name, record)
        return record

    async def _fetch(self, name: str) -> CatalogRecord:
        url = f"{self.base_url}/cards/named"

        try:
            async with httpx.AsyncClient(
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                timeout=self.timeout,
            ) as client:
                response = await client.get(url, params={"exact": name})
        except httpx.RequestError as e:
            raise CatalogTransportError(name, e) from e

        if response.status_code == 404:
            raise CardNotFoundError(name)
        if not response.is_success:
            raise CatalogUnavailableError(name, response.status_code, response.reason_phrase)

        try:
            data = response.json()
            if not isinstance(data, Mapping):
                raise TypeError(f"expected a card object, got {type(data).__name__}")
            return CatalogRecord.from_scryfall(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CatalogUnavailableError(name, response.status_code, "malformed card data") from e
