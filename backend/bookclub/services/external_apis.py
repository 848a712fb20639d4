"""
Open Library client for book metadata.

Used for the add-book search, English-edition ISBN discovery and filling
in missing synopses. Every call is best-effort: network or parsing
failures are logged and turn into empty results, never into errors for
the caller.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Any, AsyncIterator

import httpx

from bookclub.core.config import get_settings
from bookclub.core.logging import get_logger
from bookclub.schemas.book import CatalogSearchResult, EnglishEdition

settings = get_settings()
logger = get_logger(__name__)

SEARCH_FIELDS = "key,title,author_name,isbn,cover_i,first_publish_year,number_of_pages_median"
MAX_SEARCH_VARIATIONS = 3
MAX_SEARCH_RESULTS = 10
ENGLISH_LANGUAGE_KEYS = {"/languages/eng", "/languages/en"}


@dataclass
class BookMetadata:
    """Title and description for a single work or edition."""

    title: str | None = None
    description: str | None = None


def search_variations(query: str) -> list[str]:
    """
    Alternative spellings of a search to widen Open Library's matches.

    Adds a prefix wildcard, a de-spaced form for compound words
    ("oath bringer" -> "oathbringer") and a camel-case split. Only the first
    few unique variations are kept.
    """
    query = query.strip()
    variations = [query]

    if not query.endswith("*"):
        variations.append(f"{query}*")

    if " " in query:
        no_spaces = re.sub(r"\s+", "", query)
        variations.append(no_spaces)
        variations.append(f"{no_spaces}*")

    if " " not in query and len(query) > 6:
        with_spaces = re.sub(r"([a-z])([A-Z])", r"\1 \2", query)
        if with_spaces != query:
            variations.append(with_spaces)

    unique = list(dict.fromkeys(variations))
    return unique[:MAX_SEARCH_VARIATIONS]


class OpenLibraryClient:
    """Async client for the Open Library API."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self.covers_url = settings.OPEN_LIBRARY_COVERS_URL
        self.client = httpx.AsyncClient(
            base_url=settings.OPEN_LIBRARY_BASE_URL,
            timeout=settings.METADATA_TIMEOUT_SECONDS,
            headers={"User-Agent": f"{settings.APP_NAME}/1.0"},
            transport=transport,
        )

    async def close(self):
        await self.client.aclose()

    async def _get_json(self, path: str, params: dict | None = None) -> dict | None:
        try:
            response = await self.client.get(path, params=params)
            if response.status_code != 200:
                return None
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Open Library request failed for {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Open Library returned a non-object body for {path}")
            return None
        return data

    async def _search_once(self, query: str) -> list[dict]:
        data = await self._get_json(
            "/search.json",
            params={"q": query, "limit": MAX_SEARCH_RESULTS, "fields": SEARCH_FIELDS},
        )
        if not data:
            return []
        return data.get("docs", [])

    async def search_books(self, query: str) -> list[CatalogSearchResult]:
        """
        Search the catalog by title, author or ISBN.

        Runs the query variations concurrently and merges the results,
        dropping duplicate works.

        Args:
            query: Free-text search

        Returns:
            Up to 10 results, best matches first
        """
        variations = search_variations(query)
        all_results = await asyncio.gather(*(self._search_once(v) for v in variations))

        seen: set[str] = set()
        docs: list[dict] = []
        for results in all_results:
            for doc in results:
                key = doc.get("key")
                if key and key not in seen:
                    seen.add(key)
                    docs.append(doc)

        return [self._parse_search_result(doc) for doc in docs[:MAX_SEARCH_RESULTS]]

    def _parse_search_result(self, doc: dict) -> CatalogSearchResult:
        isbns = doc.get("isbn") or []
        isbn13 = next((i for i in isbns if len(i) == 13), None)
        isbn10 = next((i for i in isbns if len(i) == 10), None)

        cover_url = None
        if doc.get("cover_i"):
            cover_url = f"{self.covers_url}/b/id/{doc['cover_i']}-M.jpg"
        elif isbn13:
            cover_url = f"{self.covers_url}/b/isbn/{isbn13}-M.jpg"

        return CatalogSearchResult(
            open_library_key=doc["key"],
            title=doc.get("title") or "Untitled",
            author=self._first_or_none(doc.get("author_name") or []) or "Unknown Author",
            isbn=isbn10,
            isbn13=isbn13,
            cover_url=cover_url,
            publish_year=doc.get("first_publish_year"),
            page_count=doc.get("number_of_pages_median"),
        )

    async def get_by_isbn(self, isbn: str) -> BookMetadata | None:
        data = await self._get_json(f"/isbn/{isbn}.json")
        return self._parse_metadata(data) if data else None

    async def get_by_work_key(self, work_key: str) -> BookMetadata | None:
        """Fetch a work, e.g. ``/works/OL12345W``."""
        data = await self._get_json(f"{work_key}.json")
        return self._parse_metadata(data) if data else None

    async def get_english_edition(self, work_key: str) -> EnglishEdition | None:
        """
        Identifiers of an English edition of a work.

        Falls back to the first edition carrying any ISBN, since many older
        records have no language tag.
        """
        data = await self._get_json(f"{work_key}/editions.json", params={"limit": 50})
        editions = (data or {}).get("entries") or []
        if not editions:
            return None

        edition = next(
            (
                e
                for e in editions
                if any(lang.get("key") in ENGLISH_LANGUAGE_KEYS for lang in e.get("languages") or [])
            ),
            None,
        )
        if edition is None:
            edition = next((e for e in editions if e.get("isbn_13") or e.get("isbn_10")), None)
        if edition is None:
            return None

        return EnglishEdition(
            isbn13=self._first_or_none(edition.get("isbn_13") or []),
            isbn10=self._first_or_none(edition.get("isbn_10") or []),
            cover_id=self._first_or_none(edition.get("covers") or []),
        )

    async def find_description(
        self, work_key: str | None, isbn: str | None
    ) -> str | None:
        """Description by work key, falling back to ISBN."""
        metadata = None
        if work_key:
            metadata = await self.get_by_work_key(work_key)
        if not (metadata and metadata.description) and isbn:
            metadata = await self.get_by_isbn(isbn)
        return metadata.description if metadata else None

    @staticmethod
    def _parse_metadata(data: dict) -> BookMetadata:
        description = data.get("description")
        if isinstance(description, dict):
            description = description.get("value")
        elif not isinstance(description, str):
            description = None
        return BookMetadata(title=data.get("title"), description=description)

    @staticmethod
    def _first_or_none(lst: list) -> Any | None:
        """Return first element or None."""
        return lst[0] if lst else None


async def get_open_library_client() -> AsyncIterator[OpenLibraryClient]:
    """FastAPI dependency yielding a client that is closed after the request."""
    client = OpenLibraryClient()
    try:
        yield client
    finally:
        await client.close()
