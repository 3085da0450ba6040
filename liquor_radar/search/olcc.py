"""Oregon liquor search (OLCC) scraper."""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Final

import httpx
from bs4 import BeautifulSoup
from bs4.element import Tag

from liquor_radar.errors import SearchError, SearchTermError
from liquor_radar.search.base import FoundItem, ProductInfo

logger = logging.getLogger(__name__)

BASE_URL: Final = "http://www.oregonliquorsearch.com/"
SEARCH_URL: Final = "http://www.oregonliquorsearch.com/servlet/FrontController"
AGE_FORM_URL: Final = "http://www.oregonliquorsearch.com/servlet/WelcomeController"
REQUEST_TIMEOUT_SECONDS: Final = 30.0

USER_AGENTS: Final[tuple[str, ...]] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:109.0) Gecko/20100101 Firefox/119.0",
    "Mozilla/5.0 (X11; Linux x86_64; rv:102.0) Gecko/20100101 Firefox/102.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:109.0) Gecko/20100101 Firefox/119.0",
)

_DETAIL_LABELS: Final = {
    "Bottle Price:": "bottle_price",
    "Case Price:": "case_price",
    "Size:": "size",
    "Proof:": "proof",
    "Category:": "category",
}


def _text(node: Tag | None) -> str:
    if node is None:
        return ""
    return node.get_text().strip()


def _parse_item_code(raw: str) -> str:
    # "99900733075(7330B)" -> "7330B"; codes without parentheses are kept as-is
    start = raw.find("(")
    end = raw.find(")")
    if start != -1 and end > start + 1:
        return raw[start + 1 : end]
    return raw


def extract_product_info(soup: BeautifulSoup) -> ProductInfo:
    """Extract product details from the product description and details table."""

    product = ProductInfo()

    # "Item 99900733075(7330B): MICHTER'S STRAIGHT RYE"
    description = _text(soup.select_one("#product-desc h2"))
    if description:
        parts = description.split(":", 1)
        if len(parts) == 2:
            item_parts = parts[0].split(" ")
            if len(item_parts) >= 2:
                product.item_code = _parse_item_code(item_parts[1])
            product.name = parts[1].strip()

    for row in soup.select("#product-details tr"):
        for header in row.find_all("th"):
            field_name = _DETAIL_LABELS.get(_text(header))
            if field_name is None:
                continue
            value = header.find_next_sibling()
            cell = value if isinstance(value, Tag) else None
            setattr(product, field_name, _text(cell))

    return product


def extract_results(
    soup: BeautifulSoup, product: ProductInfo, found_at: datetime | None = None
) -> list[FoundItem]:
    """Build one FoundItem per store row that has stock."""

    found_at = found_at or datetime.now()
    results: list[FoundItem] = []

    for row in soup.select("tr.row, tr.alt-row"):
        if _text(row.select_one("td.qty")) == "0":
            continue

        cells = row.find_all("td")
        store = _text(cells[2]) if len(cells) > 2 else ""
        if not store:
            continue

        results.append(
            FoundItem(
                name=product.name,
                code=product.item_code,
                store=store,
                date=found_at,
                price=product.bottle_price,
            )
        )

    return results


class OlccSearcher:
    """Search the OLCC catalog for items in stock near a zipcode.

    The site requires an age confirmation before each search; the cookies it
    sets live in the client used for that search, so one searcher must never
    run two searches at the same time.
    """

    def __init__(
        self,
        user_agent: str = "",
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._cycle_agent = not user_agent
        self._user_agent = user_agent or random.choice(USER_AGENTS)
        self._timeout = httpx.Timeout(timeout_seconds)

    @property
    def user_agent(self) -> str:
        return self._user_agent

    def _update_user_agent(self) -> None:
        if self._cycle_agent:
            self._user_agent = random.choice(USER_AGENTS)
            logger.debug(f"Using user agent: {self._user_agent}")

    async def _verify_age(self, client: httpx.AsyncClient) -> None:
        """Open a session and submit the age confirmation form."""

        response = await client.get(BASE_URL)
        response.raise_for_status()

        form_data = {"ageCheck": "true", "action": "search"}
        logger.debug(f"Submitting age verification form {form_data}")
        response = await client.post(
            AGE_FORM_URL,
            data=form_data,
            headers={"Referer": AGE_FORM_URL},
        )
        if response.status_code != 200:
            raise SearchError(
                f"age verification failed with status: {response.status_code}"
            )

    async def search(
        self, term: str, zipcode: str, distance: int
    ) -> list[FoundItem]:
        """Search for an item by name or code near ``zipcode``.

        Raises:
            SearchError: the session could not be opened or the search failed.
        """

        self._update_user_agent()

        form_data = {
            "view": "global",
            "action": "search",
            "radiusSearchParam": str(distance),
            "productSearchParam": term,
            "locationSearchParam": zipcode,
            "btnSearch": "Search",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
            ) as client:
                await self._verify_age(client)

                logger.debug(f"Submitting search form {form_data}")
                response = await client.post(
                    SEARCH_URL,
                    data=form_data,
                    headers={"Referer": SEARCH_URL},
                )
        except httpx.HTTPError as e:
            raise SearchTermError(term, f"request failed: {e}") from e

        if response.status_code != 200:
            raise SearchTermError(term, f"status {response.status_code}")

        soup = BeautifulSoup(response.text, "html.parser")
        product = extract_product_info(soup)
        return extract_results(soup, product)
