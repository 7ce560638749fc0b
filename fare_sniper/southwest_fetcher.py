from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from .config import RunConfig
from .errors import FetcherError
from .models import Direction, FareBatch, FareObservation

logger = logging.getLogger(__name__)

FORM_SELECTOR = ".booking-form--form"
OUTBOUND_SELECTOR = "#faresOutbound .product_price"
RETURN_SELECTOR = "#faresReturn .product_price"

# first run of digits after the dollar sign
PRICE_RE = re.compile(r"\$.*?(\d+)", re.S)


def parse_price(text: str) -> Optional[int]:
    """``"$ 249.00"`` -> ``249``; ``None`` when no price is present."""
    match = PRICE_RE.search(text)
    if not match:
        return None
    return int(match.group(1))


def parse_fares(html: str) -> FareBatch:
    """Extract outbound and return prices from a results page."""
    soup = BeautifulSoup(html, "html.parser")

    observations: List[FareObservation] = []
    for direction, selector in (
        (Direction.OUTBOUND, OUTBOUND_SELECTOR),
        (Direction.RETURN, RETURN_SELECTOR),
    ):
        for node in soup.select(selector):
            price = parse_price(node.get_text(" ", strip=True))
            if price is None:
                logger.debug("Skipping unparseable price %r", node.get_text())
                continue
            observations.append(FareObservation(direction, price))

    logger.debug("Parsed %d fare observations", len(observations))
    return FareBatch.from_observations(observations)


def trip_fields(cfg: RunConfig) -> Dict[str, str]:
    """Form values for a round trip search on the booking form."""
    return {
        "twoWayTrip": "true",
        "airTranRedirect": "",
        "returnAirport": "RoundTrip",
        "outboundTimeOfDay": "ANYTIME",
        "returnTimeOfDay": "ANYTIME",
        "seniorPassengerCount": "0",
        "fareType": "DOLLARS",
        "originAirport": cfg.origin or "",
        "destinationAirport": cfg.destination or "",
        "outboundDateString": cfg.outbound_date or "",
        "returnDateString": cfg.return_date or "",
        "adultPassengerCount": str(cfg.passengers),
    }


class SouthwestFetcher:
    """
    Submits the southwest.com booking form and scrapes the fare tables.
    """

    def __init__(
        self,
        base_url: str = "https://www.southwest.com",
        session: requests.Session | None = None,
        timeout: float = 15,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ──────────────────────────────────────────────────────────

    def search_fares(self, cfg: RunConfig) -> FareBatch:
        """Return raw outbound/return prices for the configured trip."""
        landing = self._request("get", self.base_url)
        soup = BeautifulSoup(landing.text, "html.parser")
        form = soup.select_one(FORM_SELECTOR)
        if form is None:
            raise FetcherError(f"booking form {FORM_SELECTOR!r} not found")

        action = urljoin(self.base_url + "/", form.get("action") or "")
        payload = self._form_defaults(form)
        payload.update(trip_fields(cfg))

        if (form.get("method") or "get").lower() == "post":
            results = self._request("post", action, data=payload)
        else:
            results = self._request("get", action, params=payload)

        batch = parse_fares(results.text)
        logger.info(
            "Scraped %d outbound and %d return prices for %s->%s",
            len(batch.outbound),
            len(batch.return_),
            cfg.origin,
            cfg.destination,
        )
        return batch

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise FetcherError(f"{method.upper()} {url} failed: {exc}") from exc
        if resp.status_code != 200:
            raise FetcherError(f"HTTP {resp.status_code} – {resp.text[:120]}")
        return resp

    @staticmethod
    def _form_defaults(form) -> Dict[str, str]:
        """Pre-filled inputs of *form* (hidden tokens and the like)."""
        fields: Dict[str, str] = {}
        for inp in form.find_all("input"):
            name = inp.get("name")
            if not name:
                continue
            if inp.get("type") in ("checkbox", "radio") and not inp.has_attr("checked"):
                continue
            fields[name] = inp.get("value", "")
        return fields


__all__ = [
    "SouthwestFetcher",
    "parse_fares",
    "parse_price",
    "trip_fields",
]
