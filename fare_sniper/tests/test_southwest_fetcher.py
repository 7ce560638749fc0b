from unittest.mock import Mock

import pytest
import requests

from fare_sniper.config import RunConfig
from fare_sniper.errors import FetcherError
from fare_sniper.models import Direction, FareBatch, FareObservation
from fare_sniper.southwest_fetcher import (
    SouthwestFetcher,
    parse_fares,
    parse_price,
    trip_fields,
)

LANDING = """
<html><body>
<form class="booking-form--form" action="/flight/select-flight.html" method="post">
  <input type="hidden" name="csrfToken" value="tok123">
  <input type="checkbox" name="promoOptIn" value="yes">
  <input type="text" name="originAirport" value="">
</form>
</body></html>
"""

RESULTS = """
<html><body>
<div id="faresOutbound">
  <span class="product_price">$<span>300</span></span>
  <span class="product_price">$ 250.00</span>
  <span class="product_price">Sold out</span>
  <span class="product_price">$280</span>
</div>
<div id="faresReturn">
  <span class="product_price">$310</span>
  <span class="product_price">$299</span>
</div>
</body></html>
"""


def make_config() -> RunConfig:
    return RunConfig(
        origin="DAL",
        destination="HOU",
        outbound_date="11/01/2026",
        return_date="11/08/2026",
        passengers=2,
    )


def make_session(*responses):
    session = Mock()
    session.request.side_effect = list(responses)
    return session


def test_parse_price_takes_first_digit_run():
    assert parse_price("$249") == 249
    assert parse_price("$ 249.99") == 249
    assert parse_price("from $ USD 87 each") == 87
    assert parse_price("Sold out") is None
    assert parse_price("249") is None


def test_parse_fares_per_direction():
    batch = parse_fares(RESULTS)
    assert batch.outbound == [300, 250, 280]
    assert batch.return_ == [310, 299]


def test_parse_fares_no_matches():
    batch = parse_fares("<html><body>No flights</body></html>")
    assert batch.outbound == []
    assert batch.return_ == []


def test_trip_fields():
    fields = trip_fields(make_config())
    assert fields["originAirport"] == "DAL"
    assert fields["destinationAirport"] == "HOU"
    assert fields["adultPassengerCount"] == "2"
    assert fields["fareType"] == "DOLLARS"
    assert fields["twoWayTrip"] == "true"


def test_search_fares_submits_form():
    session = make_session(
        Mock(status_code=200, text=LANDING), Mock(status_code=200, text=RESULTS)
    )
    fetcher = SouthwestFetcher(base_url="https://sw.test", session=session)

    batch = fetcher.search_fares(make_config())

    assert batch.outbound == [300, 250, 280]
    assert batch.return_ == [310, 299]
    first, second = session.request.call_args_list
    assert first.args == ("get", "https://sw.test")
    assert second.args == ("post", "https://sw.test/flight/select-flight.html")
    data = second.kwargs["data"]
    assert data["csrfToken"] == "tok123"
    assert "promoOptIn" not in data
    assert data["originAirport"] == "DAL"
    assert data["returnDateString"] == "11/08/2026"


def test_search_fares_http_error():
    session = make_session(Mock(status_code=503, text="Service Unavailable"))
    fetcher = SouthwestFetcher(session=session)
    with pytest.raises(FetcherError, match="HTTP 503"):
        fetcher.search_fares(make_config())


def test_search_fares_network_error():
    session = Mock()
    session.request.side_effect = requests.ConnectionError("dns")
    fetcher = SouthwestFetcher(session=session)
    with pytest.raises(FetcherError):
        fetcher.search_fares(make_config())


def test_search_fares_missing_form():
    session = make_session(Mock(status_code=200, text="<html></html>"))
    fetcher = SouthwestFetcher(session=session)
    with pytest.raises(FetcherError, match="booking form"):
        fetcher.search_fares(make_config())


def test_batch_from_observations_groups_by_direction():
    batch = FareBatch.from_observations(
        [
            FareObservation(Direction.RETURN, 310),
            FareObservation(Direction.OUTBOUND, 300),
            FareObservation(Direction.OUTBOUND, 250),
        ]
    )
    assert batch.outbound == [300, 250]
    assert batch.return_ == [310]
