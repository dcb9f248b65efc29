import sys
from pathlib import Path

import httpx
import pytest

# Ensure the repo root is on sys.path for direct pytest runs
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from mapchat.utils.http_client import new_http_client  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeSleep:
    """Records requested sleeps and advances the clock instead of waiting."""

    def __init__(self, clock):
        self.clock = clock
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)
        self.clock.advance(seconds)


class Router:
    """MockTransport handler that dispatches on URL host and records requests."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, host, responder):
        self.routes[host] = responder

    def calls_to(self, host):
        return [r for r in self.requests if r.url.host == host]

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        responder = self.routes.get(request.url.host)
        if responder is None:
            raise RuntimeError(f"No stub defined for URL: {request.url!r}")
        return responder(request)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def router():
    return Router()


@pytest.fixture
def http_client(router):
    return new_http_client(transport=httpx.MockTransport(router))


NOMINATIM_HOST = "nominatim.openstreetmap.org"
FOURSQUARE_HOST = "places-api.foursquare.com"
TRIPADVISOR_HOST = "api.content.tripadvisor.com"

GANGNAM_ROW = {
    "osm_type": "relation",
    "osm_id": 2297418,
    "lat": "37.4966645",
    "lon": "127.0629804",
    "category": "boundary",
    "type": "administrative",
    "importance": 0.62,
    "display_name": "Gangnam-gu, Seoul, South Korea",
    "geojson": {
        "type": "Polygon",
        "coordinates": [
            [
                [127.01, 37.46],
                [127.12, 37.46],
                [127.12, 37.53],
                [127.01, 37.53],
                [127.01, 37.46],
            ]
        ],
    },
}

JURONG_ROW = {
    "osm_type": "way",
    "osm_id": 26894710,
    "lat": "1.3397",
    "lon": "103.7066",
    "category": "shop",
    "type": "mall",
    "importance": 0.41,
    "display_name": "Jurong Point, Jurong West, Singapore",
    "geojson": {
        "type": "Polygon",
        "coordinates": [
            [
                [103.705, 1.338],
                [103.708, 1.338],
                [103.708, 1.341],
                [103.705, 1.341],
                [103.705, 1.338],
            ]
        ],
    },
}


def fsq_place(i, rating=None, distance=100):
    place = {
        "fsq_place_id": f"fsq{i}",
        "name": f"Place {i}",
        "latitude": 1.339 + i * 0.0001,
        "longitude": 103.706 + i * 0.0001,
        "location": {"address": f"{i} Jurong West Central"},
        "categories": [{"name": "Restaurant"}],
        "distance": distance + i,
    }
    if rating is not None:
        place["rating"] = rating
    return place
