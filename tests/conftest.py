"""
Shared fixtures for the SecondTurn BGG tests.

Provides a fake requests session that replays canned BGG XML, a manual clock,
and sample search/thing payloads built around Catan.
"""

import threading
from typing import Dict, List, Optional
from urllib.parse import urlparse

import pytest

from secondturn_bgg.cache import CacheManager
from secondturn_bgg.client import BGGAPIClient
from secondturn_bgg.config import BGGAPIConfig
from secondturn_bgg.service import BGGService


# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------

SEARCH_CATAN_XML = """<?xml version="1.0" encoding="utf-8"?>
<items total="3" termsofuse="https://boardgamegeek.com/xmlapi/termsofuse">
  <item type="boardgame" id="926">
    <name type="primary" value="Catan: Seafarers"/>
    <yearpublished value="1997"/>
  </item>
  <item type="boardgame" id="13">
    <name type="primary" value="Catan"/>
    <yearpublished value="1995"/>
  </item>
  <item type="boardgameexpansion" id="325">
    <name type="primary" value="Catan: Cities &amp; Knights"/>
    <yearpublished value="1998"/>
  </item>
</items>"""

EMPTY_SEARCH_XML = """<?xml version="1.0" encoding="utf-8"?>
<items total="0" termsofuse="https://boardgamegeek.com/xmlapi/termsofuse"></items>"""

CATAN_ITEM = """
  <item type="boardgame" id="13">
    <thumbnail>https://cf.geekdo-images.com/catan_t.jpg</thumbnail>
    <image>https://cf.geekdo-images.com/catan.jpg</image>
    <name type="primary" sortindex="1" value="Catan"/>
    <name type="alternate" sortindex="1" value="Die Siedler von Catan"/>
    <name type="alternate" sortindex="1" value="Los Colonos de Catán"/>
    <name type="alternate" sortindex="1" value="Колонизаторы"/>
    <name type="alternate" sortindex="1" value="卡坦島"/>
    <description>Trade &amp;amp; build settlements.</description>
    <yearpublished value="1995"/>
    <minplayers value="3"/>
    <maxplayers value="4"/>
    <playingtime value="120"/>
    <minage value="10"/>
    <link type="boardgamecategory" id="1026" value="Negotiation"/>
    <link type="boardgamemechanic" id="2072" value="Dice Rolling"/>
    <link type="boardgamemechanic" id="2004" value="Set Collection"/>
    <link type="boardgamedesigner" id="11" value="Klaus Teuber"/>
    <link type="boardgameexpansion" id="926" value="Catan: Seafarers"/>
    <versions>
      <item type="boardgameversion" id="1001">
        <name type="primary" value="German first edition"/>
        <link type="language" id="2188" value="German"/>
        <link type="boardgamepublisher" id="37" value="KOSMOS"/>
        <yearpublished value="1995"/>
        <productcode value="684211"/>
        <width value="11.75"/>
        <length value="11.75"/>
        <depth value="2.75"/>
        <weight value="2.5"/>
      </item>
      <item type="boardgameversion" id="1002">
        <name type="primary" value="Russian edition"/>
        <link type="language" id="2201" value="Russian"/>
        <link type="boardgamepublisher" id="18852" value="Hobby World"/>
        <yearpublished value="2012"/>
        <width value="0"/>
        <length value="0"/>
        <depth value="0"/>
        <weight value="0"/>
      </item>
      <item type="boardgameversion" id="1003">
        <name type="primary" value="English fifth edition"/>
        <link type="language" id="2184" value="English"/>
        <link type="boardgamepublisher" id="17" value="Catan Studio"/>
        <yearpublished value="2015"/>
        <width value="12"/>
        <length value="10"/>
        <depth value="3"/>
        <weight value="5 lbs"/>
      </item>
      <item type="boardgameversion">
        <name type="primary" value="Version without id"/>
      </item>
    </versions>
    <statistics page="1">
      <ratings>
        <usersrated value="120000"/>
        <average value="7.1"/>
        <bayesaverage value="6.9"/>
        <ranks>
          <rank type="subtype" id="1" name="boardgame" friendlyname="Board Game Rank" value="500" bayesaverage="6.9"/>
          <rank type="family" id="5497" name="strategygames" friendlyname="Strategy Game Rank" value="300" bayesaverage="6.9"/>
        </ranks>
        <averageweight value="2.3"/>
      </ratings>
    </statistics>
  </item>"""

SEAFARERS_ITEM = """
  <item type="boardgame" id="926">
    <name type="primary" sortindex="1" value="Catan: Seafarers"/>
    <yearpublished value="1997"/>
    <link type="boardgameexpansion" id="13" value="Catan" inbound="true"/>
    <statistics page="1">
      <ratings>
        <average value="7.0"/>
        <bayesaverage value="6.8"/>
        <ranks>
          <rank type="subtype" id="1" name="boardgame" friendlyname="Board Game Rank" value="Not Ranked"/>
        </ranks>
        <averageweight value="2.4"/>
      </ratings>
    </statistics>
  </item>"""


def items_xml(*items: str) -> str:
    body = "".join(items)
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        f'<items termsofuse="https://boardgamegeek.com/xmlapi/termsofuse">{body}\n</items>'
    )


CATAN_THING_XML = items_xml(CATAN_ITEM)
SEAFARERS_THING_XML = items_xml(SEAFARERS_ITEM)
CATAN_SEARCH_METADATA_XML = items_xml(SEAFARERS_ITEM, CATAN_ITEM)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200):
        self.content = text.encode("utf-8")
        self.status_code = status_code

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class FakeSession:
    """
    Stand-in for requests.Session.

    ``routes`` maps an endpoint path to a response, an exception to raise, or
    a callable taking the params dict. Every call is recorded.
    """

    def __init__(self, routes: Optional[Dict[str, object]] = None):
        self.headers: Dict[str, str] = {}
        self.routes = dict(routes or {})
        self.calls: List[dict] = []
        self.closed = False
        self._lock = threading.Lock()

    def get(self, url, params=None, timeout=None):
        path = urlparse(url).path
        with self._lock:
            self.calls.append({"path": path, "params": dict(params or {}), "timeout": timeout})
        route = self.routes.get(path)
        if callable(route):
            route = route(dict(params or {}))
        if isinstance(route, BaseException):
            raise route
        if route is None:
            return FakeResponse("", 404)
        return route

    def calls_to(self, path: str) -> List[dict]:
        return [call for call in self.calls if call["path"] == path]

    def close(self):
        self.closed = True


class ManualClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def api_client(session):
    """Client with pacing disabled so tests never sleep."""
    config = BGGAPIConfig(rate_limit_delay=0.0)
    return BGGAPIClient(config=config, session=session, sleep=lambda seconds: None)


@pytest.fixture
def cache_manager(clock):
    return CacheManager(clock=clock)


@pytest.fixture
def service(api_client, cache_manager):
    return BGGService(api_client=api_client, cache_manager=cache_manager)


def thing_by_id(params: dict) -> FakeResponse:
    """Serve /thing requests for Catan and Seafarers, any id combination."""
    available = {"13": CATAN_ITEM, "926": SEAFARERS_ITEM}
    ids = params.get("id", "").split(",")
    return FakeResponse(items_xml(*(available[i] for i in ids if i in available)))


@pytest.fixture
def catan_session(session):
    session.routes["/xmlapi2/search"] = FakeResponse(SEARCH_CATAN_XML)
    session.routes["/xmlapi2/thing"] = thing_by_id
    return session


