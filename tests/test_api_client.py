"""Tests for the rate-limited BGG API client."""

import threading

import pytest
import requests

from secondturn_bgg.client import BGGAPIClient, RateLimiter, combine_xml_responses
from secondturn_bgg.client.api_client import EMPTY_ITEMS_XML
from secondturn_bgg.config import BGG_USER_AGENT, BGGAPIConfig
from secondturn_bgg.error_handling import (
    ApiUnavailable,
    BGGErrorCode,
    GameNotFound,
    InvalidGameId,
    InvalidResponse,
    NetworkError,
    RateLimitExceeded,
    SearchTimeout,
)
from secondturn_bgg.parsing import extract_metadata

from conftest import (
    CATAN_ITEM,
    SEAFARERS_ITEM,
    FakeResponse,
    FakeSession,
    ManualClock,
    items_xml,
)


class TestRateLimiter:
    """Test pacing and the hourly budget."""

    def test_first_call_does_not_sleep(self):
        sleeps = []
        limiter = RateLimiter(1.0, 10, clock=ManualClock(), sleep=sleeps.append)
        limiter.wait()
        assert sleeps == []

    def test_second_call_sleeps_remaining_delay(self):
        clock = ManualClock()
        sleeps = []
        limiter = RateLimiter(1.0, 10, clock=clock, sleep=sleeps.append)
        limiter.wait()
        clock.advance(0.25)
        limiter.wait()
        assert sleeps == [pytest.approx(0.75)]

    def test_no_sleep_once_delay_elapsed(self):
        clock = ManualClock()
        sleeps = []
        limiter = RateLimiter(1.0, 10, clock=clock, sleep=sleeps.append)
        limiter.wait()
        clock.advance(2)
        limiter.wait()
        assert sleeps == []

    def test_budget_exhausted_fails_fast(self):
        limiter = RateLimiter(0.0, 2, clock=ManualClock(), sleep=lambda s: None)
        for _ in range(2):
            limiter.wait()
            limiter.record_request()
        with pytest.raises(RateLimitExceeded):
            limiter.wait()

    def test_budget_resets_after_an_hour(self):
        clock = ManualClock()
        limiter = RateLimiter(0.0, 1, clock=clock, sleep=lambda s: None)
        limiter.wait()
        limiter.record_request()
        clock.advance(3601)
        limiter.wait()
        assert limiter.request_count == 0


class TestGet:
    """Test request building and error mapping."""

    def test_sets_bgg_headers(self, api_client, session):
        assert session.headers["User-Agent"] == BGG_USER_AGENT
        assert session.headers["Accept"] == "application/xml; charset=utf-8"

    def test_returns_utf8_decoded_body(self, api_client, session):
        session.routes["/xmlapi2/thing"] = FakeResponse(items_xml(CATAN_ITEM))
        xml_text = api_client.get("/xmlapi2/thing", {"id": "13"})
        assert "Колонизаторы" in xml_text
        assert api_client.get_request_count() == 1

    def test_drops_empty_params_and_applies_timeout(self, api_client, session):
        session.routes["/xmlapi2/search"] = FakeResponse("<items></items>")
        api_client.get("/xmlapi2/search", {"query": "catan", "exact": "", "type": None})
        call = session.calls[0]
        assert call["params"] == {"query": "catan"}
        assert call["timeout"] == api_client.config.timeout

    @pytest.mark.parametrize("status,error_cls", [
        (429, RateLimitExceeded),
        (400, InvalidGameId),
        (404, GameNotFound),
        (503, ApiUnavailable),
        (500, ApiUnavailable),
    ])
    def test_maps_http_status(self, api_client, session, status, error_cls):
        session.routes["/xmlapi2/thing"] = FakeResponse("", status)
        with pytest.raises(error_cls) as exc_info:
            api_client.get("/xmlapi2/thing", {"id": "13"})
        assert exc_info.value.status == status
        assert api_client.get_request_count() == 0

    def test_timeout_becomes_search_timeout(self, api_client, session):
        session.routes["/xmlapi2/search"] = requests.exceptions.Timeout("slow")
        with pytest.raises(SearchTimeout) as exc_info:
            api_client.search_games("catan")
        assert exc_info.value.code == BGGErrorCode.SEARCH_TIMEOUT

    def test_connection_error_becomes_network_error(self, api_client, session):
        session.routes["/xmlapi2/search"] = requests.exceptions.ConnectionError("refused")
        with pytest.raises(NetworkError):
            api_client.search_games("catan")

    def test_non_xml_body_is_invalid_response(self, api_client, session):
        session.routes["/xmlapi2/search"] = FakeResponse("Service temporarily overloaded")
        with pytest.raises(InvalidResponse):
            api_client.search_games("catan")

    def test_hourly_budget_blocks_without_calling(self, session):
        config = BGGAPIConfig(rate_limit_delay=0.0, max_requests_per_hour=1)
        client = BGGAPIClient(config=config, session=session, sleep=lambda s: None)
        session.routes["/xmlapi2/search"] = FakeResponse("<items></items>")
        client.search_games("catan")
        with pytest.raises(RateLimitExceeded):
            client.search_games("catan")
        assert len(session.calls) == 1


class TestEndpoints:
    """Test search and thing parameters."""

    def test_search_params(self, api_client, session):
        session.routes["/xmlapi2/search"] = FakeResponse("<items></items>")
        api_client.search_games("  catan ", "boardgameexpansion", exact=True)
        assert session.calls[0]["params"] == {"query": "catan", "type": "boardgameexpansion", "exact": "1"}

    def test_fuzzy_search_omits_exact(self, api_client, session):
        session.routes["/xmlapi2/search"] = FakeResponse("<items></items>")
        api_client.search_games("catan")
        assert "exact" not in session.calls[0]["params"]

    def test_game_details_embeds_stats_and_versions(self, api_client, session):
        session.routes["/xmlapi2/thing"] = FakeResponse(items_xml(CATAN_ITEM))
        api_client.get_game_details("13")
        assert session.calls[0]["params"] == {"id": "13", "stats": "1", "versions": "1"}


class TestBatchMetadata:
    """Test batching and response splicing."""

    def test_empty_ids_make_no_request(self, api_client, session):
        assert api_client.get_batch_metadata([]) == EMPTY_ITEMS_XML
        assert session.calls == []

    def test_splits_into_batches(self, api_client, session):
        session.routes["/xmlapi2/thing"] = FakeResponse("<items></items>")
        ids = [str(i) for i in range(1, 32)]
        api_client.get_batch_metadata(ids)
        batches = sorted(len(call["params"]["id"].split(",")) for call in session.calls)
        assert batches == [1, 15, 15]

    def test_combined_document_keeps_nested_versions(self, api_client, session):
        def route(params):
            if params["id"].startswith("13"):
                return FakeResponse(items_xml(CATAN_ITEM))
            return FakeResponse(items_xml(SEAFARERS_ITEM))

        session.routes["/xmlapi2/thing"] = route
        api_client.update_config(max_batch_size=1)
        metadata = extract_metadata(api_client.get_batch_metadata(["13", "926"]))

        by_id = {meta.id: meta for meta in metadata}
        assert set(by_id) == {"13", "926"}
        assert len(by_id["13"].versions) == 3

    def test_concurrent_batches_sum_into_hourly_counter(self, api_client, session):
        session.routes["/xmlapi2/thing"] = FakeResponse("<items></items>")
        first = [str(i) for i in range(1, 21)]
        second = [str(i) for i in range(100, 111)]

        threads = [
            threading.Thread(target=api_client.get_batch_metadata, args=(ids,))
            for ids in (first, second)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert api_client.get_request_count() == 3
        assert len(session.calls) == 3


class TestCombineXmlResponses:
    def test_single_response_passes_through(self):
        assert combine_xml_responses(["<items><item id='1'/></items>"]) == "<items><item id='1'/></items>"

    def test_all_empty_gives_empty_document(self):
        assert combine_xml_responses(["<items></items>", "<items/>"]) == EMPTY_ITEMS_XML

    def test_splices_item_bodies(self):
        combined = combine_xml_responses([items_xml(CATAN_ITEM), items_xml(SEAFARERS_ITEM)])
        assert combined.count("<items") == 1
        assert 'id="13"' in combined and 'id="926"' in combined


class TestConfig:
    def test_update_config_applies_to_session_and_limiter(self, api_client, session):
        api_client.update_config(user_agent="Test/1.0", rate_limit_delay=2.5)
        assert session.headers["User-Agent"] == "Test/1.0"
        assert api_client.rate_limiter.min_delay == 2.5
        assert api_client.get_config()["user_agent"] == "Test/1.0"

    def test_reset_request_count(self, api_client, session):
        session.routes["/xmlapi2/search"] = FakeResponse("<items></items>")
        api_client.search_games("catan")
        api_client.reset_request_count()
        assert api_client.get_request_count() == 0

    def test_close_closes_session(self):
        session = FakeSession()
        BGGAPIClient(session=session).close()
        assert session.closed
