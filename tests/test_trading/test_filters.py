"""Tests for OpportunityFilter — social, token name and dev-buy checks.

All HTTP calls are mocked. No real metadata URIs are fetched.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from config.settings import FilterSettings
from src.trading.filters import OpportunityFilter, dev_buy_limit_lamports
from tests.factories import make_opportunity


def _mock_http(body: str = "", *, exc: Exception | None = None) -> AsyncMock:
    http = AsyncMock(spec=httpx.AsyncClient)
    if exc is not None:
        http.get = AsyncMock(side_effect=exc)
    else:
        resp = MagicMock(spec=httpx.Response)
        resp.text = body
        http.get = AsyncMock(return_value=resp)
    return http


def _filter(http: AsyncMock | None = None, **settings) -> OpportunityFilter:
    return OpportunityFilter(FilterSettings(**settings), http_client=http or _mock_http())


class TestAllDisabled:
    async def test_everything_passes(self):
        http = _mock_http()
        f = _filter(http)
        assert await f.evaluate(make_opportunity(name="anything", amount_in=0))
        http.get.assert_not_called()


class TestSocialFilter:
    async def test_body_contains_allowed_string(self):
        http = _mock_http('{"twitter": "https://x.com/bonk_inu"}')
        f = _filter(http, x_check=True, x_filter_list=["t.me/", "x.com/"])
        opp = make_opportunity(uri="https://ipfs.io/ipfs/meta.json")

        assert await f.evaluate(opp)
        http.get.assert_awaited_once_with("https://ipfs.io/ipfs/meta.json")

    async def test_body_without_match_rejected(self):
        f = _filter(_mock_http('{"website": ""}'), x_check=True, x_filter_list=["x.com/"])
        assert not await f.evaluate(make_opportunity())

    async def test_empty_allow_list_rejects(self):
        f = _filter(_mock_http("x.com/"), x_check=True, x_filter_list=[])
        assert not await f.evaluate(make_opportunity())

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ConnectError("refused"),
            httpx.ReadTimeout("slow"),
            httpx.UnsupportedProtocol("ipfs://"),
            httpx.InvalidURL("bad"),
            UnicodeError("label empty or too long"),
        ],
    )
    async def test_fetch_failure_rejects(self, exc):
        f = _filter(_mock_http(exc=exc), x_check=True, x_filter_list=["x.com/"])
        assert not await f.evaluate(make_opportunity())

    @pytest.mark.parametrize("uri", ["http://xn--zz.com/", "", "ipfs://bafy/meta.json"])
    async def test_unfetchable_uri_rejected_without_network(self, uri):
        # real client: these fail while the request is built, before any I/O
        f = OpportunityFilter(FilterSettings(x_check=True, x_filter_list=["x"]))
        try:
            assert not await f.evaluate(make_opportunity(uri=uri))
        finally:
            await f.close()


class TestTokenNameFilter:
    async def test_exact_name_passes(self):
        f = _filter(token_name_check=True, token_name_filter_list=["Bonk", "Foo"])
        assert await f.evaluate(make_opportunity(name="Foo"))

    @pytest.mark.parametrize("name", ["foo", "Foo ", "FooBar", ""])
    async def test_non_exact_name_rejected(self, name):
        f = _filter(token_name_check=True, token_name_filter_list=["Foo"])
        assert not await f.evaluate(make_opportunity(name=name))


class TestDevBuyFilter:
    def test_limit_conversion(self):
        assert dev_buy_limit_lamports(0.5) == 500_000_000
        assert dev_buy_limit_lamports(0.1) == 100_000_000
        assert dev_buy_limit_lamports(0) == 0

    async def test_equal_to_limit_rejected(self):
        f = _filter(dev_buy_check=True, dev_buy_limit=0.5)
        assert not await f.evaluate(make_opportunity(amount_in=500_000_000))

    async def test_one_lamport_above_limit_accepted(self):
        f = _filter(dev_buy_check=True, dev_buy_limit=0.5)
        assert await f.evaluate(make_opportunity(amount_in=500_000_001))

    async def test_below_limit_rejected(self):
        f = _filter(dev_buy_check=True, dev_buy_limit=0.5)
        assert not await f.evaluate(make_opportunity(amount_in=1))


class TestOrdering:
    async def test_social_rejection_short_circuits(self):
        f = _filter(
            _mock_http("nothing here"),
            x_check=True,
            x_filter_list=["x.com/"],
            token_name_check=True,
            token_name_filter_list=["Foo"],
        )
        f.check_token_name = MagicMock(return_value=True)
        f.check_dev_buy = MagicMock(return_value=True)

        assert not await f.evaluate(make_opportunity())
        f.check_token_name.assert_not_called()
        f.check_dev_buy.assert_not_called()

    async def test_name_rejection_skips_dev_buy(self):
        f = _filter(token_name_check=True, token_name_filter_list=["Other"], dev_buy_check=True)
        f.check_dev_buy = MagicMock(return_value=True)

        assert not await f.evaluate(make_opportunity(name="Foo"))
        f.check_dev_buy.assert_not_called()

    async def test_social_runs_before_name(self):
        order: list[str] = []
        f = _filter(x_check=True, token_name_check=True, dev_buy_check=True)

        async def social(_opp):
            order.append("social")
            return True

        def name(_opp):
            order.append("name")
            return True

        def dev(_opp):
            order.append("dev")
            return True

        f.check_social = social
        f.check_token_name = name
        f.check_dev_buy = dev

        assert await f.evaluate(make_opportunity())
        assert order == ["social", "name", "dev"]

    async def test_disabled_filter_ignores_data(self):
        http = _mock_http()
        f = _filter(
            http,
            x_check=False,
            x_filter_list=["never"],
            token_name_check=False,
            token_name_filter_list=["never"],
            dev_buy_check=False,
            dev_buy_limit=1000.0,
        )
        assert await f.evaluate(make_opportunity(name="whatever", amount_in=0))
        http.get.assert_not_called()


async def test_close_closes_http_client():
    http = _mock_http()
    f = _filter(http)
    await f.close()
    http.aclose.assert_awaited_once()
