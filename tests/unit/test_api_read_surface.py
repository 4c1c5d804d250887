"""HTTP read surface over the engine (FastAPI + httpx ASGITransport)."""

import logging

import pytest
from httpx import AsyncClient

from src.ba_common.request_log import REQUEST_ID_HEADER, market_of
from tests.harness import MARKET, BatchHarness

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
SETTLER = "0x5555555555555555555555555555555555555555"
BASE = f"/api/v1/markets/{MARKET}"


def _settle_one_match(h: BatchHarness) -> None:
    h.configure()
    h.open()
    h.fund(ALICE, amount1=1_000)
    h.fund(BOB, amount0=1_000, amount1=1_000)
    h.fund(SETTLER, amount0=1_000, amount1=1_000_000)
    h.commit(ALICE, 100, 1000, True)
    h.commit(BOB, 80, 950, False)
    h.to_reveal()
    h.reveal(ALICE)
    h.reveal(BOB)
    h.to_settle()
    h.settle(SETTLER, 1000, 100, 80, [80, 80])


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_default_engine_serves_no_markets(self, client: AsyncClient) -> None:
        resp = await client.get(f"{BASE}/pool")
        assert resp.status_code == 404
        assert resp.json()["code"] == 4001


class TestPoolAndPhase:
    async def test_unknown_market(self, api_harness: BatchHarness, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/markets/NOPE/pool")
        assert resp.status_code == 404
        body = resp.json()
        assert body["code"] == 4001
        assert body["data"] is None

    async def test_pool(self, api_harness: BatchHarness, client: AsyncClient) -> None:
        api_harness.configure(fee_rate=30)
        resp = await client.get(f"{BASE}/pool")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["mode"] == "OPEN"
        assert data["fee_rate_bps"] == 30
        assert data["allow_list_root"] == "0x" + "00" * 32
        assert data["current_batch_id"] == 0

    async def test_phase_moves_with_height(
        self, api_harness: BatchHarness, client: AsyncClient
    ) -> None:
        api_harness.configure()
        resp = await client.get(f"{BASE}/phase")
        assert resp.json()["data"]["phase"] == "INACTIVE"

        api_harness.open()
        api_harness.to_reveal()
        body = (await client.get(f"{BASE}/phase")).json()
        assert body["data"] == {"market_id": MARKET, "batch_id": 1, "phase": "REVEAL"}
        assert body["height"] == 111

    async def test_no_current_batch(self, api_harness: BatchHarness, client: AsyncClient) -> None:
        api_harness.configure()
        resp = await client.get(f"{BASE}/batches/current")
        assert resp.status_code == 404
        assert resp.json()["code"] == 1003


class TestBatchReads:
    async def test_batch_detail(self, api_harness: BatchHarness, client: AsyncClient) -> None:
        _settle_one_match(api_harness)
        resp = await client.get(f"{BASE}/batches/1")
        data = resp.json()["data"]
        assert data["phase"] == "CLAIM"
        assert data["settled"] is True
        assert data["clearing_price"] == 1000
        assert data["revealed_count"] == 2
        assert data["orders_root"].startswith("0x")
        current = (await client.get(f"{BASE}/batches/current")).json()["data"]
        assert current == data

    async def test_slots_expose_side_only(
        self, api_harness: BatchHarness, client: AsyncClient
    ) -> None:
        _settle_one_match(api_harness)
        data = (await client.get(f"{BASE}/batches/1/slots")).json()["data"]
        assert data["slots"] == [
            {"slot": 0, "trader": ALICE, "is_buy": True},
            {"slot": 1, "trader": BOB, "is_buy": False},
        ]

    async def test_commitment_and_claimable(
        self, api_harness: BatchHarness, client: AsyncClient
    ) -> None:
        _settle_one_match(api_harness)
        commitment = (await client.get(f"{BASE}/batches/1/commitments/{ALICE}")).json()["data"]
        assert commitment["status"] == "REVEALED"
        assert commitment["deposit"] == 100
        claimable = (await client.get(f"{BASE}/batches/1/claimables/{BOB}")).json()["data"]
        assert claimable == {
            "batch_id": 1,
            "trader": BOB,
            "status": "PENDING",
            "amount0": 0,
            "amount1": 80_000,
        }

    async def test_unknown_trader_reads_as_none(
        self, api_harness: BatchHarness, client: AsyncClient
    ) -> None:
        _settle_one_match(api_harness)
        stranger = "0x7777777777777777777777777777777777777777"
        data = (await client.get(f"{BASE}/batches/1/claimables/{stranger}")).json()["data"]
        assert data["status"] == "NONE"
        assert data["amount1"] == 0

    async def test_bad_address(self, api_harness: BatchHarness, client: AsyncClient) -> None:
        _settle_one_match(api_harness)
        resp = await client.get(f"{BASE}/batches/1/commitments/not-an-address")
        assert resp.status_code == 422
        assert resp.json()["code"] == 2006

    async def test_settlement_and_history(
        self, api_harness: BatchHarness, client: AsyncClient
    ) -> None:
        _settle_one_match(api_harness)
        settlement = (await client.get(f"{BASE}/batches/1/settlement")).json()["data"]
        assert settlement["matched_volume"] == 80
        assert settlement["settled_height"] == 121

        history = (await client.get(f"{BASE}/batches/history?limit=5")).json()["data"]
        assert [item["batch_id"] for item in history["items"]] == [1]
        prices = (await client.get(f"{BASE}/prices")).json()["data"]
        assert prices["items"] == [{"batch_id": 1, "clearing_price": 1000}]

    async def test_unsettled_settlement(
        self, api_harness: BatchHarness, client: AsyncClient
    ) -> None:
        api_harness.configure()
        api_harness.open()
        resp = await client.get(f"{BASE}/batches/1/settlement")
        assert resp.status_code == 409
        assert resp.json()["code"] == 4010

    async def test_missing_batch(self, api_harness: BatchHarness, client: AsyncClient) -> None:
        api_harness.configure()
        resp = await client.get(f"{BASE}/batches/3/settlement")
        assert resp.status_code == 404
        assert resp.json()["code"] == 1003


class TestRequestLog:
    async def test_generated_id_is_echoed(
        self, api_harness: BatchHarness, client: AsyncClient
    ) -> None:
        api_harness.configure()
        resp = await client.get(f"{BASE}/pool")
        header = resp.headers[REQUEST_ID_HEADER]
        assert header.startswith("req_")
        assert resp.json()["request_id"] == header

    async def test_inbound_id_is_reused(
        self, api_harness: BatchHarness, client: AsyncClient
    ) -> None:
        api_harness.configure()
        resp = await client.get(f"{BASE}/phase", headers={REQUEST_ID_HEADER: "settler-42"})
        assert resp.headers[REQUEST_ID_HEADER] == "settler-42"
        assert resp.json()["request_id"] == "settler-42"

    async def test_oversized_inbound_id_is_replaced(
        self, api_harness: BatchHarness, client: AsyncClient
    ) -> None:
        api_harness.configure()
        resp = await client.get(f"{BASE}/phase", headers={REQUEST_ID_HEADER: "x" * 65})
        assert resp.headers[REQUEST_ID_HEADER].startswith("req_")

    async def test_error_envelope_carries_id(
        self, api_harness: BatchHarness, client: AsyncClient
    ) -> None:
        resp = await client.get("/api/v1/markets/NOPE/pool", headers={REQUEST_ID_HEADER: "r1"})
        assert resp.status_code == 404
        assert resp.json()["request_id"] == "r1"

    async def test_logs_market(
        self,
        api_harness: BatchHarness,
        client: AsyncClient,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        api_harness.configure()
        caplog.set_level(logging.INFO, logger="ba.request")
        await client.get(f"{BASE}/phase")
        messages = [r.getMessage() for r in caplog.records if r.name == "ba.request"]
        assert any(f"market={MARKET} 200" in m for m in messages)

    @pytest.mark.parametrize(
        ("path", "market"),
        [
            ("/api/v1/markets/ETH-USDC/batches/1", "ETH-USDC"),
            ("/health", "-"),
        ],
    )
    def test_market_of(self, path: str, market: str) -> None:
        assert market_of(path) == market
