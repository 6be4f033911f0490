import asyncio

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from emergicare.common.realtime.change_feed import ChangeFeed, ChangeNotice
from emergicare.main import app
from tests.conftest import make_token


class TestChangeFeed:
    async def test_subscriber_receives_notice_for_its_tables(self):
        feed = ChangeFeed(queue_size=10)
        async with feed.subscribe(["consultations"]) as sub:
            feed.publish("consultations", "insert")
            notice = await sub.get(timeout=1)
        assert notice == ChangeNotice("consultations", "insert")
        assert notice.to_dict() == {"table": "consultations", "event": "insert"}

    async def test_other_tables_are_filtered_out(self):
        feed = ChangeFeed(queue_size=10)
        async with feed.subscribe(["doctors"]) as sub:
            feed.publish("consultations", "update")
            assert sub.pending() == 0
            feed.publish("doctors", "update")
            assert sub.pending() == 1

    async def test_fan_out_to_every_subscriber(self):
        feed = ChangeFeed(queue_size=10)
        async with feed.subscribe(["consultations"]) as a, feed.subscribe(["consultations", "doctors"]) as b:
            assert feed.subscriber_count == 2
            feed.publish("consultations", "update")
            assert (await a.get(timeout=1)).event == "update"
            assert (await b.get(timeout=1)).event == "update"
        assert feed.subscriber_count == 0

    async def test_slow_subscriber_drops_instead_of_blocking(self):
        feed = ChangeFeed(queue_size=2)
        async with feed.subscribe(["consultations"]) as sub:
            for _ in range(5):
                feed.publish("consultations", "update")
            assert sub.pending() == 2
            assert sub.dropped == 3

    async def test_no_notice_means_timeout(self):
        feed = ChangeFeed(queue_size=2)
        async with feed.subscribe(["profiles"]) as sub:
            with pytest.raises(asyncio.TimeoutError):
                await sub.get(timeout=0.05)

    def test_rejects_unknown_tables_and_events(self):
        feed = ChangeFeed()
        with pytest.raises(ValueError):
            feed.publish("payments", "insert")
        with pytest.raises(ValueError):
            feed.publish("consultations", "truncate")

    async def test_rejects_bad_subscriptions(self):
        feed = ChangeFeed()
        with pytest.raises(ValueError):
            async with feed.subscribe(["payments"]):
                pass
        with pytest.raises(ValueError):
            async with feed.subscribe([]):
                pass


class TestRealtimeSocket:
    async def test_invalid_token_is_refused(self):
        client = TestClient(app)
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect("/realtime?token=garbage"):
                pass
        assert exc.value.code == 1008

    async def test_unknown_table_is_refused(self, patient):
        client = TestClient(app)
        token = make_token(patient.id)
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect(f"/realtime?token={token}&tables=payments"):
                pass
        assert exc.value.code == 1003

    async def test_streams_payload_free_notices(self, patient):
        from emergicare.common.realtime.change_feed import change_feed

        client = TestClient(app)
        token = make_token(patient.id)
        with client.websocket_connect(f"/realtime?token={token}&tables=consultations") as ws:
            ws.portal.call(change_feed.publish, "doctors", "update")
            ws.portal.call(change_feed.publish, "consultations", "insert")
            assert ws.receive_json() == {"table": "consultations", "event": "insert"}
