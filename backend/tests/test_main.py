"""
Tests for backend/trading_bot/main.py

Startup wiring in paper mode: components registered, feed and scheduler
running, bot stopped until started through the API.
"""

from starlette.testclient import TestClient

from trading_bot import dependencies, main


class TestApplicationLifecycle:
    def test_startup_wires_paper_components(self):
        with TestClient(main.app) as client:
            assert client.get("/api/health").json() == {"status": "ok", "trading_mode": "paper"}
            assert main.market_feed.running is True
            assert main.scheduler.running is True

            status = client.get("/api/bot/status").json()
            assert status["running"] is False
            assert set(status["symbols"]) == set(main.settings.bot_symbols)

            assert client.post("/api/bot/start").json()["running"] is True

        assert main.scheduler.task is None
        assert main.market_feed.running is False
        assert dependencies._components is None
