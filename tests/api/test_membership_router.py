"""Tests for the membership status endpoints."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from keycloak_discovery.api.app import create_status_app


class TestMembershipRouter:

    @pytest.fixture
    def active_agent(self, make_agent):
        agent = make_agent("kc-0")
        asyncio.run(agent.join())
        return agent

    def test_health_ok_while_active(self, active_agent):
        client = TestClient(create_status_app(active_agent))

        response = client.get("/membership/health")

        assert response.status_code == 200
        body = response.json()
        assert body["healthy"] is True
        assert body["state"] == "active"
        assert body["address"] == "10.0.0.10"
        assert body["member_count"] == 1

    def test_health_unavailable_before_joining(self, make_agent):
        client = TestClient(create_status_app(make_agent("kc-0")))

        response = client.get("/membership/health")

        assert response.status_code == 503
        assert response.json()["state"] == "init"
        assert response.json()["healthy"] is False

    def test_view(self, active_agent):
        client = TestClient(create_status_app(active_agent))

        response = client.get("/membership/view")

        assert response.status_code == 200
        body = response.json()
        assert body["own_node_id"] == "kc-0"
        assert body["initial_hosts"] == "10.0.0.10[7800]"
        assert [m["node_id"] for m in body["members"]] == ["kc-0"]
        assert body["members"][0]["incarnation"] == 1
