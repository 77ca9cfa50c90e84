"""Unit tests for admin balance and readiness routes."""

import base64
import unittest

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from solders.keypair import Keypair

from droploop.api.admin_api.dependencies import (
    get_network_client_factory,
    get_settings_dependency,
    require_admin_funds,
)
from droploop.api.admin_api.errors import register_error_handlers
from droploop.api.admin_api.routers.treasury import router
from droploop.domain.errors import NetworkError
from droploop.envs.admin_env import Settings
from tests.fixtures import FakeNetworkClient


class TestTreasuryRouter(unittest.TestCase):
    """Test cases for /api/admin routes and the balance gate dependency."""

    def setUp(self):
        self.keypair = Keypair()
        self.public_key = str(self.keypair.pubkey())
        self.settings = Settings(
            admin_private_key=base64.b64encode(bytes(self.keypair)).decode(),
            min_required_lamports=900_000_000,
        )
        self.network = FakeNetworkClient()

        self.app = FastAPI()
        register_error_handlers(self.app)
        self.app.include_router(router, prefix="/api/admin")

        @self.app.post("/api/token/mint")
        async def mint(balance: int = Depends(require_admin_funds)):
            return {"success": True, "balance": balance}

        self.app.dependency_overrides[get_settings_dependency] = lambda: self.settings
        self.app.dependency_overrides[get_network_client_factory] = (
            lambda: lambda: self.network
        )
        self.client = TestClient(self.app)

    def tearDown(self):
        self.app.dependency_overrides.clear()

    def test_balance_reports_sufficiency(self):
        self.network.balances[self.public_key] = 1_500_000_000

        response = self.client.get("/api/admin/balance")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["publicKey"], self.public_key)
        self.assertEqual(body["cluster"], "devnet")
        self.assertEqual(body["lamports"], 1_500_000_000)
        self.assertEqual(body["sol"], 1.5)
        self.assertEqual(body["requiredLamports"], 900_000_000)
        self.assertTrue(body["sufficient"])

    def test_balance_reports_insufficiency(self):
        response = self.client.get("/api/admin/balance")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["sufficient"])

    def test_readiness_passes_at_threshold(self):
        self.network.balances[self.public_key] = 900_000_000

        response = self.client.get("/api/admin/readiness")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["currentLamports"], 900_000_000)

    def test_readiness_with_explicit_requirement(self):
        self.network.balances[self.public_key] = 1_500_000_000

        response = self.client.get("/api/admin/readiness?required=2000000000")

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["code"], "INSUFFICIENT_FUNDS")
        self.assertEqual(body["currentLamports"], 1_500_000_000)
        self.assertEqual(body["requiredLamports"], 2_000_000_000)

    def test_gate_dependency_blocks_fee_paying_route(self):
        self.network.balances[self.public_key] = 100

        response = self.client.post("/api/token/mint")

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"], "Insufficient funds in admin wallet")
        self.assertEqual(body["code"], "INSUFFICIENT_FUNDS")

    def test_gate_dependency_passes_balance_through(self):
        self.network.balances[self.public_key] = 1_000_000_000

        response = self.client.post("/api/token/mint")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["balance"], 1_000_000_000)

    def test_missing_credential_is_reported(self):
        self.settings = Settings()

        response = self.client.get("/api/admin/balance")

        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertEqual(body["kind"], "CredentialParseError")
        self.assertEqual(body["error"], "ADMIN_PRIVATE_KEY is not configured")

    def test_network_failure_is_reported(self):
        self.network.balance_error = NetworkError("Balance query failed: timeout")

        response = self.client.get("/api/admin/readiness")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["kind"], "NetworkError")
