import unittest
from unittest.mock import MagicMock

import httpx

from manp_api.api.deps import get_credential_store
from manp_api.core.exceptions import CredentialError
from manp_api.main import app
from manp_api.services.credential_store import CredentialStore


class TestAuthApi(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.store = MagicMock(spec=CredentialStore)
        self.store.authorization_url.return_value = "https://accounts.google.com/o/oauth2/auth?client_id=x"
        app.dependency_overrides[get_credential_store] = lambda: self.store
        self.client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://testserver",
        )

    async def asyncTearDown(self):
        await self.client.aclose()
        app.dependency_overrides.clear()

    async def test_auth_returns_consent_url(self):
        response = await self.client.get("/auth")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/plain"))
        self.assertIn("https://accounts.google.com/o/oauth2/auth?client_id=x", response.text)

    async def test_callback_exchanges_code(self):
        response = await self.client.get("/oauth2callback", params={"code": "abc"})

        self.assertEqual(response.status_code, 200)
        self.assertIn("Authorization successful", response.text)
        self.store.exchange_code.assert_called_once_with("abc")

    async def test_callback_without_code(self):
        response = await self.client.get("/oauth2callback")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "invalid_request")
        self.store.exchange_code.assert_not_called()

    async def test_callback_exchange_failure(self):
        self.store.exchange_code.side_effect = CredentialError("Failed to exchange authorization code.")

        response = await self.client.get("/oauth2callback", params={"code": "bad"})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {"error": "Failed to exchange authorization code.", "code": "credential_error"},
        )


if __name__ == "__main__":
    unittest.main()
