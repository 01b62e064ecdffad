import json
import os
import tempfile
import unittest
from datetime import datetime, timedelta
from unittest.mock import patch

from google.oauth2.credentials import Credentials
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from manp_api.core.exceptions import CredentialError
from manp_api.services.credential_store import CredentialStore


class TestCredentialStore(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.token_path = os.path.join(self.tmp.name, "drive_token.json")
        self.store = CredentialStore(
            client_id="client-id",
            client_secret="client-secret",
            redirect_uri="http://localhost:3000/oauth2callback",
            token_path=self.token_path,
        )

    def tearDown(self):
        self.tmp.cleanup()

    def write_token(self, **token):
        with open(self.token_path, "w") as f:
            json.dump(token, f)

    def read_token(self):
        with open(self.token_path) as f:
            return json.load(f)

    def test_authorization_url_requests_offline_drive_access(self):
        url = self.store.authorization_url()

        self.assertTrue(url.startswith("https://accounts.google.com/o/oauth2/auth?"))
        self.assertIn("access_type=offline", url)
        self.assertIn("prompt=consent", url)
        self.assertIn("client_id=client-id", url)
        self.assertIn("drive.file", url)

    def test_load_without_file(self):
        self.assertFalse(self.store.load())
        self.assertFalse(self.store.has_token)

    def test_load_existing_token(self):
        self.write_token(access_token="a1", refresh_token="r1", expiry="2030-01-01T00:00:00")

        self.assertTrue(self.store.load())
        self.assertEqual(self.store.token, {"access_token": "a1", "refresh_token": "r1", "expiry": "2030-01-01T00:00:00"})

    def test_load_corrupt_file(self):
        with open(self.token_path, "w") as f:
            f.write("{not json")

        self.assertFalse(self.store.load())

    def test_credentials_require_a_token(self):
        with self.assertRaises(CredentialError):
            self.store.credentials()

    def test_valid_token_is_not_refreshed(self):
        expiry = (datetime.utcnow() + timedelta(hours=1)).isoformat()
        self.write_token(access_token="a1", refresh_token="r1", expiry=expiry)
        self.store.load()

        with patch.object(Credentials, "refresh", autospec=True) as refresh:
            creds = self.store.credentials()

        refresh.assert_not_called()
        self.assertEqual(creds.token, "a1")
        self.assertEqual(creds.refresh_token, "r1")

    def test_expired_token_is_refreshed_and_persisted(self):
        expired = (datetime.utcnow() - timedelta(hours=1)).isoformat()
        self.write_token(access_token="a1", refresh_token="r1", expiry=expired)
        self.store.load()
        new_expiry = datetime.utcnow() + timedelta(hours=1)

        def fake_refresh(creds, request):
            creds.token = "a2"
            creds.expiry = new_expiry

        with patch.object(Credentials, "refresh", autospec=True, side_effect=fake_refresh):
            creds = self.store.credentials()

        self.assertEqual(creds.token, "a2")
        self.assertEqual(
            self.read_token(),
            {"access_token": "a2", "refresh_token": "r1", "expiry": new_expiry.isoformat()},
        )

    def test_expired_token_without_refresh_token(self):
        expired = (datetime.utcnow() - timedelta(hours=1)).isoformat()
        self.write_token(access_token="a1", refresh_token=None, expiry=expired)
        self.store.load()

        with self.assertRaises(CredentialError):
            self.store.credentials()

    def test_rotation_keeps_previous_refresh_token(self):
        self.write_token(access_token="a1", refresh_token="r1", expiry=None)
        self.store.load()

        self.store.record_refresh(Credentials(token="a2"))

        self.assertEqual(self.read_token(), {"access_token": "a2", "refresh_token": "r1", "expiry": None})

    def test_unchanged_token_is_not_rewritten(self):
        self.write_token(access_token="a1", refresh_token="r1", expiry=None)
        self.store.load()
        os.remove(self.token_path)

        self.store.record_refresh(Credentials(token="a1", refresh_token="r1"))

        self.assertFalse(os.path.exists(self.token_path))

    @patch("manp_api.services.credential_store.Flow")
    def test_exchange_code_persists_tokens(self, flow_cls):
        flow = flow_cls.from_client_config.return_value
        flow.credentials = Credentials(token="a1", refresh_token="r1", expiry=datetime(2030, 1, 1))

        token = self.store.exchange_code("auth-code")

        flow.fetch_token.assert_called_once_with(code="auth-code")
        self.assertEqual(token, {"access_token": "a1", "refresh_token": "r1", "expiry": "2030-01-01T00:00:00"})
        self.assertEqual(self.read_token(), token)
        self.assertTrue(self.store.has_token)

    @patch("manp_api.services.credential_store.Flow")
    def test_exchange_code_failure(self, flow_cls):
        flow_cls.from_client_config.return_value.fetch_token.side_effect = OAuth2Error(description="invalid_grant")

        with self.assertRaises(CredentialError):
            self.store.exchange_code("bad-code")
        self.assertFalse(os.path.exists(self.token_path))

    def test_exchange_requires_code(self):
        with self.assertRaises(CredentialError):
            self.store.exchange_code("")


if __name__ == "__main__":
    unittest.main()
