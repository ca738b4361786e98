"""
Tests for the claim API client error mapping.
"""

import unittest
from unittest import mock

import claim_fixtures  # noqa: F401  (puts src on the import path)

import requests

from claim_proofs.api.claim_client import ClaimAPIClient, ClaimAPIError


def fake_response(status_code, payload=None, text=""):
    response = mock.MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = "Error"
    response.text = text
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


class TestClaimAPIClient(unittest.TestCase):

    def setUp(self):
        self.client = ClaimAPIClient("http://claims.test/")
        patcher = mock.patch.object(self.client.session, "request")
        self.request = patcher.start()
        self.addCleanup(patcher.stop)

    def test_base_url_is_normalized(self):
        self.assertEqual(self.client.base_url, "http://claims.test")

    def test_submit_claim(self):
        self.request.return_value = fake_response(200, {"account": "0xabc", "amount": 1, "claimed": True})
        payload = {"account": "0xabc", "amount": 1}

        result = self.client.submit_claim(payload)

        self.assertTrue(result["claimed"])
        self.request.assert_called_once_with(
            "POST", "http://claims.test/claims", timeout=30, json=payload
        )

    def test_rejection_carries_server_code(self):
        self.request.return_value = fake_response(
            409, {"error": "Account has already claimed", "code": "ALREADY_CLAIMED"}
        )

        with self.assertRaises(ClaimAPIError) as ctx:
            self.client.submit_claim({})

        self.assertEqual(ctx.exception.code, "ALREADY_CLAIMED")
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(str(ctx.exception), "Account has already claimed")

    def test_non_json_error(self):
        self.request.return_value = fake_response(502, text="Bad Gateway")

        with self.assertRaises(ClaimAPIError) as ctx:
            self.client.get_distributor()

        self.assertIsNone(ctx.exception.code)
        self.assertEqual(ctx.exception.status_code, 502)

    def test_connection_error(self):
        self.request.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(ClaimAPIError) as ctx:
            self.client.get_claim_status("0xabc")

        self.assertIn("Failed to connect", str(ctx.exception))

    def test_health_check(self):
        self.request.return_value = fake_response(200, {"status": "healthy", "distributor": True})
        self.assertTrue(self.client.health_check())

        self.request.return_value = fake_response(200, {"status": "degraded", "distributor": False})
        self.assertFalse(self.client.health_check())

        self.request.side_effect = requests.Timeout("slow")
        self.assertFalse(self.client.health_check())


if __name__ == "__main__":
    unittest.main(verbosity=2)
