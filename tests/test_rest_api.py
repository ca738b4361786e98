"""
Tests for the claim REST API.
"""

import os
import threading
import time
import unittest
from unittest import mock

from claim_fixtures import (
    ADDR_A,
    ADDR_B,
    CONTRACT,
    KEY_B,
    PROOFS,
    ROOT,
    TOKEN,
    TOTAL,
    make_distributor,
    signature_for,
)

from fastapi.testclient import TestClient

from claim_proofs.api import rest_api
from claim_proofs.api.rest_api import app, get_distributor
from claim_proofs.constants import CLAIM_TYPEHASH
from claim_proofs.utils import bytes_to_hex


def claim_payload(account, amount, key=None, proof=None):
    signature = signature_for(account, amount, key=key).to_dict()
    return {
        "account": account,
        "amount": amount,
        "proof": [bytes_to_hex(p) for p in (PROOFS[account] if proof is None else proof)],
        **signature,
    }


class ClaimAPITestCase(unittest.TestCase):

    def setUp(self):
        self.distributor, self.ledger = make_distributor()
        app.dependency_overrides[get_distributor] = lambda: self.distributor
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()


class TestClaimEndpoint(ClaimAPITestCase):

    def test_successful_claim(self):
        response = self.client.post("/claims", json=claim_payload(ADDR_A, 25))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"account": ADDR_A, "amount": 25, "claimed": True})
        self.assertEqual(self.ledger.balance_of(ADDR_A), 25)

    def test_lowercase_account_is_accepted(self):
        payload = claim_payload(ADDR_A, 25)
        payload["account"] = ADDR_A.lower()

        response = self.client.post("/claims", json=payload)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["account"], ADDR_A)

    def test_already_claimed(self):
        payload = claim_payload(ADDR_A, 25)
        self.client.post("/claims", json=payload)

        response = self.client.post("/claims", json=payload)

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "ALREADY_CLAIMED")

    def test_invalid_signature(self):
        response = self.client.post("/claims", json=claim_payload(ADDR_A, 25, key=KEY_B))

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "INVALID_SIGNATURE")
        self.assertFalse(self.distributor.is_claimed(ADDR_A))

    def test_invalid_proof(self):
        response = self.client.post("/claims", json=claim_payload(ADDR_A, 30, proof=PROOFS[ADDR_A]))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "INVALID_PROOF")

    def test_signature_over_other_amount(self):
        payload = claim_payload(ADDR_A, 25)
        payload.update(signature_for(ADDR_A, 30).to_dict())

        response = self.client.post("/claims", json=payload)

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "INVALID_SIGNATURE")
        self.assertFalse(self.distributor.is_claimed(ADDR_A))

    def test_proof_of_other_account(self):
        response = self.client.post("/claims", json=claim_payload(ADDR_A, 25, proof=PROOFS[ADDR_B]))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "INVALID_PROOF")
        self.assertFalse(self.distributor.is_claimed(ADDR_A))

    def test_transfer_failed(self):
        self.distributor, self.ledger = make_distributor(balance=0)

        response = self.client.post("/claims", json=claim_payload(ADDR_B, 100))

        self.assertEqual(response.status_code, 502)
        body = response.json()
        self.assertEqual(body["code"], "TRANSFER_FAILED")
        self.assertEqual(body["details"]["error_type"], "TransferFailedError")
        self.assertFalse(self.distributor.is_claimed(ADDR_B))

    def test_malformed_payloads(self):
        good = claim_payload(ADDR_A, 25)
        cases = {
            "short r": {**good, "r": "0x1234"},
            "bad proof step": {**good, "proof": ["0xzz"]},
            "bad account": {**good, "account": "0x1234"},
            "negative amount": {**good, "amount": -1},
            "missing v": {k: v for k, v in good.items() if k != "v"},
        }
        for label, payload in cases.items():
            with self.subTest(case=label):
                response = self.client.post("/claims", json=payload)
                self.assertEqual(response.status_code, 422)
        self.assertFalse(self.distributor.is_claimed(ADDR_A))


class TestQueryEndpoints(ClaimAPITestCase):

    def test_claim_status(self):
        response = self.client.get(f"/claims/{ADDR_A}")
        self.assertEqual(response.json(), {"account": ADDR_A, "claimed": False})

        self.client.post("/claims", json=claim_payload(ADDR_A, 25))

        response = self.client.get(f"/claims/{ADDR_A.lower()}")
        self.assertEqual(response.json(), {"account": ADDR_A, "claimed": True})

    def test_claim_status_invalid_account(self):
        response = self.client.get("/claims/0x1234")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

    def test_distributor_info(self):
        response = self.client.get("/distributor")

        self.assertEqual(response.status_code, 200)
        info = response.json()
        self.assertEqual(info["merkle_root"], bytes_to_hex(ROOT))
        self.assertEqual(info["token"], TOKEN)
        self.assertEqual(info["claim_typehash"], bytes_to_hex(CLAIM_TYPEHASH))
        self.assertEqual(info["domain_separator"], bytes_to_hex(self.distributor.domain_separator))
        self.assertEqual(info["domain"]["verifying_contract"], CONTRACT)
        self.assertEqual(info["claimed_count"], 0)

    def test_digest(self):
        response = self.client.get(f"/digest/{ADDR_A}/25")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["leaf"], bytes_to_hex(self.distributor.leaf_hash(ADDR_A, 25)))
        self.assertEqual(body["digest"], bytes_to_hex(self.distributor.authorization_digest(ADDR_A, 25)))

    def test_digest_invalid_amount(self):
        response = self.client.get(f"/digest/{ADDR_A}/-5")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

    def test_root(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Claim Proofs API")


class TestVerifyEndpoints(ClaimAPITestCase):

    def test_verify_signature(self):
        payload = claim_payload(ADDR_A, 25)
        del payload["proof"]

        response = self.client.post("/verify/signature", json=payload)

        self.assertEqual(response.json(), {"valid": True, "recovered_signer": ADDR_A})
        self.assertFalse(self.distributor.is_claimed(ADDR_A))

    def test_verify_signature_wrong_signer(self):
        payload = claim_payload(ADDR_A, 25, key=KEY_B)
        del payload["proof"]

        body = self.client.post("/verify/signature", json=payload).json()

        self.assertFalse(body["valid"])
        self.assertEqual(body["recovered_signer"], ADDR_B)

    def test_verify_proof(self):
        proof = [bytes_to_hex(p) for p in PROOFS[ADDR_A]]

        valid = self.client.post("/verify/proof", json={"account": ADDR_A, "amount": 25, "proof": proof})
        invalid = self.client.post("/verify/proof", json={"account": ADDR_A, "amount": 26, "proof": proof})

        self.assertTrue(valid.json()["valid"])
        self.assertFalse(invalid.json()["valid"])
        self.assertFalse(self.distributor.is_claimed(ADDR_A))


class TestHealthAndErrors(unittest.TestCase):

    ENV = {
        "CLAIM_MERKLE_ROOT": bytes_to_hex(ROOT),
        "CLAIM_TOKEN_ADDRESS": TOKEN,
        "CLAIM_CONTRACT_ADDRESS": CONTRACT,
        "CLAIM_CHAIN_ID": "31337",
        "CLAIM_DISTRIBUTOR_BALANCE": str(TOTAL),
    }

    def setUp(self):
        self.client = TestClient(app)

    def test_health_degraded_without_configuration(self):
        with mock.patch.object(rest_api, "distributor", None), \
                mock.patch.dict(os.environ, {}, clear=True):
            response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "degraded")
        self.assertFalse(response.json()["distributor"])

    def test_distributor_built_from_environment(self):
        with mock.patch.object(rest_api, "distributor", None), \
                mock.patch.dict(os.environ, self.ENV, clear=True):
            health = self.client.get("/health").json()
            info = self.client.get("/distributor").json()
            built = rest_api.distributor

        self.assertEqual(health["status"], "healthy")
        self.assertEqual(info["merkle_root"], bytes_to_hex(ROOT))
        self.assertEqual(info["domain"]["chain_id"], 31337)
        self.assertEqual(built.ledger.balance_of(CONTRACT), TOTAL)

    def test_concurrent_first_requests_share_one_distributor(self):
        built = []
        real_distributor = rest_api.MerkleDistributor

        def slow_distributor(*args, **kwargs):
            time.sleep(0.05)
            instance = real_distributor(*args, **kwargs)
            built.append(instance)
            return instance

        workers = 4
        barrier = threading.Barrier(workers)
        seen = []

        def first_request():
            barrier.wait()
            seen.append(rest_api.get_distributor())

        with mock.patch.object(rest_api, "distributor", None), \
                mock.patch.object(rest_api, "MerkleDistributor", side_effect=slow_distributor), \
                mock.patch.dict(os.environ, self.ENV, clear=True):
            threads = [threading.Thread(target=first_request) for _ in range(workers)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        self.assertEqual(len(built), 1)
        self.assertEqual(len({id(d) for d in seen}), 1)

    def test_unexpected_error_returns_internal_error(self):
        broken = mock.MagicMock()
        broken.is_claimed.side_effect = RuntimeError("boom")
        app.dependency_overrides[get_distributor] = lambda: broken
        try:
            client = TestClient(app, raise_server_exceptions=False)
            response = client.get(f"/claims/{ADDR_A}")
        finally:
            app.dependency_overrides.clear()

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "INTERNAL_ERROR")


if __name__ == "__main__":
    unittest.main(verbosity=2)
