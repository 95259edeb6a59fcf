"""Tests for le_route53.challenge."""
import unittest

import pytest

from le_route53 import errors
from le_route53.tests import util as test_util


class ComputeDigestTest(unittest.TestCase):
    """Tests for le_route53.challenge.compute_digest."""

    def _call(self, key_authorization):
        from le_route53.challenge import compute_digest
        return compute_digest(key_authorization)

    def test_known_values(self):
        assert self._call("auth1") == "MaQzq64kCS34Y251LQPw3B0IteKSVJto619kdV84kDw"
        assert self._call("token.thumbprint") == \
            "61rBZ_4knHblO0MNoxFsXZ_eTFUHum0B6IVRbhvUn5I"
        assert self._call("") == "47DEQpj8HBSa-_TImW-5JCeuQeRkm5NMpJWZG3hSuFU"

    def test_url_safe_unpadded(self):
        for key_authorization in ("", "a?>b", "auth1", "x" * 1000, "é.ü"):
            digest = self._call(key_authorization)
            assert "+" not in digest
            assert "/" not in digest
            assert not digest.endswith("=")
            assert len(digest) == 43

    def test_deterministic(self):
        assert self._call("a?>b") == self._call("a?>b")
        assert self._call("a?>b") == "Tx_imgX-XxtOLMdPrBgJkEkENHjtTHo3FLCoSMBgTV0"
        assert self._call("auth1") != self._call("auth2")

    def test_matches_acme_validation(self):
        import josepy as jose
        from acme import challenges
        key = jose.JWKRSA.load(test_util.load_vector("rsa2048_key.pem"))
        chall = challenges.DNS01(token=b"x" * 16)
        assert self._call(chall.key_authorization(key)) == chall.validation(key)


class DNSChallengePublisherTest(unittest.TestCase):
    """Tests for le_route53.challenge.DNSChallengePublisher."""

    def setUp(self):
        from le_route53.challenge import DNSChallengePublisher
        self.provider = test_util.FakeDNSProvider()
        self.publisher = DNSChallengePublisher(self.provider)

    def test_set_challenge(self):
        pending = self.publisher.set_challenge("x.com", "auth1")

        assert self.provider.changes == [
            ("UPSERT", "_acme-challenge.x.com",
             '"MaQzq64kCS34Y251LQPw3B0IteKSVJto619kdV84kDw"', 300)]
        assert pending.handle == "change-1"
        assert pending.record.domain == "x.com"
        assert pending.record.value == "MaQzq64kCS34Y251LQPw3B0IteKSVJto619kdV84kDw"
        assert self.publisher.in_flight == pending.record

    def test_set_then_remove_deletes_same_value(self):
        pending = self.publisher.set_challenge("x.com", "auth1")
        handle = self.publisher.remove_challenge(pending.record)

        upsert, delete = self.provider.changes
        assert delete[0] == "DELETE"
        assert delete[1:] == upsert[1:]
        assert handle == "change-2"
        assert self.publisher.in_flight is None

    def test_overlapping_rounds_rejected(self):
        first = self.publisher.set_challenge("x.com", "auth1")

        with pytest.raises(errors.ChallengeInFlightError):
            self.publisher.set_challenge("y.com", "auth2")
        # the rejected call never reached the provider
        assert len(self.provider.changes) == 1

        self.publisher.remove_challenge(first.record)
        second = self.publisher.set_challenge("y.com", "auth2")
        self.publisher.remove_challenge(second.record)

        assert [c[0:2] for c in self.provider.changes] == [
            ("UPSERT", "_acme-challenge.x.com"),
            ("DELETE", "_acme-challenge.x.com"),
            ("UPSERT", "_acme-challenge.y.com"),
            ("DELETE", "_acme-challenge.y.com"),
        ]
        assert self.provider.changes[1][2] == self.provider.changes[0][2]
        assert self.provider.changes[3][2] == self.provider.changes[2][2]
        assert self.provider.changes[0][2] != self.provider.changes[2][2]

    def test_set_provider_error(self):
        self.provider.upsert_error = errors.ProviderError("denied")

        with pytest.raises(errors.ProviderError) as exc_info:
            self.publisher.set_challenge("x.com", "auth1")

        assert exc_info.value.domain == "x.com"
        assert exc_info.value.stage == "set"
        assert self.publisher.in_flight is None
        # a failed set does not block the next round
        self.provider.upsert_error = None
        self.publisher.set_challenge("x.com", "auth1")

    def test_remove_provider_error(self):
        pending = self.publisher.set_challenge("x.com", "auth1")
        self.provider.delete_error = errors.ProviderError("denied")

        with pytest.raises(errors.ProviderError) as exc_info:
            self.publisher.remove_challenge(pending.record)

        assert str(exc_info.value) == "x.com (remove): denied"
        assert self.publisher.in_flight is None

    def test_custom_ttl(self):
        from le_route53.challenge import DNSChallengePublisher
        publisher = DNSChallengePublisher(self.provider, ttl=60)
        pending = publisher.set_challenge("x.com", "auth1")
        assert pending.record.ttl == 60
        assert self.provider.changes[0][3] == 60


if __name__ == "__main__":
    unittest.main()  # pragma: no cover
