"""Tests for le_route53.solver."""
import unittest
from unittest import mock

import pytest

from le_route53 import errors
from le_route53.models import ChangeStatus
from le_route53.tests import util as test_util


class DNS01SolverTest(unittest.TestCase):
    """Tests for le_route53.solver.DNS01Solver."""

    def setUp(self):
        from le_route53.challenge import DNSChallengePublisher
        from le_route53.propagation import PropagationWaiter
        from le_route53.solver import DNS01Solver
        self.provider = test_util.FakeDNSProvider()
        self.publisher = DNSChallengePublisher(self.provider)
        self.waiter = PropagationWaiter(self.provider, max_attempts=2,
                                        sleep=mock.MagicMock())
        self.solver = DNS01Solver(self.publisher, self.waiter)

    def _actions(self):
        return [change[0] for change in self.provider.changes]

    def test_perform(self):
        ready = mock.MagicMock(return_value="validated")

        def check_visible():
            # the record is set and propagated when the CA is told to validate
            assert self._actions() == ["UPSERT"]
            assert self.provider.status_queries == ["change-1"]
            return ready()

        assert self.solver.perform("x.com", "auth1", check_visible) == "validated"

        assert self._actions() == ["UPSERT", "DELETE"]
        assert self.provider.changes[0][1:] == self.provider.changes[1][1:]
        assert self.publisher.in_flight is None
        assert self.solver.cleanup_failures == []

    def test_rounds_are_serialized(self):
        for domain in ("a.com", "b.com", "c.com"):
            self.solver.perform(domain, "auth-" + domain, lambda: None)

        assert [c[:2] for c in self.provider.changes] == [
            ("UPSERT", "_acme-challenge.a.com"), ("DELETE", "_acme-challenge.a.com"),
            ("UPSERT", "_acme-challenge.b.com"), ("DELETE", "_acme-challenge.b.com"),
            ("UPSERT", "_acme-challenge.c.com"), ("DELETE", "_acme-challenge.c.com"),
        ]

    def test_set_failure_does_not_remove(self):
        self.provider.upsert_error = errors.ProviderError("denied")
        ready = mock.MagicMock()

        with pytest.raises(errors.ProviderError):
            self.solver.perform("x.com", "auth1", ready)

        assert not ready.called
        assert self.provider.changes == []

    def test_timeout_still_removes(self):
        self.provider.statuses = [ChangeStatus.PENDING] * 3
        ready = mock.MagicMock()

        with pytest.raises(errors.PropagationTimeoutError):
            self.solver.perform("x.com", "auth1", ready)

        assert not ready.called
        assert self._actions() == ["UPSERT", "DELETE"]
        assert self.publisher.in_flight is None

    def test_validation_failure_still_removes(self):
        ready = mock.MagicMock(side_effect=errors.IssuanceError("invalid"))

        with pytest.raises(errors.IssuanceError):
            self.solver.perform("x.com", "auth1", ready)

        assert self._actions() == ["UPSERT", "DELETE"]

    def test_remove_failure_after_validation(self):
        ready = mock.MagicMock(return_value="validated")
        self.provider.delete_error = errors.ProviderError("throttled")

        assert self.solver.perform("x.com", "auth1", ready) == "validated"

        (record, error), = self.solver.cleanup_failures
        assert record.domain == "x.com"
        assert error.stage == "remove"
        # the next round is not blocked by the failed removal
        self.provider.delete_error = None
        self.solver.perform("y.com", "auth2", ready)

    def test_remove_failure_keeps_original_error(self):
        self.provider.statuses = [errors.ProviderError("status unavailable")]
        self.provider.delete_error = errors.ProviderError("throttled")

        with pytest.raises(errors.ProviderError) as exc_info:
            self.solver.perform("x.com", "auth1", mock.MagicMock())

        assert exc_info.value.stage == "wait"
        assert len(self.solver.cleanup_failures) == 1


if __name__ == "__main__":
    unittest.main()  # pragma: no cover
