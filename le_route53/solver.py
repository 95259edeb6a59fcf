"""One DNS-01 challenge round: set, wait, validate, remove."""
import logging
from typing import Callable
from typing import List
from typing import Tuple
from typing import TypeVar

from le_route53 import errors
from le_route53.challenge import DNSChallengePublisher
from le_route53.models import ChallengeRecord
from le_route53.propagation import PropagationWaiter

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DNS01Solver:
    """Runs challenge rounds one domain at a time.

    Once a record has been set it is always removed, whether propagation,
    validation or nothing failed. A failed removal is logged and kept in
    `cleanup_failures`, but never replaces the outcome of the round.

    :ivar publisher: publisher of the challenge records
    :type publisher: le_route53.challenge.DNSChallengePublisher
    :ivar waiter: waiter used between publishing and validation
    :type waiter: le_route53.propagation.PropagationWaiter
    :ivar list cleanup_failures: records that could not be removed,
        with the error raised by the provider

    """
    def __init__(self, publisher: DNSChallengePublisher, waiter: PropagationWaiter) -> None:
        self.publisher = publisher
        self.waiter = waiter
        self.cleanup_failures: List[Tuple[ChallengeRecord, errors.ProviderError]] = []

    def perform(self, domain: str, key_authorization: str, ready: Callable[[], T]) -> T:
        """Fulfil one challenge for ``domain``.

        :param str domain: domain being validated
        :param str key_authorization: key authorization of the challenge
        :param callable ready: called once the record is visible; it tells
            the certificate authority to validate and waits for the result

        :raises .ProviderError: if the record can't be set or checked
        :raises .PropagationTimeoutError: if the record never propagates

        :returns: what ``ready`` returned

        """
        pending = self.publisher.set_challenge(domain, key_authorization)
        try:
            self.waiter.wait_until_propagated(pending.handle, domain)
            return ready()
        finally:
            self._cleanup(pending.record)

    def _cleanup(self, record: ChallengeRecord) -> None:
        try:
            self.publisher.remove_challenge(record)
        except errors.ProviderError as error:
            logger.error("Failed to remove challenge record %s: %s", record.validation_name, error)
            logger.debug("Encountered error during cleanup", exc_info=True)
            self.cleanup_failures.append((record, error))
