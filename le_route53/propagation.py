"""Waiting for DNS record changes to propagate."""
import logging
import time
from typing import Callable
from typing import Optional

from le_route53 import constants
from le_route53 import errors
from le_route53 import interfaces
from le_route53.models import ChangeStatus

logger = logging.getLogger(__name__)


class PropagationWaiter:
    """Polls a `.DNSProvider` until a change is applied.

    Only ``PENDING`` answers are retried. Any provider error ends the wait
    at once.

    :ivar int max_attempts: checks allowed after the first one
    :ivar float interval: seconds slept between two checks
    :ivar sleep: function used to wait between checks

    """
    def __init__(self, provider: interfaces.DNSProvider,
                 max_attempts: int = constants.MAX_WAIT_ATTEMPTS,
                 interval: float = constants.WAIT_INTERVAL,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.provider = provider
        self.max_attempts = max_attempts
        self.interval = interval
        self.sleep = sleep

    def wait_until_propagated(self, handle: str, domain: Optional[str] = None) -> None:
        """Block until the change ``handle`` is reported as done.

        :param str handle: change handle returned by the provider
        :param str domain: domain the change belongs to, used in messages

        :raises .PropagationTimeoutError: if the change is still pending
            after ``max_attempts`` retries
        :raises .ProviderError: if the status can't be read

        """
        attempt = 0
        while True:
            logger.debug("Checking if DNS changes have propagated.")
            try:
                status = self.provider.get_change_status(handle)
            except errors.ProviderError as error:
                logger.error("Changes propagation reading error: %s", error)
                error.domain = error.domain or domain
                error.stage = error.stage or "wait"
                raise
            if status == ChangeStatus.DONE:
                if domain:
                    logger.info("Changes propagation for %s challenge are complete.", domain)
                return
            attempt += 1
            if attempt > self.max_attempts:
                raise errors.PropagationTimeoutError(
                    "Max DNS propagation checks attempts ({0}) exceeded for "
                    "change {1}.".format(self.max_attempts, handle),
                    domain=domain, stage="wait")
            self.sleep(self.interval)
