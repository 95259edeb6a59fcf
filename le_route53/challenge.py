"""Publishing of DNS-01 challenge records."""
import base64
import hashlib
import logging
from typing import Dict
from typing import Optional

from le_route53 import constants
from le_route53 import errors
from le_route53 import interfaces
from le_route53.models import ChallengeRecord
from le_route53.models import PendingChange

logger = logging.getLogger(__name__)


def compute_digest(key_authorization: str) -> str:
    """Compute the DNS-01 TXT value for a key authorization.

    :param str key_authorization: key authorization of the challenge

    :returns: unpadded base64url encoded SHA-256 digest
    :rtype: str

    """
    digest = hashlib.sha256(key_authorization.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def validation_domain_name(domain: str) -> str:
    """Name of the TXT record validating ``domain``."""
    return "{0}.{1}".format(constants.CHALLENGE_LABEL, domain)


class DNSChallengePublisher:
    """Sets and removes challenge TXT records through a `.DNSProvider`.

    Only one challenge round may be in flight at a time: a record must be
    removed before the next one is set.

    :ivar provider: DNS provider the records are written to
    :type provider: le_route53.interfaces.DNSProvider

    """
    def __init__(self, provider: interfaces.DNSProvider,
                 ttl: int = constants.CHALLENGE_TTL) -> None:
        self.provider = provider
        self.ttl = ttl
        self._in_flight: Dict[str, ChallengeRecord] = {}

    @property
    def in_flight(self) -> Optional[ChallengeRecord]:
        """Record of the unfinished challenge round, if any."""
        for record in self._in_flight.values():
            return record
        return None

    def set_challenge(self, domain: str, key_authorization: str) -> PendingChange:
        """Publish the challenge record for ``domain``.

        :param str domain: domain being validated
        :param str key_authorization: key authorization of the challenge

        :raises .ChallengeInFlightError: if another round is unfinished
        :raises .ProviderError: if the provider rejects the change

        :returns: the record and the handle of the pending change
        :rtype: `.PendingChange`

        """
        current = self.in_flight
        if current is not None:
            raise errors.ChallengeInFlightError(
                "Challenge for {0} requested while the one for {1} is still "
                "in flight.".format(domain, current.domain))

        record = ChallengeRecord(
            domain=domain,
            validation_name=validation_domain_name(domain),
            value=compute_digest(key_authorization),
            ttl=self.ttl,
        )
        try:
            handle = self.provider.upsert_txt(
                record.validation_name, record.quoted_value, record.ttl)
        except errors.ProviderError as error:
            logger.error("Can't set DNS challenge for %s: %s", domain, error)
            raise _with_context(error, domain, "set")

        self._in_flight[domain] = record
        logger.info("Successfully set DNS challenge for %s. "
                    "Waiting for pending change to propagate.", domain)
        return PendingChange(record=record, handle=handle)

    def remove_challenge(self, record: ChallengeRecord) -> str:
        """Delete a record published by `set_challenge`.

        The round is considered finished even if the provider refuses the
        deletion, so that later rounds are not blocked.

        :param .ChallengeRecord record: record returned by `set_challenge`

        :raises .ProviderError: if the provider rejects the change

        :returns: handle of the pending deletion
        :rtype: str

        """
        self._in_flight.pop(record.domain, None)
        try:
            handle = self.provider.delete_txt(
                record.validation_name, record.quoted_value, record.ttl)
        except errors.ProviderError as error:
            logger.error("Can't remove DNS challenge for %s: %s", record.domain, error)
            raise _with_context(error, record.domain, "remove")
        logger.info("Successfully removed DNS challenge for %s", record.domain)
        return handle


def _with_context(error: errors.StageError, domain: str, stage: str) -> errors.StageError:
    error.domain = error.domain or domain
    error.stage = error.stage or stage
    return error
