"""le-route53 errors."""
from typing import Optional


class Error(Exception):
    """Generic le-route53 error."""


class StageError(Error):
    """Error raised at a known stage of the renewal flow.

    :ivar str domain: domain being processed, if any
    :ivar str stage: one of ``set``, ``wait``, ``remove``, ``register``
        or ``renew``

    """
    def __init__(self, message: str, domain: Optional[str] = None,
                 stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.domain = domain
        self.stage = stage

    def __str__(self) -> str:
        msg = self.message
        if self.domain and self.stage:
            return "{0} ({1}): {2}".format(self.domain, self.stage, msg)
        if self.domain or self.stage:
            return "{0}: {1}".format(self.domain or self.stage, msg)
        return msg


# DNS provider errors
class ProviderError(StageError):
    """The DNS provider rejected a record mutation or a status query."""


class PropagationTimeoutError(StageError):
    """A record change was still pending after the last allowed check."""


class ChallengeInFlightError(Error):
    """A challenge round was started while another one is unfinished."""


# Certificate authority errors
class IssuanceError(StageError):
    """The certificate authority did not issue the requested certificate."""


class RenewalError(IssuanceError):
    """The certificate authority did not renew the certificate."""


# Local state errors
class ConfigurationError(Error):
    """Configuration sanity error."""


class CertStorageError(Error):
    """Generic `.CertificateStore` error."""


class AccountStorageError(Error):
    """ACME account key could not be loaded or saved."""
