"""Capabilities the renewal core is built on."""
from abc import ABCMeta
from abc import abstractmethod
from typing import Optional
from typing import Sequence

from le_route53.models import Certificate
from le_route53.models import ChangeStatus
from le_route53.models import RenewalRequest


class DNSProvider(metaclass=ABCMeta):
    """DNS hosting service able to publish challenge TXT records."""

    @abstractmethod
    def upsert_txt(self, name: str, value: str, ttl: int) -> str:  # pragma: no cover
        """Create or replace a TXT record.

        :param str name: fully qualified record name
        :param str value: record data, already quoted
        :param int ttl: record TTL in seconds

        :raises .ProviderError: if the provider rejects the change

        :returns: handle of the pending change
        :rtype: str

        """
        raise NotImplementedError()

    @abstractmethod
    def delete_txt(self, name: str, value: str, ttl: int) -> str:  # pragma: no cover
        """Delete a TXT record matching ``value`` and ``ttl`` exactly.

        :raises .ProviderError: if the provider rejects the change

        :returns: handle of the pending change
        :rtype: str

        """
        raise NotImplementedError()

    @abstractmethod
    def get_change_status(self, handle: str) -> ChangeStatus:  # pragma: no cover
        """Query the state of a previously submitted change.

        :raises .ProviderError: if the status can't be read

        """
        raise NotImplementedError()


class CertificateAuthority(metaclass=ABCMeta):
    """Issues certificates after DNS-01 validation of every domain."""

    @abstractmethod
    def register(self, request: RenewalRequest) -> Certificate:  # pragma: no cover
        """Return the current certificate, issuing one if needed.

        :raises .IssuanceError: if the CA refuses or validation fails

        """
        raise NotImplementedError()

    @abstractmethod
    def renew(self, request: RenewalRequest,
              previous: Certificate) -> Certificate:  # pragma: no cover
        """Issue a certificate replacing ``previous``.

        :raises .RenewalError: if the CA refuses or validation fails

        """
        raise NotImplementedError()


class CertificateStore(metaclass=ABCMeta):
    """Durable storage of issued certificates."""

    @abstractmethod
    def save(self, lineagename: str, cert: Certificate,
             server: Optional[str] = None) -> None:  # pragma: no cover
        """Persist ``cert`` as the current version of ``lineagename``.

        :raises .CertStorageError: if the certificate can't be written

        """
        raise NotImplementedError()

    @abstractmethod
    def find(self, domains: Sequence[str]) -> Optional[Certificate]:  # pragma: no cover
        """Look up the stored certificate for ``domains``.

        :raises .CertStorageError: if stored data is unreadable

        :returns: the certificate, or ``None`` if nothing is stored
        :rtype: `.Certificate` or `None`

        """
        raise NotImplementedError()
