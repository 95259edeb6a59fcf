"""Deciding whether the certificate covers the wanted domains."""
import logging
from typing import Iterable
from typing import List
from typing import Sequence

from le_route53 import interfaces
from le_route53 import util
from le_route53.models import Certificate
from le_route53.models import RenewalRequest

logger = logging.getLogger(__name__)


def missing_names(cert: Certificate, domains: Iterable[str]) -> List[str]:
    """Requested domains ``cert`` is not valid for.

    Names are compared as exact strings. Extra names on the certificate
    are ignored.

    """
    covered = set(cert.names())
    return [domain for domain in domains if domain not in covered]


class RenewalDecisionEngine:
    """Keeps a certificate covering a set of domains.

    :ivar authority: certificate authority client
    :type authority: le_route53.interfaces.CertificateAuthority
    :ivar bool agree_tos: whether the CA terms of service are agreed to

    """
    def __init__(self, authority: interfaces.CertificateAuthority,
                 agree_tos: bool = True) -> None:
        self.authority = authority
        self.agree_tos = agree_tos

    def ensure_certificate(self, domains: Sequence[str], email: str) -> Certificate:
        """Obtain a certificate valid for every domain in ``domains``.

        :param list domains: domains the certificate must cover
        :param str email: contact address of the ACME account

        :raises .ConfigurationError: if ``domains`` is empty or invalid
        :raises .IssuanceError: if the certificate can't be obtained
        :raises .RenewalError: if the certificate can't be renewed

        :returns: the certificate
        :rtype: `.Certificate`

        """
        domains = tuple(util.domain_set(domains))
        request = RenewalRequest(domains=domains, email=email,
                                 agree_tos=self.agree_tos, duplicate=False)
        cert = self.authority.register(request)
        logger.info("Active LE certificate is stored. Subject: %s, alt names: %s",
                    cert.subject, ", ".join(cert.altnames))

        missing = missing_names(cert, domains)
        if not missing:
            return cert

        logger.info("Some required domains are missing (%s). Renewing the cert.",
                    ", ".join(missing))
        return self.authority.renew(request._replace(duplicate=True), cert)
