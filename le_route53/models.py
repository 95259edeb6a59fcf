"""Values exchanged between the challenge, CA and renewal layers."""
import datetime
import enum
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Sequence
from typing import Tuple

from cryptography import x509
from cryptography.x509.oid import NameOID


class ChangeStatus(enum.Enum):
    """State of a record mutation submitted to the DNS provider."""

    PENDING = "PENDING"
    """Submitted, not yet applied everywhere"""
    DONE = "DONE"
    """Confirmed by the provider; never reverts to PENDING"""


class ChallengeRecord(NamedTuple):
    """TXT record published for one DNS-01 validation round.

    The value is kept, not recomputed, so that the record can be deleted
    with exactly the value it was created with.
    """
    domain: str
    validation_name: str
    value: str
    ttl: int

    @property
    def quoted_value(self) -> str:
        """TXT record data as sent to the provider."""
        return '"{0}"'.format(self.value)


class PendingChange(NamedTuple):
    """A submitted challenge record and the provider's change handle."""
    record: ChallengeRecord
    handle: str


class RenewalRequest(NamedTuple):
    """What to ask the certificate authority for."""
    domains: Tuple[str, ...]
    email: str
    agree_tos: bool = True
    duplicate: bool = False


class Certificate(NamedTuple):
    """An issued certificate.

    Only the names and the validity window are looked at; the PEM
    material is passed along untouched.
    """
    subject: Optional[str]
    altnames: Tuple[str, ...]
    not_before: datetime.datetime
    not_after: datetime.datetime
    cert_pem: bytes
    chain_pem: bytes = b""
    fullchain_pem: bytes = b""
    key_pem: bytes = b""

    def names(self) -> List[str]:
        """Subject followed by the alternative names, without duplicates."""
        names: List[str] = []
        for name in (self.subject,) + tuple(self.altnames):
            if name and name not in names:
                names.append(name)
        return names

    @classmethod
    def from_pem(cls, cert_pem: bytes, chain_pem: bytes = b"",
                 key_pem: bytes = b"") -> 'Certificate':
        """Build a `Certificate` from PEM material.

        :param bytes cert_pem: leaf certificate, optionally followed by
            its chain, in PEM format
        :param bytes chain_pem: intermediate certificates in PEM format
        :param bytes key_pem: private key in PEM format

        :raises ValueError: if ``cert_pem`` is not a PEM certificate

        """
        cert = x509.load_pem_x509_certificate(cert_pem)
        leaf_pem = _first_pem_block(cert_pem)
        if not chain_pem and len(leaf_pem) < len(cert_pem.strip()):
            chain_pem = cert_pem.strip()[len(leaf_pem):].lstrip() + b"\n"
        return cls(
            subject=_common_name(cert),
            altnames=tuple(_dns_names(cert)),
            not_before=_utc(cert, "not_valid_before"),
            not_after=_utc(cert, "not_valid_after"),
            cert_pem=leaf_pem + b"\n",
            chain_pem=chain_pem,
            fullchain_pem=leaf_pem + b"\n" + chain_pem,
            key_pem=key_pem,
        )


_PEM_END = b"-----END CERTIFICATE-----"


def _first_pem_block(pem: bytes) -> bytes:
    pem = pem.strip()
    end = pem.find(_PEM_END)
    if end == -1:
        return pem
    return pem[:end + len(_PEM_END)]


def _common_name(cert: x509.Certificate) -> Optional[str]:
    attributes = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not attributes:
        return None
    value = attributes[0].value
    return value if isinstance(value, str) else value.decode()


def _dns_names(cert: x509.Certificate) -> Sequence[str]:
    try:
        ext = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return ext.value.get_values_for_type(x509.DNSName)


def _utc(cert: x509.Certificate, attribute: str) -> datetime.datetime:
    # cryptography >= 42 exposes timezone aware ``*_utc`` variants
    aware = getattr(cert, attribute + "_utc", None)
    if aware is not None:
        return aware
    return getattr(cert, attribute).replace(tzinfo=datetime.timezone.utc)
