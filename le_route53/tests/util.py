"""Test utilities."""
import datetime
import os
import shutil
import tempfile
from typing import Iterable
from typing import List
from typing import Optional
from typing import Tuple
import unittest

from le_route53 import errors
from le_route53 import interfaces
from le_route53.models import Certificate
from le_route53.models import ChangeStatus


def vector_path(*names: str) -> str:
    """Path to a test vector."""
    return os.path.join(os.path.dirname(__file__), 'testdata', *names)


def load_vector(*names: str) -> bytes:
    """Load contents of a test vector."""
    with open(vector_path(*names), 'rb') as f:
        return f.read()


def make_cert(names: Iterable[str], days_left: int = 60) -> Certificate:
    """Certificate value for ``names``; the first one is the subject."""
    names = list(names)
    now = datetime.datetime.now(datetime.timezone.utc)
    return Certificate(
        subject=names[0] if names else None,
        altnames=tuple(names),
        not_before=now - datetime.timedelta(days=30),
        not_after=now + datetime.timedelta(days=days_left),
        cert_pem=b"cert",
        chain_pem=b"chain",
        fullchain_pem=b"certchain",
        key_pem=b"key",
    )


class FakeDNSProvider(interfaces.DNSProvider):
    """DNS provider recording changes and replaying scripted statuses.

    ``statuses`` is consumed one item per status query. An item that is
    an exception instance is raised instead of returned. Once exhausted,
    queries answer `ChangeStatus.DONE`.

    """
    def __init__(self, statuses: Optional[List[object]] = None) -> None:
        self.statuses = list(statuses or [])
        self.changes: List[Tuple[str, str, str, int]] = []
        self.status_queries: List[str] = []
        self.upsert_error: Optional[errors.ProviderError] = None
        self.delete_error: Optional[errors.ProviderError] = None

    def upsert_txt(self, name: str, value: str, ttl: int) -> str:
        if self.upsert_error is not None:
            raise self.upsert_error
        self.changes.append(("UPSERT", name, value, ttl))
        return "change-{0}".format(len(self.changes))

    def delete_txt(self, name: str, value: str, ttl: int) -> str:
        if self.delete_error is not None:
            raise self.delete_error
        self.changes.append(("DELETE", name, value, ttl))
        return "change-{0}".format(len(self.changes))

    def get_change_status(self, handle: str) -> ChangeStatus:
        self.status_queries.append(handle)
        if not self.statuses:
            return ChangeStatus.DONE
        status = self.statuses.pop(0)
        if isinstance(status, Exception):
            raise status
        assert isinstance(status, ChangeStatus)
        return status


class TempDirTestCase(unittest.TestCase):
    """Base test class which sets up and tears down a temporary directory"""

    def setUp(self):
        """Execute before test"""
        self.tempdir = tempfile.mkdtemp()

    def tearDown(self):
        """Execute after test"""
        shutil.rmtree(self.tempdir)
