"""ACME implementation of the certificate authority client."""
import datetime
import logging
import time
from typing import Callable
from typing import Optional
from typing import Type

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
import josepy as jose
import requests

from acme import challenges
from acme import client
from acme import crypto_util
from acme import errors as acme_errors
from acme import messages
from le_route53 import constants
from le_route53 import errors
from le_route53 import interfaces
from le_route53 import storage
from le_route53.account import AccountFileStorage
from le_route53.models import Certificate
from le_route53.models import RenewalRequest
from le_route53.solver import DNS01Solver

logger = logging.getLogger(__name__)


def directory_url(server: str) -> str:
    """Resolve ``staging``/``production`` to a directory URL."""
    return constants.SERVER_ALIASES.get(server, server)


def make_acme_client(server: str, account_key: jose.JWK,
                     user_agent: str = constants.USER_AGENT) -> client.ClientV2:
    """Connect to the ACME directory of ``server``.

    :raises .IssuanceError: if the directory can't be fetched

    """
    url = directory_url(server)
    net = client.ClientNetwork(account_key, user_agent=user_agent)
    try:
        directory = client.ClientV2.get_directory(url, net)
    except (acme_errors.Error, requests.exceptions.RequestException) as error:
        raise errors.IssuanceError(
            "Can't fetch ACME directory {0}: {1}".format(url, error))
    return client.ClientV2(directory, net=net)


def make_private_key(key_size: int = constants.RSA_KEY_SIZE) -> bytes:
    """Generate a certificate private key in PKCS#8 PEM format."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    return key.private_bytes(encoding=serialization.Encoding.PEM,
                             format=serialization.PrivateFormat.PKCS8,
                             encryption_algorithm=serialization.NoEncryption())


class AcmeCertificateAuthority(interfaces.CertificateAuthority):
    """Obtains certificates from an ACME v2 server using DNS-01.

    Authorizations of an order are handled one after the other, each
    one through a full challenge round of the `.DNS01Solver`.

    :ivar acme: ACME client API
    :type acme: acme.client.ClientV2
    :ivar solver: solver running the challenge rounds
    :type solver: le_route53.solver.DNS01Solver
    :ivar store: store the issued certificates are saved to
    :type store: le_route53.interfaces.CertificateStore
    :ivar datetime.timedelta renew_before_expiry: stored certificates
        expiring sooner than this are reissued by `register`

    """
    def __init__(self, acme: client.ClientV2, solver: DNS01Solver,
                 store: interfaces.CertificateStore, server: Optional[str] = None,
                 accounts: Optional[AccountFileStorage] = None,
                 renew_before_expiry: datetime.timedelta = datetime.timedelta(days=30),
                 authz_max_retries: int = constants.AUTHZ_MAX_RETRIES,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.acme = acme
        self.solver = solver
        self.store = store
        self.server = server
        self.accounts = accounts
        self.renew_before_expiry = renew_before_expiry
        self.authz_max_retries = authz_max_retries
        self.sleep = sleep

    def register(self, request: RenewalRequest) -> Certificate:
        try:
            existing = self.store.find(request.domains)
        except errors.CertStorageError as error:
            raise errors.IssuanceError(str(error), stage="register") from error

        if existing is not None and not request.duplicate:
            if not self.should_renew(existing):
                logger.info("Certificate for %s is not yet due for renewal.",
                            ", ".join(existing.names()))
                return existing
            logger.info("Certificate for %s expires on %s, renewing.",
                        ", ".join(existing.names()), existing.not_after)
        return self._obtain(request, errors.IssuanceError, "register")

    def renew(self, request: RenewalRequest, previous: Certificate) -> Certificate:
        logger.info("Replacing certificate for %s with one for %s.",
                    ", ".join(previous.names()), ", ".join(request.domains))
        return self._obtain(request, errors.RenewalError, "renew")

    def should_renew(self, cert: Certificate) -> bool:
        """Is ``cert`` inside its renewal window?"""
        now = datetime.datetime.now(datetime.timezone.utc)
        return cert.not_after - self.renew_before_expiry <= now

    def _obtain(self, request: RenewalRequest, error_cls: Type[errors.IssuanceError],
                stage: str) -> Certificate:
        lineagename = storage.lineagename_for(request.domains)
        try:
            self._ensure_account(request)
            key_pem = make_private_key()
            csr_pem = crypto_util.make_csr(key_pem, list(request.domains))
            orderr = self.acme.new_order(csr_pem)
            for authzr in orderr.authorizations:
                self._authorize(authzr)
            deadline = datetime.datetime.now() + datetime.timedelta(
                seconds=constants.FINALIZE_TIMEOUT)
            orderr = self.acme.poll_and_finalize(orderr, deadline)
        except errors.StageError as error:
            raise error_cls(error.message, domain=error.domain,
                            stage=error.stage or stage) from error
        except (errors.ChallengeInFlightError, errors.AccountStorageError) as error:
            raise error_cls(str(error), stage=stage) from error
        except (acme_errors.Error, jose.errors.Error,
                requests.exceptions.RequestException) as error:
            logger.debug("ACME error:", exc_info=True)
            raise error_cls(str(error), stage=stage) from error

        fullchain_pem = orderr.fullchain_pem
        if isinstance(fullchain_pem, str):
            fullchain_pem = fullchain_pem.encode()
        cert = Certificate.from_pem(fullchain_pem, key_pem=key_pem)
        logger.info("Certificate issued. Subject: %s, alt names: %s",
                    cert.subject, ", ".join(cert.altnames))
        try:
            self.store.save(lineagename, cert, self.server)
        except errors.CertStorageError as error:
            raise error_cls(str(error), stage=stage) from error
        return cert

    def _ensure_account(self, request: RenewalRequest) -> None:
        if self.acme.net.account is not None:
            return
        regr = self.accounts.load_regr() if self.accounts else None
        if regr is not None:
            self.acme.query_registration(regr)
            return

        new_regr = messages.NewRegistration.from_data(
            email=request.email, terms_of_service_agreed=request.agree_tos)
        try:
            regr = self.acme.new_account(new_regr)
            logger.info("Registered ACME account for %s.", request.email)
        except acme_errors.ConflictError as error:
            logger.debug("Account already exists at %s.", error.location)
            regr = self.acme.query_registration(messages.RegistrationResource(
                uri=error.location, body=messages.Registration()))
        if self.accounts:
            self.accounts.save_regr(regr)

    def _authorize(self, authzr: messages.AuthorizationResource) -> None:
        domain = authzr.body.identifier.value
        if authzr.body.status == messages.STATUS_VALID:
            logger.info("Authorization for %s is still valid.", domain)
            return

        challb = _find_dns01(authzr)
        account_key = self.acme.net.key
        key_authorization = challb.chall.key_authorization(account_key)
        response, _ = challb.response_and_validation(account_key)

        def ready() -> None:
            self.acme.answer_challenge(challb, response)
            self._poll_authorization(authzr)

        self.solver.perform(domain, key_authorization, ready)

    def _poll_authorization(self, authzr: messages.AuthorizationResource) -> None:
        domain = authzr.body.identifier.value
        logger.info("Waiting for verification of %s...", domain)
        for _ in range(self.authz_max_retries):
            self.sleep(1)
            authzr, _ = self.acme.poll(authzr)
            if authzr.body.status == messages.STATUS_VALID:
                logger.info("Challenge for %s verified.", domain)
                return
            if authzr.body.status != messages.STATUS_PENDING:
                raise errors.IssuanceError(
                    "Challenge failed: {0}".format(_challenge_error(authzr)), domain=domain)
        raise errors.IssuanceError(
            "Timed out waiting for the CA to verify the challenge.", domain=domain)


def _find_dns01(authzr: messages.AuthorizationResource) -> messages.ChallengeBody:
    for challb in authzr.body.challenges:
        if isinstance(challb.chall, challenges.DNS01):
            return challb
    raise errors.IssuanceError("DNS-01 challenge was not offered by the CA server.",
                               domain=authzr.body.identifier.value)


def _challenge_error(authzr: messages.AuthorizationResource) -> str:
    for challb in authzr.body.challenges:
        if challb.error is not None:
            return str(challb.error)
    return "authorization is {0}".format(authzr.body.status)
