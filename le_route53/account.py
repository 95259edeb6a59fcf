"""ACME account key and registration storage."""
import logging
import os
from typing import Optional
from urllib import parse

from cryptography.hazmat.primitives.asymmetric import rsa
import josepy as jose

from acme import messages
from le_route53 import constants
from le_route53 import errors
from le_route53 import util

logger = logging.getLogger(__name__)


def server_path(server_url: str) -> str:
    """Directory name derived from an ACME directory URL."""
    parsed = parse.urlparse(server_url)
    path = (parsed.netloc + parsed.path).replace(":", "_").strip("/")
    return path.replace("/", os.sep)


class AccountFileStorage:
    """Keeps the account key and registration URI of one ACME server.

    :ivar str account_dir: directory holding ``private_key.json`` and
        ``regr.json``

    """
    def __init__(self, config_dir: str, server_url: str) -> None:
        self.account_dir = os.path.join(
            os.path.abspath(os.path.expanduser(config_dir)),
            constants.ACCOUNTS_DIR, server_path(server_url))

    @property
    def key_path(self) -> str:
        return os.path.join(self.account_dir, constants.ACCOUNT_KEY_FILENAME)

    @property
    def regr_path(self) -> str:
        return os.path.join(self.account_dir, "regr.json")

    def load_or_create_key(self, key_size: int = constants.RSA_KEY_SIZE) -> jose.JWK:
        """Load the account key, generating and saving one if missing.

        :raises .AccountStorageError: if the key can't be read or written

        """
        try:
            if os.path.exists(self.key_path):
                with open(self.key_path) as key_file:
                    return jose.JWK.json_loads(key_file.read())

            logger.info("Generating a new ACME account key in %s.", self.account_dir)
            key = jose.JWKRSA(key=rsa.generate_private_key(
                public_exponent=65537, key_size=key_size))
            util.make_or_verify_dir(self.account_dir, 0o700)
            with util.safe_open(self.key_path, "w", chmod=0o400) as key_file:
                key_file.write(key.json_dumps())
            return key
        except (OSError, ValueError, jose.errors.Error) as error:
            raise errors.AccountStorageError(
                "Can't load account key {0}: {1}".format(self.key_path, error))

    def load_regr(self) -> Optional[messages.RegistrationResource]:
        """Registration saved by `save_regr`, if any."""
        if not os.path.exists(self.regr_path):
            return None
        try:
            with open(self.regr_path) as regr_file:
                return messages.RegistrationResource.json_loads(regr_file.read())
        except (OSError, ValueError, jose.errors.Error) as error:
            raise errors.AccountStorageError(
                "Can't load registration {0}: {1}".format(self.regr_path, error))

    def save_regr(self, regr: messages.RegistrationResource) -> None:
        """Save the URI of the registration, its body is queried when needed."""
        try:
            util.make_or_verify_dir(self.account_dir, 0o700)
            with open(self.regr_path, "w") as regr_file:
                regr_file.write(messages.RegistrationResource(
                    body={}, uri=regr.uri).json_dumps())
        except OSError as error:
            raise errors.AccountStorageError(
                "Can't save registration {0}: {1}".format(self.regr_path, error))
