"""Utilities for all le-route53."""
import errno
import ipaddress
import logging
import os
import re
import stat
from typing import IO
from typing import List
from typing import Optional
from typing import Sequence

from le_route53 import errors

logger = logging.getLogger(__name__)

# letters, digits and hyphens, not starting or ending with a hyphen
_LDH_LABEL = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")


def make_or_verify_dir(directory: str, mode: int = 0o755) -> None:
    """Make sure directory exists with proper permissions.

    :param str directory: Path to a directory.
    :param int mode: Directory mode.

    :raises OSError: if a directory cannot be created.

    """
    try:
        os.makedirs(directory, mode)
    except OSError as exception:
        if exception.errno != errno.EEXIST or not os.path.isdir(directory):
            raise


def safe_open(path: str, mode: str = "w", chmod: Optional[int] = None) -> IO:
    """Safely open a file, creating it with ``chmod`` permissions.

    :param str path: Path to a file.
    :param str mode: Same as ``mode`` for `open`.
    :param int chmod: Same as ``mode`` for `os.open`, uses Python defaults
        if ``None``.

    """
    open_args = () if chmod is None else (chmod,)
    fd = os.open(path, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, *open_args)
    if chmod is not None:
        os.chmod(path, chmod & (stat.S_IRWXU | stat.S_IRWXG | stat.S_IRWXO))
    return os.fdopen(fd, mode)


def enforce_domain_sanity(domain: str) -> str:
    """Validate a domain name and return its canonical form.

    :param str domain: Domain to check

    :raises ConfigurationError: for invalid domains and cases where Let's
        Encrypt currently will not issue certificates

    :returns: The domain lower-cased, without trailing dot
    :rtype: str

    """
    try:
        domain.encode('ascii')
    except UnicodeError:
        raise errors.ConfigurationError(
            "Non-ASCII domain names not supported. "
            "To issue for an Internationalized Domain Name, use Punycode.")

    domain = domain.strip().lower()
    domain = domain[:-1] if domain.endswith('.') else domain

    for scheme in ("http", "https"):
        if domain.startswith("{0}://".format(scheme)):
            raise errors.ConfigurationError(
                "Requested name {0} appears to be a URL, not a FQDN. "
                "Try again without the leading \"{1}://\".".format(domain, scheme))

    try:
        ipaddress.ip_address(domain)
    except ValueError:
        pass
    else:
        raise errors.ConfigurationError(
            "Requested name {0} is an IP address. DNS-01 validation only "
            "applies to domain names.".format(domain))

    # RFC 2181: a name is at most 255 octets, each label 1 to 63 octets.
    msg = "Requested domain {0} is not a FQDN because".format(domain)
    if len(domain) > 255:
        raise errors.ConfigurationError("{0} it is too long.".format(msg))
    labels = domain.split('.')
    if len(labels) < 2:
        raise errors.ConfigurationError("{0} it has a single label.".format(msg))
    for i, label in enumerate(labels):
        if not label:
            raise errors.ConfigurationError("{0} it contains an empty label.".format(msg))
        if len(label) > 63:
            raise errors.ConfigurationError(
                "{0} label {1} is too long.".format(msg, label))
        if label == "*" and i == 0:
            continue
        if not _LDH_LABEL.match(label):
            raise errors.ConfigurationError(
                "{0} label {1} is not made of letters, digits and inner "
                "hyphens.".format(msg, label))

    return domain


def domain_set(domains: Sequence[str]) -> List[str]:
    """Sanitize ``domains``, keeping their order and dropping repeats.

    :raises ConfigurationError: if the list is empty or a domain is invalid

    """
    result: List[str] = []
    for domain in domains:
        domain = enforce_domain_sanity(domain)
        if domain not in result:
            result.append(domain)
    if not result:
        raise errors.ConfigurationError("At least one domain is required.")
    return result


def safe_email(email: str) -> bool:
    """Scrub email address before using it."""
    if "@" in email and not email.startswith(".") and " " not in email:
        return True
    logger.debug("Invalid email address: %s.", email)
    return False
