"""le-route53 main entry point."""
import logging
import sys
from typing import Callable
from typing import List
from typing import Optional
from typing import TypeVar

from le_route53 import cli
from le_route53 import configuration
from le_route53 import errors
from le_route53 import log
from le_route53.account import AccountFileStorage
from le_route53.ca_client import AcmeCertificateAuthority
from le_route53.ca_client import make_acme_client
from le_route53.challenge import DNSChallengePublisher
from le_route53.dns_route53 import make_client
from le_route53.dns_route53 import Route53Provider
from le_route53.models import Certificate
from le_route53.propagation import PropagationWaiter
from le_route53.renewal import RenewalDecisionEngine
from le_route53.solver import DNS01Solver
from le_route53.storage import FileCertificateStore

logger = logging.getLogger(__name__)

T = TypeVar('T')


def guard(func: Callable[[], T], message: str) -> T:
    """Call ``func``, logging ``message`` with the error if it fails."""
    try:
        return func()
    except errors.Error as error:
        logger.error("%s %s", message, error)
        logger.debug("Traceback was:", exc_info=True)
        raise


def make_solver(config: configuration.NamespaceConfig) -> DNS01Solver:
    """Challenge solver publishing records in the configured Route53 zone."""
    logger.info("Initializing Route53 connection.")
    provider = guard(
        lambda: Route53Provider(make_client(config.aws_credentials_file),
                                None if config.discover_zone else config.hosted_zone_id),
        "Can't initialize Route53 connection:")
    return DNS01Solver(
        DNSChallengePublisher(provider),
        PropagationWaiter(provider, max_attempts=config.max_wait_attempts))


def make_engine(config: configuration.NamespaceConfig,
                solver: DNS01Solver) -> RenewalDecisionEngine:
    """Wire the solver, the ACME client and the store together.

    :param le_route53.configuration.NamespaceConfig config: Configuration
    :param le_route53.solver.DNS01Solver solver: challenge solver

    """
    logger.info("Initializing LetsEncrypt.")
    accounts = AccountFileStorage(config.config_dir, config.server_url)
    acme = guard(
        lambda: make_acme_client(config.server_url, accounts.load_or_create_key()),
        "Can't initialize LetsEncrypt:")
    authority = AcmeCertificateAuthority(
        acme, solver, FileCertificateStore(config.config_dir),
        server=config.server_url, accounts=accounts,
        renew_before_expiry=config.renew_before_expiry_delta)
    return RenewalDecisionEngine(authority, agree_tos=config.agree_tos)


def update_certificates(config: configuration.NamespaceConfig) -> Certificate:
    """Make sure the stored certificate covers ``config.domains``."""
    solver = make_solver(config)
    engine = make_engine(config, solver)
    logger.info("Updating certificates.")
    cert = guard(lambda: engine.ensure_certificate(config.domains, config.email),
                 "Certificate update error:")
    for record, error in solver.cleanup_failures:
        logger.warning("Challenge record %s may still be present: %s",
                       record.validation_name, error)
    logger.info("Certificate for %s is valid until %s.",
                ", ".join(cert.names()), cert.not_after)
    return cert


def main(cli_args: Optional[List[str]] = None) -> int:
    """Run le-route53.

    :param cli_args: command line to le-route53, defaults to ``sys.argv[1:]``
    :type cli_args: `list` of `str`

    :returns: process exit status
    :rtype: int

    """
    if cli_args is None:
        cli_args = sys.argv[1:]

    log.pre_config_setup()
    try:
        config = guard(lambda: cli.prepare_and_parse_args(cli_args), "Can't load config:")
        guard(lambda: log.post_config_setup(config), "Can't initialize logging:")
        logger.info("Config loaded.")
        update_certificates(config)
    except errors.Error:
        return 1
    return 0
