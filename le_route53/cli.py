"""le-route53 command line argument & config processing."""
import argparse
import copy
from typing import Any
from typing import List
from typing import Optional
from typing import Sequence
from typing import Union

import configargparse

import le_route53
from le_route53 import configuration
from le_route53 import constants


def flag_default(name: str) -> Any:
    """Default value for CLI flag."""
    return copy.deepcopy(constants.CLI_DEFAULTS[name])


class _DomainsAction(argparse.Action):
    """Action class for parsing domains."""

    def __call__(self, parser: argparse.ArgumentParser, namespace: argparse.Namespace,
                 values: Union[str, Sequence[Any], None],
                 option_string: Optional[str] = None) -> None:
        """Just wrap add_domains in argparseese."""
        add_domains(namespace, str(values))


def add_domains(namespace: argparse.Namespace, domains: str) -> List[str]:
    """Registers comma separated domains, ignoring repeats.

    Validation happens when the namespace is wrapped in a
    `.NamespaceConfig`.

    :returns: the domains found in ``domains``
    :rtype: `list` of `str`

    """
    added = []
    for domain in domains.split(","):
        domain = domain.strip()
        if not domain:
            continue
        added.append(domain)
        if domain not in namespace.domains:
            namespace.domains.append(domain)
    return added


def make_parser() -> configargparse.ArgParser:
    """Build the parser for flags, config files and environment."""
    parser = configargparse.ArgParser(
        prog="le-route53",
        description="Obtain and renew a Let's Encrypt certificate using "
                    "DNS-01 challenges published in AWS Route53.",
        args_for_setting_config_path=["-c", "--config"],
        default_config_files=flag_default("config_files"),
        config_arg_help_message="path to config file (default: {0})".format(
            " and ".join(flag_default("config_files"))),
        auto_env_var_prefix=constants.ENV_VAR_PREFIX,
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s {0}".format(le_route53.__version__))

    cert = parser.add_argument_group("certificate")
    cert.add_argument(
        "-d", "--domains", "--domain", dest="domains", metavar="DOMAIN",
        action=_DomainsAction, default=flag_default("domains"),
        help="Domain names the certificate must cover. Comma separated or "
             "repeated; the first one names the stored certificate.")
    cert.add_argument(
        "-m", "--email", default=flag_default("email"),
        help="Email address for important account notifications.")
    cert.add_argument(
        "--server", default=flag_default("server"),
        help="ACME directory: 'production', 'staging' or a URL. (default: %(default)s)")
    cert.add_argument(
        "--agree-tos", dest="agree_tos", action="store_true",
        default=flag_default("agree_tos"),
        help="Agree to the ACME server's Subscriber Agreement (default).")
    cert.add_argument(
        "--no-agree-tos", dest="agree_tos", action="store_false",
        help="Do not agree to the ACME server's Subscriber Agreement.")
    cert.add_argument(
        "--renew-before-expiry", type=int, metavar="DAYS",
        default=flag_default("renew_before_expiry"),
        help="Reissue stored certificates expiring within DAYS. (default: %(default)s)")
    cert.add_argument(
        "--config-dir", default=flag_default("config_dir"),
        help="Certificate and account storage directory. (default: %(default)s)")

    dns = parser.add_argument_group("route53")
    dns.add_argument(
        "--hosted-zone-id", default=flag_default("hosted_zone_id"),
        help="Route53 hosted zone receiving the challenge records.")
    dns.add_argument(
        "--discover-zone", action="store_true", default=flag_default("discover_zone"),
        help="Look the hosted zone up from the domain instead of "
             "requiring --hosted-zone-id.")
    dns.add_argument(
        "--aws-credentials-file", default=flag_default("aws_credentials_file"),
        help="Shared AWS credentials file. (default: %(default)s)")
    dns.add_argument(
        "--max-wait-attempts", type=int, default=flag_default("max_wait_attempts"),
        help="Propagation checks, one per second, before giving up on a "
             "record change. (default: %(default)s)")

    reporting = parser.add_argument_group("reporting")
    reporting.add_argument(
        "--log-level", default=flag_default("log_level"),
        choices=sorted(constants.LOG_LEVELS), type=str.lower,
        help="Console logging level. (default: %(default)s)")
    reporting.add_argument(
        "--reports-to-email", default=flag_default("reports_to_email"),
        help="Email errors to this address.")
    reporting.add_argument(
        "--smtp-host", default=flag_default("smtp_host"),
        help="SMTP server used for error reports. (default: %(default)s)")
    reporting.add_argument(
        "--smtp-port", type=int, default=flag_default("smtp_port"),
        help="SMTP server port. (default: %(default)s)")
    return parser


def prepare_and_parse_args(args: List[str]) -> configuration.NamespaceConfig:
    """Returns parsed command line arguments.

    :param list args: command line arguments with the program name removed

    :raises .ConfigurationError: if required settings are missing

    :returns: parsed command line arguments
    :rtype: configuration.NamespaceConfig

    """
    namespace = make_parser().parse_args(args)
    return configuration.NamespaceConfig(namespace)
