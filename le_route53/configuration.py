"""le-route53 user-supplied configuration."""
import argparse
import datetime
import logging
import os
from typing import Any
from typing import List

from le_route53 import constants
from le_route53 import errors
from le_route53 import util

logger = logging.getLogger(__name__)


class NamespaceConfig:
    """Configuration wrapper around :class:`argparse.Namespace`.

    Attributes not defined here are read from the namespace. Paths are
    made absolute and the settings checked for sanity on creation.

    :ivar namespace: Namespace typically produced by
        :meth:`argparse.ArgumentParser.parse_args`.
    :type namespace: :class:`argparse.Namespace`

    :raises .ConfigurationError: if a required setting is missing or
        a setting is invalid

    """

    def __init__(self, namespace: argparse.Namespace) -> None:
        self.namespace = namespace
        self.namespace.config_dir = os.path.abspath(
            os.path.expanduser(self.namespace.config_dir))
        if self.namespace.aws_credentials_file:
            self.namespace.aws_credentials_file = os.path.abspath(
                os.path.expanduser(self.namespace.aws_credentials_file))
        _check_config_sanity(self)

    def __getattr__(self, name: str) -> Any:
        return getattr(self.namespace, name)

    @property
    def domains(self) -> List[str]:
        """Domains the certificate must cover, in request order."""
        return self.namespace.domains

    @property
    def server_url(self) -> str:
        """ACME directory URL of ``server``."""
        return constants.SERVER_ALIASES.get(self.namespace.server, self.namespace.server)

    @property
    def log_level_value(self) -> int:
        """``log_level`` as a `logging` level."""
        return constants.LOG_LEVELS[self.namespace.log_level.lower()]

    @property
    def renew_before_expiry_delta(self) -> datetime.timedelta:
        """``renew_before_expiry`` days as a `datetime.timedelta`."""
        return datetime.timedelta(days=self.namespace.renew_before_expiry)

    @property
    def reports_enabled(self) -> bool:
        """Whether errors are emailed to ``reports_to_email``."""
        return bool(self.namespace.reports_to_email)


def _require(config: NamespaceConfig, name: str) -> Any:
    value = getattr(config.namespace, name, None)
    if not value:
        raise errors.ConfigurationError(
            "Missing {0} in configuration.".format(name.replace("_", "-")))
    return value


def _check_config_sanity(config: NamespaceConfig) -> None:
    """Validate options and error out if requirements are not met.

    :param config: NamespaceConfig instance holding user configuration
    :type config: :class:`le_route53.configuration.NamespaceConfig`

    """
    config.namespace.domains = util.domain_set(_require(config, "domains"))

    if not util.safe_email(_require(config, "email")):
        raise errors.ConfigurationError(
            "Invalid email address: {0}.".format(config.namespace.email))

    if not config.namespace.discover_zone:
        _require(config, "hosted_zone_id")

    server = _require(config, "server")
    if server not in constants.SERVER_ALIASES and not server.startswith("https://"):
        raise errors.ConfigurationError(
            "Server must be one of {0} or an https:// URL, not {1}.".format(
                ", ".join(sorted(constants.SERVER_ALIASES)), server))

    if config.namespace.log_level.lower() not in constants.LOG_LEVELS:
        raise errors.ConfigurationError(
            "Unknown log level {0}.".format(config.namespace.log_level))

    if config.namespace.max_wait_attempts < 0:
        raise errors.ConfigurationError("max-wait-attempts can't be negative.")
    if config.namespace.renew_before_expiry < 0:
        raise errors.ConfigurationError("renew-before-expiry can't be negative.")

    if config.namespace.reports_to_email and not util.safe_email(
            config.namespace.reports_to_email):
        raise errors.ConfigurationError(
            "Invalid reports email address: {0}.".format(config.namespace.reports_to_email))
