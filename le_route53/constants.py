"""le-route53 constants."""
import logging

CLI_DEFAULTS = dict(
    config_files=["./le-route53.ini"],
    domains=[],
    email=None,
    hosted_zone_id=None,
    discover_zone=False,
    server="production",
    config_dir="~/le",
    aws_credentials_file="./credentials",
    log_level="info",
    reports_to_email=None,
    smtp_host="localhost",
    smtp_port=25,
    agree_tos=True,
    max_wait_attempts=600,
    renew_before_expiry=30,
)
"""Defaults for CLI flags and `.NamespaceConfig` attributes."""

ENV_VAR_PREFIX = "LE_ROUTE53_"
"""Prefix of environment variables that may set any CLI flag."""

SERVER_ALIASES = {
    "production": "https://acme-v02.api.letsencrypt.org/directory",
    "staging": "https://acme-staging-v02.api.letsencrypt.org/directory",
}
"""Known ACME directory URLs, keyed by the ``--server`` shorthand."""

USER_AGENT = "le-route53"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

CHALLENGE_LABEL = "_acme-challenge"
"""Label prepended to the domain name being validated."""

CHALLENGE_TTL = 300
"""TTL, in seconds, of published challenge TXT records."""

CHANGE_COMMENT = "letsencrypt challenge"

MAX_WAIT_ATTEMPTS = 600
"""Propagation checks allowed after the first one before giving up."""

WAIT_INTERVAL = 1.0
"""Seconds slept between two propagation checks."""

AUTHZ_MAX_RETRIES = 30
"""Number of authorization polls made after a challenge was answered."""

FINALIZE_TIMEOUT = 90
"""Seconds allowed to the CA to finalize an order."""

RSA_KEY_SIZE = 2048

ACCOUNTS_DIR = "accounts"
ACCOUNT_KEY_FILENAME = "private_key.json"
LIVE_DIR = "live"
ARCHIVE_DIR = "archive"
RENEWAL_CONFIGS_DIR = "renewal"

CERT_KINDS = ("cert", "privkey", "chain", "fullchain")
"""Files stored per certificate version."""

SMTP_SUBJECT_FMT = "LE cert update {level}: {msg}"
