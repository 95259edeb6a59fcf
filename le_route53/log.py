"""Logging utilities for le-route53.

`pre_config_setup` installs a terminal handler before the configuration
is read, so that configuration errors are shown. `post_config_setup`
sets the level requested by the user and, if error reports are
enabled, adds an email handler for ERROR records.

"""
import logging
import logging.handlers
import sys
from typing import IO
from typing import Optional

from le_route53 import configuration
from le_route53 import constants

CLI_FMT = "%(asctime)s %(levelname)s %(message)s"
MAIL_FMT = "%(asctime)s:%(levelname)s:%(name)s:%(message)s"

ANSI_SGR_RED = "\033[31m"
ANSI_SGR_RESET = "\033[0m"

logger = logging.getLogger(__name__)


def pre_config_setup() -> None:
    """Log to the terminal at INFO level until the configuration is read."""
    stream_handler = ColoredStreamHandler()
    stream_handler.setFormatter(logging.Formatter(CLI_FMT))
    stream_handler.setLevel(logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # send all records to handlers
    root_logger.addHandler(stream_handler)


def post_config_setup(config: configuration.NamespaceConfig) -> None:
    """Apply the logging settings of ``config``.

    :param le_route53.configuration.NamespaceConfig config: Configuration

    """
    root_logger = logging.getLogger()
    stream_handler = _stream_handler(root_logger)
    if stream_handler is None:
        pre_config_setup()
        stream_handler = _stream_handler(root_logger)
    assert stream_handler is not None

    stream_handler.setLevel(config.log_level_value)
    # AWS request logging shows up only at --log-level debug
    logging.getLogger("botocore").setLevel(config.log_level_value)
    logger.debug("Root logging level set at %d", config.log_level_value)

    if config.reports_enabled:
        mail_handler = ReportMailHandler(
            mailhost=(config.smtp_host, config.smtp_port),
            fromaddr=config.email,
            toaddrs=[config.reports_to_email])
        mail_handler.setFormatter(logging.Formatter(MAIL_FMT))
        mail_handler.setLevel(logging.ERROR)
        root_logger.addHandler(mail_handler)
        logger.info("Initialized email reporting to %s", config.reports_to_email)


def _stream_handler(root_logger: logging.Logger) -> Optional[logging.Handler]:
    for handler in root_logger.handlers:
        if isinstance(handler, ColoredStreamHandler):
            return handler
    return None


class ColoredStreamHandler(logging.StreamHandler):
    """Sends colored logging output to a stream.

    If the specified stream is not a tty, the class works like the
    standard `logging.StreamHandler`. Default red_level is
    `logging.WARNING`.

    :ivar bool colored: True if output should be colored
    :ivar bool red_level: The level at which to output

    """
    def __init__(self, stream: Optional[IO] = None) -> None:
        super().__init__(stream)
        self.colored = (sys.stderr.isatty() if stream is None else
                        stream.isatty())
        self.red_level = logging.WARNING

    def format(self, record: logging.LogRecord) -> str:
        """Formats the string representation of record.

        :param logging.LogRecord record: Record to be formatted

        :returns: Formatted, string representation of record
        :rtype: str

        """
        out = super().format(record)
        if self.colored and record.levelno >= self.red_level:
            return ''.join((ANSI_SGR_RED, out, ANSI_SGR_RESET))
        return out


class ReportMailHandler(logging.handlers.SMTPHandler):
    """Emails a record, with its level and message in the subject."""

    def __init__(self, mailhost: tuple, fromaddr: str, toaddrs: list) -> None:
        super().__init__(mailhost, fromaddr, toaddrs, subject=constants.SMTP_SUBJECT_FMT)

    def getSubject(self, record: logging.LogRecord) -> str:
        """First line of the record message, prefixed with its level."""
        msg = record.getMessage().splitlines()[0] if record.getMessage() else ""
        return self.subject.format(level=record.levelname.lower(), msg=msg)
