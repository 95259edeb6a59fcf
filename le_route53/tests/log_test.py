"""Tests for le_route53.log."""
import io
import logging
import unittest
from unittest import mock


class PreConfigSetupTest(unittest.TestCase):
    """Tests for le_route53.log.pre_config_setup."""

    @mock.patch('le_route53.log.logging.getLogger')
    def test_it(self, mock_get_logger):
        from le_route53.log import ColoredStreamHandler
        from le_route53.log import pre_config_setup
        root_logger = mock_get_logger.return_value

        pre_config_setup()

        mock_get_logger.assert_called_with()
        root_logger.setLevel.assert_called_once_with(logging.DEBUG)
        handler = root_logger.addHandler.call_args[0][0]
        assert isinstance(handler, ColoredStreamHandler)
        assert handler.level == logging.INFO


class PostConfigSetupTest(unittest.TestCase):
    """Tests for le_route53.log.post_config_setup."""

    def setUp(self):
        from le_route53.log import ColoredStreamHandler
        self.root_logger = logging.getLogger()
        self.saved_handlers = list(self.root_logger.handlers)
        self.stream_handler = ColoredStreamHandler(io.StringIO())
        self.root_logger.handlers.insert(0, self.stream_handler)
        self.config = mock.MagicMock(
            log_level_value=logging.WARNING, reports_enabled=False,
            smtp_host="mail.example.com", smtp_port=2525,
            email="admin@example.com", reports_to_email="ops@example.com")

    def tearDown(self):
        self.root_logger.handlers = self.saved_handlers
        logging.getLogger("botocore").setLevel(logging.NOTSET)

    def _call(self):
        from le_route53.log import post_config_setup
        post_config_setup(self.config)

    def test_levels(self):
        self.config.log_level_value = logging.DEBUG
        self._call()

        assert self.stream_handler.level == logging.DEBUG
        assert logging.getLogger("botocore").getEffectiveLevel() == logging.DEBUG

    def test_botocore_follows_level(self):
        self._call()

        assert logging.getLogger("botocore").getEffectiveLevel() == logging.WARNING

    def test_no_reports(self):
        from le_route53.log import ReportMailHandler
        self._call()

        assert self.stream_handler.level == logging.WARNING
        assert not any(isinstance(handler, ReportMailHandler)
                       for handler in self.root_logger.handlers)

    def test_reports(self):
        from le_route53.log import ReportMailHandler
        self.config.reports_enabled = True
        self._call()

        handler, = [handler for handler in self.root_logger.handlers
                    if isinstance(handler, ReportMailHandler)]
        assert handler.level == logging.ERROR
        assert handler.mailhost == "mail.example.com"
        assert handler.mailport == 2525
        assert handler.fromaddr == "admin@example.com"
        assert handler.toaddrs == ["ops@example.com"]


class ColoredStreamHandlerTest(unittest.TestCase):
    """Tests for le_route53.log.ColoredStreamHandler."""

    def setUp(self):
        from le_route53.log import ColoredStreamHandler
        self.stream = io.StringIO()
        self.stream.isatty = lambda: True
        self.handler = ColoredStreamHandler(self.stream)
        self.logger = logging.getLogger("le_route53.tests.colored")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self.logger.addHandler(self.handler)

    def tearDown(self):
        self.logger.removeHandler(self.handler)

    def test_format(self):
        self.logger.info("msg")
        assert self.stream.getvalue() == "msg\n"

    def test_format_and_red_level(self):
        from le_route53 import log
        self.logger.warning("msg")
        assert self.stream.getvalue() == "{0}msg{1}\n".format(
            log.ANSI_SGR_RED, log.ANSI_SGR_RESET)


class ReportMailHandlerTest(unittest.TestCase):
    """Tests for le_route53.log.ReportMailHandler."""

    def setUp(self):
        from le_route53.log import ReportMailHandler
        self.handler = ReportMailHandler(("localhost", 25), "me@example.com",
                                         ["ops@example.com"])

    def _record(self, level, msg):
        return logging.LogRecord("le_route53", level, __file__, 1, msg, None, None)

    def test_subject(self):
        record = self._record(logging.ERROR, "Certificate update error:\nmore detail")
        assert self.handler.getSubject(record) == (
            "LE cert update error: Certificate update error:")

    def test_subject_empty_message(self):
        record = self._record(logging.CRITICAL, "")
        assert self.handler.getSubject(record) == "LE cert update critical: "

    @mock.patch('smtplib.SMTP')
    def test_emit(self, mock_smtp):
        self.handler.emit(self._record(logging.ERROR, "boom"))

        mock_smtp.assert_called_once_with("localhost", 25, timeout=self.handler.timeout)
        assert mock_smtp.return_value.send_message.called


if __name__ == '__main__':
    unittest.main()  # pragma: no cover
