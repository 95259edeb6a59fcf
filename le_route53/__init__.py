"""Let's Encrypt certificate renewal over Route53 DNS-01 challenges."""

# version number like 1.2.3a0, must have at least 2 parts, like 1.2
__version__ = '0.1.0'
