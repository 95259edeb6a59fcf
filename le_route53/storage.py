"""Filesystem storage of issued certificates."""
import datetime
import logging
import os
import re
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence

import configobj

import le_route53
from le_route53 import constants
from le_route53 import errors
from le_route53 import interfaces
from le_route53 import util
from le_route53.models import Certificate

logger = logging.getLogger(__name__)

README = """This directory contains your keys and certificates.

`privkey.pem`  : the private key for your certificate.
`fullchain.pem`: the certificate file used in most server software.
`chain.pem`    : used for OCSP stapling in Nginx >=1.3.7.
`cert.pem`     : will break many server configurations, and should not be used
                 without reading further documentation.

Files in this directory are replaced each time the certificate is renewed.
"""


def lineagename_for(domains: Sequence[str]) -> str:
    """Name under which the certificate for ``domains`` is stored."""
    if not domains:
        raise errors.CertStorageError("Can't name a certificate without domains.")
    name = domains[0]
    return name[2:] if name.startswith("*.") else name


class FileCertificateStore(interfaces.CertificateStore):
    """Stores certificates below ``config_dir``.

    Each lineage is made of::

      live/<name>/{cert,privkey,chain,fullchain}.pem   current version
      archive/<name>/<kind><N>.pem                     every version
      renewal/<name>.conf                              lineage metadata

    :ivar str config_dir: root directory of the store

    """
    def __init__(self, config_dir: str) -> None:
        self.config_dir = os.path.abspath(os.path.expanduser(config_dir))

    @property
    def live_dir(self) -> str:
        return os.path.join(self.config_dir, constants.LIVE_DIR)

    @property
    def archive_dir(self) -> str:
        return os.path.join(self.config_dir, constants.ARCHIVE_DIR)

    @property
    def renewal_configs_dir(self) -> str:
        return os.path.join(self.config_dir, constants.RENEWAL_CONFIGS_DIR)

    def renewal_file(self, lineagename: str) -> str:
        return os.path.join(self.renewal_configs_dir, lineagename + ".conf")

    def find(self, domains: Sequence[str]) -> Optional[Certificate]:
        lineagename = lineagename_for(domains)
        config_filename = self.renewal_file(lineagename)
        if not os.path.exists(config_filename):
            logger.debug("No stored certificate named %s.", lineagename)
            return None
        try:
            config = configobj.ConfigObj(
                config_filename, encoding='utf-8', default_encoding='utf-8',
                file_error=True)
            contents = {kind: _read(config[kind]) for kind in constants.CERT_KINDS}
            return Certificate.from_pem(
                contents["cert"], contents["chain"], contents["privkey"])
        except (OSError, KeyError, ValueError, configobj.ConfigObjError) as error:
            raise errors.CertStorageError(
                "Stored certificate {0} is unreadable: {1}".format(lineagename, error))

    def save(self, lineagename: str, cert: Certificate,
             server: Optional[str] = None) -> None:
        live = os.path.join(self.live_dir, lineagename)
        archive = os.path.join(self.archive_dir, lineagename)
        contents = {
            "cert": cert.cert_pem,
            "privkey": cert.key_pem,
            "chain": cert.chain_pem,
            "fullchain": cert.fullchain_pem,
        }
        try:
            for directory in (self.renewal_configs_dir, self.live_dir, self.archive_dir):
                util.make_or_verify_dir(directory, 0o755)
            util.make_or_verify_dir(archive, 0o700)
            util.make_or_verify_dir(live, 0o755)

            version = self.next_free_version(lineagename)
            targets: Dict[str, str] = {}
            for kind in constants.CERT_KINDS:
                chmod = 0o600 if kind == "privkey" else 0o644
                archived = os.path.join(archive, "{0}{1}.pem".format(kind, version))
                _write(archived, contents[kind], chmod)
                targets[kind] = os.path.join(live, kind + ".pem")
                _write(targets[kind], contents[kind], chmod)

            readme = os.path.join(live, "README")
            if not os.path.exists(readme):
                with util.safe_open(readme, chmod=0o644) as f:
                    f.write(README)

            self._write_renewal_config(lineagename, cert, targets, version, server)
        except OSError as error:
            raise errors.CertStorageError(
                "Can't store certificate {0}: {1}".format(lineagename, error))
        logger.info("Certificate %s saved under %s (version %d).",
                    lineagename, live, version)

    def available_versions(self, lineagename: str) -> List[int]:
        """Versions of ``lineagename`` found in the archive directory."""
        archive = os.path.join(self.archive_dir, lineagename)
        if not os.path.isdir(archive):
            return []
        pattern = re.compile(r"^cert([0-9]+)\.pem$")
        matches = (pattern.match(f) for f in os.listdir(archive))
        return sorted(int(m.group(1)) for m in matches if m)

    def next_free_version(self, lineagename: str) -> int:
        versions = self.available_versions(lineagename)
        return versions[-1] + 1 if versions else 1

    def _write_renewal_config(self, lineagename: str, cert: Certificate,
                              targets: Dict[str, str], version: int,
                              server: Optional[str]) -> None:
        filename = self.renewal_file(lineagename)
        config = configobj.ConfigObj(filename, encoding='utf-8', default_encoding='utf-8')
        config["version"] = le_route53.__version__
        config["archive_dir"] = os.path.join(self.archive_dir, lineagename)
        for kind in constants.CERT_KINDS:
            config[kind] = targets[kind]
        if "renewalparams" not in config:
            config["renewalparams"] = {}
            config.comments["renewalparams"] = ["", "Options used in the renewal process"]
        params = config["renewalparams"]
        params["domains"] = cert.names()
        params["current_version"] = str(version)
        params["issued"] = datetime.datetime.now(datetime.timezone.utc).isoformat()
        params["not_after"] = cert.not_after.isoformat()
        if server:
            params["server"] = server
        logger.debug("Writing new config %s.", filename)
        with open(filename, "wb") as f:
            config.write(outfile=f)


def _read(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _write(path: str, data: bytes, chmod: int) -> None:
    with util.safe_open(path, mode="wb", chmod=chmod) as f:
        f.write(data)
