"""Route53 implementation of the DNS provider."""
import logging
from typing import Any
from typing import Dict
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError
import botocore.session

from le_route53 import constants
from le_route53 import errors
from le_route53 import interfaces
from le_route53.models import ChangeStatus

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Configure credentials as described at "
    "https://boto3.readthedocs.io/en/latest/guide/configuration.html#best-practices-for-configuring-credentials "  # pylint: disable=line-too-long
    "and add the necessary permissions for Route53 access.")

_STATUSES = {
    "PENDING": ChangeStatus.PENDING,
    "INSYNC": ChangeStatus.DONE,
}


def make_client(credentials_file: Optional[str] = None) -> Any:
    """Create a Route53 client.

    :param str credentials_file: shared AWS credentials file; the boto3
        lookup chain is used when ``None``

    """
    session = botocore.session.Session()
    if credentials_file:
        session.set_config_variable("credentials_file", credentials_file)
    try:
        return boto3.session.Session(botocore_session=session).client("route53")
    except BotoCoreError as e:
        raise errors.ProviderError("\n".join([str(e), INSTRUCTIONS]))


class Route53Provider(interfaces.DNSProvider):
    """Publishes TXT records in an AWS Route53 hosted zone.

    :ivar r53: boto3 Route53 client
    :ivar str hosted_zone_id: zone written to; looked up from the record
        name when ``None``

    """
    def __init__(self, r53: Any, hosted_zone_id: Optional[str] = None,
                 comment: str = constants.CHANGE_COMMENT) -> None:
        self.r53 = r53
        self.hosted_zone_id = hosted_zone_id
        self.comment = comment

    def upsert_txt(self, name: str, value: str, ttl: int) -> str:
        return self._change_txt_record("UPSERT", name, value, ttl)

    def delete_txt(self, name: str, value: str, ttl: int) -> str:
        return self._change_txt_record("DELETE", name, value, ttl)

    def get_change_status(self, handle: str) -> ChangeStatus:
        try:
            response = self.r53.get_change(Id=handle)
        except (BotoCoreError, ClientError) as e:
            logger.debug('Encountered error reading change %s: %s', handle, e, exc_info=True)
            raise errors.ProviderError(str(e))
        status = response["ChangeInfo"]["Status"]
        try:
            return _STATUSES[status]
        except KeyError:
            raise errors.ProviderError(
                "Unexpected status {0} for Route53 change {1}.".format(status, handle))

    def _change_txt_record(self, action: str, name: str, value: str, ttl: int) -> str:
        try:
            zone_id = self.hosted_zone_id or self._find_zone_id_for_domain(name)
            response = self.r53.change_resource_record_sets(
                HostedZoneId=zone_id,
                ChangeBatch=_change_batch(action, name, value, ttl, self.comment),
            )
        except (BotoCoreError, ClientError) as e:
            logger.debug('Encountered error during %s: %s', action, e, exc_info=True)
            raise errors.ProviderError("\n".join([str(e), INSTRUCTIONS]))
        return response["ChangeInfo"]["Id"]

    def _find_zone_id_for_domain(self, domain: str) -> str:
        """Id of the public zone with the longest name that is a suffix of ``domain``."""
        paginator = self.r53.get_paginator("list_hosted_zones")
        zones = []
        target_labels = domain.rstrip(".").split(".")
        for page in paginator.paginate():
            for zone in page["HostedZones"]:
                if zone["Config"]["PrivateZone"]:
                    continue

                candidate_labels = zone["Name"].rstrip(".").split(".")
                if candidate_labels == target_labels[-len(candidate_labels):]:
                    zones.append((zone["Name"], zone["Id"]))

        if not zones:
            raise errors.ProviderError(
                "Unable to find a Route53 hosted zone for {0}".format(domain))

        # The longest matching zone name is the most specific one.
        zones.sort(key=lambda z: len(z[0]), reverse=True)
        return zones[0][1]


def _change_batch(action: str, name: str, value: str, ttl: int,
                  comment: str) -> Dict[str, Any]:
    return {
        "Comment": comment,
        "Changes": [
            {
                "Action": action,
                "ResourceRecordSet": {
                    "Name": name,
                    "Type": "TXT",
                    "TTL": ttl,
                    "ResourceRecords": [{"Value": value}],
                },
            },
        ],
    }
