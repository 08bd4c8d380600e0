"""AWS resource source built on boto3 paginators."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator

from botocore.exceptions import BotoCoreError, ClientError

from aws_hygiene.domain.resources import (
    ElasticIP,
    Image,
    Inventory,
    LoadBalancer,
    SecurityGroup,
    Snapshot,
    Volume,
)
from aws_hygiene.errors import ResourceSourceError
from aws_hygiene.execution.aws_client import get_client

logger = logging.getLogger(__name__)

_AMI_ID_PATTERN = re.compile(r"\bami-[0-9a-f]{8,17}\b")

ClientFactory = Callable[[str], object]


class AWSCrawler:
    """Lists the resources of one account/region.

    ``client_factory`` receives a service name (``ec2``, ``elb``, ...) and
    returns a boto3 client; it defaults to the cached factory.
    """

    def __init__(self, client_factory: ClientFactory | None = None) -> None:
        self._client_factory = client_factory or get_client

    def crawl(self, account_id: str) -> Inventory:
        inventory = Inventory(
            volumes=tuple(self.get_volumes()),
            images=tuple(self.get_images(account_id)),
            elastic_ips=tuple(self.get_elastic_ips()),
            security_groups=tuple(self.get_security_groups()),
            snapshots=tuple(self.get_snapshots(account_id)),
            load_balancers=tuple(self.get_load_balancers()),
        )
        logger.info(
            "Crawled %d resource(s): %d volume(s), %d image(s), %d elastic IP(s), "
            "%d security group(s), %d snapshot(s), %d load balancer(s)",
            len(inventory),
            len(inventory.volumes),
            len(inventory.images),
            len(inventory.elastic_ips),
            len(inventory.security_groups),
            len(inventory.snapshots),
            len(inventory.load_balancers),
        )
        return inventory

    def get_caller_account_id(self) -> str:
        response = self._call("sts", "get_caller_identity")
        return str(response["Account"])

    def get_volumes(self) -> list[Volume]:
        return [
            Volume(
                id=item["VolumeId"],
                attachments=tuple(
                    attachment["InstanceId"]
                    for attachment in item.get("Attachments", [])
                    if attachment.get("InstanceId")
                ),
            )
            for item in self._paginate("ec2", "describe_volumes", "Volumes")
        ]

    def get_images(self, account_id: str) -> list[Image]:
        response = self._call("ec2", "describe_images", Owners=[account_id])
        return [
            Image(id=item["ImageId"], name=item.get("Name"))
            for item in response.get("Images", [])
        ]

    def get_elastic_ips(self) -> list[ElasticIP]:
        response = self._call("ec2", "describe_addresses")
        return [
            ElasticIP(
                id=item["PublicIp"],
                allocation_id=item.get("AllocationId"),
                association_id=item.get("AssociationId"),
                instance_id=item.get("InstanceId") or None,
                network_interface_id=item.get("NetworkInterfaceId"),
            )
            for item in response.get("Addresses", [])
        ]

    def get_security_groups(self) -> list[SecurityGroup]:
        return [
            SecurityGroup(
                id=item["GroupId"],
                group_name=item.get("GroupName"),
                vpc_id=item.get("VpcId"),
            )
            for item in self._paginate("ec2", "describe_security_groups", "SecurityGroups")
        ]

    def get_snapshots(self, account_id: str) -> list[Snapshot]:
        return [
            Snapshot(
                id=item["SnapshotId"],
                volume_id=item.get("VolumeId"),
                image_ids=tuple(_AMI_ID_PATTERN.findall(item.get("Description") or "")),
            )
            for item in self._paginate(
                "ec2", "describe_snapshots", "Snapshots", OwnerIds=[account_id]
            )
        ]

    def get_load_balancers(self) -> list[LoadBalancer]:
        return [
            LoadBalancer(
                id=item["LoadBalancerName"],
                instances=tuple(
                    instance["InstanceId"] for instance in item.get("Instances", [])
                ),
                security_groups=tuple(item.get("SecurityGroups", [])),
            )
            for item in self._paginate(
                "elb", "describe_load_balancers", "LoadBalancerDescriptions"
            )
        ]

    def list_instance_image_ids(self) -> list[str]:
        return _unique(instance.get("ImageId") for instance in self._instances())

    def list_ec2_security_groups(self) -> list[str]:
        return _unique(
            group.get("GroupId")
            for instance in self._instances()
            for group in instance.get("SecurityGroups", [])
        )

    def list_elasticache_security_groups(self) -> list[str]:
        return _unique(
            group.get("SecurityGroupId")
            for cluster in self._paginate(
                "elasticache", "describe_cache_clusters", "CacheClusters"
            )
            for group in cluster.get("SecurityGroups", [])
        )

    def list_elb_security_groups(self) -> list[str]:
        return _unique(
            group_id
            for balancer in self._paginate(
                "elb", "describe_load_balancers", "LoadBalancerDescriptions"
            )
            for group_id in balancer.get("SecurityGroups", [])
        )

    def list_rds_security_groups(self) -> list[str]:
        return _unique(
            group.get("VpcSecurityGroupId")
            for db_instance in self._paginate("rds", "describe_db_instances", "DBInstances")
            for group in db_instance.get("VpcSecurityGroups", [])
        )

    def list_referenced_security_groups(self) -> list[str]:
        return _unique(
            [
                *self.list_ec2_security_groups(),
                *self.list_elasticache_security_groups(),
                *self.list_elb_security_groups(),
                *self.list_rds_security_groups(),
            ]
        )

    def _instances(self) -> Iterator[dict]:
        for reservation in self._paginate("ec2", "describe_instances", "Reservations"):
            yield from reservation.get("Instances", [])

    def _call(self, service: str, operation: str, **kwargs) -> dict:
        client = self._client_factory(service)
        try:
            return getattr(client, operation)(**kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise ResourceSourceError(service, operation, str(exc)) from exc

    def _paginate(self, service: str, operation: str, result_key: str, **kwargs) -> Iterator[dict]:
        client = self._client_factory(service)
        try:
            paginator = client.get_paginator(operation)
            for page in paginator.paginate(**kwargs):
                yield from page.get(result_key, [])
        except (BotoCoreError, ClientError) as exc:
            raise ResourceSourceError(service, operation, str(exc)) from exc


def _unique(values) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return list(seen)
