"""Hygiene rules for AWS resources."""

from __future__ import annotations

from collections.abc import Iterable
from typing import cast

from aws_hygiene.domain.resources import (
    ElasticIP,
    LoadBalancer,
    Resource,
    ResourceType,
    SecurityGroup,
    Snapshot,
    Volume,
)
from aws_hygiene.rules.base import Rule

_DEFAULT_SECURITY_GROUP_NAME = "default"


class DetachedVolume(Rule):
    name = "DetachedEBS"
    description = "EBS volume is not attached to any EC2 instance"
    resource_types = frozenset({ResourceType.VOLUME})

    def _check(self, resource: Resource) -> bool:
        return cast(Volume, resource).is_attached


class LoadBalancerWithoutMultipleInstances(Rule):
    """Flags load balancers backed by fewer than two instances.

    A single backing instance gives no redundancy, so it is reported the same
    way as an empty load balancer.
    """

    name = "ELBWithoutMultipleInstances"
    description = "Elastic load balancer has fewer than two registered instances"
    resource_types = frozenset({ResourceType.LOAD_BALANCER})

    def __init__(self, min_instances: int = 2) -> None:
        self.min_instances = min_instances

    def _check(self, resource: Resource) -> bool:
        return len(cast(LoadBalancer, resource).instances) >= self.min_instances


class UnusedImage(Rule):
    name = "UnusedAMI"
    description = "AMI is not used by any EC2 instance"
    resource_types = frozenset({ResourceType.IMAGE})

    def __init__(self, used_image_ids: Iterable[str]) -> None:
        self._used_image_ids = frozenset(used_image_ids)

    def _check(self, resource: Resource) -> bool:
        return resource.id in self._used_image_ids


class UnusedElasticIP(Rule):
    name = "UnusedElasticIP"
    description = "Elastic IP is not associated with any instance or network interface"
    resource_types = frozenset({ResourceType.ELASTIC_IP})

    def _check(self, resource: Resource) -> bool:
        return cast(ElasticIP, resource).is_associated


class UnusedSecurityGroup(Rule):
    name = "UnusedSecurityGroup"
    description = (
        "Security group is not referenced by any EC2, ElastiCache, ELB or RDS resource"
    )
    resource_types = frozenset({ResourceType.SECURITY_GROUP})

    def __init__(
        self,
        referenced_group_ids: Iterable[str],
        exempt_default_groups: bool = False,
    ) -> None:
        self._referenced_group_ids = frozenset(referenced_group_ids)
        self._exempt_default_groups = exempt_default_groups

    def _check(self, resource: Resource) -> bool:
        group = cast(SecurityGroup, resource)
        # VPC default groups cannot be deleted.
        if self._exempt_default_groups and group.group_name == _DEFAULT_SECURITY_GROUP_NAME:
            return True
        return group.id in self._referenced_group_ids


class UnusedSnapshot(Rule):
    name = "UnusedSnapshot"
    description = "Snapshot source volume no longer exists and no existing AMI references it"
    resource_types = frozenset({ResourceType.SNAPSHOT})

    def __init__(self, volume_ids: Iterable[str], image_ids: Iterable[str]) -> None:
        self._volume_ids = frozenset(volume_ids)
        self._image_ids = frozenset(image_ids)

    def _check(self, resource: Resource) -> bool:
        snapshot = cast(Snapshot, resource)
        if snapshot.volume_id is not None and snapshot.volume_id in self._volume_ids:
            return True
        return any(image_id in self._image_ids for image_id in snapshot.image_ids)
