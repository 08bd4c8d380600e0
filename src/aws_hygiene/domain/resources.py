"""Domain objects for audited AWS resources."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class ResourceType(str, Enum):
    VOLUME = "ebs_volume"
    IMAGE = "ami"
    ELASTIC_IP = "elastic_ip"
    SECURITY_GROUP = "security_group"
    SNAPSHOT = "snapshot"
    LOAD_BALANCER = "elb"


@dataclass(frozen=True)
class Resource:
    """Immutable snapshot of a single resource fetched during a run."""

    resource_type: ClassVar[ResourceType]

    id: str

    @property
    def type(self) -> ResourceType:
        return self.resource_type


@dataclass(frozen=True)
class Volume(Resource):
    resource_type: ClassVar[ResourceType] = ResourceType.VOLUME

    attachments: tuple[str, ...] = ()

    @property
    def is_attached(self) -> bool:
        return bool(self.attachments)


@dataclass(frozen=True)
class Image(Resource):
    resource_type: ClassVar[ResourceType] = ResourceType.IMAGE

    name: str | None = None


@dataclass(frozen=True)
class ElasticIP(Resource):
    """Elastic IP keyed by its public address."""

    resource_type: ClassVar[ResourceType] = ResourceType.ELASTIC_IP

    allocation_id: str | None = None
    association_id: str | None = None
    instance_id: str | None = None
    network_interface_id: str | None = None

    @property
    def is_associated(self) -> bool:
        return any((self.association_id, self.instance_id, self.network_interface_id))


@dataclass(frozen=True)
class SecurityGroup(Resource):
    resource_type: ClassVar[ResourceType] = ResourceType.SECURITY_GROUP

    group_name: str | None = None
    vpc_id: str | None = None


@dataclass(frozen=True)
class Snapshot(Resource):
    resource_type: ClassVar[ResourceType] = ResourceType.SNAPSHOT

    volume_id: str | None = None
    # AMI ids referenced by the snapshot description (CreateImage snapshots).
    image_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class LoadBalancer(Resource):
    """Classic load balancer keyed by its name."""

    resource_type: ClassVar[ResourceType] = ResourceType.LOAD_BALANCER

    instances: tuple[str, ...] = ()
    security_groups: tuple[str, ...] = ()


@dataclass(frozen=True)
class Inventory:
    """Resources fetched for one run, partitioned by type."""

    volumes: tuple[Volume, ...] = ()
    images: tuple[Image, ...] = ()
    elastic_ips: tuple[ElasticIP, ...] = ()
    security_groups: tuple[SecurityGroup, ...] = ()
    snapshots: tuple[Snapshot, ...] = ()
    load_balancers: tuple[LoadBalancer, ...] = ()

    def resources(self) -> Iterator[Resource]:
        yield from self.volumes
        yield from self.images
        yield from self.elastic_ips
        yield from self.security_groups
        yield from self.snapshots
        yield from self.load_balancers

    def volume_ids(self) -> frozenset[str]:
        return frozenset(volume.id for volume in self.volumes)

    def image_ids(self) -> frozenset[str]:
        return frozenset(image.id for image in self.images)

    def __len__(self) -> int:
        return (
            len(self.volumes)
            + len(self.images)
            + len(self.elastic_ips)
            + len(self.security_groups)
            + len(self.snapshots)
            + len(self.load_balancers)
        )
