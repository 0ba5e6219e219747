"""Interfaces of the provisioning collaborators that consume PoolSpecs

Nothing in this package implements these, cloud specific drivers do. The
resolution engine only produces the specification such a driver consumes,
see volume_templates.
"""

from abc import ABC
from abc import abstractmethod
from enum import IntEnum
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence

from storage_distribution.interface import DistributionResponse
from storage_distribution.interface import ExcludeUnsetModel

# Default identifier used to group all disks that do not belong to a set
SET_IDENTIFIER_NONE = "None"

SET_IDENTIFIER_LABEL = "storage-distribution/set-identifier"
POOL_LABEL = "storage-distribution/pool"


class StorageErrorCode(IntEnum):
    vol_detached = 5001
    vol_invalid = 5002
    vol_attached_on_remote_node = 5003
    vol_not_found = 5004
    invalid_device_path = 5005


class StorageError(Exception):
    def __init__(self, code: StorageErrorCode, msg: str, instance: str = ""):
        self.code = code
        self.msg = msg
        # More information on the error, typically the instance involved
        self.instance = instance
        super().__init__(msg)


class UnsupportedOperation(NotImplementedError):
    def __init__(self, operation: str = ""):
        super().__init__(f"Unsupported Operation {operation}".strip())


class CloudResourceInfo(ExcludeUnsetModel):
    name: str
    id: str
    labels: Dict[str, str] = {}
    zone: str = ""
    region: str = ""


class InstanceInfo(CloudResourceInfo):
    pass


class InstanceGroupInfo(CloudResourceInfo):
    """In AWS this maps to an ASG"""

    autoscaling_enabled: bool = False
    min: Optional[int] = None
    max: Optional[int] = None
    zones: List[str] = []


class VolumeTemplate(ExcludeUnsetModel):
    drive_type: str
    size_gib: int
    iops: int = 0
    thin_provisioning: bool = False
    labels: Dict[str, str] = {}


class Compute(ABC):
    @abstractmethod
    def instance_id(self) -> str:
        """Instance where the driver is executing"""

    @abstractmethod
    def inspect_instance(self, instance_id: str) -> InstanceInfo:
        pass

    @abstractmethod
    def inspect_instance_group_for_instance(
        self, instance_id: str
    ) -> InstanceGroupInfo:
        pass


class Storage(ABC):
    @abstractmethod
    def create(self, template: VolumeTemplate, labels: Dict[str, str]) -> Any:
        """Create a volume from the template and apply the labels"""

    @abstractmethod
    def get_device_id(self, template: Any) -> str:
        pass

    @abstractmethod
    def attach(self, volume_id: str) -> str:
        """Attach the volume and return the attach path"""

    @abstractmethod
    def detach(self, volume_id: str) -> None:
        pass

    @abstractmethod
    def detach_from(self, volume_id: str, instance_id: str) -> None:
        pass

    @abstractmethod
    def delete(self, volume_id: str) -> None:
        pass

    @abstractmethod
    def delete_from(self, volume_id: str, instance_id: str) -> None:
        pass

    @abstractmethod
    def describe(self) -> Any:
        pass

    @abstractmethod
    def free_devices(
        self, block_device_mappings: Sequence[Any], root_device_name: str
    ) -> List[str]:
        pass

    @abstractmethod
    def inspect(self, volume_ids: Sequence[str]) -> List[Any]:
        pass

    @abstractmethod
    def device_mappings(self) -> Dict[str, str]:
        """Map of locally attached device path to volume id"""

    @abstractmethod
    def enumerate(
        self,
        volume_ids: Sequence[str],
        labels: Optional[Dict[str, str]],
        set_identifier: str,
    ) -> Dict[str, List[Any]]:
        """Volumes matching the filters grouped by the set_identifier label

        labels may be None and set_identifier may be empty
        """

    @abstractmethod
    def device_path(self, volume_id: str) -> str:
        pass

    @abstractmethod
    def snapshot(self, volume_id: str, readonly: bool) -> Any:
        pass

    @abstractmethod
    def snapshot_delete(self, snap_id: str) -> None:
        pass

    @abstractmethod
    def apply_tags(self, volume_id: str, labels: Dict[str, str]) -> None:
        pass

    @abstractmethod
    def remove_tags(self, volume_id: str, labels: Dict[str, str]) -> None:
        pass

    @abstractmethod
    def tags(self, volume_id: str) -> Dict[str, str]:
        pass


class Ops(Storage, Compute):
    @abstractmethod
    def name(self) -> str:
        pass


def volume_templates(
    response: DistributionResponse,
    set_identifier: str = SET_IDENTIFIER_NONE,
    labels: Optional[Dict[str, str]] = None,
) -> List[VolumeTemplate]:
    """Expands a resolved distribution into the volumes one instance needs

    Every volume of pool i is labelled with the same set identifier and pool
    index so a driver can group them back together with Storage.enumerate.
    """
    templates = []
    for i, pool in enumerate(response.instance_storage):
        pool_labels = dict(labels or {})
        pool_labels[SET_IDENTIFIER_LABEL] = set_identifier
        pool_labels[POOL_LABEL] = str(i)
        for _ in range(pool.drive_count):
            templates.append(
                VolumeTemplate(
                    drive_type=pool.drive_type,
                    size_gib=pool.drive_capacity_gib,
                    iops=pool.iops,
                    thin_provisioning=pool.thin_provisioning,
                    labels=pool_labels,
                )
            )
    return templates
