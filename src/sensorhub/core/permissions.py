"""Device permission checks for hardware acquisition mode."""
import logging
import os
from enum import Enum
from typing import Dict, Iterable, List, Optional

from sensorhub.core.models.sensor_enum import SensorKind

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = "Permission denied. Please grant the required permissions and restart monitoring."


class Permission(Enum):
    LOCATION = "location"
    MOTION = "motion"
    SENSORS = "sensors"


class PermissionStatus(Enum):
    GRANTED = "granted"
    DENIED = "denied"


REQUIRED_PERMISSIONS: Dict[SensorKind, Optional[Permission]] = {
    SensorKind.ACCELEROMETER: Permission.MOTION,
    SensorKind.GYROSCOPE: Permission.MOTION,
    SensorKind.MAGNETOMETER: Permission.MOTION,
    SensorKind.LOCATION: Permission.LOCATION,
    SensorKind.BATTERY: None,
    SensorKind.LIGHT: Permission.SENSORS,
    SensorKind.PROXIMITY: Permission.SENSORS,
}


def required_permissions(kinds: Iterable[SensorKind]) -> List[Permission]:
    """Union of the permissions needed by `kinds`, in enum order."""
    needed = {REQUIRED_PERMISSIONS[kind] for kind in kinds}
    return [p for p in Permission if p in needed]


def request_permissions(device_paths: Dict[SensorKind, str]) -> Dict[Permission, PermissionStatus]:
    """
    Check that the process can read every device behind each required permission.

    A permission is granted only when all of its devices are readable.
    """
    result: Dict[Permission, PermissionStatus] = {}
    for permission in required_permissions(device_paths.keys()):
        paths = [path for kind, path in device_paths.items() if REQUIRED_PERMISSIONS[kind] == permission]
        denied = [path for path in paths if os.path.exists(path) and not os.access(path, os.R_OK | os.W_OK)]
        if denied:
            logger.warning(f"Permission '{permission.value}' denied for {', '.join(denied)}")
            result[permission] = PermissionStatus.DENIED
        else:
            result[permission] = PermissionStatus.GRANTED
    return result


def is_kind_permitted(kind: SensorKind, statuses: Dict[Permission, PermissionStatus]) -> bool:
    permission = REQUIRED_PERMISSIONS[kind]
    if permission is None:
        return True
    return statuses.get(permission, PermissionStatus.GRANTED) == PermissionStatus.GRANTED
