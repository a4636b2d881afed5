"""Models for the Tuya cloud integration."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class HubState(Enum):
    NOT_CONFIGURED = "not configured"
    ERROR = "error"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    READY = "ready"


@dataclass
class TuyaDevice:
    id: str
    name: str
    category: str = ""
    product_id: str = ""
    product_name: str = ""
    online: bool = False
    # Serialized capability maps; these strings key the capability catalog
    functions_json: str = "{}"
    status_json: str = "{}"
    # Last normalized attribute values mirrored from the cloud
    state: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StatusEvent:
    code: str
    value: Any = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "StatusEvent":
        return cls(code=str(raw.get("code", "")), value=raw.get("value"))


@dataclass(frozen=True)
class NormalizedEvent:
    name: str
    value: Any
    unit: Optional[str] = None
    description: str = ""
    # Button style events that must fire even if the value repeats
    state_change: bool = False


@dataclass
class DeviceStatusBatch:
    device_id: str
    statuses: List[StatusEvent]
    product_key: Optional[str] = None


@dataclass
class LifecycleEvent:
    biz_code: str
    biz_data: Dict[str, Any]

    @property
    def device_id(self) -> Optional[str]:
        return self.biz_data.get("devId")


RealtimeEnvelope = Union[DeviceStatusBatch, LifecycleEvent]
