"""pynest - Async realtime mirror of a home-automation account's structures and devices."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pynest")
except PackageNotFoundError:
    __version__ = "0+local"
from pynest._transport import (
    AuthenticatedChannel,
    AuthTransport,
    HttpRevocationTransport,
    RealtimeSource,
    RevocationTransport,
)
from pynest.account import NestAccount
from pynest.config import NestConfig
from pynest.devices import CameraUnit, ClimateUnit, DeviceHandle, HazardUnit
from pynest.exceptions import (
    AuthFailureError,
    MalformedSnapshotError,
    NestConfigError,
    NestError,
    NoCredentialError,
    NotFoundError,
    PreconditionError,
    RevocationError,
)
from pynest.ingestion.multiplexer import SubscriptionMultiplexer
from pynest.models import AwayState, DeviceCategory, DeviceEntry, Structure
from pynest.session import Session, SessionState
from pynest.state.detector import ChangeDetector, DetectorState
from pynest.state.events import CapabilityChange
from pynest.state.registry import Registry

__all__ = [
    "__version__",
    "AuthFailureError",
    "AuthTransport",
    "AuthenticatedChannel",
    "AwayState",
    "CameraUnit",
    "CapabilityChange",
    "ChangeDetector",
    "ClimateUnit",
    "DetectorState",
    "DeviceCategory",
    "DeviceEntry",
    "DeviceHandle",
    "HazardUnit",
    "HttpRevocationTransport",
    "MalformedSnapshotError",
    "NestAccount",
    "NestConfig",
    "NestConfigError",
    "NestError",
    "NoCredentialError",
    "NotFoundError",
    "PreconditionError",
    "RealtimeSource",
    "Registry",
    "RevocationError",
    "RevocationTransport",
    "Session",
    "SessionState",
    "Structure",
    "SubscriptionMultiplexer",
]
