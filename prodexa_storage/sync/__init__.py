"""
Cloud mirroring and retry of failed pushes.
"""

from .events import ConnectivityWatcher, EventSource, dns_probe
from .mirror import AttachResult, CloudMirror, PickedFile, RemoteFilePicker
from .queue import PENDING_SYNC_KEY, DrainResult, PendingSyncQueue

__all__ = [
    "AttachResult",
    "CloudMirror",
    "ConnectivityWatcher",
    "DrainResult",
    "EventSource",
    "PENDING_SYNC_KEY",
    "PendingSyncQueue",
    "PickedFile",
    "RemoteFilePicker",
    "dns_probe",
]
