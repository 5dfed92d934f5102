"""Clients for external services."""

from appaloosa_publisher.client.appaloosa import (
    AppaloosaClient,
    MobileApplicationUpdate,
    UploadBinaryForm,
)

__all__ = [
    "AppaloosaClient",
    "MobileApplicationUpdate",
    "UploadBinaryForm",
]
