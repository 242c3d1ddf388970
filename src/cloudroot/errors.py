"""Resolution failure taxonomy."""

from __future__ import annotations

from typing import Optional


class ResolutionError(RuntimeError):
    """Base class for storage root resolution failures."""

    code: str = "RESOLUTION_FAILED"
    message: str = "Storage root could not be resolved"

    def __init__(self, details: Optional[str] = None) -> None:
        super().__init__(f"{self.message}: {details}" if details else self.message)
        self.details = details

    def to_dict(self) -> dict[str, object]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ContainerUnavailable(ResolutionError):
    """The cloud service is not configured, signed in, or entitled."""

    code = "ICLOUD_UNAVAILABLE"
    message = "iCloud container is not available"

    def __init__(self, details: Optional[str] = None) -> None:
        super().__init__(details or "Make sure iCloud is enabled and the app has proper entitlements")


class ProvisioningFailed(ResolutionError):
    """The directory existence check or creation failed."""

    code = "DIRECTORY_CREATION_FAILED"
    message = "Failed to create iCloud directory"


__all__ = ["ContainerUnavailable", "ProvisioningFailed", "ResolutionError"]
