"""Injected device capabilities (camera, clipboard, share sheet).

Absent capabilities are None rather than probed at runtime, so callers and
tests decide explicitly what the host supports.
"""
from dataclasses import dataclass
from typing import Optional, Protocol


class Camera(Protocol):
    def capture(self) -> bytes:
        """Capture a single still frame and return encoded image bytes."""
        ...


class Clipboard(Protocol):
    def write_text(self, text: str) -> None:
        ...


class ShareTarget(Protocol):
    def share(self, title: str, text: str, url: Optional[str] = None) -> None:
        ...


@dataclass
class MediaCapability:
    camera: Optional[Camera] = None
    clipboard: Optional[Clipboard] = None
    share: Optional[ShareTarget] = None

    @property
    def can_capture(self):
        return self.camera is not None

    @property
    def can_share(self):
        return self.share is not None or self.clipboard is not None
