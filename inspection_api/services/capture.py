"""
Capture sessions for the inspector's microphone and camera.

Hardware access goes through an injected DeviceProvider. A session owns at
most one device and releases it exactly once, whether capture ends by stop,
cancel, an error while reading, or leaving a ``with`` block.
"""
from __future__ import annotations

import base64
import logging
from collections import deque
from enum import Enum
from typing import Deque, Dict, Iterable, List, Optional, Protocol, Set

from inspection_api.core.errors import DeviceAccessError

logger = logging.getLogger(__name__)


class DeviceKind(str, Enum):
    MICROPHONE = "microphone"
    CAMERA = "camera"


class CaptureDevice(Protocol):
    """An acquired device; ``read`` returns the next chunk of encoded media."""

    mime_type: str

    def read(self) -> bytes:
        ...

    def release(self) -> None:
        ...


class DeviceProvider(Protocol):
    def acquire(self, kind: DeviceKind) -> CaptureDevice:
        """Open a device; raises PermissionError when access is denied, OSError when unavailable."""
        ...


class StreamedDevice:
    """A device whose media is captured in the browser and posted to the API chunk by chunk."""

    def __init__(self, owner: "StreamedDeviceProvider", kind: DeviceKind, mime_type: str) -> None:
        self._owner = owner
        self.kind = kind
        self.mime_type = mime_type

    def read(self) -> bytes:
        inbox = self._owner._inbox[self.kind]
        if not inbox:
            raise OSError(f"No {self.kind.value} data has been received")
        return inbox.popleft()

    def release(self) -> None:
        self._owner._release(self.kind)


class StreamedDeviceProvider:
    """
    DeviceProvider for media posted by the browser.

    Each kind is held by at most one session at a time. Kinds that are not
    enabled behave like a denied permission. Pushed data that no session has
    read is dropped when the device is released.
    """

    DEFAULT_MIME_TYPES = {DeviceKind.MICROPHONE: "audio/webm", DeviceKind.CAMERA: "image/jpeg"}

    def __init__(self, enabled: Iterable[DeviceKind] = tuple(DeviceKind)) -> None:
        self.enabled: Set[DeviceKind] = set(enabled)
        self._held: Set[DeviceKind] = set()
        self._formats: Dict[DeviceKind, str] = dict(self.DEFAULT_MIME_TYPES)
        self._inbox: Dict[DeviceKind, Deque[bytes]] = {kind: deque() for kind in DeviceKind}

    def in_use(self, kind: DeviceKind) -> bool:
        return kind in self._held

    def set_format(self, kind: DeviceKind, mime_type: str) -> None:
        """Media type reported by the next device acquired for this kind."""
        self._formats[kind] = mime_type

    def push(self, kind: DeviceKind, data: bytes) -> None:
        if kind in self.enabled:
            self._inbox[kind].append(data)

    def acquire(self, kind: DeviceKind) -> StreamedDevice:
        if kind not in self.enabled:
            raise PermissionError(f"{kind.value} capture is disabled")
        if kind in self._held:
            raise OSError(f"The {kind.value} is already in use")
        self._held.add(kind)
        return StreamedDevice(self, kind, self._formats[kind])

    def _release(self, kind: DeviceKind) -> None:
        self._held.discard(kind)
        self._inbox[kind].clear()


def _encode_data_uri(mime_type: str, data: bytes) -> str:
    return f"data:{mime_type};base64," + base64.b64encode(data).decode("ascii")


class CaptureSession:
    """
    Records chunks from one device.

    Usage:
        with CaptureSession(provider, DeviceKind.MICROPHONE) as session:
            session.capture()
            data = session.stop()
    """

    def __init__(self, provider: DeviceProvider, kind: DeviceKind) -> None:
        self.provider = provider
        self.kind = kind
        self._device: Optional[CaptureDevice] = None
        self._chunks: List[bytes] = []
        self.mime_type: Optional[str] = None

    @property
    def active(self) -> bool:
        return self._device is not None

    def start(self) -> "CaptureSession":
        """
        Acquire the device.

        Raises:
            DeviceAccessError: access denied or the device is unavailable.
        """
        if self._device is not None:
            return self
        try:
            device = self.provider.acquire(self.kind)
        except PermissionError as exc:
            logger.warning("Access to %s denied", self.kind.value)
            raise DeviceAccessError(
                f"Access to the {self.kind.value} was denied",
                details={"device": self.kind.value, "reason": "permission_denied"},
            ) from exc
        except OSError as exc:
            logger.warning("%s unavailable: %s", self.kind.value, exc)
            raise DeviceAccessError(
                f"The {self.kind.value} is not available",
                details={"device": self.kind.value, "reason": "unavailable"},
            ) from exc
        self._device = device
        self.mime_type = device.mime_type
        self._chunks = []
        logger.debug("Acquired %s (%s)", self.kind.value, device.mime_type)
        return self

    def capture(self) -> bytes:
        """Read one chunk; the device is released if reading fails."""
        if self._device is None:
            raise DeviceAccessError(
                f"No {self.kind.value} session is active", details={"device": self.kind.value}
            )
        try:
            chunk = self._device.read()
        except Exception:
            self._release()
            raise
        self._chunks.append(chunk)
        return chunk

    def stop(self) -> bytes:
        """Release the device and return everything captured so far."""
        self._release()
        data = b"".join(self._chunks)
        self._chunks = []
        return data

    def cancel(self) -> None:
        """Release the device and discard captured data."""
        self._release()
        self._chunks = []

    def _release(self) -> None:
        device, self._device = self._device, None
        if device is not None:
            device.release()
            logger.debug("Released %s", self.kind.value)

    def __enter__(self) -> "CaptureSession":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self._release()


class AudioRecorder:
    """Voice notes: record from the microphone and hand back a data URI for transcription."""

    def __init__(self, provider: DeviceProvider) -> None:
        self._session = CaptureSession(provider, DeviceKind.MICROPHONE)

    @property
    def recording(self) -> bool:
        return self._session.active

    def start(self) -> None:
        self._session.start()

    def capture(self) -> bytes:
        return self._session.capture()

    # PUBLIC_INTERFACE
    def stop(self) -> str:
        """
        Stop recording.

        Returns:
            The recording as ``data:<mime>;base64,<payload>``.
        Raises:
            DeviceAccessError: nothing was recorded.
        """
        mime_type = self._session.mime_type or "audio/webm"
        data = self._session.stop()
        if not data:
            raise DeviceAccessError("No audio was recorded", details={"device": "microphone"})
        return _encode_data_uri(mime_type, data)

    def cancel(self) -> None:
        self._session.cancel()


# PUBLIC_INTERFACE
def capture_photo(provider: DeviceProvider) -> str:
    """Take a single frame from the camera as an image data URI."""
    with CaptureSession(provider, DeviceKind.CAMERA) as session:
        frame = session.capture()
        mime_type = session.mime_type or "image/jpeg"
    if not mime_type.startswith("image/"):
        raise DeviceAccessError(
            f"Camera returned unsupported media '{mime_type}'", details={"device": "camera"}
        )
    return _encode_data_uri(mime_type, frame)
