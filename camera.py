"""Camera capability built on PySide6 QtMultimedia."""

from __future__ import annotations

import logging
from typing import Any, Optional

from errors import CaptureError

logger = logging.getLogger(__name__)

try:
    from PySide6.QtCore import QBuffer, QByteArray, QEventLoop, QIODevice, QTimer
    from PySide6.QtMultimedia import QCamera, QImageCapture, QMediaCaptureSession, QMediaDevices
except Exception:  # pragma: no cover
    QBuffer = None  # type: ignore
    QByteArray = None  # type: ignore
    QEventLoop = None  # type: ignore
    QIODevice = None  # type: ignore
    QTimer = None  # type: ignore
    QCamera = None  # type: ignore
    QImageCapture = None  # type: ignore
    QMediaCaptureSession = None  # type: ignore
    QMediaDevices = None  # type: ignore


def encode_jpeg(image: Any, quality: int = 90) -> bytes:
    """Encode a QImage as JPEG bytes."""
    data = QByteArray()
    buf = QBuffer(data)
    buf.open(QIODevice.WriteOnly)
    ok = image.save(buf, "JPG", quality)
    buf.close()
    if not ok:
        raise CaptureError("could not encode photo")
    return bytes(data.data())


class QtCameraCapability:
    """Owns one camera device for the length of an inspection session.

    ``capture()`` runs a local Qt event loop until the frame arrives, so it
    must be called from the GUI thread.
    """

    def __init__(self, device_index: int = 0, capture_timeout_ms: int = 5000) -> None:
        self._device_index = device_index
        self._capture_timeout_ms = capture_timeout_ms
        self._camera: Any = None
        self._image_capture: Any = None
        self._session: Any = None
        self._video_output: Any = None

    @property
    def is_active(self) -> bool:
        return self._camera is not None

    def attach_preview(self, video_output: Any) -> None:
        self._video_output = video_output
        if self._session is not None:
            self._session.setVideoOutput(video_output)

    def initialize(self) -> bool:
        if QCamera is None or QMediaDevices is None:
            logger.info("QtMultimedia is not available; camera disabled")
            return False
        devices = QMediaDevices.videoInputs()
        if not devices:
            logger.info("No camera device found")
            return False
        device = devices[self._device_index] if self._device_index < len(devices) else devices[0]

        self._camera = QCamera(device)
        self._image_capture = QImageCapture()
        self._session = QMediaCaptureSession()
        self._session.setCamera(self._camera)
        self._session.setImageCapture(self._image_capture)
        if self._video_output is not None:
            self._session.setVideoOutput(self._video_output)
        self._camera.start()
        if not self._camera.isActive() and self._camera.error() != QCamera.Error.NoError:
            logger.warning("Camera failed to start: %s", self._camera.errorString())
            self.release()
            return False
        return True

    def capture(self) -> bytes:
        if self._image_capture is None:
            raise CaptureError("camera is not initialised")

        result: dict[str, Any] = {}
        loop = QEventLoop()

        def _on_captured(request_id: int, image: Any) -> None:
            result["image"] = image
            loop.quit()

        def _on_error(request_id: int, error: Any, message: str) -> None:
            result["error"] = message or str(error)
            loop.quit()

        self._image_capture.imageCaptured.connect(_on_captured)
        self._image_capture.errorOccurred.connect(_on_error)
        try:
            if self._image_capture.capture() < 0:
                raise CaptureError(self._image_capture.errorString() or "camera not ready")
            QTimer.singleShot(self._capture_timeout_ms, loop.quit)
            loop.exec()
        finally:
            self._image_capture.imageCaptured.disconnect(_on_captured)
            self._image_capture.errorOccurred.disconnect(_on_error)

        if "error" in result:
            raise CaptureError(result["error"])
        image: Optional[Any] = result.get("image")
        if image is None or image.isNull():
            raise CaptureError("timed out waiting for the photo")
        return encode_jpeg(image)

    def release(self) -> None:
        camera, self._camera = self._camera, None
        if camera is not None:
            camera.stop()
        if self._session is not None:
            self._session.setCamera(None)
        self._session = None
        self._image_capture = None
