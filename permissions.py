"""OS permission checks through Qt's permission API."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

try:
    from PySide6.QtCore import QCameraPermission, QCoreApplication, QEventLoop, QMicrophonePermission, Qt
except Exception:  # pragma: no cover
    QCameraPermission = None  # type: ignore
    QCoreApplication = None  # type: ignore
    QEventLoop = None  # type: ignore
    QMicrophonePermission = None  # type: ignore
    Qt = None  # type: ignore


class QtPermissionGate:
    """Ask the OS for camera/microphone access, prompting when undetermined.

    Platforms without a permission model report every request as granted.
    """

    def request(self, kind: str) -> bool:
        if QCoreApplication is None or QCameraPermission is None:
            return True
        app = QCoreApplication.instance()
        if app is None:
            return True
        permission = self._permission_for(kind)
        if permission is None:
            logger.warning("Unknown permission kind %r", kind)
            return False

        status = app.checkPermission(permission)
        if status == Qt.PermissionStatus.Undetermined:
            status = self._prompt(app, permission)
        granted = status == Qt.PermissionStatus.Granted
        if not granted:
            logger.info("%s permission denied", kind)
        return granted

    def _permission_for(self, kind: str) -> Any:
        if kind == "camera":
            return QCameraPermission()
        if kind == "microphone":
            return QMicrophonePermission()
        return None

    def _prompt(self, app: Any, permission: Any) -> Any:
        loop = QEventLoop()
        result: dict[str, Any] = {}

        def _on_result(answered: Any) -> None:
            result["status"] = app.checkPermission(answered)
            loop.quit()

        app.requestPermission(permission, app, _on_result)
        if "status" not in result:
            loop.exec()
        return result.get("status", Qt.PermissionStatus.Denied)
