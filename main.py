"""Application entrypoint."""

from __future__ import annotations

import logging
import os
import sys
import threading

from camera import QtCameraCapability
from config import JsonConfigStore
from errors import RECORD_ADDED, EmptyDraftError
from interfaces import ConfigStore, RecordSource
from models import CameraState, DraftObservation, InspectionRecord, SpeechState
from notice import NoticeToast
from permissions import QtPermissionGate
from record_store import RecordStore
from report_export import ClipboardReportExporter
from report_view import EMPTY_HINT, EMPTY_MESSAGE, build_report, format_timestamp
from session_controller import CaptureSessionController
from speech import DashscopeSpeechCapability

try:
    from PySide6.QtCore import QObject, Qt, Signal
    from PySide6.QtGui import QAction, QPixmap
    from PySide6.QtMultimediaWidgets import QVideoWidget
    from PySide6.QtWidgets import (
        QApplication,
        QComboBox,
        QGroupBox,
        QHBoxLayout,
        QInputDialog,
        QLabel,
        QMainWindow,
        QMessageBox,
        QPlainTextEdit,
        QPushButton,
        QScrollArea,
        QStackedWidget,
        QTabWidget,
        QVBoxLayout,
        QWidget,
    )
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)

PREVIEW_HEIGHT = 200


class UIBridge(QObject):
    camera_state_signal = Signal(str, str)  # from_state, to_state
    speech_state_signal = Signal(str, str)
    draft_signal = Signal(object)
    notice_signal = Signal(str, str)  # code, message
    record_signal = Signal(object)


class InspectTab(QWidget):
    def __init__(self, controller: CaptureSessionController, camera: QtCameraCapability) -> None:
        super().__init__()
        self._controller = controller

        self.room_box = QComboBox()
        self.room_box.addItems(controller.rooms)
        self.room_box.currentTextChanged.connect(controller.select_room)

        self.preview = QVideoWidget()
        self.preview.setFixedHeight(PREVIEW_HEIGHT)
        camera.attach_preview(self.preview)
        self.photo_label = QLabel()
        self.photo_label.setAlignment(Qt.AlignCenter)
        self.unavailable_label = QLabel("Camera not available")
        self.unavailable_label.setAlignment(Qt.AlignCenter)
        self.camera_stack = QStackedWidget()
        self.camera_stack.setFixedHeight(PREVIEW_HEIGHT)
        for widget in (self.preview, self.photo_label, self.unavailable_label):
            self.camera_stack.addWidget(widget)
        self.photo_button = QPushButton("Take Photo")
        self.photo_button.clicked.connect(lambda: controller.capture_photo())

        self.comment_edit = QPlainTextEdit()
        self.comment_edit.setPlaceholderText("Type or dictate your comments...")
        self.comment_edit.setFixedHeight(80)
        self.comment_edit.textChanged.connect(self._on_text_edited)
        self.dictate_button = QPushButton("Dictate")
        self.dictate_button.clicked.connect(self._toggle_dictation)
        self.speech_label = QLabel("Speech not available")
        self.speech_label.setStyleSheet("color: grey;")

        self.add_button = QPushButton("Add to Report")
        self.add_button.setMinimumHeight(48)
        self.add_button.clicked.connect(self._add_to_report)

        layout = QVBoxLayout()
        layout.addWidget(self._group("Select Room:", self.room_box))
        layout.addWidget(self._group("Camera", self.camera_stack, self.photo_button))
        dictation_row = QHBoxLayout()
        dictation_row.addWidget(self.dictate_button)
        dictation_row.addWidget(self.speech_label)
        dictation_row.addStretch(1)
        dictation = QWidget()
        dictation.setLayout(dictation_row)
        layout.addWidget(self._group("Comments", self.comment_edit, dictation))
        layout.addStretch(1)
        layout.addWidget(self.add_button)
        self.setLayout(layout)

    @staticmethod
    def _group(title: str, *widgets: QWidget) -> QGroupBox:
        box = QGroupBox(title)
        inner = QVBoxLayout()
        for widget in widgets:
            inner.addWidget(widget)
        box.setLayout(inner)
        return box

    def _on_text_edited(self) -> None:
        text = self.comment_edit.toPlainText()
        if text != self._controller.draft.pending_comment:
            self._controller.edit_comment(text)

    def _toggle_dictation(self) -> None:
        if self._controller.is_listening:
            # stop waits for the transcription; keep the Qt main thread free
            threading.Thread(target=self._controller.stop_dictation, daemon=True).start()
        else:
            self._controller.start_dictation()

    def _add_to_report(self) -> None:
        try:
            self._controller.commit()
        except EmptyDraftError as exc:
            logger.debug("Add to report ignored: %s", exc)

    def show_draft(self, draft: DraftObservation) -> None:
        if self.room_box.currentText() != draft.selected_room:
            self.room_box.blockSignals(True)
            self.room_box.setCurrentText(draft.selected_room)
            self.room_box.blockSignals(False)
        if self.comment_edit.toPlainText() != draft.pending_comment:
            self.comment_edit.blockSignals(True)
            self.comment_edit.setPlainText(draft.pending_comment)
            self.comment_edit.blockSignals(False)
        if draft.pending_image is not None:
            pixmap = QPixmap()
            pixmap.loadFromData(draft.pending_image)
            self.photo_label.setPixmap(
                pixmap.scaledToHeight(PREVIEW_HEIGHT, Qt.SmoothTransformation)
            )
        self.photo_button.setText("Retake Photo" if draft.pending_image is not None else "Take Photo")
        self.add_button.setEnabled(draft.can_commit)
        self._show_camera_page(self._controller.camera_state, draft)

    def show_camera_state(self, state: CameraState) -> None:
        self.photo_button.setEnabled(state == CameraState.CAMERA_READY)
        self._show_camera_page(state, self._controller.draft)

    def _show_camera_page(self, state: CameraState, draft: DraftObservation) -> None:
        if draft.pending_image is not None:
            self.camera_stack.setCurrentWidget(self.photo_label)
        elif state in (CameraState.CAMERA_READY, CameraState.CAPTURING):
            self.camera_stack.setCurrentWidget(self.preview)
        else:
            self.camera_stack.setCurrentWidget(self.unavailable_label)

    def show_speech_state(self, state: SpeechState) -> None:
        listening = state == SpeechState.LISTENING
        self.dictate_button.setEnabled(state != SpeechState.UNAVAILABLE)
        self.dictate_button.setText("Stop" if listening else "Dictate")
        self.dictate_button.setStyleSheet("background-color: #E53935; color: white;" if listening else "")
        self.speech_label.setVisible(state == SpeechState.UNAVAILABLE)


class ReportTab(QWidget):
    def __init__(self, store: RecordSource, on_copy) -> None:  # noqa: ANN001
        super().__init__()
        self._store = store
        self._scroll = QScrollArea()
        self._scroll.setWidgetResizable(True)
        self.copy_button = QPushButton("Copy Report")
        self.copy_button.clicked.connect(on_copy)

        layout = QVBoxLayout()
        layout.addWidget(self._scroll)
        layout.addWidget(self.copy_button)
        self.setLayout(layout)
        self.refresh()

    def refresh(self) -> None:
        report = build_report(self._store)
        self.copy_button.setEnabled(not report.is_empty)

        layout = QVBoxLayout()
        if report.is_empty:
            layout.addStretch(1)
            for text, style in ((EMPTY_MESSAGE, "font-size: 18px; color: grey;"), (EMPTY_HINT, "")):
                label = QLabel(text)
                label.setAlignment(Qt.AlignCenter)
                label.setStyleSheet(style)
                layout.addWidget(label)
        else:
            for section in report.sections:
                box = QGroupBox(section.room)
                box.setStyleSheet("QGroupBox { font-size: 20px; font-weight: bold; }")
                inner = QVBoxLayout()
                for record in section.records:
                    inner.addWidget(self._item_widget(record))
                box.setLayout(inner)
                layout.addWidget(box)
        layout.addStretch(1)

        content = QWidget()
        content.setLayout(layout)
        # setWidget deletes the previous content widget
        self._scroll.setWidget(content)

    @staticmethod
    def _item_widget(record: InspectionRecord) -> QWidget:
        layout = QVBoxLayout()
        if record.image:
            pixmap = QPixmap()
            pixmap.loadFromData(record.image)
            photo = QLabel()
            photo.setPixmap(pixmap.scaledToHeight(PREVIEW_HEIGHT, Qt.SmoothTransformation))
            layout.addWidget(QLabel("Photo:"))
            layout.addWidget(photo)
        if record.comment:
            layout.addWidget(QLabel("Comments:"))
            comment = QLabel(record.comment)
            comment.setWordWrap(True)
            layout.addWidget(comment)
        added = QLabel(f"Added: {format_timestamp(record)}")
        added.setStyleSheet("font-size: 11px; color: grey;")
        layout.addWidget(added)
        widget = QWidget()
        widget.setLayout(layout)
        return widget


class MainWindow(QMainWindow):
    def __init__(self, config_store: ConfigStore) -> None:
        super().__init__()
        self.setWindowTitle("House Inspector")
        self.resize(480, 760)

        self.ui = UIBridge()
        self.ui.camera_state_signal.connect(self._on_camera_state_ui)
        self.ui.speech_state_signal.connect(self._on_speech_state_ui)
        self.ui.draft_signal.connect(self._on_draft_ui)
        self.ui.notice_signal.connect(self._on_notice_ui)
        self.ui.record_signal.connect(self._on_record_ui)

        self.config_store = config_store
        self.store = RecordStore()
        self.store.add_listener(self.ui.record_signal.emit)
        self.camera = QtCameraCapability(device_index=config_store.get_camera_index())
        self.speech = DashscopeSpeechCapability(
            api_key=config_store.get_api_key(),
            finalize_timeout_s=config_store.get_speech_timeout_s(),
        )
        self.controller = CaptureSessionController(
            camera=self.camera,
            speech=self.speech,
            permissions=QtPermissionGate(),
            store=self.store,
            rooms=config_store.get_rooms(),
            on_camera_state=self._on_camera_state,
            on_speech_state=self._on_speech_state,
            on_draft_change=self.ui.draft_signal.emit,
            on_notice=self.ui.notice_signal.emit,
        )
        self.exporter = ClipboardReportExporter()
        self.toast = NoticeToast(self)

        self.inspect_tab = InspectTab(self.controller, self.camera)
        self.report_tab = ReportTab(self.store, self._copy_report)
        tabs = QTabWidget()
        tabs.addTab(self.inspect_tab, "Inspect")
        tabs.addTab(self.report_tab, "Report")
        self.setCentralWidget(tabs)
        self._setup_menu()

        self.inspect_tab.show_camera_state(self.controller.camera_state)
        self.inspect_tab.show_speech_state(self.controller.speech_state)
        self.inspect_tab.show_draft(self.controller.draft)

    def _setup_menu(self) -> None:
        menu = self.menuBar().addMenu("Settings")

        api_action = QAction("Set API Key", self)
        api_action.triggered.connect(self._set_api_key)
        menu.addAction(api_action)

        rooms_action = QAction("Edit Rooms", self)
        rooms_action.triggered.connect(self._set_rooms)
        menu.addAction(rooms_action)

        camera_action = QAction("Select Camera", self)
        camera_action.triggered.connect(self._set_camera_index)
        menu.addAction(camera_action)

    def _set_api_key(self) -> None:
        value, ok = QInputDialog.getText(self, "API Key", "DashScope API Key")
        if not ok:
            return
        self.config_store.set_api_key(value)
        # speech availability is decided at session start
        self.speech.set_api_key(value)
        self.controller.end_session()
        self.controller.start_session()
        QMessageBox.information(self, "Saved", "API Key saved and applied.")

    def _set_rooms(self) -> None:
        current = ", ".join(self.config_store.get_rooms())
        value, ok = QInputDialog.getText(self, "Rooms", "Comma-separated room names", text=current)
        if not ok or not value.strip():
            return
        self.config_store.set_rooms(value.split(","))
        QMessageBox.information(self, "Saved", "Rooms saved. Restart app to apply.")

    def _set_camera_index(self) -> None:
        value, ok = QInputDialog.getInt(
            self, "Camera", "Camera number (0 = first)", self.config_store.get_camera_index(), 0, 16
        )
        if not ok:
            return
        self.config_store.set_camera_index(value)
        QMessageBox.information(self, "Saved", "Camera saved. Restart app to apply.")

    # ------------------------------------------------------------------
    # Callbacks (may run on speech worker threads → emit signals)
    # ------------------------------------------------------------------

    def _on_camera_state(self, from_state: CameraState, to_state: CameraState) -> None:
        self.ui.camera_state_signal.emit(from_state.value, to_state.value)

    def _on_speech_state(self, from_state: SpeechState, to_state: SpeechState) -> None:
        self.ui.speech_state_signal.emit(from_state.value, to_state.value)

    # ------------------------------------------------------------------
    # UI thread handlers
    # ------------------------------------------------------------------

    def _on_camera_state_ui(self, from_state: str, to_state: str) -> None:
        self.inspect_tab.show_camera_state(CameraState(to_state))

    def _on_speech_state_ui(self, from_state: str, to_state: str) -> None:
        self.inspect_tab.show_speech_state(SpeechState(to_state))

    def _on_draft_ui(self, draft: DraftObservation) -> None:
        self.inspect_tab.show_draft(draft)

    def _on_record_ui(self, record: InspectionRecord) -> None:
        self.report_tab.refresh()

    def _on_notice_ui(self, code: str, message: str) -> None:
        if code == RECORD_ADDED:
            self.toast.show_info(message)
        else:
            self.toast.show_error(message)

    def _copy_report(self) -> None:
        result = self.exporter.export(build_report(self.store))
        if result.success:
            self.toast.show_info("Report copied to clipboard")
        else:
            self.toast.show_error(f"Copy failed: {result.reason}")


def main() -> int:
    logging.basicConfig(
        level=os.getenv("HOUSE_INSPECTOR_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    window = MainWindow(JsonConfigStore())
    window.show()
    with window.controller:
        return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
