from io import BytesIO
from pathlib import Path
from typing import Any, Optional

from PyQt5.QtCore import QRect, Qt, pyqtSignal
from PyQt5.QtGui import QPainter, QPixmap
from PyQt5.QtWidgets import (
    QButtonGroup,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from VD_Libs.CompareLib.analysis_results import AnalysisResult
from VD_Libs.CompareLib.comparison_models import AnalysisMode
from VD_Libs.CompareLib.image_metadata import ImageMetadata, read_image_metadata
from VD_Libs.CompareLib.overlay_render import render_result
from VD_Libs.SessionLib.analysis_session import ComparisonSession
from VD_Libs.constants import (
    BUSY_LABEL_TEXT,
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    SUPPORTED_STANDARD_IMAGES,
)
from VD_Libs.errors import VisionaryDiffError

IMAGE_FILTER = "Images ({})".format(" ".join(f"*{ext}" for ext in sorted(SUPPORTED_STANDARD_IMAGES)))


def pil_to_pixmap(image: Any) -> QPixmap:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    pixmap = QPixmap()
    pixmap.loadFromData(buffer.getvalue(), "PNG")
    return pixmap


class WipeCanvas(QWidget):
    """Shows the rendered view, scaled to fit, and reports pointer moves."""

    pointer_moved = pyqtSignal(float, float, float)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setMouseTracking(True)
        self.setMinimumSize(600, 450)
        self._pixmap: Optional[QPixmap] = None

    def set_pixmap(self, pixmap: Optional[QPixmap]) -> None:
        self._pixmap = pixmap
        self.update()

    def image_rect(self) -> QRect:
        if self._pixmap is None or self._pixmap.isNull():
            return self.rect()
        scaled = self._pixmap.size().scaled(self.size(), Qt.AspectRatioMode.KeepAspectRatio)
        left = (self.width() - scaled.width()) // 2
        top = (self.height() - scaled.height()) // 2
        return QRect(left, top, scaled.width(), scaled.height())

    def mouseMoveEvent(self, event) -> None:
        rect = self.image_rect()
        self.pointer_moved.emit(float(event.x()), float(rect.left()), float(rect.width()))
        super().mouseMoveEvent(event)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.fillRect(self.rect(), Qt.GlobalColor.black)
        if self._pixmap is not None and not self._pixmap.isNull():
            painter.setRenderHint(QPainter.SmoothPixmapTransform)
            painter.drawPixmap(self.image_rect(), self._pixmap)
        painter.end()


class ComparisonWindow(QMainWindow):
    result_ready = pyqtSignal(object)
    analysis_failed = pyqtSignal(object)

    def __init__(self, session: Optional[ComparisonSession] = None) -> None:
        super().__init__()
        self.setWindowTitle("Visionary Diff")
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self.session = session if session is not None else ComparisonSession()
        self.session.on_result = self.result_ready.emit
        self.session.on_error = self.analysis_failed.emit

        self.original_path: Optional[Path] = None
        self.edited_path: Optional[Path] = None
        self.original_meta: Optional[ImageMetadata] = None
        self.edited_meta: Optional[ImageMetadata] = None
        self.result: Optional[AnalysisResult] = None

        self._build_ui()
        self._connect_signals()

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)

        root = QHBoxLayout(central)
        controls_col = QVBoxLayout()

        self.btn_load_original = QPushButton("Load Original")
        self.btn_load_edited = QPushButton("Load Edited")
        self.label_original_meta = QLabel("Original: not loaded")
        self.label_edited_meta = QLabel("Edited: not loaded")
        self.label_busy = QLabel(BUSY_LABEL_TEXT)
        self.label_busy.setVisible(False)

        self.mode_group = QButtonGroup(self)
        self.mode_buttons = {}
        for index, mode in enumerate(AnalysisMode):
            button = QRadioButton(mode.value.capitalize())
            button.setToolTip(self.session.registry.get_description(mode))
            self.mode_group.addButton(button, index)
            self.mode_buttons[mode] = button
        self.mode_buttons[self.session.mode].setChecked(True)

        self.canvas = WipeCanvas()

        controls_col.addWidget(self.btn_load_original)
        controls_col.addWidget(self.label_original_meta)
        controls_col.addWidget(self.btn_load_edited)
        controls_col.addWidget(self.label_edited_meta)
        controls_col.addWidget(QLabel("View"))
        for mode in AnalysisMode:
            controls_col.addWidget(self.mode_buttons[mode])
        controls_col.addWidget(self.label_busy)
        controls_col.addStretch(1)

        root.addLayout(controls_col, stretch=1)
        root.addWidget(self.canvas, stretch=4)

    def _connect_signals(self) -> None:
        self.btn_load_original.clicked.connect(self.load_original)
        self.btn_load_edited.clicked.connect(self.load_edited)
        self.mode_group.buttonClicked.connect(self.on_mode_selected)
        self.canvas.pointer_moved.connect(self.on_pointer_moved)
        self.result_ready.connect(self.on_result)
        self.analysis_failed.connect(self.on_analysis_failed)

    def load_original(self) -> None:
        path = self._pick_image("Select Original Image")
        if path is None:
            return
        self.original_path = path
        self.original_meta = self._read_metadata(path)
        self.label_original_meta.setText(
            f"Original: {self.original_meta.summary()}" if self.original_meta else "Original: not loaded"
        )
        self._load_pair()

    def load_edited(self) -> None:
        path = self._pick_image("Select Edited Image")
        if path is None:
            return
        self.edited_path = path
        self.edited_meta = self._read_metadata(path)
        self.label_edited_meta.setText(
            f"Edited: {self.edited_meta.summary()}" if self.edited_meta else "Edited: not loaded"
        )
        self._load_pair()

    def _pick_image(self, title: str) -> Optional[Path]:
        file_path, _ = QFileDialog.getOpenFileName(self, title, "", IMAGE_FILTER)
        return Path(file_path) if file_path else None

    def _read_metadata(self, path: Path) -> Optional[ImageMetadata]:
        try:
            return read_image_metadata(path)
        except (VisionaryDiffError, OSError) as e:
            QMessageBox.warning(self, "Invalid Image", str(e))
            return None

    def _load_pair(self) -> None:
        if self.original_meta is None or self.edited_meta is None:
            return
        self.session.load_pair(
            self.original_path,
            self.edited_path,
            self.original_meta.descriptor(),
            self.edited_meta.descriptor(),
        )
        self._update_busy()

    def on_mode_selected(self, button: QRadioButton) -> None:
        mode = list(AnalysisMode)[self.mode_group.id(button)]
        self.session.set_mode(mode)
        self._update_busy()

    def on_pointer_moved(self, pointer_x: float, container_left: float, container_width: float) -> None:
        if self.result is None or self.result.mode is not AnalysisMode.WIPE:
            return
        self.session.wipe.update_from_pointer(pointer_x, container_left, container_width)
        self.refresh_view()

    def on_result(self, result: AnalysisResult) -> None:
        if result.generation != self.session.generation:
            return
        self.result = result
        self.refresh_view()
        self._update_busy()

    def on_analysis_failed(self, error: Exception) -> None:
        self._update_busy()
        QMessageBox.warning(self, "Analysis Failed", str(error))

    def refresh_view(self) -> None:
        pair = self.session.pair
        if self.result is None or pair is None:
            self.canvas.set_pixmap(None)
            return
        image = render_result(pair.original, pair.edited, self.result, self.session.wipe)
        self.canvas.set_pixmap(pil_to_pixmap(image))

    def _update_busy(self) -> None:
        self.label_busy.setVisible(self.session.is_busy)

    def closeEvent(self, event) -> None:
        self.session.shutdown(wait=False)
        super().closeEvent(event)
