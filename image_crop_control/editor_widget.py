"""
Image editor widget and Qt image helpers.

This module contains everything that touches both Qt **and** image display:
``pil_to_qimage``, ``load_qimage``, the background ``ImageLoaderThread``,
and ``ImageEditorWidget``, which composites the image into the crop frame
and handles drag-to-pan.  It satisfies the ``editor.ImageEditor`` capability.
"""

from pathlib import Path

from PIL import Image
from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QRectF, QPointF, pyqtSignal, QThread
from PyQt6.QtGui import (
    QPainter, QPixmap, QColor, QImage,
    QMouseEvent, QPaintEvent, QWheelEvent,
)

from image_crop_control.aspect import display_size
from image_crop_control.config import DEFAULT_RAW_SCALE, EDITOR_BACKGROUND
from image_crop_control.image_io import open_image
from image_crop_control.models import Size


# Raw-scale change requested per wheel notch
WHEEL_STEP = 0.05

# Loaders detached from a removed widget, kept alive until their run() returns
_detached_loaders: set = set()


# =============================================================================
# Qt ↔ PIL helpers
# =============================================================================

def pil_to_qimage(pil_img: Image.Image) -> QImage:
    """Convert a PIL Image to QImage."""
    img_rgb = pil_img.convert("RGBA")
    data = img_rgb.tobytes("raw", "RGBA")
    qimg = QImage(data, img_rgb.width, img_rgb.height, QImage.Format.Format_RGBA8888)
    # QImage does not own *data*; copy before it goes out of scope
    return qimg.copy()


def load_qimage(path: Path) -> QImage:
    """Decode any supported image file.  QImage is safe to build off the GUI thread."""
    try:
        with open_image(path) as img:
            return pil_to_qimage(img)
    except OSError as e:
        raise ValueError(f"Could not decode {path.name}: {e}") from e


# =============================================================================
# Background image loader
# =============================================================================

class ImageLoaderThread(QThread):
    """Background thread for decoding images (especially large PSDs)."""
    loaded = pyqtSignal(QImage)
    error = pyqtSignal(str)

    def __init__(self, path: Path, parent=None):
        super().__init__(parent)
        self._path = path

    def run(self):
        try:
            qimg = load_qimage(self._path)
            self.loaded.emit(qimg)
        except Exception as e:
            self.error.emit(str(e))


# =============================================================================
# Image Editor Widget — image composited into a fixed crop frame
# =============================================================================

class ImageEditorWidget(QWidget):
    """Shows an image zoomed and panned inside a crop frame.

    The image is first scaled to just cover the frame, then multiplied by the
    raw scale.  The pan position is the image point (as fractions of its
    width and height) that sits at the frame centre.
    """

    load_succeeded = pyqtSignal(object, object)  # natural Size, resource Size
    load_failed = pyqtSignal(str)
    wheel_zoomed = pyqtSignal(float)  # requested raw scale

    def __init__(self, frame: Size, thumbnail_scale: float = 1.0, parent=None):
        super().__init__(parent)
        self.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Fixed)
        self.setCursor(Qt.CursorShape.OpenHandCursor)

        self._pixmap: QPixmap | None = None
        self._frame = frame
        self._thumbnail_scale = thumbnail_scale
        self._scale = DEFAULT_RAW_SCALE
        self._loader: ImageLoaderThread | None = None
        self._loading = False

        # Pan position: image point at the frame centre, as fractions
        self._center = QPointF(0.5, 0.5)

        # Interaction state
        self._dragging = False
        self._drag_start = QPointF()
        self._center_start = QPointF()

        self._apply_size()

    # --- ImageEditor capability ---

    def load(self, path: Path):
        """Decode *path* in the background; emits load_succeeded or load_failed."""
        self.cancel_load()
        self._pixmap = None
        self._loading = True
        self._loader = ImageLoaderThread(path, self)
        self._loader.loaded.connect(self._on_loaded)
        self._loader.error.connect(self._on_load_error)
        self._loader.start()
        self.update()

    def natural_dimensions(self) -> Size | None:
        if self._pixmap is None:
            return None
        return Size(self._pixmap.width(), self._pixmap.height())

    def set_frame(self, frame: Size):
        self._frame = frame
        self._center = self._clamp_center(self._center)
        self._apply_size()
        self.update()

    def set_zoom(self, value: float):
        self._scale = value
        self._center = self._clamp_center(self._center)
        self.update()

    def render_sync(self) -> QImage:
        """Composite the current crop into a frame-sized image."""
        w, h = self._frame.to_int()
        image = QImage(w, h, QImage.Format.Format_ARGB32)
        image.fill(QColor(*EDITOR_BACKGROUND))
        if self._pixmap is not None:
            painter = QPainter(image)
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
            painter.drawPixmap(self._image_rect(), self._pixmap, QRectF(self._pixmap.rect()))
            painter.end()
        return image

    # --- Extra controls ---

    def set_thumbnail_scale(self, thumbnail_scale: float):
        self._thumbnail_scale = thumbnail_scale
        self._apply_size()
        self.update()

    def cancel_load(self):
        """Detach and stop any running loader so late results are dropped."""
        if self._loader is None:
            return
        loader = self._loader
        self._loader = None
        self._loading = False
        try:
            loader.loaded.disconnect()
            loader.error.disconnect()
        except (TypeError, RuntimeError):
            pass  # Already disconnected or destroyed
        if loader.isRunning() and not loader.wait(500):
            # Still decoding: detach so deleting this widget does not destroy a running thread
            loader.setParent(None)
            _detached_loaders.add(loader)
            loader.finished.connect(lambda: _detached_loaders.discard(loader))

    def _finish_loader(self):
        """Join the loader; it has already emitted its result and is returning."""
        if self._loader is not None:
            self._loader.wait()
            self._loader = None

    def _on_loaded(self, qimg: QImage):
        self._loading = False
        self._finish_loader()
        # Pixmaps must be created on the GUI thread
        self._pixmap = QPixmap.fromImage(qimg)
        self._center = QPointF(0.5, 0.5)
        self.update()
        natural = Size(qimg.width(), qimg.height())
        resource = Size(self._pixmap.width(), self._pixmap.height())
        self.load_succeeded.emit(natural, resource)

    def _on_load_error(self, error: str):
        self._loading = False
        self._finish_loader()
        self.update()
        self.load_failed.emit(error)

    # --- Geometry (frame coordinates) ---

    def _apply_size(self):
        w, h = display_size(self._frame, self._thumbnail_scale).to_int()
        self.setFixedSize(w, h)

    def _drawn_size(self) -> tuple[float, float]:
        """Image size in frame coordinates at the current raw scale."""
        iw, ih = self._pixmap.width(), self._pixmap.height()
        cover = max(self._frame.width / iw, self._frame.height / ih)
        return iw * cover * self._scale, ih * cover * self._scale

    def _image_rect(self) -> QRectF:
        dw, dh = self._drawn_size()
        x = self._frame.width / 2 - self._center.x() * dw
        y = self._frame.height / 2 - self._center.y() * dh
        return QRectF(x, y, dw, dh)

    def _clamp_center(self, center: QPointF) -> QPointF:
        """Keep the frame covered; centre the axis if the image is too small."""
        if self._pixmap is None:
            return center
        dw, dh = self._drawn_size()
        half_w = self._frame.width / (2 * dw) if dw else 0.5
        half_h = self._frame.height / (2 * dh) if dh else 0.5
        cx = 0.5 if half_w >= 0.5 else max(half_w, min(center.x(), 1 - half_w))
        cy = 0.5 if half_h >= 0.5 else max(half_h, min(center.y(), 1 - half_h))
        return QPointF(cx, cy)

    # --- Painting ---

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor(*EDITOR_BACKGROUND))

        if not self._pixmap:
            painter.setPen(QColor(128, 128, 128))
            msg = "Loading image…" if self._loading else "No image loaded"
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, msg)
            painter.end()
            return

        painter.setClipRect(self.rect())
        painter.scale(self._thumbnail_scale, self._thumbnail_scale)
        painter.drawPixmap(self._image_rect(), self._pixmap, QRectF(self._pixmap.rect()))
        painter.end()

    # --- Mouse interaction ---

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton or not self._pixmap:
            return
        self._dragging = True
        self._drag_start = event.position()
        self._center_start = QPointF(self._center)
        self.setCursor(Qt.CursorShape.ClosedHandCursor)

    def mouseMoveEvent(self, event: QMouseEvent):
        if not self._dragging or not self._pixmap:
            return
        delta = event.position() - self._drag_start
        dw, dh = self._drawn_size()
        if not dw or not dh:
            return
        # Widget pixels -> frame pixels -> image fractions; dragging right reveals the left
        scale = self._thumbnail_scale
        center = QPointF(
            self._center_start.x() - delta.x() / scale / dw,
            self._center_start.y() - delta.y() / scale / dh,
        )
        self._center = self._clamp_center(center)
        self.update()

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton:
            self._dragging = False
            self.setCursor(Qt.CursorShape.OpenHandCursor)

    def wheelEvent(self, event: QWheelEvent):
        if not self._pixmap:
            return
        notches = event.angleDelta().y() / 120
        if notches:
            self.wheel_zoomed.emit(self._scale + notches * WHEEL_STEP)
        event.accept()
