"""
main.py

ErdCanvas - Entity-Relationship Diagram Viewer

PyQt6 application for inspecting ER diagrams with:
- Pan/zoom canvas with draggable entity boxes
- Force-directed auto-layout
- Bounded undo/redo of entity positions
- PNG export of the whole diagram

Usage:
    python main.py [diagram.json]

Dependencies:
    pip install PyQt6 platformdirs tomli-w
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QSize, QThread, QTimer
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QToolBar,
)

from canvas import DiagramView
from debug_trace import close_log, trace, trace_call, trace_exception
from export import ExportWorker
from layout import LayoutRunner
from models import DiagramFormatError, load_diagram
from session import DiagramSession
from settings import SettingsManager, get_settings
from styles import DEFAULT_STYLE, STYLES


class MainWindow(QMainWindow):
    """Main application window for ErdCanvas.

    Args:
        settings_manager: The SettingsManager instance for application settings.
    """

    def __init__(self, settings_manager: SettingsManager):
        super().__init__()
        self.settings_manager = settings_manager
        self.setWindowTitle("ErdCanvas - Entity-Relationship Diagram Viewer")

        settings = settings_manager.settings
        self.session = DiagramSession(settings)
        self.view = DiagramView(self.session, settings.theme)
        self.setCentralWidget(self.view)

        self.current_path: Optional[Path] = None

        # Layout runner (animated auto-layout)
        self._layout_runner: Optional[LayoutRunner] = None

        # Export worker thread
        self._export_thread: Optional[QThread] = None
        self._export_worker: Optional[ExportWorker] = None

        # Build UI (menus first since toolbar shares their actions)
        self._build_menus()
        self._build_toolbar()

        history = self.session.history
        history.stack.canUndoChanged.connect(self._on_can_undo_changed)
        history.stack.canRedoChanged.connect(self._on_can_redo_changed)
        self._update_history_actions()

        self.statusBar().showMessage("Open a diagram JSON file to begin.")

    def _build_menus(self):
        """Build the application menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        self.open_act = QAction("Open Diagram...", self)
        self.open_act.setShortcut(QKeySequence.StandardKey.Open)
        self.open_act.triggered.connect(self.open_diagram_dialog)
        file_menu.addAction(self.open_act)

        self.export_act = QAction("Export PNG", self)
        self.export_act.setShortcut("Ctrl+E")
        self.export_act.triggered.connect(self.export_png)
        file_menu.addAction(self.export_act)

        file_menu.addSeparator()

        exit_act = QAction("E&xit", self)
        exit_act.triggered.connect(self.close)
        file_menu.addAction(exit_act)

        # Edit menu
        edit_menu = menubar.addMenu("&Edit")

        self.undo_act = QAction("Undo", self)
        self.undo_act.setShortcut(QKeySequence.StandardKey.Undo)
        self.undo_act.triggered.connect(self.undo)
        edit_menu.addAction(self.undo_act)

        self.redo_act = QAction("Redo", self)
        self.redo_act.setShortcut(QKeySequence.StandardKey.Redo)
        self.redo_act.triggered.connect(self.redo)
        edit_menu.addAction(self.redo_act)

        edit_menu.addSeparator()

        self.layout_act = QAction("Auto Layout", self)
        self.layout_act.setShortcut("Ctrl+L")
        self.layout_act.triggered.connect(self.run_auto_layout)
        edit_menu.addAction(self.layout_act)

        # View menu
        view_menu = menubar.addMenu("&View")

        self.zoom_in_act = QAction("Zoom In", self)
        self.zoom_in_act.setShortcut(QKeySequence.StandardKey.ZoomIn)
        self.zoom_in_act.triggered.connect(lambda: self.view.zoom_in())
        view_menu.addAction(self.zoom_in_act)

        self.zoom_out_act = QAction("Zoom Out", self)
        self.zoom_out_act.setShortcut(QKeySequence.StandardKey.ZoomOut)
        self.zoom_out_act.triggered.connect(lambda: self.view.zoom_out())
        view_menu.addAction(self.zoom_out_act)

        view_menu.addSeparator()

        self.zoom_fit_act = QAction("Fit", self)
        self.zoom_fit_act.setShortcut("F")
        self.zoom_fit_act.triggered.connect(self._on_zoom_fit)
        view_menu.addAction(self.zoom_fit_act)

        self.zoom_reset_act = QAction("1:1", self)
        self.zoom_reset_act.setShortcut("1")
        self.zoom_reset_act.triggered.connect(lambda: self.view.zoom_reset())
        view_menu.addAction(self.zoom_reset_act)

    def _build_toolbar(self):
        """Build the application toolbar."""
        tb = QToolBar("Tools")
        tb.setIconSize(QSize(18, 18))
        tb.setMovable(False)
        self.addToolBar(tb)

        tb.addAction(self.open_act)
        tb.addAction(self.export_act)
        tb.addSeparator()
        tb.addAction(self.undo_act)
        tb.addAction(self.redo_act)
        tb.addSeparator()
        tb.addAction(self.layout_act)
        tb.addSeparator()
        tb.addAction(self.zoom_in_act)
        tb.addAction(self.zoom_fit_act)
        tb.addAction(self.zoom_out_act)
        tb.addAction(self.zoom_reset_act)

        self.undo_act.setToolTip("Undo the last move (Ctrl+Z)")
        self.redo_act.setToolTip("Redo the last undone move (Ctrl+Y)")
        self.layout_act.setToolTip("Arrange entities with a force-directed layout")
        self.export_act.setToolTip("Export the whole diagram as PNG")
        self.zoom_fit_act.setToolTip("Fit entire diagram in view (F)")

    def _on_can_undo_changed(self, can_undo: bool):
        self.undo_act.setEnabled(can_undo and not self._layout_busy())

    def _on_can_redo_changed(self, can_redo: bool):
        self.redo_act.setEnabled(can_redo and not self._layout_busy())

    def _update_history_actions(self):
        """Re-read the undo stack, e.g. when an animated layout starts or ends."""
        stack = self.session.history.stack
        self._on_can_undo_changed(stack.canUndo())
        self._on_can_redo_changed(stack.canRedo())

    def _layout_busy(self) -> bool:
        return self._layout_runner is not None and self._layout_runner.is_running

    # ----------------------------
    # Loading
    # ----------------------------

    def open_diagram_dialog(self):
        """Show a file dialog and load the chosen diagram."""
        start_dir = str(self.current_path.parent) if self.current_path else ""
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Diagram", start_dir, "Diagram JSON (*.json);;All files (*)"
        )
        if path:
            self.open_path(path)

    @trace_call("SESSION")
    def open_path(self, path) -> bool:
        """Load a diagram file into the session.

        Returns:
            True on success. Invalid files leave the current diagram untouched.
        """
        try:
            diagram = load_diagram(path)
        except (DiagramFormatError, OSError) as e:
            trace_exception(f"Failed to load {path}")
            QMessageBox.critical(self, "Open failed", f"Could not load diagram:\n{path}\n\n{e}")
            self.statusBar().showMessage("Open failed.")
            return False

        self._cancel_layout()
        self.session.load(diagram)
        self.current_path = Path(path)
        self.setWindowTitle(f"ErdCanvas - {self.current_path.name}")
        self.view.refresh()
        # Center once the view has its final geometry
        QTimer.singleShot(100, self._on_zoom_fit)
        self.statusBar().showMessage(
            f"Loaded {self.current_path.name}: {len(diagram)} entities, "
            f"{len(diagram.relationships)} relationships"
        )
        return True

    # ----------------------------
    # History
    # ----------------------------

    def undo(self):
        if self._layout_busy():
            return
        if self.session.undo():
            self.view.refresh()
            self.statusBar().showMessage("Undo.")

    def redo(self):
        if self._layout_busy():
            return
        if self.session.redo():
            self.view.refresh()
            self.statusBar().showMessage("Redo.")

    # ----------------------------
    # Auto layout
    # ----------------------------

    def run_auto_layout(self):
        """Run the force-directed layout, animated across ticks if configured."""
        if len(self.session.diagram) == 0 or self._layout_busy():
            return

        params = self.session.settings.layout
        if not params.animate:
            self.session.auto_layout(self.view.viewport().width(), self.view.viewport().height())
            self.view.refresh()
            self.statusBar().showMessage("Auto layout applied.")
            return

        # Gestures would be overwritten by the pending result
        self.session.controller.set_locked(True)
        self.layout_act.setEnabled(False)

        self._layout_runner = LayoutRunner(
            self.session.diagram.snapshot(), self.session.diagram.relationships,
            params, self.session.entity_sizes(), self,
        )
        self._layout_runner.progress.connect(self.on_layout_progress)
        self._layout_runner.finished.connect(self.on_layout_finished)
        self._layout_runner.start()
        self._update_history_actions()
        self.statusBar().showMessage("Running auto layout...")

    def on_layout_progress(self, done: int, total: int):
        self.statusBar().showMessage(f"Auto layout: {done}/{total}")

    def on_layout_finished(self, snapshot: dict):
        """Apply the finished layout as one history entry."""
        runner = self._layout_runner
        self._layout_runner = None
        if runner is not None:
            runner.deleteLater()
        self.session.controller.set_locked(False)
        self.layout_act.setEnabled(True)
        self.session.apply_layout(snapshot, self.view.viewport().width(), self.view.viewport().height())
        self._update_history_actions()
        self.view.refresh()
        self.statusBar().showMessage("Auto layout applied.")

    def _cancel_layout(self):
        runner = self._layout_runner
        if runner is None:
            return
        self._layout_runner = None
        runner.finished.disconnect(self.on_layout_finished)
        runner.progress.disconnect(self.on_layout_progress)
        runner.stop()
        runner.deleteLater()
        self.session.controller.set_locked(False)
        self.layout_act.setEnabled(True)
        self._update_history_actions()

    # ----------------------------
    # Viewport
    # ----------------------------

    def _on_zoom_fit(self):
        """Fit the diagram in view."""
        self.view.zoom_fit()
        self.statusBar().showMessage("Zoomed to fit.")

    # ----------------------------
    # Export
    # ----------------------------

    def export_png(self):
        """Rasterize the diagram to PNG in the export directory on a worker thread."""
        if self._export_thread is not None:
            return

        export_dir = self.settings_manager.get_export_dir()
        worker = self.session.export_worker(export_dir)
        if worker is None:
            self.statusBar().showMessage("Nothing to export.")
            return

        self.export_act.setEnabled(False)
        self.statusBar().showMessage(f"Exporting to {export_dir} ...")

        self._export_thread = QThread()
        self._export_worker = worker
        self._export_worker.moveToThread(self._export_thread)

        self._export_thread.started.connect(self._export_worker.run)
        self._export_worker.finished.connect(self.on_export_finished)
        self._export_worker.failed.connect(self.on_export_failed)

        self._export_worker.finished.connect(self._export_thread.quit)
        self._export_worker.failed.connect(self._export_thread.quit)

        def _reenable():
            self.export_act.setEnabled(True)
            self._export_thread = None
            self._export_worker = None

        self._export_thread.finished.connect(_reenable)
        self._export_thread.finished.connect(self._export_thread.deleteLater)

        self._export_thread.start()

    def on_export_finished(self, path: str):
        self.statusBar().showMessage(f"Exported: {path}")

    def on_export_failed(self, err: str):
        # Export is best effort; report without interrupting the user
        trace(f"Export failed: {err}", "EXPORT")
        self.statusBar().showMessage("Export failed.")

    def closeEvent(self, event):
        self._cancel_layout()
        if self._export_thread is not None:
            self._export_thread.quit()
            self._export_thread.wait()
        super().closeEvent(event)


def main():
    """Application entry point."""
    trace("Application starting", "MAIN")
    app = QApplication(sys.argv)

    # Load settings (use singleton to ensure single instance)
    trace("Loading settings", "MAIN")
    settings_manager = get_settings()

    # Ensure settings file has all sections
    settings_manager.ensure_file_complete()

    # Apply saved theme (or default if not set)
    initial_style = settings_manager.settings.theme
    if initial_style not in STYLES:
        initial_style = DEFAULT_STYLE
        settings_manager.settings.theme = initial_style

    app.setStyleSheet(STYLES[initial_style])

    # Save settings on application quit
    def save_on_quit():
        trace("Saving settings on quit", "MAIN")
        settings_manager.save()
        close_log()

    app.aboutToQuit.connect(save_on_quit)

    trace("Creating MainWindow", "MAIN")
    w = MainWindow(settings_manager)
    w.resize(1280, 860)
    trace("Showing MainWindow", "MAIN")
    w.show()

    args = [a for a in app.arguments()[1:] if not a.startswith("-")]
    if args and os.path.isfile(args[0]):
        w.open_path(args[0])

    trace("Entering event loop", "MAIN")
    sys.exit(app.exec())


if __name__ == "__main__":
    # Set up global exception handler to catch crashes
    def excepthook(exc_type, exc_value, exc_tb):
        import traceback
        trace("UNCAUGHT EXCEPTION:", "CRASH")
        trace("".join(traceback.format_exception(exc_type, exc_value, exc_tb)), "CRASH")
        close_log()
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = excepthook

    try:
        main()
    except Exception as e:
        trace(f"FATAL: {type(e).__name__}: {e}", "CRASH")
        trace_exception("Fatal exception")
        close_log()
        raise
