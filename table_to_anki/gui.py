"""
PySide6 desktop GUI for table_to_anki.

Launch:
    python -m table_to_anki --gui
    python -m table_to_anki.gui
"""

import asyncio
import os
import sys
import traceback
from pathlib import Path

# Work around Wayland protocol errors on WSL2 (Qt6 defaults to Wayland
# via WSLg, which triggers buffer-size mismatches with the compositor).
if "microsoft" in os.uname().release.lower():
    os.environ.setdefault("QT_QPA_PLATFORM", "xcb")

try:
    from PySide6.QtCore import QThread, Signal, QObject
    from PySide6.QtGui import QTextCursor
    from PySide6.QtWidgets import (
        QApplication,
        QCheckBox,
        QFileDialog,
        QGroupBox,
        QHBoxLayout,
        QLabel,
        QLineEdit,
        QMainWindow,
        QPushButton,
        QTextEdit,
        QVBoxLayout,
        QWidget,
    )
except ImportError:
    print(
        "PySide6 is required for the GUI.\n"
        "Install it with:  pip install PySide6"
    )
    sys.exit(1)

from . import __version__
from . import config
from .parser import parse_document


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SYNC_STEP_NAMES = ["Tables", "Deck", "Sync"]

STEP_ICONS = {
    "pending": "\u25CB",   # ○
    "running": "\u25CF",   # ●
    "done":    "\u2713",   # ✓
    "error":   "\u2717",   # ✗
    "skip":    "\u2014",   # —
}

STEP_COLORS = {
    "pending": "",
    "running": "color: #2196F3;",
    "done":    "color: #4CAF50;",
    "error":   "color: #F44336;",
    "skip":    "color: gray;",
}

STATUS_MESSAGE_MS = 5000


# ---------------------------------------------------------------------------
# stdout capture → Qt signal
# ---------------------------------------------------------------------------

class StdoutRedirector(QObject):
    """Captures writes to sys.stdout and emits them as a Qt signal."""

    text_written = Signal(str)

    def __init__(self):
        super().__init__()

    def write(self, text: str):
        if text:
            self.text_written.emit(text)

    def flush(self):
        pass


# ---------------------------------------------------------------------------
# Sync worker thread
# ---------------------------------------------------------------------------

class SyncWorker(QThread):
    """Runs the table sync off the main thread."""

    step_update  = Signal(str, str, str)          # step_name, status, detail
    file_done    = Signal(str, int, int, int, bool)  # filename, new, updated, failed, ok
    finished_ok  = Signal()
    finished_err = Signal(str)

    def __init__(self, path: str, url: str, model: str, deck: str, dry_run: bool):
        super().__init__()
        self.path = path
        self.url = url
        self.model = model
        self.deck = deck
        self.dry_run = dry_run

    def run(self):
        from .ankiconnect import AnkiConnectClient
        from .sync import sync_document

        try:
            target = Path(self.path).resolve()
            if not target.is_file():
                self.finished_err.emit(f"'{self.path}' is not a valid file.")
                return

            client = AnkiConnectClient(self.url)
            if not client.ping():
                self.finished_err.emit(
                    f"Cannot reach AnkiConnect at {self.url}. "
                    "Is Anki running with AnkiConnect installed?"
                )
                return

            document = parse_document(target)
            results = asyncio.run(sync_document(
                document, client,
                deck=self.deck or None,
                model=self.model,
                dry_run=self.dry_run,
                on_step=self.step_update.emit,
            ))

            created = sum(r.created_count for r in results)
            updated = sum(r.updated_count for r in results)
            failed = sum(r.failed_count for r in results)
            self.file_done.emit(target.name, created, updated, failed, failed == 0)
            self.finished_ok.emit()
        except Exception as e:
            print(f"[error] {traceback.format_exc()}")
            self.finished_err.emit(f"{type(e).__name__}: {e}")


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle(f"Obsidian Table → Anki v{__version__}")
        self.resize(760, 560)

        self._worker: SyncWorker | None = None
        self._redirector = StdoutRedirector()
        self._redirector.text_written.connect(self._append_details)

        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)

        # -- Input file -----------------------------------------------------
        grp_input = QGroupBox("Markdown Note")
        h = QHBoxLayout(grp_input)
        self.input_edit = QLineEdit()
        self.input_edit.setPlaceholderText("Select a .md file…")
        btn_file = QPushButton("Browse File")
        btn_file.clicked.connect(self._browse_file)
        h.addWidget(self.input_edit, 1)
        h.addWidget(btn_file)
        main_layout.addWidget(grp_input)

        # -- AnkiConnect settings -------------------------------------------
        cfg = config.load()
        grp_anki = QGroupBox("Anki")
        v = QVBoxLayout(grp_anki)

        h_url = QHBoxLayout()
        self.url_edit = QLineEdit(cfg.get("ankiconnect_url", config.DEFAULT_ANKICONNECT_URL))
        h_url.addWidget(QLabel("AnkiConnect URL:"))
        h_url.addWidget(self.url_edit, 1)
        v.addLayout(h_url)

        h_model = QHBoxLayout()
        self.model_edit = QLineEdit(cfg.get("model_name", config.DEFAULT_MODEL_NAME))
        self.deck_edit = QLineEdit()
        self.deck_edit.setPlaceholderText("from the note's 'deck:' line")
        h_model.addWidget(QLabel("Note type:"))
        h_model.addWidget(self.model_edit, 1)
        h_model.addWidget(QLabel("Deck:"))
        h_model.addWidget(self.deck_edit, 1)
        v.addLayout(h_model)

        self.dry_run_check = QCheckBox("Dry run (look up only, change nothing)")
        v.addWidget(self.dry_run_check)
        main_layout.addWidget(grp_anki)

        # -- Steps ----------------------------------------------------------
        grp_steps = QGroupBox("Progress")
        h_steps = QHBoxLayout(grp_steps)
        self._step_labels: dict[str, QLabel] = {}
        for name in SYNC_STEP_NAMES:
            label = QLabel()
            self._step_labels[name] = label
            h_steps.addWidget(label)
        h_steps.addStretch()
        main_layout.addWidget(grp_steps)
        self._reset_steps()

        # -- Action ---------------------------------------------------------
        self.sync_btn = QPushButton("Export table to Anki")
        self.sync_btn.clicked.connect(self._start_sync)
        main_layout.addWidget(self.sync_btn)

        # -- Details --------------------------------------------------------
        self.details_area = QTextEdit()
        self.details_area.setReadOnly(True)
        main_layout.addWidget(self.details_area, 1)

    def _browse_file(self):
        path, _ = QFileDialog.getOpenFileName(self, "Select markdown note", "", "Markdown (*.md)")
        if path:
            self.input_edit.setText(path)

    def _start_sync(self):
        path = self.input_edit.text().strip()
        if not path:
            self.statusBar().showMessage("Select a markdown file first.", STATUS_MESSAGE_MS)
            return

        url = self.url_edit.text().strip() or config.DEFAULT_ANKICONNECT_URL
        model = self.model_edit.text().strip() or config.DEFAULT_MODEL_NAME
        cfg = config.load()
        cfg["ankiconnect_url"] = url
        cfg["model_name"] = model
        config.save(cfg)

        self.details_area.clear()
        self._reset_steps()
        self.sync_btn.setEnabled(False)
        sys.stdout = self._redirector

        self._worker = SyncWorker(
            path, url, model,
            deck=self.deck_edit.text().strip(),
            dry_run=self.dry_run_check.isChecked(),
        )
        self._worker.step_update.connect(self._set_step_display)
        self._worker.file_done.connect(self._on_file_done)
        self._worker.finished_ok.connect(self._on_done)
        self._worker.finished_err.connect(self._on_error)
        self._worker.start()

    def _reset_steps(self):
        for name in SYNC_STEP_NAMES:
            self._set_step_display(name, "pending", "")

    def _set_step_display(self, step_name: str, status: str, detail: str):
        label = self._step_labels.get(step_name)
        if label is None:
            return
        text = f"{STEP_ICONS.get(status, '')} {step_name}"
        if detail:
            text += f" ({detail})"
        label.setText(text)
        label.setStyleSheet(STEP_COLORS.get(status, ""))

    def _on_file_done(self, filename: str, new_count: int, updated_count: int,
                      failed_count: int, ok: bool):
        total = new_count + updated_count + failed_count
        msg = f"Sync {total} notes to Anki! ({new_count} new, {updated_count} updated"
        msg += f", {failed_count} failed)" if not ok else ")"
        self.statusBar().showMessage(f"{filename}: {msg}", STATUS_MESSAGE_MS)

    def _restore_stdout(self):
        sys.stdout = sys.__stdout__

    def _on_done(self):
        self._restore_stdout()
        self.sync_btn.setEnabled(True)

    def _on_error(self, msg: str):
        self._restore_stdout()
        self.sync_btn.setEnabled(True)
        self._append_details(f"\n[error] {msg}\n")
        self.statusBar().showMessage(msg, STATUS_MESSAGE_MS)

    def _append_details(self, text: str):
        self.details_area.moveCursor(QTextCursor.MoveOperation.End)
        self.details_area.insertPlainText(text)
        self.details_area.moveCursor(QTextCursor.MoveOperation.End)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
