"""Watch mode - re-derive fenced divs whenever a document changes on disk."""

import json
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .core.state import filtered_changed
from .editor import EditorSession
from .serialize import describe

logger = logging.getLogger(__name__)


class DebounceHandler(FileSystemEventHandler):
    """File system event handler with debouncing, for a single document."""

    def __init__(self, doc_path: Path, on_change: Callable[[], None], debounce_ms: int = 150):
        super().__init__()
        self.doc_path = doc_path.resolve()
        self.on_change = on_change
        self.debounce_ms = debounce_ms

        self.pending = False
        self.last_event_time = 0.0

    def _is_document(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode()
        return Path(path).resolve() == self.doc_path

    def _touch(self) -> None:
        self.pending = True
        self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_document(event.src_path):
            self._touch()

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._is_document(event.src_path):
            self._touch()

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save atomically move a temp file over the document
        if not event.is_directory and self._is_document(event.dest_path):
            self._touch()

    def check_and_flush(self) -> None:
        """Check if debounce period has elapsed and flush if so."""
        if not self.pending:
            return

        elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        if not self.pending:
            return
        self.pending = False
        self.on_change()


def reload_document(session: EditorSession, doc_path: Path) -> dict[str, Any]:
    """
    Push the current file contents into ``session`` as one transaction.

    Returns a summary event describing the result.
    """
    start_time = time.time()
    previous = session.filtered
    rebuilds = session.decoration_field.rebuilds

    tx = session.dispatch(text=doc_path.read_text(encoding="utf-8"))

    return {
        "type": "reload",
        "doc_changed": tx.doc_changed,
        "regions": len(session.parsed),
        "visible": len(session.filtered),
        "filtered_changed": filtered_changed(previous, session.filtered),
        "rebuilt": session.decoration_field.rebuilds != rebuilds,
        "duration_ms": int((time.time() - start_time) * 1000),
    }


def watch_document(
    doc_path: Path,
    session: EditorSession,
    debounce_ms: int = 150,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch one document and keep ``session`` in sync with it.

    Args:
        doc_path: Markdown file to watch
        session: Session holding the document's derived state
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    if not doc_path.exists():
        print(f"Error: Document not found: {doc_path}", file=sys.stderr)
        return 1

    running = True

    def handle_change() -> None:
        try:
            event = reload_document(session, doc_path)
        except OSError as e:
            logger.warning("reload of %s failed: %s", doc_path, e)
            if json_output:
                print(json.dumps({"type": "error", "message": str(e)}), flush=True)
            else:
                print(f"Error: {e}", file=sys.stderr, flush=True)
            return

        if json_output:
            print(json.dumps(event), flush=True)
        elif not quiet and event["doc_changed"]:
            print(
                f"Regions: {event['regions']} visible: {event['visible']} "
                f"({'rebuilt' if event['rebuilt'] else 'unchanged'}, {event['duration_ms']}ms)",
                flush=True,
            )
            if event["rebuilt"]:
                for div in session.filtered:
                    print(f"  {describe(div)}", flush=True)

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    handler = DebounceHandler(doc_path, handle_change, debounce_ms)
    observer = Observer()
    observer.schedule(handler, str(doc_path.resolve().parent), recursive=False)

    if not quiet and not json_output:
        print(f"Watching {doc_path} (debounce: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    observer.start()

    try:
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)

    return 0
