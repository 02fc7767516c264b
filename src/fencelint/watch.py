"""Watch mode for fencelint - re-lint documents as they change."""

import json
import logging
import signal
import sys
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .adapters.fs_storage import FsStorage, is_hidden
from .errors import FencelintError
from .report import Report, render_summary, render_text
from .runtime import Runtime

logger = logging.getLogger(__name__)


class DebounceHandler(FileSystemEventHandler):
    """File system event handler with debouncing."""

    def __init__(
        self,
        accept: Callable[[Path], bool],
        on_batch: Callable[[set[Path], set[Path]], None] | None,
        debounce_ms: int = 150,
    ):
        super().__init__()
        self.accept = accept
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms

        # Pending changes by path, shared with the observer thread
        self._lock = threading.Lock()
        self.changed: set[Path] = set()
        self.deleted: set[Path] = set()
        self.last_event_time = 0.0

    def _should_skip(self, path: Path) -> bool:
        """Check if file should be skipped."""
        name = path.name

        # Hidden, temp and swap files
        if name.startswith(".") or name.endswith("~") or name.endswith(".swp"):
            return True

        return not self.accept(path)

    def _record(self, path: Path, deleted: bool) -> None:
        if self._should_skip(path):
            return
        with self._lock:
            if deleted:
                self.changed.discard(path)
                self.deleted.add(path)
            else:
                self.deleted.discard(path)
                self.changed.add(path)
            self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(Path(str(event.src_path)), deleted=False)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(Path(str(event.src_path)), deleted=False)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(Path(str(event.src_path)), deleted=True)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._record(Path(str(event.src_path)), deleted=True)
        self._record(Path(str(event.dest_path)), deleted=False)

    def check_and_flush(self) -> None:
        """Flush if the debounce period has elapsed since the last event."""
        with self._lock:
            if not (self.changed or self.deleted):
                return
            elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        """Process accumulated events."""
        with self._lock:
            if not (self.changed or self.deleted):
                return
            changed, self.changed = self.changed, set()
            deleted, self.deleted = self.deleted, set()

        if self.on_batch:
            self.on_batch(changed, deleted)


def _emit(report: Report, json_output: bool) -> None:
    if json_output:
        for f in report.findings:
            print(json.dumps({"type": "finding", **f.to_dict()}), flush=True)
    else:
        for line in render_text(report):
            print(line, flush=True)


def lint_paths(rt: Runtime, paths: Iterable[Path], json_output: bool = False) -> Report:
    """Load, lint and print one batch."""
    report = rt.linter.lint(rt.corpus.load(p) for p in paths)
    _emit(report, json_output)
    return report


def make_accept(storage: FsStorage, paths: Iterable[Path]) -> Callable[[Path], bool]:
    """Build the filter deciding which changed files belong to the watched set.

    Explicit files are always accepted. Files under a watched directory pass
    the same hidden, extension and exclude checks as FsStorage.collect.
    """
    paths = list(paths)
    explicit = {p.resolve() for p in paths if p.is_file()}
    roots = [p.resolve() for p in paths if p.is_dir()]

    def accept(path: Path) -> bool:
        path = path.resolve()
        if path in explicit:
            return True
        root = next((r for r in roots if path.is_relative_to(r)), None)
        if root is None or is_hidden(path, root):
            return False
        if path.suffix.lower() not in storage.extensions:
            return False
        return not storage.excluded(path)

    return accept


def watch_paths(
    paths: list[Path],
    rt: Runtime,
    debounce_ms: int = 150,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Lint the given paths once, then watch them and re-lint changed documents.

    Args:
        paths: Files and directories to watch
        rt: Wired runtime
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress progress output
        json_output: Print one JSON event per line

    Returns:
        Exit code
    """
    storage = rt.corpus.storage
    initial = storage.collect(paths)  # raises InputError for a missing path
    explicit = {p.resolve() for p in paths if p.is_file()}
    roots = [p.resolve() for p in paths if p.is_dir()]
    accept = make_accept(storage, paths)

    report = lint_paths(rt, initial, json_output=json_output)
    if not quiet and not json_output:
        print(render_summary(report), file=sys.stderr, flush=True)

    running = True

    def handle_batch(changed: set[Path], deleted: set[Path]) -> None:
        start_time = time.time()
        existing = sorted(p for p in changed if p.exists())
        try:
            code = lint_paths(rt, existing, json_output=json_output).exit_code(rt.fail_on)
        except FencelintError as e:
            if json_output:
                print(json.dumps({"type": "error", "message": str(e)}), flush=True)
            else:
                print(f"Error: {e}", file=sys.stderr, flush=True)
            return

        duration_ms = int((time.time() - start_time) * 1000)
        if json_output:
            event = {
                "type": "batch",
                "linted": [str(p) for p in existing],
                "deleted": sorted(str(p) for p in deleted),
                "status": code,
                "duration_ms": duration_ms,
            }
            print(json.dumps(event), flush=True)
        elif not quiet:
            print(
                f"Linted {len(existing)} changed, {len(deleted)} removed ({duration_ms}ms)",
                file=sys.stderr,
                flush=True,
            )

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", file=sys.stderr, flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    handler = DebounceHandler(accept, handle_batch, debounce_ms)
    observer = Observer()
    for root in roots:
        observer.schedule(handler, str(root), recursive=True)
    for parent in sorted({p.parent for p in explicit} - set(roots)):
        observer.schedule(handler, str(parent), recursive=False)

    if not quiet and not json_output:
        print(f"Watching {len(paths)} path(s) (debounce: {debounce_ms}ms)", file=sys.stderr, flush=True)
        print("Press Ctrl+C to stop", file=sys.stderr, flush=True)

    observer.start()
    try:
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    logger.info("watch stopped")
    return 0
