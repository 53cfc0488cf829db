"""
Source change detection for watch mode.

Polls the original input files (not the staged copies) and reports which ones
changed since the last poll. A file counts as changed when its modification
time or size differs, or when it appears or disappears.
"""

import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

Fingerprint = Optional[Tuple[int, int]]


def _fingerprint(path: Path) -> Fingerprint:
    try:
        stat = path.stat()
    except FileNotFoundError:
        return None
    return (stat.st_mtime_ns, stat.st_size)


class SourceWatcher:
    def __init__(self, paths: Iterable[Path]):
        self._snapshot: Dict[Path, Fingerprint] = {Path(p): _fingerprint(Path(p)) for p in paths}

    @property
    def paths(self) -> List[Path]:
        return list(self._snapshot)

    def poll(self) -> List[Path]:
        """Return watched paths that changed since the previous poll."""
        changed = []
        for path, previous in self._snapshot.items():
            current = _fingerprint(path)
            if current != previous:
                self._snapshot[path] = current
                changed.append(path)
        return changed

    def wait_for_change(self, stop_event: threading.Event, interval: float) -> List[Path]:
        """
        Block until a watched file changes or stop_event is set.

        Returns:
            Changed paths, or an empty list if stopped
        """
        while not stop_event.wait(interval):
            changed = self.poll()
            if changed:
                return changed
        return []
