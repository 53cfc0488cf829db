"""
Job event logging (Tier 2 logging).

Appends one JSON object per line to the configured events file for every job
state transition, so a run can be audited or tailed independently of the
human-oriented loguru output. Disabled when no events file is configured.

For detailed within-context logging (Tier 1), use cvgen.utils.logger instead.

Usage:
    from cvgen.utils.event_logging import log_job_event, get_recent_events

    log_job_event(
        events_file,
        event_type="state_change",
        job_id="3f2a...",
        person="jane-doe",
        new_state="compiling",
    )
"""

import json
import threading
from pathlib import Path
from typing import List, Optional

from cvgen.utils.timestamp import now_exact

# Jobs run on worker threads; one writer at a time keeps lines intact
_WRITE_LOCK = threading.Lock()


def log_job_event(
    events_file: Optional[Path], event_type: str, job_id: str, **extra_fields
) -> None:
    """
    Append an event to the job event log.

    Args:
        events_file: JSON Lines file to append to (None disables logging)
        event_type: Type of event (e.g., "state_change", "render_failed")
        job_id: Identifier of the job emitting the event
        **extra_fields: Additional event-specific fields (must be JSON serializable)
    """
    if events_file is None:
        return

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "job_id": job_id,
        **extra_fields,
    }

    with _WRITE_LOCK:
        events_file.parent.mkdir(parents=True, exist_ok=True)
        with open(events_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(event, default=str) + "\n")


def get_recent_events(
    events_file: Path, n: int = 10, job_id: Optional[str] = None
) -> List[dict]:
    """
    Get the last n events from the event log, optionally filtered by job.

    Returns:
        List of event dicts (most recent last)
    """
    if not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if job_id:
        events = [e for e in events if e.get("job_id") == job_id]

    return events[-n:]
