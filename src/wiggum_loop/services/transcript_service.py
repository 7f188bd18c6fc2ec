"""Per-session JSONL transcripts and the run summary log."""

import dataclasses
import json
import logging
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, TextIO

from wiggum_loop.constants import ITERATION_PAD, STAMP_FORMAT, TRANSCRIPT_SUFFIX
from wiggum_loop.models.session import Role

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def now_stamp() -> str:
    """Local wall-clock stamp used in transcript file names."""
    return datetime.now().strftime(STAMP_FORMAT)


def transcript_path_for(log_dir: Path, role: Role, iteration: int, stamp: str) -> Path:
    return log_dir / f"{role.value}_{iteration:0{ITERATION_PAD}d}_{stamp}{TRANSCRIPT_SUFFIX}"


def serialize_message(message: Any) -> Any:
    """Convert an executor message into a JSON-friendly structure."""
    if dataclasses.is_dataclass(message) and not isinstance(message, type):
        return {"type": type(message).__name__, **dataclasses.asdict(message)}
    if hasattr(message, "model_dump"):
        return message.model_dump(mode="json")
    return message


def safe_json_dumps(obj: Any) -> str:
    """JSON-encode, stringifying anything the encoder does not support."""
    return json.dumps(obj, default=str, ensure_ascii=False)


class TranscriptWriter:
    """Append-only JSONL sink owned by a single session.

    Use as a context manager so the file is flushed and closed on every exit
    path, including faults raised while consuming the executor stream.
    """

    def __init__(self, path: Path, role: Role, iteration: int):
        self.path = Path(path)
        self.role = role
        self.iteration = iteration
        self._handle: Optional[TextIO] = None
        self.records_written = 0

    def __enter__(self) -> "TranscriptWriter":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("a", encoding="utf-8")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._handle is None

    def _write(self, record: dict) -> None:
        if self._handle is None:
            raise RuntimeError(f"Transcript {self.path} is not open")
        self._handle.write(safe_json_dumps(record) + "\n")
        self._handle.flush()
        self.records_written += 1

    def write_message(self, message: Any) -> None:
        """Persist one raw executor message with timestamp, role and iteration."""
        self._write(
            {
                "ts": now_iso(),
                "kind": self.role.value,
                "iteration": self.iteration,
                "msg": serialize_message(message),
            }
        )

    def write_error(self, error: BaseException) -> None:
        """Persist a stream fault as its own record."""
        self._write(
            {
                "ts": now_iso(),
                "kind": self.role.value,
                "iteration": self.iteration,
                "error": "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
            }
        )

    def close(self) -> None:
        if self._handle is not None:
            try:
                self._handle.flush()
            finally:
                self._handle.close()
                self._handle = None


class SummaryLog:
    """Single growing text file with one line per loop event."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def append(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(text if text.endswith("\n") else text + "\n")

    def loop_start(self) -> None:
        self.append(f"\n========== WIGGUM LOOP START {now_iso()} ==========")

    def iteration(self, iteration: int, max_loops: int) -> None:
        self.append(f"\n--- loop {iteration}/{max_loops} @ {now_iso()} ---")

    def builder_result(self, error: bool, done: bool, transcript: Path) -> None:
        self.append(f"[builder] error={_flag(error)} done={_flag(done)} log={transcript}")

    def verifier_result(self, error: bool, verified: bool, transcript: Path) -> None:
        self.append(f"[verifier] error={_flag(error)} verified={_flag(verified)} log={transcript}")

    def report(self, report: str) -> None:
        self.append(f"[verifier-report]\n{report}")

    def verified(self) -> None:
        self.append(f"VERIFIED COMPLETE @ {now_iso()}")

    def exhausted(self, max_loops: int) -> None:
        self.append(f"EXHAUSTED after {max_loops} loops @ {now_iso()}")


def _flag(value: bool) -> str:
    return "true" if value else "false"
