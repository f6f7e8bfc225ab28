"""
Task / Activity / Fragment extraction from `adb shell dumpsys activity top`.

The dump is read one line at a time by a small state machine:

  IDLE                 -> nothing open yet, everything but TASK is ignored
  IN_TASK              -> a task is open, fragment lines are not captured
  CAPTURING_FRAGMENTS  -> inside an 'Added Fragments:' section

`step()` is a pure transition: it takes the current state and one line and
returns the next state plus the task that was closed by this line, if any.
"""

import re
from dataclasses import dataclass, replace
from typing import Dict, Any, List, Optional, Tuple

IDLE = "idle"
IN_TASK = "in_task"
CAPTURING_FRAGMENTS = "capturing_fragments"

# Framework-internal fragments that show up in every dump
SKIPPED_FRAGMENTS = ("DispatchFragment", "InjectFragment", "ReportFragment")

FRAGMENT_RE = re.compile(r"#\d+: ([\w.]+)\{")


@dataclass(frozen=True)
class ActivityEntry:
    name: str
    fragments: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "fragments": list(self.fragments)}


@dataclass(frozen=True)
class TaskEntry:
    task_id: str
    activity: Optional[ActivityEntry] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "activity": self.activity.to_dict() if self.activity else None,
        }


@dataclass(frozen=True)
class ActivityReport:
    tasks: Tuple[TaskEntry, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"tasks": [t.to_dict() for t in self.tasks]}


@dataclass(frozen=True)
class ParserState:
    mode: str = IDLE
    task_id: Optional[str] = None
    activity: Optional[str] = None
    fragments: Tuple[str, ...] = ()
    # Set once 'View Hierarchy:' is seen; capture stays off until the next TASK
    hierarchy_seen: bool = False


# -------------------- Line helpers --------------------
def extract_task_id(line: str) -> Optional[str]:
    """Second token of a TASK line; `id=12` style tokens yield their value."""
    parts = line.split()
    if len(parts) < 2:
        return None
    token = parts[1]
    if "=" in token:
        token = token.split("=", 1)[1]
    return token or None


def extract_activity_name(line: str) -> str:
    after = line.split("ACTIVITY ", 1)[-1]
    return after.split(" ")[0]


def extract_fragment_name(line: str) -> Optional[str]:
    m = FRAGMENT_RE.search(line)
    return m.group(1) if m else None


def should_skip_fragment(name: str) -> bool:
    last_segment = name.rsplit(".", 1)[-1]
    return any(last_segment.endswith(s) for s in SKIPPED_FRAGMENTS)


# -------------------- State machine --------------------
def _close(state: ParserState) -> Optional[TaskEntry]:
    if state.mode == IDLE:
        return None
    activity = None
    if state.activity is not None:
        activity = ActivityEntry(state.activity, state.fragments)
    return TaskEntry(state.task_id, activity)


def step(state: ParserState, line: str) -> Tuple[ParserState, Optional[TaskEntry]]:
    line = line.strip()

    if line.startswith("TASK"):
        task_id = extract_task_id(line)
        if task_id is None:
            return state, None
        return ParserState(IN_TASK, task_id), _close(state)

    if state.mode == IDLE:
        return state, None

    if line.startswith("ACTIVITY"):
        # Fragments already captured stay with the task; only the gate closes
        return replace(state, mode=IN_TASK, activity=extract_activity_name(line)), None
    if line == "Added Fragments:":
        if state.hierarchy_seen:
            return state, None
        return replace(state, mode=CAPTURING_FRAGMENTS), None
    if state.mode == CAPTURING_FRAGMENTS and line.startswith("#"):
        name = extract_fragment_name(line)
        if name and not should_skip_fragment(name):
            return replace(state, fragments=state.fragments + (name,)), None
        return state, None
    if line.startswith("View Hierarchy:"):
        return replace(state, mode=IN_TASK, hierarchy_seen=True), None
    return state, None


def finish(state: ParserState) -> Optional[TaskEntry]:
    return _close(state)


def extract(raw_dump: str) -> ActivityReport:
    """Parse a dumpsys activity dump. Unrecognised lines are ignored."""
    tasks: List[TaskEntry] = []
    state = ParserState()
    for line in raw_dump.splitlines():
        state, closed = step(state, line)
        if closed is not None:
            tasks.append(closed)
    last = finish(state)
    if last is not None:
        tasks.append(last)
    return ActivityReport(tuple(tasks))


# -------------------- Rendering --------------------
def render_task(task: TaskEntry) -> List[str]:
    lines = [f"Task: {task.task_id}"]
    if task.activity is not None:
        lines.append(f"  Activity: {task.activity.name}")
        if task.activity.fragments:
            lines.append("    Fragments:")
            for fragment in task.activity.fragments:
                lines.append(f"      - {fragment}")
    lines.append("")
    return lines


def render(report: ActivityReport) -> str:
    out = []
    for task in report.tasks:
        out.extend(render_task(task))
    return "".join(line + "\n" for line in out)


def extract_and_render_activity_report(raw_dump_text: str) -> str:
    return render(extract(raw_dump_text))
