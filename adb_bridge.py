"""
adb plumbing for FindActivity.

Every collaborator here returns raw text. Failures are reported as an
"Error executing command: ..." string instead of raising, so the report
builders in activity_report / process_report always get something to parse.
"""

import os
import shutil
import subprocess
from typing import Any, Dict, List, Optional, Tuple

import config
from activity_report import extract, render
from process_report import format_process_report, parse_processes


# -------------------- adb discovery --------------------
def find_adb_path() -> str:
    """Locate the adb binary. Falls back to plain 'adb' and lets the shell resolve it."""
    if config.ADB_PATH:
        return config.ADB_PATH
    found = shutil.which("adb")
    if found:
        return found
    candidates = []
    android_home = os.environ.get("ANDROID_HOME") or os.environ.get("ANDROID_SDK_ROOT")
    if android_home:
        candidates.append(os.path.join(android_home, "platform-tools", "adb"))
    candidates.extend(config.ADB_CANDIDATE_PATHS)
    for path in candidates:
        if os.path.exists(path):
            return path
    return "adb"


def _adb_args(args: List[str], serial: Optional[str]) -> List[str]:
    cmd = [find_adb_path()]
    if serial:
        cmd += ["-s", serial]
    return cmd + args


# -------------------- Command execution --------------------
def run_adb_command(cmd: List[str], timeout: Optional[int] = None) -> str:
    """Run a command and return its stdout, or an error description as text."""
    if timeout is None:
        timeout = config.ADB_TIMEOUT
    cmd_text = " ".join(cmd)
    try:
        result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                                timeout=timeout, encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return f"Error executing command: {cmd_text}\nadb not found. Install Android Platform Tools and add adb to your PATH."
    except subprocess.TimeoutExpired:
        return f"Error executing command: {cmd_text}\ntimed out after {timeout}s"
    except OSError as e:
        return f"Error executing command: {cmd_text}\n{e}"
    if result.returncode != 0:
        return f"Error executing command: {cmd_text}\n{result.stderr.strip()}"
    return result.stdout


def is_error_output(output: str) -> bool:
    return output.startswith("Error executing command:")


class AdbError(RuntimeError):
    """adb itself could not be run (missing binary, timeout, server failure)."""


# -------------------- Device Detection --------------------
def detect_device() -> Optional[str]:
    """Serial of the last attached device in `adb devices`, or None. Raises AdbError if adb fails."""
    output = run_adb_command([find_adb_path(), "devices"])
    if is_error_output(output):
        raise AdbError(output.split("\n", 1)[-1].strip() or output)
    devices = [line.split("\t")[0] for line in output.strip().splitlines() if "\tdevice" in line]
    if not devices:
        return None
    return devices[-1]


# -------------------- Raw collaborators --------------------
def dump_top_activities(serial: Optional[str] = None) -> str:
    return run_adb_command(_adb_args(["shell", "dumpsys", "activity", "top"], serial))


def list_processes(name: str, serial: Optional[str] = None) -> str:
    """`ps -A` output reduced to the lines mentioning `name`. Error text is passed through."""
    output = run_adb_command(_adb_args(["shell", "ps", "-A"], serial))
    if is_error_output(output):
        return output
    return "\n".join(line for line in output.splitlines() if name in line)


def read_cmdline(pid: str, serial: Optional[str] = None) -> str:
    output = run_adb_command(_adb_args(["shell", "cat", f"/proc/{pid}/cmdline"], serial))
    if is_error_output(output):
        return ""
    return output


# -------------------- Report composition --------------------
def header(serial: Optional[str]) -> str:
    return f"Device: {serial or 'No device found'}\nADB Path: {find_adb_path()}\n\n"


def collect_activity(serial: Optional[str] = None) -> Tuple[Dict[str, str], str, Dict[str, Any]]:
    """Returns (raw outputs, rendered text, structured data) for the activity tree."""
    raw = dump_top_activities(serial)
    if is_error_output(raw):
        return {"activity": raw}, header(serial) + raw, {"device": serial, "error": raw.strip()}
    report = extract(raw)
    text = header(serial) + render(report)
    return {"activity": raw}, text, {"device": serial, "report": report.to_dict()}


def collect_process(name: Optional[str] = None, serial: Optional[str] = None) -> Tuple[Dict[str, str], str, Dict[str, Any]]:
    """Same as collect_activity, for every process whose ps line mentions `name`."""
    name = name or config.DEFAULT_PROCESS_NAME
    raw_ps = list_processes(name, serial)
    if is_error_output(raw_ps):
        return {"ps": raw_ps}, header(serial) + raw_ps, {"device": serial, "name": name, "error": raw_ps.strip()}
    cmdlines = {}

    def lookup(pid):
        cmdlines[pid] = read_cmdline(pid, serial)
        return cmdlines[pid]

    text = header(serial) + format_process_report(raw_ps, lookup)
    processes = parse_processes(raw_ps, lambda pid: cmdlines.get(pid, ""))
    raw = {"ps": raw_ps}
    raw.update({f"cmdline_{pid}": value for pid, value in cmdlines.items()})
    data = {"device": serial, "name": name, "processes": [p.to_dict() for p in processes]}
    return raw, text, data
