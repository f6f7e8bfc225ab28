# --- Configuration ---
import os

# Explicit adb binary; empty means auto-detect (see adb_bridge.find_adb_path)
ADB_PATH = os.environ.get("FINDACTIVITY_ADB", "")

# Fallback locations probed after PATH and the SDK environment variables
ADB_CANDIDATE_PATHS = [
    os.path.expanduser("~/Library/Android/sdk/platform-tools/adb"),
    os.path.expanduser("~/Android/Sdk/platform-tools/adb"),
    "/usr/local/bin/adb",
]

# Background helper process inspected by the process report
DEFAULT_PROCESS_NAME = os.environ.get("FINDACTIVITY_PROCESS", "libss-local.so")

ADB_TIMEOUT = int(os.environ.get("FINDACTIVITY_TIMEOUT", "10"))  # seconds

DASHBOARD_PORT = int(os.environ.get("FINDACTIVITY_PORT", "5000"))
DASHBOARD_FALLBACK_PORT = 5050
# --- End Configuration ---
