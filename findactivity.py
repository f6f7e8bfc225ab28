#!/usr/bin/env python3
"""
FindActivity CLI
----------------
- Detects the connected Android device (adb devices)
- activity: shows the foreground Task -> Activity -> Fragment tree
  (adb shell dumpsys activity top)
- process: shows ps lines and a categorized command line for every
  process matching --name (adb shell ps -A, /proc/<pid>/cmdline)
- Optionally runs repeatedly (--interval)
- Saves raw dumps, text and json reports per run (--outdir)
"""

import argparse
import datetime
import json
import os
import sys
import time

from colorama import init, Fore, Style

import adb_bridge
import config

init(autoreset=True)


# -------------------- Styling --------------------
def colorize(text: str) -> str:
    """Apply console colors by line prefix."""
    out = []
    in_error = False
    for line in text.splitlines():
        stripped = line.strip()
        # Everything after the error marker is the adb failure reason
        in_error = in_error or stripped.startswith("Error executing command:")
        if in_error:
            out.append(f"{Fore.RED}{line}{Fore.RESET}")
        elif stripped.startswith(("Task:", "PID:")):
            out.append(f"{Style.BRIGHT}{line}{Style.RESET_ALL}")
        elif stripped.startswith("Activity:"):
            out.append(f"{Fore.CYAN}{line}{Fore.RESET}")
        elif stripped.startswith("- "):
            out.append(f"{Fore.GREEN}{line}{Fore.RESET}")
        elif stripped.startswith(("Device:", "ADB Path:")):
            out.append(f"{Fore.YELLOW}{line}{Fore.RESET}")
        else:
            out.append(line)
    return "\n".join(out)


# -------------------- Reporting --------------------
def save_run(outdir: str, raw: dict, text: str, data: dict) -> str:
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = os.path.join(outdir, f"run_{timestamp}")
    os.makedirs(run_dir, exist_ok=True)
    # Raw outputs for debugging parser issues
    for name, content in raw.items():
        with open(os.path.join(run_dir, f"{name}_raw.txt"), 'w', encoding='utf-8') as f:
            f.write(content)
    with open(os.path.join(run_dir, "summary.txt"), 'w', encoding='utf-8') as f:
        f.write(text)
    with open(os.path.join(run_dir, "report.json"), 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
    return run_dir


def run_once(args) -> int:
    try:
        serial = args.serial or adb_bridge.detect_device()
    except adb_bridge.AdbError as e:
        print(f"{Fore.RED}Error: {e}{Fore.RESET}")
        return 1
    if not serial:
        print(f"{Fore.RED}No Android device detected. Please connect and authorize your device.{Fore.RESET}")
        return 1
    if args.command == "process":
        raw, text, data = adb_bridge.collect_process(args.name, serial)
    else:
        raw, text, data = adb_bridge.collect_activity(serial)
    if args.json:
        print(json.dumps(data, indent=2))
    else:
        print(colorize(text))
    if args.outdir:
        run_dir = save_run(args.outdir, raw, text, data)
        print(f"{Fore.GREEN}Reports and raw files saved to: {run_dir}{Fore.RESET}")
    return 1 if "error" in data else 0


# -------------------- CLI Argument Parsing --------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show the foreground activity tree or helper process details of an Android device")
    parser.add_argument('--serial', type=str, help='Device serial (default: auto-detect)')
    parser.add_argument('--interval', type=int, default=0, help='Repeat every N seconds (0 = run once)')
    parser.add_argument('--outdir', type=str, default='', help='Directory to save raw dumps and reports')
    parser.add_argument('--json', action='store_true', help='Print the structured report as JSON')
    sub = parser.add_subparsers(dest='command')
    sub.add_parser('activity', help='Task / Activity / Fragment tree (default)')
    proc = sub.add_parser('process', help='Process list and command line breakdown')
    proc.add_argument('--name', type=str, default=config.DEFAULT_PROCESS_NAME, help='Process name to match in ps output')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.outdir and not os.path.isdir(args.outdir):
        os.makedirs(args.outdir)
    if args.interval > 0:
        print(f"{Fore.CYAN}Monitor mode: running every {args.interval} seconds. Press Ctrl+C to stop.{Fore.RESET}")
        try:
            while True:
                run_once(args)
                time.sleep(args.interval)
        except KeyboardInterrupt:
            print("\nExiting monitor mode.")
        return 0
    return run_once(args)


if __name__ == "__main__":
    sys.exit(main())
