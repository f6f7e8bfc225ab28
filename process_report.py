"""Process list and /proc/<pid>/cmdline report formatting."""

from dataclasses import dataclass
from typing import Callable, Dict, Any, List, Optional, Tuple

LABEL_WIDTH = 25
LABEL_FILL = "\u202f"  # narrow no-break space
RULE = "-" * 100
UID_PLACEHOLDER = "[long string omitted]"


@dataclass(frozen=True)
class CommandLineBreakdown:
    command: str
    arguments: Tuple[str, ...] = ()
    server_info: Tuple[str, ...] = ()
    download_info: Tuple[str, ...] = ()
    additional_settings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command": self.command,
            "arguments": list(self.arguments),
            "server_info": list(self.server_info),
            "download_info": list(self.download_info),
            "additional_settings": list(self.additional_settings),
        }


@dataclass(frozen=True)
class ProcessEntry:
    pid: str
    raw_command_line: str

    def breakdown(self) -> CommandLineBreakdown:
        return breakdown(self.raw_command_line)

    def to_dict(self) -> Dict[str, Any]:
        return {"pid": self.pid, "command_line": self.breakdown().to_dict()}


# -------------------- Command line breakdown --------------------
def split_command_line(command: str) -> List[str]:
    return command.replace("\x00", " ").strip().split()


def breakdown(command: str) -> CommandLineBreakdown:
    """Bucket the flag/value pairs of a null-delimited command line."""
    tokens = split_command_line(command)
    if not tokens:
        return CommandLineBreakdown("")
    arguments, server_info, download_info, additional = [], [], [], []
    i = 1
    while i < len(tokens):
        flag = tokens[i]
        value = tokens[i + 1] if i + 1 < len(tokens) else ""
        if flag.startswith("--si-"):
            server_info.append(f"{flag} {value}")
        elif flag.startswith("--dl-"):
            download_info.append(f"{flag} {value}")
        elif flag.startswith("--"):
            if flag == "--uid":
                additional.append(f"{flag} {UID_PLACEHOLDER}")
            else:
                additional.append(f"{flag} {value}")
        else:
            arguments.append(f"{flag} {value}")
        i += 2
    return CommandLineBreakdown(
        tokens[0], tuple(arguments), tuple(server_info), tuple(download_info), tuple(additional)
    )


def label(text: str) -> str:
    return text.ljust(LABEL_WIDTH, LABEL_FILL)


def bracket(items: Tuple[str, ...]) -> str:
    return f"[ {' '.join(items)} ]"


def render_breakdown(parts: CommandLineBreakdown) -> str:
    lines = [
        f"{label('Command:')}{parts.command}",
        f"{label('Arguments:')}{bracket(parts.arguments)}",
    ]
    if parts.server_info:
        lines.append(f"{label('Server Info:')}{bracket(parts.server_info)}")
    if parts.download_info:
        lines.append(f"{label('Download Info:')}{bracket(parts.download_info)}")
    if parts.additional_settings:
        lines.append("")
        lines.append("Additional Settings:")
        for setting in parts.additional_settings:
            lines.append(f"  {setting}")
    return "\n".join(lines)


def format_command_line(command: str) -> str:
    return render_breakdown(breakdown(command))


# -------------------- Process list --------------------
def extract_pid(ps_line: str) -> Optional[str]:
    parts = ps_line.split()
    return parts[1] if len(parts) > 1 else None


def parse_processes(raw_ps_text: str, command_line_lookup: Callable[[str], str]) -> List[ProcessEntry]:
    processes = []
    for line in raw_ps_text.splitlines():
        pid = extract_pid(line)
        if pid is None:
            continue
        processes.append(ProcessEntry(pid, command_line_lookup(pid)))
    return processes


def format_process_report(raw_ps_text: str, command_line_lookup: Callable[[str], str]) -> str:
    """
    Header with the matching `ps` lines, then one block per process:

        PID: 1234
        Command:                 /data/local/tmp/helper
        Arguments:               [ ... ]
    """
    ps_lines = [line for line in raw_ps_text.splitlines() if line.strip()]
    out = ["Process List:"]
    out.extend(ps_lines)
    out.append("")
    blocks = []
    for proc in parse_processes(raw_ps_text, command_line_lookup):
        blocks.append(f"PID: {proc.pid}\n{format_command_line(proc.raw_command_line)}\n")
    out.append(f"{RULE}\n".join(blocks))
    return "\n".join(out).rstrip()
