"""Plain terminal output and prompts used between picker screens."""

import sys

PROGRESS_WIDTH = 50


def format_progress(current: int, total: int, label: str = "Retrieving items") -> str:
    """Render "Label: [#####     ] 50% (25/50)"."""
    if total <= 0:
        return f"{label}: {current}"
    current = min(current, total)
    percent = current * 100 // total
    bar = "#" * (percent // 2)
    return f"{label}: [{bar:<{PROGRESS_WIDTH}}] {percent}% ({current}/{total})"


def format_bytes(size: float) -> str:
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


class Console:
    """Terminal I/O for messages, confirmations and progress.

    Progress goes to stderr so it never mixes with anything a caller
    reads from stdout.
    """

    def __init__(self, out=None, err=None, input_fn=input):
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self._input = input_fn

    def info(self, message: str):
        print(message, file=self.out)

    def error(self, message: str):
        print(f"Error: {message}", file=self.out)

    def clear(self):
        if self.out.isatty():
            self.out.write("\033[H\033[2J")
            self.out.flush()

    def confirm(self, question: str, default: bool = False) -> bool:
        """Yes/no prompt with default."""
        suffix = "[Y/n]" if default else "[y/N]"
        raw = self._input(f"{question} {suffix} ").strip().lower()
        if not raw:
            return default
        return raw in ("y", "yes")

    def pause(self, message: str = "Press Enter to continue..."):
        self._input(message)

    def progress(self, current: int, total: int):
        """Pagination progress callback."""
        self.err.write("\r" + format_progress(current, total))
        if total and current >= total:
            self.err.write("\n")
        self.err.flush()

    def download_progress(self, done: int, total: int):
        """Byte progress callback for downloads."""
        if total:
            line = format_progress(done, total, label="Downloading")
            line = line.rsplit("(", 1)[0] + f"({format_bytes(done)}/{format_bytes(total)})"
        else:
            line = f"Downloading: {format_bytes(done)}"
        self.err.write("\r" + line)
        self.err.flush()
