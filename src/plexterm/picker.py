"""Fuzzy picker capability.

A picker shows an ordered list of labels under a header and returns the
user's choice as a Selection: Chosen(index, value) or CANCELLED. The index
is what callers map back to their records, since labels need not be
unique.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Protocol, Sequence, Union

logger = logging.getLogger(__name__)

# fzf exit codes: 1 = no match, 130 = interrupted (Esc / Ctrl-C)
FZF_CANCEL_CODES = (1, 130)


class PickerError(Exception):
    """The picker could not be started."""


@dataclass(frozen=True)
class Chosen:
    index: int
    value: str


class _Cancelled:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "CANCELLED"

    def __bool__(self):
        return False


CANCELLED = _Cancelled()

Selection = Union[Chosen, _Cancelled]


class Picker(Protocol):
    def pick(
        self,
        options: Sequence[str],
        header: str = "",
        prompt: str = "> ",
        disabled: bool = False,
    ) -> Selection:
        """Show options and block until the user chooses or cancels.

        With disabled=True the list is display-only (used for "no results"
        placeholders); any dismissal returns CANCELLED.
        """
        ...


def fuzzy_match(query: str, text: str) -> bool:
    """True if the characters of query appear in order in text (case-insensitive)."""
    if not query:
        return True
    chars = iter(text.casefold())
    return all(c in chars for c in query.casefold() if not c.isspace())


class FzfPicker:
    """Picker backed by the fzf binary.

    Lines are sent as "<index>\\t<label>" with only the label visible, so
    the chosen index comes back unambiguously.
    """

    def __init__(self, fzf_path: str = "fzf"):
        self.fzf_path = fzf_path

    def build_args(self, header: str, prompt: str, disabled: bool) -> list[str]:
        args = [
            self.fzf_path, "--reverse",
            "--delimiter=\t", "--with-nth=2..",
            f"--prompt={prompt}",
        ]
        if header:
            args.append(f"--header={header}")
        if disabled:
            args.append("--disabled")
        return args

    def pick(
        self,
        options: Sequence[str],
        header: str = "",
        prompt: str = "> ",
        disabled: bool = False,
    ) -> Selection:
        lines = "\n".join(f"{i}\t{label}" for i, label in enumerate(options))
        try:
            # stdout captured, stderr left on the terminal where fzf draws
            result = subprocess.run(
                self.build_args(header, prompt, disabled),
                input=lines, stdout=subprocess.PIPE, text=True,
            )
        except FileNotFoundError:
            raise PickerError(f"fzf not found: {self.fzf_path}")

        if result.returncode in FZF_CANCEL_CODES:
            return CANCELLED
        if result.returncode != 0:
            logger.warning("fzf exited with status %d", result.returncode)
            return CANCELLED

        selected = result.stdout.strip("\n")
        index = selected.partition("\t")[0]
        try:
            i = int(index)
        except ValueError:
            return CANCELLED
        if disabled or not 0 <= i < len(options):
            return CANCELLED
        return Chosen(i, options[i])
