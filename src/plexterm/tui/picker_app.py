"""Textual fuzzy picker - a full-screen alternative to fzf.

Install with: pip install "plexterm[tui]"
"""

from typing import Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Input, Label, OptionList

from plexterm.picker import CANCELLED, Chosen, Selection, fuzzy_match


class PickerApp(App[int | None]):
    """Filterable option list. Exits with the chosen option index or None."""

    DEFAULT_CSS = """
    PickerApp Label.pk-header {
        text-style: bold;
        padding: 0 1;
    }
    PickerApp Input {
        margin: 0 1;
    }
    PickerApp OptionList {
        height: 1fr;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Back"),
        Binding("ctrl+c", "cancel", "Back", show=False),
    ]

    def __init__(self, options: Sequence[str], header: str = "", prompt: str = "> ", disabled: bool = False):
        super().__init__()
        self.options = list(options)
        self.header = header
        self.prompt = prompt
        self.read_only = disabled
        self._visible: list[int] = list(range(len(self.options)))

    def compose(self) -> ComposeResult:
        if self.header:
            yield Label(self.header, classes="pk-header")
        yield Input(placeholder=self.prompt.strip(), id="pk-filter", disabled=self.read_only)
        yield OptionList(*self.options, id="pk-options")

    def on_mount(self) -> None:
        if self.read_only:
            self.query_one("#pk-options", OptionList).focus()
        else:
            self.query_one("#pk-filter", Input).focus()

    def filter_options(self, query: str) -> list[int]:
        return [i for i, label in enumerate(self.options) if fuzzy_match(query, label)]

    def on_input_changed(self, event: Input.Changed) -> None:
        self._visible = self.filter_options(event.value)
        option_list = self.query_one("#pk-options", OptionList)
        option_list.clear_options()
        option_list.add_options([self.options[i] for i in self._visible])
        if self._visible:
            option_list.highlighted = 0

    def on_input_submitted(self, event: Input.Submitted) -> None:
        option_list = self.query_one("#pk-options", OptionList)
        if option_list.highlighted is not None:
            self._choose(option_list.highlighted)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self._choose(event.option_index)

    def _choose(self, visible_index: int) -> None:
        if self.read_only or not 0 <= visible_index < len(self._visible):
            self.exit(None)
            return
        self.exit(self._visible[visible_index])

    def action_cancel(self) -> None:
        self.exit(None)


class TextualPicker:
    """Picker implementation that runs a PickerApp per prompt."""

    def pick(
        self,
        options: Sequence[str],
        header: str = "",
        prompt: str = "> ",
        disabled: bool = False,
    ) -> Selection:
        index = PickerApp(options, header=header, prompt=prompt, disabled=disabled).run()
        if index is None or disabled:
            return CANCELLED
        return Chosen(index, options[index])
