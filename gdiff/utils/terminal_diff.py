"""Terminal rendering of parsed diffs with intra-line highlights via rich."""

from typing import Optional

from rich.console import Console
from rich.text import Text

from gdiff.config import Theme
from gdiff.utils.diff_utils import FileDiff, Hunk, LineType, compute_highlighted_diff

_PREFIXES = {
    LineType.CONTEXT: ' ',
    LineType.ADDED: '+',
    LineType.REMOVED: '-',
}


class DiffRenderer:
    """Renders file diffs and hunks to a rich console.

    Changed lines use the theme's added/removed colors; the character ranges
    that differ from the paired line are additionally shown in reverse video.

    Usage::

        renderer = DiffRenderer(theme=config.theme)
        for file_diff in parse(text):
            renderer.print_file(file_diff)
    """

    def __init__(self, console: Optional[Console] = None, theme: Optional[Theme] = None,
                 show_indices: bool = False):
        self.console = console or Console()
        self.theme = theme or Theme()
        self.show_indices = show_indices  # prefix lines with their index in hunk.lines

    def _line_style(self, line_type: LineType) -> str:
        if line_type == LineType.ADDED:
            return self.theme.added
        if line_type == LineType.REMOVED:
            return self.theme.removed
        if line_type == LineType.HUNK_HEADER:
            return self.theme.hunk
        return self.theme.context

    def render_hunk(self, hunk: Hunk) -> Text:
        text = Text()
        for index, highlighted in enumerate(compute_highlighted_diff(hunk)):
            line = highlighted.line
            style = self._line_style(line.type)
            if self.show_indices:
                text.append(f"{index:>4} ", style=self.theme.line_num)

            if line.type == LineType.HUNK_HEADER:
                text.append(line.content + '\n', style=style)
                continue

            numbers = f"{line.old_line_number or '':>5} {line.new_line_number or '':>5} "
            text.append(numbers, style=self.theme.line_num)
            text.append(_PREFIXES[line.type], style=style)

            content = Text(line.content, style=style)
            for change in highlighted.changes:
                content.stylize(f"bold reverse {style}", change.start, change.end)
            text.append_text(content)
            text.append('\n')
        return text

    def print_hunk(self, hunk: Hunk) -> None:
        self.console.print(self.render_hunk(hunk), end='')

    def print_file(self, file_diff: FileDiff) -> None:
        if file_diff.old_path != file_diff.new_path:
            title = f"{file_diff.old_path} -> {file_diff.new_path}"
        else:
            title = file_diff.new_path
        self.console.rule(Text(title), style=self.theme.border)
        if file_diff.is_binary:
            self.console.print("Binary file differs", style=self.theme.line_num)
            return
        for hunk in file_diff.hunks:
            self.print_hunk(hunk)
