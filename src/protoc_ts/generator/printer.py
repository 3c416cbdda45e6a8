from __future__ import annotations

from typing import List

INDENT = "  "


class Printer:
    """Accumulates output lines at a fixed base indentation."""

    def __init__(self, indent_level: int = 0):
        self.indentation = INDENT * indent_level
        self.lines: List[str] = []

    def print_ln(self, line: str) -> None:
        self.lines.append(self.indentation + line + "\n")

    def print_indented_ln(self, line: str) -> None:
        self.lines.append(self.indentation + INDENT + line + "\n")

    def print_empty_ln(self) -> None:
        self.lines.append("\n")

    def print(self, text: str) -> None:
        """Append pre-rendered text (another printer's output) verbatim."""
        self.lines.append(text)

    def get_output(self) -> str:
        return "".join(self.lines)
