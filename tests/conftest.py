"""Pytest configuration for the jsview test suite."""

import pytest

from jsview import LanguageWriter, TextFormatter


class RecordingFormatter(TextFormatter):
    """TextFormatter that also keeps the declaration and reference tokens."""

    def __init__(self) -> None:
        super().__init__()
        self.declarations: list[tuple[str, object]] = []
        self.references: list[tuple[str, str, object]] = []

    def write_declaration(self, name: str, target: object | None = None) -> None:
        self.declarations.append((name, target))
        super().write_declaration(name, target)

    def write_reference(self, name: str, tooltip: str, target: object | None) -> None:
        self.references.append((name, tooltip, target))
        super().write_reference(name, tooltip, target)


@pytest.fixture
def recorder() -> RecordingFormatter:
    return RecordingFormatter()


@pytest.fixture
def writer(recorder: RecordingFormatter) -> LanguageWriter:
    return LanguageWriter(recorder)
