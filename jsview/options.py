"""Render options and the host configuration surface."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

NumberFormat = Literal["auto", "hexadecimal", "decimal"]
"""Integer literal base selection.

| Mode        | Rendering                                                  |
|-------------|------------------------------------------------------------|
| auto        | decimal below 16 and for multiples of 10 below 1000, else hex |
| hexadecimal | always `0x` + lowercase hex                                |
| decimal     | always base 10                                             |
"""

NUMBER_FORMATS: dict[str, NumberFormat] = {
    "auto": "auto",
    "hexadecimal": "hexadecimal",
    "decimal": "decimal",
}


@dataclass(frozen=True)
class RenderOptions:
    """Options fixed for the lifetime of one writer."""

    number_format: NumberFormat = "auto"
    show_custom_attributes: bool = False
    show_namespace_body: bool = False
    show_type_declaration_body: bool = False

    @classmethod
    def from_configuration(cls, configuration: Mapping[str, object]) -> RenderOptions:
        """Build options from the host's string-keyed configuration.

        Recognized keys: NumberFormat, ShowCustomAttributes, ShowNamespaceBody,
        ShowTypeDeclarationBody. Unknown keys are ignored, an unrecognized
        NumberFormat falls back to auto.
        """
        number_format = str(configuration.get("NumberFormat", "Auto")).lower()
        return cls(
            number_format=NUMBER_FORMATS.get(number_format, "auto"),
            show_custom_attributes=_flag(configuration, "ShowCustomAttributes"),
            show_namespace_body=_flag(configuration, "ShowNamespaceBody"),
            show_type_declaration_body=_flag(configuration, "ShowTypeDeclarationBody"),
        )


def _flag(configuration: Mapping[str, object], key: str) -> bool:
    value = configuration.get(key, False)
    if isinstance(value, bool):
        return value
    return str(value).lower() == "true"
