"""Tests for the language descriptor and render_text dispatch."""

import pytest
from builders import INT32, block, lit, widget_type

from jsview import JavaScriptLanguage, LanguageWriter, RenderOptions, TextFormatter, render_text
from jsview.errors import UnsupportedNodeKind
from jsview.model import (
    EventDeclaration,
    MethodReturnStatement,
    ModuleReference,
    PropertyDeclaration,
    PropertyReference,
    TypeReference,
)


def test_descriptor():
    language = JavaScriptLanguage()
    assert language.name == "JavaScript"
    assert language.file_extension == ".js"
    assert language.translate is False


def test_writer_uses_configuration():
    formatter = TextFormatter()
    writer = JavaScriptLanguage().writer(formatter, {"NumberFormat": "Decimal"})
    assert isinstance(writer, LanguageWriter)
    assert writer.options.number_format == "decimal"
    writer.write_expression(lit(4096))
    assert str(formatter) == "4096"


def test_render_text_dispatch():
    assert render_text(lit(1)) == "1"
    assert render_text(block(MethodReturnStatement())) == "return;\n"
    assert render_text(INT32) == "Integer"
    assert render_text(widget_type()) == "Demo.Widget = function() { };"
    assert render_text(ModuleReference("kernel32")) == "// Module Reference kernel32\n"
    handler = TypeReference("Demo", "Handler")
    assert render_text(EventDeclaration("Changed", handler, widget_type())) == (
        "event Demo.Handler Changed;"
    )


def test_render_text_accepts_options_and_mappings():
    assert render_text(lit(4096), RenderOptions(number_format="decimal")) == "4096"
    assert render_text(lit(4096), {"NumberFormat": "Hexadecimal"}) == "0x1000"


def test_render_text_rejects_references():
    prop = PropertyReference("Size", INT32, widget_type())
    with pytest.raises(UnsupportedNodeKind):
        render_text(prop)


def test_render_text_accepts_declarations():
    prop = PropertyDeclaration("Size", INT32, widget_type())
    assert render_text(prop) == "property Size: Integer;"


def test_render_text_rejects_unknown_entities():
    with pytest.raises(UnsupportedNodeKind) as info:
        render_text(object())
    assert info.value.category == "entity"
