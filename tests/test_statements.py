"""Statement rendering and the separator protocol."""

from dataclasses import dataclass

import pytest
from builders import assign, binary, block, decl, lit, method_ref, ref, render, var, widget_type

from jsview.errors import InvalidArgument, UnsupportedNodeKind
from jsview.model import (
    AddressOfExpression,
    AssignExpression,
    AttachEventStatement,
    BreakStatement,
    CatchClause,
    CommentStatement,
    ConditionCase,
    ConditionStatement,
    ContinueStatement,
    DebugBreakStatement,
    DefaultCase,
    DoStatement,
    EventReference,
    EventReferenceExpression,
    ExpressionStatement,
    FixedStatement,
    ForEachStatement,
    ForStatement,
    GotoStatement,
    LabeledStatement,
    LockStatement,
    MemoryCopyStatement,
    MemoryInitializeStatement,
    MethodDeclaration,
    MethodInvokeExpression,
    MethodReferenceExpression,
    MethodReturnStatement,
    RemoveEventStatement,
    Stmt,
    SwitchCase,
    SwitchStatement,
    ThisReferenceExpression,
    ThrowExceptionStatement,
    TryCatchFinallyStatement,
    TypeReference,
    TypeReferenceExpression,
    UnaryExpression,
    UsingStatement,
    WhileStatement,
)

a, b, c, i, j, x, y = (var(n) for n in "abcijxy")

# ============================================================
# Separators
# ============================================================


def test_return_in_body():
    assert render(block(MethodReturnStatement(lit(5)))) == "return 5;\n"


def test_single_statement():
    assert render(MethodReturnStatement(lit(5))) == "return 5;"
    assert render(MethodReturnStatement()) == "return;"


def test_sequence():
    assert render(block(assign(a, 1), assign(b, 2))) == "a = 1;\nb = 2;\n"


def test_empty_body():
    assert render(block()) == ""


def test_nested_blocks_are_flattened():
    assert render(block(assign(a, 1), block(assign(b, 2)))) == "a = 1;\nb = 2;\n"


def test_declaration_statements_are_skipped():
    assert render(block(ExpressionStatement(decl(a)), assign(a, 1))) == "a = 1;\n"


# ============================================================
# Conditions and loops
# ============================================================


def test_if():
    stmt = ConditionStatement(binary(ref(a), "greater_than", ref(b)), block(assign(x, 1)))
    assert render(stmt) == "if (a > b) {\n    x = 1;\n}"


def test_if_else():
    stmt = ConditionStatement(ref(a), block(assign(x, 1)), block(assign(x, 2)))
    assert render(stmt) == "if (a) {\n    x = 1;\n}\nelse {\n    x = 2;\n}"


def test_statement_after_brace_has_no_semicolon():
    stmt = block(ConditionStatement(ref(a), block(assign(x, 1))), assign(y, 2))
    assert render(stmt) == "if (a) {\n    x = 1;\n}\ny = 2;\n"


def test_nested_indentation():
    inner = ConditionStatement(ref(b), block(assign(x, 1)))
    stmt = ConditionStatement(ref(a), block(inner))
    assert render(stmt) == "if (a) {\n    if (b) {\n        x = 1;\n    }\n}"


def test_for():
    stmt = ForStatement(
        assign(i, 0),
        binary(ref(i), "less_than", lit(10)),
        ExpressionStatement(UnaryExpression("post_increment", ref(i))),
        block(assign(x, ref(i))),
    )
    assert render(stmt) == "for (i = 0; (i < 10); i++) {\n    x = i;\n}"


def test_for_header_joins_statements_with_commas():
    stmt = ForStatement(block(assign(i, 0), assign(j, 0)))
    assert render(stmt) == "for (i = 0, j = 0; ; ) {\n}"


def test_foreach():
    item, items = var("item"), var("items")
    stmt = ForEachStatement(item, ref(items), block(assign(x, ref(item))))
    assert render(stmt) == "for (item of items) {\n    x = item;\n}"


def test_while_forever():
    stmt = WhileStatement(None, block(BreakStatement()))
    assert render(stmt) == "while (true) {\n    break;\n}"


def test_do_while():
    stmt = DoStatement(
        binary(ref(a), "less_than", lit(3)),
        block(ExpressionStatement(UnaryExpression("post_increment", ref(a))), ContinueStatement()),
    )
    assert render(stmt) == "do {\n    a++;\n    continue;\n} while (a < 3);"


# ============================================================
# Labels
# ============================================================


def test_label_is_outdented_from_its_statement():
    body = block(assign(x, 1), LabeledStatement("retry", assign(b, 2)), assign(c, 3))
    stmt = ConditionStatement(ref(a), body)
    assert render(stmt) == "if (a) {\n    x = 1;\nretry:\n    b = 2;\n    c = 3;\n}"


def test_label_at_end_of_body():
    stmt = ConditionStatement(ref(a), block(LabeledStatement("done", assign(b, 2))))
    assert render(stmt) == "if (a) {\ndone:\n    b = 2;\n}"


def test_label_on_silent_statement_keeps_next_statement_in_place():
    d = var("d")
    body = block(LabeledStatement("L", ExpressionStatement(decl(d))), assign(c, 3), assign(a, 1))
    stmt = ConditionStatement(ref(a), body)
    assert render(stmt) == "if (a) {\nL:\n    c = 3;\n    a = 1;\n}"


def test_top_level_label_stays_in_first_column():
    stmt = block(assign(a, 1), LabeledStatement("retry", assign(b, 2)), assign(c, 3))
    assert render(stmt) == "a = 1;\nretry:\nb = 2;\nc = 3;\n"


def test_labels_in_method_body():
    method = MethodDeclaration(
        "Run",
        widget_type(),
        body=block(assign(a, 1), LabeledStatement("retry", assign(b, 2)), assign(c, 3)),
    )
    assert render(method) == (
        "Demo.Widget.prototype.Run = function() {\n    a = 1;\nretry:\n    b = 2;\n    c = 3;\n}"
    )


def test_bare_label_and_goto():
    stmt = block(LabeledStatement("top"), GotoStatement("top"))
    assert render(stmt) == "top:\ngoto top;\n"


def test_reserved_label_is_escaped():
    assert render(GotoStatement("for")) == "goto @for;"


# ============================================================
# Resources and exceptions
# ============================================================


def test_using_with_assignment():
    file_type = TypeReference("Demo", "File")
    open_file = method_ref("Open", file_type, file_type)
    r = var("r", file_type)
    acquire = MethodInvokeExpression(
        MethodReferenceExpression(open_file, TypeReferenceExpression(file_type))
    )
    stmt = UsingStatement(AssignExpression(decl(r), acquire), block(assign(x, 1)))
    assert render(stmt) == (
        "r = Demo.File.Open();\ntry {\n    x = 1;\n}\nfinally {\n    r.Dispose();\n}"
    )


def test_using_without_assignment():
    stmt = UsingStatement(ref(a), block(assign(x, 1)))
    assert render(stmt) == "try {\n    x = 1;\n}\nfinally {\n    a.Dispose();\n}"


def test_try_catch_finally():
    ex = var("ex", TypeReference("System", "Exception"))
    stmt = TryCatchFinallyStatement(
        block(assign(a, 1)),
        [CatchClause(block(assign(b, 2)), ex)],
        finally_=block(assign(c, 3)),
    )
    assert render(stmt) == (
        "try {\n    a = 1;\n}\ncatch (ex) {\n    b = 2;\n}\nfinally {\n    c = 3;\n}"
    )


def test_guarded_catch():
    guard = binary(ref(a), "greater_than", lit(0))
    stmt = TryCatchFinallyStatement(
        block(assign(a, 1)), [CatchClause(block(assign(b, 2)), None, guard)]
    )
    assert render(stmt) == (
        "try {\n    a = 1;\n}\ncatch (e) {\n    if (a > 0) {\n        b = 2;\n    }\n}"
    )


def test_fault_block_rethrows():
    stmt = TryCatchFinallyStatement(block(assign(a, 1)), fault=block(assign(b, 2)))
    assert render(stmt) == "try {\n    a = 1;\n}\ncatch (e) {\n    b = 2;\n    throw e;\n}"


def test_throw():
    assert render(ThrowExceptionStatement(ref(a))) == "throw a;"
    assert render(ThrowExceptionStatement()) == "throw Exception.Create();"


# ============================================================
# Switch
# ============================================================


def test_switch_splits_or_conditions():
    one = binary(ref(x), "identity_equality", lit(1))
    two = binary(ref(x), "identity_equality", lit(2))
    stmt = SwitchStatement(
        ref(x),
        [
            ConditionCase(block(assign(y, 0), BreakStatement()), binary(one, "boolean_or", two)),
            DefaultCase(block(assign(y, 1))),
        ],
    )
    assert render(stmt) == (
        "switch (x) {\ncase 1:\ncase 2:\n    y = 0;\n    break;\ndefault:\n    y = 1;\n}"
    )


def test_switch_keeps_conditions_on_other_operands():
    stmt = SwitchStatement(ref(x), [ConditionCase(None, binary(ref(y), "identity_equality", lit(1)))])
    assert render(stmt) == "switch (x) {\ncase (y === 1):\n}"


def test_switch_rejects_plain_case():
    with pytest.raises(UnsupportedNodeKind):
        render(SwitchStatement(ref(x), [SwitchCase(block())]))


# ============================================================
# Comments, events and low-level statements
# ============================================================


def test_comment_needs_no_terminator():
    assert render(block(CommentStatement("note"), assign(a, 1))) == "// note\na = 1;\n"


def test_multiline_comment():
    assert render(CommentStatement("one\ntwo")) == "/*\none\ntwo\n*/"


def test_event_attach_and_remove():
    clicked = EventReference("Clicked", TypeReference("Demo", "Handler"), widget_type())
    event = EventReferenceExpression(clicked, ThisReferenceExpression())
    handler = var("handler")
    assert render(AttachEventStatement(event, ref(handler))) == "this.Clicked += handler;"
    assert render(RemoveEventStatement(event, ref(handler))) == "this.Clicked -= handler;"


def test_memory_statements():
    assert render(MemoryCopyStatement(ref(a), ref(b), lit(4))) == "memcpy(a, b, 4);"
    assert render(MemoryInitializeStatement(ref(a), lit(0), lit(4))) == "meminit(a, 0, 4);"


def test_debugger():
    assert render(DebugBreakStatement()) == "debugger;"


def test_lock():
    assert render(LockStatement(ref(a), block(assign(b, 1)))) == "lock (a) {\n    b = 1;\n}"


def test_fixed():
    p = var("p")
    stmt = FixedStatement(p, AddressOfExpression(ref(a)), block(assign(b, 1)))
    assert render(stmt) == "fixed (p = [a]) {\n    b = 1;\n}"


# ============================================================
# Errors
# ============================================================


def test_unknown_statement_kind():
    @dataclass
    class Mystery(Stmt):
        pass

    with pytest.raises(UnsupportedNodeKind):
        render(block(Mystery()))


def test_missing_statement():
    with pytest.raises(InvalidArgument):
        render(block(None))


def test_writer_is_reusable_after_error(writer, recorder):
    with pytest.raises(InvalidArgument):
        writer.write_statement(block(None))
    writer.write_statement(MethodReturnStatement(lit(1)))
    assert str(recorder).endswith("return 1;")
