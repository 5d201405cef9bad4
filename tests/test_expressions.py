"""Expression rendering."""

from dataclasses import dataclass
from decimal import Decimal

import pytest
from builders import (
    INT32,
    STRING,
    binary,
    block,
    decl,
    field_ref,
    lit,
    method_ref,
    name_property,
    ref,
    render,
    var,
    widget_type,
)

from jsview.errors import InvalidArgument, UnsupportedLiteralType, UnsupportedNodeKind
from jsview.model import (
    AddressDereferenceExpression,
    AddressOfExpression,
    AddressOutExpression,
    AnonymousMethodExpression,
    ArgumentListExpression,
    ArgumentReferenceExpression,
    ArrayCreateExpression,
    ArrayIndexerExpression,
    AssignExpression,
    BaseReferenceExpression,
    BlockExpression,
    CanCastExpression,
    CastExpression,
    ConditionExpression,
    DelegateCreateExpression,
    DelegateInvokeExpression,
    EventReference,
    EventReferenceExpression,
    Expr,
    ExpressionStatement,
    FieldOfExpression,
    FieldReferenceExpression,
    FromClause,
    GenericDefaultExpression,
    GenericParameter,
    GroupOperation,
    JoinClause,
    LambdaExpression,
    LetClause,
    MemberInitializerExpression,
    MethodInvokeExpression,
    MethodOfExpression,
    MethodReferenceExpression,
    MethodReturnStatement,
    NullCoalescingExpression,
    ObjectCreateExpression,
    OrderClause,
    OrderExpression,
    ParameterDeclaration,
    PropertyIndexerExpression,
    PropertyReference,
    PropertyReferenceExpression,
    QueryBody,
    QueryContinuation,
    QueryExpression,
    SelectOperation,
    SizeOfExpression,
    SnippetExpression,
    StackAllocateExpression,
    ThisReferenceExpression,
    TryCastExpression,
    TypedReferenceCreateExpression,
    TypeOfExpression,
    TypeOfTypedReferenceExpression,
    TypeReference,
    TypeReferenceExpression,
    UnaryExpression,
    ValueOfTypedReferenceExpression,
    WhereClause,
)

a, b, c, x = var("a"), var("b"), var("c"), var("x")

# ============================================================
# Operators
# ============================================================


def test_binary_is_parenthesized():
    assert render(binary(ref(a), "add", lit(1))) == "(a + 1)"


def test_nested_binary():
    expr = binary(binary(ref(a), "add", ref(b)), "multiply", ref(c))
    assert render(expr) == "((a + b) * c)"


@pytest.mark.parametrize(
    "op,symbol",
    [
        ("identity_equality", "==="),
        ("value_equality", "==="),
        ("identity_inequality", "!=="),
        ("value_inequality", "!=="),
        ("boolean_and", "&&"),
        ("boolean_or", "||"),
        ("shift_left", "<<"),
        ("bitwise_exclusive_or", "^"),
        ("greater_than_or_equal", ">="),
        ("modulus", "%"),
    ],
)
def test_binary_operator_table(op, symbol):
    assert render(binary(ref(a), op, ref(b))) == f"(a {symbol} b)"


def test_unknown_binary_operator():
    with pytest.raises(UnsupportedNodeKind):
        render(binary(ref(a), "power", ref(b)))


@pytest.mark.parametrize(
    "op,expected",
    [
        ("negate", "-a"),
        ("boolean_not", "!a"),
        ("bitwise_not", "~a"),
        ("pre_increment", "++a"),
        ("pre_decrement", "--a"),
        ("post_increment", "a++"),
        ("post_decrement", "a--"),
    ],
)
def test_unary(op, expected):
    assert render(UnaryExpression(op, ref(a))) == expected


def test_unknown_unary_operator():
    with pytest.raises(UnsupportedNodeKind):
        render(UnaryExpression("address", ref(a)))


# ============================================================
# Assignment
# ============================================================


def test_increment_rewrite():
    expr = AssignExpression(ref(x), binary(ref(x), "add", lit(1)))
    assert render(expr) == "inc(x, 1)"


def test_decrement_rewrite():
    expr = AssignExpression(ref(x), binary(ref(x), "subtract", lit(2)))
    assert render(expr) == "dec(x, 2)"


def test_plain_assignment_when_left_differs():
    assert render(AssignExpression(ref(x), binary(ref(a), "add", lit(1)))) == "x = (a + 1)"
    assert render(AssignExpression(ref(x), binary(lit(1), "add", ref(x)))) == "x = (1 + x)"


def test_same_name_different_variable_is_not_rewritten():
    other = var("x")
    expr = AssignExpression(ref(x), binary(ref(other), "add", lit(1)))
    assert render(expr) == "x = (x + 1)"


def test_property_read_and_write():
    prop = name_property(widget_type())
    target = PropertyReferenceExpression(prop, ThisReferenceExpression())
    assert render(target) == "this.get_Name()"
    assert render(AssignExpression(target, lit("x"))) == 'this.set_Name("x")'


def test_property_without_setter():
    prop = name_property(widget_type(), setter=False)
    target = PropertyReferenceExpression(prop, ThisReferenceExpression())
    with pytest.raises(InvalidArgument):
        render(AssignExpression(target, lit("x")))


def test_indexer_read_and_write():
    widget = widget_type()
    item = PropertyReference(
        "Item",
        INT32,
        widget,
        [ParameterDeclaration("i", INT32)],
        get_method=method_ref("get_Item", widget, INT32, "i"),
        set_method=method_ref("set_Item", widget, None, "i", "value"),
    )
    items = var("items")
    indexer = PropertyIndexerExpression(PropertyReferenceExpression(item, ref(items)), [lit(0)])
    assert render(indexer) == "items.get_Item(0)"
    assert render(AssignExpression(indexer, lit(5))) == "items.set_Item(0, 5)"


# ============================================================
# Literals
# ============================================================


@pytest.mark.parametrize(
    "literal,expected",
    [
        (lit(None), "null"),
        (lit(True), "true"),
        (lit(False), "false"),
        (lit("hi"), '"hi"'),
        (lit("a", "char"), '"a"'),
        (lit(65, "char"), '"A"'),
        (lit(4096), "0x1000"),
        (lit(255, "byte"), "0xff"),
        (lit(0.5), "0.5"),
        (lit(2.0, "single"), "2"),
        (lit(Decimal("2.50")), "2.50"),
        (lit(1 << 40), "0x10000000000"),
    ],
)
def test_literals(literal, expected):
    assert render(literal) == expected


def test_literal_number_format_option():
    assert render(lit(4096), number_format="decimal") == "4096"
    assert render(lit(5), number_format="hexadecimal") == "0x5"


def test_unsupported_literals():
    with pytest.raises(UnsupportedLiteralType):
        render(lit(object()))
    with pytest.raises(UnsupportedLiteralType):
        render(lit("x", "int32"))


# ============================================================
# Member access
# ============================================================


def test_field_reference():
    widget = widget_type()
    count = field_ref("count", widget)
    assert render(FieldReferenceExpression(count, ThisReferenceExpression())) == "this.count"
    assert render(FieldReferenceExpression(count, TypeReferenceExpression(widget))) == (
        "Demo.Widget.count"
    )


def test_method_invoke():
    widget = widget_type()
    add = method_ref("Add", widget, INT32, "a", "b")
    call = MethodInvokeExpression(
        MethodReferenceExpression(add, ThisReferenceExpression()), [lit(1), lit(2)]
    )
    assert render(call) == "this.Add(1, 2)"


def test_binary_member_target_gets_extra_parentheses():
    to_string = method_ref("ToString", widget_type(), STRING)
    call = MethodInvokeExpression(
        MethodReferenceExpression(to_string, binary(ref(a), "add", ref(b)))
    )
    assert render(call) == "((a + b)).ToString()"


def test_unary_member_target_is_parenthesized():
    count = field_ref("count", widget_type())
    expr = FieldReferenceExpression(count, UnaryExpression("negate", ref(a)))
    assert render(expr) == "(-a).count"


def test_non_reference_callee():
    assert render(MethodInvokeExpression(ref(a))) == "(a)()"


def test_event_reference_and_delegate_invoke():
    widget = widget_type()
    clicked = EventReference("Clicked", TypeReference("Demo", "Handler"), widget)
    assert render(EventReferenceExpression(clicked, ThisReferenceExpression())) == "this.Clicked"
    handler = var("handler")
    assert render(DelegateInvokeExpression(ref(handler), [lit(1)])) == "handler(1)"


def test_variable_reference_token(writer, recorder):
    total = var("total")
    writer.write_expression(ref(total))
    assert recorder.references == [("total", "var total; // Local Variable", total)]


def test_declaration_expression_renders_as_use(writer, recorder):
    total = var("total")
    writer.write_expression(decl(total))
    assert str(recorder) == "total"
    assert recorder.references[0][2] is total


def test_argument_reference_token(writer, recorder):
    param = ParameterDeclaration("count", INT32)
    writer.write_expression(ArgumentReferenceExpression(param))
    assert recorder.references == [("count", "count; // Parameter", param)]


def test_reserved_variable_name_is_escaped():
    assert render(ref(var("for"))) == "&for"


# ============================================================
# Creation
# ============================================================


def test_object_create(writer, recorder):
    widget = widget_type()
    ctor = method_ref(".ctor", widget, None, "size")
    writer.write_expression(ObjectCreateExpression(widget, ctor, [lit(1)]))
    assert str(recorder) == "(new Demo.Widget()).ctor(1)"
    assert recorder.references[0] == ("Demo.Widget", "Demo.Widget.Create(size);", ctor)


def test_object_create_with_initializer():
    widget = widget_type()
    init = BlockExpression([MemberInitializerExpression(field_ref("count", widget), lit(2))])
    expr = ObjectCreateExpression(widget, None, [], init)
    assert render(expr) == "(new Demo.Widget()).ctor() [count=2]"


def test_object_create_empty_initializer_omitted():
    expr = ObjectCreateExpression(widget_type(), None, [], BlockExpression())
    assert render(expr) == "(new Demo.Widget()).ctor()"


def test_array_create():
    assert render(ArrayCreateExpression(INT32, [lit(0)])) == "[]"
    assert render(ArrayCreateExpression(INT32, [lit(3)])) == "Array(3)"
    assert render(ArrayCreateExpression(INT32, [lit(2), lit(3)])) == "Array(2, 3)"
    init = BlockExpression([lit(1), lit(2), lit(3)])
    assert render(ArrayCreateExpression(INT32, [lit(3)], init)) == "[1, 2, 3]"


def test_long_block_wraps_every_sixteen_items():
    items = BlockExpression([lit(i) for i in range(17)])
    expected = "[\n    0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15,\n    0x10\n]"
    assert render(items) == expected


def test_stackalloc():
    assert render(StackAllocateExpression(INT32, lit(8))) == "stackalloc Integer[8]"


# ============================================================
# Casts, conditionals
# ============================================================


def test_casts():
    widget = TypeReference("Demo", "Widget")
    assert render(TryCastExpression(ref(a), widget)) == "(a as Demo.Widget)"
    assert render(CanCastExpression(ref(a), widget)) == "(a is Demo.Widget)"
    assert render(CastExpression(ref(a), widget)) == "a"


def test_condition():
    assert render(ConditionExpression(ref(c), ref(a), ref(b))) == "(c ? a : b)"


def test_null_coalescing():
    assert render(NullCoalescingExpression(ref(a), ref(b))) == "((a !== null) ? a : b)"


# ============================================================
# Functions
# ============================================================


def test_delegate_create():
    handler = TypeReference("Demo", "Handler")
    on_click = method_ref("OnClick", widget_type())
    expr = DelegateCreateExpression(handler, on_click, ThisReferenceExpression())
    assert render(expr) == "Demo.Handler.Create(this, OnClick)"


def test_lambda():
    expr = LambdaExpression([x], binary(ref(x), "multiply", lit(2)))
    assert render(expr) == "function(x) { return (x * 2); }"


def test_anonymous_method_hoists_its_own_variables():
    t = var("t")
    body = block(
        ExpressionStatement(AssignExpression(decl(t), lit(1))),
        MethodReturnStatement(ref(t)),
    )
    expr = AnonymousMethodExpression([ParameterDeclaration("s", STRING)], body)
    assert render(expr) == "function(s) {\n    var t;\n    t = 1;\n    return t;\n}"


# ============================================================
# Reflection and low-level forms
# ============================================================


def test_type_operators():
    assert render(TypeOfExpression(INT32)) == "typeof(Integer)"
    assert render(SizeOfExpression(INT32)) == "sizeof(Integer)"
    assert render(GenericDefaultExpression(GenericParameter("T"))) == "default(T)"


def test_member_of():
    widget = widget_type()
    assert render(FieldOfExpression(field_ref("count", widget))) == "fieldof(Demo.Widget.count)"
    run = method_ref("Run", widget)
    assert render(MethodOfExpression(run, widget)) == "methodof(Demo.Widget.Run, Demo.Widget)"


def test_address_forms():
    assert render(AddressOutExpression(ref(a))) == "[a]"
    assert render(AddressOfExpression(ref(a))) == "[a]"
    assert render(AddressDereferenceExpression(AddressOfExpression(ref(a)))) == "a"
    assert render(AddressDereferenceExpression(ref(a))) == "a"


def test_typed_references():
    assert render(TypedReferenceCreateExpression(ref(a))) == "__makeref(a)"
    assert render(TypeOfTypedReferenceExpression(ref(a))) == "__reftype(a)"
    assert render(ValueOfTypedReferenceExpression(ref(a), INT32)) == "__refvalue(a, Integer)"


def test_simple_forms():
    assert render(ThisReferenceExpression()) == "this"
    assert render(BaseReferenceExpression()) == "this"
    assert render(ArgumentListExpression()) == "arguments"
    assert render(SnippetExpression("/* raw */")) == "/* raw */"
    assert render(ArrayIndexerExpression(ref(a), [lit(1), lit(2)])) == "a[1][2]"


# ============================================================
# Queries
# ============================================================


def test_query_where_select():
    widget = widget_type()
    customer, customers = var("c"), var("customers")
    age = field_ref("age", widget)
    name = field_ref("name", widget, STRING)
    query = QueryExpression(
        FromClause(customer, ref(customers)),
        QueryBody(
            SelectOperation(FieldReferenceExpression(name, ref(customer))),
            [WhereClause(binary(FieldReferenceExpression(age, ref(customer)), "greater_than", lit(20)))],
        ),
    )
    assert render(query) == "(from c in customers\n    where (c.age > 20)\n    select c.name)"


def test_query_clauses_and_continuation():
    item, items, other, others, key, group = (
        var("i"), var("items"), var("o"), var("others"), var("k"), var("g")
    )
    query = QueryExpression(
        FromClause(item, ref(items)),
        QueryBody(
            GroupOperation(ref(item), ref(key)),
            [
                LetClause(key, ref(item)),
                JoinClause(other, ref(others), ref(item), ref(other)),
                OrderClause([OrderExpression(ref(key)), OrderExpression(ref(item), "descending")]),
            ],
            QueryContinuation(group, QueryBody(SelectOperation(ref(group)))),
        ),
    )
    assert render(query) == (
        "(from i in items\n"
        "    let k = i\n"
        "    join o in others on i equals o\n"
        "    orderby k, i descending\n"
        "    group i by k into g\n"
        "    select g)"
    )


# ============================================================
# Errors
# ============================================================


def test_unknown_expression_kind():
    @dataclass
    class Mystery(Expr):
        pass

    with pytest.raises(UnsupportedNodeKind):
        render(Mystery())


def test_missing_expression(writer):
    with pytest.raises(InvalidArgument):
        writer.write_expression(None)
