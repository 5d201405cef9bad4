"""Statement rendering.

Statements never write their own terminators. A separator is written before
every statement except the first of a body:

    if first_statement:   clear the flag, write nothing
    elif for_header:      write ", "
    else:                 write ";" (unless the last statement ended in a
                          brace or comment) and a line break

Each body closes with one trailing separator, so `{ return 5 }` renders as
`return 5;` on its own line.
"""

from __future__ import annotations

import structlog

from ..errors import InvalidArgument, UnsupportedNodeKind
from ..hoisting import collect_variables
from ..model import (
    AssignExpression,
    AttachEventStatement,
    BinaryExpression,
    BlockStatement,
    BreakStatement,
    CommentStatement,
    ConditionCase,
    ConditionStatement,
    ContinueStatement,
    DebugBreakStatement,
    DefaultCase,
    DoStatement,
    Expr,
    ExpressionStatement,
    FixedStatement,
    ForEachStatement,
    ForStatement,
    GotoStatement,
    LabeledStatement,
    LockStatement,
    MemoryCopyStatement,
    MemoryInitializeStatement,
    MethodReturnStatement,
    RemoveEventStatement,
    SnippetExpression,
    Stmt,
    SwitchCase,
    SwitchStatement,
    ThrowExceptionStatement,
    TryCatchFinallyStatement,
    UsingStatement,
    VariableDeclarationExpression,
    VariableReferenceExpression,
    WhileStatement,
)
from .expressions import ExpressionWriter

log = structlog.get_logger(__name__)

CATCH_VARIABLE = "e"
DISPOSE = "Dispose"
EQUALITY_OPERATORS = ("identity_equality", "value_equality")


class StatementWriter(ExpressionWriter):
    """Writes statement trees with the separator protocol."""

    def write_statement(self, stmt: Stmt) -> None:
        with self._render_session() as session:
            session.first_statement = True
            if isinstance(stmt, BlockStatement):
                self._body(stmt)
                return
            self._stmt(stmt)
            if session.needs_terminator:
                self._text(";")
            session.needs_terminator = False

    # --------------------------------------------------------
    # Session protocol
    # --------------------------------------------------------

    def _separator(self) -> None:
        session = self._session
        if session.first_statement:
            session.first_statement = False
        elif session.for_header:
            self._text(", ")
        else:
            if session.needs_terminator:
                self._text(";")
            self._line_break()
        session.needs_terminator = False

    def _terminated(self) -> None:
        self._session.needs_terminator = True

    def _body(self, block: Stmt | None) -> None:
        """Write the statements of a body followed by its trailing separator."""
        session = self._session
        session.first_statement = True
        self._statements(block)
        if not session.first_statement:
            self._separator()
        session.first_statement = False

    def _function_body(self, body: BlockStatement | None) -> None:
        session = self._session
        saved = (session.for_header, session.needs_terminator)
        session.for_header = False
        for variable in collect_variables(body):
            self._text("var ")
            self._declaration(variable.name, variable)
            self._text(";")
            self._line_break()
        self._body(body)
        session.for_header, session.needs_terminator = saved

    def _statements(self, block: Stmt | None) -> None:
        if isinstance(block, BlockStatement):
            for stmt in block.statements:
                self._stmt(stmt)
        elif block is not None:
            self._stmt(block)

    def _braced(self, block: Stmt | None) -> None:
        self._text(" {")
        self._line_break()
        self._indent()
        self._body(block)
        self._outdent()
        self._text("}")
        self._session.needs_terminator = False

    def _condition(self, cond: Expr | None) -> None:
        if cond is None:
            self._text("(true)")
        elif isinstance(cond, BinaryExpression):
            self._expr(cond)
        else:
            self._text("(")
            self._expr(cond)
            self._text(")")

    # --------------------------------------------------------
    # Dispatch
    # --------------------------------------------------------

    def _stmt(self, stmt: Stmt | None) -> None:
        match stmt:
            case None:
                raise InvalidArgument("statement")
            case BlockStatement(statements=statements):
                for inner in statements:
                    self._stmt(inner)
            case ExpressionStatement(expression=VariableDeclarationExpression()):
                # declared by the hoisted variable list
                pass
            case ExpressionStatement(expression=expr):
                self._separator()
                self._expr(expr)
                self._terminated()
            case GotoStatement(name=name):
                self._separator()
                self._text("goto ")
                self._declaration(name)
                self._terminated()
            case LabeledStatement(name=name, statement=inner):
                self._labeled(name, inner)
            case ConditionStatement(condition=cond, then=then, else_=else_):
                self._separator()
                self._text("if ")
                self._condition(cond)
                self._braced(then)
                if else_ is not None and else_.statements:
                    self._line_break()
                    self._text("else")
                    self._braced(else_)
            case MethodReturnStatement(expression=value):
                self._separator()
                self._text("return")
                if value is not None:
                    self._text(" ")
                    self._expr(value)
                self._terminated()
            case ForStatement(initializer=init, condition=cond, increment=incr, body=body):
                self._for(init, cond, incr, body)
            case ForEachStatement(variable=variable, expression=source, body=body):
                self._separator()
                self._text("for (")
                self._variable_reference(variable)
                self._text(" of ")
                self._expr(source)
                self._text(")")
                self._braced(body)
            case UsingStatement(expression=resource, body=body):
                self._using(resource, body)
            case FixedStatement(variable=variable, expression=pinned, body=body):
                self._separator()
                self._text("fixed (")
                self._variable_reference(variable)
                self._text(" = ")
                self._expr(pinned)
                self._text(")")
                self._braced(body)
            case WhileStatement(condition=cond, body=body):
                self._separator()
                self._text("while ")
                self._condition(cond)
                self._braced(body)
            case DoStatement(condition=cond, body=body):
                self._separator()
                self._text("do")
                self._braced(body)
                self._text(" while ")
                self._condition(cond)
                self._terminated()
            case TryCatchFinallyStatement():
                self._try(stmt)
            case ThrowExceptionStatement(expression=value):
                self._separator()
                self._text("throw ")
                if value is None:
                    self._text("Exception.Create()")
                else:
                    self._expr(value)
                self._terminated()
            case AttachEventStatement(event=event, listener=listener):
                self._separator()
                self._expr(event)
                self._text(" += ")
                self._expr(listener)
                self._terminated()
            case RemoveEventStatement(event=event, listener=listener):
                self._separator()
                self._expr(event)
                self._text(" -= ")
                self._expr(listener)
                self._terminated()
            case SwitchStatement(expression=subject, cases=cases):
                self._switch(subject, cases)
            case BreakStatement():
                self._separator()
                self._text("break")
                self._terminated()
            case ContinueStatement():
                self._separator()
                self._text("continue")
                self._terminated()
            case MemoryCopyStatement(source=source, destination=destination, length=length):
                self._separator()
                self._text("memcpy(")
                self._arguments([source, destination, length])
                self._text(")")
                self._terminated()
            case MemoryInitializeStatement(offset=offset, value=value, length=length):
                self._separator()
                self._text("meminit(")
                self._arguments([offset, value, length])
                self._text(")")
                self._terminated()
            case DebugBreakStatement():
                self._separator()
                self._text("debugger")
                self._terminated()
            case LockStatement(expression=subject, body=body):
                self._separator()
                self._text("lock ")
                self._condition(subject)
                self._braced(body)
            case CommentStatement(text=text):
                self._comment(text)
            case _:
                log.debug("unsupported_node", category="statement", kind=type(stmt).__name__)
                raise UnsupportedNodeKind("statement", stmt)

    # --------------------------------------------------------
    # Compound statements
    # --------------------------------------------------------

    def _labeled(self, name: str, inner: Stmt | None) -> None:
        session = self._session
        self._separator()
        # labels sit one level out from the statements around them
        outdented = session.depth > 0
        if outdented:
            self._outdent()
        self._declaration(name)
        self._text(":")
        self._line_break()
        if outdented:
            self._indent()
        session.first_statement = True
        if inner is not None:
            self._stmt(inner)

    def _for(
        self, init: Stmt | None, cond: Expr | None, incr: Stmt | None, body: BlockStatement
    ) -> None:
        session = self._session
        self._separator()
        self._text("for (")
        session.for_header = True
        session.first_statement = True
        if init is not None:
            self._stmt(init)
        self._text("; ")
        if cond is not None:
            self._expr(cond)
        self._text("; ")
        session.first_statement = True
        if incr is not None:
            self._stmt(incr)
        session.for_header = False
        session.first_statement = False
        self._text(")")
        self._braced(body)

    def _using(self, resource: Expr, body: BlockStatement) -> None:
        variable = None
        if isinstance(resource, AssignExpression) and isinstance(
            resource.target, (VariableDeclarationExpression, VariableReferenceExpression)
        ):
            variable = resource.target.variable
            self._separator()
            self._expr(resource)
            self._terminated()
        self._separator()
        self._text("try")
        self._braced(body)
        self._line_break()
        self._text("finally {")
        self._line_break()
        self._indent()
        if variable is not None:
            self._variable_reference(variable)
            self._text(".")
        else:
            self._member_target(resource)
        self._text(DISPOSE + "();")
        self._line_break()
        self._outdent()
        self._text("}")
        self._session.needs_terminator = False

    def _try(self, stmt: TryCatchFinallyStatement) -> None:
        self._separator()
        self._text("try")
        self._braced(stmt.try_)
        for clause in stmt.catch_clauses:
            self._line_break()
            self._text("catch (")
            if clause.variable is not None:
                self._declaration(clause.variable.name, clause.variable)
            else:
                self._text(CATCH_VARIABLE)
            self._text(")")
            if clause.condition is None:
                self._braced(clause.body)
                continue
            self._text(" {")
            self._line_break()
            self._indent()
            self._text("if ")
            self._condition(clause.condition)
            self._braced(clause.body)
            self._line_break()
            self._outdent()
            self._text("}")
        if stmt.fault.statements:
            # runs only when the try block throws, then propagates
            rethrow = ThrowExceptionStatement(SnippetExpression(CATCH_VARIABLE))
            self._line_break()
            self._text(f"catch ({CATCH_VARIABLE})")
            self._braced(BlockStatement([*stmt.fault.statements, rethrow]))
        if stmt.finally_.statements:
            self._line_break()
            self._text("finally")
            self._braced(stmt.finally_)
        self._session.needs_terminator = False

    def _switch(self, subject: Expr, cases: list[SwitchCase]) -> None:
        self._separator()
        self._text("switch ")
        self._condition(subject)
        self._text(" {")
        self._line_break()
        for case in cases:
            match case:
                case ConditionCase(condition=cond):
                    self._case_labels(cond, subject)
                case DefaultCase():
                    self._text("default:")
                    self._line_break()
                case _:
                    raise UnsupportedNodeKind("switch case", case)
            self._indent()
            self._body(case.body)
            self._outdent()
        self._text("}")
        self._session.needs_terminator = False

    def _case_labels(self, cond: Expr | None, subject: Expr) -> None:
        if isinstance(cond, BinaryExpression) and cond.operator == "boolean_or":
            self._case_labels(cond.left, subject)
            self._case_labels(cond.right, subject)
            return
        if (
            isinstance(cond, BinaryExpression)
            and cond.operator in EQUALITY_OPERATORS
            and cond.left == subject
        ):
            cond = cond.right
        self._text("case ")
        self._expr(cond)
        self._text(":")
        self._line_break()

    def _comment(self, text: str) -> None:
        self._separator()
        lines = text.splitlines() or [""]
        if len(lines) == 1:
            self._text("// " + lines[0])
        else:
            self._text("/*")
            self._line_break()
            for line in lines:
                self._text(line)
                self._line_break()
            self._text("*/")
        self._session.needs_terminator = False
