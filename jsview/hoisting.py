"""Hoisting analysis: collect the local variables a body must declare up front."""

from __future__ import annotations

from dataclasses import fields

import structlog

from .model import (
    AnonymousMethodExpression,
    CatchClause,
    LambdaExpression,
    Node,
    QueryExpression,
    Stmt,
    VariableDeclaration,
    VariableReferenceExpression,
)

log = structlog.get_logger(__name__)

# Nodes that open their own variable scope.
_SCOPES = (AnonymousMethodExpression, LambdaExpression, QueryExpression)


def collect_variables(body: Stmt | None) -> list[VariableDeclaration]:
    """Return every variable declared in body, in first-encounter order.

    Declarations are deduplicated by identity. Catch-clause variables are
    bound by the catch itself and nested function or query scopes hoist their
    own, so neither is collected.
    """
    found: dict[int, VariableDeclaration] = {}
    if body is not None:
        _visit(body, found)
    log.debug("hoisted_variables", count=len(found))
    return list(found.values())


def _visit(node: Node, found: dict[int, VariableDeclaration]) -> None:
    if isinstance(node, VariableReferenceExpression):
        return
    for f in fields(node):
        if isinstance(node, CatchClause) and f.name == "variable":
            continue
        _visit_value(getattr(node, f.name), found)


def _visit_value(value: object, found: dict[int, VariableDeclaration]) -> None:
    if isinstance(value, VariableDeclaration):
        found.setdefault(id(value), value)
    elif isinstance(value, list):
        for item in value:
            _visit_value(item, found)
    elif isinstance(value, Node) and not isinstance(value, _SCOPES):
        _visit(value, found)
