"""Abstract syntax tree for rulox. Two closed families of nodes: expressions (Expr) and statements (Stmt).

Nodes are immutable and compare/hash by identity, so the resolver can key its side table of lexical distances on the
node objects themselves without the tree ever being mutated.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from rulox.syntax.tokens import Token


class Expr:
    """Superclass for expression nodes. Evaluating one produces a runtime value."""


class Stmt:
    """Superclass for statement nodes. Executing one produces only side effects."""


node = dataclass(frozen=True, eq=False)


# ---------- expressions ----------

@node
class Literal(Expr):
    value: object


@node
class Grouping(Expr):
    expression: Expr


@node
class Unary(Expr):
    operator: Token
    right: Expr


@node
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@node
class Logical(Expr):
    """Short-circuiting "и"/"или"; kept apart from Binary because the right side may never be evaluated."""
    left: Expr
    operator: Token
    right: Expr


@node
class Variable(Expr):
    name: Token


@node
class Assign(Expr):
    name: Token
    value: Expr


@node
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, for error locations
    arguments: Tuple[Expr, ...]


@node
class Get(Expr):
    obj: Expr
    name: Token


@node
class Set(Expr):
    obj: Expr
    name: Token
    value: Expr


@node
class This(Expr):
    keyword: Token


@node
class Super(Expr):
    keyword: Token
    method: Token


# ---------- statements ----------

@node
class Expression(Stmt):
    expression: Expr


@node
class Print(Stmt):
    expression: Expr


@node
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@node
class Block(Stmt):
    statements: Tuple[Stmt, ...]


@node
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@node
class While(Stmt):
    condition: Expr
    body: Stmt


@node
class Function(Stmt):
    name: Token
    params: Tuple[Token, ...]
    body: Tuple[Stmt, ...]


@node
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@node
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: Tuple[Function, ...]
