"""Static resolution of variable bindings.

Scoping in rulox is lexical but environments are created dynamically, one per block/call, so a name looked up by
walking the environment chain at run time can find the wrong binding once closures outlive their scope. The Resolver
walks the tree once, mirroring every scope the Interpreter will create, and records for each variable reference how
many scopes out its binding lives. References it cannot find are left out of the table and are looked up as globals.
"""

from enum import Enum, auto

from rulox.lang.error import ResolveError
from rulox.syntax import ast
from rulox.syntax.tokens import INITIALIZER, SUPER, THIS


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    """Computes lexical distances for one unit. Errors are reported to error_handler and resolution goes on."""

    def __init__(self, error_handler):
        self.error_handler = error_handler
        self.scopes = []  # stack of dicts of name: whether its initializer has finished
        self.locals = {}  # dict of Expr node: lexical distance
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements):
        """Resolves statements and returns the table of distances."""
        for stmt in statements:
            self.resolve_stmt(stmt)
        return self.locals

    # ---------- statements ----------
    def resolve_stmt(self, stmt):
        if isinstance(stmt, ast.Block):
            self.begin_scope()
            for inner in stmt.statements:
                self.resolve_stmt(inner)
            self.end_scope()

        elif isinstance(stmt, ast.Var):
            self.declare(stmt.name)
            if stmt.initializer is not None:
                self.resolve_expr(stmt.initializer)
            self.define(stmt.name)

        elif isinstance(stmt, ast.Function):
            # defined before the body is resolved, so the function can recurse
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt, FunctionType.FUNCTION)

        elif isinstance(stmt, ast.Class):
            self.resolve_class(stmt)

        elif isinstance(stmt, (ast.Expression, ast.Print)):
            self.resolve_expr(stmt.expression)

        elif isinstance(stmt, ast.If):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)

        elif isinstance(stmt, ast.While):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.body)

        elif isinstance(stmt, ast.Return):
            if self.current_function is FunctionType.NONE:
                self.error(stmt.keyword, "Can't return from top-level code.")
            if stmt.value is not None:
                self.resolve_expr(stmt.value)

        else:
            raise TypeError(f"unknown statement node {type(stmt).__name__}")

    def resolve_function(self, function, function_type):
        enclosing_function = self.current_function
        self.current_function = function_type

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        for stmt in function.body:
            self.resolve_stmt(stmt)
        self.end_scope()

        self.current_function = enclosing_function

    def resolve_class(self, stmt):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self.error(stmt.superclass.name, "A class can't inherit from itself.")
            self.current_class = ClassType.SUBCLASS
            self.resolve_expr(stmt.superclass)

            # scope holding супер, just outside the one holding это
            self.begin_scope()
            self.scopes[-1][SUPER] = True

        self.begin_scope()
        self.scopes[-1][THIS] = True

        for method in stmt.methods:
            if method.name.lexeme == INITIALIZER:
                function_type = FunctionType.INITIALIZER
            else:
                function_type = FunctionType.METHOD
            self.resolve_function(method, function_type)

        self.end_scope()
        if stmt.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    # ---------- expressions ----------
    def resolve_expr(self, expr):
        if isinstance(expr, ast.Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self.error(expr.name, "Can't read local variable in its own initializer.")
            self.resolve_local(expr, expr.name)

        elif isinstance(expr, ast.Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name)

        elif isinstance(expr, (ast.Binary, ast.Logical)):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)

        elif isinstance(expr, ast.Unary):
            self.resolve_expr(expr.right)

        elif isinstance(expr, ast.Grouping):
            self.resolve_expr(expr.expression)

        elif isinstance(expr, ast.Call):
            self.resolve_expr(expr.callee)
            for argument in expr.arguments:
                self.resolve_expr(argument)

        elif isinstance(expr, ast.Get):
            self.resolve_expr(expr.obj)

        elif isinstance(expr, ast.Set):
            self.resolve_expr(expr.value)
            self.resolve_expr(expr.obj)

        elif isinstance(expr, ast.This):
            if self.current_class is ClassType.NONE:
                self.error(expr.keyword, f"Can't use '{THIS}' outside of a class.")
                return
            self.resolve_local(expr, expr.keyword)

        elif isinstance(expr, ast.Super):
            if self.current_class is ClassType.NONE:
                self.error(expr.keyword, f"Can't use '{SUPER}' outside of a class.")
            elif self.current_class is not ClassType.SUBCLASS:
                self.error(expr.keyword, f"Can't use '{SUPER}' in a class with no superclass.")
            self.resolve_local(expr, expr.keyword)

        elif isinstance(expr, ast.Literal):
            pass

        else:
            raise TypeError(f"unknown expression node {type(expr).__name__}")

    # ---------- scopes ----------
    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        """Adds name to the innermost scope, marked as not ready to be read. Globals aren't tracked."""
        if self.scopes:
            self.scopes[-1][name.lexeme] = False

    def define(self, name):
        if self.scopes:
            self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr, name):
        for distance, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.locals[expr] = distance
                return

    def error(self, token, message):
        self.error_handler.report(ResolveError(message, token))
