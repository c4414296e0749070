"""Prints syntax trees as parenthesized prefix forms, so you can SEE what the parser built.

    (* (- 123) (group 45.67))
    (class B < A (fun m () (print (get (this) x))))
"""

from rulox.syntax import ast


class AstPrinter:
    """Renders Expr and Stmt nodes. Desugared "для" loops show up as the block/while they were rewritten into."""

    def print(self, node):
        if isinstance(node, ast.Expr):
            return self.expr(node)
        return self.stmt(node)

    def print_all(self, statements):
        return "\n".join(self.stmt(stmt) for stmt in statements)

    def expr(self, expr):
        if isinstance(expr, ast.Literal):
            return literal(expr.value)
        if isinstance(expr, ast.Grouping):
            return self.parenthesize("group", expr.expression)
        if isinstance(expr, ast.Unary):
            return self.parenthesize(expr.operator.lexeme, expr.right)
        if isinstance(expr, (ast.Binary, ast.Logical)):
            return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)
        if isinstance(expr, ast.Variable):
            return expr.name.lexeme
        if isinstance(expr, ast.Assign):
            return self.parenthesize("=", expr.name.lexeme, expr.value)
        if isinstance(expr, ast.Call):
            return self.parenthesize("call", expr.callee, *expr.arguments)
        if isinstance(expr, ast.Get):
            return self.parenthesize("get", expr.obj, expr.name.lexeme)
        if isinstance(expr, ast.Set):
            return self.parenthesize("set", expr.obj, expr.name.lexeme, expr.value)
        if isinstance(expr, ast.This):
            return "(this)"
        if isinstance(expr, ast.Super):
            return self.parenthesize("super", expr.method.lexeme)
        raise TypeError(f"unknown expression node {type(expr).__name__}")

    def stmt(self, stmt):
        if isinstance(stmt, ast.Expression):
            return self.parenthesize(";", stmt.expression)
        if isinstance(stmt, ast.Print):
            return self.parenthesize("print", stmt.expression)
        if isinstance(stmt, ast.Var):
            if stmt.initializer is None:
                return self.parenthesize("var", stmt.name.lexeme)
            return self.parenthesize("var", stmt.name.lexeme, stmt.initializer)
        if isinstance(stmt, ast.Block):
            return self.parenthesize("block", *stmt.statements)
        if isinstance(stmt, ast.If):
            if stmt.else_branch is None:
                return self.parenthesize("if", stmt.condition, stmt.then_branch)
            return self.parenthesize("if", stmt.condition, stmt.then_branch, stmt.else_branch)
        if isinstance(stmt, ast.While):
            return self.parenthesize("while", stmt.condition, stmt.body)
        if isinstance(stmt, ast.Function):
            params = "(" + " ".join(param.lexeme for param in stmt.params) + ")"
            return self.parenthesize("fun", stmt.name.lexeme, params, *stmt.body)
        if isinstance(stmt, ast.Return):
            if stmt.value is None:
                return "(return)"
            return self.parenthesize("return", stmt.value)
        if isinstance(stmt, ast.Class):
            parts = [stmt.name.lexeme]
            if stmt.superclass is not None:
                parts += ["<", stmt.superclass.name.lexeme]
            return self.parenthesize("class", *parts, *stmt.methods)
        raise TypeError(f"unknown statement node {type(stmt).__name__}")

    def parenthesize(self, name, *parts):
        rendered = [name]
        for part in parts:
            rendered.append(part if isinstance(part, str) else self.print(part))
        return "(" + " ".join(rendered) + ")"


def literal(value):
    """Source-like rendering of a literal value."""
    if value is None:
        return "пусто"
    if value is True:
        return "правда"
    if value is False:
        return "ложь"
    if isinstance(value, str):
        return f'"{value}"'
    if value.is_integer():
        return str(int(value))
    return str(value)
