"""Tree-walking evaluator for rulox.

Statements are executed for their effects; expressions are evaluated to runtime values (None, bool, float, str,
CallableValue or Instance). The only non-local transfer of control is "вернуть": executing it produces a Returning
outcome, which every enclosing statement hands straight back up until the function call that owns it unwraps it.
"""

import math
from dataclasses import dataclass

from rulox.lang.error import EvaluationError
from rulox.runtime.environment import Environment
from rulox.runtime.objects import CallableValue, ClassValue, FunctionValue, Instance
from rulox.syntax import ast
from rulox.syntax.tokens import INITIALIZER, SUPER, THIS, TokenKind


@dataclass(frozen=True)
class Returning:
    """Outcome of a statement that executed "вернуть". Normal completion is None."""
    value: object


class Interpreter:
    """Runs resolved statements. Globals (and the table of distances) persist across calls to interpret, which is
    what lets the shell build a program up line by line.
    """

    def __init__(self, out=None):
        self.out = out  # stream "вывести" writes to, stdout if None
        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}  # dict of Expr node: lexical distance, filled from Resolver output

    def interpret(self, statements, distances=None):
        """Executes statements in order. An EvaluationError aborts the rest of the unit and propagates."""
        if distances:
            self.locals.update(distances)
        for stmt in statements:
            self.execute(stmt)

    # ---------- statements ----------
    def execute(self, stmt):
        """Executes stmt. Returns a Returning outcome if "вернуть" ran inside it, None otherwise."""
        if isinstance(stmt, ast.Expression):
            self.evaluate(stmt.expression)

        elif isinstance(stmt, ast.Print):
            value = self.evaluate(stmt.expression)
            print(stringify(value), file=self.out)

        elif isinstance(stmt, ast.Var):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)

        elif isinstance(stmt, ast.Block):
            return self.execute_block(stmt.statements, Environment(self.environment))

        elif isinstance(stmt, ast.If):
            if is_truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)

        elif isinstance(stmt, ast.While):
            while is_truthy(self.evaluate(stmt.condition)):
                outcome = self.execute(stmt.body)
                if outcome is not None:
                    return outcome

        elif isinstance(stmt, ast.Function):
            function = FunctionValue(stmt, self.environment)
            self.environment.define(stmt.name.lexeme, function)

        elif isinstance(stmt, ast.Return):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            return Returning(value)

        elif isinstance(stmt, ast.Class):
            self.execute_class(stmt)

        else:
            raise TypeError(f"unknown statement node {type(stmt).__name__}")

        return None

    def execute_block(self, statements, environment):
        """Executes statements in environment, then restores the current one however the block is left."""
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                outcome = self.execute(stmt)
                if outcome is not None:
                    return outcome
        finally:
            self.environment = previous
        return None

    def execute_class(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, ClassValue):
                raise EvaluationError("Superclass must be a class.", stmt.superclass.name)

        self.environment.define(stmt.name.lexeme, None)

        # methods close over an extra scope binding супер when there is a superclass
        closure = self.environment
        if superclass is not None:
            closure = Environment(closure)
            closure.define(SUPER, superclass)

        methods = {}
        for method in stmt.methods:
            is_initializer = method.name.lexeme == INITIALIZER
            methods[method.name.lexeme] = FunctionValue(method, closure, is_initializer)

        klass = ClassValue(stmt.name.lexeme, superclass, methods)
        self.environment.assign(stmt.name, klass)

    # ---------- expressions ----------
    def evaluate(self, expr):
        if isinstance(expr, ast.Literal):
            return expr.value

        if isinstance(expr, ast.Grouping):
            return self.evaluate(expr.expression)

        if isinstance(expr, ast.Unary):
            return self.evaluate_unary(expr)

        if isinstance(expr, ast.Binary):
            return self.evaluate_binary(expr)

        if isinstance(expr, ast.Logical):
            left = self.evaluate(expr.left)
            if expr.operator.kind is TokenKind.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)

        if isinstance(expr, ast.Variable):
            return self.look_up_variable(expr.name, expr)

        if isinstance(expr, ast.Assign):
            value = self.evaluate(expr.value)
            distance = self.locals.get(expr)
            if distance is not None:
                self.environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value

        if isinstance(expr, ast.Call):
            return self.evaluate_call(expr)

        if isinstance(expr, ast.Get):
            obj = self.evaluate(expr.obj)
            if isinstance(obj, Instance):
                return obj.get(expr.name)
            raise EvaluationError("Only instances have properties.", expr.name)

        if isinstance(expr, ast.Set):
            obj = self.evaluate(expr.obj)
            if not isinstance(obj, Instance):
                raise EvaluationError("Only instances have fields.", expr.name)
            value = self.evaluate(expr.value)
            obj.set(expr.name, value)
            return value

        if isinstance(expr, ast.This):
            return self.look_up_variable(expr.keyword, expr)

        if isinstance(expr, ast.Super):
            return self.evaluate_super(expr)

        raise TypeError(f"unknown expression node {type(expr).__name__}")

    def evaluate_unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.kind is TokenKind.MINUS:
            check_number_operand(expr.operator, right)
            return -right
        if expr.operator.kind is TokenKind.BANG:
            return not is_truthy(right)
        raise TypeError(f"unknown unary operator {expr.operator.lexeme}")

    def evaluate_binary(self, expr):
        # right operand first: observable through side effects
        right = self.evaluate(expr.right)
        left = self.evaluate(expr.left)
        operator = expr.operator
        kind = operator.kind

        if kind is TokenKind.EQUAL_EQUAL:
            return is_equal(left, right)
        if kind is TokenKind.BANG_EQUAL:
            return not is_equal(left, right)

        if kind is TokenKind.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise EvaluationError("Operands of '+' must be two numbers or two strings.", operator)

        check_number_operands(operator, left, right)
        if kind is TokenKind.MINUS:
            return left - right
        if kind is TokenKind.STAR:
            return left * right
        if kind is TokenKind.SLASH:
            return divide(left, right)
        if kind is TokenKind.GREATER:
            return left > right
        if kind is TokenKind.GREATER_EQUAL:
            return left >= right
        if kind is TokenKind.LESS:
            return left < right
        if kind is TokenKind.LESS_EQUAL:
            return left <= right
        raise TypeError(f"unknown binary operator {operator.lexeme}")

    def evaluate_call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, CallableValue):
            raise EvaluationError("Can only call functions and classes.", expr.paren)
        if len(arguments) != callee.arity():
            raise EvaluationError(f"Expected {callee.arity()} arguments but got {len(arguments)}.", expr.paren)

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise EvaluationError("Stack overflow.", expr.paren) from None

    def evaluate_super(self, expr):
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, SUPER)
        instance = self.environment.get_at(distance - 1, THIS)  # это is always one scope inside супер

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise EvaluationError(f"Undefined property '{expr.method.lexeme}'.", expr.method)
        return method.bind(instance)

    def look_up_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)


def is_truthy(value):
    """Everything is truthy except пусто and ложь."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a, b):
    """Values of different kinds are never equal (so ложь != 0 even though False == 0.0 in Python)."""
    if a is None and b is None:
        return True
    if type(a) is not type(b):
        return False
    if isinstance(a, float):
        # numbers compare by value identity: NaN equals itself, 0 and -0 differ
        if math.isnan(a) or math.isnan(b):
            return math.isnan(a) and math.isnan(b)
        return a == b and math.copysign(1.0, a) == math.copysign(1.0, b)
    return a == b


def divide(left, right):
    """IEEE-754 division: dividing by zero gives an infinity or NaN instead of an error."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def check_number_operand(operator, operand):
    if not isinstance(operand, float):
        raise EvaluationError(f"Operand of '{operator.lexeme}' must be a number.", operator)


def check_number_operands(operator, left, right):
    if not (isinstance(left, float) and isinstance(right, float)):
        raise EvaluationError(f"Operands of '{operator.lexeme}' must be numbers.", operator)


def stringify(value):
    """Text "вывести" shows for value."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            # plain digits, never exponent notation
            return "-0" if value == 0 and math.copysign(1.0, value) < 0 else str(int(value))
        return str(value)
    return str(value)
