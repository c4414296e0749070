"""Environments: chained scopes of name bindings, one per block, call or bound method.

An Environment is shared, never copied. Closures keep a reference to the one they were declared in, so they observe
(and make) later changes to the variables in it.
"""

from rulox.lang.error import EvaluationError


class Environment:
    """Bindings by name, plus an optional enclosing Environment."""

    def __init__(self, enclosing=None):
        self.enclosing = enclosing
        self.values = {}

    def define(self, name, value):
        """Binds name in this scope. Redefining an existing name just overwrites it."""
        self.values[name] = value

    def get(self, name):
        """Looks name (a Token) up in this scope, then outward. Raises EvaluationError if nothing binds it."""
        env = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise EvaluationError(f"Undefined variable '{name.lexeme}'.", name)

    def assign(self, name, value):
        """Rebinds name (a Token) in the nearest scope that has it. Assignment never declares."""
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise EvaluationError(f"Undefined variable '{name.lexeme}'.", name)

    def ancestor(self, distance):
        env = self
        for _ in range(distance):
            env = env.enclosing
        return env

    def get_at(self, distance, name):
        """Looks name (a str) up exactly distance scopes out, as computed by the Resolver."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self):
        return f"Environment({self.values!r}, enclosing={self.enclosing!r})"
