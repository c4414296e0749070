"""Runtime object model: function values (closures), class values and instances, and the call/bind protocol.

Other runtime values are plain Python objects: None (пусто), bool, float and str.
"""

from abc import ABC, abstractmethod

from rulox.lang.error import EvaluationError
from rulox.runtime.environment import Environment
from rulox.syntax.tokens import INITIALIZER, THIS


class CallableValue(ABC):
    """Anything that can appear to the left of a call's parentheses."""

    @abstractmethod
    def arity(self):
        """Number of arguments a call must supply."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Invokes self with already evaluated arguments; the Interpreter has checked their count against arity."""


class FunctionValue(CallableValue):
    """A function or method declaration bundled with the environment it was declared in."""

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def bind(self, instance):
        """Returns this method specialized to instance: a copy whose closure has one more scope binding это."""
        environment = Environment(self.closure)
        environment.define(THIS, instance)
        return FunctionValue(self.declaration, environment, self.is_initializer)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        outcome = interpreter.execute_block(self.declaration.body, environment)

        # an initializer always produces its instance, whatever it returned
        if self.is_initializer:
            return self.closure.get_at(0, THIS)
        if outcome is not None:
            return outcome.value
        return None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"

    def __repr__(self):
        return f"FunctionValue({self.declaration.name.lexeme!r})"


class ClassValue(CallableValue):
    """Classes hold behaviour (methods); their instances hold state (fields). Calling a class makes an instance."""

    def __init__(self, name, superclass, methods):
        self.name = name
        self.superclass = superclass
        self.methods = methods  # dict of name: FunctionValue

    def find_method(self, name):
        """Looks name up in this class, then up the superclass chain. Returns None if no class defines it."""
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self):
        initializer = self.find_method(INITIALIZER)
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter, arguments):
        instance = Instance(self)
        initializer = self.find_method(INITIALIZER)
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"ClassValue({self.name!r})"


class Instance:
    """An object made by calling a ClassValue. Fields spring into existence on first assignment."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Property lookup: own fields shadow methods, methods come back bound to self."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise EvaluationError(f"Undefined property '{name.lexeme}'.", name)

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"

    def __repr__(self):
        return f"Instance({self.klass.name!r})"
