"""Recursive-descent parser for rulox. Consumes the Scanner's tokens and produces a list of statements.

```
<program>     ::= <declaration>* EOF
<declaration> ::= "класс" IDENT ("<" IDENT)? "{" <function>* "}"
                | "функция" <function>
                | "переменная" IDENT ("=" <expression>)? ";"
                | <statement>
<function>    ::= IDENT "(" (IDENT ("," IDENT)*)? ")" <block>
<statement>   ::= <expression> ";"
                | "вывести" <expression> ";"
                | "вернуть" <expression>? ";"
                | "если" "(" <expression> ")" <statement> ("иначе" <statement>)?
                | "пока" "(" <expression> ")" <statement>
                | "для" "(" (<var decl> | <expression> ";" | ";") <expression>? ";" <expression>? ")" <statement>
                | <block>
<block>       ::= "{" <declaration>* "}"

<expression>  ::= (<call> ".")? IDENT "=" <expression> | <or>     ; right-associative
<or>          ::= <and> ("или" <and>)*
<and>         ::= <equality> ("и" <equality>)*
<equality>    ::= <comparison> (("!=" | "==") <comparison>)*
<comparison>  ::= <term> ((">" | ">=" | "<" | "<=") <term>)*
<term>        ::= <factor> (("-" | "+") <factor>)*
<factor>      ::= <unary> (("/" | "*") <unary>)*
<unary>       ::= ("!" | "-") <unary> | <call>
<call>        ::= <primary> ("(" <arguments>? ")" | "." IDENT)*
<primary>     ::= "правда" | "ложь" | "пусто" | "это" | NUMBER | STRING | IDENT | "(" <expression> ")"
                | "супер" "." IDENT
```

"для" loops have no node of their own: they are desugared here into a block holding the initializer and a "пока"
loop whose body runs the original body followed by the increment.

A syntax error is reported to the ErrorHandler and the parser skips ahead to the next statement boundary, so each
broken statement produces exactly one diagnostic.
"""

from rulox.lang.error import ParseError
from rulox.syntax import ast
from rulox.syntax.tokens import MAX_ARGUMENTS, STATEMENT_STARTS, TokenKind


class Parser:
    """Parses one unit's tokens. One token of lookahead (the current token)."""

    def __init__(self, tokens, error_handler):
        self.tokens = tokens
        self.error_handler = error_handler
        self.current = 0

    def parse(self):
        """Returns the unit's top-level statements. Statements that failed to parse are left out."""
        statements = []
        while not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    # ---------- DECLARATIONS ----------
    def declaration(self):
        try:
            if self.match(TokenKind.CLASS):
                return self.class_declaration()
            if self.match(TokenKind.FUN):
                return self.function("function")
            if self.match(TokenKind.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume(TokenKind.IDENTIFIER, "Expect class name.")

        superclass = None
        if self.match(TokenKind.LESS):
            self.consume(TokenKind.IDENTIFIER, "Expect superclass name.")
            superclass = ast.Variable(self.previous())

        self.consume(TokenKind.LEFT_BRACE, "Expect '{' before class body.")

        methods = []
        while not self.check(TokenKind.RIGHT_BRACE) and not self.at_end():
            methods.append(self.function("method"))

        self.consume(TokenKind.RIGHT_BRACE, "Expect '}' after class body.")
        return ast.Class(name, superclass, tuple(methods))

    def function(self, kind):
        """Parses the rest of a function or method declaration; kind is used in error messages."""
        name = self.consume(TokenKind.IDENTIFIER, f"Expect {kind} name.")
        self.consume(TokenKind.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self.consume(TokenKind.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenKind.COMMA):
                    break
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after parameters.")

        self.consume(TokenKind.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self.block()
        return ast.Function(name, tuple(params), tuple(body))

    def var_declaration(self):
        name = self.consume(TokenKind.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TokenKind.EQUAL):
            initializer = self.expression()

        self.consume(TokenKind.SEMICOLON, "Expect ';' after variable declaration.")
        return ast.Var(name, initializer)

    # ---------- STATEMENTS ----------
    def statement(self):
        if self.match(TokenKind.FOR):
            return self.for_statement()
        if self.match(TokenKind.IF):
            return self.if_statement()
        if self.match(TokenKind.PRINT):
            return self.print_statement()
        if self.match(TokenKind.RETURN):
            return self.return_statement()
        if self.match(TokenKind.WHILE):
            return self.while_statement()
        if self.match(TokenKind.LEFT_BRACE):
            return ast.Block(tuple(self.block()))
        return self.expression_statement()

    def for_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'для'.")

        if self.match(TokenKind.SEMICOLON):
            initializer = None
        elif self.match(TokenKind.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenKind.SEMICOLON):
            condition = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenKind.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = ast.Block((body, ast.Expression(increment)))
        if condition is None:
            condition = ast.Literal(True)
        body = ast.While(condition, body)
        if initializer is not None:
            body = ast.Block((initializer, body))

        return body

    def if_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'если'.")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenKind.ELSE):  # binds to the nearest "если"
            else_branch = self.statement()

        return ast.If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after value.")
        return ast.Print(value)

    def return_statement(self):
        keyword = self.previous()
        value = None
        if not self.check(TokenKind.SEMICOLON):
            value = self.expression()

        self.consume(TokenKind.SEMICOLON, "Expect ';' after return value.")
        return ast.Return(keyword, value)

    def while_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'пока'.")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after condition.")
        body = self.statement()

        return ast.While(condition, body)

    def expression_statement(self):
        expr = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after expression.")
        return ast.Expression(expr)

    def block(self):
        """Parses declarations up to and including the closing brace. Assumes the opening brace was consumed."""
        statements = []
        while not self.check(TokenKind.RIGHT_BRACE) and not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.consume(TokenKind.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    # ---------- EXPRESSIONS ----------
    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.or_expr()

        if self.match(TokenKind.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, ast.Variable):
                return ast.Assign(expr.name, value)
            if isinstance(expr, ast.Get):
                return ast.Set(expr.obj, expr.name, value)

            # reported, not raised: the parser is still in a sane state
            self.error(equals, "Invalid assignment target.")

        return expr

    def or_expr(self):
        expr = self.and_expr()
        while self.match(TokenKind.OR):
            operator = self.previous()
            right = self.and_expr()
            expr = ast.Logical(expr, operator, right)
        return expr

    def and_expr(self):
        expr = self.equality()
        while self.match(TokenKind.AND):
            operator = self.previous()
            right = self.equality()
            expr = ast.Logical(expr, operator, right)
        return expr

    def equality(self):
        return self.binary(self.comparison, TokenKind.BANG_EQUAL, TokenKind.EQUAL_EQUAL)

    def comparison(self):
        return self.binary(self.term, TokenKind.GREATER, TokenKind.GREATER_EQUAL, TokenKind.LESS,
                           TokenKind.LESS_EQUAL)

    def term(self):
        return self.binary(self.factor, TokenKind.MINUS, TokenKind.PLUS)

    def factor(self):
        return self.binary(self.unary, TokenKind.SLASH, TokenKind.STAR)

    def binary(self, operand, *kinds):
        """Parses a left-associative chain of operand separated by any of kinds."""
        expr = operand()
        while self.match(*kinds):
            operator = self.previous()
            right = operand()
            expr = ast.Binary(expr, operator, right)
        return expr

    def unary(self):
        if self.match(TokenKind.BANG, TokenKind.MINUS):
            operator = self.previous()
            right = self.unary()
            return ast.Unary(operator, right)
        return self.call()

    def call(self):
        expr = self.primary()

        while True:
            if self.match(TokenKind.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenKind.DOT):
                name = self.consume(TokenKind.IDENTIFIER, "Expect property name after '.'.")
                expr = ast.Get(expr, name)
            else:
                break

        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.expression())
                if not self.match(TokenKind.COMMA):
                    break

        paren = self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after arguments.")
        return ast.Call(callee, paren, tuple(arguments))

    def primary(self):
        if self.match(TokenKind.FALSE):
            return ast.Literal(False)
        if self.match(TokenKind.TRUE):
            return ast.Literal(True)
        if self.match(TokenKind.NIL):
            return ast.Literal(None)

        if self.match(TokenKind.NUMBER, TokenKind.STRING):
            return ast.Literal(self.previous().literal)

        if self.match(TokenKind.SUPER):
            keyword = self.previous()
            self.consume(TokenKind.DOT, "Expect '.' after 'супер'.")
            method = self.consume(TokenKind.IDENTIFIER, "Expect superclass method name.")
            return ast.Super(keyword, method)

        if self.match(TokenKind.THIS):
            return ast.This(self.previous())

        if self.match(TokenKind.IDENTIFIER):
            return ast.Variable(self.previous())

        if self.match(TokenKind.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after expression.")
            return ast.Grouping(expr)

        raise self.error(self.peek(), "Expect expression.")

    # ---------- HELPERS ----------
    def match(self, *kinds):
        """Consumes the current token if it is any of kinds."""
        for kind in kinds:
            if self.check(kind):
                self.advance()
                return True
        return False

    def consume(self, kind, message):
        """Consumes and returns the current token if it is of kind, otherwise raises a ParseError."""
        if self.check(kind):
            return self.advance()
        raise self.error(self.peek(), message)

    def check(self, kind):
        if self.at_end():
            return False
        return self.peek().kind is kind

    def advance(self):
        if not self.at_end():
            self.current += 1
        return self.previous()

    def at_end(self):
        return self.peek().kind is TokenKind.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

    def error(self, token, message):
        """Reports a syntax error at token and returns it, so callers that can't go on may raise it."""
        error = ParseError(message, token)
        self.error_handler.report(error)
        return error

    def synchronize(self):
        """Discards tokens until the start of the next statement, so one mistake yields one diagnostic."""
        self.advance()

        while not self.at_end():
            if self.previous().kind is TokenKind.SEMICOLON:
                return
            if self.peek().kind in STATEMENT_STARTS:
                return
            self.advance()
