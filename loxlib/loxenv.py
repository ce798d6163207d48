# --------------------------------------------------------------------
from typing import Optional as Opt

from .loxerrors import UndefinedVariable
from .loxlexer  import Token

# ====================================================================
# Runtime scopes

class Environment:
    """
    one frame of the scope chain

    `get` and `assign` only look at this frame; they are used for names
    the resolver left unresolved, i.e. against the globals. `get_at` and
    `assign_at` trust the distance computed by the resolver and do not
    search.
    """
    def __init__(self, enclosing: Opt['Environment'] = None):
        self.values    = dict()
        self.enclosing = enclosing

    def define(self, name: str, value):
        self.values[name] = value

    def get(self, name: Token):
        if name.lexeme not in self.values:
            raise UndefinedVariable(name)
        return self.values[name.lexeme]

    def assign(self, name: Token, value):
        if name.lexeme not in self.values:
            raise UndefinedVariable(name)
        self.values[name.lexeme] = value

    def ancestor(self, distance: int) -> 'Environment':
        env = self
        for _ in range(distance):
            env = env.enclosing
            assert(env is not None)
        return env

    def get_at(self, distance: int, name: str):
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: str, value):
        env = self.ancestor(distance)
        assert(name in env.values)
        env.values[name] = value
