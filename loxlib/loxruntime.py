# --------------------------------------------------------------------
import abc
import dataclasses as dc
import decimal
import math
import time

from typing import Callable, Optional as Opt

from .loxast    import FunExpression
from .loxenv    import Environment
from .loxerrors import UndefinedProperty
from .loxlexer  import Token

# ====================================================================
# Statement completions
#
# Executing a statement yields None when control falls through, or one
# of the signals below, which the enclosing loop (break) or call
# (return) consumes.

@dc.dataclass(frozen = True)
class BreakSignal:
    pass

@dc.dataclass(frozen = True)
class ReturnSignal:
    value: object = None

Completion = Opt[BreakSignal | ReturnSignal]

# ====================================================================
# Runtime values

class LoxCallable(abc.ABC):
    @abc.abstractmethod
    def arity(self) -> int:
        pass

    @abc.abstractmethod
    def call(self, interpreter, arguments: list):
        pass

# --------------------------------------------------------------------
class NativeFunction(LoxCallable):
    def __init__(self, name: str, arity: int, function: Callable):
        self.name     = name
        self.nargs    = arity
        self.function = function

    def arity(self):
        return self.nargs

    def call(self, interpreter, arguments):
        return self.function(*arguments)

    def __str__(self):
        return '<native fn>'

def natives() -> list[NativeFunction]:
    return [
        NativeFunction('clock', 0, time.time),
    ]

# --------------------------------------------------------------------
class LoxFunction(LoxCallable):
    def __init__(
            self,
            declaration    : FunExpression,
            closure        : Environment,
            name           : Opt[str] = None,
            is_initializer : bool     = False,
    ):
        self.declaration    = declaration
        self.closure        = closure
        self.name           = name
        self.is_initializer = is_initializer

    def arity(self):
        return len(self.declaration.params)

    def bind(self, instance: 'LoxInstance') -> 'LoxFunction':
        env = Environment(self.closure)
        env.define('this', instance)
        return LoxFunction(self.declaration, env, self.name, self.is_initializer)

    def call(self, interpreter, arguments):
        env = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            env.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, env)

        if self.is_initializer:
            return self.closure.get_at(0, 'this')

        match completion:
            case ReturnSignal(value):
                return value

        return None

    def __str__(self):
        return '<fn>' if self.name is None else f'<fn {self.name}>'

# --------------------------------------------------------------------
class LoxClass(LoxCallable):
    def __init__(
            self,
            name       : str,
            superclass : Opt['LoxClass'],
            methods    : dict[str, LoxFunction],
    ):
        self.name       = name
        self.superclass = superclass
        self.methods    = methods

    def find_method(self, name: str) -> Opt[LoxFunction]:
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self):
        init = self.find_method('init')
        return 0 if init is None else init.arity()

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)
        init     = self.find_method('init')
        if init is not None:
            init.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self):
        return self.name

# --------------------------------------------------------------------
class LoxInstance:
    def __init__(self, klass: LoxClass):
        self.klass  = klass
        self.fields = dict()

    def get(self, name: Token):
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise UndefinedProperty(name)

    def set(self, name: Token, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f'{self.klass.name} instance'

# ====================================================================
# Value helpers

def is_truthy(value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True

def is_equal(a, b) -> bool:
    if a is None or b is None:
        return a is None and b is None
    if type(a) is not type(b):
        return False
    if isinstance(a, float) and math.isnan(a):
        return math.isnan(b)
    return a == b

def format_number(value: float) -> str:
    """
    render a number the way the JVM prints a double: plain decimals in
    [1e-3, 1e7), computerized scientific notation (`1.0E24`) outside
    """
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'

    if value == 0 or 1e-3 <= abs(value) < 1e7:
        text = repr(value)
        return text[:-2] if text.endswith('.0') else text

    sign, digits, exponent = decimal.Decimal(repr(value)).as_tuple()
    exponent += len(digits) - 1
    digits    = ''.join(map(str, digits)).rstrip('0')
    mantissa  = f'{digits[0]}.{digits[1:] or "0"}'
    return f'{"-" if sign else ""}{mantissa}E{exponent}'

def stringify(value) -> str:
    match value:
        case None:
            return 'nil'
        case bool():
            return 'true' if value else 'false'
        case float():
            return format_number(value)
        case _:
            return str(value)
