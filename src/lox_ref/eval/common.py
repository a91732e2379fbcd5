from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from lark import Token

from ..tree import is_token
from ..types import LoxBool, LoxNil, LoxNumber, LoxString, LoxValue, ExpectedNumber

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def token_kind(node: Any) -> Optional[str]:
    if not is_token(node):
        return None
    tok: Token = node
    return str(tok.type)

def require_number(value: LoxValue) -> float:
    if not isinstance(value, LoxNumber):
        raise ExpectedNumber(value)
    return value.value

def token_number(token: Token, _: 'Interpreter') -> LoxNumber:
    return LoxNumber(float(token.value))

def token_string(token: Token, _: 'Interpreter') -> LoxString:
    # The parser stores the contents, quotes already stripped
    return LoxString(str(token.value))

def token_true(_: Token, __: 'Interpreter') -> LoxBool:
    return LoxBool(True)

def token_false(_: Token, __: 'Interpreter') -> LoxBool:
    return LoxBool(False)

def token_nil(_: Token, __: 'Interpreter') -> LoxNil:
    return LoxNil()
