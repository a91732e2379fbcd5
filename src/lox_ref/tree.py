"""Shared helpers for working with the Tree/Token nodes of the Lox AST.

The parser builds plain `lark.Tree` nodes labelled by variant (`binary`,
`vardecl`, ...) with `lark.Token` leaves. Every tree carries a `lark.tree.Meta`
with its source position and a `node_id`, which is the node's identity for the
resolver's depth table: `lark.Tree` equality is structural, so two identical
`a` references at different places would otherwise collide.
"""
from __future__ import annotations

import itertools
from typing import Any, Iterator, List, Optional, Union

from lark import Token, Tree
from lark.tree import Meta
from typing_extensions import TypeAlias, TypeGuard

from .token_types import Tok

Node: TypeAlias = Union[Tree, Token]

NodeIds: TypeAlias = Iterator[int]


def new_node_ids() -> NodeIds:
    """A fresh id counter; one per session so ids never repeat across units."""
    return itertools.count(1)


def make_tree(data: str, children: List[Any], tok: Optional[Tok], ids: NodeIds) -> Tree:
    meta = Meta()
    meta.empty = False
    meta.node_id = next(ids)

    if tok is not None:
        meta.line = tok.line
        meta.column = tok.column
        meta.start_pos = tok.pos

    return Tree(data, children, meta)


def make_token(kind: str, tok: Tok, value: Optional[str] = None) -> Token:
    """Convert a scanner token into a positioned lark Token leaf."""
    text = tok.lexeme if value is None else value
    return Token(kind, text, start_pos=tok.pos, line=tok.line, column=tok.column)


def is_tree(node: Any) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Any) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Any) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: Any) -> List[Any]:
    if not is_tree(node):
        return []

    return list(node.children)

def node_meta(node: Any) -> Optional[Meta]:
    if not is_tree(node):
        return None

    # Tree.meta lazily creates an empty Meta; peek at the slot instead
    return getattr(node, "_meta", None)

def node_id(node: Tree) -> int:
    meta = node_meta(node)
    ident = getattr(meta, "node_id", None)

    if ident is None:
        raise ValueError(f"Tree {node.data!r} was not built by the parser (no node id)")

    return ident

def node_position(node: Any) -> tuple[Optional[int], Optional[int]]:
    if is_token(node):
        return node.line, node.column

    meta = node_meta(node)
    return getattr(meta, "line", None), getattr(meta, "column", None)

def ident_name(node: Any) -> str:
    """Name carried by an IDENT token child (variable, assign, vardecl, ...)."""
    if is_token(node) and node.type == 'IDENT':
        return str(node.value)

    raise ValueError(f"Expected identifier token, got {node!r}")
