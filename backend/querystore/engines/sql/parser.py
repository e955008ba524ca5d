"""
Placeholder tokenizer and parameter extraction for SQL templates.

Two placeholder syntaxes:

- ``:name``  value placeholder, bound by the driver;
- ``:name:`` identifier placeholder, replaced verbatim with a caller string.

A placeholder must not be preceded by ``:``, a word character or a
backslash, so ``col::text`` casts, ``12:30`` inside literals and ``\\:x``
escapes stay literal text. ``:name::type`` is neither form and is rejected
when a template is saved; write ``CAST(:name AS type)`` instead.

Tokenized templates are cached in an LRU dict keyed by a hash of the
source, shared with the materializer.
"""

from __future__ import annotations

import hashlib
import re
import threading
from collections import OrderedDict
from typing import NamedTuple

_PLACEHOLDER = re.compile(r"(?<![:\w\\]):(?P<name>\w+)\b(?P<close>:)?(?!:)")
_PLACEHOLDER_CAST = re.compile(r"(?<![:\w\\]):(?P<name>\w+)::")

LITERAL = "literal"
VALUE = "value"
IDENTIFIER = "identifier"

_CACHE_MAX_SIZE = 512
_token_cache: OrderedDict[str, tuple[Token, ...]] = OrderedDict()
_cache_lock = threading.Lock()


class Token(NamedTuple):
    kind: str  # LITERAL | VALUE | IDENTIFIER
    text: str  # source text of the token
    name: str | None = None


class ExtractedParameters(NamedTuple):
    values: list[str]
    identifiers: list[str]


def _tokenize(text: str) -> tuple[Token, ...]:
    tokens: list[Token] = []
    pos = 0
    for m in _PLACEHOLDER.finditer(text):
        if m.start() > pos:
            tokens.append(Token(LITERAL, text[pos : m.start()]))
        kind = IDENTIFIER if m.group("close") else VALUE
        tokens.append(Token(kind, m.group(0), m.group("name")))
        pos = m.end()
    if pos < len(text):
        tokens.append(Token(LITERAL, text[pos:]))
    return tuple(tokens)


def tokenize(text: str) -> tuple[Token, ...]:
    """Split *text* into literal, value and identifier tokens (cached)."""
    key = hashlib.md5(text.encode(), usedforsecurity=False).hexdigest()
    with _cache_lock:
        tokens = _token_cache.get(key)
        if tokens is not None:
            _token_cache.move_to_end(key)
            return tokens
    tokens = _tokenize(text)
    with _cache_lock:
        _token_cache[key] = tokens
        if len(_token_cache) > _CACHE_MAX_SIZE:
            _token_cache.popitem(last=False)
    return tokens


def extract_parameters(text: str) -> ExtractedParameters:
    """
    Return distinct value and identifier placeholder names in first-occurrence order.

    The two lists are disjoint unless the same name is used in both forms,
    which save-time validation rejects.
    """
    values: dict[str, None] = {}
    identifiers: dict[str, None] = {}
    for tok in tokenize(text):
        if tok.kind == VALUE:
            values.setdefault(tok.name)
        elif tok.kind == IDENTIFIER:
            identifiers.setdefault(tok.name)
    return ExtractedParameters(list(values), list(identifiers))


def find_placeholder_casts(text: str) -> list[str]:
    """Distinct names written as ``:name::type``, in first-occurrence order."""
    return list(dict.fromkeys(m.group("name") for m in _PLACEHOLDER_CAST.finditer(text)))
