from dataclasses import dataclass
from enum import Enum

from .item import normalize_for_search

NEGATION = "-"
SEPARATOR = ":"
QUOTE = '"'


class TokenizerState(Enum):
    """States of the query tokenizer.

    START and BOUNDARY behave the same; START only marks that nothing has been read yet.

    Transitions:
        START/BOUNDARY --'"'--> QUOTED
        START/BOUNDARY --'-' or ':'--> BOUNDARY (the character is a token of its own)
        START/BOUNDARY --other non-space--> BAREWORD
        BAREWORD --space--> BOUNDARY (emit the word)
        BAREWORD --':'--> BOUNDARY (emit the word, then ':')
        QUOTED --'"'--> BOUNDARY (emit the quoted text)
    """

    START = "start"
    BAREWORD = "bareword"
    QUOTED = "quoted"
    BOUNDARY = "boundary"


@dataclass(frozen=True)
class Clause:
    """One condition of a search query.

    Attributes:
        keyword: Field to search ("artist", "year", ...), or "" for any field.
        term: Substring the field must contain.
        negated: If True, the field must not contain the term.
    """

    keyword: str
    term: str
    negated: bool = False


def tokenize(query: str) -> list[str]:
    """Splits a raw query into words, quoted phrases and the `-` and `:` operators.

    Never fails: an unterminated quote runs to the end of the input and stray operators
    simply become tokens.

    Args:
        query: The raw query string.

    Returns:
        list[str]: The tokens in input order.
    """
    state = TokenizerState.START
    tokens: list[str] = []
    current: list[str] = []

    def flush() -> None:
        if current:
            tokens.append("".join(current))
            current.clear()

    for char in query:
        if state is TokenizerState.BAREWORD:
            if char.isspace():
                flush()
                state = TokenizerState.BOUNDARY
            elif char == SEPARATOR:
                flush()
                tokens.append(char)
                state = TokenizerState.BOUNDARY
            else:
                current.append(char)
        elif state is TokenizerState.QUOTED:
            if char == QUOTE:
                flush()
                state = TokenizerState.BOUNDARY
            else:
                current.append(char)
        else:
            if char == QUOTE:
                state = TokenizerState.QUOTED
            elif char in (NEGATION, SEPARATOR):
                tokens.append(char)
                state = TokenizerState.BOUNDARY
            elif not char.isspace():
                current.append(char)
                state = TokenizerState.BAREWORD

    flush()
    return tokens


def reconstruct_clauses(tokens: list[str]) -> list[Clause]:
    """Groups tokens into clauses, preserving their order.

    Recognised shapes, consumed from the front:

        - term          -> Clause("", term, negated=True)
        kw : term       -> Clause(kw, term)
        kw : - term     -> Clause(kw, term, negated=True)
        term            -> Clause("", term)

    A trailing `-`, a stray leading `:` and a keyword with nothing after its `:` carry no
    meaning and are dropped or downgraded to a plain term; no token sequence is rejected.

    Args:
        tokens: Output of `tokenize`.

    Returns:
        list[Clause]: The clauses, implicitly ANDed.
    """
    clauses: list[Clause] = []
    i = 0
    while i < len(tokens):
        first = tokens[i]
        remaining = len(tokens) - i

        if first == NEGATION:
            if remaining == 1:
                break
            clauses.append(Clause("", tokens[i + 1], True))
            i += 2
        elif first == SEPARATOR:
            i += 1
        elif remaining > 1 and tokens[i + 1] == SEPARATOR:
            if remaining > 3 and tokens[i + 2] == NEGATION:
                clauses.append(Clause(first, tokens[i + 3], True))
                i += 4
            elif remaining > 2 and tokens[i + 2] != NEGATION:
                clauses.append(Clause(first, tokens[i + 2], False))
                i += 3
            else:
                # "kw:" or "kw: -" at the very end
                clauses.append(Clause("", first, False))
                break
        else:
            clauses.append(Clause("", first, False))
            i += 1

    return clauses


def parse_query(query: str) -> list[Clause]:
    """Turns a raw query into normalized clauses ready for matching.

    The query is case-folded and stripped of diacritics first, so keywords and terms
    compare against the normalized catalog fields.

    Args:
        query: The raw query string.

    Returns:
        list[Clause]: The clauses; empty for a blank query.
    """
    return reconstruct_clauses(tokenize(normalize_for_search(query).strip()))
