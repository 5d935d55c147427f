# =====================================================================================
# Notation3 loader
# =====================================================================================
#
# Turns the text of a proof document into a Graph:
#
#   1) Lex the text into Tokens.
#   2) Parse tokens into triples. Quoted formulas `{ ... }` become Formula terms,
#      and rules `{A} => {B}` / `{B} <= {A}` become `{A} log:implies {B}`
#      statements, both at top level and inside formulas.
#   3) Index the triples in a Graph for the checker.
#
# This is a pragmatic subset of N3, enough for the proofs that reasoners such as
# EYE and cwm emit. It is not a full W3C N3 parser: no @forAll/@forSome, no paths,
# no SPARQL-style PREFIX.

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from .errors import N3SyntaxError
from .graph import Graph
from .terms import (
    LIST_NS,
    LOG_IMPLIES,
    LOG_NS,
    MATH_NS,
    RDF_NS,
    RDF_TYPE,
    RDFS_NS,
    REASON_NS,
    STRING_NS,
    XSD_NS,
    Blank,
    Formula,
    Iri,
    ListTerm,
    Literal,
    Term,
    Triple,
    Var,
)


# =====================================================================================
# LEXER
# =====================================================================================

@dataclass
class Token:
    # Kind label ("Ident", "Literal", "Dot", ...), optional payload, and the
    # offset in the source text where the token starts.
    typ: str
    value: Optional[str] = None
    pos: int = 0

    def __repr__(self) -> str:
        if self.value is None:
            return f"Token({self.typ})"
        return f"Token({self.typ!r}, {self.value!r})"


PUNCTUATION = {
    "{": "LBrace",
    "}": "RBrace",
    "(": "LParen",
    ")": "RParen",
    "[": "LBracket",
    "]": "RBracket",
    ";": "Semicolon",
    ",": "Comma",
    ".": "Dot",
}

DIRECTIVES = {"prefix": "AtPrefix", "base": "AtBase"}


def is_name_char(c: str) -> bool:
    # Characters allowed in identifiers (QName-ish).
    return c.isalnum() or c in "_-:"


class Lexer:
    """
    Single pass over the document text.

    Whitespace and `#` comments only separate tokens. Literals keep their
    lexical form as written (quotes, escapes, language tag, digits), so two
    equal spellings always become equal terms.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.tokens: List[Token] = []

    def _at(self, offset: int = 0) -> str:
        j = self.pos + offset
        return self.text[j] if j < len(self.text) else ""

    def _emit(self, typ: str, value: Optional[str] = None, start: Optional[int] = None) -> None:
        self.tokens.append(Token(typ, value, self.pos if start is None else start))

    def _take_while(self, pred: Callable[[str], bool]) -> str:
        start = self.pos
        while self.pos < len(self.text) and pred(self.text[self.pos]):
            self.pos += 1
        return self.text[start : self.pos]

    @staticmethod
    def _error(message: str, offset: int) -> N3SyntaxError:
        return N3SyntaxError(message, {"offset": offset})

    def run(self) -> List[Token]:
        while self.pos < len(self.text):
            c = self.text[self.pos]
            start = self.pos

            if c.isspace():
                self.pos += 1
            elif c == "#":
                self._take_while(lambda ch: ch not in "\n\r")
            elif c == "=":
                if self._at(1) != ">":
                    raise self._error("Unexpected '='", start)
                self.pos += 2
                self._emit("OpImplies", start=start)
            elif c == "<":
                self._angle()
            elif c == "^":
                if self._at(1) != "^":
                    raise self._error("Unexpected '^' (did you mean ^^?)", start)
                self.pos += 2
                self._emit("HatHat", start=start)
            elif c in PUNCTUATION:
                self.pos += 1
                self._emit(PUNCTUATION[c], start=start)
            elif c == '"':
                self._string()
            elif c == "?":
                self.pos += 1
                self._emit("Var", self._take_while(is_name_char), start)
            elif c == "@":
                self._directive()
            elif c.isdigit() or (c == "-" and self._at(1).isdigit()):
                self._number()
            else:
                self._word()

        self._emit("EOF")
        return self.tokens

    def _angle(self) -> None:
        # `<=`, or an IRI reference `<...>`.
        start = self.pos
        if self._at(1) == "=":
            self.pos += 2
            self._emit("OpImpliedBy", start=start)
            return
        end = self.text.find(">", start + 1)
        if end < 0:
            raise self._error("Unterminated IRI <...>", start)
        self.pos = end + 1
        self._emit("IriRef", self.text[start + 1 : end], start)

    def _string(self) -> None:
        start = self.pos
        self.pos += 1
        out = ['"']
        while True:
            if self.pos >= len(self.text):
                raise self._error("Unterminated string literal", start)
            c = self.text[self.pos]
            self.pos += 1
            if c == '"':
                break
            if c == "\\":
                # Escapes are kept as written.
                out.append(c + self._at())
                self.pos += 1
                continue
            out.append(c)
        out.append('"')

        if self._at() == "@" and self._at(1).isalpha():
            self.pos += 1
            out.append("@" + self._take_while(lambda ch: ch.isalnum() or ch == "-"))
        self._emit("Literal", "".join(out), start)

    def _directive(self) -> None:
        start = self.pos
        self.pos += 1
        word = self._take_while(str.isalpha)
        kind = DIRECTIVES.get(word)
        if kind is None:
            raise self._error(f"Unknown directive @{word}", start + 1)
        self._emit(kind, start=start)

    def _number(self) -> None:
        # Integer or decimal with an optional leading '-'. A '.' belongs to the
        # number only when a digit follows; otherwise it ends the statement.
        start = self.pos
        self.pos += 1
        while self.pos < len(self.text):
            c = self.text[self.pos]
            if not (c.isdigit() or (c == "." and self._at(1).isdigit())):
                break
            self.pos += 1
        self._emit("Literal", self.text[start : self.pos], start)

    def _word(self) -> None:
        start = self.pos
        word = self._take_while(is_name_char)
        if not word:
            raise self._error(f"Unexpected char: {self.text[start]!r}", start)
        self._emit("Literal" if word in ("true", "false") else "Ident", word, start)


def lex(input_text: str) -> List[Token]:
    """Lex a whole document; raises N3SyntaxError with the offending offset."""
    return Lexer(input_text).run()


# =====================================================================================
# PREFIX ENVIRONMENT
# =====================================================================================

# Prefixes every document starts with, so that proofs can say `log:implies`
# or `r:gives` without declaring them. ":" is the document base.
DEFAULT_PREFIXES: Dict[str, str] = {
    "rdf": RDF_NS,
    "rdfs": RDFS_NS,
    "xsd": XSD_NS,
    "log": LOG_NS,
    "math": MATH_NS,
    "string": STRING_NS,
    "list": LIST_NS,
    "r": REASON_NS,
    "": "",
}


@dataclass
class PrefixEnv:
    # prefix (without the colon) -> namespace IRI
    map: Dict[str, str] = field(default_factory=dict)

    @staticmethod
    def new_default() -> "PrefixEnv":
        return PrefixEnv(dict(DEFAULT_PREFIXES))

    def set(self, pref: str, base: str) -> None:
        self.map[pref] = base

    def expand_qname(self, q: str) -> str:
        """`xsd:date` -> full IRI; unknown prefixes are returned unchanged."""
        pref, sep, local = q.partition(":")
        base = self.map.get(pref, "") if sep else ""
        return base + local if base else q

    def shrink_iri(self, iri: str) -> Optional[str]:
        """
        The QName for `iri` under the prefix giving the shortest local
        name, or None when no prefix fits.
        """
        candidates = []
        for pref, base in self.map.items():
            if not base or not iri.startswith(base):
                continue
            local = iri[len(base) :]
            if local and all(is_name_char(c) and c != ":" for c in local):
                candidates.append((len(local), pref, local))
        if not candidates:
            return None
        _n, pref, local = min(candidates)
        return f"{pref}:{local}"


# =====================================================================================
# PARSER
# =====================================================================================

class Parser:
    """
    Recursive-descent parser from tokens to triples.

    A blank node property list `[ :p :o ]` stands for a fresh blank node plus
    statements about it. Those statements wait in `pending` until the
    statement containing the brackets is finished, and they never leave the
    formula they were written in.
    """

    def __init__(self, tokens: List[Token]) -> None:
        self.toks = tokens
        self.pos = 0
        self.prefixes = PrefixEnv.new_default()
        self.blank_counter = 0
        self.pending: List[Triple] = []

    # ---------------------------------------------------------------------------------
    # Token access
    # ---------------------------------------------------------------------------------

    def peek(self) -> Token:
        return self.toks[self.pos]

    def next(self) -> Token:
        tok = self.toks[self.pos]
        if tok.typ != "EOF":
            self.pos += 1
        return tok

    def accept(self, typ: str) -> bool:
        """Consume the next token if it is of kind `typ`."""
        if self.peek().typ == typ:
            self.next()
            return True
        return False

    def expect(self, typ: str, what: str) -> Token:
        tok = self.next()
        if tok.typ != typ:
            raise self.error(f"Expected {what}, got {tok!r}", tok)
        return tok

    def error(self, message: str, tok: Optional[Token] = None) -> N3SyntaxError:
        at = tok if tok is not None else self.peek()
        return N3SyntaxError(message, {"offset": at.pos})

    def _iri_or_qname(self, what: str) -> str:
        tok = self.next()
        if tok.typ == "IriRef":
            return tok.value or ""
        if tok.typ == "Ident":
            return self.prefixes.expand_qname(tok.value or "")
        raise self.error(f"Expected {what}, got {tok!r}", tok)

    # ---------------------------------------------------------------------------------
    # Document and statements
    # ---------------------------------------------------------------------------------

    def parse_document(self) -> Tuple[PrefixEnv, List[Triple]]:
        """Parse a whole document into its prefixes and triples."""
        triples: List[Triple] = []
        while self.peek().typ != "EOF":
            if self.accept("AtPrefix"):
                self.parse_prefix_directive()
            elif self.accept("AtBase"):
                self.parse_base_directive()
            else:
                triples.extend(self.parse_statement())
                self.expect("Dot", "'.'")
        return self.prefixes, triples

    def parse_prefix_directive(self) -> None:
        # @prefix p: <iri> .
        name = self.expect("Ident", "prefix name").value or ""
        iri = self._iri_or_qname("IRI after @prefix")
        self.expect("Dot", "'.'")
        self.prefixes.set(name[:-1] if name.endswith(":") else name, iri)

    def parse_base_directive(self) -> None:
        # @base <iri> .
        iri = self._iri_or_qname("IRI after @base")
        self.expect("Dot", "'.'")
        self.prefixes.set("", iri)

    def parse_statement(self) -> List[Triple]:
        """
        One statement without its final dot: `subject predicateObjectList`,
        or a rule `{...} => {...}` / `{...} <= {...}`.
        """
        left = self.parse_term()
        if self.accept("OpImplies"):
            out = [Triple(left, LOG_IMPLIES, self.parse_term())]
        elif self.accept("OpImpliedBy"):
            # {head} <= {body} is {body} => {head}
            out = [Triple(self.parse_term(), LOG_IMPLIES, left)]
        else:
            out = self.parse_predicate_object_list(left)
        out.extend(self.pending)
        self.pending = []
        return out

    def parse_predicate_object_list(self, subject: Term) -> List[Triple]:
        return [Triple(subject, p, o) for p, o in self._property_pairs(("Dot", "RBrace", "EOF"))]

    def _property_pairs(self, closers: Tuple[str, ...]) -> List[Tuple[Term, Term]]:
        # `p1 o1, o2; p2 o3`, optionally ending in ';' right before a closer.
        pairs: List[Tuple[Term, Term]] = []
        while True:
            verb = self.parse_term()
            pairs.extend((verb, o) for o in self.parse_object_list())
            if not self.accept("Semicolon") or self.peek().typ in closers:
                return pairs

    def parse_object_list(self) -> List[Term]:
        objs = [self.parse_term()]
        while self.accept("Comma"):
            objs.append(self.parse_term())
        return objs

    # ---------------------------------------------------------------------------------
    # Terms
    # ---------------------------------------------------------------------------------

    def parse_term(self) -> Term:
        tok = self.next()
        value = tok.value or ""
        if tok.typ == "IriRef":
            return Iri(value)
        if tok.typ == "Ident":
            return self._name(value)
        if tok.typ == "Literal":
            if self.accept("HatHat"):
                value = f"{value}^^<{self._iri_or_qname('datatype after ^^')}>"
            return Literal(value)
        if tok.typ == "Var":
            return Var(value)
        if tok.typ == "LParen":
            return self.parse_list()
        if tok.typ == "LBracket":
            return self.parse_blank()
        if tok.typ == "LBrace":
            return self.parse_formula()
        raise self.error(f"Unexpected term token: {tok!r}", tok)

    def _name(self, name: str) -> Term:
        if name == "a":
            return RDF_TYPE
        if name.startswith("_:"):
            return Blank(name)
        # QNames expand against the prefix table; barewords stay as written.
        return Iri(self.prefixes.expand_qname(name))

    def parse_list(self) -> ListTerm:
        elems: List[Term] = []
        while not self.accept("RParen"):
            if self.peek().typ == "EOF":
                raise self.error("Unterminated list ( ...")
            elems.append(self.parse_term())
        return ListTerm(tuple(elems))

    def parse_blank(self) -> Blank:
        """`[]`, or `[ p o; ... ]` whose statements go to `pending`."""
        # "_:." is not a name the lexer accepts, so these never meet a written label.
        self.blank_counter += 1
        node = Blank(f"_:.b{self.blank_counter}")
        if self.accept("RBracket"):
            return node
        for p, o in self._property_pairs(("RBracket",)):
            self.pending.append(Triple(node, p, o))
        if not self.accept("RBracket"):
            raise self.error(
                f"Expected ']' at end of blank node property list, got {self.peek()!r}"
            )
        return node

    def parse_formula(self) -> Formula:
        """`{ ... }`; the dot after the last statement may be left out."""
        outer, self.pending = self.pending, []
        triples: List[Triple] = []
        while not self.accept("RBrace"):
            if self.peek().typ == "EOF":
                raise self.error("Unterminated formula { ...")
            triples.extend(self.parse_statement())
            if not self.accept("Dot") and self.peek().typ != "RBrace":
                raise self.error(f"Expected '.' or '}}', got {self.peek()!r}")
        self.pending = outer
        return Formula.of(triples)


# =====================================================================================
# Entry points
# =====================================================================================

def parse_document(text: str) -> Tuple[PrefixEnv, List[Triple]]:
    return Parser(lex(text)).parse_document()


def parse_n3(text: str) -> Graph:
    """Parse N3 text into an indexed Graph."""
    _prefixes, triples = parse_document(text)
    return Graph(triples)


def load_proof(path: Union[str, Path]) -> Tuple[PrefixEnv, Graph]:
    """Read a proof document from disk."""
    text = Path(path).read_text(encoding="utf-8")
    prefixes, triples = parse_document(text)
    return prefixes, Graph(triples)
