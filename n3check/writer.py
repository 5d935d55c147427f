# =====================================================================================
# Pretty printing as N3
# =====================================================================================

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from .parser import PrefixEnv
from .terms import (
    Blank,
    Formula,
    Iri,
    ListTerm,
    Literal,
    Term,
    Triple,
    Var,
    is_log_implies,
    is_rdf_type_pred,
)


def _sorted(triples: Iterable[Triple], pref: PrefixEnv) -> List[Triple]:
    # Formulas are sets; print them in a stable order.
    return sorted(triples, key=lambda tr: triple_to_n3(tr, pref))


def term_to_n3(t: Term, pref: PrefixEnv, indent: str = "") -> str:
    if isinstance(t, Iri):
        q = pref.shrink_iri(t.value)
        if q is not None:
            return q
        return f"<{t.value}>"

    if isinstance(t, Literal):
        return t.value

    if isinstance(t, Var):
        return f"?{t.name}"

    if isinstance(t, Blank):
        return t.label

    if isinstance(t, ListTerm):
        inside = [term_to_n3(e, pref, indent) for e in t.elems]
        return "(" + " ".join(inside) + ")"

    if isinstance(t, Formula):
        if not t:
            return "{}"
        inner = indent + "    "
        s = "{\n"
        for tr in _sorted(t.triples, pref):
            s += inner + triple_to_n3(tr, pref, inner) + "\n"
        s += indent + "}"
        return s

    return repr(t)


def triple_to_n3(tr: Triple, prefixes: PrefixEnv, indent: str = "") -> str:
    # Pretty-print rule triples { ... } log:implies { ... } as { ... } => { ... } .
    if is_log_implies(tr.p) and isinstance(tr.s, Formula) and isinstance(tr.o, Formula):
        prem_s = term_to_n3(tr.s, prefixes, indent)
        concl_s = term_to_n3(tr.o, prefixes, indent)
        return f"{prem_s} => {concl_s} ."

    s = term_to_n3(tr.s, prefixes, indent)
    p = "a" if is_rdf_type_pred(tr.p) else term_to_n3(tr.p, prefixes, indent)
    o = term_to_n3(tr.o, prefixes, indent)
    return f"{s} {p} {o} ."


def prefixes_used(triples: Iterable[Triple], prefixes: PrefixEnv) -> List[str]:
    """Prefixes needed to print `triples`, sorted."""
    used: Set[str] = set()

    def visit(t: Term) -> None:
        if isinstance(t, Iri):
            q = prefixes.shrink_iri(t.value)
            if q is not None:
                used.add(q.split(":", 1)[0])
        elif isinstance(t, ListTerm):
            for e in t.elems:
                visit(e)
        elif isinstance(t, Formula):
            for inner in t.triples:
                for x in inner:
                    visit(x)

    for tr in triples:
        visit(tr.s)
        if not is_rdf_type_pred(tr.p):
            visit(tr.p)
        visit(tr.o)
    return sorted(used)


def formula_to_n3(f: Formula, prefixes: Optional[PrefixEnv] = None) -> str:
    """
    Render a formula as a standalone N3 document: the prefixes it needs,
    then one statement per line.
    """
    pref = prefixes if prefixes is not None else PrefixEnv.new_default()
    lines = []
    for p in prefixes_used(f.triples, pref):
        lines.append(f"@prefix {p}: <{pref.map[p]}> .")
    if lines:
        lines.append("")
    for tr in _sorted(f.triples, pref):
        lines.append(triple_to_n3(tr, pref))
    return "\n".join(lines) + "\n"
