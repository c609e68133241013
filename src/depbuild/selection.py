# selection.py
from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Set

from .model import Target

ALL = "all"
MATCH_EXACT = "exact"
MATCH_SUBSTRING = "substring"

_SEPARATORS = re.compile(r"[\s,]+")


def tokenize(specifier: str) -> List[str]:
    """Split a `--build` value like "protobuf, zlib" into lower-case names."""
    return [t for t in _SEPARATORS.split(specifier.strip().lower()) if t]


def expand_specifier(specifier: str, known: Iterable[str], *, mode: str = MATCH_EXACT) -> str:
    """
    Append every known name when the specifier asks for "all".

    In substring mode "all" may appear anywhere ("all-libs" counts), and the
    appended names keep it selecting everything there too.
    """
    if mode == MATCH_SUBSTRING:
        wants_all = ALL in specifier.lower()
    else:
        wants_all = ALL in tokenize(specifier)
    if wants_all:
        return " ".join([specifier, *known])
    return specifier


def is_selected(name: str, specifier: str, *, mode: str = MATCH_EXACT) -> bool:
    """
    Decide whether one target name is part of an (already expanded) specifier.

    mode="exact":     name must be one of the tokens.
    mode="substring": name must appear anywhere in the specifier, so
                      "protobuf-extra" also selects "protobuf".
    """
    name = name.lower()
    if mode == MATCH_SUBSTRING:
        return name in specifier.lower()
    if mode == MATCH_EXACT:
        return name in set(tokenize(specifier))
    raise ValueError(f"Unknown match mode: {mode!r}")


def select_targets(
    targets: Sequence[Target],
    specifier: str,
    *,
    mode: str = MATCH_EXACT,
) -> Set[str]:
    """Return the names of the targets selected by `specifier`, case-insensitively."""
    expanded = expand_specifier(specifier, [t.name for t in targets], mode=mode)
    return {t.name for t in targets if is_selected(t.name, expanded, mode=mode)}


def unknown_names(targets: Sequence[Target], specifier: str) -> List[str]:
    """Tokens that name no known target (ignoring "all")."""
    known = {t.name.lower() for t in targets}
    return [tok for tok in tokenize(specifier) if tok != ALL and tok not in known]
