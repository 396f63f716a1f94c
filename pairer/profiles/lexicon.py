"""
Lexicon of recognized preceptor category phrases.

Preceptors describe their practice in free text ("FP", "Pedi/FP",
"Rural/Care of the Underserved", ...) and their region as a term optionally
followed by a percentage of pediatric patients ("Urban 10-20%"). This module
maps the recognized phrases onto attribute mask entries.

Single categories receive full weight. Compound categories split the weight
evenly between their parts, since the text does not say which dominates.
The underserved phrase carries full weight on "underserved" and 0.75 on
"rural" when rural is also named.

Matching is case-insensitive; whitespace is collapsed and spaces around
"/" are dropped before lookup.
"""

import re
from typing import Dict, Optional, Tuple

# (attribute group, attribute name, weight)
MaskEntry = Tuple[str, str, float]

UNDERSERVED_TERM = "underserved"
UNDERSERVED_RURAL_WEIGHT = 0.75

PRACTICE_TYPE_LEXICON: Dict[str, Tuple[MaskEntry, ...]] = {
    "fp": (("practice", "family_practice", 1.0),),
    "family practice": (("practice", "family_practice", 1.0),),
    "family medicine": (("practice", "family_practice", 1.0),),
    "internist": (("practice", "internal_medicine", 1.0),),
    "internal medicine": (("practice", "internal_medicine", 1.0),),
    "im": (("practice", "internal_medicine", 1.0),),
    "pedi": (("practice", "pediatrics", 1.0),),
    "peds": (("practice", "pediatrics", 1.0),),
    "pediatrics": (("practice", "pediatrics", 1.0),),
    "pediatrician": (("practice", "pediatrics", 1.0),),
    "geriatrician": (("practice", "geriatrics", 1.0),),
    "geriatrics": (("practice", "geriatrics", 1.0),),
    "fp/internist": (("practice", "family_practice", 0.5), ("practice", "internal_medicine", 0.5)),
    "internist/fp": (("practice", "family_practice", 0.5), ("practice", "internal_medicine", 0.5)),
    "pedi/fp": (("practice", "pediatrics", 0.5), ("practice", "family_practice", 0.5)),
    "fp/pedi": (("practice", "pediatrics", 0.5), ("practice", "family_practice", 0.5)),
    "peds/fp": (("practice", "pediatrics", 0.5), ("practice", "family_practice", 0.5)),
    "internist/geriatrician": (("practice", "internal_medicine", 0.5), ("practice", "geriatrics", 0.5)),
    # Misspelling present in the survey export
    "interist/geriatrician": (("practice", "internal_medicine", 0.5), ("practice", "geriatrics", 0.5)),
}

REGION_LEXICON: Dict[str, Tuple[MaskEntry, ...]] = {
    "urban": (("setting", "urban", 1.0),),
    "suburban": (("setting", "suburban", 1.0),),
    "rural": (("setting", "rural", 1.0),),
    "underserved": (("setting", "underserved", 1.0),),
    "suburban/urban": (("setting", "suburban", 0.5), ("setting", "urban", 0.5)),
    "urban/suburban": (("setting", "suburban", 0.5), ("setting", "urban", 0.5)),
}


def normalize_category(text: str) -> str:
    """Lower-case, collapse whitespace and drop spaces around slashes."""
    collapsed = " ".join(text.lower().split())
    return re.sub(r"\s*/\s*", "/", collapsed)


def lookup_practice_type(text: str) -> Optional[Tuple[MaskEntry, ...]]:
    """
    Map practice-type text onto mask entries.

    Args:
        text: Practice type as written by the preceptor

    Returns:
        Tuple of mask entries, empty for blank text, or None when the text
        is not in the lexicon
    """
    normalized = normalize_category(text)
    if not normalized:
        return ()

    # "Rural/Care of the Underserved" and its variants describe a setting,
    # not a practice type.
    if UNDERSERVED_TERM in normalized:
        entries = [("setting", "underserved", 1.0)]
        if "rural" in normalized:
            entries.append(("setting", "rural", UNDERSERVED_RURAL_WEIGHT))
        return tuple(entries)

    return PRACTICE_TYPE_LEXICON.get(normalized)


def lookup_region(term: str) -> Optional[Tuple[MaskEntry, ...]]:
    """Map a region term onto mask entries (empty for blank, None if unknown)."""
    normalized = normalize_category(term)
    if not normalized:
        return ()
    return REGION_LEXICON.get(normalized)
