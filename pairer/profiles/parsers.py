"""
Record parsing and validation for students and preceptors.

Each input record is one ';'-delimited line. A record with fewer fields
than its layout requires is a structural error and aborts the run. Every
other problem is local to the record: the offending field yields an
``Insufficient`` outcome, the reason is stored on the profile, a warning is
logged, and parsing moves on. Such a profile is left out of the
optimization pool unless a pre-match directive binds it directly.

Field rules:
- Gender: case-insensitive match against small synonym sets
- Gender preference: blank is insufficient; "none"-like text means no preference
- Language flags: y/yes or n/no
- Ranks: integers in [1, N] forming a permutation of 1..N
- Practice type / region: looked up in the category lexicon; unknown text
  adds a warning and contributes nothing to the mask
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..exceptions import RecordFormatError
from .lexicon import MaskEntry, lookup_practice_type, lookup_region, normalize_category
from .schema import (
    ATTRIBUTE_GROUPS,
    Host,
    Insufficient,
    Ok,
    Outcome,
    PreceptorLayout,
    Seeker,
    StudentLayout,
)

logger = logging.getLogger(__name__)


MALE_TEXTS = frozenset({"m", "male", "man", "men"})
FEMALE_TEXTS = frozenset({"f", "female", "woman", "women"})
YES_TEXTS = frozenset({"y", "yes"})
NO_TEXTS = frozenset({"n", "no"})
NO_PREFERENCE_TEXTS = frozenset({
    "none", "no preference", "no pref", "no", "either", "any", "n/a",
})

# Words that signal indifference inside longer text ("either gender", "doesn't matter")
NO_PREFERENCE_TOKENS = frozenset({
    "none", "either", "any", "pref", "preference", "matter",
})

# "30%", "10-20%", "10 - 20 %"
PERCENTAGE_PATTERN = re.compile(r"^(\d+)(?:\s*-\s*(\d+))?\s*%$")

RECORD_DELIMITER = ";"


def parse_gender(text: str) -> Outcome:
    """
    Parse a student's gender.

    Args:
        text: Gender as written (e.g. "F", "male", "Woman")

    Returns:
        Ok(True) for female, Ok(False) for male, Insufficient otherwise
    """
    lowered = text.strip().lower()
    if lowered in FEMALE_TEXTS:
        return Ok(True)
    if lowered in MALE_TEXTS:
        return Ok(False)
    return Insufficient(f"Unable to parse gender: {text!r}")


def parse_gender_preference(text: str) -> Outcome:
    """
    Parse a preceptor's gender preference.

    Text naming both genders ("male or female") or an indifference word
    ("either gender", "doesn't matter") carries no effective preference.

    Args:
        text: Preference as written (e.g. "None", "female", "prefers men")

    Returns:
        Ok(None) for no preference, Ok(True) for female, Ok(False) for male,
        Insufficient for blank or unrecognized text
    """
    lowered = " ".join(text.lower().split())
    if not lowered:
        return Insufficient("Gender preference field is blank")
    if lowered in NO_PREFERENCE_TEXTS:
        return Ok(None)

    tokens = set(re.findall(r"[a-z]+", lowered))
    wants_female = bool(tokens & FEMALE_TEXTS)
    wants_male = bool(tokens & MALE_TEXTS)
    if wants_female and wants_male:
        return Ok(None)
    if wants_female:
        return Ok(True)
    if wants_male:
        return Ok(False)
    if tokens & NO_PREFERENCE_TOKENS:
        return Ok(None)
    return Insufficient(f"Preference expected, but no identifiable gender expressed: {text!r}")


def parse_language_flag(text: str, label: str = "language") -> Outcome:
    """Parse a y/yes or n/no flag."""
    lowered = text.strip().lower()
    if lowered in YES_TEXTS:
        return Ok(True)
    if lowered in NO_TEXTS:
        return Ok(False)
    return Insufficient(f"Expected yes/no for {label}, got {text!r}")


def parse_ranks(texts: Sequence[str]) -> Outcome:
    """
    Parse and validate a rank vector.

    Every value must be an integer in [1, N] and the values together must
    be exactly the permutation 1..N.

    Args:
        texts: One rank per attribute, in attribute order

    Returns:
        Ok(tuple of ranks) or Insufficient describing the first problem
    """
    n = len(texts)
    ranks: List[int] = []
    for position, text in enumerate(texts):
        try:
            value = int(text)
        except ValueError:
            return Insufficient(f"Couldn't parse rank value {text!r} at position {position}")
        if not 1 <= value <= n:
            return Insufficient(f"Rank {value} at position {position} is outside 1..{n}")
        ranks.append(value)

    if sorted(ranks) != list(range(1, n + 1)):
        duplicates = sorted({r for r in ranks if ranks.count(r) > 1})
        missing = sorted(set(range(1, n + 1)) - set(ranks))
        return Insufficient(
            f"Ranks {ranks} are not a permutation of 1..{n} "
            f"(duplicates: {duplicates}, missing: {missing})"
        )

    return Ok(tuple(ranks))


def parse_pre_match(text: str) -> Optional[str]:
    """Return the named counterpart, or None when the field is empty."""
    stripped = text.strip()
    return stripped or None


def parse_practice_types(text: str) -> Outcome:
    """
    Map practice-type text onto mask entries.

    Returns:
        Ok(entries), with no entries for blank text, or Insufficient when
        the text is not in the lexicon
    """
    entries = lookup_practice_type(text)
    if entries is None:
        return Insufficient(f"Unrecognized practice type: {text!r}")
    return Ok(entries)


def parse_region(text: str) -> Tuple[Outcome, Outcome]:
    """
    Split a region field into its region term and percentage pediatrics.

    The field looks like "Urban", "Suburban/Urban 30%" or "Rural 10-20%".
    A percentage range is averaged.

    Args:
        text: Practice region field as written

    Returns:
        Tuple of (region outcome with mask entries,
        percentage outcome with a fraction in [0, 1] or None if absent)
    """
    normalized = normalize_category(text)
    if not normalized:
        return Ok(()), Ok(None)

    parts = normalized.split(" ", 1)
    term = parts[0]
    remainder = parts[1].strip() if len(parts) > 1 else ""

    entries = lookup_region(term)
    if entries is None:
        region_outcome: Outcome = Insufficient(f"Unrecognized practice region: {term!r}")
    else:
        region_outcome = Ok(entries)

    if not remainder:
        return region_outcome, Ok(None)

    match = PERCENTAGE_PATTERN.match(remainder)
    if not match:
        return region_outcome, Insufficient(f"Unable to parse percentage pediatrics: {remainder!r}")

    low = int(match.group(1))
    high = int(match.group(2)) if match.group(2) is not None else low
    percentage = (low + high) / 2
    if not 0 <= percentage <= 100:
        return region_outcome, Insufficient(f"Percentage pediatrics out of range: {remainder!r}")

    return region_outcome, Ok(percentage / 100.0)


def build_masks(
    entries: Iterable[MaskEntry],
    pediatrics_fraction: Optional[float] = None
) -> Dict[str, Tuple[float, ...]]:
    """
    Assemble per-group masks from lexicon entries.

    An attribute named more than once keeps its largest weight. A
    percentage of pediatric patients raises the pediatrics weight to at
    least that fraction.

    Args:
        entries: Mask entries from the practice-type and region lookups
        pediatrics_fraction: Share of pediatric patients, if stated

    Returns:
        Attribute group -> mask tuple aligned with ATTRIBUTE_GROUPS
    """
    masks = {group: [0.0] * len(attributes) for group, attributes in ATTRIBUTE_GROUPS.items()}

    for group, attribute, weight in entries:
        index = ATTRIBUTE_GROUPS[group].index(attribute)
        masks[group][index] = max(masks[group][index], weight)

    if pediatrics_fraction is not None:
        index = ATTRIBUTE_GROUPS["practice"].index("pediatrics")
        masks["practice"][index] = max(masks["practice"][index], pediatrics_fraction)

    return {group: tuple(values) for group, values in masks.items()}


def split_record(record: str, min_fields: int, kind: str) -> List[str]:
    """
    Split a record on ';' and strip every field.

    Raises:
        RecordFormatError: If the record has fewer than min_fields fields
    """
    fields = [f.strip() for f in record.rstrip("\r\n").split(RECORD_DELIMITER)]
    if len(fields) < min_fields:
        raise RecordFormatError(
            f"{kind} record has {len(fields)} fields, at least {min_fields} required",
            context=record.strip(),
        )
    return fields


def _take(outcome: Outcome, problems: List[str]):
    """Return the parsed value, or record the reason and return None."""
    if isinstance(outcome, Insufficient):
        problems.append(outcome.reason)
        return None
    return outcome.value


def parse_student_record(record: str, layout: Optional[StudentLayout] = None) -> Seeker:
    """
    Build a Seeker from one student record.

    Args:
        record: Raw ';'-delimited record
        layout: Field positions (defaults to the survey export layout)

    Returns:
        Seeker; not pairable if any field failed validation

    Raises:
        RecordFormatError: If the record is too short
    """
    layout = layout or StudentLayout()
    fields = split_record(record, layout.min_fields, "Student")

    problems: List[str] = []
    is_female = _take(parse_gender(fields[layout.gender]), problems)
    speaks_language = _take(parse_language_flag(fields[layout.language]), problems)

    ranks: Dict[str, Tuple[int, ...]] = {}
    for group, positions in layout.rank_fields().items():
        outcome = parse_ranks([fields[p] for p in positions])
        if isinstance(outcome, Insufficient):
            problems.append(f"{group} ranks: {outcome.reason}")
        else:
            ranks[group] = outcome.value

    seeker = Seeker(
        last_name=fields[layout.last_name],
        first_name=fields[layout.first_name],
        pre_match=parse_pre_match(fields[layout.pre_match]),
        problems=tuple(problems),
        is_female=is_female,
        speaks_language=speaks_language,
        ranks=ranks,
        home=fields[layout.home],
        comments=fields[layout.comments],
    )

    if problems:
        logger.warning(
            f"Unable to read complete profile from record for student {seeker.name}: "
            + "; ".join(problems)
        )
    return seeker


def parse_preceptor_record(record: str, layout: Optional[PreceptorLayout] = None) -> Host:
    """
    Build a Host from one preceptor record.

    Unrecognized practice types, regions or percentages become warnings on
    the profile and leave the corresponding mask entries at zero.

    Args:
        record: Raw ';'-delimited record
        layout: Field positions (defaults to the survey export layout)

    Returns:
        Host; not pairable if the gender preference or language field failed

    Raises:
        RecordFormatError: If the record is too short
    """
    layout = layout or PreceptorLayout()
    fields = split_record(record, layout.min_fields, "Preceptor")

    problems: List[str] = []
    notes: List[str] = []

    gender_preference = _take(parse_gender_preference(fields[layout.gender_preference]), problems)
    requires_language = _take(
        parse_language_flag(fields[layout.language], label="language requirement"), problems
    )

    entries: List[MaskEntry] = []
    practice_outcome = parse_practice_types(fields[layout.practice_types])
    if isinstance(practice_outcome, Insufficient):
        notes.append(practice_outcome.reason)
    else:
        entries.extend(practice_outcome.value)

    region_outcome, percentage_outcome = parse_region(fields[layout.region])
    if isinstance(region_outcome, Insufficient):
        notes.append(region_outcome.reason)
    else:
        entries.extend(region_outcome.value)

    pediatrics_fraction = None
    if isinstance(percentage_outcome, Insufficient):
        notes.append(percentage_outcome.reason)
    else:
        pediatrics_fraction = percentage_outcome.value

    host = Host(
        last_name=fields[layout.last_name],
        first_name=fields[layout.first_name],
        pre_match=parse_pre_match(fields[layout.pre_match]),
        problems=tuple(problems),
        warnings=tuple(notes),
        gender_preference=gender_preference,
        requires_language=requires_language,
        masks=build_masks(entries, pediatrics_fraction),
        practice_type=fields[layout.practice_types],
        location=fields[layout.location],
        region=fields[layout.region],
        preferred_day=fields[layout.preferred_day],
        secondary_day=fields[layout.secondary_day],
        comments=fields[layout.comments],
    )

    for note in notes:
        logger.warning(f"Preceptor {host.name}: {note}")
    if problems:
        logger.warning(
            f"Unable to read complete profile from record for preceptor {host.name}: "
            + "; ".join(problems)
        )
    return host


def parse_student_records(
    records: Iterable[str],
    layout: Optional[StudentLayout] = None
) -> List[Seeker]:
    """Parse every student record, in input order."""
    seekers = [parse_student_record(record, layout) for record in records]
    pairable = sum(1 for s in seekers if s.pairable)
    logger.info(f"Parsed {len(seekers)} student records ({pairable} pairable)")
    return seekers


def parse_preceptor_records(
    records: Iterable[str],
    layout: Optional[PreceptorLayout] = None
) -> List[Host]:
    """Parse every preceptor record, in input order."""
    hosts = [parse_preceptor_record(record, layout) for record in records]
    pairable = sum(1 for h in hosts if h.pairable)
    logger.info(f"Parsed {len(hosts)} preceptor records ({pairable} pairable)")
    return hosts
