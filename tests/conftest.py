"""Shared fixtures: raw record builders and directly constructed profiles.

Record builders produce ';'-delimited lines in the default survey layouts.
Profile factories build Seeker/Host objects without going through the
parsers, using a single three-attribute "practice" group so small
scenarios stay readable.
"""
from pathlib import Path
from typing import Dict, Sequence

import pytest

from pairer.profiles.schema import Host, Seeker
from pairer.scoring import CompatibilityScorer, ScoringWeights


STUDENT_HEADER = (
    "Last;First;Gender;Pediatrics;Family Practice;Internist;Geriatrics;"
    "Rural;Suburban;Urban;Underserved;Languages;Home;Comments;Pre-match"
)
PRECEPTOR_HEADER = (
    "Last;First;Practice Type;Location;Region;Gender Preference;Languages;"
    "Preferred Day;Secondary Day;Comments;Pre-match"
)


def build_student_record(
    last="Doe", first="Jane", gender="F",
    practice=(1, 2, 3, 4), setting=(1, 2, 3, 4),
    language="N", home="Springfield", comments="", pre_match=""
) -> str:
    return ";".join([
        last, first, gender,
        *[str(r) for r in practice],
        *[str(r) for r in setting],
        language, home, comments, pre_match,
    ])


def build_preceptor_record(
    last="Smith", first="Alex", practice_type="FP", location="Main St Clinic",
    region="Urban", gender_preference="None", language="N",
    preferred_day="Monday", secondary_day="Tuesday", comments="", pre_match=""
) -> str:
    return ";".join([
        last, first, practice_type, location, region, gender_preference,
        language, preferred_day, secondary_day, comments, pre_match,
    ])


@pytest.fixture
def student_record():
    return build_student_record


@pytest.fixture
def preceptor_record():
    return build_preceptor_record


@pytest.fixture
def write_exports(tmp_path: Path):
    """Write student and preceptor exports (with headers) and return their paths."""
    def _write(students: Sequence[str], preceptors: Sequence[str]):
        students_path = tmp_path / "students.csv"
        preceptors_path = tmp_path / "preceptors.csv"
        students_path.write_text("\n".join([STUDENT_HEADER, *students]) + "\n", encoding="utf-8")
        preceptors_path.write_text("\n".join([PRECEPTOR_HEADER, *preceptors]) + "\n", encoding="utf-8")
        return students_path, preceptors_path
    return _write


@pytest.fixture
def make_seeker():
    def _make(last="Doe", first="Jane", ranks=(1, 2, 3), is_female=True,
              speaks_language=False, pre_match=None, problems=()) -> Seeker:
        rank_map: Dict[str, tuple] = {} if problems else {"practice": tuple(ranks)}
        return Seeker(
            last_name=last,
            first_name=first,
            pre_match=pre_match,
            problems=tuple(problems),
            is_female=is_female,
            speaks_language=speaks_language,
            ranks=rank_map,
        )
    return _make


@pytest.fixture
def make_host():
    def _make(last="Smith", first="Alex", mask=(1.0, 0.0, 0.0), gender_preference=None,
              requires_language=False, pre_match=None, problems=(), location="Clinic") -> Host:
        return Host(
            last_name=last,
            first_name=first,
            pre_match=pre_match,
            problems=tuple(problems),
            gender_preference=gender_preference,
            requires_language=requires_language,
            masks={"practice": tuple(mask)},
            practice_type="FP",
            location=location,
            preferred_day="Monday",
        )
    return _make


@pytest.fixture
def practice_scorer() -> CompatibilityScorer:
    """Scorer over the single 'practice' group used by the profile factories."""
    return CompatibilityScorer(ScoringWeights(attributes={"practice": 0.7}, gender=0.15, language=0.15))
