import pytest

from pairer.exceptions import RecordFormatError
from pairer.profiles import (
    Insufficient,
    Ok,
    StudentLayout,
    parse_preceptor_record,
    parse_student_record,
    parse_student_records,
)
from pairer.profiles.lexicon import lookup_practice_type, lookup_region
from pairer.profiles.parsers import (
    build_masks,
    parse_gender,
    parse_gender_preference,
    parse_language_flag,
    parse_ranks,
    parse_region,
)


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text,expected", [
    ("F", True), ("female", True), ("Woman", True),
    ("m", False), ("MALE", False), (" man ", False),
])
def test_parse_gender_synonyms(text, expected):
    assert parse_gender(text) == Ok(expected)


def test_parse_gender_unknown_is_insufficient():
    outcome = parse_gender("unsure")
    assert isinstance(outcome, Insufficient)
    assert "gender" in outcome.reason


@pytest.mark.parametrize("text,expected", [
    ("None", None),
    ("no preference", None),
    ("Either", None),
    ("Female", True),
    ("prefers women", True),
    ("Male", False),
    ("male or female", None),
    ("either gender", None),
    ("No pref.", None),
    ("doesn't matter", None),
])
def test_parse_gender_preference(text, expected):
    assert parse_gender_preference(text) == Ok(expected)


def test_parse_gender_preference_blank_and_unknown():
    assert isinstance(parse_gender_preference(""), Insufficient)
    assert isinstance(parse_gender_preference("   "), Insufficient)
    assert isinstance(parse_gender_preference("tall people"), Insufficient)


def test_parse_language_flag():
    assert parse_language_flag("Y") == Ok(True)
    assert parse_language_flag("no") == Ok(False)
    outcome = parse_language_flag("maybe", label="language requirement")
    assert isinstance(outcome, Insufficient)
    assert "language requirement" in outcome.reason


def test_parse_ranks_accepts_permutation():
    assert parse_ranks(["2", "1", "4", "3"]) == Ok((2, 1, 4, 3))


@pytest.mark.parametrize("texts", [
    ["1", "1", "2", "3"],      # duplicate
    ["1", "2", "3", "5"],      # out of range
    ["0", "1", "2", "3"],      # out of range
    ["1", "two", "3", "4"],    # not an integer
    ["", "1", "2", "3"],       # blank
])
def test_parse_ranks_rejects_non_permutations(texts):
    assert isinstance(parse_ranks(texts), Insufficient)


def test_parse_ranks_reports_duplicates_and_missing():
    outcome = parse_ranks(["1", "1", "3", "3"])
    assert "duplicates: [1, 3]" in outcome.reason
    assert "missing: [2, 4]" in outcome.reason


# ---------------------------------------------------------------------------
# Lexicon and masks
# ---------------------------------------------------------------------------

def test_lookup_practice_type_is_case_and_space_insensitive():
    assert lookup_practice_type("  Pedi / FP ") == lookup_practice_type("pedi/fp")
    assert lookup_practice_type("") == ()
    assert lookup_practice_type("Dermatology") is None


def test_underserved_phrase_maps_to_setting():
    entries = lookup_practice_type("Rural/Care of the Underserved")
    assert ("setting", "underserved", 1.0) in entries
    assert ("setting", "rural", 0.75) in entries

    urban_underserved = lookup_practice_type("Care of the underserved")
    assert urban_underserved == (("setting", "underserved", 1.0),)


def test_lookup_region_compound_splits_weight():
    assert set(lookup_region("Suburban/Urban")) == {
        ("setting", "suburban", 0.5), ("setting", "urban", 0.5)
    }
    assert lookup_region("Coastal") is None


def test_parse_region_with_percentage_range():
    region, percentage = parse_region("Urban 10-20%")
    assert region == Ok((("setting", "urban", 1.0),))
    assert percentage == Ok(pytest.approx(0.15))


def test_parse_region_without_percentage():
    region, percentage = parse_region("Rural")
    assert isinstance(region, Ok)
    assert percentage == Ok(None)


def test_parse_region_bad_percentage():
    region, percentage = parse_region("Urban lots")
    assert isinstance(region, Ok)
    assert isinstance(percentage, Insufficient)


def test_build_masks_keeps_largest_weight_and_raises_pediatrics():
    entries = lookup_practice_type("Pedi/FP") + lookup_region("Suburban/Urban")
    masks = build_masks(entries, pediatrics_fraction=0.3)
    # pediatrics, family_practice, internal_medicine, geriatrics
    assert masks["practice"] == (0.5, 0.5, 0.0, 0.0)
    # rural, suburban, urban, underserved
    assert masks["setting"] == (0.0, 0.5, 0.5, 0.0)

    masks = build_masks(lookup_practice_type("FP"), pediatrics_fraction=0.8)
    assert masks["practice"] == (0.8, 1.0, 0.0, 0.0)


# ---------------------------------------------------------------------------
# Student records
# ---------------------------------------------------------------------------

def test_parse_student_record_valid(student_record):
    seeker = parse_student_record(student_record(
        last="Nguyen", first="Ana", gender="F", practice=(2, 1, 4, 3),
        setting=(4, 3, 2, 1), language="Y"
    ))
    assert seeker.pairable
    assert seeker.name == "Nguyen, Ana"
    assert seeker.display_name == "Ana Nguyen"
    assert seeker.is_female is True
    assert seeker.speaks_language is True
    assert seeker.ranks["practice"] == (2, 1, 4, 3)
    assert seeker.ranks["setting"] == (4, 3, 2, 1)
    assert seeker.top_choice("practice") == 1
    assert seeker.rank_of("setting", "underserved") == 1
    assert seeker.pre_match is None


def test_parse_student_record_duplicate_rank_is_unpairable(student_record):
    seeker = parse_student_record(student_record(practice=(1, 1, 3, 4)))
    assert not seeker.pairable
    assert any("practice ranks" in p for p in seeker.problems)
    assert "practice" not in seeker.ranks
    assert "Insufficient information" in str(seeker)


def test_parse_student_record_collects_every_problem(student_record):
    seeker = parse_student_record(student_record(gender="?", language="sometimes", setting=(1, 2, 3, 9)))
    assert not seeker.pairable
    assert len(seeker.problems) == 3


def test_parse_student_record_pre_match_survives_other_problems(student_record):
    seeker = parse_student_record(student_record(gender="?", pre_match="Smith, Alex"))
    assert not seeker.pairable
    assert seeker.pre_match == "Smith, Alex"


def test_parse_student_record_too_short_raises(student_record):
    record = ";".join(student_record().split(";")[:10])
    with pytest.raises(RecordFormatError) as excinfo:
        parse_student_record(record)
    assert excinfo.value.code == "record_format"


def test_parse_student_record_custom_layout(student_record):
    # Same export with an extra leading id column
    record = "17;" + student_record(last="Lee", first="Kim")
    layout = StudentLayout(
        last_name=1, first_name=2, gender=3,
        practice_ranks=(4, 5, 6, 7), setting_ranks=(8, 9, 10, 11),
        language=12, home=13, comments=14, pre_match=15, min_fields=16
    )
    seeker = parse_student_record(record, layout)
    assert seeker.pairable
    assert seeker.name == "Lee, Kim"


def test_student_layout_rejects_wrong_rank_count():
    with pytest.raises(ValueError):
        StudentLayout.from_dict({"practice_ranks": [3, 4, 5]})


def test_parse_student_records_preserves_order(student_record):
    seekers = parse_student_records([
        student_record(last="A"), student_record(last="B", gender="x"), student_record(last="C"),
    ])
    assert [s.last_name for s in seekers] == ["A", "B", "C"]
    assert [s.pairable for s in seekers] == [True, False, True]


# ---------------------------------------------------------------------------
# Preceptor records
# ---------------------------------------------------------------------------

def test_parse_preceptor_record_valid(preceptor_record):
    host = parse_preceptor_record(preceptor_record(
        practice_type="Internist/Geriatrician", region="Suburban 30%",
        gender_preference="Female", language="Y", pre_match="Jane Doe"
    ))
    assert host.pairable
    assert host.gender_preference is True
    assert host.has_gender_preference
    assert host.requires_language is True
    assert host.masks["practice"] == (0.3, 0.0, 0.5, 0.5)
    assert host.masks["setting"] == (0.0, 1.0, 0.0, 0.0)
    assert host.pre_match == "Jane Doe"
    assert host.location == "Main St Clinic"
    assert host.preferred_day == "Monday"


def test_parse_preceptor_record_blank_gender_preference_is_unpairable(preceptor_record):
    host = parse_preceptor_record(preceptor_record(gender_preference=""))
    assert not host.pairable


def test_parse_preceptor_record_unknown_category_is_a_warning(preceptor_record):
    host = parse_preceptor_record(preceptor_record(practice_type="Dermatology", region="Coastal"))
    assert host.pairable
    assert len(host.warnings) == 2
    assert host.masks["practice"] == (0.0, 0.0, 0.0, 0.0)
    assert host.masks["setting"] == (0.0, 0.0, 0.0, 0.0)


def test_parse_preceptor_record_underserved_practice_type(preceptor_record):
    host = parse_preceptor_record(preceptor_record(
        practice_type="Rural/Care of the Underserved", region="Rural"
    ))
    assert host.masks["practice"] == (0.0, 0.0, 0.0, 0.0)
    assert host.masks["setting"] == (1.0, 0.0, 0.0, 1.0)


def test_parse_preceptor_record_too_short_raises(preceptor_record):
    with pytest.raises(RecordFormatError):
        parse_preceptor_record("Smith;Alex;FP")
