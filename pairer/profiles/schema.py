"""
Profile data model for the pairing pipeline.

Defines the two sides of the matching problem and the record layouts they
are parsed from:

- Seeker (student): gender, language ability, and one rank vector per
  attribute group (a permutation of 1..N, rank 1 = most desired)
- Host (preceptor): gender preference, language requirement, and one
  weight mask per attribute group

Profiles are immutable. Which seeker ends up with which host is tracked
outside the profiles, in a BindingTable keyed by pool index.

Field parsers report bad data with tagged outcomes instead of exceptions:
``Ok(value)`` when the field parsed, ``Insufficient(reason)`` when it did
not. A profile collects the reasons of every failed field; it is pairable
only when there are none.
"""

import re
from dataclasses import dataclass, field, fields as dataclass_fields
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar, Union

T = TypeVar("T")


PRACTICE_ATTRIBUTES: Tuple[str, ...] = (
    "pediatrics",
    "family_practice",
    "internal_medicine",
    "geriatrics",
)

SETTING_ATTRIBUTES: Tuple[str, ...] = (
    "rural",
    "suburban",
    "urban",
    "underserved",
)

# Group name -> ordered attribute names. Rank vectors and masks share this order.
ATTRIBUTE_GROUPS: Dict[str, Tuple[str, ...]] = {
    "practice": PRACTICE_ATTRIBUTES,
    "setting": SETTING_ATTRIBUTES,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A field that parsed successfully."""
    value: T


@dataclass(frozen=True)
class Insufficient:
    """A field that could not be parsed, with the reason why."""
    reason: str


Outcome = Union[Ok, Insufficient]


def normalize_identity(text: str) -> str:
    """Case-fold a name and collapse its whitespace for identity comparison."""
    collapsed = " ".join(text.split())
    collapsed = re.sub(r"\s*,\s*", ", ", collapsed)
    return collapsed.casefold()


@dataclass(frozen=True)
class Profile:
    """
    Attributes shared by both sides of the matching problem.

    Attributes:
        last_name: Family name
        first_name: Given name
        pre_match: Name of a counterpart this profile must be bound to
        problems: Reasons the profile cannot enter the optimization pool
        warnings: Non-fatal notes collected while parsing
    """
    last_name: str
    first_name: str
    pre_match: Optional[str] = None
    problems: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        """Name in 'Last, First' form, as used in reports."""
        return f"{self.last_name}, {self.first_name}"

    @property
    def display_name(self) -> str:
        """Name in 'First Last' form."""
        return f"{self.first_name} {self.last_name}"

    @property
    def pairable(self) -> bool:
        return not self.problems

    @property
    def has_pre_match(self) -> bool:
        return self.pre_match is not None

    def identity_keys(self) -> Tuple[str, str]:
        """Normalized forms a pre-match directive may use to name this profile."""
        return (normalize_identity(self.name), normalize_identity(self.display_name))


@dataclass(frozen=True)
class Seeker(Profile):
    """
    A student looking for a preceptor.

    Attributes:
        is_female: Gender (None only when the field could not be parsed)
        speaks_language: Whether the student speaks the partner language
        ranks: Attribute group -> rank vector (permutation of 1..N)
        home: Living location
        comments: Free-text comments
    """
    is_female: Optional[bool] = None
    speaks_language: Optional[bool] = None
    ranks: Dict[str, Tuple[int, ...]] = field(default_factory=dict)
    home: str = ""
    comments: str = ""

    def rank_of(self, group: str, attribute: str) -> int:
        """Rank given to a named attribute (1 = most desired)."""
        return self.ranks[group][ATTRIBUTE_GROUPS[group].index(attribute)]

    def top_choice(self, group: str) -> int:
        """Index of the attribute ranked first within a group."""
        return self.ranks[group].index(1)

    def __str__(self) -> str:
        if not self.pairable:
            return f"{self.display_name}:\tWARNING: Insufficient information provided."
        gender = "female" if self.is_female else "male"
        language = "speaks partner language" if self.speaks_language else "no partner language"
        return f"{self.display_name}:\t{gender}, {language}"


@dataclass(frozen=True)
class Host(Profile):
    """
    A preceptor offering a placement.

    Attributes:
        gender_preference: None for no preference, True for female, False for male
        requires_language: Whether the student must speak the partner language
        masks: Attribute group -> per-attribute weight in [0, 1]
        practice_type: Practice category text, as given
        location: Practice location
        region: Practice region text, as given
        preferred_day: Preferred teaching day
        secondary_day: Second-choice teaching day
        comments: Free-text comments
    """
    gender_preference: Optional[bool] = None
    requires_language: Optional[bool] = None
    masks: Dict[str, Tuple[float, ...]] = field(default_factory=dict)
    practice_type: str = ""
    location: str = ""
    region: str = ""
    preferred_day: str = ""
    secondary_day: str = ""
    comments: str = ""

    @property
    def has_gender_preference(self) -> bool:
        return self.gender_preference is not None

    def __str__(self) -> str:
        if self.gender_preference is None:
            preference = "none"
        else:
            preference = "female" if self.gender_preference else "male"
        language = "requires partner language" if self.requires_language else "no language requirement"
        return f"{self.display_name}:\t{preference}, {language}"


def _layout_from_dict(cls, values: Dict[str, Any]):
    """Build a layout dataclass from a config mapping, rejecting unknown keys."""
    known = {f.name for f in dataclass_fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} fields: {sorted(unknown)}")
    converted = {
        key: tuple(value) if isinstance(value, list) else value
        for key, value in values.items()
    }
    layout = cls(**converted)
    layout.validate()
    return layout


@dataclass(frozen=True)
class StudentLayout:
    """
    Positional schema of a student record (0-based field indices).

    The defaults follow the student survey export:
    last; first; gender; 4 practice ranks; 4 setting ranks; languages;
    living location; comments; pre-match.
    """
    last_name: int = 0
    first_name: int = 1
    gender: int = 2
    practice_ranks: Tuple[int, ...] = (3, 4, 5, 6)
    setting_ranks: Tuple[int, ...] = (7, 8, 9, 10)
    language: int = 11
    home: int = 12
    comments: int = 13
    pre_match: int = 14
    min_fields: int = 15

    def rank_fields(self) -> Dict[str, Tuple[int, ...]]:
        return {"practice": self.practice_ranks, "setting": self.setting_ranks}

    def validate(self) -> None:
        for group, positions in self.rank_fields().items():
            if len(positions) != len(ATTRIBUTE_GROUPS[group]):
                raise ValueError(
                    f"{group} ranks need {len(ATTRIBUTE_GROUPS[group])} fields, got {len(positions)}"
                )
        highest = max(
            [self.last_name, self.first_name, self.gender, self.language,
             self.home, self.comments, self.pre_match]
            + list(self.practice_ranks) + list(self.setting_ranks)
        )
        if self.min_fields <= highest:
            raise ValueError(f"min_fields ({self.min_fields}) must exceed the highest field index ({highest})")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "StudentLayout":
        return _layout_from_dict(cls, values)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "StudentLayout":
        """Create from the ``records.student`` section of the main config."""
        return cls.from_dict(config.get("records", {}).get("student") or {})


@dataclass(frozen=True)
class PreceptorLayout:
    """
    Positional schema of a preceptor record (0-based field indices).

    The defaults follow the preceptor survey export:
    last; first; practice types; location; practice region; gender
    preference; languages; preferred day; secondary day; comments; pre-match.
    """
    last_name: int = 0
    first_name: int = 1
    practice_types: int = 2
    location: int = 3
    region: int = 4
    gender_preference: int = 5
    language: int = 6
    preferred_day: int = 7
    secondary_day: int = 8
    comments: int = 9
    pre_match: int = 10
    min_fields: int = 11

    def validate(self) -> None:
        highest = max(
            getattr(self, f.name) for f in dataclass_fields(self) if f.name != "min_fields"
        )
        if self.min_fields <= highest:
            raise ValueError(f"min_fields ({self.min_fields}) must exceed the highest field index ({highest})")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "PreceptorLayout":
        return _layout_from_dict(cls, values)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PreceptorLayout":
        """Create from the ``records.preceptor`` section of the main config."""
        return cls.from_dict(config.get("records", {}).get("preceptor") or {})
