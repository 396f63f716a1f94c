"""Profile model and record parsing for students and preceptors."""

from .schema import (
    ATTRIBUTE_GROUPS,
    PRACTICE_ATTRIBUTES,
    SETTING_ATTRIBUTES,
    Host,
    Insufficient,
    Ok,
    Outcome,
    PreceptorLayout,
    Profile,
    Seeker,
    StudentLayout,
    normalize_identity,
)
from .parsers import (
    parse_preceptor_record,
    parse_preceptor_records,
    parse_student_record,
    parse_student_records,
)

__all__ = [
    "ATTRIBUTE_GROUPS",
    "PRACTICE_ATTRIBUTES",
    "SETTING_ATTRIBUTES",
    "Host",
    "Insufficient",
    "Ok",
    "Outcome",
    "PreceptorLayout",
    "Profile",
    "Seeker",
    "StudentLayout",
    "normalize_identity",
    "parse_preceptor_record",
    "parse_preceptor_records",
    "parse_student_record",
    "parse_student_records",
]
