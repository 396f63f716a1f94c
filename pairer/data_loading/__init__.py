"""Data loading module for student and preceptor exports."""

from .loaders import load_records, load_student_records, load_preceptor_records

__all__ = ["load_records", "load_student_records", "load_preceptor_records"]
