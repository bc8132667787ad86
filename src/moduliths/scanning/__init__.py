"""Class model adapter: builds a ClassModel from an importable package."""

from .annotations import AnnotationResolver, referenced_classes, type_checking_imports
from .importer import (
    DISPLAY_NAME_ATTRIBUTE,
    NAMED_INTERFACE_ATTRIBUTE,
    ClassModelImporter,
    reference_to,
    type_name,
)

__all__ = [
    "AnnotationResolver",
    "ClassModelImporter",
    "DISPLAY_NAME_ATTRIBUTE",
    "NAMED_INTERFACE_ATTRIBUTE",
    "reference_to",
    "referenced_classes",
    "type_checking_imports",
    "type_name",
]
