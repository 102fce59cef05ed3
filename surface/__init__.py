"""Dart API-surface extraction: discovery, aggregation, members, types and models."""

from surface.aggregator import ExportAggregation, ExportedElement, aggregate_exports
from surface.discovery import discover_public_libraries, is_public_library
from surface.elements import ElementExtractor
from surface.extractor import (
    ExtractionError,
    ExtractionStats,
    extract_api_surface,
    extract_api_surface_with_stats,
)
from surface.members import resolve_members
from surface.models import (
    AnalysisResult,
    ClassElement,
    ConstructorMember,
    Element,
    EnumElement,
    EnumValue,
    ExtensionElement,
    FieldMember,
    FunctionElement,
    GetterMember,
    Member,
    MethodMember,
    SetterMember,
    VariableElement,
    element_from_dict,
    member_from_dict,
)
from surface.type_builder import TypeReferenceBuilder
from surface.type_model import (
    ClassType,
    DynamicType,
    FunctionType,
    GenericType,
    Parameter,
    TypeParameter,
    TypeRef,
    VoidType,
    type_from_dict,
)

__all__ = [
    # Orchestration
    "ExtractionError",
    "ExtractionStats",
    "extract_api_surface",
    "extract_api_surface_with_stats",
    # Components
    "ElementExtractor",
    "ExportAggregation",
    "ExportedElement",
    "TypeReferenceBuilder",
    "aggregate_exports",
    "discover_public_libraries",
    "is_public_library",
    "resolve_members",
    # Element model
    "AnalysisResult",
    "ClassElement",
    "ConstructorMember",
    "Element",
    "EnumElement",
    "EnumValue",
    "ExtensionElement",
    "FieldMember",
    "FunctionElement",
    "GetterMember",
    "Member",
    "MethodMember",
    "SetterMember",
    "VariableElement",
    "element_from_dict",
    "member_from_dict",
    # Type model
    "ClassType",
    "DynamicType",
    "FunctionType",
    "GenericType",
    "Parameter",
    "TypeParameter",
    "TypeRef",
    "VoidType",
    "type_from_dict",
]
