"""
Resolved element and type handles exchanged with the semantic engine.

These mirror the element model of a Dart semantic analyzer: every declaration
is an ``ElementHandle`` and every type occurrence is a ``TypeHandle``. Handles
are compared and hashed by object identity, so two namespace entries pointing
at the same declaration collapse naturally in sets and dicts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from core.uri_contract import build_identity_key

# Analyzer element-model conventions
PRIVATE_PREFIX = "_"
SETTER_SUFFIX = "="
UNNAMED_CONSTRUCTOR_TOKEN = "new"
UNNAMED_PARAMETER = "<unnamed>"
INVALID_TYPE_DISPLAY = "InvalidType"
FOUNDATION_LIBRARY_URI = "dart:core"
FOUNDATION_ROOT_CLASS = "Object"


class ElementKind(str, Enum):
    """Declaration kinds reported by the engine."""

    CLASS = "class"
    ENUM = "enum"
    MIXIN = "mixin"
    EXTENSION = "extension"
    TYPE_ALIAS = "typedef"
    FUNCTION = "function"
    TOP_LEVEL_VARIABLE = "variable"
    FIELD = "field"
    GETTER = "getter"
    SETTER = "setter"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    TYPE_PARAMETER = "type_parameter"


class TypeKind(str, Enum):
    """Resolved type categories."""

    DYNAMIC = "dynamic"
    VOID = "void"
    NEVER = "never"
    INVALID = "invalid"
    INTERFACE = "interface"
    TYPE_PARAMETER = "type_parameter"
    FUNCTION = "function"


CLASS_LIKE_KINDS = frozenset({ElementKind.CLASS, ElementKind.ENUM, ElementKind.MIXIN, ElementKind.EXTENSION})
ACCESSOR_KINDS = frozenset({ElementKind.GETTER, ElementKind.SETTER})


@dataclass(eq=False)
class ParameterHandle:
    """A formal parameter of a function, method, constructor or function type."""

    name: Optional[str]
    type: "TypeHandle"
    is_optional: bool = False
    is_named: bool = False
    is_required: bool = False
    default_value_code: Optional[str] = None

    @property
    def has_default_value(self) -> bool:
        return self.default_value_code is not None

    @property
    def display_name(self) -> str:
        return self.name or UNNAMED_PARAMETER


@dataclass(eq=False)
class ElementHandle:
    """A resolved declaration.

    Attributes that do not apply to a kind keep their defaults: a method has
    no ``children``, a class has no ``return_type``, and so on.

    Attributes:
        kind: Declaration category.
        name: Declared name. Setters carry a trailing ``=`` and unnamed
            constructors carry the engine placeholder ``new``.
        library_uri: URI of the declaring library (``dart:core``,
            ``package:foo/src/bar.dart``), or None when unresolved.
        children: Declared members of a class-like element, in source order,
            including synthetic fields/accessors/constructors.
        interface_members: Complete interface (declared plus inherited
            instance members) keyed by member name, setters as ``name=``.
        variable: For accessors, the field or top-level variable they back.
    """

    kind: ElementKind
    name: Optional[str]
    library_uri: Optional[str] = None
    documentation: Optional[str] = None
    is_abstract: bool = False
    is_static: bool = False
    is_final: bool = False
    is_const: bool = False
    is_late: bool = False
    is_operator: bool = False
    is_synthetic: bool = False
    is_enum_constant: bool = False
    children: List["ElementHandle"] = field(default_factory=list)
    interface_members: Dict[str, "ElementHandle"] = field(default_factory=dict)
    supertype: Optional["TypeHandle"] = None
    interfaces: List["TypeHandle"] = field(default_factory=list)
    mixins: List["TypeHandle"] = field(default_factory=list)
    type_parameters: List["ElementHandle"] = field(default_factory=list)
    parameters: List[ParameterHandle] = field(default_factory=list)
    return_type: Optional["TypeHandle"] = None
    type: Optional["TypeHandle"] = None
    bound: Optional["TypeHandle"] = None
    extended_type: Optional["TypeHandle"] = None
    variable: Optional["ElementHandle"] = None
    getter: Optional["ElementHandle"] = None
    setter: Optional["ElementHandle"] = None

    @property
    def is_private(self) -> bool:
        return bool(self.name) and self.name.startswith(PRIVATE_PREFIX)

    @property
    def is_accessor(self) -> bool:
        return self.kind in ACCESSOR_KINDS

    @property
    def identity_key(self) -> str:
        return build_identity_key(self.library_uri, self.name or "", self.kind.value)

    @property
    def constructors(self) -> List["ElementHandle"]:
        return [c for c in self.children if c.kind is ElementKind.CONSTRUCTOR]

    @property
    def fields(self) -> List["ElementHandle"]:
        return [c for c in self.children if c.kind is ElementKind.FIELD]

    def __repr__(self) -> str:
        return f"ElementHandle({self.kind.value} {self.name!r} in {self.library_uri!r})"


@dataclass(eq=False)
class TypeHandle:
    """A resolved type occurrence."""

    kind: TypeKind
    nullable: bool = False
    element: Optional[ElementHandle] = None
    type_arguments: List["TypeHandle"] = field(default_factory=list)
    return_type: Optional["TypeHandle"] = None
    parameters: List[ParameterHandle] = field(default_factory=list)

    def is_foundation_object(self) -> bool:
        """True for the root ``Object`` of the foundation library."""
        return (
            self.kind is TypeKind.INTERFACE
            and self.element is not None
            and self.element.name == FOUNDATION_ROOT_CLASS
            and self.element.library_uri == FOUNDATION_LIBRARY_URI
        )

    def display_string(self) -> str:
        """Render the type the way the analyzer displays it."""
        suffix = "?" if self.nullable else ""
        if self.kind is TypeKind.DYNAMIC:
            return "dynamic"
        if self.kind is TypeKind.VOID:
            return "void"
        if self.kind is TypeKind.NEVER:
            return "Never" + suffix
        if self.kind is TypeKind.INVALID:
            return INVALID_TYPE_DISPLAY
        if self.kind is TypeKind.TYPE_PARAMETER:
            return f"{self.element.name if self.element else '?'}{suffix}"
        if self.kind is TypeKind.INTERFACE:
            name = self.element.name if self.element else "?"
            if self.type_arguments:
                args = ", ".join(arg.display_string() for arg in self.type_arguments)
                name = f"{name}<{args}>"
            return name + suffix
        if self.kind is TypeKind.FUNCTION:
            returns = self.return_type.display_string() if self.return_type else "dynamic"
            return f"{returns} Function({_display_parameters(self.parameters)}){suffix}"
        return "dynamic"

    def __repr__(self) -> str:
        return f"TypeHandle({self.display_string()})"


def _display_parameters(parameters: List[ParameterHandle]) -> str:
    required: List[str] = []
    optional: List[str] = []
    named: List[str] = []
    for param in parameters:
        type_text = param.type.display_string()
        if param.is_named:
            prefix = "required " if param.is_required else ""
            named.append(f"{prefix}{type_text} {param.display_name}")
        elif param.is_optional:
            optional.append(type_text)
        else:
            required.append(type_text)

    parts = list(required)
    if optional:
        parts.append("[" + ", ".join(optional) + "]")
    if named:
        parts.append("{" + ", ".join(named) + "}")
    return ", ".join(parts)
