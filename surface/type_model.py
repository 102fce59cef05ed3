"""
Structural type model.

A closed set of type variants (class, function, generic, dynamic, void)
discriminated by ``kind`` on the wire. Pure data: building these from resolved
type handles happens in ``surface.type_builder``.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Union

from surface.config import FUNCTION_TYPE_NAME


@dataclass
class ClassType:
    """A nominal class/interface type, e.g. ``Map<String, int>?``.

    Attributes:
        name: Declared class name.
        defining_module: Entry library that exports the class, or the
            declaring library URI when no entry library does.
        nullable: Whether the occurrence carries ``?``.
        type_arguments: Type arguments in declaration order.
    """

    name: str
    defining_module: Optional[str] = None
    nullable: bool = False
    type_arguments: List["TypeRef"] = field(default_factory=list)

    KIND: ClassVar[str] = "class"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.KIND, "name": self.name}
        if self.defining_module is not None:
            data["definingModule"] = self.defining_module
        data["nullable"] = self.nullable
        data["typeArguments"] = [arg.to_dict() for arg in self.type_arguments]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClassType":
        return cls(
            name=data["name"],
            defining_module=data.get("definingModule"),
            nullable=bool(data.get("nullable", False)),
            type_arguments=[type_from_dict(arg) for arg in data.get("typeArguments", [])],
        )


@dataclass
class FunctionType:
    """A function type, e.g. ``void Function(int, {String name})``."""

    return_type: Optional["TypeRef"] = None
    parameters: List["Parameter"] = field(default_factory=list)
    nullable: bool = False

    KIND: ClassVar[str] = "function"

    @property
    def name(self) -> str:
        return FUNCTION_TYPE_NAME

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.KIND, "name": self.name}
        if self.return_type is not None:
            data["returnType"] = self.return_type.to_dict()
        data["parameters"] = [param.to_dict() for param in self.parameters]
        data["nullable"] = self.nullable
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FunctionType":
        return_type = data.get("returnType")
        return cls(
            return_type=type_from_dict(return_type) if return_type is not None else None,
            parameters=[Parameter.from_dict(p) for p in data.get("parameters", [])],
            nullable=bool(data.get("nullable", False)),
        )


@dataclass
class GenericType:
    """A reference to a declared type parameter, with its bound."""

    name: str
    bound: Optional["TypeRef"] = None
    nullable: bool = False

    KIND: ClassVar[str] = "generic"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.KIND, "name": self.name}
        if self.bound is not None:
            data["bound"] = self.bound.to_dict()
        data["nullable"] = self.nullable
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenericType":
        bound = data.get("bound")
        return cls(
            name=data["name"],
            bound=type_from_dict(bound) if bound is not None else None,
            nullable=bool(data.get("nullable", False)),
        )


@dataclass
class DynamicType:
    KIND: ClassVar[str] = "dynamic"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.KIND}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DynamicType":
        return cls()


@dataclass
class VoidType:
    """Void, ``Never`` and unresolved types all collapse to this variant."""

    KIND: ClassVar[str] = "void"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.KIND}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoidType":
        return cls()


TypeRef = Union[ClassType, FunctionType, GenericType, DynamicType, VoidType]

_TYPE_VARIANTS = {
    variant.KIND: variant
    for variant in (ClassType, FunctionType, GenericType, DynamicType, VoidType)
}


def type_from_dict(data: Dict[str, Any]) -> TypeRef:
    """Decode a type, selecting the variant from its ``kind`` discriminant.

    Raises:
        ValueError: If the discriminant is missing or unknown.
    """
    kind = data.get("kind") if isinstance(data, dict) else None
    variant = _TYPE_VARIANTS.get(kind)
    if variant is None:
        raise ValueError(f"Unknown type kind: {kind!r}")
    return variant.from_dict(data)


@dataclass
class Parameter:
    """A formal parameter.

    ``display_type`` is the analyzer's string rendering of the same source
    type as ``type``; both are derived independently.
    """

    name: str
    type: TypeRef
    display_type: str
    is_optional: bool = False
    is_named: bool = False
    has_default_value: bool = False
    is_required: Optional[bool] = None
    default_value_source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.type.to_dict(),
            "displayType": self.display_type,
            "isOptional": self.is_optional,
            "isNamed": self.is_named,
            "hasDefaultValue": self.has_default_value,
        }
        if self.is_required is not None:
            data["isRequired"] = self.is_required
        if self.default_value_source is not None:
            data["defaultValueSource"] = self.default_value_source
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Parameter":
        return cls(
            name=data["name"],
            type=type_from_dict(data["type"]),
            display_type=data["displayType"],
            is_optional=bool(data.get("isOptional", False)),
            is_named=bool(data.get("isNamed", False)),
            has_default_value=bool(data.get("hasDefaultValue", False)),
            is_required=data.get("isRequired"),
            default_value_source=data.get("defaultValueSource"),
        )


@dataclass
class TypeParameter:
    name: str
    bound: Optional[TypeRef] = None
    display_bound: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.bound is not None:
            data["bound"] = self.bound.to_dict()
        if self.display_bound is not None:
            data["displayBound"] = self.display_bound
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TypeParameter":
        bound = data.get("bound")
        return cls(
            name=data["name"],
            bound=type_from_dict(bound) if bound is not None else None,
            display_bound=data.get("displayBound"),
        )
