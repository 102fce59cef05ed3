"""
Data models for the extracted API surface.

Elements (class, enum, function, variable, extension) and members
(constructor, method, getter, setter, field) are closed tagged unions. On the
wire, ``elementType`` and ``kind`` are the discriminants that drive decoding.
Optional fields are omitted when ``None``; decoding restores them as ``None``,
so ``from_dict(to_dict(x)) == x``.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Optional, TypeVar, Union

from surface.type_model import Parameter, TypeParameter, TypeRef, type_from_dict

T = TypeVar("T")


def _encode_list(items: Optional[List[Any]]) -> Optional[List[Any]]:
    if items is None:
        return None
    return [item.to_dict() for item in items]


def _decode_list(data: Dict[str, Any], key: str, decoder: Callable[[Any], T]) -> Optional[List[T]]:
    raw = data.get(key)
    if raw is None:
        return None
    return [decoder(item) for item in raw]


def _put(data: Dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        data[key] = value


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


@dataclass
class ConstructorMember:
    """A public constructor. The unnamed constructor has the name ``""``."""

    name: str
    location: str
    is_const: bool = False
    parameters: Optional[List[Parameter]] = None

    KIND: ClassVar[str] = "constructor"

    @property
    def kind(self) -> str:
        return self.KIND

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "location": self.location,
            "isConst": self.is_const,
        }
        _put(data, "parameters", _encode_list(self.parameters))
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConstructorMember":
        return cls(
            name=data["name"],
            location=data["location"],
            is_const=bool(data.get("isConst", False)),
            parameters=_decode_list(data, "parameters", Parameter.from_dict),
        )


@dataclass
class MethodMember:
    """A method or operator; ``kind`` is ``"method"`` or ``"operator"``."""

    name: str
    location: str
    return_type: TypeRef
    display_return_type: str
    is_static: bool = False
    parameters: Optional[List[Parameter]] = None
    type_parameters: Optional[List[TypeParameter]] = None
    kind: str = "method"

    KINDS: ClassVar[tuple] = ("method", "operator")

    def __post_init__(self) -> None:
        if self.kind not in self.KINDS:
            raise ValueError(f"Invalid method kind: {self.kind!r}")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "location": self.location,
            "isStatic": self.is_static,
            "returnType": self.return_type.to_dict(),
            "displayReturnType": self.display_return_type,
        }
        _put(data, "parameters", _encode_list(self.parameters))
        _put(data, "typeParameters", _encode_list(self.type_parameters))
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MethodMember":
        return cls(
            name=data["name"],
            location=data["location"],
            return_type=type_from_dict(data["returnType"]),
            display_return_type=data["displayReturnType"],
            is_static=bool(data.get("isStatic", False)),
            parameters=_decode_list(data, "parameters", Parameter.from_dict),
            type_parameters=_decode_list(data, "typeParameters", TypeParameter.from_dict),
            kind=data["kind"],
        )


@dataclass
class GetterMember:
    name: str
    location: str
    return_type: TypeRef
    display_return_type: str
    is_static: bool = False

    KIND: ClassVar[str] = "getter"

    @property
    def kind(self) -> str:
        return self.KIND

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "location": self.location,
            "isStatic": self.is_static,
            "returnType": self.return_type.to_dict(),
            "displayReturnType": self.display_return_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GetterMember":
        return cls(
            name=data["name"],
            location=data["location"],
            return_type=type_from_dict(data["returnType"]),
            display_return_type=data["displayReturnType"],
            is_static=bool(data.get("isStatic", False)),
        )


@dataclass
class SetterMember:
    name: str
    location: str
    parameter_type: TypeRef
    display_parameter_type: str
    is_static: bool = False

    KIND: ClassVar[str] = "setter"

    @property
    def kind(self) -> str:
        return self.KIND

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "location": self.location,
            "isStatic": self.is_static,
            "parameterType": self.parameter_type.to_dict(),
            "displayParameterType": self.display_parameter_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SetterMember":
        return cls(
            name=data["name"],
            location=data["location"],
            parameter_type=type_from_dict(data["parameterType"]),
            display_parameter_type=data["displayParameterType"],
            is_static=bool(data.get("isStatic", False)),
        )


@dataclass
class FieldMember:
    name: str
    location: str
    type: TypeRef
    display_type: str
    is_static: bool = False
    is_final: bool = False
    is_late: bool = False
    is_const: bool = False

    KIND: ClassVar[str] = "field"

    @property
    def kind(self) -> str:
        return self.KIND

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "location": self.location,
            "isStatic": self.is_static,
            "type": self.type.to_dict(),
            "displayType": self.display_type,
            "isFinal": self.is_final,
            "isLate": self.is_late,
            "isConst": self.is_const,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldMember":
        return cls(
            name=data["name"],
            location=data["location"],
            type=type_from_dict(data["type"]),
            display_type=data["displayType"],
            is_static=bool(data.get("isStatic", False)),
            is_final=bool(data.get("isFinal", False)),
            is_late=bool(data.get("isLate", False)),
            is_const=bool(data.get("isConst", False)),
        )


Member = Union[ConstructorMember, MethodMember, GetterMember, SetterMember, FieldMember]

_MEMBER_VARIANTS = {
    "constructor": ConstructorMember,
    "method": MethodMember,
    "operator": MethodMember,
    "getter": GetterMember,
    "setter": SetterMember,
    "field": FieldMember,
}


def member_from_dict(data: Dict[str, Any]) -> Member:
    """Decode a member by its ``kind`` discriminant.

    Raises:
        ValueError: If the kind is missing or unknown.
    """
    kind = data.get("kind") if isinstance(data, dict) else None
    variant = _MEMBER_VARIANTS.get(kind)
    if variant is None:
        raise ValueError(f"Unknown member kind: {kind!r}")
    return variant.from_dict(data)


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


@dataclass
class EnumValue:
    name: str
    documentation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        _put(data, "documentation", self.documentation)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnumValue":
        return cls(name=data["name"], documentation=data.get("documentation"))


@dataclass
class ClassElement:
    """A public class.

    Attributes:
        superclass_chain: Display names of the superclasses, nearest first,
            stopping before ``Object``. ``superclass_chain_types`` is the
            parallel structural list.
        importable_from: Sorted entry-library URIs that export the class.
        defined_in: URI of the declaring library.
    """

    name: str
    importable_from: List[str]
    defined_in: str
    members: List[Member] = field(default_factory=list)
    documentation: Optional[str] = None
    is_abstract: bool = False
    type_parameters: Optional[List[TypeParameter]] = None
    superclass_chain: Optional[List[str]] = None
    superclass_chain_types: Optional[List[TypeRef]] = None
    interfaces: Optional[List[str]] = None
    interface_types: Optional[List[TypeRef]] = None
    mixins: Optional[List[str]] = None
    mixin_types: Optional[List[TypeRef]] = None

    ELEMENT_TYPE: ClassVar[str] = "class"

    @property
    def element_type(self) -> str:
        return self.ELEMENT_TYPE

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "elementType": self.element_type}
        _put(data, "documentation", self.documentation)
        data["isAbstract"] = self.is_abstract
        _put(data, "typeParameters", _encode_list(self.type_parameters))
        _put(data, "superclassChain", self.superclass_chain)
        _put(data, "superclassChainTypes", _encode_list(self.superclass_chain_types))
        _put(data, "interfaces", self.interfaces)
        _put(data, "interfaceTypes", _encode_list(self.interface_types))
        _put(data, "mixins", self.mixins)
        _put(data, "mixinTypes", _encode_list(self.mixin_types))
        data["members"] = [member.to_dict() for member in self.members]
        data["importableFrom"] = list(self.importable_from)
        data["definedIn"] = self.defined_in
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClassElement":
        return cls(
            name=data["name"],
            importable_from=list(data["importableFrom"]),
            defined_in=data["definedIn"],
            members=[member_from_dict(m) for m in data.get("members", [])],
            documentation=data.get("documentation"),
            is_abstract=bool(data.get("isAbstract", False)),
            type_parameters=_decode_list(data, "typeParameters", TypeParameter.from_dict),
            superclass_chain=data.get("superclassChain"),
            superclass_chain_types=_decode_list(data, "superclassChainTypes", type_from_dict),
            interfaces=data.get("interfaces"),
            interface_types=_decode_list(data, "interfaceTypes", type_from_dict),
            mixins=data.get("mixins"),
            mixin_types=_decode_list(data, "mixinTypes", type_from_dict),
        )


@dataclass
class EnumElement:
    name: str
    importable_from: List[str]
    defined_in: str
    values: List[EnumValue] = field(default_factory=list)
    documentation: Optional[str] = None
    type_parameters: Optional[List[TypeParameter]] = None
    members: Optional[List[Member]] = None
    interfaces: Optional[List[str]] = None
    interface_types: Optional[List[TypeRef]] = None
    mixins: Optional[List[str]] = None
    mixin_types: Optional[List[TypeRef]] = None

    ELEMENT_TYPE: ClassVar[str] = "enum"

    @property
    def element_type(self) -> str:
        return self.ELEMENT_TYPE

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "elementType": self.element_type}
        _put(data, "documentation", self.documentation)
        _put(data, "typeParameters", _encode_list(self.type_parameters))
        data["values"] = [value.to_dict() for value in self.values]
        _put(data, "members", _encode_list(self.members))
        _put(data, "interfaces", self.interfaces)
        _put(data, "interfaceTypes", _encode_list(self.interface_types))
        _put(data, "mixins", self.mixins)
        _put(data, "mixinTypes", _encode_list(self.mixin_types))
        data["importableFrom"] = list(self.importable_from)
        data["definedIn"] = self.defined_in
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnumElement":
        return cls(
            name=data["name"],
            importable_from=list(data["importableFrom"]),
            defined_in=data["definedIn"],
            values=[EnumValue.from_dict(v) for v in data.get("values", [])],
            documentation=data.get("documentation"),
            type_parameters=_decode_list(data, "typeParameters", TypeParameter.from_dict),
            members=_decode_list(data, "members", member_from_dict),
            interfaces=data.get("interfaces"),
            interface_types=_decode_list(data, "interfaceTypes", type_from_dict),
            mixins=data.get("mixins"),
            mixin_types=_decode_list(data, "mixinTypes", type_from_dict),
        )


@dataclass
class FunctionElement:
    name: str
    importable_from: List[str]
    defined_in: str
    return_type: TypeRef
    display_return_type: str
    documentation: Optional[str] = None
    type_parameters: Optional[List[TypeParameter]] = None
    parameters: Optional[List[Parameter]] = None

    ELEMENT_TYPE: ClassVar[str] = "function"

    @property
    def element_type(self) -> str:
        return self.ELEMENT_TYPE

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "elementType": self.element_type}
        _put(data, "documentation", self.documentation)
        data["returnType"] = self.return_type.to_dict()
        data["displayReturnType"] = self.display_return_type
        _put(data, "typeParameters", _encode_list(self.type_parameters))
        _put(data, "parameters", _encode_list(self.parameters))
        data["importableFrom"] = list(self.importable_from)
        data["definedIn"] = self.defined_in
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FunctionElement":
        return cls(
            name=data["name"],
            importable_from=list(data["importableFrom"]),
            defined_in=data["definedIn"],
            return_type=type_from_dict(data["returnType"]),
            display_return_type=data["displayReturnType"],
            documentation=data.get("documentation"),
            type_parameters=_decode_list(data, "typeParameters", TypeParameter.from_dict),
            parameters=_decode_list(data, "parameters", Parameter.from_dict),
        )


@dataclass
class VariableElement:
    name: str
    importable_from: List[str]
    defined_in: str
    type: TypeRef
    display_type: str
    documentation: Optional[str] = None
    is_const: bool = False
    is_final: bool = False
    is_late: bool = False

    ELEMENT_TYPE: ClassVar[str] = "variable"

    @property
    def element_type(self) -> str:
        return self.ELEMENT_TYPE

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "elementType": self.element_type}
        _put(data, "documentation", self.documentation)
        data["type"] = self.type.to_dict()
        data["displayType"] = self.display_type
        data["isConst"] = self.is_const
        data["isFinal"] = self.is_final
        data["isLate"] = self.is_late
        data["importableFrom"] = list(self.importable_from)
        data["definedIn"] = self.defined_in
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VariableElement":
        return cls(
            name=data["name"],
            importable_from=list(data["importableFrom"]),
            defined_in=data["definedIn"],
            type=type_from_dict(data["type"]),
            display_type=data["displayType"],
            documentation=data.get("documentation"),
            is_const=bool(data.get("isConst", False)),
            is_final=bool(data.get("isFinal", False)),
            is_late=bool(data.get("isLate", False)),
        )


@dataclass
class ExtensionElement:
    name: str
    importable_from: List[str]
    defined_in: str
    on_type: TypeRef
    display_on_type: str
    members: List[Member] = field(default_factory=list)
    documentation: Optional[str] = None
    type_parameters: Optional[List[TypeParameter]] = None

    ELEMENT_TYPE: ClassVar[str] = "extension"

    @property
    def element_type(self) -> str:
        return self.ELEMENT_TYPE

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "elementType": self.element_type}
        _put(data, "documentation", self.documentation)
        _put(data, "typeParameters", _encode_list(self.type_parameters))
        data["onType"] = self.on_type.to_dict()
        data["displayOnType"] = self.display_on_type
        data["members"] = [member.to_dict() for member in self.members]
        data["importableFrom"] = list(self.importable_from)
        data["definedIn"] = self.defined_in
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtensionElement":
        return cls(
            name=data["name"],
            importable_from=list(data["importableFrom"]),
            defined_in=data["definedIn"],
            on_type=type_from_dict(data["onType"]),
            display_on_type=data["displayOnType"],
            members=[member_from_dict(m) for m in data.get("members", [])],
            documentation=data.get("documentation"),
            type_parameters=_decode_list(data, "typeParameters", TypeParameter.from_dict),
        )


Element = Union[ClassElement, EnumElement, FunctionElement, VariableElement, ExtensionElement]

_ELEMENT_VARIANTS = {
    variant.ELEMENT_TYPE: variant
    for variant in (ClassElement, EnumElement, FunctionElement, VariableElement, ExtensionElement)
}


def element_from_dict(data: Dict[str, Any]) -> Element:
    """Decode an element by its ``elementType`` discriminant.

    Raises:
        ValueError: If the element type is missing or unknown.
    """
    element_type = data.get("elementType") if isinstance(data, dict) else None
    variant = _ELEMENT_VARIANTS.get(element_type)
    if variant is None:
        raise ValueError(f"Unknown element type: {element_type!r}")
    return variant.from_dict(data)


@dataclass
class AnalysisResult:
    """All public API elements of a package, identity-unique and flat."""

    elements: List[Element] = field(default_factory=list)

    def of_type(self, element_type: str) -> List[Element]:
        return [e for e in self.elements if e.element_type == element_type]

    def find(self, name: str, element_type: Optional[str] = None) -> Optional[Element]:
        for element in self.elements:
            if element.name == name and (element_type is None or element.element_type == element_type):
                return element
        return None

    def summary(self) -> Dict[str, int]:
        """Element counts per element type, plus ``total``."""
        counts = {variant: 0 for variant in _ELEMENT_VARIANTS}
        for element in self.elements:
            counts[element.element_type] += 1
        counts["total"] = len(self.elements)
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {"elements": [element.to_dict() for element in self.elements]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        if not isinstance(data, dict) or not isinstance(data.get("elements"), list):
            raise ValueError("analysis result must contain an 'elements' list")
        return cls(elements=[element_from_dict(e) for e in data["elements"]])

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "AnalysisResult":
        return cls.from_dict(json.loads(text))
