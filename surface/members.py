"""
Member resolution for class-like elements.

Merges the declared fields, accessors and methods of a class, enum or
extension into one member list, then appends members only visible through the
complete interface (inherited from superclasses, interfaces and mixins).

Per name, at most one member is reported:

1. field with getter and setter  -> ``FieldMember``
2. field with only one accessor  -> that ``GetterMember`` / ``SetterMember``
3. field without accessors       -> ``FieldMember``
4. method or operator            -> ``MethodMember``
5. inherited-only name           -> the matching kind, appended last

Accessor pairs without a backing field collapse into a ``FieldMember`` as
well. Private names, ``dart:core`` members and enum constants never appear.
"""

import logging
from typing import Dict, List, Optional, Set

from semantic.handles import (
    FOUNDATION_LIBRARY_URI,
    PRIVATE_PREFIX,
    SETTER_SUFFIX,
    UNNAMED_CONSTRUCTOR_TOKEN,
    ElementHandle,
    ElementKind,
)
from surface.models import (
    ConstructorMember,
    FieldMember,
    GetterMember,
    Member,
    MethodMember,
    SetterMember,
)
from surface.type_builder import TypeReferenceBuilder

logger = logging.getLogger(__name__)

_INTERFACE_KINDS = frozenset({ElementKind.METHOD, ElementKind.GETTER, ElementKind.SETTER})


def base_name(name: str) -> str:
    """Strip the trailing ``=`` the engine puts on setter names."""
    return name[:-len(SETTER_SUFFIX)] if name.endswith(SETTER_SUFFIX) else name


def constructor_name(name: Optional[str]) -> str:
    """Unnamed constructors are reported with an empty name."""
    if name is None or name == UNNAMED_CONSTRUCTOR_TOKEN:
        return ""
    return name


def is_reportable(member: ElementHandle) -> bool:
    """Filter applied to every declared and inherited member."""
    if not member.name or member.name.startswith(PRIVATE_PREFIX):
        return False
    if member.library_uri == FOUNDATION_LIBRARY_URI:
        return False
    return not member.is_enum_constant


# ---------------------------------------------------------------------------
# Member builders
# ---------------------------------------------------------------------------


def build_constructor(ctor: ElementHandle, types: TypeReferenceBuilder) -> ConstructorMember:
    return ConstructorMember(
        name=constructor_name(ctor.name),
        location=ctor.library_uri,
        is_const=ctor.is_const,
        parameters=types.build_parameters(ctor.parameters),
    )


def build_field(field: ElementHandle, types: TypeReferenceBuilder) -> FieldMember:
    return FieldMember(
        name=field.name,
        location=field.library_uri,
        type=types.build(field.type),
        display_type=types.display(field.type),
        is_static=field.is_static,
        is_final=field.is_final,
        is_late=field.is_late,
        is_const=field.is_const,
    )


def build_getter(getter: ElementHandle, types: TypeReferenceBuilder) -> GetterMember:
    return GetterMember(
        name=base_name(getter.name),
        location=getter.library_uri,
        return_type=types.build(getter.return_type),
        display_return_type=types.display(getter.return_type),
        is_static=getter.is_static,
    )


def build_setter(setter: ElementHandle, types: TypeReferenceBuilder) -> SetterMember:
    value_type = setter.parameters[0].type if setter.parameters else None
    return SetterMember(
        name=base_name(setter.name),
        location=setter.library_uri,
        parameter_type=types.build(value_type),
        display_parameter_type=types.display(value_type),
        is_static=setter.is_static,
    )


def build_method(method: ElementHandle, types: TypeReferenceBuilder) -> MethodMember:
    return MethodMember(
        name=method.name,
        location=method.library_uri,
        return_type=types.build(method.return_type),
        display_return_type=types.display(method.return_type),
        is_static=method.is_static,
        parameters=types.build_parameters(method.parameters),
        type_parameters=types.build_type_parameters(method.type_parameters),
        kind="operator" if method.is_operator else "method",
    )


def build_accessor_pair(
    getter: ElementHandle,
    setter: ElementHandle,
    types: TypeReferenceBuilder,
) -> FieldMember:
    """Report a getter/setter pair as one field.

    Uses the variable behind the getter when the engine links one, otherwise
    the getter's return type.
    """
    if getter.variable is not None and getter.variable.kind is ElementKind.FIELD:
        field = build_field(getter.variable, types)
        field.is_final = False
        return field
    return FieldMember(
        name=base_name(getter.name),
        location=getter.library_uri,
        type=types.build(getter.return_type),
        display_type=types.display(getter.return_type),
        is_static=getter.is_static,
    )


def _build_accessors(
    getter: Optional[ElementHandle],
    setter: Optional[ElementHandle],
    types: TypeReferenceBuilder,
) -> Member:
    if getter is not None and setter is not None:
        return build_accessor_pair(getter, setter, types)
    if getter is not None:
        return build_getter(getter, types)
    return build_setter(setter, types)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def resolve_members(
    element: ElementHandle,
    types: TypeReferenceBuilder,
    include_inherited: bool = True,
) -> List[Member]:
    """Resolve the public members of a class-like element.

    Args:
        element: Class, enum, mixin or extension handle.
        types: Type builder of the current run.
        include_inherited: Whether to append inherited-only members from the
            complete interface. Extensions have no interface and pass False.

    Returns:
        Constructors first, then the merged declared members, then inherited
        members. Member names are unique apart from constructors.
    """
    fields: Dict[str, ElementHandle] = {}
    getters: Dict[str, ElementHandle] = {}
    setters: Dict[str, ElementHandle] = {}
    constructors: List[ElementHandle] = []
    methods: List[ElementHandle] = []

    for child in element.children:
        if child.kind is ElementKind.CONSTRUCTOR:
            if child.is_synthetic or constructor_name(child.name).startswith(PRIVATE_PREFIX):
                continue
            if child.library_uri == FOUNDATION_LIBRARY_URI:
                continue
            constructors.append(child)
            continue
        if not is_reportable(child):
            continue
        if child.kind is ElementKind.FIELD:
            fields[child.name] = child
        elif child.kind is ElementKind.GETTER:
            getters[child.name] = child
        elif child.kind is ElementKind.SETTER:
            setters[base_name(child.name)] = child
        elif child.kind is ElementKind.METHOD:
            methods.append(child)

    members: List[Member] = [build_constructor(ctor, types) for ctor in constructors]
    processed: Set[str] = set()

    for name, field in fields.items():
        getter = getters.get(name)
        setter = setters.get(name)
        if getter is not None and setter is not None:
            members.append(build_field(field, types))
        elif getter is not None:
            members.append(build_getter(getter, types))
        elif setter is not None:
            members.append(build_setter(setter, types))
        else:
            members.append(build_field(field, types))
        processed.add(name)

    standalone = [name for name in getters if name not in processed]
    standalone.extend(name for name in setters if name not in processed and name not in getters)
    for name in standalone:
        members.append(_build_accessors(getters.get(name), setters.get(name), types))
        processed.add(name)

    for method in methods:
        if method.name in processed:
            logger.debug("Skipping duplicate member '%s' on %s", method.name, element.name)
            continue
        members.append(build_method(method, types))
        processed.add(method.name)

    if include_inherited:
        members.extend(_inherited_members(element, processed, types))

    logger.debug("Resolved %d members for %s", len(members), element.name)
    return members


def _inherited_members(
    element: ElementHandle,
    processed: Set[str],
    types: TypeReferenceBuilder,
) -> List[Member]:
    """Members visible through the complete interface but not declared."""
    order: List[str] = []
    inherited: Dict[str, Dict[ElementKind, ElementHandle]] = {}

    for member in element.interface_members.values():
        if member.kind not in _INTERFACE_KINDS or not is_reportable(member):
            continue
        name = base_name(member.name)
        if name in processed:
            continue
        if name not in inherited:
            inherited[name] = {}
            order.append(name)
        inherited[name].setdefault(member.kind, member)

    members: List[Member] = []
    for name in order:
        by_kind = inherited[name]
        method = by_kind.get(ElementKind.METHOD)
        if method is not None:
            members.append(build_method(method, types))
        else:
            members.append(_build_accessors(
                by_kind.get(ElementKind.GETTER),
                by_kind.get(ElementKind.SETTER),
                types,
            ))
        processed.add(name)
    return members
