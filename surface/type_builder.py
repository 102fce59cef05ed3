"""
Type reference builder.

Turns resolved ``TypeHandle`` objects into the structural type model and
into display strings, and attributes class types to the public entry library
a consumer would import them from.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from core.uri_contract import is_foundation_uri, package_name_of
from semantic.engine import ResolvedLibrary
from semantic.handles import INVALID_TYPE_DISPLAY, ElementHandle, ParameterHandle, TypeHandle, TypeKind
from surface.config import EXTERNAL_PACKAGES, UNNAMED_PARAMETER_NAMES
from surface.type_model import (
    ClassType,
    DynamicType,
    FunctionType,
    GenericType,
    Parameter,
    TypeParameter,
    TypeRef,
    VoidType,
)

logger = logging.getLogger(__name__)


def parameter_name(param: ParameterHandle, index: int) -> str:
    """Public name of a parameter; unnamed ones become ``p<index>``."""
    if param.name is None or param.name in UNNAMED_PARAMETER_NAMES:
        return f"p{index}"
    return param.name


class TypeReferenceBuilder:
    """Build ``TypeRef`` values for one extraction run.

    Args:
        entry_libraries: Successfully resolved public entry libraries, in
            discovery order. The first one exporting a declaration becomes
            its defining module.
        external_packages: Package names whose types keep their own URI.

    Attributes:
        anomalies: Number of unresolved types encountered so far.
    """

    def __init__(
        self,
        entry_libraries: Sequence[ResolvedLibrary] = (),
        external_packages: Sequence[str] = EXTERNAL_PACKAGES,
    ):
        self._entry_libraries = list(entry_libraries)
        self._external_packages = frozenset(external_packages)
        self._name_index: Optional[Dict[str, List[Tuple[str, ElementHandle]]]] = None
        self._defining_modules: Dict[Tuple[str, str], str] = {}
        self.anomalies = 0

    # ------------------------------------------------------------------
    # Structural types
    # ------------------------------------------------------------------

    def build(self, type_handle: Optional[TypeHandle]) -> TypeRef:
        return self._build(type_handle, set())

    def _build(self, type_handle: Optional[TypeHandle], building: Set[ElementHandle]) -> TypeRef:
        if type_handle is None:
            return DynamicType()

        kind = type_handle.kind
        if kind is TypeKind.DYNAMIC:
            return DynamicType()
        if kind in (TypeKind.VOID, TypeKind.NEVER):
            return VoidType()
        if kind is TypeKind.INVALID:
            element = type_handle.element
            self.anomalies += 1
            logger.debug(
                "Unresolved type '%s' degraded to void",
                element.name if element is not None and element.name else INVALID_TYPE_DISPLAY,
            )
            return VoidType()
        if kind is TypeKind.TYPE_PARAMETER and type_handle.element is not None:
            return self._build_generic(type_handle, building)
        if kind is TypeKind.INTERFACE and type_handle.element is not None:
            element = type_handle.element
            return ClassType(
                name=element.name,
                defining_module=self.defining_module(element),
                nullable=type_handle.nullable,
                type_arguments=[self._build(arg, building) for arg in type_handle.type_arguments],
            )
        if kind is TypeKind.FUNCTION:
            return FunctionType(
                return_type=(
                    self._build(type_handle.return_type, building)
                    if type_handle.return_type is not None
                    else None
                ),
                parameters=[
                    self._parameter(param, index, building)
                    for index, param in enumerate(type_handle.parameters)
                ],
                nullable=type_handle.nullable,
            )
        return DynamicType()

    def _build_generic(self, type_handle: TypeHandle, building: Set[ElementHandle]) -> GenericType:
        param = type_handle.element
        # A bound that refers back to a parameter under construction
        # (``T extends Comparable<T>``) stops at a bare reference.
        if param.bound is None or param in building:
            return GenericType(name=param.name, nullable=type_handle.nullable)

        building.add(param)
        try:
            bound = self._build(param.bound, building)
        finally:
            building.discard(param)
        return GenericType(name=param.name, bound=bound, nullable=type_handle.nullable)

    # ------------------------------------------------------------------
    # Display strings
    # ------------------------------------------------------------------

    def display(self, type_handle: Optional[TypeHandle]) -> str:
        """Render a type as source text.

        The unresolved sentinel is replaced by the underlying element name
        when there is one.
        """
        if type_handle is None:
            return "dynamic"

        text = type_handle.display_string()
        if text != INVALID_TYPE_DISPLAY:
            return text

        element = type_handle.element
        if element is not None and element.name:
            return element.name

        logger.warning("Unresolved type without a resolvable name; keeping '%s'", INVALID_TYPE_DISPLAY)
        return text

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def build_parameter(self, param: ParameterHandle, index: int) -> Parameter:
        return self._parameter(param, index, set())

    def _parameter(self, param: ParameterHandle, index: int, building: Set[ElementHandle]) -> Parameter:
        default = param.default_value_code if param.has_default_value else None
        return Parameter(
            name=parameter_name(param, index),
            type=self._build(param.type, building),
            display_type=self.display(param.type),
            is_optional=param.is_optional,
            is_named=param.is_named,
            has_default_value=param.has_default_value,
            is_required=param.is_required,
            default_value_source=default or None,
        )

    def build_parameters(self, params: Sequence[ParameterHandle]) -> Optional[List[Parameter]]:
        """Build a parameter list, ``None`` when there are no parameters."""
        if not params:
            return None
        return [self.build_parameter(param, index) for index, param in enumerate(params)]

    def build_type_parameter(self, param: ElementHandle) -> TypeParameter:
        if param.bound is None:
            return TypeParameter(name=param.name)
        return TypeParameter(
            name=param.name,
            bound=self._build(param.bound, {param}),
            display_bound=self.display(param.bound),
        )

    def build_type_parameters(self, params: Sequence[ElementHandle]) -> Optional[List[TypeParameter]]:
        if not params:
            return None
        return [self.build_type_parameter(param) for param in params]

    # ------------------------------------------------------------------
    # Defining module
    # ------------------------------------------------------------------

    def is_external(self, library_uri: Optional[str]) -> bool:
        """True for SDK libraries and the configured external packages."""
        return is_foundation_uri(library_uri) or package_name_of(library_uri) in self._external_packages

    def defining_module(self, element: Optional[ElementHandle]) -> Optional[str]:
        """URI a consumer should import ``element`` from.

        Foundation and external-ecosystem types keep their declaring library.
        Package types resolve to the first entry library that exports the
        same declaration, falling back to the declaring library.
        """
        if element is None:
            return None
        library_uri = element.library_uri
        if library_uri is None or not element.name:
            return library_uri
        if self.is_external(library_uri):
            return library_uri

        key = (library_uri, element.name)
        cached = self._defining_modules.get(key)
        if cached is not None:
            return cached

        module = library_uri
        for entry_uri, exported in self._index().get(element.name, ()):
            if exported.library_uri == library_uri and exported.name == element.name:
                module = entry_uri
                break
        self._defining_modules[key] = module
        return module

    def _index(self) -> Dict[str, List[Tuple[str, ElementHandle]]]:
        if self._name_index is None:
            index: Dict[str, List[Tuple[str, ElementHandle]]] = {}
            for library in self._entry_libraries:
                for name, exported in library.items():
                    index.setdefault(name, []).append((library.uri, exported))
            self._name_index = index
            logger.debug(
                "Indexed %d exported names across %d entry libraries",
                len(index),
                len(self._entry_libraries),
            )
        return self._name_index
