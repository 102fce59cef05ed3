"""
Element classification and extraction.

Dispatches an exported declaration to the extractor for its kind and builds
the matching element model. Kinds without a model (mixins, typedefs, bare
accessors) yield ``None``.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from semantic.handles import ElementHandle, ElementKind, TypeHandle
from surface.members import resolve_members
from surface.models import (
    ClassElement,
    Element,
    EnumElement,
    EnumValue,
    ExtensionElement,
    FunctionElement,
    VariableElement,
)
from surface.type_builder import TypeReferenceBuilder
from surface.type_model import TypeRef

logger = logging.getLogger(__name__)


class ElementExtractor:
    """Build element models for one extraction run.

    Args:
        types: Type builder shared by every element of the run.
    """

    def __init__(self, types: TypeReferenceBuilder):
        self.types = types
        self._extractors: Dict[ElementKind, Callable[[ElementHandle, List[str]], Element]] = {
            ElementKind.CLASS: self._extract_class,
            ElementKind.ENUM: self._extract_enum,
            ElementKind.FUNCTION: self._extract_function,
            ElementKind.TOP_LEVEL_VARIABLE: self._extract_variable,
            ElementKind.EXTENSION: self._extract_extension,
        }

    def extract(self, element: ElementHandle, importable_from: List[str]) -> Optional[Element]:
        """Extract one element.

        Args:
            element: Exported declaration.
            importable_from: Sorted entry paths exporting it.

        Returns:
            The element model, or None for kinds that are not reported.
        """
        extractor = self._extractors.get(element.kind)
        if extractor is None:
            logger.debug("Ignoring %s '%s'", element.kind.value, element.name)
            return None
        return extractor(element, list(importable_from))

    # ------------------------------------------------------------------
    # Kinds
    # ------------------------------------------------------------------

    def _extract_class(self, element: ElementHandle, importable_from: List[str]) -> ClassElement:
        chain, chain_types = self.superclass_chain(element)
        interfaces, interface_types = self._type_list(element.interfaces)
        mixins, mixin_types = self._type_list(element.mixins)
        return ClassElement(
            name=element.name,
            importable_from=importable_from,
            defined_in=element.library_uri,
            members=resolve_members(element, self.types),
            documentation=element.documentation,
            is_abstract=element.is_abstract,
            type_parameters=self.types.build_type_parameters(element.type_parameters),
            superclass_chain=chain,
            superclass_chain_types=chain_types,
            interfaces=interfaces,
            interface_types=interface_types,
            mixins=mixins,
            mixin_types=mixin_types,
        )

    def _extract_enum(self, element: ElementHandle, importable_from: List[str]) -> EnumElement:
        values = [
            EnumValue(name=child.name, documentation=child.documentation)
            for child in element.fields
            if child.is_enum_constant and not child.is_private
        ]
        interfaces, interface_types = self._type_list(element.interfaces)
        mixins, mixin_types = self._type_list(element.mixins)
        members = resolve_members(element, self.types)
        return EnumElement(
            name=element.name,
            importable_from=importable_from,
            defined_in=element.library_uri,
            values=values,
            documentation=element.documentation,
            type_parameters=self.types.build_type_parameters(element.type_parameters),
            members=members or None,
            interfaces=interfaces,
            interface_types=interface_types,
            mixins=mixins,
            mixin_types=mixin_types,
        )

    def _extract_function(self, element: ElementHandle, importable_from: List[str]) -> FunctionElement:
        return FunctionElement(
            name=element.name,
            importable_from=importable_from,
            defined_in=element.library_uri,
            return_type=self.types.build(element.return_type),
            display_return_type=self.types.display(element.return_type),
            documentation=element.documentation,
            type_parameters=self.types.build_type_parameters(element.type_parameters),
            parameters=self.types.build_parameters(element.parameters),
        )

    def _extract_variable(self, element: ElementHandle, importable_from: List[str]) -> VariableElement:
        return VariableElement(
            name=element.name,
            importable_from=importable_from,
            defined_in=element.library_uri,
            type=self.types.build(element.type),
            display_type=self.types.display(element.type),
            documentation=element.documentation,
            is_const=element.is_const,
            is_final=element.is_final,
            is_late=element.is_late,
        )

    def _extract_extension(self, element: ElementHandle, importable_from: List[str]) -> ExtensionElement:
        return ExtensionElement(
            name=element.name,
            importable_from=importable_from,
            defined_in=element.library_uri,
            on_type=self.types.build(element.extended_type),
            display_on_type=self.types.display(element.extended_type),
            members=resolve_members(element, self.types, include_inherited=False),
            documentation=element.documentation,
            type_parameters=self.types.build_type_parameters(element.type_parameters),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def superclass_chain(self, element: ElementHandle) -> Tuple[Optional[List[str]], Optional[List[TypeRef]]]:
        """Superclasses nearest first, stopping before ``Object``.

        Returns:
            ``(names, types)``, both None when the class extends ``Object``.
        """
        names: List[str] = []
        chain_types: List[TypeRef] = []
        seen = {element}
        current = element.supertype
        while current is not None and not current.is_foundation_object():
            names.append(self.types.display(current))
            chain_types.append(self.types.build(current))
            parent = current.element
            if parent is None or parent in seen:
                break
            seen.add(parent)
            current = parent.supertype
        if not names:
            return None, None
        return names, chain_types

    def _type_list(self, handles: List[TypeHandle]) -> Tuple[Optional[List[str]], Optional[List[TypeRef]]]:
        if not handles:
            return None, None
        return [self.types.display(h) for h in handles], [self.types.build(h) for h in handles]
