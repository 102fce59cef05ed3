"""Tests for element and type handles."""

import unittest

from semantic.handles import ElementHandle, ElementKind, ParameterHandle, TypeHandle, TypeKind


def _core(name: str) -> TypeHandle:
    return TypeHandle(TypeKind.INTERFACE, element=ElementHandle(kind=ElementKind.CLASS, name=name,
                                                                library_uri="dart:core"))


class TestTypeDisplay(unittest.TestCase):
    def test_simple_types(self) -> None:
        """Test display of dynamic, void, Never and invalid types."""
        self.assertEqual(TypeHandle(TypeKind.DYNAMIC).display_string(), "dynamic")
        self.assertEqual(TypeHandle(TypeKind.VOID).display_string(), "void")
        self.assertEqual(TypeHandle(TypeKind.NEVER, nullable=True).display_string(), "Never?")
        self.assertEqual(TypeHandle(TypeKind.INVALID).display_string(), "InvalidType")

    def test_generic_interface(self) -> None:
        """Test display of a nullable generic interface type."""
        handle = TypeHandle(
            TypeKind.INTERFACE,
            nullable=True,
            element=ElementHandle(kind=ElementKind.CLASS, name="Map", library_uri="dart:core"),
            type_arguments=[_core("String"), _core("int")],
        )
        self.assertEqual(handle.display_string(), "Map<String, int>?")

    def test_function_type_parameter_groups(self) -> None:
        """Test display of positional, optional and named parameters."""
        handle = TypeHandle(
            TypeKind.FUNCTION,
            return_type=_core("bool"),
            parameters=[
                ParameterHandle(name="a", type=_core("int")),
                ParameterHandle(name="b", type=_core("String"), is_optional=True),
                ParameterHandle(name="c", type=_core("int"), is_named=True, is_required=True),
            ],
        )
        self.assertEqual(handle.display_string(), "bool Function(int, [String], {required int c})")

    def test_foundation_object_detection(self) -> None:
        """Test detecting the dart:core Object type."""
        self.assertTrue(_core("Object").is_foundation_object())
        self.assertFalse(_core("String").is_foundation_object())


class TestElementHandle(unittest.TestCase):
    def test_identity_semantics(self) -> None:
        """Test that handles compare by identity, keys by value."""
        a = ElementHandle(kind=ElementKind.CLASS, name="A", library_uri="package:demo/a.dart")
        b = ElementHandle(kind=ElementKind.CLASS, name="A", library_uri="package:demo/a.dart")
        self.assertNotEqual(a, b)
        self.assertEqual(len({a, b}), 2)
        self.assertEqual(a.identity_key, b.identity_key)

    def test_private_and_accessor_flags(self) -> None:
        """Test private and accessor flags."""
        self.assertTrue(ElementHandle(kind=ElementKind.CLASS, name="_A").is_private)
        self.assertFalse(ElementHandle(kind=ElementKind.CLASS, name=None).is_private)
        self.assertTrue(ElementHandle(kind=ElementKind.SETTER, name="x=").is_accessor)

    def test_unnamed_parameter_display_name(self) -> None:
        """Test the placeholder name of unnamed parameters."""
        self.assertEqual(ParameterHandle(name=None, type=_core("int")).display_name, "<unnamed>")
        fn = TypeHandle(TypeKind.FUNCTION, return_type=_core("bool"),
                        parameters=[ParameterHandle(name=None, type=_core("int"), is_named=True)])
        self.assertEqual(fn.display_string(), "bool Function({int <unnamed>})")
        self.assertFalse(ParameterHandle(name="x", type=_core("int")).has_default_value)


if __name__ == "__main__":
    unittest.main()
