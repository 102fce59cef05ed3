"""Tests for the element/member/type models and their wire format."""

import json
import unittest

from surface.models import (
    AnalysisResult,
    ClassElement,
    ConstructorMember,
    EnumElement,
    EnumValue,
    ExtensionElement,
    FieldMember,
    FunctionElement,
    GetterMember,
    MethodMember,
    SetterMember,
    VariableElement,
    element_from_dict,
    member_from_dict,
)
from surface.type_model import (
    ClassType,
    DynamicType,
    FunctionType,
    GenericType,
    Parameter,
    TypeParameter,
    VoidType,
    type_from_dict,
)

INT = ClassType(name="int", defining_module="dart:core")
STRING = ClassType(name="String", defining_module="dart:core")


def _sample_result() -> AnalysisResult:
    callback = FunctionType(
        return_type=VoidType(),
        parameters=[Parameter(name="p0", type=INT, display_type="int")],
        nullable=True,
    )
    return AnalysisResult(elements=[
        ClassElement(
            name="Box",
            importable_from=["package:demo/demo.dart"],
            defined_in="package:demo/src/box.dart",
            documentation="/// A box.",
            is_abstract=True,
            type_parameters=[TypeParameter(
                name="T",
                bound=ClassType(
                    name="Comparable",
                    defining_module="dart:core",
                    type_arguments=[GenericType(name="T")],
                ),
                display_bound="Comparable<T>",
            )],
            superclass_chain=["Shape"],
            superclass_chain_types=[ClassType(name="Shape", defining_module="package:demo/demo.dart")],
            members=[
                ConstructorMember(name="", location="package:demo/src/box.dart", is_const=True),
                FieldMember(name="value", location="package:demo/src/box.dart",
                            type=GenericType(name="T", nullable=True), display_type="T?", is_late=True),
                GetterMember(name="size", location="package:demo/src/box.dart",
                             return_type=INT, display_return_type="int"),
                SetterMember(name="label", location="package:demo/src/box.dart",
                             parameter_type=STRING, display_parameter_type="String"),
                MethodMember(
                    name="map",
                    location="package:demo/src/box.dart",
                    return_type=ClassType(name="Box", type_arguments=[GenericType(name="R")]),
                    display_return_type="Box<R>",
                    parameters=[Parameter(
                        name="transform",
                        type=callback,
                        display_type="void Function(int)?",
                        is_optional=True,
                        is_named=True,
                        has_default_value=True,
                        is_required=False,
                        default_value_source="null",
                    )],
                    type_parameters=[TypeParameter(name="R")],
                ),
                MethodMember(name="==", location="package:demo/src/box.dart",
                             return_type=ClassType(name="bool", defining_module="dart:core"),
                             display_return_type="bool", kind="operator"),
            ],
        ),
        EnumElement(
            name="Color",
            importable_from=["package:demo/demo.dart"],
            defined_in="package:demo/src/color.dart",
            values=[EnumValue(name="red", documentation="/// Red."), EnumValue(name="green")],
        ),
        FunctionElement(
            name="run",
            importable_from=["package:demo/demo.dart"],
            defined_in="package:demo/demo.dart",
            return_type=DynamicType(),
            display_return_type="dynamic",
        ),
        VariableElement(
            name="version",
            importable_from=["package:demo/a.dart", "package:demo/b.dart"],
            defined_in="package:demo/src/constants.dart",
            type=STRING,
            display_type="String",
            is_const=True,
            is_final=True,
        ),
        ExtensionElement(
            name="StringX",
            importable_from=["package:demo/demo.dart"],
            defined_in="package:demo/demo.dart",
            on_type=STRING,
            display_on_type="String",
        ),
    ])


class TestTypeModel(unittest.TestCase):
    def test_function_type_carries_fixed_name_marker(self) -> None:
        """Test the fixed name of function types."""
        payload = FunctionType(return_type=VoidType()).to_dict()
        self.assertEqual(payload["kind"], "function")
        self.assertEqual(payload["name"], "Function")

    def test_class_type_omits_missing_defining_module(self) -> None:
        """Test that a missing defining module is omitted."""
        payload = ClassType(name="Foo").to_dict()
        self.assertNotIn("definingModule", payload)
        self.assertEqual(payload["typeArguments"], [])

    def test_unknown_type_kind_is_rejected(self) -> None:
        """Test that unknown type kinds are rejected."""
        with self.assertRaises(ValueError):
            type_from_dict({"kind": "record"})
        with self.assertRaises(ValueError):
            type_from_dict({"name": "Foo"})

    def test_parameter_optional_keys_are_omitted(self) -> None:
        """Test that unset parameter keys are omitted."""
        payload = Parameter(name="x", type=INT, display_type="int").to_dict()
        self.assertNotIn("isRequired", payload)
        self.assertNotIn("defaultValueSource", payload)
        self.assertEqual(Parameter.from_dict(payload), Parameter(name="x", type=INT, display_type="int"))


class TestElementModel(unittest.TestCase):
    def test_round_trip_through_json(self) -> None:
        """Test a JSON round trip."""
        result = _sample_result()
        text = result.to_json()
        decoded = AnalysisResult.from_json(text)
        self.assertEqual(decoded, result)
        self.assertEqual(decoded.to_json(), text)

    def test_wire_keys_are_camel_case(self) -> None:
        """Test that wire keys are camelCase."""
        payload = _sample_result().to_dict()
        box = payload["elements"][0]
        self.assertEqual(box["elementType"], "class")
        self.assertIn("importableFrom", box)
        self.assertIn("definedIn", box)
        self.assertIn("superclassChainTypes", box)
        self.assertNotIn("interfaces", box)
        field = box["members"][1]
        self.assertEqual(field["kind"], "field")
        self.assertTrue(field["isLate"])
        self.assertEqual(field["type"], {"kind": "generic", "name": "T", "nullable": True})

    def test_operator_methods_keep_their_kind(self) -> None:
        """Test that operator methods keep their kind."""
        payload = _sample_result().to_dict()
        operator = payload["elements"][0]["members"][-1]
        self.assertEqual(operator["kind"], "operator")
        self.assertIsInstance(member_from_dict(operator), MethodMember)

    def test_invalid_method_kind_is_rejected(self) -> None:
        """Test that an invalid method kind is rejected."""
        with self.assertRaises(ValueError):
            MethodMember(name="x", location="l", return_type=VoidType(),
                         display_return_type="void", kind="getter")

    def test_unknown_discriminants_are_rejected(self) -> None:
        """Test that unknown discriminants are rejected."""
        with self.assertRaises(ValueError):
            element_from_dict({"elementType": "mixin", "name": "M"})
        with self.assertRaises(ValueError):
            member_from_dict({"kind": "typedef", "name": "T"})
        with self.assertRaises(ValueError):
            AnalysisResult.from_dict({"items": []})

    def test_summary_counts_each_element_type(self) -> None:
        """Test summary counts per element type."""
        summary = _sample_result().summary()
        self.assertEqual(summary, {
            "class": 1,
            "enum": 1,
            "function": 1,
            "variable": 1,
            "extension": 1,
            "total": 5,
        })

    def test_serialized_form_is_plain_json(self) -> None:
        """Test that the serialized form is plain JSON."""
        text = _sample_result().to_json()
        self.assertEqual(json.loads(text)["elements"][3]["importableFrom"],
                         ["package:demo/a.dart", "package:demo/b.dart"])


if __name__ == "__main__":
    unittest.main()
