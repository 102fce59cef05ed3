"""End-to-end extraction scenarios over snapshot-backed packages."""

import unittest

from core.package_manifest import InvalidPackageError
from semantic.snapshot import SnapshotEngine
from surface.extractor import extract_api_surface
from surface.models import AnalysisResult
from surface.tests.fixtures.package_builder import PackageTestCase
from surface.type_model import ClassType, VoidType


def _base_library(base_method: str = "baseMethod"):
    return {
        "uri": "package:demo/src/base.dart",
        "declarations": [
            {
                "kind": "class",
                "name": "Base",
                "methods": [{"name": base_method, "returns": "void"}],
                "getters": [{"name": "baseValue", "type": "int"}],
            },
            {
                "kind": "class",
                "name": "Derived",
                "extends": "Base",
                "methods": [{"name": "derivedMethod", "returns": "String"}],
                "getters": [{"name": "derivedValue", "type": "bool"}],
            },
        ],
    }


ENTRY = {"uri": "package:demo/demo.dart", "reexports": ["package:demo/src/base.dart"]}


class TestInheritanceScenarios(PackageTestCase):
    def test_derived_reports_declared_and_inherited_members(self) -> None:
        """Test declared plus inherited members of a subclass."""
        result, _ = self.extract([_base_library(), ENTRY])

        classes = result.of_type("class")
        self.assertEqual([c.name for c in classes], ["Base", "Derived"])

        derived = result.find("Derived", "class")
        names = [m.name for m in derived.members]
        self.assertEqual(len(derived.members), 4)
        self.assertEqual(set(names), {"derivedMethod", "derivedValue", "baseMethod", "baseValue"})
        self.assertEqual(derived.superclass_chain, ["Base"])
        self.assertEqual(derived.superclass_chain_types[0].name, "Base")

    def test_declared_members_precede_inherited_ones(self) -> None:
        """Test that declared members come before inherited ones."""
        result, _ = self.extract([_base_library(), ENTRY])
        derived = result.find("Derived", "class")
        kinds = [(m.name, m.kind) for m in derived.members]
        self.assertEqual(
            kinds,
            [
                ("derivedValue", "getter"),
                ("derivedMethod", "method"),
                ("baseValue", "getter"),
                ("baseMethod", "method"),
            ],
        )
        self.assertEqual(derived.members[2].location, "package:demo/src/base.dart")

    def test_private_base_method_is_never_reported(self) -> None:
        """Test that private inherited methods are excluded."""
        result, _ = self.extract([_base_library("_baseMethod"), ENTRY])
        for name in ("Base", "Derived"):
            members = [m.name for m in result.find(name, "class").members]
            self.assertNotIn("_baseMethod", members)
        self.assertEqual(len(result.find("Derived", "class").members), 3)

    def test_base_extending_object_has_no_superclass_chain(self) -> None:
        """Test that Object is not part of a superclass chain."""
        result, _ = self.extract([_base_library(), ENTRY])
        base = result.find("Base", "class")
        self.assertIsNone(base.superclass_chain)
        self.assertNotIn("superclassChain", base.to_dict())


class TestFieldAccessorScenario(PackageTestCase):
    def test_getter_and_setter_pair_is_one_field(self) -> None:
        """Test that a getter/setter pair collapses into one field."""
        libraries = [
            {
                "uri": "package:demo/demo.dart",
                "declarations": [
                    {
                        "kind": "class",
                        "name": "Counter",
                        "fields": [{"name": "_count", "type": "int"}],
                        "getters": [{"name": "count", "type": "int"}],
                        "setters": [{"name": "count", "type": "int"}],
                    }
                ],
            }
        ]
        result, _ = self.extract(libraries)
        counter = result.find("Counter", "class")
        matching = [m for m in counter.members if m.name == "count"]
        self.assertEqual(len(matching), 1)
        self.assertEqual(matching[0].kind, "field")
        self.assertFalse(matching[0].is_final)
        self.assertEqual(matching[0].display_type, "int")


class TestVariableScenario(PackageTestCase):
    def test_variable_exported_twice_is_one_element(self) -> None:
        """Test that a variable exported from two files is one element."""
        libraries = [
            {
                "uri": "package:demo/src/constants.dart",
                "declarations": [{"kind": "variable", "name": "version", "type": "String"}],
            },
            {"uri": "package:demo/a.dart", "reexports": ["package:demo/src/constants.dart"]},
            {"uri": "package:demo/b.dart", "reexports": ["package:demo/src/constants.dart"]},
        ]
        result, _ = self.extract(libraries)

        variables = result.of_type("variable")
        self.assertEqual(len(variables), 1)
        self.assertEqual(variables[0].importable_from, ["package:demo/a.dart", "package:demo/b.dart"])
        self.assertEqual(variables[0].defined_in, "package:demo/src/constants.dart")
        self.assertFalse(variables[0].is_final)


class TestMissingManifestScenario(PackageTestCase):
    def test_missing_manifest_fails_before_extraction(self) -> None:
        """Test that a missing manifest fails before extraction."""
        libraries = [{"uri": "package:demo/demo.dart", "declarations": []}]
        engine = self.make_engine(libraries, manifest=False)
        with self.assertRaises(InvalidPackageError):
            extract_api_surface(str(self.root), engine)

    def test_missing_root_fails(self) -> None:
        """Test that a missing package root fails."""
        engine = SnapshotEngine({"libraries": []}, str(self.root))
        with self.assertRaises(InvalidPackageError):
            extract_api_surface(str(self.root / "absent"), engine)


class TestUnresolvedTypeScenario(PackageTestCase):
    def test_unresolved_type_argument_degrades(self) -> None:
        """Test that an unresolved type argument degrades to void."""
        libraries = [
            {
                "uri": "package:demo/demo.dart",
                "declarations": [
                    {"kind": "function", "name": "load", "returns": "List<MissingType>"},
                    {"kind": "variable", "name": "current", "type": "MissingType"},
                ],
            }
        ]
        result, stats = self.extract(libraries)
        self.assertIsInstance(result, AnalysisResult)

        load = result.find("load", "function")
        self.assertIsInstance(load.return_type, ClassType)
        self.assertEqual(load.return_type.name, "List")
        self.assertEqual(load.return_type.type_arguments, [VoidType()])
        self.assertEqual(load.display_return_type, "List<InvalidType>")

        current = result.find("current", "variable")
        self.assertEqual(current.type, VoidType())
        self.assertEqual(current.display_type, "MissingType")
        self.assertGreaterEqual(stats.type_anomalies, 2)


if __name__ == "__main__":
    unittest.main()
