"""Tests for the snapshot-backed semantic engine."""

import json
import tempfile
import unittest
from pathlib import Path

from semantic.engine import LibraryResolutionError
from semantic.handles import ElementKind, TypeKind
from semantic.snapshot import SnapshotEngine, SnapshotError, load_snapshot_document

BASE_URI = "package:demo/src/base.dart"
ENTRY_URI = "package:demo/demo.dart"

SNAPSHOT = {
    "libraries": [
        {
            "uri": BASE_URI,
            "declarations": [
                {"kind": "class", "name": "Node", "typeParameters": [{"name": "T", "bound": "Comparable<T>"}],
                 "fields": [{"name": "value", "type": "T"}, {"name": "id", "type": "int", "final": True}],
                 "methods": [{"name": "visit", "returns": "void",
                              "parameters": [{"name": "fn", "type": {"function": {
                                  "returns": "bool", "parameters": [{"type": "T"}]}}}]}]},
                {"kind": "class", "name": "Leaf", "extends": "Node<int>",
                 "getters": [{"name": "depth", "type": "int"}]},
                {"kind": "variable", "name": "counter", "type": "int"},
                {"kind": "variable", "name": "limit", "type": "int", "const": True},
                {"kind": "typedef", "name": "Visitor", "type": {"function": {"returns": "void"}}},
                {"kind": "function", "name": "broken", "returns": "List<Missing>"},
            ],
        },
        {
            "uri": ENTRY_URI,
            "reexports": [{"uri": BASE_URI, "hide": ["limit"]}],
            "exports": {"Tree": f"{BASE_URI}#Node"},
        },
        {"uri": "package:demo/bad.dart", "error": "Expected ';'"},
    ]
}


class _EngineTestCase(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)
        for relative in ("lib/src/base.dart", "lib/demo.dart", "lib/bad.dart"):
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("", encoding="utf-8")
        self.engine = SnapshotEngine(SNAPSHOT, str(self.root))


class TestResolve(_EngineTestCase):
    def test_export_namespace_applies_reexports_and_hide(self) -> None:
        """Test re-exports, aliases and hide combinators."""
        library = self.engine.resolve(self.root / "lib" / "demo.dart")
        self.assertEqual(library.uri, ENTRY_URI)
        names = set(dict(library.items()))
        self.assertIn("Node", names)
        self.assertIn("Tree", names)
        self.assertIn("counter", names)
        self.assertIn("counter=", names)
        self.assertNotIn("limit", names)
        self.assertIs(library.get("Tree"), library.get("Node"))

    def test_top_level_variable_appears_as_accessors(self) -> None:
        """Test that top-level variables export getter and setter."""
        library = self.engine.resolve(self.root / "lib" / "src" / "base.dart")
        getter = library.get("counter")
        setter = library.get("counter=")
        self.assertIs(getter.kind, ElementKind.GETTER)
        self.assertIs(setter.kind, ElementKind.SETTER)
        self.assertIs(getter.variable, setter.variable)
        self.assertIs(getter.variable.kind, ElementKind.TOP_LEVEL_VARIABLE)
        self.assertNotIn("limit=", dict(library.items()))

    def test_resolution_failures(self) -> None:
        """Test that unresolvable files raise LibraryResolutionError."""
        with self.assertRaises(LibraryResolutionError):
            self.engine.resolve(self.root / "lib" / "bad.dart")
        with self.assertRaises(LibraryResolutionError):
            self.engine.resolve(self.root / "lib" / "unknown.dart")
        with self.assertRaises(LibraryResolutionError):
            self.engine.resolve(self.root.parent / "elsewhere.dart")


class TestSynthesis(_EngineTestCase):
    def _declaration(self, name):
        return self.engine.resolve(self.root / "lib" / "src" / "base.dart").get(name)

    def test_fields_get_accessors_and_default_constructor(self) -> None:
        """Test synthesized accessors and default constructor."""
        node = self._declaration("Node")
        kinds = [(c.kind, c.name) for c in node.children]
        self.assertIn((ElementKind.GETTER, "value"), kinds)
        self.assertIn((ElementKind.SETTER, "value="), kinds)
        self.assertIn((ElementKind.GETTER, "id"), kinds)
        self.assertNotIn((ElementKind.SETTER, "id="), kinds)
        constructors = node.constructors
        self.assertEqual(len(constructors), 1)
        self.assertTrue(constructors[0].is_synthetic)
        self.assertEqual(constructors[0].name, "new")

    def test_explicit_getter_gets_synthetic_field(self) -> None:
        """Test the synthetic field behind an explicit getter."""
        leaf = self._declaration("Leaf")
        depth = next(f for f in leaf.fields if f.name == "depth")
        self.assertTrue(depth.is_synthetic)
        self.assertIsNotNone(depth.getter)
        self.assertIsNone(depth.setter)

    def test_complete_interface_includes_inherited_and_object_members(self) -> None:
        """Test complete interface contents."""
        leaf = self._declaration("Leaf")
        interface = leaf.interface_members
        self.assertEqual(interface["visit"].library_uri, BASE_URI)
        self.assertEqual(interface["depth"].library_uri, BASE_URI)
        self.assertEqual(interface["toString"].library_uri, "dart:core")
        self.assertIn("hashCode", interface)
        self.assertIn("value=", interface)

    def test_type_expressions(self) -> None:
        """Test parsing of generic, function and supertype expressions."""
        node = self._declaration("Node")
        param = node.type_parameters[0]
        self.assertIs(param.bound.kind, TypeKind.INTERFACE)
        self.assertIs(param.bound.type_arguments[0].element, param)

        visit = next(c for c in node.children if c.name == "visit")
        fn_type = visit.parameters[0].type
        self.assertIs(fn_type.kind, TypeKind.FUNCTION)
        self.assertEqual(fn_type.display_string(), "bool Function(T)")

        leaf = self._declaration("Leaf")
        self.assertEqual(leaf.supertype.display_string(), "Node<int>")
        self.assertEqual(leaf.supertype.type_arguments[0].element.library_uri, "dart:core")

    def test_unknown_type_is_invalid_with_name(self) -> None:
        """Test that unknown type names resolve to invalid types."""
        broken = self._declaration("broken")
        argument = broken.return_type.type_arguments[0]
        self.assertIs(argument.kind, TypeKind.INVALID)
        self.assertEqual(argument.element.name, "Missing")
        self.assertEqual(broken.return_type.display_string(), "List<InvalidType>")

    def test_identity_key(self) -> None:
        """Test the identity key of a snapshot declaration."""
        self.assertEqual(self._declaration("Node").identity_key, f"{BASE_URI}::Node::class")


class TestCyclicReexports(unittest.TestCase):
    A_URI = "package:demo/a.dart"
    B_URI = "package:demo/b.dart"

    def _engine(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        root = Path(tmp.name)
        (root / "lib").mkdir()
        for name in ("a.dart", "b.dart"):
            (root / "lib" / name).write_text("", encoding="utf-8")
        document = {"libraries": [
            {"uri": self.A_URI, "declarations": [{"kind": "class", "name": "Alpha"}],
             "reexports": [{"uri": self.B_URI}]},
            {"uri": self.B_URI, "declarations": [{"kind": "class", "name": "Beta"}],
             "reexports": [{"uri": self.A_URI}]},
        ]}
        return SnapshotEngine(document, str(root)), root / "lib"

    def test_mutual_reexports_are_complete_in_any_order(self) -> None:
        """Libraries re-exporting each other both see the whole cycle."""
        for order in (("a.dart", "b.dart"), ("b.dart", "a.dart")):
            with self.subTest(order=order):
                engine, lib = self._engine()
                for name in order:
                    names = set(dict(engine.resolve(lib / name).items()))
                    self.assertEqual(names, {"Alpha", "Beta"})


class TestSnapshotErrors(unittest.TestCase):
    def test_rejects_malformed_documents(self) -> None:
        """Test that malformed snapshots raise SnapshotError."""
        cases = [
            {"libraries": {}},
            {"libraries": [{"uri": ""}]},
            {"libraries": [{"uri": "package:demo/a.dart", "declarations": [{"kind": "record", "name": "R"}]}]},
            {"libraries": [{"uri": "package:demo/a.dart", "reexports": ["package:demo/missing.dart"]}]},
            {"libraries": [{"uri": "package:demo/a.dart",
                            "declarations": [{"kind": "function", "name": "f", "returns": "List<int"}]}]},
            {"libraries": [{"uri": "package:demo/a.dart"}, {"uri": "package:demo/a.dart"}]},
        ]
        for document in cases:
            with self.subTest(document=document):
                with self.assertRaises(SnapshotError):
                    SnapshotEngine(document, ".")

    def test_load_snapshot_document_json_and_yaml(self) -> None:
        """Test loading snapshots from JSON and YAML files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            json_path = Path(tmpdir) / "snap.json"
            json_path.write_text(json.dumps({"libraries": []}), encoding="utf-8")
            self.assertEqual(load_snapshot_document(str(json_path)), {"libraries": []})

            yaml_path = Path(tmpdir) / "snap.yaml"
            yaml_path.write_text("libraries: []\n", encoding="utf-8")
            self.assertEqual(load_snapshot_document(str(yaml_path)), {"libraries": []})

            bad_path = Path(tmpdir) / "bad.yaml"
            bad_path.write_text("- just\n- a list\n", encoding="utf-8")
            with self.assertRaises(SnapshotError):
                load_snapshot_document(str(bad_path))

            with self.assertRaises(FileNotFoundError):
                load_snapshot_document(str(Path(tmpdir) / "absent.yaml"))


if __name__ == "__main__":
    unittest.main()
