"""
Snapshot-backed semantic engine.

Serves resolved libraries from a declaration snapshot (YAML or JSON) produced
ahead of time by a semantic analyzer run. The snapshot lists libraries, their
declarations and their re-exports; types are written as compact expressions
(``Map<String, List<int>?>``, ``package:foo/src/a.dart#Foo``) or, for
function types, as mappings.

The engine synthesizes what an analyzer would: implicit field accessors,
synthetic fields behind explicit getters/setters, the synthetic default
constructor, the ``dart:core`` ``Object``/``Enum`` roots with their universal
members, complete interfaces, and getter/setter pairs for top-level
variables.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import yaml

from semantic.engine import AnalysisEngine, LibraryResolutionError, ResolvedLibrary
from semantic.handles import (
    CLASS_LIKE_KINDS,
    FOUNDATION_LIBRARY_URI,
    FOUNDATION_ROOT_CLASS,
    SETTER_SUFFIX,
    UNNAMED_CONSTRUCTOR_TOKEN,
    ElementHandle,
    ElementKind,
    ParameterHandle,
    TypeHandle,
    TypeKind,
)

logger = logging.getLogger(__name__)

ASYNC_LIBRARY_URI = "dart:async"
ELEMENT_REF_SEPARATOR = "#"

CORE_TYPE_NAMES = frozenset({
    "BigInt", "Comparable", "DateTime", "Duration", "Enum", "Error", "Exception",
    "Function", "Invocation", "Iterable", "Iterator", "List", "Map", "MapEntry",
    "Null", "Object", "Pattern", "Record", "RegExp", "Set", "Sink", "StackTrace",
    "String", "Symbol", "Type", "Uri", "bool", "double", "int", "num",
})
ASYNC_TYPE_NAMES = frozenset({
    "Completer", "Future", "FutureOr", "Stream", "StreamController",
    "StreamSubscription", "Timer",
})
OPERATOR_NAMES = frozenset({
    "==", "+", "-", "*", "/", "~/", "%", "<", ">", "<=", ">=", "[]", "[]=",
    "~", "&", "|", "^", "<<", ">>", ">>>", "unary-",
})

_DECLARATION_KINDS = {
    "class": ElementKind.CLASS,
    "enum": ElementKind.ENUM,
    "mixin": ElementKind.MIXIN,
    "extension": ElementKind.EXTENSION,
    "typedef": ElementKind.TYPE_ALIAS,
    "function": ElementKind.FUNCTION,
    "variable": ElementKind.TOP_LEVEL_VARIABLE,
}
_TYPE_TOKEN_RE = re.compile(r"[<>,?]|[^<>,?\s]+")


class SnapshotError(ValueError):
    """Raised when a snapshot document is malformed."""


@dataclass
class _LibrarySpec:
    uri: str
    path: str
    declarations: List[Dict[str, Any]]
    reexports: List[Dict[str, Any]]
    exports: Dict[str, str]
    error: Optional[str] = None


@dataclass
class _Scope:
    library_uri: str
    type_parameters: Dict[str, ElementHandle] = field(default_factory=dict)

    def with_type_parameters(self, params: Iterable[ElementHandle]) -> "_Scope":
        merged = dict(self.type_parameters)
        for param in params:
            merged[param.name] = param
        return _Scope(self.library_uri, merged)


def load_snapshot_document(snapshot_path: str) -> Dict[str, Any]:
    """Load a snapshot document from a ``.json`` or YAML file."""
    path = Path(snapshot_path)
    if not path.is_file():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SnapshotError(f"Failed to parse snapshot {path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise SnapshotError("snapshot must be an object")
    return payload


def _default_library_path(uri: str) -> str:
    if not uri.startswith("package:"):
        raise SnapshotError(f"library '{uri}' needs an explicit path")
    _, _, rest = uri[len("package:"):].partition("/")
    if not rest:
        raise SnapshotError(f"library '{uri}' has no path component")
    return f"lib/{rest}"


def _as_list(value: Any, ctx: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SnapshotError(f"{ctx} must be a list")
    return value


class SnapshotEngine(AnalysisEngine):
    """Resolve library files against a pre-resolved declaration snapshot.

    Args:
        document: Parsed snapshot payload with a ``libraries`` list.
        package_root: Package root; library ``path`` entries are relative to it.

    Raises:
        SnapshotError: If the document is malformed.
    """

    def __init__(self, document: Dict[str, Any], package_root: str):
        self._root = Path(package_root).resolve()
        self._libraries: Dict[str, _LibrarySpec] = {}
        self._by_path: Dict[str, str] = {}
        self._declared: Dict[str, Dict[str, ElementHandle]] = {}
        self._externals: Dict[Tuple[str, str], ElementHandle] = {}
        self._aliases: Dict[ElementHandle, Tuple[Any, _Scope]] = {}
        self._aliases_in_progress: Set[ElementHandle] = set()
        self._namespaces: Dict[str, Dict[str, ElementHandle]] = {}
        self._interfaces_done: Set[ElementHandle] = set()

        self._object = self._build_foundation_object()
        self._enum_root = self._build_foundation_enum()
        self._load(document)

    @classmethod
    def from_file(cls, snapshot_path: str, package_root: str) -> "SnapshotEngine":
        return cls(load_snapshot_document(snapshot_path), package_root)

    # ------------------------------------------------------------------
    # AnalysisEngine
    # ------------------------------------------------------------------

    def resolve(self, file_path: Path) -> ResolvedLibrary:
        path = Path(file_path).resolve()
        try:
            relative = path.relative_to(self._root).as_posix()
        except ValueError:
            raise LibraryResolutionError(str(file_path), "file is outside the package root") from None

        uri = self._by_path.get(relative)
        if uri is None:
            raise LibraryResolutionError(str(file_path), "no resolved library in snapshot")

        spec = self._libraries[uri]
        if spec.error:
            raise LibraryResolutionError(str(file_path), spec.error)

        namespace = self._export_namespace(uri, set())
        logger.debug("Resolved %s (%d exported names)", uri, len(namespace))
        return ResolvedLibrary(uri=uri, path=str(path), export_namespace=dict(namespace))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load(self, document: Dict[str, Any]) -> None:
        if not isinstance(document, dict):
            raise SnapshotError("snapshot must be an object")

        for raw in _as_list(document.get("libraries"), "libraries"):
            spec = self._parse_library_spec(raw)
            if spec.uri in self._libraries:
                raise SnapshotError(f"Duplicate library uri in snapshot: {spec.uri}")
            self._libraries[spec.uri] = spec
            self._by_path[spec.path] = spec.uri

        # Shells first so declarations can reference each other in any order.
        pending: List[Tuple[ElementHandle, Dict[str, Any]]] = []
        for spec in self._libraries.values():
            declared: Dict[str, ElementHandle] = {}
            for decl in spec.declarations:
                handle = self._create_shell(decl, spec.uri)
                if handle.name in declared:
                    raise SnapshotError(f"Duplicate declaration '{handle.name}' in {spec.uri}")
                declared[handle.name] = handle
                pending.append((handle, decl))
            self._declared[spec.uri] = declared

        for handle, decl in pending:
            self._populate(handle, decl)

        for spec in self._libraries.values():
            for item in spec.reexports:
                if item["uri"] not in self._libraries:
                    raise SnapshotError(f"{spec.uri} re-exports unknown library {item['uri']}")

        for handle in self._all_class_like():
            self._complete_interface(handle, set())

        logger.info(
            "Loaded snapshot: %d libraries, %d declarations",
            len(self._libraries),
            len(pending),
        )

    def _parse_library_spec(self, raw: Any) -> _LibrarySpec:
        if not isinstance(raw, dict):
            raise SnapshotError("library entry must be an object")
        uri = str(raw.get("uri", "")).strip()
        if not uri:
            raise SnapshotError("library.uri is required")
        path = str(raw.get("path") or _default_library_path(uri)).replace("\\", "/").strip("/")

        reexports: List[Dict[str, Any]] = []
        for item in _as_list(raw.get("reexports"), f"{uri}: reexports"):
            if isinstance(item, str):
                reexports.append({"uri": item, "show": None, "hide": []})
            elif isinstance(item, dict) and item.get("uri"):
                show = item.get("show")
                reexports.append({
                    "uri": str(item["uri"]),
                    "show": set(show) if show is not None else None,
                    "hide": list(item.get("hide") or []),
                })
            else:
                raise SnapshotError(f"{uri}: reexport entries need a uri")

        exports = raw.get("exports") or {}
        if not isinstance(exports, dict):
            raise SnapshotError(f"{uri}: exports must map names to element refs")

        declarations = _as_list(raw.get("declarations"), f"{uri}: declarations")
        error = raw.get("error")
        return _LibrarySpec(
            uri=uri,
            path=path,
            declarations=declarations,
            reexports=reexports,
            exports={str(k): str(v) for k, v in exports.items()},
            error=str(error) if error else None,
        )

    def _create_shell(self, decl: Any, library_uri: str) -> ElementHandle:
        if not isinstance(decl, dict):
            raise SnapshotError(f"{library_uri}: declaration must be an object")
        kind = _DECLARATION_KINDS.get(str(decl.get("kind", "")))
        if kind is None:
            raise SnapshotError(f"{library_uri}: unknown declaration kind {decl.get('kind')!r}")
        name = str(decl.get("name", "")).strip()
        if not name:
            raise SnapshotError(f"{library_uri}: declaration without a name")
        return ElementHandle(
            kind=kind,
            name=name,
            library_uri=library_uri,
            documentation=decl.get("documentation"),
        )

    def _populate(self, handle: ElementHandle, decl: Dict[str, Any]) -> None:
        scope = _Scope(handle.library_uri)
        if handle.kind in CLASS_LIKE_KINDS:
            self._populate_class_like(handle, decl, scope)
        elif handle.kind is ElementKind.FUNCTION:
            params, scope = self._type_parameters(decl.get("typeParameters"), scope)
            handle.type_parameters = params
            handle.return_type = self._resolve_type(decl.get("returns", "dynamic"), scope)
            handle.parameters = self._parameters(decl.get("parameters"), scope)
        elif handle.kind is ElementKind.TOP_LEVEL_VARIABLE:
            handle.is_const = bool(decl.get("const"))
            handle.is_final = bool(decl.get("final")) or handle.is_const
            handle.is_late = bool(decl.get("late"))
            handle.type = self._resolve_type(decl.get("type", "dynamic"), scope)
            self._attach_accessors(handle, handle.library_uri, synthetic=True)
        elif handle.kind is ElementKind.TYPE_ALIAS:
            params, scope = self._type_parameters(decl.get("typeParameters"), scope)
            handle.type_parameters = params
            self._aliases[handle] = (decl.get("type", "dynamic"), scope)

    def _populate_class_like(self, handle: ElementHandle, decl: Dict[str, Any], scope: _Scope) -> None:
        uri = handle.library_uri
        handle.is_abstract = bool(decl.get("abstract"))
        params, scope = self._type_parameters(decl.get("typeParameters"), scope)
        handle.type_parameters = params

        if handle.kind is ElementKind.EXTENSION:
            if "on" not in decl:
                raise SnapshotError(f"{uri}: extension '{handle.name}' needs an 'on' type")
            handle.extended_type = self._resolve_type(decl["on"], scope)
        elif handle.kind is ElementKind.ENUM:
            handle.supertype = self._interface_type(self._enum_root)
        elif decl.get("extends") is not None:
            handle.supertype = self._resolve_type(decl["extends"], scope)
        else:
            handle.supertype = self._interface_type(self._object)

        handle.interfaces = [self._resolve_type(t, scope) for t in _as_list(decl.get("implements"), "implements")]
        handle.mixins = [self._resolve_type(t, scope) for t in _as_list(decl.get("with"), "with")]

        children: List[ElementHandle] = []
        self_type = self._interface_type(handle, [self._parameter_type(p) for p in params])
        for value in _as_list(decl.get("values"), "values"):
            value = value if isinstance(value, dict) else {"name": value}
            children.append(ElementHandle(
                kind=ElementKind.FIELD,
                name=str(value["name"]),
                library_uri=uri,
                documentation=value.get("documentation"),
                is_static=True,
                is_const=True,
                is_final=True,
                is_enum_constant=True,
                type=self_type,
            ))

        fields_by_name: Dict[str, ElementHandle] = {}
        for raw in _as_list(decl.get("fields"), "fields"):
            member = self._member_shell(ElementKind.FIELD, raw, uri)
            member.is_const = bool(raw.get("const"))
            member.is_final = bool(raw.get("final")) or member.is_const
            member.is_late = bool(raw.get("late"))
            member.type = self._resolve_type(raw.get("type", "dynamic"), scope)
            fields_by_name[member.name] = member
            children.append(member)
            children.extend(self._attach_accessors(member, uri, synthetic=True))

        if handle.kind in (ElementKind.CLASS, ElementKind.ENUM):
            children.extend(self._constructors(handle, decl, scope))

        for raw in _as_list(decl.get("getters"), "getters"):
            getter = self._member_shell(ElementKind.GETTER, raw, uri)
            getter.return_type = self._resolve_type(raw.get("type", "dynamic"), scope)
            backing = self._backing_field(fields_by_name, getter, getter.return_type, children)
            if backing.getter is not None:
                raise SnapshotError(f"{uri}: duplicate getter '{getter.name}' on {handle.name}")
            backing.getter = getter
            getter.variable = backing
            children.append(getter)

        for raw in _as_list(decl.get("setters"), "setters"):
            base = self._member_shell(ElementKind.SETTER, raw, uri)
            setter_type = self._resolve_type(raw.get("type", "dynamic"), scope)
            backing = self._backing_field(fields_by_name, base, setter_type, children)
            if backing.setter is not None:
                raise SnapshotError(f"{uri}: duplicate setter '{base.name}' on {handle.name}")
            base.name += SETTER_SUFFIX
            base.parameters = [ParameterHandle(name="value", type=setter_type)]
            base.return_type = TypeHandle(TypeKind.VOID)
            backing.setter = base
            backing.is_final = False
            base.variable = backing
            children.append(base)

        for raw in _as_list(decl.get("methods"), "methods"):
            method = self._member_shell(ElementKind.METHOD, raw, uri)
            method.is_operator = bool(raw.get("operator")) or method.name in OPERATOR_NAMES
            method.is_abstract = bool(raw.get("abstract"))
            method_params, method_scope = self._type_parameters(raw.get("typeParameters"), scope)
            method.type_parameters = method_params
            method.return_type = self._resolve_type(raw.get("returns", "dynamic"), method_scope)
            method.parameters = self._parameters(raw.get("parameters"), method_scope)
            children.append(method)

        handle.children = children

    def _constructors(self, owner: ElementHandle, decl: Dict[str, Any], scope: _Scope) -> List[ElementHandle]:
        constructors: List[ElementHandle] = []
        for raw in _as_list(decl.get("constructors"), "constructors"):
            raw = raw if isinstance(raw, dict) else {"name": raw}
            name = str(raw.get("name") or "").strip() or UNNAMED_CONSTRUCTOR_TOKEN
            constructors.append(ElementHandle(
                kind=ElementKind.CONSTRUCTOR,
                name=name,
                library_uri=owner.library_uri,
                documentation=raw.get("documentation"),
                is_const=bool(raw.get("const")),
                parameters=self._parameters(raw.get("parameters"), scope),
            ))
        if not constructors:
            constructors.append(ElementHandle(
                kind=ElementKind.CONSTRUCTOR,
                name=UNNAMED_CONSTRUCTOR_TOKEN,
                library_uri=owner.library_uri,
                is_const=owner.kind is ElementKind.ENUM,
                is_synthetic=True,
            ))
        return constructors

    def _member_shell(self, kind: ElementKind, raw: Any, uri: str) -> ElementHandle:
        if not isinstance(raw, dict) or not raw.get("name"):
            raise SnapshotError(f"{uri}: {kind.value} entries need a name")
        return ElementHandle(
            kind=kind,
            name=str(raw["name"]),
            library_uri=uri,
            documentation=raw.get("documentation"),
            is_static=bool(raw.get("static")),
        )

    def _backing_field(
        self,
        fields_by_name: Dict[str, ElementHandle],
        accessor: ElementHandle,
        value_type: TypeHandle,
        children: List[ElementHandle],
    ) -> ElementHandle:
        existing = fields_by_name.get(accessor.name)
        if existing is not None:
            if not existing.is_synthetic:
                raise SnapshotError(
                    f"{accessor.library_uri}: '{accessor.name}' is declared as a field and an accessor"
                )
            return existing
        backing = ElementHandle(
            kind=ElementKind.FIELD,
            name=accessor.name,
            library_uri=accessor.library_uri,
            is_static=accessor.is_static,
            is_final=True,
            is_synthetic=True,
            type=value_type,
        )
        fields_by_name[backing.name] = backing
        children.append(backing)
        return backing

    def _attach_accessors(self, variable: ElementHandle, uri: str, synthetic: bool) -> List[ElementHandle]:
        getter = ElementHandle(
            kind=ElementKind.GETTER,
            name=variable.name,
            library_uri=uri,
            is_static=variable.is_static,
            is_synthetic=synthetic,
            return_type=variable.type,
            variable=variable,
        )
        variable.getter = getter
        accessors = [getter]
        if not variable.is_final:
            setter = ElementHandle(
                kind=ElementKind.SETTER,
                name=variable.name + SETTER_SUFFIX,
                library_uri=uri,
                is_static=variable.is_static,
                is_synthetic=synthetic,
                parameters=[ParameterHandle(name="value", type=variable.type)],
                return_type=TypeHandle(TypeKind.VOID),
                variable=variable,
            )
            variable.setter = setter
            accessors.append(setter)
        return accessors

    # ------------------------------------------------------------------
    # Foundation library
    # ------------------------------------------------------------------

    def _build_foundation_object(self) -> ElementHandle:
        obj = ElementHandle(kind=ElementKind.CLASS, name=FOUNDATION_ROOT_CLASS, library_uri=FOUNDATION_LIBRARY_URI)
        self._externals[(FOUNDATION_LIBRARY_URI, FOUNDATION_ROOT_CLASS)] = obj
        self._object = obj

        def core(name: str) -> TypeHandle:
            return self._interface_type(self._external_class(FOUNDATION_LIBRARY_URI, name))

        hash_code = ElementHandle(
            kind=ElementKind.FIELD, name="hashCode", library_uri=FOUNDATION_LIBRARY_URI,
            is_final=True, is_synthetic=True, type=core("int"),
        )
        runtime_type = ElementHandle(
            kind=ElementKind.FIELD, name="runtimeType", library_uri=FOUNDATION_LIBRARY_URI,
            is_final=True, is_synthetic=True, type=core("Type"),
        )
        obj.children = [
            ElementHandle(kind=ElementKind.CONSTRUCTOR, name=UNNAMED_CONSTRUCTOR_TOKEN,
                          library_uri=FOUNDATION_LIBRARY_URI, is_const=True),
            hash_code,
            *self._attach_accessors(hash_code, FOUNDATION_LIBRARY_URI, synthetic=False),
            runtime_type,
            *self._attach_accessors(runtime_type, FOUNDATION_LIBRARY_URI, synthetic=False),
            ElementHandle(
                kind=ElementKind.METHOD, name="==", library_uri=FOUNDATION_LIBRARY_URI,
                is_operator=True, return_type=core("bool"),
                parameters=[ParameterHandle(name="other", type=core(FOUNDATION_ROOT_CLASS))],
            ),
            ElementHandle(kind=ElementKind.METHOD, name="toString",
                          library_uri=FOUNDATION_LIBRARY_URI, return_type=core("String")),
            ElementHandle(
                kind=ElementKind.METHOD, name="noSuchMethod", library_uri=FOUNDATION_LIBRARY_URI,
                return_type=TypeHandle(TypeKind.DYNAMIC),
                parameters=[ParameterHandle(name="invocation", type=core("Invocation"))],
            ),
        ]
        return obj

    def _build_foundation_enum(self) -> ElementHandle:
        enum_root = self._external_class(FOUNDATION_LIBRARY_URI, "Enum")
        enum_root.is_abstract = True
        index = ElementHandle(
            kind=ElementKind.FIELD, name="index", library_uri=FOUNDATION_LIBRARY_URI,
            is_final=True, is_synthetic=True,
            type=self._interface_type(self._external_class(FOUNDATION_LIBRARY_URI, "int")),
        )
        enum_root.children = [index, *self._attach_accessors(index, FOUNDATION_LIBRARY_URI, synthetic=False)]
        return enum_root

    def _external_class(self, library_uri: str, name: str) -> ElementHandle:
        key = (library_uri, name)
        handle = self._externals.get(key)
        if handle is None:
            handle = ElementHandle(kind=ElementKind.CLASS, name=name, library_uri=library_uri)
            self._externals[key] = handle
            if key != (FOUNDATION_LIBRARY_URI, FOUNDATION_ROOT_CLASS):
                handle.supertype = self._interface_type(self._object)
        return handle

    def _all_class_like(self) -> List[ElementHandle]:
        handles = [h for declared in self._declared.values() for h in declared.values()
                   if h.kind in CLASS_LIKE_KINDS]
        handles.extend(self._externals.values())
        return handles

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    @staticmethod
    def _interface_type(element: ElementHandle, arguments: Optional[List[TypeHandle]] = None) -> TypeHandle:
        return TypeHandle(TypeKind.INTERFACE, element=element, type_arguments=list(arguments or []))

    @staticmethod
    def _parameter_type(param: ElementHandle) -> TypeHandle:
        return TypeHandle(TypeKind.TYPE_PARAMETER, element=param)

    def _type_parameters(self, items: Any, scope: _Scope) -> Tuple[List[ElementHandle], _Scope]:
        params: List[ElementHandle] = []
        bounds: List[Any] = []
        for item in _as_list(items, "typeParameters"):
            if isinstance(item, str):
                item = {"name": item}
            if not isinstance(item, dict) or not item.get("name"):
                raise SnapshotError(f"{scope.library_uri}: type parameters need a name")
            params.append(ElementHandle(
                kind=ElementKind.TYPE_PARAMETER,
                name=str(item["name"]),
                library_uri=scope.library_uri,
            ))
            bounds.append(item.get("bound"))

        # Bounds resolve in the extended scope so F-bounded parameters
        # (``T extends Comparable<T>``) refer back to themselves.
        inner = scope.with_type_parameters(params)
        for param, bound in zip(params, bounds):
            if bound is not None:
                param.bound = self._resolve_type(bound, inner)
        return params, inner

    def _parameters(self, items: Any, scope: _Scope) -> List[ParameterHandle]:
        params: List[ParameterHandle] = []
        for item in _as_list(items, "parameters"):
            if not isinstance(item, dict):
                raise SnapshotError(f"{scope.library_uri}: parameter entries must be objects")
            named = bool(item.get("named"))
            required = bool(item.get("required"))
            if named:
                optional = not required
            else:
                optional = bool(item.get("optional"))
                required = not optional
            default = item.get("default")
            params.append(ParameterHandle(
                name=item.get("name"),
                type=self._resolve_type(item.get("type", "dynamic"), scope),
                is_optional=optional,
                is_named=named,
                is_required=required,
                default_value_code=str(default) if default is not None else None,
            ))
        return params

    def _resolve_type(self, expr: Any, scope: _Scope) -> TypeHandle:
        if isinstance(expr, dict):
            return self._resolve_type_mapping(expr, scope)
        if not isinstance(expr, str) or not expr.strip():
            raise SnapshotError(f"{scope.library_uri}: invalid type expression {expr!r}")

        tokens = _TYPE_TOKEN_RE.findall(expr)
        type_handle, pos = self._parse_type(tokens, 0, scope, expr)
        if pos != len(tokens):
            raise SnapshotError(f"{scope.library_uri}: trailing tokens in type {expr!r}")
        return type_handle

    def _resolve_type_mapping(self, expr: Dict[str, Any], scope: _Scope) -> TypeHandle:
        nullable = bool(expr.get("nullable"))
        if "function" in expr:
            spec = expr["function"] or {}
            if not isinstance(spec, dict):
                raise SnapshotError(f"{scope.library_uri}: function type must be an object")
            return TypeHandle(
                TypeKind.FUNCTION,
                nullable=nullable,
                return_type=self._resolve_type(spec.get("returns", "dynamic"), scope),
                parameters=self._parameters(spec.get("parameters"), scope),
            )
        if "invalid" in expr:
            name = expr["invalid"]
            element = ElementHandle(kind=ElementKind.CLASS, name=str(name)) if name else None
            return TypeHandle(TypeKind.INVALID, element=element)
        raise SnapshotError(f"{scope.library_uri}: unsupported type mapping {expr!r}")

    def _parse_type(self, tokens: List[str], pos: int, scope: _Scope, expr: str) -> Tuple[TypeHandle, int]:
        if pos >= len(tokens) or tokens[pos] in "<>,?":
            raise SnapshotError(f"{scope.library_uri}: malformed type {expr!r}")
        name = tokens[pos]
        pos += 1

        arguments: List[TypeHandle] = []
        if pos < len(tokens) and tokens[pos] == "<":
            pos += 1
            while True:
                argument, pos = self._parse_type(tokens, pos, scope, expr)
                arguments.append(argument)
                if pos >= len(tokens):
                    raise SnapshotError(f"{scope.library_uri}: unclosed type arguments in {expr!r}")
                if tokens[pos] == ",":
                    pos += 1
                    continue
                if tokens[pos] == ">":
                    pos += 1
                    break
                raise SnapshotError(f"{scope.library_uri}: malformed type {expr!r}")

        nullable = False
        if pos < len(tokens) and tokens[pos] == "?":
            nullable = True
            pos += 1
        return self._named_type(name, arguments, nullable, scope), pos

    def _named_type(self, name: str, arguments: List[TypeHandle], nullable: bool, scope: _Scope) -> TypeHandle:
        if name == "dynamic":
            return TypeHandle(TypeKind.DYNAMIC)
        if name == "void":
            return TypeHandle(TypeKind.VOID)
        if name == "Never":
            return TypeHandle(TypeKind.NEVER, nullable=nullable)
        if name == "InvalidType":
            return TypeHandle(TypeKind.INVALID)

        param = scope.type_parameters.get(name)
        if param is not None:
            return TypeHandle(TypeKind.TYPE_PARAMETER, nullable=nullable, element=param)

        if ELEMENT_REF_SEPARATOR in name:
            library_uri, _, simple = name.rpartition(ELEMENT_REF_SEPARATOR)
            element = self._declared.get(library_uri, {}).get(simple)
            if element is None:
                element = self._external_class(library_uri, simple)
        else:
            element = self._lookup_declared(name, scope.library_uri)
            if element is None and name in CORE_TYPE_NAMES:
                element = self._external_class(FOUNDATION_LIBRARY_URI, name)
            elif element is None and name in ASYNC_TYPE_NAMES:
                element = self._external_class(ASYNC_LIBRARY_URI, name)

        if element is None:
            logger.debug("Unresolved type name '%s' in %s", name, scope.library_uri)
            return TypeHandle(TypeKind.INVALID, element=ElementHandle(kind=ElementKind.CLASS, name=name))

        if element.kind is ElementKind.TYPE_ALIAS:
            return self._alias_target(element, nullable)
        if element.kind not in CLASS_LIKE_KINDS:
            logger.debug("'%s' in %s does not name a type", name, scope.library_uri)
            return TypeHandle(TypeKind.INVALID, element=element)
        return TypeHandle(TypeKind.INTERFACE, nullable=nullable, element=element, type_arguments=arguments)

    def _alias_target(self, alias: ElementHandle, nullable: bool) -> TypeHandle:
        if alias.type is None:
            if alias in self._aliases_in_progress:
                return TypeHandle(TypeKind.INVALID, element=alias)
            expr, scope = self._aliases[alias]
            self._aliases_in_progress.add(alias)
            try:
                alias.type = self._resolve_type(expr, scope)
            finally:
                self._aliases_in_progress.discard(alias)
        target = alias.type
        if not nullable:
            return target
        return TypeHandle(
            target.kind,
            nullable=True,
            element=target.element,
            type_arguments=target.type_arguments,
            return_type=target.return_type,
            parameters=target.parameters,
        )

    def _lookup_declared(self, name: str, library_uri: str) -> Optional[ElementHandle]:
        own = self._declared.get(library_uri, {}).get(name)
        if own is not None:
            return own
        for declared in self._declared.values():
            if name in declared:
                return declared[name]
        return None

    # ------------------------------------------------------------------
    # Interfaces and namespaces
    # ------------------------------------------------------------------

    def _complete_interface(self, handle: ElementHandle, visiting: Set[ElementHandle]) -> Dict[str, ElementHandle]:
        if handle in self._interfaces_done:
            return handle.interface_members
        if handle in visiting:
            return {}
        visiting.add(handle)

        members: Dict[str, ElementHandle] = {}
        supertypes = list(handle.interfaces)
        if handle.supertype is not None:
            supertypes.append(handle.supertype)
        supertypes.extend(handle.mixins)
        for supertype in supertypes:
            element = supertype.element
            if supertype.kind is TypeKind.INTERFACE and element is not None:
                members.update(self._complete_interface(element, visiting))

        for child in handle.children:
            if child.is_static or child.kind not in (ElementKind.METHOD, ElementKind.GETTER, ElementKind.SETTER):
                continue
            members[child.name] = child

        visiting.discard(handle)
        handle.interface_members = members
        self._interfaces_done.add(handle)
        return members

    def _export_namespace(self, uri: str, visiting: Set[str]) -> Dict[str, ElementHandle]:
        cached = self._namespaces.get(uri)
        if cached is not None:
            return cached
        if uri in visiting:
            return {}
        visiting.add(uri)

        spec = self._libraries[uri]
        namespace: Dict[str, ElementHandle] = {}
        for name, handle in self._declared[uri].items():
            self._add_to_namespace(namespace, name, handle)

        for alias, ref in spec.exports.items():
            library_uri, _, simple = ref.rpartition(ELEMENT_REF_SEPARATOR)
            element = self._declared.get(library_uri, {}).get(simple)
            if element is None:
                raise SnapshotError(f"{uri}: export '{alias}' refers to unknown element {ref}")
            self._add_to_namespace(namespace, alias, element)

        for item in spec.reexports:
            show = item["show"]
            hide = item["hide"]
            for name, element in self._export_namespace(item["uri"], visiting).items():
                base = name[:-len(SETTER_SUFFIX)] if name.endswith(SETTER_SUFFIX) else name
                if show is not None and base not in show:
                    continue
                if base in hide:
                    continue
                namespace.setdefault(name, element)

        visiting.discard(uri)
        # Namespaces built under an open re-export cycle miss the cut libraries.
        if not visiting:
            self._namespaces[uri] = namespace
        return namespace

    @staticmethod
    def _add_to_namespace(namespace: Dict[str, ElementHandle], name: str, handle: ElementHandle) -> None:
        entries = [(name, handle)]
        if handle.kind is ElementKind.TOP_LEVEL_VARIABLE:
            entries = [(name, handle.getter)]
            if handle.setter is not None:
                entries.append((name + SETTER_SUFFIX, handle.setter))
        for key, value in entries:
            namespace[key] = value
