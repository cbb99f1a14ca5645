"""Resolve the names visible where the selected JSX lives.

Only nodes whose span contains the selection are entered. Every block on
that ancestor chain contributes its direct declarations, functions bind
their parameters and classes bind their ``this`` members, so the resulting
:class:`~componentize.extraction.models.ScopeTable` holds exactly the names
a reference inside the fragment could resolve to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import ScopeResolutionError
from .models import (
    ANY_TYPE,
    ImportBinding,
    ImportSpecifier,
    InferredType,
    ScopeBinding,
    ScopeTable,
)
from .syntax import (
    CLASS_NODES,
    FUNCTION_NODES,
    JSX_ELEMENT_NODES,
    SyntaxTree,
    contains,
)
from .types import (
    annotation_type,
    collect_declared_types,
    function_signature,
    member_type,
    value_type,
)

__all__ = ["resolve_scope", "selection_bytes"]

_BLOCK_NODES = frozenset(
    {"program", "statement_block", "switch_case", "switch_default"}
)
_VARIABLE_NODES = frozenset({"lexical_declaration", "variable_declaration"})
_FUNCTION_DECLARATIONS = frozenset(
    {"function_declaration", "generator_function_declaration"}
)
_FIELD_NODES = frozenset({"public_field_definition", "field_definition"})


def selection_bytes(tree: SyntaxTree, start: int, end: int) -> tuple[int, int]:
    """Byte range of a character selection, trimmed of blanks and ``;``."""

    segment = tree.text[start:end]
    stripped = segment.strip()
    if stripped.endswith(";"):
        stripped = stripped[:-1].rstrip()
    first = start + (len(segment) - len(segment.lstrip()))
    return tree.byte_offset(first), tree.byte_offset(first + len(stripped))


def _string_value(node: Any, tree: SyntaxTree) -> str:
    fragments = [c for c in node.named_children if c.type == "string_fragment"]
    if fragments:
        return "".join(tree.node_text(c) for c in fragments)
    return tree.node_text(node).strip("'\"`")


def _import_binding(node: Any, tree: SyntaxTree) -> ImportBinding | None:
    source = node.child_by_field_name("source")
    clause = next((c for c in node.named_children if c.type == "import_clause"), None)
    if source is None or clause is None:
        return None

    default_import = None
    namespace_import = None
    named: list[ImportSpecifier] = []
    for child in clause.named_children:
        if child.type == "identifier":
            default_import = tree.node_text(child)
        elif child.type == "namespace_import":
            identifier = next(
                (c for c in child.named_children if c.type == "identifier"), None
            )
            if identifier is not None:
                namespace_import = tree.node_text(identifier)
        elif child.type == "named_imports":
            for specifier in child.named_children:
                if specifier.type != "import_specifier":
                    continue
                name = specifier.child_by_field_name("name")
                alias = specifier.child_by_field_name("alias")
                if name is None:
                    continue
                imported = tree.node_text(name)
                local = tree.node_text(alias) if alias is not None else imported
                named.append(ImportSpecifier(imported=imported, local=local))

    return ImportBinding(
        module_specifier=_string_value(source, tree),
        default_import=default_import,
        namespace_import=namespace_import,
        named_imports=tuple(named),
    )


@dataclass(slots=True)
class _ScopeBuilder:
    tree: SyntaxTree
    start: int
    end: int
    declared_types: dict[str, InferredType]
    bindings: dict[str, ScopeBinding] = field(default_factory=dict)
    imports: list[ImportBinding] = field(default_factory=list)
    jsx_defined_in: Any | None = None
    original_element: Any | None = None
    insertion_block: Any | None = None
    insertion_statement: Any | None = None

    def bind(self, name: str, type_: InferredType | None = None) -> None:
        # re-inserting moves shadowed names behind their inner declaration
        self.bindings.pop(name, None)
        self.bindings[name] = ScopeBinding(name=name, type=type_ or ANY_TYPE)

    def walk(self, node: Any) -> None:
        kind = node.type
        if kind in _BLOCK_NODES:
            self._enter_block(node)
        elif kind in FUNCTION_NODES:
            self._bind_parameters(node)
            self.jsx_defined_in = node
        elif kind in CLASS_NODES:
            self._bind_class(node)
        elif kind in ("for_in_statement", "for_statement"):
            self._bind_loop(node)
        elif kind == "catch_clause":
            parameter = node.child_by_field_name("parameter")
            if parameter is not None:
                self._bind_pattern(parameter, ANY_TYPE)
        elif kind in JSX_ELEMENT_NODES:
            self.original_element = node

        for child in node.children:
            if contains(child, self.start, self.end):
                self.walk(child)
                break

    # ------------------------------------------------------------------
    # Blocks and declarations
    # ------------------------------------------------------------------
    def _enter_block(self, block: Any) -> None:
        self.insertion_block = block
        self.insertion_statement = None
        # a case label is not a statement of the case body
        label = block.child_by_field_name("value")
        for statement in block.named_children:
            if label is not None and statement.start_byte == label.start_byte:
                continue
            if contains(statement, self.start, self.end):
                self.insertion_statement = statement
            self._declare(statement, top_level=block.type == "program")

    def _declare(self, statement: Any, *, top_level: bool) -> None:
        kind = statement.type
        if kind == "export_statement":
            inner = statement.child_by_field_name("declaration")
            if inner is not None:
                self._declare(inner, top_level=top_level)
            return
        if kind == "import_statement":
            if top_level:
                binding = _import_binding(statement, self.tree)
                if binding is not None:
                    self.imports.append(binding)
            return
        if kind in _VARIABLE_NODES:
            for declarator in statement.named_children:
                if declarator.type == "variable_declarator":
                    self._declare_variable(declarator)
            return

        name = statement.child_by_field_name("name")
        if name is None:
            return
        if kind in _FUNCTION_DECLARATIONS:
            self.bind(
                self.tree.node_text(name),
                function_signature(statement, self.tree, self.declared_types),
            )
        elif kind in CLASS_NODES or kind == "enum_declaration":
            text = self.tree.node_text(name)
            self.bind(text, InferredType(f"typeof {text}"))

    def _declare_variable(self, declarator: Any) -> None:
        pattern = declarator.child_by_field_name("name")
        if pattern is None:
            return
        annotation = declarator.child_by_field_name("type")
        value = declarator.child_by_field_name("value")
        if annotation is not None:
            declared = annotation_type(annotation, self.tree)
            declared = self.declared_types.get(declared.text, declared)
        elif value is not None:
            declared = value_type(value, self.tree, self.declared_types)
        else:
            declared = ANY_TYPE
        self._bind_pattern(pattern, declared)

    def _bind_pattern(self, pattern: Any, type_: InferredType) -> None:
        kind = pattern.type
        text = self.tree.node_text
        if kind in ("identifier", "shorthand_property_identifier_pattern"):
            self.bind(text(pattern), type_)
        elif kind == "object_pattern":
            for child in pattern.named_children:
                self._bind_object_entry(child, type_)
        elif kind == "array_pattern":
            for index, child in enumerate(pattern.named_children):
                element = (
                    type_.elements[index] if index < len(type_.elements) else ANY_TYPE
                )
                self._bind_pattern(child, element)
        elif kind == "assignment_pattern":
            left = pattern.child_by_field_name("left")
            right = pattern.child_by_field_name("right")
            if left is not None:
                if type_.is_any and right is not None:
                    type_ = value_type(right, self.tree, self.declared_types)
                self._bind_pattern(left, type_)
        elif kind == "rest_pattern":
            for child in pattern.named_children:
                self._bind_pattern(child, ANY_TYPE)

    def _bind_object_entry(self, entry: Any, owner: InferredType) -> None:
        text = self.tree.node_text
        if entry.type == "shorthand_property_identifier_pattern":
            name = text(entry)
            self.bind(name, member_type(owner, name, self.declared_types))
        elif entry.type == "pair_pattern":
            key = entry.child_by_field_name("key")
            value = entry.child_by_field_name("value")
            if key is not None and value is not None:
                member = member_type(owner, text(key), self.declared_types)
                self._bind_pattern(value, member)
        elif entry.type == "object_assignment_pattern":
            left = entry.child_by_field_name("left")
            right = entry.child_by_field_name("right")
            if left is None:
                return
            member = member_type(owner, text(left), self.declared_types)
            if member.is_any and right is not None:
                member = value_type(right, self.tree, self.declared_types)
            self._bind_pattern(left, member)
        elif entry.type == "rest_pattern":
            self._bind_pattern(entry, ANY_TYPE)

    # ------------------------------------------------------------------
    # Functions, classes and loops
    # ------------------------------------------------------------------
    def _bind_parameters(self, function: Any) -> None:
        single = function.child_by_field_name("parameter")
        if single is not None:
            self._bind_pattern(single, ANY_TYPE)
        params = function.child_by_field_name("parameters")
        if params is None:
            return
        for parameter in params.named_children:
            if parameter.type not in ("required_parameter", "optional_parameter"):
                continue
            pattern = parameter.child_by_field_name("pattern")
            if pattern is None:
                continue
            annotation = parameter.child_by_field_name("type")
            default = parameter.child_by_field_name("value")
            if annotation is not None:
                typed = annotation_type(annotation, self.tree)
                typed = self.declared_types.get(typed.text, typed)
            elif default is not None:
                typed = value_type(default, self.tree, self.declared_types)
            else:
                typed = ANY_TYPE
            self._bind_pattern(pattern, typed)

    def _bind_class(self, node: Any) -> None:
        name = node.child_by_field_name("name")
        class_name = self.tree.node_text(name) if name is not None else "this"
        props_type, state_type = self._component_generics(node)

        members: dict[str, InferredType] = {"props": props_type, "state": state_type}
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else []:
            member_name = member.child_by_field_name("name")
            if member_name is None:
                member_name = member.child_by_field_name("property")
            if member_name is None:
                continue
            label = self.tree.node_text(member_name)
            if member.type == "method_definition":
                members[label] = function_signature(
                    member, self.tree, self.declared_types
                )
            elif member.type in _FIELD_NODES:
                annotation = member.child_by_field_name("type")
                value = member.child_by_field_name("value")
                if annotation is not None:
                    members[label] = annotation_type(annotation, self.tree)
                elif value is not None:
                    members[label] = value_type(value, self.tree, self.declared_types)
                else:
                    members[label] = ANY_TYPE

        self.bind("this", InferredType(class_name, members=members))
        for label, typed in members.items():
            self.bind(f"this.{label}", typed)

    def _component_generics(self, node: Any) -> tuple[InferredType, InferredType]:
        for heritage in node.named_children:
            if heritage.type != "class_heritage":
                continue
            for clause in heritage.named_children:
                if clause.type != "extends_clause":
                    continue
                arguments = clause.child_by_field_name("type_arguments")
                if arguments is None:
                    arguments = next(
                        (c for c in clause.named_children if c.type == "type_arguments"),
                        None,
                    )
                if arguments is None:
                    continue
                types = [
                    self._declared(annotation_type(child, self.tree))
                    for child in arguments.named_children
                ]
                props_type = types[0] if types else ANY_TYPE
                state_type = types[1] if len(types) > 1 else ANY_TYPE
                return props_type, state_type
        return ANY_TYPE, ANY_TYPE

    def _declared(self, typed: InferredType) -> InferredType:
        return self.declared_types.get(typed.text, typed)

    def _bind_loop(self, node: Any) -> None:
        if node.type == "for_in_statement":
            left = node.child_by_field_name("left")
            if left is not None:
                self._bind_pattern(left, ANY_TYPE)
            return
        initializer = node.child_by_field_name("initializer")
        if initializer is not None and initializer.type in _VARIABLE_NODES:
            self._declare(initializer, top_level=False)


def resolve_scope(tree: SyntaxTree, start: int, end: int) -> ScopeTable:
    """Resolve the scope around the character selection ``[start, end)``.

    Raises:
        ScopeResolutionError: If no JSX element encloses the selection.
    """

    byte_start, byte_end = selection_bytes(tree, start, end)
    builder = _ScopeBuilder(
        tree=tree,
        start=byte_start,
        end=byte_end,
        declared_types=collect_declared_types(tree),
    )
    builder.walk(tree.root)

    if builder.original_element is None:
        raise ScopeResolutionError(
            "Could not locate the selected element in the document"
        )
    return ScopeTable(
        bindings=dict(builder.bindings),
        imports=tuple(builder.imports),
        declared_types=builder.declared_types,
        jsx_defined_in=builder.jsx_defined_in,
        original_element=builder.original_element,
        insertion_block=builder.insertion_block,
        insertion_statement=builder.insertion_statement,
    )
