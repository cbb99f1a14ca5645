"""Best-effort static types read straight off the syntax tree."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from .models import ANY_TYPE, InferredType
from .syntax import SyntaxTree, member_path

__all__ = [
    "annotation_type",
    "collect_declared_types",
    "function_signature",
    "member_type",
    "resolve_member",
    "use_state_type",
    "value_type",
]

_STATE_HOOKS = frozenset({"useState", "React.useState"})
_NUMERIC_UNARY = frozenset({"-", "+", "~"})


def _type_node(node: Any) -> Any | None:
    """Unwrap a ``type_annotation`` into the type node it carries."""

    if node is None:
        return None
    if node.type in ("type_annotation", "opting_type_annotation"):
        named = node.named_children
        return named[0] if named else None
    return node


def _object_members(
    node: Any,
    tree: SyntaxTree,
) -> dict[str, InferredType]:
    members: dict[str, InferredType] = {}
    for child in node.named_children:
        if child.type != "property_signature":
            continue
        name = child.child_by_field_name("name")
        if name is None:
            continue
        annotation = child.child_by_field_name("type")
        members[tree.node_text(name)] = (
            annotation_type(annotation, tree) if annotation is not None else ANY_TYPE
        )
    return members


def annotation_type(node: Any, tree: SyntaxTree) -> InferredType:
    """Type written in a ``type_annotation`` or type node."""

    type_node = _type_node(node)
    if type_node is None:
        return ANY_TYPE
    text = " ".join(tree.node_text(type_node).split())
    if not text:
        return ANY_TYPE
    if type_node.type == "object_type":
        return InferredType(text, members=_object_members(type_node, tree))
    if type_node.type == "tuple_type":
        return InferredType(
            text,
            elements=tuple(
                annotation_type(child, tree) for child in type_node.named_children
            ),
        )
    if type_node.type == "array_type":
        named = type_node.named_children
        element = annotation_type(named[0], tree) if named else ANY_TYPE
        return InferredType(text, elements=(element,))
    return InferredType(text)


def _parameter_signature(parameter: Any, tree: SyntaxTree) -> str:
    if parameter.type in ("required_parameter", "optional_parameter"):
        pattern = parameter.child_by_field_name("pattern")
        name = tree.node_text(pattern) if pattern is not None else "arg"
        if pattern is not None and pattern.type in ("object_pattern", "array_pattern"):
            name = "arg"
        if pattern is not None and pattern.type == "rest_pattern":
            name = tree.node_text(pattern)
        annotation = parameter.child_by_field_name("type")
        typed = annotation_type(annotation, tree) if annotation is not None else ANY_TYPE
        optional = "?" if parameter.type == "optional_parameter" else ""
        return f"{name}{optional}: {typed.text}"
    return f"{tree.node_text(parameter)}: any"


def function_signature(
    node: Any,
    tree: SyntaxTree,
    declared_types: Mapping[str, InferredType] | None = None,
) -> InferredType:
    """Arrow-style signature of a function node, e.g. ``(e: any) => void``."""

    parameters: list[str] = []
    single = node.child_by_field_name("parameter")
    if single is not None:
        parameters.append(f"{tree.node_text(single)}: any")
    params = node.child_by_field_name("parameters")
    if params is not None:
        parameters.extend(
            _parameter_signature(child, tree)
            for child in params.named_children
            if child.type != "comment"
        )

    return_annotation = node.child_by_field_name("return_type")
    body = node.child_by_field_name("body")
    if return_annotation is not None:
        returns = annotation_type(return_annotation, tree)
    elif body is not None and body.type != "statement_block":
        returns = value_type(body, tree, declared_types or {})
    else:
        returns = ANY_TYPE
    return InferredType(
        f"({', '.join(parameters)}) => {returns.text}",
        returns=returns,
    )


def use_state_type(value: InferredType) -> InferredType:
    """Tuple returned by ``useState`` for a state of type ``value``."""

    setter = InferredType(f"React.Dispatch<React.SetStateAction<{value.text}>>")
    return InferredType(f"[{value.text}, {setter.text}]", elements=(value, setter))


def _array_type(node: Any, tree: SyntaxTree, declared: Mapping) -> InferredType:
    texts = {
        value_type(child, tree, declared).text
        for child in node.named_children
        if child.type != "comment"
    }
    element = InferredType(texts.pop()) if len(texts) == 1 else ANY_TYPE
    if element.is_any or " " in element.text:
        return InferredType("any[]", elements=(ANY_TYPE,))
    return InferredType(f"{element.text}[]", elements=(element,))


def _object_type(node: Any, tree: SyntaxTree, declared: Mapping) -> InferredType:
    members: dict[str, InferredType] = {}
    for child in node.named_children:
        if child.type == "pair":
            key = child.child_by_field_name("key")
            value = child.child_by_field_name("value")
            if key is not None and value is not None:
                members[tree.node_text(key).strip("'\"")] = value_type(
                    value, tree, declared
                )
        elif child.type == "shorthand_property_identifier":
            members[tree.node_text(child)] = ANY_TYPE
    if not members:
        return InferredType("{}")
    body = "; ".join(f"{name}: {typed.text}" for name, typed in members.items())
    return InferredType(f"{{ {body} }}", members=members)


def _call_type(node: Any, tree: SyntaxTree, declared: Mapping) -> InferredType:
    callee = node.child_by_field_name("function")
    if callee is None or member_path(callee, tree) not in _STATE_HOOKS:
        return ANY_TYPE
    type_arguments = node.child_by_field_name("type_arguments")
    if type_arguments is not None and type_arguments.named_children:
        return use_state_type(annotation_type(type_arguments.named_children[0], tree))
    arguments = node.child_by_field_name("arguments")
    values = arguments.named_children if arguments is not None else []
    initial = value_type(values[0], tree, declared) if values else ANY_TYPE
    return use_state_type(initial)


def value_type(
    node: Any,
    tree: SyntaxTree,
    declared_types: Mapping[str, InferredType],
) -> InferredType:
    """Type of an initializer expression, widened the way ``let`` would be."""

    kind = node.type
    if kind == "number":
        return InferredType("number")
    if kind in ("string", "template_string"):
        return InferredType("string")
    if kind in ("true", "false"):
        return InferredType("boolean")
    if kind == "array":
        return _array_type(node, tree, declared_types)
    if kind == "object":
        return _object_type(node, tree, declared_types)
    if kind in ("arrow_function", "function_expression", "function"):
        return function_signature(node, tree, declared_types)
    if kind == "new_expression":
        constructor = node.child_by_field_name("constructor")
        path = member_path(constructor, tree) if constructor is not None else None
        if path is None:
            return ANY_TYPE
        return declared_types.get(path, InferredType(path))
    if kind == "call_expression":
        return _call_type(node, tree, declared_types)
    if kind in ("as_expression", "satisfies_expression"):
        named = node.named_children
        if len(named) >= 2:
            return annotation_type(named[-1], tree)
        return ANY_TYPE
    if kind == "unary_expression":
        operator = node.child_by_field_name("operator")
        symbol = tree.node_text(operator) if operator is not None else ""
        if symbol == "!":
            return InferredType("boolean")
        if symbol == "typeof":
            return InferredType("string")
        if symbol in _NUMERIC_UNARY:
            return InferredType("number")
        return ANY_TYPE
    if kind == "parenthesized_expression":
        named = node.named_children
        return value_type(named[0], tree, declared_types) if named else ANY_TYPE
    return ANY_TYPE


def member_type(
    owner: InferredType,
    name: str,
    declared_types: Mapping[str, InferredType],
) -> InferredType:
    if name in owner.members:
        return owner.members[name]
    declared = declared_types.get(owner.text)
    if declared is not None and name in declared.members:
        return declared.members[name]
    if name.isdigit() and int(name) < len(owner.elements):
        return owner.elements[int(name)]
    return ANY_TYPE


def resolve_member(
    owner: InferredType | None,
    segments: Sequence[str],
    declared_types: Mapping[str, InferredType],
) -> InferredType:
    """Follow ``segments`` through ``owner`` and the declared types.

    Example:
        >>> user = InferredType("User", members={"age": InferredType("number")})
        >>> resolve_member(user, ("age",), {}).text
        'number'
    """

    current = owner or ANY_TYPE
    for segment in segments:
        if current.is_any:
            return ANY_TYPE
        current = member_type(current, segment, declared_types)
    return current


def _declaration(node: Any) -> Any:
    if node.type == "export_statement":
        inner = node.child_by_field_name("declaration")
        if inner is not None:
            return inner
    return node


def collect_declared_types(tree: SyntaxTree) -> dict[str, InferredType]:
    """Interfaces and object type aliases declared at the top of the file."""

    declared: dict[str, InferredType] = {}
    for statement in tree.root.named_children:
        node = _declaration(statement)
        name = node.child_by_field_name("name")
        if name is None:
            continue
        type_name = tree.node_text(name)
        if node.type == "interface_declaration":
            body = node.child_by_field_name("body")
            members = _object_members(body, tree) if body is not None else {}
            declared[type_name] = InferredType(type_name, members=members)
        elif node.type == "type_alias_declaration":
            value = node.child_by_field_name("value")
            aliased = annotation_type(value, tree) if value is not None else ANY_TYPE
            declared[type_name] = InferredType(
                type_name,
                members=aliased.members,
                elements=aliased.elements,
            )
    return declared
