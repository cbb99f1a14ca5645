"""Join extracted identifiers with the scope table.

Each identifier becomes a prop (bound in scope), an import the new module
must repeat (bound by an import of the active document) or is dropped
(globals and intrinsics the new module sees anyway).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from .models import (
    ANY_TYPE,
    Classification,
    DerivedInitialiser,
    ExtractedIdentifier,
    ImportBinding,
    InferredType,
    JsxProp,
    ReferenceInitialiser,
    RequiredImportDeclaration,
    ScopeTable,
)
from .syntax import FUNCTION_NODES, SyntaxTree
from .types import function_signature, resolve_member

__all__ = ["classify", "hoisted_signature", "sort_imports"]

# names in type text, skipping member accesses, quoted text and object keys
_TYPE_NAME = re.compile(r"(?<![\w$.'\"])[A-Za-z_$][\w$]*(?![\w$]*\??:)")
_TYPE_KEYWORDS = frozenset(
    {
        "any",
        "boolean",
        "false",
        "keyof",
        "never",
        "null",
        "number",
        "object",
        "readonly",
        "string",
        "true",
        "typeof",
        "undefined",
        "unknown",
        "void",
    }
)


def hoisted_signature(expression: str) -> InferredType:
    """Signature of an inline function given its source text."""

    tree = SyntaxTree.parse(f"({expression});")
    for statement in tree.root.named_children:
        for node in statement.named_children:
            while node.type == "parenthesized_expression" and node.named_children:
                node = node.named_children[0]
            if node.type in FUNCTION_NODES:
                return function_signature(node, tree)
    return InferredType("(...args: any[]) => any")


def sort_imports(
    imports: Iterable[RequiredImportDeclaration],
) -> tuple[RequiredImportDeclaration, ...]:
    """Package specifiers first, then relative ones, each group stable.

    Example:
        >>> names = ["lodash", "./local", "react-dom"]
        >>> [i.module_specifier for i in sort_imports(
        ...     RequiredImportDeclaration(n) for n in names)]
        ['lodash', 'react-dom', './local']
    """

    return tuple(sorted(imports, key=lambda declaration: declaration.is_relative))


@dataclass(slots=True)
class _Classifier:
    scope: ScopeTable
    props: list[JsxProp] = field(default_factory=list)
    imports: dict[str, RequiredImportDeclaration] = field(default_factory=dict)
    dropped: list[ExtractedIdentifier] = field(default_factory=list)
    seen: set[tuple[str, str | None]] = field(default_factory=set)

    def classify(self, identifier: ExtractedIdentifier) -> None:
        initialiser = identifier.initialiser
        if isinstance(initialiser, ReferenceInitialiser):
            self._classify_reference(identifier, initialiser)
        elif initialiser.hoisted:
            self._add_prop(
                identifier,
                hoisted_signature(initialiser.expression or initialiser.path),
                avoid_scope=True,
            )
        else:
            self._classify_call(identifier, initialiser)

    def _classify_reference(
        self,
        identifier: ExtractedIdentifier,
        initialiser: ReferenceInitialiser,
    ) -> None:
        found = self.scope.lookup(initialiser.path)
        if found is not None:
            binding, remaining = found
            typed = resolve_member(binding.type, remaining, self.scope.declared_types)
            self._add_prop(identifier, typed)
            return

        binding = self.scope.import_for(initialiser.root)
        if binding is not None:
            self._require(binding, initialiser.root)
            return
        self.dropped.append(identifier)

    def _classify_call(
        self,
        identifier: ExtractedIdentifier,
        initialiser: DerivedInitialiser,
    ) -> None:
        found = (
            self.scope.lookup(initialiser.callee)
            if initialiser.callee is not None
            else None
        )
        if found is None:
            self.dropped.append(identifier)
            for nested in initialiser.nested:
                self.classify(nested)
            return

        binding, remaining = found
        callee_type = resolve_member(binding.type, remaining, self.scope.declared_types)
        self._add_prop(identifier, callee_type.returns or ANY_TYPE)

    def _require(self, binding: ImportBinding, local: str) -> None:
        specifier = binding.module_specifier
        declaration = self.imports.get(specifier, RequiredImportDeclaration(specifier))
        if binding.default_import == local:
            declaration = declaration.with_default(local)
        elif binding.namespace_import == local:
            declaration = declaration.with_namespace(local)
        else:
            named = binding.named(local)
            if named is not None:
                declaration = declaration.with_named(named.text)
        self.imports[specifier] = declaration

    def _add_prop(
        self,
        identifier: ExtractedIdentifier,
        typed: InferredType,
        *,
        avoid_scope: bool = False,
    ) -> None:
        key = identifier.initialiser.substitution_key
        if key in self.seen:
            return
        self.seen.add(key)

        name = self._unique_name(identifier.prop_name, avoid_scope=avoid_scope)
        self.props.append(
            JsxProp(
                prop_name=name,
                type=self._portable(typed),
                initialiser=identifier.initialiser,
                source_attribute=identifier.source_attribute,
            )
        )

    def _portable(self, typed: InferredType) -> InferredType:
        """``typed`` as the new module can spell it.

        Imported type names become required imports. A type naming anything
        declared only in the active document degrades to ``any``.
        """

        imported: list[tuple[ImportBinding, str]] = []
        for match in _TYPE_NAME.finditer(typed.text):
            name = match.group(0)
            if name in _TYPE_KEYWORDS:
                continue
            binding = self.scope.import_for(name)
            if binding is not None:
                imported.append((binding, name))
            elif name in self.scope.declared_types or name in self.scope.bindings:
                return ANY_TYPE
        for binding, name in imported:
            self._require(binding, name)
        return typed

    def _unique_name(self, base: str, *, avoid_scope: bool) -> str:
        taken = {prop.prop_name for prop in self.props}
        if avoid_scope:
            taken |= {name for name in self.scope.bindings if "." not in name}
        candidate = base
        suffix = 2
        while candidate in taken:
            candidate = f"{base}{suffix}"
            suffix += 1
        return candidate


def classify(
    identifiers: Iterable[ExtractedIdentifier],
    scope: ScopeTable,
) -> Classification:
    """Classify ``identifiers`` against ``scope`` preserving their order."""

    classifier = _Classifier(scope=scope)
    for identifier in identifiers:
        classifier.classify(identifier)
    return Classification(
        props=tuple(classifier.props),
        required_imports=sort_imports(classifier.imports.values()),
        dropped=tuple(classifier.dropped),
    )

