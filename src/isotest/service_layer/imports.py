"""Static import and export scanning for source modules.

Both scans read the module's syntax tree (`ast`) and never execute it.

Import requests mirror what the import statements will ask the sandbox for at
evaluation time:

- ``import a.b`` requests ``a`` then ``a.b`` (the parent is bound as well).
- ``from X import n`` requests ``X`` and, when ``X`` turns out to be a package
  (project or host), the optional submodule ``X.n``.
- ``from . import n`` requests the package ``.`` optionally (the directory may
  have no ``__init__.py``) and the optional submodule ``.n``.
"""

from __future__ import annotations

import ast
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class ImportRequest:
    """One specifier a module will import.

    Attributes:
        specifier: The specifier, dots included.
        optional: If True, a specifier that does not resolve is skipped.
        submodule_of: For submodule candidates, the specifier of the parent
            package whose submodule this may be.
    """

    specifier: str
    optional: bool = False
    submodule_of: str | None = None


def scan_imports(source_text: str, filename: str = "<unknown>") -> list[ImportRequest]:
    """Return the import requests made anywhere in ``source_text``.

    Requests are deduplicated by specifier, keeping the first (and, between a
    required and an optional request, the required one).

    Raises:
        SyntaxError: If ``source_text`` is not valid Python.
    """
    tree = ast.parse(source_text, filename=filename)
    requests: dict[str, ImportRequest] = {}
    for request in _iter_requests(tree):
        existing = requests.get(request.specifier)
        if existing is None or (existing.optional and not request.optional):
            requests[request.specifier] = request
    return list(requests.values())


def _iter_requests(tree: ast.AST) -> Iterator[ImportRequest]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                parts = alias.name.split(".")
                for i in range(1, len(parts) + 1):
                    yield ImportRequest(".".join(parts[:i]))
        elif isinstance(node, ast.ImportFrom):
            dots = "." * node.level
            if node.module:
                base = dots + node.module
                yield ImportRequest(base)
                prefix = f"{base}."
            else:
                base = dots
                yield ImportRequest(base, optional=True)
                prefix = base
            for alias in node.names:
                if alias.name != "*":
                    yield ImportRequest(
                        prefix + alias.name, optional=True, submodule_of=base
                    )


def static_export_names(source_text: str, filename: str = "<unknown>") -> tuple[str, ...]:
    """Return the names a source module exports, without executing it.

    A literal top-level ``__all__`` wins. Otherwise every public name bound at
    module level (definitions, assignments, imports), including bindings nested
    in top-level ``if``/``try``/``with`` blocks.

    Raises:
        SyntaxError: If ``source_text`` is not valid Python.
    """
    tree = ast.parse(source_text, filename=filename)
    names: dict[str, None] = {}
    for name in _iter_bindings(tree.body):
        if name == "__all__":
            declared = _literal_all(tree.body)
            if declared is not None:
                return declared
        elif not name.startswith("_"):
            names[name] = None
    return tuple(names)


def _literal_all(body: list[ast.stmt]) -> tuple[str, ...] | None:
    for stmt in body:
        if (node := _all_value(stmt)) is None:
            continue
        try:
            value = ast.literal_eval(node)
        except ValueError:
            return None
        if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            return tuple(dict.fromkeys(value))
    return None


def _all_value(stmt: ast.stmt) -> ast.expr | None:
    match stmt:
        case ast.Assign(targets=targets, value=value) if any(
            isinstance(t, ast.Name) and t.id == "__all__" for t in targets
        ):
            return value
        case ast.AnnAssign(target=ast.Name(id="__all__"), value=value):
            return value
    return None


def _iter_bindings(body: list[ast.stmt]) -> Iterator[str]:
    for stmt in body:
        match stmt:
            case ast.FunctionDef(name=name) | ast.AsyncFunctionDef(
                name=name
            ) | ast.ClassDef(name=name):
                yield name
            case ast.Assign(targets=targets):
                for target in targets:
                    yield from _target_names(target)
            case ast.AnnAssign(target=target, value=value) if value is not None:
                yield from _target_names(target)
            case ast.Import(names=aliases):
                for alias in aliases:
                    yield alias.asname or alias.name.split(".")[0]
            case ast.ImportFrom(names=aliases):
                for alias in aliases:
                    if alias.name != "*":
                        yield alias.asname or alias.name
            case ast.If(body=inner, orelse=orelse):
                yield from _iter_bindings(inner)
                yield from _iter_bindings(orelse)
            case ast.Try(body=inner, handlers=handlers, orelse=orelse, finalbody=final):
                yield from _iter_bindings(inner)
                for handler in handlers:
                    yield from _iter_bindings(handler.body)
                yield from _iter_bindings(orelse)
                yield from _iter_bindings(final)
            case ast.With(body=inner):
                yield from _iter_bindings(inner)


def _target_names(target: ast.expr) -> Iterator[str]:
    if isinstance(target, ast.Name):
        yield target.id
    elif isinstance(target, (ast.Tuple, ast.List)):
        for element in target.elts:
            yield from _target_names(element)
