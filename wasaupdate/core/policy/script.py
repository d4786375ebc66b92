"""
Policy scripts: loading, contract validation and invocation.

A policy script is a small Python module that defines three functions::

    def current_version():
        return run("mytool --version").split()[-1]

    def latest_version():
        return json.loads(fetch("https://example.com/latest.json"))["version"]

    def install_version(version):
        return f"https://example.com/mytool-{version}.tar.gz"

The script is parsed and checked before any of its code runs. It then
executes in a namespace with a reduced set of builtins, an import allow-list
and the host capabilities ``fetch`` and ``run``.
"""

from __future__ import annotations

import ast
import builtins
import importlib
import logging
import types
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from wasaupdate.core.context import UpdateContext
from wasaupdate.core.exceptions import ContractError, ScriptError
from wasaupdate.core.host import HostCapabilities
from wasaupdate.core.policy.base import (
    CURRENT_VERSION_FN,
    INSTALL_VERSION_FN,
    LATEST_VERSION_FN,
    VersionPolicy,
    ensure_text,
    parse_version,
)
from wasaupdate.core.version import SemanticVersion

logger = logging.getLogger(__name__)

INSTALL_PARAMETER = "version"
INLINE_ORIGIN = "<inline>"

# Validation order is part of the contract
ZERO_ARG_FUNCTIONS = (LATEST_VERSION_FN, CURRENT_VERSION_FN)

ALLOWED_IMPORTS = frozenset({"json", "re", "math", "string", "datetime"})

SAFE_BUILTINS = (
    "abs", "all", "any", "ascii", "bin", "bool", "bytes", "callable", "chr",
    "dict", "divmod", "enumerate", "filter", "float", "format", "frozenset",
    "hash", "hex", "int", "isinstance", "issubclass", "iter", "len", "list",
    "map", "max", "min", "next", "oct", "ord", "pow", "print", "range",
    "repr", "reversed", "round", "set", "slice", "sorted", "str", "sum",
    "tuple", "zip",
    "ArithmeticError", "AssertionError", "Exception", "IndexError",
    "KeyError", "LookupError", "NotImplementedError", "RuntimeError",
    "StopIteration", "TypeError", "UnicodeDecodeError", "ValueError",
    "ZeroDivisionError",
)

# Dunder names a script may still reference
ALLOWED_DUNDER_NAMES = frozenset({"__all__", "__name__"})

# Frame, code and traceback attributes of generators, coroutines and exceptions
INTROSPECTION_ATTRIBUTES = frozenset({
    "gi_frame", "gi_code", "gi_yieldfrom",
    "cr_frame", "cr_code", "cr_await",
    "ag_frame", "ag_code", "ag_await",
    "f_back", "f_globals", "f_locals", "f_builtins", "f_code", "f_trace",
    "tb_frame", "tb_next",
})

ScriptSource = Union[Path, str]


def _module_proxy(module: types.ModuleType) -> types.SimpleNamespace:
    """Public members of ``module``, without the modules it imports."""
    members = {
        name: value
        for name, value in vars(module).items()
        if not name.startswith("_") and not isinstance(value, types.ModuleType)
    }
    return types.SimpleNamespace(**members)


def _restricted_import(name, globals=None, locals=None, fromlist=(), level=0):
    if level or name not in ALLOWED_IMPORTS:
        raise ImportError(f"Import of '{name}' is not allowed in policy scripts")
    return _module_proxy(importlib.import_module(name))


def _sandbox_builtins() -> Dict[str, Any]:
    allowed = {name: getattr(builtins, name) for name in SAFE_BUILTINS}
    allowed["__import__"] = _restricted_import
    allowed["__build_class__"] = builtins.__build_class__
    allowed["None"] = None
    allowed["True"] = True
    allowed["False"] = False
    return allowed


# ---------------------------------------------------------------------------
# Static validation
# ---------------------------------------------------------------------------

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


def _top_level_functions(tree: ast.Module) -> Dict[str, FunctionNode]:
    """Top-level function definitions; a later definition replaces an earlier one."""
    functions: Dict[str, FunctionNode] = {}
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            functions[node.name] = node
    return functions


def _declared_exports(tree: ast.Module) -> Optional[set[str]]:
    """Names listed in a literal top-level ``__all__``, or None when absent."""
    exports: Optional[set[str]] = None
    for node in tree.body:
        if isinstance(node, ast.Assign):
            targets = node.targets
        elif isinstance(node, ast.AnnAssign) and node.value is not None:
            targets = [node.target]
        else:
            continue
        if not any(isinstance(t, ast.Name) and t.id == "__all__" for t in targets):
            continue
        try:
            value = ast.literal_eval(node.value)
        except (ValueError, TypeError, SyntaxError):
            logger.debug("Ignoring non-literal __all__ on line %d", node.lineno)
            continue
        if isinstance(value, (list, tuple, set)):
            exports = {item for item in value if isinstance(item, str)}
    return exports


def _parameter_count(node: FunctionNode) -> int:
    args = node.args
    count = len(args.posonlyargs) + len(args.args) + len(args.kwonlyargs)
    if args.vararg is not None:
        count += 1
    if args.kwarg is not None:
        count += 1
    return count


def _check_visibility(name: str, exports: Optional[set[str]]) -> None:
    if exports is not None and name not in exports:
        raise ContractError(f"Function '{name}' should not be private", function=name, rule="visibility")


def validate_contract(tree: ast.Module) -> None:
    """Check the three required functions; raise ``ContractError`` on the first violation.

    Order: latest_version, current_version, install_version; for each one
    presence, then parameter count, then visibility, then parameter naming.
    """
    functions = _top_level_functions(tree)
    exports = _declared_exports(tree)

    for name in ZERO_ARG_FUNCTIONS:
        node = functions.get(name)
        if node is None:
            raise ContractError(f"Function '{name}' is required but not found", function=name, rule="missing")
        count = _parameter_count(node)
        if count:
            raise ContractError(
                f"Function '{name}' should not have any parameters, found: {count}",
                function=name,
                rule="arity",
            )
        _check_visibility(name, exports)

    name = INSTALL_VERSION_FN
    node = functions.get(name)
    if node is None:
        raise ContractError(f"Function '{name}' is required but not found", function=name, rule="missing")
    count = _parameter_count(node)
    if count != 1:
        raise ContractError(
            f"Function '{name}' should have exactly one parameter, found: {count}",
            function=name,
            rule="arity",
        )
    _check_visibility(name, exports)
    positional = node.args.posonlyargs + node.args.args
    if len(positional) != 1 or positional[0].arg != INSTALL_PARAMETER:
        raise ContractError(
            f"Function '{name}' should have a string parameter named '{INSTALL_PARAMETER}'",
            function=name,
            rule="parameter_name",
        )


def _sandbox_violation(message: str, node: ast.AST) -> ContractError:
    line = getattr(node, "lineno", "?")
    return ContractError(f"{message} (line {line})", rule="sandbox")


def check_sandbox(tree: ast.Module) -> None:
    """Reject constructs that reach outside the policy script namespace."""
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute) and (node.attr.startswith("__") or node.attr in INTROSPECTION_ATTRIBUTES):
            raise _sandbox_violation(f"Access to attribute '{node.attr}' is not allowed", node)
        if isinstance(node, ast.Name) and node.id.startswith("__") and node.id not in ALLOWED_DUNDER_NAMES:
            raise _sandbox_violation(f"Use of name '{node.id}' is not allowed", node)
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.name not in ALLOWED_IMPORTS:
                    raise _sandbox_violation(f"Import of '{alias.name}' is not allowed", node)
        if isinstance(node, ast.ImportFrom):
            module = node.module or ""
            if node.level or module not in ALLOWED_IMPORTS:
                raise _sandbox_violation(f"Import from '{'.' * node.level}{module}' is not allowed", node)
        if isinstance(node, (ast.AsyncFunctionDef, ast.Await, ast.AsyncFor, ast.AsyncWith)):
            raise _sandbox_violation("Asynchronous code is not supported in policy scripts", node)


# ---------------------------------------------------------------------------
# Loaded scripts
# ---------------------------------------------------------------------------


class ScriptContract:
    """A validated and executed policy script.

    Instances are only created through :meth:`from_source` / :meth:`from_file`
    (or :func:`load_script`), which guarantees that the three contract
    functions exist with the right shape before anything can call them.
    """

    def __init__(self, functions: Dict[str, Callable[..., Any]], origin: str):
        self._functions = functions
        self.origin = origin

    @classmethod
    def from_source(
        cls,
        source: str,
        origin: str = INLINE_ORIGIN,
        host: Optional[HostCapabilities] = None,
    ) -> "ScriptContract":
        """Validate and execute inline script source."""
        try:
            tree = ast.parse(source, filename=origin, mode="exec")
        except SyntaxError as exc:
            raise ContractError(f"Invalid policy script {origin}: {exc.msg} (line {exc.lineno})", rule="syntax") from exc

        validate_contract(tree)
        check_sandbox(tree)

        host = host or HostCapabilities(UpdateContext())
        namespace: Dict[str, Any] = {
            "__builtins__": _sandbox_builtins(),
            "__name__": "wasaupdate_policy",
        }
        namespace.update(host.as_namespace())

        code = compile(tree, origin, "exec")
        try:
            exec(code, namespace)
        except Exception as exc:  # arbitrary script code at module level
            raise ContractError(f"Policy script {origin} failed to load: {exc}", rule="load") from exc

        functions = {name: namespace[name] for name in (*ZERO_ARG_FUNCTIONS, INSTALL_VERSION_FN)}
        for name, func in functions.items():
            if not callable(func):
                raise ContractError(f"Function '{name}' is required but not found", function=name, rule="missing")

        logger.info("Loaded policy script %s", origin)
        return cls(functions, origin)

    @classmethod
    def from_file(cls, path: Path, host: Optional[HostCapabilities] = None) -> "ScriptContract":
        """Read ``path`` as UTF-8 and load it."""
        try:
            source = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ContractError(f"Cannot read policy script {path}: {exc}", rule="load") from exc
        return cls.from_source(source, origin=str(path), host=host)

    def call(self, name: str, *args: str) -> str:
        """Invoke contract function ``name`` and return its result as text."""
        func = self._functions[name]
        logger.debug("Calling %s%r from %s", name, args, self.origin)
        try:
            result = func(*args)
        except Exception as exc:  # failures inside the script, fetch/run included
            raise ScriptError(f"Function '{name}' failed: {exc}", function=name) from exc

        return ensure_text(name, result)


def load_script(source: ScriptSource, host: Optional[HostCapabilities] = None) -> ScriptContract:
    """Load a policy script from a file path (``Path``) or inline source (``str``)."""
    if isinstance(source, Path):
        return ScriptContract.from_file(source, host=host)
    return ScriptContract.from_source(source, host=host)


def current_version(contract: ScriptContract) -> SemanticVersion:
    return parse_version(CURRENT_VERSION_FN, contract.call(CURRENT_VERSION_FN))


def latest_version(contract: ScriptContract) -> SemanticVersion:
    return parse_version(LATEST_VERSION_FN, contract.call(LATEST_VERSION_FN))


def install_version(contract: ScriptContract, version: str) -> str:
    """Return the raw install location for ``version``; classification is the installer's job."""
    return contract.call(INSTALL_VERSION_FN, str(version))


class ScriptPolicy(VersionPolicy):
    """``VersionPolicy`` backed by a policy script."""

    def __init__(self, contract: ScriptContract):
        self.contract = contract

    @classmethod
    def load(cls, source: ScriptSource, context: Optional[UpdateContext] = None) -> "ScriptPolicy":
        host = HostCapabilities(context or UpdateContext())
        return cls(load_script(source, host=host))

    def current_version(self) -> SemanticVersion:
        return current_version(self.contract)

    def latest_version(self) -> SemanticVersion:
        return latest_version(self.contract)

    def install_version(self, version: str) -> str:
        return install_version(self.contract, version)
