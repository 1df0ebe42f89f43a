"""
Line-oriented scripts that drive a ScopeChain.

One command per line; blank lines and lines starting with '#' are skipped.

Commands:
    push                open a new scope
    pop                 discard the current scope
    set KEY VALUE       bind KEY in the current scope
    assign KEY VALUE    rebind KEY in the nearest scope holding it
    get KEY             print the resolved value
    has KEY             print true/false
    where KEY           print the index of the scope resolving KEY
    del KEY             remove the nearest binding and print it
    depth               print the number of scopes
    dump                print every scope as a table

VALUE is everything after KEY, parsed as a YAML scalar, so `1` is an int,
`true` a bool and `"1"` a string. YAML also applies its comment rule, so
` #` ends the value: `set note a # b` binds "a". Quote the value to keep
the hash: `set note "a # b"`.
"""

import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import yaml as _yaml

import scope_chain.chain as chain

_logger = _logging.getLogger(__name__)

UNBOUND = "<unbound>"


class ScriptError(Exception):
    """A script line could not be executed."""

    def __init__(self, line_number: int, message: str) -> None:
        self.line_number = line_number
        self.message = message
        super().__init__(f"line {line_number}: {message}")


class BindingsFileError(Exception):
    """Error loading a YAML bindings file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in bindings file {path}: {message}")


def parse_value(text: str) -> _typing.Any:
    """Parse a value as a YAML scalar, falling back to the raw text.

    A ` #` outside quotes starts a YAML comment and is dropped.
    """
    try:
        return _yaml.safe_load(text)
    except _yaml.YAMLError:
        return text


def format_value(value: _typing.Any) -> str:
    """Render a value as JSON (strings quoted, None as null)."""
    return _json.dumps(value, default=str)


def load_bindings(
    path: _pathlib.Path,
    *,
    on_underflow: chain.UnderflowPolicy = "raise",
) -> chain.ScopeChain[_typing.Any, _typing.Any]:
    """
    Load a multi-document YAML file as a ScopeChain.

    The first document fills the root scope; each following document is
    pushed on top. Empty documents become empty scopes.

    Raises:
        BindingsFileError: If the file cannot be read, is malformed YAML,
            or a document is not a mapping.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise BindingsFileError(path, f"cannot read file: {e}") from e

    try:
        documents = list(_yaml.safe_load_all(content))
    except _yaml.YAMLError as e:
        raise BindingsFileError(path, f"invalid YAML: {e}") from e

    layers: list[dict[_typing.Any, _typing.Any]] = []
    for index, document in enumerate(documents):
        if document is None:
            layers.append({})
        elif isinstance(document, dict):
            layers.append(document)
        else:
            raise BindingsFileError(
                path,
                f"document {index} must be a mapping, got {type(document).__name__}",
            )

    _logger.debug("Loaded %d scope(s) from %s", len(layers), path)
    return chain.ScopeChain.from_layers(*layers, on_underflow=on_underflow)


class ScriptRunner:
    """Execute script commands against a ScopeChain."""

    def __init__(
        self,
        scopes: chain.ScopeChain[_typing.Any, _typing.Any],
        echo: _typing.Callable[[str], None],
        dump: _typing.Callable[[chain.ScopeChain[_typing.Any, _typing.Any]], None] | None = None,
    ) -> None:
        """
        Args:
            scopes: The chain to drive.
            echo: Receives one line of output per printing command.
            dump: Renders the whole chain for the `dump` command. Defaults
                to one echo line per scope.
        """
        self.scopes = scopes
        self._echo = echo
        self._dump = dump or self._dump_plain
        self._commands: dict[str, tuple[int, _typing.Callable[..., None]]] = {
            "push": (0, self._push),
            "pop": (0, self._pop),
            "set": (2, self._set),
            "assign": (2, self._assign),
            "get": (1, self._get),
            "has": (1, self._has),
            "where": (1, self._where),
            "del": (1, self._del),
            "depth": (0, self._depth),
            "dump": (0, self._dump_cmd),
        }

    def run(self, lines: _typing.Iterable[str]) -> None:
        """Run every line, stopping at the first failing one."""
        for line_number, line in enumerate(lines, start=1):
            self.run_line(line_number, line)

    def run_line(self, line_number: int, line: str) -> None:
        """
        Run a single script line.

        Raises:
            ScriptError: On an unknown command, a wrong argument count, or a
                failing chain operation.
        """
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            return

        name, _, rest = stripped.partition(" ")
        if name not in self._commands:
            raise ScriptError(line_number, f"unknown command: {name!r}")
        arity, handler = self._commands[name]

        args: list[str]
        if arity == 0:
            args = []
        elif arity == 1:
            args = [rest.strip()] if rest.strip() else []
        else:
            key, _, value = rest.strip().partition(" ")
            args = [key, value.strip()] if key and value.strip() else []
        if len(args) != arity:
            raise ScriptError(line_number, f"{name} expects {arity} argument(s)")

        try:
            handler(*args)
        except chain.ScopeUnderflowError as e:
            raise ScriptError(line_number, str(e)) from e
        except KeyError as e:
            raise ScriptError(line_number, f"{args[0]!r} is not bound") from e

    def _push(self) -> None:
        self.scopes.push_scope()

    def _pop(self) -> None:
        self.scopes.pop_scope()

    def _set(self, key: str, value: str) -> None:
        self.scopes.insert(key, parse_value(value))

    def _assign(self, key: str, value: str) -> None:
        self.scopes.assign(key, parse_value(value))

    def _get(self, key: str) -> None:
        if key in self.scopes:
            self._echo(format_value(self.scopes[key]))
        else:
            self._echo(UNBOUND)

    def _has(self, key: str) -> None:
        self._echo("true" if self.scopes.contains(key) else "false")

    def _where(self, key: str) -> None:
        index = self.scopes.find(key)
        self._echo(UNBOUND if index is None else str(index))

    def _del(self, key: str) -> None:
        if key in self.scopes:
            self._echo(format_value(self.scopes.remove(key)))
        else:
            self._echo(UNBOUND)

    def _depth(self) -> None:
        self._echo(str(self.scopes.depth))

    def _dump_cmd(self) -> None:
        self._dump(self.scopes)

    def _dump_plain(self, scopes: chain.ScopeChain[_typing.Any, _typing.Any]) -> None:
        for index, scope in enumerate(scopes.scopes):
            self._echo(f"{index}: {format_value(dict(scope))}")
