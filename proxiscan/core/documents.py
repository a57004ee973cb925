"""YAML documents and the JSON schemas that describe them."""

from __future__ import annotations

import json
import os
from collections.abc import Hashable
from functools import lru_cache
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from proxiscan.core.errors import ProxiscanError

_BOOL_TAG = "tag:yaml.org,2002:bool"


class StrictLoader(yaml.SafeLoader):
    """SafeLoader without implicit booleans that refuses repeated mapping keys.

    Name keywords such as ``on`` or ``no`` must stay strings.
    """

    yaml_implicit_resolvers = {
        first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
        for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
    }

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        if isinstance(node, yaml.MappingNode):
            self.flatten_mapping(node)
        seen: set[Hashable] = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key '{key}'",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def config_dir() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "proxiscan"


def load_mapping(
    path: Path | Traversable,
    *,
    invalid: type[ProxiscanError],
    unreadable: type[ProxiscanError],
) -> dict[str, Any]:
    """Read a YAML file whose root is a mapping; an empty file is ``{}``."""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise unreadable(f"Could not read {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=StrictLoader)
    except yaml.YAMLError as exc:
        raise invalid(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise invalid(f"{path} must contain a mapping at root")
    return loaded


@lru_cache(maxsize=None)
def _validator(schema_name: str) -> Any:
    schema = json.loads(
        resources.files("proxiscan.schemas").joinpath(schema_name).read_text(encoding="utf-8")
    )
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def validate(
    doc: dict[str, Any],
    schema_name: str,
    *,
    source: str,
    error: type[ProxiscanError],
) -> None:
    try:
        _validator(schema_name).validate(doc)
    except ValidationError as exc:
        where = ".".join(str(p) for p in exc.path)
        where = f" ({where})" if where else ""
        raise error(f"Schema validation failed for {source}{where}: {exc.message}") from exc
