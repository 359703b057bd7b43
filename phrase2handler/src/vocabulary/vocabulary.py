"""
Action Vocabulary - The closed set of actions and semantic arguments.

This module defines the structure and loading of the action vocabulary.
The vocabulary maps trigger keywords to their handlers and semantic keys
to their declared types, ensuring only configured actions can fire and
only configured keys become handler arguments.
"""

import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..coercion.registry import TypeTag, TypeCoercionRegistry, CoercionError
from ..dispatch.handlers import Invocable, HandlerRegistry

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """
    Raised when the vocabulary configuration is empty or invalid.

    Fatal to activation: a listener is never started from a bad vocabulary.
    """

    def __init__(self, message: str, problems: List[str] = None):
        super().__init__(message)
        self.problems = problems or []


@dataclass(frozen=True)
class ArgumentSpec:
    """
    Declared metadata for one semantic argument key.

    Attributes:
        key: The semantic key returned by the grammar (e.g. "distance")
        type_tag: Declared type of the value(s)
        is_collection: Aggregate every recognized value instead of the first
        defaults: Default raw values from configuration
    """
    key: str
    type_tag: TypeTag = TypeTag.STRING
    is_collection: bool = False
    defaults: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ActionSpec:
    """
    A declared action.

    Attributes:
        trigger_keyword: Primary-action value that fires this action
        argument_precedence: Positional order used for N-argument dispatch
        handlers: Handlers invoked when the action fires
        key_code: Optional keyboard binding (not interpreted here)
    """
    trigger_keyword: str
    argument_precedence: Tuple[str, ...] = ()
    handlers: Tuple[Invocable, ...] = field(default=(), compare=False)
    key_code: Optional[str] = None

    @property
    def handler_names(self) -> List[str]:
        return [h.name for h in self.handlers]


class ActionVocabulary:
    """
    The closed vocabulary of actions and argument specs.

    Built once via load() and read-only afterwards; lookups are pure.
    """

    def __init__(
        self,
        actions: Mapping[str, ActionSpec],
        arguments: Mapping[str, ArgumentSpec],
        metadata: Optional[Dict] = None
    ):
        self._actions = MappingProxyType(dict(actions))
        self._arguments = MappingProxyType(dict(arguments))
        self._metadata = MappingProxyType(dict(metadata or {}))

    @classmethod
    def load(
        cls,
        config: Dict[str, Any],
        handlers: Optional[HandlerRegistry] = None,
        registry: Optional[TypeCoercionRegistry] = None
    ) -> "ActionVocabulary":
        """
        Build a vocabulary from a configuration dictionary.

        Expected format:
        {
            "metadata": {...},
            "actions": [
                {
                    "keyword": "move",
                    "handlers": ["move"],
                    "argument_precedence": ["direction", "distance"],
                    "key_code": "M"
                },
                ...
            ],
            "arguments": [
                {"key": "distance", "type": "Float", "is_collection": false, "defaults": []},
                ...
            ]
        }

        Handler references may be Invocable instances or names registered
        in `handlers`.

        Raises:
            ConfigError: If there are no actions or any entry is invalid
        """
        if config is not None and not isinstance(config, dict):
            raise ConfigError(
                f"Vocabulary configuration must be a mapping, got {type(config).__name__}"
            )
        if not config or not config.get("actions"):
            raise ConfigError(
                "Vocabulary must declare at least one action - nothing to dispatch."
            )

        registry = registry or TypeCoercionRegistry()
        problems: List[str] = []

        metadata = config.get("metadata") or {}
        if not isinstance(metadata, dict):
            problems.append(f"'metadata' must be an object, got {type(metadata).__name__}")
            metadata = {}

        arguments: Dict[str, ArgumentSpec] = {}
        for raw in cls._entries(config, "arguments", problems):
            spec = cls._parse_argument(raw, registry, problems)
            if spec is None:
                continue
            if spec.key in arguments:
                logger.warning(f"Argument '{spec.key}' declared twice - last declaration wins")
            arguments[spec.key] = spec

        actions: Dict[str, ActionSpec] = {}
        for raw in cls._entries(config, "actions", problems):
            action = cls._parse_action(raw, handlers, arguments, problems)
            if action is None:
                continue
            if action.trigger_keyword in actions:
                logger.warning(
                    f"Trigger keyword '{action.trigger_keyword}' declared twice - "
                    f"last declaration wins"
                )
            actions[action.trigger_keyword] = action

        if problems:
            raise ConfigError(
                f"Invalid vocabulary configuration ({len(problems)} problem(s)): {problems}",
                problems=problems
            )

        vocabulary = cls(actions, arguments, metadata)
        logger.info(f"Loaded vocabulary: {vocabulary!r}")
        return vocabulary

    @classmethod
    def load_from_file(
        cls,
        path: str,
        handlers: Optional[HandlerRegistry] = None,
        registry: Optional[TypeCoercionRegistry] = None
    ) -> "ActionVocabulary":
        """Load a vocabulary from a JSON file (same format as load())."""
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Vocabulary file '{path}' is not valid JSON: {e}") from e
        return cls.load(data, handlers=handlers, registry=registry)

    @staticmethod
    def _entries(config: Dict[str, Any], section: str, problems: List[str]) -> List[Dict[str, Any]]:
        """Entries of a list section; a non-list section or non-object entry is a problem."""
        raw = config.get(section)
        if raw is None and section not in config:
            return []
        if not isinstance(raw, list):
            problems.append(f"'{section}' must be a list, got {type(raw).__name__}")
            return []

        entries = []
        for index, entry in enumerate(raw):
            if not isinstance(entry, dict):
                problems.append(
                    f"{section}[{index}] must be an object, got {type(entry).__name__}"
                )
                continue
            entries.append(entry)
        return entries

    @staticmethod
    def _parse_argument(
        raw: Dict[str, Any],
        registry: TypeCoercionRegistry,
        problems: List[str]
    ) -> Optional[ArgumentSpec]:
        key = raw.get("key")
        if not key or not isinstance(key, str):
            problems.append(f"argument without key: {raw}")
            return None

        try:
            type_tag = TypeTag.parse(raw.get("type", "string"))
        except ValueError as e:
            problems.append(f"argument '{key}': {e}")
            return None

        is_collection = raw.get("is_collection", False)
        if not isinstance(is_collection, bool):
            problems.append(
                f"argument '{key}': is_collection must be true or false, got {is_collection!r}"
            )
            return None

        defaults = raw.get("defaults") or ()
        if not isinstance(defaults, (list, tuple)):
            problems.append(f"argument '{key}': defaults must be a list, got {defaults!r}")
            return None
        defaults = tuple(defaults)
        for value in defaults:
            try:
                registry.coerce(type_tag, value)
            except CoercionError as e:
                problems.append(f"argument '{key}': default {e}")
                return None

        return ArgumentSpec(
            key=key,
            type_tag=type_tag,
            is_collection=is_collection,
            defaults=defaults
        )

    @staticmethod
    def _parse_action(
        raw: Dict[str, Any],
        handlers: Optional[HandlerRegistry],
        arguments: Mapping[str, ArgumentSpec],
        problems: List[str]
    ) -> Optional[ActionSpec]:
        keyword = raw.get("keyword")
        if not keyword or not isinstance(keyword, str):
            problems.append(f"action without keyword: {raw}")
            return None

        refs = raw.get("handlers") or []
        if not isinstance(refs, (list, tuple)):
            problems.append(f"action '{keyword}': handlers must be a list, got {refs!r}")
            refs = []

        resolved: List[Invocable] = []
        for ref in refs:
            if isinstance(ref, Invocable):
                resolved.append(ref)
                continue
            if not isinstance(ref, str):
                problems.append(f"action '{keyword}': handler reference {ref!r} is not a name")
                continue
            handler = handlers.get(ref) if handlers is not None else None
            if handler is None:
                problems.append(f"action '{keyword}': handler '{ref}' is not registered")
                continue
            resolved.append(handler)

        precedence = raw.get("argument_precedence") or ()
        if not isinstance(precedence, (list, tuple)):
            problems.append(
                f"action '{keyword}': argument_precedence must be a list, got {precedence!r}"
            )
            precedence = ()
        precedence = tuple(precedence)
        for key in precedence:
            if not isinstance(key, str) or key not in arguments:
                problems.append(
                    f"action '{keyword}': precedence key '{key}' is not a declared argument"
                )

        return ActionSpec(
            trigger_keyword=keyword,
            argument_precedence=precedence,
            handlers=tuple(resolved),
            key_code=raw.get("key_code")
        )

    def lookup_action(self, trigger_keyword: str) -> Optional[ActionSpec]:
        """
        Look up an action by its trigger keyword.

        Keywords are case-sensitive.

        Returns:
            ActionSpec if found, None otherwise
        """
        return self._actions.get(trigger_keyword)

    def lookup_argument_spec(self, key: str) -> Optional[ArgumentSpec]:
        """Look up the declared spec for a semantic key."""
        return self._arguments.get(key)

    def get_keywords(self) -> List[str]:
        """Get all trigger keywords."""
        return list(self._actions.keys())

    def get_argument_keys(self) -> List[str]:
        """Get all declared argument keys."""
        return list(self._arguments.keys())

    @property
    def actions(self) -> Mapping[str, ActionSpec]:
        return self._actions

    @property
    def arguments(self) -> Mapping[str, ArgumentSpec]:
        return self._arguments

    @property
    def metadata(self) -> Mapping:
        """Get vocabulary metadata."""
        return self._metadata

    def __len__(self) -> int:
        """Number of actions."""
        return len(self._actions)

    def __contains__(self, trigger_keyword: str) -> bool:
        return trigger_keyword in self._actions

    def __repr__(self) -> str:
        return (
            f"ActionVocabulary("
            f"actions={list(self._actions.keys())}, "
            f"arguments={list(self._arguments.keys())})"
        )
