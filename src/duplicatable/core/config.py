"""Configuration management for Duplicatable.

This module provides the DuplicationConfig class describing what to duplicate
and how to transform it. It integrates with hydra-zen so that duplication
settings can be composed and stored alongside the rest of an application's
configuration.

The configuration handles:
    - Finder selection for the root fetch and each contained relationship
    - Relationship paths to eager-load and duplicate (``contain``)
    - Field actions: ``remove``, ``set``, ``prepend``, ``append``
    - Options passed through to the repository's save

Example:
    Programmatic configuration:
        >>> config = DuplicationConfig(
        ...     contain=["Items", "Items.Discounts"],
        ...     remove=["Items.Discounts.code"],
        ...     set={"code": lambda record: record["code"] + "-dup"},
        ...     append={"name": " (copy)"},
        ... )

    With hydra-zen:
        >>> from hydra_zen import instantiate, store
        >>> store(DuplicationConf(contain=["Items"], append={"name": " (copy)"}), group="duplication", name="orders")
        >>> config = instantiate(DuplicationConf(contain=["Items"]))
"""

import warnings
from typing import Any

from hydra_zen import builds, instantiate, store
from pydantic import BaseModel, field_validator, model_validator

from duplicatable.core.constants import DEFAULT_FINDER, PATH_DELIMITER, TRANSLATIONS_FINDER
from duplicatable.core.validation import STRICT_VALIDATION_CONFIG
from duplicatable.model.actions import Append, FieldAction, Prepend, Remove, Set, SetValue, as_set_value

# camelCase option names accepted alongside the field names.
CAMEL_CASE_KEYS = {
    "includeTranslations": "include_translations",
    "saveOptions": "save_options",
}


def _check_path(path: str) -> str:
    if not isinstance(path, str) or not path or any(not part for part in path.split(PATH_DELIMITER)):
        raise ValueError(f"Invalid dotted path: {path!r}")
    return path


class DuplicationConfig(BaseModel):
    """Configuration model for a duplication.

    Attributes:
        finder: Finder used to fetch the root and, where supported, every contained
            relationship. Defaults to ``all``.
        contain: Dotted relationship paths to eager-load and duplicate.
        include_translations: Deprecated. When true the ``translations`` finder is used
            regardless of ``finder``. Set ``finder="translations"`` instead.
        remove: Dotted field paths to unset on the copy.
        set: Dotted field path to value. Callables are invoked with each target record.
        prepend: Dotted field path to text placed before the current value.
        append: Dotted field path to text placed after the current value.
        save_options: Extra keyword options passed to the repository's save.
    """

    model_config = STRICT_VALIDATION_CONFIG

    finder: str = DEFAULT_FINDER
    contain: list[str] = []
    include_translations: bool = False
    remove: list[str] = []
    set: dict[str, Any] = {}
    prepend: dict[str, str] = {}
    append: dict[str, str] = {}
    save_options: dict[str, Any] = {}

    @model_validator(mode="before")
    @classmethod
    def accept_camel_case(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {CAMEL_CASE_KEYS.get(key, key): value for key, value in data.items()}
        return data

    @field_validator("contain", "remove")
    @classmethod
    def check_paths(cls, paths: list[str]) -> list[str]:
        return [_check_path(path) for path in paths]

    @field_validator("set")
    @classmethod
    def wrap_set_values(cls, values: dict[str, Any]) -> dict[str, SetValue]:
        return {_check_path(path): as_set_value(value) for path, value in values.items()}

    @field_validator("prepend", "append")
    @classmethod
    def check_text_paths(cls, values: dict[str, str]) -> dict[str, str]:
        return {_check_path(path): value for path, value in values.items()}

    def __init__(self, /, **data: Any):
        super().__init__(**data)
        # stacklevel=2 is the frame constructing the config.
        if self.include_translations:
            warnings.warn(
                "include_translations is deprecated; set finder='translations' instead",
                DeprecationWarning,
                stacklevel=2,
            )

    @property
    def effective_finder(self) -> str:
        """The finder requested for every level of the fetch.

        The deprecated ``include_translations`` flag takes precedence over
        ``finder``, including a custom finder.
        """
        return TRANSLATIONS_FINDER if self.include_translations else self.finder

    def field_actions(self) -> list[tuple[str, FieldAction]]:
        """Return (path, action) pairs in application order.

        All removals come first, followed by every set, every prepend and
        every append, so that a field configured under several sections is
        transformed in that fixed order.
        """
        actions: list[tuple[str, FieldAction]] = [(path, Remove()) for path in self.remove]
        actions += [(path, Set(value)) for path, value in self.set.items()]
        actions += [(path, Prepend(value)) for path, value in self.prepend.items()]
        actions += [(path, Append(value)) for path, value in self.append.items()]
        return actions


# =============================================================================
# Hydra Integration
# =============================================================================

# Structured config for DuplicationConfig. ``hydra_convert="all"`` hands plain
# lists and dicts to Pydantic rather than OmegaConf containers.
DuplicationConf = builds(DuplicationConfig, populate_full_signature=True, hydra_convert="all")

store(DuplicationConf, group="duplication", name="default")


def duplication_config_from(cfg: Any) -> DuplicationConfig:
    """Instantiate a hydra-zen/OmegaConf duplication config.

    Args:
        cfg: A DuplicationConf instance, or an OmegaConf node built from one.
            DuplicationConfig instances are returned unchanged.

    Returns:
        DuplicationConfig: The validated configuration.
    """
    if isinstance(cfg, DuplicationConfig):
        return cfg
    return instantiate(cfg)
