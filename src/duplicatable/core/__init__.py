from duplicatable.core.config import DuplicationConf, DuplicationConfig, duplication_config_from
from duplicatable.core.constants import DEFAULT_FINDER, JOIN_DATA_FIELD, PATH_DELIMITER, TRANSLATIONS_FINDER
from duplicatable.core.enums import Cardinality
from duplicatable.core.exceptions import (
    DuplicatableConfigurationError,
    DuplicatableException,
    DuplicatableNotFoundError,
    DuplicatableSchemaError,
)

__all__ = [
    "DEFAULT_FINDER",
    "JOIN_DATA_FIELD",
    "PATH_DELIMITER",
    "TRANSLATIONS_FINDER",
    "Cardinality",
    "DuplicatableConfigurationError",
    "DuplicatableException",
    "DuplicatableNotFoundError",
    "DuplicatableSchemaError",
    "DuplicationConf",
    "DuplicationConfig",
    "duplication_config_from",
]
