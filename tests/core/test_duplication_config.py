"""Tests for DuplicationConfig and its hydra-zen integration."""

import pytest
from hydra_zen import builds, instantiate
from pydantic import ValidationError

from duplicatable.core.config import DuplicationConf, DuplicationConfig, duplication_config_from
from duplicatable.model.actions import Append, GeneratorValue, LiteralValue, Prepend, Remove, Set


class TestDuplicationConfig:
    """Tests for DuplicationConfig."""

    def test_defaults(self):
        config = DuplicationConfig()
        assert config.finder == "all"
        assert config.contain == []
        assert config.include_translations is False
        assert config.remove == []
        assert config.set == {}
        assert config.prepend == {}
        assert config.append == {}
        assert config.save_options == {}

    def test_defaults_are_not_shared(self):
        first = DuplicationConfig()
        second = DuplicationConfig()
        first.contain.append("Items")
        assert second.contain == []

    def test_camel_case_keys(self):
        config = DuplicationConfig(saveOptions={"validate": False}, finder="translations")
        assert config.save_options == {"validate": False}

    def test_set_values_are_tagged(self):
        def generator(record):
            return record["code"] + "-dup"

        config = DuplicationConfig(set={"code": generator, "name": "Copy", "note": LiteralValue(len)})
        assert config.set["code"] == GeneratorValue(generator)
        assert config.set["name"] == LiteralValue("Copy")
        # Explicitly tagged values are kept, even when the literal is callable.
        assert config.set["note"] == LiteralValue(len)

    @pytest.mark.parametrize("path", ["", "Items.", ".code", "Items..code"])
    def test_invalid_paths_rejected(self, path):
        with pytest.raises(ValidationError):
            DuplicationConfig(remove=[path])

    @pytest.mark.parametrize("section", ["prepend", "append"])
    def test_non_string_text_rejected(self, section):
        with pytest.raises(ValidationError):
            DuplicationConfig(**{section: {"code": 5}})

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            DuplicationConfig(prepnd={"code": "X-"})

    def test_frozen(self):
        config = DuplicationConfig()
        with pytest.raises(ValidationError):
            config.finder = "translations"

    def test_effective_finder(self):
        assert DuplicationConfig(finder="active").effective_finder == "active"

    def test_include_translations_overrides_finder(self):
        with pytest.warns(DeprecationWarning):
            config = DuplicationConfig(finder="active", includeTranslations=True)
        assert config.include_translations is True
        assert config.effective_finder == "translations"

    def test_include_translations_warning_points_at_caller(self):
        with pytest.warns(DeprecationWarning) as warned:
            DuplicationConfig(include_translations=True)
        assert warned[0].filename == __file__

    def test_field_actions_order(self):
        """Removals first, then set, prepend and append regardless of argument order."""
        config = DuplicationConfig(
            append={"code": "-Y"},
            prepend={"code": "X-"},
            set={"code": "42"},
            remove=["name"],
        )
        assert config.field_actions() == [
            ("name", Remove()),
            ("code", Set(LiteralValue("42"))),
            ("code", Prepend("X-")),
            ("code", Append("-Y")),
        ]


class TestHydraZenDuplicationConfig:
    """Test hydra-zen configuration for DuplicationConfig."""

    def test_builds_preserves_defaults(self):
        conf = DuplicationConf()
        assert conf.finder == "all"
        assert conf.include_translations is False

    def test_instantiate_creates_pydantic_model(self):
        conf = DuplicationConf(contain=["Items", "Items.Discounts"], append={"name": " (copy)"})
        config = instantiate(conf)

        assert isinstance(config, DuplicationConfig)
        assert config.contain == ["Items", "Items.Discounts"]
        assert config.append == {"name": " (copy)"}

    def test_duplication_config_from(self):
        config = DuplicationConfig(remove=["code"])
        assert duplication_config_from(config) is config

        conf = builds(DuplicationConfig, populate_full_signature=True, hydra_convert="all")(remove=["code"])
        assert duplication_config_from(conf).remove == ["code"]
