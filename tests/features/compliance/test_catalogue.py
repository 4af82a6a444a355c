import json
import logging

import pytest

from app.features.compliance.schemas.rule import RuleType
from app.features.compliance.services.catalogue import load_catalogue
from app.features.compliance.services.checks import CheckRegistry, ElementCheck, GlobalCheck
from app.platform.exceptions import RuleCatalogueError


def write_catalogue(tmp_path, rules):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"name": "Test rules", "version": "0.1", "rules": rules}), encoding="utf-8")
    return path


def rule(rule_id, rule_type="automated", **extra):
    return {"id": rule_id, "category": "General", "description": f"Rule {rule_id}", "type": rule_type, **extra}


@pytest.fixture
def registry():
    registry = CheckRegistry()

    @registry.global_check("1")
    def always(context):
        return True

    return registry


class TestDefaultCatalogue:

    def test_loads_dga_rules(self):
        catalogue = load_catalogue()

        assert catalogue.version == "1.0"
        assert len(catalogue.rules) == 62
        assert len(catalogue.automated) == 46
        assert len(catalogue.manual) == 16

    def test_rule_ids_are_unique(self):
        ids = [r.id for r in load_catalogue().rules]
        assert len(ids) == len(set(ids))

    def test_every_automated_rule_has_a_check(self):
        catalogue = load_catalogue()
        for r in catalogue.automated:
            assert isinstance(catalogue.check_for(r), (GlobalCheck, ElementCheck)), r.id

    def test_selector_rules_are_element_checks(self):
        catalogue = load_catalogue()
        by_id = {r.id: r for r in catalogue.rules}

        check = catalogue.check_for(by_id["20"])
        assert isinstance(check, ElementCheck)
        assert check.selector == 'input[type="file"]'
        assert isinstance(catalogue.check_for(by_id["27"]), GlobalCheck)

    def test_manual_checklist(self):
        checklist = load_catalogue().manual_checklist()

        ids = [item.id for item in checklist]
        assert "15" in ids and "71" in ids
        assert "1" not in ids
        assert all(item.requirements for item in checklist)

    def test_catalogue_preserves_file_order(self):
        ids = [r.id for r in load_catalogue().rules]
        assert ids.index("39") < ids.index("71") < ids.index("40")


class TestLoadCatalogue:

    def test_custom_catalogue(self, tmp_path, registry):
        path = write_catalogue(tmp_path, [rule("1"), rule("2", "manual", severity="low")])

        catalogue = load_catalogue(path, registry=registry)

        assert catalogue.name == "Test rules"
        assert [r.id for r in catalogue.automated] == ["1"]
        assert catalogue.manual[0].type == RuleType.manual
        assert catalogue.manual[0].severity.value == "low"

    def test_severity_defaults_to_medium(self, tmp_path, registry):
        catalogue = load_catalogue(write_catalogue(tmp_path, [rule("1")]), registry=registry)
        assert catalogue.rules[0].severity.value == "medium"

    def test_duplicate_ids_are_rejected(self, tmp_path, registry):
        path = write_catalogue(tmp_path, [rule("1"), rule("1", "manual")])

        with pytest.raises(RuleCatalogueError, match="Duplicate rule id 1"):
            load_catalogue(path, registry=registry)

    def test_automated_rule_without_check_is_rejected(self, tmp_path, registry):
        path = write_catalogue(tmp_path, [rule("1"), rule("2")])

        with pytest.raises(RuleCatalogueError, match="without a check: 2"):
            load_catalogue(path, registry=registry)

    def test_check_for_manual_rule_is_ignored_with_warning(self, tmp_path, registry, caplog):
        @registry.global_check("2")
        def unused(context):
            return False

        path = write_catalogue(tmp_path, [rule("1"), rule("2", "manual")])

        with caplog.at_level(logging.WARNING):
            catalogue = load_catalogue(path, registry=registry)

        assert [r.id for r in catalogue.manual] == ["2"]
        assert "rule 2 is not used" in caplog.text

    def test_malformed_rule_is_rejected(self, tmp_path, registry):
        path = write_catalogue(tmp_path, [{"id": "1", "type": "automated"}])

        with pytest.raises(RuleCatalogueError, match="Malformed rule"):
            load_catalogue(path, registry=registry)

    def test_unknown_type_is_rejected(self, tmp_path, registry):
        path = write_catalogue(tmp_path, [rule("1", "semi-automated")])

        with pytest.raises(RuleCatalogueError):
            load_catalogue(path, registry=registry)

    def test_missing_file_is_rejected(self, tmp_path, registry):
        with pytest.raises(RuleCatalogueError, match="Cannot read"):
            load_catalogue(tmp_path / "nope.json", registry=registry)


class TestCheckRegistry:

    def test_registering_twice_is_rejected(self, registry):
        with pytest.raises(RuleCatalogueError):
            registry.register("1", GlobalCheck(lambda context: True))

    def test_decorators_return_the_function(self):
        registry = CheckRegistry()

        @registry.element_check("9", "a")
        def check(element, context):
            return True

        assert check(None, None) is True
        assert registry.get("9").selector == "a"
        assert "9" in registry and len(registry) == 1
