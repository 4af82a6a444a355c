import pytest

from app.features.compliance.schemas.rule import Rule, RuleType, Severity
from app.features.compliance.services.catalogue import RuleCatalogue
from app.features.compliance.services.checks import CheckRegistry, CheckResult
from app.features.compliance.services.rule_engine import MISSING_STRUCTURE_PREVIEW, RuleEngine, calculate_score
from app.platform.utils.html import parse_html


def make_rule(rule_id, rule_type=RuleType.automated):
    return Rule(
        id=rule_id,
        category="Components",
        description=f"Rule {rule_id}",
        requirements=[f"Requirement for {rule_id}"],
        severity=Severity.high,
        type=rule_type,
    )


def engine_for(registry, rules, **kwargs) -> RuleEngine:
    return RuleEngine(catalogue=RuleCatalogue("Test", "0.1", rules, registry), **kwargs)


class TestCalculateScore:

    def test_seven_of_ten(self):
        assert calculate_score(7, 3) == 70

    def test_no_checks_scores_full(self):
        assert calculate_score(0, 0) == 100

    def test_rounds_half_up(self):
        # 12.5 rounds to 13, not to the even 12
        assert calculate_score(1, 7) == 13
        assert calculate_score(1, 2) == 33
        assert calculate_score(2, 1) == 67

    def test_bounds(self):
        assert calculate_score(0, 5) == 0
        assert calculate_score(5, 0) == 100


class TestRuleEngine:

    def test_selector_without_matches_passes_vacuously(self):
        registry = CheckRegistry()
        registry.element_check("1", 'input[type="file"]')(lambda element, context: False)

        report = engine_for(registry, [make_rule("1")]).evaluate(parse_html("<p>no uploads</p>"))

        assert [p.rule_id for p in report.passed] == ["1"]
        assert report.violations == []

    def test_any_failing_element_fails_the_rule_with_first_failure_preview(self):
        registry = CheckRegistry()
        registry.element_check("1", "a")(lambda element, context: element.get("id") == "good")

        html = '<a id="good">ok</a><a id="bad1">x</a><a id="bad2">y</a>'
        report = engine_for(registry, [make_rule("1")]).evaluate(parse_html(html), "https://a.example/")

        assert len(report.violations) == 1
        violation = report.violations[0]
        assert violation.preview == '<a id="bad1">x</a>'
        assert violation.page_url == "https://a.example/"
        assert violation.requirements == ["Requirement for 1"]

    def test_check_result_reason_and_fix_are_carried(self):
        registry = CheckRegistry()
        registry.global_check("1")(lambda context: CheckResult(False, "Missing thing", "Add the thing"))

        violation = engine_for(registry, [make_rule("1")]).evaluate(parse_html("<html></html>")).violations[0]

        assert violation.reason == "Missing thing"
        assert violation.fix == "Add the thing"

    def test_global_check_exception_is_a_violation(self):
        registry = CheckRegistry()

        @registry.global_check("1")
        def broken(context):
            raise RuntimeError("boom")

        report = engine_for(registry, [make_rule("1")]).evaluate(parse_html("<html></html>"))

        assert [v.rule_id for v in report.violations] == ["1"]
        assert "boom" in report.violations[0].reason

    def test_element_check_exception_fails_that_element(self):
        registry = CheckRegistry()

        @registry.element_check("1", "button")
        def broken(element, context):
            if element.get("id") == "explodes":
                raise KeyError("style")
            return True

        html = '<button id="fine">a</button><button id="explodes">b</button>'
        report = engine_for(registry, [make_rule("1")]).evaluate(parse_html(html))

        assert report.violations[0].preview == '<button id="explodes">b</button>'

    def test_manual_rules_are_neither_passed_nor_violated(self):
        registry = CheckRegistry()
        registry.global_check("1")(lambda context: True)

        rules = [make_rule("1"), make_rule("2", RuleType.manual)]
        report = engine_for(registry, rules).evaluate(parse_html("<html></html>"))

        assert [p.rule_id for p in report.passed] == ["1"]
        assert report.violations == []
        assert report.total_checks == 1

    def test_score_and_totals(self):
        registry = CheckRegistry()
        rules = []
        for i in range(10):
            rule_id = str(i + 1)
            registry.global_check(rule_id)(lambda context, passed=i < 7: passed)
            rules.append(make_rule(rule_id))

        report = engine_for(registry, rules).evaluate(parse_html("<html><body></body></html>"))

        assert len(report.passed) == 7
        assert len(report.violations) == 3
        assert report.total_checks == 10
        assert report.score == 70

    def test_global_preview_is_truncated_document(self):
        registry = CheckRegistry()
        registry.global_check("1")(lambda context: False)

        html = "<html><body>" + "x" * 100 + "</body></html>"
        report = engine_for(registry, [make_rule("1")], preview_max_length=20).evaluate(parse_html(html))

        assert report.violations[0].preview == "<html><body>xxxxxxxx"

    def test_zero_preview_length_is_respected(self):
        registry = CheckRegistry()
        registry.global_check("1")(lambda context: False)

        report = engine_for(registry, [make_rule("1")], preview_max_length=0).evaluate(parse_html("<html></html>"))

        assert report.violations[0].preview == ""

    def test_passing_global_check_skips_preview(self, monkeypatch):
        from app.features.compliance.services import rule_engine

        serialized = []
        monkeypatch.setattr(rule_engine, "outer_html", lambda node, limit=None: serialized.append(node) or "")
        registry = CheckRegistry()
        registry.global_check("1")(lambda context: True)
        registry.global_check("2")(lambda context: False)

        engine_for(registry, [make_rule("1"), make_rule("2")]).evaluate(parse_html("<html></html>"))

        assert len(serialized) == 1

    def test_empty_document_preview(self):
        registry = CheckRegistry()
        registry.global_check("1")(lambda context: False)

        report = engine_for(registry, [make_rule("1")]).evaluate(parse_html(""))

        assert report.violations[0].preview == MISSING_STRUCTURE_PREVIEW

    def test_page_url_reaches_checks(self):
        registry = CheckRegistry()
        seen = []
        registry.global_check("1")(lambda context: seen.append(context.page_url) or True)

        engine_for(registry, [make_rule("1")]).evaluate(parse_html("<html></html>"), "https://a.example/p")

        assert seen == ["https://a.example/p"]

    def test_accepts_raw_html(self):
        registry = CheckRegistry()
        registry.global_check("1")(lambda context: context.exists("h1"))

        report = engine_for(registry, [make_rule("1")]).evaluate("<h1>Title</h1>")

        assert report.score == 100


class TestDgaCatalogueEndToEnd:

    @pytest.fixture(scope="class")
    def engine(self):
        return RuleEngine()

    def test_bare_arabic_document(self, engine):
        report = engine.evaluate(parse_html('<html lang="ar"></html>'))

        passed = {p.rule_id for p in report.passed}
        violated = {v.rule_id for v in report.violations}

        assert "39" in passed
        assert {"27", "49", "10"} <= violated
        assert not passed & violated
        assert report.total_checks == 46

    def test_manual_rules_never_scored(self, engine):
        report = engine.evaluate(parse_html("<html><body><p>Hello</p></body></html>"))

        scored = {p.rule_id for p in report.passed} | {v.rule_id for v in report.violations}
        for manual_id in ("15", "16", "23", "30", "38", "53", "71", "75"):
            assert manual_id not in scored

    def test_score_matches_counts(self, engine):
        report = engine.evaluate(parse_html("<html><body><nav></nav><footer>© 2026</footer></body></html>"))
        assert report.score == calculate_score(len(report.passed), len(report.violations))
