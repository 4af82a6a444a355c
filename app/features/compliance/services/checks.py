"""
Executable side of the rule catalogue.

A rule's metadata lives in the JSON catalogue; its check is registered here by
rule id as one of two shapes:

- GlobalCheck: func(context) inspects the whole page.
- ElementCheck: func(element, context) runs on every element matching selector.

Checks return a bool or a CheckResult carrying a human-readable reason and fix.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Union

from bs4.element import Tag

from app.features.compliance.utils.page_context import PageContext
from app.platform.exceptions import RuleCatalogueError


@dataclass(frozen=True)
class CheckResult:
    passed: bool
    reason: Optional[str] = None
    fix: Optional[str] = None


CheckOutcome = Union[bool, CheckResult]
GlobalCheckFunc = Callable[[PageContext], CheckOutcome]
ElementCheckFunc = Callable[[Tag, PageContext], CheckOutcome]


@dataclass(frozen=True)
class GlobalCheck:
    func: GlobalCheckFunc


@dataclass(frozen=True)
class ElementCheck:
    selector: str
    func: ElementCheckFunc


Check = Union[GlobalCheck, ElementCheck]


def as_result(outcome: CheckOutcome) -> CheckResult:
    if isinstance(outcome, CheckResult):
        return outcome
    return CheckResult(passed=bool(outcome))


class CheckRegistry:

    def __init__(self):
        self._checks: Dict[str, Check] = {}

    def register(self, rule_id: str, check: Check) -> None:
        if rule_id in self._checks:
            raise RuleCatalogueError(f"A check is already registered for rule {rule_id}")
        self._checks[rule_id] = check

    def global_check(self, rule_id: str):
        def decorator(func: GlobalCheckFunc) -> GlobalCheckFunc:
            self.register(rule_id, GlobalCheck(func))
            return func
        return decorator

    def element_check(self, rule_id: str, selector: str):
        def decorator(func: ElementCheckFunc) -> ElementCheckFunc:
            self.register(rule_id, ElementCheck(selector, func))
            return func
        return decorator

    def get(self, rule_id: str) -> Optional[Check]:
        return self._checks.get(rule_id)

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._checks

    def __iter__(self) -> Iterator[str]:
        return iter(self._checks)

    def __len__(self) -> int:
        return len(self._checks)
