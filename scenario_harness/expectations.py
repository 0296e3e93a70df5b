"""Expectation primitives for scenario bodies.

Each expectation returns None when it holds and raises ExpectationError
(an AssertionError) describing expected vs. received otherwise.
"""

import difflib
import re
from collections.abc import Mapping
from pprint import pformat
from typing import Any, List, Optional, Union

from .errors import ExpectationError


def _describe(actual: Any, expected: Any, label: str = "Expected") -> str:
    expected_text = pformat(expected)
    actual_text = pformat(actual)
    lines = [f"{label}: {expected_text}", f"Received: {actual_text}"]

    if "\n" in expected_text or "\n" in actual_text:
        diff = difflib.unified_diff(
            expected_text.splitlines(),
            actual_text.splitlines(),
            fromfile="expected",
            tofile="received",
            lineterm=""
        )
        lines.extend(diff)

    return "\n".join(lines)


def _strict_equal(actual: Any, expected: Any) -> bool:
    """Equality that keeps bool distinct from int, recursing into containers"""
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    if isinstance(expected, Mapping):
        return (
            isinstance(actual, Mapping)
            and actual.keys() == expected.keys()
            and all(_strict_equal(actual[key], expected[key]) for key in expected)
        )
    if isinstance(expected, (list, tuple)):
        return (
            type(actual) is type(expected)
            and len(actual) == len(expected)
            and all(_strict_equal(a, e) for a, e in zip(actual, expected))
        )
    return actual == expected


def expect_equal(actual: Any, expected: Any):
    if not _strict_equal(actual, expected):
        raise ExpectationError(
            "expect_equal failed\n" + _describe(actual, expected),
            actual=actual,
            expected=expected
        )


def expect_contains(actual: Any, pattern: Union[str, re.Pattern, Any]):
    """Regex search, substring, or membership depending on the pattern"""
    if isinstance(pattern, re.Pattern):
        matched = pattern.search(str(actual)) is not None
        label = "Expected pattern"
        shown = f"/{pattern.pattern}/"
    elif isinstance(pattern, str) and isinstance(actual, str):
        matched = pattern in actual
        label = "Expected substring"
        shown = pattern
    else:
        try:
            matched = pattern in actual
        except TypeError:
            matched = False
        label = "Expected to contain"
        shown = pattern

    if not matched:
        raise ExpectationError(
            "expect_contains failed\n" + _describe(actual, shown, label=label),
            actual=actual,
            expected=pattern
        )


def expect_truthy(value: Any):
    if not value:
        raise ExpectationError(
            "expect_truthy failed\n" + _describe(value, "a truthy value"),
            actual=value,
            expected=True
        )


def _subset_mismatches(actual: Any, partial: Mapping, path: str = "") -> List[str]:
    if not isinstance(actual, Mapping):
        return [f"{path or '<root>'}: expected a mapping, received {actual!r}"]

    mismatches = []
    for key, expected in partial.items():
        where = f"{path}.{key}" if path else str(key)
        if key not in actual:
            mismatches.append(f"{where}: missing (expected {expected!r})")
        elif isinstance(expected, Mapping):
            mismatches.extend(_subset_mismatches(actual[key], expected, where))
        elif not _strict_equal(actual[key], expected):
            mismatches.append(f"{where}: expected {expected!r}, received {actual[key]!r}")
    return mismatches


def expect_object_subset(actual: Any, partial: Mapping):
    """Every key of partial must be present in actual with an equal value"""
    mismatches = _subset_mismatches(actual, partial)
    if mismatches:
        raise ExpectationError(
            "expect_object_subset failed\n"
            + "\n".join(mismatches) + "\n"
            + _describe(actual, dict(partial), label="Expected subset"),
            actual=actual,
            expected=partial
        )


async def expect_visible(element, timeout: Optional[float] = None):
    """Wait, via the page handle, for the element to become visible"""
    if not await element.wait_until_visible(timeout):
        raise ExpectationError(
            f"expect_visible failed\nElement {element.description} was not visible"
            + (f" within {timeout:g}s" if timeout is not None else ""),
            actual="hidden",
            expected="visible"
        )


async def expect_title(page, pattern: Union[str, re.Pattern]):
    title = await page.title()
    try:
        expect_contains(title, pattern)
    except ExpectationError as e:
        raise ExpectationError(f"expect_title failed\n{e}", actual=title, expected=pattern) from None
