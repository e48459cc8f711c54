from __future__ import annotations

import io
import os
from typing import Any

import pytest

from lib_log_rolling.domain.pattern import (
    ConverterRegistry,
    FormattingInfo,
    LiteralConverter,
    NewLineConverter,
    PatternConverter,
    PatternParser,
    SupportsWrite,
)
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


class EchoStateConverter(PatternConverter):
    def convert(self, writer: SupportsWrite, state: Any) -> None:
        writer.write(str(state))


class OptionConverter(PatternConverter):
    def convert(self, writer: SupportsWrite, state: Any) -> None:
        writer.write(f"<{self.option}>")


class TailConverter(EchoStateConverter):
    keep_end_on_truncate = True


def render(pattern: str, state: Any = "value", registry: ConverterRegistry | None = None) -> str:
    registry = registry or ConverterRegistry(
        {
            "s": EchoStateConverter,
            "state": EchoStateConverter,
            "opt": OptionConverter,
            "tail": TailConverter,
            "newline": NewLineConverter,
        }
    )
    head = PatternParser(pattern, registry).parse()
    buffer = io.StringIO()
    if head is not None:
        head.format_all(buffer, state)
    return buffer.getvalue()


@pytest.mark.parametrize(
    "pattern, expected",
    [
        ("[%10state]", "[     value]"),
        ("[%-10state]", "[value     ]"),
        ("[%.3state]", "[val]"),
        ("[%-7.3state]", "[val    ]"),
        ("[%3state]", "[value]"),
    ],
)
def test_formatting_directives_pad_and_truncate(pattern: str, expected: str) -> None:
    assert render(pattern) == expected


def test_truncation_keeps_tail_when_converter_requests_it() -> None:
    assert render("%.5tail", "a.b.c.Logger") == "ogger"


def test_double_percent_is_literal() -> None:
    assert render("100%% %state", "done") == "100% done"


def test_longest_registered_name_wins() -> None:
    assert render("%state|%s", "x") == "x|x"
    assert render("%stateful", "x") == "xful"


def test_option_in_braces_reaches_converter() -> None:
    assert render("%opt{alpha} %opt") == "<alpha> <None>"


def test_unclosed_brace_is_left_as_literal() -> None:
    assert render("%opt{alpha") == "<None>{alpha"


def test_unknown_directive_is_literal_and_reported() -> None:
    unknown: list[str] = []
    registry = ConverterRegistry({"state": EchoStateConverter})
    head = PatternParser("%-5bogus %state", registry, on_unknown=unknown.append).parse()
    buffer = io.StringIO()
    assert head is not None
    head.format_all(buffer, "v")

    assert buffer.getvalue() == "%-5bogus v"
    assert unknown == ["%-5bogus"]


def test_trailing_percent_is_kept() -> None:
    assert render("50%") == "50%"


def test_empty_pattern_yields_no_chain() -> None:
    assert PatternParser("", ConverterRegistry()).parse() is None


def test_adjacent_literals_collapse_into_one_node() -> None:
    head = PatternParser("a%%b", ConverterRegistry()).parse()
    assert head is not None
    assert isinstance(head, LiteralConverter)
    assert head.next is None
    assert head.option == "a%b"


def test_chain_is_linked_in_pattern_order() -> None:
    registry = ConverterRegistry({"state": EchoStateConverter, "opt": OptionConverter})
    head = PatternParser("x%state-%opt", registry).parse()
    assert head is not None
    kinds = [type(node).__name__ for node in head.iter_chain()]
    assert kinds == ["LiteralConverter", "EchoStateConverter", "LiteralConverter", "OptionConverter"]


@pytest.mark.parametrize(
    "option, expected",
    [(None, os.linesep), ("DOS", "\r\n"), ("unix", "\n")],
)
def test_newline_converter_options(option: str | None, expected: str) -> None:
    pattern = "%newline" if option is None else f"%newline{{{option}}}"
    assert render(pattern) == expected


def test_formatting_info_defaults() -> None:
    assert FormattingInfo().is_default
    assert not FormattingInfo(min_width=3).is_default
    assert not FormattingInfo(max_width=3).is_default


def test_registry_rejects_non_alphabetic_names() -> None:
    registry = ConverterRegistry()
    with pytest.raises(ValueError, match="alphabetic"):
        registry.register("my-name", EchoStateConverter)
    with pytest.raises(ValueError):
        registry.register("", EchoStateConverter)


def test_registry_is_case_sensitive_and_copyable() -> None:
    registry = ConverterRegistry({"p": EchoStateConverter})
    clone = registry.copy()
    clone.register("P", OptionConverter)

    assert "P" in clone
    assert "P" not in registry
    assert clone.names() == ["P", "p"]
    assert registry.match("xP", 1) is None
