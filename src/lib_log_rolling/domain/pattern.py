"""Pattern converter chain and the parser that builds it.

Purpose
-------
Compile a format string such as ``"%d{yyyy-MM-dd} [%-5level] %message%newline"``
into a singly linked list of small converter nodes. Each node renders one
fragment and applies its own padding/truncation directive.

Contents
--------
* :class:`FormattingInfo` – ``min``/``max``/``left_align`` modifiers.
* :class:`PatternConverter` – chain node base class.
* :class:`LiteralConverter`, :class:`NewLineConverter` – built-in nodes.
* :class:`ConverterRegistry` – explicit name → factory table.
* :class:`PatternParser` – the pattern compiler.

System Role
-----------
Pure domain logic. Concrete converters that read the environment or the log
event live in :mod:`lib_log_rolling.adapters.pattern`.

Alignment Notes
---------------
Unknown directives are kept as literal text and reported through the
``on_unknown`` callback instead of failing the whole pattern.
"""

from __future__ import annotations

import io
import os
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol

_NO_MAX = 2**31 - 1


class SupportsWrite(Protocol):
    """Minimal text sink accepted by converters."""

    def write(self, text: str, /) -> Any: ...


@dataclass(frozen=True, slots=True)
class FormattingInfo:
    """Padding/truncation directive parsed from ``%-5.10name``.

    ``min_width < 0`` disables padding, ``max_width == 2**31 - 1`` disables
    truncation.
    """

    min_width: int = -1
    max_width: int = _NO_MAX
    left_align: bool = False

    @property
    def is_default(self) -> bool:
        return self.min_width < 0 and self.max_width == _NO_MAX


class PatternConverter(ABC):
    """One node of a converter chain.

    Subclasses implement :meth:`convert`; :meth:`format` applies the
    formatting directive around it. Set ``keep_end_on_truncate`` on converters
    whose trailing characters carry the meaning (dotted logger names).
    """

    keep_end_on_truncate: ClassVar[bool] = False

    def __init__(self, option: str | None = None, formatting_info: FormattingInfo | None = None) -> None:
        self.option = option
        self.formatting_info = formatting_info or FormattingInfo()
        self._next: PatternConverter | None = None

    @property
    def next(self) -> "PatternConverter | None":
        return self._next

    def set_next(self, converter: "PatternConverter") -> "PatternConverter":
        """Link ``converter`` after this node and return the new tail."""

        self._next = converter
        return converter

    def activate_options(self) -> None:
        """Validate/interpret :attr:`option`; called once after parsing."""

    @abstractmethod
    def convert(self, writer: SupportsWrite, state: Any) -> None:
        """Write this node's raw fragment for ``state`` into ``writer``."""

    def format(self, writer: SupportsWrite, state: Any) -> None:
        """Render this node honouring the min/max/alignment directive."""

        info = self.formatting_info
        if info.is_default:
            self.convert(writer, state)
            return

        buffer = io.StringIO()
        self.convert(buffer, state)
        text = buffer.getvalue()
        if len(text) > info.max_width:
            text = text[len(text) - info.max_width :] if self.keep_end_on_truncate else text[: info.max_width]
        if len(text) < info.min_width:
            padding = " " * (info.min_width - len(text))
            text = text + padding if info.left_align else padding + text
        writer.write(text)

    def format_all(self, writer: SupportsWrite, state: Any) -> None:
        """Render this node followed by every node linked after it."""

        for converter in self.iter_chain():
            converter.format(writer, state)

    def iter_chain(self) -> Iterator["PatternConverter"]:
        node: PatternConverter | None = self
        while node is not None:
            yield node
            node = node.next


class LiteralConverter(PatternConverter):
    """Emit constant text; adjacent literals collapse into one node."""

    def __init__(self, text: str) -> None:
        super().__init__(option=text)

    def set_next(self, converter: PatternConverter) -> PatternConverter:
        mergeable = self.formatting_info.is_default and converter.formatting_info.is_default
        if mergeable and isinstance(converter, LiteralConverter):
            self.option = (self.option or "") + (converter.option or "")
            return self
        return super().set_next(converter)

    def convert(self, writer: SupportsWrite, state: Any) -> None:
        writer.write(self.option or "")


class NewLineConverter(LiteralConverter):
    """Emit the platform line terminator (option ``DOS`` or ``UNIX`` overrides)."""

    def __init__(self, option: str | None = None, formatting_info: FormattingInfo | None = None) -> None:
        super().__init__(os.linesep)
        self.requested = option
        if formatting_info is not None:
            self.formatting_info = formatting_info

    def activate_options(self) -> None:
        requested = (self.requested or "").strip().upper()
        if requested == "DOS":
            self.option = "\r\n"
        elif requested == "UNIX":
            self.option = "\n"
        else:
            self.option = os.linesep


ConverterFactory = Callable[[], PatternConverter]


class ConverterRegistry:
    """Name → converter factory lookup populated by explicit registration."""

    def __init__(self, entries: Mapping[str, ConverterFactory] | None = None) -> None:
        self._entries: dict[str, ConverterFactory] = {}
        for name, factory in (entries or {}).items():
            self.register(name, factory)

    def register(self, name: str, factory: ConverterFactory) -> None:
        if not name or not name.isalpha():
            raise ValueError(f"converter names must be non-empty and alphabetic, got {name!r}")
        self._entries[name] = factory

    def copy(self) -> "ConverterRegistry":
        return ConverterRegistry(self._entries)

    def names(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def match(self, pattern: str, position: int) -> str | None:
        """Return the longest registered name starting at ``position``."""

        best: str | None = None
        for name in self._entries:
            if pattern.startswith(name, position) and (best is None or len(name) > len(best)):
                best = name
        return best

    def create(self, name: str, option: str | None, formatting_info: FormattingInfo) -> PatternConverter:
        converter = self._entries[name]()
        converter.option = option
        converter.formatting_info = formatting_info
        if isinstance(converter, NewLineConverter):
            converter.requested = option
        return converter


class PatternParser:
    """Compile a pattern string into a converter chain.

    Examples
    --------
    >>> registry = ConverterRegistry({'newline': NewLineConverter})
    >>> head = PatternParser('100%% done%newline{UNIX}', registry).parse()
    >>> buffer = io.StringIO()
    >>> head.format_all(buffer, None)
    >>> buffer.getvalue()
    '100% done\\n'
    """

    def __init__(
        self,
        pattern: str,
        registry: ConverterRegistry,
        *,
        on_unknown: Callable[[str], None] | None = None,
    ) -> None:
        self._pattern = pattern
        self._registry = registry
        self._on_unknown = on_unknown

    def parse(self) -> PatternConverter | None:
        head: PatternConverter | None = None
        tail: PatternConverter | None = None
        literal: list[str] = []

        def push(converter: PatternConverter) -> None:
            nonlocal head, tail
            converter.activate_options()
            if tail is None:
                head = tail = converter
            else:
                tail = tail.set_next(converter)

        def flush_literal() -> None:
            if literal:
                push(LiteralConverter("".join(literal)))
                literal.clear()

        pattern = self._pattern
        length = len(pattern)
        index = 0
        while index < length:
            char = pattern[index]
            if char != "%":
                literal.append(char)
                index += 1
                continue
            if index + 1 < length and pattern[index + 1] == "%":
                literal.append("%")
                index += 2
                continue

            start = index
            index += 1
            left_align = False
            if index < length and pattern[index] == "-":
                left_align = True
                index += 1
            min_width, index = self._read_int(index)
            max_width: int | None = None
            if index < length and pattern[index] == ".":
                max_width, index = self._read_int(index + 1)

            name = self._registry.match(pattern, index)
            if name is None:
                word_end = index
                while word_end < length and pattern[word_end].isalpha():
                    word_end += 1
                directive = pattern[start:word_end]
                if self._on_unknown is not None:
                    self._on_unknown(directive)
                literal.append(directive)
                index = word_end
                continue
            index += len(name)

            option: str | None = None
            if index < length and pattern[index] == "{":
                close = pattern.find("}", index + 1)
                if close != -1:
                    option = pattern[index + 1 : close]
                    index = close + 1

            flush_literal()
            info = FormattingInfo(
                min_width=min_width if min_width is not None else -1,
                max_width=max_width if max_width is not None else _NO_MAX,
                left_align=left_align,
            )
            push(self._registry.create(name, option, info))

        flush_literal()
        return head

    def _read_int(self, index: int) -> tuple[int | None, int]:
        end = index
        while end < len(self._pattern) and self._pattern[end].isdigit():
            end += 1
        if end == index:
            return None, index
        return int(self._pattern[index:end]), end


__all__ = [
    "ConverterFactory",
    "ConverterRegistry",
    "FormattingInfo",
    "LiteralConverter",
    "NewLineConverter",
    "PatternConverter",
    "PatternParser",
    "SupportsWrite",
]
