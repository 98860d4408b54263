"""Stack trace normalization for chat notifications.

Splits a raw Java stack trace into one segment per causal exception,
keeps and shortens frames from the application's own packages and
collapses everything else into ellipsis markers.
"""

import re
from collections.abc import Callable

from .locator import SourceLocator
from .models import FormattingRules

FRAME_PREFIX = "\tat"
ELLIPSIS = "\t..."

TextStep = Callable[[str], str]

_ELIDED_FRAMES = re.compile(r"^\s*\.\.\.\s*\d+\s+more\s*$")
_SYNTHETIC_CLASS = re.compile(r"\$\$[^.]+\.")
_GENERATED_MARKER = "(<generated>)"
_METHOD_LABEL = re.compile(
    r"^(?P<indent>\s*)(?:(?P<package>[\w$<>.]*)\.)?(?P<label>[\w$<>]+\.[\w$<>]+)(?=\(|\s*$)"
)
_FILE_AND_LINE = re.compile(r"\((.*):(\d+)\)")


def is_causal_header(line: str) -> bool:
    """A new exception in the causal chain starts at column zero."""
    return bool(line.strip()) and not line[0].isspace()


def is_call_frame(line: str) -> bool:
    return line.startswith(FRAME_PREFIX)


def is_elided_frames(line: str) -> bool:
    """Match the JVM's own "... 12 more" summary lines."""
    return bool(_ELIDED_FRAMES.match(line))


def collapse_synthetic_classes(line: str) -> str:
    """Shorten proxy classes: Service$$EnhancerBySpringCGLIB$$1a2b.find -> Service$$.find"""
    return _SYNTHETIC_CLASS.sub("$$.", line)


def strip_generated_marker(line: str) -> str:
    return line.replace(_GENERATED_MARKER, "")


def italicize_method_label(line: str) -> str:
    """Move the Class.method pair to the front as an italic label.

    core.user.UserService.findById(...) -> _UserService.findById_ core.user(...)

    Slack renders _italics_ only when they start at a word boundary.
    """

    def label(match: re.Match[str]) -> str:
        package = match.group("package")
        suffix = f" {package}" if package else ""
        return f"{match.group('indent')}_{match.group('label')}_{suffix}"

    return _METHOD_LABEL.sub(label, line, count=1)


def apply_steps(line: str, steps: list[TextStep]) -> str:
    for step in steps:
        line = step(line)
    return line


class StackTraceNormalizer:
    """Turns raw Java stack traces into Slack-formatted segments.

    Pure text transformation over read-only rules; safe to share between
    concurrently processed records.
    """

    def __init__(self, rules: FormattingRules, locator: SourceLocator):
        self.rules = rules
        self.locator = locator
        self._exception_prefixes = [
            re.compile(rf"{pattern}\.") for pattern in rules.exception_packages
        ]
        self._application_prefixes = [
            re.compile(rf"at {pattern}\.") for pattern in rules.application_packages
        ]

    def normalize(self, stack_trace: str | None, version: str | None = None) -> list[str]:
        """Format a raw stack trace.

        Args:
            stack_trace: Raw multi-line trace, or None.
            version: Application version used to pick the link revision.

        Returns:
            One formatted text block per exception in the causal chain,
            top-level exception first.
        """
        if not stack_trace:
            return []

        segments: list[list[str]] = []

        def current() -> list[str]:
            if not segments:
                segments.append([])
            return segments[-1]

        for line in stack_trace.split("\n"):
            line = line.rstrip("\r")
            if not line.strip():
                continue

            if is_causal_header(line):
                segments.append([self.format_exception(line)])
            elif is_call_frame(line):
                segment = current()
                if self.is_application_frame(line):
                    segment.append(self.format_call_frame(line, version))
                elif not segment or segment[-1] != ELLIPSIS:
                    segment.append(ELLIPSIS)
            elif not is_elided_frames(line):
                current().append(line.rstrip())

        return ["\n".join(segment) for segment in segments]

    def is_application_frame(self, line: str) -> bool:
        return any(
            f"at {package}." in line for package in self.rules.application_packages
        )

    def format_exception(self, line: str) -> str:
        """Bold the header after dropping known exception packages."""
        for prefix in self._exception_prefixes:
            line = prefix.sub("", line, count=1)
        return f"*{line}*"

    def format_call_frame(self, line: str, version: str | None = None) -> str:
        """Shorten an application frame and link it to its source line."""
        location = self.locator.resolve(line, True, version)

        def link(match: re.Match[str]) -> str:
            if location is not None:
                return f" : <{location.url}|{match.group(2)}>"
            return f" : <{self.rules.vcs_search_url}{match.group(1)}|{match.group(2)}>"

        def link_source(text: str) -> str:
            return _FILE_AND_LINE.sub(link, text)

        steps: list[TextStep] = [
            self.strip_application_package,
            collapse_synthetic_classes,
            strip_generated_marker,
            italicize_method_label,
            link_source,
        ]
        return apply_steps(line, steps)

    def strip_application_package(self, line: str) -> str:
        for prefix in self._application_prefixes:
            line = prefix.sub("", line, count=1)
        return line
