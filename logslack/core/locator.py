"""Source-control location resolution for classes and call frames.

Maps a fully-qualified Java reference onto a file URL in the source-control
browser using the ordered package-to-module mapping rules.
"""

import re

from .models import FormattingRules, ModuleMapping, ResolvedLocation

UNDEFINED_VERSION_MARKER = "IS_UNDEFINED"
DEFAULT_REVISION = "master"
JAVA_SOURCE_FOLDER = "src/main/java"

SNAPSHOT_SUFFIX = re.compile(r"-(?P<revision>[0-9A-Za-z]{8})-SNAPSHOT$")

_DUPLICATE_SLASHES = re.compile(r"([^:])/{2,}")

# Template placeholders are numbered $1..$4.
_MAX_PLACEHOLDERS = 4


def revision_for(version: str | None) -> str:
    """Pick the source revision a version string was built from.

    Undefined versions point at master, snapshots at their short commit
    hash and everything else is treated as a release tag.
    """
    if version is None or UNDEFINED_VERSION_MARKER in version:
        return DEFAULT_REVISION
    match = SNAPSHOT_SUFFIX.search(version)
    if match:
        return match.group("revision")
    return version


def collapse_slashes(url: str) -> str:
    """Collapse runs of slashes, leaving the scheme separator alone."""
    return _DUPLICATE_SLASHES.sub(r"\1/", url)


class SourceLocator:
    """Resolves source-control URLs for Java class and frame references.

    Mapping rules are scanned in declaration order and the first rule whose
    regex matches wins.
    """

    def __init__(self, rules: FormattingRules):
        self.file_url = rules.vcs_file_url
        self._frame_rules: list[tuple[re.Pattern[str], ModuleMapping]] = []
        self._class_rules: list[tuple[re.Pattern[str], ModuleMapping]] = []

        for mapping in rules.module_mapping:
            self._frame_rules.append(
                (
                    re.compile(
                        rf"({mapping.pattern}[.\w_]*)(\.[\w_$]*){{2}}\(([^:]*):(\d+)\)"
                    ),
                    mapping,
                )
            )
            self._class_rules.append(
                (re.compile(rf"({mapping.pattern}.*)\.([^.]+)"), mapping)
            )

    def resolve(
        self,
        reference: str,
        has_method_and_line: bool,
        version: str | None = None,
    ) -> ResolvedLocation | None:
        """Resolve a reference to a source-control location.

        Args:
            reference: A stack frame line ("at pkg.Class.method(File.java:42)")
                when has_method_and_line is True, otherwise a fully-qualified
                class name.
            has_method_and_line: Whether the reference carries a method name
                and a (file:line) suffix.
            version: Application version used to pick the revision.

        Returns:
            The resolved location, or None if no mapping rule matches.
        """
        revision = revision_for(version)
        rules = self._frame_rules if has_method_and_line else self._class_rules

        for regex, mapping in rules:
            match = regex.search(reference)
            if match is None:
                continue

            module_path, groups_to_skip = self._apply_template(
                mapping.template, match
            )
            package_path = match.group(1).replace(".", "/")
            base = f"{self.file_url}/{revision}/{module_path}/{JAVA_SOURCE_FOLDER}/{package_path}"

            if has_method_and_line:
                file_name = match.group(3 + groups_to_skip)
                line_number = match.group(4 + groups_to_skip)
                return ResolvedLocation(
                    url=collapse_slashes(f"{base}/{file_name}#L{line_number}"),
                    revision=revision,
                    module_path=module_path,
                    package_path=package_path,
                    file_or_class_name=file_name,
                    line_number=int(line_number),
                )

            class_name = match.group(2 + groups_to_skip)
            return ResolvedLocation(
                url=collapse_slashes(f"{base}/{class_name}.java"),
                revision=revision,
                module_path=module_path,
                package_path=package_path,
                file_or_class_name=class_name,
            )

        return None

    @staticmethod
    def _apply_template(template: str, match: re.Match[str]) -> tuple[str, int]:
        """Substitute $1..$4 with the pattern's own capture groups.

        Every placeholder that gets substituted consumes one capture group,
        pushing the file name and line number groups further right.

        Returns:
            The module path and the number of groups consumed.
        """
        module_path = template
        groups_to_skip = 0
        for i in range(1, _MAX_PLACEHOLDERS + 1):
            if i + 1 > match.re.groups:
                break
            value = match.group(i + 1)
            if value is None:
                continue
            replaced = module_path.replace(f"${i}", value, 1)
            if replaced != module_path:
                module_path = replaced
                groups_to_skip += 1
        return module_path, groups_to_skip
