"""Version label rendering.

Release versions link to their tag, snapshot builds
(<semver>-<branch>-<shortsha>-SNAPSHOT) link to both the commit and
the branch they were built from.
"""

import re

from .locator import UNDEFINED_VERSION_MARKER, collapse_slashes

UNDEFINED_LABEL = "undefined"

SNAPSHOT_VERSION = re.compile(
    r"^(?P<semver>[^-]+)-(?:(?P<branch>.+)-)?(?P<revision>[0-9A-Za-z]{8})-SNAPSHOT$"
)


class VersionFormatter:
    """Renders application versions as source-tree links."""

    def __init__(self, tree_url: str):
        self.tree_url = tree_url

    def format(self, version: str | None) -> str:
        if version is None or UNDEFINED_VERSION_MARKER in version:
            return UNDEFINED_LABEL

        match = SNAPSHOT_VERSION.match(version)
        if match is None:
            return self._link(version)

        revision_link = self._link(match.group("revision"))
        branch = match.group("branch")
        if not branch:
            return revision_link
        return f"{revision_link} @ {self._link(branch)}"

    def _link(self, ref: str) -> str:
        return f"<{collapse_slashes(f'{self.tree_url}/{ref}')}|{ref}>"
