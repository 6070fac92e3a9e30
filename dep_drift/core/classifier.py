"""Classification of the drift between a locked version and a registry's latest."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .versioning import parse_version, requirement_matches

# Style tags understood by rendering sinks
GREY = "grey"
RED = "red"
BLUE = "blue"
GREEN = "green"
YELLOW = "yellow"

Fragment = Tuple[str, str]


class Severity(str, Enum):
    """How far the latest published version has moved past the current one."""

    UNCHANGED = "unchanged"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"
    UNRESOLVABLE = "unresolvable"


SEVERITY_STYLES = {
    Severity.MAJOR: RED,
    Severity.MINOR: BLUE,
    Severity.PATCH: GREEN,
}


@dataclass(frozen=True)
class Drift:
    """Classifier output.

    ``fragments`` is a list of ``(text, style)`` pairs: the unchanged prefix
    of the latest version and the changed suffix are separate fragments so a
    renderer can highlight them differently. ``range_matched`` is only set
    when there was no locked version and the requirement range was checked
    against the latest version instead.
    """

    severity: Severity
    latest: str
    fragments: List[Fragment] = field(default_factory=list)
    range_matched: Optional[bool] = None

    @property
    def is_degraded(self) -> bool:
        return self.range_matched is not None

    @property
    def has_update(self) -> bool:
        return self.severity in SEVERITY_STYLES


class VersionDriftClassifier:
    """Compares current versions (or requirements) with latest versions.

    Args:
        bare_operator: Operator implied by a bare requirement such as
            ``1.2.0`` in the manifest dialect being classified
    """

    def __init__(self, bare_operator: str = "^") -> None:
        self.bare_operator = bare_operator

    def classify(self, current: Optional[str], latest: str, requirement: str = "*") -> Drift:
        """Classify the drift between ``current`` and ``latest``.

        Rules, first match wins:

        1. ``latest`` is not a version: UNRESOLVABLE, shown verbatim.
        2. ``current`` is missing or not a version: the requirement range is
           checked against ``latest``. A match is UNCHANGED, shown neutral;
           a mismatch is UNRESOLVABLE, shown in the mismatch style.
        3. Release components are compared major first: the first one where
           ``latest`` is greater decides between MAJOR, MINOR and PATCH.
           Otherwise UNCHANGED, with no fragments.
        """
        latest_version = parse_version(latest)
        if latest_version is None:
            return Drift(Severity.UNRESOLVABLE, latest, [(latest, GREY)])

        current_version = parse_version(current)
        if current_version is None:
            matched = requirement_matches(requirement, latest_version, self.bare_operator)
            style = GREY if matched else YELLOW
            severity = Severity.UNCHANGED if matched else Severity.UNRESOLVABLE
            return Drift(severity, latest, [(latest, style)], range_matched=matched)

        if latest_version.major > current_version.major:
            severity = Severity.MAJOR
        elif latest_version.minor > current_version.minor:
            severity = Severity.MINOR
        elif latest_version.micro > current_version.micro:
            severity = Severity.PATCH
        else:
            return Drift(Severity.UNCHANGED, latest)

        return Drift(severity, latest, self.fragments_for(severity, latest))

    def fragments_for(self, severity: Severity, latest: str) -> List[Fragment]:
        """Split ``latest`` into a neutral prefix and a highlighted suffix.

        MAJOR highlights the whole version, MINOR everything after the major
        component and PATCH everything after the minor component.
        """
        style = SEVERITY_STYLES[severity]
        if severity is Severity.MAJOR:
            return [(latest, style)]

        keep = 1 if severity is Severity.MINOR else 2
        parts = latest.split(".")
        if len(parts) <= keep:
            return [(latest, style)]

        prefix = ".".join(parts[:keep]) + "."
        suffix = ".".join(parts[keep:])
        return [(prefix, GREY), (suffix, style)]
