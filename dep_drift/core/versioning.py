"""Version parsing and requirement-range matching.

Versions are parsed with :mod:`packaging`. Requirement ranges in Cargo/npm
syntax (``^1.2``, ``~1.2.3``, ``1.x``, ``1.0 - 2.0``, ``>=1 <2 || 3``) are
translated into :class:`~packaging.specifiers.SpecifierSet` objects so that a
single matcher serves all three ecosystems; PEP 440 specifiers pass through.
"""

import re
from typing import List, Optional, Union

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

PEP440_OPERATORS = ("===", "~=", "==", "!=", ">=", "<=", ">", "<")
RANGE_OPERATORS = ("^", "~", "=")
WILDCARDS = {"x", "X", "*"}
MATCH_ALL = {"", "*", "x", "X", "latest"}

_OPERATOR_GAP = re.compile(r"(===|~=|==|!=|>=|<=|\^|~|>|<|=)\s+")
_COMPARATOR = re.compile(r"^(===|~=|==|!=|>=|<=|\^|~|>|<|=)?v?(.+)$")
_HYPHEN_RANGE = re.compile(r"^(\S+)\s+-\s+(\S+)$")


class InvalidRequirement(ValueError):
    """Raised when a requirement expression cannot be translated."""


def parse_version(text: Optional[str]) -> Optional[Version]:
    """Parse a version string, returning None when it is not a version."""
    if not text:
        return None
    try:
        return Version(text.strip())
    except InvalidVersion:
        return None


def requirement_matches(
    requirement: str,
    version: Union[str, Version],
    bare_operator: str = "^"
) -> bool:
    """Check whether a version satisfies a requirement expression.

    Args:
        requirement: Requirement as written in the manifest
        version: Version to test
        bare_operator: Operator implied by a bare version such as ``1.2.0``

    Returns:
        True if any alternative of the requirement contains the version;
        False for unparseable requirements or versions
    """
    return bool(satisfies(requirement, version, bare_operator))


def satisfies(
    requirement: str,
    version: Union[str, Version, None],
    bare_operator: str = "^"
) -> Optional[bool]:
    """Like :func:`requirement_matches`, but None when undecidable.

    Undecidable means the version or the requirement could not be parsed.
    """
    if version is None or isinstance(version, str):
        version = parse_version(version)
        if version is None:
            return None

    try:
        alternatives = requirement_to_specifiers(requirement, bare_operator)
    except InvalidRequirement:
        return None

    return any(spec.contains(version, prereleases=True) for spec in alternatives)


def requirement_to_specifiers(requirement: str, bare_operator: str = "^") -> List[SpecifierSet]:
    """Translate a requirement into ``||``-separated alternatives.

    Raises:
        InvalidRequirement: If any part of the expression is not understood
    """
    alternatives = []
    for alternative in requirement.strip().split("||"):
        alternative = alternative.strip()
        if alternative in MATCH_ALL:
            alternatives.append(SpecifierSet(""))
            continue

        hyphen = _HYPHEN_RANGE.match(alternative)
        if hyphen:
            specs = _hyphen_specs(hyphen.group(1), hyphen.group(2))
        else:
            specs = []
            glued = _OPERATOR_GAP.sub(r"\1", alternative)
            for comparator in re.split(r"[,\s]+", glued):
                if comparator:
                    specs.extend(_comparator_specs(comparator, bare_operator))

        try:
            alternatives.append(SpecifierSet(",".join(specs)))
        except InvalidSpecifier as e:
            raise InvalidRequirement(f"Invalid requirement {requirement!r}: {e}") from e

    return alternatives


def _comparator_specs(comparator: str, bare_operator: str) -> List[str]:
    match = _COMPARATOR.match(comparator)
    if not match:
        raise InvalidRequirement(f"Invalid comparator: {comparator!r}")

    operator = match.group(1) or bare_operator
    raw = match.group(2).split("+", 1)[0]

    if operator == "=":
        operator = "=="
    if operator not in RANGE_OPERATORS and operator not in PEP440_OPERATORS:
        raise InvalidRequirement(f"Unknown operator in {comparator!r}")
    if operator in ("==", "!=", "~=", "==="):
        return _pep440_specs(operator, raw)
    if operator not in RANGE_OPERATORS and not _is_semver_like(raw):
        return [f"{operator}{raw}"]

    parts, prerelease = _split_version(raw)
    concrete = len(parts)

    if concrete == 0:
        return [] if operator != "<" else ["<0"]

    lower = ">=" + _join(parts, prerelease)

    if operator == "^":
        if parts[0] > 0 or concrete == 1:
            upper = _bump(parts, 0)
        elif concrete == 2 or parts[1] > 0:
            upper = _bump(parts, 1)
        else:
            upper = _bump(parts, 2)
        return [lower, "<" + upper]

    if operator == "~":
        return [lower, "<" + _bump(parts, 0 if concrete == 1 else 1)]

    if concrete == 3:
        return [operator + _join(parts, prerelease)]

    # Partial ordered comparisons: ">1.2" means ">=1.3.0", "<=1.2" means "<1.3.0"
    if operator == ">":
        return [">=" + _bump(parts, concrete - 1)]
    if operator == "<=":
        return ["<" + _bump(parts, concrete - 1)]
    if operator == ">=":
        return [lower]
    return ["<" + _join(parts, prerelease)]


def _hyphen_specs(low: str, high: str) -> List[str]:
    low_parts, low_prerelease = _split_version(low.lstrip("v"))
    high_parts, high_prerelease = _split_version(high.lstrip("v"))

    specs = [">=" + _join(low_parts, low_prerelease)] if low_parts else []
    if len(high_parts) == 3:
        specs.append("<=" + _join(high_parts, high_prerelease))
    elif high_parts:
        specs.append("<" + _bump(high_parts, len(high_parts) - 1))
    return specs


def _pep440_specs(operator: str, raw: str) -> List[str]:
    if operator == "===" or not _is_semver_like(raw):
        return [f"{operator}{raw}"]

    parts, prerelease = _split_version(raw)
    if operator in ("==", "!=") and _has_wildcard(raw):
        if not parts:
            return [] if operator == "==" else ["<0"]
        return [f"{operator}{'.'.join(str(p) for p in parts)}.*"]
    if operator == "==" and len(parts) < 3 and not prerelease:
        # Partial exact versions ("=1.2") cover the whole series
        return [">=" + _join(parts, ""), "<" + _bump(parts, len(parts) - 1)]
    return [f"{operator}{raw}"]


def _split_version(raw: str):
    """Split ``1.2.x-beta.1`` into concrete numeric parts and a pre-release tag."""
    core, _, prerelease = raw.partition("-")
    parts = []
    for piece in core.split("."):
        if piece in WILDCARDS:
            break
        if not piece.isdigit():
            raise InvalidRequirement(f"Invalid version in requirement: {raw!r}")
        parts.append(int(piece))
    return parts[:3], prerelease


def _has_wildcard(raw: str) -> bool:
    return any(piece in WILDCARDS for piece in raw.partition("-")[0].split("."))


def _is_semver_like(raw: str) -> bool:
    core = raw.partition("-")[0]
    return bool(core) and all(p.isdigit() or p in WILDCARDS for p in core.split("."))


def _join(parts: List[int], prerelease: str) -> str:
    padded = list(parts) + [0] * (3 - len(parts))
    version = ".".join(str(p) for p in padded)
    if prerelease:
        version = f"{version}-{prerelease}"
        try:
            return str(Version(version))
        except InvalidVersion as e:
            raise InvalidRequirement(f"Invalid pre-release tag: {prerelease!r}") from e
    return version


def _bump(parts: List[int], index: int) -> str:
    bumped = list(parts[:index]) + [parts[index] + 1]
    return _join(bumped, "")
