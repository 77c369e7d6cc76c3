"""Authority hierarchy and conflict rules used by the graph builder.

Hierarchy:
    jurisdiction  federal (3) > state (2) > municipal (1)
    authority     constitution (4) > statute (3) > regulation (2) > ordinance (1)

Conflict rules are plain data (`ConflictRule`) evaluated in order, so a new
rule is a new entry in the list rather than a new branch in the builder.
"""

from dataclasses import dataclass

from ..store.types import AuthorityLevel, Jurisdiction, Severity

JURISDICTION_RANK: dict[Jurisdiction, int] = {
    Jurisdiction.FEDERAL: 3,
    Jurisdiction.STATE: 2,
    Jurisdiction.MUNICIPAL: 1,
}

AUTHORITY_RANK: dict[AuthorityLevel, int] = {
    AuthorityLevel.CONSTITUTION: 4,
    AuthorityLevel.STATUTE: 3,
    AuthorityLevel.REGULATION: 2,
    AuthorityLevel.ORDINANCE: 1,
}


def authority_sort_key(jurisdiction: Jurisdiction, authority_level: AuthorityLevel) -> tuple[int, int]:
    """Sort key placing higher authority first when sorted ascending."""
    return (-JURISDICTION_RANK[jurisdiction], -AUTHORITY_RANK[authority_level])


def derives_authority_from(
    current_jurisdiction: Jurisdiction,
    current_authority: AuthorityLevel,
    other_jurisdiction: Jurisdiction,
    other_authority: AuthorityLevel,
) -> bool:
    """Whether a document derives its authority from another document.

    True when either:
    - same jurisdiction and the other has a higher authority level, or
    - the other sits in a higher jurisdiction that is either the immediately
      higher one or any constitution.
    """
    current_j = JURISDICTION_RANK[current_jurisdiction]
    other_j = JURISDICTION_RANK[other_jurisdiction]

    if other_j == current_j and AUTHORITY_RANK[other_authority] > AUTHORITY_RANK[current_authority]:
        return True
    if other_j > current_j and (
        other_j == current_j + 1 or other_authority == AuthorityLevel.CONSTITUTION
    ):
        return True
    return False


@dataclass(frozen=True)
class ConflictRule:
    """Title-keyword rule flagging a potential conflict between two documents.

    Fires when the subject's title contains any subject term and the target's
    label contains any target term (both lower-cased substring matches), and
    the jurisdictions match.
    """
    name: str
    subject_terms: tuple[str, ...]
    target_terms: tuple[str, ...]
    severity: Severity
    rationale: str
    subject_jurisdiction: Jurisdiction = Jurisdiction.MUNICIPAL
    target_jurisdiction: Jurisdiction = Jurisdiction.STATE

    def matches(
        self,
        subject_title: str,
        subject_jurisdiction: Jurisdiction,
        target_label: str,
        target_jurisdiction: Jurisdiction,
    ) -> bool:
        if subject_jurisdiction != self.subject_jurisdiction:
            return False
        if target_jurisdiction != self.target_jurisdiction:
            return False
        subject_text = subject_title.lower()
        target_text = target_label.lower()
        return (
            any(term in subject_text for term in self.subject_terms)
            and any(term in target_text for term in self.target_terms)
        )


RENTAL_RULE = ConflictRule(
    name="rental",
    subject_terms=("rental", "str", "short-term"),
    target_terms=("property", "landlord"),
    severity=Severity.HIGH,
    rationale=(
        "Municipal rental/STR ordinance may conflict with state property rights "
        "protections. Texas Property Code § 5.003 prohibits owner-occupancy "
        "requirements for rentals."
    ),
)

ZONING_RULE = ConflictRule(
    name="zoning",
    subject_terms=("zoning", "land use"),
    target_terms=("local government", "municipal"),
    severity=Severity.HIGH,
    rationale=(
        "Municipal zoning regulations must comply with state local government "
        "code limitations on municipal authority."
    ),
)

DEFAULT_CONFLICT_RULES: tuple[ConflictRule, ...] = (RENTAL_RULE, ZONING_RULE)


def match_conflict(
    rules: tuple[ConflictRule, ...] | list[ConflictRule],
    subject_title: str,
    subject_jurisdiction: Jurisdiction,
    target_label: str,
    target_jurisdiction: Jurisdiction,
    policy: str = "last",
) -> ConflictRule | None:
    """Pick the conflict rule that applies to a (subject, target) pair.

    Args:
        rules: Rules in evaluation order
        policy: "last" -> the last matching rule wins; "first" -> the first one

    Returns:
        The winning rule, or None if no rule matches
    """
    if policy not in ("last", "first"):
        raise ValueError(f"Unknown conflict match policy: {policy!r}")

    matched = None
    for rule in rules:
        if rule.matches(subject_title, subject_jurisdiction, target_label, target_jurisdiction):
            matched = rule
            if policy == "first":
                break
    return matched
