"""Tests for authority hierarchy and conflict rules."""

import pytest

from lexgraph.graph.rules import (
    AUTHORITY_RANK,
    DEFAULT_CONFLICT_RULES,
    JURISDICTION_RANK,
    RENTAL_RULE,
    ZONING_RULE,
    ConflictRule,
    authority_sort_key,
    derives_authority_from,
    match_conflict,
)
from lexgraph.store.types import AuthorityLevel, Jurisdiction, Severity

FED = Jurisdiction.FEDERAL
STATE = Jurisdiction.STATE
MUNI = Jurisdiction.MUNICIPAL
CONST = AuthorityLevel.CONSTITUTION
STATUTE = AuthorityLevel.STATUTE
REG = AuthorityLevel.REGULATION
ORD = AuthorityLevel.ORDINANCE


class TestRanks:
    """Test suite for rank tables."""

    def test_jurisdiction_order(self):
        assert JURISDICTION_RANK[FED] > JURISDICTION_RANK[STATE] > JURISDICTION_RANK[MUNI]

    def test_authority_order(self):
        assert AUTHORITY_RANK[CONST] > AUTHORITY_RANK[STATUTE] > AUTHORITY_RANK[REG] > AUTHORITY_RANK[ORD]

    def test_sort_key(self):
        levels = [(MUNI, ORD), (FED, STATUTE), (STATE, CONST), (FED, CONST)]
        ordered = sorted(levels, key=lambda pair: authority_sort_key(*pair))
        assert ordered == [(FED, CONST), (FED, STATUTE), (STATE, CONST), (MUNI, ORD)]


class TestDerivesAuthorityFrom:
    """Test suite for the derivation predicate."""

    @pytest.mark.parametrize("current,other,expected", [
        # same jurisdiction: only strictly higher authority
        ((FED, REG), (FED, STATUTE), True),
        ((FED, STATUTE), (FED, CONST), True),
        ((FED, STATUTE), (FED, STATUTE), False),
        ((FED, STATUTE), (FED, REG), False),
        # immediate higher jurisdiction: any authority level
        ((STATE, STATUTE), (FED, STATUTE), True),
        ((STATE, CONST), (FED, REG), True),
        ((MUNI, ORD), (STATE, STATUTE), True),
        # two levels up: constitution only
        ((MUNI, ORD), (FED, CONST), True),
        ((MUNI, ORD), (FED, STATUTE), False),
        # never downward
        ((FED, REG), (STATE, CONST), False),
        ((STATE, STATUTE), (MUNI, ORD), False),
    ])
    def test_cases(self, current, other, expected):
        assert derives_authority_from(*current, *other) is expected


class TestConflictRules:
    """Test suite for conflict rule matching."""

    def test_rental_rule(self):
        assert RENTAL_RULE.matches("Austin Short-Term Rental Ordinance", MUNI, "Texas Property Code", STATE)
        assert RENTAL_RULE.severity == Severity.HIGH
        assert "owner-occupancy" in RENTAL_RULE.rationale

    def test_zoning_rule(self):
        assert ZONING_RULE.matches(
            "Austin Land Development Code - Zoning", MUNI,
            "Texas Local Government Code", STATE,
        )
        assert "municipal authority" in ZONING_RULE.rationale

    def test_case_insensitive(self):
        assert RENTAL_RULE.matches("SHORT-TERM RENTALS", MUNI, "LANDLORD AND TENANT", STATE)

    def test_jurisdictions_must_match(self):
        assert not RENTAL_RULE.matches("Rental Ordinance", STATE, "Texas Property Code", STATE)
        assert not RENTAL_RULE.matches("Rental Ordinance", MUNI, "Property Code", FED)

    def test_no_match(self):
        assert not RENTAL_RULE.matches("Austin Fair Housing Ordinance", MUNI, "Texas Property Code", STATE)
        assert match_conflict(DEFAULT_CONFLICT_RULES, "Noise Ordinance", MUNI, "Property Code", STATE) is None

    def test_last_match_wins_by_default(self):
        """A title hitting both rules takes the later rule's rationale."""
        title = "Rental and Zoning Ordinance"
        target = "Municipal Property Code"

        assert match_conflict(DEFAULT_CONFLICT_RULES, title, MUNI, target, STATE) is ZONING_RULE
        assert match_conflict(DEFAULT_CONFLICT_RULES, title, MUNI, target, STATE, policy="first") is RENTAL_RULE

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            match_conflict(DEFAULT_CONFLICT_RULES, "a", MUNI, "b", STATE, policy="all")

    def test_custom_rule(self):
        rule = ConflictRule(
            name="preemption",
            subject_terms=("housing",),
            target_terms=("fair housing",),
            severity=Severity.MEDIUM,
            rationale="State housing law may be preempted by federal fair housing law.",
            subject_jurisdiction=STATE,
            target_jurisdiction=FED,
        )
        assert match_conflict([rule], "Texas Housing Code", STATE, "Fair Housing Act", FED) is rule
