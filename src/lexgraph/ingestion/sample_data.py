"""Built-in demo corpus.

Ten documents listed in authority order (federal before state before
municipal, constitution before statute before regulation before ordinance),
so that every document's higher authorities already exist when it is
ingested. Used by:
- IngestionPipeline.ingest_demo()
- scripts/ingest_corpus.py --demo
- tests/conftest.py (pytest fixtures)
"""

import json

from ..store.types import CorpusSource

DEMO_DOCUMENTS = [
    # Federal - Constitution
    {
        "file": "01-us-constitution-supremacy.json",
        "source": CorpusSource.US_CODE,
        "document": {
            "title": "United States Constitution - Supremacy Clause",
            "citation": "U.S. Const. art. VI, cl. 2",
            "jurisdiction": "federal",
            "authorityLevel": "constitution",
            "effectiveFrom": "1789-03-04",
            "text": (
                "This Constitution, and the Laws of the United States which shall be made in "
                "Pursuance thereof, shall be the supreme Law of the Land; and the Judges in every "
                "State shall be bound thereby, any Thing in the Constitution or Laws of any State "
                "to the Contrary notwithstanding."
            ),
            "sections": [
                {
                    "heading": "Supremacy of Federal Law",
                    "citation": "U.S. Const. art. VI, cl. 2",
                    "text": (
                        "This Constitution, and the Laws of the United States which shall be made "
                        "in Pursuance thereof, shall be the supreme Law of the Land; and the Judges "
                        "in every State shall be bound thereby, any Thing in the Constitution or "
                        "Laws of any State to the Contrary notwithstanding."
                    ),
                },
                {
                    "heading": "Due Process and Equal Protection",
                    "citation": "U.S. Const. amend. XIV, § 1",
                    "text": (
                        "No State shall make or enforce any law which shall abridge the privileges "
                        "or immunities of citizens of the United States; nor shall any State deprive "
                        "any person of life, liberty, or property, without due process of law; nor "
                        "deny to any person within its jurisdiction the equal protection of the laws."
                    ),
                },
            ],
        },
    },
    # Federal - Statutes
    {
        "file": "02-fair-housing-act.json",
        "source": CorpusSource.US_CODE,
        "document": {
            "title": "Fair Housing Act - Discrimination in Sale or Rental",
            "citation": "42 U.S.C. § 3604",
            "jurisdiction": "federal",
            "authorityLevel": "statute",
            "effectiveFrom": "1968-04-11",
            "text": (
                "It shall be unlawful to refuse to sell or rent after the making of a bona fide "
                "offer, or to refuse to negotiate for the sale or rental of, or otherwise make "
                "unavailable or deny, a dwelling to any person because of race, color, religion, "
                "sex, familial status, or national origin."
            ),
            "sections": [
                {
                    "heading": "Prohibition of Discriminatory Practices",
                    "citation": "42 U.S.C. § 3604(a)",
                    "text": (
                        "To refuse to sell or rent after the making of a bona fide offer, or to "
                        "refuse to negotiate for the sale or rental of, or otherwise make unavailable "
                        "or deny, a dwelling to any person because of race, color, religion, sex, "
                        "familial status, or national origin."
                    ),
                },
                {
                    "heading": "Terms and Conditions",
                    "citation": "42 U.S.C. § 3604(b)",
                    "text": (
                        "To discriminate against any person in the terms, conditions, or privileges "
                        "of sale or rental of a dwelling, or in the provision of services or "
                        "facilities in connection therewith, because of race, color, religion, sex, "
                        "familial status, or national origin."
                    ),
                },
            ],
        },
    },
    {
        "file": "03-civil-rights-act.json",
        "source": CorpusSource.US_CODE,
        "document": {
            "title": "Civil Rights Act - Civil Action for Deprivation of Rights",
            "citation": "42 U.S.C. § 1983",
            "jurisdiction": "federal",
            "authorityLevel": "statute",
            "effectiveFrom": "1871-04-20",
            "text": (
                "Every person who, under color of any statute, ordinance, regulation, custom, or "
                "usage, of any State subjects, or causes to be subjected, any citizen of the United "
                "States or other person within the jurisdiction thereof to the deprivation of any "
                "rights, privileges, or immunities secured by the Constitution and laws, shall be "
                "liable to the party injured."
            ),
            "sections": [
                {
                    "heading": "Civil Action for Deprivation of Rights",
                    "citation": "42 U.S.C. § 1983",
                    "text": (
                        "Every person who, under color of any statute, ordinance, regulation, "
                        "custom, or usage, of any State or Territory or the District of Columbia, "
                        "subjects, or causes to be subjected, any citizen of the United States or "
                        "other person within the jurisdiction thereof to the deprivation of any "
                        "rights, privileges, or immunities secured by the Constitution and laws, "
                        "shall be liable to the party injured in an action at law, suit in equity, "
                        "or other proper proceeding for redress."
                    ),
                },
            ],
        },
    },
    # Federal - Regulations
    {
        "file": "04-hud-fair-housing-regulations.json",
        "source": CorpusSource.ECFR,
        "document": {
            "title": "HUD Fair Housing Regulations - Discriminatory Conduct",
            "citation": "24 C.F.R. § 100.50",
            "jurisdiction": "federal",
            "authorityLevel": "regulation",
            "effectiveFrom": "1989-03-12",
            "text": (
                "This subpart provides the Department's interpretation of the conduct that is "
                "unlawful housing discrimination under section 804 and section 806 of the Fair "
                "Housing Act."
            ),
            "sections": [
                {
                    "heading": "Real Estate Practices Prohibited",
                    "citation": "24 C.F.R. § 100.50(b)",
                    "text": (
                        "It shall be unlawful, because of race, color, religion, sex, handicap, "
                        "familial status, or national origin, to refuse to sell or rent a dwelling "
                        "after a bona fide offer has been made, or to refuse to negotiate for the "
                        "sale or rental of a dwelling. It shall be unlawful to discriminate in the "
                        "terms, conditions or privileges of sale or rental of a dwelling."
                    ),
                },
                {
                    "heading": "Discriminatory Advertisements and Statements",
                    "citation": "24 C.F.R. § 100.75",
                    "text": (
                        "It shall be unlawful to make, print or publish, or cause to be made, "
                        "printed or published, any notice, statement or advertisement with respect "
                        "to the sale or rental of a dwelling which indicates any preference, "
                        "limitation or discrimination because of a protected class."
                    ),
                },
            ],
        },
    },
    # State - Constitution
    {
        "file": "05-texas-constitution-property.json",
        "source": CorpusSource.TEXAS_STATUTES,
        "document": {
            "title": "Texas Constitution - Property Rights",
            "citation": "Tex. Const. art. I, § 17",
            "jurisdiction": "state",
            "authorityLevel": "constitution",
            "effectiveFrom": "1876-02-15",
            "text": (
                "No person's property shall be taken, damaged, or destroyed for or applied to "
                "public use without adequate compensation being made, unless by the consent of "
                "such person."
            ),
            "sections": [
                {
                    "heading": "Taking, Damaging, or Destroying Property for Public Use",
                    "citation": "Tex. Const. art. I, § 17(a)",
                    "text": (
                        "No person's property shall be taken, damaged, or destroyed for or applied "
                        "to public use without adequate compensation being made, unless by the "
                        "consent of such person, and only if the taking, damage, or destruction is "
                        "for the ownership, use, and enjoyment of the property by the State, a "
                        "political subdivision of the State, or the public at large."
                    ),
                },
            ],
        },
    },
    # State - Statutes
    {
        "file": "06-texas-property-code.json",
        "source": CorpusSource.TEXAS_STATUTES,
        "document": {
            "title": "Texas Property Code - Landlord and Tenant",
            "citation": "Tex. Prop. Code § 5.003",
            "jurisdiction": "state",
            "authorityLevel": "statute",
            "effectiveFrom": "1984-01-01",
            "text": (
                "An owner of real property may lease the property, and a political subdivision may "
                "not adopt an ordinance that requires the owner to occupy the property as a "
                "condition of leasing it."
            ),
            "sections": [
                {
                    "heading": "Right to Lease Real Property",
                    "citation": "Tex. Prop. Code § 5.003(a)",
                    "text": (
                        "An owner of real property may lease the property to a tenant for "
                        "residential use. A political subdivision may not adopt or enforce an "
                        "ordinance or regulation that requires the owner to occupy the property "
                        "as a condition of leasing or renting it."
                    ),
                },
                {
                    "heading": "Landlord Duty to Repair",
                    "citation": "Tex. Prop. Code § 92.052",
                    "text": (
                        "A landlord shall make a diligent effort to repair or remedy a condition if "
                        "the tenant specifies the condition in a notice to the person to whom or to "
                        "the place where rent is normally paid, and the condition materially "
                        "affects the physical health or safety of an ordinary tenant."
                    ),
                },
            ],
        },
    },
    {
        "file": "07-texas-local-gov-code.json",
        "source": CorpusSource.TEXAS_STATUTES,
        "document": {
            "title": "Texas Local Government Code - Municipal Regulatory Authority",
            "citation": "Tex. Loc. Gov't Code § 211.003",
            "jurisdiction": "state",
            "authorityLevel": "statute",
            "effectiveFrom": "1987-09-01",
            "text": (
                "The governing body of a municipality may regulate the height, number of stories, "
                "and size of buildings, the percentage of a lot that may be occupied, and the use "
                "of buildings and land for business, industrial, residential, or other purposes."
            ),
            "sections": [
                {
                    "heading": "Zoning Regulations Generally",
                    "citation": "Tex. Loc. Gov't Code § 211.003(a)",
                    "text": (
                        "The governing body of a municipality may regulate the height, number of "
                        "stories, and size of buildings and other structures, the percentage of a "
                        "lot that may be occupied, the size of yards, courts, and other open spaces, "
                        "population density, and the location and use of buildings, other "
                        "structures, and land for business, industrial, residential, or other "
                        "purposes."
                    ),
                },
                {
                    "heading": "Limits on Municipal Authority",
                    "citation": "Tex. Loc. Gov't Code § 51.001",
                    "text": (
                        "The governing body of a municipality may adopt, publish, amend, or repeal "
                        "an ordinance, rule, or police regulation that is for the good government, "
                        "peace, or order of the municipality, provided the ordinance is not "
                        "inconsistent with the constitution or the general laws of this state."
                    ),
                },
            ],
        },
    },
    # Municipal - Ordinances
    {
        "file": "08-austin-str-ordinance.json",
        "source": CorpusSource.AUSTIN_ORDINANCES,
        "document": {
            "title": "Austin Short-Term Rental Ordinance",
            "citation": "Austin City Code § 25-2-788",
            "jurisdiction": "municipal",
            "authorityLevel": "ordinance",
            "effectiveFrom": "2016-02-23",
            "text": (
                "A person may not operate a short-term rental without a license issued by the "
                "director. A type 2 short-term rental license may only be issued for a dwelling "
                "unit that is owner-occupied."
            ),
            "sections": [
                {
                    "heading": "License Required",
                    "citation": "Austin City Code § 25-2-788(A)",
                    "text": (
                        "A person may not operate a short-term rental or advertise a residential "
                        "dwelling unit for short-term rental use without a license issued under "
                        "this section. The director may deny, suspend, or revoke a license for "
                        "failure to comply with this section."
                    ),
                },
                {
                    "heading": "Owner Occupancy Requirement",
                    "citation": "Austin City Code § 25-2-788(B)",
                    "text": (
                        "A type 2 short-term rental license may only be issued for a single-family "
                        "residential dwelling unit that is the owner's principal residence. The "
                        "owner shall occupy the property for at least six months of each calendar "
                        "year while the license is in effect."
                    ),
                },
            ],
        },
    },
    {
        "file": "09-austin-zoning-code.json",
        "source": CorpusSource.AUSTIN_ORDINANCES,
        "document": {
            "title": "Austin Land Development Code - Zoning",
            "citation": "Austin City Code § 25-2-491",
            "jurisdiction": "municipal",
            "authorityLevel": "ordinance",
            "effectiveFrom": "1999-07-01",
            "text": (
                "The permitted, conditional, and prohibited uses of land in each zoning district "
                "are established in the use regulations of this chapter."
            ),
            "sections": [
                {
                    "heading": "Permitted, Conditional, and Prohibited Uses",
                    "citation": "Austin City Code § 25-2-491(A)",
                    "text": (
                        "The permitted, conditional, and prohibited uses of land in each base "
                        "zoning district are established in the use tables of this section. A use "
                        "not listed as permitted or conditional in a district is prohibited in "
                        "that district."
                    ),
                },
                {
                    "heading": "Residential District Standards",
                    "citation": "Austin City Code § 25-2-492",
                    "text": (
                        "Site development regulations for residential districts establish minimum "
                        "lot size, maximum building coverage, maximum impervious cover, and "
                        "setbacks for each residential zoning district."
                    ),
                },
            ],
        },
    },
    {
        "file": "10-austin-fair-housing.json",
        "source": CorpusSource.AUSTIN_ORDINANCES,
        "document": {
            "title": "Austin Fair Housing Ordinance",
            "citation": "Austin City Code § 5-1-51",
            "jurisdiction": "municipal",
            "authorityLevel": "ordinance",
            "effectiveFrom": "2014-12-11",
            "text": (
                "A person may not refuse to sell, rent, or lease housing to a person because of "
                "race, color, religion, sex, sexual orientation, gender identity, national origin, "
                "age, familial status, disability, or source of income."
            ),
            "sections": [
                {
                    "heading": "Discriminatory Housing Practices",
                    "citation": "Austin City Code § 5-1-51(A)",
                    "text": (
                        "A person may not refuse to sell, rent, or lease housing, or refuse to "
                        "negotiate for the sale, rental, or lease of housing, to a person because "
                        "of race, color, religion, sex, sexual orientation, gender identity, "
                        "national origin, age, familial status, disability, student status, "
                        "marital status, or source of income."
                    ),
                },
            ],
        },
    },
]


def demo_document_json(entry: dict) -> str:
    """Serialize a demo entry's document as the JSON file content."""
    return json.dumps(entry["document"], indent=2, ensure_ascii=False)
