"""Keyword extraction for keyword retrieval over the vector index."""

# Topic -> terms. A query mentioning any term of a topic pulls in all its terms.
TOPIC_KEYWORDS: dict[str, list[str]] = {
    "rental": ["rental", "rent", "landlord", "tenant", "lease", "housing", "property", "str", "short-term"],
    "zoning": ["zoning", "land use", "residential", "commercial", "district", "permit"],
    "fair_housing": ["fair housing", "discrimination", "protected class", "civil rights"],
    "property": ["property", "owner", "ownership", "real estate", "preemption"],
    "constitution": ["constitution", "supremacy", "amendment", "rights"],
}

STOPWORDS = frozenset({
    "does", "what", "with", "this", "that", "from", "have", "will", "the", "and", "for",
})

MIN_WORD_LENGTH = 4
MAX_QUERY_WORDS = 8


def extract_keywords(query: str) -> list[str]:
    """Extract search terms from a natural-language query.

    Topic terms come first (in topic order), then up to MAX_QUERY_WORDS
    significant words from the query itself. Duplicates are dropped, keeping
    the first occurrence.

    Args:
        query: Free-text question or keywords

    Returns:
        Lower-case search terms
    """
    lower_query = query.lower()
    terms: list[str] = []

    for words in TOPIC_KEYWORDS.values():
        if any(word in lower_query for word in words):
            terms.extend(words)

    query_words = [
        word for word in lower_query.split()
        if len(word) >= MIN_WORD_LENGTH and word not in STOPWORDS
    ]
    terms.extend(query_words[:MAX_QUERY_WORDS])

    return list(dict.fromkeys(terms))
