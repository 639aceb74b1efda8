"""
Renewal recommendations for articles.

Three fixed rule sets, all deterministic:

- ``starter_recommendations``: returned once when an article is uploaded.
- ``generate_recommendations``: stored on outdated articles by the sweep
  (at most 3).
- ``generate_renewal_suggestions``: returned by the renew endpoint to
  guide the next update (at most 5).
"""

from typing import List, Optional

STARTER_RECOMMENDATIONS = (
    "Add more character background details",
    "Include recent comic appearances",
    "Add power scale comparison",
    "Include creator interviews",
)

MAX_RECOMMENDATIONS = 3
MAX_SUGGESTIONS = 5

# Sweep rules
REWRITE_AGE_DAYS = 180
UPDATE_AGE_DAYS = 90
MIN_TAGS_FOR_SEARCH = 5

CATEGORY_RECOMMENDATIONS = {
    'movie': "Include latest film adaptations and casting news",
    'comic': "Add recent story arcs and crossover events",
}

# Renewal rules
RECENT_APPEARANCES_AGE_DAYS = 60
ADAPTATIONS_AGE_DAYS = 90
MIN_CONTENT_LENGTH = 1000
MIN_TAGS_FOR_DISCOVERY = 3

GENERAL_SUGGESTIONS = (
    "Add creator interview quotes",
    "Include fan art showcase",
    "Add timeline of significant events",
    "Include power comparison charts",
    "Add merchandise recommendations",
    "Include cosplay guide",
    "Add reading order for comics",
    "Include voice actor information for animations",
)


def starter_recommendations() -> List[str]:
    return list(STARTER_RECOMMENDATIONS)


def generate_recommendations(age_days: int, category: str, tags: Optional[List[str]]) -> List[str]:
    """
    Recommendations stored on an outdated article.

    >>> generate_recommendations(200, 'movie', ['a'])
    ['Complete rewrite needed - major updates to character history', 'Include latest film adaptations and casting news', 'Expand tags for better searchability']
    """
    recs = []

    if age_days > REWRITE_AGE_DAYS:
        recs.append("Complete rewrite needed - major updates to character history")
    elif age_days > UPDATE_AGE_DAYS:
        recs.append("Update with latest comic series and appearances")
    else:
        recs.append("Add recent developments and fan theories")

    category_rec = CATEGORY_RECOMMENDATIONS.get(category)
    if category_rec:
        recs.append(category_rec)

    if len(tags or []) < MIN_TAGS_FOR_SEARCH:
        recs.append("Expand tags for better searchability")

    return recs[:MAX_RECOMMENDATIONS]


def generate_renewal_suggestions(
    age_days: int,
    content_text: str,
    tags: Optional[List[str]],
    update_count: int = 0,
) -> List[str]:
    """
    Suggestions returned after a renewal.

    The general idea rotates with ``update_count`` so each renewal of the
    same article offers a different one.
    """
    suggestions = []

    if age_days > RECENT_APPEARANCES_AGE_DAYS:
        suggestions.append("Update with recent comic series appearances")
        suggestions.append("Add new character developments from latest issues")

    if age_days > ADAPTATIONS_AGE_DAYS:
        suggestions.append("Include new movie/TV adaptations")
        suggestions.append("Update power rankings based on recent events")

    if len(content_text or '') < MIN_CONTENT_LENGTH:
        suggestions.append("Expand article with more detailed backstory")

    if len(tags or []) < MIN_TAGS_FOR_DISCOVERY:
        suggestions.append("Add more relevant tags for better discovery")

    general = GENERAL_SUGGESTIONS[update_count % len(GENERAL_SUGGESTIONS)]
    if general not in suggestions:
        suggestions.append(general)

    return suggestions[:MAX_SUGGESTIONS]
