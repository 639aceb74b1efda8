"""
Tests for renewal recommendations and suggestions.
"""

from apps.articles.recommendations import (
    GENERAL_SUGGESTIONS,
    generate_recommendations,
    generate_renewal_suggestions,
    starter_recommendations,
)


class TestGenerateRecommendations:

    def test_old_movie_article(self):
        assert generate_recommendations(200, 'movie', ['wolverine']) == [
            "Complete rewrite needed - major updates to character history",
            "Include latest film adaptations and casting news",
            "Expand tags for better searchability",
        ]

    def test_middle_aged_comic_with_enough_tags(self):
        tags = ['a', 'b', 'c', 'd', 'e']
        assert generate_recommendations(100, 'comic', tags) == [
            "Update with latest comic series and appearances",
            "Add recent story arcs and crossover events",
        ]

    def test_recent_general_article(self):
        assert generate_recommendations(10, 'general', []) == [
            "Add recent developments and fan theories",
            "Expand tags for better searchability",
        ]

    def test_age_boundaries(self):
        assert generate_recommendations(180, 'general', ['a'] * 5)[0].startswith("Update")
        assert generate_recommendations(90, 'general', ['a'] * 5)[0].startswith("Add recent")

    def test_never_more_than_three(self):
        for age in (0, 95, 365):
            for category in ('movie', 'comic', 'general', ''):
                assert len(generate_recommendations(age, category, None)) <= 3


class TestRenewalSuggestions:

    def test_capped_at_five(self):
        suggestions = generate_renewal_suggestions(100, 'short', [])

        assert suggestions == [
            "Update with recent comic series appearances",
            "Add new character developments from latest issues",
            "Include new movie/TV adaptations",
            "Update power rankings based on recent events",
            "Expand article with more detailed backstory",
        ]

    def test_fresh_complete_article_gets_general_idea(self):
        content = 'x' * 1000
        tags = ['a', 'b', 'c']

        assert generate_renewal_suggestions(5, content, tags, update_count=0) == [GENERAL_SUGGESTIONS[0]]
        assert generate_renewal_suggestions(5, content, tags, update_count=1) == [GENERAL_SUGGESTIONS[1]]

    def test_general_idea_rotates_with_update_count(self):
        content = 'x' * 1000
        first = generate_renewal_suggestions(5, content, ['a', 'b', 'c'], update_count=1)
        wrapped = generate_renewal_suggestions(5, content, ['a', 'b', 'c'], update_count=9)

        assert first == wrapped

    def test_deterministic(self):
        assert generate_renewal_suggestions(70, '', ['a'], 3) == generate_renewal_suggestions(70, '', ['a'], 3)


class TestStarterRecommendations:

    def test_four_fixed_items(self):
        recs = starter_recommendations()

        assert len(recs) == 4
        assert recs[0] == "Add more character background details"

    def test_returns_a_copy(self):
        starter_recommendations().append('mutated')
        assert len(starter_recommendations()) == 4
