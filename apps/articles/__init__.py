"""
Articles app for SuperArticles.

Article storage, the renewal lifecycle and reader interactions.
"""
