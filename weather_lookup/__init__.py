"""
Zip code weather lookups: provider client, rate limiting and caching.
"""
