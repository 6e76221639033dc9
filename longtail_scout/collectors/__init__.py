"""Data collectors for Longtail Scout.

Each collector wraps one upstream source:
- searchad: keyword tool metrics (volume, competition, CPC), HMAC-signed
- autocomplete: autocomplete and related-search suggestions
- trends: Google Trends trending searches and interest via SerpAPI
- fallback: offline synthetic candidates used when live sources fail
"""
