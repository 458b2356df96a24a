"""Duel domain services: problems, scoring, matchmaking and round timing.

Socket handlers and HTTP routes import from here; nothing in this package
knows about Flask requests.
"""
