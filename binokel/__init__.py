"""Core rules engine package for Binokel."""

__all__ = [
    "cards",
    "deck",
    "players",
    "errors",
    "bidding",
    "trick",
    "mechanics",
    "melds",
    "rules_schema",
    "events",
    "state",
    "reducer",
    "scoring",
    "views",
    "serialization",
    "export",
    "actions",
    "registry",
    "game",
    "service",
]
