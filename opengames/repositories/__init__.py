"""
Repositories package

Each repository encapsulates one data source for games:
- games_repository.py: relational store (SQLAlchemy)
- fallback_repository.py: in-memory fallback dataset, same semantics
- search_repository.py: FTS5 full-text index with a substring fallback

Usage:
    from opengames.repositories.games_repository import GamesRepository
    games, total = GamesRepository.get_paged(filters, pagination, sort)
"""
