"""Schema management for SQL-backed Ordering providers.

The memory provider used in development and tests needs no schema; when a
PostgreSQL or SQLite provider is configured, the tables of every aggregate
and entity must exist before the first command is processed.
"""

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine

logger = structlog.get_logger(__name__)

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for name, provider in domain.providers.items():
        if provider.conn_info["provider"] in _SQL_PROVIDERS:
            yield name, provider


def _register_models(domain: Domain, provider_name: str) -> None:
    # Touching the DAO registers the element's table with the provider metadata
    records = list(domain.registry.aggregates.values()) + list(domain.registry.entities.values())
    for record in records:
        if record.cls.meta_.provider == provider_name:
            domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create the tables of every SQL-backed provider."""
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            _register_models(domain, name)
            provider._metadata.create_all(create_engine(provider.conn_info["database_uri"]))
            logger.info("Database schema created", provider=name)


def drop_db(domain: Domain) -> None:
    """Drop the tables of every SQL-backed provider."""
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            provider._metadata.drop_all(create_engine(provider.conn_info["database_uri"]))
            logger.info("Database schema dropped", provider=name)
