"""Schema management for the storefront's relational providers."""

from protean.domain import Domain
from sqlalchemy import create_engine

_RDBMS_PROVIDERS = ("sqlite", "postgresql")


def _relational_providers(domain: Domain):
    for provider in domain.providers.values():
        if provider.conn_info["provider"] in _RDBMS_PROVIDERS:
            yield provider


def _load_models(domain: Domain, provider_name: str) -> None:
    # Resolving a repository's DAO registers its table in the provider metadata
    records = list(domain.registry.aggregates.values()) + list(domain.registry.entities.values())
    for record in records:
        if record.cls.meta_.provider == provider_name:
            domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create the Order, Product and PaymentPlatform tables."""
    with domain.domain_context():
        for provider in _relational_providers(domain):
            _load_models(domain, provider.name)
            provider._metadata.create_all(create_engine(provider.conn_info["database_uri"]))


def drop_db(domain: Domain) -> None:
    with domain.domain_context():
        for provider in _relational_providers(domain):
            _load_models(domain, provider.name)
            provider._metadata.drop_all(create_engine(provider.conn_info["database_uri"]))
