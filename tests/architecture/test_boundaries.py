from pytest_archon import archrule


def test_domain_isolation() -> None:
    """
    Domain layer should be self-contained.
    It must not import from adapters, ports, the relay or persistence.
    """
    (
        archrule("domain_isolation")
        .match("cqrs_ddd_outbox.domain*")
        .should_not_import("cqrs_ddd_outbox.adapters*")
        .should_not_import("cqrs_ddd_outbox.ports*")
        .should_not_import("cqrs_ddd_outbox.cqrs*")
        .should_not_import("cqrs_ddd_outbox.persistence*")
        .check("cqrs_ddd_outbox")
    )


def test_primitives_isolation() -> None:
    """
    Primitives are the leaf of the dependency graph.
    """
    (
        archrule("primitives_isolation")
        .match("cqrs_ddd_outbox.primitives*")
        .should_not_import("cqrs_ddd_outbox.domain*")
        .should_not_import("cqrs_ddd_outbox.ports*")
        .should_not_import("cqrs_ddd_outbox.cqrs*")
        .should_not_import("cqrs_ddd_outbox.adapters*")
        .check("cqrs_ddd_outbox")
    )


def test_relay_is_persistence_agnostic() -> None:
    """
    The processor and worker talk to ports only, never to a concrete store.
    """
    (
        archrule("relay_independence")
        .match("cqrs_ddd_outbox.cqrs*")
        .should_not_import("cqrs_ddd_outbox.adapters*")
        .should_not_import("cqrs_ddd_outbox.persistence*")
        .should_not_import("sqlalchemy*")
        .check("cqrs_ddd_outbox")
    )


def test_core_does_not_require_sqlalchemy() -> None:
    """
    Only the SQLAlchemy adapter may import sqlalchemy.
    """
    (
        archrule("sqlalchemy_confined")
        .match("cqrs_ddd_outbox*")
        .exclude("cqrs_ddd_outbox.persistence.sqlalchemy*")
        .should_not_import("sqlalchemy*")
        .check("cqrs_ddd_outbox")
    )
