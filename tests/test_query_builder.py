"""Tests for the immutable query builder."""

import threading
from unittest.mock import MagicMock

import pytest

from edgebinder_vector.models import SimpleEntity
from edgebinder_vector.query import (
    BasicQueryBuilder,
    Capability,
    CapabilityNotAvailableError,
    InvalidQueryArgumentError,
    OperationNotConfiguredError,
    OrderBy,
    QueryCriteria,
    QueryResult,
    WhereCondition,
)


class DuckEntity:
    """Entity-shaped object that does not subclass ``Entity``."""

    def get_id(self):
        return "e1"

    def get_type(self):
        return "Project"


@pytest.fixture
def builder():
    return BasicQueryBuilder(MagicMock(), "test_bindings")


def test_new_builder_has_empty_criteria(builder):
    """A fresh builder has every filter unset."""
    criteria = builder.get_criteria()
    assert criteria == QueryCriteria()
    assert criteria.is_empty()
    assert builder.collection_name == "test_bindings"


def test_mutators_return_new_instances(builder):
    """Every chainable call returns a new builder and leaves the receiver untouched."""
    before = builder.get_criteria()
    derived = [
        builder.from_("Workspace", "ws-1"),
        builder.to("Project", "p-1"),
        builder.type("has_access"),
        builder.where("status", "active"),
        builder.where_in("tier", ["gold"]),
        builder.where_between("score", 1, 5),
        builder.where_exists("owner"),
        builder.where_null("deleted_at"),
        builder.order_by("created_at", "desc"),
        builder.limit(10),
        builder.offset(20),
        builder.reset(),
    ]
    for result in derived:
        assert result is not builder
        assert isinstance(result, BasicQueryBuilder)
    assert builder.get_criteria() == before
    assert builder.get_criteria().is_empty()


def test_from_with_type_and_id(builder):
    """from_() accepts a type name and an id."""
    criteria = builder.from_("Workspace", "ws-1").get_criteria()
    assert criteria.from_entity_type == "Workspace"
    assert criteria.from_entity_id == "ws-1"


def test_from_string_without_id_fails(builder):
    """A bare type string needs an id."""
    with pytest.raises(InvalidQueryArgumentError, match="Entity ID is required"):
        builder.from_("Workspace", None)

    with pytest.raises(InvalidQueryArgumentError):
        builder.to("Workspace")


def test_from_with_entity_instance(builder):
    """Entity instances resolve through their accessors."""
    criteria = builder.from_(SimpleEntity("entity-123", "Workspace")).get_criteria()
    assert criteria.from_entity_id == "entity-123"
    assert criteria.from_entity_type == "Workspace"


def test_to_with_duck_typed_entity(builder):
    """Objects exposing get_id()/get_type() are accepted without subclassing."""
    criteria = builder.to(DuckEntity()).get_criteria()
    assert criteria.to_entity_id == "e1"
    assert criteria.to_entity_type == "Project"


def test_entity_without_accessors_fails(builder):
    """An object with neither accessor is rejected."""
    with pytest.raises(InvalidQueryArgumentError, match="get_id"):
        builder.from_(object())


def test_missing_id_is_reported_before_missing_type(builder):
    """The id accessor is checked first, even when a type accessor exists."""

    class TypeOnly:
        def get_type(self):
            return "Project"

    with pytest.raises(InvalidQueryArgumentError, match="get_id"):
        builder.to(TypeOnly())


def test_from_and_to_are_independent(builder):
    """Setting one endpoint keeps the other."""
    criteria = builder.from_("Workspace", "ws-1").to("Project", "p-1").get_criteria()
    assert (criteria.from_entity_type, criteria.from_entity_id) == ("Workspace", "ws-1")
    assert (criteria.to_entity_type, criteria.to_entity_id) == ("Project", "p-1")


def test_type_replaces_previous_value(builder):
    """type() overrides any earlier binding type."""
    criteria = builder.type("has_access").type("owns").get_criteria()
    assert criteria.binding_type == "owns"


def test_two_argument_where_means_equality(builder):
    """where(field, value) uses the '=' operator."""
    conditions = builder.where("status", "active").get_criteria().where_conditions
    assert conditions == (WhereCondition("status", "=", "active"),)


def test_three_argument_where_keeps_operator(builder):
    """where(field, operator, value) stores the explicit operator."""
    conditions = builder.where("confidence_score", ">", 0.8).get_criteria().where_conditions
    assert conditions[0].operator == ">"
    assert conditions[0].value == 0.8


def test_three_argument_where_with_none_value(builder):
    """An explicit None value stays a value, not a two-argument call."""
    condition = builder.where("owner", "!=", None).get_criteria().where_conditions[0]
    assert condition == WhereCondition("owner", "!=", None)


def test_where_conditions_accumulate_in_order(builder):
    """Chained where calls append in call order."""
    conditions = builder.where("x", "y").where("a", "b").get_criteria().where_conditions
    assert len(conditions) == 2
    assert conditions[0] == WhereCondition("x", "=", "y")
    assert conditions[1] == WhereCondition("a", "=", "b")


def test_where_variants_use_fixed_operators(builder):
    """where_in/where_between/where_exists/where_null tag their conditions."""
    conditions = (
        builder.where_in("tier", ["gold", "silver"])
        .where_between("score", 1, 5)
        .where_exists("owner")
        .where_null("deleted_at")
        .get_criteria()
        .where_conditions
    )
    assert conditions == (
        WhereCondition("tier", "IN", ("gold", "silver")),
        WhereCondition("score", "BETWEEN", (1, 5)),
        WhereCondition("owner", "EXISTS", None),
        WhereCondition("deleted_at", "IS_NULL", None),
    )


def test_where_in_copies_values(builder):
    """Mutating the caller's list does not leak into the criteria."""
    values = ["gold"]
    query = builder.where_in("tier", values)
    values.append("bronze")
    assert query.get_criteria().where_conditions[0].value == ("gold",)


def test_order_by_lowercases_and_replaces(builder):
    """order_by() keeps only the latest key and lower-cases the direction."""
    criteria = builder.order_by("created_at", "DESC").order_by("score").get_criteria()
    assert criteria.order_by == OrderBy("score", "asc")

    criteria = builder.order_by("created_at", "DESC").get_criteria()
    assert criteria.order_by == OrderBy("created_at", "desc")


def test_order_by_passes_unknown_direction_through(builder):
    """Direction is not validated by the builder."""
    assert builder.order_by("created_at", "Sideways").get_criteria().order_by.direction == "sideways"


def test_limit_and_offset_are_replaced_without_checks(builder):
    """Paging bounds are stored as given."""
    criteria = builder.limit(5).limit(50).offset(-1).get_criteria()
    assert criteria.limit == 50
    assert criteria.offset == -1


def test_reset_clears_filters_but_keeps_binding(builder):
    """reset() drops all criteria and keeps client and collection."""
    reset = builder.where("status", "active").limit(5).reset()
    assert reset.get_criteria().is_empty()
    assert reset.client is builder.client
    assert reset.collection_name == "test_bindings"


def test_get_without_callback_fails(builder):
    """get() needs an execute callback."""
    with pytest.raises(OperationNotConfiguredError, match="set_execute_callback"):
        builder.get()


def test_get_invokes_callback_with_finished_criteria(builder):
    """The callback receives the final builder and its result is returned unchanged."""
    records = ["r1", "r2", "r3"]
    seen = []

    def execute(query):
        seen.append(query.get_criteria())
        return records

    query = builder.from_("Workspace", "ws-1").type("has_access").where("status", "active").limit(3)
    query.set_execute_callback(execute)

    assert query.get() == records
    assert seen == [
        QueryCriteria(
            from_entity_id="ws-1",
            from_entity_type="Workspace",
            binding_type="has_access",
            where_conditions=(WhereCondition("status", "=", "active"),),
            limit=3,
        )
    ]


def test_callback_carries_over_to_derived_builders(builder):
    """Builders derived after the callback is attached can execute."""
    callback = MagicMock(return_value=QueryResult([]))
    builder.set_execute_callback(callback)

    query = builder.type("owns").limit(2)
    result = query.get()

    assert result.is_empty()
    callback.assert_called_once_with(query)
    assert builder.reset().execute_callback is callback


def test_hook_errors_propagate_unchanged(builder):
    """Failures raised by the callback reach the caller as-is."""
    error = ConnectionError("cluster unreachable")
    builder.set_execute_callback(MagicMock(side_effect=error))
    with pytest.raises(ConnectionError) as exc_info:
        builder.get()
    assert exc_info.value is error


@pytest.mark.parametrize(
    "call, capability",
    [
        (lambda b: b.first(), Capability.FIRST_RESULT),
        (lambda b: b.count(), Capability.RESULT_COUNT),
        (lambda b: b.exists(), Capability.EXISTENCE_CHECK),
        (lambda b: b.or_where(lambda q: q.where("a", "b")), Capability.OR_CONDITIONS),
        (lambda b: b.near_text(["access control"], 0.7), Capability.SEMANTIC_SEARCH),
        (lambda b: b.near_vector([0.1, 0.2, 0.3], 0.7), Capability.VECTOR_SEARCH),
    ],
)
def test_deferred_capabilities_fail_without_executing(builder, call, capability):
    """Deferred operations raise a tagged error and never touch the callback."""
    callback = MagicMock()
    builder.set_execute_callback(callback)

    with pytest.raises(CapabilityNotAvailableError) as exc_info:
        call(builder)

    assert exc_info.value.capability is capability
    assert capability.value in str(exc_info.value)
    callback.assert_not_called()


def test_capability_error_is_not_implemented_error(builder):
    """Callers can also catch the stdlib NotImplementedError."""
    with pytest.raises(NotImplementedError):
        builder.count()


def test_forked_builders_do_not_interfere(builder):
    """Threads extending the same base builder see only their own filters."""
    base = builder.type("has_access")
    results = {}

    def extend(name):
        query = base
        for index in range(50):
            query = query.where(name, index)
        results[name] = query.get_criteria().where_conditions

    threads = [threading.Thread(target=extend, args=(name,)) for name in ("a", "b", "c")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert base.get_criteria().where_conditions == ()
    for name, conditions in results.items():
        assert len(conditions) == 50
        assert {condition.field for condition in conditions} == {name}


def test_criteria_to_dict():
    """to_dict() renders plain structures."""
    criteria = (
        BasicQueryBuilder(None, "c")
        .from_("Workspace", "ws-1")
        .where_between("score", 1, 5)
        .order_by("score", "desc")
        .get_criteria()
    )
    assert criteria.to_dict() == {
        "from_entity_id": "ws-1",
        "from_entity_type": "Workspace",
        "to_entity_id": None,
        "to_entity_type": None,
        "binding_type": None,
        "where_conditions": [{"field": "score", "operator": "BETWEEN", "value": (1, 5)}],
        "limit": None,
        "offset": None,
        "order_by": {"field": "score", "direction": "desc"},
    }
