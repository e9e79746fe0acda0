import pytest

from adminconsole.application.presets import AUDIT_LOGS, PRESETS, get_preset
from adminconsole.application.services.filter_store import FilterStore
from adminconsole.errors import FilterValidationError, UnknownResourceError


def test_known_presets():
    assert set(PRESETS) == {"audit-logs", "users", "pincodes"}
    assert get_preset("users").display_title == "User Management"


def test_unknown_preset():
    with pytest.raises(UnknownResourceError, match="audit-logs"):
        get_preset("orders")


@pytest.mark.parametrize("name", sorted(PRESETS))
def test_every_preset_builds_a_valid_filter_store(name):
    definition = PRESETS[name]
    store = FilterStore(definition.filter_fields, date_ranges=definition.date_ranges)

    assert set(store.applied) == {field.name for field in definition.filter_fields}


def test_audit_log_filters_are_committed_explicitly():
    assert not any(field.live for field in AUDIT_LOGS.filter_fields)


def test_audit_log_date_range_is_checked():
    store = FilterStore(AUDIT_LOGS.filter_fields, date_ranges=AUDIT_LOGS.date_ranges)
    store.set_draft("startDate", "2024-02-01")
    store.set_draft("endDate", "2024-01-01")

    with pytest.raises(FilterValidationError):
        store.commit()


def test_audit_log_export_columns():
    headers = [column.header for column in AUDIT_LOGS.export_columns]
    assert headers == ["Timestamp", "User", "Action", "Entity", "Entity ID", "Status", "IP Address"]
