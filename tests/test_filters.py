import json

import pytest

from reana_client.errors import FilterError
from reana_client.utils.filters import Filters, split_key_value


def test_single_value_filter_keeps_last_value() -> None:
    """Verify single value filter keeps last value behavior."""
    filters = Filters(["status"], ["name"], ["status=running", "status=finished"])

    assert filters.get_single("status") == "finished"


def test_multi_value_filter_keeps_order() -> None:
    """Verify multi value filter keeps order behavior."""
    filters = Filters(multi_keys=["name"], inputs=["name=b", "name=a", "name=b"])

    assert filters.get_multi("name") == ["b", "a", "b"]


def test_json_excludes_single_keys_not_requested() -> None:
    """Verify JSON excludes single keys not requested behavior."""
    filters = Filters(["status"], ["name"], ["status=running", "status=finished", "name=test"])

    assert filters.get_json(["name"]) == '{"name":["test"]}'


def test_json_includes_every_requested_multi_key() -> None:
    """Verify JSON includes every requested multi key behavior."""
    filters = Filters(
        multi_keys=["status", "name"],
        inputs=["status=running", "status=finished", "name=test"],
    )

    assert json.loads(filters.get_json(["name", "status"])) == {
        "name": ["test"],
        "status": ["running", "finished"],
    }


def test_json_is_empty_without_values() -> None:
    """Verify JSON is empty without values behavior."""
    assert Filters(multi_keys=["name"]).get_json(["name"]) == ""


def test_keys_are_case_insensitive() -> None:
    """Verify keys are case insensitive behavior."""
    filters = Filters(multi_keys=["name"], inputs=["NAME=foo"])

    assert filters.get_multi("name") == ["foo"]


@pytest.mark.parametrize("item", ["status", "=running", "sta tus=running"])
def test_malformed_entries_are_rejected(item: str) -> None:
    """Verify malformed entries are rejected behavior."""
    with pytest.raises(FilterError, match="wrong input format"):
        Filters(["status"], [], [item])


def test_unknown_key_lists_available_filters() -> None:
    """Verify unknown key lists available filters behavior."""
    with pytest.raises(FilterError) as excinfo:
        Filters(["status"], ["name"], ["size=1"])

    assert excinfo.value.format_message() == (
        "filter key 'size' is not valid\nAvailable filters are 'status', 'name'"
    )


def test_validate_values_rejects_unknown_status() -> None:
    """Verify validate values rejects unknown status behavior."""
    filters = Filters(multi_keys=["status"], inputs=["status=bogus"])

    with pytest.raises(FilterError, match="'bogus' is not a valid value"):
        filters.validate_values("status", ["running", "finished"])


def test_split_key_value_splits_on_first_equal_sign() -> None:
    """Verify split key value splits on first equal sign behavior."""
    assert split_key_value("a=b=c") == ("a", "b=c")
