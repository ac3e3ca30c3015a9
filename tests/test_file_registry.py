"""Tests for the file registry operations through the dispatcher."""

import hashlib
import json

import pytest

from common.constants import (
    HASH_NAME_INDEX,
    RESTRICTED_PARTITION,
    SHARED_PARTITION,
)
from registry.composite_key import build_key, prefix_range
from registry.database import get_db_connection
from registry.dispatcher import invoke
from registry.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    ProtocolError,
    ValidationError,
)


def ledger_snapshot():
    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT partition, key, value FROM ledger_entries ORDER BY partition, key")
        return [(row["partition"], bytes(row["key"]), bytes(row["value"])) for row in cursor.fetchall()]


def index_scan(content_hash):
    payload = invoke(
        "rangeScan",
        args=[build_key(HASH_NAME_INDEX, [content_hash, ""]), build_key(HASH_NAME_INDEX, [content_hash, "\xff"])],
    )
    return json.loads(payload)


@pytest.fixture
def create_file(test_db, transient_for):
    def _create(**payload):
        invoke("create", transient=transient_for("file", payload))
    return _create


@pytest.fixture
def f1(create_file, file_payload):
    create_file(**file_payload)
    return file_payload


class TestCreate:
    def test_scenario_read_back(self, f1):
        shared = json.loads(invoke("readShared", args=["f1"]))
        restricted = json.loads(invoke("readRestricted", args=["f1"]))

        assert shared == {
            "docType": "file",
            "name": "f1",
            "contentHash": "abc123",
            "timestamp": 100,
            "owner": "orgA",
        }
        assert restricted == {"docType": "fileDetails", "name": "f1", "folio": 7}

    def test_writes_shared_restricted_and_index(self, f1):
        index_key = build_key(HASH_NAME_INDEX, ["abc123", "f1"]).encode("utf-8")
        snapshot = ledger_snapshot()

        assert (SHARED_PARTITION, index_key, b"\x00") in snapshot
        assert {(p, k) for p, k, _ in snapshot} == {
            (RESTRICTED_PARTITION, b"f1"),
            (SHARED_PARTITION, b"f1"),
            (SHARED_PARTITION, index_key),
        }

    def test_returns_empty_payload(self, test_db, transient_for, file_payload):
        assert invoke("create", transient=transient_for("file", file_payload)) is None

    def test_duplicate_name_fails_and_leaves_ledger_unchanged(self, f1, transient_for, file_payload):
        before = ledger_snapshot()
        duplicate = dict(file_payload, contentHash="other", folio=9)

        with pytest.raises(AlreadyExistsError):
            invoke("create", transient=transient_for("file", duplicate))

        assert ledger_snapshot() == before

    def test_zero_timestamp_fails_without_writes(self, test_db, transient_for, file_payload):
        with pytest.raises(ValidationError) as exc_info:
            invoke("create", transient=transient_for("file", dict(file_payload, timestamp=0)))

        assert exc_info.value.field == "timestamp"
        assert "timestamp" in str(exc_info.value)
        assert ledger_snapshot() == []

    @pytest.mark.parametrize("field,value", [
        ("name", ""),
        ("contentHash", ""),
        ("owner", ""),
        ("timestamp", -5),
        ("folio", 0),
        ("folio", -1),
    ])
    def test_invalid_field_is_named(self, test_db, transient_for, file_payload, field, value):
        with pytest.raises(ValidationError) as exc_info:
            invoke("create", transient=transient_for("file", dict(file_payload, **{field: value})))

        assert exc_info.value.field == field
        assert ledger_snapshot() == []

    @pytest.mark.parametrize("field", ["name", "contentHash", "timestamp", "owner", "folio"])
    def test_missing_field_is_named(self, test_db, transient_for, file_payload, field):
        payload = {k: v for k, v in file_payload.items() if k != field}

        with pytest.raises(ValidationError) as exc_info:
            invoke("create", transient=transient_for("file", payload))

        assert exc_info.value.field == field

    @pytest.mark.parametrize("field,value", [
        ("timestamp", "100"),
        ("folio", "7"),
        ("folio", True),
        ("timestamp", 100.5),
        ("name", 12),
        ("owner", ["orgA"]),
    ])
    def test_no_type_coercion(self, test_db, transient_for, file_payload, field, value):
        with pytest.raises(ValidationError) as exc_info:
            invoke("create", transient=transient_for("file", dict(file_payload, **{field: value})))

        assert exc_info.value.field == field

    def test_name_in_composite_namespace_rejected(self, test_db, transient_for, file_payload):
        with pytest.raises(ValidationError) as exc_info:
            invoke("create", transient=transient_for("file", dict(file_payload, name="\x00sneaky")))

        assert exc_info.value.field == "name"

    def test_extra_fields_ignored(self, test_db, transient_for, file_payload):
        invoke("create", transient=transient_for("file", dict(file_payload, color="blue")))
        assert "color" not in json.loads(invoke("readShared", args=["f1"]))


class TestReadAndDigest:
    def test_read_missing(self, test_db):
        with pytest.raises(NotFoundError):
            invoke("readShared", args=["nope"])
        with pytest.raises(NotFoundError):
            invoke("readRestricted", args=["nope"])

    def test_digest_missing(self, test_db):
        with pytest.raises(NotFoundError):
            invoke("digestShared", args=["nope"])
        with pytest.raises(NotFoundError):
            invoke("digestRestricted", args=["nope"])

    def test_index_key_is_not_a_file(self, f1):
        index_key = build_key(HASH_NAME_INDEX, ["abc123", "f1"])
        with pytest.raises(NotFoundError):
            invoke("readShared", args=[index_key])
        with pytest.raises(NotFoundError):
            invoke("digestShared", args=[index_key])

    def test_digest_is_sha256_of_stored_record(self, f1):
        shared = invoke("readShared", args=["f1"])
        restricted = invoke("readRestricted", args=["f1"])

        assert invoke("digestShared", args=["f1"]) == hashlib.sha256(shared).digest()
        assert invoke("digestRestricted", args=["f1"]) == hashlib.sha256(restricted).digest()

    def test_digest_is_stable(self, f1):
        assert invoke("digestShared", args=["f1"]) == invoke("digestShared", args=["f1"])

    def test_digest_changes_with_content(self, f1, transient_for):
        before = invoke("digestShared", args=["f1"])
        details_before = invoke("digestRestricted", args=["f1"])

        invoke("transfer", transient=transient_for("file_owner", {"name": "f1", "owner": "orgB"}))

        assert invoke("digestShared", args=["f1"]) != before
        assert invoke("digestRestricted", args=["f1"]) == details_before

    def test_digest_returns_to_original_when_content_does(self, f1, transient_for):
        before = invoke("digestShared", args=["f1"])

        invoke("transfer", transient=transient_for("file_owner", {"name": "f1", "owner": "orgB"}))
        invoke("transfer", transient=transient_for("file_owner", {"name": "f1", "owner": "orgA"}))

        assert invoke("digestShared", args=["f1"]) == before

    def test_records_differing_only_by_name_have_different_digests(self, create_file):
        create_file(name="a", contentHash="h", timestamp=1, owner="o", folio=3)
        create_file(name="b", contentHash="h", timestamp=1, owner="o", folio=3)

        assert invoke("digestShared", args=["a"]) != invoke("digestShared", args=["b"])
        assert invoke("digestRestricted", args=["a"]) != invoke("digestRestricted", args=["b"])


class TestTransfer:
    def test_scenario_owner_changes_only(self, f1, transient_for):
        before = json.loads(invoke("readShared", args=["f1"]))
        details_before = invoke("readRestricted", args=["f1"])

        assert invoke("transfer", transient=transient_for("file_owner", {"name": "f1", "owner": "orgB"})) is None

        after = json.loads(invoke("readShared", args=["f1"]))
        assert after["owner"] == "orgB"
        assert {k: v for k, v in after.items() if k != "owner"} == {k: v for k, v in before.items() if k != "owner"}
        assert invoke("readRestricted", args=["f1"]) == details_before

    def test_index_untouched(self, f1, transient_for):
        invoke("transfer", transient=transient_for("file_owner", {"name": "f1", "owner": "orgB"}))
        assert [entry["Key"] for entry in index_scan("abc123")] == [build_key(HASH_NAME_INDEX, ["abc123", "f1"])]

    def test_missing_file(self, test_db, transient_for):
        with pytest.raises(NotFoundError):
            invoke("transfer", transient=transient_for("file_owner", {"name": "nope", "owner": "orgB"}))

    @pytest.mark.parametrize("payload,field", [
        ({"name": "f1", "owner": ""}, "owner"),
        ({"name": "", "owner": "orgB"}, "name"),
        ({"name": "f1"}, "owner"),
    ])
    def test_invalid_input(self, f1, transient_for, payload, field):
        with pytest.raises(ValidationError) as exc_info:
            invoke("transfer", transient=transient_for("file_owner", payload))

        assert exc_info.value.field == field
        assert json.loads(invoke("readShared", args=["f1"]))["owner"] == "orgA"

    def test_index_key_name_not_found(self, f1, transient_for):
        index_key = build_key(HASH_NAME_INDEX, ["abc123", "f1"])
        before = ledger_snapshot()

        with pytest.raises(NotFoundError):
            invoke("transfer", transient=transient_for("file_owner", {"name": index_key, "owner": "orgB"}))

        assert ledger_snapshot() == before


class TestDelete:
    def test_scenario_removes_everything(self, f1, transient_for):
        assert invoke("delete", transient=transient_for("file_delete", {"name": "f1"})) is None

        with pytest.raises(NotFoundError):
            invoke("readShared", args=["f1"])
        with pytest.raises(NotFoundError):
            invoke("readRestricted", args=["f1"])
        assert index_scan("abc123") == []
        assert ledger_snapshot() == []

    def test_delete_after_transfer(self, f1, transient_for):
        invoke("transfer", transient=transient_for("file_owner", {"name": "f1", "owner": "orgB"}))
        invoke("delete", transient=transient_for("file_delete", {"name": "f1"}))
        assert ledger_snapshot() == []

    def test_missing_file(self, test_db, transient_for):
        with pytest.raises(NotFoundError):
            invoke("delete", transient=transient_for("file_delete", {"name": "nope"}))

    def test_keeps_other_files(self, create_file, transient_for):
        create_file(name="a", contentHash="h", timestamp=1, owner="o", folio=1)
        create_file(name="b", contentHash="h", timestamp=2, owner="o", folio=2)

        invoke("delete", transient=transient_for("file_delete", {"name": "a"}))

        assert [entry["Key"] for entry in index_scan("h")] == [build_key(HASH_NAME_INDEX, ["h", "b"])]
        assert json.loads(invoke("readRestricted", args=["b"]))["folio"] == 2

    def test_name_can_be_reused_after_delete(self, f1, create_file, transient_for, file_payload):
        invoke("delete", transient=transient_for("file_delete", {"name": "f1"}))
        create_file(**dict(file_payload, contentHash="new"))

        assert json.loads(invoke("readShared", args=["f1"]))["contentHash"] == "new"
        assert index_scan("abc123") == []

    def test_index_key_name_not_found(self, f1, transient_for):
        index_key = build_key(HASH_NAME_INDEX, ["abc123", "f1"])
        before = ledger_snapshot()

        with pytest.raises(NotFoundError):
            invoke("delete", transient=transient_for("file_delete", {"name": index_key}))

        assert ledger_snapshot() == before


class TestRangeScan:
    def test_index_range_lists_names_in_order(self, create_file):
        create_file(name="zeta", contentHash="h1", timestamp=1, owner="o", folio=1)
        create_file(name="alpha", contentHash="h1", timestamp=1, owner="o", folio=1)
        create_file(name="mid", contentHash="h2", timestamp=1, owner="o", folio=1)

        entries = index_scan("h1")

        assert [entry["Key"] for entry in entries] == [
            build_key(HASH_NAME_INDEX, ["h1", "alpha"]),
            build_key(HASH_NAME_INDEX, ["h1", "zeta"]),
        ]
        assert all(entry["Record"] is None for entry in entries)

    def test_prefix_range_equivalent_to_sentinel_bounds(self, create_file):
        create_file(name="a", contentHash="h1", timestamp=1, owner="o", folio=1)
        create_file(name="b", contentHash="h10", timestamp=1, owner="o", folio=1)

        start, end = prefix_range(HASH_NAME_INDEX, ["h1"])
        entries = json.loads(invoke("rangeScan", args=[start, end]))

        assert [entry["Key"] for entry in entries] == [build_key(HASH_NAME_INDEX, ["h1", "a"])]

    def test_plain_range_returns_records(self, create_file):
        for name in ["c", "a", "b"]:
            create_file(name=name, contentHash="h", timestamp=1, owner="o", folio=1)

        entries = json.loads(invoke("rangeScan", args=["a", "c"]))

        assert [entry["Key"] for entry in entries] == ["a", "b"]
        assert entries[0]["Record"]["name"] == "a"

    def test_open_range_interleaves_index_entries(self, f1):
        entries = json.loads(invoke("rangeScan", args=["", ""]))

        assert [entry["Key"] for entry in entries] == [build_key(HASH_NAME_INDEX, ["abc123", "f1"]), "f1"]
        assert entries[0]["Record"] is None
        assert entries[1]["Record"]["owner"] == "orgA"

    def test_restricted_records_never_scanned(self, f1):
        payload = invoke("rangeScan", args=["", ""])
        assert b"folio" not in payload

    def test_empty_range(self, test_db):
        assert json.loads(invoke("rangeScan", args=["a", "b"])) == []


class TestCallShape:
    def test_unknown_function(self, test_db):
        with pytest.raises(ProtocolError) as exc_info:
            invoke("initMarble", args=[])
        assert "unknown function" in str(exc_info.value)

    @pytest.mark.parametrize("function,args", [
        ("readShared", []),
        ("readShared", ["a", "b"]),
        ("readRestricted", []),
        ("digestShared", []),
        ("digestRestricted", ["a", "b"]),
        ("rangeScan", ["a"]),
        ("rangeScan", ["a", "b", "c"]),
    ])
    def test_positional_arity(self, test_db, function, args):
        with pytest.raises(ProtocolError) as exc_info:
            invoke(function, args=args)
        assert "Incorrect number of arguments" in str(exc_info.value)

    @pytest.mark.parametrize("function,key", [
        ("create", "file"),
        ("transfer", "file_owner"),
        ("delete", "file_delete"),
    ])
    def test_transient_operations_reject_positional_args(self, test_db, transient_for, function, key):
        with pytest.raises(ProtocolError) as exc_info:
            invoke(function, args=["f1"], transient=transient_for(key, {"name": "f1"}))
        assert "Incorrect number of arguments" in str(exc_info.value)

    def test_shape_checked_before_fields(self, test_db, transient_for):
        with pytest.raises(ProtocolError):
            invoke("create", args=["f1"], transient=transient_for("file", {"timestamp": 0}))

    def test_missing_transient_key(self, test_db, transient_for, file_payload):
        with pytest.raises(ProtocolError) as exc_info:
            invoke("create", transient=transient_for("file_owner", file_payload))
        assert "file must be a key in the transient map" in str(exc_info.value)

    def test_empty_transient_value(self, test_db):
        with pytest.raises(ProtocolError):
            invoke("delete", transient={"file_delete": b""})

    def test_undecodable_transient_value_not_echoed(self, test_db):
        with pytest.raises(ProtocolError) as exc_info:
            invoke("create", transient={"file": b'{"folio": 424242'})
        assert "424242" not in str(exc_info.value)

    def test_transient_value_must_be_object(self, test_db):
        with pytest.raises(ProtocolError):
            invoke("delete", transient={"file_delete": b'["f1"]'})


class TestCoLifecycle:
    @pytest.mark.parametrize("name", ["f1", "with space", "ünï", "a\x01b", "x" * 200])
    def test_create_then_delete(self, create_file, transient_for, name):
        create_file(name=name, contentHash="h", timestamp=5, owner="o", folio=9)

        assert json.loads(invoke("readShared", args=[name]))["name"] == name
        assert json.loads(invoke("readRestricted", args=[name]))["name"] == name
        assert len(index_scan("h")) == 1

        invoke("delete", transient=transient_for("file_delete", {"name": name}))

        with pytest.raises(NotFoundError):
            invoke("readShared", args=[name])
        with pytest.raises(NotFoundError):
            invoke("readRestricted", args=[name])
        assert index_scan("h") == []
