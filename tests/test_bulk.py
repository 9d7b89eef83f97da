import json

import pytest

from tdswire.bulk import (
    BulkConfig,
    BulkOptions,
    copy_in,
    insert_bulk_statement,
    parse_copy_in,
)


def test_with_clause_empty_for_defaults():
    assert BulkOptions().with_clause() == ""


def test_with_clause_all_options_in_order():
    options = BulkOptions(
        check_constraints=True,
        fire_triggers=True,
        keep_nulls=True,
        kilobytes_per_batch=5,
        rows_per_batch=10,
        order=["id", "name"],
        tablock=True,
    )
    assert options.with_clause() == (
        "WITH (CHECK_CONSTRAINTS,FIRE_TRIGGERS,KEEP_NULLS,"
        "KILOBYTES_PER_BATCH = 5,ROWS_PER_BATCH = 10,ORDER(id,name),TABLOCK)"
    )


def test_with_clause_ignores_non_positive_batches():
    options = BulkOptions(kilobytes_per_batch=0, rows_per_batch=-3, tablock=True)
    assert options.with_clause() == "WITH (TABLOCK)"


def test_copy_in_prefix_and_shape():
    stmt = copy_in("test_table", BulkOptions(), "test_varchar", "test_bigint")
    assert stmt.startswith("INSERTBULK ")
    data = json.loads(stmt[len("INSERTBULK "):])
    assert data["TableName"] == "test_table"
    assert data["ColumnsName"] == ["test_varchar", "test_bigint"]
    assert data["Options"]["Tablock"] is False
    assert data["Options"]["Order"] is None


def test_copy_in_exact_defaults():
    assert copy_in("t", BulkOptions()) == (
        'INSERTBULK {"TableName":"t","ColumnsName":null,"Options":'
        '{"CheckConstraints":false,"FireTriggers":false,"KeepNulls":false,'
        '"KilobytesPerBatch":0,"RowsPerBatch":0,"Order":null,"Tablock":false}}'
    )


def test_copy_in_round_trip():
    options = BulkOptions(keep_nulls=True, rows_per_batch=100, order=["id"])
    config = parse_copy_in(copy_in("#table_test", options, "a", "b"))
    assert config == BulkConfig(
        table_name="#table_test", columns=["a", "b"], options=options
    )


def test_copy_in_none_options_is_default():
    config = parse_copy_in(copy_in("t", None, "x"))
    assert config.options == BulkOptions()


def test_json_escapes_html_characters():
    text = BulkConfig(table_name="a<b>&c").to_json()
    assert "<" not in text and ">" not in text and "&" not in text
    assert BulkConfig.from_json(text).table_name == "a<b>&c"


def test_from_json_is_case_insensitive_and_ignores_unknown():
    config = BulkConfig.from_json(
        '{"tablename":"t","columnsname":["c"],"options":{"tablock":true},"Extra":1}'
    )
    assert config.table_name == "t"
    assert config.columns == ["c"]
    assert config.options.tablock is True


def test_from_json_missing_fields_default():
    assert BulkConfig.from_json("{}") == BulkConfig()


def test_from_json_invalid_raises():
    with pytest.raises(ValueError):
        BulkConfig.from_json("not json")


def test_from_json_wrong_type_raises():
    with pytest.raises(ValueError):
        BulkConfig.from_json('{"Options":{"RowsPerBatch":"ten"}}')


def test_insert_bulk_statement_with_options():
    stmt = insert_bulk_statement(
        "t", [("id", "int"), ("name", "nvarchar(50)")], BulkOptions(tablock=True)
    )
    assert stmt == "INSERT BULK t ([id] int, [name] nvarchar(50)) WITH (TABLOCK)"


def test_insert_bulk_statement_without_options_keeps_trailing_space():
    stmt = insert_bulk_statement("t", [("id", "int")], BulkOptions())
    assert stmt == "INSERT BULK t ([id] int) "