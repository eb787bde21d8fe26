"""Tests for the CSV record codec."""

import pytest

from prodexa_storage.codec import (
    CSV_HEADER,
    ListRecord,
    decode_document,
    decode_record,
    encode_document,
    encode_record,
    escape_field,
)
from prodexa_storage.exceptions import RecordValidationError


class TestEscapeField:
    """Tests for field quoting."""

    def test_plain_value_unchanged(self):
        assert escape_field("Milk") == "Milk"

    def test_empty_value_unchanged(self):
        assert escape_field("") == ""

    def test_comma_is_quoted(self):
        assert escape_field("3,50") == '"3,50"'

    def test_quotes_are_doubled(self):
        assert escape_field('say "hi"') == '"say ""hi"""'

    def test_newline_is_quoted(self):
        assert escape_field("a\nb") == '"a\nb"'


class TestRecordRoundTrip:
    """Encoding then decoding a record gives the same record."""

    def test_special_characters(self):
        record = ListRecord(
            id="id,1",
            name='Bread "sourdough"',
            quantity="2\n3",
            store="",
            price="3,50",
            added_by="Ana\r\nMaria",
        )

        assert decode_record(encode_record(record)) == record

    def test_all_empty_optional_fields(self):
        record = ListRecord(id="2", name="Bread", quantity="", store="", price="", added_by="")

        line = encode_record(record)

        assert line == "2,Bread,,,,"
        assert decode_record(line) == record


class TestDecodeRecord:
    """Tests for single row decoding."""

    def test_decodes_six_fields(self):
        record = decode_record("1,Milk,2,Market,3.50,Alice")

        assert record == ListRecord("1", "Milk", "2", "Market", "3.50", "Alice")

    def test_too_few_fields_is_malformed(self):
        assert decode_record("1,Milk,2") is None

    def test_extra_fields_are_ignored(self):
        record = decode_record("1,Milk,2,Market,3.50,Alice,extra")

        assert record is not None
        assert record.added_by == "Alice"


class TestDecodeDocument:
    """Tests for whole file decoding."""

    def test_skips_header_and_blank_lines(self):
        content = CSV_HEADER + "\n\n1,Milk,2,Market,3.50,Alice\n\n2,Bread,1,,,Bob\n"

        result = decode_document(content)

        assert [r.name for r in result.records] == ["Milk", "Bread"]
        assert result.malformed == 0

    def test_crlf_line_endings(self):
        content = CSV_HEADER + "\r\n1,Milk,2,Market,3.50,Alice\r\n2,Bread,1,,,Bob\r\n"

        result = decode_document(content)

        assert [r.added_by for r in result.records] == ["Alice", "Bob"]

    def test_malformed_rows_are_dropped_and_counted(self):
        content = CSV_HEADER + "\n1,Milk,2,Market,3.50,Alice\ngarbage\n2,Bread\n3,Eggs,12,,,\n"

        result = decode_document(content)

        assert [r.id for r in result.records] == ["1", "3"]
        assert result.malformed == 2

    def test_quoted_newline_spans_lines(self):
        record = ListRecord(id="1", name="Line one\nLine two")

        result = decode_document(encode_document([record]))

        assert result.records == [record]

    def test_file_without_header_keeps_first_row(self):
        result = decode_document("1,Milk,2,Market,3.50,Alice\n")

        assert len(result.records) == 1

    def test_header_after_byte_order_mark(self):
        result = decode_document("\ufeff" + CSV_HEADER + "\n1,Milk,2,Market,3.50,Alice\n")

        assert [r.id for r in result.records] == ["1"]
        assert result.malformed == 0

    def test_header_case_and_spacing_ignored(self):
        result = decode_document("ID, Name ,Quantity,STORE,price,AddedBy \n1,Milk,2,,,\n")

        assert [r.name for r in result.records] == ["Milk"]

    def test_byte_order_mark_without_header(self):
        result = decode_document("\ufeff1,Milk,2,Market,3.50,Alice\n")

        assert result.records[0].id == "1"

    def test_empty_content(self):
        assert decode_document("").records == []


class TestEncodeDocument:
    """Tests for whole file encoding."""

    def test_header_rows_and_trailing_newline(self):
        records = [ListRecord("1", "Milk", "2", "Market", "3.50", "Alice")]

        content = encode_document(records)

        assert content == CSV_HEADER + "\n1,Milk,2,Market,3.50,Alice\n"

    def test_empty_list_is_header_only(self):
        assert encode_document([]) == CSV_HEADER + "\n"


class TestListRecord:
    """Tests for record construction and validation."""

    def test_create_trims_and_defaults_quantity(self):
        record = ListRecord.create("  Milk  ", quantity="  ")

        assert record.name == "Milk"
        assert record.quantity == "1"
        assert record.id

    def test_create_generates_unique_ids(self):
        assert ListRecord.create("A").id != ListRecord.create("A").id

    def test_create_rejects_blank_name(self):
        with pytest.raises(RecordValidationError) as exc_info:
            ListRecord.create("   ")

        assert exc_info.value.field == "name"

    def test_validate_rejects_empty_id(self):
        with pytest.raises(RecordValidationError):
            ListRecord(id="", name="Milk").validate()

    def test_dict_uses_column_names(self):
        record = ListRecord("1", "Milk", added_by="Alice")

        data = record.to_dict()

        assert data["addedBy"] == "Alice"
        assert ListRecord.from_dict(data) == record
