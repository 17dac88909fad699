import json
from datetime import date

import pytest

from errors import ImportFormatError, ValidationError
from interchange.transactions import (
    HEADER,
    decode,
    decode_json,
    encode,
    encode_json,
    row_to_transaction,
)
from models.category import Kind
from tests.helpers import make_transaction

COLUMNS = {name: index for index, name in enumerate(HEADER)}


class TestRowToTransaction:
    """Tests for row_to_transaction function."""

    def test_parse_expense_transaction(self):
        """Test parsing a typical expense row."""
        row = ["2024-01-10", "지출", "식비", "외식", "점심", "12000", "김밥"]

        transaction = row_to_transaction(row, COLUMNS)

        assert transaction.date == date(2024, 1, 10)
        assert transaction.kind is Kind.EXPENSE
        assert transaction.category.path == ("식비", "외식", "점심")
        assert transaction.amount == 12000
        assert transaction.memo == "김밥"
        assert isinstance(transaction.id, str)

    def test_parse_dotted_date_and_separated_amount(self):
        row = ["2024.01.10", "수입", "급여", "정기급여", "월급", "3,000,000", ""]

        transaction = row_to_transaction(row, COLUMNS)

        assert transaction.date == date(2024, 1, 10)
        assert transaction.amount == 3000000
        assert transaction.memo is None

    def test_missing_amount_raises(self):
        row = ["2024-01-10", "지출", "식비", "외식", "점심", "", ""]

        with pytest.raises(ValidationError, match="금액"):
            row_to_transaction(row, COLUMNS)

    @pytest.mark.parametrize("amount", ["0", "-500", "12.5", "abc"])
    def test_invalid_amount_raises(self, amount):
        row = ["2024-01-10", "지출", "식비", "외식", "점심", amount, ""]

        with pytest.raises(ValidationError):
            row_to_transaction(row, COLUMNS)

    def test_invalid_date_raises(self):
        row = ["2024-02-30", "지출", "식비", "외식", "점심", "1000", ""]

        with pytest.raises(ValidationError, match="date"):
            row_to_transaction(row, COLUMNS)

    def test_each_row_gets_new_id(self):
        row = ["2024-01-10", "지출", "식비", "외식", "점심", "12000", ""]

        assert row_to_transaction(row, COLUMNS).id != row_to_transaction(row, COLUMNS).id


class TestEncode:
    """Tests for transaction CSV encoding."""

    def test_header_and_row(self):
        text = encode([make_transaction(memo="김밥")])

        assert text == "날짜,유형,관,항,목,금액,메모\n2024-01-10,지출,식비,외식,점심,12000,김밥\n"

    def test_absent_memo_is_empty_field(self):
        text = encode([make_transaction()])

        assert text.splitlines()[1].endswith(",12000,")

    def test_quotes_memo_with_comma_and_quote(self):
        text = encode([make_transaction(memo='점심, "회사" 근처')])

        assert text.splitlines()[1].endswith(',12000,"점심, ""회사"" 근처"')


class TestDecode:
    """Tests for transaction CSV decoding."""

    def test_round_trip_preserves_everything_but_ids(self):
        """Test that decode(encode(x)) keeps all fields and assigns new ids."""
        original = [
            make_transaction(memo='점심, "회사" 근처'),
            make_transaction(
                kind=Kind.INCOME,
                level1="급여",
                level2="정기급여",
                level3="월급",
                amount=3000000,
                on=date(2024, 1, 25),
            ),
        ]

        decoded = decode(encode(original))

        assert [(t.date, t.kind, t.category, t.amount, t.memo) for t in decoded] == [
            (t.date, t.kind, t.category, t.amount, t.memo) for t in original
        ]
        assert {t.id for t in decoded}.isdisjoint({t.id for t in original})

    def test_drops_row_without_amount(self):
        """Test that a row missing 금액 is dropped and its neighbours kept."""
        text = (
            "날짜,유형,관,항,목,금액,메모\n"
            "2024-01-10,지출,식비,외식,점심,12000,\n"
            "2024-01-11,지출,식비,외식,저녁,,\n"
            "2024-01-12,지출,교통비,대중교통,버스,1500,\n"
        )

        decoded = decode(text)

        assert [t.amount for t in decoded] == [12000, 1500]

    def test_memo_column_is_optional(self):
        text = "날짜,유형,관,항,목,금액\n2024-01-10,지출,식비,외식,점심,12000\n"

        assert decode(text)[0].memo is None

    def test_strips_byte_order_mark(self):
        text = "\ufeff날짜,유형,관,항,목,금액,메모\n2024-01-10,지출,식비,외식,점심,12000,\n"

        assert len(decode(text)) == 1

    def test_empty_file_raises(self):
        with pytest.raises(ImportFormatError, match="Empty"):
            decode("")

    def test_missing_column_raises(self):
        with pytest.raises(ImportFormatError, match="금액"):
            decode("날짜,유형,관,항,목\n2024-01-10,지출,식비,외식,점심\n")

    def test_no_valid_rows_raises(self):
        with pytest.raises(ImportFormatError, match="No valid transactions"):
            decode("날짜,유형,관,항,목,금액,메모\n2024-01-10,지출,식비,외식,점심,0,\n")


class TestJson:
    """Tests for the JSON backup format."""

    def test_round_trip_keeps_ids(self):
        original = [make_transaction(memo="김밥"), make_transaction(amount=1)]

        assert decode_json(encode_json(original)) == original

    def test_non_ascii_written_as_is(self):
        assert "식비" in encode_json([make_transaction()])

    def test_skips_invalid_entries(self):
        good = make_transaction()
        text = json.dumps(
            [good.to_dict(), {"id": "x"}, dict(good.to_dict(), id="y", amount=0)]
        )

        assert decode_json(text) == [good]

    def test_empty_array(self):
        assert decode_json("[]") == []

    def test_invalid_json_raises(self):
        with pytest.raises(ImportFormatError):
            decode_json("{not json")

    def test_non_array_raises(self):
        with pytest.raises(ImportFormatError, match="array"):
            decode_json('{"id": "x"}')

    def test_no_valid_entries_raises(self):
        with pytest.raises(ImportFormatError, match="No valid transactions"):
            decode_json('[{"id": "x"}]')

    def test_drops_entry_with_blank_label_and_keeps_neighbour(self):
        """Test that an entry failing field validation is dropped on its own."""
        good = make_transaction()
        blank = dict(make_transaction().to_dict(), level1="")
        bad_kind = dict(make_transaction().to_dict(), kind="이체")

        assert decode_json(json.dumps([good.to_dict(), blank, bad_kind])) == [good]

    def test_normalizes_entries(self):
        entry = dict(make_transaction().to_dict(), level2=" 외식 ", memo="  ")

        decoded = decode_json(json.dumps([entry]))

        assert decoded[0].level2 == "외식"
        assert decoded[0].memo is None

    def test_drops_repeated_id(self):
        """Test that only the first entry with a given id is kept."""
        first = make_transaction(amount=100)
        repeat = dict(make_transaction(amount=200).to_dict(), id=first.id)

        decoded = decode_json(json.dumps([first.to_dict(), repeat]))

        assert decoded == [first]
