import pytest

from flex_pinot.client.exceptions import InputError
from flex_pinot.importer.csv_loader import CsvTable, load_csv


def test_headers_and_cells_are_trimmed(tmp_path):
    path = tmp_path / "in.csv"
    path.write_text(" Type , Ref ,Link to\n storage ,  S1 ,\n")

    table = load_csv(path)

    assert table.headers == ["Type", "Ref", "Link to"]
    assert list(table.iter_rows()) == [(2, {"Type": "storage", "Ref": "S1", "Link to": ""})]


def test_short_rows_are_padded_and_long_rows_truncated():
    table = CsvTable(headers=["Type", "Ref", "Tags"], lines=[["folder"], ["inbox", "I1", "a", "x"]])

    rows = [row for _, row in table.iter_rows()]

    assert rows[0] == {"Type": "folder", "Ref": "", "Tags": ""}
    assert rows[1] == {"Type": "inbox", "Ref": "I1", "Tags": "a"}


def test_line_numbers_count_from_header(tmp_path):
    path = tmp_path / "in.csv"
    path.write_text("Type,Ref\nstorage,S1\nfolder,F1\ninbox,I1\n")

    assert [line for line, _ in load_csv(path).iter_rows()] == [2, 3, 4]


def test_quoted_cells_keep_commas(tmp_path):
    path = tmp_path / "in.csv"
    path.write_text('Type,Ref,Tags\nstorage,S1,"news, sport"\n')

    _, row = next(load_csv(path).iter_rows())

    assert row["Tags"] == "news, sport"


def test_byte_order_mark_is_ignored(tmp_path):
    path = tmp_path / "in.csv"
    path.write_bytes("\ufeffType,Ref\nstorage,S1\n".encode())

    assert load_csv(path).headers == ["Type", "Ref"]


def test_duplicate_headers_are_kept(tmp_path):
    path = tmp_path / "in.csv"
    path.write_text("Type,Ref,Ref\n")

    assert load_csv(path).headers == ["Type", "Ref", "Ref"]


def test_missing_file_raises_input_error(tmp_path):
    with pytest.raises(InputError, match="CSV file not found"):
        load_csv(tmp_path / "nope.csv")


def test_empty_file_raises_input_error(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")

    with pytest.raises(InputError, match="empty"):
        load_csv(path)


def test_undecodable_file_raises_input_error(tmp_path):
    path = tmp_path / "binary.csv"
    path.write_bytes(b"Type,Ref\n\xff\xfe\xfa,S1\n")

    with pytest.raises(InputError, match="Error reading CSV"):
        load_csv(path)
