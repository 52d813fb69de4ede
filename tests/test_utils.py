import math

from utils import col_lookup, row_text


def test_col_lookup_existing_column():
    columns = ["Student Name", "E_mail", "Quiz1_Score"]
    assert col_lookup(columns, "studentname") == "Student Name"
    assert col_lookup(columns, "EMAIL") == "E_mail"


def test_col_lookup_missing_column_returns_default():
    assert col_lookup(["A"], "missing", default="fallback") == "fallback"
    assert col_lookup(["A"], "another_missing") is None


def test_row_text_prefers_exact_spelling_then_case_variants():
    assert row_text({"Name": "Exact", "name": "lower"}, "Name") == "Exact"
    assert row_text({"Name": "", "name": "lower"}, "Name") == "lower"
    assert row_text({"NAME": math.nan, "name": None}, "Name") == ""
    assert row_text({}, "Email") == ""
