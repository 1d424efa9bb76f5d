"""
Tests for code normalisation and batch validation helpers.
"""

from inventory.codes import clean_code, format_code, is_valid_code, split_codes, validate_codes

A = "1111222233334444"
B = "5555666677778888"
C = "9999000011112222"


class TestCleaning:

    def test_clean_code_strips_everything_but_digits(self):
        assert clean_code(" 1111-2222 3333.4444 ") == A
        assert clean_code("") == ""
        assert clean_code(None) == ""

    def test_is_valid_code(self):
        assert is_valid_code("1111-2222-3333-4444")
        assert not is_valid_code("1111-2222-3333-444")
        assert not is_valid_code("11112222333344445")
        assert not is_valid_code("abcd")

    def test_format_code(self):
        assert format_code(A) == "1111-2222-3333-4444"
        assert format_code("1111 2222 3333 4444") == "1111-2222-3333-4444"
        assert format_code("123") == "123"

    def test_split_codes_from_text(self):
        text = f"{A}\n\n  {B}  \r\n   \n{C}"
        assert split_codes(text) == [A, B, C]

    def test_split_codes_from_list(self):
        assert split_codes([f" {A} ", "", "   ", B]) == [A, B]


class TestValidateCodes:

    def test_all_new_codes_are_valid(self):
        result = validate_codes([A, B], [])

        assert result.valid_codes == [A, B]
        assert result.duplicates == []
        assert result.system_duplicates == []

    def test_repeated_in_batch(self):
        result = validate_codes([A, "1111-2222-3333-4444", B, A], [])

        assert result.valid_codes == [A, B]
        assert result.duplicates == [A]

    def test_already_stored(self):
        result = validate_codes([A, B], [B])

        assert result.valid_codes == [A]
        assert result.system_duplicates == [B]

    def test_stored_code_repeated_in_batch_is_only_a_system_duplicate(self):
        result = validate_codes([B, B], [B])

        assert result.valid_codes == []
        assert result.duplicates == []
        assert result.system_duplicates == [B]

    def test_invalid_codes_are_dropped(self):
        result = validate_codes(["123", A, "not a code"], [])

        assert result.valid_codes == [A]
        assert result.duplicates == []
        assert result.system_duplicates == []

    def test_existing_codes_are_compared_cleaned(self):
        result = validate_codes([A], ["1111 2222 3333 4444"])

        assert result.system_duplicates == [A]
        assert result.valid_codes == []
