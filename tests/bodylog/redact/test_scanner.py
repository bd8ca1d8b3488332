"""Tests for bodylog.redact.scanner module."""

import pytest

from bodylog.exceptions import ConfigError
from bodylog.redact import DEFAULT_SENSITIVE_FIELDS, MASK, Edit, RedactionScanner
from bodylog.redact.scanner import apply_edits, get_scanner, redact, shadow_copy

pytestmark = pytest.mark.unit


@pytest.fixture
def scanner() -> RedactionScanner:
    return RedactionScanner()


class TestExamples:
    """Reference scenarios for the default field set."""

    def test_login_body(self, scanner, login_body):
        """Test password value is masked, username kept."""
        assert scanner.redact(login_body) == '{"username":"alice","password":"***"}'

    def test_escaped_quote_in_value(self, scanner):
        """Test an escaped quote does not end the value."""
        assert scanner.redact('{"token":"ab\\"c"}') == '{"token":"***"}'

    def test_empty_text(self, scanner):
        """Test empty string is returned unchanged."""
        assert scanner.redact("") == ""

    def test_numeric_value_unchanged(self, scanner):
        """Test numeric values are not redacted."""
        assert scanner.redact('{"phone":13800000000}') == '{"phone":13800000000}'

    def test_plain_text_unchanged(self, scanner):
        """Test text without fields is returned unchanged."""
        assert scanner.redact("hello world") == "hello world"


class TestMatching:
    """Tests for field name matching."""

    def test_case_insensitive_key(self, scanner):
        """Test keys match in any casing while other text keeps its case."""
        text = '{"PassWord": "Abc", "Name": "Bob"}'
        assert scanner.redact(text) == '{"PassWord": "***", "Name": "Bob"}'

    def test_uppercase_key(self, scanner):
        assert scanner.redact('{"ACCESS_TOKEN":"x"}') == '{"ACCESS_TOKEN":"***"}'

    def test_multiple_occurrences(self, scanner):
        """Test every occurrence of a field is masked."""
        text = '[{"token":"a","id":1},{"token":"b","id":2}]'
        assert scanner.redact(text) == '[{"token":"***","id":1},{"token":"***","id":2}]'

    def test_multiple_fields(self, scanner):
        """Test several configured fields in one body."""
        text = '{"old_password":"a","new_password":"b","mobile":"123","api-key":"k"}'
        expected = '{"old_password":"***","new_password":"***","mobile":"***","api-key":"***"}'
        assert scanner.redact(text) == expected

    def test_key_must_be_quoted_exactly(self, scanner):
        """Test keys that merely contain a field name are not matched."""
        text = '{"my_password":"x","password_hint":"y"}'
        assert scanner.redact(text) == text

    def test_unquoted_key_not_matched(self, scanner):
        assert scanner.redact("password: hunter2") == "password: hunter2"

    def test_whitespace_around_colon(self, scanner):
        """Test spaces and tabs are skipped after the colon."""
        text = '{"password" :  \t"x y"}'
        assert scanner.redact(text) == '{"password" :  \t"***"}'

    def test_newline_before_value_is_not_skipped(self, scanner):
        """Test only spaces and tabs count as whitespace before the value."""
        text = '{"password":\n"x"}'
        assert scanner.redact(text) == text

    def test_pretty_printed_json(self, scanner):
        text = '{\n  "user": "bob",\n  "secret": "s3cr3t"\n}'
        assert scanner.redact(text) == '{\n  "user": "bob",\n  "secret": "***"\n}'

    def test_mask_length_independent_of_value(self, scanner):
        """Test the mask replaces short and long values alike."""
        long_value = "x" * 500
        result = scanner.redact(f'{{"token":"{long_value}","a":""}}')
        assert result == '{"token":"***","a":""}'

    def test_empty_string_value_masked(self, scanner):
        assert scanner.redact('{"password":""}') == '{"password":"***"}'

    def test_unicode_content_preserved(self, scanner):
        text = '{"name":"张三","phone":"13800000000","city":"İstanbul"}'
        assert scanner.redact(text) == '{"name":"张三","phone":"***","city":"İstanbul"}'

    def test_expanding_lowercase_before_key(self, scanner):
        """Test characters whose lowercase is longer do not shift matches."""
        text = '{"note":"İİİ","token":"abc"}'
        assert scanner.redact(text) == '{"note":"İİİ","token":"***"}'


class TestNonStringValues:
    """Non-string values are deliberately left alone."""

    @pytest.mark.parametrize(
        "text",
        [
            '{"secret":true}',
            '{"token":null}',
            '{"pwd":-12.5}',
            '{"token":{"value":"x"}}',
            '{"password":["a","b"]}',
        ],
    )
    def test_unchanged(self, scanner, text):
        assert scanner.redact(text) == text


class TestMalformedInput:
    """Malformed structure leaves the affected occurrence unredacted."""

    def test_missing_colon(self, scanner):
        assert scanner.redact('{"password" "x"}') == '{"password" "x"}'

    def test_field_at_end(self, scanner):
        assert scanner.redact('"password"') == '"password"'

    def test_colon_at_end(self, scanner):
        assert scanner.redact('{"password":') == '{"password":'

    def test_unterminated_string(self, scanner):
        assert scanner.redact('{"password":"abc') == '{"password":"abc'

    def test_trailing_backslash(self, scanner):
        """Test a lone trailing backslash does not run past the end."""
        assert scanner.redact('{"token":"abc\\') == '{"token":"abc\\'

    def test_escaped_backslash_before_quote(self, scanner):
        """Test an escaped backslash does not escape the closing quote."""
        assert scanner.redact('{"token":"a\\\\","b":"c"}') == '{"token":"***","b":"c"}'

    def test_unterminated_then_valid(self, scanner):
        """Test a later valid occurrence after an abandoned one."""
        text = '{"password" "x"} {"password":"y"}'
        assert scanner.redact(text) == '{"password" "x"} {"password":"***"}'

    def test_quoted_field_name_as_value(self, scanner):
        """Test a value equal to a field name masks the next string value."""
        text = '{"type":"password","value":"x"}'
        assert scanner.redact(text) == '{"type":"password","value":"***"}'

    def test_field_name_inside_masked_value(self, scanner):
        """Test a key fragment inside a masked value is not scanned again."""
        assert scanner.redact('{"password":"\\"password"}') == '{"password":"***"}'

    def test_value_equal_to_field_name(self, scanner):
        """Test a masked value that was itself a field name stops the scan."""
        text = '{"token":"token","a":"b"}'
        assert scanner.redact(text) == '{"token":"***","a":"b"}'

    def test_two_keys_share_colon(self, scanner):
        assert scanner.redact('{"token" "token":"x"}') == '{"token" "token":"***"}'


class TestIdempotence:
    @pytest.mark.parametrize(
        "text",
        [
            '{"username":"alice","password":"secret123"}',
            '{"token":"ab\\"c"}',
            '{"Secret": "a", "phone": 1}',
            "",
        ],
    )
    def test_redact_twice(self, scanner, text):
        once = scanner.redact(text)
        assert scanner.redact(once) == once


class TestConfiguration:
    """Tests for the injected field set."""

    def test_default_fields(self, scanner):
        assert scanner.fields == DEFAULT_SENSITIVE_FIELDS
        assert "password" in scanner.fields
        assert "id_card" in scanner.fields

    def test_custom_fields(self):
        scanner = RedactionScanner(fields=["PIN"])
        assert scanner.fields == ("pin",)
        text = '{"pin":"1234","password":"x"}'
        assert scanner.redact(text) == '{"pin":"***","password":"x"}'

    def test_fields_deduplicated_in_order(self):
        scanner = RedactionScanner(fields=["b", "A", "a", " B "])
        assert scanner.fields == ("b", "a")

    def test_empty_field_set(self, login_body):
        assert RedactionScanner(fields=[]).redact(login_body) == login_body

    @pytest.mark.parametrize("fields", [[""], [" "], [1], ['a"b'], "password"])
    def test_invalid_fields(self, fields):
        with pytest.raises(ConfigError):
            RedactionScanner(fields=fields)

    def test_repr(self):
        assert repr(RedactionScanner(fields=["pin"])) == "RedactionScanner(fields=['pin'])"


class TestFindSpans:
    def test_span_is_value_interior(self, scanner):
        text = '{"token":"abc"}'
        spans = scanner.find_spans(text, "token")
        assert spans == [Edit(10, 13)]
        assert text[10:13] == "abc"

    def test_no_span_for_unterminated(self, scanner):
        assert scanner.find_spans('{"token":"abc', "token") == []

    def test_field_case_ignored(self, scanner):
        assert scanner.find_spans('{"Token":"a"}', "TOKEN") == [Edit(10, 11)]

    def test_shared_colon_yields_one_span(self, scanner):
        assert len(scanner.find_spans('{"token" "token":"x"}', "token")) == 1


class TestHelpers:
    def test_shadow_copy_keeps_length(self):
        text = "AİB"
        shadow = shadow_copy(text)
        assert len(shadow) == len(text)
        assert shadow == "aİb"

    def test_shadow_copy_plain(self):
        assert shadow_copy("AbC") == "abc"

    def test_apply_edits(self):
        assert apply_edits("0123456789", [Edit(1, 3), Edit(5, 9)]) == "0***34***9"

    def test_apply_no_edits(self):
        assert apply_edits("abc", []) == "abc"

    def test_mask_constant(self):
        assert MASK == "***"


class TestGlobalScanner:
    def test_singleton(self):
        assert get_scanner() is get_scanner()

    def test_module_redact(self, login_body):
        assert redact(login_body) == '{"username":"alice","password":"***"}'
