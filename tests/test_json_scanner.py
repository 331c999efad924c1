"""
Unit tests for the JSON array scanner and field extractors.
"""
from iptv_ingest.utils.json_scanner import (
    ArrayScanner,
    FieldError,
    ScanStatus,
    Span,
    extract_bool,
    extract_int,
    extract_raw,
    extract_string,
    locate_value,
    parse_int_text,
    read_string,
)


def spans(text):
    return list(ArrayScanner(text))


class TestArrayScanner:
    """Top-level object span discovery."""

    def test_brace_inside_string_is_not_a_boundary(self):
        text = '[{"name":"a{b}c"}]'
        result = spans(text)
        assert result == [Span(1, len(text) - 1)]
        assert text[result[0].start:result[0].end] == '{"name":"a{b}c"}'

    def test_escaped_quote_does_not_end_string(self):
        text = r'[{"name":"say \"}{\" twice"},{"id":2}]'
        result = spans(text)
        assert len(result) == 2
        assert text[result[1].start:result[1].end] == '{"id":2}'

    def test_escaped_backslash_before_quote_ends_string(self):
        text = r'[{"path":"C:\\"},{"id":3}]'
        result = spans(text)
        assert [text[s.start:s.end] for s in result] == [r'{"path":"C:\\"}', '{"id":3}']

    def test_nested_objects_return_outer_span(self):
        text = '[ {"a":{"b":{"c":1}},"d":[{"e":2}]} , {"f":3} ]'
        result = spans(text)
        assert len(result) == 2
        assert text[result[0].start:result[0].end] == '{"a":{"b":{"c":1}},"d":[{"e":2}]}'

    def test_leading_whitespace_and_bom(self):
        text = '\ufeff \n\t[{"id":1}]'
        scanner = ArrayScanner(text)
        assert len(list(scanner)) == 1
        assert scanner.status is ScanStatus.OBJECTS

    def test_stops_at_closing_bracket(self):
        text = '[{"id":1}] {"id":2}'
        assert len(spans(text)) == 1

    def test_empty_array_is_distinct_from_not_an_array(self):
        empty = ArrayScanner("[]")
        assert list(empty) == []
        assert empty.is_array
        assert empty.status is ScanStatus.EMPTY

        not_array = ArrayScanner('{"id":1}')
        assert list(not_array) == []
        assert not not_array.is_array
        assert not_array.status is ScanStatus.NOT_AN_ARRAY

    def test_blank_body_is_not_an_array(self):
        assert ArrayScanner("   ").status is ScanStatus.NOT_AN_ARRAY

    def test_truncated_trailing_object_is_not_yielded(self):
        scanner = ArrayScanner('[{"id":1},{"id":2')
        assert len(list(scanner)) == 1
        assert scanner.objects_found == 1

    def test_scanner_respects_span(self):
        text = 'xx[{"id":1}]yy'
        assert spans_in(text, Span(2, 12)) == [Span(3, 11)]


def spans_in(text, span):
    return list(ArrayScanner(text, span))


class TestIntExtraction:
    """Integer fields, quoted or not."""

    def test_plain_and_quoted_numbers(self):
        assert extract_int('{"id":5}', "id").value == 5
        assert extract_int('{"id":"5"}', "id").value == 5
        assert extract_int('{"id" :  "5" }', "id").value == 5

    def test_negative_number(self):
        assert extract_int('{"id":-42}', "id").value == -42
        assert extract_int('{"id":"-7"}', "id").value == -7

    def test_non_numeric_string_fails(self):
        result = extract_int('{"id":"abc"}', "id")
        assert not result.ok
        assert result.value is None
        assert result.error is FieldError.MALFORMED

    def test_missing_key_is_absent(self):
        result = extract_int('{"name":"x"}', "id")
        assert result.error is FieldError.ABSENT

    def test_overflow(self):
        assert extract_int('{"id":2147483647}', "id").value == 2147483647
        assert extract_int('{"id":2147483648}', "id").error is FieldError.OVERFLOW
        assert extract_int('{"id":-2147483649}', "id").error is FieldError.OVERFLOW
        assert extract_int('{"id":99999999999999999999999}', "id").error is FieldError.OVERFLOW

    def test_leading_zeros_are_not_overflow(self):
        assert extract_int('{"id":"000000000000012"}', "id").value == 12

    def test_get_default(self):
        assert extract_int('{"id":null}', "id").get(0) == 0

    def test_extraction_limited_to_span(self):
        text = '[{"a":1},{"id":9}]'
        first, second = spans(text)
        assert not extract_int(text, "id", first).ok
        assert extract_int(text, "id", second).value == 9


class TestParseIntText:
    """Whole-string integer parsing."""

    def test_valid(self):
        assert parse_int_text("101").value == 101

    def test_trailing_garbage(self):
        assert parse_int_text("101a").error is FieldError.MALFORMED

    def test_empty_and_none(self):
        assert parse_int_text("").error is FieldError.ABSENT
        assert parse_int_text(None).error is FieldError.ABSENT

    def test_overflow(self):
        assert parse_int_text("4294967296").error is FieldError.OVERFLOW


class TestBoolExtraction:
    """Boolean literals and 1/0."""

    def test_literals(self):
        assert extract_bool('{"enabled":true}', "enabled").value is True
        assert extract_bool('{"enabled": false}', "enabled").value is False

    def test_digits(self):
        assert extract_bool('{"enabled":1}', "enabled").value is True
        assert extract_bool('{"enabled":0}', "enabled").value is False

    def test_other_values_fail(self):
        assert not extract_bool('{"enabled":"yes"}', "enabled").ok
        assert not extract_bool('{"enabled":null}', "enabled").ok

    def test_false_is_kept_by_get(self):
        assert extract_bool('{"enabled":false}', "enabled").get(True) is False


class TestStringExtraction:
    """String decoding, including escapes and surrogate pairs."""

    def test_plain(self):
        assert extract_string('{"name":"BBC1"}', "name").value == "BBC1"

    def test_simple_escapes(self):
        text = r'{"s":"a\"b\\c\/d\be\ff\ng\rh\ti"}'
        assert extract_string(text, "s").value == 'a"b\\c/d\be\ff\ng\rh\ti'

    def test_unknown_escape_keeps_following_character(self):
        assert extract_string(r'{"s":"\q\x"}', "s").value == "qx"

    def test_bmp_escape(self):
        value = extract_string(r'{"s":"caf\u00e9"}', "s").value
        assert value == "café"
        assert value[-1].encode("utf-8") == b"\xc3\xa9"

    def test_surrogate_pair(self):
        value = extract_string(r'{"s":"\uD83D\uDE00"}', "s").value
        assert value == "\U0001F600"
        assert value.encode("utf-8") == b"\xf0\x9f\x98\x80"

    def test_lowercase_hex(self):
        assert extract_string(r'{"s":"\ud83d\ude00"}', "s").value == "\U0001F600"

    def test_lone_high_surrogate(self):
        value = extract_string(r'{"s":"\uD800"}', "s").value
        assert value == "\ufffd"
        assert value.encode("utf-8") == b"\xef\xbf\xbd"

    def test_high_surrogate_followed_by_non_low(self):
        value = extract_string(r'{"s":"\uD800\u0041"}', "s").value
        assert value == "\ufffdA"

    def test_lone_low_surrogate(self):
        assert extract_string(r'{"s":"x\uDC00y"}', "s").value == "x\ufffdy"

    def test_malformed_unicode_escape_is_literal_u(self):
        assert extract_string(r'{"s":"\uZZ12"}', "s").value == "uZZ12"

    def test_raw_non_ascii_passes_through(self):
        assert extract_string('{"s":"Åland ☃"}', "s").value == "Åland ☃"

    def test_unterminated_string_fails(self):
        result = extract_string('{"s":"never closed', "s")
        assert not result.ok
        assert result.value is None

    def test_non_string_value_fails(self):
        assert extract_string('{"s":12}', "s").error is FieldError.MALFORMED

    def test_position_after_closing_quote(self):
        result = read_string('"ab" ,', 0)
        assert result.value == "ab"
        assert result.position == 4


class TestKeyLookup:
    """Strict and legacy key matching."""

    def test_strict_skips_value_that_spells_the_key(self):
        text = '{"label":"id","id":7}'
        assert extract_int(text, "id").value == 7

    def test_legacy_substring_search_takes_first_occurrence(self):
        text = '{"label":"id","num":7}'
        assert extract_int(text, "id", strict=False).value == 7
        assert extract_int(text, "id").error is FieldError.ABSENT

    def test_prefix_key_is_not_confused(self):
        text = '{"video_id":1,"id":2}'
        assert extract_int(text, "id").value == 2

    def test_whitespace_before_colon(self):
        assert locate_value('{"id"  :  3}', "id") == 10


class TestRawExtraction:
    """Nested object/array spans."""

    def test_nested_object(self):
        text = '{"id":1,"custom_properties":{"program":{"title":"A}"}},"x":2}'
        result = extract_raw(text, "custom_properties")
        assert text[result.value.start:result.value.end] == '{"program":{"title":"A}"}}'

    def test_nested_array(self):
        text = '{"days_of_week":[0, 2, 4],"name":"x"}'
        result = extract_raw(text, "days_of_week")
        assert text[result.value.start:result.value.end] == "[0, 2, 4]"

    def test_scalar_is_malformed(self):
        assert extract_raw('{"a":1}', "a").error is FieldError.MALFORMED

    def test_unbalanced_is_malformed(self):
        assert extract_raw('{"a":{"b":1', "a").error is FieldError.MALFORMED

    def test_second_pass_within_raw_span(self):
        text = '{"title":"outer","custom_properties":{"program":{"title":"inner"}}}'
        props = extract_raw(text, "custom_properties").value
        program = extract_raw(text, "program", props).value
        assert extract_string(text, "title", program).value == "inner"
