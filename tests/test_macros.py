"""Tests for ${VAR} macro expansion."""

from s3publisher.utils.macros import replace_macro


class TestReplaceMacro:
    """Test replace_macro function."""

    def test_braced_variable(self):
        assert replace_macro("logs-${BUILD_ID}", {"BUILD_ID": "42"}) == "logs-42"

    def test_bare_variable(self):
        assert replace_macro("$OUT_DIR/*.log", {"OUT_DIR": "build/out"}) == "build/out/*.log"

    def test_multiple_variables(self):
        env = {"OUT_DIR": "build/out", "EXT": "log"}
        assert replace_macro("${OUT_DIR}/*.${EXT}", env) == "build/out/*.log"

    def test_undefined_variable_left_as_is(self):
        assert replace_macro("${NOPE}/x-$ALSO_NOPE", {}) == "${NOPE}/x-$ALSO_NOPE"

    def test_empty_value_is_substituted(self):
        assert replace_macro("a${EMPTY}b", {"EMPTY": ""}) == "ab"

    def test_dotted_names_in_braces(self):
        assert replace_macro("${build.id}", {"build.id": "7"}) == "7"

    def test_values_are_not_expanded_again(self):
        env = {"A": "${B}", "B": "nested"}
        assert replace_macro("${A}", env) == "${B}"

    def test_bare_name_stops_at_non_word_character(self):
        assert replace_macro("$NAME-suffix", {"NAME": "app"}) == "app-suffix"

    def test_lone_dollar_is_kept(self):
        assert replace_macro("cost $ 5", {}) == "cost $ 5"

    def test_none_passes_through(self):
        assert replace_macro(None, {"A": "1"}) is None

    def test_text_without_macros_unchanged(self):
        assert replace_macro("out/**/*.zip", {"out": "x"}) == "out/**/*.zip"
