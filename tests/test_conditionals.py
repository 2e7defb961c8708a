"""
Conditional rules: boolean comparisons, magic literals, negative
conditionals, redundant else, boolean-literal returns.
"""
from __future__ import annotations


class TestBoolCompare:

    def test_equality_to_true(self, lint) -> None:
        found = lint("""
            def check(ready):
                if ready == True:
                    return 1
        """, rule="BOOL_COMPARE")
        assert len(found) == 1
        assert found[0].line == 3
        assert "== True" in found[0].message
        assert found[0].suggested_fix == "Use the value directly."

    def test_identity_to_false_suggests_not(self, lint) -> None:
        found = lint("""
            def check(ready):
                return ready is False
        """, rule="BOOL_COMPARE")
        assert len(found) == 1
        assert "not" in found[0].suggested_fix

    def test_plain_truthiness_is_clean(self, lint) -> None:
        assert lint("""
            def check(ready, count):
                if ready and count == 1:
                    return count
        """, rule="BOOL_COMPARE") == []


class TestMagicNumber:

    def test_literals_in_logic(self, lint) -> None:
        found = lint("""
            def price(total):
                if total > 100:
                    return total * 0.9
                return total
        """, rule="MAGIC_NUMBER")
        assert sorted(f.symbol for f in found) == ["0.9", "100"]
        assert all(f.severity == "WARN" for f in found)

    def test_allowed_numbers_are_clean(self, lint) -> None:
        assert lint("""
            def step(count):
                if count > 0:
                    count += 1
                return count * 2 - 1
        """, rule="MAGIC_NUMBER") == []

    def test_constant_definitions_are_clean(self, lint) -> None:
        assert lint("""
            SECONDS_PER_DAY = 60 * 60 * 24
            _LIMIT: int = 10 + 5
        """, rule="MAGIC_NUMBER") == []

    def test_constant_augmented_assignment_is_clean(self, lint) -> None:
        found = lint("""
            TOTAL = 0
            TOTAL += 30

            def grow(total):
                total += 30
                return total
        """, rule="MAGIC_NUMBER")
        assert [f.line for f in found] == [6]

    def test_negative_literal_keeps_sign(self, lint) -> None:
        found = lint("""
            def cooled(delta):
                return delta < -5
        """, rule="MAGIC_NUMBER")
        assert [f.symbol for f in found] == ["-5"]

    def test_allowed_numbers_from_config(self, lint) -> None:
        assert lint("""
            def percent(part, whole):
                return part / whole * 100
        """, rule="MAGIC_NUMBER", allowed_numbers=(0, 1, 100)) == []


class TestMagicString:

    def test_compared_strings(self, lint) -> None:
        found = lint("""
            def describe(status):
                if status == "active":
                    return 1
                if status in ("paused", "stopped"):
                    return 2
                return 0
        """, rule="MAGIC_STRING")
        assert sorted(f.symbol for f in found) == ["'active'", "'paused'", "'stopped'"]
        assert all(f.severity == "INFO" for f in found)

    def test_main_guard_and_named_constants_are_clean(self, lint) -> None:
        assert lint("""
            STATUS_ACTIVE = "active"

            def describe(status):
                return status == STATUS_ACTIVE or status == ""

            if __name__ == "__main__":
                describe(STATUS_ACTIVE)
        """, rule="MAGIC_STRING") == []


class TestNegativeConditional:

    def test_negated_test_with_else(self, lint) -> None:
        found = lint("""
            def label(user):
                if not user.active:
                    text = "inactive"
                else:
                    text = "active"
                return text
        """, rule="NEGATIVE_CONDITIONAL")
        assert len(found) == 1
        assert "not user.active" in found[0].message

    def test_negated_test_without_else_is_clean(self, lint) -> None:
        assert lint("""
            def save(user):
                if not user.active:
                    raise ValueError(user)
                user.save()
        """, rule="NEGATIVE_CONDITIONAL") == []

    def test_double_negative_name(self, lint) -> None:
        found = lint("""
            def usable(item):
                if not is_not_valid(item):
                    return item
                return None
        """, rule="NEGATIVE_CONDITIONAL")
        assert len(found) == 1
        assert found[0].symbol == "is_not_valid"


class TestElseAfterReturn:

    def test_else_after_raise(self, lint) -> None:
        found = lint("""
            def value_of(node):
                if node is None:
                    raise ValueError("node")
                else:
                    return node.value
        """, rule="ELSE_AFTER_RETURN")
        assert len(found) == 1
        assert "'raise'" in found[0].message

    def test_guard_clause_is_clean(self, lint) -> None:
        assert lint("""
            def value_of(node):
                if node is None:
                    raise ValueError("node")
                return node.value
        """, rule="ELSE_AFTER_RETURN") == []

    def test_elif_chain_without_else_is_clean(self, lint) -> None:
        assert lint("""
            def sign(number):
                if number > 0:
                    return "positive"
                elif number < 0:
                    return "negative"
                return "zero"
        """, rule="ELSE_AFTER_RETURN") == []


class TestReturnBoolLiteral:

    def test_if_else_form(self, lint) -> None:
        found = lint("""
            def is_adult(age):
                if age >= ADULT_AGE:
                    return True
                else:
                    return False
        """, rule="RETURN_BOOL_LITERAL")
        assert len(found) == 1
        assert "age >= ADULT_AGE" in found[0].message

    def test_fallthrough_form(self, lint) -> None:
        found = lint("""
            def is_empty(items):
                if len(items) == 0:
                    return False
                return True
        """, rule="RETURN_BOOL_LITERAL")
        assert len(found) == 1

    def test_same_literal_is_clean(self, lint) -> None:
        assert lint("""
            def always(flag):
                if flag:
                    return True
                return True
        """, rule="RETURN_BOOL_LITERAL") == []
