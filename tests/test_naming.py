"""
Naming rules: short names, encoded names, conventions, noise words.
"""
from __future__ import annotations


class TestShortName:

    def test_short_function_param_and_variable(self, lint) -> None:
        found = lint("""
            def q(a, count):
                t = a + count
                for i in range(count):
                    t += i
                return [c for c in str(t)]
        """, rule="SHORT_NAME")
        assert sorted(f.symbol for f in found) == ["a", "q", "t"]
        kinds = {f.symbol: f.message.split()[0] for f in found}
        assert kinds == {"q": "Function", "a": "Param", "t": "Var"}

    def test_repeated_assignment_reported_once(self, lint) -> None:
        found = lint("""
            def total(values):
                s = 0
                s = sum(values)
                return s
        """, rule="SHORT_NAME")
        assert len(found) == 1

    def test_loop_counter_allowlist_from_config(self, lint) -> None:
        code = """
            def walk(grid):
                for r in grid:
                    print(r)
        """
        assert len(lint(code, rule="SHORT_NAME")) == 1
        assert lint(code, rule="SHORT_NAME", allowed_short_names=("r",)) == []

    def test_min_length_from_config(self, lint) -> None:
        found = lint("""
            def fmt(val):
                return str(val)
        """, rule="SHORT_NAME", min_name_length=4)
        assert sorted(f.symbol for f in found) == ["fmt", "val"]


class TestEncodedName:

    def test_type_encodings(self, lint) -> None:
        found = lint("""
            str_name = "ada"
            users_list = []

            class IShape:
                pass
        """, rule="ENCODED_NAME")
        assert sorted(f.symbol for f in found) == ["IShape", "str_name", "users_list"]

    def test_plain_names_are_clean(self, lint) -> None:
        assert lint("""
            listing = []
            user_count = 0

            class Image:
                pass
        """, rule="ENCODED_NAME") == []


class TestNamingConvention:

    def test_wrong_case(self, lint) -> None:
        found = lint("""
            class user_account:
                pass

            def ProcessOrder(order):
                return order
        """, rule="NAMING_CONVENTION")
        assert sorted(f.symbol for f in found) == ["ProcessOrder", "user_account"]

    def test_visitor_and_unittest_hooks_exempt(self, lint) -> None:
        assert lint("""
            class Finder(NodeVisitor):
                def __init__(self):
                    self.found = []

                def visit_Name(self, node):
                    self.found.append(node)

            class AccountTest(TestCase):
                def setUp(self):
                    self.account = None
        """, rule="NAMING_CONVENTION") == []


class TestNoiseWordName:

    def test_noise_suffixes(self, lint) -> None:
        found = lint("""
            class OrderManager:
                pass

            class CustomerData:
                pass

            class Data:
                pass

            class Invoice:
                pass
        """, rule="NOISE_WORD_NAME")
        assert sorted(f.symbol for f in found) == ["CustomerData", "OrderManager"]
