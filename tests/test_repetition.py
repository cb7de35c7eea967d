import pytest
from combparse import Result, match, digit, digits, letters, alphanumerics, success, eof, optional, many0, many1, take, take_between


class TestMany0():
    def test_one(self):
        assert many0(match("a"))("a") == Result.matched("a", "")

    def test_lots(self):
        assert many0(match("a"))("aaaaaaaaaaaaaa") == Result.matched("aaaaaaaaaaaaaa", "")

    def test_residual(self):
        assert many0(match("a"))("aaaaaaaaaaaaaaasdfasdfs") == Result.matched("aaaaaaaaaaaaaaa", "sdfasdfs")

    def test_zero_matches(self):
        """ Matching nothing is still a success. """
        assert many0(match("a"))("dfsdfs") == Result.matched("", "dfsdfs")

    def test_empty_input(self):
        assert many0(match("a"))("") == Result.matched("", "")

    def test_multi_character_parser(self):
        assert many0(match("ab"))("ababa") == Result.matched("abab", "a")

    @pytest.mark.parametrize("parser", [success, eof, optional("a"), match(""), many0(digit)])
    def test_rejects_zero_width_parsers(self, parser):
        """ Parsers that can match without consuming anything would loop forever. """
        with pytest.raises(ValueError):
            many0(parser)

    def test_stops_on_zero_width_success(self):
        """ A parser that only matches nothing on some inputs ends the loop there instead of spinning. """
        def dot_or_nothing_before_x(src: str) -> Result:
            if src.startswith("."):
                return Result.matched(".", src[1:])
            if src.startswith("x"):
                return Result.matched("", src)
            return Result.failed(src)
        assert many0(dot_or_nothing_before_x)("..x") == Result.matched("..", "x")


class TestMany1():
    def test_one(self):
        assert many1(match("a"))("ab") == Result.matched("a", "b")

    def test_lots(self):
        assert many1(match("a"))("aaab") == Result.matched("aaa", "b")

    def test_zero_matches(self):
        assert many1(match("a"))("bbb") == Result.failed("bbb")

    def test_rejects_zero_width_parsers(self):
        with pytest.raises(ValueError):
            many1(success)


class TestDerivedParsers():
    def test_digits(self):
        assert digits("11") == Result.matched("11", "")
        assert digits("0") == Result.matched("0", "")
        assert digits("") == Result.failed("")

    def test_letters(self):
        assert letters("abc123") == Result.matched("abc", "123")

    def test_alphanumerics(self):
        assert alphanumerics("a1b2_c") == Result.matched("a1b2", "_c")


class TestTake():
    def test_one(self):
        assert take(1, match("4321"))("4321asdfasdf") == Result.matched("4321", "asdfasdf")

    def test_two(self):
        assert take(2, match("a"))("aa").success

    def test_lots(self):
        assert take(11, match("a"))("aaaaaaaaaaa").success

    def test_stops_at_count(self):
        """ Doesn't take more than asked even if it could. """
        assert take(3, match("a"))("aaaaaaaaaaa") == Result.matched("aaa", "aaaaaaaa")

    def test_not_enough(self):
        assert take(3, match("a"))("aab") == Result.failed("aab")

    def test_zero(self):
        assert take(0, match("a"))("aaa") == Result.matched("", "aaa")


class TestTakeBetween():
    def test_one(self):
        assert take_between(1, 1, match("4321"))("4321asdfasdf") == Result.matched("4321", "asdfasdf")

    def test_three_of_many(self):
        assert take_between(3, 3, match("a"))("aaaaaaaaaaa") == Result.matched("aaa", "aaaaaaaa")

    @pytest.mark.parametrize("src, value, residual", [
        ("1", "1", ""),
        ("12", "12", ""),
        ("123", "12", "3"),
        ("1,", "1", ","),
    ])
    def test_range(self, src, value, residual):
        assert take_between(1, 2, digit)(src) == Result.matched(value, residual)

    def test_below_minimum(self):
        assert take_between(2, 4, digit)("1a") == Result.failed("1a")

    def test_zero_minimum(self):
        assert take_between(0, 2, digit)("abc") == Result.matched("", "abc")

    def test_invalid_range_never_calls_parser(self):
        """ With max < min the parser fails straight away without trying anything. """
        calls: list[str] = []
        def spy(src: str) -> Result:
            calls.append(src)
            return digit(src)
        parser = take_between(3, 1, spy)
        assert parser("1234") == Result.failed("1234")
        assert calls == []

    def test_negative_minimum(self):
        """ A negative minimum is always met, so it works like 0. """
        assert take_between(-1, 2, digit)("12a") == Result.matched("12", "a")
        assert take_between(-1, 2, digit)("abc") == Result.matched("", "abc")

    def test_negative_range_fails(self):
        """ max < min still wins when both are negative: no exception, just a failure. """
        assert take_between(-1, -2, digit)("1") == Result.failed("1")

    def test_zero_width_parser_counts_up_to_maximum(self):
        """ A zero-width match would repeat identically, so it fills the remaining count. """
        assert take(3, success)("abc") == Result.matched("", "abc")
        assert take(2, optional(","))("x") == Result.matched("", "x")

    def test_zero_width_after_matches(self):
        assert take_between(2, 4, optional("a"))("ab") == Result.matched("a", "b")
