"""Tests for pubgate.core.result module."""

import pytest

from pubgate.core.result import Err, Ok, Result


class TestOk:
    def test_unwrap(self) -> None:
        assert Ok("1.2.3").unwrap() == "1.2.3"

    def test_equality(self) -> None:
        assert Ok(1) == Ok(1)
        assert Ok(1) != Err(1)

    def test_repr(self) -> None:
        assert repr(Ok("x")) == "Ok('x')"


class TestErr:
    def test_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err"):
            Err("registry down").unwrap()

    def test_frozen(self) -> None:
        err = Err("boom")
        with pytest.raises(AttributeError):
            err.error = "other"  # type: ignore[misc]


def test_pattern_matching() -> None:
    def describe(result: Result[str, str]) -> str:
        match result:
            case Ok(value):
                return f"ok {value}"
            case Err(error):
                return f"err {error}"

    assert describe(Ok("a")) == "ok a"
    assert describe(Err("b")) == "err b"
