import asyncio
import errno

import pytest
from hypothesis import given
from hypothesis.strategies import integers

from fallible import (
    FAULT, ContractViolation, Failure, Handle, Ok, Tag,
    fail, fallible, forward, gather, pure,
)


def chain(n: int, fail_at: int | None, code: int, counter: list[int]) -> Handle:
    """Build stages 1..n, where stage k awaits stage k-1 and then bumps the
    counter. Stage `fail_at` fails with `code` instead of bumping."""
    @fallible
    async def stage(k: int):
        value = 0 if k == 1 else await stage(k - 1)
        if k == fail_at:
            return Failure(code)
        counter.append(k)
        return value + 1

    return stage(n)


@given(integers(min_value=1, max_value=50))
def test_successful_chain(n):
    counter = []
    h = chain(n, None, 0, counter)
    assert h.is_success()
    assert h.value() == n
    assert counter == list(range(1, n + 1))


@given(integers(min_value=1, max_value=30), integers(min_value=1), integers(min_value=1))
def test_short_circuit(n, k, code):
    k = (k - 1) % n + 1
    counter = []
    h = chain(n, k, code, counter)
    assert not h.is_success()
    assert h.error_code() == code
    assert counter == list(range(1, k))


def test_eager_execution():
    log = []

    @fallible
    def f():
        log.append("ran")
        return 3

    h = f()
    assert log == ["ran"]
    assert h.result.tag == Tag.SUCCESS


def test_no_double_forward():
    evaluated = []

    @fallible
    async def first():
        evaluated.append("first")
        return Failure(5)

    @fallible
    async def second():
        evaluated.append("second")
        return 1

    @fallible
    async def body():
        a = await first()
        b = await second()
        return a + b

    h = body()
    assert h.error_code() == 5
    assert evaluated == ["first"]


def test_forward_not_catchable():
    @fallible
    async def body():
        try:
            await fail(7)
        except Exception:
            return "recovered"
        return "continued"

    assert body().error_code() == 7


def test_cleanup_runs_on_forward():
    released = []

    @fallible
    async def body():
        try:
            await fail(errno.EIO)
        finally:
            released.append(True)

    assert body().error_code() == errno.EIO
    assert released == [True]


def test_failing_cleanup_await_keeps_first_code():
    @fallible
    async def body():
        try:
            await fail(5)
        finally:
            await fail(9)

    assert body().error_code() == 5


def test_failing_cleanup_forward_keeps_first_code():
    @fallible
    async def async_body():
        try:
            await fail(5)
        finally:
            forward(fail(9))

    @fallible
    def plain_body():
        try:
            forward(fail(5))
        finally:
            forward(fail(9))

    assert async_body().error_code() == 5
    assert plain_body().error_code() == 5


def test_failing_cleanup_exception_keeps_first_code():
    @fallible
    def plain_body():
        try:
            forward(fail(errno.EIO))
        finally:
            raise OSError(errno.ENOSPC, "No space left on device")

    assert plain_body().error_code() == errno.EIO


def test_plain_forward_passes_except_exception():
    @fallible
    def body():
        try:
            forward(fail(7))
        except Exception:
            return "recovered"
        return "continued"

    assert body().error_code() == 7


def test_plain_forward():
    @fallible
    def body(x):
        a = forward(pure(x))
        b = forward(fail(9))
        return a + b

    h = body(1)
    assert not h and h.error_code() == 9

    @fallible
    def ok_body(x):
        return forward(pure(x)) * 2

    assert ok_body(21).value() == 42


def test_return_forms():
    @fallible
    def explicit_ok():
        return Ok(1)

    @fallible
    def tail():
        return fail(4)

    @fallible
    async def tail_success():
        return pure("x")

    assert explicit_ok().value() == 1
    assert tail().error_code() == 4
    assert tail_success().value() == "x"


def test_await_twice():
    h = pure(10)

    @fallible
    async def body():
        return await h + await h

    assert body().value() == 20
    assert h.value() == 10


def test_gather():
    assert gather(pure(1), pure(2), pure(3)).value() == [1, 2, 3]
    assert gather(pure(1), fail(3), fail(4)).error_code() == 3
    assert gather().value() == []


def test_fault_mapping(caplog):
    @fallible
    def broken():
        raise KeyError("missing")

    @fallible
    async def os_broken():
        raise PermissionError(errno.EACCES, "Permission denied")

    h = broken()
    assert h.error_code() == FAULT
    assert "broken" in caplog.text
    assert os_broken().error_code() == errno.EACCES


def test_contract_violations_propagate():
    @fallible
    def reads_failed():
        return fail(2).value()

    with pytest.raises(ContractViolation):
        reads_failed()

    @fallible
    async def foreign_await():
        await asyncio.sleep(0)

    with pytest.raises(ContractViolation):
        foreign_await()

    with pytest.raises(ContractViolation):
        fail("ENOENT")


def test_nested_helper_coroutine():
    async def helper(h):
        return await h + 1

    @fallible
    async def body(h):
        return await helper(h)

    assert body(pure(1)).value() == 2
    assert body(fail(8)).error_code() == 8
