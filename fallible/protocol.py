from __future__ import annotations
from collections.abc import Callable, Coroutine, Generator
import functools
import inspect
from typing import Any, Generic, TypeVar

from .errors import ContractViolation
from .logging import logger
from .result import ErrorCode, Failure, Ok, Outcome, Result


T = TypeVar("T")

log = logger()


FAULT: ErrorCode = 1


class Forward(BaseException):
    """Signal carrying an error code out of an await point.

    Yielded by `Handle.__await__` inside coroutine bodies and raised by `forward`
    inside plain bodies. It derives from `BaseException` so that an
    `except Exception` clause in a body never intercepts it.
    """
    def __init__(self, code: ErrorCode):
        super().__init__(code)
        self.code = code


class Handle(Generic[T]):
    """Terminal handle of a fallible computation.

    The handle shares the computation's `Result` cell. Awaiting it from another
    fallible body either evaluates to the value or forwards the error code,
    terminating the awaiting body.
    """
    __slots__ = ("_result",)

    def __init__(self, result: Result[T]):
        self._result = result

    @property
    def result(self) -> Result[T]:
        return self._result

    @property
    def outcome(self) -> Outcome[T]:
        return self._result.outcome

    def is_success(self) -> bool:
        return self._result.is_success()

    def value(self) -> T:
        return self._result.value()

    def error_code(self) -> ErrorCode:
        return self._result.error_code()

    def __bool__(self):
        return self.is_success()

    def __repr__(self):
        return f"Handle({self._result.outcome!r})"

    def __await__(self) -> Generator[Forward, None, T]:
        if not self._result.is_success():
            yield Forward(self._result.error_code())
            raise ContractViolation("a forwarding await point was resumed")
        return self._result.value()


def forward(handle: Handle[T]) -> T:
    """Unwrap `handle`, or bail out of the enclosing `@fallible` function with
    its error code. This is the `await` of plain (non-async) bodies.

    Unlike `await`, the bail is an exception raised inside the body, so an
    `except BaseException` clause or a bare `except:` around `forward` does
    intercept it. `except Exception` does not.
    """
    if handle.is_success():
        return handle.value()
    raise Forward(handle.error_code())


def fault_code(exc: Exception) -> ErrorCode:
    if isinstance(exc, OSError) and exc.errno is not None:
        return exc.errno
    return FAULT


def _adopt(value: Any) -> Outcome[Any]:
    match value:
        case Ok() | Failure():
            return value
        case Handle():
            return value.outcome
        case _:
            return Ok(value)


def _drive(name: str, coroutine: Coroutine[Any, Any, Any]) -> Outcome[Any]:
    try:
        signal = coroutine.send(None)
    except StopIteration as stop:
        return _adopt(stop.value)

    if not isinstance(signal, Forward):
        coroutine.close()
        raise ContractViolation(
            f"`{name}` awaited {signal!r}; fallible computations can only await "
            f"other fallible computations")

    # the first forwarded code wins over anything raised while unwinding
    try:
        coroutine.close()
    except ContractViolation:
        raise
    except (Exception, Forward) as e:
        log.warning("cleanup of `%s` failed while forwarding error code %d: %r",
                    name, signal.code, e)
    log.debug("`%s` forwards error code %d", name, signal.code)
    return Failure(signal.code)


def _first_forward(exc: BaseException | None) -> Forward | None:
    """Earliest `Forward` in the implicit exception context chain of `exc`."""
    first = None
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, Forward):
            first = exc
        exc = exc.__context__
    return first


def _execute(name: str, body: Callable[..., Any], args, kwargs) -> Outcome[Any]:
    try:
        value = body(*args, **kwargs)
        if inspect.iscoroutine(value):
            return _drive(name, value)
        return _adopt(value)

    except Forward as f:
        first = _first_forward(f) or f
        log.debug("`%s` forwards error code %d", name, first.code)
        return Failure(first.code)

    except ContractViolation:
        raise

    except Exception as e:
        if (first := _first_forward(e.__context__)) is not None:
            log.warning("cleanup of `%s` failed while forwarding error code %d: %r",
                        name, first.code, e)
            return Failure(first.code)
        code = fault_code(e)
        log.error("unexpected fault in `%s`, mapped to error code %d: %s",
                  name, code, e, exc_info=True)
        return Failure(code)


def fallible(body: Callable[..., Any]) -> Callable[..., Handle[T]]:
    """Turn `body` into a fallible computation factory.

    Calling the factory runs `body` at once and returns a terminal `Handle`.
    The body may be a coroutine function, in which case it can `await` other
    handles, or a plain function using `forward`. Whatever the body returns
    decides the outcome: a plain value succeeds, `Ok` and `Failure` are taken
    as is, and a returned `Handle` hands over its own outcome.

    When an awaited handle failed, the body is abandoned on the spot (`finally`
    blocks and context managers still exit) and the same error code becomes
    the outcome of this computation. Unexpected exceptions are mapped to an
    error code by `fault_code`; a `ContractViolation` propagates.
    """
    name = getattr(body, "__qualname__", repr(body))

    @functools.wraps(body)
    def run(*args, **kwargs) -> Handle[T]:
        result: Result[T] = Result()
        result.settle(_execute(name, body, args, kwargs))
        return Handle(result)

    return run


@fallible
def pure(value):
    return Ok(value)


@fallible
def fail(code: ErrorCode):
    return Failure(code)


@fallible
def gather(*handles: Handle[Any]) -> list[Any]:
    return [forward(h) for h in handles]
