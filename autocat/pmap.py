"""Bounded, order-preserving concurrent map over a thread pool.

``p_map`` runs a mapper over an iterable with at most ``concurrency`` calls in
flight and returns results in input order. ``p_map_settled`` is the
``allSettled`` flavour used by the recategorisation orchestrator: every item
runs to completion and each outcome is reported individually, so one failing
store write never aborts its batch.

Not covered: async iterables, timeouts, process pools.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Generic, TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


class _Skip:
    __slots__ = ()

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return "p_map_skip"


# Mappers may ``return p_map_skip`` to drop an element from ``p_map`` output.
p_map_skip: object = _Skip()


@dataclass(frozen=True, slots=True)
class Settled(Generic[OutT]):
    """Outcome of one mapper call: exactly one of ``value``/``error`` is meaningful."""

    value: OutT | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _run_window(
    items: Iterator[tuple[int, InT]],
    mapper: Callable[[InT], OutT],
    concurrency: int,
    on_done: Callable[[int, Future], None],
) -> int:
    """Drive ``mapper`` over ``items`` keeping ``concurrency`` calls in flight.

    ``on_done`` sees every finished future with its input index; raising from
    it shuts the pool down without starting queued work. Returns the number of
    submitted items.
    """

    submitted = 0
    index_of: dict[Future, int] = {}

    with ThreadPoolExecutor(max_workers=concurrency) as pool:

        def _submit() -> Future | None:
            nonlocal submitted
            try:
                idx, item = next(items)
            except StopIteration:
                return None
            fut = pool.submit(mapper, item)
            index_of[fut] = idx
            submitted += 1
            return fut

        active: set[Future] = set()
        for _ in range(concurrency):
            fut = _submit()
            if fut is None:
                break
            active.add(fut)

        while active:
            done, active = wait(active, return_when=FIRST_COMPLETED)
            for fut in done:
                try:
                    on_done(index_of.pop(fut), fut)
                except BaseException:
                    pool.shutdown(wait=False, cancel_futures=True)
                    raise
            for _ in range(len(done)):
                fut = _submit()
                if fut is None:
                    break
                active.add(fut)

    return submitted


def _check_concurrency(concurrency: int) -> None:
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")


def p_map(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT | object],
    *,
    concurrency: int,
    stop_on_error: bool = True,
) -> list[OutT]:
    """Map ``iterable`` through ``mapper`` with bounded concurrency.

    - Output preserves input order, minus items that returned ``p_map_skip``.
    - ``stop_on_error=True``: the first mapper error propagates and queued work
      is cancelled.
    - ``stop_on_error=False``: all mappers finish, then an ``ExceptionGroup``
      of every failure is raised.
    """

    _check_concurrency(concurrency)

    results: dict[int, object] = {}
    errors: list[Exception] = []

    def _collect(idx: int, fut: Future) -> None:
        try:
            results[idx] = fut.result()
        except Exception as e:
            if stop_on_error:
                raise
            errors.append(e)

    submitted = _run_window(enumerate(iterable), mapper, concurrency, _collect)

    if errors:
        raise ExceptionGroup("p_map: one or more mapper calls failed", errors)

    out: list[OutT] = []
    for i in range(submitted):
        val = results.get(i, p_map_skip)
        if val is p_map_skip:
            continue
        out.append(val)  # type: ignore[arg-type]
    return out


def p_map_settled(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT],
    *,
    concurrency: int,
) -> list[Settled[OutT]]:
    """Like ``p_map`` but never raises for mapper errors.

    Returns one :class:`Settled` per input item, in input order.
    """

    _check_concurrency(concurrency)

    outcomes: dict[int, Settled[OutT]] = {}

    def _collect(idx: int, fut: Future) -> None:
        try:
            outcomes[idx] = Settled(value=fut.result())
        except Exception as e:  # noqa: BLE001
            outcomes[idx] = Settled(error=e)

    submitted = _run_window(enumerate(iterable), mapper, concurrency, _collect)
    return [outcomes[i] for i in range(submitted)]


__all__ = ["Settled", "p_map", "p_map_settled", "p_map_skip"]
