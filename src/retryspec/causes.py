"""Root-cause unwrapping used to classify attempt failures.

Only explicit chaining counts as wrapping: ``raise Wrapper(...) from cause``
sets ``__cause__`` and is followed. The implicit ``__context__`` that Python
records while handling another exception is ignored, so an unrelated error
raised inside an ``except`` block keeps its own identity.
"""

from __future__ import annotations

from collections.abc import Iterable


def cause_chain(exc: BaseException) -> tuple[BaseException, ...]:
    chain: list[BaseException] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(current)
        current = current.__cause__
    return tuple(chain)


def root_cause(exc: BaseException) -> BaseException:
    """Return the innermost explicitly chained exception of ``exc``."""
    return cause_chain(exc)[-1]


def matches_any(exc: BaseException, sentinels: Iterable[BaseException]) -> bool:
    """Identity match of the root cause against sentinel exception instances.

    Equal-looking instances or instances of the same type do not match.
    """
    cause = root_cause(exc)
    return any(cause is sentinel for sentinel in sentinels)
