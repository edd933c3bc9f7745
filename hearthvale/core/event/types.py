"""
Core types for the Hearthvale EventBus.

Purpose
-------
Define the subscription record stored per channel and the helpers that
derive a callback's payload arity.

Design Decisions
----------------
- **Arity instead of static delegate types**: a channel carries 0 to
  `MAX_ARITY` positional arguments. Each subscription records how many it
  accepts, so a publish with N arguments only reaches subscriptions that
  accept N.
- **Variadic callbacks**: a callable taking `*args` accepts any count at or
  above its required positional parameters.
- **Mutable `active` flag**: the bus dispatches from a snapshot, so removal
  marks the record inactive and the snapshot skips it.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

MAX_ARITY = 4

Callback = Callable[..., Any]


def callback_name(callback: Callback) -> str:
    """Readable `module.qualname` for logs and identifiers."""
    target = getattr(callback, "__func__", callback)
    module = getattr(target, "__module__", None) or "unknown"
    qualname = getattr(target, "__qualname__", None) or getattr(
        target, "__name__", type(callback).__name__
    )
    return f"{module}.{qualname}"


def infer_arity(callback: Callback) -> tuple[int, bool]:
    """
    Derive `(arity, variadic)` from a callback's signature.

    `arity` counts required positional parameters; `variadic` is True when
    the callback also takes `*args`.

    Raises
    ------
    TypeError
        If the signature cannot be inspected or has required keyword-only
        parameters (which a positional publish can never satisfy).

    Examples
    --------
    >>> infer_arity(lambda crop, qty: None)
    (2, False)
    >>> infer_arity(lambda *args: None)
    (0, True)
    """
    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError) as exc:
        raise TypeError(
            f"Cannot inspect signature of {callback_name(callback)}; pass arity= explicitly"
        ) from exc

    required = 0
    variadic = False
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            variadic = True
        elif param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            if param.default is inspect.Parameter.empty:
                required += 1
        elif (
            param.kind is inspect.Parameter.KEYWORD_ONLY
            and param.default is inspect.Parameter.empty
        ):
            raise TypeError(
                f"{callback_name(callback)} has required keyword-only parameter "
                f"'{param.name}'; event payloads are positional"
            )
    return required, variadic


@dataclass(eq=False)
class Subscription:
    """
    One callback bound to a channel.

    Attributes
    ----------
    callback:
        Callable invoked with the published positional arguments.
    arity:
        Number of arguments this subscription accepts (minimum, if variadic).
    variadic:
        Accepts any argument count >= `arity`.
    identifier:
        `module.qualname@channel`, used in logs.
    once:
        Removed from the channel before its first invocation.
    active:
        Cleared on removal; a publish snapshot skips inactive entries.
    """

    callback: Callback
    arity: int
    identifier: str
    variadic: bool = False
    once: bool = False
    active: bool = True

    def accepts(self, arg_count: int) -> bool:
        if self.variadic:
            return arg_count >= self.arity
        return arg_count == self.arity

    def matches(self, callback: Callback) -> bool:
        # `==` so bound methods of the same instance compare equal.
        return self.callback == callback

    @classmethod
    def from_callback(
        cls,
        channel: str,
        callback: Callback,
        *,
        arity: Optional[int] = None,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> "Subscription":
        """
        Build a subscription, inferring arity unless given explicitly.

        An explicit arity is taken as exact (never variadic).
        """
        if arity is None:
            arity, variadic = infer_arity(callback)
        else:
            variadic = False

        return cls(
            callback=callback,
            arity=arity,
            identifier=identifier or f"{callback_name(callback)}@{channel}",
            variadic=variadic,
            once=once,
        )
