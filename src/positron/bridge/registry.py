"""Bound function registry — name to uniform invoker, with dispatch.

Mirrors a route table: ``BoundFunction`` is the frozen definition,
``Bridge`` is the lookup table that serves calls.

Every binding, raw or typed, is reduced at registration time to one
invoker with the signature ``(context, seq, req) -> ReturnValue | None``.
Typed invokers close over the compiled parameter shapes and always
return an envelope; raw invokers hand the text to the callback and
return ``None`` (the callback answers through ``View.return_``).

Free-threading safety:
    - BoundFunction is a frozen dataclass (immutable)
    - Bridge._functions is only mutated before ``freeze()``
    - Per-call state lives in ``call_scope``, never on the registry
"""

import inspect
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

from positron._internal.invoke import invoke_sync
from positron.bridge.decode import decode_arguments
from positron.bridge.encode import EncodeError, encode_result
from positron.bridge.envelope import Failure, ReturnValue, Success
from positron.bridge.scope import call_scope, call_var
from positron.bridge.shapes import Shape, compile_shape
from positron.errors import BridgeError, ConfigurationError, ProtocolError

logger = logging.getLogger("positron.bridge")

Invoker: TypeAlias = Callable[[Any, str, str], ReturnValue | None]
Poster: TypeAlias = Callable[[str, ReturnValue], Any]


@dataclass(frozen=True, slots=True)
class BoundFunction:
    """A frozen binding: a callable exposed to script under ``name``.

    ``parameter_shapes`` is empty for raw bindings.
    """

    name: str
    parameter_shapes: tuple[Shape, ...]
    context: Any
    entry_point: Callable[..., Any]
    invoker: Invoker
    raw: bool = False


def failure_for(exc: BaseException) -> Failure:
    """The failure envelope for an exception raised while serving a call."""
    code = getattr(exc, "code", None)
    if not isinstance(code, str) or not code:
        code = type(exc).__name__
    return Failure.from_code(code)


def make_typed_invoker(name: str, func: Callable[..., Any]) -> tuple[tuple[Shape, ...], Invoker]:
    """Compile *func*'s signature into shapes and a typed invoker.

    The first parameter receives the binding's context; every other
    parameter must be positional and is decoded from the argument array.
    Raises ``ConfigurationError`` for signatures the bridge cannot serve.
    """
    try:
        sig = inspect.signature(func, eval_str=True)
    except (NameError, TypeError, ValueError) as exc:
        msg = f"Cannot inspect signature of bound function {name!r}: {exc}"
        raise ConfigurationError(msg) from exc

    params = list(sig.parameters.values())
    if not params:
        msg = f"Bound function {name!r} must take at least the context argument."
        raise ConfigurationError(msg)

    shapes: list[Shape] = []
    for param in params[1:]:
        if param.kind not in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            msg = (
                f"Bound function {name!r}: parameter {param.name!r} must be positional "
                f"(got {param.kind.description})."
            )
            raise ConfigurationError(msg)
        annotation = Any if param.annotation is param.empty else param.annotation
        try:
            shapes.append(compile_shape(annotation))
        except ConfigurationError as exc:
            msg = f"Bound function {name!r}, parameter {param.name!r}: {exc}"
            raise ConfigurationError(msg) from exc

    returns = sig.return_annotation
    void = returns is None or returns is type(None) or returns is sig.empty
    frozen_shapes = tuple(shapes)

    def invoke(context: Any, seq: str, req: str) -> ReturnValue:
        try:
            args = decode_arguments(req, frozen_shapes)
        except ProtocolError as exc:
            logger.warning(
                "%s(seq=%s): argument %s rejected: %s",
                name,
                seq,
                exc.index if exc.index is not None else "-",
                exc.detail or exc.code,
            )
            return failure_for(exc)

        try:
            result = invoke_sync(func, context, *args)
        except BridgeError as exc:
            logger.info("%s(seq=%s) failed: %s", name, seq, exc.code)
            return failure_for(exc)
        except Exception as exc:
            logger.exception("%s(seq=%s) raised", name, seq)
            return failure_for(exc)

        try:
            return Success(encode_result(result, void=void))
        except EncodeError as exc:
            logger.error("%s(seq=%s): cannot encode result: %s", name, seq, exc)
            return Failure.from_code("EncodeError")

    return frozen_shapes, invoke


class Bridge:
    """Registry of bound functions. Frozen once the UI loop starts.

    ``call()`` is the single entry point for front-end invocations; it
    posts exactly one envelope per typed call through *poster*.

    Usage::

        bridge = Bridge(poster=view.return_)
        bridge.bind("add", add, app)
        bridge.freeze()
        bridge.call("add", "7", "[2,3]")   # posts Success("5") to seq "7"
    """

    __slots__ = ("_frozen", "_functions", "_lock", "_poster")

    def __init__(self, poster: Poster | None = None) -> None:
        self._functions: dict[str, BoundFunction] = {}
        self._poster = poster
        self._frozen = False
        self._lock = threading.Lock()

    # -- Registration --

    def bind(self, name: str, func: Callable[..., Any], context: Any = None) -> BoundFunction:
        """Bind a typed function. ``func(context, *args)`` serves the call."""
        shapes, invoker = make_typed_invoker(name, func)
        return self._register(
            BoundFunction(
                name=name,
                parameter_shapes=shapes,
                context=context,
                entry_point=func,
                invoker=invoker,
            )
        )

    def bind_raw(
        self,
        name: str,
        context: Any,
        callback: Callable[[Any, str, str], Any],
    ) -> BoundFunction:
        """Bind a raw callback ``callback(context, seq, req_text)``.

        The callback owns decoding and must answer the call itself.
        """

        def invoke(ctx: Any, seq: str, req: str) -> ReturnValue | None:
            try:
                callback(ctx, seq, req)
            except Exception as exc:
                info = call_var.get(None)
                if info is not None and info.answered:
                    logger.exception("%s(seq=%s) raw callback raised after answering", name, seq)
                    return None
                # The callback never got to answer; fail the call for it
                logger.exception("%s(seq=%s) raw callback raised", name, seq)
                return failure_for(exc)
            return None

        return self._register(
            BoundFunction(
                name=name,
                parameter_shapes=(),
                context=context,
                entry_point=callback,
                invoker=invoke,
                raw=True,
            )
        )

    def _register(self, bound: BoundFunction) -> BoundFunction:
        if not bound.name.isidentifier():
            msg = f"Binding name must be a JavaScript identifier, got {bound.name!r}."
            raise ConfigurationError(msg)
        with self._lock:
            if self._frozen:
                msg = f"Cannot bind {bound.name!r} after the UI loop has started."
                raise ConfigurationError(msg)
            if bound.name in self._functions:
                msg = f"Duplicate binding name: {bound.name!r}"
                raise ConfigurationError(msg)
            self._functions[bound.name] = bound
        return bound

    def freeze(self) -> None:
        """Reject further bindings."""
        with self._lock:
            self._frozen = True

    def set_poster(self, poster: Poster) -> None:
        self._poster = poster

    # -- Lookup --

    def get(self, name: str) -> BoundFunction | None:
        """Look up a binding by name. Returns ``None`` if not found."""
        return self._functions.get(name)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    # -- Dispatch --

    def call(self, name: str, seq: str, req: str) -> ReturnValue | None:
        """Serve one front-end invocation.

        Returns the envelope that was posted, or ``None`` for raw
        bindings (which answer on their own).
        """
        bound = self._functions.get(name)
        if bound is None:
            logger.warning("call to unbound function %r (seq=%s)", name, seq)
            envelope: ReturnValue | None = Failure.from_code("UnknownFunction")
        else:
            with call_scope(name, seq) as info:
                info.scratch["request"] = req
                try:
                    envelope = bound.invoker(bound.context, seq, req)
                except Exception as exc:
                    logger.exception("%s(seq=%s) failed outside its handler", name, seq)
                    envelope = None if info.answered else failure_for(exc)

        if envelope is not None:
            self._post(seq, envelope)
        return envelope

    def _post(self, seq: str, envelope: ReturnValue) -> None:
        if self._poster is None:
            logger.error("no poster installed; dropping response for seq=%s", seq)
            return
        self._poster(seq, envelope)
