"""
Context - the state of one client, and the controller that bootstraps it.

A Context owns the transport, the algorithm catalog, the class registry,
the Algorithms namespace and the initialization state. The package-level
functions (ee_do.initialize, ee_do.reset, ...) operate on a default
Context created at import time; independent Contexts can be created with
Context.create() for tests or for talking to several servers.

Bootstrap sequence:
    initialize() -> Transport.configure -> FunctionRegistry.load_signatures
      -> proxy type initialize() hooks -> ClassGenerator.run
      -> UnboundMethodBinder.run -> READY -> queued success callbacks
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from .algorithms import Namespace, UnboundMethodBinder
from .classes import ClassRegistry, TypeClassifier
from .errors import HookFailure, UsageError
from .function import ApiFunction
from .generator import ClassGenerator
from .promote import TypePromoter
from .proxies import HAND_WRITTEN_TYPES
from .registry import FunctionRegistry
from .transport import Transport
from .types import CallbackQueues, InitState

__all__ = ["Context", "InitializationController"]

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[], Any]
ErrorCallback = Callable[[BaseException], Any]


class InitializationController:
    """
    Initialization state machine of a Context.

    If initialize() is first called asynchronously (with a success
    callback), later asynchronous calls add their callbacks to a queue and
    all of them run together when the load completes.

    A synchronous call made while an asynchronous load is in flight runs
    its own load inline and resolves every queued callback before
    returning. The in-flight load's completion is then ignored.

    Success callbacks run in the order they were queued. If one raises, the
    exception propagates out of the completing call and the callbacks behind
    it stay queued: they run when a later initialize() with a new endpoint
    completes, or are dropped by reset().
    """

    def __init__(self, context: Context) -> None:
        self._context = context
        self._state = InitState.NOT_READY
        self._callbacks = CallbackQueues()

    @property
    def state(self) -> InitState:
        return self._state

    def ready(self) -> InitState:
        """The initialization status."""
        return self._state

    def initialize(
        self,
        base_url: str | None = None,
        tile_url: str | None = None,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        """
        Initialize the context.

        Args:
            base_url: The REST API endpoint
            tile_url: The tile endpoint
            on_success: Called once initialization succeeds. When given,
                initialization is asynchronous and requires a running
                event loop; otherwise it blocks.
            on_error: Called with the error if asynchronous initialization
                fails. Only valid together with on_success.

        Raises:
            UsageError: on_error without on_success, or asynchronous mode
                without a running event loop
            LoadFailure: Synchronous mode, the catalog could not be loaded
            HookFailure: Synchronous mode, a bootstrap hook failed
        """
        if self._state is InitState.READY and not base_url and not tile_url:
            if on_success is not None:
                on_success()
            return

        is_async = on_success is not None

        if on_error is not None and not is_async:
            raise UsageError("Can't pass an error callback without a success callback.")

        if is_async:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                raise UsageError(
                    "Asynchronous initialization requires a running event loop; "
                    "omit the callbacks or use initialize_async()."
                ) from None

            if self._state is InitState.LOADING:
                self._enqueue(on_success, on_error)
                logger.debug("Initialization in progress; queued callbacks")
                return

        self._state = InitState.LOADING
        self._context.transport.configure(base_url, tile_url)
        functions = self._context.functions

        if is_async:
            self._enqueue(on_success, on_error)
            logger.debug("Starting asynchronous initialization")
            functions.load_signatures(self._on_loaded, self._on_failed)
            return

        logger.debug("Starting synchronous initialization")
        try:
            functions.load_signatures()
        except Exception as e:
            self._on_failed(e)
            raise
        failure = self._on_loaded()
        if failure is not None:
            raise failure

    async def initialize_async(
        self,
        base_url: str | None = None,
        tile_url: str | None = None,
    ) -> None:
        """
        Initialize on the running event loop and wait for the outcome.

        Joins an initialization already in progress.

        Raises:
            LoadFailure: The catalog could not be loaded
            HookFailure: A bootstrap hook failed
        """
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def _succeeded() -> None:
            if not future.done():
                future.set_result(None)

        def _failed(error: BaseException) -> None:
            if not future.done():
                future.set_exception(error)

        self.initialize(base_url, tile_url, _succeeded, _failed)
        await future

    def _enqueue(self, on_success: SuccessCallback | None, on_error: ErrorCallback | None) -> None:
        if on_error is not None:
            self._callbacks.error.append(on_error)
        if on_success is not None:
            self._callbacks.success.append(on_success)

    def _on_loaded(self) -> HookFailure | None:
        """
        Finish initialization once the catalog is loaded.

        Returns:
            The HookFailure reported to the error callbacks, if a hook failed
        """
        if self._state is not InitState.LOADING:
            # A synchronous initialize() already resolved this attempt.
            logger.debug("Ignoring stale catalog load completion")
            return None

        context = self._context
        hook = ""
        try:
            for proxy_type in HAND_WRITTEN_TYPES:
                hook = f"{proxy_type.type_name}.initialize"
                proxy_type.initialize(context.functions)
            context.classifier.register_classes(context.classes)
            hook = "ClassGenerator.run"
            context.generator.run()
            hook = "UnboundMethodBinder.run"
            context.binder.run()
        except Exception as e:
            failure = HookFailure(f"Initialization failed in {hook}: {e}", hook=hook)
            failure.__cause__ = e
            self._on_failed(failure)
            return failure

        self._state = InitState.READY
        logger.debug("Initialization complete")

        self._callbacks.error.clear()

        # A raising callback propagates; the ones behind it stay queued until
        # the next completed initialization or reset().
        while self._callbacks.success:
            self._callbacks.success.pop(0)()
        return None

    def _on_failed(self, error: BaseException) -> None:
        """Report initialization failure."""
        if self._state is not InitState.LOADING:
            logger.debug("Ignoring stale initialization failure: %s", error)
            return

        self._state = InitState.NOT_READY
        logger.warning("Initialization failed: %s", error)

        self._callbacks.success.clear()

        while self._callbacks.error:
            self._callbacks.error.pop(0)(error)

    def reset(self) -> None:
        """Return the context to its uninitialized state."""
        context = self._context
        self._state = InitState.NOT_READY
        if self._callbacks:
            logger.debug(
                "Reset dropped %d pending callbacks",
                len(self._callbacks.success) + len(self._callbacks.error),
            )
        self._callbacks.clear()
        context.transport.reset()
        context.functions.reset()
        for proxy_type in HAND_WRITTEN_TYPES:
            proxy_type.reset()
        context.generator.undo()
        # Cleared in place: callers hold references to the namespace.
        context.algorithms.clear()


class Context:
    """
    Everything one client needs, with an explicit lifecycle.

    Lifecycle:
        context = Context.create()      # NOT_READY
        context.bootstrap()             # READY (blocking form)
        context.teardown()              # NOT_READY again

    Hand-written proxy classes (Image, Feature, ...) are shared by all
    contexts; their algorithm bindings follow the most recent bootstrap.
    """

    def __init__(self, transport: Transport | None = None) -> None:
        self.transport = transport or Transport()
        self.functions = FunctionRegistry(self.transport)
        self.classes = ClassRegistry()
        self.classifier = TypeClassifier()
        self.promoter = TypePromoter(self.functions, self.classes, self.classifier)
        self.algorithms = Namespace("Algorithms")
        self.generator = ClassGenerator(self.functions, self.classes, self.classifier)
        self.binder = UnboundMethodBinder(self.functions, self.algorithms)
        self.controller = InitializationController(self)

        self.functions.register_promoter(self.promoter)
        self.functions.register_subtype_check(self.classifier.is_subtype)
        for proxy_type in HAND_WRITTEN_TYPES:
            self.classes.register_hand_written(proxy_type)
        self.classifier.register_classes(self.classes)

    @classmethod
    def create(cls, transport: Transport | None = None) -> Context:
        return cls(transport)

    def bootstrap(
        self,
        base_url: str | None = None,
        tile_url: str | None = None,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.controller.initialize(base_url, tile_url, on_success, on_error)

    def teardown(self) -> None:
        self.controller.reset()

    def ready(self) -> InitState:
        return self.controller.ready()

    def promote(self, value: Any, type_name: str) -> Any:
        return self.promoter.promote(value, type_name)

    def _resolve(self, func: ApiFunction | str) -> ApiFunction:
        if isinstance(func, str):
            return self.functions.lookup(func)
        return func

    def call(self, func: ApiFunction | str, *args: Any) -> Any:
        """
        Call a function with positional arguments.

        Args:
            func: An ApiFunction or the name of an algorithm
            *args: Positional arguments

        Returns:
            A ComputedObject, promoted to the declared return type
        """
        return self._resolve(func).call(*args)

    def apply(self, func: ApiFunction | str, named_args: dict[str, Any]) -> Any:
        """
        Call a function with a mapping of named arguments.

        Args:
            func: An ApiFunction or the name of an algorithm
            named_args: Argument name -> value

        Returns:
            A ComputedObject, promoted to the declared return type
        """
        return self._resolve(func).apply(named_args)

    def __repr__(self) -> str:
        return f"Context({self.transport.api_url}, {self.ready().value})"
