"""
Readlater View-Models — State Store
=====================================

What:  A tiny state + reducer loop that backs every screen view-model.
How:   State is an immutable value. dispatch(action) runs the reducer and,
       if the state changed, notifies listeners. Async effects (network
       fetches, debounced validation) are started with launch() so that
       close() can cancel them when the screen goes away.

    store = Store(ProfileState(), reduce_profile)
    store.subscribe(render)
    store.launch(view_model.load_profile_data(data_service))
    ...
    await store.close()   # pending effects cancelled; later dispatches ignored

Everything runs on one event loop; there is no locking.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Generic, List, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")

Reducer = Callable[[S, Any], S]
Listener = Callable[[S], None]


class Store(Generic[S]):
    def __init__(self, initial_state: S, reducer: Reducer):
        self._state = initial_state
        self._reducer = reducer
        self._listeners: List[Listener] = []
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def state(self) -> S:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def dispatch(self, action: Any) -> None:
        if self._closed:
            logger.debug("Dropping %s: store is closed", type(action).__name__)
            return

        new_state = self._reducer(self._state, action)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def launch(self, coro: Coroutine[Any, Any, Any]) -> Optional[asyncio.Task]:
        """Run an effect tied to the store's lifetime. No-op once closed."""
        if self._closed:
            coro.close()
            return None
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def close(self) -> None:
        self._closed = True
        self._listeners.clear()
        pending = [t for t in self._tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
