"""Readlater View-Models — Manage Account Screen (reset data cache)."""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from readlater.viewmodels.services import DataService
from readlater.viewmodels.store import Store

logger = logging.getLogger(__name__)

UNABLE_TO_RESET_CACHE = "We were unable to reset the data cache."


@dataclass(frozen=True)
class ManageAccountState:
    is_resetting: bool = False
    error_message: Optional[str] = None


@dataclass(frozen=True)
class ResetStarted:
    pass


@dataclass(frozen=True)
class ResetFinished:
    error_message: Optional[str] = None


def reduce_manage_account(state: ManageAccountState, action) -> ManageAccountState:
    if isinstance(action, ResetStarted):
        return replace(state, is_resetting=True, error_message=None)
    if isinstance(action, ResetFinished):
        return replace(state, is_resetting=False, error_message=action.error_message)
    return state


class ManageAccountViewModel:
    def __init__(self):
        self.store: Store[ManageAccountState] = Store(ManageAccountState(), reduce_manage_account)

    @property
    def state(self) -> ManageAccountState:
        return self.store.state

    async def reset_data_cache(self, data_service: DataService) -> None:
        self.store.dispatch(ResetStarted())
        try:
            await data_service.reset_data_cache()
        except Exception as e:
            logger.error("Data cache reset failed: %s", str(e))
            self.store.dispatch(ResetFinished(UNABLE_TO_RESET_CACHE))
            return
        self.store.dispatch(ResetFinished())
