from __future__ import annotations

from abc import ABC
from typing import Any

from loguru import logger

from liquidity_bootstrap.core.clients.BlockchainClient import (
    BlockchainClient,
    TransactionOutcome,
)


class BaseAdapter(ABC):
    adapter_type: str | None = None

    def __init__(self, name: str, client: BlockchainClient):
        self.name = name
        self.client = client
        self.logger = logger.bind(adapter=self.__class__.__name__)

    @property
    def owner(self) -> str:
        return self.client.account

    async def _submit(
        self,
        *,
        target: str,
        abi: list[dict[str, Any]],
        fn_name: str,
        args: list[Any],
        value: int = 0,
        step: str | None = None,
    ) -> TransactionOutcome:
        outcome = await self.client.submit_call(
            target=target, abi=abi, fn_name=fn_name, args=args, value=value, step=step
        )
        self.logger.info(f"{fn_name} submitted: {outcome.txn_hash}")
        return outcome
