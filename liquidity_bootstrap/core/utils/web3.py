from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.middleware import ExtraDataToPOAMiddleware

from liquidity_bootstrap.core.constants.chains import POA_MIDDLEWARE_CHAIN_IDS


def get_web3(rpc_url: str, chain_id: int) -> AsyncWeb3:
    provider = AsyncHTTPProvider(
        rpc_url, request_kwargs={"headers": AsyncHTTPProvider.get_request_headers()}
    )
    web3 = AsyncWeb3(provider)
    if chain_id in POA_MIDDLEWARE_CHAIN_IDS:
        web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return web3


def get_transaction_chain_id(transaction: dict) -> int:
    if "chainId" not in transaction:
        raise ValueError("Transaction does not contain chainId")
    return int(transaction["chainId"])
