MAX_UINT256 = 2**256 - 1

__all__ = ["MAX_UINT256"]
