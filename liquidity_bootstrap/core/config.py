import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from liquidity_bootstrap.core.constants.base import (
    DEFAULT_DEADLINE_SECONDS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TRANSACTION_TIMEOUT,
    TOKEN_DECIMALS,
)
from liquidity_bootstrap.core.constants.chains import CHAIN_ID_SEPOLIA
from liquidity_bootstrap.core.constants.contracts import (
    MAX_TICK,
    MIN_TICK,
    SQRT_PRICE_SCALE_BITS,
    TICK_SPACING,
    UNISWAP_V3_NPM,
    WETH,
)
from liquidity_bootstrap.core.errors import InvalidFeeTierError
from liquidity_bootstrap.core.utils.uniswap_v3_math import full_range_ticks

_CONFIG_ENV_KEYS = ("LIQUIDITY_BOOTSTRAP_CONFIG_PATH", "LIQUIDITY_BOOTSTRAP_CONFIG")
_PRIVATE_KEY_ENV = "LIQUIDITY_BOOTSTRAP_PRIVATE_KEY"
_DEFAULT_CONFIG_FILENAME = "config.json"
_DEFAULT_RPC_URL = "https://ethereum-sepolia-rpc.publicnode.com"


def _find_project_root(start: Path) -> Path | None:
    cur = start.resolve()
    for parent in [cur, *cur.parents]:
        if (parent / "pyproject.toml").exists():
            return parent
    return None


def _project_root() -> Path | None:
    return _find_project_root(Path.cwd()) or _find_project_root(Path(__file__).parent)


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()

    env_path = next(
        (os.getenv(k, "").strip() for k in _CONFIG_ENV_KEYS if os.getenv(k)), ""
    )
    if env_path:
        p = Path(env_path).expanduser()
        if p.is_absolute():
            return p
        root = _project_root()
        return (root / p) if root else p

    root = _project_root()
    return (root / _DEFAULT_CONFIG_FILENAME) if root else Path(_DEFAULT_CONFIG_FILENAME)


def load_config_json(
    path: str | Path | None = None, *, require_exists: bool = False
) -> dict[str, Any]:
    cfg_path = resolve_config_path(path)
    if not cfg_path.exists():
        if require_exists:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return {}
    try:
        parsed = json.loads(cfg_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Config file is not valid JSON: {cfg_path}") from exc
    if not isinstance(parsed, dict):
        raise ValueError(f"Config file must contain a JSON object: {cfg_path}")
    return parsed


CONFIG: dict[str, Any] = load_config_json()


def set_config(config: dict[str, Any]) -> None:
    """Replace the global CONFIG dict in-place.

    This allows code that imported CONFIG at module import time to see updates.
    """
    CONFIG.clear()
    CONFIG.update(config)


def load_config(
    path: str | Path | None = None, *, require_exists: bool = False
) -> None:
    """Load config from disk into the global CONFIG dict."""
    set_config(load_config_json(path, require_exists=require_exists))


def get_chain_id() -> int:
    network = CONFIG.get("network", {})
    return int(network.get("chain_id") or CHAIN_ID_SEPOLIA)


def get_rpc_url() -> str:
    network = CONFIG.get("network", {})
    rpc_url = network.get("rpc_url")
    if rpc_url:
        return str(rpc_url).strip()
    return _DEFAULT_RPC_URL


def get_receipt_timeout() -> float | None:
    network = CONFIG.get("network", {})
    if "receipt_timeout" not in network:
        return float(DEFAULT_TRANSACTION_TIMEOUT)
    value = network["receipt_timeout"]
    return None if value is None else float(value)


def get_poll_interval() -> float:
    network = CONFIG.get("network", {})
    return float(network.get("poll_interval") or DEFAULT_POLL_INTERVAL)


def get_private_key() -> str | None:
    env_key = os.environ.get(_PRIVATE_KEY_ENV, "").strip()
    if env_key:
        return env_key
    wallet = CONFIG.get("wallet", {})
    value = wallet.get("private_key")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


@dataclass(frozen=True)
class ProtocolConfig:
    chain_id: int
    weth_address: str
    position_manager_address: str
    tick_spacing: dict[int, int] = field(default_factory=lambda: dict(TICK_SPACING))
    tick_lower: int | None = None
    tick_upper: int | None = None
    min_tick: int = MIN_TICK
    max_tick: int = MAX_TICK
    sqrt_price_scale_bits: int = SQRT_PRICE_SCALE_BITS
    deadline_seconds: int = DEFAULT_DEADLINE_SECONDS
    token_decimals: int = TOKEN_DECIMALS

    @property
    def fee_tiers(self) -> list[int]:
        return sorted(self.tick_spacing)

    def validate_fee(self, fee: int) -> int:
        try:
            tier = int(fee)
        except (TypeError, ValueError) as exc:
            raise InvalidFeeTierError(f"Invalid fee tier {fee!r}") from exc
        if tier not in self.tick_spacing:
            raise InvalidFeeTierError(
                f"Unknown fee tier {fee}; expected one of {self.fee_tiers}"
            )
        return tier

    def ticks_for_fee(self, fee: int) -> tuple[int, int]:
        """Full-range bounds: the configured pair if set, else derived from spacing."""
        if self.tick_lower is not None and self.tick_upper is not None:
            return int(self.tick_lower), int(self.tick_upper)
        spacing = self.tick_spacing[self.validate_fee(fee)]
        return full_range_ticks(spacing, min_tick=self.min_tick, max_tick=self.max_tick)


def get_protocol_config(chain_id: int | None = None) -> ProtocolConfig:
    cid = int(chain_id) if chain_id is not None else get_chain_id()
    overrides = dict(CONFIG.get("protocol", {}))

    weth = overrides.pop("weth_address", None) or WETH.get(cid)
    npm = overrides.pop("position_manager_address", None) or UNISWAP_V3_NPM.get(cid)
    if not weth or not npm:
        raise ValueError(
            f"No WETH/position manager known for chain_id {cid}; "
            "set protocol.weth_address and protocol.position_manager_address"
        )

    spacing = overrides.pop("tick_spacing", None)
    if spacing is not None:
        overrides["tick_spacing"] = {int(k): int(v) for k, v in spacing.items()}

    known = set(ProtocolConfig.__dataclass_fields__) - {
        "chain_id",
        "weth_address",
        "position_manager_address",
    }
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown protocol config keys: {sorted(unknown)}")

    lower, upper = overrides.get("tick_lower"), overrides.get("tick_upper")
    if (lower is None) != (upper is None):
        raise ValueError(
            "protocol.tick_lower and protocol.tick_upper must be set together"
        )
    if lower is not None and int(lower) >= int(upper):
        raise ValueError(
            f"protocol.tick_lower ({lower}) must be below tick_upper ({upper})"
        )

    return ProtocolConfig(
        chain_id=cid,
        weth_address=str(weth),
        position_manager_address=str(npm),
        **overrides,
    )
