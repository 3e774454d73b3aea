from __future__ import annotations

from dataclasses import dataclass

# gas used by a typical swap, per cryptoneur.xyz/en/gas-fees-calculator
UNISWAP_V2_SWAP_GAS = 152809.0
UNISWAP_V3_SWAP_GAS = 184523.0
FEE_BUFFER = 1.03
GWEI_IN_ETH = 0.000000001


def swap_fee_usd(gas_price_gwei: float, eth_usd_price: float, gas_units: float) -> float:
    return gas_price_gwei * GWEI_IN_ETH * eth_usd_price * gas_units * FEE_BUFFER


@dataclass(frozen=True)
class GasEstimate:
    gas_price_gwei: float
    eth_usd_price: float

    @property
    def uniswap_v2_fee(self) -> float:
        return swap_fee_usd(self.gas_price_gwei, self.eth_usd_price, UNISWAP_V2_SWAP_GAS)

    @property
    def uniswap_v3_fee(self) -> float:
        return swap_fee_usd(self.gas_price_gwei, self.eth_usd_price, UNISWAP_V3_SWAP_GAS)
