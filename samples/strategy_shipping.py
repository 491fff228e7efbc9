"""Shipping cost calculation with swappable pricing rules."""

from abc import ABC, abstractmethod


class ShippingStrategy(ABC):
    @abstractmethod
    def cost(self, weight: float) -> float:
        ...


class FlatRate(ShippingStrategy):
    def cost(self, weight: float) -> float:
        return 5.0


class ByWeight(ShippingStrategy):
    def cost(self, weight: float) -> float:
        return 1.5 * weight


class ShippingCalculator:
    def __init__(self, strategy: ShippingStrategy) -> None:
        self._strategy = strategy

    def quote(self, weight: float) -> float:
        return self._strategy.cost(weight)
