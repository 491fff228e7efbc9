"""Price ticker notifying displays of every change."""

from abc import ABC, abstractmethod
from typing import List


class StockObserver(ABC):
    @abstractmethod
    def update(self, price: float) -> None:
        ...


class PriceDisplay(StockObserver):
    def update(self, price: float) -> None:
        print(f"price: {price}")


class StockTicker:
    def __init__(self) -> None:
        self._observers: List[StockObserver] = []

    def attach(self, observer: StockObserver) -> None:
        self._observers.append(observer)

    def set_price(self, price: float) -> None:
        for observer in self._observers:
            observer.update(price)
