"""Legacy bank API exposed through the payment interface."""

from abc import ABC, abstractmethod


class PaymentProcessor(ABC):
    @abstractmethod
    def pay(self, amount: float) -> None:
        ...


class LegacyBankApi:
    def send_money(self, cents: int) -> None:
        print(f"sent {cents}")


class BankAdapter(PaymentProcessor):
    def __init__(self) -> None:
        self._bank = LegacyBankApi()

    def pay(self, amount: float) -> None:
        self._bank.send_money(int(amount * 100))
