"""Order processing with a fixed flow and per-market steps.

pattern: Template
"""

from abc import ABC, abstractmethod


class Order(ABC):
    def process(self):
        self.validate()
        self.charge()
        self.ship()

    def validate(self):
        ...

    @abstractmethod
    def charge(self):
        ...

    @abstractmethod
    def ship(self):
        ...


class DomesticOrder(Order):
    def charge(self):
        ...

    def ship(self):
        ...


class InternationalOrder(Order):
    def charge(self):
        ...

    def ship(self):
        ...
