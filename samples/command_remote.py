"""Remote control buttons bound to light commands."""

from abc import ABC, abstractmethod
from typing import Optional


class Command(ABC):
    @abstractmethod
    def execute(self) -> None:
        ...


class Light:
    def turn_on(self) -> None:
        print("light on")


class LightOnCommand(Command):
    def __init__(self, light: Light) -> None:
        self._light = light

    def execute(self) -> None:
        self._light.turn_on()


class RemoteControl:
    def __init__(self) -> None:
        self._slot: Optional[Command] = None

    def set_command(self, command: Command) -> None:
        self._slot = command

    def press(self) -> None:
        self._slot.execute()
