from abc import ABC, abstractmethod
from po_desk.core.workflow_state import IntakeState


class BaseNode(ABC):
    """One step of the intake graph. Subclasses set `name`, which is recorded in the trajectory."""

    name: str

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not getattr(cls, 'name', None) and 'Abstract' not in cls.__name__:
            raise TypeError(f"{cls.__name__} must define a 'name' class variable")

    @abstractmethod
    def __call__(self, state: IntakeState) -> dict:
        """Run the step and return the state keys it changes."""
        ...

    def visited(self, state: IntakeState) -> list[str]:
        return state.get("trajectory", []) + [self.name]
