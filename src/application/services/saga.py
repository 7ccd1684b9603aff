"""Compensation stack for multi-store mutations."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from src.commons.telemetry import get_logger

logger = get_logger(__name__)


@dataclass
class Compensation:
    """A named undo step."""

    name: str
    action: Callable[[], Awaitable[bool]]


@dataclass
class Compensations:
    """Undo steps registered as a mutation progresses.

    Steps run newest-first. A step that returns False or raises is
    reported back to the caller instead of interrupting the others.
    """

    operation: str
    steps: list[Compensation] = field(default_factory=list)

    def add(self, name: str, action: Callable[[], Awaitable[bool]]) -> None:
        self.steps.append(Compensation(name=name, action=action))

    def clear(self) -> None:
        self.steps.clear()

    async def run(self) -> list[str]:
        """Execute every registered step in reverse order.

        Returns:
            Names of the steps that did not complete.
        """
        failed: list[str] = []
        while self.steps:
            step = self.steps.pop()
            try:
                done = await step.action()
            except Exception as e:
                logger.error(
                    f"Compensation '{step.name}' raised during {self.operation}",
                    extra={"compensation": step.name, "error": str(e)},
                )
                failed.append(step.name)
                continue

            if not done:
                logger.error(
                    f"Compensation '{step.name}' did not complete during "
                    f"{self.operation}",
                    extra={"compensation": step.name},
                )
                failed.append(step.name)
            else:
                logger.info(
                    f"Compensation '{step.name}' completed",
                    extra={"operation": self.operation},
                )
        return failed
