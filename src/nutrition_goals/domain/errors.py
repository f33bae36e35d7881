"""Domain errors for goal management."""

from uuid import UUID


class GoalError(Exception):
    """Base error for goal operations."""


class GoalNotFoundError(GoalError):
    """Raised when a goal id is not known."""

    def __init__(self, goal_id: UUID) -> None:
        super().__init__(f"Goal not found: {goal_id}")
        self.goal_id = goal_id


class GoalReadOnlyError(GoalError):
    """Raised when mutating a goal that has already been achieved."""

    def __init__(self, goal_id: UUID) -> None:
        super().__init__("This goal is already achieved and can no longer be changed.")
        self.goal_id = goal_id


class ActiveGoalConflictError(GoalError):
    """Raised when another goal of the same type is already active."""

    def __init__(self, goal_type: str) -> None:
        super().__init__(
            f"You already have an active {goal_type} goal. Deactivate it first."
        )
        self.goal_type = goal_type
