"""
Error taxonomy for the task collection engine
"""


class TaskError(Exception):
    """Base class for all task engine errors"""


class ValidationError(TaskError):
    """Rejected input: empty title, malformed import, bad reorder"""


class NotFoundError(TaskError):
    """Unknown task id"""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class PersistenceError(TaskError):
    """Backing store I/O failure"""


class MigrationError(TaskError):
    """Copying legacy records into the current store failed"""


class AuthError(TaskError):
    """Credentials rejected"""


class ConflictError(TaskError):
    """Id already owned by another account"""
