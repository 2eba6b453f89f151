"""
Export / import of the task collection as a JSON array
"""
import json
from datetime import date
from typing import List, Optional, Sequence

from pydantic import ValidationError as SchemaError

from backend.services.entities import Task
from backend.utils.errors import ValidationError
from backend.utils.helpers import backup_date
from backend.utils.validators import validate_title


def export_tasks(tasks: Sequence[Task]) -> str:
    return json.dumps([t.to_record() for t in tasks], indent=2, ensure_ascii=False)


def backup_filename(today: Optional[date] = None) -> str:
    return f"zero-task-backup-{backup_date(today)}.json"


def parse_import(content: str) -> List[Task]:
    """Parse an export file; raises ValidationError describing what is wrong"""
    try:
        payload = json.loads(content)
    except (json.JSONDecodeError, TypeError) as e:
        raise ValidationError(f"Failed to parse file. Ensure it is a valid JSON file: {e}") from e

    if not isinstance(payload, list):
        raise ValidationError("Invalid file format. Expected a JSON array of tasks")

    tasks = []
    for position, item in enumerate(payload):
        try:
            task = Task.from_record(item)
        except SchemaError as e:
            raise ValidationError(f"Invalid task at position {position}: {e.errors()[0]['msg']}") from e
        validate_title(task.title)
        tasks.append(task)
    return tasks
