# SPDX-License-Identifier: MIT

from gitask.error import UnknownTaskId
from gitask.model.entity_key import EntityKey
from gitask.model.id_map import IdMap
from gitask.model.status import Status
from gitask.model.task import Task
from gitask.template.id_map import get_id_map_template


def allocate(tasks: list[Task]) -> IdMap:
    """
    Number every non-resolved task from 1, oldest first.

    Ties on the creation time fall back to the key, so the same set of
    tasks always yields the same numbering. Removing or resolving a task
    compacts the numbers above it.
    """
    id_map = get_id_map_template()
    open_tasks = [task for task in tasks if task["status"] != Status.RESOLVED]
    open_tasks.sort(key=lambda task: (task["created"], task["key"]))

    for next_id, task in enumerate(open_tasks, start=1):
        id_map["synthetic_to_real"][next_id] = task["key"]
        id_map["real_to_synthetic"][task["key"]] = next_id

    return id_map


def get_key(id_map: IdMap, id: int) -> EntityKey:
    if id not in id_map["synthetic_to_real"]:
        raise UnknownTaskId(id)
    return id_map["synthetic_to_real"][id]


def get_id(id_map: IdMap, key: EntityKey) -> int | None:
    return id_map["real_to_synthetic"].get(key)
