# SPDX-License-Identifier: MIT

from typing import TypedDict

from gitask.model.entity_key import EntityKey


class IdMap(TypedDict):
    """
    Both dictionaries describe the same assignment:

    synthetic_to_real[7] -> key of the task currently shown as 7
    real_to_synthetic[key] -> 7
    """

    synthetic_to_real: dict[int, EntityKey]
    real_to_synthetic: dict[EntityKey, int]
