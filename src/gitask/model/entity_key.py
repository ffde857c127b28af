# SPDX-License-Identifier: MIT

import re
import uuid

EntityKey = str

_UUID4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)


def generate_entity_key() -> EntityKey:
    return str(uuid.uuid4())


def is_valid_entity_key(key: str) -> bool:
    return _UUID4_PATTERN.match(key) is not None
