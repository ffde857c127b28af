# SPDX-License-Identifier: MIT

from gitask.model.filter import Filter


def get_filter_template() -> Filter:
    return {
        "ids": [],
        "tags_in": [],
        "tags_out": [],
        "project_in": None,
        "project_out": [],
        "priority": None,
        "due_constraint": None,
        "text_terms": [],
        "status": None,
        "template": None,
        "note": None,
        "ignore_context": False,
    }
