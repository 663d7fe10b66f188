# SPDX-License-Identifier: Apache-2.0
from .loader import (
    Record,
    attach_locations,
    load_org_members,
    load_records,
    parse_delimited,
    parse_json_list,
)
from .tasks import LoadTask

__all__ = [
    "LoadTask",
    "Record",
    "attach_locations",
    "load_org_members",
    "load_records",
    "parse_delimited",
    "parse_json_list",
]
