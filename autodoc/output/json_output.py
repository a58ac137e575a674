"""JSON rendering of an aggregate."""

from __future__ import annotations

import json

from ..aggregate import ResultAggregate


def render_json(aggregate: ResultAggregate) -> str:
    return json.dumps(aggregate.to_dict(), indent=2, sort_keys=True) + "\n"


__all__ = ["render_json"]
