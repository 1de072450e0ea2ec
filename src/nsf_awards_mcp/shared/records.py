"""
Record shape normalization.

The NSF API collapses single-element collections to a bare object (always in
XML, and in JSON for some endpoints), so ``award`` may be a dict, a list of
dicts, or missing entirely. Everything downstream works on lists.
"""

from __future__ import annotations

from typing import TypeVar, Union

T = TypeVar("T")


def ensure_list(value: Union[T, list[T], tuple[T, ...], None]) -> list[T]:
    """
    Coerce an absent / single / sequence value into a list.

    >>> ensure_list(None)
    []
    >>> ensure_list({"id": "1"})
    [{'id': '1'}]
    >>> ensure_list([{"id": "1"}, {"id": "2"}])
    [{'id': '1'}, {'id': '2'}]
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]
