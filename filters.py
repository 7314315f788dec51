"""Client-side search and category filtering.

Filtering only ever sees the currently loaded page. It is not a search over
the whole remote collection: a name that lives on page 5 will not show up
while page 1 is loaded.
"""

from typing import Iterable, List

from models import DetailRecord, FilterState


def matches(record: DetailRecord, filter_state: FilterState) -> bool:
    """Check if a record passes both the name search and the category filter."""
    if filter_state.search_term.lower() not in record.name.lower():
        return False
    if not filter_state.selected_categories:
        return True
    return any(c in filter_state.selected_categories for c in record.category_names)


def apply_filter(records: Iterable[DetailRecord], filter_state: FilterState) -> List[DetailRecord]:
    """Return the matching records, keeping their order."""
    return [r for r in records if matches(r, filter_state)]
