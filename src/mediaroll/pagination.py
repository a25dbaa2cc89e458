from __future__ import annotations

from typing import Iterable

from mediaroll.models import Asset, AssetRecord, Page, PageInfo
from mediaroll.projector import AssetProjector
from mediaroll.query.builder import PageCursor


def _end_cursor(last: AssetRecord, lookahead: AssetRecord | None) -> str:
    # A lookahead sharing the timestamp would be skipped by a plain "<" bound.
    if lookahead is not None and lookahead.modified_at == last.modified_at:
        return PageCursor(last.modified_at, last.id).encode()
    return PageCursor(last.modified_at).encode()


def fetch_page(records: Iterable[AssetRecord], projector: AssetProjector, limit: int) -> Page:
    """Accept up to ``limit`` projectable records, backfilling over skipped ones.

    ``has_next_page`` reflects whether the store held more than ``limit``
    matching rows, skipped rows included. ``end_cursor`` needs an accepted
    row, so a page whose rows were all skipped reports ``has_next_page=True``
    with no cursor; every remaining row was already consumed and there is
    nothing further to resume from.
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")

    rows = iter(records)
    assets: list[Asset] = []
    consumed = 0
    last_accepted: AssetRecord | None = None
    lookahead: AssetRecord | None = None

    for record in rows:
        consumed += 1
        asset = projector.project(record)
        if asset is None:
            continue
        assets.append(asset)
        last_accepted = record
        if len(assets) == limit:
            lookahead = next(rows, None)
            if lookahead is not None:
                consumed += 1
            break

    has_next_page = consumed > limit
    end_cursor = None
    if has_next_page and last_accepted is not None:
        end_cursor = _end_cursor(last_accepted, lookahead)
    return Page(assets=assets, page_info=PageInfo(has_next_page=has_next_page, end_cursor=end_cursor))
