from typing import Any

from mediaroll.db import Database
from mediaroll.models import MediaKind, Page, StoreCapabilities
from mediaroll.pagination import fetch_page
from mediaroll.projector import AssetProjector
from mediaroll.query.builder import AssetQuery, build_selection
from mediaroll.store import RecordStore


def _page(db: Database, projector: AssetProjector, params: dict[str, Any]) -> Page:
    query = AssetQuery.from_params(params)
    selection = build_selection(query, StoreCapabilities())
    with RecordStore(db).query(selection) as cursor:
        return fetch_page(cursor, projector, query.first)


def _all_pages(db: Database, projector: AssetProjector, first: int) -> list[Page]:
    pages = [_page(db, projector, {"first": first})]
    while pages[-1].page_info.has_next_page:
        pages.append(_page(db, projector, {"first": first, "after": pages[-1].page_info.end_cursor}))
    return pages


def test_unresolvable_video_is_backfilled(db, add_record, make_projector) -> None:
    with db.connect() as conn:
        add_record(conn, modified_at=30)
        add_record(conn, modified_at=20)
        add_record(conn, modified_at=10)
        add_record(conn, modified_at=25, kind=MediaKind.VIDEO)
    projector = make_projector()

    first = _page(db, projector, {"first": 2})
    assert [a.creation_date for a in first.assets] == [30, 20]
    assert first.page_info.has_next_page is True
    assert first.page_info.end_cursor == "20"

    second = _page(db, projector, {"first": 2, "after": first.page_info.end_cursor})
    assert [a.creation_date for a in second.assets] == [10]
    assert second.page_info.has_next_page is False
    assert second.page_info.end_cursor is None


def test_pages_partition_all_records(db, add_record, make_projector) -> None:
    with db.connect() as conn:
        ids = [add_record(conn, modified_at=100 + i * 10) for i in range(7)]
    pages = _all_pages(db, make_projector(), first=3)

    assert [len(p.assets) for p in pages] == [3, 3, 1]
    seen = [a.id for p in pages for a in p.assets]
    assert seen == [str(i) for i in reversed(ids)]


def test_ties_at_page_boundary_are_neither_skipped_nor_repeated(db, add_record, make_projector) -> None:
    with db.connect() as conn:
        ids = [
            add_record(conn, modified_at=50),
            add_record(conn, modified_at=40),
            add_record(conn, modified_at=40),
            add_record(conn, modified_at=40),
            add_record(conn, modified_at=30),
        ]
    pages = _all_pages(db, make_projector(), first=2)

    assert pages[0].page_info.end_cursor == f"40:{ids[3]}"
    seen = [a.id for p in pages for a in p.assets]
    assert sorted(seen) == sorted(str(i) for i in ids)
    assert len(seen) == len(set(seen))


def test_has_next_page_counts_skipped_rows(db, add_record, make_projector) -> None:
    with db.connect() as conn:
        add_record(conn, modified_at=30)
        add_record(conn, modified_at=25, kind=MediaKind.VIDEO)
        add_record(conn, modified_at=20)
    page = _page(db, make_projector(), {"first": 2})

    assert len(page.assets) == 2
    assert page.page_info.has_next_page is True


def test_trailing_unresolvable_rows_shorten_the_page(db, add_record, make_projector) -> None:
    with db.connect() as conn:
        add_record(conn, modified_at=30)
        add_record(conn, modified_at=20, kind=MediaKind.VIDEO)
    page = _page(db, make_projector(), {"first": 2})

    assert [a.creation_date for a in page.assets] == [30]
    assert page.page_info.has_next_page is False


def test_exact_fit_has_no_next_page(db, add_record, make_projector) -> None:
    with db.connect() as conn:
        for ts in (3, 2, 1):
            add_record(conn, modified_at=ts)
    page = _page(db, make_projector(), {"first": 3})

    assert len(page.assets) == 3
    assert page.page_info.has_next_page is False
    assert page.page_info.end_cursor is None


def test_filters_by_album_and_mime_type(db, add_record, make_projector) -> None:
    with db.connect() as conn:
        add_record(conn, modified_at=5, bucket_id="a", mime_type="image/png")
        keep = add_record(conn, modified_at=4, bucket_id="a", mime_type="image/jpeg")
        add_record(conn, modified_at=3, bucket_id="b", mime_type="image/jpeg")
        add_record(conn, modified_at=2, kind=MediaKind.AUDIO, bucket_id="a", mime_type="image/jpeg")
    page = _page(db, make_projector(), {"first": 10, "albumId": "a", "mimeTypes": ["image/jpeg"]})

    assert [a.id for a in page.assets] == [str(keep)]


def test_page_never_exceeds_limit(db, add_record, make_projector) -> None:
    with db.connect() as conn:
        video_ids = [add_record(conn, modified_at=ts, kind=MediaKind.VIDEO) for ts in (9, 7, 5)]
        for ts in (8, 6, 4):
            add_record(conn, modified_at=ts)
    projector = make_projector(thumbs={vid: f"/thumbs/{vid}.jpg" for vid in video_ids})
    page = _page(db, projector, {"first": 4})

    assert len(page.assets) == 4
    assert all(a.uri for a in page.assets)
    assert page.page_info.end_cursor == "6"


def test_all_rows_skipped_reports_next_page_without_cursor(db, add_record, make_projector) -> None:
    with db.connect() as conn:
        add_record(conn, modified_at=20, kind=MediaKind.VIDEO)
        add_record(conn, modified_at=10, kind=MediaKind.VIDEO)
    page = _page(db, make_projector(), {"first": 1})

    assert page.assets == []
    assert page.page_info.has_next_page is True
    assert page.page_info.end_cursor is None
