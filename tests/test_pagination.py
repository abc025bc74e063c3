import math

import pytest

from conftest import FakeFetcher, make_page
from tiktok_scraper_pkg.errors import ApiFetchError
from tiktok_scraper_pkg.models import DelayRange
from tiktok_scraper_pkg.pagination import PaginationState, VideoPaginator

TEMPLATE = "https://www.tiktok.com/api/post/item_list/?aid=1988&count=2&cursor=0"
DELAYS = DelayRange(min_ms=0, max_ms=0)


def _paginator(max_videos, pages, sleep):
    fetcher = FakeFetcher(pages)
    return VideoPaginator(max_videos, DELAYS, fetcher, sleep=sleep), fetcher


@pytest.mark.asyncio
async def test_two_page_example(fake_sleep):
    first = make_page("10", True, ["id1", "id2"])
    paginator, fetcher = _paginator(10, [make_page("20", False, ["id2", "id3"])], fake_sleep)

    result = await paginator.run(TEMPLATE, first)

    assert set(result) == {"id1", "id2", "id3"}
    assert len(result) == 3
    assert paginator.iterations == 2
    assert paginator.state is PaginationState.DONE
    assert fetcher.urls == [TEMPLATE.replace("cursor=0", "cursor=10")]
    assert fake_sleep.calls == 1


@pytest.mark.asyncio
async def test_first_page_without_more_stops_after_one_iteration(fake_sleep):
    paginator, fetcher = _paginator(10, [], fake_sleep)

    result = await paginator.run(TEMPLATE, make_page("5", False, ["a", "b"]))

    assert result == ["a", "b"]
    assert paginator.iterations == 1
    assert fetcher.urls == []
    assert fake_sleep.calls == 0


@pytest.mark.asyncio
async def test_overshoot_on_first_page_skips_second_fetch(fake_sleep):
    paginator, fetcher = _paginator(1, [make_page("2", True, ["c"])], fake_sleep)

    result = await paginator.run(TEMPLATE, make_page("1", True, ["a", "b"]))

    assert result == ["a", "b"]
    assert paginator.iterations == 1
    assert fetcher.urls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("max_videos,page_size", [(10, 3), (9, 3), (1, 4), (7, 7), (30, 4)])
async def test_iteration_bound_with_full_pages(fake_sleep, max_videos, page_size):
    counter = iter(range(10_000))

    def full_page(cursor):
        return make_page(cursor, True, [f"v{next(counter)}" for _ in range(page_size)])

    pages = [full_page(str(n)) for n in range(1, 50)]
    paginator, _ = _paginator(max_videos, pages[1:], fake_sleep)

    result = await paginator.run(TEMPLATE, pages[0])

    assert paginator.iterations <= math.ceil(max_videos / page_size)
    assert len(result) <= max_videos + page_size - 1
    assert len(result) >= max_videos


@pytest.mark.asyncio
async def test_cursor_follows_latest_page(fake_sleep):
    pages = [make_page("20", True, ["b"]), make_page("30", False, ["c"])]
    paginator, fetcher = _paginator(100, pages, fake_sleep)

    await paginator.run(TEMPLATE, make_page("10", True, ["a"]))

    assert [u.rsplit("cursor=", 1)[1] for u in fetcher.urls] == ["10", "20"]


@pytest.mark.asyncio
async def test_duplicates_do_not_count_towards_cap(fake_sleep):
    pages = [make_page("2", True, ["b", "c"]), make_page("3", True, ["c", "d"])]
    paginator, fetcher = _paginator(4, pages, fake_sleep)

    result = await paginator.run(TEMPLATE, make_page("1", True, ["a", "b"]))

    assert result == ["a", "b", "c", "d"]
    assert paginator.iterations == 3


@pytest.mark.asyncio
async def test_repeated_full_page_with_same_cursor_stops(fake_sleep):
    fetched = []

    async def same_page(url):
        fetched.append(url)
        if len(fetched) > 10:
            raise AssertionError("pagination did not stop")
        return make_page("10", True, ["a", "b"])

    paginator = VideoPaginator(3, DELAYS, same_page, sleep=fake_sleep)

    result = await paginator.run(TEMPLATE, make_page("10", True, ["a", "b"]))

    assert result == ["a", "b"]
    assert paginator.iterations == 2
    assert paginator.stalled
    assert paginator.state is PaginationState.DONE


@pytest.mark.asyncio
async def test_advancing_cursor_with_only_seen_ids_stops(fake_sleep):
    pages = [make_page(str(n), True, ["a", "b"]) for n in range(2, 20)]
    paginator, fetcher = _paginator(3, pages, fake_sleep)

    result = await paginator.run(TEMPLATE, make_page("1", True, ["a", "b"]))

    assert result == ["a", "b"]
    assert paginator.iterations == 2
    assert len(fetcher.urls) == 1


@pytest.mark.asyncio
async def test_fetch_error_aborts_and_propagates(fake_sleep):
    async def failing_fetch(url):
        raise ApiFetchError("Failed to fetch: 403", status=403, url=url)

    paginator = VideoPaginator(10, DELAYS, failing_fetch, sleep=fake_sleep)

    with pytest.raises(ApiFetchError) as excinfo:
        await paginator.run(TEMPLATE, make_page("1", True, ["a"]))

    assert excinfo.value.status == 403
    assert paginator.state is PaginationState.DONE


@pytest.mark.asyncio
async def test_empty_pages_keep_paginating_until_has_more_is_false(fake_sleep):
    pages = [make_page("2", True, []), make_page("3", False, ["b"])]
    paginator, _ = _paginator(5, pages, fake_sleep)

    assert await paginator.run(TEMPLATE, make_page("1", True, ["a"])) == ["a", "b"]


def test_first_page_can_only_be_accepted_once(fake_sleep):
    paginator, _ = _paginator(5, [], fake_sleep)
    paginator.accept_first_page(TEMPLATE, make_page("1", True, ["a"]))

    assert paginator.state is PaginationState.FETCHING_NEXT_PAGE
    assert paginator.template_url == TEMPLATE
    with pytest.raises(RuntimeError):
        paginator.accept_first_page(TEMPLATE, make_page("1", True, ["a"]))
