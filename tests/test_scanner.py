"""
Tests for prefix scans: ordering, limits and cursor pagination.
"""

import pytest

from keyspace.client import ListIterator
from keyspace.models import ABSENT, Entry, Key, Present


async def _fill(keyspace, keys):
    for i, key in enumerate(keys):
        await keyspace.set(key, i)


async def _paginate(keyspace, prefix, page_size, reverse=False):
    """Chain limited scans through their cursors until a page comes back short."""
    pages = []
    cursor = ABSENT
    while True:
        page = keyspace.list(prefix, reverse=reverse, limit=Present(page_size), cursor=cursor)
        entries = await page.collect()
        pages.append(entries)
        if len(entries) < page_size:
            return pages
        cursor = page.cursor


class TestListOrdering:
    """Scan order and prefix selection."""

    async def test_ascending_order(self, keyspace, mixed_keys):
        await _fill(keyspace, reversed(mixed_keys))
        entries = await keyspace.list(Key()).collect()
        assert [entry.key for entry in entries] == mixed_keys

    async def test_descending_order(self, keyspace, mixed_keys):
        await _fill(keyspace, mixed_keys)
        entries = await keyspace.list(Key(), reverse=True).collect()
        assert [entry.key for entry in entries] == list(reversed(mixed_keys))

    async def test_prefix_selects_children_only(self, keyspace, users):
        await _fill(keyspace, [key for key, _ in users])
        await keyspace.set(Key.of("users"), "the prefix itself")
        await keyspace.set(Key.of("usersx", 1), "sibling")
        await keyspace.set(Key.of("posts", 1), "other")

        entries = await keyspace.list(Key.of("users")).collect()
        assert [entry.key for entry in entries] == [key for key, _ in users]

    async def test_prefix_selects_children_only_reverse(self, keyspace, users):
        await _fill(keyspace, [key for key, _ in users])
        await keyspace.set(Key.of("users"), "the prefix itself")
        await keyspace.set(Key.of("usert"), "after")

        entries = await keyspace.list(Key.of("users"), reverse=True).collect()
        assert [entry.key for entry in entries] == [key for key, _ in reversed(users)]

    async def test_nul_suffixed_strings_are_siblings(self, keyspace):
        """A string continuing with NUL shares encoded bytes with the prefix but is not a child."""
        await keyspace.set(Key.of("a", 1), "child")
        await keyspace.set(Key.of("a\x00"), "sibling")
        await keyspace.set(Key.of("a\x00b", 2), "sibling")

        entries = await keyspace.list(Key.of("a")).collect()
        assert [entry.key for entry in entries] == [Key.of("a", 1)]

    async def test_nul_suffixed_strings_are_siblings_reverse(self, keyspace):
        await keyspace.set(Key.of("a", 1), "child")
        await keyspace.set(Key.of("a", "z"), "child")
        await keyspace.set(Key.of("a\x00"), "sibling")
        await keyspace.set(Key.of("a\x00b", 2), "sibling")

        entries = await keyspace.list(Key.of("a"), reverse=True).collect()
        assert [entry.key for entry in entries] == [Key.of("a", "z"), Key.of("a", 1)]

    async def test_entries_carry_values_and_versions(self, keyspace):
        key = Key.of("users", 1)
        version = await keyspace.set(key, {"name": "a"})
        entries = await keyspace.list(Key.of("users")).collect()
        assert entries == [Entry(key, {"name": "a"}, version)]

    async def test_empty_prefix_range(self, keyspace):
        await keyspace.set(Key.of("a", 1), 1)
        assert await keyspace.list(Key.of("b")).collect() == []

    async def test_numbers_scan_in_numeric_order(self, keyspace):
        for n in [10, -3, 2.5, 0, 100, -0.5]:
            await keyspace.set(Key.of("scores", n), n)
        entries = await keyspace.list(Key.of("scores")).collect()
        assert [entry.value for entry in entries] == [-3, -0.5, 0, 2.5, 10, 100]

    async def test_expired_entries_are_skipped(self, keyspace, clock):
        await keyspace.set(Key.of("s", 1), "keep")
        await keyspace.set(Key.of("s", 2), "drop", expiration=Present(100))
        await keyspace.set(Key.of("s", 3), "keep")
        clock.advance(1)

        entries = await keyspace.list(Key.of("s")).collect()
        assert [entry.key for entry in entries] == [Key.of("s", 1), Key.of("s", 3)]


class TestListLaziness:
    """The scan is lazy and reflects the store as it is iterated."""

    async def test_list_returns_iterator(self, keyspace):
        scan = keyspace.list(Key.of("users"))
        assert isinstance(scan, ListIterator)

    async def test_async_for(self, keyspace, users):
        await _fill(keyspace, [key for key, _ in users])
        seen = []
        async for entry in keyspace.list(Key.of("users")):
            seen.append(entry.key)
        assert seen == [key for key, _ in users]

    async def test_writes_during_scan_do_not_break_it(self, keyspace, users):
        await _fill(keyspace, [key for key, _ in users])
        seen = []
        async for entry in keyspace.list(Key.of("users")):
            seen.append(entry.key)
            if entry.key == Key.of("users", 3):
                await keyspace.delete(Key.of("users", 4))
                await keyspace.set(Key.of("users", 3.5), "inserted")
        assert Key.of("users", 4) not in seen
        assert Key.of("users", 3.5) in seen
        assert seen == sorted(seen)


class TestPagination:
    """Limits and cursors."""

    async def test_limit_bounds_entries(self, keyspace, users):
        await _fill(keyspace, [key for key, _ in users])
        entries = await keyspace.list(Key.of("users"), limit=Present(3)).collect()
        assert [entry.key for entry in entries] == [key for key, _ in users[:3]]

    async def test_zero_limit(self, keyspace, users):
        await _fill(keyspace, [key for key, _ in users])
        assert await keyspace.list(Key.of("users"), limit=Present(0)).collect() == []

    async def test_limit_larger_than_range(self, keyspace, users):
        await _fill(keyspace, [key for key, _ in users])
        entries = await keyspace.list(Key.of("users"), limit=Present(1000)).collect()
        assert len(entries) == len(users)

    @pytest.mark.parametrize("page_size", [1, 3, 4, 10, 11])
    async def test_chained_pages_reproduce_full_scan(self, keyspace, users, page_size):
        await _fill(keyspace, [key for key, _ in users])
        full = await keyspace.list(Key.of("users")).collect()

        pages = await _paginate(keyspace, Key.of("users"), page_size)
        assert all(len(page) <= page_size for page in pages)
        assert [entry for page in pages for entry in page] == full

    @pytest.mark.parametrize("page_size", [1, 3, 10])
    async def test_chained_pages_reproduce_full_scan_reverse(self, keyspace, users, page_size):
        await _fill(keyspace, [key for key, _ in users])
        full = await keyspace.list(Key.of("users"), reverse=True).collect()

        pages = await _paginate(keyspace, Key.of("users"), page_size, reverse=True)
        assert [entry for page in pages for entry in page] == full

    async def test_pagination_over_whole_store(self, keyspace, mixed_keys):
        await _fill(keyspace, mixed_keys)
        pages = await _paginate(keyspace, Key(), 4)
        assert [entry.key for page in pages for entry in page] == mixed_keys

    async def test_cursor_before_iteration(self, keyspace):
        assert keyspace.list(Key.of("users")).cursor is ABSENT

    async def test_cursor_is_kept_until_next_entry(self, keyspace, users):
        await _fill(keyspace, [key for key, _ in users])
        first = keyspace.list(Key.of("users"), limit=Present(2))
        await first.collect()

        resumed = keyspace.list(Key.of("users"), cursor=first.cursor)
        assert resumed.cursor == first.cursor

    async def test_cursor_resumes_mid_iteration(self, keyspace, users):
        await _fill(keyspace, [key for key, _ in users])
        scan = keyspace.list(Key.of("users"))
        await scan.__anext__()
        await scan.__anext__()

        rest = await keyspace.list(Key.of("users"), cursor=scan.cursor).collect()
        assert [entry.key for entry in rest] == [key for key, _ in users[2:]]

    async def test_cursor_survives_deleted_position(self, keyspace, users):
        await _fill(keyspace, [key for key, _ in users])
        page = keyspace.list(Key.of("users"), limit=Present(5))
        await page.collect()
        await keyspace.delete(Key.of("users", 5))

        rest = await keyspace.list(Key.of("users"), cursor=page.cursor).collect()
        assert [entry.key for entry in rest] == [key for key, _ in users[5:]]


class TestListValidation:
    """Invalid scan arguments."""

    def test_bare_limit_rejected(self, keyspace):
        with pytest.raises(TypeError):
            keyspace.list(Key.of("users"), limit=10)

    def test_bare_cursor_rejected(self, keyspace):
        with pytest.raises(TypeError):
            keyspace.list(Key.of("users"), cursor="abc")

    def test_non_str_cursor_rejected(self, keyspace):
        with pytest.raises(TypeError):
            keyspace.list(Key.of("users"), cursor=Present(5))

    def test_negative_limit_rejected(self, keyspace):
        with pytest.raises(ValueError):
            keyspace.list(Key.of("users"), limit=Present(-1))

    def test_raw_prefix_rejected(self, keyspace):
        with pytest.raises(TypeError):
            keyspace.list(("users",))

    def test_malformed_cursor_rejected(self, keyspace):
        with pytest.raises(ValueError):
            keyspace.list(Key.of("users"), cursor=Present("!!!"))

    def test_cursor_with_foreign_characters_rejected(self, keyspace):
        with pytest.raises(ValueError):
            keyspace.list(Key.of("users"), cursor=Present("MA$A"))

    async def test_cursor_outside_prefix_rejected(self, keyspace):
        """A cursor pointing past the end of the prefix range is refused."""
        await keyspace.set(Key.of("users", 1), 1)
        await keyspace.set(Key.of("users\x00"), 2)
        # "_w" decodes to b"\xff", the first byte past every child of the prefix
        with pytest.raises(ValueError):
            keyspace.list(Key.of("users"), cursor=Present("_w"))
