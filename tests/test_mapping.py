"""Tests for raw response → domain model mapping."""

from __future__ import annotations

from dataclasses import asdict

import pytest

from core.errors import DecodeError
from core.mapping import (
    map_download_info,
    map_file,
    map_file_page,
    map_file_stat,
    map_offline_add_hashes,
    map_offline_task_page,
    map_recycle_items,
    map_search_result,
    map_share_snapshot,
    map_user_info,
)


LISTING_BODY = {
    "state": True,
    "cid": "2593093001609739968",
    "count": "2",
    "offset": 0,
    "page_size": "56",
    "path": [
        {"cid": 0, "name": "root"},
        {"cid": "2593093001609739968", "name": "movies"},
    ],
    "data": [
        {
            "cid": "2593093001609739970",
            "pid": "2593093001609739968",
            "n": "season 1",
            "tp": "1700000000",
            "te": 1700000500,
            "m": "0",
        },
        {
            "fid": "2593093001609740001",
            "cid": "2593093001609739968",
            "n": "movie.mkv",
            "s": "1073741824",
            "sha": "DA39A3EE5E6B4B0D3255BFEF95601890AFD80709",
            "pc": "abc123",
            "m": 1,
            "tp": 1700000000,
            "t": "2023-11-14 22:13",
            "fl": [{"id": "7", "name": "hd", "color": "#FF0000"}],
        },
    ],
}


def test_listing_maps_directories_and_files() -> None:
    page = map_file_page(LISTING_BODY)
    assert page.count == 2
    assert page.page_size == 56
    assert [p.name for p in page.path] == ["root", "movies"]
    assert page.path[0].dir_id == "0"

    folder, movie = page.files
    assert folder.is_directory is True
    assert folder.file_id == "2593093001609739970"
    assert folder.parent_id == "2593093001609739968"
    assert folder.update_time == 1700000500

    assert movie.is_directory is False
    assert movie.file_id == "2593093001609740001"
    assert movie.parent_id == "2593093001609739968"
    assert movie.size == 1073741824
    assert movie.star is True
    assert movie.labels[0].name == "hd"


def test_missing_labels_map_to_empty_list() -> None:
    item = {"fid": "1", "cid": "0", "n": "a.txt", "s": 3}
    assert map_file(item).labels == []
    assert map_file({**item, "fl": None}).labels == []


def test_formatted_display_time_is_not_fatal() -> None:
    movie = map_file_page(LISTING_BODY).files[1]
    assert movie.update_time == 0


def test_missing_arrays_map_to_empty_lists() -> None:
    page = map_file_page({"state": True, "count": 0})
    assert page.files == []
    assert page.path == []
    assert asdict(page)["files"] == []


def test_malformed_scalar_raises_decode_error() -> None:
    with pytest.raises(DecodeError) as info:
        map_file({"fid": "1", "cid": "0", "s": "big"})
    assert info.value.field == "s"


def test_search_result() -> None:
    body = {
        "state": True,
        "count": 1,
        "offset": "0",
        "page_size": 30,
        "order": "file_name",
        "is_asc": "1",
        "data": [{"fid": "9", "cid": "0", "n": "foo.txt", "s": "12", "m": "1", "tp": "1600000000"}],
    }
    result = map_search_result(body)
    assert result.is_asc is True
    assert result.files[0].name == "foo.txt"
    assert result.files[0].size == 12
    assert result.files[0].create_time == 1600000000


def test_file_stat() -> None:
    body = {
        "file_name": "docs",
        "pick_code": "pc1",
        "sha1": "",
        "file_category": "0",
        "count": "12",
        "folder_count": "3",
        "ptime": "1600000000",
        "utime": 1600000100,
        "paths": [{"file_id": 0, "file_name": "root"}],
    }
    stat = map_file_stat(body)
    assert stat.is_directory is True
    assert stat.file_count == 12
    assert stat.dir_count == 3
    assert stat.parents[0].dir_id == "0"


def test_share_snapshot() -> None:
    body = {
        "state": True,
        "data": {
            "shareinfo": {
                "snap_id": 123,
                "share_title": "holiday",
                "share_state": "1",
                "file_size": "2048",
                "receive_count": "4",
                "create_time": "1600000000",
                "expire_time": -1,
            },
            "count": 1,
            "list": [{"fid": "5", "cid": "1", "n": "photo.jpg", "s": 2048}],
        },
    }
    snap = map_share_snapshot(body)
    assert snap.share.snap_id == "123"
    assert snap.share.file_size == 2048
    assert snap.share.expire_time == -1
    assert snap.files[0].name == "photo.jpg"


def test_share_snapshot_without_data() -> None:
    snap = map_share_snapshot({"state": True})
    assert snap.count == 0
    assert snap.files == []


def test_offline_task_page() -> None:
    body = {
        "state": True,
        "page": 1,
        "page_count": "1",
        "page_row": 30,
        "count": 1,
        "total": "1",
        "quota": 3000,
        "tasks": [
            {
                "info_hash": "abcdef",
                "name": "ubuntu.iso",
                "size": "4700000000",
                "url": "magnet:?xt=urn:btih:abcdef",
                "add_time": "1700000000",
                "peers": "12",
                "rateDownload": "1048576.5",
                "status": 1,
                "percentDone": 42.5,
                "last_update": 1700000100,
                "left_time": "3600",
                "file_id": "",
                "delete_file_id": "",
                "wp_path_id": "99",
                "move": 0,
            }
        ],
    }
    page = map_offline_task_page(body)
    task = page.tasks[0]
    assert task.size == 4700000000
    assert task.percent == 42.5
    assert task.rate_download == 1048576.5
    assert task.status_text == "downloading"
    assert task.dir_id == "99"
    assert task.left_time == 3600


def test_offline_task_page_null_tasks() -> None:
    assert map_offline_task_page({"state": True, "tasks": None}).tasks == []


def test_offline_add_hashes() -> None:
    body = {"state": True, "result": [{"info_hash": "h1"}, {"info_hash": ""}, {"info_hash": "h2"}]}
    assert map_offline_add_hashes(body) == ["h1", "h2"]
    assert map_offline_add_hashes({"state": True, "info_hash": "h3"}) == ["h3"]


def test_offline_add_hashes_skips_rejected_items() -> None:
    body = {
        "state": True,
        "result": [
            {"state": True, "info_hash": "ok1"},
            {"state": False, "errcode": 10008, "error_msg": "task exists", "info_hash": "dup"},
            {"state": "0", "info_hash": "bad"},
            {"state": 1, "info_hash": "ok2"},
        ],
    }
    assert map_offline_add_hashes(body) == ["ok1", "ok2"]


def test_recycle_items() -> None:
    body = {
        "state": True,
        "data": [
            {
                "id": "777",
                "file_name": "old.txt",
                "type": "1",
                "file_size": "10",
                "dtime": "1650000000",
                "cid": 0,
                "parent_name": "root",
            }
        ],
    }
    (item,) = map_recycle_items(body)
    assert item.item_id == "777"
    assert item.file_size == 10
    assert item.delete_time == 1650000000
    assert item.parent_id == "0"


def test_user_info() -> None:
    info = map_user_info({"state": True, "data": {"user_id": "31337", "user_name": "alice"}})
    assert info.user_id == 31337
    assert info.user_name == "alice"


# ═════════════════════════════════════════════════════════════════════════════
# Downloads
# ═════════════════════════════════════════════════════════════════════════════


def test_download_info_picks_entry_with_url() -> None:
    data = {
        "2000": {"file_name": "dir", "file_size": "0", "pick_code": "pcdir", "url": False},
        "2001": {
            "file_name": "movie.mkv",
            "file_size": "1048576",
            "pick_code": "pc1",
            "url": {"url": "https://cdn.example.net/movie.mkv?t=1"},
        },
    }
    info = map_download_info(data, "pc1")
    assert info.url == "https://cdn.example.net/movie.mkv?t=1"
    assert (info.file_name, info.size, info.file_id) == ("movie.mkv", 1048576, "2001")


def test_download_info_without_url() -> None:
    with pytest.raises(DecodeError, match="no download URL"):
        map_download_info({"2000": {"file_name": "dir", "url": False}}, "pcdir")
