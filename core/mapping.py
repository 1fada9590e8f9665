# =============================================================================
# core/mapping.py  —  Raw Response → Domain Model
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Converts an already-classified 115 JSON body into the dataclasses in
#   core/models.py.  Every function here is pure: no I/O, no logging, no
#   state.
#
# HOW FIELDS ARE READ:
#   - Numeric/flag fields go through core.scalar.decode() with the field's
#     ScalarKind, so "1024", 1024 and "" all land as int.
#   - ID fields (fid, cid, pid, ...) are normalized to str.
#   - Array fields go through _items(): missing or null becomes [].
#
# FAILURE:
#   These functions are only called after classify() returned None, so the
#   only error they raise is DecodeError for a malformed scalar.
# =============================================================================

from typing import Optional

from core.errors import DecodeError
from core.models import (
    File,
    FilePage,
    FileStat,
    DownloadInfo,
    LabelInfo,
    OfflineTask,
    OfflineTaskPage,
    PathEntry,
    RecycleItem,
    SearchResult,
    ShareInfo,
    ShareSnapshot,
    UserInfo,
)
from core.scalar import ScalarKind, decode

_OFFLINE_STATUS_TEXT: dict[int, str] = {
    -1: "failed",
    0: "queued",
    1: "downloading",
    2: "completed",
}


# -----------------------------------------------------------------------------
# Field readers
# -----------------------------------------------------------------------------

def _int(raw: dict, key: str) -> int:
    return decode(ScalarKind.INT, raw.get(key), key)


def _int64(raw: dict, key: str) -> int:
    return decode(ScalarKind.INT64, raw.get(key), key)


def _flag(raw: dict, key: str) -> bool:
    return decode(ScalarKind.BOOL_AS_INT, raw.get(key), key)


def _float(raw: dict, key: str) -> float:
    return decode(ScalarKind.FLOAT, raw.get(key), key)


def _text(raw: dict, key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    raise DecodeError(key, value, "expected a string or integer identifier")


def _items(raw: dict, key: str) -> list[dict]:
    value = raw.get(key)
    if value is None:
        return []
    if isinstance(value, dict):
        # Some endpoints send {} instead of [] for an empty page.
        return [item for item in value.values() if isinstance(item, dict)]
    if not isinstance(value, list):
        raise DecodeError(key, value, "expected an array")
    return [item for item in value if isinstance(item, dict)]


def _object(raw: dict, key: str) -> dict:
    value = raw.get(key)
    if isinstance(value, dict):
        return value
    return {}


def _first_int64(raw: dict, *keys: str) -> Optional[int]:
    for key in keys:
        if raw.get(key) not in (None, ""):
            return _int64(raw, key)
    return None


# -----------------------------------------------------------------------------
# Files
# -----------------------------------------------------------------------------

def map_label(raw: dict) -> LabelInfo:
    return LabelInfo(
        label_id=_text(raw, "id"),
        name=_text(raw, "name"),
        color=_text(raw, "color"),
    )


def map_file(raw: dict) -> File:
    """Project one listing/search/share item.

    An item carrying ``fid`` is a file whose parent is ``cid``.  An item
    without ``fid`` is a directory: its own ID is ``cid`` and its parent is
    ``pid``.
    """
    fid = _text(raw, "fid")
    if fid:
        file_id, parent_id, is_directory = fid, _text(raw, "cid"), False
    else:
        file_id, parent_id, is_directory = _text(raw, "cid"), _text(raw, "pid"), True

    update_time = _first_int64(raw, "te", "tu")
    if update_time is None:
        # "t" is a display timestamp; some endpoints format it as a date string.
        try:
            update_time = _int64(raw, "t")
        except DecodeError:
            update_time = 0

    return File(
        file_id=file_id,
        parent_id=parent_id,
        name=_text(raw, "n"),
        size=_int64(raw, "s"),
        pick_code=_text(raw, "pc"),
        sha1=_text(raw, "sha"),
        is_directory=is_directory,
        star=_flag(raw, "m"),
        create_time=_int64(raw, "tp"),
        update_time=update_time,
        thumb_url=_text(raw, "u"),
        labels=[map_label(item) for item in _items(raw, "fl")],
    )


def map_path_entry(raw: dict) -> PathEntry:
    return PathEntry(dir_id=_text(raw, "cid"), name=_text(raw, "name"))


def map_file_page(body: dict) -> FilePage:
    return FilePage(
        dir_id=_text(body, "cid"),
        count=_int(body, "count"),
        offset=_int(body, "offset"),
        page_size=_int(body, "page_size"),
        files=[map_file(item) for item in _items(body, "data")],
        path=[map_path_entry(item) for item in _items(body, "path")],
    )


def map_file_stat(body: dict) -> FileStat:
    # file_category: "0" for directories, "1" for files
    return FileStat(
        name=_text(body, "file_name"),
        pick_code=_text(body, "pick_code"),
        sha1=_text(body, "sha1"),
        is_directory=not _flag(body, "file_category"),
        file_count=_int(body, "count"),
        dir_count=_int(body, "folder_count"),
        create_time=_int64(body, "ptime"),
        update_time=_int64(body, "utime"),
        parents=[
            PathEntry(dir_id=_text(item, "file_id"), name=_text(item, "file_name"))
            for item in _items(body, "paths")
        ],
    )


def map_created_dir_id(body: dict) -> str:
    return _text(body, "cid") or _text(body, "file_id")


# -----------------------------------------------------------------------------
# Search
# -----------------------------------------------------------------------------

def map_search_result(body: dict) -> SearchResult:
    return SearchResult(
        count=_int(body, "count"),
        offset=_int(body, "offset"),
        page_size=_int(body, "page_size"),
        order=_text(body, "order"),
        is_asc=_flag(body, "is_asc"),
        files=[map_file(item) for item in _items(body, "data")],
    )


# -----------------------------------------------------------------------------
# Shares
# -----------------------------------------------------------------------------

def map_share_info(raw: dict) -> ShareInfo:
    return ShareInfo(
        snap_id=_text(raw, "snap_id"),
        title=_text(raw, "share_title"),
        state=_int(raw, "share_state"),
        file_size=_int64(raw, "file_size"),
        receive_count=_int(raw, "receive_count"),
        create_time=_int64(raw, "create_time"),
        expire_time=_int64(raw, "expire_time"),
    )


def map_share_snapshot(body: dict) -> ShareSnapshot:
    data = _object(body, "data")
    return ShareSnapshot(
        share=map_share_info(_object(data, "shareinfo")),
        count=_int(data, "count"),
        files=[map_file(item) for item in _items(data, "list")],
    )


# -----------------------------------------------------------------------------
# Recycle bin
# -----------------------------------------------------------------------------

def map_recycle_item(raw: dict) -> RecycleItem:
    return RecycleItem(
        item_id=_text(raw, "id"),
        file_name=_text(raw, "file_name"),
        file_type=_int(raw, "type"),
        file_size=_int64(raw, "file_size"),
        delete_time=_int64(raw, "dtime"),
        parent_id=_text(raw, "cid"),
        parent_name=_text(raw, "parent_name"),
        pick_code=_text(raw, "pick_code"),
    )


def map_recycle_items(body: dict) -> list[RecycleItem]:
    return [map_recycle_item(item) for item in _items(body, "data")]


# -----------------------------------------------------------------------------
# Offline downloads
# -----------------------------------------------------------------------------

def offline_status_text(status: int) -> str:
    return _OFFLINE_STATUS_TEXT.get(status, "unknown")


def map_offline_task(raw: dict) -> OfflineTask:
    status = _int(raw, "status")
    return OfflineTask(
        info_hash=_text(raw, "info_hash"),
        name=_text(raw, "name"),
        size=_int64(raw, "size"),
        url=_text(raw, "url"),
        add_time=_int64(raw, "add_time"),
        peers=_int(raw, "peers"),
        rate_download=_float(raw, "rateDownload"),
        status=status,
        status_text=offline_status_text(status),
        percent=_float(raw, "percentDone"),
        update_time=_int64(raw, "last_update"),
        left_time=_int64(raw, "left_time"),
        file_id=_text(raw, "file_id"),
        delete_file_id=_text(raw, "delete_file_id"),
        dir_id=_text(raw, "wp_path_id"),
        move=_int(raw, "move"),
    )


def map_offline_task_page(body: dict) -> OfflineTaskPage:
    return OfflineTaskPage(
        page=_int(body, "page"),
        page_count=_int(body, "page_count"),
        page_row=_int(body, "page_row"),
        count=_int(body, "count"),
        total=_int(body, "total"),
        quota=_int(body, "quota"),
        tasks=[map_offline_task(item) for item in _items(body, "tasks")],
    )


def _accepted(item: dict) -> bool:
    # Items without their own state inherit the (successful) body state.
    state = item.get("state", True)
    if isinstance(state, bool):
        return state
    try:
        return decode(ScalarKind.BOOL_AS_INT, state, "state")
    except DecodeError:
        return False


def map_offline_add_hashes(body: dict) -> list[str]:
    """Info hashes of accepted tasks from an add_task_urls response.

    Items whose own ``state`` is false were rejected and are left out.
    """
    results = _items(body, "result")
    if not results and body.get("info_hash"):
        results = [body]
    return [
        _text(item, "info_hash")
        for item in results
        if _accepted(item) and _text(item, "info_hash")
    ]


# -----------------------------------------------------------------------------
# Account
# -----------------------------------------------------------------------------

def map_user_info(body: dict) -> UserInfo:
    data = _object(body, "data")
    return UserInfo(user_id=_int64(data, "user_id"), user_name=_text(data, "user_name"))


def map_offline_sign(body: dict) -> tuple[str, int]:
    return _text(body, "sign"), _int64(body, "time")


# -----------------------------------------------------------------------------
# Downloads
# -----------------------------------------------------------------------------

def map_download_info(data: dict, pick_code: str) -> DownloadInfo:
    """Pick the entry with a usable URL from a decrypted downurl payload.

    The payload is keyed by file ID.  Directories come back with
    ``"url": false``.
    """
    for file_id, raw in data.items():
        if not isinstance(raw, dict):
            continue
        url = raw.get("url")
        link = _text(url, "url") if isinstance(url, dict) else ""
        if link:
            return DownloadInfo(
                url=link,
                file_name=_text(raw, "file_name"),
                size=_int64(raw, "file_size"),
                pick_code=_text(raw, "pick_code") or pick_code,
                file_id=str(file_id),
            )
    raise DecodeError("url", pick_code, "no download URL in response")
