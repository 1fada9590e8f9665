# =============================================================================
# core/client.py  —  115 Driver Client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   One method per remote operation.  Every method follows the same pipeline:
#
#       options ──▶ compose() ──▶ Transport.get/post ──▶ classify() ──▶ map_*()
#        (query.py)                (httpx)              (classify.py)  (mapping.py)
#
#   If classify() returns an APIError it is raised immediately and the mapper
#   never runs, so a caller gets either a domain result or an exception,
#   never both.
#
# WHAT THIS MODULE DOES NOT DO:
#   - No retries or backoff.  A failure is raised once; the caller decides.
#   - No credential refresh.  The cookie is fixed for the client's lifetime.
#
# THREAD SAFETY:
#   The only shared state is the httpx.Client, which is safe to use from
#   several threads.  Parameter maps are built fresh per call.
# =============================================================================

import json
import logging
import time
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, TypeVar
from urllib.parse import quote

import httpx
from p115cipher import rsa_decode, rsa_encode

from core import query
from core.classify import classify
from core.config import Settings, parse_cookie
from core.errors import APIError, DecodeError, ValidationError
from core.mapping import (
    map_created_dir_id,
    map_download_info,
    map_file_page,
    map_file_stat,
    map_offline_add_hashes,
    map_offline_sign,
    map_offline_task_page,
    map_recycle_items,
    map_search_result,
    map_share_snapshot,
    map_user_info,
)
from core.models import (
    DownloadInfo,
    File,
    FilePage,
    FileStat,
    OfflineTaskPage,
    RecycleItem,
    SearchResult,
    ShareSnapshot,
    UserInfo,
)
from core.query import QueryOption

logger = logging.getLogger(__name__)

T = TypeVar("T")

# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------
API_USER_INFO = "https://my.115.com/"
API_FILE_LIST = "https://webapi.115.com/files"
API_FILE_STAT = "https://webapi.115.com/category/get"
API_FILE_SEARCH = "https://webapi.115.com/files/search"
API_DIR_ADD = "https://webapi.115.com/files/add"
API_FILE_RENAME = "https://webapi.115.com/files/batch_rename"
API_FILE_MOVE = "https://webapi.115.com/files/move"
API_FILE_COPY = "https://webapi.115.com/files/copy"
API_FILE_DELETE = "https://webapi.115.com/rb/delete"
API_SHARE_SNAP = "https://webapi.115.com/share/snap"
API_RECYCLE_LIST = "https://webapi.115.com/rb"
API_RECYCLE_REVERT = "https://webapi.115.com/rb/revert"
API_RECYCLE_CLEAN = "https://webapi.115.com/rb/secret_del"
API_OFFLINE_SPACE = "https://115.com/"
API_OFFLINE_ADD = "https://115.com/web/lixian/"
API_OFFLINE = "https://lixian.115.com/lixian/"
API_DOWNLOAD_URL = "https://proapi.115.com/app/chrome/downurl"

SHARE_REFERER_TEMPLATE = "https://115cdn.com/s/{share_code}?password={receive_code}&"

# Largest page the listing endpoint will serve in one request.
LIST_PAGE_LIMIT = 1000

DOWNLOAD_CHUNK_SIZE = 1 << 20


def build_share_referer(share_code: str, receive_code: str) -> str:
    """Referer header the share/snap endpoint requires.  Both codes are percent-encoded."""
    return SHARE_REFERER_TEMPLATE.format(
        share_code=quote(share_code, safe=""),
        receive_code=quote(receive_code, safe=""),
    )


def _indexed(prefix: str, values: Iterable[str]) -> dict[str, str]:
    """{"fid[0]": a, "fid[1]": b, ...} form encoding used by batch endpoints."""
    return {f"{prefix}[{i}]": value for i, value in enumerate(values)}


def _require(value: str, name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip()


def _require_ids(values: Optional[Sequence[str]], name: str) -> list[str]:
    ids = [v.strip() for v in (values or []) if v and v.strip()]
    if not ids:
        raise ValidationError(f"at least one {name} is required")
    return ids


def _header_value(value: str, name: str) -> str:
    if not value.isascii():
        raise ValidationError(f"{name} must contain only ASCII characters")
    return value


# =============================================================================
# Transport — the HTTP collaborator
# =============================================================================
class Transport:
    """Performs a request and returns ``(body, http_status, error)``.

    Transport failures are returned, not raised, so that classify() sees
    all three outcomes in one place.  ``format=json`` is added to every
    query.  Some endpoints send JSON with a text/html content type, so the
    body is parsed regardless of the header.
    """

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    def get(
        self,
        url: str,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> tuple[Any, int, Optional[BaseException]]:
        return self._send("GET", url, params=params, headers=headers)

    def post(
        self,
        url: str,
        params: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> tuple[Any, int, Optional[BaseException]]:
        return self._send("POST", url, params=params, data=data, headers=headers)

    def _send(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> tuple[Any, int, Optional[BaseException]]:
        query_params = dict(params or {})
        query_params.setdefault("format", "json")
        logger.debug("%s %s params=%s", method, url, query_params)
        try:
            response = self._http.request(
                method,
                url,
                params=query_params,
                data=dict(data) if data else None,
                headers=dict(headers) if headers else None,
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            return None, 0, exc

        body: Any = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                logger.warning("%s %s returned a non-JSON body", method, url)
        return body, response.status_code, None


# =============================================================================
# Pan115Client — one method per operation
# =============================================================================
class Pan115Client:
    """Synchronous client for the 115 web API.

    Use as a context manager, or call close() when done::

        with Pan115Client(Settings.from_env()) as client:
            page = client.list_page("0", limit=20)
    """

    def __init__(
        self,
        settings: Settings,
        http_transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        cookies = parse_cookie(settings.cookie)
        self._http = httpx.Client(
            headers={
                "User-Agent": settings.user_agent,
                "Cookie": "; ".join(f"{k}={v}" for k, v in cookies.items()),
                "Accept": "application/json, text/plain, */*",
            },
            timeout=httpx.Timeout(settings.timeout_seconds),
            follow_redirects=True,
            transport=http_transport,
        )
        self.transport = Transport(self._http)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "Pan115Client":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------
    def _get(
        self,
        url: str,
        params: Mapping[str, str],
        mapper: Callable[[dict], T],
        headers: Optional[Mapping[str, str]] = None,
    ) -> T:
        body, status, error = self.transport.get(url, params=params, headers=headers)
        return self._finish(url, body, status, error, mapper)

    def _post(
        self,
        url: str,
        data: Mapping[str, str],
        mapper: Callable[[dict], T],
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> T:
        body, status, error = self.transport.post(url, params=params, data=data, headers=headers)
        return self._finish(url, body, status, error, mapper)

    @staticmethod
    def _finish(
        url: str,
        body: Any,
        status: int,
        error: Optional[BaseException],
        mapper: Callable[[dict], T],
    ) -> T:
        failure = classify(error, body, status)
        if failure is not None:
            logger.warning("%s: %s", url, failure)
            raise failure
        return mapper(body)

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------
    def user_info(self) -> UserInfo:
        return self._get(API_USER_INFO, {"ct": "ajax", "ac": "nav"}, map_user_info)

    def cookie_check(self) -> UserInfo:
        """Verify the cookie is logged in; raises APIError if not."""
        info = self.user_info()
        logger.info("Logged in as %s (uid %s)", info.user_name, info.user_id)
        return info

    # -------------------------------------------------------------------------
    # Files and directories
    # -------------------------------------------------------------------------
    def list_page(self, dir_id: str = "0", offset: int = 0, limit: int = 0) -> FilePage:
        """One page of a directory.  ``limit <= 0`` uses the endpoint default."""
        params = query.compose(
            query.LIST_DEFAULTS,
            [query.dir_id(dir_id), query.offset(offset), query.limit(limit)],
        )
        return self._get(API_FILE_LIST, params, map_file_page)

    def list_all(self, dir_id: str = "0") -> list[File]:
        """Every entry of a directory, fetched page by page."""
        files: list[File] = []
        while True:
            page = self.list_page(dir_id, offset=len(files), limit=LIST_PAGE_LIMIT)
            files.extend(page.files)
            if not page.files or len(files) >= page.count:
                return files

    def stat(self, file_id: str) -> FileStat:
        file_id = _require(file_id, "file_id")
        return self._get(API_FILE_STAT, {"cid": file_id}, map_file_stat)

    def mkdir(self, parent_id: str, name: str) -> str:
        """Create a directory and return its ID."""
        name = _require(name, "name")
        data = {"pid": parent_id or "0", "cname": name}
        return self._post(API_DIR_ADD, data, map_created_dir_id)

    def rename(self, file_id: str, new_name: str) -> None:
        file_id = _require(file_id, "file_id")
        new_name = _require(new_name, "new_name")
        self._post(API_FILE_RENAME, {f"files_new_name[{file_id}]": new_name}, _ignore)

    def move(self, dir_id: str, file_ids: Sequence[str]) -> None:
        ids = _require_ids(file_ids, "file_id")
        self._post(API_FILE_MOVE, {"pid": dir_id or "0", **_indexed("fid", ids)}, _ignore)

    def copy(self, dir_id: str, file_ids: Sequence[str]) -> None:
        ids = _require_ids(file_ids, "file_id")
        self._post(API_FILE_COPY, {"pid": dir_id or "0", **_indexed("fid", ids)}, _ignore)

    def delete(self, file_ids: Sequence[str]) -> None:
        ids = _require_ids(file_ids, "file_id")
        self._post(API_FILE_DELETE, {"ignore_warn": "1", **_indexed("fid", ids)}, _ignore)

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------
    def search(self, options: Sequence[QueryOption] = ()) -> SearchResult:
        params = query.compose(query.SEARCH_DEFAULTS, options)
        return self._get(API_FILE_SEARCH, params, map_search_result)

    # -------------------------------------------------------------------------
    # Shares
    # -------------------------------------------------------------------------
    def get_share_snap(
        self,
        share_code: str,
        receive_code: str,
        dir_id: str = "",
        options: Sequence[QueryOption] = (),
        user_agent: str = "",
    ) -> ShareSnapshot:
        share_code = _require(share_code, "share_code")
        receive_code = _require(receive_code, "receive_code")
        defaults = {
            "share_code": share_code,
            "receive_code": receive_code,
            "cid": dir_id or "",
            **query.SHARE_SNAP_DEFAULTS,
        }
        params = query.compose(defaults, options)
        headers = {"referer": build_share_referer(share_code, receive_code)}
        if user_agent:
            headers["User-Agent"] = _header_value(user_agent, "user_agent")
        return self._get(API_SHARE_SNAP, params, map_share_snapshot, headers=headers)

    # -------------------------------------------------------------------------
    # Recycle bin
    # -------------------------------------------------------------------------
    def list_recycle_bin(self, offset: int = 0, limit: int = 0) -> list[RecycleItem]:
        params = query.compose(query.RECYCLE_DEFAULTS, [query.offset(offset), query.limit(limit)])
        return self._get(API_RECYCLE_LIST, params, map_recycle_items)

    def revert_recycle_bin(self, item_ids: Sequence[str]) -> None:
        ids = _require_ids(item_ids, "item_id")
        self._post(API_RECYCLE_REVERT, _indexed("rid", ids), _ignore)

    def clean_recycle_bin(self, password: str, item_ids: Sequence[str]) -> None:
        ids = _require_ids(item_ids, "item_id")
        self._post(API_RECYCLE_CLEAN, {"password": password or "", **_indexed("rid", ids)}, _ignore)

    # -------------------------------------------------------------------------
    # Offline downloads
    # -------------------------------------------------------------------------
    def list_offline_tasks(self, page: int = 1) -> OfflineTaskPage:
        params = query.compose(
            {"ct": "lixian", "ac": "task_lists", **query.OFFLINE_TASK_DEFAULTS},
            [query.page(page)],
        )
        return self._get(API_OFFLINE, params, map_offline_task_page)

    def add_offline_task_uris(self, uris: Sequence[str], save_dir_id: str = "") -> list[str]:
        """Queue http/ed2k/magnet URIs; returns the info hashes of accepted tasks."""
        links = _require_ids(uris, "uri")
        user = self.user_info()
        sign, sign_time = self._get(API_OFFLINE_SPACE, {"ct": "offline", "ac": "space"}, map_offline_sign)
        data = {
            "savepath": "",
            "wp_path_id": save_dir_id or "",
            "uid": str(user.user_id),
            "sign": sign,
            "time": str(sign_time),
            **_indexed("url", links),
        }
        return self._post(
            API_OFFLINE_ADD,
            data,
            map_offline_add_hashes,
            params={"ct": "lixian", "ac": "add_task_urls"},
        )

    def delete_offline_tasks(self, hashes: Sequence[str], delete_files: bool = False) -> None:
        ids = _require_ids(hashes, "hash")
        data = {"flag": "1" if delete_files else "0", **_indexed("hash", ids)}
        self._post(API_OFFLINE, data, _ignore, params={"ct": "lixian", "ac": "task_del"})

    def clear_offline_tasks(self, clear_flag: int = 0) -> None:
        """0 clears completed tasks, 1 clears all tasks."""
        self._post(API_OFFLINE, {"flag": str(int(clear_flag))}, _ignore, params={"ct": "lixian", "ac": "task_clear"})

    # -------------------------------------------------------------------------
    # Downloads
    # -------------------------------------------------------------------------
    def download_info(self, pick_code: str, user_agent: str = "") -> DownloadInfo:
        """Resolve a pick code to a direct download URL.

        The URL is bound to the User-Agent that requested it, so fetch it
        with the same ``user_agent`` (the client default when empty).
        """
        pick_code = _require(pick_code, "pick_code")
        payload = json.dumps({"pickcode": pick_code}).encode()
        headers = {"User-Agent": _header_value(user_agent, "user_agent")} if user_agent else None
        return self._post(
            API_DOWNLOAD_URL,
            {"data": rsa_encode(payload).decode("ascii")},
            lambda body: map_download_info(_decrypt_data(body), pick_code),
            params={"t": str(int(time.time()))},
            headers=headers,
        )

    def download_file(self, pick_code: str, local_path: str, user_agent: str = "") -> DownloadInfo:
        """Stream a file to ``local_path``.  OSError from the local write propagates."""
        info = self.download_info(pick_code, user_agent)
        headers = {"User-Agent": user_agent} if user_agent else None
        request = self._http.build_request("GET", info.url, headers=headers)
        # The session cookie is for 115.com hosts, not the CDN.
        request.headers.pop("Cookie", None)

        logger.info("Downloading %s to %s", info.file_name, local_path)
        try:
            response = self._http.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise APIError.transport(exc) from exc
        try:
            if not 200 <= response.status_code < 300:
                raise APIError.http_status(response.status_code)
            with open(local_path, "wb") as fh:
                for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                    fh.write(chunk)
        except httpx.HTTPError as exc:
            raise APIError.transport(exc) from exc
        finally:
            response.close()
        return info


def _decrypt_data(body: dict) -> dict:
    """Decode the RSA-wrapped ``data`` field of a proapi response."""
    raw = body.get("data")
    if not isinstance(raw, str) or not raw:
        raise DecodeError("data", raw, "expected an encrypted string")
    try:
        data = json.loads(rsa_decode(raw.encode("ascii")))
    except ValueError as exc:
        raise DecodeError("data", raw, str(exc)) from exc
    if not isinstance(data, dict):
        raise DecodeError("data", raw, "expected an object")
    return data


def _ignore(body: dict) -> None:
    return None
