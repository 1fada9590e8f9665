# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines every MCP tool the server exposes.  Each tool is a thin wrapper
#   around one Pan115Client method: it turns tool arguments into client
#   arguments (query options for search/share), calls the client, and
#   converts the dataclass result into a dict.
#
# ERROR CONTRACT:
#   The core raises typed exceptions (core/errors.py).  Tools catch
#   DriverError and return {"error": "Failed to <action>: <reason>"} so the
#   agent always receives a dict it can read.
#
# RUNNING THIS SERVER:
#   a) Via the entry point:   python main.py --cookie "UID=...;CID=...;SEID=..."
#   b) Standalone:            python -m tools.mcp_server   (reads PAN115_COOKIE)
# =============================================================================

import json
import logging
import sys
from dataclasses import asdict
from typing import Optional

from fastmcp import FastMCP

from core import query
from core.client import Pan115Client
from core.config import Settings
from core.errors import DriverError

# =============================================================================
# Logging Setup
# =============================================================================
# STDOUT carries the MCP protocol, so all logging goes to STDERR.
#   CYAN   incoming tool calls
#   YELLOW intermediate status
#   GREEN  responses
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the tool response as compact JSON in GREEN, then return it."""
    logging.info(f"{_GREEN}  ← {tool_name} response: {json.dumps(result, separators=(',', ':'))}{_RESET}")
    return result


def _fail(tool_name: str, action: str, exc: Exception) -> dict:
    _log_status(f"{type(exc).__name__}: {exc}")
    return _log_response(tool_name, {"error": f"Failed to {action}: {exc}"})


# =============================================================================
# Server instance and client wiring
# =============================================================================
mcp = FastMCP("115driver-mcp-server")

_client: Optional[Pan115Client] = None


def configure(client: Pan115Client) -> None:
    """Install the client every tool uses (called by main.py)."""
    global _client
    _client = client


def get_client() -> Pan115Client:
    """Return the configured client, building one from the environment if needed."""
    global _client
    if _client is None:
        _client = Pan115Client(Settings.from_env())
    return _client


# =============================================================================
# Directory and file tools
# =============================================================================
@mcp.tool()
def list_directory(dir_id: str = "0", offset: int = 0, limit: int = 0) -> dict:
    """List files and directories in a directory.

    Args:
        dir_id: Directory ID to list; "0" is the root directory.
        offset: Pagination offset (default 0).
        limit: Number of entries to return.  0 or less lists every entry.

    Returns:
        A dict with "files" (list of file dicts) and "count".  When a limit is
        given, also "offset", "page_size" and "path" (the parent chain).
    """
    _log_request("list_directory", dir_id=dir_id, offset=offset, limit=limit)
    try:
        if limit > 0:
            page = get_client().list_page(dir_id, offset=offset, limit=limit)
            _log_status(f"Got {len(page.files)} of {page.count} entries")
            return _log_response("list_directory", asdict(page))
        files = get_client().list_all(dir_id)
    except DriverError as exc:
        return _fail("list_directory", "list directory", exc)
    _log_status(f"Got {len(files)} entries")
    return _log_response("list_directory", {
        "dir_id": dir_id,
        "count": len(files),
        "files": [asdict(f) for f in files],
    })


@mcp.tool()
def mkdir(parent_id: str, name: str) -> dict:
    """Create a new directory.

    Args:
        parent_id: ID of the parent directory ("0" for root).
        name: Name of the new directory.

    Returns:
        {"directory_id": <new ID>}
    """
    _log_request("mkdir", parent_id=parent_id, name=name)
    try:
        dir_id = get_client().mkdir(parent_id, name)
    except DriverError as exc:
        return _fail("mkdir", "create directory", exc)
    return _log_response("mkdir", {"directory_id": dir_id})


@mcp.tool()
def delete(file_ids: list[str]) -> dict:
    """Delete files or directories (they move to the recycle bin).

    Args:
        file_ids: IDs of the files or directories to delete.
    """
    _log_request("delete", file_ids=file_ids)
    if not file_ids:
        return _log_response("delete", {"error": "No file IDs provided"})
    try:
        get_client().delete(file_ids)
    except DriverError as exc:
        return _fail("delete", "delete files", exc)
    return _log_response("delete", {"message": "Files deleted successfully"})


@mcp.tool()
def rename(file_id: str, new_name: str) -> dict:
    """Rename a file or directory.

    Args:
        file_id: ID of the file or directory.
        new_name: The new name.
    """
    _log_request("rename", file_id=file_id, new_name=new_name)
    try:
        get_client().rename(file_id, new_name)
    except DriverError as exc:
        return _fail("rename", "rename file", exc)
    return _log_response("rename", {"message": "File renamed successfully"})


@mcp.tool()
def move(dir_id: str, file_ids: list[str]) -> dict:
    """Move files or directories into another directory.

    Args:
        dir_id: Target directory ID.
        file_ids: IDs of the files or directories to move.
    """
    _log_request("move", dir_id=dir_id, file_ids=file_ids)
    if not file_ids:
        return _log_response("move", {"error": "No file IDs provided"})
    try:
        get_client().move(dir_id, file_ids)
    except DriverError as exc:
        return _fail("move", "move files", exc)
    return _log_response("move", {"message": "Files moved successfully"})


@mcp.tool()
def copy(dir_id: str, file_ids: list[str]) -> dict:
    """Copy files or directories into another directory.

    Args:
        dir_id: Target directory ID.
        file_ids: IDs of the files or directories to copy.
    """
    _log_request("copy", dir_id=dir_id, file_ids=file_ids)
    if not file_ids:
        return _log_response("copy", {"error": "No file IDs provided"})
    try:
        get_client().copy(dir_id, file_ids)
    except DriverError as exc:
        return _fail("copy", "copy files", exc)
    return _log_response("copy", {"message": "Files copied successfully"})


@mcp.tool()
def stat(file_id: str) -> dict:
    """Get detailed information about a file or directory.

    Returns:
        name, pick_code, sha1, is_directory, file_count, dir_count,
        create_time, update_time (unix seconds) and parents (root first).
    """
    _log_request("stat", file_id=file_id)
    try:
        info = get_client().stat(file_id)
    except DriverError as exc:
        return _fail("stat", "get file info", exc)
    return _log_response("stat", asdict(info))


# =============================================================================
# Downloads
# =============================================================================
@mcp.tool()
def get_download_info(pick_code: str, user_agent: str = "") -> dict:
    """Get download information for a file: direct URL, file name and size.

    Args:
        pick_code: Pick code of the file (from list_directory, search or stat).
        user_agent: User-Agent the URL will be fetched with.  The URL only
            works with this exact User-Agent; defaults to the 115 browser UA.
    """
    _log_request("get_download_info", pick_code=pick_code, user_agent=user_agent)
    try:
        info = get_client().download_info(pick_code, user_agent)
    except DriverError as exc:
        return _fail("get_download_info", "get download info", exc)
    return _log_response("get_download_info", asdict(info))


@mcp.tool()
def download_file(pick_code: str, local_path: str, user_agent: str = "") -> dict:
    """Download a file from 115 cloud storage to a local path.

    Args:
        pick_code: Pick code of the file to download.
        local_path: Where to save the file on this machine.
        user_agent: Optional User-Agent for both the link request and the download.
    """
    _log_request("download_file", pick_code=pick_code, local_path=local_path, user_agent=user_agent)
    try:
        info = get_client().download_file(pick_code, local_path, user_agent)
    except (DriverError, OSError) as exc:
        return _fail("download_file", "download file", exc)
    _log_status(f"Saved {info.size} bytes")
    return _log_response("download_file", {
        "message": "File downloaded successfully",
        "local_path": local_path,
        "size": info.size,
    })


# =============================================================================
# Search
# =============================================================================
@mcp.tool()
def search(
    search_value: str,
    offset: int = 0,
    limit: int = 0,
    file_type: int = 0,
    order: str = "",
    asc: Optional[int] = None,
) -> dict:
    """Search for files and directories in the 115 cloud storage.

    Args:
        search_value: Search keyword.
        offset: Pagination offset (default 0).
        limit: Number of results; 0 or less uses the default of 30.
        file_type: 0:all 1:folder 2:document 3:image 4:video 5:audio 6:archive
        order: Sort field, e.g. "file_name" (default) or "user_ptime".
        asc: 1 ascending, 0 descending; omit for the default (ascending).

    Returns:
        count, offset, page_size, order, is_asc and files.
    """
    _log_request("search", search_value=search_value, offset=offset, limit=limit,
                 file_type=file_type, order=order, asc=asc)
    options = [
        query.search_value(search_value),
        query.offset(offset),
        query.limit(limit),
        query.file_type(file_type),
        query.order(order),
        query.asc(asc),
    ]
    try:
        result = get_client().search(options)
    except DriverError as exc:
        return _fail("search", "search files", exc)
    _log_status(f"Found {result.count} matches, returning {len(result.files)}")
    return _log_response("search", asdict(result))


# =============================================================================
# Shares
# =============================================================================
@mcp.tool()
def get_share_snap(
    share_code: str,
    receive_code: str,
    dir_id: str = "",
    offset: int = 0,
    limit: int = 0,
) -> dict:
    """Get the files and directories inside a share link.

    Args:
        share_code: The share code from the share URL.
        receive_code: The share's access password.
        dir_id: Directory inside the share to list; empty for its root.
        offset: Pagination offset (default 0).
        limit: Number of entries; 0 or less uses the default of 20.
    """
    _log_request("get_share_snap", share_code=share_code, receive_code=receive_code,
                 dir_id=dir_id, offset=offset, limit=limit)
    try:
        snapshot = get_client().get_share_snap(
            share_code,
            receive_code,
            dir_id,
            options=[query.limit(limit), query.offset(offset)],
        )
    except DriverError as exc:
        return _fail("get_share_snap", "get share snap", exc)
    return _log_response("get_share_snap", asdict(snapshot))


# =============================================================================
# Recycle bin
# =============================================================================
@mcp.tool()
def list_recycle_bin(offset: int = 0, limit: int = 0) -> dict:
    """List items in the recycle bin.

    Args:
        offset: Pagination offset (default 0).
        limit: Number of items; 0 or less uses the default of 40.
    """
    _log_request("list_recycle_bin", offset=offset, limit=limit)
    try:
        items = get_client().list_recycle_bin(offset, limit)
    except DriverError as exc:
        return _fail("list_recycle_bin", "list recycle bin", exc)
    return _log_response("list_recycle_bin", {"items": [asdict(i) for i in items]})


@mcp.tool()
def revert_recycle_bin(item_ids: list[str]) -> dict:
    """Restore items from the recycle bin to their original directories."""
    _log_request("revert_recycle_bin", item_ids=item_ids)
    if not item_ids:
        return _log_response("revert_recycle_bin", {"error": "No item IDs provided"})
    try:
        get_client().revert_recycle_bin(item_ids)
    except DriverError as exc:
        return _fail("revert_recycle_bin", "revert recycle bin items", exc)
    return _log_response("revert_recycle_bin", {"message": "Items reverted successfully"})


@mcp.tool()
def clean_recycle_bin(password: str, item_ids: list[str]) -> dict:
    """Permanently delete items from the recycle bin.

    Args:
        password: The account's recycle-bin password.
        item_ids: IDs of the items to delete.
    """
    # password is never logged
    _log_request("clean_recycle_bin", item_ids=item_ids)
    if not item_ids:
        return _log_response("clean_recycle_bin", {"error": "No item IDs provided"})
    try:
        get_client().clean_recycle_bin(password, item_ids)
    except DriverError as exc:
        return _fail("clean_recycle_bin", "clean recycle bin items", exc)
    return _log_response("clean_recycle_bin", {"message": "Items cleaned successfully"})


# =============================================================================
# Offline downloads
# =============================================================================
@mcp.tool()
def list_offline_tasks(page: int = 1) -> dict:
    """List offline download tasks.

    Args:
        page: Page number, starting at 1.

    Returns:
        total, count, page_row, page_count, page, quota and tasks.  Each task
        has a "status_text" (queued, downloading, completed, failed).
    """
    _log_request("list_offline_tasks", page=page)
    try:
        result = get_client().list_offline_tasks(page)
    except DriverError as exc:
        return _fail("list_offline_tasks", "list offline tasks", exc)
    _log_status(f"Page {result.page}/{result.page_count}, {len(result.tasks)} tasks")
    return _log_response("list_offline_tasks", asdict(result))


@mcp.tool()
def add_offline_task_uris(uris: list[str], save_dir_id: str = "") -> dict:
    """Add offline download tasks; supports http, ed2k and magnet URIs.

    Args:
        uris: The download URIs.
        save_dir_id: Directory ID where downloaded files are saved.
    """
    _log_request("add_offline_task_uris", uris=uris, save_dir_id=save_dir_id)
    if not uris:
        return _log_response("add_offline_task_uris", {"error": "No URIs provided"})
    try:
        hashes = get_client().add_offline_task_uris(uris, save_dir_id)
    except DriverError as exc:
        return _fail("add_offline_task_uris", "add offline tasks", exc)
    return _log_response("add_offline_task_uris", {"hashes": hashes})


@mcp.tool()
def delete_offline_tasks(hashes: list[str], delete_files: bool = False) -> dict:
    """Delete offline tasks.

    Args:
        hashes: Info hashes of the tasks to delete.
        delete_files: Also delete the downloaded files (default false).
    """
    _log_request("delete_offline_tasks", hashes=hashes, delete_files=delete_files)
    if not hashes:
        return _log_response("delete_offline_tasks", {"error": "No task hashes provided"})
    try:
        get_client().delete_offline_tasks(hashes, delete_files)
    except DriverError as exc:
        return _fail("delete_offline_tasks", "delete offline tasks", exc)
    return _log_response("delete_offline_tasks", {"message": "Successfully deleted offline tasks"})


@mcp.tool()
def clear_offline_tasks(clear_flag: int = 0) -> dict:
    """Clear offline tasks.

    Args:
        clear_flag: 0 clears completed tasks, 1 clears all tasks.
    """
    _log_request("clear_offline_tasks", clear_flag=clear_flag)
    try:
        get_client().clear_offline_tasks(clear_flag)
    except DriverError as exc:
        return _fail("clear_offline_tasks", "clear offline tasks", exc)
    return _log_response("clear_offline_tasks", {"message": "Successfully cleared offline tasks"})


# =============================================================================
# Server entry point
# =============================================================================
if __name__ == "__main__":
    mcp.run()
