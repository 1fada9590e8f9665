"""Tests for the MCP tool wrappers, using a fake client."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from core.client import Pan115Client
from core.config import Settings
from core.errors import APIError
from core.models import DownloadInfo, File, FilePage, SearchResult
from core.query import QueryOption
from tools import mcp_server


def call(tool: Any, **kwargs: Any) -> dict:
    # FastMCP may wrap the decorated function in a Tool object.
    fn = getattr(tool, "fn", tool)
    return fn(**kwargs)


class FakeClient:
    def __init__(self) -> None:
        self.search_options: list[QueryOption] = []
        self.deleted: list[str] = []

    def search(self, options: list[QueryOption]) -> SearchResult:
        self.search_options = list(options)
        return SearchResult(
            count=1,
            offset=0,
            page_size=30,
            order="file_name",
            is_asc=True,
            files=[File(file_id="1", parent_id="0", name="foo.txt")],
        )

    def delete(self, file_ids: list[str]) -> None:
        self.deleted = list(file_ids)

    def list_page(self, dir_id: str, offset: int = 0, limit: int = 0) -> FilePage:
        return FilePage(
            dir_id=dir_id,
            count=5,
            offset=offset,
            page_size=limit,
            files=[File(file_id="1", parent_id=dir_id, name="a.txt")],
            path=[],
        )

    def list_all(self, dir_id: str) -> list[File]:
        return [File(file_id=str(i), parent_id=dir_id, name=f"{i}.txt") for i in range(3)]

    def download_info(self, pick_code: str, user_agent: str = "") -> DownloadInfo:
        return DownloadInfo(url="https://cdn.example.net/a", file_name="a.txt", size=3, pick_code=pick_code)

    def download_file(self, pick_code: str, local_path: str, user_agent: str = "") -> DownloadInfo:
        raise PermissionError(13, "Permission denied", local_path)

    def list_offline_tasks(self, page: int) -> Any:
        raise APIError.api_state(990001, "login timeout")


@pytest.fixture
def fake_client() -> FakeClient:
    client = FakeClient()
    mcp_server.configure(client)  # type: ignore[arg-type]
    return client


def test_search_tool_returns_plain_dict(fake_client: FakeClient) -> None:
    result = call(mcp_server.search, search_value="foo")
    assert result["count"] == 1
    assert result["files"][0]["name"] == "foo.txt"
    assert result["files"][0]["labels"] == []

    written = {o.key: o.value for o in fake_client.search_options if o.value is not None}
    assert written == {"search_value": "foo"}


def test_delete_tool_rejects_empty_ids(fake_client: FakeClient) -> None:
    assert call(mcp_server.delete, file_ids=[]) == {"error": "No file IDs provided"}
    assert fake_client.deleted == []


def test_delete_tool(fake_client: FakeClient) -> None:
    result = call(mcp_server.delete, file_ids=["1", "2"])
    assert result == {"message": "Files deleted successfully"}
    assert fake_client.deleted == ["1", "2"]


def test_driver_errors_become_error_payloads(fake_client: FakeClient) -> None:
    result = call(mcp_server.list_offline_tasks, page=1)
    assert result == {"error": "Failed to list offline tasks: api error 990001: login timeout"}


def test_list_directory_without_limit_lists_everything(fake_client: FakeClient) -> None:
    result = call(mcp_server.list_directory, dir_id="9")
    assert result["dir_id"] == "9"
    assert result["count"] == 3
    assert [f["name"] for f in result["files"]] == ["0.txt", "1.txt", "2.txt"]


def test_list_directory_with_limit_returns_one_page(fake_client: FakeClient) -> None:
    result = call(mcp_server.list_directory, dir_id="9", offset=10, limit=1)
    assert (result["count"], result["offset"], result["page_size"]) == (5, 10, 1)
    assert result["path"] == []


def test_get_download_info_tool(fake_client: FakeClient) -> None:
    result = call(mcp_server.get_download_info, pick_code="pc1")
    assert result["url"] == "https://cdn.example.net/a"
    assert (result["file_name"], result["size"], result["pick_code"]) == ("a.txt", 3, "pc1")


def test_download_file_tool_reports_local_write_errors(fake_client: FakeClient) -> None:
    result = call(mcp_server.download_file, pick_code="pc1", local_path="/root/forbidden")
    assert result["error"].startswith("Failed to download file: ")
    assert "Permission denied" in result["error"]


def test_share_snap_tool_with_non_ascii_codes() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"state": True, "data": {"count": 0, "list": []}})

    client = Pan115Client(
        Settings(cookie="UID=u;CID=c;SEID=s"),
        http_transport=httpx.MockTransport(handler),
    )
    mcp_server.configure(client)
    with client:
        result = call(mcp_server.get_share_snap, share_code="分享", receive_code="abcd")
    assert "error" not in result
    assert result["count"] == 0
    assert result["files"] == []
