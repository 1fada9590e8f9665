# =============================================================================
# core/models.py  —  Domain Models (what the tools hand back to the agent)
# =============================================================================
#
# These dataclasses are the stable, caller-facing shape of every result.
# The raw 115 JSON never leaves core/: the mapper (core/mapping.py) projects
# it into these classes after the classifier has accepted the response.
#
# CONVENTIONS:
#   - Scalar fields hold the decoder's canonical type: sizes and unix
#     timestamps are int, flags are bool, progress is float.
#   - Collection fields are ALWAYS lists (possibly empty), never None, so
#     asdict() output has the same keys whatever the API sent.
# =============================================================================

from dataclasses import dataclass, field


# -----------------------------------------------------------------------------
# Files and directories
# -----------------------------------------------------------------------------
@dataclass
class LabelInfo:
    """A user-defined label attached to a file."""

    label_id: str
    name: str
    color: str = ""


@dataclass
class PathEntry:
    """One ancestor in a directory's parent chain (root first)."""

    dir_id: str
    name: str


@dataclass
class File:
    """A file or directory as returned by listing, search and share snapshots."""

    file_id: str                       # For directories this is the directory ID
    parent_id: str
    name: str
    size: int = 0                      # Bytes; 0 for directories
    pick_code: str = ""                # Needed by download endpoints
    sha1: str = ""
    is_directory: bool = False
    star: bool = False
    create_time: int = 0               # Unix seconds
    update_time: int = 0               # Unix seconds
    thumb_url: str = ""
    labels: list[LabelInfo] = field(default_factory=list)


@dataclass
class FilePage:
    """One page of a directory listing."""

    dir_id: str
    count: int                         # Total entries in the directory
    offset: int
    page_size: int
    files: list[File] = field(default_factory=list)
    path: list[PathEntry] = field(default_factory=list)


@dataclass
class FileStat:
    """Detailed information about one file or directory."""

    name: str
    pick_code: str
    sha1: str
    is_directory: bool
    file_count: int
    dir_count: int
    create_time: int
    update_time: int
    parents: list[PathEntry] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Search
# -----------------------------------------------------------------------------
@dataclass
class SearchResult:
    """Search hits plus the paging/sorting echo from the server."""

    count: int
    offset: int
    page_size: int
    order: str
    is_asc: bool
    files: list[File] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Shares
# -----------------------------------------------------------------------------
@dataclass
class ShareInfo:
    """Metadata of a share link."""

    snap_id: str
    title: str
    state: int
    file_size: int
    receive_count: int
    create_time: int
    expire_time: int


@dataclass
class ShareSnapshot:
    """The contents of one directory inside a share link."""

    share: ShareInfo
    count: int
    files: list[File] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Recycle bin
# -----------------------------------------------------------------------------
@dataclass
class RecycleItem:
    """An entry in the recycle bin."""

    item_id: str
    file_name: str
    file_type: int
    file_size: int
    delete_time: int                   # Unix seconds
    parent_id: str
    parent_name: str
    pick_code: str = ""


# -----------------------------------------------------------------------------
# Offline (cloud) downloads
# -----------------------------------------------------------------------------
@dataclass
class OfflineTask:
    """One offline download task."""

    info_hash: str
    name: str
    size: int
    url: str
    add_time: int
    peers: int
    rate_download: float               # Bytes per second
    status: int                        # -1 failed, 0 queued, 1 running, 2 done
    status_text: str
    percent: float                     # 0.0 – 100.0
    update_time: int
    left_time: int                     # Seconds
    file_id: str
    delete_file_id: str
    dir_id: str
    move: int


@dataclass
class OfflineTaskPage:
    """One page of the offline task list."""

    page: int
    page_count: int
    page_row: int
    count: int
    total: int
    quota: int
    tasks: list[OfflineTask] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Account
# -----------------------------------------------------------------------------
@dataclass
class UserInfo:
    user_id: int
    user_name: str


# -----------------------------------------------------------------------------
# Downloads
# -----------------------------------------------------------------------------
@dataclass
class DownloadInfo:
    """A resolved direct download link for one file."""

    url: str                           # Only valid with the requesting User-Agent
    file_name: str
    size: int
    pick_code: str
    file_id: str = ""
