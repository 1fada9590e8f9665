# =============================================================================
# core/query.py  —  Query Composition (defaults + ordered options)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Builds the query-parameter map for one remote call:
#
#       params = compose(SEARCH_DEFAULTS, [search_value("foo"), limit(50)])
#
#   Each endpoint owns a defaults map.  Callers pass an ordered list of
#   QueryOption values; each option writes (at most) one key.
#
# RULES:
#   1. Options are applied in the order given; a later option writing the
#      same key wins (last-write-wins).
#   2. "Use the default" is signalled by a non-positive number or an empty
#      string.  The option constructors turn such input into a no-op, so the
#      policy is identical for every endpoint.
#   3. compose() never mutates the defaults it is given.
# =============================================================================

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Union


# -----------------------------------------------------------------------------
# Per-endpoint defaults
# -----------------------------------------------------------------------------
# "format=json" is added by the transport on every request, so it is not
# repeated here.
# -----------------------------------------------------------------------------
LIST_DEFAULTS: dict[str, str] = {
    "aid": "1",
    "cid": "0",
    "o": "user_ptime",
    "asc": "0",
    "offset": "0",
    "show_dir": "1",
    "limit": "56",
    "snap": "0",
    "natsort": "1",
    "record_open_time": "1",
    "fc_mix": "0",
}

SEARCH_DEFAULTS: dict[str, str] = {
    "aid": "7",
    "cid": "0",
    "offset": "0",
    "limit": "30",
    "type": "0",
    "count_folders": "1",
    "o": "file_name",
    "asc": "1",
}

SHARE_SNAP_DEFAULTS: dict[str, str] = {
    "limit": "20",
    "offset": "0",
    "asc": "0",
}

OFFLINE_TASK_DEFAULTS: dict[str, str] = {
    "page": "1",
}

RECYCLE_DEFAULTS: dict[str, str] = {
    "aid": "7",
    "cid": "0",
    "offset": "0",
    "limit": "40",
    "source": "",
}


@dataclass(frozen=True)
class QueryOption:
    """One named write to a parameter map.

    ``value=None`` makes the option a no-op; that is how a caller's "use the
    default" input (0, -1, "") is represented.
    """

    name: str
    key: str
    value: Optional[str]

    def apply(self, params: dict[str, str]) -> None:
        if self.value is not None:
            params[self.key] = self.value


def compose(defaults: Mapping[str, str], options: Sequence[QueryOption] = ()) -> dict[str, str]:
    """Return ``defaults`` with ``options`` applied in order."""
    params = dict(defaults)
    for option in options:
        option.apply(params)
    return params


# -----------------------------------------------------------------------------
# Option constructors
# -----------------------------------------------------------------------------

def _positive(name: str, key: str, value: Optional[int]) -> QueryOption:
    if value is None or value <= 0:
        return QueryOption(name, key, None)
    return QueryOption(name, key, str(int(value)))


def _text(name: str, key: str, value: Optional[str]) -> QueryOption:
    if value is None or not str(value).strip():
        return QueryOption(name, key, None)
    return QueryOption(name, key, str(value).strip())


def limit(value: Optional[int]) -> QueryOption:
    return _positive("limit", "limit", value)


def offset(value: Optional[int]) -> QueryOption:
    return _positive("offset", "offset", value)


def page(value: Optional[int]) -> QueryOption:
    return _positive("page", "page", value)


def file_type(value: Optional[int]) -> QueryOption:
    """0:all 1:folder 2:document 3:image 4:video 5:audio 6:archive"""
    return _positive("file_type", "type", value)


def count_folders(value: Optional[int]) -> QueryOption:
    return _positive("count_folders", "count_folders", value)


def search_value(value: Optional[str]) -> QueryOption:
    return _text("search_value", "search_value", value)


def order(value: Optional[str]) -> QueryOption:
    return _text("order", "o", value)


def dir_id(value: Optional[str]) -> QueryOption:
    return _text("dir_id", "cid", value)


def area_id(value: Optional[str]) -> QueryOption:
    return _text("area_id", "aid", value)


def pick_code(value: Optional[str]) -> QueryOption:
    return _text("pick_code", "pick_code", value)


def date(value: Optional[str]) -> QueryOption:
    return _text("date", "date", value)


def source(value: Optional[str]) -> QueryOption:
    return _text("source", "source", value)


def star(value: Optional[str]) -> QueryOption:
    return _text("star", "star", value)


def suffix(value: Optional[str]) -> QueryOption:
    return _text("suffix", "suffix", value)


def asc(value: Union[bool, int, None]) -> QueryOption:
    """Sort direction flag.  ``None`` keeps the endpoint default.

    Unlike the numeric options, 0 is meaningful here (descending), so only
    ``None`` or a negative number means "default".
    """
    if value is None or (not isinstance(value, bool) and value < 0):
        return QueryOption("asc", "asc", None)
    return QueryOption("asc", "asc", "1" if value else "0")
