"""
Everything MCP Search Tools
---------------------------
Translates tool arguments into Everything query syntax, runs the search and
renders the results as text content for the host.

Argument problems and search failures are reported as tool results with
isError set, not as JSON-RPC errors, so the model sees the message.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from everything_mcp.search.errors import EverythingError
from everything_mcp.search.models import SearchResult, Searcher

logger = logging.getLogger("EverythingMCP.mcp.tools")

DEFAULT_MAX_RESULTS = 100
DEFAULT_RECENT_DAYS = 7
DEFAULT_LARGE_FILE_SIZE = "100MB"
TOOL_RESPONSE_MAX_CHARS = 32768

CONTENT_TYPE_QUERIES = {
    "image": "ext:jpg;jpeg;png;gif;bmp;webp;svg;ico",
    "video": "ext:mp4;avi;mkv;mov;wmv;flv;webm;m4v",
    "audio": "ext:mp3;wav;flac;aac;ogg;wma;m4a",
    "document": "ext:doc;docx;pdf;txt;rtf;odt;xls;xlsx;ppt;pptx",
    "archive": "ext:zip;rar;7z;tar;gz;bz2;xz",
    "executable": "ext:exe;msi;bat;cmd;sh;app;dmg",
}


class ToolInputError(ValueError):
    """Tool arguments are missing or unusable."""


def tool_result(text: str, is_error: bool = False) -> Dict[str, Any]:
    return {
        "content": [{"type": "text", "text": text}],
        "isError": is_error,
    }


def format_file_size(size: int) -> str:
    """Render a byte count in binary units, e.g. 1536 -> '1.5 KB'."""
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {'KMGTPE'[exp]}B"


def truncate_tool_text(text: str, name: str, max_chars: int = TOOL_RESPONSE_MAX_CHARS) -> str:
    if len(text) <= max_chars:
        return text
    logger.info("Truncating response for tool '%s' (%d -> %d chars)", name, len(text), max_chars)
    suffix = "\n\n[Response truncated due to size limits]"
    return text[:max(0, max_chars - len(suffix))] + suffix


def _optional_str(args: Dict[str, Any], key: str) -> str:
    value = args.get(key)
    return value if isinstance(value, str) else ""


def _required_str(args: Dict[str, Any], key: str) -> str:
    value = _optional_str(args, key)
    if not value:
        raise ToolInputError(f"'{key}' is required and must be a non-empty string")
    return value


def _int_arg(args: Dict[str, Any], key: str, default: int) -> int:
    value = args.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    try:
        return int(value)
    except (OverflowError, ValueError):
        return default


def _with_path(query: str, path: str) -> str:
    return f'{query} path:"{path}"' if path else query


def _with_keywords(query: str, keywords: str) -> str:
    return f"{query} {keywords}" if keywords else query


def _numbered(results: List[SearchResult], limit: int, show_size: bool = False) -> str:
    lines = []
    for i, result in enumerate(results[:limit], start=1):
        size = f" ({format_file_size(result.size)})" if show_size and result.size > 0 else ""
        lines.append(f"{i}. {result.path}{size}\n")
    return "".join(lines)


def build_size_query(size_min: str, size_max: str, keywords: str) -> str:
    parts = []
    if size_min:
        parts.append(f"size:>{size_min}")
    if size_max:
        parts.append(f"size:<{size_max}")
    if keywords:
        parts.append(keywords)
    return " ".join(parts)


def build_date_query(date_type: str, date_from: str, date_to: str) -> str:
    prefix = "dc:" if date_type == "created" else "dm:"
    if date_from and date_to:
        return f"{prefix}{date_from}..{date_to}"
    if date_from:
        return f"{prefix}>{date_from}"
    if date_to:
        return f"{prefix}<{date_to}"
    return ""


class SearchTools:
    """
    The fourteen Everything search tools, callable by name.
    """

    def __init__(self, searcher: Searcher, default_max_results: int = DEFAULT_MAX_RESULTS):
        self.searcher = searcher
        self.default_max_results = default_max_results
        self._tools: Dict[str, Callable[[Dict[str, Any], Any], str]] = {
            "search_files": self.search_files,
            "search_by_extension": self.search_by_extension,
            "search_by_path": self.search_by_path,
            "search_by_size": self.search_by_size,
            "search_by_date": self.search_by_date,
            "search_recent_files": self.search_recent_files,
            "search_large_files": self.search_large_files,
            "search_empty_files": self.search_empty_files,
            "search_by_content_type": self.search_by_content_type,
            "search_with_regex": self.search_with_regex,
            "search_duplicate_names": self.search_duplicate_names,
            "list_drives": self.list_drives,
            "list_directory": self.list_directory,
            "get_file_info": self.get_file_info,
        }

    def call(self, name: str, arguments: Optional[Dict[str, Any]], context: Any = None) -> Dict[str, Any]:
        tool = self._tools.get(name)
        if tool is None:
            return tool_result(f"Unknown tool: {name}", is_error=True)
        try:
            text = tool(arguments or {}, context)
        except ToolInputError as exc:
            return tool_result(str(exc), is_error=True)
        except EverythingError as exc:
            logger.warning("Tool '%s' failed: %s", name, exc)
            return tool_result(f"{_FAILURE_LABELS.get(name, 'Search failed')}: {exc}", is_error=True)
        return tool_result(truncate_tool_text(text, name))

    def _max_results(self, args: Dict[str, Any]) -> int:
        return _int_arg(args, "max_results", self.default_max_results)

    def _search(self, query: str, max_results: int, context: Any) -> List[SearchResult]:
        return self.searcher.search(query, max_results, context=context)

    def search_files(self, args: Dict[str, Any], context: Any = None) -> str:
        query = _required_str(args, "query")
        max_results = self._max_results(args)
        results = self._search(query, max_results, context)
        return f"Query: {query}\nFound {len(results)} results:\n\n" + _numbered(results, max_results)

    def search_by_extension(self, args: Dict[str, Any], context: Any = None) -> str:
        extension = _required_str(args, "extension").lstrip(".")
        if not extension:
            raise ToolInputError("'extension' is required and must be a non-empty string")
        max_results = self._max_results(args)
        results = self._search(f"ext:{extension}", max_results, context)
        return f"Extension search: .{extension}\nFound {len(results)} results:\n\n" + _numbered(results, max_results)

    def search_by_path(self, args: Dict[str, Any], context: Any = None) -> str:
        path = _required_str(args, "path")
        max_results = self._max_results(args)
        query = _with_keywords(path, _optional_str(args, "query"))
        results = self._search(query, max_results, context)
        return f"Path search: {path}\nFound {len(results)} results:\n\n" + _numbered(results, max_results)

    def search_by_size(self, args: Dict[str, Any], context: Any = None) -> str:
        query = build_size_query(
            _optional_str(args, "size_min"),
            _optional_str(args, "size_max"),
            _optional_str(args, "query"),
        )
        if not query:
            raise ToolInputError("At least one of 'size_min' or 'size_max' is required")
        max_results = self._max_results(args)
        results = self._search(query, max_results, context)
        return (
            f"Size search: {query}\nFound {len(results)} results:\n\n"
            + _numbered(results, max_results, show_size=True)
        )

    def search_by_date(self, args: Dict[str, Any], context: Any = None) -> str:
        date_type = _optional_str(args, "date_type") or "modified"
        if date_type not in ("modified", "created"):
            raise ToolInputError("'date_type' must be 'modified' or 'created'")
        query = build_date_query(date_type, _optional_str(args, "date_from"), _optional_str(args, "date_to"))
        if not query:
            raise ToolInputError("At least one of 'date_from' or 'date_to' is required")
        query = _with_keywords(query, _optional_str(args, "query"))
        max_results = self._max_results(args)
        results = self._search(query, max_results, context)
        return f"Date search ({date_type}): {query}\nFound {len(results)} results:\n\n" + _numbered(results, max_results)

    def search_recent_files(self, args: Dict[str, Any], context: Any = None) -> str:
        days = _int_arg(args, "days", DEFAULT_RECENT_DAYS)
        if days < 1:
            raise ToolInputError("'days' must be a positive integer")
        query = _with_keywords(f"dm:last{days}days", _optional_str(args, "query"))
        max_results = self._max_results(args)
        results = self._search(query, max_results, context)
        return f"Files modified in the last {days} days\nFound {len(results)} results:\n\n" + _numbered(results, max_results)

    def search_large_files(self, args: Dict[str, Any], context: Any = None) -> str:
        min_size = _optional_str(args, "min_size") or DEFAULT_LARGE_FILE_SIZE
        query = _with_path(f"size:>{min_size}", _optional_str(args, "path"))
        max_results = self._max_results(args)
        results = self._search(query, max_results, context)
        return (
            f"Large file search (>{min_size})\nFound {len(results)} results:\n\n"
            + _numbered(results, max_results, show_size=True)
        )

    def search_empty_files(self, args: Dict[str, Any], context: Any = None) -> str:
        kind = _optional_str(args, "type") or "file"
        if kind not in ("file", "folder"):
            raise ToolInputError("'type' must be 'file' or 'folder'")
        base = "folder: empty:" if kind == "folder" else "file: size:0"
        query = _with_path(base, _optional_str(args, "path"))
        max_results = self._max_results(args)
        results = self._search(query, max_results, context)
        label = "Empty folder" if kind == "folder" else "Empty file"
        return f"{label} search\nFound {len(results)} results:\n\n" + _numbered(results, max_results)

    def search_by_content_type(self, args: Dict[str, Any], context: Any = None) -> str:
        content_type = _required_str(args, "content_type")
        ext_query = CONTENT_TYPE_QUERIES.get(content_type)
        if ext_query is None:
            raise ToolInputError(f"Unsupported content type: {content_type}")
        query = _with_keywords(ext_query, _optional_str(args, "query"))
        max_results = self._max_results(args)
        results = self._search(query, max_results, context)
        return f"Content type search: {content_type}\nFound {len(results)} results:\n\n" + _numbered(results, max_results)

    def search_with_regex(self, args: Dict[str, Any], context: Any = None) -> str:
        regex = _required_str(args, "regex")
        query = _with_path(f"regex:{regex}", _optional_str(args, "path"))
        max_results = self._max_results(args)
        results = self._search(query, max_results, context)
        return f"Regex search: {regex}\nFound {len(results)} results:\n\n" + _numbered(results, max_results)

    def search_duplicate_names(self, args: Dict[str, Any], context: Any = None) -> str:
        filename = _required_str(args, "filename")
        max_results = self._max_results(args)
        results = self._search(f"file:{filename}", max_results, context)
        text = f"Duplicate name search: {filename}\nFound {len(results)} results:\n\n" + _numbered(results, max_results)
        if len(results) > 1:
            text += f"\nFound {len(results)} files named {filename}!\n"
        return text

    def list_drives(self, args: Dict[str, Any], context: Any = None) -> str:
        results = self._search("root:", DEFAULT_MAX_RESULTS, context)
        drives = [r for r in results if len(r.path) <= 3 and r.path.endswith(":")]
        text = f"Drives\nFound {len(drives)} drives:\n\n"
        text += "".join(f"{i}. {drive.path}\\\n" for i, drive in enumerate(drives, start=1))
        if not drives:
            text += "Hint: use list_directory to browse a specific drive, e.g. C:\\, D:\\\n"
        return text

    def list_directory(self, args: Dict[str, Any], context: Any = None) -> str:
        path = _required_str(args, "path").strip()
        if not path:
            raise ToolInputError("'path' is required and must be a non-empty string")
        max_results = self._max_results(args)
        if not path.endswith(("\\", "/")):
            path += "\\"
        parent = path[:-1] if path.endswith("\\") else path
        results = self._search(f'parent:"{parent}"', max_results, context)

        folders = [r for r in results if r.type == "folder"]
        files = [r for r in results if r.type != "folder"]
        per_kind = max_results // 2

        text = f"Directory: {path}\nFound {len(folders)} folders, {len(files)} files\n\n"
        if folders:
            text += "Folders:\n"
            for i, folder in enumerate(folders):
                if i >= per_kind:
                    text += f"... {len(folders) - i} more folders\n"
                    break
                text += f"{i + 1}. [DIR] {_relative_name(folder.path, path)}\n"
            text += "\n"
        if files:
            text += "Files:\n"
            for i, item in enumerate(files):
                if i >= per_kind:
                    text += f"... {len(files) - i} more files\n"
                    break
                size = f" ({format_file_size(item.size)})" if item.size > 0 else ""
                text += f"{i + 1}. {_relative_name(item.path, path)}{size}\n"
        if not folders and not files:
            text += "The directory is empty or does not exist\n"
        return text

    def get_file_info(self, args: Dict[str, Any], context: Any = None) -> str:
        path = _required_str(args, "path")
        results = self._search(f'"{path}"', 1, context)
        if not results:
            raise ToolInputError(f"File or folder not found: {path}")
        result = results[0]
        text = f"File info: {result.path}\n\n"
        text += f"Type: {result.type}\n"
        if result.size > 0:
            text += f"Size: {format_file_size(result.size)} ({result.size} bytes)\n"
        elif result.type == "file":
            text += "Size: 0 bytes (empty file)\n"
        if result.date:
            text += f"Modified: {result.date}\n"
        text += f"Full path: {result.full_path}\n"
        return text


_FAILURE_LABELS = {
    "list_drives": "Failed to list drives",
    "list_directory": "Failed to list directory",
    "get_file_info": "Failed to get file info",
}


def _relative_name(full_path: str, directory: str) -> str:
    if full_path.startswith(directory):
        name = full_path[len(directory):]
        if name:
            return name
    return full_path
