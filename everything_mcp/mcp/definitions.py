from typing import List, Dict, Any

_MAX_RESULTS = {
    "type": "integer",
    "description": "Maximum number of results to return (default 100).",
    "default": 100,
}

TOOLS_SCHEMAS: List[Dict[str, Any]] = [
    {
        "name": "search_files",
        "description": "Search files and folders by name, path, extension or any Everything query.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search keywords; file name, path, extension and Everything syntax are supported."},
                "max_results": _MAX_RESULTS,
            },
            "required": ["query"],
        },
    },
    {
        "name": "search_by_extension",
        "description": "Search files by extension, e.g. all .txt or .pdf files.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "extension": {"type": "string", "description": "File extension without the dot, e.g. txt, pdf, jpg."},
                "max_results": _MAX_RESULTS,
            },
            "required": ["extension"],
        },
    },
    {
        "name": "search_by_path",
        "description": "Search within a path, optionally narrowed by keywords.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Path to search in, e.g. C:\\Users\\Documents."},
                "query": {"type": "string", "description": "Optional keywords."},
                "max_results": _MAX_RESULTS,
            },
            "required": ["path"],
        },
    },
    {
        "name": "search_by_size",
        "description": "Search files larger than, smaller than or within a size range.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "size_min": {"type": "string", "description": "Minimum size, e.g. 1MB, 100KB, 1GB."},
                "size_max": {"type": "string", "description": "Maximum size, e.g. 10MB, 1GB."},
                "query": {"type": "string", "description": "Optional additional keywords."},
                "max_results": _MAX_RESULTS,
            },
        },
    },
    {
        "name": "search_by_date",
        "description": "Search files modified or created within a date range.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "date_type": {
                    "type": "string",
                    "description": "Which date to match: modified or created.",
                    "enum": ["modified", "created"],
                    "default": "modified",
                },
                "date_from": {"type": "string", "description": "Start date, YYYY-MM-DD."},
                "date_to": {"type": "string", "description": "End date, YYYY-MM-DD."},
                "query": {"type": "string", "description": "Optional additional keywords."},
                "max_results": _MAX_RESULTS,
            },
        },
    },
    {
        "name": "search_recent_files",
        "description": "Search recently modified files.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "days": {"type": "integer", "description": "Files modified within this many days (default 7).", "default": 7},
                "query": {"type": "string", "description": "Optional additional keywords."},
                "max_results": _MAX_RESULTS,
            },
        },
    },
    {
        "name": "search_large_files",
        "description": "Search large files to find what takes up disk space.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "min_size": {"type": "string", "description": "Minimum size (default 100MB), e.g. 100MB, 1GB.", "default": "100MB"},
                "path": {"type": "string", "description": "Optional path to search in."},
                "max_results": _MAX_RESULTS,
            },
        },
    },
    {
        "name": "search_empty_files",
        "description": "Search empty files or empty folders.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "description": "file (empty files) or folder (empty folders).",
                    "enum": ["file", "folder"],
                    "default": "file",
                },
                "path": {"type": "string", "description": "Optional path to search in."},
                "max_results": _MAX_RESULTS,
            },
        },
    },
    {
        "name": "search_by_content_type",
        "description": "Search files by content type: images, video, audio, documents, archives or executables.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "content_type": {
                    "type": "string",
                    "description": "One of image, video, audio, document, archive, executable.",
                    "enum": ["image", "video", "audio", "document", "archive", "executable"],
                },
                "query": {"type": "string", "description": "Optional additional keywords."},
                "max_results": _MAX_RESULTS,
            },
            "required": ["content_type"],
        },
    },
    {
        "name": "search_with_regex",
        "description": "Search file names with a regular expression.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "regex": {"type": "string", "description": "Regular expression, e.g. .*\\.log$"},
                "path": {"type": "string", "description": "Optional path to search in."},
                "max_results": _MAX_RESULTS,
            },
            "required": ["regex"],
        },
    },
    {
        "name": "search_duplicate_names",
        "description": "Find files that share the same file name.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "filename": {"type": "string", "description": "File name to look for, e.g. config.txt."},
                "max_results": _MAX_RESULTS,
            },
            "required": ["filename"],
        },
    },
    {
        "name": "list_drives",
        "description": "List all drives (C:, D:, E: ...).",
        "inputSchema": {
            "type": "object",
            "properties": {},
        },
    },
    {
        "name": "list_directory",
        "description": "List the files and folders directly inside a directory.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Directory to list, e.g. C:\\, C:\\Users, D:\\Projects."},
                "max_results": _MAX_RESULTS,
            },
            "required": ["path"],
        },
    },
    {
        "name": "get_file_info",
        "description": "Show details (size, date, type) for a file or folder.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Full path of the file or folder."},
            },
            "required": ["path"],
        },
    },
]

TOOL_NAMES = tuple(schema["name"] for schema in TOOLS_SCHEMAS)
