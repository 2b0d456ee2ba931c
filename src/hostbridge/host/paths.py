"""Local file path to frontend URL conversion."""

FILE_SCHEME = "file://"
FILE_ROUTE = "/file/"


def convert_file_src(file_path: str) -> str:
    """Turn a local path into a URL served by the host's file route.

    Strips a leading ``file://`` and prefixes ``/file/``, e.g.
    ``file:///tmp/x.png`` -> ``/file//tmp/x.png``.
    """
    if file_path.startswith(FILE_SCHEME):
        file_path = file_path[len(FILE_SCHEME):]
    return FILE_ROUTE + file_path
