NON_CODE_EXTENSIONS = frozenset(
    {
        "png",
        "jpg",
        "jpeg",
        "gif",
        "ico",
        "webp",
        "bmp",
        "pdf",
        "woff",
        "woff2",
        "ttf",
        "eot",
        "otf",
        "mp4",
        "mp3",
        "wav",
        "ogg",
        "zip",
        "tar",
        "gz",
        "rar",
        "7z",
        "lock",  # e.g. composer.lock, Pipfile.lock
    }
)


def file_extension(file_name: str) -> str:
    """Lower-cased extension without the dot; "" when there is none."""
    base = file_name.rsplit("/", 1)[-1]
    if "." not in base.lstrip("."):
        return ""
    return base.rsplit(".", 1)[-1].lower()


def in_folder(file_name: str, folder: str) -> bool:
    """True if file_name lives under folder, matched from the repository root.

    "tests" matches "tests/foo.php" but not "mytests/foo.php".
    """
    prefix = folder.strip("/")
    if not prefix:
        return False
    return file_name.lstrip("/").startswith(prefix + "/")
