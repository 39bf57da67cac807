"""Editing of the fstab options of a filesystem.

Not every option is understood by every filesystem type; each helper
checks ``FilesystemType.supported_fstab_options`` and leaves the options
untouched when the filesystem cannot use them.

Boolean options come in pairs where the first value is the "checked" one
(e.g., "ro" versus "rw"). Valued options are stored as "key=value".
"""

import logging

from partctl.models.devices import Filesystem

logger = logging.getLogger(__name__)

# Pairs of (checked, unchecked) values
FLAG_OPTIONS: dict[str, tuple[str, str]] = {
    "noauto": ("noauto", "auto"),
    "read_only": ("ro", "rw"),
    "noatime": ("noatime", "atime"),
    "user": ("user", "nouser"),
    "acl": ("acl", "noacl"),
    "user_xattr": ("user_xattr", "nouser_xattr"),
}

QUOTA_OPTIONS: tuple[str, str] = ("usrquota", "grpquota")

JOURNAL_MODES: tuple[str, ...] = ("journal", "ordered", "writeback")

IOCHARSETS: tuple[str, ...] = (
    "",
    "iso8859-1",
    "iso8859-15",
    "iso8859-2",
    "iso8859-5",
    "iso8859-7",
    "iso8859-9",
    "utf8",
    "koi8-r",
    "euc-jp",
    "sjis",
    "gb2312",
    "big5",
    "euc-kr",
)

CODEPAGES: tuple[str, ...] = ("", "437", "852", "932", "936", "949", "950")

SWAP_PRIORITY_DEFAULT = "42"


def supported(filesystem: Filesystem | None, option: str) -> bool:
    """Check whether a filesystem understands an option (or option prefix)."""
    if filesystem is None:
        return False
    return option in filesystem.fs_type.supported_fstab_options


def _remove(filesystem: Filesystem, *values: str) -> None:
    filesystem.fstab_options = [o for o in filesystem.fstab_options if o not in values]


def _remove_prefix(filesystem: Filesystem, prefix: str) -> None:
    filesystem.fstab_options = [o for o in filesystem.fstab_options if not o.startswith(prefix)]


def get_flag(filesystem: Filesystem, flag: str) -> bool:
    """Return whether the checked value of a boolean option is set.

    Raises:
        KeyError: If ``flag`` is not a known boolean option.
    """
    checked, _ = FLAG_OPTIONS[flag]
    return checked in filesystem.fstab_options


def set_flag(filesystem: Filesystem, flag: str, enabled: bool) -> bool:
    """Set or clear a boolean option.

    Both values of the pair are removed; the checked value is added back
    when ``enabled`` is True.

    Returns:
        False if the filesystem does not support the option, True otherwise.

    Raises:
        KeyError: If ``flag`` is not a known boolean option.
    """
    checked, unchecked = FLAG_OPTIONS[flag]
    if not (supported(filesystem, checked) and supported(filesystem, unchecked)):
        logger.debug("%s does not support %s", filesystem.fs_type.value, flag)
        return False

    _remove(filesystem, checked, unchecked)
    if enabled:
        filesystem.fstab_options = [*filesystem.fstab_options, checked]
    return True


def get_quota(filesystem: Filesystem) -> bool:
    return any(o in QUOTA_OPTIONS for o in filesystem.fstab_options)


def set_quota(filesystem: Filesystem, enabled: bool) -> bool:
    """Enable or disable user and group quotas."""
    if not all(supported(filesystem, o) for o in QUOTA_OPTIONS):
        return False
    _remove(filesystem, *QUOTA_OPTIONS)
    if enabled:
        filesystem.fstab_options = [*filesystem.fstab_options, *QUOTA_OPTIONS]
    return True


def _default_value(filesystem: Filesystem, key: str) -> str:
    if key == "data":
        return "ordered"
    if key == "pri":
        return SWAP_PRIORITY_DEFAULT
    if key == "iocharset":
        iocharset = filesystem.fs_type.iocharset
        return iocharset if iocharset in IOCHARSETS else IOCHARSETS[0]
    if key == "codepage":
        codepage = filesystem.fs_type.codepage
        return codepage if codepage in CODEPAGES else CODEPAGES[0]
    return ""


_ALLOWED_VALUES: dict[str, tuple[str, ...]] = {
    "data": JOURNAL_MODES,
    "iocharset": IOCHARSETS,
    "codepage": CODEPAGES,
}


def get_value(filesystem: Filesystem, key: str) -> str:
    """Return the value of a "key=value" option, or its default.

    Args:
        filesystem: Filesystem to inspect.
        key: Option key ("data", "pri", "iocharset", "codepage", ...).

    Returns:
        Current value, or the default for the key when unset.
    """
    prefix = f"{key}="
    for option in filesystem.fstab_options:
        if option.startswith(prefix):
            return option.removeprefix(prefix)
    return _default_value(filesystem, key)


def set_value(filesystem: Filesystem, key: str, value: str | None) -> bool:
    """Set or clear a "key=value" option.

    Setting ``iocharset`` also drops any "utf8=" option. An empty value or
    None removes the option.

    Returns:
        False if the filesystem does not support the option, True otherwise.

    Raises:
        ValueError: If the value is not allowed for the key.
    """
    prefix = f"{key}="
    if not supported(filesystem, prefix):
        logger.debug("%s does not support %s", filesystem.fs_type.value, prefix)
        return False

    allowed = _ALLOWED_VALUES.get(key)
    if value and allowed is not None and value not in allowed:
        msg = f"Invalid value for {key}: {value!r}"
        raise ValueError(msg)

    _remove_prefix(filesystem, prefix)
    if key == "iocharset":
        _remove_prefix(filesystem, "utf8=")
    if value:
        filesystem.fstab_options = [*filesystem.fstab_options, f"{prefix}{value}"]
    return True
