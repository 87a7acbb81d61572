"""Reading of DMI identification items from sysfs."""

from __future__ import annotations

import os
from pathlib import Path

from hwscan import linuxpath
from hwscan.context import UNKNOWN, Context


def item(ctx: Context, value: str) -> str:
    """Return the named DMI item, or UNKNOWN when it cannot be read."""
    paths = linuxpath.new(ctx)
    path = os.path.join(paths.sys_class_dmi, "id", value)
    try:
        contents = Path(path).read_text()
    except OSError as err:
        ctx.warn("Unable to read %s: %s\n", value, err)
        return UNKNOWN
    return contents.strip()