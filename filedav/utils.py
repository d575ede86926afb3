# This file is part of FileDAV - WebDAV file storage backend
# Copyright © 2026 The FileDAV developers
#
# This library is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with FileDAV.  If not, see <http://www.gnu.org/licenses/>.

import re
from importlib import import_module, metadata
from typing import Callable, List, Sequence, Type, TypeVar, Union

from filedav import config
from filedav.log import logger

_T_co = TypeVar("_T_co", covariant=True)

FILEDAV_MODULES: Sequence[str] = ("filedav", "sqlalchemy", "defusedxml")

_NATURAL_SPLIT_RE = re.compile(r"(\d+)")


def load_plugin(internal_types: Sequence[str], module_name: str,
                class_name: str, base_class: Type[_T_co],
                configuration: "config.Configuration") -> _T_co:
    type_: Union[str, Callable] = configuration.get(module_name, "type")
    if callable(type_):
        logger.info("%s type is %r", module_name, type_)
        return type_(configuration)
    if type_ in internal_types:
        module = "filedav.%s.%s" % (module_name, type_)
    else:
        module = type_
    try:
        class_ = getattr(import_module(module), class_name)
    except Exception as e:
        raise RuntimeError("Failed to load %s module %r: %s" %
                           (module_name, module, e)) from e
    logger.info("%s type is %r", module_name, module)
    return class_(configuration)


def package_version(name):
    return metadata.version(name)


def packages_version():
    versions = []
    for pkg in FILEDAV_MODULES:
        versions.append("%s=%s" % (pkg, package_version(pkg)))
    return " ".join(versions)


def natural_sort_key(name: str) -> List[Union[int, str]]:
    """Key for case-insensitive natural ordering (``img2`` < ``img10``).

    Digit runs compare numerically, everything else case-insensitively.
    Text and number parts always alternate, starting with text, so keys of
    different names never compare ``int`` against ``str``.

    """
    parts = _NATURAL_SPLIT_RE.split(name.casefold())
    return [int(part) if i % 2 else part for i, part in enumerate(parts)]
