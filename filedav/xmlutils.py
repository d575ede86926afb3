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

"""
Helper functions for XML.

"""

import copy
import io
import xml.etree.ElementTree as ET
from typing import Dict, List, Mapping, Tuple, Union

import defusedxml.ElementTree as DefusedET

from filedav import properties

XML_NAMESPACE: str = "http://www.w3.org/XML/1998/namespace"

NAMESPACES: Mapping[str, str] = {
    "d": "DAV:",
    "oc": "http://owncloud.org/ns",
    "nc": "http://nextcloud.org/ns"}

for short, url in NAMESPACES.items():
    ET.register_namespace(short, url)


def make_clark(human_tag: str) -> str:
    """Get XML Clark notation from human tag ``human_tag``.

    If ``human_tag`` is already in XML Clark notation it is returned as-is.

    """
    if human_tag.startswith("{"):
        ns, tag = human_tag[len("{"):].split("}", maxsplit=1)
        if not ns or not tag:
            raise ValueError("Invalid XML tag: %r" % human_tag)
        return human_tag
    ns_prefix, tag = human_tag.split(":", maxsplit=1)
    if not ns_prefix or not tag:
        raise ValueError("Invalid XML tag: %r" % human_tag)
    ns = NAMESPACES.get(ns_prefix, "")
    if not ns:
        raise ValueError("Unknown XML namespace prefix: %r" % human_tag)
    return "{%s}%s" % (ns, tag)


def split_clark(tag: str) -> Tuple[str, str]:
    """Split ``tag`` into namespace and local name.

    The namespace is empty for tags without namespace.

    """
    if not tag.startswith("{"):
        return "", tag
    ns, name = tag[len("{"):].split("}", maxsplit=1)
    return ns, name


def _prefixed_copy(element: ET.Element, url_prefixes: Dict[str, str]
                   ) -> Tuple[ET.Element, Dict[str, str]]:
    """Copy ``element`` with prefixed names instead of Clark notation.

    Returns the copy and the prefixes it uses. Namespaces without prefix in
    the document (default namespace) get a generated one.

    """
    url_prefixes = dict(url_prefixes)
    xmlns: Dict[str, str] = {}

    def prefixed(name: str) -> str:
        ns, local = split_clark(name)
        if not ns:
            return local
        if ns == XML_NAMESPACE:
            return "xml:%s" % local
        prefix = url_prefixes.get(ns)
        if prefix is None:
            i = 0
            while "ns%d" % i in url_prefixes.values():
                i += 1
            prefix = url_prefixes[ns] = "ns%d" % i
        xmlns[prefix] = ns
        return "%s:%s" % (prefix, local)

    element = copy.deepcopy(element)
    element.tail = None
    for child in element.iter():
        child.tag = prefixed(child.tag)
        child.attrib = {prefixed(key): value
                        for key, value in child.attrib.items()}
    return element, xmlns


def parse_proppatch(body: Union[str, bytes]
                    ) -> List["properties.PropertyOperation"]:
    """Parse a PROPPATCH request body into property operations.

    Operations keep the order of the document. Raises ``ValueError`` for
    malformed documents.

    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    prefixes: Dict[str, str] = {}
    root = None
    try:
        for event, item in DefusedET.iterparse(
                io.BytesIO(body), events=("start-ns", "start")):
            if event == "start-ns":
                prefix, url = item
                if prefix:
                    prefixes.setdefault(prefix, url)
            elif root is None:
                root = item
    except ET.ParseError as e:
        raise ValueError("Invalid XML: %s" % e) from e
    if root is None or root.tag != make_clark("d:propertyupdate"):
        raise ValueError("Expected propertyupdate element")
    url_prefixes: Dict[str, str] = {}
    for prefix, url in prefixes.items():
        url_prefixes.setdefault(url, prefix)
    operations = []
    for child in root:
        if child.tag == make_clark("d:set"):
            action = "set"
        elif child.tag == make_clark("d:remove"):
            action = "remove"
        else:
            continue
        for prop in child.iterfind(make_clark("d:prop")):
            for element in prop:
                namespace, name = split_clark(element.tag)
                if action == "remove":
                    operations.append(properties.PropertyOperation(
                        action, namespace, name))
                    continue
                value, xmlns = _prefixed_copy(element, url_prefixes)
                operations.append(properties.PropertyOperation(
                    action, namespace, name,
                    ET.tostring(value, encoding="unicode"), xmlns))
    return operations
