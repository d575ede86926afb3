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

import pytest

from filedav import utils, xmlutils
from filedav.properties import PropertyOperation


class TestUtils:

    def test_natural_sort_key(self) -> None:
        names = ["img10.png", "IMG2.png", "img1.png", "a", "B", "10", "9"]
        assert sorted(names, key=utils.natural_sort_key) == [
            "9", "10", "a", "B", "img1.png", "IMG2.png", "img10.png"]


class TestXmlUtils:

    def test_make_clark(self) -> None:
        assert xmlutils.make_clark("d:prop") == "{DAV:}prop"
        assert xmlutils.make_clark("oc:id") == "{http://owncloud.org/ns}id"
        assert xmlutils.make_clark("{urn:x}y") == "{urn:x}y"
        with pytest.raises(ValueError):
            xmlutils.make_clark("unknown:y")

    def test_split_clark(self) -> None:
        assert xmlutils.split_clark("{DAV:}prop") == ("DAV:", "prop")
        assert xmlutils.split_clark("plain") == ("", "plain")

    def test_parse_proppatch_order(self) -> None:
        operations = xmlutils.parse_proppatch("""<?xml version="1.0"?>
<D:propertyupdate xmlns:D="DAV:" xmlns:Z="http://ns.example.com/z/">
  <D:set><D:prop><Z:Author>Jim</Z:Author></D:prop></D:set>
  <D:remove><D:prop><Z:Copyright-Owner/></D:prop></D:remove>
  <D:set><D:prop><Z:Author>Joe</Z:Author></D:prop></D:set>
</D:propertyupdate>""")
        assert [(o.action, o.namespace, o.name) for o in operations] == [
            ("set", "http://ns.example.com/z/", "Author"),
            ("remove", "http://ns.example.com/z/", "Copyright-Owner"),
            ("set", "http://ns.example.com/z/", "Author")]
        assert operations[1] == PropertyOperation(
            "remove", "http://ns.example.com/z/", "Copyright-Owner")
        assert "Joe" in operations[2].value
        assert operations[2].xmlns == {"Z": "http://ns.example.com/z/"}
        assert operations[2].value == "<Z:Author>Joe</Z:Author>"

    def test_parse_proppatch_default_namespace(self) -> None:
        operations = xmlutils.parse_proppatch("""<?xml version="1.0"?>
<D:propertyupdate xmlns:D="DAV:">
  <D:set><D:prop>
    <Author xmlns="urn:a"><Name xml:lang="en">Jim</Name></Author>
  </D:prop></D:set>
</D:propertyupdate>""")
        assert len(operations) == 1
        assert operations[0].namespace == "urn:a"
        assert operations[0].value == (
            '<ns0:Author><ns0:Name xml:lang="en">Jim</ns0:Name></ns0:Author>')
        assert operations[0].xmlns == {"ns0": "urn:a"}

    def test_parse_proppatch_invalid(self) -> None:
        with pytest.raises(ValueError):
            xmlutils.parse_proppatch("")
        with pytest.raises(ValueError):
            xmlutils.parse_proppatch(b"<D:propertyupdate")
        with pytest.raises(ValueError):
            xmlutils.parse_proppatch('<propfind xmlns="DAV:"/>')

    def test_parse_proppatch_entities_forbidden(self) -> None:
        with pytest.raises(ValueError):
            xmlutils.parse_proppatch("""<?xml version="1.0"?>
<!DOCTYPE d [<!ENTITY e "boom">]>
<d:propertyupdate xmlns:d="DAV:">
  <d:set><d:prop><x:a xmlns:x="urn:x">&e;</x:a></d:prop></d:set>
</d:propertyupdate>""")
