"""Tests for decoding XML into a node tree."""

import io
import logging
import time
from unittest.mock import patch

import pytest

from xml2json_transcoder.character.stream import CharacterStream
from xml2json_transcoder.shared.config import ConverterConfig
from xml2json_transcoder.shared.errors import CharsetError, XMLSyntaxError
from xml2json_transcoder.tree.builder import Decoder, assign_labels, decode
from xml2json_transcoder.tree.node import Node

OSM = """<?xml version="1.0" encoding="UTF-8"?>
  <osm version="0.6" generator="CGImap 0.0.2">
   <bounds minlat="54.0889580" minlon="12.2487570" maxlat="54.0913900" maxlon="12.2524800"/>
   <node id="298884269" lat="54.0901746" lon="12.2482632" user="SvenHRO" uid="46882"/>
   <node id="1831881213" version="1" changeset="12370172" lat="54.0900666" lon="12.2539381">
    <tag k="name" v="Neu Broderstorf"/>
    <tag k="traffic_sign" v="city_limit"/>
   </node>
   <foo>bar</foo>
  </osm>"""


class TestDecoder:
    """Test Decoder functionality."""

    def test_decode_structure(self):
        """Test elements and attributes become grouped children."""
        root = Decoder(OSM.encode("utf-8"), ConverterConfig.conventional()).decode()

        osm = root.get("osm")[0]
        assert list(osm.children) == ["-version", "-generator", "bounds", "node", "foo"]
        assert osm.get("-version")[0].text == "0.6"
        assert [n.get("-id")[0].text for n in osm.get("node")] == ["298884269", "1831881213"]
        tags = osm.get("node")[1].get("tag")
        assert [t.get("-v")[0].text for t in tags] == ["Neu Broderstorf", "city_limit"]
        assert osm.get("foo")[0].text == "bar"
        assert osm.text == ""

    def test_decode_into_supplied_root(self):
        root = Node()

        result = Decoder("<a>x</a>").decode(root)

        assert result is root
        assert root.get("a")[0].text == "x"

    def test_attributes_without_prefix_and_exclusions(self):
        """Test an empty prefix and excluded attribute names."""
        config = ConverterConfig(excluded_attributes=frozenset({"version", "generator"}))

        root = decode(OSM, config)

        osm = root.get("osm")[0]
        assert osm.get("bounds")[0].get("minlat")[0].text == "54.0889580"
        assert "version" not in osm.children
        assert "generator" not in osm.children
        # Exclusion applies at every depth
        assert "version" not in osm.get("node")[1].children

    def test_exclusion_by_namespace(self):
        """Test namespace declarations can be dropped by their namespace."""
        config = ConverterConfig(attribute_prefix="-", excluded_attributes=frozenset({"xmlns"}))
        xml = '<s:Envelope xmlns:s="urn:soap" xmlns="urn:d" id="7"/>'

        envelope = decode(xml, config).get("Envelope")[0]

        assert list(envelope.children) == ["-id"]

    def test_exclusion_by_namespace_uri(self):
        """Test attributes can be dropped by the URI of their prefix."""
        config = ConverterConfig(excluded_attributes=frozenset({"urn:meta"}))
        xml = '<a xmlns:m="urn:meta" m:rev="3" id="7"/>'

        a = decode(xml, config).get("a")[0]

        assert list(a.children) == ["m", "id"]

    def test_prefixed_names_use_local_name(self):
        """Test keys are local names without namespace prefixes."""
        xml = '<soap-env:Envelope xmlns:soap-env="urn:soap"><soap-env:Header/></soap-env:Envelope>'

        envelope = decode(xml, ConverterConfig.conventional()).get("Envelope")[0]

        assert envelope.get("-soap-env")[0].text == "urn:soap"
        assert len(envelope.get("Header")) == 1

    def test_attribute_values_verbatim(self):
        """Test attribute values are not trimmed."""
        root = decode('<a v="  padded  "/>', ConverterConfig())

        assert root.get("a")[0].get("v")[0].text == "  padded  "

    def test_mixed_content_text_trimmed(self):
        xml = '<mixed attr="attribute">\n\t \tcontent\n\t </mixed>'

        mixed = decode(xml, ConverterConfig.conventional()).get("mixed")[0]

        assert mixed.text == "content"
        assert mixed.get("-attr")[0].text == "attribute"

    def test_text_around_children_accumulates(self):
        """Test text split by child elements is joined before trimming."""
        root = decode("<p> one <b>two</b> three </p>")

        paragraph = root.get("p")[0]
        assert paragraph.text == "one  three"
        assert paragraph.get("b")[0].text == "two"

    def test_cdata_joins_text(self):
        root = decode("<a>x<![CDATA[ <y> ]]>z</a>")

        assert root.get("a")[0].text == "x <y> z"

    def test_internal_newlines_preserved(self):
        root = decode("<foo>\n\t \tfoo\n\n\t\tbar\n\t</foo>")

        assert root.get("foo")[0].text == "foo\n\n\t\tbar"

    def test_comments_and_instructions_ignored(self):
        root = decode("<!DOCTYPE a><a><!-- c --><?pi data?>t</a>")

        a = root.get("a")[0]
        assert a.text == "t"
        assert a.children == {}

    def test_multiple_top_level_elements(self):
        root = decode("<a>1</a><a>2</a><b/>")

        assert [n.text for n in root.get("a")] == ["1", "2"]
        assert len(root.get("b")) == 1

    def test_empty_input(self):
        root = decode(b"")

        assert root.children == {}
        assert root.text == ""

    def test_labels_are_paths(self):
        root = decode(OSM, ConverterConfig.conventional())

        osm = root.get("osm")[0]
        assert root.label == ""
        assert osm.label == "osm"
        assert osm.get("-version")[0].label == "osm.-version"
        assert osm.get("node")[1].get("tag")[0].label == "osm.node.tag"

    def test_character_stream_source(self):
        stream = CharacterStream(io.BytesIO(b"<a>1</a>"), chunk_size=2)

        assert decode(stream).get("a")[0].text == "1"

    def test_latin1_document(self):
        data = '<?xml version="1.0" encoding="ISO-8859-1"?><charset>über complex</charset>'.encode("latin-1")

        assert decode(data).get("charset")[0].text == "über complex"

    def test_syntax_error_propagates(self):
        with pytest.raises(XMLSyntaxError):
            decode("<a><b></a>")

    def test_charset_error_propagates(self):
        with pytest.raises(CharsetError):
            decode(b"<a>\xff</a>")

    def test_debug_log(self, caplog):
        """Test decoding statistics are logged at debug level."""
        config = ConverterConfig(correlation_id="req-1")

        with caplog.at_level(logging.DEBUG, logger="xml2json_transcoder.tree.builder"):
            decode("<a><b/></a>", config)

        records = [r for r in caplog.records if r.getMessage() == "Decoded XML document"]
        assert len(records) == 1
        assert records[0].nodes == 2
        assert records[0].tokens == 4
        assert records[0].correlation_id == "req-1"
        assert records[0].component == "decoder"

    def test_summary_skipped_when_debug_disabled(self, caplog):
        """Test the node count walk only runs when debug records are emitted."""
        with caplog.at_level(logging.INFO, logger="xml2json_transcoder.tree.builder"):
            with patch.object(Node, "count", side_effect=AssertionError("counted")):
                root = decode("<a><b/></a>")

        assert len(root.get("a")[0].get("b")) == 1
        assert not [r for r in caplog.records if r.getMessage() == "Decoded XML document"]


class TestDecoderScaling:
    """Test decoding large and deeply nested documents."""

    def test_many_indented_siblings(self):
        """Test whitespace between thousands of siblings is trimmed once."""
        xml = "<osm>\n" + "".join(f'  <node id="{i}"/>\n' for i in range(5000)) + "</osm>"

        start = time.time()
        root = decode(xml)
        elapsed = time.time() - start

        osm = root.get("osm")[0]
        assert len(osm.get("node")) == 5000
        assert osm.get("node")[-1].get("id")[0].text == "4999"
        assert osm.text == ""
        assert elapsed < 10

    def test_text_split_by_many_children(self):
        root = decode("<a>" + "x<b/>" * 5000 + "</a>")

        a = root.get("a")[0]
        assert a.text == "x" * 5000
        assert len(a.get("b")) == 5000

    def test_deep_nesting(self):
        depth = 1500
        root = decode("<a>" * depth + "x" + "</a>" * depth)

        assert root.count() == depth
        labels = [node.label for _, node in root.walk()]
        assert labels[0] == "a"
        assert labels[-1] == ".".join(["a"] * depth)
        assert next(node for _, node in root.walk() if node.label == labels[-1]).text == "x"


class TestAssignLabels:
    """Test label assignment."""

    def test_assign_labels(self):
        root = Node()
        a = Node()
        b = Node(text="x")
        a.add_child("b", b)
        root.add_child("a", a)

        assign_labels(root)

        assert (root.label, a.label, b.label) == ("", "a", "a.b")

    def test_assign_labels_with_base_path(self):
        root = Node()
        child = Node()
        root.add_child("c", child)

        assign_labels(root, "base")

        assert child.label == "base.c"
