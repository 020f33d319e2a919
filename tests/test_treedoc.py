# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for TreeDocNode, TreeDocument, the query layer and the parsers."""

import io

import pytest

from genro_treedoc import (
    ErrorKind,
    InvalidDocumentError,
    TreeDocNode,
    TreeDocument,
    parse_file,
    parse_or_create,
    parse_stream,
    parse_string,
)
from genro_treedoc import query as q
from genro_treedoc.writer import serialize


@pytest.fixture
def catalog():
    """Document with repeated tags at several depths.

    <catalog>
        <item id="a">1</item>
        <group name="g1">
            <item id="b">2</item>
            <item id="c" kind="x">3</item>
        </group>
        <item id="d" kind="x">4</item>
    </catalog>
    """
    doc = TreeDocument.empty('catalog')
    doc.root.append('item', id='a', text='1')
    group = doc.root.append('group', name='g1')
    group.append('item', id='b', text='2')
    group.append('item', id='c', kind='x', text='3')
    doc.root.append('item', id='d', kind='x', text='4')
    return doc


class TestTreeDocNode:
    """Tests for TreeDocNode."""

    def test_create_node(self):
        """Test creating a node with attributes and text."""
        node = TreeDocNode('user', {'id': '1'}, 'Alice')
        assert node.tag == 'user'
        assert node.attr == {'id': '1'}
        assert node.text == 'Alice'
        assert node.children == []

    def test_create_node_defaults(self):
        """Test node creation with default values."""
        node = TreeDocNode('empty')
        assert node.attr == {}
        assert node.text is None
        assert node.is_leaf is True
        assert len(node) == 0

    def test_empty_tag_raises(self):
        """Test that a node needs a tag."""
        with pytest.raises(ValueError, match="non-empty"):
            TreeDocNode('')

    def test_attributes_are_strings(self):
        """Test that attribute values are stored as strings."""
        node = TreeDocNode('item', {'size': 10})
        node.set_attr({'ratio': 0.5}, visible=True)
        assert node.attr == {'size': '10', 'ratio': '0.5', 'visible': 'True'}

    def test_get_attr(self):
        """Test get_attr method."""
        node = TreeDocNode('item', {'color': 'red'})
        assert node.get_attr('color') == 'red'
        assert node.get_attr('missing') is None
        assert node.get_attr('missing', 'default') == 'default'
        assert node.get_attr() == {'color': 'red'}

    def test_append_preserves_order(self):
        """Test that children keep their insertion order."""
        node = TreeDocNode('list')
        for tag in ('c', 'a', 'b', 'a'):
            node.append(tag)
        assert [c.tag for c in node] == ['c', 'a', 'b', 'a']

    def test_append_returns_child(self):
        """Test append returns the new child for chaining."""
        root = TreeDocNode('config')
        port = root.append('server', host='localhost').append('port', text='80')
        assert port.text == '80'
        assert root.children[0].attr == {'host': 'localhost'}

    def test_find_all_searches_subtree(self, catalog):
        """Test find_all returns matches at every depth in document order."""
        ids = [n.attr['id'] for n in catalog.root.find_all('item')]
        assert ids == ['a', 'b', 'c', 'd']

    def test_find_all_star(self, catalog):
        """Test '*' matches every descendant."""
        assert len(catalog.root.find_all('*')) == 5

    def test_text_content(self):
        """Test text_content concatenates descendant text."""
        node = TreeDocNode('p', text='Hello ')
        node.append('b', text='big')
        node.append('i', text=' world')
        assert node.text_content == 'Hello big world'

    def test_structural_equality(self):
        """Test equality compares tag, attributes, text and children."""
        a = TreeDocNode('x', {'k': 'v'})
        a.append('y', text='1')
        b = TreeDocNode('x', {'k': 'v'})
        b.append('y', text='1')
        assert a == b
        b.append('z')
        assert a != b

    def test_repr(self):
        """Test string representation."""
        assert "'user'" in repr(TreeDocNode('user'))


class TestTreeDocument:
    """Tests for TreeDocument construction."""

    def test_empty(self):
        """Test creating a document with a root tag."""
        doc = TreeDocument.empty('settings')
        assert doc.root.tag == 'settings'
        assert doc.has_root
        assert doc.is_new
        assert doc.source is None

    def test_empty_without_root_tag(self):
        """Test that an empty root tag gives a rootless document."""
        assert TreeDocument.empty('').has_root is False
        assert TreeDocument.empty(None).root is None

    def test_parse_missing_returns_none(self, tmp_path):
        """Test parse returns None for a missing file."""
        assert TreeDocument.parse(tmp_path / 'missing.xml') is None

    def test_parse_records_source(self, tmp_path):
        """Test a parsed document remembers where it came from."""
        path = tmp_path / 'a.xml'
        path.write_text('<a/>')
        doc = TreeDocument.parse(path)
        assert doc.source == str(path)
        assert doc.is_new is False

    def test_parse_or_create(self, tmp_path):
        """Test parse_or_create on a missing file creates a fresh document."""
        doc = TreeDocument.parse_or_create(tmp_path / 'new.xml', 'settings')
        assert doc.root.tag == 'settings'
        assert doc.is_new

    def test_parse_stream(self):
        """Test parsing from a binary stream."""
        doc = TreeDocument.parse_stream(io.BytesIO(b'<a><b/></a>'))
        assert [c.tag for c in doc.root] == ['b']

    def test_equality(self):
        """Test documents compare by tree structure."""
        assert TreeDocument.empty('a') == TreeDocument.empty('a')
        assert TreeDocument.empty('a') != TreeDocument.empty('b')


class TestParsers:
    """Tests for the markup parsers."""

    def test_parse_file(self, tmp_path):
        """Test parsing a file on disk."""
        path = tmp_path / 'settings.xml'
        path.write_text(
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<settings>\n    <window width="640">Main</window>\n</settings>\n',
            encoding='utf-8',
        )
        result = parse_file(path)
        assert result.ok
        assert result.error is None
        window = result.document.root.children[0]
        assert window.attr == {'width': '640'}
        assert window.text == 'Main'

    def test_parse_file_missing(self, tmp_path):
        """Test a missing file fails with NOT_FOUND."""
        result = parse_file(tmp_path / 'missing.xml')
        assert not result
        assert result.document is None
        assert result.error is ErrorKind.NOT_FOUND

    def test_parse_file_directory(self, tmp_path):
        """Test a directory is not a regular file."""
        result = parse_file(tmp_path)
        assert result.error is ErrorKind.NOT_FOUND
        assert 'regular file' in result.message

    def test_parse_file_none(self):
        """Test a None path fails without raising."""
        assert parse_file(None).error is ErrorKind.NOT_FOUND

    def test_parse_file_malformed(self, tmp_path):
        """Test malformed content fails with MALFORMED_DOCUMENT."""
        path = tmp_path / 'broken.xml'
        path.write_text('<settings><window></settings>')
        result = parse_file(path)
        assert result.document is None
        assert result.error is ErrorKind.MALFORMED_DOCUMENT

    def test_parse_or_create_existing(self, tmp_path):
        """Test parse_or_create reads an existing file."""
        path = tmp_path / 'settings.xml'
        path.write_text('<settings><a/></settings>')
        result = parse_or_create(path, 'other')
        assert result.document.root.tag == 'settings'

    def test_parse_or_create_malformed_still_fails(self, tmp_path):
        """Test parse_or_create does not hide a broken file."""
        path = tmp_path / 'settings.xml'
        path.write_text('not markup')
        result = parse_or_create(path, 'settings')
        assert result.error is ErrorKind.MALFORMED_DOCUMENT

    def test_parse_stream_none(self):
        """Test a None stream fails without raising."""
        assert parse_stream(None).error is ErrorKind.NOT_FOUND

    def test_parse_string_bytes_and_text(self):
        """Test parse_string accepts both bytes and str."""
        assert parse_string(b'<a/>').document.root.tag == 'a'
        assert parse_string('<a/>').document.root.tag == 'a'

    def test_indentation_is_dropped(self):
        """Test whitespace between elements does not become text."""
        doc = parse_string('<a>\n    <b> x </b>\n    <c/>\n</a>').document
        assert doc.root.text is None
        assert doc.root.children[0].text == ' x '
        assert doc.root.children[1].text is None

    def test_comments_are_dropped(self):
        """Test comments are not part of the tree."""
        doc = parse_string('<a><!-- note --><b/></a>').document
        assert [c.tag for c in doc.root] == ['b']

    def test_mixed_content_tail_dropped(self):
        """Test text following a child element is discarded."""
        doc = parse_string('<p>Hello <b>big</b> world</p>').document
        assert doc.root.text == 'Hello '
        assert doc.root.children[0].text == 'big'
        assert doc.root.text_content == 'Hello big'

    def test_malformed_logs_warning(self, caplog):
        """Test a malformed document is reported in the log."""
        with caplog.at_level('WARNING', logger='genro_treedoc'):
            parse_string('<a>')
        assert 'Cannot parse' in caplog.text


class TestRoundTrip:
    """Tests for parse(serialize(doc)) == doc."""

    def test_round_trip(self):
        """Test tags, attributes, text and child order survive a round trip."""
        doc = TreeDocument.empty('settings')
        window = doc.root.append('window', width='640', title='A & B <main>')
        window.append('pos', x='10', y='-3')
        window.append('caption', text='  padded "quoted" text  ')
        recent = doc.root.append('recent')
        for name in ('z.txt', 'a.txt', 'z.txt'):
            recent.append('file', text=name)
        doc.root.append('empty')
        doc.root.append('unicode', text='café ☃')

        parsed = parse_string(serialize(doc)).document
        assert parsed == doc

    def test_round_trip_text_and_children(self):
        """Test a node carrying both text and children keeps both."""
        doc = TreeDocument.empty('p')
        doc.root.text = 'intro'
        doc.root.append('b', text='bold')
        parsed = parse_string(serialize(doc)).document
        assert parsed.root.text == 'intro'
        assert parsed.root.children[0].text == 'bold'

    def test_round_trip_empty_text(self):
        """Test an element whose text was set to '' survives a round trip."""
        doc = TreeDocument.empty('settings')
        title = doc.root.append('title')
        assert q.set_text(title, '') is True
        assert title.text is None
        doc.root.append('note').text = ''
        assert parse_string(serialize(doc)).document == doc

    def test_empty_and_missing_text_are_equal(self):
        """Test '' and None text compare equal."""
        assert TreeDocNode('a', text='') == TreeDocNode('a')
        assert TreeDocNode('a', text=' ') != TreeDocNode('a')

    def test_serialize_non_string_values(self):
        """Test values assigned directly are written in their str() form."""
        doc = TreeDocument.empty('a')
        doc.root.attr['n'] = 5
        doc.root.text = 7
        assert '<a n="5">7</a>' in serialize(doc)

    def test_serialize_namespaced_tag(self):
        """Test a tag parsed from a namespaced document is written back."""
        doc = parse_string('<a xmlns="urn:x"><b /></a>').document
        assert parse_string(serialize(doc)).document == doc

    @pytest.mark.parametrize('tag', ['my window', '-a', 'a:b', 'a>'])
    def test_serialize_rejects_invalid_tag(self, tag):
        """Test a tag that is not a markup name is refused."""
        doc = TreeDocument.empty('a')
        doc.root.append('b').tag = tag
        with pytest.raises(InvalidDocumentError):
            serialize(doc)

    def test_serialize_accepts_unicode_names(self):
        """Test non-ASCII letters, digits, dots and hyphens in names."""
        doc = TreeDocument.empty('città')
        doc.root.append('x-1.y_2', **{'età': '3'})
        assert parse_string(serialize(doc)).document == doc

    def test_serialize_rejects_control_characters(self):
        """Test characters markup cannot carry are refused."""
        doc = TreeDocument.empty('a')
        doc.root.text = 'a\x01b'
        with pytest.raises(InvalidDocumentError):
            serialize(doc)
        doc.root.text = 'tab\tand\nnewline'
        serialize(doc)

    def test_serialize_layout(self):
        """Test the serialized text layout."""
        doc = TreeDocument.empty('settings')
        doc.root.append('window', width='640').append('title', text='Main')
        assert serialize(doc) == (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<settings>\n'
            '    <window width="640">\n'
            '        <title>Main</title>\n'
            '    </window>\n'
            '</settings>\n'
        )

    def test_serialize_indent_width(self):
        """Test a custom indentation width."""
        doc = TreeDocument.empty('a')
        doc.root.append('b')
        assert '\n  <b />\n' in serialize(doc, indent_width=2)

    def test_serialize_does_not_modify_document(self):
        """Test serializing leaves the tree untouched."""
        doc = TreeDocument.empty('a')
        doc.root.append('b', text='x')
        before = repr(doc.root.children)
        serialize(doc)
        assert repr(doc.root.children) == before
        assert doc.root.text is None


class TestQueryLookup:
    """Tests for lookup functions."""

    def test_child_count_searches_subtree(self, catalog):
        """Test child_count counts matches at every depth."""
        assert q.child_count(catalog.root, 'item') == 4
        assert q.child_count(catalog.root, 'group') == 1
        assert q.child_count(catalog.root, 'missing') == 0

    def test_direct_child_count(self, catalog):
        """Test direct_child_count only looks at the first level."""
        assert q.direct_child_count(catalog.root, 'item') == 2
        assert [c.tag for c in q.direct_children(catalog.root)] == ['item', 'group', 'item']

    def test_child_count_absent(self):
        """Test child_count on absent input is zero."""
        assert q.child_count(None, 'item') == 0
        assert q.child_count(TreeDocNode('a'), None) == 0

    def test_first_and_nth_child(self, catalog):
        """Test positional lookup over direct children."""
        assert q.first_child(catalog.root).attr['id'] == 'a'
        assert q.nth_child(catalog.root, 1).tag == 'group'
        assert q.nth_child(catalog.root, 3) is None
        assert q.nth_child(catalog.root, -1) is None
        assert q.first_child(TreeDocNode('leaf')) is None
        assert q.first_child(None) is None

    def test_child_by_tag(self, catalog):
        """Test child lookup indexes same-tag nodes in document order."""
        assert q.child(catalog.root, 'item').attr['id'] == 'a'
        assert q.child(catalog.root, 'item', 2).attr['id'] == 'c'
        assert q.child(catalog.root, 'item', 4) is None
        assert q.child(catalog.root, 'item', -1) is None
        assert q.child(None, 'item') is None

    def test_child_with_attribute(self, catalog):
        """Test the first match in document order wins."""
        assert q.child_with_attribute(catalog.root, 'item', 'kind', 'x').attr['id'] == 'c'
        assert q.child_with_attribute(catalog.root, 'item', 'id', 'd').text == '4'
        assert q.child_with_attribute(catalog.root, 'item', 'id', 'zz') is None
        assert q.child_with_attribute(catalog.root, 'group', 'kind', 'x') is None
        assert q.child_with_attribute(None, 'item', 'id', 'a') is None

    def test_root(self, catalog):
        """Test root accessor."""
        assert q.root(catalog).tag == 'catalog'
        assert q.root(None) is None


class TestQueryCoercion:
    """Tests for text and typed coercions."""

    def test_text(self, catalog):
        """Test text and text_or."""
        group = q.child(catalog.root, 'group')
        assert q.text(group) == '23'
        assert q.text(TreeDocNode('empty')) == ''
        assert q.text(None) is None
        assert q.text_or(None, 'fallback') == 'fallback'
        assert q.text_or(TreeDocNode('a', text='v'), 'fallback') == 'v'

    def test_as_int(self):
        """Test integer coercion with default."""
        assert q.as_int(TreeDocNode('n', text='abc'), 42) == 42
        assert q.as_int(TreeDocNode('n', text='7'), 42) == 7
        assert q.as_int(None, 42) == 42
        assert q.as_int(TreeDocNode('n', text='-12')) == -12
        assert q.as_int(TreeDocNode('n', text='+5')) == 5
        assert q.as_int(TreeDocNode('n', text='1.5')) is None
        assert q.as_int(TreeDocNode('n', text=' 7')) is None
        assert q.as_int(TreeDocNode('n', text='1_000')) is None
        assert q.as_int(TreeDocNode('n')) is None

    def test_as_int_range(self):
        """Test 32-bit overflow falls back while as_long accepts it."""
        big = TreeDocNode('n', text='3000000000')
        assert q.as_int(big, -1) == -1
        assert q.as_long(big, -1) == 3000000000
        assert q.as_int(TreeDocNode('n', text='2147483647')) == 2147483647
        assert q.as_long(TreeDocNode('n', text='9223372036854775808'), 0) == 0

    def test_as_float(self):
        """Test float coercion with default."""
        assert q.as_float(TreeDocNode('n', text='2.5')) == 2.5
        assert q.as_float(TreeDocNode('n', text='1e3')) == 1000.0
        assert q.as_float(TreeDocNode('n', text='abc'), 0.5) == 0.5
        assert q.as_float(TreeDocNode('n', text='1_0'), 0.5) == 0.5
        assert q.as_float(None, 0.5) == 0.5

    @pytest.mark.parametrize('value', ['Yes', '1', 'TRUE', 'on'])
    def test_as_bool_true(self, value):
        """Test true literals in any case."""
        assert q.as_bool(TreeDocNode('b', text=value), False) is True

    @pytest.mark.parametrize('value', ['No', '0', 'false', 'OFF'])
    def test_as_bool_false(self, value):
        """Test false literals in any case."""
        assert q.as_bool(TreeDocNode('b', text=value), True) is False

    def test_as_bool_default(self):
        """Test unknown text falls through to the default."""
        assert q.as_bool(TreeDocNode('b', text='maybe'), True) is True
        assert q.as_bool(TreeDocNode('b', text='maybe')) is None
        assert q.as_bool(None, False) is False

    def test_coercion_does_not_mutate(self):
        """Test typed accessors never change the node."""
        node = TreeDocNode('n', {'v': '7'}, '7')
        q.as_int(node)
        q.attr_bool(node, 'v')
        assert node.text == '7'
        assert node.attr == {'v': '7'}

    def test_attributes(self):
        """Test attribute accessors with defaults."""
        node = TreeDocNode('w', {'width': '640', 'ratio': '1.5', 'max': 'yes', 'bad': 'x'})
        assert q.attribute(node, 'width') == '640'
        assert q.attribute(node, 'missing') is None
        assert q.attribute(node, 'missing', 'dflt') == 'dflt'
        assert q.attribute(None, 'width', 'dflt') == 'dflt'
        assert q.attr_int(node, 'width') == 640
        assert q.attr_int(node, 'bad', 3) == 3
        assert q.attr_int(node, 'missing', 3) == 3
        assert q.attr_long(node, 'width') == 640
        assert q.attr_float(node, 'ratio') == 1.5
        assert q.attr_bool(node, 'max') is True
        assert q.attr_bool(node, 'bad', False) is False


class TestQueryMutation:
    """Tests for best-effort mutators."""

    def test_append_child(self):
        """Test appending under a given parent and under the root."""
        doc = TreeDocument.empty('root')
        group = q.append_child(doc, None, 'group')
        item = q.append_child(doc, group, 'item')
        assert doc.root.children == [group]
        assert group.children == [item]
        assert item.tag == 'item'

    def test_append_child_absent_target(self):
        """Test append_child is a no-op on absent input."""
        doc = TreeDocument.empty('root')
        assert q.append_child(None, doc.root, 'x') is None
        assert q.append_child(doc, doc.root, None) is None
        assert q.append_child(doc, doc.root, '') is None
        assert q.append_child(TreeDocument.empty(None), None, 'x') is None
        assert doc.root.children == []

    def test_set_text(self):
        """Test set_text stores the string form and replaces children."""
        node = TreeDocNode('n')
        node.append('child')
        assert q.set_text(node, 42) is True
        assert node.text == '42'
        assert node.children == []
        assert q.set_text(None, 'x') is False
        assert q.set_text(node, None) is False
        assert node.text == '42'

    def test_set_attribute(self):
        """Test set_attribute stores the string form."""
        node = TreeDocNode('n')
        assert q.set_attribute(node, 'count', 5) is True
        assert q.set_attribute(node, 'flag', False) is True
        assert node.attr == {'count': '5', 'flag': 'False'}
        assert q.set_attribute(None, 'x', 1) is False
        assert q.set_attribute(node, None, 1) is False
        assert q.set_attribute(node, 'x', None) is False
        assert 'x' not in node.attr
