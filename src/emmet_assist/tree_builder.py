"""Host syntax tree builder for markup and stylesheet documents.

Produces ``DocumentTree`` snapshots with Lezer-style node names so the
context resolver can work without an editor-side incremental parser. The
scanners are error tolerant: unterminated tags, unclosed elements, stray
close tags and half-typed declarations all yield a tree instead of raising.

Markup node types:
  Document, Element, OpenTag, CloseTag, SelfClosingTag, MismatchedCloseTag,
  StartTag, StartCloseTag, EndTag, SelfCloseEndTag, TagName, Attribute,
  AttributeName, Is, AttributeValue, Text, Comment, DoctypeDecl, ScriptText

Stylesheet node types:
  StyleSheet, RuleSet, Selector, Block, ``{``, ``}``, Declaration,
  PropertyName, ``:``, Value, ``;``, AtRule, AtKeyword, Comment
"""
from __future__ import annotations

import re

from emmet_assist.syntax import get_syntax_type, is_html
from emmet_assist.syntax_tree import DocumentTree, TreeNode

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "link",
    "meta", "param", "source", "track", "wbr",
})

_TAG_NAME_RE = re.compile(r"[A-Za-z][\w:.-]*")
_ATTR_NAME_RE = re.compile(r"[^\s\"'<>/=]+")
_UNQUOTED_VALUE_RE = re.compile(r"[^\s\"'<>=`]+")
_PROPERTY_NAME_RE = re.compile(r"[^\s:;{}]+")
_AT_KEYWORD_RE = re.compile(r"@[\w-]*")
_WS = " \t\n\r\f"


def build_document_tree(text: str, syntax: str = "html") -> DocumentTree:
    """Parse ``text`` into a tree for the given Emmet syntax name."""
    if get_syntax_type(syntax) == "stylesheet":
        root = _StylesheetScanner(text, 0, len(text)).parse()
        root.language = "css"
        return DocumentTree(root=root, top_language="css")

    if is_html(syntax) and syntax not in ("jsx", "tsx"):
        root = _MarkupScanner(text).parse()
        root.language = "html"
        return DocumentTree(root=root, top_language="html")

    root = TreeNode("Document", 0, len(text), language=syntax)
    if text:
        root.append(TreeNode("Text", 0, len(text)))
    return DocumentTree(root=root, top_language=syntax)


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------


class _MarkupScanner:
    def __init__(self, text: str) -> None:
        self.text = text
        self.length = len(text)
        self.stack: list[tuple[TreeNode, str]] = []

    @property
    def parent(self) -> TreeNode:
        return self.stack[-1][0] if self.stack else self.root

    def parse(self) -> TreeNode:
        self.root = TreeNode("Document", 0, self.length)
        pos = 0
        while pos < self.length:
            pos = self._step(pos)

        while self.stack:
            self._close_implicitly(self.stack.pop()[0])
        return self.root

    def _step(self, pos: int) -> int:
        text = self.text
        if text.startswith("<!--", pos):
            end = text.find("-->", pos + 4)
            end = self.length if end == -1 else end + 3
            self.parent.append(TreeNode("Comment", pos, end))
            return end

        if text.startswith("<!", pos):
            end = text.find(">", pos)
            end = self.length if end == -1 else end + 1
            self.parent.append(TreeNode("DoctypeDecl", pos, end))
            return end

        if text.startswith("</", pos):
            name_match = _TAG_NAME_RE.match(text, pos + 2)
            if name_match is not None:
                return self._close_tag(pos, name_match.end())

        if text.startswith("<", pos):
            name_match = _TAG_NAME_RE.match(text, pos + 1)
            if name_match is not None:
                return self._open_tag(pos, name_match.end())

        end = text.find("<", pos + 1)
        end = self.length if end == -1 else end
        self.parent.append(TreeNode("Text", pos, end))
        return end

    def _open_tag(self, pos: int, name_end: int) -> int:
        text = self.text
        tag = TreeNode("OpenTag", pos, pos)
        tag.append(TreeNode("StartTag", pos, pos + 1))
        tag.append(TreeNode("TagName", pos + 1, name_end))
        name = text[pos + 1:name_end].lower()

        i = name_end
        self_closing = False
        while True:
            while i < self.length and text[i] in _WS:
                i += 1
            if i >= self.length or text[i] == "<":
                break
            if text.startswith("/>", i):
                tag.append(TreeNode("SelfCloseEndTag", i, i + 2))
                i += 2
                self_closing = True
                break
            if text[i] == ">":
                tag.append(TreeNode("EndTag", i, i + 1))
                i += 1
                break
            attr_end = self._attribute(tag, i)
            i = attr_end if attr_end > i else i + 1

        tag.end = i
        element = TreeNode("Element", pos, i)
        if self_closing or name in VOID_ELEMENTS:
            tag.type_name = "SelfClosingTag"
            element.append(tag)
            self.parent.append(element)
            return i

        element.append(tag)
        self.parent.append(element)
        if name in ("style", "script"):
            return self._raw_text(element, name, i)

        self.stack.append((element, name))
        return i

    def _attribute(self, tag: TreeNode, pos: int) -> int:
        text = self.text
        name_match = _ATTR_NAME_RE.match(text, pos)
        if name_match is None:
            return pos

        attr = TreeNode("Attribute", pos, name_match.end())
        attr.append(TreeNode("AttributeName", pos, name_match.end()))
        i = name_match.end()
        while i < self.length and text[i] in _WS:
            i += 1

        if i < self.length and text[i] == "=":
            attr.append(TreeNode("Is", i, i + 1))
            i += 1
            while i < self.length and text[i] in _WS:
                i += 1
            value_end = self._attribute_value_end(i)
            if value_end > i:
                attr.append(TreeNode("AttributeValue", i, value_end))
            attr.end = max(value_end, i)

        tag.append(attr)
        return attr.end

    def _attribute_value_end(self, pos: int) -> int:
        text = self.text
        if pos >= self.length:
            return pos
        ch = text[pos]
        if ch in "\"'":
            close = text.find(ch, pos + 1)
            return self.length if close == -1 else close + 1
        if ch == "{":
            depth = 0
            for i in range(pos, self.length):
                if text[i] == "{":
                    depth += 1
                elif text[i] == "}":
                    depth -= 1
                    if depth == 0:
                        return i + 1
            return self.length
        match = _UNQUOTED_VALUE_RE.match(text, pos)
        return match.end() if match else pos

    def _raw_text(self, element: TreeNode, name: str, pos: int) -> int:
        close = re.compile(rf"</{name}\b", re.IGNORECASE).search(self.text, pos)
        content_end = close.start() if close else self.length

        if name == "style":
            sheet = _StylesheetScanner(self.text, pos, content_end).parse()
            sheet.language = "css"
            element.append(sheet)
        else:
            element.append(TreeNode("ScriptText", pos, content_end, language="javascript"))

        if close is None:
            element.end = self.length
            return self.length

        self.stack.append((element, name))
        return self._close_tag(content_end, close.end())

    def _close_tag(self, pos: int, name_end: int) -> int:
        text = self.text
        tag = TreeNode("CloseTag", pos, pos)
        tag.append(TreeNode("StartCloseTag", pos, pos + 2))
        tag.append(TreeNode("TagName", pos + 2, name_end))
        name = text[pos + 2:name_end].lower()

        i = name_end
        while i < self.length and text[i] not in "<>":
            i += 1
        if i < self.length and text[i] == ">":
            tag.append(TreeNode("EndTag", i, i + 1))
            i += 1
        tag.end = i

        match_ix = next(
            (ix for ix in range(len(self.stack) - 1, -1, -1) if self.stack[ix][1] == name),
            None,
        )
        if match_ix is None:
            tag.type_name = "MismatchedCloseTag"
            self.parent.append(tag)
            return i

        while len(self.stack) > match_ix + 1:
            self._close_implicitly(self.stack.pop()[0])

        element = self.stack.pop()[0]
        element.append(tag)
        element.end = tag.end
        return i

    @staticmethod
    def _close_implicitly(element: TreeNode) -> None:
        last = element.last_child
        if last is not None:
            element.end = max(element.end, last.end)
            parent = element.parent
            while parent is not None and parent.type_name == "Element" and parent.end < element.end:
                parent.end = element.end
                parent = parent.parent


# ---------------------------------------------------------------------------
# Stylesheet
# ---------------------------------------------------------------------------


class _StylesheetScanner:
    """Scans ``text[start:end]``; produced offsets are absolute."""

    def __init__(self, text: str, start: int, end: int) -> None:
        self.text = text
        self.start = start
        self.limit = end
        self.pos = start

    def parse(self) -> TreeNode:
        sheet = TreeNode("StyleSheet", self.start, self.limit)
        self._items(sheet, top_level=True)
        return sheet

    def _skip_space(self, parent: TreeNode) -> None:
        text = self.text
        while self.pos < self.limit:
            if text[self.pos] in _WS:
                self.pos += 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2, self.limit)
                end = self.limit if end == -1 else end + 2
                parent.append(TreeNode("Comment", self.pos, end))
                self.pos = end
            else:
                break

    def _items(self, parent: TreeNode, *, top_level: bool) -> None:
        while True:
            self._skip_space(parent)
            if self.pos >= self.limit:
                return
            ch = self.text[self.pos]
            if ch == "}":
                if not top_level:
                    return
                self.pos += 1
            elif ch == ";":
                parent.append(TreeNode(";", self.pos, self.pos + 1))
                self.pos += 1
            elif ch == "@":
                self._at_rule(parent)
            else:
                self._rule_or_declaration(parent, top_level=top_level)

    def _scan_prelude(self, pos: int) -> int:
        """Index of the first ``{``, ``;`` or ``}`` outside strings and parens."""
        text = self.text
        depth = 0
        i = pos
        while i < self.limit:
            ch = text[i]
            if ch in "\"'":
                close = text.find(ch, i + 1, self.limit)
                i = self.limit if close == -1 else close + 1
                continue
            if text.startswith("/*", i):
                close = text.find("*/", i + 2, self.limit)
                i = self.limit if close == -1 else close + 2
                continue
            if ch in "([":
                depth += 1
            elif ch in ")]":
                depth = max(0, depth - 1)
            elif depth == 0 and ch in "{;}":
                return i
            i += 1
        return self.limit

    def _trim_end(self, start: int, end: int) -> int:
        while end > start and self.text[end - 1] in _WS:
            end -= 1
        return end

    def _block(self, owner: TreeNode, pos: int) -> None:
        block = owner.append(TreeNode("Block", pos, pos + 1))
        block.append(TreeNode("{", pos, pos + 1))
        self.pos = pos + 1
        self._items(block, top_level=False)
        if self.pos < self.limit and self.text[self.pos] == "}":
            block.append(TreeNode("}", self.pos, self.pos + 1))
            self.pos += 1
        else:
            self.pos = self.limit
        block.end = self.pos
        owner.end = self.pos

    def _rule_or_declaration(self, parent: TreeNode, *, top_level: bool) -> None:
        start = self.pos
        stop = self._scan_prelude(start)
        chunk_end = self._trim_end(start, stop)
        stop_ch = self.text[stop] if stop < self.limit else ""

        if stop_ch == "{":
            rule = parent.append(TreeNode("RuleSet", start, stop))
            if chunk_end > start:
                rule.append(TreeNode("Selector", start, chunk_end))
            self._block(rule, stop)
            return

        if top_level and ":" not in self.text[start:chunk_end]:
            rule = parent.append(TreeNode("RuleSet", start, chunk_end))
            rule.append(TreeNode("Selector", start, chunk_end))
        else:
            self._declaration(parent, start, chunk_end)
        self.pos = stop

    def _declaration(self, parent: TreeNode, start: int, end: int) -> None:
        text = self.text
        decl = parent.append(TreeNode("Declaration", start, end))
        i = start
        name_match = _PROPERTY_NAME_RE.match(text, i, end)
        if name_match is not None:
            decl.append(TreeNode("PropertyName", name_match.start(), name_match.end()))
            i = name_match.end()
        while i < end and text[i] in _WS:
            i += 1
        if i < end and text[i] == ":":
            decl.append(TreeNode(":", i, i + 1))
            i += 1
        self._values(decl, i, end)

    def _values(self, owner: TreeNode, pos: int, end: int) -> None:
        text = self.text
        i = pos
        while i < end:
            if text[i] in _WS:
                i += 1
                continue
            token_start = i
            depth = 0
            while i < end:
                ch = text[i]
                if ch in "\"'":
                    close = text.find(ch, i + 1, end)
                    i = end if close == -1 else close + 1
                    continue
                if ch == "(":
                    depth += 1
                elif ch == ")":
                    depth = max(0, depth - 1)
                elif ch in _WS and depth == 0:
                    break
                i += 1
            owner.append(TreeNode("Value", token_start, i))

    def _at_rule(self, parent: TreeNode) -> None:
        start = self.pos
        keyword = _AT_KEYWORD_RE.match(self.text, start, self.limit)
        if keyword is None:
            raise ValueError(f"no at-rule keyword at {start}")
        stop = self._scan_prelude(keyword.end())
        rule = parent.append(TreeNode("AtRule", start, stop))
        rule.append(TreeNode("AtKeyword", start, keyword.end()))
        self._values(rule, keyword.end(), self._trim_end(keyword.end(), stop))

        stop_ch = self.text[stop] if stop < self.limit else ""
        if stop_ch == "{":
            self._block(rule, stop)
        elif stop_ch == ";":
            rule.append(TreeNode(";", stop, stop + 1))
            rule.end = stop + 1
            self.pos = stop + 1
        else:
            rule.end = self._trim_end(start, stop)
            self.pos = stop
