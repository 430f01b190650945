import unittest

from optimizehtml.placeholders import (
    PLACEHOLDER_RE,
    PlaceholderKind,
    PlaceholderStore,
    find_leaked_placeholders,
    make_placeholder,
    placeholder_pattern,
)


class TestPlaceholderGrammar(unittest.TestCase):
    def test_make_placeholder(self) -> None:
        assert make_placeholder(PlaceholderKind.PRESERVE, 3) == "___PRESERVE_3___"
        assert make_placeholder(PlaceholderKind.EXCLUDE, 0) == "___EXCLUDE_0___"

    def test_kind_is_a_string(self) -> None:
        assert PlaceholderKind.INLINE == "INLINE"
        assert PlaceholderKind("INLINE") is PlaceholderKind.INLINE

    def test_placeholder_re_only_knows_its_kinds(self) -> None:
        m = PLACEHOLDER_RE.search("x___INLINE_12___y")
        assert m is not None
        assert m.group("kind") == "INLINE"
        assert m.group("index") == "12"
        assert PLACEHOLDER_RE.search("___OTHER_1___") is None
        assert PLACEHOLDER_RE.search("__INLINE_1__") is None

    def test_adjacent_placeholders_are_separate_tokens(self) -> None:
        tokens = [m.group(0) for m in PLACEHOLDER_RE.finditer("___PRESERVE_0______INLINE_10___")]
        assert tokens == ["___PRESERVE_0___", "___INLINE_10___"]

    def test_placeholder_pattern_subset(self) -> None:
        pattern = placeholder_pattern((PlaceholderKind.EXCLUDE,))
        assert pattern.search("___EXCLUDE_1___")
        assert not pattern.search("___INLINE_1___")


class TestPlaceholderStore(unittest.TestCase):
    def test_indices_are_per_kind(self) -> None:
        store = PlaceholderStore()
        assert store.add(PlaceholderKind.PRESERVE, "x") == "___PRESERVE_0___"
        assert store.add(PlaceholderKind.INLINE, "y") == "___INLINE_0___"
        assert store.add(PlaceholderKind.PRESERVE, "z") == "___PRESERVE_1___"
        assert len(store) == 3
        assert store.records(PlaceholderKind.PRESERVE) == ("x", "z")
        assert store.records(PlaceholderKind.EXCLUDE) == ()

    def test_restore_resolves_nested_records(self) -> None:
        store = PlaceholderStore()
        inner = store.add(PlaceholderKind.INLINE, "<em>hi</em>")
        outer = store.add(PlaceholderKind.INLINE, f"<span>{inner} there</span>")
        assert store.restore(f"<p>{outer}</p>") == "<p><span><em>hi</em> there</span></p>"

    def test_restore_across_kinds(self) -> None:
        store = PlaceholderStore()
        pre = store.add(PlaceholderKind.PRESERVE, "<pre> a </pre>")
        inline = store.add(PlaceholderKind.INLINE, f"<b>{pre}</b>")
        assert store.restore(f"{inline} {pre}") == "<b><pre> a </pre></b> <pre> a </pre>"

    def test_restore_leaves_unknown_tokens(self) -> None:
        store = PlaceholderStore()
        store.add(PlaceholderKind.INLINE, "<b>x</b>")
        assert store.restore("___INLINE_9___ ___INLINE_0___") == "___INLINE_9___ <b>x</b>"

    def test_restore_selected_kinds(self) -> None:
        store = PlaceholderStore()
        pre = store.add(PlaceholderKind.PRESERVE, "P")
        exc = store.add(PlaceholderKind.EXCLUDE, "E")
        assert store.restore(f"{pre}{exc}", (PlaceholderKind.EXCLUDE,)) == f"{pre}E"

    def test_empty_store_returns_text(self) -> None:
        text = "a ___INLINE_0___ b"
        assert PlaceholderStore().restore(text) is text

    def test_restored_value_is_not_rescanned(self) -> None:
        store = PlaceholderStore()
        # Record text that merely looks like a token of a later record.
        first = store.add(PlaceholderKind.EXCLUDE, "literal ___INLINE_0___")
        store.add(PlaceholderKind.INLINE, "<b>x</b>")
        assert store.restore(first) == "literal ___INLINE_0___"


class TestFindLeakedPlaceholders(unittest.TestCase):
    def test_unquoted_token_is_a_leak(self) -> None:
        leaked = find_leaked_placeholders("<div>___INLINE_0___</div>")
        assert [p.placeholder for p in leaked] == ["___INLINE_0___"]
        assert leaked[0].context == "<div>___INLINE_0___</div>"

    def test_token_inside_quotes_is_ignored(self) -> None:
        assert find_leaked_placeholders('<div title="___INLINE_0___"></div>') == []
        assert find_leaked_placeholders("<div title='x ___PRESERVE_1___'></div>") == []

    def test_quotes_are_counted_across_tokens(self) -> None:
        text = '<a title="___INLINE_0___">___EXCLUDE_1___</a>'
        assert [p.placeholder for p in find_leaked_placeholders(text)] == ["___EXCLUDE_1___"]

    def test_context_is_limited(self) -> None:
        text = "x" * 30 + "___EXCLUDE_2___" + "y" * 30
        (leak,) = find_leaked_placeholders(text)
        assert leak.context == "x" * 20 + "___EXCLUDE_2___" + "y" * 20

    def test_clean_text(self) -> None:
        assert find_leaked_placeholders("<p>nothing here</p>") == []
