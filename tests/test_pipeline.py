import unittest

from optimizehtml import (
    CollapseWhitespace,
    EditDocument,
    HtmlOptimizer,
    OptimizeOptions,
    OptionsError,
    PlaceholderLeakError,
    RemoveTagSpaces,
    compile_transforms,
    optimize_html,
    process_content,
)


class TestProcessContent(unittest.TestCase):
    def test_excluded_elements_pass_through_untouched(self) -> None:
        compiled = compile_transforms([CollapseWhitespace(), RemoveTagSpaces()])
        html = '<div  >  <my-widget   data-a="1">  keep   me </my-widget>  </div>'
        out = process_content(html, compiled, exclude_tags=["my-widget"])
        assert out == '<div><my-widget   data-a="1">  keep   me </my-widget></div>'

    def test_without_exclusions_everything_is_optimized(self) -> None:
        compiled = compile_transforms([CollapseWhitespace(), RemoveTagSpaces()])
        out = process_content('<div  >  <x-a   b="1">  c  </x-a>  </div>', compiled)
        assert out == '<div><x-a b="1">c</x-a></div>'

    def test_leaked_placeholder_raises(self) -> None:
        compiled = compile_transforms([EditDocument(lambda s: s + "___INLINE_7___")])
        with self.assertRaises(PlaceholderLeakError) as cm:
            process_content("<p>x</p>", compiled)
        assert [p.placeholder for p in cm.exception.placeholders] == ["___INLINE_7___"]
        assert "Remaining placeholders:" in str(cm.exception)
        assert "___INLINE_7___" in str(cm.exception)

    def test_quoted_placeholder_text_in_input_is_not_a_leak(self) -> None:
        compiled = compile_transforms([CollapseWhitespace()])
        html = '<p title="___INLINE_0___">  x  </p>'
        assert process_content(html, compiled) == html

    def test_existing_exclusion_tokens_skip_the_carve_out(self) -> None:
        html = '<p title="___EXCLUDE_0___"></p><x-a> k </x-a>'
        with self.assertLogs("optimizehtml.pipeline", level="WARNING"):
            out = process_content(html, [], exclude_tags=["x-a"])
        assert out == html


class TestHtmlOptimizer(unittest.TestCase):
    def test_process_files(self) -> None:
        files = {
            "index.html": b"<div>  a  </div>",
            "style.css": b"body  {  }",
            "empty.html": b"",
            "sub/page.html": "<p>  x  </p>",
        }
        report = HtmlOptimizer().process_files(files)

        assert report.processed == ("index.html", "sub/page.html")
        assert report.skipped == ("empty.html",)
        assert report.errors == ()
        assert report.ok
        assert files["index.html"] == b"<div>a</div>"
        assert files["sub/page.html"] == "<p>x</p>"
        assert files["style.css"] == b"body  {  }"
        assert files["empty.html"] == b""

    def test_failing_document_keeps_original_content(self) -> None:
        def boom(text: str) -> str:
            if "bad" in text:
                raise RuntimeError("boom")
            return text

        optimizer = HtmlOptimizer(transforms=[CollapseWhitespace(), EditDocument(boom)])
        files = {"a.html": b"<p> bad </p>", "b.html": b"<p>  ok  </p>"}
        with self.assertLogs("optimizehtml.pipeline", level="WARNING"):
            report = optimizer(files)

        assert not report.ok
        assert len(report.errors) == 1
        assert report.errors[0].filename == "a.html"
        assert isinstance(report.errors[0].error, RuntimeError)
        assert str(report.errors[0]) == "a.html: RuntimeError: boom"
        assert report.processed == ("b.html",)
        assert files["a.html"] == b"<p> bad </p>"
        assert files["b.html"] == b"<p>ok</p>"

    def test_pattern_selects_files(self) -> None:
        optimizer = HtmlOptimizer({"pattern": "blog/**"})
        assert optimizer.matches("blog/2024/post.html")
        assert optimizer.matches("./blog/a.html")
        assert not optimizer.matches("index.html")

        files = {"index.html": b"<p>  a  </p>", "blog/x.html": b"<p>  b  </p>"}
        report = optimizer.process_files(files)
        assert report.processed == ("blog/x.html",)
        assert files["index.html"] == b"<p>  a  </p>"

    def test_invalid_options_raise(self) -> None:
        with self.assertRaises(OptionsError):
            HtmlOptimizer({"remove_comment": True})

    def test_accepts_resolved_options(self) -> None:
        optimizer = HtmlOptimizer(OptimizeOptions(remove_comments=True))
        assert optimizer.optimize("<p> a </p>\n<!-- note -->") == "<p>a</p>"

    def test_exclude_tags_apply_to_every_optimizer(self) -> None:
        optimizer = HtmlOptimizer({"exclude_tags": ["x-raw"], "aggressive": True})
        html = '<div class="a">\n  <x-raw  class="b">  <!-- kept -->  </x-raw>\n</div>'
        assert optimizer.optimize(html) == '<div class=a><x-raw  class="b">  <!-- kept -->  </x-raw></div>'

    def test_report_callback(self) -> None:
        seen: list[str | None] = []

        def _report(msg: str, *, transform: str | None = None) -> None:
            seen.append(transform)

        optimizer = HtmlOptimizer({"remove_comments": True}, report=_report)
        assert optimizer.optimize("<p>a</p><!-- x -->") == "<p>a</p>"
        assert seen == ["remove_comments"]


class TestRawTextElements(unittest.TestCase):
    def test_aggressive_leaves_script_body_alone(self) -> None:
        html = "<script>\nfor (var i = 0; i < n; i++) { // loop\n  foo();\n}\nif (a > b) {}\n</script>"
        assert optimize_html(html, aggressive=True) == html

    def test_aggressive_leaves_pre_body_alone(self) -> None:
        html = '<pre><span   class="k">x</span>  <!-- c --></pre>'
        assert optimize_html(html, aggressive=True) == html

    def test_raw_element_start_tag_is_still_optimized(self) -> None:
        html = '<div>\n<script  type="text/javascript"  src="https://cdn.example.com/a.js"></script>\n</div>'
        assert optimize_html(html, aggressive=True) == '<div><script src="//cdn.example.com/a.js"></script></div>'


class TestOptimizeHtml(unittest.TestCase):
    def test_whitespace_only_by_default(self) -> None:
        html = '<div>\n  <!-- c -->\n  <a href="https://example.com"> Go </a>\n</div>'
        assert optimize_html(html) == '<div><!-- c --><a href="https://example.com">Go</a></div>'

    def test_aggressive_document(self) -> None:
        html = (
            '<!DOCTYPE html PUBLIC "x">\n<html>\n<body>\n  <!-- c -->\n'
            '  <a href="https://example.com/a" class="link">  Go  </a>\n</body>\n</html>\n'
        )
        expected = '<!DOCTYPE html><html><body><a href="//example.com/a" class=link>Go</a></body></html>'
        assert optimize_html(html, aggressive=True) == expected

    def test_boolean_and_url_scenarios(self) -> None:
        html = '<input type="checkbox" checked="checked" disabled="disabled">'
        assert optimize_html(html, normalize_boolean_attributes=True) == '<input type="checkbox" checked disabled>'

        html = '<a href="  https://example.com/path/  ">Link</a>'
        out = optimize_html(html, clean_url_attributes=True, remove_protocols=True)
        assert out == '<a href="//example.com/path/">Link</a>'
