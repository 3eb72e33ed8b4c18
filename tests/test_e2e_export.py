"""
End-to-end export tests

Tests the full path: Org source -> Exporter -> Dispatcher -> handlers,
including nesting, verbatim blocks, links, the failure policy, and the
pipeline stages behind the command-line program.
"""

import pytest
from argparse import Namespace
from pathlib import Path
import tempfile

from orgblocks.config import AppSettings
from orgblocks.lib.exporter import Exporter
from orgblocks.lib.errors import BadgeError, UnsupportedColourError
from orgblocks.models import ProgramState, pipeline


class TestBlockExport:
    """Test block discovery and substitution"""

    def test_single_block(self):
        source = "Intro\n#+begin_red\nhello\n#+end_red\nOutro\n"
        exporter = Exporter(backend="html", settings=AppSettings())

        assert exporter.text_export(source) == (
            'Intro\n<span style="color:red;">hello\n</span>\nOutro\n'
        )
        assert exporter.block_count == 1

    def test_uppercase_keywords(self):
        """#+BEGIN_/#+END_ are accepted; the type keeps its case"""
        source = "#+BEGIN_parallel2NB\nA\n#+END_parallel2NB\n"
        text = Exporter(backend="html", settings=AppSettings()).text_export(source)
        assert text == '<div style="column-rule-style:none;column-count:2;">A\n</div>\n'

    def test_nested_blocks_inside_out(self):
        """Inner blocks are exported before the outer handler sees them"""
        source = (
            "#+begin_details\n"
            ":title: Colours\n"
            "#+begin_blue\n"
            "deep\n"
            "#+end_blue\n"
            "#+end_details\n"
        )
        exporter = Exporter(backend="html", settings=AppSettings())
        text = exporter.text_export(source)

        assert "<strong>Colours</strong>" in text
        assert '<span style="color:blue;">deep\n</span>' in text
        assert "#+begin" not in text
        assert exporter.block_count == 2

    def test_same_type_nesting(self):
        """Depth tracking pairs begin/end lines of the same type"""
        source = (
            "#+begin_details\n"
            "outer\n"
            "#+begin_details\n"
            ":title: Inner\n"
            "inner\n"
            "#+end_details\n"
            "#+end_details\n"
        )
        text = Exporter(backend="html", settings=AppSettings()).text_export(source)

        assert text.count("<details") == 2
        assert text.count("</details>") == 2
        assert "<strong>Inner</strong>" in text

    def test_unknown_block_kept(self):
        """Non-custom blocks stay in place, with their contents exported"""
        source = "#+begin_quote\n[[red:x]]\n#+end_quote\n"
        text = Exporter(backend="html", settings=AppSettings()).text_export(source)

        assert text == '#+begin_quote\n<span style="color:red;">x</span>\n#+end_quote\n'

    def test_verbatim_block_untouched(self):
        """src blocks are never scanned"""
        source = (
            "#+begin_src org\n"
            "#+begin_red\n"
            "[[badge:k|v]]\n"
            "#+end_red\n"
            "#+end_src\n"
        )
        exporter = Exporter(backend="html", settings=AppSettings())

        assert exporter.text_export(source) == source
        assert exporter.block_count == 0
        assert exporter.link_count == 0

    def test_verbatim_inside_custom_block(self):
        """Marker lines shown in a nested src block do not count toward nesting"""
        source = (
            "#+begin_details\n"
            "Example:\n"
            "#+begin_src org\n"
            "#+begin_details\n"
            "#+end_src\n"
            "#+end_details\n"
        )
        exporter = Exporter(backend="html", settings=AppSettings())
        text = exporter.text_export(source)

        assert "#+begin_src org\n#+begin_details\n#+end_src\n</details>" in text
        assert text.count("<details") == 1
        assert exporter.block_count == 1

    def test_unterminated_verbatim_inside_custom_block(self):
        """An open src block swallows the rest, leaving the outer block open"""
        source = "#+begin_red\n#+begin_example\n#+end_red\n"
        with pytest.raises(SyntaxError, match="line 1"):
            Exporter(backend="html", settings=AppSettings()).text_export(source)

    def test_empty_block(self):
        """A block with no contents still reaches its handler"""
        text = Exporter(backend="html", settings=AppSettings()).text_export(
            "#+begin_details\n#+end_details\n"
        )
        assert "<strong>Details</strong>" in text

    def test_unterminated_block(self):
        """Missing end line is a syntax error with the line number"""
        source = "line one\n#+begin_red\nno end\n"
        with pytest.raises(SyntaxError, match="line 2"):
            Exporter(backend="html", settings=AppSettings()).text_export(source)

    def test_latex_document(self):
        source = "#+begin_parallel3\nA :columnbreak: B\n#+end_parallel3\n"
        text = Exporter(backend="latex", settings=AppSettings()).text_export(source)

        assert "\\setlength{\\columnseprule}{2pt}" in text
        assert "\\begin{multicols}{3}" in text
        assert "A \\columnbreak B" in text


class TestLinkExport:
    """Test link discovery and substitution"""

    def test_links_in_text(self):
        source = "See [[link-here:top]] and [[badge:build|passing|green]].\n"
        exporter = Exporter(backend="html", settings=AppSettings())
        text = exporter.text_export(source)

        assert 'id="top"' in text
        assert "https://img.shields.io/badge/build-passing-green" in text
        assert exporter.link_count == 2

    def test_description(self):
        text = Exporter(backend="html", settings=AppSettings()).text_export("[[teal:id][shown]]")
        assert text == '<span style="color:teal;">shown</span>'

    def test_foreign_links_untouched(self):
        source = "[[https://orgmode.org][Org]] [[file:notes.org]]"
        assert Exporter(backend="html", settings=AppSettings()).text_export(source) == source


class TestFailurePolicy:
    """Test lenient and strict handling of handler failures"""

    def test_failed_block_left_unchanged(self):
        source = "#+begin_color\n:color: nope\ntext\n#+end_color\n"
        exporter = Exporter(backend="html", settings=AppSettings())

        assert exporter.text_export(source) == source
        assert len(exporter.failures) == 1
        assert exporter.failures[0]['line'] == 1
        assert "unsupported colour" in exporter.failures[0]['error']

    def test_failed_link_left_unchanged(self):
        source = "first\nbad [[badge:lonely]] badge\n"
        exporter = Exporter(backend="html", settings=AppSettings())

        assert exporter.text_export(source) == source
        assert exporter.failures[0]['line'] == 2

    def test_strict_block_raises(self):
        source = "#+begin_color\n:color: nope\n#+end_color\n"
        exporter = Exporter(backend="html", settings=AppSettings(strict_mode=True))

        with pytest.raises(UnsupportedColourError):
            exporter.text_export(source)

    def test_strict_link_raises(self):
        exporter = Exporter(backend="html", settings=AppSettings(strict_mode=True))
        with pytest.raises(BadgeError):
            exporter.text_export("[[badge:lonely]]")

    def test_disabled_leaves_document(self):
        source = "#+begin_red\nx\n#+end_red\n[[badge:k|v]]\n"
        exporter = Exporter(backend="html", settings=AppSettings(enabled=False))

        assert exporter.text_export(source) == source
        assert exporter.block_count == 0

    def test_hidden_editor_comments(self):
        source = "Before\n#+begin_edcomm\n:ed: Ann\nfix\n#+end_edcomm\nAfter\n"
        text = Exporter(backend="html", settings=AppSettings(hide_editor_comments=True)).text_export(source)
        assert text == "Before\n\nAfter\n"


class TestFileExport:
    """Test writing exported documents"""

    def test_export_writes_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            input_file = Path(tmpdir) / "notes.org"
            input_file.write_text("#+begin_green\nok\n#+end_green\n", encoding="utf-8")

            result = Exporter(backend="html", settings=AppSettings()).export(
                input_file, Path(tmpdir) / "out"
            )

            assert result['status'] is True
            assert result['block_count'] == 1
            assert result['failures'] == []
            output = Path(result['output_file'])
            assert output.name == "notes.html"
            assert output.read_text() == '<span style="color:green;">ok\n</span>\n'

    def test_repeated_export_counts_each_run(self):
        """Statistics describe the latest export only"""
        with tempfile.TemporaryDirectory() as tmpdir:
            input_file = Path(tmpdir) / "notes.org"
            input_file.write_text("#+begin_green\nok\n#+end_green\n[[badge:lonely]]\n", encoding="utf-8")
            exporter = Exporter(backend="html", settings=AppSettings())

            exporter.export(input_file, Path(tmpdir) / "out")
            result = exporter.export(input_file, Path(tmpdir) / "out")

            assert result['block_count'] == 1
            assert len(result['failures']) == 1

    @pytest.mark.parametrize("backend,suffix", [("latex", ".tex"), ("ascii", ".ascii")])
    def test_output_suffix(self, backend, suffix):
        with tempfile.TemporaryDirectory() as tmpdir:
            input_file = Path(tmpdir) / "doc.org"
            input_file.write_text("plain\n", encoding="utf-8")

            result = Exporter(backend=backend, settings=AppSettings()).export(input_file, Path(tmpdir))
            assert result['output_file'].endswith(f"doc{suffix}")


class TestPipeline:
    """Test the command-line pipeline stages"""

    def test_full_pipeline(self):
        from orgblocks.__main__ import env_check, source_parse, document_export, results_report

        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / "in"
            outputdir = Path(tmpdir) / "out"
            inputdir.mkdir()
            (inputdir / "talk.org").write_text(
                "#+begin_edcomm\nremove me\n#+end_edcomm\n#+begin_red\nkeep\n#+end_red\n",
                encoding="utf-8",
            )

            options = Namespace(
                inputFile="talk.org",
                backend="latex",
                outputSubdir="site",
                hideEditorComments=True,
                strict=False,
                disable=False,
                verbosity=0,
            )
            state = ProgramState.state_createFromNamespace(options, inputdir, outputdir)
            final = pipeline(state, env_check, source_parse, document_export, results_report)

            assert final.settings.hide_editor_comments is True
            output = outputdir / "site" / "talk.tex"
            assert output.exists()
            assert output.read_text() == "\n\\begingroup\\color{red}keep\n\\endgroup\\,\n"
            assert final.exportResult['block_count'] == 2

    def test_missing_input_exits(self):
        from orgblocks.__main__ import env_check

        with tempfile.TemporaryDirectory() as tmpdir:
            state = ProgramState(inputdir=Path(tmpdir), outputdir=Path(tmpdir), inputFile="absent.org")
            with pytest.raises(SystemExit):
                env_check(state)
