"""Unit tests for TemplateRegistry."""

from pathlib import Path

import pytest
from jinja2 import TemplateNotFound

from texjob.contexts.rendering.compiler import LatexCompiler
from texjob.contexts.templating.exceptions import TemplateRenderError
from texjob.contexts.templating.registries import TemplateRegistry

PROJECT_TEMPLATES = Path(__file__).parents[2] / "templates"


@pytest.fixture
def registry(tmp_path):
    template_dir = tmp_path / "note"
    template_dir.mkdir()
    (template_dir / "template.tex.jinja").write_text(
        "\\section{<<< title >>>}\n"
        "<%% for item in items %%>\\item{<<< item >>>}\n<%% endfor %%>"
        "<# not rendered #>\\end{document}\n"
    )
    return TemplateRegistry(tmp_path)


@pytest.mark.unit
def test_render_uses_latex_safe_delimiters(registry):
    source = registry.render("note", title="Intro", items=["a", "b"])

    assert source == "\\section{Intro}\n\\item{a}\n\\item{b}\n\\end{document}\n"


@pytest.mark.unit
def test_template_caching(registry):
    template1 = registry.get_template("note")
    assert registry.is_cached("note")

    template2 = registry.get_template("note")
    assert template1 is template2

    registry.clear_cache()
    assert not registry.is_cached("note")


@pytest.mark.unit
def test_get_template_not_found(registry):
    with pytest.raises(TemplateNotFound):
        registry.get_template("nonexistent")


@pytest.mark.unit
def test_missing_variable_raises_render_error(registry):
    with pytest.raises(TemplateRenderError) as excinfo:
        registry.render("note", items=[])

    assert excinfo.value.template_name == "note"
    assert excinfo.value.template_path == registry.get_template_path("note")
    assert excinfo.value.original_error is not None


@pytest.mark.unit
def test_writer_feeds_compiler_source(registry):
    compiler = LatexCompiler.from_template(registry.writer("note", title="Hi", items=[]))
    try:
        assert compiler.tex_file.read_text() == "\\section{Hi}\n\\end{document}\n"
    finally:
        compiler.close()


@pytest.mark.unit
def test_writer_error_aborts_construction(registry):
    with pytest.raises(TemplateRenderError):
        LatexCompiler.from_template(registry.writer("note"))


@pytest.mark.unit
def test_project_letter_template():
    registry = TemplateRegistry(PROJECT_TEMPLATES)

    source = registry.render(
        "letter", sender="Grace", recipient="Ada", body=["First.", "Second."]
    )

    assert "\\begin{letter}{Ada}" in source
    assert "First." in source and "Second." in source
    assert "data keys" not in source
