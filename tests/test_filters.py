from folio.context import BuildContext
from folio.filters import (
    Filter,
    FilterRegistry,
    create_default_registry,
    load_filter_plugins,
)
from folio.page import Phase


def resolve(content, filters, **config):
    context = BuildContext(config)
    page = context.add_page({"title": "T", "path": "/t/", "content": content, "filters": filters})
    context.begin_phase(Phase.PRE)
    return page.content


def test_registry_register_and_lookup():
    registry = FilterRegistry()

    @registry.filter("shout")
    def shout(page, pages, config):
        return page.content.upper()

    assert registry.lookup("shout") is shout
    assert registry.lookup("missing") is None
    assert "shout" in registry
    assert len(registry) == 1
    assert isinstance(shout, Filter)


def test_default_registry_names():
    assert create_default_registry().names() == [
        "escape",
        "jinja",
        "markdown",
        "mustache",
    ]


def test_markdown_filter_adds_heading_ids():
    html = resolve("# Hello World\n\n## Hello World\n\nText", ["markdown"])
    assert '<h1 id="hello-world">Hello World</h1>' in html
    assert '<h2 id="hello-world-1">Hello World</h2>' in html
    assert "<p>Text</p>" in html


def test_markdown_filter_highlights_code():
    html = resolve("```python\nprint('hi')\n```\n", ["markdown"])
    assert 'class="highlight"' in html


def test_markdown_filter_escapes_unknown_languages():
    html = resolve("```nosuchlang\n<tag>\n```\n", ["markdown"])
    assert '<pre><code class="language-nosuchlang">&lt;tag&gt;' in html


def test_jinja_filter_renders_with_pages_and_config():
    out = resolve(
        "{{ page.title }} {{ pages|length }} {{ config.site_name }}",
        ["jinja"],
        site_name="Example",
    )
    assert out == "T 1 Example"


def test_mustache_filter():
    assert resolve("{{page.title}}!", ["mustache"]) == "T!"


def test_escape_filter():
    assert resolve("<a & b>", ["escape"]) == "&lt;a &amp; b&gt;"


def test_load_filter_plugins(tmp_path):
    lib = tmp_path / "lib"
    lib.mkdir()
    (lib / "shout.py").write_text(
        "def register(registry):\n"
        "    registry.register('shout', lambda page, pages, config: page.content.upper() + '!')\n",
        encoding="utf-8",
    )
    (lib / "helpers.py").write_text("VALUE = 1\n", encoding="utf-8")
    registry = FilterRegistry()
    loaded = load_filter_plugins(registry, lib)
    assert loaded == ["helpers", "shout"]
    assert registry.names() == ["shout"]


def test_load_filter_plugins_missing_dir(tmp_path):
    registry = FilterRegistry()
    assert load_filter_plugins(registry, tmp_path / "lib") == []
    assert len(registry) == 0


def test_project_context_loads_plugins(tmp_path):
    lib = tmp_path / "lib"
    lib.mkdir()
    (lib / "reverse.py").write_text(
        "def register(registry):\n"
        "    @registry.filter('reverse')\n"
        "    def reverse(page, pages, config):\n"
        "        return page.content[::-1]\n",
        encoding="utf-8",
    )
    context = BuildContext.for_project(tmp_path)
    page = context.add_page({"content": "abc", "filters": ["reverse"]})
    context.begin_phase(Phase.PRE)
    assert page.content == "cba"
