"""
Unit tests for static asset resolution and serving.
"""

import os
import pytest

from hiiside.services.static_files import (
    ASSET_CACHE_CONTROL,
    IndexTemplate,
    get_content_type,
    resolve_static_path,
    serve_static_file,
)


class TestResolveStaticPath:
    """Tests for resolve_static_path."""

    def test_resolves_inside_root(self, site_dirs):
        root = str(site_dirs / "dist")
        resolved = resolve_static_path(root, "/assets/app.js")
        assert resolved == os.path.join(os.path.realpath(root), "assets", "app.js")

    def test_strips_multiple_leading_slashes(self, site_dirs):
        root = str(site_dirs / "dist")
        assert resolve_static_path(root, "///assets/app.js").endswith(os.path.join("assets", "app.js"))

    @pytest.mark.parametrize("pathname", [
        "/../secret.txt",
        "/assets/../../secret.txt",
        "../../../../etc/passwd",
        "/assets/%2e%2e/../../secret.txt/..",
    ])
    def test_rejects_traversal(self, site_dirs, pathname):
        root = os.path.realpath(str(site_dirs / "dist"))
        resolved = resolve_static_path(root, pathname)
        assert resolved is None or resolved.startswith(root + os.sep) or resolved == root

    def test_traversal_to_sibling_file_is_none(self, site_dirs):
        assert resolve_static_path(str(site_dirs / "dist"), "/../secret.txt") is None

    def test_rejects_sibling_with_shared_prefix(self, site_dirs):
        (site_dirs / "dist-evil").mkdir()
        (site_dirs / "dist-evil" / "x.js").write_text("evil")
        assert resolve_static_path(str(site_dirs / "dist"), "/../dist-evil/x.js") is None

    def test_embedded_null_byte_is_none(self, site_dirs):
        assert resolve_static_path(str(site_dirs / "dist"), "/foo\x00bar") is None

    def test_rejects_symlink_escape(self, site_dirs):
        link = site_dirs / "dist" / "escape.txt"
        link.symlink_to(site_dirs / "secret.txt")
        assert resolve_static_path(str(site_dirs / "dist"), "/escape.txt") is None


class TestContentTypes:
    def test_known_extensions(self):
        assert get_content_type("a.html") == "text/html; charset=utf-8"
        assert get_content_type("a.JS") == "text/javascript; charset=utf-8"
        assert get_content_type("a.svg") == "image/svg+xml"
        assert get_content_type("a.woff2") == "font/woff2"
        assert get_content_type("a.jpeg") == "image/jpeg"

    def test_unknown_extension(self):
        assert get_content_type("archive.tar.zst") == "application/octet-stream"
        assert get_content_type("README") == "application/octet-stream"


class TestServeStaticFile:
    """Tests for serve_static_file."""

    @pytest.mark.asyncio
    async def test_serves_asset_with_long_cache(self, site_dirs):
        response = await serve_static_file(str(site_dirs / "dist" / "assets" / "app.js"), "GET")
        assert response is not None
        assert response.status_code == 200
        assert response.body == b"console.log('hi');"
        assert response.headers["cache-control"] == ASSET_CACHE_CONTROL
        assert response.headers["content-type"].startswith("text/javascript")

    @pytest.mark.asyncio
    async def test_html_is_not_cached(self, site_dirs):
        response = await serve_static_file(str(site_dirs / "dist" / "index.html"), "GET")
        assert response.headers["cache-control"] == "no-cache"

    @pytest.mark.asyncio
    async def test_head_has_empty_body(self, site_dirs):
        response = await serve_static_file(str(site_dirs / "dist" / "assets" / "app.js"), "HEAD")
        assert response.status_code == 200
        assert response.body == b""

    @pytest.mark.asyncio
    async def test_missing_file(self, site_dirs):
        assert await serve_static_file(str(site_dirs / "dist" / "nope.js"), "GET") is None

    @pytest.mark.asyncio
    async def test_directory_is_not_served(self, site_dirs):
        assert await serve_static_file(str(site_dirs / "dist" / "assets"), "GET") is None


class TestIndexTemplate:
    """Tests for IndexTemplate."""

    @pytest.mark.asyncio
    async def test_prefers_dist_index(self, site_dirs):
        (site_dirs / "dist" / "index.html").write_text("<html>dist</html>")
        template = IndexTemplate(str(site_dirs / "dist"), str(site_dirs / "index.html"))
        assert await template.load() == "<html>dist</html>"

    @pytest.mark.asyncio
    async def test_falls_back_to_source_index(self, site_dirs):
        (site_dirs / "dist" / "index.html").unlink()
        (site_dirs / "index.html").write_text("<html>source</html>")
        template = IndexTemplate(str(site_dirs / "dist"), str(site_dirs / "index.html"))
        assert await template.load() == "<html>source</html>"

    @pytest.mark.asyncio
    async def test_caches_after_first_read(self, site_dirs):
        index = site_dirs / "dist" / "index.html"
        index.write_text("<html>v1</html>")
        template = IndexTemplate(str(site_dirs / "dist"), str(site_dirs / "index.html"))
        assert await template.load() == "<html>v1</html>"

        index.write_text("<html>v2</html>")
        assert await template.load() == "<html>v1</html>"

    @pytest.mark.asyncio
    async def test_cache_disabled_rereads(self, site_dirs):
        index = site_dirs / "dist" / "index.html"
        index.write_text("<html>v1</html>")
        template = IndexTemplate(str(site_dirs / "dist"), str(site_dirs / "index.html"), cache=False)
        await template.load()

        index.write_text("<html>v2</html>")
        assert await template.load() == "<html>v2</html>"
