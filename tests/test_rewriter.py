"""Tests de la réécriture des soumissions de formulaire."""

from pathlib import Path

from tests.conftest import PUBLIC_URL, make_file
from uploads.rewriter import ReferenceRewriter


class TestExtractRelative:
    """Tests de extract_relative."""

    def test_public_base_url(self, rewriter) -> None:
        assert rewriter.extract_relative(PUBLIC_URL + "2026/02/abc.pdf") == "2026/02/abc.pdf"

    def test_marker_segment_in_other_host(self, rewriter) -> None:
        value = "http://old-host.example/wp-content/uploads/fluentform/2026/02/abc.pdf"
        assert rewriter.extract_relative(value) == "2026/02/abc.pdf"

    def test_marker_segment_in_filesystem_path(self, rewriter) -> None:
        value = "/var/www/html/wp-content/uploads/fluentform/2026/02/abc.pdf"
        assert rewriter.extract_relative(value) == "2026/02/abc.pdf"

    def test_fake_private_url(self, rewriter) -> None:
        value = "https://site.example/__ff_private_uploads__/2026/02/abc.pdf"
        assert rewriter.extract_relative(value) == "2026/02/abc.pdf"

    def test_strips_query_and_fragment(self, rewriter) -> None:
        assert rewriter.extract_relative(PUBLIC_URL + "2026/02/abc.pdf?ver=2#top") == "2026/02/abc.pdf"

    def test_unrelated_values(self, rewriter) -> None:
        assert rewriter.extract_relative("Jean Dupont") == ""
        assert rewriter.extract_relative("https://site.example/contact/") == ""
        assert rewriter.extract_relative(12) == ""

    def test_traversal_is_refused(self, rewriter) -> None:
        assert rewriter.extract_relative(PUBLIC_URL + "../../wp-config.php") == ""
        assert rewriter.extract_relative(PUBLIC_URL + "%2e%2e/%2e%2e/wp-config.php") == ""


class TestRewrite:
    """Tests de rewrite."""

    def test_relocates_fluentform_upload(self, rewriter, public_root: Path, private_root: Path) -> None:
        source = make_file(public_root, "2026/02/abc123.pdf", b"contenu")
        payload = {"field": "https://site.example/wp-content/uploads/fluentform/2026/02/abc123.pdf"}

        result = rewriter.rewrite(payload)

        assert result == {"field": "ff-private://2026/02/abc123.pdf"}
        assert (private_root / "2026/02/abc123.pdf").read_bytes() == b"contenu"
        assert not source.exists()

    def test_rewriting_twice_is_noop(self, rewriter, public_root: Path) -> None:
        make_file(public_root, "2026/02/abc123.pdf")
        once = rewriter.rewrite({"field": PUBLIC_URL + "2026/02/abc123.pdf"})
        assert rewriter.rewrite(once) == once

    def test_nested_structure_keeps_shape(self, rewriter, public_root: Path) -> None:
        make_file(public_root, "2026/02/a.pdf")
        make_file(public_root, "2026/02/b.png")
        payload = {
            "name": "Jean",
            "files": [PUBLIC_URL + "2026/02/a.pdf", {"photo": (PUBLIC_URL + "2026/02/b.png", "note")}],
            "age": 42,
            "empty": None,
        }

        result = rewriter.rewrite(payload)

        assert result == {
            "name": "Jean",
            "files": ["ff-private://2026/02/a.pdf", {"photo": ("ff-private://2026/02/b.png", "note")}],
            "age": 42,
            "empty": None,
        }

    def test_missing_file_leaves_value(self, rewriter) -> None:
        value = PUBLIC_URL + "2026/02/ghost.pdf"
        assert rewriter.rewrite({"field": value}) == {"field": value}

    def test_failing_leaf_is_isolated(self, public_root: Path) -> None:
        class FlakyStore:
            def relocate(self, source, relative):
                if relative.endswith("bad.pdf"):
                    raise RuntimeError("disque en panne")
                return "ff-private://" + relative

        rewriter = ReferenceRewriter(store=FlakyStore(), public_root=public_root, public_url=PUBLIC_URL)
        payload = [PUBLIC_URL + "2026/02/bad.pdf", PUBLIC_URL + "2026/02/good.pdf"]

        assert rewriter.rewrite(payload) == [PUBLIC_URL + "2026/02/bad.pdf", "ff-private://2026/02/good.pdf"]
