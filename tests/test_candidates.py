"""Tests for candidate selection."""

from conftest import product_pod, results_page

from search_scraper.dom import parse
from search_scraper.extractors.candidates import (
    is_product_container,
    looks_like_product_block,
    select_candidates,
)


def _block_with_text_length(length: int) -> str:
    text = "A" * (length - len("$ 100")) + "$ 100"
    return f'<div id="block"><a href="/falabella-co/product/1/x/1">{text}</a></div>'


class TestPrimarySelection:
    """Container markers on classes and data attributes."""

    def test_selects_pods_by_data_pod_attribute(self) -> None:
        root = parse(results_page(product_pod(1, "Laptop Uno", "$ 100"), product_pod(2, "Laptop Dos", "$ 200")))

        candidates = select_candidates(root)

        assert len(candidates) == 2
        assert all(c.attribute("data-pod") == "catalyst-pod" for c in candidates)

    def test_class_markers_are_case_insensitive(self) -> None:
        root = parse(
            '<ul><li class="ProductItem-root">a</li><li class="grid-product-item">b</li>'
            '<li class="banner">c</li></ul>'
        )

        candidates = select_candidates(root)

        assert [c.text() for c in candidates] == ["a", "b"]

    def test_data_testid_marker(self) -> None:
        root = parse('<div data-testid="Product-Card">x</div><div data-testid="footer">y</div>')

        assert [c.text() for c in select_candidates(root)] == ["x"]

    def test_document_order_is_kept(self) -> None:
        root = parse(results_page(*(product_pod(i, f"Producto {i}", f"$ {i}00") for i in range(1, 6))))

        urls = [c.find_first(lambda n: n.is_tag("a")).attribute("href") for c in select_candidates(root)]

        assert urls == [f"/falabella-co/product/{i}/producto-{i}/{i}" for i in range(1, 6)]

    def test_plain_elements_are_not_containers(self) -> None:
        node = parse('<div class="pod-details">x</div>').find_first(lambda n: True)

        assert not is_product_container(node)


class TestFallbackSelection:
    """Structural fallback for pages without container markers."""

    def test_fallback_used_when_no_markers(self) -> None:
        root = parse(_block_with_text_length(40))

        candidates = select_candidates(root)

        assert len(candidates) == 1
        assert candidates[0].attribute("id") == "block"

    def test_fallback_not_used_when_markers_exist(self) -> None:
        root = parse(_block_with_text_length(40) + '<div class="product-item">marked</div>')

        candidates = select_candidates(root)

        assert [c.text() for c in candidates] == ["marked"]

    def test_length_30_is_excluded(self) -> None:
        assert select_candidates(parse(_block_with_text_length(30))) == []

    def test_length_31_is_included(self) -> None:
        assert len(select_candidates(parse(_block_with_text_length(31)))) == 1

    def test_length_1000_is_excluded(self) -> None:
        assert select_candidates(parse(_block_with_text_length(1000))) == []

    def test_length_999_is_included(self) -> None:
        assert len(select_candidates(parse(_block_with_text_length(999)))) == 1

    def test_requires_price_in_text(self) -> None:
        root = parse('<div><a href="/p/1">' + "Sin precio en este bloque de texto largo" + "</a></div>")

        assert select_candidates(root) == []

    def test_price_without_space_or_with_commas(self) -> None:
        root = parse('<div><a href="/p/1">' + "Audifonos inalambricos con estuche $1,299,900" + "</a></div>")

        assert len(select_candidates(root)) == 1

    def test_requires_descendant_link(self) -> None:
        node = parse("<div><span>" + "Producto sin enlace alguno $ 1.299.900" + "</span></div>").find_first(
            lambda n: n.is_tag("div")
        )

        assert not looks_like_product_block(node)

    def test_nested_blocks_both_match(self) -> None:
        inner = '<div class="inner"><a href="/falabella-co/product/5/x/5">Televisor LG 55 pulgadas $ 1.899.900</a></div>'
        root = parse(f'<section class="outer">{inner}</section>')

        candidates = select_candidates(root)

        assert [c.name for c in candidates] == ["section", "div"]
