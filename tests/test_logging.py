"""Tests for log masking helpers"""
import pytest

from portal.logging import clip_text, get_logger, mask_token, redact_path


def test_get_logger_is_cached():
    assert get_logger("portal.cart") is get_logger("portal.cart")


def test_mask_token_keeps_prefix_and_length():
    assert mask_token("tok-villa-123") == "tok-vi…(13)"
    assert mask_token("s" * 43) == "ssssss…(43)"


@pytest.mark.parametrize("value", [None, ""])
def test_mask_token_empty(value):
    assert mask_token(value) == "N/A"


def test_mask_token_hides_short_values_entirely():
    assert mask_token("abc") == "…(3)"


def test_mask_token_escapes_control_characters():
    assert "\n" not in mask_token("ab\ncdefgh")


@pytest.mark.parametrize("path,expected", [
    ("/api/guest/dashboard/tok-villa-123", "/api/guest/dashboard/tok-vi…(13)"),
    ("/api/guest/cart/tok-villa-123/items/4", "/api/guest/cart/tok-vi…(13)/items/4"),
    ("/api/guest/checkout/tok-villa-123/card", "/api/guest/checkout/tok-vi…(13)/card"),
    ("/api/guest/checkin/tok-villa-123/status", "/api/guest/checkin/tok-vi…(13)/status"),
    ("/api/guest/config", "/api/guest/config"),
    ("/api/health", "/api/health"),
])
def test_redact_path(path, expected):
    assert redact_path(path) == expected


def test_clip_text():
    assert clip_text("Card declined") == "Card declined"
    assert clip_text("x" * 100, max_length=10) == "x" * 10 + "..."
    assert clip_text("line one\r\nforged entry") == "line one\\r\\nforged entry"
    assert clip_text(None) == "N/A"
