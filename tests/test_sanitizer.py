import copy
import logging

from cvsite.sanitizer import BLOCKED, BlockedReference, is_image_key, sanitize, to_plain, url_host


def test_allowed_host_is_kept():
    doc = {"image": "https://good.example/x.png"}
    out, blocked = sanitize(doc, ["good.example"])
    assert out == doc
    assert blocked == []


def test_disallowed_host_is_blocked_once():
    out, blocked = sanitize({"image": "https://good.example/x.png"}, ["other.example"])
    assert out == {"image": BLOCKED}
    assert blocked == [BlockedReference("https://good.example/x.png", "image")]


def test_blocked_marker_is_not_empty_string_or_none():
    assert BLOCKED != ""
    assert BLOCKED is not None
    assert not BLOCKED
    assert repr(BLOCKED) == "BLOCKED"


def test_empty_allowlist_blocks_every_absolute_image():
    out, blocked = sanitize({"avatar": "http://a.example/a.png", "cover": "https://b.example/c"}, [])
    assert out == {"avatar": BLOCKED, "cover": BLOCKED}
    assert len(blocked) == 2


def test_relative_and_non_url_values_untouched():
    doc = {
        "image": "/img/me.png",
        "thumbimg": "me.png",
        "cover": "",
        "avatar": "C:\\photos\\me.png",
        "img": "mailto:me@example.com",
    }
    out, blocked = sanitize(doc, [])
    assert out == doc
    assert blocked == []


def test_malformed_url_fails_open():
    doc = {"image": "http://[broken/x.png"}
    out, blocked = sanitize(doc, [])
    assert out == doc
    assert blocked == []


def test_non_image_keys_are_not_filtered():
    doc = {"url": "https://evil.test/", "github": "https://github.com/x"}
    assert sanitize(doc, [])[0] == doc


def test_host_match_is_exact_and_case_insensitive():
    doc = {"image": "https://CDN.Good.Example:8443/x.png", "img": "https://sub.good.example/y.png"}
    out, blocked = sanitize(doc, ["cdn.good.example", "good.example"])
    assert out["image"] == doc["image"]
    assert out["img"] is BLOCKED
    assert blocked[0].path == "img"


def test_nested_paths_and_order_preserved():
    doc = {
        "projects": [
            {"name": str(i), "image": f"https://{'good' if i % 2 else 'bad'}.example/{i}.png"}
            for i in range(4)
        ]
    }
    out, blocked = sanitize(doc, ["good.example"])
    assert [p["name"] for p in out["projects"]] == ["0", "1", "2", "3"]
    assert [b.path for b in blocked] == ["projects[0].image", "projects[2].image"]


def test_image_key_with_non_string_value_is_recursed():
    doc = {"cover": [{"image": "https://bad.example/a.png"}]}
    out, blocked = sanitize(doc, [])
    assert out == {"cover": [{"image": BLOCKED}]}
    assert blocked[0].path == "cover[0].image"


def test_sanitize_is_idempotent():
    doc = {
        "basics": {"image": "https://bad.example/a.png", "name": "A"},
        "work": [{"img": "https://good.example/b.png"}, {"cover": "rel/c.png"}],
    }
    once, _ = sanitize(doc, ["good.example"])
    twice, blocked_again = sanitize(once, ["good.example"])
    assert twice == once
    assert blocked_again == []


def test_sanitize_does_not_mutate_input():
    doc = {"basics": {"image": "https://bad.example/a.png"}}
    before = copy.deepcopy(doc)
    sanitize(doc, [])
    assert doc == before


def test_blocked_images_are_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="cvsite.sanitizer"):
        sanitize({"image": "https://evil.test/p.jpg"}, [])
    assert "https://evil.test/p.jpg" in caplog.text


def test_is_image_key_heuristic():
    for key in ("image", "avatar", "cover", "img", "imgUrl", "hero_img"):
        assert is_image_key(key)
    for key in ("images", "Image", "thumbImg", "coverage", "url", 3):
        assert not is_image_key(key)


def test_url_host():
    assert url_host("https://Good.Example/x") == "good.example"
    assert url_host("ftp://files.example/x") == "files.example"
    assert url_host("//good.example/x") is None
    assert url_host("not a url") is None
    assert url_host("http:host.example") == "host.example"
    assert url_host("https://evil.test\\@good.example/p.png") == "evil.test"


def test_to_plain_replaces_marker_with_none():
    out, _ = sanitize({"a": [{"image": "https://x.example/i.png"}]}, [])
    assert to_plain(out) == {"a": [{"image": None}]}


def test_backslash_in_authority_is_a_path_separator():
    doc = {"image": "https://evil.test\\@good.example/p.png"}
    out, blocked = sanitize(doc, ["good.example"])
    assert out == {"image": BLOCKED}
    assert blocked == [BlockedReference("https://evil.test\\@good.example/p.png", "image")]


def test_lenient_browser_url_forms_are_checked():
    values = [
        "https:evil.test/p.png",
        "https:/evil.test/p.png",
        "https:\\\\evil.test/p.png",
        "  https://evil.test/p.png",
        "ht\ttps://evil.test/p.png",
        "HTTPS://evil.test/p.png",
    ]
    out, blocked = sanitize({"projects": [{"image": v} for v in values]}, ["good.example"])
    assert all(p["image"] is BLOCKED for p in out["projects"])
    assert len(blocked) == len(values)


def test_lenient_forms_of_allowed_host_are_kept():
    doc = {"image": "https:\\\\good.example\\me.png", "cover": " https://good.example/c.png "}
    out, blocked = sanitize(doc, ["good.example"])
    assert out == doc
    assert blocked == []
