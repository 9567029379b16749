from __future__ import annotations

import pytest

from csvsync.domain.checksum import compute_checksum, should_skip


def test_compute_checksum_is_md5_hex() -> None:
    assert compute_checksum(b"") == "d41d8cd98f00b204e9800998ecf8427e"
    assert compute_checksum(b"id;name\n1;x\n") == compute_checksum(b"id;name\n1;x\n")
    assert compute_checksum(b"id;name\n1;x\n") != compute_checksum(b"id;name\n1;y\n")


@pytest.mark.parametrize(
    ("new", "last", "expected"),
    [
        ("abc", "abc", True),
        ("abc", "def", False),
        ("abc", None, False),
        ("abc", "", False),
        (None, "abc", False),
        ("", "", False),
    ],
)
def test_should_skip_only_for_equal_known_checksums(
    new: str | None,
    last: str | None,
    expected: bool,  # noqa: FBT001
) -> None:
    assert should_skip(new, last) is expected
