from __future__ import annotations

import pytest

from src.team_attendance.team_attendance.core.exceptions import ValidationError
from src.team_attendance.team_attendance.tags.qr import render_qr_png, token_from_payload


def test_payload_is_trimmed_to_the_token():
    assert token_from_payload(b"  front-door\n") == "front-door"


@pytest.mark.parametrize("payload", [b"\xff\xfe\x00garbage", b"   "])
def test_unreadable_or_empty_payload_is_a_validation_error(payload):
    with pytest.raises(ValidationError):
        token_from_payload(payload)


def test_rendered_tag_is_a_png():
    assert render_qr_png("front-door").startswith(b"\x89PNG")
