import base64

import pytest
from botocore.exceptions import ClientError

from molefit.services.video_analysis import (
    VideoAnalysisError, build_analysis_prompt, detect_mime_type, parse_verdict,
)

VIDEO_B64 = base64.b64encode(b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 32).decode("ascii")


def _client_error(code, message="boom"):
    return ClientError({"Error": {"Code": code, "Message": message}}, "Converse")


def test_rate_limit_is_retried_with_backoff(services, fake_bedrock, sleeps):
    fake_bedrock.video_results = [
        _client_error("ThrottlingException"),
        _client_error("ThrottlingException"),
        "✅ PASS - completed 10 of 10 reps",
    ]

    analysis = services.videos.analyze(VIDEO_B64)

    assert analysis.startswith("✅ PASS")
    assert sleeps == [1.0, 2.0]
    assert fake_bedrock.calls.count("analyze_video") == 3


def test_quota_exhausted_after_two_retries(services, fake_bedrock, sleeps):
    fake_bedrock.video_results = [_client_error("ServiceQuotaExceededException")]

    with pytest.raises(VideoAnalysisError) as exc:
        services.videos.analyze(VIDEO_B64)

    assert exc.value.status_code == 429
    assert sleeps == [1.0, 2.0]
    assert fake_bedrock.calls.count("analyze_video") == 3


def test_credential_errors_are_not_retried(services, fake_bedrock, sleeps):
    fake_bedrock.video_results = [_client_error("UnrecognizedClientException")]

    with pytest.raises(VideoAnalysisError) as exc:
        services.videos.analyze(VIDEO_B64)

    assert exc.value.status_code == 401
    assert sleeps == []


def test_video_validation_error_is_400(services, fake_bedrock):
    fake_bedrock.video_results = [_client_error("ValidationException", "The provided video is malformed")]

    with pytest.raises(VideoAnalysisError) as exc:
        services.videos.analyze(VIDEO_B64)
    assert exc.value.status_code == 400


def test_other_errors_are_500(services, fake_bedrock, sleeps):
    fake_bedrock.video_results = [RuntimeError("connection reset")]

    with pytest.raises(VideoAnalysisError) as exc:
        services.videos.analyze(VIDEO_B64)
    assert exc.value.status_code == 500
    assert sleeps == []


def test_empty_analysis_is_an_error(services, fake_bedrock):
    fake_bedrock.video_results = [""]

    with pytest.raises(VideoAnalysisError) as exc:
        services.videos.analyze(VIDEO_B64)
    assert exc.value.message == "No analysis generated"


@pytest.mark.parametrize("header, mime", [
    (b"\x00\x00\x00\x18ftypmp42", "video/mp4"),
    (b"\x00\x00\x00\x14ftypqt  ", "video/quicktime"),
    (b"RIFF\x00\x00\x00\x00AVI LIST", "video/avi"),
    (b"\x1aE\xdf\xa3\x00\x00\x00\x00", "video/webm"),
    (b"garbage-bytes-here", "video/mp4"),
])
def test_detect_mime_type(header, mime):
    assert detect_mime_type(base64.b64encode(header + b"\x00" * 16).decode("ascii")) == mime


@pytest.mark.parametrize("text, verdict", [
    ("✅ PASS - great job", True),
    ("❌ FAIL - only 3 reps", False),
    ("Looks fine", None),
])
def test_parse_verdict(text, verdict):
    assert parse_verdict(text) is verdict


def test_prompt_uses_eighty_percent_threshold():
    prompt = build_analysis_prompt({"name": "Squats", "reps": 12, "sets": 3})
    assert "Squats" in prompt
    assert "10" in prompt


def test_analyze_route(client, fake_bedrock):
    res = client.post("/api/analyze-video", json={"videoBase64": VIDEO_B64, "exerciseContext": {"name": "Squats"}})

    assert res.status_code == 200
    body = res.get_json()
    assert body["analysis"].startswith("✅ PASS")
    assert body["passed"] is True


def test_analyze_route_requires_video(client, fake_bedrock):
    res = client.post("/api/analyze-video", json={})

    assert res.status_code == 400
    assert fake_bedrock.calls == []


def test_analyze_route_reports_quota(client, fake_bedrock):
    fake_bedrock.video_results = [_client_error("ThrottlingException")]

    res = client.post("/api/analyze-video", json={"videoBase64": VIDEO_B64})

    assert res.status_code == 429
    assert "quota" in res.get_json()["message"].lower()
