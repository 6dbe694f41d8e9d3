from flask import current_app, jsonify, request

from molefit.helpers import error_response, get_services, parse_body
from molefit.schemas import AnalyzeVideoRequest
from molefit.services.video_analysis import VideoAnalysisError, parse_verdict


def analyze_video():
    data = request.get_json(silent=True) or {}
    if not data.get("videoBase64"):
        return error_response("No video provided", "videoBase64 is required", 400)
    body = parse_body(AnalyzeVideoRequest, data)

    try:
        analysis = get_services().videos.analyze(body.video_base64, body.mime_type, body.exercise_context)
    except VideoAnalysisError as e:
        current_app.logger.warning("Video analysis failed (%s): %s", e.status_code, e.message)
        return error_response(e.message, e.message, e.status_code)

    return jsonify({"success": True, "analysis": analysis, "passed": parse_verdict(analysis)}), 200
