"""
Exercise-form feedback for uploaded videos.

The only retried collaborator call in the codebase lives here: when Bedrock
reports throttling or an exhausted quota the request is retried with
exponential backoff (1s, then 2s) before giving up with a 429.
"""

import base64
import binascii
import logging
import math
import time

from molefit.services.bedrock_service import is_auth_error, is_rate_limited

logger = logging.getLogger(__name__)

PASS_MARKERS = ("✅ PASS", "✅PASS")
FAIL_MARKERS = ("❌ FAIL", "❌FAIL")


class VideoAnalysisError(Exception):
    def __init__(self, message, status_code=500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def detect_mime_type(video_base64):
    """Sniff the container from the first bytes of the base64 payload; mp4 when unsure."""
    try:
        head = base64.b64decode(video_base64[:24] + "=" * (-len(video_base64[:24]) % 4))
    except (binascii.Error, ValueError):
        logger.warning("Could not decode video header, defaulting to mp4")
        return "video/mp4"

    if head[4:8] == b"ftyp":
        brand = head[8:12]
        if brand.startswith(b"qt"):
            return "video/quicktime"
        return "video/mp4"
    if head[4:8] == b"moov":
        return "video/quicktime"
    if head.startswith(b"RIFF"):
        return "video/avi"
    if head.startswith(b"\x1a\x45\xdf\xa3"):
        return "video/webm"
    return "video/mp4"


def parse_verdict(analysis):
    if any(marker in analysis for marker in PASS_MARKERS):
        return True
    if any(marker in analysis for marker in FAIL_MARKERS):
        return False
    return None


def _context_block(ctx):
    lines = [f'**EXERCISE CONTEXT:**\nThe user is performing: "{ctx["name"]}"']
    for key, label in (("description", "Description"), ("instructions", "Instructions"),
                       ("category", "Category"), ("difficulty_level", "Difficulty Level"),
                       ("sets", "Target Sets"), ("reps", "Target Reps")):
        if ctx.get(key):
            lines.append(f"{label}: {ctx[key]}")
    if ctx.get("duration_seconds"):
        lines.append(f"Target Duration: {ctx['duration_seconds']} seconds")

    routine = ctx.get("routine") or {}
    if routine.get("title"):
        lines.append(f'\n**ROUTINE CONTEXT:**\nThis exercise is part of: "{routine["title"]}"')
        if routine.get("description"):
            lines.append(f"Routine Goal: {routine['description']}")
        lines.append("Patient is working through a structured rehabilitation program.")

    lines.append("\nIMPORTANT: Count reps objectively based on what you see, NOT influenced by the target numbers above!\n")
    return "\n".join(lines) + "\n"


def build_analysis_prompt(exercise_context=None):
    ctx = exercise_context or {}
    if not ctx.get("name"):
        return """As a supportive physical therapy AI assistant, analyze this exercise video and provide a pass/fail evaluation:

**🎯 Exercise Evaluation: [✅ PASS or ❌ FAIL]**

**Exercise Performed:**
[Identify the exercise from the video]

**Form Assessment:**
- [Evaluate technique and form quality]
- [Note any safety concerns]

**Final Result: [✅ PASS or ❌ FAIL]**

**💡 Improvement Suggestions:**
[2-3 specific, actionable tips on positioning, movement control, breathing and common mistakes]

**🎯 Next Steps:**
[Progression if they passed, what to practise first if they failed]

IMPORTANT RULES:
- You MUST include either "✅ PASS" or "❌ FAIL" in your response
- Be specific about what they did right or wrong
- Be encouraging and constructive"""

    reps = ctx.get("reps")
    rep_lines = ""
    criteria = "✓ Demonstrate safe form (doesn't need to be perfect!)"
    if reps:
        threshold = math.ceil(int(reps) * 0.8)
        rep_lines = (f"- Target Reps: {reps} per set\n"
                     f"- Actual Reps Counted: [Count every visible repetition attempt]\n")
        criteria = (f"✓ Attempt at least 80% of target reps ({threshold}+ reps for {reps} target)\n"
                    + criteria)
    if ctx.get("sets"):
        rep_lines += f"- Target Sets: {ctx['sets']}\n- Sets Completed: [Count distinct groups]\n"
    if ctx.get("duration_seconds"):
        rep_lines += (f"- Target Duration: {ctx['duration_seconds']} seconds\n"
                      f"- Actual Duration: [Measure from video]\n")

    return f"""{_context_block(ctx)}As a supportive physical therapy AI assistant, analyze this exercise video objectively and provide encouraging but honest feedback.

The patient was supposed to perform: "{ctx['name']}"

CRITICAL ANALYSIS INSTRUCTIONS:
1. Watch the COMPLETE video WITHOUT bias toward the target numbers
2. Count repetitions OBJECTIVELY - one complete movement cycle is one repetition
3. Be GENEROUS with form assessment - focus on effort and safety rather than perfect technique
4. Only fail for serious safety concerns or a completely wrong exercise

Please provide feedback in this EXACT format:

**🎯 Exercise Evaluation: [✅ PASS or ❌ FAIL]**

**Video Analysis:**
- Exercise Performed: [State what exercise they did]
- Movement Pattern: [Describe the movement objectively]

**Objective Rep Count:**
{rep_lines}
**Form Assessment:**
- Safety: [Safe/Needs attention]
- Effort Level: [Excellent/Good/Moderate]
- Range of Motion: [Full/Adequate/Limited]

**Pass/Fail Criteria:**
{criteria}

**Final Result: [✅ PASS or ❌ FAIL]**

**💡 Improvement Suggestions:**
[2-3 specific, actionable tips]

**🎯 Next Steps:**
[What to focus on in future attempts]

IMPORTANT RULES:
- You MUST include either "✅ PASS" or "❌ FAIL" in your response
- If they did the wrong exercise entirely, that's an automatic FAIL"""


class VideoAnalyzer:
    def __init__(self, bedrock, max_retries=2, backoff_seconds=1.0, sleep=time.sleep):
        self.bedrock = bedrock
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.sleep = sleep

    def analyze(self, video_base64, mime_type=None, exercise_context=None):
        mime_type = mime_type or detect_mime_type(video_base64)
        try:
            video_bytes = base64.b64decode(video_base64, validate=True)
        except (binascii.Error, ValueError):
            raise VideoAnalysisError("Video processing failed. Please ensure the video is a valid video file.", 400)

        logger.info("Video analysis request: %.2f MB, %s, exercise=%s",
                    len(video_bytes) / 1024 / 1024, mime_type,
                    (exercise_context or {}).get("name", "unspecified"))

        prompt = build_analysis_prompt(exercise_context)
        analysis = self._call_with_backoff(video_bytes, mime_type, prompt)
        if not analysis:
            raise VideoAnalysisError("No analysis generated", 500)

        logger.info("Analysis completed: %d characters, verdict=%s", len(analysis), parse_verdict(analysis))
        return analysis

    def _call_with_backoff(self, video_bytes, mime_type, prompt):
        retry_count = 0
        while True:
            try:
                return self.bedrock.analyze_video(video_bytes, mime_type, prompt)
            except Exception as e:
                if is_rate_limited(e) and retry_count < self.max_retries:
                    wait = self.backoff_seconds * (2 ** retry_count)
                    logger.warning("Rate limit hit, waiting %.1fs before retry %d/%d",
                                   wait, retry_count + 1, self.max_retries)
                    self.sleep(wait)
                    retry_count += 1
                    continue
                raise self._classify(e) from e

    @staticmethod
    def _classify(error):
        if is_rate_limited(error):
            return VideoAnalysisError(
                "API quota exceeded. Please wait a minute and try again, or try with a shorter video.", 429)
        if is_auth_error(error):
            return VideoAnalysisError("Invalid API key", 401)
        if "video" in str(error).lower():
            return VideoAnalysisError("Video processing failed. Please ensure the video is a valid video file.", 400)
        logger.error("Video analysis failed: %s", error)
        return VideoAnalysisError("Failed to analyze video. Please try again.", 500)
