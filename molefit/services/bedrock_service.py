"""
Bedrock Runtime access shared by every AI feature.

Three calls are used:
- text generation (Titan-style invoke_model body) for exercise suggestions
- video understanding (Converse API with a video content block) for form analysis
- image generation (Nova Canvas TEXT_IMAGE task) for achievement artwork
"""

import json
import logging

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

RATE_LIMIT_CODES = {"ThrottlingException", "ServiceQuotaExceededException", "TooManyRequestsException"}
AUTH_ERROR_CODES = {"AccessDeniedException", "UnrecognizedClientException", "ExpiredTokenException"}

# Converse API video formats, keyed by MIME type
VIDEO_FORMATS = {
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/webm": "webm",
    "video/x-matroska": "mkv",
    "video/x-flv": "flv",
    "video/mpeg": "mpeg",
    "video/x-ms-wmv": "wmv",
    "video/3gpp": "three_gp",
}

IMAGE_PROMPT_LIMIT = 1024


def error_code(error):
    """Bedrock error code for a botocore ClientError, else the exception class name."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "")
    return type(error).__name__


def is_rate_limited(error):
    return error_code(error) in RATE_LIMIT_CODES or "429" in str(error)


def is_auth_error(error):
    return error_code(error) in AUTH_ERROR_CODES


class BedrockClient:
    """
    Thin wrapper around a boto3 `bedrock-runtime` client.

    The boto3 client is created on first use so the app can start without
    AWS credentials; calls fail at the point of use instead.
    """

    def __init__(self, region_name="us-east-1", text_model_id=None, video_model_id=None,
                 image_model_id=None, client=None):
        self.region_name = region_name
        self.text_model_id = text_model_id or "amazon.titan-text-premier-v1:0"
        self.video_model_id = video_model_id or "us.amazon.nova-pro-v1:0"
        self.image_model_id = image_model_id or "amazon.nova-canvas-v1:0"
        self.max_tokens = 2048
        self.top_p = 0.9
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("bedrock-runtime", region_name=self.region_name)
        return self._client

    def generate_text(self, prompt, temperature=0.3, max_tokens=None):
        body = {
            "inputText": prompt,
            "textGenerationConfig": {
                "maxTokenCount": max_tokens or self.max_tokens,
                "temperature": temperature,
                "topP": self.top_p,
                "stopSequences": []
            }
        }

        response = self.client.invoke_model(
            modelId=self.text_model_id,
            body=json.dumps(body),
            contentType="application/json"
        )

        response_body = json.loads(response["body"].read())
        return response_body["results"][0]["outputText"]

    def analyze_video(self, video_bytes, mime_type, prompt, temperature=0.3, top_p=0.8):
        video_format = VIDEO_FORMATS.get(mime_type, "mp4")
        response = self.client.converse(
            modelId=self.video_model_id,
            messages=[{
                "role": "user",
                "content": [
                    {"video": {"format": video_format, "source": {"bytes": video_bytes}}},
                    {"text": prompt},
                ],
            }],
            inferenceConfig={"maxTokens": self.max_tokens, "temperature": temperature, "topP": top_p},
        )

        content = response.get("output", {}).get("message", {}).get("content", [])
        return "".join(block.get("text", "") for block in content)

    def generate_image(self, prompt, width=512, height=512):
        """Returns the first generated image as a base64 string, or None if the model sent none."""
        body = {
            "taskType": "TEXT_IMAGE",
            "textToImageParams": {"text": prompt[:IMAGE_PROMPT_LIMIT]},
            "imageGenerationConfig": {
                "numberOfImages": 1,
                "width": width,
                "height": height,
                "cfgScale": 8.0,
            },
        }

        response = self.client.invoke_model(
            modelId=self.image_model_id,
            body=json.dumps(body),
            contentType="application/json",
            accept="application/json",
        )

        response_body = json.loads(response["body"].read())
        if response_body.get("error"):
            logger.warning("Bedrock image model reported: %s", response_body["error"])
        images = response_body.get("images") or []
        return images[0] if images else None
