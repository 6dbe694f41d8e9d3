"""
Achievement artwork for minted NFTs.

ImageGenerator.generate() never raises: if the Bedrock call fails, quota is
exhausted, or no image comes back, a themed placeholder URL is returned so
the mint flow always has an image to point at.
"""

import base64
import logging
import os
import time
import uuid

logger = logging.getLogger(__name__)

GENERATED_DIR_NAME = "generated-nfts"
DEFAULT_URL_PATH = f"/static/{GENERATED_DIR_NAME}"

FALLBACK_IMAGES = {
    "push": "https://images.unsplash.com/photo-1571019613454-1cb2f99b2d8b?w=512&h=512&fit=crop&crop=center",
    "squat": "https://images.unsplash.com/photo-1434608519344-49d77a699e1d?w=512&h=512&fit=crop&crop=center",
    "plank": "https://images.unsplash.com/photo-1518611012118-696072aa579a?w=512&h=512&fit=crop&crop=center",
    "cardio": "https://images.unsplash.com/photo-1544367567-0f2fcb009e0b?w=512&h=512&fit=crop&crop=center",
    "default": "https://images.unsplash.com/photo-1517836357463-d25dfeac3438?w=512&h=512&fit=crop&crop=center",
}


def exercise_theme(exercise_type):
    """Keyword bucket for an exercise name; drives both prompt framing and placeholders."""
    exercise = exercise_type.lower()
    if "push" in exercise or "press" in exercise:
        return "push"
    if "squat" in exercise:
        return "squat"
    if "plank" in exercise:
        return "plank"
    if "stretch" in exercise or "flexibility" in exercise:
        return "stretch"
    if "cardio" in exercise or "run" in exercise:
        return "cardio"
    return "generic"


def fallback_image_url(exercise_type):
    return FALLBACK_IMAGES.get(exercise_theme(exercise_type), FALLBACK_IMAGES["default"])


def score_level(score):
    if score >= 90:
        return "perfect"
    if score >= 80:
        return "excellent"
    if score >= 70:
        return "good"
    return "decent"


def exercise_framing(exercise_type, body_part):
    theme = exercise_theme(exercise_type)
    if theme == "push":
        return ("Show the mole character doing push-ups with tiny paws pushing against the ground, "
                "emphasizing strong arms and determination. The mole might be wearing a small sweatband. ")
    if theme == "squat":
        return ("Show the mole character in a squat position with strong little legs and good posture, "
                "next to some underground workout equipment or mole-sized weights. ")
    if theme == "plank":
        return ("Show the mole character holding a plank position with focus on core strength, "
                "balancing on a small underground platform or wooden board. ")
    if theme == "stretch":
        return ("Show the mole character in a graceful stretching pose with flowing movements, "
                "near some underground plants or in a peaceful burrow. ")
    if theme == "cardio":
        return ("Show the mole character in motion with energy lines, running through underground "
                "tunnels or on a small treadmill designed for moles. ")
    return (f"Show the mole character performing {exercise_type} exercises with focus on the "
            f"{body_part} area, in a cozy underground gym with mole-sized equipment. ")


ACHIEVEMENT_MOODS = {
    "perfect": "triumphant and glowing with golden effects and a trophy or medal",
    "excellent": "proud and energetic with sparkle effects and a thumbs up gesture",
    "good": "happy and confident with an encouraging expression",
    "decent": "determined and motivated with a never-give-up attitude",
}


def build_image_prompt(exercise_type, score, difficulty, body_part, player_name="Champion"):
    level = score_level(score)
    return (
        "Create a vibrant, motivational cartoon illustration of an adorable anthropomorphic mole "
        "as a fitness coach, wearing modern workout attire. "
        + exercise_framing(exercise_type, body_part)
        + f"The mole should look {ACHIEVEMENT_MOODS[level]}. "
        + f"This was a {difficulty.lower()} difficulty session. "
        + "Bright cheerful cartoon style with clean lines, earth tones mixed with vibrant blues and "
          "oranges, celebration elements like stars and confetti, underground gym background. "
        + f"Include a small text element that says \"{player_name}'s Mole Achievement\"."
    )


class ImageGenerator:
    def __init__(self, bedrock, output_dir, public_base_url, url_path=DEFAULT_URL_PATH):
        self.bedrock = bedrock
        self.output_dir = output_dir
        self.public_base_url = public_base_url.rstrip("/")
        # where output_dir is served from
        self.url_path = "/" + url_path.strip("/")

    @property
    def model_id(self):
        return self.bedrock.image_model_id

    def generate(self, prompt, exercise_type):
        try:
            image_b64 = self.bedrock.generate_image(prompt)
            if not image_b64:
                raise ValueError("No image data received from Bedrock")
            return self._save(base64.b64decode(image_b64))
        except Exception as e:
            fallback = fallback_image_url(exercise_type)
            logger.warning("Image generation failed (%s); using placeholder %s", e, fallback)
            return fallback

    def _save(self, image_bytes):
        os.makedirs(self.output_dir, exist_ok=True)
        filename = f"nft-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.png"
        path = os.path.join(self.output_dir, filename)
        with open(path, "wb") as f:
            f.write(image_bytes)

        url = f"{self.public_base_url}{self.url_path}/{filename}"
        logger.info("Generated NFT image saved to %s", path)
        return url
