"""NFT reward rules: rarity tiers, metadata and explorer links."""

import base64
import json
from datetime import date

RARITY_TIERS = (
    (95, "Legendary"),
    (90, "Epic"),
    (80, "Rare"),
    (70, "Uncommon"),
)


def get_rarity(score):
    for threshold, tier in RARITY_TIERS:
        if score >= threshold:
            return tier
    return "Common"


def workout_category(body_part):
    return body_part.lower().replace(" ", "_")


def format_score(score):
    return str(int(score)) if float(score).is_integer() else str(score)


def build_nft_metadata(exercise_type, completion_score, difficulty, body_part, image_url,
                       player_name="Champion", achieved_on=None):
    achieved_on = achieved_on or date.today()
    score = format_score(completion_score)
    return {
        "name": f"{player_name}'s Underground {exercise_type} Achievement",
        "description": (
            f"Congratulations! {player_name} earned this Mole Fitness NFT by completing "
            f"{exercise_type} with a form score of {score}%. It celebrates perseverance and "
            f"dedication to rehabilitation from the underground gym."
        ),
        "image": image_url,
        "attributes": [
            {"trait_type": "Exercise Type", "value": exercise_type},
            {"trait_type": "Completion Score", "value": score},
            {"trait_type": "Difficulty", "value": difficulty},
            {"trait_type": "Target Body Part", "value": body_part},
            {"trait_type": "Achievement Date", "value": achieved_on.isoformat()},
            {"trait_type": "Rarity", "value": get_rarity(completion_score)},
            {"trait_type": "Workout Category", "value": workout_category(body_part)},
            {"trait_type": "Theme", "value": "Underground Mole Fitness"},
        ],
    }


def metadata_uri(metadata):
    """Token URI handed to the contract: the metadata JSON inlined as a data: URI."""
    raw = json.dumps(metadata, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return "data:application/json;base64," + base64.b64encode(raw).decode("ascii")


def explorer_tx_url(base_url, transaction_hash):
    return f"{base_url.rstrip('/')}/{transaction_hash}"
