"""
Collaborator container.

create_app() stores one Services instance on app.extensions["molefit"];
controllers fetch it with helpers.get_services(). Tests build their own
container around fakes and pass it to create_app(services=...).
"""

from molefit.services.bedrock_service import BedrockClient
from molefit.services.chain_service import ChainClient
from molefit.services.exercise_generation import ExerciseGenerator
from molefit.services.image_generation import ImageGenerator
from molefit.services.video_analysis import VideoAnalyzer


class Services:
    def __init__(self, bedrock, images, videos, exercises, chain):
        self.bedrock = bedrock
        self.images = images
        self.videos = videos
        self.exercises = exercises
        self.chain = chain


def build_services(config):
    bedrock = BedrockClient(
        region_name=config["AWS_REGION"],
        text_model_id=config["BEDROCK_TEXT_MODEL_ID"],
        video_model_id=config["BEDROCK_VIDEO_MODEL_ID"],
        image_model_id=config["BEDROCK_IMAGE_MODEL_ID"],
    )
    return Services(
        bedrock=bedrock,
        images=ImageGenerator(bedrock, config["GENERATED_NFT_DIR"], config["PUBLIC_BASE_URL"],
                              config["GENERATED_NFT_URL_PATH"]),
        videos=VideoAnalyzer(
            bedrock,
            max_retries=config["VIDEO_ANALYSIS_MAX_RETRIES"],
            backoff_seconds=config["VIDEO_ANALYSIS_BACKOFF_SECONDS"],
        ),
        exercises=ExerciseGenerator(bedrock),
        chain=ChainClient(
            rpc_url=config.get("CHAIN_RPC_URL"),
            chain_id=config["CHAIN_ID"],
            contract_address=config.get("NFT_CONTRACT_ADDRESS"),
            thirdweb_client_id=config.get("THIRDWEB_CLIENT_ID"),
            thirdweb_secret_key=config.get("THIRDWEB_SECRET_KEY"),
        ),
    )
