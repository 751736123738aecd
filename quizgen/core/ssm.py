"""
AWS Systems Manager Parameter Store loader.

배포 환경에서만 동작하며, Parameter Store 값을 os.environ에 주입하여
Settings가 그대로 읽을 수 있도록 한다.
"""

import logging
import os
from typing import Mapping

logger = logging.getLogger(__name__)

# SSM 파라미터 이름 → 환경변수 이름 매핑
PARAM_MAP: dict[str, str] = {
    "OPENAI_API_KEY": "OPENAI_API_KEY",
    "QUIZGEN_PROVIDER_ID": "QUIZGEN_PROVIDER_ID",
    "QUIZGEN_MODEL": "QUIZGEN_MODEL",
    "QUIZGEN_TEMPERATURE": "QUIZGEN_TEMPERATURE",
    "QUIZGEN_MAX_TOKENS": "QUIZGEN_MAX_TOKENS",
    "QUIZGEN_TIMEOUT": "QUIZGEN_TIMEOUT",
    "QUIZGEN_DB_URL": "DB_URL",
    "QUIZGEN_API_KEY": "API_KEY",
    "CRON_GENERATION_ENABLED": "CRON_GENERATION_ENABLED",
    "CRON_GENERATION_INTERVAL": "CRON_GENERATION_INTERVAL",
}


def load_ssm_parameters(client=None, param_map: Mapping[str, str] = PARAM_MAP) -> int:
    """Parameter Store에서 값을 읽어 os.environ에 주입하고 읽은 개수를 돌려준다.

    USE_PARAMETER_STORE 환경변수가 "true"일 때만 실행된다.
    QUIZGEN_ENV 값으로 prefix를 결정한다.
    """
    if os.getenv("USE_PARAMETER_STORE", "").lower() != "true":
        logger.info("USE_PARAMETER_STORE is not set; skipping SSM loading")
        return 0

    if client is None:
        try:
            import boto3
        except ImportError:
            logger.warning("boto3 is not installed; skipping SSM loading")
            return 0
        client = boto3.client("ssm", region_name=os.getenv("AWS_REGION", "us-east-1"))

    env = os.getenv("QUIZGEN_ENV", "dev")
    prefix = f"/quizgen/{env}"

    logger.info("Loading parameters from SSM prefix=%s", prefix)

    loaded = 0
    for ssm_key, env_key in param_map.items():
        name = f"{prefix}/{ssm_key}"
        try:
            resp = client.get_parameter(Name=name, WithDecryption=True)
            os.environ[env_key] = resp["Parameter"]["Value"]
            loaded += 1
        except client.exceptions.ParameterNotFound:
            logger.debug("SSM parameter not found: %s (skipped)", name)
        except Exception:  # noqa: BLE001
            logger.warning("Failed to get SSM parameter: %s", name, exc_info=True)

    logger.info("Loaded %d/%d parameters from SSM", loaded, len(param_map))
    return loaded
