"""Configuration centralisée pour le moteur d'arbre de décision"""
import os
from pathlib import Path
from typing import List
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent.parent
load_dotenv(ROOT_DIR / '.env')

class Settings:
    """Configuration globale du moteur"""

    # Decision tree constants
    REWARD_RATIO: float = float(os.environ.get('REWARD_RATIO', 2))  # 1:2 R:R
    WIN_PROBABILITY: float = float(os.environ.get('WIN_PROBABILITY', 0.5))  # p fixe, non calibré
    MAX_COMPOUNDING_DEPTH: int = int(os.environ.get('MAX_COMPOUNDING_DEPTH', 4))
    MAX_TREE_DEPTH: int = int(os.environ.get('MAX_TREE_DEPTH', 128))  # sous la limite de récursion du sérialiseur pydantic

    # Preview cache
    PREVIEW_CACHE_SIZE: int = int(os.environ.get('PREVIEW_CACHE_SIZE', 256))

    # Templates
    TEMPLATES_PATH: Path = Path(
        os.environ.get('TEMPLATES_PATH', ROOT_DIR / 'knowledge' / 'risk_policy_templates.yml')
    )

    # API
    LOG_LEVEL: str = os.environ.get('LOG_LEVEL', 'INFO')
    CORS_ORIGINS: List[str] = os.environ.get('CORS_ORIGINS', '*').split(',')

settings = Settings()
