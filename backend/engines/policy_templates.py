"""
Policy Templates Loader - charge les modèles de politiques depuis le YAML
"""
import yaml
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ValidationError

from config.settings import settings
from models.risk_policy import RiskPolicy

logger = logging.getLogger(__name__)


class RiskPolicyTemplate(BaseModel):
    """Un modèle pré-défini: l'utilisateur l'adapte puis l'enregistre comme politique."""
    id: str
    author: str
    category: str  # sizing, drawdown, r-based, kelly
    policy: RiskPolicy


class PolicyTemplateLoader:
    """Charge et valide les templates; un template invalide est ignoré (warning)."""

    def __init__(self, templates_path: Optional[Path] = None):
        self.templates_path = Path(templates_path or settings.TEMPLATES_PATH)
        self.templates: Dict[str, RiskPolicyTemplate] = {}
        self._load()

    def _load(self):
        if not self.templates_path.exists():
            logger.warning(f"Templates file not found: {self.templates_path}")
            return

        with open(self.templates_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        for raw in data.get('templates', []):
            template_id = raw.get('id', '<missing id>')
            try:
                template = RiskPolicyTemplate.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Template '{template_id}' skipped: {e.error_count()} validation error(s)")
                continue
            self.templates[template.id] = template

        logger.info(f"Loaded {len(self.templates)} risk policy templates from {self.templates_path.name}")

    def list_templates(self) -> List[RiskPolicyTemplate]:
        return list(self.templates.values())

    def get_template(self, template_id: str) -> RiskPolicyTemplate:
        """Lève KeyError si l'id est inconnu."""
        if template_id not in self.templates:
            raise KeyError(f"Unknown risk policy template: {template_id}")
        return self.templates[template_id]


_loader_instance = None


def get_template_loader() -> PolicyTemplateLoader:
    """Get or create loader singleton"""
    global _loader_instance
    if _loader_instance is None:
        _loader_instance = PolicyTemplateLoader()
    return _loader_instance


def list_templates() -> List[RiskPolicyTemplate]:
    return get_template_loader().list_templates()


def get_template(template_id: str) -> RiskPolicyTemplate:
    return get_template_loader().get_template(template_id)
